"""笔记服务：创建笔记、笔记详情、关注用户的笔记流。"""
import logging

from notesphere import db
from notesphere.models import Follow, Note
from notesphere.models.note import NOTE_STATUS_NORMAL, VISIBILITY_PUBLIC
from notesphere.models.user import FOLLOW_STATUS_ACTIVE
from notesphere.utils.errors import NotFoundError, ValidationError
from notesphere.utils.transaction import transaction

logger = logging.getLogger(__name__)

VISIBILITIES = (0, 1, 2)


def create_note(user_id, title, content='', images=None, tags=None, cover_image_url=None,
                video_url=None, location_name=None, visibility=VISIBILITY_PUBLIC):
    title = title.strip() if isinstance(title, str) else ''
    if not title:
        raise ValidationError('标题不能为空')
    if not 2 <= len(title) <= 45:
        raise ValidationError('标题长度必须是2 ~ 45之间。')
    if visibility not in VISIBILITIES:
        raise ValidationError('可见性：0-私密，1-公开，2-好友可见')
    images = list(images or [])

    with transaction():
        note = Note(
            user_id=user_id,
            title=title,
            content=content or '',
            images=images,
            tags=list(tags or []),
            cover_image_url=cover_image_url or (images[0] if images else None),
            video_url=video_url,
            location_name=location_name,
            visibility=visibility,
        )
        db.session.add(note)

    logger.info(f"用户 {user_id} 发布笔记 {note.id}")
    return note


def get_note(note_id):
    note = db.session.get(Note, note_id)
    if note is None:
        raise NotFoundError(f'ID为{note_id}的笔记不存在')
    return note


def following_notes(user_id, page=1, page_size=10):
    """当前用户关注中的用户发布的公开笔记，按时间倒序分页"""
    following_ids = [
        row[0] for row in db.session.query(Follow.following_id).filter(
            Follow.follower_id == user_id,
            Follow.status == FOLLOW_STATUS_ACTIVE
        ).all()
    ]
    if not following_ids:
        return [], {'total': 0, 'currentPage': page, 'pageSize': page_size, 'totalPages': 0}

    pagination = (
        Note.query
        .filter(
            Note.user_id.in_(following_ids),
            Note.status == NOTE_STATUS_NORMAL,
            Note.visibility == VISIBILITY_PUBLIC,
        )
        .order_by(Note.created_at.desc(), Note.id.desc())
        .paginate(page=page, per_page=page_size, error_out=False)
    )
    return [n.to_dict() for n in pagination.items], {
        'total': pagination.total,
        'currentPage': page,
        'pageSize': page_size,
        'totalPages': pagination.pages,
    }
