"""
笔记评论服务

- 创建评论 (含回复)，层级与根评论由 comment_thread 计算
- 修改评论状态 (待审核 / 已发布 / 已删除)，按状态迁移调整笔记评论数
- 物理删除评论，删除时若为已发布状态则笔记评论数 -1
- 分页查询笔记下已发布的评论，附带被回复评论的摘要
"""
import logging

from flask import current_app
from sqlalchemy import delete, select

from notesphere import db
from notesphere.models import Comment, Like, Note, User
from notesphere.models.comment import (
    COMMENT_STATUSES, COMMENT_STATUS_PENDING, COMMENT_STATUS_PUBLISHED, COMMENT_STATUS_DELETED
)
from notesphere.services import counter_service
from notesphere.services.comment_thread import resolve_thread
from notesphere.utils.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from notesphere.utils.transaction import transaction, delete_if_matches, compare_and_set

logger = logging.getLogger(__name__)

DELETE_ATTEMPTS = 3


def _clean_content(content):
    trimmed = content.strip() if isinstance(content, str) else ''
    if not trimmed:
        raise ValidationError('评论内容不能为空')
    max_length = current_app.config.get('COMMENT_MAX_LENGTH', 1000)
    if len(trimmed) > max_length:
        raise ValidationError(f'评论内容长度应在1-{max_length}字符之间')
    return trimmed


def _get_note(note_id):
    note = db.session.get(Note, note_id)
    if note is None:
        raise NotFoundError(f'ID为{note_id}的笔记不存在')
    return note


def _get_comment(comment_id):
    comment = db.session.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError('评论不存在')
    return comment


def create_comment(author_id, note_id, content, reply_to_id=None, image_url=None):
    """
    发表评论或回复。

    参数:
        author_id: 当前用户ID
        note_id: 笔记ID
        content: 评论内容 (去除首尾空白后 1~COMMENT_MAX_LENGTH 字符)
        reply_to_id: 被回复的评论ID，可选
        image_url: 评论图片，可选

    返回:
        新建的 Comment 对象 (计数已提交)
    """
    text = _clean_content(content)
    _get_note(note_id)
    status = COMMENT_STATUS_PENDING if current_app.config.get('COMMENT_REQUIRE_REVIEW') else COMMENT_STATUS_PUBLISHED

    with transaction():
        position = resolve_thread(note_id, reply_to_id)
        comment = Comment(
            note_id=note_id,
            author_id=author_id,
            content=text,
            reply_to_id=reply_to_id,
            root_comment_id=position.root_comment_id,
            level=position.level,
            status=status,
            image_url=image_url,
        )
        db.session.add(comment)
        db.session.flush()
        counter_service.on_comment_created(comment)

    logger.info(f"用户 {author_id} 在笔记 {note_id} 发表评论 {comment.id} (level={comment.level}, root={comment.root_comment_id})")
    return comment


def _can_moderate(actor, note):
    return actor.is_admin or note.user_id == actor.id


def change_comment_status(actor_id, comment_id, new_status):
    """
    修改评论状态。

    笔记作者与管理员可以任意切换状态；评论作者只能把自己的评论标记为已删除。
    """
    if new_status not in COMMENT_STATUSES:
        raise ValidationError('状态值无效')
    comment = _get_comment(comment_id)
    actor = db.session.get(User, actor_id)
    if actor is None:
        raise NotFoundError(f'id为：{actor_id} 的用户不存在。')
    note = db.session.get(Note, comment.note_id)
    if not (note is not None and _can_moderate(actor, note)):
        if not (comment.author_id == actor_id and new_status == COMMENT_STATUS_DELETED):
            raise PermissionDeniedError('无权修改此评论')

    previous_status = comment.status
    if previous_status == new_status:
        return comment

    with transaction():
        if not compare_and_set(Comment, comment.id, 'status', previous_status, new_status):
            db.session.expire(comment)
            if comment.status != new_status:
                raise ConflictError('评论状态已被修改，请刷新后重试')
        else:
            db.session.expire(comment)
            counter_service.on_comment_status_changed(comment, previous_status)

    logger.info(f"评论 {comment_id} 状态 {previous_status} -> {new_status} (操作者 {actor_id})")
    return comment


def destroy_comment(actor_id, comment_id):
    """物理删除评论及其点赞记录，评论作者、笔记作者、管理员可操作"""
    comment = _get_comment(comment_id)
    actor = db.session.get(User, actor_id)
    if actor is None:
        raise NotFoundError(f'id为：{actor_id} 的用户不存在。')
    note = db.session.get(Note, comment.note_id)
    if comment.author_id != actor_id and not (note is not None and _can_moderate(actor, note)):
        raise PermissionDeniedError('无权删除此评论')

    with transaction():
        db.session.execute(
            delete(Like)
            .where(Like.comment_id == comment.id)
            .execution_options(synchronize_session=False)
        )
        deleted = _delete_comment_row(comment)
    db.session.expunge(comment)

    logger.info(f"评论 {comment_id} 被用户 {actor_id} 删除 (deleted={deleted})")
    return deleted


def _delete_comment_row(comment):
    """
    按读到的状态条件删除评论行，并按实际删除时的状态调整评论数。

    读取之后若有并发请求修改了状态，条件删除不会命中，此时重新读取状态再试；
    评论已被其他请求删除时返回 False。
    """
    status = comment.status
    for _ in range(DELETE_ATTEMPTS):
        if delete_if_matches(Comment, comment.id, 'status', status):
            counter_service.on_comment_destroyed(comment, status)
            return True
        status = db.session.execute(
            select(Comment.status).where(Comment.id == comment.id)
        ).scalar_one_or_none()
        if status is None:
            return False
        logger.warning(f"评论 {comment.id} 删除时状态已被修改为 {status}，按新状态重试")
    raise ConflictError('评论状态频繁变化，请稍后重试')


def list_published_comments(note_id, page=1, page_size=10):
    """
    分页查询笔记下已发布的评论 (按时间倒序)。

    返回:
        (评论字典列表, 分页信息)
    """
    _get_note(note_id)
    pagination = (
        Comment.query
        .filter_by(note_id=note_id, status=COMMENT_STATUS_PUBLISHED)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .paginate(page=page, per_page=page_size, error_out=False)
    )
    reply_to_ids = {c.reply_to_id for c in pagination.items if c.reply_to_id}
    reply_to_map = {}
    if reply_to_ids:
        reply_to_map = {c.id: c for c in Comment.query.filter(Comment.id.in_(reply_to_ids)).all()}

    comments = [c.to_dict(reply_to=reply_to_map.get(c.reply_to_id)) for c in pagination.items]
    return comments, {
        'total': pagination.total,
        'pageSize': page_size,
        'current': page,
        'totalPages': pagination.pages,
    }
