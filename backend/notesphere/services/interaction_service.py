"""
点赞、收藏、关注的切换服务

- 点赞 / 收藏：按 (用户, 目标) 查找记录，不存在则创建 (+1)，存在则删除 (-1)
- 关注：按 (关注者, 被关注者) 查找记录 (不区分状态)，不存在则创建为关注中 (+1)，
  关注中则改为已取消 (-1)，已取消则改回关注中 (+1)；关注记录从不删除

每次切换与对应的计数更新在同一个事务中完成。两个请求同时对同一对象创建记录时，
由唯一约束裁决：失败的一方视为"已处于目标状态"，不再改动计数。
"""
import logging
from typing import NamedTuple

from sqlalchemy import select

from notesphere import db
from notesphere.models import Like, Collection, Follow, Note, Comment, User, NoteTarget, CommentTarget
from notesphere.models.user import FOLLOW_STATUS_ACTIVE, FOLLOW_STATUS_CANCELLED
from notesphere.services import counter_service
from notesphere.utils.errors import ConflictError, NotFoundError, ValidationError
from notesphere.utils.transaction import transaction, insert_or_conflict, delete_if_present, compare_and_set

logger = logging.getLogger(__name__)


class ToggleResult(NamedTuple):
    active: bool   # 操作完成后是否处于 点赞/收藏/关注 状态
    changed: bool  # 本次调用是否真正改变了关系 (竞争中落败时为 False)


def _require_id(value, message):
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(message)
    return value


# --- 查询 ---

def find_like(user_id, target):
    return db.session.execute(
        select(Like).where(*Like.target_filter(user_id, target))
    ).scalar_one_or_none()


def find_collection(user_id, note_id):
    return db.session.execute(
        select(Collection).where(Collection.user_id == user_id, Collection.note_id == note_id)
    ).scalar_one_or_none()


def find_follow(follower_id, following_id):
    return db.session.execute(
        select(Follow).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
    ).scalar_one_or_none()


def interaction_status(user_id, note_id):
    """当前用户对笔记的点赞、收藏状态"""
    _require_id(note_id, '笔记ID不能为空')
    if db.session.get(Note, note_id) is None:
        raise NotFoundError('笔记不存在')
    return {
        'isLiked': find_like(user_id, NoteTarget(note_id)) is not None,
        'isCollected': find_collection(user_id, note_id) is not None,
    }


def is_following(follower_id, following_id):
    follow = find_follow(follower_id, following_id)
    return follow is not None and follow.is_active


# --- 点赞 ---

def _validate_like_target(target):
    if isinstance(target, NoteTarget):
        _require_id(target.id, '点赞笔记时必须提供笔记ID')
        if db.session.get(Note, target.id) is None:
            raise NotFoundError('笔记不存在')
    elif isinstance(target, CommentTarget):
        _require_id(target.id, '点赞评论时必须提供评论ID')
        if db.session.get(Comment, target.id) is None:
            raise NotFoundError('评论不存在')
    else:
        raise ValidationError('目标类型只能是笔记或评论')


def toggle_like(user_id, target):
    """点赞或取消点赞笔记/评论"""
    _validate_like_target(target)
    with transaction():
        existing = find_like(user_id, target)
        if existing is None:
            like = Like.for_target(user_id, target)
            if insert_or_conflict(like):
                counter_service.on_like_created(like)
                result = ToggleResult(True, True)
            else:
                result = _recover_insert_race('点赞', lambda: find_like(user_id, target))
        elif delete_if_present(existing):
            counter_service.on_like_destroyed(existing)
            result = ToggleResult(False, True)
        else:
            result = ToggleResult(False, False)
    logger.info(f"用户 {user_id} {'点赞' if result.active else '取消点赞'} {target} (changed={result.changed})")
    return result


# --- 收藏 ---

def toggle_collection(user_id, note_id):
    """收藏或取消收藏笔记"""
    _require_id(note_id, '笔记ID不能为空')
    if db.session.get(Note, note_id) is None:
        raise NotFoundError('笔记不存在')
    with transaction():
        existing = find_collection(user_id, note_id)
        if existing is None:
            collection = Collection(user_id=user_id, note_id=note_id)
            if insert_or_conflict(collection):
                counter_service.on_collection_created(collection)
                result = ToggleResult(True, True)
            else:
                result = _recover_insert_race('收藏', lambda: find_collection(user_id, note_id))
        elif delete_if_present(existing):
            counter_service.on_collection_destroyed(existing)
            result = ToggleResult(False, True)
        else:
            result = ToggleResult(False, False)
    logger.info(f"用户 {user_id} {'收藏' if result.active else '取消收藏'} 笔记 {note_id} (changed={result.changed})")
    return result


# --- 关注 ---

def toggle_follow(follower_id, following_id):
    """关注、取消关注或重新关注用户"""
    _require_id(following_id, '用户ID不能为空')
    if follower_id == following_id:
        raise ValidationError('不能关注自己')
    if db.session.get(User, following_id) is None:
        raise NotFoundError('要关注的用户不存在')

    with transaction():
        existing = find_follow(follower_id, following_id)
        if existing is None:
            follow = Follow(follower_id=follower_id, following_id=following_id, status=FOLLOW_STATUS_ACTIVE)
            if insert_or_conflict(follow):
                counter_service.on_follow_created(follow)
                result = ToggleResult(True, True)
            else:
                result = _recover_insert_race('关注', lambda: _active_follow(follower_id, following_id))
        else:
            previous_status = existing.status
            new_status = FOLLOW_STATUS_CANCELLED if existing.is_active else FOLLOW_STATUS_ACTIVE
            if compare_and_set(Follow, existing.id, 'status', previous_status, new_status):
                db.session.expire(existing)
                counter_service.on_follow_status_changed(existing, previous_status)
                result = ToggleResult(new_status == FOLLOW_STATUS_ACTIVE, True)
            else:
                # 另一个请求已经翻转了状态，保持其结果
                db.session.expire(existing)
                result = ToggleResult(existing.is_active, False)
    logger.info(f"用户 {follower_id} {'关注' if result.active else '取消关注'} 用户 {following_id} (changed={result.changed})")
    return result


def _active_follow(follower_id, following_id):
    follow = find_follow(follower_id, following_id)
    return follow if follow is not None and follow.is_active else None


def _recover_insert_race(action, reload):
    """
    插入触发唯一约束后的处理：并发请求已经创建了同一条记录，
    视为已处于目标状态 (不重复计数)；若该记录又已消失则返回可重试的冲突。
    """
    winner = reload()
    if winner is not None:
        logger.warning(f"{action}记录并发创建，唯一约束已拦截重复行，按已存在处理")
        return ToggleResult(True, False)
    raise ConflictError(f'{action}操作冲突，请重试')
