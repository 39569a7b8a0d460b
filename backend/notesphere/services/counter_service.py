"""
计数器一致性服务

在关系行 (点赞、收藏、评论、关注) 创建、删除或状态变化时，
按下表对聚合行上的冗余计数做 +1 / -1，且必须与触发它的关系变更处于同一事务：

    点赞笔记          Note.like_count, 笔记作者 User.like_collect_count
    点赞评论          Comment.like_count
    收藏笔记          Note.collect_count, 笔记作者 User.like_collect_count
    评论进入/离开已发布 Note.comment_count
    关注生效/取消      关注者 User.follow_count, 被关注者 User.fans_count

实现要点：
1. 计数更新一律使用 SQL 端的原子自增 (UPDATE ... SET col = col + :delta)，不在应用层读改写
2. 计数不会被减到 0 以下
3. 笔记作者在同一事务内重新读取，不依赖调用方手里可能过期的对象
4. 聚合行缺失时记录 ConsistencyError 并跳过该项更新，关系变更照常提交；
   配置 COUNTER_STRICT_MODE=True 时改为抛出，整个事务回滚
"""
import logging

from flask import current_app
from sqlalchemy import case, select, update

from notesphere import db
from notesphere.models import Note, User, Comment, NoteTarget, CommentTarget
from notesphere.models.comment import COMMENT_STATUS_PUBLISHED
from notesphere.models.user import FOLLOW_STATUS_ACTIVE
from notesphere.utils.errors import ConsistencyError

logger = logging.getLogger(__name__)


def apply_delta(model, row_id, column_name, delta):
    """
    对 model 表中 id=row_id 的行执行原子自增。

    Returns:
        bool: 是否有行被更新 (False 表示聚合行不存在，已按策略处理)
    """
    if delta == 0:
        return True
    column = getattr(model, column_name)
    new_value = case((column + delta < 0, 0), else_=column + delta)
    result = db.session.execute(
        update(model)
        .where(model.id == row_id)
        .values({column_name: new_value})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        _handle_missing_row(model.__tablename__, row_id, column_name)
        return False
    return True


def _handle_missing_row(table, row_id, column_name):
    error = ConsistencyError(table, row_id, column_name)
    if current_app.config.get('COUNTER_STRICT_MODE'):
        logger.error(f"[ConsistencyError] {error.message}，严格模式下回滚事务")
        raise error
    logger.warning(f"[ConsistencyError] {error.message}，跳过该计数更新")


def note_owner_id(note_id):
    """在当前事务内重新读取笔记作者ID，笔记不存在时返回 None"""
    return db.session.execute(
        select(Note.user_id).where(Note.id == note_id)
    ).scalar_one_or_none()


def _adjust_note_engagement(note_id, column_name, delta):
    """笔记上的点赞/收藏计数，同时带动笔记作者的获赞与收藏数"""
    owner_id = note_owner_id(note_id)
    if owner_id is None:
        # 笔记不存在时作者也无从得知，两项更新都跳过
        _handle_missing_row(Note.__tablename__, note_id, column_name)
        return
    apply_delta(Note, note_id, column_name, delta)
    apply_delta(User, owner_id, 'like_collect_count', delta)


# --- 点赞 ---

def _adjust_like_target(target, delta):
    if isinstance(target, NoteTarget):
        _adjust_note_engagement(target.id, 'like_count', delta)
    elif isinstance(target, CommentTarget):
        apply_delta(Comment, target.id, 'like_count', delta)


def on_like_created(like):
    _adjust_like_target(like.target, 1)


def on_like_destroyed(like):
    _adjust_like_target(like.target, -1)


# --- 收藏 ---

def on_collection_created(collection):
    _adjust_note_engagement(collection.note_id, 'collect_count', 1)


def on_collection_destroyed(collection):
    _adjust_note_engagement(collection.note_id, 'collect_count', -1)


# --- 评论 ---

def on_comment_created(comment):
    """只有直接以已发布状态创建的评论才计入笔记评论数"""
    if comment.status == COMMENT_STATUS_PUBLISHED:
        apply_delta(Note, comment.note_id, 'comment_count', 1)


def comment_status_delta(previous_status, new_status):
    """评论状态变化对笔记评论数的影响：进入已发布 +1，离开已发布 -1，其余 0"""
    if previous_status == new_status:
        return 0
    if new_status == COMMENT_STATUS_PUBLISHED:
        return 1
    if previous_status == COMMENT_STATUS_PUBLISHED:
        return -1
    return 0


def on_comment_status_changed(comment, previous_status):
    delta = comment_status_delta(previous_status, comment.status)
    if delta:
        apply_delta(Note, comment.note_id, 'comment_count', delta)


def on_comment_destroyed(comment, deleted_status):
    """deleted_status 是删除语句实际匹配到的状态，而不是调用方先前读到的快照"""
    if deleted_status == COMMENT_STATUS_PUBLISHED:
        apply_delta(Note, comment.note_id, 'comment_count', -1)


# --- 关注 ---

def _adjust_follow(follow, delta):
    apply_delta(User, follow.follower_id, 'follow_count', delta)
    apply_delta(User, follow.following_id, 'fans_count', delta)


def on_follow_created(follow):
    if follow.status == FOLLOW_STATUS_ACTIVE:
        _adjust_follow(follow, 1)


def on_follow_status_changed(follow, previous_status):
    if previous_status == follow.status:
        return
    _adjust_follow(follow, 1 if follow.status == FOLLOW_STATUS_ACTIVE else -1)
