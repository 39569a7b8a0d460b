"""
评论楼层解析

根据被回复的评论计算新评论的层级 (level) 与根评论 (root_comment_id)，
把任意深度的回复链拍平为两层：
- 不回复任何评论 -> 一级评论
- 回复一级评论 -> 二级评论，根评论为被回复的评论
- 回复二级评论 -> 二级评论，继承被回复评论的根评论 (不会形成第三层)
"""
from typing import NamedTuple, Optional

from notesphere import db
from notesphere.models import Comment
from notesphere.models.comment import COMMENT_LEVEL_ROOT, COMMENT_LEVEL_REPLY
from notesphere.utils.errors import NotFoundError, ValidationError


class ThreadPosition(NamedTuple):
    level: int
    root_comment_id: Optional[int]


def position_for_reply(reply_to: Optional[Comment]) -> ThreadPosition:
    """根据已加载的被回复评论计算楼层位置"""
    if reply_to is None:
        return ThreadPosition(COMMENT_LEVEL_ROOT, None)
    if reply_to.level == COMMENT_LEVEL_ROOT:
        return ThreadPosition(COMMENT_LEVEL_REPLY, reply_to.id)
    return ThreadPosition(COMMENT_LEVEL_REPLY, reply_to.root_comment_id)


def resolve_thread(note_id: int, reply_to_id: Optional[int]) -> ThreadPosition:
    """
    查出被回复的评论并计算楼层位置。

    Raises:
        NotFoundError: 被回复的评论不存在
        ValidationError: 被回复的评论属于其他笔记
    """
    if reply_to_id is None:
        return position_for_reply(None)
    target = db.session.get(Comment, reply_to_id)
    if target is None:
        raise NotFoundError('被回复的评论不存在')
    if target.note_id != note_id:
        raise ValidationError('不能回复其他笔记下的评论')
    return position_for_reply(target)
