"""
定义点赞模型 (Like) 与点赞目标类型 (LikeTarget)。

点赞目标是笔记或评论二选一。数据库中以 target_type + note_id/comment_id 存储，
并用检查约束保证"恰好一个目标ID非空且与 target_type 一致"；
代码中只通过 NoteTarget / CommentTarget 构造点赞行，不直接操作这三个字段。

注意: 如果新增、删除或修改功能，必须在这开头的注释中同步修改，如发现功能与注释描述不同，也可以在确定后修改。
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Union

from sqlalchemy import UniqueConstraint, CheckConstraint

from notesphere import db

TARGET_TYPE_NOTE = 1
TARGET_TYPE_COMMENT = 2


@dataclass(frozen=True)
class NoteTarget:
    id: int
    target_type = TARGET_TYPE_NOTE


@dataclass(frozen=True)
class CommentTarget:
    id: int
    target_type = TARGET_TYPE_COMMENT


LikeTarget = Union[NoteTarget, CommentTarget]


class Like(db.Model):
    __tablename__ = 'likes'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    target_type = db.Column(db.SmallInteger, nullable=False, default=TARGET_TYPE_NOTE)
    note_id = db.Column(db.Integer, db.ForeignKey('notes.id', ondelete='CASCADE'), nullable=True, index=True)
    comment_id = db.Column(db.Integer, db.ForeignKey('comments.id', ondelete='CASCADE'), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # NULL 不参与唯一性比较，两个约束分别只对各自的目标生效
    __table_args__ = (
        UniqueConstraint('user_id', 'note_id', name='uq_like_user_note'),
        UniqueConstraint('user_id', 'comment_id', name='uq_like_user_comment'),
        CheckConstraint(
            '(target_type = 1 AND note_id IS NOT NULL AND comment_id IS NULL) OR '
            '(target_type = 2 AND comment_id IS NOT NULL AND note_id IS NULL)',
            name='ck_like_single_target'
        ),
    )

    @classmethod
    def for_target(cls, user_id, target):
        """根据点赞目标构造一行点赞记录"""
        if isinstance(target, NoteTarget):
            return cls(user_id=user_id, target_type=TARGET_TYPE_NOTE, note_id=target.id)
        if isinstance(target, CommentTarget):
            return cls(user_id=user_id, target_type=TARGET_TYPE_COMMENT, comment_id=target.id)
        raise TypeError(f'不支持的点赞目标: {target!r}')

    @classmethod
    def target_filter(cls, user_id, target):
        """返回按 (用户, 目标) 定位点赞记录的查询条件"""
        if isinstance(target, NoteTarget):
            return (cls.user_id == user_id, cls.note_id == target.id)
        return (cls.user_id == user_id, cls.comment_id == target.id)

    @property
    def target(self):
        if self.target_type == TARGET_TYPE_NOTE:
            return NoteTarget(self.note_id)
        return CommentTarget(self.comment_id)

    def __repr__(self):
        return f"<Like(user_id={self.user_id}, target={self.target})>"
