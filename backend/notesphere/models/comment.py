"""
定义笔记评论模型 (Comment)。

评论只有两层：
- 一级评论：level=1，reply_to_id 与 root_comment_id 均为空
- 二级评论：level=2，reply_to_id 指向被回复的评论，root_comment_id 永远指向一级评论
回复二级评论时会被拍平到同一个根评论下，层级与根评论由 comment_thread 计算。

reply_to_id / root_comment_id 是弱引用 (不建外键)，被引用的评论删除后仍保留原值。

注意: 如果新增、删除或修改功能，必须在这开头的注释中同步修改，如发现功能与注释描述不同，也可以在确定后修改。
"""
from datetime import datetime

from sqlalchemy import CheckConstraint

from notesphere import db

COMMENT_STATUS_PENDING = 0
COMMENT_STATUS_PUBLISHED = 1
COMMENT_STATUS_DELETED = 2
COMMENT_STATUSES = (COMMENT_STATUS_PENDING, COMMENT_STATUS_PUBLISHED, COMMENT_STATUS_DELETED)

COMMENT_LEVEL_ROOT = 1
COMMENT_LEVEL_REPLY = 2


class Comment(db.Model):
    __tablename__ = 'comments'

    id = db.Column(db.Integer, primary_key=True)
    note_id = db.Column(db.Integer, db.ForeignKey('notes.id', ondelete='CASCADE'), nullable=False, index=True)
    author_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    reply_to_id = db.Column(db.Integer, nullable=True, index=True)
    root_comment_id = db.Column(db.Integer, nullable=True, index=True)
    level = db.Column(db.SmallInteger, default=COMMENT_LEVEL_ROOT, nullable=False)
    status = db.Column(db.SmallInteger, default=COMMENT_STATUS_PUBLISHED, nullable=False)
    like_count = db.Column(db.Integer, default=0, nullable=False)
    image_url = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = db.relationship('User', foreign_keys=[author_id])
    note = db.relationship('Note', foreign_keys=[note_id])

    __table_args__ = (
        CheckConstraint('level IN (1, 2)', name='ck_comment_level'),
        CheckConstraint('status IN (0, 1, 2)', name='ck_comment_status'),
        CheckConstraint(
            '(level = 1 AND reply_to_id IS NULL AND root_comment_id IS NULL) OR '
            '(level = 2 AND reply_to_id IS NOT NULL AND root_comment_id IS NOT NULL)',
            name='ck_comment_thread_shape'
        ),
    )

    @property
    def is_published(self):
        return self.status == COMMENT_STATUS_PUBLISHED

    def to_dict(self, reply_to=None):
        """
        将评论对象转换为字典表示

        参数:
            reply_to: 被回复的评论对象 (可选)，传入时附带其摘要和作者
        """
        data = {
            'id': self.id,
            'noteId': self.note_id,
            'content': self.content,
            'level': self.level,
            'replyToId': self.reply_to_id,
            'rootCommentId': self.root_comment_id,
            'status': self.status,
            'likeCount': self.like_count,
            'imageUrl': self.image_url,
            'createdAt': self.created_at.isoformat() + 'Z' if self.created_at else None,
            'author': self.author.to_dict_basic() if self.author else None,
            'replyTo': None,
        }
        if reply_to is not None:
            data['replyTo'] = {
                'id': reply_to.id,
                'content': reply_to.content,
                'author': reply_to.author.to_dict_basic() if reply_to.author else None,
            }
        return data

    def __repr__(self):
        reply_info = f" (Reply to {self.reply_to_id}, root {self.root_comment_id})" if self.reply_to_id else ""
        return f'<Comment {self.id} on Note {self.note_id} by User {self.author_id}{reply_info}>'
