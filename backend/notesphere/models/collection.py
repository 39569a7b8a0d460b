from datetime import datetime

from sqlalchemy import UniqueConstraint

from notesphere import db

COLLECTION_STATUS_ACTIVE = 1


class Collection(db.Model):
    """笔记收藏记录，(user_id, note_id) 唯一；取消收藏时直接删除该行"""
    __tablename__ = 'collections'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    note_id = db.Column(db.Integer, db.ForeignKey('notes.id', ondelete='CASCADE'), nullable=False, index=True)
    status = db.Column(db.SmallInteger, default=COLLECTION_STATUS_ACTIVE, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('user_id', 'note_id', name='uq_collection_user_note'),
    )

    def __repr__(self):
        return f"<Collection(user_id={self.user_id}, note_id={self.note_id})>"
