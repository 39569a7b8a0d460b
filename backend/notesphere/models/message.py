# backend/notesphere/models/message.py
"""
定义私信模型 (Message)。
用于存储两个用户之间的单条私信，conversation_id 由发送者与接收者ID推导 (见 services/conversation.py)，
同一对用户之间的全部消息共享同一个会话ID。

注意: 如果新增、删除或修改功能，必须在这开头的注释中同步修改，如发现功能与注释描述不同，也可以在确定后修改。
"""
from datetime import datetime

from notesphere import db

CONTENT_TYPE_TEXT = 0
CONTENT_TYPES = (0, 1, 2, 3, 4)  # 文本、图片、视频、语音、文件

MESSAGE_STATUS_NORMAL = 1


class Message(db.Model):
    __tablename__ = 'messages'

    id = db.Column(db.Integer, primary_key=True)
    sender_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    receiver_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    conversation_id = db.Column(db.String(45), nullable=False)
    content = db.Column(db.Text, nullable=False)
    content_type = db.Column(db.SmallInteger, default=CONTENT_TYPE_TEXT, nullable=False)
    media_url = db.Column(db.String(255), nullable=True)
    is_read = db.Column(db.Boolean, default=False, nullable=False)
    status = db.Column(db.SmallInteger, default=MESSAGE_STATUS_NORMAL, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    sender = db.relationship('User', foreign_keys=[sender_id])
    receiver = db.relationship('User', foreign_keys=[receiver_id])

    __table_args__ = (
        db.Index('ix_messages_conversation_created', 'conversation_id', 'created_at'),
        db.Index('ix_messages_receiver_read', 'receiver_id', 'is_read'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'conversationId': self.conversation_id,
            'senderId': self.sender_id,
            'receiverId': self.receiver_id,
            'content': self.content,
            'contentType': self.content_type,
            'mediaUrl': self.media_url,
            'isRead': self.is_read,
            'createdAt': self.created_at.isoformat() + 'Z' if self.created_at else None,
        }

    def __repr__(self):
        return f'<Message {self.id} in Conversation {self.conversation_id}>'
