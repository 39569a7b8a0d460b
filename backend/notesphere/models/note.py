"""
定义笔记模型 (Note)。
用于存储用户发布的图文/视频笔记，包含标题、正文、封面、图片、标签、可见性，
以及点赞数、评论数、收藏数等冗余计数 (由 counter_service 维护)。

注意: 如果新增、删除或修改功能，必须在这开头的注释中同步修改，如发现功能与注释描述不同，也可以在确定后修改。
"""
from datetime import datetime

from notesphere import db

VISIBILITY_PRIVATE = 0
VISIBILITY_PUBLIC = 1
VISIBILITY_FRIENDS = 2

NOTE_STATUS_HIDDEN = 0
NOTE_STATUS_NORMAL = 1


class Note(db.Model):
    __tablename__ = 'notes'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    title = db.Column(db.String(45), nullable=False)
    content = db.Column(db.Text, nullable=True)
    cover_image_url = db.Column(db.String(255), nullable=True)
    images = db.Column(db.JSON, nullable=True, default=list)
    video_url = db.Column(db.String(255), nullable=True)
    tags = db.Column(db.JSON, nullable=True, default=list)
    location_name = db.Column(db.String(100), nullable=True)
    visibility = db.Column(db.SmallInteger, default=VISIBILITY_PUBLIC, nullable=False)
    status = db.Column(db.SmallInteger, default=NOTE_STATUS_NORMAL, nullable=False)
    like_count = db.Column(db.Integer, default=0, nullable=False)
    comment_count = db.Column(db.Integer, default=0, nullable=False)
    collect_count = db.Column(db.Integer, default=0, nullable=False)
    share_count = db.Column(db.Integer, default=0, nullable=False)
    view_count = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship('User', back_populates='notes')

    def to_dict(self, include_content=True):
        """将 Note 对象转换为字典表示"""
        data = {
            'id': self.id,
            'title': self.title,
            'coverImageUrl': self.cover_image_url,
            'images': self.images or [],
            'videoUrl': self.video_url,
            'tags': self.tags or [],
            'locationName': self.location_name,
            'visibility': self.visibility,
            'likeCount': self.like_count,
            'commentCount': self.comment_count,
            'collectCount': self.collect_count,
            'viewCount': self.view_count,
            'createdAt': self.created_at.isoformat() + 'Z' if self.created_at else None,
            'author': self.user.to_dict_basic() if self.user else None,
        }
        if include_content:
            data['content'] = self.content
        return data

    def __repr__(self):
        return f'<Note {self.id} - {self.title} by User {self.user_id}>'
