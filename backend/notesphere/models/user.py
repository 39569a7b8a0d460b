"""
定义用户模型 (User) 与用户关注关系模型 (Follow)。

User 保存账号信息、个人资料 (昵称、签名、所在地、性别) 以及三个冗余计数：关注数、粉丝数、获赞与收藏数。
计数只是 Follow / Like / Collection 行的缓存，由 counter_service 在同一事务内维护。
Follow 行创建后不会删除，取消关注和重新关注只翻转 status。

注意: 如果新增、删除或修改功能，必须在这开头的注释中同步修改，如发现功能与注释描述不同，也可以在确定后修改。
"""
from datetime import datetime

from sqlalchemy import UniqueConstraint, CheckConstraint
from werkzeug.security import generate_password_hash, check_password_hash

from notesphere import db

USER_STATUS_DISABLED = 0
USER_STATUS_ENABLED = 1

GENDER_UNSET = 0
GENDER_MALE = 1
GENDER_FEMALE = 2
GENDERS = (GENDER_UNSET, GENDER_MALE, GENDER_FEMALE)

FOLLOW_STATUS_CANCELLED = 0
FOLLOW_STATUS_ACTIVE = 1


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(45), unique=True, nullable=False, index=True)
    nickname = db.Column(db.String(50), nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)
    avatar = db.Column(db.String(255), nullable=True)
    signature = db.Column(db.Text, nullable=True)
    location = db.Column(db.String(100), nullable=True)
    gender = db.Column(db.SmallInteger, default=GENDER_UNSET, nullable=False)
    follow_count = db.Column(db.Integer, default=0, nullable=False)
    fans_count = db.Column(db.Integer, default=0, nullable=False)
    like_collect_count = db.Column(db.Integer, default=0, nullable=False)
    status = db.Column(db.SmallInteger, default=USER_STATUS_ENABLED, nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    notes = db.relationship('Note', back_populates='user', lazy='dynamic')

    __table_args__ = (
        CheckConstraint('gender IN (0, 1, 2)', name='ck_user_gender'),
    )

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def is_enabled(self):
        return self.status == USER_STATUS_ENABLED

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'nickname': self.nickname or self.username,
            'avatar': self.avatar,
            'signature': self.signature,
            'location': self.location,
            'gender': self.gender,
            'followCount': self.follow_count,
            'fansCount': self.fans_count,
            'likeCollectCount': self.like_collect_count,
            'status': self.status,
            'isAdmin': self.is_admin,
            'createdAt': self.created_at.isoformat() + 'Z' if self.created_at else None,
        }

    def to_public_dict(self):
        """返回用户的公开信息字典，不包含敏感数据"""
        return {
            'id': self.id,
            'nickname': self.nickname or self.username,
            'avatar': self.avatar,
            'signature': self.signature,
            'location': self.location,
            'gender': self.gender,
            'followCount': self.follow_count,
            'fansCount': self.fans_count,
            'likeCollectCount': self.like_collect_count,
        }

    def to_dict_basic(self):
        return {
            'id': self.id,
            'nickname': self.nickname or self.username,
            'avatar': self.avatar,
        }

    def __repr__(self):
        return f'<User {self.username}>'


class Follow(db.Model):
    """
    存储用户之间的关注关系。

    (follower_id, following_id) 唯一；status 为 0 表示已取消，1 表示关注中。
    """
    __tablename__ = 'follows'

    id = db.Column(db.Integer, primary_key=True)
    follower_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    following_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    status = db.Column(db.SmallInteger, default=FOLLOW_STATUS_ACTIVE, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    follower = db.relationship('User', foreign_keys=[follower_id])
    following = db.relationship('User', foreign_keys=[following_id])

    __table_args__ = (
        UniqueConstraint('follower_id', 'following_id', name='uq_follow_pair'),
        CheckConstraint('status IN (0, 1)', name='ck_follow_status'),
    )

    @property
    def is_active(self):
        return self.status == FOLLOW_STATUS_ACTIVE

    def to_dict(self):
        return {
            'id': self.id,
            'followerId': self.follower_id,
            'followingId': self.following_id,
            'status': self.status,
        }

    def __repr__(self):
        return f'<Follow Follower:{self.follower_id} Following:{self.following_id} status={self.status}>'
