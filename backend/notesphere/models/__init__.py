"""
模型包初始化文件。

导入所有模型类，使其可以通过 notesphere.models.ModelName 的方式被访问，
并保证 Flask-Migrate 能看到全部数据表。

注意: 如果新增、删除或修改功能，必须在这开头的注释中同步修改，如发现功能与注释描述不同，也可以在确定后修改。
"""
from .user import User, Follow
from .note import Note
from .comment import Comment
from .like import Like, LikeTarget, NoteTarget, CommentTarget
from .collection import Collection
from .message import Message

__all__ = [
    'User',
    'Follow',
    'Note',
    'Comment',
    'Like',
    'LikeTarget',
    'NoteTarget',
    'CommentTarget',
    'Collection',
    'Message',
]
