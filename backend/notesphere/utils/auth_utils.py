from functools import wraps

from flask_jwt_extended import jwt_required, get_jwt_identity

from notesphere import db
from notesphere.models import User
from notesphere.utils.errors import NotFoundError, PermissionDeniedError


def current_user_id():
    """从 JWT 中取出当前用户ID (令牌中以字符串形式保存)"""
    identity = get_jwt_identity()
    return int(identity) if identity is not None else None


def load_acting_user(user_id):
    """加载执行操作的用户，用户不存在或已禁用时拒绝"""
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError(f'id为：{user_id} 的用户不存在。')
    if not user.is_enabled:
        raise PermissionDeniedError('当前账号已被禁用。')
    return user


def admin_required(fn):
    """
    装饰器：确保只有管理员才能访问该端点。

    管理员身份以数据库中的 is_admin 为准，令牌里的 is_admin 声明只作展示用，
    被撤销管理员或被禁用的账号即使持有旧令牌也会被拒绝。内部已包含 jwt_required。
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        user = load_acting_user(current_user_id())
        if not user.is_admin:
            raise PermissionDeniedError('仅管理员可访问')
        return fn(*args, **kwargs)

    return jwt_required()(wrapper)
