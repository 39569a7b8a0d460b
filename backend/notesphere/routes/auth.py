"""
此模块定义了与用户认证相关的 API 端点。

主要功能包括:
- 用户注册 (API)
- 用户登录并签发 JWT
- 获取当前登录用户资料

依赖模型: User
使用 Flask 蓝图: auth_bp (前缀 /api/auth)

注意: 如果新增、删除或修改功能，必须在这开头的注释中同步修改，如发现功能与注释描述不同，也可以在确定后修改。
"""
from flask import Blueprint, jsonify
from flask_jwt_extended import create_access_token, jwt_required

from notesphere import limiter
from notesphere.services import user_service
from notesphere.utils.auth_utils import current_user_id
from notesphere.utils.errors import AuthenticationError, PermissionDeniedError
from notesphere.utils.request_utils import get_json_body

auth_bp = Blueprint('auth', __name__)


def _issue_token(user):
    return create_access_token(
        identity=str(user.id),
        additional_claims={'is_admin': user.is_admin}
    )


@auth_bp.route('/register', methods=['POST'])
@limiter.limit("20 per hour")
def register():
    data = get_json_body()
    user = user_service.register_user(
        data.get('username'),
        data.get('password'),
        nickname=data.get('nickname'),
    )
    return jsonify({
        'code': 201,
        'message': '注册成功',
        'data': {'user': user.to_dict(), 'token': _issue_token(user)}
    }), 201


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("30 per minute")
def login():
    data = get_json_body()
    user = user_service.authenticate(data.get('username'), data.get('password'))
    if user is None:
        raise AuthenticationError('用户名或密码错误')
    if not user.is_enabled:
        raise PermissionDeniedError('当前账号已被禁用。')
    return jsonify({
        'code': 200,
        'message': '登录成功',
        'data': {'user': user.to_dict(), 'token': _issue_token(user)}
    })


@auth_bp.route('/profile', methods=['GET'])
@jwt_required()
def profile():
    user = user_service.get_user(current_user_id())
    return jsonify({
        'code': 200,
        'message': '获取成功',
        'data': {'user': user.to_dict()}
    })
