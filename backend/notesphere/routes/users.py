"""
用户信息 API：当前用户资料查询与修改、公开资料、管理员启用/禁用账号。

使用 Flask 蓝图: users_bp (前缀 /api/users)
"""
from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from notesphere.services import user_service
from notesphere.utils.auth_utils import admin_required, current_user_id, load_acting_user
from notesphere.utils.errors import ValidationError
from notesphere.utils.request_utils import get_json_body

users_bp = Blueprint('users', __name__)


@users_bp.route('/me', methods=['GET'])
@jwt_required()
def get_current_user():
    user = user_service.get_user(current_user_id())
    return jsonify({
        'code': 200,
        'message': '获取成功',
        'data': {'user': user.to_dict()}
    })


@users_bp.route('/me', methods=['PUT'])
@jwt_required()
def update_current_user():
    """部分更新当前用户的资料，请求体中省略或为 null 的字段保持不变"""
    user = load_acting_user(current_user_id())
    data = get_json_body()
    user = user_service.update_profile(
        user.id,
        nickname=data.get('nickname'),
        signature=data.get('signature'),
        location=data.get('location'),
        gender=data.get('gender'),
        avatar=data.get('avatar'),
    )
    return jsonify({
        'code': 200,
        'message': '更新用户信息成功',
        'data': {'user': user.to_dict()}
    })


@users_bp.route('/<int:user_id>', methods=['GET'])
def get_user_profile(user_id):
    user = user_service.get_user(user_id)
    return jsonify({
        'code': 200,
        'message': '获取成功',
        'data': {'user': user.to_public_dict()}
    })


@users_bp.route('/<int:user_id>/status', methods=['PUT'])
@admin_required
def update_user_status(user_id):
    enabled = get_json_body().get('enabled')
    if not isinstance(enabled, bool):
        raise ValidationError('enabled 必须是布尔值')
    user = user_service.set_user_status(user_id, enabled)
    return jsonify({
        'code': 200,
        'message': '用户已启用' if enabled else '用户已禁用',
        'data': {'user': user.to_dict()}
    })
