"""
关注相关 API

- POST /api/follow              关注 / 取消关注 / 重新关注用户 (切换)
- GET  /api/follow/status       查询当前用户是否关注了某篇笔记的作者
- GET  /api/follow/noteList     关注中用户发布的笔记 (分页)

关注记录从不删除，取消关注只修改状态；双方的关注数与粉丝数随状态变化同步更新。
"""
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from notesphere import db, limiter
from notesphere.models import User
from notesphere.services import interaction_service, note_service
from notesphere.utils.auth_utils import current_user_id, load_acting_user
from notesphere.utils.request_utils import get_json_body, get_pagination, parse_id

follow_bp = Blueprint('follow', __name__)


@follow_bp.route('', methods=['POST'])
@jwt_required()
@limiter.limit("30 per minute")
def toggle_follow():
    user = load_acting_user(current_user_id())
    following_id = parse_id(get_json_body().get('followingId'), '用户ID不能为空')

    result = interaction_service.toggle_follow(user.id, following_id)
    target = db.session.get(User, following_id)
    return jsonify({
        'code': 200,
        'message': '关注成功' if result.active else '取消关注成功',
        'data': {
            'isFollowing': result.active,
            'fansCount': target.fans_count if target else 0,
        }
    })


@follow_bp.route('/status', methods=['GET'])
@jwt_required()
def follow_status():
    """笔记作者是当前用户本人时返回 false"""
    user_id = current_user_id()
    note_id = parse_id(request.args.get('noteId'), '笔记ID不能为空')
    note = note_service.get_note(note_id)

    following = False
    if note.user_id != user_id:
        following = interaction_service.is_following(user_id, note.user_id)
    return jsonify({
        'code': 200,
        'message': '获取成功',
        'data': {'isFollowing': following, 'authorId': note.user_id}
    })


@follow_bp.route('/noteList', methods=['GET'])
@jwt_required()
def following_note_list():
    page, page_size = get_pagination()
    notes, pagination = note_service.following_notes(current_user_id(), page, page_size)
    return jsonify({
        'code': 200,
        'message': '获取成功',
        'data': {'notes': notes, 'pagination': pagination}
    })
