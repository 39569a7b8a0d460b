"""
笔记 API：发布笔记、获取笔记详情 (含点赞数、评论数、收藏数与作者信息)。

使用 Flask 蓝图: notes_bp (前缀 /api/notes)
"""
from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from notesphere.services import note_service
from notesphere.utils.auth_utils import current_user_id, load_acting_user
from notesphere.utils.errors import ValidationError
from notesphere.utils.request_utils import get_json_body

notes_bp = Blueprint('notes', __name__)


@notes_bp.route('', methods=['POST'])
@jwt_required()
def create_note():
    user = load_acting_user(current_user_id())
    data = get_json_body()
    visibility = data.get('visibility', 1)
    if not isinstance(visibility, int) or isinstance(visibility, bool):
        raise ValidationError('可见性：0-私密，1-公开，2-好友可见')
    note = note_service.create_note(
        user.id,
        data.get('title'),
        content=data.get('content', ''),
        images=data.get('images'),
        tags=data.get('tags'),
        cover_image_url=data.get('coverImageUrl'),
        video_url=data.get('videoUrl'),
        location_name=data.get('locationName'),
        visibility=visibility,
    )
    return jsonify({
        'code': 201,
        'message': '发布笔记成功',
        'data': {'note': note.to_dict()}
    }), 201


@notes_bp.route('/<int:note_id>', methods=['GET'])
def get_note_detail(note_id):
    note = note_service.get_note(note_id)
    return jsonify({
        'code': 200,
        'message': '获取笔记详情成功',
        'data': {'noteDetail': note.to_dict()}
    })
