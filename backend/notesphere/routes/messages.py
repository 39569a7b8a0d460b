"""
私信 API

- POST /api/messages                      发送私信
- GET  /api/messages/conversations        会话列表 (最后一条消息 + 未读数)
- GET  /api/messages/<conversation_id>    会话历史消息 (分页，同时标记已读)

会话ID固定为 "较小用户ID_较大用户ID"。
"""
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from notesphere import limiter
from notesphere.models.message import CONTENT_TYPE_TEXT
from notesphere.services import message_service
from notesphere.utils.auth_utils import current_user_id, load_acting_user
from notesphere.utils.errors import ValidationError
from notesphere.utils.request_utils import get_json_body, parse_id

messages_bp = Blueprint('messages', __name__)


@messages_bp.route('', methods=['POST'])
@jwt_required()
@limiter.limit("60 per minute")
def send_message():
    user = load_acting_user(current_user_id())
    data = get_json_body()
    receiver_id = parse_id(data.get('receiverId'), '接收者ID不能为空。')
    content_type = data.get('contentType', CONTENT_TYPE_TEXT)
    if isinstance(content_type, bool) or not isinstance(content_type, int):
        raise ValidationError('内容类型无效，应为0-4之间的数字。')

    message = message_service.send_message(
        user.id,
        receiver_id,
        data.get('content'),
        content_type=content_type,
        media_url=data.get('mediaUrl'),
        conversation_id=data.get('conversationId'),
    )
    return jsonify({
        'code': 201,
        'message': '发送成功',
        'data': {'message': message.to_dict()}
    }), 201


@messages_bp.route('/conversations', methods=['GET'])
@jwt_required()
def conversation_list():
    conversations = message_service.list_conversations(current_user_id())
    return jsonify({
        'code': 200,
        'message': '获取成功',
        'data': {'conversations': conversations}
    })


@messages_bp.route('/<string:conversation_id>', methods=['GET'])
@jwt_required()
def conversation_messages(conversation_id):
    page = max(request.args.get('page', 1, type=int) or 1, 1)
    page_size = min(max(request.args.get('pageSize', 20, type=int) or 20, 1), 100)
    messages, pagination = message_service.get_conversation_messages(
        current_user_id(), conversation_id, page, page_size
    )
    return jsonify({
        'code': 200,
        'message': '获取成功',
        'data': {'messages': messages, 'pagination': pagination}
    })
