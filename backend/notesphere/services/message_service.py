"""
私信服务

- 发送私信：会话ID由 conversation_key 推导，不接受与推导结果不一致的外部会话ID
- 会话列表：每个会话的最后一条消息与未读数
- 会话消息：分页获取历史消息，同时把发给当前用户的未读消息标记为已读
"""
import logging

from flask import current_app
from sqlalchemy import func, or_, select, update

from notesphere import db
from notesphere.models import Message, User
from notesphere.models.message import CONTENT_TYPES, CONTENT_TYPE_TEXT
from notesphere.services.conversation import conversation_key, parse_conversation_key
from notesphere.utils.errors import NotFoundError, PermissionDeniedError, ValidationError
from notesphere.utils.transaction import transaction

logger = logging.getLogger(__name__)


def _validate_payload(content, content_type, media_url):
    if content_type not in CONTENT_TYPES:
        raise ValidationError('内容类型无效，应为0-4之间的数字。')
    text = content.strip() if isinstance(content, str) else ''
    if not text:
        raise ValidationError('消息内容不能为空。')
    max_length = current_app.config.get('MESSAGE_MAX_LENGTH', 2000)
    if len(text) > max_length:
        raise ValidationError(f'消息内容不能超过{max_length}个字符。')
    if content_type != CONTENT_TYPE_TEXT:
        if not media_url:
            raise ValidationError('非文本消息必须提供媒体URL。')
        if not str(media_url).startswith(('http://', 'https://')):
            raise ValidationError('媒体URL格式不正确。')
    return text


def send_message(sender_id, receiver_id, content, content_type=CONTENT_TYPE_TEXT, media_url=None,
                 conversation_id=None):
    """发送一条私信，返回新建的 Message"""
    key = conversation_key(sender_id, receiver_id)
    if conversation_id and conversation_id != key:
        raise ValidationError('会话ID与发送者、接收者不匹配。')
    text = _validate_payload(content, content_type, media_url)
    for user_id in (sender_id, receiver_id):
        if db.session.get(User, user_id) is None:
            raise NotFoundError(f'id为：{user_id} 的用户不存在。')

    with transaction():
        message = Message(
            sender_id=sender_id,
            receiver_id=receiver_id,
            conversation_id=key,
            content=text,
            content_type=content_type,
            media_url=media_url if content_type != CONTENT_TYPE_TEXT else None,
        )
        db.session.add(message)

    logger.info(f"用户 {sender_id} 向用户 {receiver_id} 发送私信 (会话 {key})")
    return message


def list_conversations(user_id):
    """当前用户参与的会话列表，按最后一条消息时间倒序"""
    participant = or_(Message.sender_id == user_id, Message.receiver_id == user_id)
    latest_ids = (
        select(func.max(Message.id))
        .where(participant)
        .group_by(Message.conversation_id)
    )
    latest_messages = (
        Message.query
        .filter(Message.id.in_(latest_ids))
        .order_by(Message.id.desc())
        .all()
    )
    unread_rows = db.session.execute(
        select(Message.conversation_id, func.count(Message.id))
        .where(Message.receiver_id == user_id, Message.is_read.is_(False))
        .group_by(Message.conversation_id)
    ).all()
    unread = {conversation_id: count for conversation_id, count in unread_rows}

    conversations = []
    for message in latest_messages:
        peer = message.receiver if message.sender_id == user_id else message.sender
        conversations.append({
            'conversationId': message.conversation_id,
            'peer': peer.to_dict_basic() if peer else None,
            'lastMessage': message.to_dict(),
            'unreadCount': unread.get(message.conversation_id, 0),
        })
    return conversations


def get_conversation_messages(user_id, conversation_id, page=1, page_size=20):
    """
    分页获取会话消息 (最新的在前)，并把发给当前用户的未读消息标为已读。

    Raises:
        ValidationError: 会话ID格式不正确
        PermissionDeniedError: 当前用户不是会话参与者
    """
    if user_id not in parse_conversation_key(conversation_id):
        raise PermissionDeniedError('无权查看该会话')

    with transaction():
        result = db.session.execute(
            update(Message)
            .where(
                Message.conversation_id == conversation_id,
                Message.receiver_id == user_id,
                Message.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
    if result.rowcount:
        logger.info(f"用户 {user_id} 已读会话 {conversation_id} 中 {result.rowcount} 条消息")

    pagination = (
        Message.query
        .filter_by(conversation_id=conversation_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .paginate(page=page, per_page=page_size, error_out=False)
    )
    return [m.to_dict() for m in pagination.items], {
        'total': pagination.total,
        'pageSize': page_size,
        'current': page,
        'totalPages': pagination.pages,
    }
