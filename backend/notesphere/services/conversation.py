"""会话ID：较小的用户ID在前，与谁是发送者无关。"""
from notesphere.utils.errors import ValidationError


def conversation_key(sender_id, receiver_id):
    """
    由两个用户ID推导会话ID，例如 (9, 5) 与 (5, 9) 都得到 "5_9"。

    Raises:
        ValidationError: 任一ID缺失，或发送者与接收者相同
    """
    if sender_id is None or receiver_id is None:
        raise ValidationError('发送者和接收者ID必须填写。')
    if sender_id == receiver_id:
        raise ValidationError('不能给自己发送消息。')
    low, high = sorted((int(sender_id), int(receiver_id)))
    return f'{low}_{high}'


def parse_conversation_key(key):
    """把会话ID拆回两个用户ID，格式不正确时抛出 ValidationError"""
    parts = str(key).split('_')
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValidationError('会话ID格式不正确。')
    low, high = int(parts[0]), int(parts[1])
    if low >= high:
        raise ValidationError('会话ID格式不正确。')
    return low, high
