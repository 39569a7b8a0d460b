"""用户服务：注册、登录校验、资料查询与修改、启用/禁用账号。"""
import logging

from sqlalchemy.exc import IntegrityError

from notesphere import db
from notesphere.models import User
from notesphere.models.user import USER_STATUS_DISABLED, USER_STATUS_ENABLED, GENDERS
from notesphere.utils.errors import NotFoundError, ValidationError
from notesphere.utils.transaction import transaction

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('nickname', 'signature', 'location', 'gender', 'avatar')


def find_user_by_username(username):
    return User.query.filter_by(username=username).first()


def register_user(username, password, nickname=None):
    username = username.strip() if isinstance(username, str) else ''
    if not 2 <= len(username) <= 45:
        raise ValidationError('用户名长度必须是2 ~ 45之间。')
    if not isinstance(password, str) or not 6 <= len(password) <= 45:
        raise ValidationError('密码长度必须是6 ~ 45之间。')
    if find_user_by_username(username) is not None:
        raise ValidationError('用户名已经存在。')

    # 预检查与插入之间可能有并发注册，唯一约束兜底
    try:
        with transaction():
            user = User(username=username, nickname=nickname or username)
            user.set_password(password)
            db.session.add(user)
    except IntegrityError:
        logger.info(f"注册冲突，用户名已被占用: {username}")
        raise ValidationError('用户名已经存在。')

    logger.info(f"新用户注册: {username} (id={user.id})")
    return user


def authenticate(username, password):
    """用户名与密码匹配时返回用户，否则返回 None (是否禁用由调用方判断)"""
    user = find_user_by_username(username)
    if user is None or not user.check_password(password or ''):
        return None
    return user


def get_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError(f'id为：{user_id} 的用户不存在。')
    return user


def _clean_profile_fields(fields):
    unknown = set(fields) - set(PROFILE_FIELDS)
    if unknown:
        raise ValidationError(f"不支持修改的字段: {', '.join(sorted(unknown))}")

    changes = {name: value for name, value in fields.items() if value is not None}
    if not changes:
        raise ValidationError('没有提供任何需要更新的信息')

    if 'nickname' in changes:
        nickname = changes['nickname'].strip() if isinstance(changes['nickname'], str) else ''
        if not 1 <= len(nickname) <= 50:
            raise ValidationError('昵称长度必须是1 ~ 50之间。')
        changes['nickname'] = nickname
    if 'gender' in changes:
        if isinstance(changes['gender'], bool) or changes['gender'] not in GENDERS:
            raise ValidationError('性别的值必须是，男性：1 女性：2 未选择：0。')
    if 'location' in changes:
        if not isinstance(changes['location'], str) or len(changes['location']) > 100:
            raise ValidationError('所在地长度不能超过100个字符。')
    for name in ('signature', 'avatar'):
        if name in changes and not isinstance(changes[name], str):
            raise ValidationError(f'{name} 必须是字符串')
    if 'avatar' in changes and len(changes['avatar']) > 255:
        raise ValidationError('头像地址长度不能超过255个字符。')
    return changes


def update_profile(user_id, **fields):
    """
    部分更新用户资料。

    只修改传入且不为 None 的字段 (nickname / signature / location / gender / avatar)，
    一个字段都没有时拒绝。头像只保存 URL，上传由其他服务负责。
    """
    changes = _clean_profile_fields(fields)
    user = get_user(user_id)
    with transaction():
        for name, value in changes.items():
            setattr(user, name, value)
    logger.info(f"用户 {user_id} 更新资料: {', '.join(sorted(changes))}")
    return user


def set_user_status(user_id, enabled):
    user = get_user(user_id)
    with transaction():
        user.status = USER_STATUS_ENABLED if enabled else USER_STATUS_DISABLED
    logger.info(f"用户 {user_id} 状态已设置为 {'启用' if enabled else '禁用'}")
    return user
