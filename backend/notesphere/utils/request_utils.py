from flask import request, current_app

from notesphere.utils.errors import ValidationError


def parse_id(value, message, required=True):
    """
    把请求中的ID (数字或数字字符串) 转成正整数。

    required=False 时空值返回 None。
    """
    if value is None or value == '':
        if required:
            raise ValidationError(message)
        return None
    if isinstance(value, bool):
        raise ValidationError(message)
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(message)
    if parsed <= 0:
        raise ValidationError(message)
    return parsed


def get_json_body():
    return request.get_json(silent=True) or {}


def get_pagination():
    """读取 page / pageSize 查询参数并限制在合理范围内"""
    default_size = current_app.config.get('PAGE_SIZE_DEFAULT', 10)
    max_size = current_app.config.get('PAGE_SIZE_MAX', 50)
    page = max(request.args.get('page', 1, type=int) or 1, 1)
    page_size = request.args.get('pageSize', default_size, type=int) or default_size
    page_size = min(max(page_size, 1), max_size)
    return page, page_size
