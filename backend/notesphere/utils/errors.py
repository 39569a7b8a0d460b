"""
服务层异常定义。

所有业务错误都继承 ServiceError，携带 HTTP 状态码与机器可读的 error_code，
路由层无需解析错误文本即可映射为响应 (见 error_handler.ErrorHandler)。
"""


class ServiceError(Exception):
    """业务错误基类"""
    status_code = 500
    error_code = 'server_error'

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors) if errors else [message]

    def to_dict(self):
        return {
            'code': self.status_code,
            'error': self.error_code,
            'message': self.message,
            'data': {'errors': self.errors},
        }


class ValidationError(ServiceError):
    """请求参数缺失或不合法，例如关注自己、给自己发消息、内容超长"""
    status_code = 400
    error_code = 'bad_request'


class AuthenticationError(ServiceError):
    """用户名或密码错误"""
    status_code = 401
    error_code = 'unauthorized'


class PermissionDeniedError(ServiceError):
    status_code = 403
    error_code = 'forbidden'


class NotFoundError(ServiceError):
    """引用的笔记、评论、用户不存在"""
    status_code = 404
    error_code = 'not_found'


class ConflictError(ServiceError):
    """唯一约束竞争无法在本地消解，调用方可以重试"""
    status_code = 409
    error_code = 'conflict'
    retryable = True


class ConsistencyError(ServiceError):
    """计数器更新时聚合行缺失 (内部错误，默认只记录日志)"""
    status_code = 500
    error_code = 'consistency_error'

    def __init__(self, table, row_id, column):
        self.table = table
        self.row_id = row_id
        self.column = column
        super().__init__(f'{table}.{column} 更新失败：id={row_id} 的记录不存在')
