"""
错误处理模块

提供全站错误处理功能，包括：
- 业务异常 (ServiceError 及其子类) 到 JSON 响应的映射
- 常见 HTTP 错误码的统一 JSON 响应
- 错误统计 (按状态码、按端点)，供健康检查或排障使用
"""

import re
import time
import threading
import traceback
from collections import defaultdict
from datetime import datetime

from flask import jsonify, request, current_app

from notesphere.utils.errors import ServiceError

MAX_RECENT_ERRORS = 100

# 错误计数和统计
_error_lock = threading.Lock()
_error_stats = {
    'last_reset': time.time(),
    'total_count': 0,
    'by_code': defaultdict(int),  # 按状态码统计
    'by_endpoint': defaultdict(int),  # 按端点统计
    'recent_errors': [],  # 最近的错误列表
}

ERROR_MESSAGES = {
    400: "请求无效",
    401: "未授权访问",
    403: "禁止访问",
    404: "请求的资源不存在",
    405: "不支持的请求方法",
    429: "请求过于频繁",
}


class ErrorHandler:
    """错误处理器"""

    @staticmethod
    def register_handlers(app):
        """注册所有错误处理器"""

        @app.errorhandler(ServiceError)
        def handle_service_error(e):
            """业务异常：按异常类型上的状态码返回"""
            ErrorHandler._record_error(e.status_code, request.path, request.method, e.message)
            if e.status_code >= 500:
                current_app.logger.error(f"业务处理失败: {request.path} - {e.message}")
            else:
                current_app.logger.info(f"请求被拒绝 [{e.error_code}]: {request.path} - {e.message}")
            return jsonify(e.to_dict()), e.status_code

        @app.errorhandler(500)
        def handle_server_error(e):
            """处理500错误"""
            error_detail = str(e)
            current_app.logger.error(f"服务器错误: {request.path} - {error_detail}\n{traceback.format_exc()}")
            ErrorHandler._record_error(500, request.path, request.method, error_detail)
            return jsonify({
                'code': 500,
                'error': 'server_error',
                'message': '服务器错误。',
                'data': {}
            }), 500

        # 注册其他常见错误代码
        for code in ERROR_MESSAGES:
            app.register_error_handler(code, ErrorHandler._create_error_handler(code))

    @staticmethod
    def _create_error_handler(status_code):
        """创建特定状态码的错误处理器"""
        def handler(e):
            error_msg = ERROR_MESSAGES.get(status_code, "请求出错")
            ErrorHandler._record_error(status_code, request.path, request.method, error_msg)
            return jsonify({
                'code': status_code,
                'error': f'error_{status_code}',
                'message': error_msg,
                'data': {}
            }), status_code

        return handler

    @staticmethod
    def _record_error(status_code, path, method, error_msg):
        """记录错误统计信息"""
        with _error_lock:
            _error_stats['total_count'] += 1
            _error_stats['by_code'][status_code] += 1
            _error_stats['by_endpoint'][ErrorHandler._simplify_path(path)] += 1

            _error_stats['recent_errors'].append({
                'timestamp': datetime.now().isoformat(),
                'status_code': status_code,
                'path': path,
                'method': method,
                'message': error_msg
            })
            if len(_error_stats['recent_errors']) > MAX_RECENT_ERRORS:
                _error_stats['recent_errors'] = _error_stats['recent_errors'][-MAX_RECENT_ERRORS:]

    @staticmethod
    def _simplify_path(path):
        """简化路径，替换ID为占位符"""
        path = re.sub(r'/\d+_\d+', '/{conversation}', path)
        return re.sub(r'/\d+', '/{id}', path)

    @staticmethod
    def get_error_stats():
        """获取错误统计信息"""
        with _error_lock:
            return {
                'total_count': _error_stats['total_count'],
                'by_code': dict(_error_stats['by_code']),
                'by_endpoint': dict(_error_stats['by_endpoint']),
                'recent_errors': _error_stats['recent_errors'][-20:],
                'last_reset': _error_stats['last_reset']
            }

    @staticmethod
    def reset_stats():
        """重置错误统计"""
        with _error_lock:
            _error_stats['last_reset'] = time.time()
            _error_stats['total_count'] = 0
            _error_stats['by_code'] = defaultdict(int)
            _error_stats['by_endpoint'] = defaultdict(int)
            _error_stats['recent_errors'] = []
