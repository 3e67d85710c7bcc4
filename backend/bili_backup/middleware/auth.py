"""
认证中间件
用于保护本服务的 API 端点（与平台登录无关）
"""
import os
from functools import wraps
from flask import request
from ..utils.responses import ApiResponse


def get_current_api_key() -> str:
    """从请求头获取 API Key"""
    return request.headers.get('X-API-Key', '')


def require_auth(f):
    """
    基础认证装饰器

    检查请求头中的 X-API-Key
    如果环境变量 API_KEY 未设置，则跳过验证（开发模式）
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        expected_key = os.environ.get('API_KEY')

        if not expected_key:
            return f(*args, **kwargs)

        api_key = get_current_api_key()
        if not api_key:
            return ApiResponse.unauthorized('缺少 API Key，请在请求头中添加 X-API-Key')

        if api_key != expected_key:
            return ApiResponse.unauthorized('无效的 API Key')

        return f(*args, **kwargs)
    return decorated


def require_admin(f):
    """
    管理员认证装饰器

    用于保护不可恢复的操作（清空关注、收藏、历史记录等）
    需要 ADMIN_API_KEY 环境变量
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        admin_key = os.environ.get('ADMIN_API_KEY')

        if not admin_key:
            return ApiResponse.forbidden(
                '此操作需要管理员权限，请配置 ADMIN_API_KEY 环境变量'
            )

        api_key = get_current_api_key()
        if not api_key:
            return ApiResponse.unauthorized('缺少管理员 API Key')

        if api_key != admin_key:
            return ApiResponse.forbidden('无效的管理员 API Key')

        return f(*args, **kwargs)
    return decorated
