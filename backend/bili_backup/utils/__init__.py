"""
工具模块
"""
from .logger import setup_logger, get_logger
from .responses import success_response, ApiResponse
from .crypto import CookieCrypto

__all__ = [
    'setup_logger',
    'get_logger',
    'success_response',
    'ApiResponse',
    'CookieCrypto',
]
