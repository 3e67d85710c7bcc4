"""
中间件
"""
from .auth import require_auth, require_admin

__all__ = ['require_auth', 'require_admin']
