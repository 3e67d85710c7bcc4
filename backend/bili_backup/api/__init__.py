"""
API 蓝图
"""
from .auth import auth_bp
from .domains import domains_bp

__all__ = ['auth_bp', 'domains_bp']
