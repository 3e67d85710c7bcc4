"""
数据库模型
"""
from .credential import StoredCredential

__all__ = ['StoredCredential']
