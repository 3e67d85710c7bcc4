"""
加密工具模块
用于登录凭证的加密存储
"""
import os
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from ..errors import AuthError, ParamError
from .logger import get_logger

logger = get_logger('crypto')


class CookieCrypto:
    """
    Cookie 加密/解密工具

    使用 Fernet 对称加密；未配置密钥时拒绝加密，凭证不会以明文落盘
    """

    def __init__(self, key: Optional[str] = None):
        """
        初始化加密工具

        Args:
            key: 加密密钥，如果不提供则从环境变量读取

        Raises:
            ParamError: 密钥格式无效
        """
        self._key = key or os.environ.get('COOKIE_ENCRYPTION_KEY')
        self._fernet = None

        if self._key:
            try:
                self._fernet = Fernet(self._key.encode() if isinstance(self._key, str) else self._key)
            except (ValueError, TypeError) as e:
                raise ParamError(f'无效的 COOKIE_ENCRYPTION_KEY: {e}')

    @property
    def is_secure(self) -> bool:
        """是否配置了加密密钥"""
        return self._fernet is not None

    def encrypt(self, plaintext: str) -> str:
        """
        加密字符串

        Args:
            plaintext: 明文

        Returns:
            Fernet token 字符串

        Raises:
            ParamError: 未配置加密密钥
        """
        if not plaintext:
            return ''
        if not self._fernet:
            raise ParamError('未配置 COOKIE_ENCRYPTION_KEY，无法保存凭证')
        return self._fernet.encrypt(plaintext.encode('utf-8')).decode('utf-8')

    def decrypt(self, ciphertext: str) -> str:
        """
        解密字符串

        Args:
            ciphertext: 密文

        Returns:
            解密后的明文

        Raises:
            AuthError: 密钥缺失或密文无法解密（例如密钥已更换）
        """
        if not ciphertext:
            return ''
        if not self._fernet:
            raise AuthError('未配置 COOKIE_ENCRYPTION_KEY，无法读取已保存的凭证')
        try:
            return self._fernet.decrypt(ciphertext.encode('utf-8')).decode('utf-8')
        except InvalidToken:
            logger.warning("Stored credential could not be decrypted with the current key")
            raise AuthError('已保存的凭证无法解密，请重新登录')

    @staticmethod
    def generate_key() -> str:
        """
        生成新的加密密钥

        Returns:
            Fernet 密钥字符串
        """
        return Fernet.generate_key().decode('utf-8')


# 全局实例
_crypto_instance: Optional[CookieCrypto] = None


def get_crypto() -> CookieCrypto:
    """获取全局加密实例"""
    global _crypto_instance
    if _crypto_instance is None:
        _crypto_instance = CookieCrypto()
    return _crypto_instance


def reset_crypto() -> None:
    """丢弃全局实例，下次调用 get_crypto 时重新读取密钥"""
    global _crypto_instance
    _crypto_instance = None


def encrypt_cookie(cookie_str: str) -> str:
    """加密 Cookie 字符串"""
    return get_crypto().encrypt(cookie_str)


def decrypt_cookie(encrypted: str) -> str:
    """解密 Cookie 字符串"""
    return get_crypto().decrypt(encrypted)
