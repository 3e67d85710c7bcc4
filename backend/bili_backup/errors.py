"""
Error taxonomy

Every failure raised by the client, pagination and sync layers derives from
BiliError so callers can catch a single type and still tell the kinds apart.
"""
from typing import Optional


class BiliError(Exception):
    """Base class for all backup/restore errors."""

    kind = 'error'

    def __init__(self, message: str = ''):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NetworkError(BiliError):
    """Transport failure: connection, timeout, non-2xx status or bad JSON."""

    kind = 'network'

    def __str__(self) -> str:
        return f'网络错误: {self.message}'


class RemoteError(BiliError):
    """The platform answered with a non-zero envelope code."""

    kind = 'remote'

    def __init__(self, code: int, message: str = ''):
        super().__init__(message)
        self.code = code

    def __str__(self) -> str:
        return f'API错误 [{self.code}]: {self.message}'


class AuthError(BiliError):
    """No credential, or the credential was rejected."""

    kind = 'auth'

    def __init__(self, message: str = '未登录'):
        super().__init__(message)

    def __str__(self) -> str:
        return f'认证失败: {self.message}'


class ParamError(BiliError):
    """Caller supplied an invalid argument."""

    kind = 'param'

    def __str__(self) -> str:
        return f'参数错误: {self.message}'


class IoError(BiliError):
    """Local file read/write failure."""

    kind = 'io'

    def __init__(self, message: str = '', cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        return f'IO错误: {self.message}'
