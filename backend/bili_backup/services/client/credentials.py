"""
Credential and session state

Both are immutable values. Login/logout never mutates them in place; the
transport swaps in a whole new SessionState so an in-flight run keeps reading
the snapshot it started with.
"""
from dataclasses import dataclass
from typing import Optional

from ...errors import AuthError
from .signer import Signer

ACCOUNT_ID_FIELD = 'DedeUserID'
CSRF_FIELD = 'bili_jct'


def parse_cookie_field(cookie: str, name: str) -> Optional[str]:
    """Read one field from a ``k=v; k2=v2`` cookie string.

    Each pair is split on its first ``=`` and both sides are stripped, so
    ``"DedeUserID = 123"`` and ``"SESSDATA=a=b"`` parse as expected.
    """
    if not cookie:
        return None
    for part in cookie.split(';'):
        if '=' not in part:
            continue
        key, value = part.split('=', 1)
        if key.strip() == name:
            return value.strip()
    return None


@dataclass(frozen=True)
class Credential:
    """An authenticated browser session on the platform."""
    cookie: str
    csrf_token: str
    account_id: str

    @classmethod
    def from_cookie(cls, cookie: str) -> 'Credential':
        """Build a credential from a raw cookie header value.

        Raises:
            AuthError: If ``DedeUserID`` or ``bili_jct`` is missing
        """
        cookie = (cookie or '').strip()
        account_id = parse_cookie_field(cookie, ACCOUNT_ID_FIELD)
        if not account_id:
            raise AuthError(f'Cookie 中缺少 {ACCOUNT_ID_FIELD}')
        csrf_token = parse_cookie_field(cookie, CSRF_FIELD)
        if not csrf_token:
            raise AuthError(f'Cookie 中缺少 {CSRF_FIELD}')
        return cls(cookie=cookie, csrf_token=csrf_token, account_id=account_id)

    def __repr__(self) -> str:
        return f'<Credential account_id={self.account_id}>'


@dataclass(frozen=True)
class SessionState:
    """Snapshot of everything a request needs to authenticate and sign."""
    credential: Optional[Credential] = None
    signer: Optional[Signer] = None

    @property
    def is_logged_in(self) -> bool:
        return self.credential is not None

    def require_credential(self) -> Credential:
        if self.credential is None:
            raise AuthError('未登录')
        return self.credential

    def require_signer(self) -> Signer:
        if self.signer is None:
            raise AuthError('签名密钥未初始化，请重新登录')
        return self.signer
