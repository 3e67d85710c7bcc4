"""
Session Manager - Credential provider for the platform transport

Logging in verifies the cookie against the navigation endpoint and, from the
same response, builds the WBI signer. The credential and signer are then
installed together as one SessionState, so a signed request never sees a
credential from one login paired with keys from another.
"""
import threading
from typing import Any, Dict, Optional

from ..errors import AuthError, RemoteError
from ..utils.logger import get_logger
from .client import endpoints
from .client.credentials import Credential, SessionState
from .client.delay_manager import HumanDelay
from .client.signer import Signer, SigningKeyPair
from .client.transport import Transport

logger = get_logger('auth_service')

# nav 接口在未登录时返回的 code
CODE_NOT_LOGGED_IN = -101


def build_signer(nav: Dict[str, Any]) -> Signer:
    """Build a signer from the ``wbi_img`` block of a nav response."""
    wbi_img = nav.get('wbi_img') or {}
    keys = SigningKeyPair.from_urls(wbi_img.get('img_url'), wbi_img.get('sub_url'))
    if not keys.img_key or not keys.sub_key:
        raise AuthError('无法获取签名密钥')
    return Signer(keys)


def extract_user_info(nav: Dict[str, Any]) -> Dict[str, Any]:
    """Pick the display fields out of a nav response."""
    vip = nav.get('vip') or {}
    level = nav.get('level_info') or {}
    return {
        'mid': nav.get('mid'),
        'uname': nav.get('uname', ''),
        'face': nav.get('face', ''),
        'level': level.get('current_level'),
        'vip_type': vip.get('type', nav.get('vipType')),
        'vip_status': vip.get('status', nav.get('vipStatus')),
    }


class SessionManager:
    """Owns the transport and the credential/signer installed on it.

    Example:
        >>> manager = SessionManager()
        >>> user = manager.login_with_cookie('SESSDATA=...; bili_jct=...; DedeUserID=123')
        >>> manager.current_credential().account_id
        '123'
        >>> manager.logout()
    """

    def __init__(self, transport: Optional[Transport] = None):
        self.transport = transport or Transport()
        self._login_lock = threading.Lock()

    def init_app(self, app) -> None:
        """Rebuild the transport from the Flask config."""
        cfg = app.config
        self.transport = Transport(
            max_concurrency=cfg.get('BILI_MAX_CONCURRENCY', 2),
            max_retries=cfg.get('BILI_MAX_RETRIES', 3),
            retry_interval=cfg.get('BILI_RETRY_INTERVAL', 1.0),
            timeout=cfg.get('BILI_REQUEST_TIMEOUT', 30.0),
            delay=HumanDelay(
                min_ms=cfg.get('BILI_DELAY_MIN_MS', 1000),
                max_ms=cfg.get('BILI_DELAY_MAX_MS', 3000),
            ),
        )
        app.extensions['bili_session'] = self

    # ==================== CredentialProvider ====================

    def current_credential(self) -> Optional[Credential]:
        return self.transport.state.credential

    def set_credential(self, credential: Optional[Credential]) -> None:
        self.transport.set_credential(credential)

    @property
    def is_logged_in(self) -> bool:
        return self.transport.state.is_logged_in

    # ==================== Login / logout ====================

    def get_nav_info(self, state: Optional[SessionState] = None) -> Dict[str, Any]:
        """Call the navigation endpoint with the given (or current) session.

        Raises:
            AuthError: If the platform reports the session as logged out
        """
        try:
            nav = self.transport.call('GET', endpoints.NAV, state=state)
        except RemoteError as e:
            if e.code == CODE_NOT_LOGGED_IN:
                raise AuthError('登录已失效')
            raise
        return nav or {}

    def login_with_cookie(self, cookie: str) -> Dict[str, Any]:
        """Verify a cookie and install it together with a fresh signer.

        Returns:
            Display info of the logged-in user

        Raises:
            AuthError: On a malformed or rejected cookie
        """
        credential = Credential.from_cookie(cookie)
        with self._login_lock:
            nav = self.get_nav_info(SessionState(credential=credential))
            if not nav.get('isLogin'):
                raise AuthError('Cookie 无效或已过期')
            if str(nav.get('mid')) != credential.account_id:
                logger.warning(
                    f"[Session] DedeUserID {credential.account_id} does not match nav mid {nav.get('mid')}"
                )
            signer = build_signer(nav)
            self.transport.swap_state(SessionState(credential=credential, signer=signer))

        logger.info(f"[Session] logged in as {nav.get('uname')} ({credential.account_id})")
        return extract_user_info(nav)

    def refresh_signer(self) -> Signer:
        """Re-read the signing keys for the current credential."""
        with self._login_lock:
            state = self.transport.state
            state.require_credential()
            signer = build_signer(self.get_nav_info(state))
            self.transport.swap_state(SessionState(credential=state.credential, signer=signer))
        logger.info("[Session] signer refreshed")
        return signer

    def get_user_info(self) -> Dict[str, Any]:
        """Display info for the current credential.

        Raises:
            AuthError: If not logged in or the session expired
        """
        state = self.transport.state
        state.require_credential()
        nav = self.get_nav_info(state)
        if not nav.get('isLogin'):
            raise AuthError('登录已失效')
        return extract_user_info(nav)

    def logout(self) -> None:
        with self._login_lock:
            self.transport.clear()
        logger.info("[Session] logged out")
