"""
Platform Transport - Pooled, throttled, retrying HTTP access

This module owns the single requests.Session used to talk to the platform:
1. Connection pooling via HTTPAdapter (reused TCP/TLS sessions)
2. A bounded pool of request permits shared by every caller
3. Fixed-interval retry on connection errors and timeouts
4. Browser-like fixed headers, plus the cookie of the current session
5. Randomized humanization pauses between operations

Session state (credential + signer) is an immutable snapshot swapped under a
lock. ``pinned()`` hands out a client bound to the snapshot current at that
moment so a whole backup/restore run sees one consistent credential.
"""
import threading
import time
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter

from ...errors import AuthError, NetworkError
from ...utils.logger import get_logger
from .credentials import Credential, SessionState
from .delay_manager import HumanDelay, validate_delay_range
from .envelope import parse_json, unwrap
from .signer import Signer, render_query

logger = get_logger('transport')

USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

DEFAULT_HEADERS = {
    'User-Agent': USER_AGENT,
    'Referer': 'https://www.bilibili.com/',
    'Accept': 'application/json, text/plain, */*',
    'Accept-Language': 'zh-CN,zh;q=0.9,en;q=0.8',
}


def build_session(pool_connections: int = 10, pool_maxsize: int = 10) -> requests.Session:
    """Create a pooled session carrying the fixed headers.

    Retries are handled by Transport itself, so the adapter never retries.
    """
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=pool_connections,
        pool_maxsize=pool_maxsize,
        max_retries=0,
        pool_block=False
    )
    session.mount('http://', adapter)
    session.mount('https://', adapter)
    session.headers.update(DEFAULT_HEADERS)
    return session


class Transport:
    """Shared HTTP transport for all platform calls.

    Example:
        >>> transport = Transport(max_concurrency=2)
        >>> transport.set_credential(Credential.from_cookie(cookie))
        >>> data = transport.call('GET', NAV_URL)
        >>> client = transport.pinned()
        >>> client.get(FOLLOWINGS_URL, {'vmid': client.account_id})
    """

    def __init__(
        self,
        max_concurrency: int = 2,
        max_retries: int = 3,
        retry_interval: float = 1.0,
        timeout: float = 30.0,
        delay: Optional[HumanDelay] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """Initialize the transport.

        Args:
            max_concurrency: Number of request permits
            max_retries: Attempts per request on connection errors/timeouts
            retry_interval: Seconds between attempts
            timeout: Per-request network timeout in seconds
            delay: Humanization delay, defaults to 1000-3000ms
            session: Pre-built requests session (tests inject a mock)
            sleep: Blocking sleep used between retries
        """
        if max_concurrency < 1:
            raise ValueError('max_concurrency must be >= 1')
        if max_retries < 1:
            raise ValueError('max_retries must be >= 1')

        self.max_concurrency = max_concurrency
        self.max_retries = max_retries
        self.retry_interval = retry_interval
        self.timeout = timeout
        self.delay = delay or HumanDelay()
        self._session = session or build_session()
        self._sleep = sleep

        self._permits = threading.BoundedSemaphore(max_concurrency)
        self._state = SessionState()
        self._state_lock = threading.Lock()

        self._stats = {'requests': 0, 'retries': 0, 'errors': 0}
        self._stats_lock = threading.Lock()

        logger.info(
            f"[Transport] Initialized: permits={max_concurrency}, "
            f"retries={max_retries}, interval={retry_interval}s, timeout={timeout}s"
        )

    # ==================== Session state ====================

    @property
    def state(self) -> SessionState:
        with self._state_lock:
            return self._state

    def swap_state(self, state: SessionState) -> SessionState:
        """Atomically replace the session state, returning the previous one."""
        with self._state_lock:
            previous, self._state = self._state, state
        return previous

    def set_credential(self, credential: Optional[Credential]) -> None:
        """Replace the credential, dropping the signer when logging out."""
        with self._state_lock:
            signer = self._state.signer if credential is not None else None
            self._state = SessionState(credential=credential, signer=signer)

    def set_signer(self, signer: Optional[Signer]) -> None:
        with self._state_lock:
            self._state = SessionState(credential=self._state.credential, signer=signer)

    def clear(self) -> None:
        self.swap_state(SessionState())

    # ==================== Requests ====================

    def _headers_for(self, state: SessionState) -> Dict[str, str]:
        if state.credential is not None:
            return {'Cookie': state.credential.cookie}
        return {}

    def execute(
        self,
        method: str,
        url: str,
        params: Optional[Mapping] = None,
        data: Optional[Mapping] = None,
        json: Any = None,
        signed: bool = False,
        state: Optional[SessionState] = None
    ) -> requests.Response:
        """Send one request under a permit, retrying network failures.

        Connection errors and timeouts are retried here at a fixed
        ``retry_interval``, up to ``max_retries`` attempts. The mounted
        HTTPAdapter has ``max_retries=0`` and never backs off on its own.

        Args:
            method: HTTP method
            url: Absolute endpoint URL
            params: Query parameters
            data: Form body
            json: JSON body
            signed: Sign query parameters with the session's signer
            state: Session snapshot to use, defaults to the current one

        Returns:
            The 2xx response

        Raises:
            AuthError: If ``signed`` and the snapshot has no signer
            NetworkError: On non-2xx status or after exhausting retries
        """
        state = state if state is not None else self.state
        if signed:
            # Rendered by hand so the sent query matches the hashed one
            query = render_query(state.require_signer().sign(params))
            url = f'{url}?{query}'
            params = None

        headers = self._headers_for(state)
        last_error: Optional[Exception] = None

        with self._permits:
            for attempt in range(1, self.max_retries + 1):
                with self._stats_lock:
                    self._stats['requests'] += 1
                try:
                    response = self._session.request(
                        method,
                        url,
                        params=params,
                        data=data,
                        json=json,
                        headers=headers,
                        timeout=self.timeout,
                    )
                except (requests.ConnectionError, requests.Timeout) as e:
                    last_error = e
                    with self._stats_lock:
                        self._stats['errors'] += 1
                    if attempt < self.max_retries:
                        with self._stats_lock:
                            self._stats['retries'] += 1
                        logger.warning(
                            f"[Transport] {method} {url} failed "
                            f"(attempt {attempt}/{self.max_retries}): {e}"
                        )
                        self._sleep(self.retry_interval)
                    continue
                except requests.RequestException as e:
                    with self._stats_lock:
                        self._stats['errors'] += 1
                    raise NetworkError(f'{method} {url}: {e}')

                if not 200 <= response.status_code < 300:
                    raise NetworkError(f'HTTP {response.status_code}: {method} {url}')
                return response

        logger.error(f"[Transport] {method} {url} gave up after {self.max_retries} attempts")
        raise NetworkError(f'请求失败（已重试 {self.max_retries} 次）: {last_error}')

    def call(
        self,
        method: str,
        url: str,
        params: Optional[Mapping] = None,
        data: Optional[Mapping] = None,
        signed: bool = False,
        state: Optional[SessionState] = None
    ) -> Any:
        """Execute and unwrap the response envelope.

        Returns:
            The envelope's ``data`` field

        Raises:
            RemoteError: If the envelope code is non-zero
        """
        response = self.execute(method, url, params=params, data=data, signed=signed, state=state)
        return unwrap(parse_json(response))

    def humanize(self, delay_range: Optional[Tuple[int, int]] = None) -> float:
        return self.delay.wait(delay_range)

    def pinned(self, delay_range: Optional[Tuple[int, int]] = None) -> 'ApiClient':
        """Return a client bound to the current session snapshot.

        Args:
            delay_range: Optional ``(min_ms, max_ms)`` humanization override

        Raises:
            ParamError: If ``delay_range`` is malformed
        """
        if delay_range is not None:
            delay_range = validate_delay_range(delay_range)
        return ApiClient(self, self.state, delay_range)

    def get_stats(self) -> Dict:
        with self._stats_lock:
            return self._stats.copy()


class ApiClient:
    """A view of the transport pinned to one session snapshot.

    Domain adapters receive one of these per run. Logging in or out while the
    run is active does not change which credential the run uses.
    """

    def __init__(
        self,
        transport: Transport,
        state: SessionState,
        delay_range: Optional[Tuple[int, int]] = None
    ):
        self.transport = transport
        self.state = state
        self.delay_range = delay_range

    @property
    def credential(self) -> Credential:
        return self.state.require_credential()

    @property
    def account_id(self) -> str:
        return self.credential.account_id

    @property
    def csrf(self) -> str:
        return self.credential.csrf_token

    def get(self, url: str, params: Optional[Mapping] = None, signed: bool = False) -> Any:
        return self.transport.call('GET', url, params=params, signed=signed, state=self.state)

    def post(self, url: str, data: Optional[Mapping] = None) -> Any:
        """POST a form body, adding the CSRF token."""
        form = dict(data or {})
        form.setdefault('csrf', self.csrf)
        return self.transport.call('POST', url, data=form, state=self.state)

    def humanize(self) -> float:
        return self.transport.humanize(self.delay_range)

    def require_login(self) -> Credential:
        """Raise AuthError unless the pinned snapshot carries a credential."""
        if not self.state.is_logged_in:
            raise AuthError('未登录')
        return self.state.credential
