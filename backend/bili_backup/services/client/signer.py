"""
WBI Signer - Query parameter signing for protected endpoints

Some platform endpoints reject requests whose query string does not carry a
``w_rid`` digest. The digest is derived from two rotating key fragments
published by the navigation endpoint (``wbi_img.img_url`` / ``sub_url``).
"""
import hashlib
import time
from dataclasses import dataclass
from typing import Dict, Mapping, Optional
from urllib.parse import quote

# Fixed permutation applied to img_key + sub_key
MIXIN_KEY_ENC_TAB = [
    46, 47, 18, 2, 53, 8, 23, 32, 15, 50, 10, 31, 58, 3, 45, 35, 27, 43, 5, 49,
    33, 9, 42, 19, 29, 28, 14, 39, 12, 38, 41, 13, 37, 48, 7, 16, 24, 55, 40, 61,
    26, 17, 0, 1, 60, 51, 30, 4, 22, 25, 54, 21, 56, 59, 6, 63, 57, 62, 11, 36,
    20, 34, 44, 52,
]

MIXIN_KEY_LENGTH = 32

# Characters the platform strips from values before hashing
_FILTERED_CHARS = "!'()*"


def extract_key(url: Optional[str]) -> str:
    """Extract a key fragment from a ``wbi_img`` URL.

    Takes the last path segment and drops everything from its first ``.``.

    Example:
        >>> extract_key('https://i0.hdslb.com/bfs/wbi/7cd084941338484aae1ad9425b84077c.png')
        '7cd084941338484aae1ad9425b84077c'
    """
    if not url:
        return ''
    return url.rsplit('/', 1)[-1].split('.', 1)[0]


def get_mixin_key(img_key: str, sub_key: str) -> str:
    """Permute ``img_key + sub_key`` and keep the first 32 characters.

    Indices past the end of the raw string are skipped, so short or empty
    keys yield a short or empty mixin key rather than an error.
    """
    raw = img_key + sub_key
    mixed = ''.join(raw[i] for i in MIXIN_KEY_ENC_TAB if i < len(raw))
    return mixed[:MIXIN_KEY_LENGTH]


def _clean_value(value) -> str:
    text = str(value)
    return ''.join(ch for ch in text if ch not in _FILTERED_CHARS)


def render_query(params: Mapping) -> str:
    """Render ``k=v&...`` in ascending key order with percent-encoded values.

    This is both the hashed string and the query actually sent, matching
    what the platform web client signs.
    """
    return '&'.join(
        f'{key}={quote(_clean_value(params[key]), safe="")}'
        for key in sorted(params)
    )


@dataclass(frozen=True)
class SigningKeyPair:
    """The two key fragments published by the navigation endpoint."""
    img_key: str
    sub_key: str

    @classmethod
    def from_urls(cls, img_url: Optional[str], sub_url: Optional[str]) -> 'SigningKeyPair':
        return cls(img_key=extract_key(img_url), sub_key=extract_key(sub_url))

    @property
    def mixin_key(self) -> str:
        return get_mixin_key(self.img_key, self.sub_key)


class Signer:
    """Adds ``wts`` and ``w_rid`` to a parameter set.

    The signer is immutable once built; a key rotation means building a new
    one and swapping it into the session state.

    Example:
        >>> signer = Signer(SigningKeyPair('7cd0...', '4932...'))
        >>> signed = signer.sign({'mid': 123})
        >>> sorted(signed) == ['mid', 'w_rid', 'wts']
        True
    """

    def __init__(self, keys: SigningKeyPair, clock=time.time):
        """Initialize the signer.

        Args:
            keys: Key fragments from the navigation endpoint
            clock: Callable returning the current Unix time, overridable in tests
        """
        self.keys = keys
        self._mixin_key = keys.mixin_key
        self._clock = clock

    @property
    def mixin_key(self) -> str:
        return self._mixin_key

    def compute_w_rid(self, params: Mapping) -> str:
        """MD5 of the rendered query plus the mixin key, as 32 lowercase hex chars."""
        query = render_query(params)
        return hashlib.md5((query + self._mixin_key).encode('utf-8')).hexdigest()

    def sign(self, params: Optional[Mapping] = None) -> Dict[str, str]:
        """Return a new dict holding ``params`` plus ``wts`` and ``w_rid``.

        A ``wts`` already present in ``params`` is kept, which makes the
        result reproducible for a pinned timestamp. Any stale ``w_rid`` is
        discarded before hashing.

        Args:
            params: Query parameters to sign

        Returns:
            Signed parameters, values rendered as strings; the signature is
            ``signed['w_rid']``
        """
        signed = {key: str(value) for key, value in (params or {}).items() if key != 'w_rid'}
        if 'wts' not in signed:
            signed['wts'] = str(int(self._clock()))
        signed['w_rid'] = self.compute_w_rid(signed)
        return signed
