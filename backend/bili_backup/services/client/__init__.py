"""
Platform Client Module

- signer: WBI query signing
- credentials: immutable credential / session snapshot
- delay_manager: randomized humanization pauses
- transport: pooled, throttled, retrying HTTP access
- envelope: ``{code, message, data}`` unwrapping
- pagination: offset and cursor paginators
- endpoints: platform URL catalogue
"""
from .signer import Signer, SigningKeyPair, extract_key, get_mixin_key
from .credentials import Credential, SessionState, parse_cookie_field
from .delay_manager import HumanDelay
from .transport import ApiClient, Transport
from .pagination import CursorPaginator, OffsetPaginator, Page

__all__ = [
    'Signer',
    'SigningKeyPair',
    'extract_key',
    'get_mixin_key',
    'Credential',
    'SessionState',
    'parse_cookie_field',
    'HumanDelay',
    'ApiClient',
    'Transport',
    'CursorPaginator',
    'OffsetPaginator',
    'Page',
]
