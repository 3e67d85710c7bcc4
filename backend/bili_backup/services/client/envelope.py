"""
Response envelope handling

Every platform endpoint answers ``{"code": int, "message": str, "data": ...}``.
Code 0 is success; anything else becomes a RemoteError carrying the code.
"""
from typing import Any

import requests

from ...errors import NetworkError, RemoteError


def parse_json(response: requests.Response) -> Any:
    """Decode a response body, mapping malformed JSON to NetworkError."""
    try:
        return response.json()
    except ValueError as e:
        raise NetworkError(f'响应不是有效的 JSON: {e}')


def unwrap(payload: Any) -> Any:
    """Return ``data`` from an envelope, or raise RemoteError on a non-zero code.

    Raises:
        NetworkError: If the payload is not an envelope at all
        RemoteError: If ``code`` is not 0
    """
    if not isinstance(payload, dict) or 'code' not in payload:
        raise NetworkError('响应缺少 code 字段')
    code = payload.get('code')
    if code != 0:
        message = payload.get('message') or payload.get('msg') or ''
        raise RemoteError(code, message)
    return payload.get('data')
