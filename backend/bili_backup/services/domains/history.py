"""
Watch history

The history endpoint pages by a structured cursor ``{max, view_at, business}``
and signals the end with an empty list. History cannot be written back, so
the domain supports backup and clear only.
"""
from typing import Any, Dict, List, Optional, Tuple

from ..client import endpoints
from ..client.pagination import DEFAULT_MAX_ITERATIONS, CursorPaginator
from ..client.transport import ApiClient
from ..sync.orchestrator import DomainAdapter, require_field

DEFAULT_BUSINESS = 'archive'


def decode_history(data: Any) -> Tuple[List[Any], Optional[Dict[str, Any]], bool]:
    items = data.get('list') or []
    cursor = data.get('cursor') or {}
    if not items or not cursor.get('max'):
        return items, None, False
    next_cursor = {
        'max': cursor['max'],
        'view_at': cursor.get('view_at', 0),
        'business': cursor.get('business') or '',
    }
    return items, next_cursor, True


def history_kid(item: Dict[str, Any]) -> str:
    """Delete key ``<business>_<oid>`` for one history record."""
    detail = item.get('history') or {}
    business = detail.get('business') or DEFAULT_BUSINESS
    return f'{business}_{detail.get("oid")}'


class HistoryAdapter(DomainAdapter):
    name = 'history'
    label = '历史记录'
    restorable = False
    supports_bulk_clear = True

    def __init__(self, max_iterations: int = DEFAULT_MAX_ITERATIONS):
        self.max_iterations = max_iterations

    def fetch(self, client: ApiClient) -> List[Dict[str, Any]]:
        pager = CursorPaginator(
            client,
            endpoints.HISTORY_LIST,
            decode=decode_history,
            max_iterations=self.max_iterations,
        )
        return pager.collect()

    def remove(self, client: ApiClient, item: Dict[str, Any]) -> None:
        require_field(require_field(item, 'history'), 'oid')
        client.post(endpoints.HISTORY_DELETE, {'kid': history_kid(item)})

    def bulk_clear(self, client: ApiClient) -> None:
        client.post(endpoints.HISTORY_CLEAR)

    def describe(self, item: Dict[str, Any]) -> str:
        return f'"{item.get("title", "")}" ({history_kid(item)})'
