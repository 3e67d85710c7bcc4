"""
Watch later - the toview queue
"""
from typing import Any, Dict, List

from ..client import endpoints
from ..client.transport import ApiClient
from ..sync.orchestrator import DomainAdapter, require_field


class ToViewAdapter(DomainAdapter):
    name = 'toview'
    label = '稍后再看'
    supports_bulk_clear = True

    def fetch(self, client: ApiClient) -> List[Dict[str, Any]]:
        # 单次返回全部条目，无分页
        data = client.get(endpoints.TOVIEW_LIST) or {}
        return data.get('list') or []

    def apply(self, client: ApiClient, item: Dict[str, Any], target: Any = None) -> None:
        client.post(endpoints.TOVIEW_ADD, {'aid': require_field(item, 'aid')})

    def remove(self, client: ApiClient, item: Dict[str, Any]) -> None:
        client.post(endpoints.TOVIEW_DEL, {'aid': require_field(item, 'aid')})

    def bulk_clear(self, client: ApiClient) -> None:
        client.post(endpoints.TOVIEW_CLEAR)

    def describe(self, item: Dict[str, Any]) -> str:
        return f'"{item.get("title", "")}" (aid: {item.get("aid")})'
