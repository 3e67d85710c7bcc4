"""
Blacklist - blocked accounts
"""
from typing import Any, Dict, List

from ..client import endpoints
from ..client.pagination import OffsetPaginator
from ..client.transport import ApiClient
from ..sync.orchestrator import DomainAdapter, require_field


class BlacklistAdapter(DomainAdapter):
    name = 'blacklist'
    label = '黑名单'
    page_size = 50

    def fetch(self, client: ApiClient) -> List[Dict[str, Any]]:
        return OffsetPaginator(client, endpoints.BLACK_LIST, page_size=self.page_size).collect()

    def apply(self, client: ApiClient, item: Dict[str, Any], target: Any = None) -> None:
        client.post(endpoints.RELATION_MODIFY, {
            'fid': require_field(item, 'mid'),
            'act': endpoints.ACT_BLOCK,
            're_src': endpoints.RE_SRC_SPACE,
        })

    def remove(self, client: ApiClient, item: Dict[str, Any]) -> None:
        client.post(endpoints.RELATION_MODIFY, {
            'fid': require_field(item, 'mid'),
            'act': endpoints.ACT_UNBLOCK,
            're_src': endpoints.RE_SRC_SPACE,
        })

    def describe(self, item: Dict[str, Any]) -> str:
        return f'用户 "{item.get("uname", "")}" (mid: {item.get("mid")})'
