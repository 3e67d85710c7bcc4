"""
Show tracking - followed anime and drama seasons
"""
from typing import Any, Dict, List

from ..client import endpoints
from ..client.pagination import OffsetPaginator
from ..client.transport import ApiClient
from ..sync.orchestrator import DomainAdapter, require_field

# 1: 番剧  2: 追剧（电影/纪录片/电视剧等）
SEASON_TYPE_ANIME = 1
SEASON_TYPE_CINEMA = 2


class BangumiAdapter(DomainAdapter):
    page_size = 30

    def __init__(self, season_type: int = SEASON_TYPE_ANIME):
        self.season_type = season_type
        if season_type == SEASON_TYPE_ANIME:
            self.name, self.label = 'bangumi', '追番'
        else:
            self.name, self.label = 'cinema', '追剧'

    def fetch(self, client: ApiClient) -> List[Dict[str, Any]]:
        pager = OffsetPaginator(
            client,
            endpoints.BANGUMI_LIST,
            {'type': self.season_type, 'follow_status': 0, 'vmid': client.account_id},
            page_size=self.page_size,
            signed=True,
        )
        return pager.collect()

    def apply(self, client: ApiClient, item: Dict[str, Any], target: Any = None) -> None:
        client.post(endpoints.BANGUMI_FOLLOW, {'season_id': require_field(item, 'season_id')})

    def remove(self, client: ApiClient, item: Dict[str, Any]) -> None:
        client.post(endpoints.BANGUMI_UNFOLLOW, {'season_id': require_field(item, 'season_id')})

    def describe(self, item: Dict[str, Any]) -> str:
        return f'"{item.get("title", "")}" (season_id: {item.get("season_id")})'
