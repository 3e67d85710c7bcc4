"""
Following - the account's followed uploaders and their groups

Backed-up relations carry ``tag_names`` next to the platform's ``tag`` id
list. Ids are local to the source account; names are what restore maps on.
"""
from typing import Any, Dict, List

from ...errors import RemoteError
from ...utils.logger import get_logger
from ..client import endpoints
from ..client.pagination import OffsetPaginator
from ..client.transport import ApiClient
from ..sync.orchestrator import DomainAdapter, GroupTag, require_field

logger = get_logger('following')

# 默认分组，不可创建也不可分配
DEFAULT_TAG_ID = 0


class FollowingAdapter(DomainAdapter):
    name = 'following'
    label = '关注'
    grouped = True
    page_size = 50

    def list_groups(self, client: ApiClient) -> List[GroupTag]:
        data = client.get(endpoints.RELATION_TAGS) or []
        return [
            GroupTag(id=int(tag['tagid']), name=tag.get('name', ''))
            for tag in data
            if int(tag.get('tagid', DEFAULT_TAG_ID)) != DEFAULT_TAG_ID
        ]

    def fetch(self, client: ApiClient) -> List[Dict[str, Any]]:
        names = {tag.id: tag.name for tag in self.list_groups(client)}
        client.humanize()

        pager = OffsetPaginator(
            client,
            endpoints.FOLLOWING_LIST,
            {'vmid': client.account_id, 'order': 'attention'},
            page_size=self.page_size,
        )
        relations = pager.collect()
        for relation in relations:
            relation['tag_names'] = [
                names[tag_id] for tag_id in (relation.get('tag') or []) if tag_id in names
            ]
        logger.info(f"[Following] {len(relations)} relations, {len(names)} groups")
        return relations

    def groups_of(self, item: Dict[str, Any]) -> List[str]:
        return list(item.get('tag_names') or [])

    def create_group(self, client: ApiClient, name: str) -> int:
        data = client.post(endpoints.TAG_CREATE, {'tag': name}) or {}
        if data.get('tagid') is None:
            raise RemoteError(-1, '无法获取分组ID')
        return int(data['tagid'])

    def assign_groups(self, client: ApiClient, item: Dict[str, Any], group_ids: List[int]) -> None:
        client.post(endpoints.TAG_ADD_USERS, {
            'fids': require_field(item, 'mid'),
            'tagids': ','.join(str(tag_id) for tag_id in group_ids),
        })

    def apply(self, client: ApiClient, item: Dict[str, Any], target: Any = None) -> None:
        client.post(endpoints.RELATION_MODIFY, {
            'fid': require_field(item, 'mid'),
            'act': endpoints.ACT_FOLLOW,
            're_src': endpoints.RE_SRC_SPACE,
        })

    def remove(self, client: ApiClient, item: Dict[str, Any]) -> None:
        client.post(endpoints.RELATION_MODIFY, {
            'fid': require_field(item, 'mid'),
            'act': endpoints.ACT_UNFOLLOW,
            're_src': endpoints.RE_SRC_SPACE,
        })

    def describe(self, item: Dict[str, Any]) -> str:
        return f'UP主 "{item.get("uname", "")}" (mid: {item.get("mid")})'


class FollowerAdapter(DomainAdapter):
    """Accounts following this one. Backup only: followers cannot be restored."""

    name = 'followers'
    label = '粉丝'
    restorable = False
    clearable = False
    page_size = 50

    def fetch(self, client: ApiClient) -> List[Dict[str, Any]]:
        pager = OffsetPaginator(
            client,
            endpoints.FOLLOWER_LIST,
            {'vmid': client.account_id},
            page_size=self.page_size,
        )
        return pager.collect()

    def describe(self, item: Dict[str, Any]) -> str:
        return f'粉丝 "{item.get("uname", "")}" (mid: {item.get("mid")})'
