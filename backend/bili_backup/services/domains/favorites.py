"""
Favorites - user-created folders and the media saved in them

A backed-up entity is one folder: the folder-list record plus a ``medias``
list. Folders are capacity bounded: the default folder holds 50000 items, a
user-created one 1000. Restore puts the default folder's media into the
destination's default folder and recreates every other folder.
"""
from typing import Any, Dict, List, Tuple

from ...errors import ParamError, RemoteError
from ...utils.logger import get_logger
from ..client import endpoints
from ..client.pagination import OffsetPaginator
from ..client.transport import ApiClient
from ..sync.orchestrator import ContainerAdapter, ContainerSpec, require_field

logger = get_logger('favorites')

# resource/deal 的资源类型：视频稿件
MEDIA_TYPE_VIDEO = 2


def is_default_folder(folder: Dict[str, Any]) -> bool:
    """Bit 1 of ``attr`` is 0 only for the default folder."""
    return ((int(folder.get('attr') or 0) >> 1) & 1) != 1


def folder_privacy(folder: Dict[str, Any]) -> int:
    """Bit 0 of ``attr``: 1 private, 0 public."""
    return int(folder.get('attr') or 0) & 1


def decode_medias(data: Any) -> Tuple[List[Any], int]:
    info = data.get('info') or {}
    return (data.get('medias') or [], int(info.get('media_count') or 0))


class FavoritesAdapter(ContainerAdapter):
    name = 'favorites'
    label = '收藏夹'
    page_size = 20

    def list_folders(self, client: ApiClient) -> List[Dict[str, Any]]:
        data = client.get(endpoints.FAV_FOLDER_LIST, {'up_mid': client.account_id, 'type': 0}) or {}
        return data.get('list') or []

    def fetch_folder_media(self, client: ApiClient, folder_id: Any) -> List[Dict[str, Any]]:
        pager = OffsetPaginator(
            client,
            endpoints.FAV_RESOURCES,
            {'media_id': folder_id, 'platform': 'web'},
            page_size=self.page_size,
            decode=decode_medias,
        )
        return pager.collect()

    def fetch(self, client: ApiClient) -> List[Dict[str, Any]]:
        folders = []
        for folder in self.list_folders(client):
            client.humanize()
            medias = self.fetch_folder_media(client, folder['id']) if folder.get('media_count') else []
            logger.info(f"[Favorites] \"{folder.get('title')}\": {len(medias)} items")
            folders.append(dict(folder, medias=medias))
        return folders

    # -------- containers --------

    def containers(self, entities):
        if any(not isinstance(folder, dict) for folder in entities):
            raise ParamError('收藏夹条目必须是对象')
        return [
            (
                ContainerSpec(
                    title=folder.get('title', ''),
                    intro=folder.get('intro') or '',
                    privacy=folder_privacy(folder),
                    is_default=is_default_folder(folder),
                ),
                list(folder.get('medias') or []),
            )
            for folder in entities
        ]

    def resolve_default(self, client: ApiClient) -> Tuple[Any, int]:
        for folder in self.list_folders(client):
            if is_default_folder(folder):
                return folder['id'], int(folder.get('media_count') or 0)
        raise RemoteError(-404, '未找到默认收藏夹')

    def create_container(self, client: ApiClient, spec: ContainerSpec) -> Any:
        data = client.post(endpoints.FAV_FOLDER_CREATE, {
            'title': spec.title,
            'intro': spec.intro,
            'privacy': spec.privacy,
        }) or {}
        folder_id = data.get('id')
        if not folder_id:
            raise RemoteError(-1, '无法获取收藏夹ID')
        logger.info(f"[Favorites] created folder \"{spec.title}\" -> {folder_id}")
        return folder_id

    def describe_container(self, spec: ContainerSpec) -> str:
        return f'收藏夹 "{spec.title}"'

    # -------- items --------

    def apply(self, client: ApiClient, item: Dict[str, Any], target: Any = None) -> None:
        client.post(endpoints.FAV_RESOURCE_DEAL, {
            'rid': require_field(item, 'id'),
            'type': item.get('type') or MEDIA_TYPE_VIDEO,
            'add_media_ids': target,
            'del_media_ids': '',
        })

    def removal_targets(self, client: ApiClient) -> List[Dict[str, Any]]:
        targets = []
        for folder in self.list_folders(client):
            if not folder.get('media_count'):
                continue
            client.humanize()
            for media in self.fetch_folder_media(client, folder['id']):
                targets.append(dict(media, folder_id=folder['id'], folder_title=folder.get('title', '')))
        return targets

    def remove(self, client: ApiClient, item: Dict[str, Any]) -> None:
        client.post(endpoints.FAV_BATCH_DEL, {
            'media_id': require_field(item, 'folder_id'),
            'resources': f'{require_field(item, "id")}:{item.get("type") or MEDIA_TYPE_VIDEO}',
        })

    def describe(self, item: Dict[str, Any]) -> str:
        return f'视频 "{item.get("title", "")}" (id: {item.get("id")})'
