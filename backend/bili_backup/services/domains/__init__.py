"""
Domain adapters

One adapter per account-data domain. ``get_adapter`` resolves the domain
names used by the HTTP layer and the JSON archive.
"""
from ...errors import ParamError
from .bangumi import SEASON_TYPE_ANIME, SEASON_TYPE_CINEMA, BangumiAdapter
from .blacklist import BlacklistAdapter
from .favorites import FavoritesAdapter
from .following import FollowerAdapter, FollowingAdapter
from .history import HistoryAdapter
from .toview import ToViewAdapter

DOMAINS = ('following', 'followers', 'blacklist', 'favorites', 'bangumi', 'cinema', 'toview', 'history')


def get_adapter(domain: str, cursor_max_iterations: int = 100):
    """Build the adapter for a domain name.

    Raises:
        ParamError: If the domain is unknown
    """
    if domain == 'following':
        return FollowingAdapter()
    if domain == 'followers':
        return FollowerAdapter()
    if domain == 'blacklist':
        return BlacklistAdapter()
    if domain == 'favorites':
        return FavoritesAdapter()
    if domain == 'bangumi':
        return BangumiAdapter(SEASON_TYPE_ANIME)
    if domain == 'cinema':
        return BangumiAdapter(SEASON_TYPE_CINEMA)
    if domain == 'toview':
        return ToViewAdapter()
    if domain == 'history':
        return HistoryAdapter(max_iterations=cursor_max_iterations)
    raise ParamError(f'未知的数据类型: {domain}')


__all__ = [
    'DOMAINS',
    'get_adapter',
    'BangumiAdapter',
    'BlacklistAdapter',
    'FavoritesAdapter',
    'FollowerAdapter',
    'FollowingAdapter',
    'HistoryAdapter',
    'ToViewAdapter',
]
