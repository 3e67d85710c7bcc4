"""
Platform endpoint catalogue
"""

API_BASE = 'https://api.bilibili.com'

# 账号
NAV = f'{API_BASE}/x/web-interface/nav'

# 关系链
FOLLOWING_LIST = f'{API_BASE}/x/relation/followings'
FOLLOWER_LIST = f'{API_BASE}/x/relation/followers'
RELATION_TAGS = f'{API_BASE}/x/relation/tags'
RELATION_MODIFY = f'{API_BASE}/x/relation/modify'
TAG_CREATE = f'{API_BASE}/x/relation/tag/create'
TAG_ADD_USERS = f'{API_BASE}/x/relation/tags/addUsers'
BLACK_LIST = f'{API_BASE}/x/relation/blacks'

# 收藏夹
FAV_FOLDER_LIST = f'{API_BASE}/x/v3/fav/folder/created/list-all'
FAV_RESOURCES = f'{API_BASE}/x/v3/fav/resource/list'
FAV_FOLDER_CREATE = f'{API_BASE}/x/v3/fav/folder/add'
FAV_RESOURCE_DEAL = f'{API_BASE}/x/v3/fav/resource/deal'
FAV_BATCH_DEL = f'{API_BASE}/x/v3/fav/resource/batch-del'

# 追番/追剧
BANGUMI_LIST = f'{API_BASE}/x/space/bangumi/follow/list'
BANGUMI_FOLLOW = f'{API_BASE}/pgc/web/follow/add'
BANGUMI_UNFOLLOW = f'{API_BASE}/pgc/web/follow/del'

# 历史记录
HISTORY_LIST = f'{API_BASE}/x/web-interface/history/cursor'
HISTORY_DELETE = f'{API_BASE}/x/v2/history/delete'
HISTORY_CLEAR = f'{API_BASE}/x/v2/history/clear'

# 稍后再看
TOVIEW_LIST = f'{API_BASE}/x/v2/history/toview'
TOVIEW_ADD = f'{API_BASE}/x/v2/history/toview/add'
TOVIEW_DEL = f'{API_BASE}/x/v2/history/toview/del'
TOVIEW_CLEAR = f'{API_BASE}/x/v2/history/toview/clear'

# relation/modify 的 act 取值
ACT_FOLLOW = 1
ACT_UNFOLLOW = 2
ACT_BLOCK = 5
ACT_UNBLOCK = 6

# 关注来源：空间页
RE_SRC_SPACE = 11
