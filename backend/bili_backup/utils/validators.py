"""
输入验证工具

所有函数返回 (is_valid, error_message, cleaned_value)
"""
import re
from typing import Any, Optional, Tuple

from ..services.client.credentials import ACCOUNT_ID_FIELD, CSRF_FIELD, parse_cookie_field
from ..services.domains import DOMAINS
from ..services.sync.orchestrator import DEFAULT_BATCH_SIZE, RestoreOptions

_FILENAME_RE = re.compile(r'^[\w\-. ]+\.json$')


def validate_cookie_str(cookie_str: Any) -> Tuple[bool, Optional[str], str]:
    """
    验证 Cookie 字符串

    Args:
        cookie_str: 浏览器复制的 Cookie 字符串

    Returns:
        (is_valid, error_message, cleaned_cookie)
    """
    if not cookie_str:
        return False, 'Cookie 不能为空', ''

    if not isinstance(cookie_str, str):
        return False, 'Cookie 必须是字符串', ''

    cookie_str = cookie_str.strip()

    if len(cookie_str) > 10000:
        return False, 'Cookie 字符串过长', ''

    for field in ('SESSDATA', CSRF_FIELD, ACCOUNT_ID_FIELD):
        if not parse_cookie_field(cookie_str, field):
            return False, f"Cookie 缺少必要字段 '{field}'", ''

    return True, None, cookie_str


def validate_domain(domain: Any) -> Tuple[bool, Optional[str], str]:
    """验证数据类型名称"""
    if not isinstance(domain, str) or domain not in DOMAINS:
        return False, f'无效的数据类型，必须是 {list(DOMAINS)} 之一', ''
    return True, None, domain


def validate_delay_range(value: Any) -> Tuple[bool, Optional[str], Optional[Tuple[int, int]]]:
    """
    验证延迟区间（毫秒），接受 [min, max] 或 {"min": .., "max": ..}
    """
    if value is None:
        return True, None, None

    if isinstance(value, dict):
        value = [value.get('min'), value.get('max')]

    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return False, '延迟区间必须是 [min, max]', None

    try:
        low, high = int(value[0]), int(value[1])
    except (TypeError, ValueError):
        return False, '延迟区间必须是整数毫秒', None

    if low < 0 or high < low:
        return False, '延迟区间无效：需要 0 <= min <= max', None

    return True, None, (low, high)


def validate_restore_options(payload: Any) -> Tuple[bool, Optional[str], Optional[RestoreOptions]]:
    """
    从请求体构建还原选项

    批量大小的上限由各数据类型决定，在执行还原时检查
    """
    payload = payload or {}
    if not isinstance(payload, dict):
        return False, 'options 必须是对象', None

    batch_size = payload.get('batch_size', DEFAULT_BATCH_SIZE)
    if isinstance(batch_size, bool) or not isinstance(batch_size, int):
        return False, 'batch_size 必须是整数', None

    ok, error, delay_range = validate_delay_range(payload.get('delay_range'))
    if not ok:
        return False, error, None

    return True, None, RestoreOptions(
        batch_size=batch_size,
        continue_on_error=bool(payload.get('continue_on_error', False)),
        delay_range=delay_range,
        create_missing_groups=bool(payload.get('create_missing_groups', True)),
        clear_existing=bool(payload.get('clear_existing', False)),
    )


def validate_filename(filename: Any) -> Tuple[bool, Optional[str], Optional[str]]:
    """验证备份文件名：只允许备份目录下的 .json 文件名，不允许路径"""
    if filename is None or filename == '':
        return True, None, None

    if not isinstance(filename, str):
        return False, '文件名必须是字符串', None

    filename = filename.strip()
    if not _FILENAME_RE.match(filename) or '..' in filename:
        return False, '文件名只能包含字母、数字、下划线、连字符和点，并以 .json 结尾', None

    return True, None, filename


def validate_tag_name(name: Any) -> Tuple[bool, Optional[str], str]:
    """验证关注分组名称"""
    if not isinstance(name, str) or not name.strip():
        return False, '分组名称不能为空', ''
    name = name.strip()
    if len(name) > 16:
        return False, '分组名称不能超过 16 个字符', ''
    return True, None, name
