"""
JSON archive - one pretty-printed array per domain

Files hold the entity list exactly as the backup returned it, with no
envelope, so they can be edited by hand and fed back into a restore.
"""
import json
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..errors import IoError
from ..utils.logger import get_logger

logger = get_logger('archive')


class BackupArchive:
    """Reads and writes per-domain JSON files under one directory.

    Example:
        >>> archive = BackupArchive('/data/backups')
        >>> path = archive.export_entities('following', relations)
        >>> archive.import_entities('following') == relations
        True
    """

    def __init__(self, base_path: str):
        self.base_path = base_path

    def path_for(self, domain: str, path: Optional[str] = None) -> str:
        """Resolve the file for a domain; relative paths land under ``base_path``."""
        if not path:
            path = f'{domain}.json'
        if not os.path.isabs(path):
            path = os.path.join(self.base_path, path)
        return path

    def export_entities(self, domain: str, items: List[Any], path: Optional[str] = None) -> str:
        """Write ``items`` as a JSON array.

        Returns:
            The file path written

        Raises:
            IoError: If the file cannot be written
        """
        target = self.path_for(domain, path)
        try:
            os.makedirs(os.path.dirname(target) or '.', exist_ok=True)
            with open(target, 'w', encoding='utf-8') as f:
                json.dump(list(items), f, ensure_ascii=False, indent=2)
        except (OSError, TypeError, ValueError) as e:
            raise IoError(f'写入文件失败: {target}: {e}', cause=e)
        logger.info(f"[Archive] exported {len(items)} {domain} items to {target}")
        return target

    def import_entities(self, domain: str, path: Optional[str] = None) -> List[Any]:
        """Read a JSON array previously written by ``export_entities``.

        Raises:
            IoError: If the file is missing, unreadable or not a JSON array
        """
        source = self.path_for(domain, path)
        try:
            with open(source, 'r', encoding='utf-8') as f:
                items = json.load(f)
        except OSError as e:
            raise IoError(f'读取文件失败: {source}: {e}', cause=e)
        except ValueError as e:
            raise IoError(f'文件不是有效的 JSON: {source}: {e}', cause=e)
        if not isinstance(items, list):
            raise IoError(f'文件内容不是数组: {source}')
        logger.info(f"[Archive] imported {len(items)} {domain} items from {source}")
        return items

    def list_archives(self) -> List[Dict[str, Any]]:
        """Describe every ``*.json`` file in the archive directory."""
        if not os.path.isdir(self.base_path):
            return []
        archives = []
        for name in sorted(os.listdir(self.base_path)):
            if not name.endswith('.json'):
                continue
            full = os.path.join(self.base_path, name)
            stat = os.stat(full)
            archives.append({
                'name': name,
                'domain': name[:-len('.json')],
                'size': stat.st_size,
                'modified': datetime.utcfromtimestamp(stat.st_mtime).isoformat() + 'Z',
            })
        return archives
