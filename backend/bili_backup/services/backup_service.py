"""
Backup Service - Entry points used by the HTTP layer

Resolves domain names to adapters and wires the shared session transport,
the sync orchestrator and the JSON archive together.
"""
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app

from ..extensions import session_manager
from ..utils.logger import get_logger, log_sync_event
from .archive import BackupArchive
from .domains import FollowingAdapter, get_adapter
from .sync.orchestrator import GroupTag, RestoreOptions, SyncOrchestrator
from .sync.outcome import BatchOutcome

logger = get_logger('backup_service')


class BackupService:
    """Backup / restore / clear / export / import for every domain."""

    @staticmethod
    def _orchestrator() -> SyncOrchestrator:
        return SyncOrchestrator(session_manager.transport)

    @staticmethod
    def _adapter(domain: str):
        return get_adapter(domain, current_app.config.get('BILI_CURSOR_MAX_ITERATIONS', 100))

    @staticmethod
    def _archive() -> BackupArchive:
        return BackupArchive(current_app.config['BACKUP_PATH'])

    @staticmethod
    def backup(domain: str, delay_range: Optional[Tuple[int, int]] = None) -> List[Dict[str, Any]]:
        adapter = BackupService._adapter(domain)
        items = BackupService._orchestrator().backup(adapter, delay_range)
        log_sync_event(domain, 'backup', {'count': len(items)})
        return items

    @staticmethod
    def restore(domain: str, items: List[Dict[str, Any]], options: RestoreOptions) -> BatchOutcome:
        adapter = BackupService._adapter(domain)
        outcome = BackupService._orchestrator().restore(adapter, items, options)
        log_sync_event(domain, 'restore', {
            'success': outcome.success_count,
            'failed': outcome.failed_count,
            'state': outcome.state.value,
        })
        return outcome

    @staticmethod
    def clear(domain: str, bulk: bool = False, delay_range: Optional[Tuple[int, int]] = None) -> BatchOutcome:
        adapter = BackupService._adapter(domain)
        outcome = BackupService._orchestrator().clear(adapter, delay_range, bulk=bulk)
        log_sync_event(domain, 'clear', {'success': outcome.success_count, 'failed': outcome.failed_count})
        return outcome

    @staticmethod
    def export(domain: str, items: Optional[List[Dict[str, Any]]] = None, filename: Optional[str] = None) -> Dict[str, Any]:
        """Write ``items`` (or a fresh backup when omitted) to the archive."""
        BackupService._adapter(domain)
        if items is None:
            items = BackupService.backup(domain)
        path = BackupService._archive().export_entities(domain, items, filename)
        return {'path': path, 'count': len(items)}

    @staticmethod
    def import_items(domain: str, filename: Optional[str] = None) -> List[Dict[str, Any]]:
        BackupService._adapter(domain)
        return BackupService._archive().import_entities(domain, filename)

    @staticmethod
    def list_archives() -> List[Dict[str, Any]]:
        return BackupService._archive().list_archives()

    # ==================== Relation tags ====================

    @staticmethod
    def list_relation_tags() -> List[GroupTag]:
        client = session_manager.transport.pinned()
        client.require_login()
        return FollowingAdapter().list_groups(client)

    @staticmethod
    def create_relation_tag(name: str) -> int:
        client = session_manager.transport.pinned()
        client.require_login()
        tag_id = FollowingAdapter().create_group(client, name)
        logger.info(f"[Following] created tag \"{name}\" -> {tag_id}")
        return tag_id
