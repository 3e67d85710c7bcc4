"""
Sync Orchestrator - Generic backup / restore / clear over domain adapters

Every account-data domain (following, favorites, blacklist, ...) is expressed
as a DomainAdapter. The orchestrator owns the parts they share:

1. Pinning one session snapshot for the whole run
2. Group-tag remapping by name before a restore
3. Capacity splitting for container domains (favorites folders)
4. Batching, per-item error capture and the continue-on-error policy
5. Humanization pauses between mutations

State machine of a restore:
    idle -> mapping_groups -> applying_batch(i) -> applying_batch(i+1) | aborted | completed
"""
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ...errors import BiliError, ParamError
from ...utils.logger import get_logger
from ..client.transport import ApiClient, Transport
from .outcome import BatchOutcome, RestoreState

logger = get_logger('orchestrator')

DEFAULT_BATCH_SIZE = 20


@dataclass(frozen=True)
class GroupTag:
    """A named group on one account. Names are portable, ids are not."""
    id: int
    name: str


@dataclass(frozen=True)
class ContainerSpec:
    """Destination container description (a favorites folder)."""
    title: str
    intro: str = ''
    privacy: int = 0
    is_default: bool = False

    def overflow(self, index: int) -> 'ContainerSpec':
        """Sibling used once this container is full, named ``"<title> (<index>)"``."""
        return replace(self, title=f'{self.title} ({index})', is_default=False)


@dataclass
class RestoreOptions:
    batch_size: int = DEFAULT_BATCH_SIZE
    continue_on_error: bool = False
    delay_range: Optional[Tuple[int, int]] = None
    create_missing_groups: bool = True
    clear_existing: bool = False

    def validate(self, adapter: 'DomainAdapter') -> None:
        """Raise ParamError if the batch size is outside ``1..adapter.max_batch_size``."""
        if not isinstance(self.batch_size, int) or isinstance(self.batch_size, bool):
            raise ParamError('batch_size 必须是整数')
        if self.batch_size < 1:
            raise ParamError('batch_size 必须大于 0')
        if self.batch_size > adapter.max_batch_size:
            raise ParamError(f'batch_size 不能超过 {adapter.max_batch_size}')


class DomainAdapter:
    """Capability interface implemented once per account-data domain.

    Required: ``fetch``, ``apply``, ``remove``, ``describe``.
    Grouped domains additionally set ``grouped = True`` and implement
    ``groups_of``, ``list_groups``, ``create_group`` and ``assign_groups``.
    """

    name = ''
    label = ''
    max_batch_size = DEFAULT_BATCH_SIZE
    grouped = False
    restorable = True
    clearable = True
    supports_bulk_clear = False

    def fetch(self, client: ApiClient) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def removal_targets(self, client: ApiClient) -> List[Dict[str, Any]]:
        """Entities that ``clear`` should remove; by default the backup listing."""
        return self.fetch(client)

    def apply(self, client: ApiClient, item: Dict[str, Any], target: Any = None) -> None:
        raise NotImplementedError

    def remove(self, client: ApiClient, item: Dict[str, Any]) -> None:
        raise NotImplementedError

    def describe(self, item: Dict[str, Any]) -> str:
        raise NotImplementedError

    def bulk_clear(self, client: ApiClient) -> None:
        """Remove everything with one call, for domains that offer it."""
        raise NotImplementedError

    # -------- grouping --------

    def groups_of(self, item: Dict[str, Any]) -> List[str]:
        return []

    def list_groups(self, client: ApiClient) -> List[GroupTag]:
        return []

    def create_group(self, client: ApiClient, name: str) -> int:
        raise NotImplementedError

    def assign_groups(self, client: ApiClient, item: Dict[str, Any], group_ids: List[int]) -> None:
        raise NotImplementedError


class ContainerAdapter(DomainAdapter):
    """A domain whose entities live in capacity-bounded containers."""

    default_capacity = 50000
    container_capacity = 1000

    def containers(self, entities: Sequence[Dict[str, Any]]) -> List[Tuple[ContainerSpec, List[Dict[str, Any]]]]:
        """Split backed-up entities into ``(container spec, items)`` pairs."""
        raise NotImplementedError

    def resolve_default(self, client: ApiClient) -> Tuple[Any, int]:
        """Return the destination default container id and its current item count."""
        raise NotImplementedError

    def create_container(self, client: ApiClient, spec: ContainerSpec) -> Any:
        raise NotImplementedError

    def describe_container(self, spec: ContainerSpec) -> str:
        return f'"{spec.title}"'


def require_field(item: Any, key: str) -> Any:
    """Return ``item[key]``, raising ParamError when the entity is not a dict or lacks it."""
    value = item.get(key) if isinstance(item, dict) else None
    if value is None or value == '':
        raise ParamError(f'条目缺少字段 {key}')
    return value


def describe_entity(adapter: 'DomainAdapter', item: Any) -> str:
    """``adapter.describe`` for dict entities, the raw value for anything else."""
    if not isinstance(item, dict):
        return f'无效条目 {item!r}'
    return adapter.describe(item)


def chunked(items: Sequence[Any], size: int) -> Iterable[List[Any]]:
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def split_by_capacity(items: Sequence[Any], first_capacity: int, overflow_capacity: int) -> List[List[Any]]:
    """Fill the first container up to ``first_capacity``, the rest in ``overflow_capacity`` chunks.

    The first chunk may be empty when the first container is already full.
    """
    first_capacity = max(first_capacity, 0)
    chunks = [list(items[:first_capacity])]
    rest = items[first_capacity:]
    chunks.extend(chunked(rest, overflow_capacity))
    return chunks


class SyncOrchestrator:
    """Runs backup / restore / clear for any DomainAdapter.

    Example:
        >>> orchestrator = SyncOrchestrator(transport)
        >>> items = orchestrator.backup(FollowingAdapter())
        >>> outcome = orchestrator.restore(FollowingAdapter(), items, RestoreOptions(continue_on_error=True))
        >>> outcome.to_dict()
    """

    def __init__(self, transport: Transport):
        self.transport = transport

    # ==================== Backup ====================

    def backup(self, adapter: DomainAdapter, delay_range: Optional[Tuple[int, int]] = None) -> List[Dict[str, Any]]:
        """Fetch every entity of the domain.

        Raises:
            AuthError: If no credential is set
            BiliError: Any fetch failure, unchanged
        """
        client = self.transport.pinned(delay_range)
        client.require_login()
        logger.info(f"[Backup] {adapter.name}: start")
        items = adapter.fetch(client)
        logger.info(f"[Backup] {adapter.name}: {len(items)} items")
        return items

    # ==================== Restore ====================

    def restore(
        self,
        adapter: DomainAdapter,
        entities: Sequence[Dict[str, Any]],
        options: Optional[RestoreOptions] = None
    ) -> BatchOutcome:
        """Apply backed-up entities to the current account.

        Raises:
            ParamError: On invalid options, a backup-only domain or a container archive holding non-objects
            AuthError: If no credential is set
        """
        options = options or RestoreOptions()
        if not adapter.restorable:
            raise ParamError(f'{adapter.label or adapter.name} 不支持还原')
        options.validate(adapter)

        client = self.transport.pinned(options.delay_range)
        client.require_login()
        entities = list(entities or [])

        # Planned before clearing so a malformed folder list fails without side effects
        plan = adapter.containers(entities) if isinstance(adapter, ContainerAdapter) else None

        if options.clear_existing:
            logger.info(f"[Restore] {adapter.name}: clearing existing data first")
            cleared = self._clear_with(client, adapter)
            if cleared.failed_count:
                logger.warning(f"[Restore] {adapter.name}: clear left {cleared.failed_count} items")

        if plan is not None:
            return self._restore_containers(client, adapter, plan, options)

        outcome = BatchOutcome(total_count=len(entities), domain=adapter.label)
        group_map: Dict[str, int] = {}
        if adapter.grouped:
            outcome.transition(RestoreState.MAPPING_GROUPS)
            group_map = self.map_groups(client, adapter, entities, options.create_missing_groups)
        outcome.group_mapping = group_map

        for index, batch in enumerate(chunked(entities, options.batch_size)):
            outcome.transition(RestoreState.APPLYING_BATCH, index)
            logger.debug(f"[Restore] {adapter.name}: batch {index} ({len(batch)} items)")
            if not self._apply_batch(client, adapter, batch, None, group_map, outcome, options):
                return outcome.abort()
        return outcome.complete()

    def map_groups(
        self,
        client: ApiClient,
        adapter: DomainAdapter,
        entities: Sequence[Dict[str, Any]],
        create_missing: bool = True
    ) -> Dict[str, int]:
        """Build a name -> destination id lookup, creating groups that do not exist yet.

        Listing failures propagate; a failed creation only drops that group.
        """
        wanted: List[str] = []
        for item in entities:
            if not isinstance(item, dict):
                continue
            for name in adapter.groups_of(item):
                if name and name not in wanted:
                    wanted.append(name)
        if not wanted:
            return {}

        existing = {tag.name: tag.id for tag in adapter.list_groups(client)}
        mapping: Dict[str, int] = {}
        for name in wanted:
            if name in existing:
                mapping[name] = existing[name]
                continue
            if not create_missing:
                continue
            try:
                mapping[name] = adapter.create_group(client, name)
                logger.info(f"[Restore] created group \"{name}\" -> {mapping[name]}")
            except BiliError as e:
                logger.warning(f"[Restore] failed to create group \"{name}\": {e}")
            client.humanize()
        return mapping

    def _restore_containers(
        self,
        client: ApiClient,
        adapter: ContainerAdapter,
        plan: List[Tuple[ContainerSpec, List[Dict[str, Any]]]],
        options: RestoreOptions
    ) -> BatchOutcome:
        outcome = BatchOutcome(total_count=sum(len(items) for _, items in plan), domain=adapter.label)
        batch_index = 0

        # The default container is looked up once, before the first mutation
        default_target, default_used, default_error = None, 0, None
        if any(spec.is_default for spec, _ in plan):
            try:
                default_target, default_used = adapter.resolve_default(client)
            except BiliError as e:
                logger.error(f"[Restore] failed to resolve the default container: {e}")
                default_error = e
                if not options.continue_on_error:
                    for spec, items in plan:
                        if spec.is_default:
                            outcome.record_failures(len(items), adapter.describe_container(spec), e)
                    return outcome.abort()

        for spec, items in plan:
            if spec.is_default:
                if default_error is not None:
                    outcome.record_failures(len(items), adapter.describe_container(spec), default_error)
                    continue
                target = default_target
                first_capacity = adapter.default_capacity - default_used
            else:
                target, first_capacity = None, adapter.container_capacity

            chunks = split_by_capacity(items, first_capacity, adapter.container_capacity)
            if len(chunks) > 1:
                logger.warning(
                    f"[Restore] \"{spec.title}\" holds {len(items)} items, "
                    f"splitting into {len(chunks)} containers"
                )

            for chunk_index, chunk in enumerate(chunks):
                if not chunk:
                    continue
                chunk_spec = spec if chunk_index == 0 else spec.overflow(chunk_index + 1)
                if chunk_index > 0 or target is None:
                    try:
                        target = adapter.create_container(client, chunk_spec)
                    except BiliError as e:
                        logger.error(f"[Restore] failed to create \"{chunk_spec.title}\": {e}")
                        outcome.record_failures(len(chunk), adapter.describe_container(chunk_spec), e)
                        if not options.continue_on_error:
                            return outcome.abort()
                        continue
                    client.humanize()

                for batch in chunked(chunk, options.batch_size):
                    outcome.transition(RestoreState.APPLYING_BATCH, batch_index)
                    batch_index += 1
                    if not self._apply_batch(client, adapter, batch, target, {}, outcome, options):
                        return outcome.abort()
        return outcome.complete()

    def _apply_batch(
        self,
        client: ApiClient,
        adapter: DomainAdapter,
        batch: List[Dict[str, Any]],
        target: Any,
        group_map: Dict[str, int],
        outcome: BatchOutcome,
        options: RestoreOptions
    ) -> bool:
        """Apply one batch; return False if the run must stop."""
        for item in batch:
            try:
                adapter.apply(client, item, target)
            except BiliError as e:
                description = describe_entity(adapter, item)
                logger.warning(f"[Restore] {description} failed: {e}")
                outcome.record_failure(description, e)
                if not options.continue_on_error:
                    # Aborting: no pause after the last request
                    return False
                client.humanize()
                continue

            if group_map:
                group_ids = [group_map[n] for n in adapter.groups_of(item) if n in group_map]
                if group_ids:
                    try:
                        adapter.assign_groups(client, item, group_ids)
                    except BiliError as e:
                        logger.warning(f"[Restore] group assignment for {adapter.describe(item)} failed: {e}")
            outcome.record_success()
            client.humanize()
        return True

    # ==================== Clear ====================

    def clear(
        self,
        adapter: DomainAdapter,
        delay_range: Optional[Tuple[int, int]] = None,
        bulk: bool = False
    ) -> BatchOutcome:
        """Remove every entity of the domain, best-effort.

        Args:
            adapter: Domain to clear
            delay_range: Optional humanization override
            bulk: Use the domain's single-call clear when it has one

        Raises:
            ParamError: If the domain cannot be cleared
            AuthError: If no credential is set
            BiliError: If the initial listing (or the bulk call) fails
        """
        if not adapter.clearable:
            raise ParamError(f'{adapter.label or adapter.name} 不支持清空')
        client = self.transport.pinned(delay_range)
        client.require_login()

        if bulk and adapter.supports_bulk_clear:
            logger.warning(f"[Clear] {adapter.name}: bulk clear")
            adapter.bulk_clear(client)
            outcome = BatchOutcome(domain=adapter.label).complete()
            outcome.message = f'{adapter.label} 已清空'
            return outcome
        return self._clear_with(client, adapter)

    def _clear_with(self, client: ApiClient, adapter: DomainAdapter) -> BatchOutcome:
        targets = adapter.removal_targets(client)
        outcome = BatchOutcome(total_count=len(targets), domain=adapter.label)
        outcome.transition(RestoreState.APPLYING_BATCH)
        logger.info(f"[Clear] {adapter.name}: removing {len(targets)} items")

        for item in targets:
            try:
                adapter.remove(client, item)
                outcome.record_success()
            except BiliError as e:
                description = describe_entity(adapter, item)
                logger.warning(f"[Clear] {description} failed: {e}")
                outcome.record_failure(description, e)
            client.humanize()
        return outcome.complete()
