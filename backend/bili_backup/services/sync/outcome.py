"""
Batch Outcome - Accumulated result of a restore or clear run

Counters only ever grow during a run. Failed items are kept as readable
strings that always name the entity and its identifier.
"""
import enum
import threading
from datetime import datetime
from typing import Dict, List, Optional

from ...utils.logger import get_logger

logger = get_logger('outcome')


class RestoreState(str, enum.Enum):
    IDLE = 'idle'
    MAPPING_GROUPS = 'mapping_groups'
    APPLYING_BATCH = 'applying_batch'
    ABORTED = 'aborted'
    COMPLETED = 'completed'


class BatchOutcome:
    """Result collector for one run.

    Example:
        >>> outcome = BatchOutcome(total_count=3)
        >>> outcome.record_success()
        >>> outcome.record_failure('UP主 "foo" (123)', RemoteError(22001, '...'))
        >>> outcome.complete().to_dict()['success_count']
        1
    """

    def __init__(self, total_count: int = 0, domain: str = ''):
        """Initialize the outcome.

        Args:
            total_count: Number of entities the run intends to process
            domain: Domain label used in the summary message
        """
        self.domain = domain
        self.total_count = total_count
        self.success_count = 0
        self.failed_count = 0
        self.failed_items: List[str] = []
        self.group_mapping: Dict[str, int] = {}
        self.state = RestoreState.IDLE
        self.batch_index = 0
        self.message = ''
        self.start_time = datetime.utcnow().isoformat() + 'Z'
        self.end_time: Optional[str] = None
        self._lock = threading.Lock()

    def transition(self, state: RestoreState, batch_index: Optional[int] = None) -> None:
        with self._lock:
            self.state = state
            if batch_index is not None:
                self.batch_index = batch_index

    def record_success(self) -> None:
        with self._lock:
            self.success_count += 1

    def record_failure(self, description: str, error: Exception) -> None:
        """Record a failed entity.

        Args:
            description: Human-readable entity description including its id
            error: The error raised while applying it
        """
        with self._lock:
            self.failed_count += 1
            self.failed_items.append(f'{description}: {error}')

    def record_failures(self, count: int, description: str, error: Exception) -> None:
        """Record ``count`` entities that failed together as one line naming the count.

        Used when a whole container could not be created or resolved.
        """
        with self._lock:
            self.failed_count += count
            self.failed_items.append(f'{description} ({count} 条): {error}')

    def _summary(self) -> str:
        prefix = f'{self.domain} ' if self.domain else ''
        return (
            f'{prefix}{"已中止" if self.state == RestoreState.ABORTED else "完成"}: '
            f'成功 {self.success_count}/{self.total_count}，失败 {self.failed_count}'
        )

    def abort(self) -> 'BatchOutcome':
        self.transition(RestoreState.ABORTED)
        return self._finish()

    def complete(self) -> 'BatchOutcome':
        self.transition(RestoreState.COMPLETED)
        return self._finish()

    def _finish(self) -> 'BatchOutcome':
        with self._lock:
            self.end_time = datetime.utcnow().isoformat() + 'Z'
            self.message = self._summary()
        logger.info(f"[Outcome] {self.message}")
        return self

    @property
    def is_aborted(self) -> bool:
        return self.state == RestoreState.ABORTED

    def to_dict(self) -> Dict:
        with self._lock:
            return {
                'success_count': self.success_count,
                'failed_count': self.failed_count,
                'total_count': self.total_count,
                'failed_items': list(self.failed_items) or None,
                'state': self.state.value,
                'group_mapping': dict(self.group_mapping),
                'message': self.message,
                'start_time': self.start_time,
                'end_time': self.end_time,
            }
