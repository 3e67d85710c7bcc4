"""
Humanization Delay - Randomized pauses between platform operations

The platform's anti-automation controls flag clients that fire requests at a
steady cadence. Every page fetch and every mutation is followed by a pause of
uniformly random length.
"""
import random
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from ...errors import ParamError
from ...utils.logger import get_logger

logger = get_logger('delay_manager')

DEFAULT_DELAY_RANGE_MS = (1000, 3000)


class HumanDelay:
    """Uniform random delay within ``[min_ms, max_ms]`` milliseconds.

    The sleep callable is injectable so tests can record waits instead of
    blocking.

    Example:
        >>> delay = HumanDelay(min_ms=1000, max_ms=3000)
        >>> 1.0 <= delay.get_delay() <= 3.0
        True
        >>> delay.wait()          # blocks 1-3 seconds
        >>> delay.wait((0, 10))   # per-call override
    """

    def __init__(
        self,
        min_ms: int = DEFAULT_DELAY_RANGE_MS[0],
        max_ms: int = DEFAULT_DELAY_RANGE_MS[1],
        sleep: Callable[[float], None] = time.sleep
    ):
        """Initialize the delay.

        Args:
            min_ms: Lower bound in milliseconds
            max_ms: Upper bound in milliseconds
            sleep: Blocking sleep taking seconds
        """
        self.min_ms, self.max_ms = validate_delay_range((min_ms, max_ms))
        self._sleep = sleep
        self._waits = 0
        self._total_seconds = 0.0
        self._lock = threading.Lock()

    def get_delay(self, delay_range: Optional[Tuple[int, int]] = None) -> float:
        """Draw a delay in seconds.

        Args:
            delay_range: Optional ``(min_ms, max_ms)`` override

        Returns:
            Delay in seconds
        """
        low, high = delay_range if delay_range else (self.min_ms, self.max_ms)
        return random.uniform(low, high) / 1000.0

    def wait(self, delay_range: Optional[Tuple[int, int]] = None) -> float:
        """Sleep for a random delay and return the seconds slept."""
        seconds = self.get_delay(delay_range)
        with self._lock:
            self._waits += 1
            self._total_seconds += seconds
        if seconds > 0:
            logger.debug(f"[HumanDelay] sleeping {seconds:.2f}s")
            self._sleep(seconds)
        return seconds

    def get_stats(self) -> Dict:
        """Get wait statistics.

        Returns:
            Dictionary with wait count and accumulated seconds
        """
        with self._lock:
            return {
                'waits': self._waits,
                'total_seconds': self._total_seconds,
                'min_ms': self.min_ms,
                'max_ms': self.max_ms,
            }


def validate_delay_range(delay_range) -> Tuple[int, int]:
    """Check a ``(min_ms, max_ms)`` pair.

    Raises:
        ParamError: If the pair is malformed, negative or inverted
    """
    try:
        low, high = (int(v) for v in delay_range)
    except (TypeError, ValueError):
        raise ParamError(f'无效的延迟区间: {delay_range!r}')
    if low < 0 or high < low:
        raise ParamError(f'无效的延迟区间: {low}-{high}ms')
    return low, high
