"""Game-clock timer scheduler.

Every delayed or repeating callback in a session (ghost spawn and chase
cadence, item countdowns, invincibility windows, movement repetition)
is registered here. The clock only moves when the game loop calls
advance(), so a suspended loop suspends every timer with it.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
import heapq
import itertools
import logging

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class TimerHandle:
    """Cancellation token for a scheduled callback."""

    callback: Callable[[], None]
    due: float
    interval: Optional[float] = None
    group: str = "default"
    cancelled: bool = field(default=False, repr=False)

    @property
    def repeating(self) -> bool:
        return self.interval is not None

    def cancel(self) -> None:
        """Invalidate the handle. A cancelled timer never fires again."""
        self.cancelled = True


class Scheduler:
    """Single authoritative timer wheel driven by game time in milliseconds."""

    def __init__(self) -> None:
        self._now = 0.0
        self._heap: List[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()
        self._groups: Dict[str, List[TimerHandle]] = {}

    @property
    def now(self) -> float:
        """Current game time in milliseconds."""
        return self._now

    @property
    def pending(self) -> int:
        """Number of live (not cancelled) timers."""
        return sum(1 for _, _, h in self._heap if not h.cancelled)

    def call_later(
        self,
        delay_ms: float,
        callback: Callable[[], None],
        group: str = "default",
    ) -> TimerHandle:
        """Run callback once after delay_ms of game time."""
        handle = TimerHandle(callback=callback, due=self._now + max(0.0, delay_ms), group=group)
        self._push(handle)
        return handle

    def call_every(
        self,
        interval_ms: float,
        callback: Callable[[], None],
        group: str = "default",
    ) -> TimerHandle:
        """Run callback every interval_ms of game time until cancelled."""
        if interval_ms <= 0:
            raise ValueError(f"interval must be positive, got {interval_ms}")
        handle = TimerHandle(
            callback=callback,
            due=self._now + interval_ms,
            interval=float(interval_ms),
            group=group,
        )
        self._push(handle)
        return handle

    def cancel_group(self, group: str) -> int:
        """Cancel every timer registered under group.

        Returns:
            Number of timers cancelled
        """
        handles = self._groups.pop(group, [])
        count = 0
        for handle in handles:
            if not handle.cancelled:
                handle.cancel()
                count += 1
        if count:
            logger.debug(f"Cancelled {count} timer(s) in group '{group}'")
        return count

    def cancel_all(self) -> int:
        """Cancel every timer."""
        count = 0
        for group in list(self._groups):
            count += self.cancel_group(group)
        self._heap.clear()
        return count

    def advance(self, delta_ms: float) -> int:
        """Move the clock forward and fire every timer that became due.

        Timers fire in due order. A repeating timer that fell behind fires
        once per elapsed interval. Timers cancelled by an earlier callback
        in the same advance are skipped.

        Returns:
            Number of callbacks fired
        """
        target = self._now + max(0.0, delta_ms)
        fired = 0

        while self._heap and self._heap[0][0] <= target:
            due, _, handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue

            self._now = due
            if handle.repeating:
                handle.due = due + handle.interval
                heapq.heappush(self._heap, (handle.due, next(self._seq), handle))
            else:
                handle.cancelled = True

            try:
                handle.callback()
            except Exception as e:
                logger.error(f"Error in timer callback ({handle.group}): {e}")
            fired += 1

        self._now = target
        self._prune_groups()
        return fired

    def _push(self, handle: TimerHandle) -> None:
        heapq.heappush(self._heap, (handle.due, next(self._seq), handle))
        self._groups.setdefault(handle.group, []).append(handle)

    def _prune_groups(self) -> None:
        for group in list(self._groups):
            live = [h for h in self._groups[group] if not h.cancelled]
            if live:
                self._groups[group] = live
            else:
                del self._groups[group]
