import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Tuple

Callback = Callable[[], None]

class TimerHandle:
    """A scheduled callback. `interval` is None for one-shot timers."""

    def __init__(self, when: float, callback: Callback, interval: Optional[float] = None):
        self.when = when
        self.callback = callback
        self.interval = interval
        self.cancelled = False
        self.fired = False
        self._inner: Any = None

    @property
    def active(self) -> bool:
        return not self.cancelled and not self.fired

    def __repr__(self):
        kind = "every" if self.interval is not None else "once"
        return f"<TimerHandle {kind} when={self.when} active={self.active}>"


class Scheduler(ABC):
    """Arms, fires and cancels delayed and periodic callbacks. Times are in ms."""

    @abstractmethod
    def now(self) -> float:
        pass

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        pass

    @abstractmethod
    def call_every(self, interval_ms: float, callback: Callback) -> TimerHandle:
        pass

    @abstractmethod
    def cancel(self, handle: Optional[TimerHandle]):
        pass

    def remaining(self, handle: Optional[TimerHandle]) -> Optional[float]:
        if handle is None or not handle.active:
            return None
        return max(0.0, handle.when - self.now())

    @staticmethod
    def _check_delay(delay_ms: float):
        if delay_ms < 0:
            raise ValueError(f"delay must be non-negative, got {delay_ms}")

    @staticmethod
    def _check_interval(interval_ms: float):
        if interval_ms <= 0:
            raise ValueError(f"interval must be positive, got {interval_ms}")


class VirtualScheduler(Scheduler):
    """Simulated clock. Nothing fires until the clock is advanced.

    Due callbacks run in scheduled-time order; callbacks due at the same
    instant run in the order they were scheduled.
    """

    def __init__(self, start_ms: float = 0.0):
        self._now = float(start_ms)
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        self._check_delay(delay_ms)
        handle = TimerHandle(self._now + delay_ms, callback)
        self._push(handle)
        return handle

    def call_every(self, interval_ms: float, callback: Callback) -> TimerHandle:
        self._check_interval(interval_ms)
        handle = TimerHandle(self._now + interval_ms, callback, interval=interval_ms)
        self._push(handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]):
        if handle is not None:
            handle.cancelled = True

    def pending(self) -> int:
        return sum(1 for _, _, handle in self._queue if handle.active)

    def advance(self, delta_ms: float) -> int:
        """Moves the clock forward, firing everything due. Returns the number fired."""
        self._check_delay(delta_ms)
        target = self._now + delta_ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            if not handle.active:
                continue
            self._now = when
            if handle.interval is not None:
                # Re-queue first so the callback can cancel its own timer
                handle.when = when + handle.interval
                self._push(handle)
            else:
                handle.fired = True
            handle.callback()
            fired += 1
        self._now = target
        return fired

    def run_for(self, duration_ms: float, step_ms: float) -> int:
        self._check_interval(step_ms)
        fired = 0
        end = self._now + duration_ms
        while self._now < end:
            fired += self.advance(min(step_ms, end - self._now))
        return fired

    def _push(self, handle: TimerHandle):
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))


class AsyncioScheduler(Scheduler):
    """Wall-clock scheduler on top of an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self._loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        self._check_delay(delay_ms)
        handle = TimerHandle(self.now() + delay_ms, callback)
        self._arm(handle)
        return handle

    def call_every(self, interval_ms: float, callback: Callback) -> TimerHandle:
        self._check_interval(interval_ms)
        handle = TimerHandle(self.now() + interval_ms, callback, interval=interval_ms)
        self._arm(handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]):
        if handle is None:
            return
        handle.cancelled = True
        if handle._inner is not None:
            handle._inner.cancel()
            handle._inner = None

    def _arm(self, handle: TimerHandle):
        # call_at on the loop clock so periodic timers do not drift
        handle._inner = self._loop.call_at(handle.when / 1000.0, self._fire, handle)

    def _fire(self, handle: TimerHandle):
        if not handle.active:
            return
        if handle.interval is not None:
            handle.when += handle.interval
            self._arm(handle)
        else:
            handle.fired = True
            handle._inner = None
        handle.callback()
