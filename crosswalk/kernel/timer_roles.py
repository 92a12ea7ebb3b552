import logging
from typing import Dict, Optional
from crosswalk.domain.models import TimerRole
from crosswalk.kernel.scheduler import Callback, Scheduler, TimerHandle

logger = logging.getLogger(__name__)

class StaleTimerError(RuntimeError):
    """A timer fired for a role it is no longer bound to."""

class RoleTimers:
    """At most one live timer per role. Arming a role replaces its previous timer."""

    def __init__(self, scheduler: Scheduler, strict: bool = False):
        self.scheduler = scheduler
        self.strict = strict
        self._slots: Dict[TimerRole, TimerHandle] = {}

    def arm(self, role: TimerRole, delay_ms: float, callback: Callback) -> TimerHandle:
        self.cancel(role)
        handle = self.scheduler.call_later(delay_ms, lambda: self._fire(role, handle, callback))
        self._slots[role] = handle
        return handle

    def arm_periodic(self, role: TimerRole, interval_ms: float, callback: Callback) -> TimerHandle:
        self.cancel(role)
        handle = self.scheduler.call_every(interval_ms, lambda: self._fire(role, handle, callback))
        self._slots[role] = handle
        return handle

    def cancel(self, role: TimerRole):
        handle = self._slots.pop(role, None)
        self.scheduler.cancel(handle)

    def cancel_all(self):
        for role in list(self._slots):
            self.cancel(role)

    def is_armed(self, role: TimerRole) -> bool:
        handle = self._slots.get(role)
        return handle is not None and handle.active

    def remaining(self, role: TimerRole) -> Optional[float]:
        return self.scheduler.remaining(self._slots.get(role))

    def _fire(self, role: TimerRole, handle: TimerHandle, callback: Callback):
        if self._slots.get(role) is not handle:
            if self.strict:
                raise StaleTimerError(f"{role.value} timer fired after being superseded")
            logger.warning("Ignoring stale %s timer", role.value)
            return
        if handle.interval is None:
            del self._slots[role]
        callback()
