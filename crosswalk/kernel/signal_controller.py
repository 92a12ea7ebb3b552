import logging
from typing import Callable, List, Optional
from crosswalk.domain.models import (
    LightColor, ControllerMode, TimerRole, SignalView, SignalDetails,
    next_color, dwell_duration
)
from crosswalk.domain.state import ControllerState
from crosswalk.kernel.scheduler import Scheduler
from crosswalk.kernel.timer_roles import RoleTimers, StaleTimerError
from crosswalk.domain import config

logger = logging.getLogger(__name__)

Listener = Callable[[SignalView], None]

class SignalController:
    """Pedestrian-interruptible traffic light.

    Cycles RED -> GREEN -> YELLOW with per-color dwell times. A pedestrian
    request moves the light to RED + walk as soon as it is safe, then cycling
    resumes from GREEN. All waiting is done through timers on the injected
    scheduler; state only changes inside those callbacks or in request_walk().
    """

    def __init__(self, scheduler: Scheduler, strict: Optional[bool] = None):
        self.scheduler = scheduler
        self.state = ControllerState()
        self.timers = RoleTimers(scheduler, strict=config.STRICT_TIMERS if strict is None else strict)
        self.started = False
        self.stopped = False
        self._listeners: List[Listener] = []

    @property
    def running(self) -> bool:
        return self.started and not self.stopped

    def start(self):
        if self.stopped:
            logger.warning("Cannot start a controller that has been shut down")
            return
        if self.started:
            return
        self.started = True
        self._arm_advance()
        logger.info("Signal controller started at %s", self.state.color.value)

    def shutdown(self):
        self.timers.cancel_all()
        if not self.stopped:
            self.stopped = True
            logger.info("Signal controller shut down")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    # Commands

    def request_walk(self) -> bool:
        if not self.running:
            logger.debug("Pedestrian request ignored, controller is not running")
            return False
        if self.state.mode != ControllerMode.NORMAL:
            logger.debug("Pedestrian request ignored, mode is %s", self.state.mode.value)
            return False

        self.state.pedestrian_waiting = True
        if self.state.color == LightColor.RED:
            self._enter_walk()
        else:
            # The in-flight GREEN/YELLOW timer carries on; its expiry routes through PENDING
            self.state.mode = ControllerMode.PENDING
            self._changed()
        return True

    # Queries

    def current_view(self) -> SignalView:
        return SignalView(
            color=self.state.color,
            walkActive=self.state.mode == ControllerMode.WALKING and self.state.walk_lit
        )

    def details(self) -> SignalDetails:
        if self.state.mode == ControllerMode.WALKING:
            remaining = self.timers.remaining(TimerRole.WALK_END)
        else:
            remaining = self.timers.remaining(TimerRole.ADVANCE)
        view = self.current_view()
        return SignalDetails(
            color=view.color,
            mode=self.state.mode,
            pedestrianWaiting=self.state.pedestrian_waiting,
            walkLit=self.state.walk_lit,
            walkActive=view.walkActive,
            timerRemainingMs=remaining,
            running=self.running
        )

    # Transitions

    def _arm_advance(self):
        self.timers.arm(TimerRole.ADVANCE, dwell_duration(self.state.color), self._on_advance)

    def _on_advance(self):
        if self.state.mode == ControllerMode.NORMAL:
            self.state.color = next_color(self.state.color)
            self._arm_advance()
            self._changed()
        elif self.state.mode == ControllerMode.PENDING:
            if self.state.color == LightColor.GREEN:
                self.state.color = LightColor.YELLOW
                self._arm_advance()
                self._changed()
            else:
                self._enter_walk()
        else:
            if self.timers.strict:
                raise StaleTimerError(f"advance timer fired while {self.state.mode.value}")
            logger.warning("Ignoring advance timer fired while %s", self.state.mode.value)

    def _enter_walk(self):
        self.state.mode = ControllerMode.WALKING
        self.state.walk_lit = True
        self.state.color = LightColor.RED

        self.timers.cancel(TimerRole.ADVANCE)
        self.timers.cancel(TimerRole.WALK_END)
        self.timers.cancel(TimerRole.BLINK)
        self.timers.arm(TimerRole.WALK_END, config.WALK_TIME_MS, self._end_walk)
        self.timers.arm(TimerRole.BLINK, config.BLINK_START_MS, self._start_blinking)

        logger.info("Walk phase started")
        self._changed()

    def _start_blinking(self):
        self.timers.arm_periodic(TimerRole.BLINK, config.BLINK_INTERVAL_MS, self._toggle_walk)

    def _toggle_walk(self):
        self.state.walk_lit = not self.state.walk_lit
        self._changed()

    def _end_walk(self):
        self.timers.cancel(TimerRole.BLINK)
        self.state.walk_lit = True
        self.state.mode = ControllerMode.NORMAL
        self.state.pedestrian_waiting = False
        self.state.color = LightColor.GREEN
        self._arm_advance()

        logger.info("Walk phase ended, resuming from GREEN")
        self._changed()

    def _changed(self):
        view = self.current_view()
        logger.debug(
            "color=%s mode=%s waiting=%s walk=%s",
            view.color.value, self.state.mode.value, self.state.pedestrian_waiting, view.walkActive
        )
        for listener in list(self._listeners):
            listener(view)
