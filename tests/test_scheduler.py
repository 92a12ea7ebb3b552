import asyncio
import unittest
from crosswalk.domain.models import TimerRole
from crosswalk.kernel.scheduler import VirtualScheduler, AsyncioScheduler
from crosswalk.kernel.timer_roles import RoleTimers, StaleTimerError

class TestVirtualScheduler(unittest.TestCase):
    def setUp(self):
        self.scheduler = VirtualScheduler()
        self.fired = []

    def test_fires_in_time_order_with_ties_in_schedule_order(self):
        self.scheduler.call_later(300, lambda: self.fired.append(("c", self.scheduler.now())))
        self.scheduler.call_later(100, lambda: self.fired.append(("a", self.scheduler.now())))
        self.scheduler.call_later(300, lambda: self.fired.append(("d", self.scheduler.now())))
        self.scheduler.call_later(200, lambda: self.fired.append(("b", self.scheduler.now())))

        self.assertEqual(self.scheduler.advance(1000), 4)
        self.assertEqual(self.fired, [("a", 100), ("b", 200), ("c", 300), ("d", 300)])
        self.assertEqual(self.scheduler.now(), 1000)

    def test_nothing_fires_before_due(self):
        self.scheduler.call_later(100, lambda: self.fired.append("x"))
        self.scheduler.advance(99)
        self.assertEqual(self.fired, [])
        self.scheduler.advance(1)
        self.assertEqual(self.fired, ["x"])

    def test_cancelled_timer_never_fires(self):
        handle = self.scheduler.call_later(100, lambda: self.fired.append("x"))
        self.scheduler.cancel(handle)
        self.scheduler.advance(1000)
        self.assertEqual(self.fired, [])
        self.assertEqual(self.scheduler.pending(), 0)

    def test_callback_can_cancel_a_timer_due_at_the_same_time(self):
        later = self.scheduler.call_later(100, lambda: self.fired.append("later"))
        self.scheduler.cancel(None)
        first = self.scheduler.call_later(50, lambda: self.scheduler.cancel(later))
        self.scheduler.advance(200)
        self.assertEqual(self.fired, [])
        self.assertFalse(first.active)

    def test_periodic_timer_repeats_until_cancelled(self):
        handle = self.scheduler.call_every(500, lambda: self.fired.append(self.scheduler.now()))
        self.scheduler.advance(2000)
        self.assertEqual(self.fired, [500, 1000, 1500, 2000])

        self.scheduler.cancel(handle)
        self.scheduler.advance(2000)
        self.assertEqual(len(self.fired), 4)

    def test_periodic_timer_can_cancel_itself(self):
        def tick():
            self.fired.append(self.scheduler.now())
            if len(self.fired) == 2:
                self.scheduler.cancel(handle)
        handle = self.scheduler.call_every(100, tick)
        self.scheduler.advance(1000)
        self.assertEqual(self.fired, [100, 200])

    def test_callback_scheduled_timers_fire_within_same_advance(self):
        self.scheduler.call_later(100, lambda: self.scheduler.call_later(100, lambda: self.fired.append(self.scheduler.now())))
        self.scheduler.advance(250)
        self.assertEqual(self.fired, [200])

    def test_remaining(self):
        handle = self.scheduler.call_later(100, lambda: None)
        self.scheduler.advance(30)
        self.assertEqual(self.scheduler.remaining(handle), 70)
        self.scheduler.advance(70)
        self.assertIsNone(self.scheduler.remaining(handle))

    def test_run_for_steps(self):
        self.scheduler.call_every(250, lambda: self.fired.append(self.scheduler.now()))
        self.assertEqual(self.scheduler.run_for(1000, step_ms=100), 4)
        self.assertEqual(self.scheduler.now(), 1000)

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            self.scheduler.call_later(-1, lambda: None)
        with self.assertRaises(ValueError):
            self.scheduler.call_every(0, lambda: None)
        with self.assertRaises(ValueError):
            self.scheduler.advance(-5)


class TestRoleTimers(unittest.TestCase):
    def setUp(self):
        self.scheduler = VirtualScheduler()
        self.timers = RoleTimers(self.scheduler, strict=True)
        self.fired = []

    def test_arming_replaces_previous_timer_of_same_role(self):
        self.timers.arm(TimerRole.ADVANCE, 100, lambda: self.fired.append("first"))
        self.timers.arm(TimerRole.ADVANCE, 300, lambda: self.fired.append("second"))
        self.assertEqual(self.scheduler.pending(), 1)

        self.scheduler.advance(1000)
        self.assertEqual(self.fired, ["second"])

    def test_roles_are_independent(self):
        self.timers.arm(TimerRole.WALK_END, 100, lambda: self.fired.append("walk"))
        self.timers.arm(TimerRole.BLINK, 50, lambda: self.fired.append("blink"))
        self.timers.cancel(TimerRole.ADVANCE)
        self.scheduler.advance(100)
        self.assertEqual(self.fired, ["blink", "walk"])

    def test_one_shot_slot_is_free_once_fired(self):
        self.timers.arm(TimerRole.ADVANCE, 100, lambda: self.fired.append(self.timers.is_armed(TimerRole.ADVANCE)))
        self.scheduler.advance(100)
        self.assertEqual(self.fired, [False])

    def test_periodic_role_stays_armed(self):
        self.timers.arm_periodic(TimerRole.BLINK, 100, lambda: self.fired.append("tick"))
        self.scheduler.advance(300)
        self.assertTrue(self.timers.is_armed(TimerRole.BLINK))
        self.timers.cancel(TimerRole.BLINK)
        self.scheduler.advance(300)
        self.assertEqual(self.fired, ["tick"] * 3)

    def test_cancel_all_is_safe_on_empty_roles(self):
        self.timers.cancel_all()
        self.timers.arm(TimerRole.ADVANCE, 100, lambda: self.fired.append("x"))
        self.timers.arm_periodic(TimerRole.BLINK, 10, lambda: self.fired.append("y"))
        self.timers.cancel_all()
        self.timers.cancel_all()
        self.scheduler.advance(1000)
        self.assertEqual(self.fired, [])
        self.assertEqual(self.scheduler.pending(), 0)

    def test_remaining(self):
        self.assertIsNone(self.timers.remaining(TimerRole.WALK_END))
        self.timers.arm(TimerRole.WALK_END, 15000, lambda: None)
        self.scheduler.advance(4000)
        self.assertEqual(self.timers.remaining(TimerRole.WALK_END), 11000)

    def test_stale_firing_raises_in_strict_mode(self):
        superseded = self.timers.arm(TimerRole.ADVANCE, 100, lambda: self.fired.append("old"))
        self.timers.arm(TimerRole.ADVANCE, 100, lambda: self.fired.append("new"))
        with self.assertRaises(StaleTimerError):
            superseded.callback()
        self.assertEqual(self.fired, [])

    def test_stale_firing_is_ignored_otherwise(self):
        timers = RoleTimers(self.scheduler, strict=False)
        superseded = timers.arm(TimerRole.ADVANCE, 100, lambda: self.fired.append("old"))
        timers.arm(TimerRole.ADVANCE, 100, lambda: self.fired.append("new"))
        with self.assertLogs("crosswalk.kernel.timer_roles", level="WARNING"):
            superseded.callback()
        self.scheduler.advance(100)
        self.assertEqual(self.fired, ["new"])


class TestAsyncioScheduler(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.scheduler = AsyncioScheduler()
        self.fired = []

    async def test_call_later_fires(self):
        self.scheduler.call_later(10, lambda: self.fired.append("x"))
        await asyncio.sleep(0.1)
        self.assertEqual(self.fired, ["x"])

    async def test_cancel_prevents_firing(self):
        handle = self.scheduler.call_later(20, lambda: self.fired.append("x"))
        self.scheduler.cancel(handle)
        await asyncio.sleep(0.1)
        self.assertEqual(self.fired, [])
        self.assertFalse(handle.active)

    async def test_periodic_until_cancelled(self):
        handle = self.scheduler.call_every(10, lambda: self.fired.append("tick"))
        await asyncio.sleep(0.1)
        self.scheduler.cancel(handle)
        count = len(self.fired)
        self.assertGreaterEqual(count, 2)
        await asyncio.sleep(0.05)
        self.assertEqual(len(self.fired), count)

    async def test_remaining_counts_down(self):
        handle = self.scheduler.call_later(1000, lambda: None)
        remaining = self.scheduler.remaining(handle)
        self.assertGreater(remaining, 900)
        self.assertLessEqual(remaining, 1000)
        self.scheduler.cancel(handle)

if __name__ == '__main__':
    unittest.main()
