import sys
import threading
import time
import unittest
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from sema_core import LoopClosedError, RefreshScheduler, SchedulerState
from sema_telemetry import StatusSnapshot


def snapshot(failures=None):
    return StatusSnapshot(samples={}, timestamp=datetime.now(timezone.utc), failures=failures or {})


def wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class SchedulerTickTests(unittest.TestCase):
    def test_tick_posts_snapshot(self):
        posted = []
        sched = RefreshScheduler(sample=lambda: snapshot({"wifi": "down"}), post=posted.append)
        self.assertTrue(sched.tick())
        self.assertEqual(len(posted), 1)
        self.assertEqual(sched.status.ticks, 1)
        self.assertEqual(sched.status.degraded_ticks, 1)
        self.assertEqual(sched.status.state, SchedulerState.IDLE)
        self.assertIsNotNone(sched.status.last_refresh_utc)

    def test_sample_error_keeps_ticking(self):
        def boom():
            raise RuntimeError("sampler crashed")

        posted = []
        sched = RefreshScheduler(sample=boom, post=posted.append)
        self.assertTrue(sched.tick())
        self.assertEqual(posted, [])
        self.assertEqual(sched.status.last_error, "sampler crashed")

    def test_rejected_post_ends_the_thread(self):
        def closed(_snap):
            raise LoopClosedError("frame loop has exited")

        sched = RefreshScheduler(sample=snapshot, post=closed)
        self.assertFalse(sched.tick())
        self.assertEqual(sched.status.ticks, 0)

    def test_result_dropped_when_stopping_mid_tick(self):
        posted = []
        sched = RefreshScheduler(sample=lambda: snapshot(), post=posted.append)
        sched._sample = lambda: (sched._stop.set(), snapshot())[1]
        self.assertFalse(sched.tick())
        self.assertEqual(posted, [])


class SchedulerThreadTests(unittest.TestCase):
    def test_request_refresh_cuts_wait_short(self):
        posted = threading.Event()
        sched = RefreshScheduler(sample=snapshot, post=lambda _s: posted.set(), interval_s=30.0)
        sched.start()
        try:
            sched.request_refresh()
            self.assertTrue(posted.wait(2.0))
        finally:
            self.assertTrue(sched.stop())
        self.assertEqual(sched.status.state, SchedulerState.STOPPED)
        self.assertFalse(sched.running)

    def test_stop_does_not_wait_for_interval(self):
        sched = RefreshScheduler(sample=snapshot, post=lambda _s: None, interval_s=30.0)
        sched.start()
        started = time.monotonic()
        self.assertTrue(sched.stop())
        self.assertLess(time.monotonic() - started, 2.0)

    def test_periodic_ticks(self):
        posted = []
        sched = RefreshScheduler(sample=snapshot, post=posted.append, interval_s=0.05)
        sched.start()
        try:
            self.assertTrue(wait_until(lambda: len(posted) >= 3))
        finally:
            sched.stop()

    def test_thread_exits_when_post_rejected(self):
        def closed(_snap):
            raise LoopClosedError("frame loop has exited")

        sched = RefreshScheduler(sample=snapshot, post=closed, interval_s=30.0)
        sched.start()
        sched.request_refresh()
        self.assertTrue(wait_until(lambda: not sched.running))
        self.assertTrue(sched.stop())

    def test_stop_gives_up_on_stuck_tick(self):
        release = threading.Event()
        entered = threading.Event()

        def stuck():
            entered.set()
            release.wait(5.0)
            return snapshot()

        sched = RefreshScheduler(sample=stuck, post=lambda _s: None, interval_s=30.0, join_timeout_s=0.1)
        sched.start()
        sched.request_refresh()
        self.assertTrue(entered.wait(2.0))
        with self.assertLogs("sema.scheduler", level="WARNING"):
            self.assertFalse(sched.stop())
        release.set()
        self.assertTrue(wait_until(lambda: not sched.running))


if __name__ == "__main__":
    unittest.main()
