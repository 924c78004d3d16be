import sys
import unittest
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from sema_core import FrameLoop, Indicator, LoopClosedError, MemorySurface, RefreshScheduler, RenderTargetError
from sema_renderer import DEFAULT_PALETTE, BarLayout, FillSample, SlotLayout
from sema_telemetry import StatusSnapshot

P = DEFAULT_PALETTE
LAYOUT = BarLayout(
    length=8,
    slots=(SlotLayout(name="battery", girth=2, fallback=FillSample(1.0, P.muted)),),
    margin_lines=1,
    margin_rows=1,
)


def snapshot(fraction=0.5):
    return StatusSnapshot(samples={"battery": FillSample(fraction, P.ok)}, timestamp=datetime.now(timezone.utc))


class BrokenSurface:
    def present(self, frame):
        raise RenderTargetError("window is gone")


class IndicatorTests(unittest.TestCase):
    def test_refresh_presents_rotated_frame(self):
        surface = MemorySurface()
        indicator = Indicator(LAYOUT, P, surface)
        indicator.refresh(snapshot(0.5))
        frame = surface.last
        self.assertEqual((frame.width, frame.height), (3, 9))
        # Position 0 is the bottom row of the bar area.
        self.assertEqual(frame.pixel(0, 7), P.ok)
        self.assertEqual(frame.pixel(0, 0), P.background)
        self.assertEqual(frame.pixel(1, 7), P.margin)
        self.assertEqual(frame.pixel(0, 8), P.margin)
        self.assertEqual(indicator.refreshes, 1)

    def test_redraw_does_not_resample(self):
        surface = MemorySurface()
        indicator = Indicator(LAYOUT, P, surface)
        indicator.refresh(snapshot(1.0))
        indicator.redraw()
        self.assertEqual(len(surface.frames), 2)
        self.assertEqual(surface.frames[0], surface.frames[1])
        self.assertEqual(indicator.refreshes, 1)


class FrameLoopTests(unittest.TestCase):
    def test_processes_until_shutdown(self):
        surface = MemorySurface()
        loop = FrameLoop(Indicator(LAYOUT, P, surface))
        loop.post_refresh(snapshot(0.25))
        loop.request_redraw()
        loop.post_refresh(snapshot(0.75))
        loop.request_shutdown()
        self.assertEqual(loop.run(), 0)
        self.assertEqual(len(surface.frames), 3)
        self.assertTrue(loop.closed)

    def test_stops_after_max_refreshes(self):
        surface = MemorySurface()
        loop = FrameLoop(Indicator(LAYOUT, P, surface), max_refreshes=1)
        loop.post_refresh(snapshot())
        loop.post_refresh(snapshot())
        self.assertEqual(loop.run(), 0)
        self.assertEqual(len(surface.frames), 1)

    def test_render_target_failure_exits_nonzero(self):
        loop = FrameLoop(Indicator(LAYOUT, P, BrokenSurface()))
        loop.post_refresh(snapshot())
        with self.assertLogs("sema.loop", level="ERROR"):
            self.assertEqual(loop.run(), 1)
        with self.assertRaises(LoopClosedError):
            loop.post_refresh(snapshot())

    def test_scheduler_feeds_loop_from_another_thread(self):
        surface = MemorySurface()
        indicator = Indicator(LAYOUT, P, surface)
        loop = FrameLoop(indicator, max_refreshes=3)
        sched = RefreshScheduler(sample=snapshot, post=loop.post_refresh, interval_s=0.02)
        sched.start()
        try:
            self.assertEqual(loop.run(), 0)
        finally:
            self.assertTrue(sched.stop())
        self.assertEqual(indicator.refreshes, 3)


if __name__ == "__main__":
    unittest.main()
