import json
import logging
import sys
import unittest
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from sema_core import RefreshScheduler
from sema_core.logging_setup import JsonFormatter
from sema_telemetry import StatusSnapshot


def record(**extra):
    rec = logging.LogRecord("sema.scheduler", logging.INFO, __file__, 1, "refresh posted", None, None)
    rec.created = 0.0
    for key, value in extra.items():
        setattr(rec, key, value)
    return rec


class JsonFormatterTests(unittest.TestCase):
    def test_tick_context_is_grouped(self):
        line = JsonFormatter().format(record(event="tick", tick=3, tick_s=0.123456789, degraded_slots=["battery"]))
        payload = json.loads(line)
        self.assertEqual(payload["ts_utc"], "1970-01-01T00:00:00+00:00")
        self.assertEqual(payload["msg"], "refresh posted")
        self.assertEqual(
            payload["ctx"],
            {"event": "tick", "tick": 3, "tick_s": 0.1235, "degraded_slots": ["battery"]},
        )

    def test_unknown_extras_are_left_out(self):
        payload = json.loads(JsonFormatter().format(record(password="hunter2")))
        self.assertNotIn("ctx", payload)
        self.assertNotIn("hunter2", json.dumps(payload))

    def test_scheduler_tick_carries_context(self):
        snap = StatusSnapshot(samples={}, timestamp=datetime.now(timezone.utc), failures={"status.wifi": "timeout"})
        sched = RefreshScheduler(sample=lambda: snap, post=lambda _s: None)
        with self.assertLogs("sema.scheduler", level="DEBUG") as logs:
            self.assertTrue(sched.tick())
        tick = [r for r in logs.records if getattr(r, "event", None) == "tick"][0]
        self.assertEqual(tick.tick, 1)
        self.assertEqual(tick.state, "Idle")
        self.assertEqual(tick.degraded_slots, ["status.wifi"])
        self.assertGreaterEqual(tick.tick_s, 0.0)


if __name__ == "__main__":
    unittest.main()
