import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from sema_core.config import load_config
from sema_core.diagnostics import PROBE_COMMANDS, build_doctor_payload


class DiagnosticsTests(unittest.TestCase):
    def test_doctor_payload(self):
        cfg = load_config(Path("/tmp/nonexistent-sema-config.json"))
        doctor = build_doctor_payload(cfg)
        for key in ("platform", "python", "config_path", "log_dir", "config", "battery", "commands"):
            self.assertIn(key, doctor)
        self.assertEqual(set(doctor["commands"]), set(PROBE_COMMANDS))
        self.assertIn("available", doctor["battery"])
        self.assertEqual(doctor["config"]["layout"]["scale"], 2)


if __name__ == "__main__":
    unittest.main()
