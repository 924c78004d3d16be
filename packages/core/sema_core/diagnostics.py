"""Environment report for the ``doctor`` command."""

from __future__ import annotations

import platform
import shutil
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any

import psutil

from .config import AppConfig, config_path
from .logging_setup import log_dir


PROBE_COMMANDS: dict[str, tuple[str, ...]] = {
    "volume": ("pactl",),
    "bluetooth": ("bt",),
    "mic": ("mute",),
    "wifi": ("/usr/bin/wifi", "mullvad", "iwgetid"),
}


def _battery_report() -> dict[str, Any]:
    try:
        batt = psutil.sensors_battery()
    except Exception as exc:
        return {"available": False, "error": str(exc)}
    if batt is None:
        return {"available": False}
    return {"available": True, "percent": batt.percent, "power_plugged": batt.power_plugged}


def build_doctor_payload(cfg: AppConfig) -> dict[str, Any]:
    return {
        "ts_utc": datetime.now(timezone.utc).isoformat(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "config_path": str(config_path()),
        "log_dir": str(log_dir()),
        "config": asdict(cfg),
        "battery": _battery_report(),
        "commands": {
            probe: {cmd: shutil.which(cmd) is not None for cmd in cmds}
            for probe, cmds in PROBE_COMMANDS.items()
        },
    }
