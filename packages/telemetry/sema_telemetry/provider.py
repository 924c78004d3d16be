"""Subsystem status probes with per-slot fallbacks."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable

import psutil

from sema_renderer.models import CompositeSample, FillSample, Palette, Rgba, Sample, Segment

from .commands import CommandRunner, run_command
from .models import SamplerError, SlotSource, StatusSnapshot


logger = logging.getLogger("sema.telemetry")

_PERCENT_RE = re.compile(r"(\d{1,3})%")

BatteryReader = Callable[[], Any]


def _read_battery() -> Any:
    try:
        return psutil.sensors_battery()
    except (AttributeError, NotImplementedError, OSError) as exc:
        raise SamplerError(f"Battery status unavailable: {exc}") from exc


def battery_sample(palette: Palette, read_battery: BatteryReader) -> FillSample:
    batt = read_battery()
    if batt is None:
        raise SamplerError("No battery found")

    charge = float(batt.percent) / 100.0
    if batt.power_plugged is None:
        return FillSample(fraction=1.0, color=palette.background)
    if batt.power_plugged:
        if charge >= 1.0:
            return FillSample(fraction=1.0, color=palette.ok)
        return FillSample(fraction=charge, color=palette.ok)

    color = palette.urgent if charge <= 0.1 else palette.warning
    return FillSample(fraction=charge, color=color)


def volume_sample(palette: Palette, run: CommandRunner) -> FillSample:
    out = run("pactl", "--", "get-sink-mute", "@DEFAULT_SINK@")
    color = palette.muted if "yes" in out else palette.normal

    out = run("pactl", "--", "get-sink-volume", "@DEFAULT_SINK@")
    match = _PERCENT_RE.search(out)
    if match is None:
        raise SamplerError(f"Volume not present in pactl output: {out!r}")
    return FillSample(fraction=int(match.group(1)) / 100.0, color=color)


def bluetooth_color(palette: Palette, run: CommandRunner) -> Rgba:
    return palette.normal if run("bt") == "on" else palette.background


def mic_color(palette: Palette, run: CommandRunner) -> Rgba:
    return palette.background if run("mute", "status") == "yes" else palette.urgent


def wifi_color(palette: Palette, run: CommandRunner) -> Rgba:
    if "on" not in run("/usr/bin/wifi"):
        return palette.background
    if "Connected" in run("mullvad", "status"):
        return palette.ok
    # Empty SSID means wifi is on but not associated; a failed probe raises.
    ssid = run("iwgetid", "-r")
    return palette.muted if not ssid else palette.urgent


COLOR_PROBES: dict[str, Callable[[Palette, CommandRunner], Rgba]] = {
    "bluetooth": bluetooth_color,
    "mic": mic_color,
    "wifi": wifi_color,
}


class StatusProvider:
    """Polls every slot once per call; a failing probe only degrades its own slot."""

    def __init__(
        self,
        palette: Palette,
        command_timeout_s: float = 1.0,
        run: CommandRunner | None = None,
        read_battery: BatteryReader | None = None,
    ) -> None:
        self.palette = palette
        self._run = run or partial(run_command, timeout_s=command_timeout_s)
        self._read_battery = read_battery or _read_battery

    def fill(self, source: str) -> FillSample:
        if source == "battery":
            return battery_sample(self.palette, self._read_battery)
        if source == "volume":
            return volume_sample(self.palette, self._run)
        raise SamplerError(f"Unknown fill source: {source}")

    def color(self, source: str) -> Rgba:
        probe = COLOR_PROBES.get(source)
        if probe is None:
            raise SamplerError(f"Unknown color source: {source}")
        return probe(self.palette, self._run)

    def _composite(self, slot: SlotSource, failures: dict[str, str]) -> CompositeSample:
        segments: list[Segment] = []
        for seg in slot.segments:
            try:
                color = self.color(seg.source)
            except Exception as exc:
                failures[f"{slot.name}.{seg.source}"] = str(exc)
                self._log_failure(f"{slot.name}.{seg.source}", exc)
                color = seg.fallback
            segments.append(Segment(start=seg.start, stop=seg.stop, color=color))
        return CompositeSample(segments=tuple(segments))

    def _log_failure(self, name: str, exc: Exception) -> None:
        logger.warning(
            f"sampler failed slot={name}: {exc}",
            extra={"event": "sampler_failed", "slot": name},
        )

    def poll(self, slots: Iterable[SlotSource]) -> StatusSnapshot:
        samples: dict[str, Sample] = {}
        failures: dict[str, str] = {}

        for slot in slots:
            if slot.kind == "composite":
                samples[slot.name] = self._composite(slot, failures)
                continue
            try:
                samples[slot.name] = self.fill(slot.source or slot.name)
            except Exception as exc:
                failures[slot.name] = str(exc)
                self._log_failure(slot.name, exc)
                samples[slot.name] = slot.fallback

        return StatusSnapshot(samples=samples, timestamp=datetime.now(timezone.utc), failures=failures)
