"""Persistent app settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from sema_renderer.palette import COLOR_NAMES


CONFIG_VERSION = 1

SLOT_KINDS = ("fill", "composite")


@dataclass
class SegmentConfig:
    source: str = "wifi"
    start: int | None = 0
    stop: int | None = None
    fallback: str = "muted"


@dataclass
class SlotConfig:
    name: str = "slot"
    kind: str = "fill"
    source: str | None = None
    thickness: int = 2
    fallback_color: str = "muted"
    fallback_fraction: float = 1.0
    segments: list[SegmentConfig] = field(default_factory=list)


def default_slots() -> list[SlotConfig]:
    return [
        SlotConfig(name="battery", kind="fill", source="battery"),
        SlotConfig(name="volume", kind="fill", source="volume"),
        SlotConfig(
            name="status",
            kind="composite",
            segments=[
                SegmentConfig(source="wifi", start=0, stop=10),
                SegmentConfig(source="mic", start=-13, stop=-7),
                SegmentConfig(source="bluetooth", start=-6, stop=None),
            ],
        ),
    ]


@dataclass
class LayoutConfig:
    scale: int = 2
    inner_height: int = 16
    margin: int = 2
    slots: list[SlotConfig] = field(default_factory=default_slots)


@dataclass
class RefreshConfig:
    interval_s: float = 2.0
    command_timeout_s: float = 1.0


@dataclass
class UiConfig:
    always_on_top: bool = True
    transparent: bool = True
    x: int | None = None
    y: int | None = None


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    refresh: RefreshConfig = field(default_factory=RefreshConfig)
    ui: UiConfig = field(default_factory=UiConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "sema"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "sema"
    return Path.home() / ".config" / "sema"


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _merge_slot(raw: dict[str, Any]) -> SlotConfig:
    data = dict(raw)
    segments = [_merge(SegmentConfig, s) for s in (data.pop("segments", None) or []) if isinstance(s, dict)]
    slot = _merge(SlotConfig, data)
    slot.segments = segments
    return slot


def _merge_layout(raw: dict[str, Any]) -> LayoutConfig:
    data = dict(raw)
    slots = data.pop("slots", None)
    layout = _merge(LayoutConfig, data)
    if isinstance(slots, list):
        layout.slots = [_merge_slot(s) for s in slots if isinstance(s, dict)]
    return layout


def _clamp_int(value: Any, lo: int, hi: int, default: int) -> int:
    try:
        return max(lo, min(hi, int(value)))
    except (TypeError, ValueError):
        return default


def _clamp_float(value: Any, lo: float, hi: float, default: float) -> float:
    try:
        return max(lo, min(hi, float(value)))
    except (TypeError, ValueError):
        return default


def _offset(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid segment offset: {value!r}")
    number = float(value)
    if not number.is_integer():
        raise ValueError(f"Segment offset must be whole: {value!r}")
    return int(number)


def _normalize_refresh(cfg: AppConfig) -> None:
    cfg.refresh.interval_s = _clamp_float(cfg.refresh.interval_s, 0.25, 60.0, 2.0)
    cfg.refresh.command_timeout_s = _clamp_float(cfg.refresh.command_timeout_s, 0.1, 10.0, 1.0)


def _normalize_slot(slot: SlotConfig) -> SlotConfig:
    if slot.kind not in SLOT_KINDS:
        slot.kind = "fill"
    slot.thickness = _clamp_int(slot.thickness, 2, 16, 2)
    if slot.fallback_color not in COLOR_NAMES:
        slot.fallback_color = "muted"
    slot.fallback_fraction = _clamp_float(slot.fallback_fraction, 0.0, 1.0, 1.0)
    segments: list[SegmentConfig] = []
    for seg in slot.segments:
        try:
            seg.start, seg.stop = _offset(seg.start), _offset(seg.stop)
        except (TypeError, ValueError, OverflowError):
            # Unusable offsets drop the segment; the rest of the bar stays background.
            continue
        if seg.fallback not in COLOR_NAMES:
            seg.fallback = "muted"
        segments.append(seg)
    slot.segments = segments
    return slot


def _normalize_layout(cfg: AppConfig) -> None:
    layout = cfg.layout
    layout.scale = _clamp_int(layout.scale, 1, 8, 2)
    layout.inner_height = _clamp_int(layout.inner_height, 4, 256, 16)
    layout.margin = _clamp_int(layout.margin, 0, 16, 2)

    seen: set[str] = set()
    slots: list[SlotConfig] = []
    for slot in layout.slots:
        if not isinstance(slot.name, str) or not slot.name or slot.name in seen:
            continue
        seen.add(slot.name)
        slots.append(_normalize_slot(slot))
    layout.slots = slots or default_slots()


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()

    cfg = AppConfig(
        config_version=int(raw.get("config_version", CONFIG_VERSION)),
        layout=_merge_layout(raw.get("layout", {}) or {}),
        refresh=_merge(RefreshConfig, raw.get("refresh", {}) or {}),
        ui=_merge(UiConfig, raw.get("ui", {}) or {}),
        diagnostics=_merge(DiagnosticsConfig, raw.get("diagnostics", {}) or {}),
    )

    _normalize_refresh(cfg)
    _normalize_layout(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
