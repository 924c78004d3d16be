"""Core app services: settings, logging, refresh scheduling and the render loop."""

from .config import AppConfig, config_path, load_config, save_config
from .diagnostics import build_doctor_payload
from .indicator import DisplaySurface, Indicator, RenderTargetError
from .layout import build_bar_layout, build_slot_sources
from .loop import FrameLoop, LoopClosedError, LoopEvent
from .scheduler import RefreshScheduler, SchedulerState, SchedulerStatus
from .session import Session, open_session, run_headless
from .surfaces import ImageFileSurface, MemorySurface

__all__ = [
    "AppConfig",
    "DisplaySurface",
    "FrameLoop",
    "ImageFileSurface",
    "Indicator",
    "LoopClosedError",
    "LoopEvent",
    "MemorySurface",
    "RefreshScheduler",
    "RenderTargetError",
    "SchedulerState",
    "SchedulerStatus",
    "Session",
    "build_bar_layout",
    "build_doctor_payload",
    "build_slot_sources",
    "config_path",
    "load_config",
    "open_session",
    "run_headless",
    "save_config",
]
