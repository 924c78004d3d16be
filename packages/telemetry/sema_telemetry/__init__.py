"""Subsystem status samplers for the sema indicator."""

from .commands import run_command
from .models import SamplerError, SegmentSource, SlotSource, StatusSnapshot
from .provider import COLOR_PROBES, StatusProvider, battery_sample, volume_sample

__all__ = [
    "COLOR_PROBES",
    "SamplerError",
    "SegmentSource",
    "SlotSource",
    "StatusProvider",
    "StatusSnapshot",
    "battery_sample",
    "run_command",
    "volume_sample",
]
