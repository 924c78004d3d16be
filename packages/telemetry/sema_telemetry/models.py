"""Typed sampler models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from sema_renderer.models import Rgba, Sample


class SamplerError(RuntimeError):
    """A subsystem query failed or returned unparseable data."""


@dataclass(frozen=True)
class SegmentSource:
    source: str
    start: int | None
    stop: int | None
    fallback: Rgba


@dataclass(frozen=True)
class SlotSource:
    name: str
    kind: str
    fallback: Sample
    source: str | None = None
    segments: tuple[SegmentSource, ...] = ()


@dataclass(frozen=True)
class StatusSnapshot:
    samples: dict[str, Sample]
    timestamp: datetime
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def degraded(self) -> bool:
        return bool(self.failures)
