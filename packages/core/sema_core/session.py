"""Wires config, palette, sampler and scheduler together for any backend."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from sema_renderer import DEFAULT_PALETTE
from sema_renderer.models import BarLayout, Palette
from sema_telemetry import SlotSource, StatusProvider, StatusSnapshot

from .config import AppConfig
from .indicator import DisplaySurface, Indicator, RenderTargetError
from .layout import build_bar_layout, build_slot_sources
from .logging_setup import get_logger
from .loop import FrameLoop
from .scheduler import RefreshScheduler


@dataclass
class Session:
    config: AppConfig
    palette: Palette
    layout: BarLayout
    slots: tuple[SlotSource, ...]
    provider: StatusProvider

    def sample(self) -> StatusSnapshot:
        return self.provider.poll(self.slots)

    def indicator(self, surface: DisplaySurface) -> Indicator:
        return Indicator(self.layout, self.palette, surface)

    def scheduler(self, post: Callable[[StatusSnapshot], None]) -> RefreshScheduler:
        refresh = self.config.refresh
        # Worst case a tick runs every probe to its timeout.
        probes = sum(max(1, len(s.segments)) * 3 for s in self.slots)
        return RefreshScheduler(
            sample=self.sample,
            post=post,
            interval_s=refresh.interval_s,
            join_timeout_s=refresh.command_timeout_s * probes + 1.0,
        )


def open_session(cfg: AppConfig, provider: StatusProvider | None = None, palette: Palette | None = None) -> Session:
    palette = palette or DEFAULT_PALETTE
    return Session(
        config=cfg,
        palette=palette,
        layout=build_bar_layout(cfg.layout, palette),
        slots=build_slot_sources(cfg.layout, palette),
        provider=provider or StatusProvider(palette, command_timeout_s=cfg.refresh.command_timeout_s),
    )


def run_headless(session: Session, surface: DisplaySurface, ticks: int | None = None) -> int:
    """Run the queue-backed loop until shutdown, render failure or ``ticks`` refreshes."""
    indicator = session.indicator(surface)
    try:
        indicator.refresh(session.sample())
    except RenderTargetError as exc:
        get_logger("loop").error(f"render target failed: {exc}", extra={"event": "render_target_failed"})
        return 1
    if ticks == 0:
        return 0

    loop = FrameLoop(indicator, max_refreshes=ticks)
    scheduler = session.scheduler(post=loop.post_refresh)
    scheduler.start()
    try:
        return loop.run()
    except KeyboardInterrupt:
        return 130
    finally:
        scheduler.stop()
