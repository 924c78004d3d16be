"""Foreground owner of the bar matrix and frame buffer."""

from __future__ import annotations

from typing import Protocol

from sema_renderer import allocate_matrix, blit, compose_into, new_frame_buffer
from sema_renderer.models import BarLayout, FrameBuffer, Palette
from sema_telemetry.models import StatusSnapshot


class RenderTargetError(RuntimeError):
    """The display surface rejected a frame."""


class DisplaySurface(Protocol):
    def present(self, frame: FrameBuffer) -> None:
        """Show ``frame``; raise ``RenderTargetError`` if it cannot."""


class Indicator:
    """Matrix and frame buffer, confined to the thread running the event loop.

    Both buffers are allocated once and overwritten in place; nothing else
    holds a reference that writes to them.
    """

    def __init__(self, layout: BarLayout, palette: Palette, surface: DisplaySurface) -> None:
        self.layout = layout
        self.palette = palette
        self.surface = surface
        self.matrix = allocate_matrix(layout, palette)
        self.frame = new_frame_buffer(layout)
        self.refreshes = 0

    def apply(self, snapshot: StatusSnapshot) -> None:
        compose_into(self.matrix, self.layout, snapshot.samples, self.palette)
        self.refreshes += 1

    def redraw(self) -> None:
        blit(self.matrix, self.frame)
        self.surface.present(self.frame)

    def refresh(self, snapshot: StatusSnapshot) -> None:
        self.apply(snapshot)
        self.redraw()
