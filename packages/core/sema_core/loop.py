"""Headless single-consumer event loop driving an ``Indicator``."""

from __future__ import annotations

import queue
from dataclasses import dataclass
from enum import Enum

from sema_telemetry.models import StatusSnapshot

from .indicator import Indicator, RenderTargetError
from .logging_setup import get_logger


class LoopEvent(str, Enum):
    REFRESH = "refresh"
    REDRAW = "redraw"
    SHUTDOWN = "shutdown"


@dataclass(frozen=True)
class LoopMessage:
    kind: LoopEvent
    snapshot: StatusSnapshot | None = None


class LoopClosedError(RuntimeError):
    pass


class FrameLoop:
    """Consumes refresh/redraw/shutdown messages on the calling thread.

    Other threads only ever call the ``post_*``/``request_*`` methods.
    """

    def __init__(self, indicator: Indicator, max_refreshes: int | None = None) -> None:
        self.indicator = indicator
        self.max_refreshes = max_refreshes
        self._queue: queue.Queue[LoopMessage] = queue.Queue()
        self._closed = False
        self._logger = get_logger("loop")

    @property
    def closed(self) -> bool:
        return self._closed

    def _put(self, message: LoopMessage) -> None:
        if self._closed:
            raise LoopClosedError("frame loop has exited")
        self._queue.put(message)

    def post_refresh(self, snapshot: StatusSnapshot) -> None:
        self._put(LoopMessage(kind=LoopEvent.REFRESH, snapshot=snapshot))

    def request_redraw(self) -> None:
        self._put(LoopMessage(kind=LoopEvent.REDRAW))

    def request_shutdown(self) -> None:
        if not self._closed:
            self._queue.put(LoopMessage(kind=LoopEvent.SHUTDOWN))

    def run(self) -> int:
        """Dispatch until shutdown; returns a process exit code."""
        refreshes = 0
        try:
            while True:
                message = self._queue.get()
                if message.kind is LoopEvent.SHUTDOWN:
                    return 0
                try:
                    if message.kind is LoopEvent.REFRESH and message.snapshot is not None:
                        self.indicator.refresh(message.snapshot)
                        refreshes += 1
                    elif message.kind is LoopEvent.REDRAW:
                        self.indicator.redraw()
                except RenderTargetError as exc:
                    self._logger.error(
                        f"render target failed: {exc}",
                        extra={"event": "render_target_failed", "refreshes": refreshes},
                    )
                    return 1
                if self.max_refreshes is not None and refreshes >= self.max_refreshes:
                    return 0
        finally:
            self._closed = True
