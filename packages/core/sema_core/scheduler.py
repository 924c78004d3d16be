"""Background refresh timer that samples off the render thread and posts results."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from sema_telemetry.models import StatusSnapshot

from .logging_setup import get_logger


class SchedulerState(str, Enum):
    IDLE = "Idle"
    REFRESHING = "Refreshing"
    STOPPED = "Stopped"


@dataclass
class SchedulerStatus:
    state: SchedulerState = SchedulerState.IDLE
    ticks: int = 0
    degraded_ticks: int = 0
    last_tick_s: float = 0.0
    last_refresh_utc: str | None = None
    last_error: str | None = None


class RefreshScheduler:
    """Timer thread: wait, sample every slot, post the snapshot, repeat.

    ``post`` is the only way results leave this thread. It is the per-backend
    notification mechanism (a queue put, a queued Qt signal) and must not
    touch render state itself. When ``post`` raises, the receiving loop is
    gone and the thread exits.
    """

    def __init__(
        self,
        sample: Callable[[], StatusSnapshot],
        post: Callable[[StatusSnapshot], None],
        interval_s: float = 2.0,
        join_timeout_s: float = 5.0,
    ) -> None:
        self.interval_s = interval_s
        self.join_timeout_s = join_timeout_s
        self._sample = sample
        self._post = post
        self._status = SchedulerStatus()
        self._stop = threading.Event()
        self._wake = threading.Event()
        self._thread: threading.Thread | None = None
        self._logger = get_logger("scheduler")

    @property
    def status(self) -> SchedulerStatus:
        return self._status

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._wake.clear()
        self._status.state = SchedulerState.IDLE
        self._thread = threading.Thread(target=self._run, name="sema-refresh", daemon=True)
        self._thread.start()
        self._logger.info(
            f"refresh scheduler started interval_s={self.interval_s}",
            extra={"event": "scheduler_started"},
        )

    def request_refresh(self) -> None:
        """Cut the current wait short and sample now."""
        self._wake.set()

    def stop(self) -> bool:
        """Stop ticking and join the thread; returns False if it did not exit in time."""
        self._stop.set()
        self._wake.set()
        thread = self._thread
        if thread is None:
            self._status.state = SchedulerState.STOPPED
            return True

        thread.join(timeout=self.join_timeout_s)
        stopped = not thread.is_alive()
        if stopped:
            self._thread = None
            self._status.state = SchedulerState.STOPPED
            self._logger.info("refresh scheduler stopped", extra={"event": "scheduler_stopped"})
        else:
            self._logger.warning(
                f"refresh thread still busy after {self.join_timeout_s:0.1f}s, abandoning in-flight tick",
                extra={"event": "scheduler_join_timeout"},
            )
        return stopped

    def _run(self) -> None:
        while not self._stop.is_set():
            self._wake.wait(self.interval_s)
            self._wake.clear()
            if self._stop.is_set():
                break
            if not self.tick():
                break

    def tick(self) -> bool:
        """Run one Refreshing cycle; returns False when results can no longer be posted."""
        self._status.state = SchedulerState.REFRESHING
        start = time.perf_counter()
        try:
            snapshot = self._sample()
        except Exception as exc:
            self._status.last_error = str(exc)
            self._status.state = SchedulerState.IDLE
            self._logger.exception(
                "sampling failed",
                extra={"event": "sample_error", "tick": self._status.ticks + 1, "tick_s": time.perf_counter() - start},
            )
            return True
        finally:
            self._status.last_tick_s = time.perf_counter() - start

        if self._stop.is_set():
            # Shutdown began while sampling; drop the result.
            return False

        try:
            self._post(snapshot)
        except Exception as exc:
            self._status.last_error = str(exc)
            self._logger.warning(f"refresh post rejected: {exc}", extra={"event": "post_rejected"})
            return False

        self._status.ticks += 1
        if snapshot.degraded:
            self._status.degraded_ticks += 1
        self._status.last_refresh_utc = datetime.now(timezone.utc).isoformat()
        self._status.state = SchedulerState.IDLE
        self._logger.debug(
            "refresh posted",
            extra={
                "event": "tick",
                "state": self._status.state.value,
                "tick": self._status.ticks,
                "tick_s": self._status.last_tick_s,
                "degraded_slots": sorted(snapshot.failures),
            },
        )
        return True
