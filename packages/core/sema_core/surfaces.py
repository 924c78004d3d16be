"""Display surfaces that need no window system."""

from __future__ import annotations

from pathlib import Path

from sema_renderer import frame_to_image
from sema_renderer.models import FrameBuffer

from .indicator import RenderTargetError


class MemorySurface:
    """Keeps a copy of every presented frame."""

    def __init__(self, keep: int = 16) -> None:
        self.keep = keep
        self.frames: list[bytes] = []
        self.last: FrameBuffer | None = None

    def present(self, frame: FrameBuffer) -> None:
        self.last = frame
        self.frames.append(bytes(frame.bytes))
        if len(self.frames) > self.keep:
            self.frames = self.frames[-self.keep :]


class ImageFileSurface:
    """Writes every presented frame to a PNG file, replacing the previous one."""

    def __init__(self, path: Path, scale: int = 1) -> None:
        self.path = path
        self.scale = scale
        self.presented = 0

    def present(self, frame: FrameBuffer) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            frame_to_image(frame, self.scale).save(self.path, format="PNG")
        except (OSError, ValueError) as exc:
            raise RenderTargetError(f"cannot write {self.path}: {exc}") from exc
        self.presented += 1
