"""Typed renderer models."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


Rgba = tuple[int, int, int, int]

BYTES_PER_PIXEL = 4


@dataclass(frozen=True)
class Palette:
    urgent: Rgba
    warning: Rgba
    ok: Rgba
    background: Rgba
    muted: Rgba
    normal: Rgba
    margin: Rgba

    def color(self, name: str) -> Rgba:
        if name not in self.__dataclass_fields__:
            raise KeyError(f"Unknown palette color: {name}")
        return getattr(self, name)


@dataclass(frozen=True)
class Segment:
    """One composite override: pixels ``[start, stop)`` painted ``color``.

    Negative offsets count from the end of the bar and ``stop=None`` means
    the end of the bar, as with Python slices.
    """

    start: int | None
    stop: int | None
    color: Rgba

    def span(self, length: int) -> tuple[int, int]:
        start, stop, _ = slice(self.start, self.stop).indices(length)
        return start, max(start, stop)


@dataclass(frozen=True)
class FillSample:
    fraction: float
    color: Rgba


@dataclass(frozen=True)
class CompositeSample:
    segments: tuple[Segment, ...]


Sample = FillSample | CompositeSample


@dataclass(frozen=True)
class SlotLayout:
    name: str
    girth: int
    fallback: Sample


@dataclass(frozen=True)
class BarLayout:
    """Physical layout of the bars, in device pixels."""

    length: int
    slots: tuple[SlotLayout, ...]
    margin_lines: int = 0
    margin_rows: int = 0

    @property
    def lines(self) -> int:
        return sum(slot.girth for slot in self.slots) + self.margin_lines

    @property
    def frame_width(self) -> int:
        return self.lines

    @property
    def frame_height(self) -> int:
        return self.length + self.margin_rows


@dataclass
class Matrix:
    """Logical pixel grid: one row per bar line, one column per bar position.

    ``pixels[line, position]`` holds an RGBA pixel. Position 0 is the bottom
    of the bar. Lines become display columns once rotated.
    """

    pixels: np.ndarray

    @classmethod
    def allocate(cls, lines: int, length: int, fill: Rgba) -> "Matrix":
        pixels = np.empty((lines, length, BYTES_PER_PIXEL), dtype=np.uint8)
        pixels[:, :] = fill
        return cls(pixels=pixels)

    @property
    def rows(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def columns(self) -> int:
        return int(self.pixels.shape[1])

    def cell(self, column: int, row: int) -> Rgba:
        r, g, b, a = (int(v) for v in self.pixels[row, column])
        return (r, g, b, a)


@dataclass
class FrameBuffer:
    width: int
    height: int
    pixel_format: str = "RGBA8888"
    bytes: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        size = self.width * self.height * BYTES_PER_PIXEL
        if not self.bytes:
            self.bytes = bytearray(size)
        elif len(self.bytes) != size:
            raise ValueError(f"Frame buffer must hold {size} bytes, got {len(self.bytes)}")

    @property
    def stride(self) -> int:
        return self.width * BYTES_PER_PIXEL

    def pixel(self, x: int, y: int) -> Rgba:
        offset = y * self.stride + x * BYTES_PER_PIXEL
        r, g, b, a = self.bytes[offset : offset + BYTES_PER_PIXEL]
        return (r, g, b, a)
