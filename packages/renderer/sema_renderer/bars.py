"""Bar encoding: fill fractions and composite overrides to pixel sequences."""

from __future__ import annotations

import math
from collections.abc import Iterable

import numpy as np

from .models import BYTES_PER_PIXEL, Rgba, Segment

# A bar is an (L, 4) uint8 array, pixel 0 at the bottom.
Bar = np.ndarray


def clamp_fraction(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, float(value)))


def filled_pixels(fraction: float, length: int) -> int:
    return int(math.floor(length * clamp_fraction(fraction)))


def blank_bar(length: int, color: Rgba) -> Bar:
    bar = np.empty((length, BYTES_PER_PIXEL), dtype=np.uint8)
    bar[:] = color
    return bar


def encode_bar(fraction: float, color: Rgba, length: int, background: Rgba) -> Bar:
    filled = filled_pixels(fraction, length)
    bar = blank_bar(length, background)
    bar[:filled] = color
    return bar


def encode_composite(overrides: Iterable[Segment], length: int, background: Rgba) -> Bar:
    """Paint overrides in order onto a background bar; later ones win."""
    bar = blank_bar(length, background)
    for segment in overrides:
        start, stop = segment.span(length)
        bar[start:stop] = segment.color
    return bar
