"""Matrix composition from per-slot samples."""

from __future__ import annotations

from collections.abc import Mapping

from .bars import Bar, encode_bar, encode_composite
from .models import BarLayout, CompositeSample, Matrix, Palette, Sample

# One bar line plus the gutter.
MIN_GIRTH = 2


def encode_sample(sample: Sample, length: int, palette: Palette) -> Bar:
    if isinstance(sample, CompositeSample):
        return encode_composite(sample.segments, length, palette.background)
    return encode_bar(sample.fraction, sample.color, length, palette.background)


def allocate_matrix(layout: BarLayout, palette: Palette) -> Matrix:
    return Matrix.allocate(layout.lines, layout.length, palette.margin)


def compose_into(
    matrix: Matrix,
    layout: BarLayout,
    samples: Mapping[str, Sample],
    palette: Palette,
) -> Matrix:
    """Overwrite ``matrix`` in place with one bar per slot, in layout order.

    A slot missing from ``samples`` renders its fallback. The last line of
    every girth group, and every line past the slots, is left at the margin
    color.
    Raises ``ValueError`` when the matrix does not fit the layout or a slot
    is too narrow to hold a bar line and its gutter.
    """
    if matrix.rows != layout.lines or matrix.columns != layout.length:
        raise ValueError(
            f"Matrix is {matrix.rows}x{matrix.columns}, layout needs {layout.lines}x{layout.length}"
        )
    narrow = [slot.name for slot in layout.slots if slot.girth < MIN_GIRTH]
    if narrow:
        raise ValueError(f"Slots narrower than {MIN_GIRTH} lines: {', '.join(narrow)}")

    x = 0
    for slot in layout.slots:
        bar = encode_sample(samples.get(slot.name, slot.fallback), layout.length, palette)
        gutter = x + slot.girth - 1
        matrix.pixels[x:gutter] = bar
        matrix.pixels[gutter] = palette.margin
        x += slot.girth
    matrix.pixels[x:] = palette.margin
    return matrix


def compose(layout: BarLayout, samples: Mapping[str, Sample], palette: Palette) -> Matrix:
    return compose_into(allocate_matrix(layout, palette), layout, samples, palette)
