"""Renderer package: bar encoding, matrix composition and rotated blits."""

from .bars import Bar, clamp_fraction, encode_bar, encode_composite, filled_pixels
from .composer import allocate_matrix, compose, compose_into, encode_sample
from .models import (
    BarLayout,
    CompositeSample,
    FillSample,
    FrameBuffer,
    Matrix,
    Palette,
    Rgba,
    Sample,
    Segment,
    SlotLayout,
)
from .palette import COLOR_NAMES, DEFAULT_PALETTE, parse_rgba
from .raster import blit, frame_to_image, new_frame_buffer, physical_position, rot90ccw

__all__ = [
    "Bar",
    "BarLayout",
    "COLOR_NAMES",
    "CompositeSample",
    "DEFAULT_PALETTE",
    "FillSample",
    "FrameBuffer",
    "Matrix",
    "Palette",
    "Rgba",
    "Sample",
    "Segment",
    "SlotLayout",
    "allocate_matrix",
    "blit",
    "clamp_fraction",
    "compose",
    "compose_into",
    "encode_bar",
    "encode_composite",
    "encode_sample",
    "filled_pixels",
    "frame_to_image",
    "new_frame_buffer",
    "parse_rgba",
    "physical_position",
    "rot90ccw",
]
