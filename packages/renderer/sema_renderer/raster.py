"""Matrix rotation into the physical RGBA raster, plus image export helpers."""

from __future__ import annotations

from collections.abc import Iterator

import numpy as np
from PIL import Image

from .models import BYTES_PER_PIXEL, BarLayout, FrameBuffer, Matrix, Rgba


def physical_position(column: int, row: int, columns: int) -> tuple[int, int]:
    """Map logical ``(column, row)`` to ``(physical_row, physical_col)``."""
    return columns - 1 - column, row


def rot90ccw(matrix: Matrix) -> Iterator[Rgba]:
    """Yield matrix pixels in physical raster order (rotated 90deg CCW).

    Physical rows run from the last logical column to the first; each
    physical row walks the logical rows in ascending order.
    """
    for column in reversed(range(matrix.columns)):
        for row in range(matrix.rows):
            yield matrix.cell(column, row)


def rotated(matrix: Matrix) -> np.ndarray:
    # np.rot90 gives out[p, r] == pixels[r, columns - 1 - p]
    return np.rot90(matrix.pixels)


def new_frame_buffer(layout: BarLayout) -> FrameBuffer:
    return FrameBuffer(width=layout.frame_width, height=layout.frame_height)


def blit(matrix: Matrix, frame: FrameBuffer) -> FrameBuffer:
    """Copy the rotated matrix verbatim into the top-left of ``frame``."""
    if frame.width < matrix.rows or frame.height < matrix.columns:
        raise ValueError(
            f"Frame {frame.width}x{frame.height} cannot hold a rotated {matrix.rows}x{matrix.columns} matrix"
        )
    view = np.frombuffer(frame.bytes, dtype=np.uint8).reshape((frame.height, frame.width, BYTES_PER_PIXEL))
    view[: matrix.columns, : matrix.rows] = rotated(matrix)
    return frame


def frame_to_image(frame: FrameBuffer, scale: int = 1) -> Image.Image:
    if frame.pixel_format != "RGBA8888":
        raise ValueError(f"Unsupported pixel format: {frame.pixel_format}")
    image = Image.frombytes("RGBA", (frame.width, frame.height), bytes(frame.bytes))
    if scale > 1:
        image = image.resize((frame.width * scale, frame.height * scale), Image.Resampling.NEAREST)
    return image

