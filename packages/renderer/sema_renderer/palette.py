"""Built-in indicator palette."""

from __future__ import annotations

from .models import Palette, Rgba


def parse_rgba(value: str) -> Rgba:
    """Parse ``#rrggbb`` or ``#rrggbbaa`` into byte channels."""
    raw = value.lstrip("#")
    if len(raw) == 6:
        raw += "ff"
    if len(raw) != 8:
        raise ValueError(f"Invalid color: {value!r}")
    r, g, b, a = (int(raw[i : i + 2], 16) for i in (0, 2, 4, 6))
    return (r, g, b, a)


DEFAULT_PALETTE = Palette(
    urgent=parse_rgba("#cf4955ff"),
    warning=parse_rgba("#fbc011ff"),
    ok=parse_rgba("#0a8c6cff"),
    background=parse_rgba("#161616ff"),
    muted=parse_rgba("#777777ff"),
    normal=parse_rgba("#256ccfff"),
    margin=parse_rgba("#00000000"),
)

COLOR_NAMES = ("urgent", "warning", "ok", "background", "muted", "normal", "margin")
