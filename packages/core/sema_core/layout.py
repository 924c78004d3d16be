"""Turns the layout settings into renderer and sampler descriptions."""

from __future__ import annotations

from sema_renderer.models import BarLayout, CompositeSample, FillSample, Palette, Sample, Segment, SlotLayout
from sema_telemetry.models import SegmentSource, SlotSource

from .config import LayoutConfig, SlotConfig


def _fallback(slot: SlotConfig, palette: Palette) -> Sample:
    if slot.kind == "composite":
        return CompositeSample(
            segments=tuple(
                Segment(start=seg.start, stop=seg.stop, color=palette.color(seg.fallback))
                for seg in slot.segments
            )
        )
    return FillSample(fraction=slot.fallback_fraction, color=palette.color(slot.fallback_color))


def build_bar_layout(layout: LayoutConfig, palette: Palette) -> BarLayout:
    scale = layout.scale
    return BarLayout(
        length=layout.inner_height * scale,
        slots=tuple(
            SlotLayout(name=slot.name, girth=slot.thickness * scale, fallback=_fallback(slot, palette))
            for slot in layout.slots
        ),
        margin_lines=layout.margin * scale,
        margin_rows=layout.margin * scale,
    )


def build_slot_sources(layout: LayoutConfig, palette: Palette) -> tuple[SlotSource, ...]:
    return tuple(
        SlotSource(
            name=slot.name,
            kind=slot.kind,
            fallback=_fallback(slot, palette),
            source=slot.source,
            segments=tuple(
                SegmentSource(
                    source=seg.source,
                    start=seg.start,
                    stop=seg.stop,
                    fallback=palette.color(seg.fallback),
                )
                for seg in slot.segments
            ),
        )
        for slot in layout.slots
    )
