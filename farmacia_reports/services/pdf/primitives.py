"""Geometry primitives built on top of the drawing surface."""
from __future__ import annotations

from dataclasses import dataclass
import math

from farmacia_reports.core.report_theme import RGB, interpolate
from .surface import DrawingSurface, LayoutBox, Point
from .theme import SHADOW_GRAY, WHITE, ResolvedTheme

GRADIENT_STEPS = 40
GRADIENT_OVERLAP = 0.5
CORNER_CLIP = 5.0
SHADOW_OFFSET = 2.0
CARD_ACCENT_HEIGHT = 8.0
HIGHLIGHT_RATIO = 0.3
HIGHLIGHT_ALPHA = 0.3
PIE_STEPS = 36
SEPARATOR_WIDTH = 0.1


@dataclass(frozen=True)
class Trend:
    percent: float
    is_positive: bool


def gradient_fill(
    surface: DrawingSurface,
    box: LayoutBox,
    start: RGB,
    end: RGB,
    steps: int = GRADIENT_STEPS,
) -> None:
    """Paint ``steps`` horizontal bands interpolating from ``start`` to ``end``."""
    if steps <= 0:
        raise ValueError("steps must be positive")
    band_height = box.height / steps
    for index in range(steps):
        y = box.y + index * band_height
        # bands overlap slightly so no seam shows between them
        height = min(band_height + GRADIENT_OVERLAP, box.bottom - y)
        surface.rect(box.x, y, box.width, height, fill=interpolate(start, end, index / steps))


def decorative_border(
    surface: DrawingSurface,
    box: LayoutBox,
    color: RGB,
    *,
    corner: float = CORNER_CLIP,
    width: float = 0.5,
) -> None:
    corner = min(corner, box.width / 2, box.height / 2)
    x, y, right, bottom = box.x, box.y, box.right, box.bottom
    surface.line(x, y, right, y, color=color, width=width)
    surface.line(right, y, right, bottom, color=color, width=width)
    surface.line(right, bottom, x, bottom, color=color, width=width)
    surface.line(x, bottom, x, y, color=color, width=width)
    surface.line(x, y + corner, x + corner, y, color=color, width=width)
    surface.line(right - corner, y, right, y + corner, color=color, width=width)
    surface.line(right, bottom - corner, right - corner, bottom, color=color, width=width)
    surface.line(x + corner, bottom, x, bottom - corner, color=color, width=width)


def shadow_rect(
    surface: DrawingSurface,
    box: LayoutBox,
    fill: RGB,
    *,
    radius: float = 0.0,
    stroke: RGB | None = None,
    offset: float = SHADOW_OFFSET,
) -> None:
    shadow = box.offset(offset, offset)
    if radius > 0:
        surface.rounded_rect(shadow.x, shadow.y, shadow.width, shadow.height, radius, fill=SHADOW_GRAY)
        surface.rounded_rect(box.x, box.y, box.width, box.height, radius, fill=fill, stroke=stroke)
    else:
        surface.rect(shadow.x, shadow.y, shadow.width, shadow.height, fill=SHADOW_GRAY)
        surface.rect(box.x, box.y, box.width, box.height, fill=fill, stroke=stroke)


def panel(surface: DrawingSurface, box: LayoutBox, theme: ResolvedTheme) -> None:
    shadow_rect(surface, box, theme.panel, radius=3, stroke=theme.border)


def no_data_panel(
    surface: DrawingSurface,
    box: LayoutBox,
    theme: ResolvedTheme,
    message: str = "Sin datos disponibles",
) -> None:
    panel(surface, box, theme)
    surface.text(
        box.x + box.width / 2,
        box.y + box.height / 2,
        message,
        size=11,
        color=theme.muted_text,
        bold=True,
        align="center",
    )


def trend_glyph(surface: DrawingSurface, x: float, baseline: float, *, up: bool, color: RGB) -> None:
    if up:
        points = [(x, baseline), (x + 3, baseline), (x + 1.5, baseline - 3)]
    else:
        points = [(x, baseline - 3), (x + 3, baseline - 3), (x + 1.5, baseline)]
    surface.polygon(points, fill=color)


def stat_card(
    surface: DrawingSurface,
    box: LayoutBox,
    title: str,
    value: str,
    accent: RGB,
    theme: ResolvedTheme,
    trend: Trend | None = None,
) -> None:
    """Small panel with a title, a large value and an optional trend marker."""
    shadow_rect(surface, box, WHITE, radius=3, stroke=theme.border)
    surface.rect(box.x, box.y, box.width, CARD_ACCENT_HEIGHT, fill=accent)
    title_y = box.y + CARD_ACCENT_HEIGHT + 6
    surface.text(box.x + 4, title_y, title, size=9, color=theme.muted_text)
    value_y = title_y + 10
    surface.text(box.x + 4, value_y, value, size=18, color=theme.text, bold=True)
    if trend is None:
        return
    color = theme.positive if trend.is_positive else theme.negative
    trend_y = value_y + 7
    trend_glyph(surface, box.x + 4, trend_y, up=trend.percent >= 0, color=color)
    sign = "+" if trend.percent >= 0 else ""
    surface.text(box.x + 9, trend_y, f"{sign}{trend.percent:.1f}%", size=9, color=color, bold=True)


def bar(
    surface: DrawingSurface,
    box: LayoutBox,
    color: RGB,
    *,
    orientation: str = "vertical",
) -> None:
    """Single bar with drop shadow and a light highlight stripe."""
    if box.width <= 0 or box.height <= 0:
        return
    shadow = box.offset(SHADOW_OFFSET, SHADOW_OFFSET)
    surface.rect(shadow.x, shadow.y, shadow.width, shadow.height, fill=SHADOW_GRAY)
    surface.rect(box.x, box.y, box.width, box.height, fill=color)
    if orientation == "vertical":
        surface.rect(box.x, box.y, box.width * HIGHLIGHT_RATIO, box.height, fill=WHITE, alpha=HIGHLIGHT_ALPHA)
    else:
        surface.rect(box.x, box.y, box.width, box.height * HIGHLIGHT_RATIO, fill=WHITE, alpha=HIGHLIGHT_ALPHA)


def point_on_arc(cx: float, cy: float, radius: float, angle: float) -> Point:
    return (cx + radius * math.cos(angle), cy + radius * math.sin(angle))


def pie_wedge(
    surface: DrawingSurface,
    cx: float,
    cy: float,
    radius: float,
    start: float,
    end: float,
    color: RGB,
    steps: int = PIE_STEPS,
) -> float:
    """Approximate the wedge ``[start, end)`` with a fan of ``steps`` triangles.

    Angles are radians, measured clockwise on the page since y grows
    downwards. Returns the angular span actually covered.
    """
    span = end - start
    if span <= 0:
        return 0.0
    if steps <= 0:
        raise ValueError("steps must be positive")
    step = span / steps
    for index in range(steps):
        a0 = start + index * step
        a1 = end if index == steps - 1 else start + (index + 1) * step
        surface.polygon(
            [(cx, cy), point_on_arc(cx, cy, radius, a0), point_on_arc(cx, cy, radius, a1)],
            fill=color,
            stroke=color,
        )
    for index in range(steps + 1):
        angle = end if index == steps else start + index * step
        x, y = point_on_arc(cx, cy, radius, angle)
        surface.line(cx, cy, x, y, color=WHITE, width=SEPARATOR_WIDTH)
    return span
