from __future__ import annotations

import math

import pytest

from farmacia_reports.core.report_config_models import ReportThemeConfig
from farmacia_reports.services.pdf.primitives import (
    Trend,
    bar,
    decorative_border,
    gradient_fill,
    pie_wedge,
    shadow_rect,
    stat_card,
)
from farmacia_reports.services.pdf.surface import DrawingSurface, LayoutBox, LineOp, PolygonOp, RectOp
from farmacia_reports.services.pdf.theme import SHADOW_GRAY, WHITE, resolve_theme


def _surface() -> DrawingSurface:
    surface = DrawingSurface(210, 297)
    surface.add_page()
    return surface


def _ops(surface: DrawingSurface, op_type: type) -> list:
    return surface.document.pages[0].ops_of(op_type)


def test_gradient_fill_draws_overlapping_bands_inside_the_box() -> None:
    surface = _surface()
    box = LayoutBox(10, 10, 100, 40)

    gradient_fill(surface, box, (0, 0, 0), (200, 100, 40))

    bands = _ops(surface, RectOp)
    assert len(bands) == 40
    assert bands[0].fill == (0, 0, 0)
    assert bands[0].height == pytest.approx(40 / 40 + 0.5)
    assert bands[20].fill == pytest.approx((100, 50, 20))
    assert bands[-1].y + bands[-1].height == pytest.approx(box.bottom)
    assert all(band.y + band.height <= box.bottom + 1e-9 for band in bands)


def test_gradient_fill_rejects_zero_steps() -> None:
    with pytest.raises(ValueError):
        gradient_fill(_surface(), LayoutBox(0, 0, 10, 10), (0, 0, 0), (1, 1, 1), steps=0)


def test_decorative_border_stays_within_box() -> None:
    surface = _surface()
    box = LayoutBox(20, 30, 60, 40)

    decorative_border(surface, box, (34, 139, 34))

    lines = _ops(surface, LineOp)
    assert len(lines) == 8
    for line in lines:
        for x, y in ((line.x1, line.y1), (line.x2, line.y2)):
            assert box.x <= x <= box.right
            assert box.y <= y <= box.bottom


def test_shadow_rect_draws_offset_shadow_first() -> None:
    surface = _surface()

    shadow_rect(surface, LayoutBox(10, 10, 30, 20), (255, 0, 0))

    shadow, body = _ops(surface, RectOp)
    assert shadow.fill == SHADOW_GRAY
    assert (shadow.x, shadow.y) == (12, 12)
    assert (body.x, body.y, body.fill) == (10, 10, (255, 0, 0))


def test_vertical_bar_highlight_covers_left_stripe() -> None:
    surface = _surface()

    bar(surface, LayoutBox(10, 10, 20, 50), (0, 128, 0), orientation="vertical")

    shadow, body, highlight = _ops(surface, RectOp)
    assert shadow.fill == SHADOW_GRAY
    assert body.fill == (0, 128, 0)
    assert highlight.fill == WHITE
    assert highlight.alpha == pytest.approx(0.3)
    assert highlight.width == pytest.approx(20 * 0.3)
    assert highlight.height == 50


def test_horizontal_bar_highlight_covers_top_stripe() -> None:
    surface = _surface()

    bar(surface, LayoutBox(10, 10, 80, 8), (0, 128, 0), orientation="horizontal")

    highlight = _ops(surface, RectOp)[-1]
    assert highlight.width == 80
    assert highlight.height == pytest.approx(8 * 0.3)


def test_zero_length_bar_draws_nothing() -> None:
    surface = _surface()

    bar(surface, LayoutBox(10, 10, 0, 8), (0, 128, 0), orientation="horizontal")

    assert _ops(surface, RectOp) == []


def test_pie_wedge_is_a_triangle_fan_with_step_separators() -> None:
    surface = _surface()

    span = pie_wedge(surface, 50, 50, 20, -math.pi / 2, 0.0, (255, 0, 0), steps=36)

    assert span == pytest.approx(math.pi / 2)
    triangles = _ops(surface, PolygonOp)
    assert len(triangles) == 36
    assert all(len(triangle.points) == 3 and triangle.points[0] == (50, 50) for triangle in triangles)
    separators = _ops(surface, LineOp)
    assert len(separators) == 37
    assert all(line.color == WHITE for line in separators)


def test_empty_wedge_draws_nothing() -> None:
    surface = _surface()

    assert pie_wedge(surface, 50, 50, 20, 1.0, 1.0, (255, 0, 0)) == 0.0
    assert surface.document.pages[0].ops == []


def test_stat_card_shows_signed_trend() -> None:
    theme = resolve_theme(ReportThemeConfig())
    surface = _surface()

    stat_card(surface, LayoutBox(10, 10, 45, 32), "Ventas totales", "$1,250.00", theme.primary, theme,
              Trend(percent=12.5, is_positive=True))
    stat_card(surface, LayoutBox(60, 10, 45, 32), "Ventas totales", "$900.00", theme.primary, theme,
              Trend(percent=-3.0, is_positive=False))

    texts = surface.document.pages[0].texts()
    assert texts.count("Ventas totales") == 2
    assert "+12.5%" in texts
    assert "-3.0%" in texts
    glyphs = _ops(surface, PolygonOp)
    assert [glyph.fill for glyph in glyphs] == [theme.positive, theme.negative]
