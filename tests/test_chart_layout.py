from __future__ import annotations

import math

import pytest

from farmacia_reports.core.errors import InputError, LayoutOverflowError
from farmacia_reports.core.report_config_models import ReportThemeConfig
from farmacia_reports.services.pdf.charts import (
    ChartDatum,
    chunk_dataset,
    draw_horizontal_bar_chart,
    draw_pie_chart,
    draw_vertical_bar_chart,
    items_per_page,
    rounded_percentages,
    truncate_label,
    validate_dataset,
)
from farmacia_reports.services.pdf.surface import DrawingSurface, LayoutBox, PolygonOp, TextOp
from farmacia_reports.services.pdf.theme import resolve_theme, series_color

THEME = resolve_theme(ReportThemeConfig())


def _dataset(values: list[float], prefix: str = "Categoría") -> list[ChartDatum]:
    return [ChartDatum(f"{prefix} {index + 1}", value, series_color(index)) for index, value in enumerate(values)]


def _surface() -> DrawingSurface:
    surface = DrawingSurface(210, 297)
    surface.add_page()
    return surface


# -- pure helpers -------------------------------------------------------------


def test_items_per_page_uses_bar_slot() -> None:
    assert items_per_page(140) == 10
    assert items_per_page(139.9) == 9
    assert items_per_page(13.9) == 0
    assert items_per_page(100, bar_height=10, bar_spacing=0) == 10


@pytest.mark.parametrize("n, k", [(1, 10), (10, 10), (11, 10), (14, 10), (25, 6), (31, 1)])
def test_chunks_preserve_order_and_count(n: int, k: int) -> None:
    data = _dataset([float(value) for value in range(n)])

    chunks = chunk_dataset(data, k)

    assert len(chunks) == math.ceil(n / k)
    assert [datum for chunk in chunks for datum in chunk] == data
    assert all(len(chunk) == k for chunk in chunks[:-1])


def test_chunk_dataset_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        chunk_dataset(_dataset([1.0]), 0)


def test_truncation_law() -> None:
    assert truncate_label("Analgésicos") == "Analgésicos"
    assert truncate_label("A" * 15) == "A" * 15
    long_label = "Medicamentos genéricos"
    truncated = truncate_label(long_label)
    assert truncated == long_label[:13] + "…"
    assert len(truncated) == 14
    assert truncate_label("abcdefghij", 6) == "abcd…"


def test_validate_dataset_rejects_empty_and_negative() -> None:
    with pytest.raises(InputError):
        validate_dataset([])
    with pytest.raises(InputError):
        validate_dataset(_dataset([3.0, -1.0]))
    with pytest.raises(InputError):
        validate_dataset(_dataset([float("nan")]))


def test_rounded_percentages_sum_to_hundred() -> None:
    for values in ([1, 1, 1], [1, 2, 3, 4, 5, 6, 7], [0.3, 0.3, 0.4], [999, 1], [5, 0, 0]):
        percents = rounded_percentages(values)
        assert sum(percents) == pytest.approx(100.0, abs=0.1)
    assert rounded_percentages([1, 1, 1]) == [33.4, 33.3, 33.3]
    assert rounded_percentages([0, 0]) == [0.0, 0.0]


# -- pie ----------------------------------------------------------------------


def test_pie_spans_cover_full_circle_and_legend_sums_to_hundred() -> None:
    surface = _surface()
    dataset = _dataset([3, 1, 0, 6])

    layout = draw_pie_chart(surface, LayoutBox(15, 50, 180, 110), dataset, THEME, title="Niveles")

    assert not layout.placeholder
    assert layout.total_span == pytest.approx(2 * math.pi)
    assert len(layout.wedges) == 3
    assert layout.wedges[0].start == pytest.approx(-math.pi / 2)
    assert [row.label for row in layout.legend] == [datum.label for datum in dataset]
    assert layout.legend[2].percent == 0.0
    assert sum(row.percent for row in layout.legend) == pytest.approx(100.0, abs=0.1)


def test_pie_labels_only_large_wedges() -> None:
    surface = _surface()

    draw_pie_chart(surface, LayoutBox(15, 50, 180, 110), _dataset([95, 5]), THEME)

    texts = surface.document.pages[0].texts()
    assert "95%" in texts
    assert "5%" not in texts
    assert "5.0%" in texts


def test_long_pie_legend_is_folded_inside_the_box() -> None:
    surface = _surface()
    box = LayoutBox(15, 50, 180, 110)
    dataset = _dataset([20 - index for index in range(20)])

    layout = draw_pie_chart(surface, box, dataset, THEME)

    assert len(layout.legend) == 12
    assert layout.legend[-1].label == "Otros"
    assert layout.legend[-1].value == sum(datum.value for datum in dataset[11:])
    assert layout.total_span == pytest.approx(2 * math.pi)
    assert sum(row.percent for row in layout.legend) == pytest.approx(100.0, abs=0.1)
    page = surface.document.pages[0]
    assert all(text.y <= box.bottom for text in page.ops_of(TextOp))
    assert all(y <= box.bottom for polygon in page.ops_of(PolygonOp) for _, y in polygon.points)


def test_pie_box_too_short_for_a_legend_row_overflows() -> None:
    with pytest.raises(LayoutOverflowError):
        draw_pie_chart(_surface(), LayoutBox(15, 50, 180, 30), _dataset([3, 1]), THEME, title="Niveles")


@pytest.mark.parametrize("values", [[], [0, 0, 0]])
def test_pie_without_data_draws_placeholder(values: list[float]) -> None:
    surface = _surface()

    layout = draw_pie_chart(surface, LayoutBox(15, 50, 180, 110), _dataset(values), THEME)

    assert layout.placeholder
    assert layout.wedges == ()
    assert "Sin datos disponibles" in surface.document.pages[0].texts()


# -- vertical bars ------------------------------------------------------------


def test_vertical_bars_sorted_descending_and_scaled() -> None:
    surface = _surface()

    layout = draw_vertical_bar_chart(
        surface,
        LayoutBox(15, 50, 180, 90),
        _dataset([2, 8, 4]),
        THEME,
        title="Productos por categoría",
        sort_desc=True,
    )

    assert layout.labels == ("Categoría 2", "Categoría 3", "Categoría 1")
    assert layout.max_value == 8
    heights = [box.height for box in layout.bars]
    assert heights[0] > heights[1] > heights[2]
    assert heights[1] == pytest.approx(heights[0] / 2)
    bottoms = {round(box.bottom, 6) for box in layout.bars}
    assert len(bottoms) == 1
    slot = layout.bars[1].x - layout.bars[0].x
    assert layout.bars[0].width == pytest.approx(slot * 0.7)


def test_vertical_bars_with_zero_maximum_have_zero_height() -> None:
    surface = _surface()

    layout = draw_vertical_bar_chart(surface, LayoutBox(15, 50, 180, 90), _dataset([0, 0]), THEME)

    assert not layout.placeholder
    assert all(box.height == 0 for box in layout.bars)


def test_vertical_bars_placeholder_on_negative_value() -> None:
    surface = _surface()

    layout = draw_vertical_bar_chart(surface, LayoutBox(15, 50, 180, 90), _dataset([3, -2]), THEME)

    assert layout.placeholder
    assert "Sin datos disponibles" in surface.document.pages[0].texts()


# -- horizontal bars with pagination ------------------------------------------


def test_fourteen_categories_with_ten_per_page_use_two_pages(make_flow) -> None:
    flow = make_flow()
    flow.new_page()
    data = _dataset([float(value) for value in range(1, 15)])

    layout = draw_horizontal_bar_chart(flow, data, title="Unidades por categoría", available_height=140)

    assert layout.items_per_page == 10
    assert layout.page_count == 2
    assert [chunk.end - chunk.start for chunk in layout.chunks] == [10, 4]
    assert [chunk.page_number for chunk in layout.chunks] == [1, 2]
    assert [row for chunk in layout.chunks for row in chunk.rows] == data
    second_page = flow.surface.document.pages[1].texts()
    assert "Unidades por categoría (continuación 2/2)" in second_page
    assert "Mostrando 11-14 de 14 | Página 2/2" in second_page
    assert "Unidades por categoría" in flow.surface.document.pages[0].texts()


def test_dataset_that_fits_is_not_paginated(make_flow) -> None:
    flow = make_flow()
    flow.new_page()

    layout = draw_horizontal_bar_chart(flow, _dataset([1.0] * 10), title="Ventas", available_height=140)

    assert layout.page_count == 1
    assert flow.surface.total_pages() == 1
    texts = flow.surface.document.pages[0].texts()
    assert "Mostrando 1-10 de 10" in texts
    assert not any("continuación" in text for text in texts)


def test_empty_horizontal_dataset_draws_single_placeholder(make_flow) -> None:
    flow = make_flow()
    flow.new_page()

    layout = draw_horizontal_bar_chart(flow, [], title="Ventas por cliente")

    assert layout.placeholder
    assert layout.page_count == 0
    assert flow.surface.total_pages() == 1
    assert flow.surface.document.pages[0].texts().count("Sin datos disponibles") == 1


def test_axis_scale_global_versus_per_page(make_flow) -> None:
    values = [float(value) for value in range(14, 0, -1)]

    global_flow = make_flow()
    global_flow.new_page()
    shared = draw_horizontal_bar_chart(global_flow, _dataset(values), title="Global", available_height=140)

    page_flow = make_flow()
    page_flow.new_page()
    per_page = draw_horizontal_bar_chart(
        page_flow, _dataset(values), title="Por página", available_height=140, axis_scale="per_page"
    )

    assert [chunk.max_value for chunk in shared.chunks] == [14.0, 14.0]
    assert [chunk.max_value for chunk in per_page.chunks] == [14.0, 4.0]


def test_horizontal_chart_without_room_for_one_row_overflows(make_flow) -> None:
    flow = make_flow()
    flow.new_page()

    with pytest.raises(LayoutOverflowError):
        draw_horizontal_bar_chart(flow, _dataset([1.0, 2.0]), title="Ventas", available_height=5)


def test_unknown_axis_scale_is_rejected(make_flow) -> None:
    flow = make_flow()
    flow.new_page()

    with pytest.raises(ValueError):
        draw_horizontal_bar_chart(flow, _dataset([1.0]), title="Ventas", axis_scale="log")
