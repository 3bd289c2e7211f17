from __future__ import annotations

import pytest

from farmacia_reports.core.errors import LayoutOverflowError
from farmacia_reports.core.report_config_models import ReportOptions
from farmacia_reports.services.pdf.surface import TextOp
from farmacia_reports.services.pdf.table import CellStyle, StyledCell, TableColumn, TableRenderer

COLUMNS = [TableColumn("Producto", 80), TableColumn("Stock", 30, "right"), TableColumn("Nivel", 40, "center")]
LEGEND = "* Filas en rojo: productos con stock bajo o crítico"


def _rows(count: int) -> list[list[str]]:
    return [[f"Producto {index}", str(index), "Normal"] for index in range(count)]


def test_head_row_is_redrawn_on_continuation_pages(make_flow) -> None:
    flow = make_flow()
    flow.new_page()

    layout = TableRenderer(flow, COLUMNS).render(_rows(60))

    assert layout.row_count == 60
    assert layout.page_numbers == (1, 2)
    pages = flow.surface.document.page_texts()
    assert [texts.count("Producto") for texts in pages] == [1, 1]
    body = [text for texts in pages for text in texts if text.startswith("Producto ")]
    assert body == [f"Producto {index}" for index in range(60)]


def test_flagged_rows_get_a_legend(make_flow) -> None:
    flow = make_flow()
    flow.new_page()
    red = CellStyle(text_color=flow.theme.flagged_text, flagged=True)
    rows = _rows(3)
    rows[1] = [StyledCell(text, red) for text in rows[1]]

    layout = TableRenderer(flow, COLUMNS).render(rows, legend=LEGEND)

    assert layout.flagged_rows == 1
    assert layout.legend_drawn is True
    texts = flow.surface.document.pages[0].ops_of(TextOp)
    flagged = [op for op in texts if op.text == "Producto 1"]
    assert flagged[0].color == flow.theme.flagged_text
    assert texts[-1].text == LEGEND


def test_no_legend_without_flagged_rows(make_flow) -> None:
    flow = make_flow()
    flow.new_page()

    layout = TableRenderer(flow, COLUMNS).render(_rows(3), legend=LEGEND)

    assert layout.flagged_rows == 0
    assert layout.legend_drawn is False
    assert LEGEND not in flow.surface.document.pages[0].texts()


def test_long_text_is_clipped_to_column_width(make_flow) -> None:
    flow = make_flow()
    flow.new_page()
    long_name = "Suspensión oral pediátrica de amoxicilina con ácido clavulánico 250 mg"

    TableRenderer(flow, COLUMNS).render([[long_name, "1", "Bajo"]])

    texts = flow.surface.document.pages[0].ops_of(TextOp)
    clipped = next(op for op in texts if op.text.startswith("Suspensión"))
    assert clipped.text.endswith("…")
    assert flow.surface.text_width(clipped.text, clipped.size) <= 80 - 4


def test_columns_wider_than_content_are_scaled(make_flow) -> None:
    flow = make_flow()
    flow.new_page()

    renderer = TableRenderer(flow, [TableColumn("A", 200), TableColumn("B", 160)])

    assert renderer.width == pytest.approx(flow.content_width)


def test_row_length_must_match_columns(make_flow) -> None:
    flow = make_flow()
    flow.new_page()

    with pytest.raises(ValueError):
        TableRenderer(flow, COLUMNS).render([["solo una celda"]])


def test_table_in_too_small_page_overflows(make_flow) -> None:
    flow = make_flow(ReportOptions(layout={"header_height_mm": 240}))
    flow.new_page()

    with pytest.raises(LayoutOverflowError):
        TableRenderer(flow, COLUMNS).render(_rows(1))
