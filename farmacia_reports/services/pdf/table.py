"""Paginated data tables with a repeating head row."""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Sequence, Union

from farmacia_reports.core.report_theme import RGB
from .charts import ELLIPSIS
from .page_flow import PageFlowController

logger = logging.getLogger(__name__)

HEAD_HEIGHT = 8.0
ROW_HEIGHT = 7.0
CELL_PADDING = 2.0
HEAD_FONT_SIZE = 8.5
BODY_FONT_SIZE = 8.0
LEGEND_HEIGHT = 8.0


@dataclass(frozen=True)
class TableColumn:
    label: str
    width: float
    align: str = "left"


@dataclass(frozen=True)
class CellStyle:
    text_color: RGB | None = None
    bold: bool = False
    flagged: bool = False


@dataclass(frozen=True)
class StyledCell:
    text: str
    style: CellStyle


Cell = Union[str, StyledCell]


@dataclass(frozen=True)
class TableLayout:
    page_numbers: tuple[int, ...]
    row_count: int
    flagged_rows: int
    legend_drawn: bool


def cell_text(cell: Cell) -> str:
    return cell.text if isinstance(cell, StyledCell) else str(cell)


def _cell_style(cell: Cell) -> CellStyle | None:
    return cell.style if isinstance(cell, StyledCell) else None


class TableRenderer:
    """Render rows of cells as a grid continuing across pages."""

    def __init__(self, flow: PageFlowController, columns: Sequence[TableColumn]) -> None:
        if not columns:
            raise ValueError("A table needs at least one column")
        self.flow = flow
        self.columns = list(columns)
        total_width = sum(column.width for column in self.columns)
        scale = flow.content_width / total_width if total_width > flow.content_width else 1.0
        # columns wider than the content area are scaled down proportionally
        self._widths = [column.width * scale for column in self.columns]

    @property
    def width(self) -> float:
        return sum(self._widths)

    def _fit_text(self, text: str, width: float, bold: bool, size: float) -> str:
        surface = self.flow.surface
        available = width - 2 * CELL_PADDING
        if surface.text_width(text, size, bold) <= available:
            return text
        while text and surface.text_width(text + ELLIPSIS, size, bold) > available:
            text = text[:-1]
        return text + ELLIPSIS if text else ""

    def _text_x(self, x: float, width: float, align: str) -> float:
        if align == "center":
            return x + width / 2
        if align == "right":
            return x + width - CELL_PADDING
        return x + CELL_PADDING

    def _draw_head(self) -> None:
        flow, surface, theme = self.flow, self.flow.surface, self.flow.theme
        y = flow.cursor_y
        surface.rect(flow.margin, y, self.width, HEAD_HEIGHT, fill=theme.table_header_bg)
        x = flow.margin
        for column, width in zip(self.columns, self._widths):
            label = self._fit_text(column.label, width, True, HEAD_FONT_SIZE)
            surface.text(
                self._text_x(x, width, column.align),
                y + HEAD_HEIGHT - 2.5,
                label,
                size=HEAD_FONT_SIZE,
                color=theme.table_header_text,
                bold=True,
                align=column.align,
            )
            x += width
        flow.advance(HEAD_HEIGHT)

    def _draw_row(self, cells: Sequence[Cell], index: int) -> bool:
        flow, surface, theme = self.flow, self.flow.surface, self.flow.theme
        y = flow.cursor_y
        if index % 2:
            surface.rect(flow.margin, y, self.width, ROW_HEIGHT, fill=theme.table_row_alt_bg)
        surface.line(flow.margin, y + ROW_HEIGHT, flow.margin + self.width, y + ROW_HEIGHT, color=theme.border, width=0.2)
        flagged = False
        x = flow.margin
        for column, width, cell in zip(self.columns, self._widths, cells):
            style = _cell_style(cell)
            bold = bool(style and style.bold)
            color = style.text_color if style and style.text_color else theme.text
            flagged = flagged or bool(style and style.flagged)
            text = self._fit_text(cell_text(cell), width, bold, BODY_FONT_SIZE)
            surface.text(
                self._text_x(x, width, column.align),
                y + ROW_HEIGHT - 2.2,
                text,
                size=BODY_FONT_SIZE,
                color=color,
                bold=bold,
                align=column.align,
            )
            x += width
        flow.advance(ROW_HEIGHT)
        return flagged

    def render(self, rows: Sequence[Sequence[Cell]], *, legend: str | None = None) -> TableLayout:
        """Draw the head row and every body row; return where they landed.

        ``legend`` is written under the table when at least one row holds a
        flagged cell.
        """
        flow = self.flow
        for row in rows:
            if len(row) != len(self.columns):
                raise ValueError(f"Row has {len(row)} cells, expected {len(self.columns)}")
        flow.ensure_space(HEAD_HEIGHT + ROW_HEIGHT, section="tabla")
        pages = [flow.surface.current_page_number()]
        self._draw_head()
        flagged_rows = 0
        for index, row in enumerate(rows):
            if flow.ensure_space(ROW_HEIGHT, section="tabla"):
                # continuation page: the flow drew the page header, repeat the head row
                pages.append(flow.surface.current_page_number())
                flow.ensure_space(HEAD_HEIGHT + ROW_HEIGHT, section="tabla")
                self._draw_head()
            if self._draw_row(row, index):
                flagged_rows += 1
        legend_drawn = False
        if legend and flagged_rows:
            if flow.ensure_space(LEGEND_HEIGHT, section="leyenda"):
                pages.append(flow.surface.current_page_number())
            flow.surface.text(
                flow.margin,
                flow.cursor_y + 5,
                legend,
                size=8,
                color=flow.theme.flagged_text,
            )
            flow.advance(LEGEND_HEIGHT)
            legend_drawn = True
        logger.debug("[report_table] %s rows over pages %s (%s flagged)", len(rows), pages, flagged_rows)
        return TableLayout(
            page_numbers=tuple(pages),
            row_count=len(rows),
            flagged_rows=flagged_rows,
            legend_drawn=legend_drawn,
        )
