"""PDF drawing layer: surface, primitives, charts, flow and tables."""

from .charts import ChartDatum, draw_horizontal_bar_chart, draw_pie_chart, draw_vertical_bar_chart
from .page_flow import PageFlowController
from .surface import DrawingSurface, LayoutBox, render_pdf
from .table import TableColumn, TableRenderer

__all__ = [
    "ChartDatum",
    "DrawingSurface",
    "LayoutBox",
    "PageFlowController",
    "TableColumn",
    "TableRenderer",
    "draw_horizontal_bar_chart",
    "draw_pie_chart",
    "draw_vertical_bar_chart",
    "render_pdf",
]
