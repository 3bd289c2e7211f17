"""Chart layouts drawn from geometry primitives: bars and pies."""
from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Callable, Sequence

from farmacia_reports.core.errors import InputError, LayoutOverflowError
from farmacia_reports.core.report_theme import RGB
from .page_flow import PageFlowController
from .primitives import PIE_STEPS, bar, no_data_panel, panel, pie_wedge, point_on_arc
from .surface import DrawingSurface, LayoutBox
from .theme import GRID_GRAY, WHITE, ResolvedTheme

logger = logging.getLogger(__name__)

BAR_WIDTH_RATIO = 0.7
GRID_DIVISIONS = 5
BAR_HEIGHT = 8.0
BAR_SPACING = 6.0
LABEL_MAX_LENGTH = 15
PIE_LABEL_THRESHOLD = 0.10
PIE_MIN_RADIUS = 10.0
PIE_LEGEND_GAP = 8.0
LEGEND_ROW_HEIGHT = 6.0
OTHERS_LABEL = "Otros"
ELLIPSIS = "…"

# horizontal panel chrome: title band, value axis labels, footer annotation
H_PANEL_TITLE = 14.0
H_PANEL_AXIS = 6.0
H_PANEL_FOOTER = 8.0
H_PANEL_CHROME = H_PANEL_TITLE + H_PANEL_AXIS + H_PANEL_FOOTER
H_LABEL_GUTTER = 42.0
H_VALUE_GUTTER = 20.0
CHART_GAP = 6.0
NO_DATA_HEIGHT = 40.0


@dataclass(frozen=True)
class ChartDatum:
    label: str
    value: float
    color: RGB


ChartDataset = Sequence[ChartDatum]
ValueFormatter = Callable[[float], str]


def format_value(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def truncate_label(label: str, max_length: int = LABEL_MAX_LENGTH) -> str:
    """Labels longer than ``max_length`` keep ``max_length - 2`` chars plus an ellipsis."""
    if len(label) <= max_length:
        return label
    return label[: max_length - 2] + ELLIPSIS


def validate_dataset(dataset: ChartDataset) -> list[ChartDatum]:
    data = list(dataset)
    if not data:
        raise InputError("El conjunto de datos está vacío.")
    for datum in data:
        if not math.isfinite(datum.value) or datum.value < 0:
            raise InputError(f"Valor inválido para '{datum.label}': {datum.value}")
    return data


def _scale_max(data: Sequence[ChartDatum]) -> float:
    return max((datum.value for datum in data), default=0.0)


def _ratio(value: float, max_value: float) -> float:
    return value / max_value if max_value > 0 else 0.0


# ---------------------------------------------------------------------------
# Vertical bars
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VerticalBarLayout:
    bars: tuple[LayoutBox, ...]
    labels: tuple[str, ...]
    max_value: float
    placeholder: bool = False


def draw_vertical_bar_chart(
    surface: DrawingSurface,
    box: LayoutBox,
    dataset: ChartDataset,
    theme: ResolvedTheme,
    *,
    title: str | None = None,
    sort_desc: bool = False,
    label_max_length: int = LABEL_MAX_LENGTH,
    value_format: ValueFormatter = format_value,
) -> VerticalBarLayout:
    try:
        data = validate_dataset(dataset)
    except InputError as exc:
        logger.info("[report_charts] vertical bar chart '%s' without data: %s", title, exc)
        no_data_panel(surface, box, theme)
        return VerticalBarLayout(bars=(), labels=(), max_value=0.0, placeholder=True)

    if sort_desc:
        data = sorted(data, key=lambda datum: datum.value, reverse=True)

    panel(surface, box, theme)
    top = 8.0
    if title:
        surface.text(box.x + 5, box.y + 8, title, size=11, color=theme.text, bold=True)
        top = 16.0
    plot = LayoutBox(box.x + 18, box.y + top + 6, box.width - 24, box.height - top - 6 - 12)

    n = len(data)
    slot = plot.width / n
    bar_width = slot * BAR_WIDTH_RATIO
    spacing = slot * (1 - BAR_WIDTH_RATIO)
    max_value = _scale_max(data)

    for division in range(GRID_DIVISIONS + 1):
        y = plot.bottom - plot.height * division / GRID_DIVISIONS
        surface.line(plot.x, y, plot.right, y, color=GRID_GRAY, width=0.2)
        surface.text(
            plot.x - 2,
            y + 1,
            value_format(max_value * division / GRID_DIVISIONS),
            size=6,
            color=theme.muted_text,
            align="right",
        )

    bars: list[LayoutBox] = []
    labels: list[str] = []
    for index, datum in enumerate(data):
        height = _ratio(datum.value, max_value) * plot.height
        bar_box = LayoutBox(plot.x + index * slot + spacing / 2, plot.bottom - height, bar_width, height)
        bar(surface, bar_box, datum.color, orientation="vertical")
        center_x = bar_box.x + bar_width / 2
        surface.text(center_x, bar_box.y - 2, value_format(datum.value), size=7, color=theme.text, align="center")
        label = truncate_label(datum.label, label_max_length)
        surface.text(center_x, plot.bottom + 5, label, size=7, color=theme.text, align="center")
        bars.append(bar_box)
        labels.append(label)
    return VerticalBarLayout(bars=tuple(bars), labels=tuple(labels), max_value=max_value)


# ---------------------------------------------------------------------------
# Horizontal bars with pagination
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChartChunk:
    page_number: int
    start: int
    end: int
    rows: tuple[ChartDatum, ...]
    max_value: float
    title: str
    labels: tuple[str, ...]


@dataclass(frozen=True)
class HorizontalBarLayout:
    chunks: tuple[ChartChunk, ...]
    items_per_page: int
    placeholder: bool = False

    @property
    def page_count(self) -> int:
        return len(self.chunks)


def items_per_page(
    available_height: float,
    bar_height: float = BAR_HEIGHT,
    bar_spacing: float = BAR_SPACING,
) -> int:
    slot = bar_height + bar_spacing
    if slot <= 0:
        raise ValueError("bar_height + bar_spacing must be positive")
    return max(0, math.floor(available_height / slot))


def chunk_dataset(dataset: Sequence[ChartDatum], per_page: int) -> list[list[ChartDatum]]:
    """Split ``dataset`` into contiguous chunks of ``per_page`` rows."""
    if per_page <= 0:
        raise ValueError("per_page must be positive")
    data = list(dataset)
    return [data[index : index + per_page] for index in range(0, len(data), per_page)]


def _draw_horizontal_chunk(
    flow: PageFlowController,
    chunk: Sequence[ChartDatum],
    *,
    title: str,
    start: int,
    total_rows: int,
    page_index: int,
    page_total: int,
    max_value: float,
    bar_height: float,
    bar_spacing: float,
    label_max_length: int,
    value_format: ValueFormatter,
) -> ChartChunk:
    surface, theme = flow.surface, flow.theme
    slot = bar_height + bar_spacing
    box = flow.box(H_PANEL_CHROME + len(chunk) * slot)
    panel(surface, box, theme)

    if page_index > 0:
        title = f"{title} (continuación {page_index + 1}/{page_total})"
    surface.text(box.x + 5, box.y + 9, title, size=11, color=theme.text, bold=True)

    plot_x = box.x + H_LABEL_GUTTER
    plot_width = box.width - H_LABEL_GUTTER - H_VALUE_GUTTER
    rows_top = box.y + H_PANEL_TITLE
    rows_bottom = rows_top + len(chunk) * slot

    for division in range(GRID_DIVISIONS + 1):
        x = plot_x + plot_width * division / GRID_DIVISIONS
        surface.line(x, rows_top, x, rows_bottom, color=GRID_GRAY, width=0.2)
        surface.text(
            x,
            rows_bottom + 4,
            value_format(max_value * division / GRID_DIVISIONS),
            size=6,
            color=theme.muted_text,
            align="center",
        )

    labels: list[str] = []
    for offset, datum in enumerate(chunk):
        y = rows_top + offset * slot + bar_spacing / 2
        label = truncate_label(datum.label, label_max_length)
        surface.text(plot_x - 3, y + bar_height * 0.7, label, size=8, color=theme.text, align="right")
        length = _ratio(datum.value, max_value) * plot_width
        bar(surface, LayoutBox(plot_x, y, length, bar_height), datum.color, orientation="horizontal")
        surface.text(
            plot_x + length + 3,
            y + bar_height * 0.7,
            value_format(datum.value),
            size=7,
            color=theme.text,
            bold=True,
        )
        labels.append(label)

    end = start + len(chunk)
    annotation = f"Mostrando {start + 1}-{end} de {total_rows}"
    if page_total > 1:
        annotation = f"{annotation} | Página {page_index + 1}/{page_total}"
    surface.text(box.x + 5, box.bottom - 3, annotation, size=7, color=theme.muted_text)
    flow.advance(box.height + CHART_GAP)
    return ChartChunk(
        page_number=flow.surface.current_page_number(),
        start=start,
        end=end,
        rows=tuple(chunk),
        max_value=max_value,
        title=title,
        labels=tuple(labels),
    )


def draw_horizontal_bar_chart(
    flow: PageFlowController,
    dataset: ChartDataset,
    *,
    title: str,
    available_height: float | None = None,
    bar_height: float = BAR_HEIGHT,
    bar_spacing: float = BAR_SPACING,
    axis_scale: str = "global",
    label_max_length: int = LABEL_MAX_LENGTH,
    value_format: ValueFormatter = format_value,
) -> HorizontalBarLayout:
    """Draw a horizontal bar chart, continuing on new pages when rows overflow.

    ``available_height`` is the height left for the bar rows; by default the
    room left on the current page minus the panel chrome. With
    ``axis_scale="per_page"`` each page scales its value axis to its own rows,
    otherwise one scale is shared by every page.
    """
    if axis_scale not in {"global", "per_page"}:
        raise ValueError(f"Unknown axis scale: {axis_scale}")
    try:
        data = validate_dataset(dataset)
    except InputError as exc:
        logger.info("[report_charts] horizontal bar chart '%s' without data: %s", title, exc)
        flow.ensure_space(NO_DATA_HEIGHT, section=title)
        box = flow.box(NO_DATA_HEIGHT)
        no_data_panel(flow.surface, box, flow.theme)
        flow.surface.text(box.x + 5, box.y + 9, title, size=11, color=flow.theme.text, bold=True)
        flow.advance(NO_DATA_HEIGHT + CHART_GAP)
        return HorizontalBarLayout(chunks=(), items_per_page=0, placeholder=True)

    if available_height is None:
        available_height = flow.available_height - H_PANEL_CHROME
    per_page = items_per_page(available_height, bar_height, bar_spacing)
    if per_page == 0:
        raise LayoutOverflowError(title, bar_height + bar_spacing, max(0.0, available_height))

    chunks = chunk_dataset(data, per_page) if len(data) > per_page else [data]
    logger.debug(
        "[report_charts] '%s': %s rows, %s per page, %s page(s)", title, len(data), per_page, len(chunks)
    )
    global_max = _scale_max(data)
    slot = bar_height + bar_spacing
    drawn: list[ChartChunk] = []
    start = 0
    for page_index, chunk in enumerate(chunks):
        panel_height = H_PANEL_CHROME + len(chunk) * slot
        if page_index > 0:
            flow.new_page()
            if not flow.fits(panel_height):
                raise LayoutOverflowError(title, panel_height, flow.available_height)
        else:
            flow.ensure_space(panel_height, section=title)
        max_value = _scale_max(chunk) if axis_scale == "per_page" else global_max
        drawn.append(
            _draw_horizontal_chunk(
                flow,
                chunk,
                title=title,
                start=start,
                total_rows=len(data),
                page_index=page_index,
                page_total=len(chunks),
                max_value=max_value,
                bar_height=bar_height,
                bar_spacing=bar_spacing,
                label_max_length=label_max_length,
                value_format=value_format,
            )
        )
        start += len(chunk)
    return HorizontalBarLayout(chunks=tuple(drawn), items_per_page=per_page)


# ---------------------------------------------------------------------------
# Pie chart
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WedgeSpan:
    label: str
    start: float
    end: float
    share: float

    @property
    def span(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class LegendRow:
    label: str
    percent: float
    value: float


@dataclass(frozen=True)
class PieLayout:
    wedges: tuple[WedgeSpan, ...]
    legend: tuple[LegendRow, ...]
    placeholder: bool = False

    @property
    def total_span(self) -> float:
        return sum(wedge.span for wedge in self.wedges)


def rounded_percentages(values: Sequence[float], decimals: int = 1) -> list[float]:
    """Percentages rounded so that their displayed sum is exactly 100."""
    total = sum(values)
    if total <= 0:
        return [0.0 for _ in values]
    unit = 10**decimals
    raw = [value / total * 100 * unit for value in values]
    floors = [math.floor(item) for item in raw]
    remainder = 100 * unit - sum(floors)
    order = sorted(range(len(raw)), key=lambda index: raw[index] - floors[index], reverse=True)
    for index in order[:remainder]:
        floors[index] += 1
    return [item / unit for item in floors]


def legend_height(count: int) -> float:
    return count * LEGEND_ROW_HEIGHT + 4.0


def legend_capacity(height: float) -> int:
    """Legend rows that fit under a pie of the minimum radius in ``height`` mm."""
    room = height - PIE_LEGEND_GAP - 2 * PIE_MIN_RADIUS - 4.0
    return max(0, math.floor(room / LEGEND_ROW_HEIGHT))


def fold_tail(data: Sequence[ChartDatum], max_rows: int, color: RGB) -> list[ChartDatum]:
    """Keep the first ``max_rows - 1`` entries and merge the rest into one "Otros" entry."""
    if len(data) <= max_rows:
        return list(data)
    kept = list(data[: max_rows - 1])
    rest = data[max_rows - 1 :]
    return kept + [ChartDatum(OTHERS_LABEL, sum(datum.value for datum in rest), color)]


def draw_pie_chart(
    surface: DrawingSurface,
    box: LayoutBox,
    dataset: ChartDataset,
    theme: ResolvedTheme,
    *,
    title: str | None = None,
    steps: int = PIE_STEPS,
    label_max_length: int = 22,
    value_format: ValueFormatter = format_value,
) -> PieLayout:
    try:
        data = validate_dataset(dataset)
        total = sum(datum.value for datum in data)
        if total <= 0:
            raise InputError("Todos los valores son cero.")
    except InputError as exc:
        logger.info("[report_charts] pie chart '%s' without data: %s", title, exc)
        no_data_panel(surface, box, theme)
        return PieLayout(wedges=(), legend=(), placeholder=True)

    panel(surface, box, theme)
    top = box.y + 6
    if title:
        surface.text(box.x + 5, box.y + 8, title, size=11, color=theme.text, bold=True)
        top = box.y + 14
    max_rows = legend_capacity(box.bottom - top)
    if max_rows < 1:
        raise LayoutOverflowError(
            title or "Gráfico circular",
            2 * PIE_MIN_RADIUS + PIE_LEGEND_GAP + legend_height(1),
            box.bottom - top,
        )
    if len(data) > max_rows:
        logger.info("[report_charts] pie legend folded from %d to %d rows", len(data), max_rows)
        data = fold_tail(data, max_rows, theme.muted_text)
    legend_h = legend_height(len(data))
    diameter = min(box.width * 0.5, box.bottom - top - legend_h - PIE_LEGEND_GAP)
    radius = max(PIE_MIN_RADIUS, diameter / 2)
    cx = box.x + box.width / 2
    cy = top + radius

    wedges: list[WedgeSpan] = []
    angle = -math.pi / 2
    for datum in data:
        share = datum.value / total
        span = share * 2 * math.pi
        if span > 0:
            pie_wedge(surface, cx, cy, radius, angle, angle + span, datum.color, steps)
            wedges.append(WedgeSpan(label=datum.label, start=angle, end=angle + span, share=share))
        angle += span

    for wedge in wedges:
        if wedge.share <= PIE_LABEL_THRESHOLD:
            continue
        mid = (wedge.start + wedge.end) / 2
        lx, ly = point_on_arc(cx, cy, radius / 2, mid)
        surface.circle(lx, ly, 4.5, fill=WHITE)
        surface.text(lx, ly + 1, f"{round(wedge.share * 100)}%", size=7, color=theme.text, bold=True, align="center")

    percents = rounded_percentages([datum.value for datum in data])
    legend: list[LegendRow] = []
    row_y = cy + radius + PIE_LEGEND_GAP
    left = box.x + 10
    for datum, percent in zip(data, percents):
        surface.rect(left, row_y - 3.2, 4, 4, fill=datum.color)
        surface.text(left + 6, row_y, truncate_label(datum.label, label_max_length), size=8, color=theme.text)
        surface.text(box.right - 40, row_y, f"{percent:.1f}%", size=8, color=theme.text, align="right")
        surface.text(box.right - 8, row_y, value_format(datum.value), size=8, color=theme.muted_text, align="right")
        legend.append(LegendRow(label=datum.label, percent=percent, value=datum.value))
        row_y += LEGEND_ROW_HEIGHT
    return PieLayout(wedges=tuple(wedges), legend=tuple(legend))
