"""Assemble inventory and sales reports from records into a paginated document."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Any, ClassVar, Generic, Iterable, Mapping, Sequence, TypeVar, Union

from pydantic import BaseModel, ValidationError

from farmacia_reports.core.config import settings
from farmacia_reports.core.errors import InputError, LayoutOverflowError
from farmacia_reports.core.models import (
    STOCK_LEVEL_LABELS,
    TRANSACTION_STATUS_LABELS,
    InventorySummary,
    Product,
    SalesSummary,
    Transaction,
)
from farmacia_reports.core.report_config_models import ReportKind, ReportOptions
from farmacia_reports.core.report_theme import RGB
from .pdf.assets import AssetProvider
from .pdf.charts import (
    ChartDatum,
    ValueFormatter,
    draw_horizontal_bar_chart,
    draw_pie_chart,
    draw_vertical_bar_chart,
)
from .pdf.page_flow import PageFlowController
from .pdf.primitives import Trend, decorative_border, gradient_fill, no_data_panel, stat_card
from .pdf.surface import Document, DrawingSurface, LayoutBox
from .pdf.table import Cell, CellStyle, StyledCell, TableColumn, TableRenderer
from .pdf.theme import STATUS_COLORS, STOCK_LEVEL_COLORS, WHITE, ResolvedTheme, resolve_theme, series_color
from .report_config import (
    PERIOD_LABELS,
    REPORT_TITLES,
    format_count,
    format_money,
    page_size_mm,
    render_filename,
)
from .report_stats import (
    STOCK_LEVELS,
    UNCATEGORIZED,
    effective_reorder_level,
    inventory_summary,
    product_stock_level,
    sales_summary,
)
from .serializers import serializer_for

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)
Summary = Union[InventorySummary, SalesSummary]

CARD_HEIGHT = 32.0
CARD_GAP = 4.0
SECTION_GAP = 6.0
PIE_HEIGHT = 110.0
VERTICAL_CHART_HEIGHT = 95.0
EMPTY_TABLE_HEIGHT = 30.0
TOTALS_HEIGHT = 12.0
COVER_BAND_HEIGHT = 90.0
DAILY_BAR_LIMIT = 12


@dataclass(frozen=True)
class CardSpec:
    title: str
    value: str
    accent: RGB
    trend: Trend | None = None


@dataclass
class BuiltReport:
    """Everything a serializer needs: summary, table and the drawn pages."""

    kind: ReportKind
    title: str
    generated_at: datetime
    summary: Summary
    columns: list[TableColumn]
    rows: list[list[Cell]]
    surface: DrawingSurface | None = None
    page_count: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def document(self) -> Document | None:
        return self.surface.document if self.surface is not None else None


@dataclass(frozen=True)
class ReportResult:
    content: bytes
    filename: str
    media_type: str
    page_count: int
    warnings: tuple[str, ...] = ()


class ReportBuilder(Generic[RecordT]):
    """Common page sequence: cover, statistics, charts, table.

    Subclasses provide the record model, the summary and the datasets; the
    base class owns the flow and the order in which sections are drawn.
    """

    kind: ClassVar[ReportKind]
    record_model: ClassVar[type[BaseModel]]
    table_title: ClassVar[str]
    table_legend: ClassVar[str]
    pie_title: ClassVar[str]

    def __init__(self, options: ReportOptions | None = None, *, assets: AssetProvider | None = None) -> None:
        self.options = options or ReportOptions()
        self.theme: ResolvedTheme = resolve_theme(self.options.theme)
        self.assets = assets or AssetProvider([settings.REPORTS_ASSETS_DIR])
        self.warnings: list[str] = []

    @property
    def title(self) -> str:
        return REPORT_TITLES[self.kind]

    def money(self, value: float) -> str:
        return format_money(value, self.options.locale)

    def count(self, value: float) -> str:
        return format_count(value, self.options.locale)

    # -- records ------------------------------------------------------------

    def coerce_records(self, records: Iterable[Any]) -> list[RecordT]:
        """Validate raw records, dropping the malformed ones with a warning."""
        accepted: list[RecordT] = []
        for index, raw in enumerate(records, start=1):
            if isinstance(raw, self.record_model):
                accepted.append(raw)  # type: ignore[arg-type]
                continue
            try:
                accepted.append(self.record_model.model_validate(raw))  # type: ignore[arg-type]
            except ValidationError as exc:
                details = "; ".join(
                    f"{'.'.join(str(part) for part in error['loc']) or 'registro'}: {error['msg']}"
                    for error in exc.errors()
                )
                error = InputError(f"Registro {index} descartado ({details})")
                logger.warning("[report_builder] %s", error)
                self.warnings.append(str(error))
        return accepted

    # -- hooks --------------------------------------------------------------

    def summarize(self, records: Sequence[RecordT]) -> Summary:
        raise NotImplementedError

    def subtitle(self, generated_at: datetime) -> str:
        raise NotImplementedError

    def cover_lines(self, summary: Summary) -> list[str]:
        return []

    def stat_cards(self, summary: Summary) -> list[CardSpec]:
        raise NotImplementedError

    def pie_dataset(self, summary: Summary) -> list[ChartDatum]:
        raise NotImplementedError

    def draw_charts(self, flow: PageFlowController, summary: Summary) -> None:
        raise NotImplementedError

    def table_columns(self) -> list[TableColumn]:
        raise NotImplementedError

    def table_rows(self, records: Sequence[RecordT]) -> list[list[Cell]]:
        raise NotImplementedError

    def draw_after_table(self, flow: PageFlowController, summary: Summary) -> None:
        return None

    # -- sections -----------------------------------------------------------

    def draw_cover(
        self,
        flow: PageFlowController,
        summary: Summary,
        generated_at: datetime,
        record_count: int,
    ) -> None:
        surface, theme = flow.surface, self.theme
        flow.new_page(with_header=False)
        frame = LayoutBox(flow.margin, flow.margin, flow.content_width, surface.height - 2 * flow.margin)
        band = LayoutBox(frame.x, frame.y, frame.width, COVER_BAND_HEIGHT)
        gradient_fill(surface, band, theme.primary, theme.gradient_end)
        decorative_border(surface, frame.inset(-3), theme.primary)
        flow.draw_logo(band.x + 8, band.y + 8, 24)
        center = surface.width / 2
        surface.text(center, band.y + 45, self.title, size=26, color=WHITE, bold=True, align="center")
        surface.text(center, band.y + 58, self.subtitle(generated_at), size=13, color=WHITE, align="center")
        surface.text(
            center, band.y + 72, self.options.branding.company_name, size=11, color=WHITE, align="center"
        )
        stamp = generated_at.strftime(self.options.locale.datetime_format)
        lines = [f"Generado: {stamp}", f"Registros incluidos: {self.count(record_count)}"]
        lines.extend(self.cover_lines(summary))
        y = band.bottom + 30
        for line in lines:
            surface.text(center, y, line, size=12, color=theme.text, align="center")
            y += 9

    def draw_statistics(self, flow: PageFlowController, summary: Summary) -> None:
        surface = flow.surface
        flow.new_page()
        flow.section_title("Resumen general")
        cards = self.stat_cards(summary)
        width = (flow.content_width - CARD_GAP * (len(cards) - 1)) / len(cards)
        flow.ensure_space(CARD_HEIGHT, section="tarjetas")
        top = flow.cursor_y
        for index, card in enumerate(cards):
            box = LayoutBox(flow.margin + index * (width + CARD_GAP), top, width, CARD_HEIGHT)
            stat_card(surface, box, card.title, card.value, card.accent, self.theme, card.trend)
        flow.advance(CARD_HEIGHT + SECTION_GAP)
        flow.section_title(self.pie_title)
        flow.ensure_space(PIE_HEIGHT, section=self.pie_title)
        draw_pie_chart(
            surface,
            flow.box(PIE_HEIGHT),
            self.pie_dataset(summary),
            self.theme,
            steps=self.options.charts.pie_steps,
            value_format=self.count,
        )
        flow.advance(PIE_HEIGHT + SECTION_GAP)

    def draw_vertical_chart(
        self,
        flow: PageFlowController,
        dataset: Sequence[ChartDatum],
        *,
        title: str,
        sort_desc: bool = False,
        value_format: ValueFormatter | None = None,
    ) -> None:
        flow.ensure_space(VERTICAL_CHART_HEIGHT, section=title)
        draw_vertical_bar_chart(
            flow.surface,
            flow.box(VERTICAL_CHART_HEIGHT),
            dataset,
            self.theme,
            title=title,
            sort_desc=sort_desc,
            label_max_length=self.options.charts.label_max_length,
            value_format=value_format or self.count,
        )
        flow.advance(VERTICAL_CHART_HEIGHT + SECTION_GAP)

    def draw_horizontal_chart(
        self,
        flow: PageFlowController,
        dataset: Sequence[ChartDatum],
        *,
        title: str,
        value_format: ValueFormatter | None = None,
    ) -> None:
        charts = self.options.charts
        draw_horizontal_bar_chart(
            flow,
            dataset,
            title=title,
            bar_height=charts.bar_height,
            bar_spacing=charts.bar_spacing,
            axis_scale=charts.axis_scale,
            label_max_length=charts.label_max_length,
            value_format=value_format or self.count,
        )

    def draw_table(self, flow: PageFlowController, rows: list[list[Cell]]) -> None:
        flow.new_page()
        flow.section_title(self.table_title)
        if not rows:
            flow.ensure_space(EMPTY_TABLE_HEIGHT, section=self.table_title)
            no_data_panel(flow.surface, flow.box(EMPTY_TABLE_HEIGHT), self.theme)
            flow.advance(EMPTY_TABLE_HEIGHT + SECTION_GAP)
            return
        TableRenderer(flow, self.table_columns()).render(rows, legend=self.table_legend)

    # -- entry point --------------------------------------------------------

    def build(self, records: Iterable[Any], *, generated_at: datetime, draw: bool = True) -> BuiltReport:
        self.warnings = []
        items = self.coerce_records(records)
        summary = self.summarize(items)
        rows = self.table_rows(items)
        report = BuiltReport(
            kind=self.kind,
            title=self.title,
            generated_at=generated_at,
            summary=summary,
            columns=self.table_columns(),
            rows=rows,
            warnings=self.warnings,
        )
        if not draw:
            return report

        width, height = page_size_mm(self.options.layout)
        surface = DrawingSurface(
            width,
            height,
            font_family=self.theme.font_family,
            title=self.title,
            author=self.options.branding.company_name,
        )
        flow = PageFlowController(
            surface,
            self.options,
            self.theme,
            title=self.title,
            subtitle=self.subtitle(generated_at),
            assets=self.assets,
        )
        self.draw_cover(flow, summary, generated_at, len(items))
        self.draw_statistics(flow, summary)
        self.draw_charts(flow, summary)
        self.draw_table(flow, rows)
        self.draw_after_table(flow, summary)
        report.page_count = flow.finalize(generated_at)
        for error in flow.asset_errors:
            self.warnings.append(str(error))
        report.surface = surface
        return report


class InventoryReportBuilder(ReportBuilder[Product]):
    kind = ReportKind.INVENTORY
    record_model = Product
    table_title = "Detalle de productos"
    table_legend = "* Filas en rojo: productos con stock bajo o crítico"
    pie_title = "Distribución por nivel de stock"

    def summarize(self, records: Sequence[Product]) -> InventorySummary:
        return inventory_summary(records, self.options.default_reorder_level)

    def subtitle(self, generated_at: datetime) -> str:
        return f"Estado del inventario al {generated_at.strftime(self.options.locale.date_format)}"

    def cover_lines(self, summary: InventorySummary) -> list[str]:
        return [
            f"Valor del inventario: {self.money(summary.inventory_value)}",
            f"Productos con stock bajo: {self.count(summary.low_stock_count)}",
        ]

    def stat_cards(self, summary: InventorySummary) -> list[CardSpec]:
        return [
            CardSpec("Productos", self.count(summary.total_products), self.theme.primary),
            CardSpec("Unidades en stock", self.count(summary.total_units), self.theme.secondary),
            CardSpec("Valor del inventario", self.money(summary.inventory_value), series_color(1)),
            CardSpec("Stock bajo", self.count(summary.low_stock_count), self.theme.negative),
        ]

    def pie_dataset(self, summary: InventorySummary) -> list[ChartDatum]:
        return [
            ChartDatum(STOCK_LEVEL_LABELS[level], summary.stock_levels.get(level, 0), STOCK_LEVEL_COLORS[level])
            for level in STOCK_LEVELS
        ]

    def draw_charts(self, flow: PageFlowController, summary: InventorySummary) -> None:
        limit = self.options.charts.vertical_bar_limit
        top_categories = sorted(summary.categories, key=lambda total: total.products, reverse=True)[:limit]
        flow.new_page()
        flow.section_title("Análisis por categoría")
        self.draw_vertical_chart(
            flow,
            [ChartDatum(total.label, total.products, series_color(index)) for index, total in enumerate(top_categories)],
            title="Productos por categoría",
            sort_desc=True,
        )
        flow.new_page()
        self.draw_horizontal_chart(
            flow,
            [
                ChartDatum(total.label, total.units, series_color(index))
                for index, total in enumerate(summary.categories)
            ],
            title="Unidades en stock por categoría",
        )

    def table_columns(self) -> list[TableColumn]:
        return [
            TableColumn("Producto", 50),
            TableColumn("SKU", 25),
            TableColumn("Categoría", 30),
            TableColumn("Stock", 18, "right"),
            TableColumn("Mínimo", 15, "right"),
            TableColumn("Precio", 22, "right"),
            TableColumn("Nivel", 20, "center"),
        ]

    def table_rows(self, records: Sequence[Product]) -> list[list[Cell]]:
        default_level = self.options.default_reorder_level
        flagged = CellStyle(text_color=self.theme.flagged_text, flagged=True)
        rows: list[list[Cell]] = []
        for product in records:
            level = product_stock_level(product, default_level)
            texts = [
                product.name,
                product.sku or "-",
                product.category or UNCATEGORIZED,
                self.count(product.stock),
                self.count(effective_reorder_level(product, default_level)),
                self.money(product.price),
                STOCK_LEVEL_LABELS[level],
            ]
            if level in ("critical", "low"):
                rows.append([StyledCell(text, flagged) for text in texts])
            else:
                rows.append(list(texts))
        return rows


class SalesReportBuilder(ReportBuilder[Transaction]):
    kind = ReportKind.SALES
    record_model = Transaction
    table_title = "Detalle de transacciones"
    table_legend = "* Filas en rojo: transacciones canceladas"
    pie_title = "Transacciones por estado"

    def summarize(self, records: Sequence[Transaction]) -> SalesSummary:
        return sales_summary(records)

    def subtitle(self, generated_at: datetime) -> str:
        return PERIOD_LABELS[self.options.period]

    def cover_lines(self, summary: SalesSummary) -> list[str]:
        return [
            f"Total de Transacciones: {self.count(summary.total_transactions)}",
            f"Monto Total: {self.money(summary.total_amount)}",
        ]

    def stat_cards(self, summary: SalesSummary) -> list[CardSpec]:
        trend = None
        if summary.trend_percent is not None:
            trend = Trend(percent=summary.trend_percent, is_positive=summary.trend_percent >= 0)
        return [
            CardSpec("Ventas totales", self.money(summary.total_amount), self.theme.primary, trend),
            CardSpec("Transacciones", self.count(summary.total_transactions), self.theme.secondary),
            CardSpec("Ticket promedio", self.money(summary.average_ticket), series_color(1)),
            CardSpec("Completadas", self.count(summary.status_counts.get("completed", 0)), series_color(2)),
        ]

    def pie_dataset(self, summary: SalesSummary) -> list[ChartDatum]:
        return [
            ChartDatum(TRANSACTION_STATUS_LABELS[status], count, STATUS_COLORS[status])
            for status, count in summary.status_counts.items()
        ]

    def draw_charts(self, flow: PageFlowController, summary: SalesSummary) -> None:
        flow.new_page()
        flow.section_title("Análisis de ventas")
        recent_days = summary.daily_totals[-DAILY_BAR_LIMIT:]
        self.draw_vertical_chart(
            flow,
            [ChartDatum(day.strftime("%d/%m"), total, self.theme.secondary) for day, total in recent_days],
            title="Ventas por día",
            value_format=self.money,
        )
        flow.new_page()
        self.draw_horizontal_chart(
            flow,
            [
                ChartDatum(customer, total, series_color(index))
                for index, (customer, total) in enumerate(summary.customer_totals)
            ],
            title="Ventas por cliente",
            value_format=self.money,
        )

    def table_columns(self) -> list[TableColumn]:
        return [
            TableColumn("ID", 22),
            TableColumn("Cliente", 50),
            TableColumn("Fecha", 30),
            TableColumn("Artículos", 18, "right"),
            TableColumn("Monto", 30, "right"),
            TableColumn("Estado", 30, "center"),
        ]

    def table_rows(self, records: Sequence[Transaction]) -> list[list[Cell]]:
        flagged = CellStyle(text_color=self.theme.flagged_text, flagged=True)
        rows: list[list[Cell]] = []
        for transaction in records:
            texts = [
                transaction.id,
                transaction.customer,
                transaction.date.strftime(self.options.locale.datetime_format),
                self.count(transaction.items),
                self.money(transaction.amount),
                TRANSACTION_STATUS_LABELS[transaction.status],
            ]
            if transaction.status == "cancelled":
                rows.append([StyledCell(text, flagged) for text in texts])
            else:
                rows.append(list(texts))
        return rows

    def draw_after_table(self, flow: PageFlowController, summary: SalesSummary) -> None:
        surface, theme = flow.surface, self.theme
        flow.ensure_space(TOTALS_HEIGHT, section="totales")
        y = flow.cursor_y
        surface.line(flow.margin, y + 2, flow.margin + flow.content_width, y + 2, color=theme.primary, width=0.6)
        surface.text(
            flow.margin,
            y + 8,
            f"Total de Transacciones: {self.count(summary.total_transactions)}",
            size=10,
            color=theme.text,
            bold=True,
        )
        surface.text(
            flow.margin + flow.content_width,
            y + 8,
            f"Monto Total: {self.money(summary.total_amount)}",
            size=10,
            color=theme.text,
            bold=True,
            align="right",
        )
        flow.advance(TOTALS_HEIGHT)


BUILDERS: dict[ReportKind, type[ReportBuilder]] = {
    ReportKind.INVENTORY: InventoryReportBuilder,
    ReportKind.SALES: SalesReportBuilder,
}


def _resolve_options(options: ReportOptions | Mapping[str, Any] | None) -> ReportOptions:
    if options is None:
        return ReportOptions()
    if isinstance(options, ReportOptions):
        return options
    return ReportOptions.model_validate(options)


def generate_report(
    kind: ReportKind | str,
    records: Iterable[Any],
    options: ReportOptions | Mapping[str, Any] | None = None,
    *,
    assets: AssetProvider | None = None,
) -> ReportResult:
    """Build and serialize one report.

    Raises ``ValueError`` for an unknown kind and ``LayoutOverflowError`` when
    a section cannot fit on an empty page; no partial document is returned.
    """

    report_kind = ReportKind(kind)
    resolved = _resolve_options(options)
    serializer = serializer_for(resolved.format)
    generated_at = resolved.generated_at or datetime.now()
    builder = BUILDERS[report_kind](resolved, assets=assets)
    try:
        built = builder.build(records, generated_at=generated_at, draw=serializer.requires_document)
    except LayoutOverflowError as exc:
        logger.error("[report_builder] %s report aborted: %s", report_kind.value, exc)
        raise
    content = serializer.serialize(built)
    filename = render_filename(
        resolved.filename_pattern,
        kind=report_kind,
        report_format=resolved.format,
        generated_at=generated_at,
    )
    logger.info(
        "[report_builder] %s report ready: %s (%s pages, %s bytes, %s warnings)",
        report_kind.value,
        filename,
        built.page_count,
        len(content),
        len(built.warnings),
    )
    return ReportResult(
        content=content,
        filename=filename,
        media_type=serializer.media_type,
        page_count=built.page_count,
        warnings=tuple(built.warnings),
    )


__all__ = [
    "BUILDERS",
    "BuiltReport",
    "InventoryReportBuilder",
    "ReportBuilder",
    "ReportResult",
    "SalesReportBuilder",
    "generate_report",
]
