"""Page geometry, number formatting and filenames derived from report options."""
from __future__ import annotations

from datetime import datetime
import logging
from typing import Any

from reportlab.lib.pagesizes import A4, landscape, letter, portrait
from reportlab.lib.units import mm

from farmacia_reports.core.report_config_models import (
    ReportFormat,
    ReportKind,
    ReportLayoutConfig,
    ReportLocaleConfig,
)

logger = logging.getLogger(__name__)

PERIOD_LABELS: dict[str, str] = {
    "all": "Todas las ventas",
    "day": "Ventas del día",
    "week": "Ventas de la semana",
    "month": "Ventas del mes",
    "year": "Ventas del año",
}

REPORT_TITLES: dict[ReportKind, str] = {
    ReportKind.INVENTORY: "Reporte de Inventario",
    ReportKind.SALES: "Reporte de Ventas",
}


def page_size_mm(layout: ReportLayoutConfig) -> tuple[float, float]:
    """Page width and height in millimetres."""
    size_map = {"A4": A4, "Letter": letter}
    base = size_map.get(layout.size, A4)
    width, height = landscape(base) if layout.orientation == "landscape" else portrait(base)
    return (round(width / mm, 2), round(height / mm, 2))


def format_number(value: float, locale: ReportLocaleConfig, *, decimals: int | None = None) -> str:
    places = locale.decimal_places if decimals is None else decimals
    text = f"{value:,.{places}f}"
    if locale.thousands_separator != ",":
        # swap separators through a placeholder so "." and "," can trade places
        decimal_mark = "," if locale.thousands_separator == "." else "."
        text = text.replace(",", "\0").replace(".", decimal_mark).replace("\0", locale.thousands_separator)
    return text


def format_money(value: float, locale: ReportLocaleConfig) -> str:
    return f"{locale.currency_symbol}{format_number(value, locale)}"


def format_count(value: float, locale: ReportLocaleConfig) -> str:
    return format_number(value, locale, decimals=0)


def render_filename(
    pattern: str,
    *,
    kind: ReportKind,
    report_format: ReportFormat,
    generated_at: datetime,
    context: dict[str, Any] | None = None,
) -> str:
    variables: dict[str, Any] = {
        "kind": kind.value,
        "date": generated_at,
        "ext": report_format.value,
    }
    if context:
        variables.update(context)
    try:
        filename = pattern.format(**variables)
    except (KeyError, IndexError, ValueError, AttributeError) as exc:
        logger.warning("[report_config] invalid filename pattern %r: %s", pattern, exc)
        filename = f"{kind.value}_{generated_at.strftime('%Y%m%d_%H%M%S')}.{report_format.value}"
    suffix = f".{report_format.value}"
    if not filename.lower().endswith(suffix):
        filename = f"{filename}{suffix}"
    return filename
