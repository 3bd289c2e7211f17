"""Palette resolution for the report renderer."""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from reportlab.pdfbase import pdfmetrics

from farmacia_reports.core.report_config_models import ReportThemeConfig
from farmacia_reports.core.report_theme import RGB, to_rgb255

_BUILTIN_FONTS = {"Helvetica", "Times-Roman", "Courier"}

WHITE: RGB = (255, 255, 255)
SHADOW_GRAY: RGB = (200, 200, 200)
GRID_GRAY: RGB = (220, 220, 220)

# Chart series colours, cycled in dataset order.
SERIES_COLORS: tuple[RGB, ...] = (
    (34, 139, 34),
    (41, 128, 185),
    (230, 126, 34),
    (142, 68, 173),
    (22, 160, 133),
    (192, 57, 43),
    (241, 196, 15),
    (52, 73, 94),
    (46, 204, 113),
    (211, 84, 0),
)

STOCK_LEVEL_COLORS: dict[str, RGB] = {
    "critical": (204, 51, 51),
    "low": (230, 126, 34),
    "normal": (41, 128, 185),
    "high": (51, 153, 51),
}

STATUS_COLORS: dict[str, RGB] = {
    "completed": (51, 153, 51),
    "pending": (241, 196, 15),
    "cancelled": (204, 51, 51),
}


@dataclass(frozen=True)
class ResolvedTheme:
    font_family: str
    primary: RGB
    secondary: RGB
    gradient_end: RGB
    text: RGB
    muted_text: RGB
    panel: RGB
    table_header_bg: RGB
    table_header_text: RGB
    table_row_alt_bg: RGB
    border: RGB
    flagged_text: RGB
    positive: RGB
    negative: RGB


def series_color(index: int) -> RGB:
    return SERIES_COLORS[index % len(SERIES_COLORS)]


def resolve_theme(theme: ReportThemeConfig) -> ResolvedTheme:
    theme_key = tuple(sorted(theme.model_dump().items()))
    return _resolve_theme_cached(theme_key)


@lru_cache(maxsize=32)
def _resolve_theme_cached(theme_key: tuple[tuple[str, object], ...]) -> ResolvedTheme:
    theme = ReportThemeConfig(**dict(theme_key))
    default_theme = ReportThemeConfig()

    def _safe_color(value: str, fallback: str) -> RGB:
        try:
            return to_rgb255(value)
        except ValueError:
            return to_rgb255(fallback)

    font_family = theme.font_family
    if font_family not in set(pdfmetrics.getRegisteredFontNames()) | _BUILTIN_FONTS:
        font_family = default_theme.font_family

    return ResolvedTheme(
        font_family=font_family,
        primary=_safe_color(theme.primary_color, default_theme.primary_color),
        secondary=_safe_color(theme.secondary_color, default_theme.secondary_color),
        gradient_end=_safe_color(theme.gradient_end_color, default_theme.gradient_end_color),
        text=_safe_color(theme.text_color, default_theme.text_color),
        muted_text=_safe_color(theme.muted_text_color, default_theme.muted_text_color),
        panel=_safe_color(theme.panel_color, default_theme.panel_color),
        table_header_bg=_safe_color(theme.table_header_bg, default_theme.table_header_bg),
        table_header_text=_safe_color(theme.table_header_text, default_theme.table_header_text),
        table_row_alt_bg=_safe_color(theme.table_row_alt_bg, default_theme.table_row_alt_bg),
        border=_safe_color(theme.border_color, default_theme.border_color),
        flagged_text=_safe_color(theme.flagged_text_color, default_theme.flagged_text_color),
        positive=_safe_color(theme.positive_color, default_theme.positive_color),
        negative=_safe_color(theme.negative_color, default_theme.negative_color),
    )
