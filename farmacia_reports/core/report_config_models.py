"""Pydantic models for report export configuration."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from farmacia_reports.core.config import settings
from farmacia_reports.core.report_theme import parse_color


class ReportKind(str, Enum):
    INVENTORY = "inventory"
    SALES = "sales"


class ReportFormat(str, Enum):
    PDF = "pdf"
    CSV = "csv"
    JSON = "json"


def _validate_color_value(value: str) -> str:
    try:
        parse_color(value)
    except ValueError as exc:
        raise ValueError(
            f"Color inválido '{value}'. Formatos aceptados: #RGB, #RRGGBB, #RRGGBBAA, rgb(), rgba(), transparent."
        ) from exc
    return value


class ReportLocaleConfig(BaseModel):
    date_format: str = "%d/%m/%Y"
    datetime_format: str = "%d/%m/%Y %H:%M"
    currency_symbol: str = "$"
    decimal_places: int = Field(default=2, ge=0, le=4)
    thousands_separator: str = ","


class ReportLayoutConfig(BaseModel):
    size: Literal["A4", "Letter"] = "A4"
    orientation: Literal["portrait", "landscape"] = "portrait"
    margin_mm: float = Field(default=15, ge=0)
    header_height_mm: float = Field(default=25, ge=0)
    header_gap_mm: float = Field(default=8, ge=0)
    footer_reserve_mm: float = Field(default=20, ge=0)


class ReportBrandingConfig(BaseModel):
    company_name: str = "Farmacias Brasil"
    attribution: str = "Farmacias Brasil - Sistema de Gestión"
    logo_path: str | None = None
    logo_width_mm: float = Field(default=30, gt=0)
    accent_color: str = "#228b22"

    @field_validator("accent_color")
    @classmethod
    def validate_accent(cls, value: str) -> str:
        return _validate_color_value(value)


class ReportWatermarkConfig(BaseModel):
    enabled: bool = True
    text: str = "FARMACIAS BRASIL"
    font_size: float = Field(default=48, gt=0)
    color: str = "#ebebeb"

    @field_validator("color")
    @classmethod
    def validate_color(cls, value: str) -> str:
        return _validate_color_value(value)


class ReportChartConfig(BaseModel):
    pie_steps: int = Field(default=36, ge=3)
    bar_height: float = Field(default=8, gt=0)
    bar_spacing: float = Field(default=6, ge=0)
    axis_scale: Literal["global", "per_page"] = "global"
    vertical_bar_limit: int = Field(default=8, ge=1)
    label_max_length: int = Field(default=15, ge=2)


class ReportThemeConfig(BaseModel):
    font_family: str = "Helvetica"
    primary_color: str = "#228b22"
    secondary_color: str = "#27ae60"
    gradient_end_color: str = "#16a085"
    text_color: str = "#2c3e50"
    muted_text_color: str = "#7f8c8d"
    panel_color: str = "#f7f9fa"
    table_header_bg: str = "#228b22"
    table_header_text: str = "#ffffff"
    table_row_alt_bg: str = "#f5f5f5"
    border_color: str = "#c8c8c8"
    flagged_text_color: str = "#cc3333"
    positive_color: str = "#339933"
    negative_color: str = "#cc3333"

    @field_validator(
        "primary_color",
        "secondary_color",
        "gradient_end_color",
        "text_color",
        "muted_text_color",
        "panel_color",
        "table_header_bg",
        "table_header_text",
        "table_row_alt_bg",
        "border_color",
        "flagged_text_color",
        "positive_color",
        "negative_color",
    )
    @classmethod
    def validate_colors(cls, value: str) -> str:
        return _validate_color_value(value)


class ReportOptions(BaseModel):
    """Caller supplied formatting options for one report."""

    model_config = ConfigDict(extra="forbid")

    format: ReportFormat = Field(default_factory=lambda: ReportFormat(settings.REPORTS_DEFAULT_FORMAT))
    period: Literal["all", "day", "week", "month", "year"] = "all"
    generated_at: datetime | None = None
    default_reorder_level: int = Field(default=10, ge=0)
    filename_pattern: str = "{kind}_{date:%Y%m%d_%H%M%S}.{ext}"
    locale: ReportLocaleConfig = Field(default_factory=ReportLocaleConfig)
    layout: ReportLayoutConfig = Field(default_factory=ReportLayoutConfig)
    branding: ReportBrandingConfig = Field(default_factory=ReportBrandingConfig)
    watermark: ReportWatermarkConfig = Field(default_factory=ReportWatermarkConfig)
    charts: ReportChartConfig = Field(default_factory=ReportChartConfig)
    theme: ReportThemeConfig = Field(default_factory=ReportThemeConfig)
