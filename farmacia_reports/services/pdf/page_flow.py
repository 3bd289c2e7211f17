"""Vertical page flow: cursor tracking, page breaks, header/footer passes."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging

from farmacia_reports.core.errors import AssetError, LayoutOverflowError
from farmacia_reports.core.report_config_models import ReportOptions
from farmacia_reports.core.report_theme import to_rgb255
from .assets import AssetProvider, draw_image_asset
from .primitives import gradient_fill
from .surface import DrawingSurface, LayoutBox
from .theme import WHITE, ResolvedTheme

logger = logging.getLogger(__name__)


@dataclass
class PageState:
    page_number: int
    cursor_y: float
    page_height: float
    page_width: float
    margin: float


class PageFlowController:
    """Own the vertical cursor of one document build.

    Breaks are explicit: a section asks ``ensure_space`` before drawing
    something that may not fit, nothing is moved automatically.
    """

    def __init__(
        self,
        surface: DrawingSurface,
        options: ReportOptions,
        theme: ResolvedTheme,
        *,
        title: str,
        subtitle: str = "",
        assets: AssetProvider | None = None,
    ) -> None:
        self.surface = surface
        self.options = options
        self.theme = theme
        self.title = title
        self.subtitle = subtitle
        self.assets = assets
        self.state: PageState | None = None
        self.asset_errors: list[AssetError] = []
        self.page_breaks = 0
        self._logo_failed = False
        self._finalized = False
        layout = options.layout
        self.margin = layout.margin_mm
        self.header_height = layout.header_height_mm
        self.footer_reserve = layout.footer_reserve_mm
        self.content_top = self.margin + self.header_height + layout.header_gap_mm

    @property
    def content_width(self) -> float:
        return self.surface.width - 2 * self.margin

    @property
    def max_content_height(self) -> float:
        """Room available on a fresh page with a header."""
        return self.surface.height - self.content_top - self.footer_reserve

    @property
    def cursor_y(self) -> float:
        return self._require_state().cursor_y

    @property
    def available_height(self) -> float:
        state = self._require_state()
        return max(0.0, state.page_height - state.cursor_y - self.footer_reserve)

    def _require_state(self) -> PageState:
        if self.state is None:
            raise RuntimeError("No page started: call new_page() first")
        return self.state

    def new_page(self, *, with_header: bool = True) -> PageState:
        if self._finalized:
            raise RuntimeError("Document already finalized")
        number = self.surface.add_page()
        if with_header:
            self._draw_header()
        self.state = PageState(
            page_number=number,
            cursor_y=self.content_top if with_header else self.margin,
            page_height=self.surface.height,
            page_width=self.surface.width,
            margin=self.margin,
        )
        return self.state

    def advance(self, height: float) -> float:
        if height < 0:
            raise ValueError("The cursor only moves forward")
        state = self._require_state()
        state.cursor_y += height
        return state.cursor_y

    def fits(self, height: float) -> bool:
        return height <= self.available_height

    def ensure_space(self, height: float, *, section: str = "contenido") -> bool:
        """Start a new page when ``height`` does not fit; return True on a break."""
        if height > self.max_content_height:
            raise LayoutOverflowError(section, height, self.max_content_height)
        if self.state is None:
            self.new_page()
            return True
        if self.fits(height):
            return False
        logger.debug(
            "[report_flow] page break in %s: needed %.1f mm, %.1f mm left on page %s",
            section,
            height,
            self.available_height,
            self.state.page_number,
        )
        self.page_breaks += 1
        self.new_page()
        return True

    def box(self, height: float) -> LayoutBox:
        """Full-width box starting at the cursor."""
        return LayoutBox(self.margin, self.cursor_y, self.content_width, height)

    def section_title(self, text: str) -> None:
        self.ensure_space(12, section=text)
        y = self.cursor_y
        self.surface.text(self.margin, y + 6, text, size=13, color=self.theme.text, bold=True)
        self.surface.line(
            self.margin,
            y + 8.5,
            self.margin + self.content_width,
            y + 8.5,
            color=self.theme.primary,
            width=0.6,
        )
        self.advance(12)

    def draw_logo(self, x: float, y: float, max_height: float, *, max_width: float | None = None) -> float:
        """Draw the branding logo if one is configured; return the width used.

        A failed load is remembered so later pages do not retry it.
        """
        logo = self.options.branding.logo_path
        if not logo or self.assets is None or self._logo_failed:
            return 0.0
        outcome = draw_image_asset(
            self.surface,
            self.assets,
            logo,
            x,
            y,
            max_width=max_width or self.options.branding.logo_width_mm,
            max_height=max_height,
        )
        if not outcome.ok:
            self._logo_failed = True
            self.asset_errors.append(outcome.error)
            return 0.0
        return outcome.box.width

    def _draw_header(self) -> None:
        band = LayoutBox(self.margin, self.margin, self.content_width, self.header_height)
        gradient_fill(self.surface, band, self.theme.primary, self.theme.gradient_end)
        logo_width = self.draw_logo(band.x + 3, band.y + 3, band.height - 6)
        text_x = band.x + 5 + (logo_width + 3 if logo_width else 0)
        self.surface.text(text_x, band.y + 10, self.title, size=14, color=WHITE, bold=True)
        if self.subtitle:
            self.surface.text(text_x, band.y + 17, self.subtitle, size=9, color=WHITE)
        self.surface.text(
            band.right - 4,
            band.y + band.height - 4,
            self.options.branding.company_name,
            size=8,
            color=WHITE,
            align="right",
        )

    def _draw_footer(self, page_number: int, page_count: int, stamp: str) -> None:
        width, height = self.surface.width, self.surface.height
        line_y = height - self.footer_reserve + 3
        text_y = line_y + 6
        self.surface.line(self.margin, line_y, width - self.margin, line_y, color=self.theme.border, width=0.4)
        self.surface.text(
            self.margin, text_y, self.options.branding.attribution, size=8, color=self.theme.muted_text
        )
        self.surface.text(width / 2, text_y, f"Generado: {stamp}", size=8, color=self.theme.muted_text, align="center")
        self.surface.text(
            width - self.margin,
            text_y,
            f"Página {page_number} de {page_count}",
            size=8,
            color=self.theme.muted_text,
            align="right",
        )

    def _draw_watermark(self) -> None:
        watermark = self.options.watermark
        self.surface.text(
            self.surface.width / 2,
            self.surface.height / 2,
            watermark.text,
            size=watermark.font_size,
            color=to_rgb255(watermark.color),
            bold=True,
            align="center",
        )

    def finalize(self, generated_at: datetime) -> int:
        """Stamp footers then the watermark over every page; return the page count."""
        if self._finalized:
            raise RuntimeError("Document already finalized")
        page_count = self.surface.total_pages()
        stamp = generated_at.strftime(self.options.locale.datetime_format)
        for number in range(1, page_count + 1):
            with self.surface.page(number):
                self._draw_footer(number, page_count, stamp)
        if self.options.watermark.enabled and self.options.watermark.text:
            for number in range(1, page_count + 1):
                with self.surface.page(number):
                    self._draw_watermark()
        self._finalized = True
        logger.debug("[report_flow] finalized %s pages (%s breaks)", page_count, self.page_breaks)
        return page_count
