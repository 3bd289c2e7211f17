"""Paginated drawing surface recording primitive operations.

Coordinates are millimetres with the origin at the top-left corner of the
page, y growing downwards. Every draw call appends an immutable operation to
the current page; the PDF backend replays the recorded pages onto a ReportLab
canvas once the document is finalized. Keeping the pages as data is what lets
the finalize pass stamp "page X of N" footers after all pages exist.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
import io
import logging
from typing import Iterator, Sequence, Tuple, Union

from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

logger = logging.getLogger(__name__)

Color = Tuple[float, float, float]
Point = Tuple[float, float]

_BOLD_FONTS = {
    "Helvetica": "Helvetica-Bold",
    "Times-Roman": "Times-Bold",
    "Courier": "Courier-Bold",
}


@dataclass(frozen=True)
class LayoutBox:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def inset(self, dx: float, dy: float | None = None) -> "LayoutBox":
        dy = dx if dy is None else dy
        return LayoutBox(
            self.x + dx,
            self.y + dy,
            max(0.0, self.width - 2 * dx),
            max(0.0, self.height - 2 * dy),
        )

    def offset(self, dx: float, dy: float) -> "LayoutBox":
        return LayoutBox(self.x + dx, self.y + dy, self.width, self.height)


@dataclass(frozen=True)
class RectOp:
    x: float
    y: float
    width: float
    height: float
    fill: Color | None
    stroke: Color | None
    line_width: float = 0.2
    radius: float = 0.0
    alpha: float = 1.0


@dataclass(frozen=True)
class LineOp:
    x1: float
    y1: float
    x2: float
    y2: float
    color: Color
    width: float = 0.2


@dataclass(frozen=True)
class CircleOp:
    cx: float
    cy: float
    radius: float
    fill: Color | None
    stroke: Color | None
    line_width: float = 0.2


@dataclass(frozen=True)
class PolygonOp:
    points: Tuple[Point, ...]
    fill: Color | None
    stroke: Color | None
    line_width: float = 0.1


@dataclass(frozen=True)
class TextOp:
    x: float
    y: float
    text: str
    size: float
    color: Color
    bold: bool = False
    align: str = "left"


@dataclass(frozen=True)
class ImageOp:
    path: str
    x: float
    y: float
    width: float
    height: float


DrawOp = Union[RectOp, LineOp, CircleOp, PolygonOp, TextOp, ImageOp]


@dataclass
class Page:
    number: int
    width: float
    height: float
    ops: list[DrawOp] = field(default_factory=list)

    def texts(self) -> list[str]:
        return [op.text for op in self.ops if isinstance(op, TextOp)]

    def ops_of(self, op_type: type) -> list:
        return [op for op in self.ops if isinstance(op, op_type)]


@dataclass
class Document:
    width: float
    height: float
    title: str = ""
    author: str = ""
    pages: list[Page] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def page_texts(self) -> list[list[str]]:
        return [page.texts() for page in self.pages]


class DrawingSurface:
    """Forward-only paginated canvas in page-space millimetres."""

    def __init__(
        self,
        width: float,
        height: float,
        *,
        font_family: str = "Helvetica",
        title: str = "",
        author: str = "",
    ) -> None:
        self.document = Document(width=width, height=height, title=title, author=author)
        self.font_family = font_family
        self._current: Page | None = None

    @property
    def width(self) -> float:
        return self.document.width

    @property
    def height(self) -> float:
        return self.document.height

    def add_page(self) -> int:
        page = Page(number=len(self.document.pages) + 1, width=self.width, height=self.height)
        self.document.pages.append(page)
        self._current = page
        logger.debug("[report_surface] page %s added", page.number)
        return page.number

    def current_page_number(self) -> int:
        return self._current.number if self._current else 0

    def total_pages(self) -> int:
        return self.document.page_count

    @contextmanager
    def page(self, number: int) -> Iterator[Page]:
        """Temporarily redirect drawing to an existing page (finalize pass)."""
        if not 1 <= number <= self.document.page_count:
            raise IndexError(f"Page {number} does not exist")
        previous = self._current
        self._current = self.document.pages[number - 1]
        try:
            yield self._current
        finally:
            self._current = previous

    def _append(self, op: DrawOp) -> None:
        if self._current is None:
            raise RuntimeError("No page to draw on: call add_page() first")
        self._current.ops.append(op)

    def rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        fill: Color | None = None,
        stroke: Color | None = None,
        line_width: float = 0.2,
        alpha: float = 1.0,
    ) -> None:
        self._append(RectOp(x, y, width, height, fill, stroke, line_width, 0.0, alpha))

    def rounded_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        radius: float,
        *,
        fill: Color | None = None,
        stroke: Color | None = None,
        line_width: float = 0.2,
    ) -> None:
        radius = max(0.0, min(radius, width / 2, height / 2))
        self._append(RectOp(x, y, width, height, fill, stroke, line_width, radius))

    def line(self, x1: float, y1: float, x2: float, y2: float, *, color: Color, width: float = 0.2) -> None:
        self._append(LineOp(x1, y1, x2, y2, color, width))

    def circle(
        self,
        cx: float,
        cy: float,
        radius: float,
        *,
        fill: Color | None = None,
        stroke: Color | None = None,
        line_width: float = 0.2,
    ) -> None:
        self._append(CircleOp(cx, cy, radius, fill, stroke, line_width))

    def polygon(
        self,
        points: Sequence[Point],
        *,
        fill: Color | None = None,
        stroke: Color | None = None,
        line_width: float = 0.1,
    ) -> None:
        if len(points) < 3:
            raise ValueError("A polygon needs at least three points")
        self._append(PolygonOp(tuple(points), fill, stroke, line_width))

    def text(
        self,
        x: float,
        y: float,
        value: str,
        *,
        size: float = 10,
        color: Color = (0, 0, 0),
        bold: bool = False,
        align: str = "left",
    ) -> None:
        if align not in {"left", "center", "right"}:
            raise ValueError(f"Unknown text alignment: {align}")
        self._append(TextOp(x, y, value, size, color, bold, align))

    def image(self, path: str, x: float, y: float, width: float, height: float) -> None:
        self._append(ImageOp(path, x, y, width, height))

    def font_name(self, bold: bool = False) -> str:
        if bold:
            return _BOLD_FONTS.get(self.font_family, self.font_family)
        return self.font_family

    def text_width(self, value: str, size: float, bold: bool = False) -> float:
        return pdfmetrics.stringWidth(value, self.font_name(bold), size) / mm


def _rl_color(value: Color) -> colors.Color:
    r, g, b = value
    return colors.Color(r / 255, g / 255, b / 255)


def _replay_op(pdf: canvas.Canvas, op: DrawOp, page_height: float, surface_fonts: DrawingSurface) -> None:
    if isinstance(op, RectOp):
        pdf.saveState()
        if op.fill is not None:
            pdf.setFillColor(_rl_color(op.fill))
            if op.alpha < 1.0:
                pdf.setFillAlpha(op.alpha)
        if op.stroke is not None:
            pdf.setStrokeColor(_rl_color(op.stroke))
            pdf.setLineWidth(op.line_width * mm)
        x, y = op.x * mm, (page_height - op.y - op.height) * mm
        fill, stroke = int(op.fill is not None), int(op.stroke is not None)
        if op.radius > 0:
            pdf.roundRect(x, y, op.width * mm, op.height * mm, op.radius * mm, stroke=stroke, fill=fill)
        else:
            pdf.rect(x, y, op.width * mm, op.height * mm, stroke=stroke, fill=fill)
        pdf.restoreState()
    elif isinstance(op, LineOp):
        pdf.saveState()
        pdf.setStrokeColor(_rl_color(op.color))
        pdf.setLineWidth(op.width * mm)
        pdf.line(op.x1 * mm, (page_height - op.y1) * mm, op.x2 * mm, (page_height - op.y2) * mm)
        pdf.restoreState()
    elif isinstance(op, CircleOp):
        pdf.saveState()
        if op.fill is not None:
            pdf.setFillColor(_rl_color(op.fill))
        if op.stroke is not None:
            pdf.setStrokeColor(_rl_color(op.stroke))
            pdf.setLineWidth(op.line_width * mm)
        pdf.circle(
            op.cx * mm,
            (page_height - op.cy) * mm,
            op.radius * mm,
            stroke=int(op.stroke is not None),
            fill=int(op.fill is not None),
        )
        pdf.restoreState()
    elif isinstance(op, PolygonOp):
        pdf.saveState()
        if op.fill is not None:
            pdf.setFillColor(_rl_color(op.fill))
        if op.stroke is not None:
            pdf.setStrokeColor(_rl_color(op.stroke))
            pdf.setLineWidth(op.line_width * mm)
        path = pdf.beginPath()
        first, *rest = op.points
        path.moveTo(first[0] * mm, (page_height - first[1]) * mm)
        for px, py in rest:
            path.lineTo(px * mm, (page_height - py) * mm)
        path.close()
        pdf.drawPath(path, stroke=int(op.stroke is not None), fill=int(op.fill is not None))
        pdf.restoreState()
    elif isinstance(op, TextOp):
        pdf.saveState()
        pdf.setFillColor(_rl_color(op.color))
        pdf.setFont(surface_fonts.font_name(op.bold), op.size)
        x, y = op.x * mm, (page_height - op.y) * mm
        if op.align == "center":
            pdf.drawCentredString(x, y, op.text)
        elif op.align == "right":
            pdf.drawRightString(x, y, op.text)
        else:
            pdf.drawString(x, y, op.text)
        pdf.restoreState()
    elif isinstance(op, ImageOp):
        pdf.drawImage(
            ImageReader(op.path),
            op.x * mm,
            (page_height - op.y - op.height) * mm,
            width=op.width * mm,
            height=op.height * mm,
            preserveAspectRatio=True,
            mask="auto",
        )


def render_pdf(surface: DrawingSurface) -> bytes:
    """Replay every recorded page onto a ReportLab canvas and return the bytes."""
    document = surface.document
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(document.width * mm, document.height * mm), invariant=1)
    if document.title:
        pdf.setTitle(document.title)
    if document.author:
        pdf.setAuthor(document.author)
    for page in document.pages:
        for op in page.ops:
            _replay_op(pdf, op, document.height, surface)
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()
