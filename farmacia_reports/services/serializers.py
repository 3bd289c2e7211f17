"""Turn a built report into bytes for each export format."""
from __future__ import annotations

import csv
import io
import json
from typing import TYPE_CHECKING, ClassVar

from farmacia_reports.core.report_config_models import ReportFormat
from .pdf.surface import render_pdf
from .pdf.table import cell_text

if TYPE_CHECKING:
    from .report_builder import BuiltReport


class Serializer:
    report_format: ClassVar[ReportFormat]
    media_type: ClassVar[str]
    requires_document: ClassVar[bool] = False

    @property
    def extension(self) -> str:
        return self.report_format.value

    def serialize(self, report: "BuiltReport") -> bytes:
        raise NotImplementedError


def _plain_rows(report: "BuiltReport") -> list[list[str]]:
    return [[cell_text(cell) for cell in row] for row in report.rows]


class PdfSerializer(Serializer):
    report_format = ReportFormat.PDF
    media_type = "application/pdf"
    requires_document = True

    def serialize(self, report: "BuiltReport") -> bytes:
        if report.surface is None:
            raise ValueError("The PDF export needs a drawn document")
        return render_pdf(report.surface)


class CsvSerializer(Serializer):
    """Table rows as CSV, prefixed with a BOM so spreadsheet tools detect UTF-8."""

    report_format = ReportFormat.CSV
    media_type = "text/csv; charset=utf-8"

    def serialize(self, report: "BuiltReport") -> bytes:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow([column.label for column in report.columns])
        writer.writerows(_plain_rows(report))
        return buffer.getvalue().encode("utf-8-sig")


class JsonSerializer(Serializer):
    report_format = ReportFormat.JSON
    media_type = "application/json"

    def serialize(self, report: "BuiltReport") -> bytes:
        headers = [column.label for column in report.columns]
        payload = {
            "kind": report.kind.value,
            "title": report.title,
            "generated_at": report.generated_at.isoformat(),
            "summary": report.summary.model_dump(mode="json"),
            "columns": headers,
            "rows": [dict(zip(headers, row)) for row in _plain_rows(report)],
            "warnings": list(report.warnings),
        }
        return json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")


SERIALIZERS: dict[ReportFormat, type[Serializer]] = {
    ReportFormat.PDF: PdfSerializer,
    ReportFormat.CSV: CsvSerializer,
    ReportFormat.JSON: JsonSerializer,
}


def serializer_for(report_format: ReportFormat | str) -> Serializer:
    """Return the serializer of ``report_format``; unknown formats raise ValueError."""
    return SERIALIZERS[ReportFormat(report_format)]()
