"""Report export routes."""
from __future__ import annotations

import io
import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from farmacia_reports.core.errors import LayoutOverflowError, ReportError
from farmacia_reports.core.report_config_models import ReportKind, ReportOptions
from farmacia_reports.services.report_builder import ReportResult, generate_report

logger = logging.getLogger(__name__)

router = APIRouter()


class ReportExportRequest(BaseModel):
    # records stay loose here: malformed ones are dropped with a warning, not rejected
    records: list[dict[str, Any]] = Field(default_factory=list)
    options: ReportOptions = Field(default_factory=ReportOptions)


def _stream(result: ReportResult) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(result.content),
        media_type=result.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "X-Report-Pages": str(result.page_count),
            "X-Report-Warnings": str(len(result.warnings)),
        },
    )


def _export(kind: ReportKind, payload: ReportExportRequest) -> StreamingResponse:
    try:
        result = generate_report(kind, payload.records, payload.options)
    except LayoutOverflowError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ReportError as exc:
        logger.exception("[reports_api] %s export failed", kind.value)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return _stream(result)


@router.post("/inventory/export")
def export_inventory(payload: ReportExportRequest) -> StreamingResponse:
    return _export(ReportKind.INVENTORY, payload)


@router.post("/sales/export")
def export_sales(payload: ReportExportRequest) -> StreamingResponse:
    return _export(ReportKind.SALES, payload)
