"""
API route: Reports
"""
from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Iterator

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from apps.worker.steps.export_render.orchestrator import ReportService, build_report_service
from packages.shared.artifacts import report_error_message
from packages.shared.models import ReportKind

REPORT_TIMEOUT_SECONDS = float(os.getenv("REPORT_TIMEOUT_SECONDS", "180"))

router = APIRouter(prefix="/api", tags=["reports"])
logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    error: str


def get_report_service() -> Iterator[ReportService]:
    service = build_report_service()
    try:
        yield service
    finally:
        service.close()


def _error_response(kind: ReportKind) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=report_error_message(kind)).model_dump(),
    )


async def _generate(kind: ReportKind, service: ReportService) -> Response:
    # On timeout the worker thread is abandoned, not stopped. Any Chromium it
    # launched is still bounded by RENDER_TIMEOUT_SECONDS and closed on exit.
    try:
        artifact = await asyncio.wait_for(
            run_in_threadpool(service.generate, kind),
            timeout=REPORT_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error(f"Report {kind.value} exceeded {REPORT_TIMEOUT_SECONDS:.0f}s deadline")
        return _error_response(kind)
    except Exception:
        logger.exception(f"Error generating {kind.value} report")
        return _error_response(kind)

    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


_ERROR_RESPONSES = {500: {"model": ErrorResponse}}


@router.post("/generate-excel-from-json", responses=_ERROR_RESPONSES)
async def generate_excel(service: ReportService = Depends(get_report_service)):
    """Workbook with one row per record and thumbnails on step rows."""
    return await _generate(ReportKind.EXCEL, service)


@router.post("/generate-pdf-from-json", responses=_ERROR_RESPONSES)
async def generate_pdf(service: ReportService = Depends(get_report_service)):
    """Plain paginated PDF with one shared image per step."""
    return await _generate(ReportKind.PDF, service)


@router.post("/generate-pdf-from-json-html", responses=_ERROR_RESPONSES)
async def generate_styled_pdf(service: ReportService = Depends(get_report_service)):
    """Styled PDF rendered from HTML, one shared image."""
    return await _generate(ReportKind.STYLED_PDF, service)


@router.post("/generate-pdf-from-json-html-unique", responses=_ERROR_RESPONSES)
async def generate_unique_pdf(service: ReportService = Depends(get_report_service)):
    """Styled PDF rendered from HTML, a distinct image per step."""
    return await _generate(ReportKind.UNIQUE_PDF, service)
