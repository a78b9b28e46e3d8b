"""
Cursor-based PDF rendering for test-case export.

Layout works in millimetres measured from the top of an A4 page. A
RenderCursor value is threaded through every layout call and returned
updated; page breaks happen only when the cursor passes a threshold.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Protocol

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from apps.worker.lib.grouping import CaseCollection, field_text, summarize_case
from apps.worker.steps.export_render.common import truncate
from apps.worker.steps.export_render.constants import (
    DESCRIPTION_LIMIT,
    PDF_CASE_BREAK_Y,
    PDF_CASE_DETAIL_ADVANCE,
    PDF_CASE_GAP,
    PDF_CASE_SPACER,
    PDF_CASE_TITLE_ADVANCE,
    PDF_CASE_X,
    PDF_IMAGE_ADVANCE,
    PDF_IMAGE_LIFT,
    PDF_IMAGE_SIZE,
    PDF_IMAGE_X,
    PDF_NO_IMAGE_ADVANCE,
    PDF_STEP_BREAK_Y,
    PDF_STEP_HEADER_ADVANCE,
    PDF_STEP_LINE_ADVANCE,
    PDF_STEP_SPACER,
    PDF_STEP_X,
    PDF_TOP_MARGIN,
    STEP_ACTION_LIMIT,
)
from packages.shared.artifacts import (
    FIELD_DESCRIPTION,
    FIELD_EXPECTED_RESULT,
    FIELD_HEADLINE,
    FIELD_PRIORITY,
    FIELD_STEP,
    FIELD_STEP_ID,
    FIELD_TEST_DATA,
)

if TYPE_CHECKING:
    from apps.worker.lib.image_policy import ImageAsset
    from packages.shared.dataset import Record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderCursor:
    y: float = PDF_TOP_MARGIN
    page_index: int = 1

    def advance(self, dy: float) -> RenderCursor:
        return replace(self, y=self.y + dy)

    def next_page(self) -> RenderCursor:
        return RenderCursor(y=PDF_TOP_MARGIN, page_index=self.page_index + 1)


class PdfSurface(Protocol):
    """Drawing target. Coordinates are mm from the top-left corner."""

    def new_page(self) -> None:
        ...

    def text(self, x: float, y: float, value: str, size: int, bold: bool = False) -> None:
        ...

    def image(self, handle: Any, x: float, y: float, width: float, height: float) -> None:
        ...


class ReportlabSurface:
    def __init__(self, pagesize: tuple[float, float] = A4):
        self._buffer = io.BytesIO()
        self._canvas = canvas.Canvas(self._buffer, pagesize=pagesize)
        self._page_height = pagesize[1]

    def new_page(self) -> None:
        self._canvas.showPage()

    def text(self, x: float, y: float, value: str, size: int, bold: bool = False) -> None:
        self._canvas.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        self._canvas.drawString(x * mm, self._page_height - y * mm, value)

    def image(self, handle: Any, x: float, y: float, width: float, height: float) -> None:
        self._canvas.drawImage(
            handle,
            x * mm,
            self._page_height - (y + height) * mm,
            width=width * mm,
            height=height * mm,
        )

    def finish(self) -> bytes:
        self._canvas.save()
        return self._buffer.getvalue()


def break_page_if_needed(surface: PdfSurface, cursor: RenderCursor, threshold: float) -> RenderCursor:
    if cursor.y > threshold:
        surface.new_page()
        return cursor.next_page()
    return cursor


def layout_case_header(surface: PdfSurface, cursor: RenderCursor, case_key: str, header: Record | None) -> RenderCursor:
    cursor = break_page_if_needed(surface, cursor, PDF_CASE_BREAK_Y)

    surface.text(PDF_CASE_X, cursor.y, f"Test Case: {case_key}", size=16, bold=True)
    cursor = cursor.advance(PDF_CASE_TITLE_ADVANCE)

    if header is not None:
        details = (
            ("Headline", field_text(header, FIELD_HEADLINE)),
            ("Description", truncate(field_text(header, FIELD_DESCRIPTION), DESCRIPTION_LIMIT)),
            ("Priority", field_text(header, FIELD_PRIORITY)),
        )
        for label, value in details:
            if value:
                surface.text(PDF_CASE_X, cursor.y, f"{label}: {value}", size=12)
                cursor = cursor.advance(PDF_CASE_DETAIL_ADVANCE)

    return cursor.advance(PDF_CASE_SPACER)


def layout_step(surface: PdfSurface, cursor: RenderCursor, step: Record, image: Any | None) -> RenderCursor:
    cursor = break_page_if_needed(surface, cursor, PDF_STEP_BREAK_Y)

    surface.text(PDF_CASE_X, cursor.y, f"Step {field_text(step, FIELD_STEP_ID)}:", size=11, bold=True)
    cursor = cursor.advance(PDF_STEP_HEADER_ADVANCE)

    lines = (
        ("Action", truncate(field_text(step, FIELD_STEP), STEP_ACTION_LIMIT)),
        ("Test Data", field_text(step, FIELD_TEST_DATA)),
        ("Expected Result", field_text(step, FIELD_EXPECTED_RESULT)),
    )
    for label, value in lines:
        if value:
            surface.text(PDF_STEP_X, cursor.y, f"{label}: {value}", size=10)
            cursor = cursor.advance(PDF_STEP_LINE_ADVANCE)

    if image is not None:
        width, height = PDF_IMAGE_SIZE
        surface.image(image, PDF_IMAGE_X, cursor.y - PDF_IMAGE_LIFT, width, height)
        cursor = cursor.advance(PDF_IMAGE_ADVANCE)
    else:
        cursor = cursor.advance(PDF_NO_IMAGE_ADVANCE)

    return cursor.advance(PDF_STEP_SPACER)


def layout_cases(surface: PdfSurface, cases: CaseCollection, image: Any | None = None) -> RenderCursor:
    cursor = RenderCursor()
    for case_key, case in cases.items():
        header, steps = summarize_case(case)
        cursor = layout_case_header(surface, cursor, case_key, header)
        for step in steps:
            cursor = layout_step(surface, cursor, step, image)
        cursor = cursor.advance(PDF_CASE_GAP)
    return cursor


def _image_reader(asset: ImageAsset | None) -> ImageReader | None:
    if asset is None:
        return None
    try:
        reader = ImageReader(io.BytesIO(asset.data))
        reader.getSize()
    except (OSError, ValueError) as exc:
        logger.error(f"Error adding reusable image {asset.key}: {exc}")
        return None
    return reader


def generate_cursor_pdf(cases: CaseCollection, shared_image: ImageAsset | None = None) -> bytes:
    """Render grouped cases to a plain paginated PDF."""
    surface = ReportlabSurface()
    cursor = layout_cases(surface, cases, _image_reader(shared_image))
    logger.info(f"PDF laid out: {len(cases)} cases over {cursor.page_index} page(s)")
    return surface.finish()
