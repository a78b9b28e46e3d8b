"""
XLSX rendering for test-case export.

One worksheet row per input record, independent of case grouping. Rows
whose STEP cell has content get two copies of the shared thumbnail.
"""
from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.drawing.image import Image as XLImage
from openpyxl.drawing.spreadsheet_drawing import AnchorMarker, OneCellAnchor
from openpyxl.drawing.xdr import XDRPositiveSize2D
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.utils.units import pixels_to_EMU

from apps.worker.lib.grouping import field_text
from apps.worker.steps.export_render.constants import (
    COLUMN_WIDTH,
    HEADER_FILL_ARGB,
    SHEET_IMAGE_COL_OFFSET,
    SHEET_IMAGE_ROW_OFFSETS,
    SHEET_IMAGE_SIZE,
    SHEET_TITLE,
    STEP_ROW_HEIGHT,
    STEP_TEXT_PADDING,
)
from packages.shared.artifacts import FIELD_STEP

if TYPE_CHECKING:
    from apps.worker.lib.image_policy import ImageAsset
    from packages.shared.dataset import Record

logger = logging.getLogger(__name__)

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color=HEADER_FILL_ARGB, end_color=HEADER_FILL_ARGB, fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)
STEP_ALIGNMENT = Alignment(vertical="top", horizontal="left", wrap_text=True)


def header_columns(records: Sequence[Record]) -> list[str]:
    """Column set is the key order of the first record; later extra keys are ignored."""
    if not records:
        return []
    return list(records[0].keys())


def _sheet_text(text: str) -> str:
    # Control characters such as \x0b are not valid in worksheet XML.
    return ILLEGAL_CHARACTERS_RE.sub("", text)


def _cell_value(value: Any) -> Any:
    if value is None or isinstance(value, (int, float, bool)):
        return value
    return _sheet_text(value if isinstance(value, str) else str(value))


def _anchored_image(data: bytes, col: int, row: int, row_offset: int) -> XLImage:
    width, height = SHEET_IMAGE_SIZE
    img = XLImage(io.BytesIO(data))
    img.width, img.height = width, height
    marker = AnchorMarker(
        col=col,
        colOff=pixels_to_EMU(SHEET_IMAGE_COL_OFFSET),
        row=row,
        rowOff=pixels_to_EMU(row_offset),
    )
    img.anchor = OneCellAnchor(_from=marker, ext=XDRPositiveSize2D(pixels_to_EMU(width), pixels_to_EMU(height)))
    return img


def generate_xlsx(records: Sequence[Record], shared_image: ImageAsset | None = None) -> bytes:
    """Render the flat record list into a single-sheet workbook."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    headers = header_columns(records)
    if headers:
        ws.append([_sheet_text(name) for name in headers])
        for cell in ws[1]:
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
        for idx in range(1, len(headers) + 1):
            ws.column_dimensions[get_column_letter(idx)].width = COLUMN_WIDTH

    step_col = headers.index(FIELD_STEP) + 1 if FIELD_STEP in headers else None
    image_rows = 0

    for row_idx, record in enumerate(records, start=2):
        # Values are placed by header name so a record with a different
        # field set cannot shift later columns.
        ws.append([_cell_value(record.get(name)) for name in headers])

        step_text = field_text(record, FIELD_STEP)
        if not step_text.strip() or shared_image is None or step_col is None:
            continue

        logger.debug(f"Adding images for step: {step_text}")
        try:
            images = [
                _anchored_image(shared_image.data, step_col - 1, row_idx - 1, offset)
                for offset in SHEET_IMAGE_ROW_OFFSETS
            ]
        except (OSError, ValueError) as exc:
            logger.error(f"Error adding images for row {row_idx}: {exc}")
            continue

        ws.row_dimensions[row_idx].height = STEP_ROW_HEIGHT
        step_cell = ws.cell(row=row_idx, column=step_col)
        step_cell.value = _sheet_text(step_text) + STEP_TEXT_PADDING
        step_cell.alignment = STEP_ALIGNMENT
        for img in images:
            ws.add_image(img)
        image_rows += 1

    for row in ws.iter_rows():
        for cell in row:
            if cell.value is not None:
                cell.border = THIN_BORDER

    logger.info(f"Workbook built: {len(records)} data rows, {image_rows} rows with images")
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
