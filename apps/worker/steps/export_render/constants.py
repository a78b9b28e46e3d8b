"""
Layout constants for report rendering.
"""
from __future__ import annotations

# ── Spreadsheet ───────────────────────────────────────────────────────────
SHEET_TITLE = "Test Cases"
COLUMN_WIDTH = 25
HEADER_FILL_ARGB = "FFE0E0E0"
STEP_ROW_HEIGHT = 220
STEP_TEXT_PADDING = "\n" * 11
SHEET_IMAGE_SIZE = (70, 50)  # px
SHEET_IMAGE_COL_OFFSET = 10  # px
SHEET_IMAGE_ROW_OFFSETS = (90, 160)  # px, first and second copy

# ── Paginated PDF (millimetres, y measured from the top edge) ─────────────
PDF_TOP_MARGIN = 20
PDF_CASE_BREAK_Y = 250
PDF_STEP_BREAK_Y = 200
PDF_CASE_X = 20
PDF_STEP_X = 25
PDF_CASE_TITLE_ADVANCE = 10
PDF_CASE_DETAIL_ADVANCE = 8
PDF_CASE_SPACER = 5
PDF_STEP_HEADER_ADVANCE = 6
PDF_STEP_LINE_ADVANCE = 6
PDF_IMAGE_X = 130
PDF_IMAGE_LIFT = 15
PDF_IMAGE_SIZE = (60, 45)
PDF_IMAGE_ADVANCE = 50
PDF_NO_IMAGE_ADVANCE = 10
PDF_STEP_SPACER = 5
PDF_CASE_GAP = 10
DESCRIPTION_LIMIT = 80
STEP_ACTION_LIMIT = 100
ELLIPSIS = "..."

# ── Markup report ─────────────────────────────────────────────────────────
MARKUP_TEMPLATE = "test_cases_report.html"
EMPTY_CELL = "-"
REPORT_TITLES = {
    "shared": "Test Cases Report",
    "unique": "Test Cases Report - Unique Images",
}
