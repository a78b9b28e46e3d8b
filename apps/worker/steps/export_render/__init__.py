from .orchestrator import ReportService, build_report_service
from .cursor_pdf import generate_cursor_pdf
from .xlsx_render import generate_xlsx
from .markup_render import build_markup_report, generate_markup
from .html_pdf import ChromiumPdfRenderer

__all__ = [
    "ReportService",
    "build_report_service",
    "generate_cursor_pdf",
    "generate_xlsx",
    "build_markup_report",
    "generate_markup",
    "ChromiumPdfRenderer",
]
