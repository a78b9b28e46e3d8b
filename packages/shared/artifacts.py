"""
Central report-kind registry for the service, API, CLI, and tests.
"""
from __future__ import annotations

from datetime import datetime, timezone

from packages.shared.models.enums import ReportKind

MEDIA_TYPE_XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MEDIA_TYPE_PDF = "application/pdf"

# Record field names used by the source dataset
FIELD_CASE_KEY = "CASE KEY"
FIELD_HEADLINE = "HEADLINE"
FIELD_DESCRIPTION = "DESCRIPTION"
FIELD_PRIORITY = "PRIORITY"
FIELD_STEP_ID = "STEP ID"
FIELD_STEP = "STEP"
FIELD_TEST_DATA = "TEST DATA"
FIELD_EXPECTED_RESULT = "EXPECTED RESULT"


REPORT_MEDIA_TYPE_MAP: dict[ReportKind, str] = {
    ReportKind.EXCEL: MEDIA_TYPE_XLSX,
    ReportKind.PDF: MEDIA_TYPE_PDF,
    ReportKind.STYLED_PDF: MEDIA_TYPE_PDF,
    ReportKind.UNIQUE_PDF: MEDIA_TYPE_PDF,
}

REPORT_EXTENSION_MAP: dict[ReportKind, str] = {
    ReportKind.EXCEL: "xlsx",
    ReportKind.PDF: "pdf",
    ReportKind.STYLED_PDF: "pdf",
    ReportKind.UNIQUE_PDF: "pdf",
}

REPORT_FILENAME_PREFIX_MAP: dict[ReportKind, str] = {
    ReportKind.EXCEL: "test-cases-with-images",
    ReportKind.PDF: "test-cases-with-images",
    ReportKind.STYLED_PDF: "test-cases-styled",
    ReportKind.UNIQUE_PDF: "test-cases-unique-images",
}

REPORT_ERROR_MESSAGE_MAP: dict[ReportKind, str] = {
    ReportKind.EXCEL: "Error generating Excel file",
    ReportKind.PDF: "Error generating PDF file",
    ReportKind.STYLED_PDF: "Error generating styled PDF file",
    ReportKind.UNIQUE_PDF: "Error generating styled PDF with unique images",
}


def report_media_type(kind: ReportKind) -> str:
    return REPORT_MEDIA_TYPE_MAP[kind]


def report_extension(kind: ReportKind) -> str:
    return REPORT_EXTENSION_MAP[kind]


def report_error_message(kind: ReportKind) -> str:
    return REPORT_ERROR_MESSAGE_MAP[kind]


def filename_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC timestamp made filesystem safe, e.g. 2025-04-07T10-11-12-123Z."""
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H-%M-%S-") + f"{utc.microsecond // 1000:03d}Z"


def report_filename(kind: ReportKind, generated_at: datetime) -> str:
    prefix = REPORT_FILENAME_PREFIX_MAP[kind]
    return f"{prefix}-{filename_timestamp(generated_at)}.{report_extension(kind)}"
