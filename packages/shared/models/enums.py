from enum import Enum


class ReportKind(str, Enum):
    EXCEL = "excel"
    PDF = "pdf"
    STYLED_PDF = "styled-pdf"
    UNIQUE_PDF = "unique-pdf"


class ImageMode(str, Enum):
    SHARED = "shared"  # One fetched image reused for every step
    UNIQUE = "unique"  # One fetched image per (case, step) pair


class TitleVariant(str, Enum):
    SHARED = "shared"
    UNIQUE = "unique"
