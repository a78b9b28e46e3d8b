from .domain import ReportArtifact
from .enums import ImageMode, ReportKind, TitleVariant

__all__ = [
    "ImageMode",
    "ReportArtifact",
    "ReportKind",
    "TitleVariant",
]
