"""
Error taxonomy for report generation.

Image failures are recoverable and never leave the acquisition layer;
dataset and rendering failures abort the request.
"""
from __future__ import annotations


class ReportError(Exception):
    """Base class for report generation failures."""


class DatasetUnavailable(ReportError):
    """The source dataset could not be read or parsed."""


class ImageFetchFailed(ReportError):
    """A remote image could not be fetched or decoded."""


class RenderingFailed(ReportError):
    """The external document renderer could not produce a PDF."""
