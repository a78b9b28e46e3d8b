"""
Shared formatting helpers for report rendering.
"""
from __future__ import annotations

from datetime import datetime

from apps.worker.steps.export_render.constants import ELLIPSIS


def truncate(text: str, limit: int) -> str:
    """Hard character cutoff with a trailing ellipsis; not word aware."""
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


def long_timestamp(moment: datetime) -> str:
    """e.g. 'April 7, 2025 at 09:05 AM'."""
    return f"{moment:%B} {moment.day}, {moment.year} at {moment:%I:%M %p}"


def short_date(moment: datetime) -> str:
    """e.g. '4/7/2025'."""
    return f"{moment.month}/{moment.day}/{moment.year}"
