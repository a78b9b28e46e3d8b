import re
from datetime import datetime, timedelta, timezone

import pytest

from packages.shared.artifacts import (
    MEDIA_TYPE_PDF,
    MEDIA_TYPE_XLSX,
    filename_timestamp,
    report_error_message,
    report_filename,
    report_media_type,
)
from packages.shared.models import ReportKind

MOMENT = datetime(2025, 4, 7, 10, 11, 12, 345678, tzinfo=timezone.utc)


def test_filename_timestamp_is_filesystem_safe():
    assert filename_timestamp(MOMENT) == "2025-04-07T10-11-12-345Z"


def test_filename_timestamp_converts_to_utc():
    local = MOMENT.astimezone(timezone(timedelta(hours=2)))
    assert filename_timestamp(local) == "2025-04-07T10-11-12-345Z"


@pytest.mark.parametrize(
    "kind, expected",
    [
        (ReportKind.EXCEL, "test-cases-with-images-2025-04-07T10-11-12-345Z.xlsx"),
        (ReportKind.PDF, "test-cases-with-images-2025-04-07T10-11-12-345Z.pdf"),
        (ReportKind.STYLED_PDF, "test-cases-styled-2025-04-07T10-11-12-345Z.pdf"),
        (ReportKind.UNIQUE_PDF, "test-cases-unique-images-2025-04-07T10-11-12-345Z.pdf"),
    ],
)
def test_report_filename(kind, expected):
    assert report_filename(kind, MOMENT) == expected
    assert not re.search(r"[:.](?!pdf$|xlsx$)", expected)


def test_every_kind_is_registered():
    for kind in ReportKind:
        assert report_media_type(kind) in {MEDIA_TYPE_PDF, MEDIA_TYPE_XLSX}
        assert report_error_message(kind).startswith("Error generating")
    assert report_media_type(ReportKind.EXCEL) == MEDIA_TYPE_XLSX
