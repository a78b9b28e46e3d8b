"""
Markup (HTML) rendering for the styled PDF exports.

Both styled variants share one layout. They differ only in the title and
in the image lookup: the shared lookup returns one asset for every step,
the unique lookup resolves each (case key, step id) pair.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from jinja2 import Environment, FileSystemLoader, select_autoescape

from apps.worker.lib.grouping import CaseCollection, count_dataset_steps, field_text, summarize_case
from apps.worker.steps.export_render.common import long_timestamp, short_date
from apps.worker.steps.export_render.constants import EMPTY_CELL, MARKUP_TEMPLATE, REPORT_TITLES
from packages.shared.artifacts import (
    FIELD_DESCRIPTION,
    FIELD_EXPECTED_RESULT,
    FIELD_HEADLINE,
    FIELD_PRIORITY,
    FIELD_STEP,
    FIELD_STEP_ID,
    FIELD_TEST_DATA,
)
from packages.shared.models import TitleVariant

if TYPE_CHECKING:
    from apps.worker.lib.image_policy import ImageLookup
    from packages.shared.dataset import Record

_TEMPLATE_ROOT = Path(__file__).resolve().parent / "templates"
_ENV = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_ROOT)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetailRow:
    label: str
    value: str
    badge: bool = False


@dataclass(frozen=True)
class StepRow:
    step_id: str
    action: str
    test_data: str
    expected_result: str
    image_uri: str | None = None


@dataclass(frozen=True)
class CaseSection:
    case_key: str
    details: list[DetailRow] | None = None  # None when the case has no header record
    steps: list[StepRow] = field(default_factory=list)


@dataclass(frozen=True)
class ReportSummary:
    total_cases: int
    total_steps: int
    generated_date: str


@dataclass(frozen=True)
class MarkupReport:
    title: str
    generated_on: str
    sections: list[CaseSection]
    summary: ReportSummary
    empty_cell: str = EMPTY_CELL


def _details(header: Record) -> list[DetailRow]:
    rows = [
        DetailRow("Test Case Title", field_text(header, FIELD_HEADLINE)),
        DetailRow("Description", field_text(header, FIELD_DESCRIPTION)),
        DetailRow("Priority", field_text(header, FIELD_PRIORITY), badge=True),
    ]
    return [row for row in rows if row.value]


def build_markup_report(
    cases: CaseCollection,
    records: Sequence[Record],
    images: ImageLookup,
    variant: TitleVariant = TitleVariant.SHARED,
    generated_at: datetime | None = None,
) -> MarkupReport:
    """
    Project grouped cases into the report structure.
    The step total is counted over the full dataset, not over grouped cases.
    """
    generated_at = generated_at or datetime.now()
    sections: list[CaseSection] = []
    for case_key, case in cases.items():
        header, steps = summarize_case(case)
        step_rows = []
        for step in steps:
            step_id = field_text(step, FIELD_STEP_ID)
            asset = images.image_for(case_key, step_id)
            step_rows.append(StepRow(
                step_id=step_id,
                action=field_text(step, FIELD_STEP),
                test_data=field_text(step, FIELD_TEST_DATA),
                expected_result=field_text(step, FIELD_EXPECTED_RESULT),
                image_uri=asset.as_data_uri() if asset is not None else None,
            ))
        sections.append(CaseSection(
            case_key=case_key,
            details=_details(header) if header is not None else None,
            steps=step_rows,
        ))

    return MarkupReport(
        title=REPORT_TITLES[TitleVariant(variant).value],
        generated_on=long_timestamp(generated_at),
        sections=sections,
        summary=ReportSummary(
            total_cases=len(cases),
            total_steps=count_dataset_steps(records),
            generated_date=short_date(generated_at),
        ),
    )


def render_markup(report: MarkupReport) -> str:
    template = _ENV.get_template(MARKUP_TEMPLATE)
    return template.render(report=report)


def generate_markup(
    cases: CaseCollection,
    records: Sequence[Record],
    images: ImageLookup,
    variant: TitleVariant = TitleVariant.SHARED,
    generated_at: datetime | None = None,
) -> str:
    report = build_markup_report(cases, records, images, variant=variant, generated_at=generated_at)
    html = render_markup(report)
    logger.info(f"Markup report built: {len(report.sections)} cases, {len(html)} chars")
    return html
