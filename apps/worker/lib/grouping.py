from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from packages.shared.artifacts import FIELD_CASE_KEY, FIELD_HEADLINE, FIELD_STEP_ID
from packages.shared.dataset import Record

logger = logging.getLogger(__name__)


@dataclass
class Case:
    case_key: str
    records: list[Record] = field(default_factory=list)

    @property
    def header_record(self) -> Record | None:
        return select_header_record(self.records)

    @property
    def steps(self) -> list[Record]:
        return select_steps(self.records)


CaseCollection = dict[str, Case]


def field_text(record: Record | None, name: str) -> str:
    """String form of a field, or "" when the field is missing or null."""
    if record is None:
        return ""
    value: Any = record.get(name)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def has_field(record: Record | None, name: str) -> bool:
    return field_text(record, name) != ""


def case_key_of(record: Record) -> str:
    return field_text(record, FIELD_CASE_KEY).strip()


def is_step(record: Record) -> bool:
    return has_field(record, FIELD_STEP_ID)


def group_records(records: Iterable[Record]) -> CaseCollection:
    """
    Group flat records into cases keyed by the trimmed case key.
    - Case order follows first appearance of each key
    - Record order within a case follows input order
    - Records with a blank or missing case key are dropped
    """
    cases: CaseCollection = {}
    dropped = 0
    for record in records:
        key = case_key_of(record)
        if not key:
            dropped += 1
            continue
        case = cases.get(key)
        if case is None:
            case = cases[key] = Case(case_key=key)
        case.records.append(record)

    if dropped:
        logger.info(f"Grouping: skipped {dropped} record(s) without a case key")
    return cases


def select_header_record(records: list[Record]) -> Record | None:
    """First record carrying a headline, else the first record of the group."""
    for record in records:
        if has_field(record, FIELD_HEADLINE):
            return record
    return records[0] if records else None


def select_steps(records: list[Record]) -> list[Record]:
    # Input order is kept; step ids are not sorted numerically.
    return [r for r in records if is_step(r)]


def summarize_case(case: Case) -> tuple[Record | None, list[Record]]:
    return case.header_record, case.steps


def count_dataset_steps(records: Iterable[Record]) -> int:
    """Dataset-wide step count. The case key is deliberately not checked."""
    return sum(1 for r in records if is_step(r))
