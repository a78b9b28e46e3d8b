"""
Dataset loading for report generation.

Records are plain JSON objects exported from the test-case spreadsheet.
No schema is enforced beyond "a list of objects"; fields are read by name
with presence checks downstream.
"""
from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Protocol

from packages.shared.errors import DatasetUnavailable

DATASET_PATH = Path(os.environ.get("DATASET_PATH", "data/test_cases.json"))

Record = Mapping[str, Any]

logger = logging.getLogger(__name__)


class DatasetSource(Protocol):
    def load(self) -> list[Record]:
        ...


class JsonFileDatasetSource:
    """Reads the dataset from a JSON file on every call to `load`."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else DATASET_PATH

    def load(self) -> list[Record]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise DatasetUnavailable(f"Cannot read dataset {self.path}: {exc}") from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DatasetUnavailable(f"Dataset {self.path} is not valid UTF-8 JSON: {exc}") from exc

        records = freeze_records(raw)
        logger.info(f"Found {len(records)} records in {self.path.name}")
        return records


class InMemoryDatasetSource:
    """Serves a fixed list of records. Used by the CLI and tests."""

    def __init__(self, records: list[dict[str, Any]]):
        self._records = freeze_records(records)

    def load(self) -> list[Record]:
        return list(self._records)


def freeze_records(raw: Any) -> list[Record]:
    """Validate the top-level shape and wrap each record read-only."""
    if not isinstance(raw, list):
        raise DatasetUnavailable(f"Dataset must be a JSON array, got {type(raw).__name__}")
    records: list[Record] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise DatasetUnavailable(f"Record {index} is not an object")
        records.append(MappingProxyType(dict(item)))
    return records
