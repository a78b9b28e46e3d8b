import json

import pytest

from packages.shared.dataset import InMemoryDatasetSource, JsonFileDatasetSource, freeze_records
from packages.shared.errors import DatasetUnavailable
from tests.fixtures.generate_fixture import sample_records


def test_load_json_file(tmp_path):
    path = tmp_path / "cases.json"
    path.write_text(json.dumps(sample_records()), encoding="utf-8")
    records = JsonFileDatasetSource(path).load()
    assert len(records) == 6
    assert records[0]["CASE KEY"] == "TC-1"


def test_missing_file_raises(tmp_path):
    with pytest.raises(DatasetUnavailable):
        JsonFileDatasetSource(tmp_path / "nope.json").load()


def test_invalid_json_raises(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("[{", encoding="utf-8")
    with pytest.raises(DatasetUnavailable):
        JsonFileDatasetSource(path).load()


def test_non_utf8_file_raises(tmp_path):
    path = tmp_path / "latin.json"
    path.write_bytes(b'[{"CASE KEY": "\xff\xfe"}]')
    with pytest.raises(DatasetUnavailable):
        JsonFileDatasetSource(path).load()


@pytest.mark.parametrize("raw", [{"CASE KEY": "TC-1"}, "text", None])
def test_top_level_must_be_list(raw):
    with pytest.raises(DatasetUnavailable):
        freeze_records(raw)


def test_items_must_be_objects():
    with pytest.raises(DatasetUnavailable, match="Record 1"):
        freeze_records([{"CASE KEY": "A"}, ["not", "an", "object"]])


def test_records_are_read_only():
    source = InMemoryDatasetSource([{"CASE KEY": "A"}])
    record = source.load()[0]
    with pytest.raises(TypeError):
        record["CASE KEY"] = "B"


def test_in_memory_source_is_isolated_from_caller_mutation():
    raw = [{"CASE KEY": "A"}]
    source = InMemoryDatasetSource(raw)
    raw[0]["CASE KEY"] = "changed"
    raw.append({"CASE KEY": "B"})
    records = source.load()
    assert [r["CASE KEY"] for r in records] == ["A"]


def test_empty_dataset_is_valid():
    assert freeze_records([]) == []
