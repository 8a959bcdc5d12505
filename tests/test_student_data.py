import io
import json
import logging

import pandas as pd
import pytest

from student_data import (
    COLUMNS,
    DEFAULT_DATA_PATH,
    DataLoadError,
    load_students,
    records_to_frame,
    resolve_persona,
    source_key,
    to_csv_bytes,
)


def test_load_from_path(write_json, records):
    df = load_students(write_json(records))
    assert list(df.columns) == COLUMNS
    assert df["student_id"].tolist() == [1, 2]
    assert df["name"].tolist() == ["Ann", "Bob"]


def test_load_from_uploaded_file(records):
    buf = io.BytesIO(json.dumps(records).encode("utf-8"))
    df = load_students(buf)
    assert len(df) == 2


def test_load_from_bytes():
    df = load_students(b'[{"student_id": 9, "name": "Zed"}]')
    assert df.loc[0, "name"] == "Zed"


def test_bundled_dataset_loads():
    df = load_students(DEFAULT_DATA_PATH)
    assert not df.empty
    assert df["student_id"].is_unique


def test_load_logs_count(write_json, records, caplog):
    with caplog.at_level(logging.INFO, logger="student_data"):
        load_students(write_json(records))
    assert "Loaded 2 students" in caplog.text


def test_missing_file_fails(tmp_path):
    with pytest.raises(DataLoadError, match="Could not read"):
        load_students(tmp_path / "nope.json")


@pytest.mark.parametrize(
    "payload, message",
    [
        ("{not json", "Invalid JSON"),
        ('{"student_id": 1}', "Expected a JSON array"),
        ("[1, 2]", "is not an object"),
        ('[{"name": "Ann"}]', "missing: student_id"),
        ('[{"student_id": 1, "name": "A"}, {"student_id": 1, "name": "B"}]', "Duplicate student_id"),
    ],
)
def test_malformed_file_fails(write_json, payload, message):
    with pytest.raises(DataLoadError, match=message):
        load_students(write_json(payload))


def test_load_error_is_value_error(write_json):
    with pytest.raises(ValueError):
        load_students(write_json("[["))


def test_empty_array_gives_empty_frame(write_json):
    df = load_students(write_json([]))
    assert df.empty
    assert list(df.columns) == COLUMNS


@pytest.mark.parametrize(
    "record, expected",
    [
        ({"cluster": 2, "persona": "Owl"}, 2),
        ({"cluster": None, "persona": "Owl"}, "Owl"),
        ({"persona": "Owl"}, "Owl"),
        ({"cluster": 0}, 0),
        ({}, None),
        ({"cluster": float("nan")}, None),
        ({"cluster": "7"}, "7"),
        ({"cluster": True}, "True"),
    ],
)
def test_resolve_persona(record, expected):
    assert resolve_persona(record) == expected


def test_persona_resolved_once_at_load(students):
    assert students["persona"].tolist() == [2, "Night Owl"]
    assert "cluster" not in students.columns


def test_numeric_fields_coerced():
    df = records_to_frame([
        {"student_id": 1, "name": "A", "assessment_score": "88", "focus": "n/a"},
    ])
    assert df.loc[0, "assessment_score"] == 88
    assert pd.isna(df.loc[0, "focus"])
    assert pd.isna(df.loc[0, "retention"])


def test_to_csv_bytes(students):
    text = to_csv_bytes(students).decode("utf-8")
    assert text.splitlines()[0] == ",".join(COLUMNS)
    assert "Night Owl" in text


def test_numeric_clusters_stay_numeric_next_to_missing():
    df = records_to_frame([
        {"student_id": 1, "name": "A", "cluster": 10},
        {"student_id": 2, "name": "B"},
        {"student_id": 3, "name": "C", "cluster": 2},
    ])
    assert df["persona"].tolist() == [10, None, 2]
    assert type(df.loc[0, "persona"]) is int


def test_source_key_tracks_upload_content():
    first = b'[{"student_id": 1, "name": "Ann"}]'
    second = b'[{"student_id": 2, "name": "Bob"}]'
    assert source_key(first) == source_key(bytes(first))
    assert source_key(first) != source_key(second)
    assert source_key(first).startswith("upload:")
    assert source_key(DEFAULT_DATA_PATH) == str(DEFAULT_DATA_PATH)
