import json

import pytest

from student_data import records_to_frame

ANN = {
    "student_id": 1, "name": "Ann", "assessment_score": 80,
    "comprehension": 70, "attention": 65, "focus": 60, "retention": 55,
    "engagement_time": 40, "cluster": 2,
}
BOB = {
    "student_id": 2, "name": "Bob", "assessment_score": 60,
    "comprehension": 50, "attention": 45, "focus": 40, "retention": 35,
    "engagement_time": 20, "persona": "Night Owl",
}


@pytest.fixture
def records():
    return [dict(ANN), dict(BOB)]


@pytest.fixture
def students(records):
    return records_to_frame(records)


@pytest.fixture
def mixed_students():
    rows = [
        {"student_id": 3, "name": "carla", "assessment_score": 75},
        {"student_id": 1, "name": "Ann", "assessment_score": 80, "cluster": "B"},
        {"student_id": 5, "name": "Dana", "assessment_score": 55, "persona": "A"},
        {"student_id": 2, "name": "bob", "assessment_score": 60, "cluster": "C"},
        {"student_id": 4, "name": "Brian", "assessment_score": 90},
    ]
    return records_to_frame(rows)


@pytest.fixture
def write_json(tmp_path):
    def _write(payload, name="students.json"):
        p = tmp_path / name
        p.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
        return p
    return _write
