# student_data.py
import hashlib
import json
import logging
import numbers
from pathlib import Path

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# ----------------- Constants -----------------
DEFAULT_DATA_PATH = Path(__file__).resolve().parent / "data" / "students.json"

NUMERIC_COLS = [
    "assessment_score",
    "comprehension",
    "attention",
    "focus",
    "retention",
    "engagement_time",
]
COLUMNS = ["student_id", "name"] + NUMERIC_COLS + ["persona"]

# the offline segmentation writes one of these; first non-null wins
LABEL_KEYS = ("cluster", "persona")


class DataLoadError(ValueError):
    """Raised when the student file is missing or not an array of records."""


# ----------------- Helpers -----------------
def resolve_persona(record: dict):
    """Return the label for a record: `cluster`, else `persona`, else None.

    Numeric cluster ids stay numbers so they sort numerically; anything else is a string.
    """
    for key in LABEL_KEYS:
        value = record.get(key)
        if value is None:
            continue
        if isinstance(value, float) and np.isnan(value):
            continue
        if isinstance(value, numbers.Number) and not isinstance(value, bool):
            return value
        return str(value)
    return None


def source_key(source) -> str:
    """Identify a data source: a path by its location, uploaded bytes by their content."""
    if isinstance(source, bytes):
        return "upload:" + hashlib.sha1(source).hexdigest()
    return str(source)


def _read_text(source) -> str:
    if isinstance(source, bytes):
        return source.decode("utf-8")
    if hasattr(source, "read"):
        raw = source.read()
        return raw.decode("utf-8") if isinstance(raw, bytes) else raw
    return Path(source).read_text(encoding="utf-8")


def _validate(records):
    if not isinstance(records, list):
        raise DataLoadError(f"Expected a JSON array of students, got {type(records).__name__}")

    seen = set()
    for i, rec in enumerate(records):
        if not isinstance(rec, dict):
            raise DataLoadError(f"Record #{i} is not an object")
        missing = [k for k in ("student_id", "name") if rec.get(k) is None]
        if missing:
            raise DataLoadError(f"Record #{i} is missing: {', '.join(missing)}")
        sid = rec["student_id"]
        if sid in seen:
            raise DataLoadError(f"Duplicate student_id: {sid!r}")
        seen.add(sid)


def records_to_frame(records) -> pd.DataFrame:
    """Turn a list of student dicts into the dashboard's DataFrame (one row per student)."""
    _validate(records)

    rows = []
    for rec in records:
        rows.append({k: rec.get(k) for k in ["student_id", "name"] + NUMERIC_COLS})

    df = pd.DataFrame(rows, columns=COLUMNS)
    for col in NUMERIC_COLS:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    df["name"] = df["name"].astype(str)
    # object dtype so int cluster ids next to None don't become floats
    df["persona"] = pd.Series([resolve_persona(rec) for rec in records], index=df.index, dtype=object)
    return df.reset_index(drop=True)


def load_students(source=DEFAULT_DATA_PATH) -> pd.DataFrame:
    """Load the student JSON from a path, an uploaded file or raw bytes.

    Any problem with the file raises DataLoadError; there is no fallback data.
    """
    if isinstance(source, bytes):
        label = "<upload>"
    else:
        label = getattr(source, "name", None) or str(source)
    try:
        text = _read_text(source)
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Could not read student data from %s: %s", label, e)
        raise DataLoadError(f"Could not read {label}: {e}") from e

    try:
        records = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in %s: %s", label, e)
        raise DataLoadError(f"Invalid JSON in {label}: {e}") from e

    try:
        df = records_to_frame(records)
    except DataLoadError as e:
        logger.error("Malformed student data in %s: %s", label, e)
        raise

    logger.info("Loaded %d students from %s", len(df), label)
    return df


def to_csv_bytes(df: pd.DataFrame) -> bytes:
    return df.to_csv(index=False).encode("utf-8")
