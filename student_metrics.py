# student_metrics.py
import numbers
from dataclasses import dataclass, replace

import numpy as np
import pandas as pd

# ----------------- Constants -----------------
SORT_FIELDS = {
    "student_id": "ID",
    "name": "Name",
    "assessment_score": "Score",
    "persona": "Persona",
}
SORT_DIRECTIONS = ("asc", "desc")

BAR_CHART_LIMIT = 30
TOP_CORRELATED_FEATURES = ["comprehension", "attention", "focus"]
MISSING_PERSONA = "-"

# radar axis label -> record column
SKILLS = {
    "comprehension": "comprehension",
    "attention": "attention",
    "focus": "focus",
    "retention": "retention",
    "engagement": "engagement_time",
}


# ----------------- View state -----------------
@dataclass(frozen=True)
class DashboardState:
    search: str = ""
    sort_by: str = "student_id"
    sort_dir: str = "asc"
    selected_id: object = None

    @property
    def direction_label(self) -> str:
        return "⬆ Asc" if self.sort_dir == "asc" else "⬇ Desc"

    def toggle_direction(self) -> "DashboardState":
        return replace(self, sort_dir="desc" if self.sort_dir == "asc" else "asc")

    def select(self, student_id) -> "DashboardState":
        return replace(self, selected_id=student_id)


@dataclass(frozen=True)
class OverviewStats:
    avg_assessment: int = 0
    avg_comprehension: int = 0
    avg_attention: int = 0
    avg_focus: int = 0
    avg_retention: int = 0
    avg_engagement: int = 0


# ----------------- Filter / sort -----------------
def filter_by_name(df: pd.DataFrame, search: str) -> pd.DataFrame:
    """Rows whose name contains `search`, case-insensitive. Empty search keeps everything."""
    if not search:
        return df
    mask = df["name"].astype(str).str.lower().str.contains(search.lower(), regex=False)
    return df.loc[mask]


def _is_missing(v) -> bool:
    return v is None or (isinstance(v, float) and np.isnan(v))


def _type_rank(v):
    # numbers first (numerically), then strings by code point
    if _is_missing(v):
        return None
    if isinstance(v, numbers.Number) and not isinstance(v, bool):
        return (0, v)
    return (1, str(v))


def _sort_key(col: pd.Series) -> pd.Series:
    if col.dtype != object:
        return col
    return col.map(_type_rank)


def sort_students(df: pd.DataFrame, sort_by: str, sort_dir: str = "asc") -> pd.DataFrame:
    """Stable sort on one field. Strings compare by code point, numbers numerically
    (and before strings when a column mixes both); rows without a value go last
    in either direction."""
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"Unknown sort field: {sort_by!r}")
    if sort_dir not in SORT_DIRECTIONS:
        raise ValueError(f"Unknown sort direction: {sort_dir!r}")
    return df.sort_values(
        by=sort_by,
        ascending=(sort_dir == "asc"),
        kind="mergesort",
        na_position="last",
        key=_sort_key,
    )


def visible_students(df: pd.DataFrame, state: DashboardState) -> pd.DataFrame:
    """The table's rows: filtered by the search box, then sorted."""
    return sort_students(filter_by_name(df, state.search), state.sort_by, state.sort_dir)


# ----------------- Aggregates -----------------
def round_half_up(x: float) -> int:
    return int(np.floor(x + 0.5))


def average(df: pd.DataFrame, field: str) -> int:
    """Mean of `field` over every row (missing values count as 0), rounded to an int."""
    if df.empty or field not in df.columns:
        return 0
    values = pd.to_numeric(df[field], errors="coerce").fillna(0)
    return round_half_up(float(values.sum()) / len(df))


def overview_stats(df: pd.DataFrame) -> OverviewStats:
    return OverviewStats(
        avg_assessment=average(df, "assessment_score"),
        avg_comprehension=average(df, "comprehension"),
        avg_attention=average(df, "attention"),
        avg_focus=average(df, "focus"),
        avg_retention=average(df, "retention"),
        avg_engagement=average(df, "engagement_time"),
    )


def insight_lines(stats: OverviewStats):
    return [
        f"📌 Average assessment score: {stats.avg_assessment}",
        f"📈 Top features correlated with performance: {', '.join(TOP_CORRELATED_FEATURES)}",
        "👥 Cluster sizes are available in the Jupyter notebook.",
        "📊 Try clicking a row in the table to see that student's profile.",
    ]


# ----------------- Selection -----------------
def initial_selection(df: pd.DataFrame):
    if df.empty:
        return None
    return df.iloc[0]["student_id"]


def student_at_row(visible: pd.DataFrame, rows):
    """Map the table's selected row positions back to a student_id."""
    if not rows:
        return None
    pos = rows[0]
    if pos < 0 or pos >= len(visible):
        return None
    return visible.iloc[pos]["student_id"]


def apply_table_selection(state: DashboardState, visible: pd.DataFrame, table_state) -> DashboardState:
    """Fold the table widget's selection (`{"selection": {"rows": [...]}}`) into the view state.

    An empty or stale selection keeps the current student.
    """
    rows = (table_state or {}).get("selection", {}).get("rows", [])
    sid = student_at_row(visible, rows)
    if sid is None:
        return state
    return state.select(sid)


def find_student(df: pd.DataFrame, student_id):
    """Look a student up in the full collection; None when absent or nothing is selected."""
    if student_id is None or df.empty:
        return None
    hits = df.loc[df["student_id"] == student_id]
    if hits.empty:
        return None
    return hits.iloc[0]


def skill_profile(record) -> pd.DataFrame:
    """Five radar dimensions for one student; a missing score plots as 0."""
    values = []
    for col in SKILLS.values():
        v = record.get(col)
        values.append(0.0 if v is None or pd.isna(v) else float(v))
    return pd.DataFrame({"skill": list(SKILLS.keys()), "value": values})


# ----------------- Table / chart inputs -----------------
def table_frame(df: pd.DataFrame) -> pd.DataFrame:
    """The four table columns, as display values (one dtype per column for Arrow)."""
    out = df[["student_id", "name", "assessment_score", "persona"]].copy()
    if out["student_id"].dtype == object:
        out["student_id"] = out["student_id"].astype(str)
    out["persona"] = out["persona"].map(lambda v: MISSING_PERSONA if _is_missing(v) else str(v))
    out.columns = ["ID", "Name", "Score", "Persona"]
    return out.reset_index(drop=True)


def bar_chart_rows(df: pd.DataFrame, limit: int = BAR_CHART_LIMIT) -> pd.DataFrame:
    """First `limit` students in file order; search and sort never apply here."""
    return df.head(limit)
