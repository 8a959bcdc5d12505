# student_dashboard.py — run with: streamlit run student_dashboard.py
import logging

import pandas as pd
import streamlit as st

from charts import bar_chart, radar_chart, scatter_chart
from student_data import DEFAULT_DATA_PATH, DataLoadError, load_students, source_key, to_csv_bytes
from student_metrics import (
    SORT_FIELDS,
    DashboardState,
    apply_table_selection,
    find_student,
    initial_selection,
    insight_lines,
    overview_stats,
    table_frame,
    visible_students,
)

# ----------------- Config -----------------
PAGE_TITLE = "Student Performance Dashboard"
LOG_LEVEL = logging.INFO
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

st.set_page_config(page_title=PAGE_TITLE, page_icon="📊", layout="wide")
st.title(f"📊 {PAGE_TITLE}")


# ----------------- Helpers -----------------
@st.cache_data(show_spinner=False)
def cached_students(source) -> pd.DataFrame:
    """Parse once per source; the frame is read-only for the rest of the session."""
    return load_students(source)


def read_state() -> DashboardState:
    ss = st.session_state
    return DashboardState(
        search=ss.get("search", ""),
        sort_by=ss.get("sort_by", "student_id"),
        sort_dir=ss.get("sort_dir", "asc"),
        selected_id=ss.get("selected_id"),
    )


def write_state(state: DashboardState):
    # search and sort_by belong to their widgets; only these two are ours
    st.session_state["sort_dir"] = state.sort_dir
    st.session_state["selected_id"] = state.selected_id


def toggle_sort_dir():
    write_state(read_state().toggle_direction())


# ----------------- Load -----------------
with st.sidebar:
    st.header("Data")
    up = st.file_uploader("Upload students JSON", type=["json"])
    st.caption(f"If not uploaded, the dashboard uses '{DEFAULT_DATA_PATH.name}'.")

source = up.getvalue() if up is not None else str(DEFAULT_DATA_PATH)
dataset_key = source_key(source)

try:
    students = cached_students(source)
except DataLoadError as e:
    st.error(f"Could not load student data: {e}")
    st.stop()

# a new dataset starts over on its first student
if st.session_state.get("dataset") != dataset_key:
    logger.info("Dataset changed to %s", dataset_key)
    st.session_state["dataset"] = dataset_key
    write_state(read_state().select(initial_selection(students)))

state = read_state()
overview = overview_stats(students)
visible = visible_students(students, state)

st.sidebar.caption(f"{len(students)} students loaded, {len(visible)} shown.")

# ----------------- Overview cards -----------------
c1, c2, c3 = st.columns(3)
with c1:
    st.metric("Avg Assessment", overview.avg_assessment)
with c2:
    st.metric("Avg Comprehension", overview.avg_comprehension)
with c3:
    st.metric("Avg Engagement (min)", overview.avg_engagement)

# ----------------- Search + sort -----------------
s1, s2, s3 = st.columns([6, 2, 1])
with s1:
    st.text_input("Search", key="search", placeholder="🔍 Search students...", label_visibility="collapsed")
with s2:
    st.selectbox(
        "Sort by",
        options=list(SORT_FIELDS),
        format_func=SORT_FIELDS.get,
        key="sort_by",
        label_visibility="collapsed",
    )
with s3:
    st.button(state.direction_label, key="sort_dir_toggle", on_click=toggle_sort_dir, use_container_width=True)

# ----------------- Charts -----------------
left, right = st.columns(2)
with left:
    st.markdown("**Attention vs Assessment (Scatter)**")
    if students.empty:
        st.info("No students to chart.")
    else:
        st.altair_chart(scatter_chart(students), use_container_width=True)
with right:
    st.markdown("**Assessment Scores (Bar)**")
    if students.empty:
        st.info("No students to chart.")
    else:
        st.altair_chart(bar_chart(students), use_container_width=True)

# ----------------- Profile + insights -----------------
left, right = st.columns(2)
with left:
    st.markdown("**Student Profile**")
    selected = find_student(students, state.selected_id)
    if selected is None:
        st.write("No student selected")
    else:
        st.caption(f"{selected['name']} (ID {selected['student_id']})")
        st.plotly_chart(radar_chart(selected), use_container_width=True)
with right:
    st.markdown("**Insights**")
    st.markdown("\n".join(f"- {line}" for line in insight_lines(overview)))

# ----------------- Table -----------------
st.subheader("Student Table")

# keyed on the view so a stale row position never points at a different student
table_key = f"student_table:{state.search}:{state.sort_by}:{state.sort_dir}"


def on_row_select():
    write_state(apply_table_selection(read_state(), visible, st.session_state.get(table_key)))


st.dataframe(
    table_frame(visible),
    key=table_key,
    on_select=on_row_select,
    selection_mode="single-row",
    hide_index=True,
    use_container_width=True,
)

st.download_button(
    label="⬇️ Download table as CSV",
    data=to_csv_bytes(table_frame(visible)),
    file_name="students_filtered.csv",
    mime="text/csv",
)
