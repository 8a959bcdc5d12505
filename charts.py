# charts.py
import altair as alt
import pandas as pd
import plotly.graph_objects as go

from student_metrics import bar_chart_rows, skill_profile

SCATTER_COLOR = "#82ca9d"
BAR_COLOR = "#8884d8"
RADAR_COLOR = "#ff7300"


def scatter_chart(df: pd.DataFrame, height=250):
    """Attention vs assessment score, one point per student (whole dataset)."""
    return (
        alt.Chart(df)
        .mark_circle(size=60, color=SCATTER_COLOR)
        .encode(
            x=alt.X("attention:Q", title="Attention"),
            y=alt.Y("assessment_score:Q", title="Score"),
            tooltip=["name", "attention", "assessment_score"],
        )
        .properties(height=height)
        .interactive()
    )


def bar_chart(df: pd.DataFrame, height=250):
    """Assessment score per student for the first rows of the file, one bar per student_id."""
    rows = bar_chart_rows(df)
    return (
        alt.Chart(rows)
        .mark_bar(color=BAR_COLOR)
        .encode(
            x=alt.X("student_id:N", sort=None, axis=alt.Axis(labels=False, ticks=False, title=None)),
            y=alt.Y("assessment_score:Q", title=None),
            tooltip=["student_id", "name", "assessment_score"],
        )
        .properties(height=height)
    )


def radar_chart(record, height=300):
    prof = skill_profile(record)
    fig = go.Figure(
        go.Scatterpolar(
            r=prof["value"].tolist(),
            theta=prof["skill"].tolist(),
            fill="toself",
            line=dict(color=RADAR_COLOR),
            opacity=0.6,
            name=str(record.get("name", "")),
        )
    )
    fig.update_layout(
        polar=dict(radialaxis=dict(visible=True)),
        showlegend=False,
        height=height,
        margin=dict(l=40, r=40, t=20, b=20),
    )
    return fig
