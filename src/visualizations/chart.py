"""Daily hours chart visualization for codetrack."""

import plotly.graph_objects as go
import streamlit as st

from constants import CHART_HEIGHT_DEFAULT
from data.models import UsageDay
from data.processors import chart_max_hours, usage_days_to_dataframe


def show_usage_chart(days: list[UsageDay]) -> None:
    """Display coding hours per day as a bar chart.

    Args:
        days: Days to show, oldest first
    """
    df = usage_days_to_dataframe(days)
    if df.empty:
        st.info("No days to show")
        return

    fig = go.Figure(
        data=go.Bar(
            x=df["date"],
            y=df["hours"],
            marker_color=df["color"],
            customdata=df["intensity_level"],
            hovertemplate="%{x|%Y-%m-%d}<br>%{y:.1f}h (%{customdata})<extra></extra>",
        )
    )
    fig.update_layout(
        height=CHART_HEIGHT_DEFAULT,
        xaxis_title="Date",
        yaxis_title="Hours",
        yaxis=dict(range=[0, chart_max_hours(df)]),
        bargap=0.2,
    )
    st.plotly_chart(fig, use_container_width=True)


def show_usage_metrics(summary: dict[str, float]) -> None:
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total", f"{summary['total_hours']:.1f}h")
    col2.metric("Active Days", summary["active_days"])
    col3.metric("Avg / Active Day", f"{summary['daily_avg_hours']:.1f}h")
    col4.metric("Best Day", f"{summary['best_day_hours']:.1f}h")
