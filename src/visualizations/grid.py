"""Contribution grid visualization for codetrack."""

import plotly.graph_objects as go
import streamlit as st

from constants import CHART_HEIGHT_SMALL, GRID_CELL_SIZE
from data.models import UsageDay
from data.processors import build_grid_frame


def show_contribution_grid(days: list[UsageDay], aspect_ratio: float = 2.0) -> None:
    """Display the GitHub-style contribution grid.

    Args:
        days: Days to show, oldest first
        aspect_ratio: Target width / height of the grid
    """
    df = build_grid_frame(days, aspect_ratio)
    if df.empty:
        st.info("No days to show")
        return

    fig = go.Figure(
        data=go.Scatter(
            x=df["col"],
            y=df["row"],
            mode="markers",
            marker=dict(symbol="square", size=GRID_CELL_SIZE, color=df["color"], line=dict(width=0)),
            customdata=df[["hours", "intensity_level"]].to_numpy(),
            text=df["date"].dt.strftime("%Y-%m-%d"),
            hovertemplate="%{text}<br>%{customdata[0]:.1f}h (%{customdata[1]})<extra></extra>",
        )
    )

    fig.update_layout(
        height=CHART_HEIGHT_SMALL,
        plot_bgcolor="white",
        margin=dict(l=10, r=10, t=10, b=10),
        xaxis=dict(visible=False),
        yaxis=dict(visible=False, autorange="reversed", scaleanchor="x"),
    )
    st.plotly_chart(fig, use_container_width=True)
