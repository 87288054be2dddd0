"""Data processing and transformation module for codetrack.

This module turns the published usage series into pandas frames the
visualizations plot.
"""

import math
from datetime import date, timedelta

import pandas as pd

from constants import SECONDS_PER_HOUR
from data.models import IntensityLevel, UsageDay
from utils.logging_config import get_logger, log_with_context

# Initialize logger
logger = get_logger()

USAGE_FRAME_COLUMNS = ["date", "seconds", "hours", "intensity_level", "color"]


def usage_days_to_dataframe(days: list[UsageDay]) -> pd.DataFrame:
    """Convert usage days to a dataframe.

    Args:
        days: Published usage days

    Returns:
        Dataframe with date, seconds, hours, intensity_level and a CSS color
    """
    if not days:
        return pd.DataFrame(columns=USAGE_FRAME_COLUMNS)

    df = pd.DataFrame(
        {
            "date": pd.to_datetime([day.date for day in days]),
            "seconds": [day.seconds for day in days],
            "intensity_level": [day.intensity_level.value for day in days],
            "color": [day.display_color.to_css() for day in days],
        }
    )
    df["hours"] = df["seconds"] / SECONDS_PER_HOUR
    return df[USAGE_FRAME_COLUMNS]


def select_display_days(days: list[UsageDay], days_to_show: int, today: date) -> list[UsageDay]:
    """Pick the last ``days_to_show`` days ending today, filling gaps with empty days.

    The published series may be older than today or shorter than requested;
    missing dates render as no activity.
    """
    by_date = {day.date: day for day in days}
    selected = []
    for offset in reversed(range(days_to_show)):
        target = today - timedelta(days=offset)
        selected.append(by_date.get(target, UsageDay(date=target, seconds=0, intensity_level=IntensityLevel.NONE)))
    return selected


def calculate_optimal_grid(total_days: int, aspect_ratio: float) -> tuple[int, int]:
    """Choose rows and columns whose shape best matches the target aspect ratio.

    Args:
        total_days: Number of cells to lay out
        aspect_ratio: Target width / height

    Returns:
        Tuple of (rows, cols)
    """
    if total_days <= 0:
        return 0, 0

    best_rows, best_cols = 1, total_days
    best_diff = math.inf

    max_rows = min(total_days, int(math.sqrt(total_days) * 2))
    for rows in range(1, max_rows + 1):
        cols = math.ceil(total_days / rows)
        diff = abs(cols / rows - aspect_ratio)
        if diff < best_diff:
            best_rows, best_cols, best_diff = rows, cols, diff

    return best_rows, best_cols


def build_grid_frame(days: list[UsageDay], aspect_ratio: float = 2.0) -> pd.DataFrame:
    """Lay out days row by row for the contribution grid.

    Returns:
        Usage dataframe with added ``row`` and ``col`` columns
    """
    df = usage_days_to_dataframe(days)
    rows, cols = calculate_optimal_grid(len(df), aspect_ratio)

    df["row"] = [i // cols for i in range(len(df))] if cols else []
    df["col"] = [i % cols for i in range(len(df))] if cols else []

    log_with_context(logger, "DEBUG", "Built grid frame", days=len(df), rows=rows, cols=cols)
    return df


def chart_max_hours(df: pd.DataFrame) -> float:
    """Upper bound for the chart's hour axis, never below one hour."""
    if df.empty:
        return 1.0
    return max(1.0, float(df["hours"].max()))


def summarize_usage(df: pd.DataFrame) -> dict[str, float]:
    """Summary metrics for the published window."""
    if df.empty:
        return {"total_hours": 0.0, "active_days": 0, "daily_avg_hours": 0.0, "best_day_hours": 0.0}

    active = df[df["seconds"] > 0]
    return {
        "total_hours": float(df["hours"].sum()),
        "active_days": int(len(active)),
        "daily_avg_hours": float(active["hours"].mean()) if not active.empty else 0.0,
        "best_day_hours": float(df["hours"].max()),
    }
