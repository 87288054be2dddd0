"""Window building module for codetrack.

Produces the gap-filled, oldest-first series of days the widget renders.
"""

from collections.abc import Sequence
from datetime import date, timedelta

from calculations.intensity import classify, sort_thresholds
from constants import DATE_FORMAT, SECONDS_PER_HOUR, WINDOW_LENGTHS
from data.models import Threshold, UsageData, UsageDay, default_thresholds
from utils.logging_config import get_logger, log_with_context

# Initialize logger
logger = get_logger()


def window_dates(window_length: int, today: date) -> list[date]:
    """Return the consecutive dates of the window ending at ``today``, oldest first.

    Offsets that fall outside the calendar's range are skipped.
    """
    dates = []
    for offset in reversed(range(window_length)):
        try:
            dates.append(today - timedelta(days=offset))
        except OverflowError:
            log_with_context(logger, "WARNING", "Skipping out-of-range window day", offset=offset)
    return dates


def build_usage_window(
    unified: UsageData,
    window_length: int,
    thresholds: Sequence[Threshold],
    today: date,
) -> list[UsageDay]:
    """Build the trailing window of usage days.

    Args:
        unified: Merged usage keyed by ``YYYY-MM-DD``
        window_length: Number of days (30, 60 or 90)
        thresholds: Threshold table; the default table is used when empty
        today: Last day of the window

    Returns:
        One UsageDay per calendar day, oldest first
    """
    if type(window_length) is not int or window_length not in WINDOW_LENGTHS:
        raise ValueError(f"Window length must be one of {WINDOW_LENGTHS}, got {window_length}")

    if not thresholds:
        log_with_context(logger, "WARNING", "Empty threshold table, using defaults")
        thresholds = default_thresholds()

    ordered = sort_thresholds(thresholds)
    days = []

    for day in window_dates(window_length, today):
        usage = unified.get(day.strftime(DATE_FORMAT))
        seconds = usage.total_seconds if usage is not None else 0
        intensity, color = classify(seconds, ordered)

        if seconds > 0:
            log_with_context(
                logger,
                "DEBUG",
                "Window day",
                date=day.isoformat(),
                seconds=seconds,
                hours=round(seconds / SECONDS_PER_HOUR, 1),
                intensity=intensity.value,
            )

        days.append(UsageDay(date=day, seconds=seconds, intensity_level=intensity, color=color))

    return days
