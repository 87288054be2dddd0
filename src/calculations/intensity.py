"""Intensity classification module for codetrack.

A day is classified twice: a fixed-boundary ``IntensityLevel`` tag and a
display color taken from the user's threshold table. The two are independent.
"""

from collections.abc import Sequence

from data.models import Color, IntensityLevel, Threshold


def sort_thresholds(thresholds: Sequence[Threshold]) -> list[Threshold]:
    """Return thresholds in ascending cutoff order."""
    return sorted(thresholds, key=lambda t: t.seconds)


def validate_thresholds(thresholds: Sequence[Threshold]) -> None:
    """Check the threshold table invariants.

    Raises:
        ValueError: If the table is empty, has negative or duplicate cutoffs,
            or does not have exactly one 0-second baseline rule
    """
    if not thresholds:
        raise ValueError("Threshold table must not be empty")

    cutoffs = [t.seconds for t in thresholds]
    if any(seconds < 0 for seconds in cutoffs):
        raise ValueError("Threshold cutoffs must be non-negative")
    if len(set(cutoffs)) != len(cutoffs):
        raise ValueError("Threshold cutoffs must be unique")
    if cutoffs.count(0) != 1:
        raise ValueError("Threshold table must contain exactly one 0-second baseline rule")


def match_threshold(seconds: int, thresholds: Sequence[Threshold]) -> Threshold:
    """Select the threshold with the largest cutoff that is <= seconds.

    Args:
        seconds: Total active seconds for a day (>= 0)
        thresholds: Non-empty threshold table containing a 0-second rule

    Returns:
        The matching threshold
    """
    matched = None
    for threshold in sort_thresholds(thresholds):
        if threshold.seconds > seconds:
            break
        matched = threshold

    if matched is None:
        raise ValueError(f"No threshold matches {seconds}s; the table needs a 0-second baseline rule")
    return matched


def classify(seconds: int, thresholds: Sequence[Threshold]) -> tuple[IntensityLevel, Color]:
    """Classify a day's total into (intensity level, display color)."""
    return IntensityLevel.from_seconds(seconds), match_threshold(seconds, thresholds).color
