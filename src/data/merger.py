"""
Source merging module.

Combines the per-day usage of several independently loaded sources into one
dataset. Totals are summed; each breakdown dimension is summed key-wise, and a
dimension no source reported for a day stays absent.
"""

from collections import Counter
from collections.abc import Iterable

from data.models import Breakdown, DailyUsage, UsageData


def merge_breakdowns(left: Breakdown, right: Breakdown) -> Breakdown:
    """Merge two optional breakdown mappings.

    absent + absent is absent, present + absent is the present side unchanged,
    present + present is the key-wise sum.
    """
    if left is None:
        return None if right is None else dict(right)
    if right is None:
        return dict(left)

    combined = Counter(left)
    combined.update(right)
    # Counter.update keeps zero-valued keys, unlike Counter addition
    return dict(sorted(combined.items()))


def merge_daily_usage(left: DailyUsage, right: DailyUsage) -> DailyUsage:
    return DailyUsage(
        total_seconds=left.total_seconds + right.total_seconds,
        language_time=merge_breakdowns(left.language_time, right.language_time),
        repo_time=merge_breakdowns(left.repo_time, right.repo_time),
        file_time=merge_breakdowns(left.file_time, right.file_time),
    )


def merge_usage_data(sources: Iterable[UsageData]) -> UsageData:
    """
    Merge per-source usage into one dataset keyed by date.

    Zero sources give an empty mapping, a single source is passed through.
    The result does not depend on the order of ``sources``.
    """
    merged: dict[str, DailyUsage] = {}

    for usage in sources:
        for date_key, day in usage.items():
            if date_key in merged:
                merged[date_key] = merge_daily_usage(merged[date_key], day)
            else:
                merged[date_key] = day

    return dict(sorted(merged.items()))
