"""Tracking payload parsing module for codetrack.

This module decodes the JSON log written by the time-tracking extension into
per-day ``DailyUsage`` records. Unknown fields are ignored so newer extension
versions keep working.
"""

import json
from typing import Any

from constants import PAYLOAD_BREAKDOWN_KEYS, PAYLOAD_DAILY_DATA_KEY, PAYLOAD_TOTAL_TIME_KEY
from data.models import Breakdown, DailyUsage, UsageData
from errors import MalformedPayloadError
from utils.logging_config import get_logger, log_with_context

# Initialize logger
logger = get_logger()


def _is_seconds(value: Any) -> bool:
    # bool is a subclass of int
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _parse_breakdown(date_key: str, field_name: str, value: Any) -> Breakdown:
    if value is None:
        return None

    if not isinstance(value, dict):
        raise MalformedPayloadError(
            f"{date_key}: '{field_name}' must be an object, got {type(value).__name__}"
        )

    for key, seconds in value.items():
        if not _is_seconds(seconds):
            raise MalformedPayloadError(
                f"{date_key}: '{field_name}.{key}' must be a non-negative integer, got {seconds!r}"
            )

    return dict(value)


def parse_daily_entry(date_key: str, entry: Any) -> DailyUsage:
    """Parse a single per-date record.

    Args:
        date_key: Date string the entry is keyed by
        entry: Decoded JSON value for that date

    Returns:
        DailyUsage for the date

    Raises:
        MalformedPayloadError: If the entry is not an object or has no valid total
    """
    if not isinstance(entry, dict):
        raise MalformedPayloadError(f"{date_key}: entry must be an object, got {type(entry).__name__}")

    if PAYLOAD_TOTAL_TIME_KEY not in entry:
        raise MalformedPayloadError(f"{date_key}: missing required field '{PAYLOAD_TOTAL_TIME_KEY}'")

    total = entry[PAYLOAD_TOTAL_TIME_KEY]
    if not _is_seconds(total):
        raise MalformedPayloadError(
            f"{date_key}: '{PAYLOAD_TOTAL_TIME_KEY}' must be a non-negative integer, got {total!r}"
        )

    breakdowns = {
        attr: _parse_breakdown(date_key, json_key, entry.get(json_key))
        for attr, json_key in PAYLOAD_BREAKDOWN_KEYS.items()
    }

    return DailyUsage(total_seconds=total, **breakdowns)


def parse_usage_payload(raw: bytes) -> UsageData:
    """Decode a tracking payload into per-date usage.

    Args:
        raw: Raw payload bytes (UTF-8 JSON)

    Returns:
        Mapping of date string to DailyUsage

    Raises:
        MalformedPayloadError: If the bytes are not JSON or the schema is violated
    """
    try:
        document = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedPayloadError(f"Invalid JSON in tracking payload: {e}") from e

    if not isinstance(document, dict):
        raise MalformedPayloadError(f"Tracking payload must be an object, got {type(document).__name__}")

    if PAYLOAD_DAILY_DATA_KEY not in document:
        raise MalformedPayloadError(f"Tracking payload must contain '{PAYLOAD_DAILY_DATA_KEY}' key")

    daily_data = document[PAYLOAD_DAILY_DATA_KEY]
    if not isinstance(daily_data, dict):
        raise MalformedPayloadError(
            f"'{PAYLOAD_DAILY_DATA_KEY}' must be an object, got {type(daily_data).__name__}"
        )

    usage = {date_key: parse_daily_entry(date_key, entry) for date_key, entry in daily_data.items()}

    log_with_context(logger, "DEBUG", "Parsed tracking payload", days=len(usage), size_bytes=len(raw))

    return usage
