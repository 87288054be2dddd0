"""Tests for the DuckDB-backed shared store"""

import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from calculations.window import build_usage_window
from data.models import DailyUsage, IntensityLevel, UsageDay, default_thresholds
from errors import PublishFailedError
from sync.shared_store import SharedStore, usage_days_to_frame

TODAY = date(2025, 1, 30)
UPDATED_AT = datetime(2025, 1, 30, 12, 0, 0)


@pytest.fixture
def window():
    unified = {"2025-01-30": DailyUsage(7200), "2025-01-10": DailyUsage(60)}
    return build_usage_window(unified, 30, default_thresholds(), TODAY)


class TestSharedStore:
    """Test publishing and reading back the usage series"""

    def test_empty_store(self, shared_store):
        assert shared_store.load() == ([], None)

    def test_publish_then_load(self, shared_store, window):
        shared_store.publish(window, UPDATED_AT)

        days, last_updated = shared_store.load()

        assert days == window
        assert last_updated == UPDATED_AT

    def test_null_color_round_trips(self, shared_store):
        day = UsageDay(date=TODAY, seconds=0, intensity_level=IntensityLevel.NONE, color=None)

        shared_store.publish([day], UPDATED_AT)

        assert shared_store.load()[0] == [day]

    def test_publish_replaces_previous_series(self, shared_store, window):
        shared_store.publish(window, UPDATED_AT)
        shorter = window[-5:]

        shared_store.publish(shorter, UPDATED_AT + timedelta(hours=1))

        days, last_updated = shared_store.load()
        assert days == shorter
        assert last_updated == UPDATED_AT + timedelta(hours=1)

    def test_publishing_twice_is_idempotent(self, shared_store, window):
        shared_store.publish(window, UPDATED_AT)
        first = shared_store.load()

        shared_store.publish(window, UPDATED_AT)

        assert shared_store.load() == first
        assert len(first[0]) == 30

    def test_failed_publish_keeps_previous_state(self, shared_store, window):
        shared_store.publish(window, UPDATED_AT)

        with pytest.raises(PublishFailedError):
            shared_store.publish(window[:3] + [None], UPDATED_AT + timedelta(hours=1))

        assert shared_store.load() == (window, UPDATED_AT)

    def test_aware_timestamp_is_stored_as_local_time(self, shared_store, window):
        aware = datetime(2025, 1, 30, 12, 0, tzinfo=timezone.utc)

        shared_store.publish(window, aware)

        assert shared_store.last_updated() == aware.astimezone().replace(tzinfo=None)

    def test_persists_to_file(self, tmp_path, window):
        path = tmp_path / "store" / "usage.duckdb"
        store = SharedStore(path)
        store.publish(window, UPDATED_AT)
        store.close()

        reopened = SharedStore(path)
        try:
            assert reopened.load() == (window, UPDATED_AT)
        finally:
            reopened.close()


class TestUsageDaysToFrame:
    """Test row flattening"""

    def test_rows_keep_order_and_encode_color(self, window):
        df = usage_days_to_frame(window)

        assert list(df["seq"]) == list(range(30))
        assert df.iloc[-1]["day"] == "2025-01-30"
        assert df.iloc[-1]["intensity_level"] == "high"
        assert '"alpha"' in df.iloc[-1]["color"]

    def test_empty_series(self):
        assert usage_days_to_frame([]).empty
