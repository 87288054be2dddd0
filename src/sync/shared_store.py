"""Shared result store for codetrack.

The sync pass publishes the usage window here and the widget renderer reads it
back. The store is a DuckDB database; each publish replaces the previous
series and timestamp inside a single transaction.
"""

import contextlib
import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import duckdb
import pandas as pd

from constants import DATE_FORMAT, ERROR_PUBLISH_FAILED
from data.models import Color, IntensityLevel, UsageDay
from errors import PublishFailedError
from utils.logging_config import get_logger, log_with_context

# Initialize logger
logger = get_logger()

USAGE_DAYS_COLUMNS = ["seq", "day", "seconds", "intensity_level", "color"]

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS usage_days (
        seq INTEGER,
        day VARCHAR,
        seconds BIGINT,
        intensity_level VARCHAR,
        color VARCHAR
    )
    """,
    "CREATE TABLE IF NOT EXISTS sync_state (last_updated TIMESTAMP)",
)


def usage_days_to_frame(days: list[UsageDay]) -> pd.DataFrame:
    """Flatten usage days into the row layout of the ``usage_days`` table."""
    rows = [
        {
            "seq": seq,
            "day": day.date.strftime(DATE_FORMAT),
            "seconds": day.seconds,
            "intensity_level": day.intensity_level.value,
            "color": json.dumps(day.color.to_dict()) if day.color is not None else None,
        }
        for seq, day in enumerate(days)
    ]
    return pd.DataFrame(rows, columns=USAGE_DAYS_COLUMNS)


def usage_days_from_frame(df: pd.DataFrame) -> list[UsageDay]:
    days = []
    for row in df.itertuples(index=False):
        color = row.color if isinstance(row.color, str) else None
        days.append(
            UsageDay(
                date=datetime.strptime(row.day, DATE_FORMAT).date(),
                seconds=int(row.seconds),
                intensity_level=IntensityLevel(row.intensity_level),
                color=Color.from_dict(json.loads(color)) if color else None,
            )
        )
    return days


class SharedStore:
    """DuckDB-backed store for the published usage series."""

    def __init__(self, path: Union[Path, str] = ":memory:"):
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = duckdb.connect(self.path)
        for statement in SCHEMA:
            self._conn.execute(statement)

    def close(self) -> None:
        self._conn.close()

    def publish(self, days: list[UsageDay], updated_at: datetime) -> None:
        """Replace the published series and last-updated timestamp.

        Raises:
            PublishFailedError: If encoding or writing fails; the previous
                publish stays visible
        """
        try:
            frame = usage_days_to_frame(days)
        except (TypeError, ValueError, AttributeError) as e:
            raise PublishFailedError(f"{ERROR_PUBLISH_FAILED}: cannot encode days: {e}") from e

        if updated_at.tzinfo is not None:
            # Stored as naive local time
            updated_at = updated_at.astimezone().replace(tzinfo=None)

        conn = self._conn.cursor()
        try:
            conn.register("incoming_days", frame)
            conn.execute("BEGIN TRANSACTION")
            conn.execute("DELETE FROM usage_days")
            conn.execute(
                """
                INSERT INTO usage_days
                SELECT
                    CAST(seq AS INTEGER),
                    CAST(day AS VARCHAR),
                    CAST(seconds AS BIGINT),
                    CAST(intensity_level AS VARCHAR),
                    CAST(color AS VARCHAR)
                FROM incoming_days
                """
            )
            conn.execute("DELETE FROM sync_state")
            conn.execute("INSERT INTO sync_state VALUES (?)", [updated_at])
            conn.execute("COMMIT")
        except duckdb.Error as e:
            with contextlib.suppress(duckdb.Error):
                conn.execute("ROLLBACK")
            log_with_context(logger, "ERROR", "Publish failed", error_type=type(e).__name__, error_message=str(e))
            raise PublishFailedError(f"{ERROR_PUBLISH_FAILED}: {e}") from e
        finally:
            conn.close()

        log_with_context(
            logger,
            "INFO",
            "Published usage data",
            days=len(days),
            active_days=sum(1 for day in days if day.seconds > 0),
            last_updated=updated_at.isoformat(),
        )

    def load(self) -> tuple[list[UsageDay], Optional[datetime]]:
        """Return the published series (oldest first) and when it was published."""
        conn = self._conn.cursor()
        try:
            df = conn.execute(f"SELECT {', '.join(USAGE_DAYS_COLUMNS)} FROM usage_days ORDER BY seq").df()
            row = conn.execute("SELECT last_updated FROM sync_state").fetchone()
        finally:
            conn.close()

        return usage_days_from_frame(df), row[0] if row else None

    def last_updated(self) -> Optional[datetime]:
        return self.load()[1]
