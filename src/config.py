"""Application configuration management"""

import contextlib
import os
from dataclasses import dataclass, field
from pathlib import Path

from constants import (
    DEFAULT_SOURCE_FILENAME,
    MAX_DATA_SOURCES,
    SOURCE_FETCH_TIMEOUT_SECONDS,
    SYNC_INTERVAL_SECONDS,
)


def _default_source_path() -> Path:
    # Where the Cursor "time" extension keeps its log on macOS
    return (
        Path.home()
        / "Library"
        / "Application Support"
        / "Cursor"
        / "User"
        / "globalStorage"
        / "n3rds-inc.time"
        / DEFAULT_SOURCE_FILENAME
    )


@dataclass
class AppConfig:
    """Application configuration settings"""

    # Path settings
    settings_path: Path = field(default_factory=lambda: Path.home() / ".codetrack" / "settings.json")
    store_path: Path = field(default_factory=lambda: Path.home() / ".codetrack" / "usage.duckdb")
    default_source_path: Path = field(default_factory=_default_source_path)

    # Sync settings
    sync_interval: int = SYNC_INTERVAL_SECONDS  # seconds
    source_fetch_timeout: float = SOURCE_FETCH_TIMEOUT_SECONDS  # seconds
    max_data_sources: int = MAX_DATA_SOURCES

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables"""
        config = cls()

        # Override with environment variables if present
        if settings_path := os.getenv("CODETRACK_SETTINGS_PATH"):
            config.settings_path = Path(settings_path)

        if store_path := os.getenv("CODETRACK_STORE_PATH"):
            config.store_path = Path(store_path)

        if source_path := os.getenv("DEFAULT_SOURCE_PATH"):
            config.default_source_path = Path(source_path)

        if sync_interval := os.getenv("SYNC_INTERVAL"):
            with contextlib.suppress(ValueError):
                config.sync_interval = int(sync_interval)

        if fetch_timeout := os.getenv("SOURCE_FETCH_TIMEOUT"):
            with contextlib.suppress(ValueError):
                config.source_fetch_timeout = float(fetch_timeout)

        if max_sources := os.getenv("MAX_DATA_SOURCES"):
            with contextlib.suppress(ValueError):
                config.max_data_sources = int(max_sources)

        return config
