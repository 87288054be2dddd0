"""Configuration store for codetrack.

Holds the user's settings (window length, threshold table, data sources) in a
JSON document on disk. Every mutation is validated, saved and announced to
registered listeners so a resync can follow.
"""

import json
import threading
import uuid
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

from calculations.intensity import sort_thresholds, validate_thresholds
from constants import DEFAULT_WINDOW_LENGTH, MAX_DATA_SOURCES, WINDOW_LENGTHS
from data.models import Color, DataSource, Settings, Threshold, default_thresholds
from settings.migration import SOURCE_ID_NAMESPACE, is_legacy_configuration, migrate_legacy_configuration
from utils.logging_config import get_logger, log_with_context, source_context

# Initialize logger
logger = get_logger()

Listener = Callable[[], None]


def is_window_length(value: Any) -> bool:
    """True for one of the supported window lengths given as a plain int."""
    return isinstance(value, int) and not isinstance(value, bool) and value in WINDOW_LENGTHS


def _sources_from_list(items: list[Any]) -> list[DataSource]:
    sources: list[DataSource] = []
    seen: set[str] = set()
    for index, item in enumerate(items):
        try:
            source = DataSource.from_dict(item)
        except (KeyError, TypeError) as e:
            log_with_context(logger, "WARNING", "Dropping invalid data source entry", error=str(e))
            continue

        if source.id in seen:
            new_id = str(uuid.uuid5(SOURCE_ID_NAMESPACE, f"{source.locator}#{index}"))
            log_with_context(
                logger, "WARNING", "Duplicate data source id, assigning a new one", source_id=source.id, new_id=new_id
            )
            source = replace(source, id=new_id)

        seen.add(source.id)
        sources.append(source)
    return sources


def settings_from_dict(document: dict[str, Any]) -> Settings:
    """Build Settings from a (current-schema) document, repairing invalid values."""
    settings = Settings()

    days_count = document.get("daysCount", DEFAULT_WINDOW_LENGTH)
    if is_window_length(days_count):
        settings.days_count = days_count
    else:
        log_with_context(logger, "WARNING", "Invalid window length in settings, using default", value=days_count)

    if "thresholds" in document:
        try:
            thresholds = [Threshold.from_dict(item) for item in document["thresholds"]]
            validate_thresholds(thresholds)
            settings.thresholds = sort_thresholds(thresholds)
        except (KeyError, TypeError, ValueError) as e:
            log_with_context(logger, "WARNING", "Invalid threshold table in settings, using defaults", error=str(e))

    items = document.get("dataSources", [])
    if isinstance(items, list):
        settings.data_sources = _sources_from_list(items)
    else:
        log_with_context(logger, "WARNING", "Invalid data source list in settings, using none", value=items)

    settings.is_first_launch = bool(document.get("isFirstLaunch", True))
    settings.start_with_system = bool(document.get("startWithSystem", False))
    return settings


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    return {
        "daysCount": settings.days_count,
        "thresholds": [t.to_dict() for t in settings.thresholds],
        "dataSources": [s.to_dict() for s in settings.data_sources],
        "isFirstLaunch": settings.is_first_launch,
        "startWithSystem": settings.start_with_system,
    }


class ConfigurationStore:
    """File-backed user settings with change notification."""

    def __init__(self, path: Path, max_data_sources: int = MAX_DATA_SOURCES):
        self.path = Path(path)
        self.max_data_sources = max_data_sources
        self._settings = Settings()
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()
        self.load()

    # Persistence

    def load(self) -> Settings:
        """Load settings from disk, migrating legacy documents once."""
        with self._lock:
            if not self.path.exists():
                log_with_context(logger, "INFO", "No saved settings, using defaults", path=str(self.path))
                self._settings = Settings()
                self.save()
                return self._settings

            try:
                document = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                log_with_context(logger, "ERROR", "Failed to read settings, using defaults", error=str(e))
                self._settings = Settings()
                return self._settings

            if not isinstance(document, dict):
                log_with_context(logger, "ERROR", "Settings document is not an object, using defaults")
                self._settings = Settings()
                return self._settings

            legacy = is_legacy_configuration(document)
            self._settings = settings_from_dict(migrate_legacy_configuration(document))

            if legacy:
                log_with_context(
                    logger, "INFO", "Migrated legacy settings", sources=len(self._settings.data_sources)
                )
                self.save()

            return self._settings

    def save(self) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(settings_to_dict(self._settings), indent=2), encoding="utf-8")
            tmp_path.replace(self.path)

    # Listeners

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _changed(self) -> None:
        self.save()
        for listener in list(self._listeners):
            listener()

    # Window length

    @property
    def window_length(self) -> int:
        return self._settings.days_count

    def set_window_length(self, days: int) -> None:
        if not is_window_length(days):
            raise ValueError(f"Window length must be one of {WINDOW_LENGTHS}, got {days}")
        with self._lock:
            self._settings.days_count = days
        self._changed()

    # Thresholds

    @property
    def thresholds(self) -> list[Threshold]:
        with self._lock:
            return list(self._settings.thresholds)

    def _replace_thresholds(self, thresholds: list[Threshold]) -> None:
        validate_thresholds(thresholds)
        with self._lock:
            self._settings.thresholds = sort_thresholds(thresholds)
        self._changed()

    def update_threshold(self, seconds: int, new_seconds: Optional[int] = None, color: Optional[Color] = None) -> None:
        """Change the cutoff and/or color of the rule currently at ``seconds``."""
        thresholds = self.thresholds
        index = next((i for i, t in enumerate(thresholds) if t.seconds == seconds), None)
        if index is None:
            raise ValueError(f"No threshold with cutoff {seconds}s")

        current = thresholds[index]
        if not current.is_editable:
            raise ValueError(f"Threshold '{current.display_name}' is not editable")

        thresholds[index] = Threshold(
            seconds=current.seconds if new_seconds is None else new_seconds,
            color=current.color if color is None else color,
            is_editable=True,
        )
        self._replace_thresholds(thresholds)

    def add_threshold(self, seconds: int, color: Color) -> None:
        self._replace_thresholds(self.thresholds + [Threshold(seconds, color, is_editable=True)])

    def remove_threshold(self, seconds: int) -> None:
        thresholds = self.thresholds
        remaining = [t for t in thresholds if t.seconds != seconds]
        if len(remaining) == len(thresholds):
            raise ValueError(f"No threshold with cutoff {seconds}s")
        if any(t.seconds == seconds and not t.is_editable for t in thresholds):
            raise ValueError("The baseline threshold cannot be removed")
        self._replace_thresholds(remaining)

    def reset_thresholds(self) -> None:
        self._replace_thresholds(default_thresholds())

    # Data sources

    @property
    def data_sources(self) -> list[DataSource]:
        with self._lock:
            return list(self._settings.data_sources)

    def enabled_sources(self) -> list[DataSource]:
        return [source for source in self.data_sources if source.is_enabled]

    def get_data_source(self, source_id: str) -> DataSource:
        for source in self.data_sources:
            if source.id == source_id:
                return source
        raise KeyError(source_id)

    def add_data_source(self, name: str, locator: str) -> DataSource:
        with self._lock:
            if len(self._settings.data_sources) >= self.max_data_sources:
                raise ValueError(f"At most {self.max_data_sources} data sources can be configured")
            source = DataSource(id=str(uuid.uuid4()), name=name or Path(locator).stem, locator=locator)
            self._settings.data_sources.append(source)
            self._settings.is_first_launch = False
        log_with_context(logger, "INFO", "Data source added", locator=locator, **source_context(source))
        self._changed()
        return source

    def _replace_source(self, source_id: str, **changes: Any) -> None:
        with self._lock:
            sources = self._settings.data_sources
            for i, source in enumerate(sources):
                if source.id == source_id:
                    sources[i] = replace(source, **changes)
                    break
            else:
                raise KeyError(source_id)
        self._changed()

    def rename_data_source(self, source_id: str, name: str) -> None:
        self._replace_source(source_id, name=name)

    def set_source_enabled(self, source_id: str, enabled: bool) -> None:
        self._replace_source(source_id, is_enabled=enabled)

    def remove_data_source(self, source_id: str) -> None:
        with self._lock:
            before = len(self._settings.data_sources)
            self._settings.data_sources = [s for s in self._settings.data_sources if s.id != source_id]
            if len(self._settings.data_sources) == before:
                raise KeyError(source_id)
        log_with_context(logger, "INFO", "Data source removed", source_id=source_id)
        self._changed()

    # First launch

    @property
    def is_first_launch(self) -> bool:
        return self._settings.is_first_launch

    def complete_first_launch(self) -> None:
        with self._lock:
            self._settings.is_first_launch = False
        self.save()
