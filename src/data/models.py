"""Data models for codetrack.

This module defines the data structures shared by the sync pipeline:
- DailyUsage: one day of tracked time (raw per source, or merged)
- Color / Threshold: the user-editable display color table
- IntensityLevel: fixed-boundary activity tag
- UsageDay: one published row of the trailing window
- DataSource: a user-configured tracking file
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional

from constants import DATE_FORMAT, DEFAULT_WINDOW_LENGTH, SECONDS_PER_HOUR

Breakdown = Optional[dict[str, int]]


@dataclass(frozen=True)
class DailyUsage:
    """Tracked time for a single calendar day.

    Breakdown dimensions are ``None`` when the source did not report them,
    which is different from an empty mapping.
    """

    total_seconds: int
    language_time: Breakdown = None
    repo_time: Breakdown = None
    file_time: Breakdown = None


# Date string (YYYY-MM-DD) -> usage for that day
UsageData = dict[str, DailyUsage]


@dataclass(frozen=True)
class Color:
    """RGBA color with components in [0, 1]."""

    red: float
    green: float
    blue: float
    alpha: float = 1.0

    def with_alpha(self, alpha: float) -> "Color":
        return Color(self.red, self.green, self.blue, alpha)

    def to_css(self) -> str:
        r, g, b = (round(c * 255) for c in (self.red, self.green, self.blue))
        return f"rgba({r}, {g}, {b}, {self.alpha:g})"

    def to_dict(self) -> dict[str, float]:
        return {"red": self.red, "green": self.green, "blue": self.blue, "alpha": self.alpha}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Color":
        return cls(
            red=float(data["red"]),
            green=float(data["green"]),
            blue=float(data["blue"]),
            alpha=float(data.get("alpha", 1.0)),
        )


# macOS system palette
GRAY = Color(142 / 255, 142 / 255, 147 / 255)
GREEN = Color(52 / 255, 199 / 255, 89 / 255)


@dataclass(frozen=True)
class Threshold:
    """A display rule: days with at least ``seconds`` of activity use ``color``."""

    seconds: int
    color: Color
    is_editable: bool = True

    @property
    def display_name(self) -> str:
        if self.seconds == 0:
            return "No Activity"
        return f"{self.seconds / SECONDS_PER_HOUR:.1f}h"

    def to_dict(self) -> dict[str, Any]:
        return {"seconds": self.seconds, "color": self.color.to_dict(), "isEditable": self.is_editable}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Threshold":
        return cls(
            seconds=int(data["seconds"]),
            color=Color.from_dict(data["color"]),
            is_editable=bool(data.get("isEditable", True)),
        )


def default_thresholds() -> list[Threshold]:
    """Return the factory threshold table (0h, 1h, 2h, 4h, 6h, 8h)."""
    return [
        Threshold(0, GRAY.with_alpha(0.3), is_editable=False),
        Threshold(1 * SECONDS_PER_HOUR, GREEN.with_alpha(0.3)),
        Threshold(2 * SECONDS_PER_HOUR, GREEN.with_alpha(0.5)),
        Threshold(4 * SECONDS_PER_HOUR, GREEN.with_alpha(0.7)),
        Threshold(6 * SECONDS_PER_HOUR, GREEN.with_alpha(0.85)),
        Threshold(8 * SECONDS_PER_HOUR, GREEN.with_alpha(1.0)),
    ]


class IntensityLevel(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    HIGHEST = "highest"

    @classmethod
    def from_seconds(cls, seconds: int) -> "IntensityLevel":
        """Classify by fixed hour boundaries, independent of any threshold table."""
        if seconds <= 0:
            return cls.NONE
        if seconds < 1 * SECONDS_PER_HOUR:
            return cls.LOW
        if seconds < 2 * SECONDS_PER_HOUR:
            return cls.MEDIUM
        if seconds < 4 * SECONDS_PER_HOUR:
            return cls.HIGH
        return cls.HIGHEST

    @property
    def opacity(self) -> float:
        return _OPACITY[self]

    @property
    def default_color(self) -> Color:
        """Palette color used when a day carries no resolved color."""
        if self is IntensityLevel.NONE:
            return GRAY.with_alpha(0.3)
        return GREEN.with_alpha(self.opacity)


_OPACITY = {
    IntensityLevel.NONE: 0.0,
    IntensityLevel.LOW: 0.3,
    IntensityLevel.MEDIUM: 0.5,
    IntensityLevel.HIGH: 0.7,
    IntensityLevel.HIGHEST: 1.0,
}


@dataclass(frozen=True)
class UsageDay:
    """One published day of the trailing window."""

    date: date
    seconds: int
    intensity_level: IntensityLevel
    color: Optional[Color] = None

    @property
    def hours(self) -> float:
        return self.seconds / SECONDS_PER_HOUR

    @property
    def display_color(self) -> Color:
        return self.color if self.color is not None else self.intensity_level.default_color

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.strftime(DATE_FORMAT),
            "seconds": self.seconds,
            "intensityLevel": self.intensity_level.value,
            "color": self.color.to_dict() if self.color is not None else None,
        }


@dataclass(frozen=True)
class DataSource:
    """A user-configured tracking file."""

    id: str
    name: str
    locator: str
    is_enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "locator": self.locator, "isEnabled": self.is_enabled}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DataSource":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            locator=str(data["locator"]),
            is_enabled=bool(data.get("isEnabled", True)),
        )


@dataclass
class Settings:
    """User settings persisted by the configuration store."""

    days_count: int = DEFAULT_WINDOW_LENGTH
    thresholds: list[Threshold] = field(default_factory=default_thresholds)
    data_sources: list[DataSource] = field(default_factory=list)
    is_first_launch: bool = True
    start_with_system: bool = False
