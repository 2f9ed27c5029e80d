from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional

from .config import DEFAULT_CONFIG, DEFAULT_THRESHOLDS, RangeThresholds, TrackerConfig
from .errors import InvalidMeasurementError, InvalidStateError


class TimeCategory(str, Enum):
    """When in the day a reading was taken."""

    BEFORE_BREAKFAST = "beforeBreakfast"
    AFTER_BREAKFAST = "afterBreakfast"
    BEFORE_LUNCH = "beforeLunch"
    AFTER_LUNCH = "afterLunch"
    BEFORE_DINNER = "beforeDinner"
    AFTER_DINNER = "afterDinner"
    BEFORE_SLEEP = "beforeSleep"
    RANDOM = "random"

    @classmethod
    def coerce(cls, value: object) -> "TimeCategory":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidMeasurementError(f"Unknown time category: {value!r}") from None


class Band(str, Enum):
    VERY_HIGH = "veryHigh"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


_BAND_FIELDS = {
    Band.VERY_HIGH: "very_high",
    Band.HIGH: "high",
    Band.NORMAL: "normal",
    Band.LOW: "low",
}


@dataclass(frozen=True)
class Counters:
    very_high: int = 0
    high: int = 0
    normal: int = 0
    low: int = 0

    @property
    def total(self) -> int:
        return self.very_high + self.high + self.normal + self.low

    def get(self, band: Band) -> int:
        return getattr(self, _BAND_FIELDS[band])

    def increment(self, band: Band) -> "Counters":
        name = _BAND_FIELDS[band]
        return replace(self, **{name: getattr(self, name) + 1})


@dataclass(frozen=True)
class WindowStats:
    """
    Running statistics for one window.

    start_date / end_date are ISO dates kept as metadata only; readings are
    never filtered or expired by them.
    """

    start_date: str
    end_date: str
    average: Optional[float] = None
    lowest: Optional[float] = None
    highest: Optional[float] = None
    counters: Counters = field(default_factory=Counters)
    time_stats: Dict[TimeCategory, float] = field(default_factory=dict)
    time_counts: Dict[TimeCategory, int] = field(default_factory=dict)


@dataclass(frozen=True)
class TrackerState:
    stats_by_period: Dict[str, WindowStats]
    current_period: str
    thresholds: RangeThresholds = DEFAULT_THRESHOLDS
    config: TrackerConfig = DEFAULT_CONFIG

    def __post_init__(self) -> None:
        if self.current_period not in self.stats_by_period:
            raise InvalidStateError(f"Current period {self.current_period!r} has no statistics")
