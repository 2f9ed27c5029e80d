from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .errors import InvalidThresholdsError


@dataclass(frozen=True)
class RangeThresholds:
    """
    Band boundaries for classifying a reading. All values are in mmol/L.

    Precedence when classifying: very_high, high, normal, low.
    Intervals are closed; very_high and low are strict bounds.
    """

    very_high: float = 9.0                      # > 9 is very high
    high: Tuple[float, float] = (6.0, 9.0)      # [6, 9]
    normal: Tuple[float, float] = (4.0, 6.0)    # [4, 6]
    low: float = 4.0                            # < 4 is low

    def __post_init__(self) -> None:
        high = (float(self.high[0]), float(self.high[1]))
        normal = (float(self.normal[0]), float(self.normal[1]))
        object.__setattr__(self, "high", high)
        object.__setattr__(self, "normal", normal)
        object.__setattr__(self, "very_high", float(self.very_high))
        object.__setattr__(self, "low", float(self.low))

        if normal[0] > normal[1] or high[0] > high[1]:
            raise InvalidThresholdsError(f"Band interval is reversed: normal={normal}, high={high}")
        if normal[0] > high[0]:
            raise InvalidThresholdsError(f"normal band {normal} starts above high band {high}")

        # every finite value must land in some band
        if self.low < normal[0]:
            raise InvalidThresholdsError(f"Gap between low (< {self.low}) and normal {normal}")
        if high[0] > normal[1]:
            raise InvalidThresholdsError(f"Gap between normal {normal} and high {high}")
        if high[1] < self.very_high:
            raise InvalidThresholdsError(f"Gap between high {high} and very high (> {self.very_high})")


class CategoryAveraging(str, Enum):
    """Divisor used for time-category running averages."""

    SHARED = "shared"                # window total, as previously stored averages were computed
    PER_CATEGORY = "per_category"    # readings in that category only


@dataclass(frozen=True)
class TrackerConfig:
    category_averaging: CategoryAveraging = CategoryAveraging.SHARED


DEFAULT_THRESHOLDS = RangeThresholds()
DEFAULT_WINDOWS: Tuple[str, ...] = ("7", "14", "30", "90")
DEFAULT_CONFIG = TrackerConfig()
