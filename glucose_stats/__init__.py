"""
In-memory glucose statistics over rolling day windows.

This package is intentionally small and focused on:
- classifying readings into very-high / high / normal / low bands
- keeping running counters, min/max and averages per window ("7", "14", "30", "90")
- per time-of-day category averages (before breakfast, after lunch, ...)
"""

from .config import DEFAULT_THRESHOLDS, DEFAULT_WINDOWS, CategoryAveraging, RangeThresholds, TrackerConfig
from .errors import (
    GlucoseStatsError,
    InvalidMeasurementError,
    InvalidStateError,
    InvalidThresholdsError,
    InvalidWindowError,
)
from .models import Band, Counters, TimeCategory, TrackerState, WindowStats
from .tracker import (
    classify_level,
    get_current_stats,
    initial_state,
    record_measurement,
    record_measurements,
    switch_window,
)
