from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, Optional, Sequence, Union

import numpy as np

from .config import DEFAULT_CONFIG, DEFAULT_THRESHOLDS, DEFAULT_WINDOWS, CategoryAveraging, RangeThresholds, TrackerConfig
from .errors import InvalidMeasurementError, InvalidStateError, InvalidWindowError
from .models import Band, TimeCategory, TrackerState, WindowStats
from .time_utils import today_utc, window_bounds

logger = logging.getLogger(__name__)

CategoryLike = Union[TimeCategory, str]


def classify_level(thresholds: RangeThresholds, level: float) -> Optional[Band]:
    """
    First matching band in precedence order, or None if the level falls in a
    gap between bands (only possible for unvalidated thresholds or NaN).
    """
    if level > thresholds.very_high:
        return Band.VERY_HIGH
    if thresholds.high[0] <= level <= thresholds.high[1]:
        return Band.HIGH
    if thresholds.normal[0] <= level <= thresholds.normal[1]:
        return Band.NORMAL
    if level < thresholds.low:
        return Band.LOW
    return None


def _running_mean(old: Optional[float], level: float, n: int) -> float:
    # old * (n - 1) + level over n; nothing counted yet means the level itself
    if n <= 0:
        return level
    return ((old if old is not None else 0.0) * (n - 1) + level) / n


def _check_level(level: object) -> float:
    # float() would also parse "5.5" and True
    if isinstance(level, (str, bytes, bool, np.bool_)):
        raise InvalidMeasurementError(f"Level is not numeric: {level!r}")
    try:
        value = float(level)
    except (TypeError, ValueError, OverflowError):
        raise InvalidMeasurementError(f"Level is not numeric: {level!r}") from None
    if not np.isfinite(value):
        raise InvalidMeasurementError(f"Level must be finite, got {value}")
    return value


def _apply_reading(
    stats: WindowStats,
    level: float,
    category: Optional[TimeCategory],
    thresholds: RangeThresholds,
    averaging: CategoryAveraging,
) -> WindowStats:
    band = classify_level(thresholds, level)
    counters = stats.counters.increment(band) if band is not None else stats.counters
    if band is None:
        logger.warning("Level %s matched no band; counters left unchanged", level)

    n = counters.total
    changes = dict(
        counters=counters,
        highest=level if stats.highest is None or level > stats.highest else stats.highest,
        lowest=level if stats.lowest is None or level < stats.lowest else stats.lowest,
        average=_running_mean(stats.average, level, n),
    )

    if category is not None:
        time_counts = dict(stats.time_counts)
        time_counts[category] = time_counts.get(category, 0) + 1
        divisor = n if averaging == CategoryAveraging.SHARED else time_counts[category]
        time_stats = dict(stats.time_stats)
        time_stats[category] = _running_mean(time_stats.get(category), level, divisor)
        changes.update(time_stats=time_stats, time_counts=time_counts)

    return replace(stats, **changes)


def get_current_stats(state: TrackerState) -> WindowStats:
    try:
        return state.stats_by_period[state.current_period]
    except KeyError:
        raise InvalidStateError(f"Current period {state.current_period!r} has no statistics") from None


def record_measurement(
    state: TrackerState,
    level: float,
    time_category: Optional[CategoryLike] = None,
) -> TrackerState:
    """
    Record one reading into the current window and return the new state.

    Only the current window changes; every other window is carried over by
    reference. Neither `state` nor its windows are modified.
    """
    value = _check_level(level)
    category = TimeCategory.coerce(time_category) if time_category is not None else None

    period = state.current_period
    updated = _apply_reading(
        get_current_stats(state),
        value,
        category,
        state.thresholds,
        state.config.category_averaging,
    )
    logger.debug("Recorded %s (%s) into period %s", value, category.value if category else "-", period)

    stats_by_period = dict(state.stats_by_period)
    stats_by_period[period] = updated
    return replace(state, stats_by_period=stats_by_period)


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, float) and np.isnan(value)


def record_measurements(
    state: TrackerState,
    levels: Iterable[float],
    time_categories: Optional[Sequence[Optional[CategoryLike]]] = None,
) -> TrackerState:
    """
    Record a batch of readings in order.

    The whole batch is validated up front, so a bad level or category leaves
    the state untouched. Missing categories may be None or NaN.
    """
    raw_levels = list(levels)
    for idx, level in enumerate(raw_levels):
        if isinstance(level, (str, bytes, bool, np.bool_)):
            raise InvalidMeasurementError(f"Level at index {idx} is not numeric: {level!r}")
    try:
        arr = np.asarray(raw_levels, dtype=float)
    except (TypeError, ValueError, OverflowError) as e:
        raise InvalidMeasurementError(f"Levels are not numeric: {e}") from None
    if not np.isfinite(arr).all():
        bad = int(np.flatnonzero(~np.isfinite(arr))[0])
        raise InvalidMeasurementError(f"Level at index {bad} must be finite, got {arr[bad]}")

    if time_categories is None:
        categories = [None] * len(arr)
    else:
        raw = list(time_categories)
        if len(raw) != len(arr):
            raise InvalidMeasurementError(
                f"Got {len(raw)} time categories for {len(arr)} levels"
            )
        categories = [None if _is_missing(c) else TimeCategory.coerce(c) for c in raw]

    for value, category in zip(arr.tolist(), categories):
        state = record_measurement(state, value, category)
    return state


def switch_window(state: TrackerState, label: str) -> TrackerState:
    if label not in state.stats_by_period:
        raise InvalidWindowError(label)
    logger.debug("Switching period %s -> %s", state.current_period, label)
    return replace(state, current_period=label)


def _window_days(label: object) -> int:
    if not isinstance(label, str) or not label.isdigit():
        raise InvalidWindowError(label)
    return int(label)


def initial_state(
    thresholds: Optional[RangeThresholds] = None,
    windows: Sequence[str] = DEFAULT_WINDOWS,
    current: Optional[str] = None,
    today: Optional[date] = None,
    config: Optional[TrackerConfig] = None,
) -> TrackerState:
    """
    Fresh state with one empty window per label.

    Labels are day counts ("7", "14", ...); each window's start/end dates are
    derived from `today` (UTC date by default).
    """
    if not windows:
        raise InvalidWindowError(None)
    if today is None:
        today = today_utc()

    stats_by_period: Dict[str, WindowStats] = {}
    for label in windows:
        start_date, end_date = window_bounds(_window_days(label), today)
        stats_by_period[label] = WindowStats(start_date=start_date, end_date=end_date)

    if current is None:
        current = windows[0]
    elif current not in stats_by_period:
        raise InvalidWindowError(current)

    return TrackerState(
        stats_by_period=stats_by_period,
        current_period=current,
        thresholds=thresholds if thresholds is not None else DEFAULT_THRESHOLDS,
        config=config if config is not None else DEFAULT_CONFIG,
    )
