"""
Plain-dict form of a TrackerState, for handing to a document store.

Keys follow the camelCase field names of the stored records
(`statsByPeriod`, `currentPeriod`, `timeStats`, ...). Values are only
numbers, strings, None and nested dicts/lists, so the result is JSON-ready.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from .config import CategoryAveraging, RangeThresholds, TrackerConfig
from .errors import GlucoseStatsError, InvalidStateError
from .models import Band, Counters, TimeCategory, TrackerState, WindowStats


def _thresholds_to_dict(t: RangeThresholds) -> Dict[str, Any]:
    return {
        "veryHigh": t.very_high,
        "high": [t.high[0], t.high[1]],
        "normal": [t.normal[0], t.normal[1]],
        "low": t.low,
    }


def _window_to_dict(w: WindowStats) -> Dict[str, Any]:
    return {
        "startDate": w.start_date,
        "endDate": w.end_date,
        "average": w.average,
        "highest": w.highest,
        "lowest": w.lowest,
        "counters": {band.value: w.counters.get(band) for band in Band},
        "timeStats": {c.value: v for c, v in w.time_stats.items()},
        "timeCounts": {c.value: n for c, n in w.time_counts.items()},
    }


def state_to_dict(state: TrackerState) -> Dict[str, Any]:
    return {
        "range": _thresholds_to_dict(state.thresholds),
        "statsByPeriod": {label: _window_to_dict(w) for label, w in state.stats_by_period.items()},
        "currentPeriod": state.current_period,
        "categoryAveraging": state.config.category_averaging.value,
    }


def _opt_float(value: Any):
    return None if value is None else float(value)


def _window_from_dict(d: Mapping[str, Any]) -> WindowStats:
    counters = d.get("counters") or {}
    return WindowStats(
        start_date=str(d["startDate"]),
        end_date=str(d["endDate"]),
        average=_opt_float(d.get("average")),
        highest=_opt_float(d.get("highest")),
        lowest=_opt_float(d.get("lowest")),
        counters=Counters(
            very_high=int(counters.get(Band.VERY_HIGH.value, 0)),
            high=int(counters.get(Band.HIGH.value, 0)),
            normal=int(counters.get(Band.NORMAL.value, 0)),
            low=int(counters.get(Band.LOW.value, 0)),
        ),
        time_stats={TimeCategory.coerce(k): float(v) for k, v in (d.get("timeStats") or {}).items() if v is not None},
        time_counts={TimeCategory.coerce(k): int(v) for k, v in (d.get("timeCounts") or {}).items()},
    )


def state_from_dict(data: Mapping[str, Any]) -> TrackerState:
    """
    Rebuild a TrackerState from `state_to_dict` output (or an older record
    without `timeCounts` / `categoryAveraging`).
    """
    try:
        r = data["range"]
        thresholds = RangeThresholds(
            very_high=r["veryHigh"],
            high=tuple(r["high"]),
            normal=tuple(r["normal"]),
            low=r["low"],
        )
        stats_by_period = {str(label): _window_from_dict(w) for label, w in data["statsByPeriod"].items()}
        config = TrackerConfig(
            category_averaging=CategoryAveraging(data.get("categoryAveraging", CategoryAveraging.SHARED.value))
        )
        current = str(data["currentPeriod"])
    except GlucoseStatsError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise InvalidStateError(f"Malformed tracker record: {e!r}") from e

    # per-category averages cannot continue without their reading counts
    if config.category_averaging == CategoryAveraging.PER_CATEGORY:
        for label, w in stats_by_period.items():
            missing = [c.value for c in w.time_stats if w.time_counts.get(c, 0) <= 0]
            if missing:
                raise InvalidStateError(
                    f"Period {label!r} has per-category averages without counts: {', '.join(missing)}"
                )

    return TrackerState(
        stats_by_period=stats_by_period,
        current_period=current,
        thresholds=thresholds,
        config=config,
    )
