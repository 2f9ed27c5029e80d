from __future__ import annotations

from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from .errors import InvalidWindowError
from .models import Band, TimeCategory, TrackerState


def _nan_if_none(value: Optional[float]) -> float:
    return float("nan") if value is None else float(value)


def window_stats_frame(state: TrackerState) -> pd.DataFrame:
    """
    One row per window, in the order the windows were created.

    Aggregates that have no readings yet are NaN.
    """
    rows: List[Dict] = []
    for label, w in state.stats_by_period.items():
        rows.append({
            "period": label,
            "start_date": w.start_date,
            "end_date": w.end_date,
            "average": _nan_if_none(w.average),
            "lowest": _nan_if_none(w.lowest),
            "highest": _nan_if_none(w.highest),
            "very_high": w.counters.get(Band.VERY_HIGH),
            "high": w.counters.get(Band.HIGH),
            "normal": w.counters.get(Band.NORMAL),
            "low": w.counters.get(Band.LOW),
            "total": w.counters.total,
            "is_current": label == state.current_period,
        })
    return pd.DataFrame(rows)


def time_stats_frame(state: TrackerState, period: Optional[str] = None) -> pd.DataFrame:
    """Per time-category average and reading count for one window (default: current)."""
    if period is None:
        period = state.current_period
    if period not in state.stats_by_period:
        raise InvalidWindowError(period)
    w = state.stats_by_period[period]

    return pd.DataFrame({
        "time_category": [c.value for c in TimeCategory],
        "average": np.array([_nan_if_none(w.time_stats.get(c)) for c in TimeCategory], dtype=float),
        "count": np.array([w.time_counts.get(c, 0) for c in TimeCategory], dtype=int),
    })
