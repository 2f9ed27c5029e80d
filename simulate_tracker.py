from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd

from glucose_stats.config import CategoryAveraging, TrackerConfig
from glucose_stats.errors import GlucoseStatsError, InvalidWindowError
from glucose_stats.models import TimeCategory, TrackerState
from glucose_stats.report import time_stats_frame, window_stats_frame
from glucose_stats.serialize import state_to_dict
from glucose_stats.tracker import get_current_stats, initial_state, record_measurement, record_measurements, switch_window

logger = logging.getLogger("simulate_tracker")

# (level mmol/L, time category) recorded by the demo run
DEMO_READINGS = [
    (5.5, TimeCategory.BEFORE_BREAKFAST),
    (7.8, TimeCategory.AFTER_LUNCH),
    (9.3, TimeCategory.RANDOM),
    (3.9, TimeCategory.BEFORE_SLEEP),
]


def _print_current(title: str, state: TrackerState) -> None:
    stats = get_current_stats(state)
    print(f"\n{title} (period {state.current_period}: {stats.start_date} .. {stats.end_date})")
    print(f"  average={stats.average} lowest={stats.lowest} highest={stats.highest}")
    c = stats.counters
    print(f"  counters: veryHigh={c.very_high} high={c.high} normal={c.normal} low={c.low}")
    for category, avg in stats.time_stats.items():
        print(f"  {category.value}: {avg:.2f}")


def run_demo(state: TrackerState, switch_to: str = "14") -> TrackerState:
    """Record the demo readings, show the current window, then switch windows."""
    for level, category in DEMO_READINGS:
        state = record_measurement(state, level, category)
    _print_current("Stats for the current period", state)

    try:
        state = switch_window(state, switch_to)
        _print_current("Switched period stats", state)
    except InvalidWindowError as e:
        logger.error("Error switching period: %s", e)

    return state


def load_readings(path: Path) -> pd.DataFrame:
    """
    Read a CSV of readings with a `level` column and an optional
    `time_category` column (blank cells mean no category).
    """
    df = pd.read_csv(path)
    if "level" not in df.columns:
        raise ValueError(f"{path}: CSV must contain a 'level' column")
    return df


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Record glucose readings into rolling-window statistics.")
    ap.add_argument("--input", default=None, help="CSV with columns level[,time_category]; runs the demo if omitted")
    ap.add_argument("--period", default="7", help="Window to record into (default: 7)")
    ap.add_argument("--out", default=None, help="Write per-window summary CSV here")
    ap.add_argument("--json", default=None, help="Write the full tracker state as JSON here")
    ap.add_argument("--per-category", action="store_true", help="Average time categories over their own readings")
    ap.add_argument("--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    averaging = CategoryAveraging.PER_CATEGORY if args.per_category else CategoryAveraging.SHARED
    state = initial_state(config=TrackerConfig(category_averaging=averaging))

    try:
        if args.input is None:
            state = run_demo(switch_window(state, args.period))
        else:
            readings = load_readings(Path(args.input))
            categories = readings["time_category"].tolist() if "time_category" in readings.columns else None
            state = record_measurements(switch_window(state, args.period), readings["level"].tolist(), categories)
            print(f"Recorded {len(readings)} readings into period {state.current_period}")
            print(time_stats_frame(state).to_string(index=False))
    except FileNotFoundError as e:
        print(f"File Error: {e}", flush=True)
        return 1
    except (ValueError, GlucoseStatsError) as e:
        print(f"Error: {e}", flush=True)
        return 1

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        window_stats_frame(state).to_csv(out_path, index=False)
        print(f"Wrote {len(state.stats_by_period)} periods -> {out_path}")

    if args.json:
        json_path = Path(args.json)
        json_path.parent.mkdir(parents=True, exist_ok=True)
        json_path.write_text(json.dumps(state_to_dict(state), indent=2))
        print(f"Wrote state -> {json_path}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
