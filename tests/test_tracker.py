from dataclasses import replace
from datetime import date

import numpy as np
import pytest

from glucose_stats.config import RangeThresholds
from glucose_stats.errors import InvalidMeasurementError, InvalidStateError, InvalidWindowError
from glucose_stats.models import Counters, TimeCategory, TrackerState, WindowStats
from glucose_stats.tracker import (
    get_current_stats,
    initial_state,
    record_measurement,
    record_measurements,
    switch_window,
)


def test_initial_state_has_four_empty_windows(fresh_state):
    assert list(fresh_state.stats_by_period) == ["7", "14", "30", "90"]
    assert fresh_state.current_period == "7"
    for stats in fresh_state.stats_by_period.values():
        assert stats.average is None
        assert stats.lowest is None and stats.highest is None
        assert stats.counters == Counters()
        assert stats.time_stats == {}


def test_initial_state_window_dates(fresh_state):
    assert fresh_state.stats_by_period["7"].start_date == "2024-03-08"
    assert fresh_state.stats_by_period["90"].start_date == "2023-12-16"
    assert all(s.end_date == "2024-03-15" for s in fresh_state.stats_by_period.values())


def test_initial_state_custom_windows_and_current():
    state = initial_state(windows=("1", "3"), current="3", today=date(2024, 1, 2))
    assert state.current_period == "3"
    assert state.stats_by_period["1"].start_date == "2024-01-01"


@pytest.mark.parametrize("kwargs", [dict(windows=()), dict(windows=("7", "week")), dict(current="365")])
def test_initial_state_rejects_bad_windows(kwargs):
    with pytest.raises(InvalidWindowError):
        initial_state(**kwargs)


def test_single_reading_on_fresh_window(fresh_state):
    state = record_measurement(fresh_state, 7.2)
    stats = get_current_stats(state)
    assert stats.counters == Counters(high=1)
    assert stats.average == 7.2
    assert stats.highest == stats.lowest == 7.2
    assert stats.time_stats == {}


def test_two_readings_with_shared_category_divisor(fresh_state):
    state = record_measurement(fresh_state, 5.5, TimeCategory.BEFORE_BREAKFAST)
    state = record_measurement(state, 7.8, "afterLunch")
    stats = get_current_stats(state)

    assert stats.counters == Counters(very_high=0, high=1, normal=1, low=0)
    assert stats.average == pytest.approx(6.65)
    assert stats.highest == 7.8
    assert stats.lowest == 5.5
    assert stats.time_stats[TimeCategory.BEFORE_BREAKFAST] == pytest.approx(5.5)
    # divisor is the window total (2), not the category count (1)
    assert stats.time_stats[TimeCategory.AFTER_LUNCH] == pytest.approx(3.9)
    assert stats.time_counts == {TimeCategory.BEFORE_BREAKFAST: 1, TimeCategory.AFTER_LUNCH: 1}


def test_per_category_averaging(per_category_state):
    state = record_measurement(per_category_state, 5.5, TimeCategory.BEFORE_BREAKFAST)
    state = record_measurement(state, 7.8, TimeCategory.AFTER_LUNCH)
    state = record_measurement(state, 6.5, TimeCategory.BEFORE_BREAKFAST)
    stats = get_current_stats(state)

    assert stats.time_stats[TimeCategory.AFTER_LUNCH] == pytest.approx(7.8)
    assert stats.time_stats[TimeCategory.BEFORE_BREAKFAST] == pytest.approx(6.0)
    assert stats.time_counts[TimeCategory.BEFORE_BREAKFAST] == 2


def test_demo_scenario(demo_state):
    stats = get_current_stats(demo_state)
    assert stats.counters == Counters(very_high=1, high=1, normal=1, low=1)
    assert stats.average == pytest.approx((5.5 + 7.8 + 9.3 + 3.9) / 4)
    assert stats.highest == 9.3
    assert stats.lowest == 3.9
    assert stats.time_stats[TimeCategory.RANDOM] == pytest.approx(3.1)
    assert stats.time_stats[TimeCategory.BEFORE_SLEEP] == pytest.approx(0.975)


def test_record_only_touches_current_window(fresh_state):
    state = record_measurement(fresh_state, 10.0)
    for label in ("14", "30", "90"):
        assert state.stats_by_period[label] is fresh_state.stats_by_period[label]
    assert state.stats_by_period["7"] is not fresh_state.stats_by_period["7"]


def test_record_does_not_mutate_previous_state(fresh_state):
    first = record_measurement(fresh_state, 5.0, TimeCategory.RANDOM)
    before = get_current_stats(first)
    record_measurement(first, 12.0, TimeCategory.RANDOM)

    assert get_current_stats(first) is before
    assert before.counters == Counters(normal=1)
    assert before.time_stats == {TimeCategory.RANDOM: 5.0}
    assert get_current_stats(fresh_state).average is None


def test_windows_accumulate_independently(fresh_state):
    state = record_measurement(fresh_state, 5.0)
    state = switch_window(state, "30")
    state = record_measurement(state, 10.0)

    assert state.stats_by_period["7"].average == 5.0
    assert state.stats_by_period["30"].average == 10.0
    assert state.stats_by_period["30"].counters == Counters(very_high=1)


@pytest.mark.parametrize("level", [float("nan"), float("inf"), -np.inf, "abc", None])
def test_non_finite_or_non_numeric_levels_are_rejected(fresh_state, level):
    with pytest.raises(InvalidMeasurementError):
        record_measurement(fresh_state, level)
    assert get_current_stats(fresh_state).counters.total == 0


def test_unknown_time_category_is_rejected(fresh_state):
    with pytest.raises(InvalidMeasurementError):
        record_measurement(fresh_state, 5.0, "brunch")


def test_numpy_scalars_are_accepted(fresh_state):
    state = record_measurement(fresh_state, np.float32(4.5))
    assert get_current_stats(state).average == pytest.approx(4.5)


def test_unclassified_reading_still_updates_aggregates(fresh_state):
    # thresholds restored from unvalidated data can leave a gap
    gapped = object.__new__(RangeThresholds)
    for name, value in dict(very_high=9.0, high=(6.0, 9.0), normal=(4.0, 5.0), low=4.0).items():
        object.__setattr__(gapped, name, value)
    state = replace(fresh_state, thresholds=gapped)

    state = record_measurement(state, 5.5)
    stats = get_current_stats(state)
    assert stats.counters.total == 0
    assert stats.average == 5.5
    assert stats.highest == stats.lowest == 5.5


def test_record_measurements_batch(fresh_state):
    state = record_measurements(
        fresh_state,
        np.array([5.5, 7.8, 9.3]),
        ["beforeBreakfast", None, float("nan")],
    )
    stats = get_current_stats(state)
    assert stats.counters.total == 3
    assert stats.average == pytest.approx((5.5 + 7.8 + 9.3) / 3)
    assert list(stats.time_stats) == [TimeCategory.BEFORE_BREAKFAST]


def test_record_measurements_validates_whole_batch_first(fresh_state):
    with pytest.raises(InvalidMeasurementError, match="index 2"):
        record_measurements(fresh_state, [5.0, 6.0, float("nan")])
    with pytest.raises(InvalidMeasurementError):
        record_measurements(fresh_state, [5.0, 6.0], ["random"])
    with pytest.raises(InvalidMeasurementError):
        record_measurements(fresh_state, [5.0, 6.0], ["random", "brunch"])


@pytest.mark.parametrize("label", ["7", "14", "30", "90"])
def test_switch_window_to_every_label(demo_state, label):
    state = switch_window(demo_state, label)
    assert state.current_period == label
    assert get_current_stats(state) is demo_state.stats_by_period[label]
    assert state.stats_by_period is demo_state.stats_by_period


def test_switch_to_unknown_window_leaves_state_unchanged(demo_state):
    snapshot = replace(demo_state)
    with pytest.raises(InvalidWindowError, match="Invalid period"):
        switch_window(demo_state, "nonexistent")
    assert demo_state == snapshot
    assert demo_state.current_period == "7"


def test_invalid_window_error_is_a_key_error(fresh_state):
    with pytest.raises(KeyError):
        switch_window(fresh_state, "365")


def test_switch_to_current_window_is_equivalent(demo_state):
    assert switch_window(demo_state, "7") == demo_state


def test_get_current_stats_is_idempotent(demo_state):
    assert get_current_stats(demo_state) == get_current_stats(demo_state)


def test_missing_current_period_is_invalid_state(fresh_state):
    with pytest.raises(InvalidStateError):
        TrackerState(stats_by_period={"7": WindowStats("2024-03-08", "2024-03-15")}, current_period="14")

    # a mapping altered behind the state's back
    stats = dict(fresh_state.stats_by_period)
    state = TrackerState(stats_by_period=stats, current_period="7")
    del stats["7"]
    with pytest.raises(InvalidStateError):
        get_current_stats(state)


def test_level_too_large_for_float_is_rejected(fresh_state):
    with pytest.raises(InvalidMeasurementError):
        record_measurement(fresh_state, 10**400)
    with pytest.raises(InvalidMeasurementError):
        record_measurements(fresh_state, [5.0, 10**400])
    assert get_current_stats(fresh_state).counters.total == 0


@pytest.mark.parametrize("level", ["5.5", b"5.5", True, np.bool_(False)])
def test_strings_and_bools_are_not_coerced(fresh_state, level):
    with pytest.raises(InvalidMeasurementError):
        record_measurement(fresh_state, level)
    with pytest.raises(InvalidMeasurementError, match="index 1"):
        record_measurements(fresh_state, [5.0, level])
