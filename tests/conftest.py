from datetime import date

import pytest

from glucose_stats.config import CategoryAveraging, TrackerConfig
from glucose_stats.models import TimeCategory
from glucose_stats.tracker import initial_state, record_measurement

TODAY = date(2024, 3, 15)


@pytest.fixture
def fresh_state():
    return initial_state(today=TODAY)


@pytest.fixture
def per_category_state():
    return initial_state(today=TODAY, config=TrackerConfig(category_averaging=CategoryAveraging.PER_CATEGORY))


@pytest.fixture
def demo_state(fresh_state):
    """The demo readings, recorded into "7"."""
    state = fresh_state
    for level, category in [
        (5.5, TimeCategory.BEFORE_BREAKFAST),
        (7.8, TimeCategory.AFTER_LUNCH),
        (9.3, TimeCategory.RANDOM),
        (3.9, TimeCategory.BEFORE_SLEEP),
    ]:
        state = record_measurement(state, level, category)
    return state
