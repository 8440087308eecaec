import math
from datetime import datetime

import pytest

from building_energy.analysis.stats import build_hourly_profile, calculate_stats, round_half_up
from building_energy.models import Reading, Stats


def test_calculate_stats_population_std_dev():
    """Standard deviation divides by n, not n - 1."""
    stats = calculate_stats([2, 4, 4, 4, 5, 5, 7, 9])
    assert stats.mean == 5
    assert stats.std_dev == 2
    assert stats.min == 2
    assert stats.max == 9


def test_calculate_stats_empty():
    """Empty input gives zeroed stats rather than an error."""
    assert calculate_stats([]) == Stats(mean=0, std_dev=0, min=0, max=0)


def test_calculate_stats_single_value():
    stats = calculate_stats([42.5])
    assert stats.mean == 42.5
    assert stats.std_dev == 0
    assert stats.min == stats.max == 42.5


def test_build_hourly_profile_has_all_hours():
    readings = [
        Reading(datetime(2024, 1, 1, 0), 10.0),
        Reading(datetime(2024, 1, 2, 0), 20.0),
        Reading(datetime(2024, 1, 3, 0), 30.0),
        Reading(datetime(2024, 1, 1, 5), 7.0),
    ]

    profile = build_hourly_profile(readings)

    assert sorted(profile.hours) == list(range(24))
    assert profile[0].count == 3
    assert profile[0].mean == 20.0
    assert profile[0].std_dev == pytest.approx(math.sqrt(200 / 3))
    assert profile[5].count == 1
    assert profile[5].mean == 7.0
    # Hours without samples are zeroed
    assert profile[12].count == 0
    assert profile[12].mean == 0
    assert profile[12].std_dev == 0


def test_build_hourly_profile_empty():
    profile = build_hourly_profile([])
    assert all(h.count == 0 and h.mean == 0 for h in profile.hours.values())
    assert profile.average_of_means() == 0


def test_round_half_up():
    """Halves round up, matching the reference rounding."""
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-2.5) == -2
    assert round_half_up(71.42857, 1) == 71.4
    assert round_half_up(0.125, 2) == 0.13
    assert round_half_up(337.5) == 338
