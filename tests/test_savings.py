from datetime import datetime

import pytest

from building_energy.analysis.anomalies import detect_anomalies
from building_energy.analysis.savings import calculate_savings
from building_energy.models import Savings
from factories import SPIKE_SCENARIO, daily_readings, make_anomaly


def test_no_anomalies():
    assert calculate_savings([]) == Savings(energy=0, cost=0, carbon=0)


def test_spike_scenario_savings():
    """Savings for the 105 -> 180 spike alone."""
    savings = calculate_savings(detect_anomalies(daily_readings(SPIKE_SCENARIO)))

    assert savings.energy == 75.0
    assert savings.cost == 11.25
    assert savings.carbon == 30.0


def test_savings_sum_known_deltas():
    anomalies = [
        make_anomaly("spike", datetime(2024, 1, 1), 150, 100),  # +50
        make_anomaly("drift", datetime(2024, 1, 2), 130, 110),  # +20
        make_anomaly("schedule", datetime(2024, 1, 3, 2), 12.5, 2.5),  # +10
    ]

    savings = calculate_savings(anomalies)

    assert savings.energy == 80.0
    assert savings.cost == pytest.approx(12.0)
    assert savings.carbon == pytest.approx(32.0)


def test_savings_rounding():
    anomalies = [make_anomaly("spike", datetime(2024, 1, 1), 134.75, 100)]

    savings = calculate_savings(anomalies)

    assert savings.energy == 34.8  # 34.75 rounds half up
    assert savings.cost == pytest.approx(5.21)
    assert savings.carbon == pytest.approx(13.9)


def test_negative_excess_not_clamped():
    """An anomaly below its expected value reduces the total."""
    anomalies = [
        make_anomaly("spike", datetime(2024, 1, 1), 150, 100),
        make_anomaly("schedule", datetime(2024, 1, 2, 3), 90, 100),
    ]
    assert calculate_savings(anomalies).energy == 40.0

    savings = calculate_savings([make_anomaly("schedule", datetime(2024, 1, 2, 3), 90, 100)])
    assert savings.energy == -10.0
    assert savings.cost == pytest.approx(-1.5)
    assert savings.carbon == pytest.approx(-4.0)
