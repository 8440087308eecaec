"""Anomaly detection over a building's energy readings.

Three independent passes run over the chronologically sorted readings:

1. Spikes - a sudden jump against the previous reading that is also
   abnormally high for the day type (equipment malfunction).
2. Drift - a sustained, strictly increasing run of readings ending above
   the day-type baseline (gradual efficiency loss).
3. Schedule - consumption well above the usual level for an hour of the
   day that is normally low-usage (off-hours operation).

Baselines are stratified by day type (weekday/weekend).
"""

import logging

from ..models import DRIFT, SCHEDULE, SPIKE, WEEKDAY, WEEKEND, Anomaly, HourlyProfile, Reading, Stats
from .stats import build_hourly_profile, calculate_stats, round_half_up

logger = logging.getLogger(__name__)

MIN_READINGS = 7  # about a week of history

# Spike detection thresholds
SPIKE_PERCENT_THRESHOLD = 30  # % increase over the previous reading
SPIKE_HIGH_SEVERITY_PERCENT = 50
SPIKE_STD_DEVS = 2.0

# Drift detection thresholds
DRIFT_WINDOW_SIZE = 5  # steps; the window holds WINDOW_SIZE + 1 readings
DRIFT_DAILY_PERCENT_THRESHOLD = 3  # average % increase per step
DRIFT_HIGH_SEVERITY_DAILY_PERCENT = 5
DRIFT_STD_DEVS = 1.5

# Schedule detection thresholds
SCHEDULE_MIN_SAMPLES = 3  # per hour, below this the hour is unreliable
SCHEDULE_STD_DEVS = 2.5
SCHEDULE_LOW_USAGE_RATIO = 0.7  # hour mean vs. average of all hourly means
SCHEDULE_HIGH_SEVERITY_PERCENT = 70


def _split_by_day_type(readings: list[Reading]) -> dict[str, list[Reading]]:
    return {
        WEEKDAY: [r for r in readings if r.day_type == WEEKDAY],
        WEEKEND: [r for r in readings if r.day_type == WEEKEND],
    }


def detect_spikes(readings: list[Reading], baselines: dict[str, Stats]) -> list[Anomaly]:
    """Flag readings that jump sharply from the previous one and exceed the baseline."""
    anomalies = []

    for i in range(1, len(readings)):
        current = readings[i]
        previous = readings[i - 1]
        stats = baselines[current.day_type]

        if previous.consumption == 0:
            logger.debug("Skipping spike check at %s: previous consumption is zero", current.timestamp)
            continue

        percentage_increase = (current.consumption - previous.consumption) / previous.consumption * 100

        if (
            percentage_increase > SPIKE_PERCENT_THRESHOLD
            and current.consumption > stats.mean + SPIKE_STD_DEVS * stats.std_dev
        ):
            anomalies.append(
                Anomaly(
                    type=SPIKE,
                    timestamp=current.timestamp,
                    consumption=current.consumption,
                    expected=previous.consumption,
                    percentage_increase=round_half_up(percentage_increase, 1),
                    severity=3 if percentage_increase > SPIKE_HIGH_SEVERITY_PERCENT else 2,
                    description=f"Sudden energy spike of {int(round_half_up(percentage_increase))}% detected",
                )
            )

    return anomalies


def _is_strictly_increasing(window: list[Reading]) -> bool:
    return all(b.consumption > a.consumption for a, b in zip(window, window[1:]))


def detect_drift(readings: list[Reading], baselines: dict[str, Stats]) -> list[Anomaly]:
    """Flag strictly increasing runs of DRIFT_WINDOW_SIZE + 1 readings.

    Every window position is checked, so a long run produces one anomaly
    per window ending inside it.
    """
    anomalies = []

    for i in range(DRIFT_WINDOW_SIZE, len(readings)):
        window = readings[i - DRIFT_WINDOW_SIZE : i + 1]
        first, last = window[0], window[-1]
        stats = baselines[last.day_type]

        if not _is_strictly_increasing(window):
            continue
        if last.consumption <= stats.mean + DRIFT_STD_DEVS * stats.std_dev:
            continue
        if first.consumption == 0:
            logger.debug("Skipping drift window ending %s: starts at zero consumption", last.timestamp)
            continue

        percentage_increase = (last.consumption - first.consumption) / first.consumption * 100
        avg_daily_increase = percentage_increase / DRIFT_WINDOW_SIZE

        if avg_daily_increase > DRIFT_DAILY_PERCENT_THRESHOLD:
            anomalies.append(
                Anomaly(
                    type=DRIFT,
                    timestamp=last.timestamp,
                    consumption=last.consumption,
                    expected=first.consumption,
                    percentage_increase=round_half_up(percentage_increase, 1),
                    severity=2 if avg_daily_increase > DRIFT_HIGH_SEVERITY_DAILY_PERCENT else 1,
                    description=(
                        f"Gradual efficiency loss of {int(round_half_up(percentage_increase))}% "
                        f"over {DRIFT_WINDOW_SIZE} days"
                    ),
                )
            )

    return anomalies


def detect_schedule_anomalies(
    readings: list[Reading], profiles: dict[str, HourlyProfile]
) -> list[Anomaly]:
    """Flag unusually high consumption during typically low-usage hours."""
    anomalies = []
    hours_avg = {day_type: profile.average_of_means() for day_type, profile in profiles.items()}

    for reading in readings:
        hour = reading.timestamp.hour
        hourly = profiles[reading.day_type][hour]

        if hourly.count < SCHEDULE_MIN_SAMPLES:
            continue

        expected = hourly.mean
        if reading.consumption <= expected + SCHEDULE_STD_DEVS * hourly.std_dev:
            continue

        # Only hours that are normally quiet count as off-hours usage
        if expected >= SCHEDULE_LOW_USAGE_RATIO * hours_avg[reading.day_type]:
            continue
        if expected == 0:
            logger.debug("Skipping schedule check at %s: hour %d has zero mean", reading.timestamp, hour)
            continue

        percentage_increase = (reading.consumption - expected) / expected * 100
        anomalies.append(
            Anomaly(
                type=SCHEDULE,
                timestamp=reading.timestamp,
                consumption=reading.consumption,
                expected=expected,
                percentage_increase=round_half_up(percentage_increase, 1),
                severity=2 if percentage_increase > SCHEDULE_HIGH_SEVERITY_PERCENT else 1,
                description=f"Abnormal energy use during off-hours ({hour}:00)",
            )
        )

    return anomalies


def detect_anomalies(readings: list[Reading]) -> list[Anomaly]:
    """Detect anomalies in a building's readings.

    Readings must be sorted ascending by timestamp. Returns spikes, then
    drift, then schedule anomalies, each in chronological order. Fewer
    than MIN_READINGS readings yields no anomalies.
    """
    if not readings or len(readings) < MIN_READINGS:
        return []

    by_day_type = _split_by_day_type(readings)
    baselines = {
        day_type: calculate_stats([r.consumption for r in subset])
        for day_type, subset in by_day_type.items()
    }
    profiles = {day_type: build_hourly_profile(subset) for day_type, subset in by_day_type.items()}

    spikes = detect_spikes(readings, baselines)
    drift = detect_drift(readings, baselines)
    schedule = detect_schedule_anomalies(readings, profiles)

    logger.debug(
        "Analyzed %d readings: %d spike, %d drift, %d schedule anomalies",
        len(readings),
        len(spikes),
        len(drift),
        len(schedule),
    )
    return spikes + drift + schedule
