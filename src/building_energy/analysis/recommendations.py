"""Turn detected anomalies into actionable recommendations."""

import hashlib
import logging

from ..formatting import DEFAULT_FORMATTER, DateFormatter, format_number
from ..models import ANOMALY_TYPES, DRIFT, SCHEDULE, SPIKE, Anomaly, Building, Recommendation
from ..readings import comparable_timestamp
from .stats import round_half_up

logger = logging.getLogger(__name__)

ELECTRICITY_COST_PER_KWH = 0.15  # $
DAYS_PER_MONTH = 30  # a daily excess recurring for a month
WEEKS_PER_MONTH = 4  # weekly off-hours pattern extrapolated to a month

SCHEDULE_MEDIUM_URGENCY_COUNT = 3  # more flags than this at one hour


def _recommendation_id(anomaly_type: str, anomalies: list[Anomaly]) -> str:
    """Deterministic ID from the anomaly type and the anomalies it covers."""
    content = "|".join(
        f"{a.timestamp.isoformat()}:{a.consumption}:{a.expected}" for a in anomalies
    )
    return f"{anomaly_type}-" + hashlib.md5(f"{anomaly_type}:{content}".encode()).hexdigest()[:12]


def _monthly_impact(anomaly: Anomaly) -> int:
    return int(round_half_up((anomaly.consumption - anomaly.expected) * DAYS_PER_MONTH * ELECTRICITY_COST_PER_KWH))


def _spike_recommendation(spikes: list[Anomaly], formatter: DateFormatter) -> Recommendation:
    # max() keeps the first of equally severe spikes
    worst = max(spikes, key=lambda a: a.severity)
    date = formatter.long_date(worst.timestamp)

    return Recommendation(
        id=_recommendation_id(SPIKE, spikes),
        title="Potential Equipment Malfunction",
        description=(
            f"Sudden energy spike of {format_number(worst.percentage_increase)}% detected on {date}. "
            "This pattern typically indicates HVAC system malfunction or short-cycling."
        ),
        action="Schedule inspection of HVAC control systems and verify thermostat settings.",
        impact=(
            f"Addressing this issue could save approximately ${_monthly_impact(worst)} "
            "per month if recurring."
        ),
        urgency=(
            "High - Immediate attention recommended"
            if worst.severity == 3
            else "Medium - Address within 1 week"
        ),
        anomaly_type=SPIKE,
    )


def _drift_recommendation(drifts: list[Anomaly], formatter: DateFormatter) -> Recommendation:
    most_recent = max(drifts, key=lambda a: comparable_timestamp(a.timestamp))
    date = formatter.long_date(most_recent.timestamp)

    return Recommendation(
        id=_recommendation_id(DRIFT, drifts),
        title="Gradual Efficiency Loss Detected",
        description=(
            f"Increasing energy consumption pattern detected, culminating on {date}. "
            "This typically indicates developing system inefficiency."
        ),
        action="Check for air leaks, inspect insulation integrity, and verify building automation schedules.",
        impact=f"Addressing this trend could save approximately ${_monthly_impact(most_recent)} per month.",
        urgency=(
            "Medium - Address within 1-2 weeks"
            if most_recent.severity == 2
            else "Low - Schedule during next maintenance"
        ),
        anomaly_type=DRIFT,
    )


def _schedule_recommendation(schedule: list[Anomaly], formatter: DateFormatter) -> Recommendation:
    # ties go to the earliest hour of the day
    by_hour: dict[int, list[Anomaly]] = {}
    for anomaly in schedule:
        by_hour.setdefault(anomaly.timestamp.hour, []).append(anomaly)

    worst_hour, hour_anomalies = max(sorted(by_hour.items()), key=lambda item: len(item[1]))
    count = len(hour_anomalies)
    average_excess = sum(a.consumption - a.expected for a in hour_anomalies) / count
    impact = int(round_half_up(average_excess * count * WEEKS_PER_MONTH * ELECTRICITY_COST_PER_KWH))

    return Recommendation(
        id=_recommendation_id(SCHEDULE, schedule),
        title="Off-hours Energy Usage",
        description=(
            "Abnormal energy consumption detected during expected low-usage hours "
            f"({formatter.hour_label(worst_hour)}). This has occurred {count} times recently."
        ),
        action=(
            "Review building occupancy schedule and automation system settings. "
            "Check for unauthorized equipment operation."
        ),
        impact=f"Optimizing scheduling could save approximately ${impact} per month.",
        urgency=(
            "Medium - Investigate within 2 weeks"
            if count > SCHEDULE_MEDIUM_URGENCY_COUNT
            else "Low - Investigate during next maintenance cycle"
        ),
        anomaly_type=SCHEDULE,
    )


def generate_recommendations(
    anomalies: list[Anomaly],
    building: Building | None = None,
    formatter: DateFormatter | None = None,
) -> list[Recommendation]:
    """Generate at most one recommendation per anomaly type.

    Order is spike, drift, schedule. The building is only used for context
    in log messages.
    """
    if not anomalies:
        return []

    formatter = formatter or DEFAULT_FORMATTER
    builders = {
        SPIKE: _spike_recommendation,
        DRIFT: _drift_recommendation,
        SCHEDULE: _schedule_recommendation,
    }

    recommendations = []
    for anomaly_type in ANOMALY_TYPES:
        matching = [a for a in anomalies if a.type == anomaly_type]
        if matching:
            recommendations.append(builders[anomaly_type](matching, formatter))

    logger.debug(
        "Generated %d recommendation(s) for %s",
        len(recommendations),
        building.id if building else "unknown building",
    )
    return recommendations
