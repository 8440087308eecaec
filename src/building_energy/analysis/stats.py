"""Statistics primitives shared by the anomaly detectors."""

import math

from ..models import HourlyProfile, HourlyStats, Reading, Stats


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with .5 going up (towards +inf), unlike Python's banker's rounding."""
    if math.isinf(value) or math.isnan(value):
        return value
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def calculate_stats(values: list[float]) -> Stats:
    """Calculate mean, population standard deviation, min and max.

    Returns all-zero stats for an empty sequence.
    """
    values = list(values)
    count = len(values)
    if count == 0:
        return Stats()

    mean = sum(values) / count
    variance = sum((v - mean) ** 2 for v in values) / count

    return Stats(
        mean=mean,
        std_dev=math.sqrt(variance),
        min=min(values),
        max=max(values),
    )


def build_hourly_profile(readings: list[Reading]) -> HourlyProfile:
    """Bucket readings by hour of day and compute stats for each hour.

    All 24 hours are present; hours without samples have zeroed stats.
    Callers should treat hours with fewer than 3 samples as unreliable.
    """
    buckets: dict[int, list[float]] = {hour: [] for hour in range(24)}
    for reading in readings:
        buckets[reading.timestamp.hour].append(reading.consumption)

    profile = HourlyProfile()
    for hour, values in buckets.items():
        stats = calculate_stats(values)
        profile.hours[hour] = HourlyStats(
            mean=stats.mean, std_dev=stats.std_dev, count=len(values)
        )
    return profile
