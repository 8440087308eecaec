"""Data models for buildings, readings and derived insights."""

from dataclasses import dataclass, field
from datetime import datetime

WEEKDAY = "weekday"
WEEKEND = "weekend"
DAY_TYPES = (WEEKDAY, WEEKEND)

SPIKE = "spike"
DRIFT = "drift"
SCHEDULE = "schedule"
ANOMALY_TYPES = (SPIKE, DRIFT, SCHEDULE)


def day_type_for(timestamp: datetime) -> str:
    """Classify a timestamp as weekday or weekend (Saturday/Sunday)."""
    return WEEKEND if timestamp.weekday() >= 5 else WEEKDAY


@dataclass
class Building:
    """A registered building."""

    id: str
    name: str
    location: str | None = None
    area: float | None = None  # m²
    last_updated: datetime | None = None


@dataclass
class Reading:
    """A single energy reading for a building."""

    timestamp: datetime
    consumption: float  # kWh
    temperature: float = 0.0
    occupancy: int = 0
    day_type: str | None = None  # derived from timestamp when not supplied

    def __post_init__(self):
        if self.day_type not in DAY_TYPES:
            self.day_type = day_type_for(self.timestamp)


@dataclass
class Stats:
    """Summary statistics over a sequence of values."""

    mean: float = 0.0
    std_dev: float = 0.0
    min: float = 0.0
    max: float = 0.0


@dataclass
class HourlyStats:
    """Consumption statistics for one hour of the day."""

    mean: float = 0.0
    std_dev: float = 0.0
    count: int = 0


@dataclass(frozen=True)
class Anomaly:
    """A flagged reading (or window of readings)."""

    type: str  # spike, drift or schedule
    timestamp: datetime
    consumption: float
    expected: float
    percentage_increase: float
    severity: int  # 1 (low) to 3 (high)
    description: str

    @property
    def excess(self) -> float:
        """Consumption above the expected value (may be negative)."""
        return self.consumption - self.expected

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "timestamp": self.timestamp.isoformat(),
            "consumption": self.consumption,
            "expected": self.expected,
            "percentage_increase": self.percentage_increase,
            "severity": self.severity,
            "description": self.description,
        }


@dataclass
class Recommendation:
    """An actionable recommendation derived from anomalies of one type."""

    id: str
    title: str
    description: str
    action: str
    impact: str
    urgency: str
    anomaly_type: str


@dataclass
class Savings:
    """Potential savings from addressing detected anomalies."""

    energy: float = 0.0  # kWh
    cost: float = 0.0  # $
    carbon: float = 0.0  # kg CO2


@dataclass
class HourlyProfile:
    """Per-hour consumption statistics, always keyed 0-23."""

    hours: dict[int, HourlyStats] = field(
        default_factory=lambda: {hour: HourlyStats() for hour in range(24)}
    )

    def __getitem__(self, hour: int) -> HourlyStats:
        return self.hours[hour]

    def average_of_means(self) -> float:
        """Average of all 24 hourly means (empty hours count as zero)."""
        return sum(h.mean for h in self.hours.values()) / 24
