"""Run the analysis engine against stored building data."""

import logging
from datetime import datetime
from pathlib import Path

from ..buildings import get_building, touch_building
from ..db import get_connection
from ..models import Anomaly, Recommendation, Savings
from ..readings import comparable_timestamp, get_readings
from .anomalies import detect_anomalies
from .recommendations import generate_recommendations
from .savings import calculate_savings

logger = logging.getLogger(__name__)


def save_anomalies(building_id: str, anomalies: list[Anomaly], db_path: Path | None = None) -> int:
    """Replace a building's stored anomalies. Returns number saved."""
    with get_connection(db_path) as conn:
        conn.execute("DELETE FROM anomalies WHERE building_id = ?", (building_id,))
        for anomaly in anomalies:
            conn.execute(
                """INSERT INTO anomalies
                   (building_id, type, timestamp, consumption, expected,
                    percentage_increase, severity, description)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    building_id,
                    anomaly.type,
                    anomaly.timestamp.isoformat(),
                    anomaly.consumption,
                    anomaly.expected,
                    anomaly.percentage_increase,
                    anomaly.severity,
                    anomaly.description,
                ),
            )
        conn.commit()
    return len(anomalies)


def load_anomalies(building_id: str, db_path: Path | None = None) -> list[Anomaly]:
    """Load a building's stored anomalies in detection order."""
    with get_connection(db_path) as conn:
        rows = conn.execute(
            """SELECT type, timestamp, consumption, expected, percentage_increase, severity, description
               FROM anomalies
               WHERE building_id = ?
               ORDER BY id""",
            (building_id,),
        ).fetchall()

    return [
        Anomaly(
            type=row["type"],
            timestamp=datetime.fromisoformat(row["timestamp"]),
            consumption=row["consumption"],
            expected=row["expected"],
            percentage_increase=row["percentage_increase"],
            severity=row["severity"],
            description=row["description"],
        )
        for row in rows
    ]


def analyze_building(building_id: str, db_path: Path | None = None) -> dict:
    """Detect anomalies for a building and store them.

    Returns a dict with the anomaly count, recommendations and savings.
    """
    building = get_building(building_id, db_path)
    readings = get_readings(building_id, db_path=db_path)

    anomalies = detect_anomalies(readings)
    save_anomalies(building_id, anomalies, db_path)
    touch_building(building_id, db_path)

    logger.info("Analyzed %s: %d readings, %d anomalies", building_id, len(readings), len(anomalies))

    return {
        "readings": len(readings),
        "anomalies_detected": len(anomalies),
        "recommendations": generate_recommendations(anomalies, building),
        "savings": calculate_savings(anomalies),
    }


def get_anomalies(
    building_id: str,
    min_severity: int | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    db_path: Path | None = None,
) -> list[Anomaly]:
    """Get stored anomalies, filtered by minimum severity and date range (inclusive)."""
    get_building(building_id, db_path)
    anomalies = load_anomalies(building_id, db_path)

    if min_severity is not None:
        anomalies = [a for a in anomalies if a.severity >= min_severity]
    if start:
        anomalies = [a for a in anomalies if comparable_timestamp(a.timestamp) >= comparable_timestamp(start)]
    if end:
        anomalies = [a for a in anomalies if comparable_timestamp(a.timestamp) <= comparable_timestamp(end)]

    return anomalies


def get_recommendations(building_id: str, db_path: Path | None = None) -> list[Recommendation]:
    """Recommendations for a building's stored anomalies."""
    building = get_building(building_id, db_path)
    return generate_recommendations(load_anomalies(building_id, db_path), building)


def get_savings(building_id: str, db_path: Path | None = None) -> Savings:
    """Potential savings for a building's stored anomalies."""
    get_building(building_id, db_path)
    return calculate_savings(load_anomalies(building_id, db_path))
