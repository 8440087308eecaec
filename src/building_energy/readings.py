"""Reading normalisation and storage."""

import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .db import get_connection
from .models import DAY_TYPES, Reading

logger = logging.getLogger(__name__)


class ReadingError(ValueError):
    """Raised for a reading that cannot be parsed."""
    pass


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp (a trailing 'Z' means UTC)."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ReadingError(f"Invalid timestamp: {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ReadingError(f"Invalid timestamp: {value!r}")


def _parse_number(raw: dict, key: str, convert, default=None):
    value = raw.get(key)
    if value is None or value == "":
        if default is None:
            raise ReadingError(f"Missing {key}")
        return default
    try:
        number = convert(value)
    except (TypeError, ValueError, OverflowError):
        raise ReadingError(f"Invalid {key}: {value!r}")
    if not math.isfinite(number):
        raise ReadingError(f"Invalid {key}: {value!r}")
    return number


def parse_reading(raw: dict) -> Reading:
    """Build a Reading from a raw record (CSV row or JSON object).

    timestamp defaults to now, temperature and occupancy to zero. dayType
    is taken from the record when valid, otherwise derived from the date.
    """
    timestamp = raw.get("timestamp")
    ts = parse_timestamp(timestamp) if timestamp else datetime.now(timezone.utc)

    day_type = raw.get("dayType") or raw.get("day_type")
    return Reading(
        timestamp=ts,
        consumption=_parse_number(raw, "consumption", float),
        temperature=_parse_number(raw, "temperature", float, 0.0),
        occupancy=_parse_number(raw, "occupancy", lambda v: int(float(v)), 0),
        day_type=day_type if day_type in DAY_TYPES else None,
    )


def comparable_timestamp(ts: datetime) -> datetime:
    """Timestamp as naive UTC when aware, so aware and naive values compare."""
    if ts.tzinfo is not None:
        return ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


def sort_readings(readings: list[Reading]) -> list[Reading]:
    """Return readings sorted ascending by timestamp."""
    return sorted(readings, key=lambda r: comparable_timestamp(r.timestamp))


def save_readings(building_id: str, readings: list[Reading], db_path: Path | None = None) -> dict:
    """Save readings for a building.

    Returns dict with 'imported' and 'skipped' counts.
    """
    imported = 0
    skipped = 0

    with get_connection(db_path) as conn:
        for reading in readings:
            cursor = conn.execute(
                """INSERT OR IGNORE INTO readings
                   (building_id, timestamp, consumption, temperature, occupancy, day_type)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    building_id,
                    reading.timestamp.isoformat(),
                    reading.consumption,
                    reading.temperature,
                    reading.occupancy,
                    reading.day_type,
                ),
            )
            if cursor.rowcount:
                imported += 1
            else:
                # Duplicate (UNIQUE constraint)
                skipped += 1

        conn.commit()

    logger.info("Saved readings for %s: %d imported, %d skipped", building_id, imported, skipped)
    return {"imported": imported, "skipped": skipped}


def get_readings(
    building_id: str,
    start: datetime | None = None,
    end: datetime | None = None,
    db_path: Path | None = None,
) -> list[Reading]:
    """Get a building's readings sorted by timestamp, optionally within [start, end]."""
    with get_connection(db_path) as conn:
        rows = conn.execute(
            """SELECT timestamp, consumption, temperature, occupancy, day_type
               FROM readings
               WHERE building_id = ?""",
            (building_id,),
        ).fetchall()

    readings = [
        Reading(
            timestamp=datetime.fromisoformat(row["timestamp"]),
            consumption=row["consumption"],
            temperature=row["temperature"],
            occupancy=row["occupancy"],
            day_type=row["day_type"],
        )
        for row in rows
    ]

    if start:
        readings = [r for r in readings if comparable_timestamp(r.timestamp) >= comparable_timestamp(start)]
    if end:
        readings = [r for r in readings if comparable_timestamp(r.timestamp) <= comparable_timestamp(end)]

    return sort_readings(readings)
