"""CSV reading importer.

CSV format: timestamp, consumption[, temperature, occupancy, dayType]
"""

import csv
from pathlib import Path

from ..models import Reading
from ..readings import ReadingError, parse_reading, save_readings


def parse_csv(csv_path: Path) -> list[Reading]:
    """Parse a readings CSV file."""
    readings = []
    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        for line_no, row in enumerate(reader, start=2):
            try:
                readings.append(parse_reading(row))
            except ReadingError as e:
                raise ReadingError(f"{csv_path.name} line {line_no}: {e}")
    return readings


def import_from_csv(building_id: str, csv_path: Path, db_path: Path | None = None) -> dict:
    """Import readings for a building from a CSV file.

    Returns dict with 'imported' and 'skipped' counts.
    """
    readings = parse_csv(csv_path)
    return save_readings(building_id, readings, db_path)
