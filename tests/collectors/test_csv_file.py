"""Tests for the CSV reading importer."""

from datetime import datetime

import pytest

from building_energy.collectors import csv_file
from building_energy.readings import ReadingError


def test_parse_csv(tmp_path):
    path = tmp_path / "readings.csv"
    path.write_text(
        "timestamp,consumption,temperature,occupancy,dayType\n"
        "2024-01-06T09:00:00,42.5,19.0,3,\n"
        "2024-01-08T09:00:00,120,21.5,48,weekday\n"
    )

    readings = csv_file.parse_csv(path)

    assert len(readings) == 2
    assert readings[0].timestamp == datetime(2024, 1, 6, 9)
    assert readings[0].consumption == 42.5
    assert readings[0].day_type == "weekend"  # derived from Saturday
    assert readings[1].occupancy == 48


def test_parse_csv_minimal_columns(tmp_path):
    path = tmp_path / "readings.csv"
    path.write_text("timestamp,consumption\n2024-01-08T09:00:00,7\n")

    readings = csv_file.parse_csv(path)

    assert readings[0].temperature == 0.0
    assert readings[0].occupancy == 0


def test_parse_csv_bad_row(tmp_path):
    path = tmp_path / "readings.csv"
    path.write_text("timestamp,consumption\n2024-01-08T09:00:00,7\n2024-01-08T10:00:00,n/a\n")

    with pytest.raises(ReadingError, match="line 3: Invalid consumption"):
        csv_file.parse_csv(path)
