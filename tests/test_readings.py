from datetime import datetime, timezone

import pytest

from building_energy.buildings import register_building
from building_energy.models import Building, Reading
from building_energy.readings import ReadingError, get_readings, parse_reading, save_readings


def test_parse_reading_derives_day_type():
    """Saturday and Sunday are weekends."""
    saturday = parse_reading({"timestamp": "2024-01-06T10:00:00", "consumption": "12.5"})
    monday = parse_reading({"timestamp": "2024-01-08T10:00:00", "consumption": 12.5})

    assert saturday.day_type == "weekend"
    assert monday.day_type == "weekday"
    assert saturday.consumption == 12.5


def test_parse_reading_defaults():
    reading = parse_reading({"timestamp": "2024-01-08T10:00:00Z", "consumption": "3"})

    assert reading.timestamp == datetime(2024, 1, 8, 10, tzinfo=timezone.utc)
    assert reading.temperature == 0.0
    assert reading.occupancy == 0


def test_parse_reading_explicit_fields():
    reading = parse_reading(
        {
            "timestamp": "2024-01-06T10:00:00",
            "consumption": "20",
            "temperature": "21.5",
            "occupancy": "14",
            "dayType": "weekday",
        }
    )

    assert reading.temperature == 21.5
    assert reading.occupancy == 14
    assert reading.day_type == "weekday"  # supplied value wins over the date


def test_parse_reading_ignores_unknown_day_type():
    reading = parse_reading({"timestamp": "2024-01-06T10:00:00", "consumption": 1, "dayType": "holiday"})
    assert reading.day_type == "weekend"


def test_parse_reading_without_timestamp_uses_now():
    before = datetime.now(timezone.utc)
    reading = parse_reading({"consumption": 1})
    assert reading.timestamp >= before


@pytest.mark.parametrize(
    "raw,message",
    [
        ({"timestamp": "2024-01-08T10:00:00"}, "Missing consumption"),
        ({"timestamp": "2024-01-08T10:00:00", "consumption": "lots"}, "Invalid consumption"),
        ({"timestamp": "2024-01-08T10:00:00", "consumption": 1, "occupancy": "many"}, "Invalid occupancy"),
        ({"timestamp": "yesterday", "consumption": 1}, "Invalid timestamp"),
        ({"timestamp": "2024-01-08T10:00:00", "consumption": "nan"}, "Invalid consumption"),
        ({"timestamp": "2024-01-08T10:00:00", "consumption": "-inf"}, "Invalid consumption"),
        ({"timestamp": "2024-01-08T10:00:00", "consumption": 1, "temperature": "inf"}, "Invalid temperature"),
        ({"timestamp": "2024-01-08T10:00:00", "consumption": 1, "occupancy": "inf"}, "Invalid occupancy"),
    ],
)
def test_parse_reading_errors(raw, message):
    with pytest.raises(ReadingError, match=message):
        parse_reading(raw)


def test_save_and_get_readings(db_path):
    register_building(Building(id="hq", name="Head Office"), db_path)
    readings = [
        Reading(datetime(2024, 1, 3), 30.0),
        Reading(datetime(2024, 1, 1), 10.0),
        Reading(datetime(2024, 1, 2), 20.0),
    ]

    result = save_readings("hq", readings, db_path)
    assert result == {"imported": 3, "skipped": 0}

    # Duplicates on timestamp are skipped
    result = save_readings("hq", [Reading(datetime(2024, 1, 2), 99.0)], db_path)
    assert result == {"imported": 0, "skipped": 1}

    stored = get_readings("hq", db_path=db_path)
    assert [r.consumption for r in stored] == [10.0, 20.0, 30.0]
    assert stored[0].day_type == "weekday"


def test_get_readings_date_filter(db_path):
    register_building(Building(id="hq", name="Head Office"), db_path)
    save_readings("hq", [Reading(datetime(2024, 1, d), float(d)) for d in range(1, 6)], db_path)

    stored = get_readings("hq", start=datetime(2024, 1, 2), end=datetime(2024, 1, 4), db_path=db_path)

    assert [r.consumption for r in stored] == [2.0, 3.0, 4.0]
    assert get_readings("other", db_path=db_path) == []
