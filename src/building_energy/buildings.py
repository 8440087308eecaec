"""Building registry backed by the database and a YAML config file."""

import logging
from datetime import datetime, timezone
from pathlib import Path

import yaml

from .db import get_connection
from .models import Building

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "buildings.yaml"


class BuildingNotFoundError(ValueError):
    """Raised when a building ID is not registered."""

    def __init__(self, building_id: str):
        super().__init__(f"Building not found: {building_id}")
        self.building_id = building_id


def _row_to_building(row) -> Building:
    return Building(
        id=row["id"],
        name=row["name"],
        location=row["location"],
        area=row["area"],
        last_updated=datetime.fromisoformat(row["last_updated"]) if row["last_updated"] else None,
    )


def load_buildings_from_yaml(config_path: Path | None = None) -> list[Building]:
    """Load building definitions from a YAML config file."""
    path = config_path or DEFAULT_CONFIG_PATH
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    buildings = []
    for b in data.get("buildings", []):
        if not b.get("id") or not b.get("name"):
            raise ValueError(f"Building ID and name are required: {b}")
        buildings.append(
            Building(
                id=str(b["id"]),
                name=b["name"],
                location=b.get("location"),
                area=float(b["area"]) if b.get("area") is not None else None,
            )
        )
    return buildings


def register_building(building: Building, db_path: Path | None = None) -> Building:
    """Register (or re-register) a building. Existing readings are kept."""
    if not building.id or not building.name:
        raise ValueError("Building ID and name are required")

    building.last_updated = datetime.now(timezone.utc)
    with get_connection(db_path) as conn:
        conn.execute(
            """INSERT INTO buildings (id, name, location, area, last_updated)
               VALUES (?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                   name = excluded.name,
                   location = excluded.location,
                   area = excluded.area,
                   last_updated = excluded.last_updated""",
            (
                building.id,
                building.name,
                building.location,
                building.area,
                building.last_updated.isoformat(),
            ),
        )
        conn.commit()

    logger.info("Registered building %s (%s)", building.id, building.name)
    return building


def save_buildings(buildings: list[Building], db_path: Path | None = None) -> int:
    """Register a list of buildings. Returns number saved."""
    for building in buildings:
        register_building(building, db_path)
    return len(buildings)


def get_building(building_id: str, db_path: Path | None = None) -> Building:
    """Get a registered building, raising BuildingNotFoundError if missing."""
    with get_connection(db_path) as conn:
        row = conn.execute(
            "SELECT id, name, location, area, last_updated FROM buildings WHERE id = ?",
            (building_id,),
        ).fetchone()

    if row is None:
        raise BuildingNotFoundError(building_id)
    return _row_to_building(row)


def list_buildings(db_path: Path | None = None) -> list[Building]:
    """List all registered buildings."""
    with get_connection(db_path) as conn:
        rows = conn.execute(
            "SELECT id, name, location, area, last_updated FROM buildings ORDER BY id"
        ).fetchall()

    return [_row_to_building(row) for row in rows]


def touch_building(building_id: str, db_path: Path | None = None) -> None:
    """Update a building's last_updated timestamp."""
    with get_connection(db_path) as conn:
        conn.execute(
            "UPDATE buildings SET last_updated = ? WHERE id = ?",
            (datetime.now(timezone.utc).isoformat(), building_id),
        )
        conn.commit()
