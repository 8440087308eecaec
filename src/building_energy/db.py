"""Database connection and schema management."""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_DB_PATH = Path.home() / ".local" / "share" / "building-energy" / "energy.db"
DB_PATH_ENV = "BUILDING_ENERGY_DB"

SCHEMA = """
-- Registered buildings
CREATE TABLE IF NOT EXISTS buildings (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    location TEXT,
    area REAL,
    last_updated TEXT
);

-- Energy readings, one sequence per building
CREATE TABLE IF NOT EXISTS readings (
    id INTEGER PRIMARY KEY,
    building_id TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    consumption REAL NOT NULL,
    temperature REAL NOT NULL DEFAULT 0,
    occupancy INTEGER NOT NULL DEFAULT 0,
    day_type TEXT NOT NULL,
    UNIQUE(building_id, timestamp),
    FOREIGN KEY (building_id) REFERENCES buildings(id)
);

-- Anomalies from the most recent analysis of each building
CREATE TABLE IF NOT EXISTS anomalies (
    id INTEGER PRIMARY KEY,
    building_id TEXT NOT NULL,
    type TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    consumption REAL NOT NULL,
    expected REAL NOT NULL,
    percentage_increase REAL NOT NULL,
    severity INTEGER NOT NULL,
    description TEXT,
    FOREIGN KEY (building_id) REFERENCES buildings(id)
);

CREATE INDEX IF NOT EXISTS idx_readings_building ON readings(building_id, timestamp);
CREATE INDEX IF NOT EXISTS idx_anomalies_building ON anomalies(building_id, timestamp);
"""


def get_db_path() -> Path:
    """Get the database path, creating parent directories if needed.

    BUILDING_ENERGY_DB overrides the default location.
    """
    db_path = Path(os.environ.get(DB_PATH_ENV) or DEFAULT_DB_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return db_path


@contextmanager
def get_connection(db_path: Path | None = None) -> Iterator[sqlite3.Connection]:
    """Get a database connection with row factory enabled."""
    path = db_path or get_db_path()
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    with get_connection(db_path) as conn:
        conn.executescript(SCHEMA)
        conn.commit()


def get_stats(db_path: Path | None = None) -> dict:
    """Get database statistics."""
    with get_connection(db_path) as conn:
        stats = {}

        row = conn.execute("SELECT COUNT(*) as count FROM buildings").fetchone()
        stats["buildings"] = {"count": row["count"]}

        row = conn.execute(
            "SELECT COUNT(*) as count, MIN(timestamp) as earliest, MAX(timestamp) as latest FROM readings"
        ).fetchone()
        stats["readings"] = {
            "count": row["count"],
            "earliest": row["earliest"],
            "latest": row["latest"],
        }

        # By building
        rows = conn.execute(
            "SELECT building_id, COUNT(*) as count FROM readings GROUP BY building_id"
        ).fetchall()
        stats["readings_by_building"] = {row["building_id"]: row["count"] for row in rows}

        rows = conn.execute(
            "SELECT type, COUNT(*) as count FROM anomalies GROUP BY type"
        ).fetchall()
        by_type = {row["type"]: row["count"] for row in rows}
        stats["anomalies"] = {"count": sum(by_type.values()), "by_type": by_type}

        return stats
