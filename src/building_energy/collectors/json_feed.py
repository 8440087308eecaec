"""JSON feed collector.

Fetches readings from an HTTP endpoint that returns either a list of
reading objects or an upload-style payload: {"data": [...]}.
"""

import os
from pathlib import Path
from typing import Any

import httpx
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from ..models import Reading
from ..readings import parse_reading, save_readings

TOKEN_ENV = "ENERGY_FEED_TOKEN"


class FeedError(ValueError):
    """Base exception for JSON feed collector errors."""
    pass


def get_token() -> str | None:
    """Get the feed bearer token from environment (optional)."""
    return os.environ.get(TOKEN_ENV)


def parse_payload(payload: Any) -> list[Reading]:
    """Parse a feed payload into readings."""
    if isinstance(payload, dict):
        payload = payload.get("data")
    if not isinstance(payload, list):
        raise FeedError("Energy data array is required")
    return [parse_reading(item) for item in payload]


def fetch_readings(url: str, token: str | None = None, timeout: float = 30.0) -> list[Reading]:
    """Fetch readings from a JSON feed.

    Args:
        url: Feed URL
        token: Bearer token (defaults to ENERGY_FEED_TOKEN env var)
        timeout: Request timeout in seconds

    Returns:
        List of Reading objects
    """
    token = token or get_token()
    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    try:
        response = httpx.get(url, headers=headers, timeout=timeout)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise FeedError(f"HTTP error from feed: {e.response.status_code}")
    except httpx.HTTPError as e:
        raise FeedError(f"Network error fetching feed: {e}")

    try:
        payload = response.json()
    except ValueError:
        raise FeedError("Feed did not return valid JSON")

    return parse_payload(payload)


def import_from_feed(
    building_id: str, url: str, token: str | None = None, db_path: Path | None = None
) -> dict:
    """Fetch readings from a feed and save them for a building.

    Returns dict with 'imported' and 'skipped' counts.
    """
    readings = fetch_readings(url, token)
    return save_readings(building_id, readings, db_path)
