"""Tests for the JSON feed collector."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import httpx
import pytest

from building_energy.collectors import json_feed

FEED_URL = "http://meters.local/api/energy-data/hq"


@pytest.fixture
def mock_get():
    with patch("httpx.get") as mock:
        yield mock


def _response(payload):
    response = MagicMock()
    response.json.return_value = payload
    return response


def test_fetch_readings_upload_payload(mock_get):
    """The {"data": [...]} upload format is accepted."""
    mock_get.return_value = _response(
        {
            "data": [
                {"timestamp": "2024-01-08T10:00:00Z", "consumption": "55.2", "occupancy": "30"},
                {"timestamp": "2024-01-06T10:00:00Z", "consumption": 12, "dayType": "weekend"},
            ]
        }
    )

    readings = json_feed.fetch_readings(FEED_URL, token="test-token")

    assert len(readings) == 2
    assert readings[0].timestamp == datetime(2024, 1, 8, 10, tzinfo=timezone.utc)
    assert readings[0].consumption == 55.2
    assert readings[0].occupancy == 30
    assert readings[0].day_type == "weekday"
    assert readings[1].day_type == "weekend"

    headers = mock_get.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer test-token"


def test_fetch_readings_plain_list(mock_get, monkeypatch):
    monkeypatch.delenv(json_feed.TOKEN_ENV, raising=False)
    mock_get.return_value = _response([{"timestamp": "2024-01-08T10:00:00", "consumption": 1}])

    readings = json_feed.fetch_readings(FEED_URL)

    assert len(readings) == 1
    assert "Authorization" not in mock_get.call_args.kwargs["headers"]


def test_fetch_readings_bad_payload(mock_get):
    mock_get.return_value = _response({"readings": []})

    with pytest.raises(json_feed.FeedError, match="array is required"):
        json_feed.fetch_readings(FEED_URL, token="t")


def test_fetch_readings_network_error(mock_get):
    mock_get.side_effect = httpx.ConnectError("Connection refused")

    with pytest.raises(json_feed.FeedError, match="Network error"):
        json_feed.fetch_readings(FEED_URL, token="t")


def test_fetch_readings_http_error(mock_get):
    request = httpx.Request("GET", FEED_URL)
    response = _response(None)
    response.raise_for_status.side_effect = httpx.HTTPStatusError(
        "Not Found", request=request, response=httpx.Response(404, request=request)
    )
    mock_get.return_value = response

    with pytest.raises(json_feed.FeedError, match="404"):
        json_feed.fetch_readings(FEED_URL, token="t")


def test_import_from_feed(mock_get, db_path):
    from building_energy.buildings import register_building
    from building_energy.models import Building
    from building_energy.readings import get_readings

    register_building(Building(id="hq", name="Head Office"), db_path)
    mock_get.return_value = _response({"data": [{"timestamp": "2024-01-08T10:00:00", "consumption": 9}]})

    result = json_feed.import_from_feed("hq", FEED_URL, token="t", db_path=db_path)

    assert result == {"imported": 1, "skipped": 0}
    assert get_readings("hq", db_path=db_path)[0].consumption == 9
