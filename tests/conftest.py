"""
Shared Test Fixtures for the Check-in Feed Client

This module provides common fixtures used across all test modules.
Fixtures include factories for raw feed entries and check-in payloads,
a fake feed transport, HTTP response mocks, and log capture.
"""

import pytest
import threading
from unittest.mock import MagicMock
from typing import Optional, Dict, Any, List
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from data.models import Credentials


CHECKIN_TYPE = "app.dropanchor.checkin"
ADDRESS_TYPE = "community.lexicon.location.address"
GEO_TYPE = "community.lexicon.location.geo"


# =============================================================================
# Raw Payload Factories
# =============================================================================

def address_payload(**fields) -> Dict[str, Any]:
    """Build a raw address location entry."""
    payload = {"$type": ADDRESS_TYPE}
    payload.update(fields)
    return payload


def geo_payload(latitude: Any, longitude: Any) -> Dict[str, Any]:
    """Build a raw geo location entry."""
    return {"$type": GEO_TYPE, "latitude": latitude, "longitude": longitude}


def checkin_payload(locations: Optional[List[Any]] = None, **fields) -> Dict[str, Any]:
    """Build a raw check-in record payload."""
    payload = {"$type": CHECKIN_TYPE, "createdAt": "2024-01-15T10:00:00.000Z"}
    if locations is not None:
        payload["locations"] = locations
    payload.update(fields)
    return payload


@pytest.fixture
def make_feed_entry():
    """
    Factory fixture for raw app.bsky.feed.getFeed entries.

    Usage:
        def test_something(make_feed_entry):
            entry = make_feed_entry(text="Hello", embed=checkin_payload([...]))

    Returns:
        callable: A factory producing feed entry dictionaries.
    """
    counter = {"n": 0}

    def _create_entry(
        uri: Optional[str] = None,
        handle: Optional[str] = "alice.bsky.social",
        display_name: Optional[str] = "Alice",
        text: Optional[str] = "Checking in",
        created_at: Optional[str] = "2024-01-15T10:00:00.000Z",
        embed: Optional[Dict[str, Any]] = None,
        facets: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        counter["n"] += 1
        author = {"did": f"did:plc:user{counter['n']}", "avatar": "https://cdn.example.com/a.jpg"}
        if handle is not None:
            author["handle"] = handle
        if display_name is not None:
            author["displayName"] = display_name

        record = {"$type": "app.bsky.feed.post"}
        if text is not None:
            record["text"] = text
        if created_at is not None:
            record["createdAt"] = created_at
        if embed is not None:
            record["embed"] = embed
        if facets is not None:
            record["facets"] = facets

        return {
            "post": {
                "uri": uri or f"at://did:plc:user{counter['n']}/app.bsky.feed.post/{counter['n']}",
                "cid": f"bafyrei{counter['n']}",
                "author": author,
                "record": record,
                "indexedAt": "2024-01-15T10:00:01.000Z",
            }
        }

    return _create_entry


# =============================================================================
# Credential Fixtures
# =============================================================================

@pytest.fixture
def credentials():
    """Session credentials as produced by the authentication collaborator."""
    return Credentials(
        handle="test-bsky-user.bsky.social",
        did="did:plc:testuser123",
        access_jwt="test-access-jwt",
        refresh_jwt="test-refresh-jwt",
        pds_url="https://pds.example.com",
    )


# =============================================================================
# Feed Transport Fixtures
# =============================================================================

class FakeFeedClient:
    """
    In-memory stand-in for FeedClient.

    Each call pops the next outcome from `outcomes`: an exception instance is
    raised, anything else is returned. The last outcome repeats. With
    block=True every call waits for `release` to be set.
    """

    def __init__(self, outcomes: List[Any], block: bool = False):
        self.outcomes = list(outcomes)
        self.block = block
        self.release = threading.Event()
        self.calls = 0
        self.seen_credentials = []

    def get_global_feed(self, credentials):
        self.calls += 1
        self.seen_credentials.append(credentials)
        if self.block:
            self.release.wait(timeout=5)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def fake_feed_client():
    """Factory fixture for FakeFeedClient instances."""
    def _create(*outcomes, block: bool = False) -> FakeFeedClient:
        return FakeFeedClient(list(outcomes), block=block)
    return _create


# =============================================================================
# HTTP Response Fixtures
# =============================================================================

@pytest.fixture
def mock_http_response():
    """
    Factory fixture for creating mock HTTP responses.

    Usage:
        def test_http_request(mock_http_response):
            response = mock_http_response(status_code=200, json_data={'feed': []})

    Returns:
        callable: A factory function for creating mock responses.
    """
    def _create_response(
        status_code: int = 200,
        json_data: Optional[Any] = None,
        text: str = '',
        headers: Optional[Dict[str, str]] = None,
    ) -> MagicMock:
        import json

        mock_response = MagicMock()
        mock_response.status_code = status_code
        mock_response.headers = headers or {'Content-Type': 'application/json'}
        mock_response.ok = 200 <= status_code < 400
        mock_response.text = text or (json.dumps(json_data) if json_data is not None else '')

        # Configure json() method
        if json_data is not None:
            mock_response.json.return_value = json_data
        else:
            mock_response.json.side_effect = ValueError("No JSON data")

        return mock_response

    return _create_response


@pytest.fixture
def mock_requests_session(mock_http_response):
    """A MagicMock requests.Session whose get() returns an empty feed."""
    session = MagicMock()
    session.headers = {}
    session.get.return_value = mock_http_response(json_data={"feed": []})
    return session


# =============================================================================
# Logging Fixtures
# =============================================================================

@pytest.fixture
def capture_logs():
    """
    Capture log messages for assertion in tests.

    Returns:
        list: A list that will contain captured log records.
    """
    import logging

    class LogCapture(logging.Handler):
        def __init__(self):
            super().__init__()
            self.records = []

        def emit(self, record):
            self.records.append(record)

    handler = LogCapture()
    handler.setLevel(logging.DEBUG)

    app_logger = logging.getLogger("checkin_feed")
    original_level = app_logger.level
    app_logger.setLevel(logging.DEBUG)
    app_logger.addHandler(handler)

    yield handler.records

    app_logger.removeHandler(handler)
    app_logger.setLevel(original_level)
