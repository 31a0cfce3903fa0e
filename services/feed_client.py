"""
Feed Client Module

This module performs the single HTTP request behind a feed fetch: an
authenticated app.bsky.feed.getFeed call. The request goes to the user's
PDS, which proxies app.bsky reads to the AppView; the configured feed
service is only used when the session carries no PDS endpoint.
It checks the response envelope but leaves the entries untouched.
"""

from typing import Any, List, Optional

import requests

from config import settings
from data.models import Credentials
from utils.exceptions import FeedDecodeError, FeedTransportError
from utils.logger import get_logger

logger = get_logger(__name__)

GET_FEED_PATH = "/xrpc/app.bsky.feed.getFeed"


class FeedClient:
    """Blocking HTTP client for the global check-in feed."""

    def __init__(self, service_url: Optional[str] = None, feed_uri: Optional[str] = None,
                 limit: Optional[int] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize the feed client.

        Args:
            service_url: Fallback host when the session has no PDS, defaults to settings.FEED_SERVICE_URL
            feed_uri: at:// URI of the feed generator, defaults to settings.FEED_URI
            limit: Posts per page, defaults to settings.FEED_FETCH_LIMIT
            timeout: Request timeout in seconds, defaults to settings.FEED_REQUEST_TIMEOUT
            session: Optional requests session to reuse connections
        """
        self.service_url = (service_url or settings.FEED_SERVICE_URL).rstrip("/")
        self.feed_uri = feed_uri or settings.FEED_URI
        self.limit = limit if limit is not None else settings.FEED_FETCH_LIMIT
        self.timeout = timeout or settings.FEED_REQUEST_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update(settings.REQUEST_HEADERS)

    def get_global_feed(self, credentials: Credentials) -> List[Any]:
        """
        Fetch the first page of the global feed.

        Args:
            credentials: Session whose access token authorizes the request

        Returns:
            List[Any]: The raw feed entries in server order

        Raises:
            FeedTransportError: If the request fails or returns a non-success status
            FeedDecodeError: If the body is not a feed response
        """
        # Session tokens are only accepted by the PDS that issued them
        base_url = (credentials.pds_url or self.service_url).rstrip("/")
        url = f"{base_url}{GET_FEED_PATH}"
        params = {"feed": self.feed_uri, "limit": self.limit}
        headers = {"Authorization": f"Bearer {credentials.access_jwt}"}

        try:
            response = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logger.error(f"Feed request timed out after {self.timeout}s: {e}")
            raise FeedTransportError(f"Feed request timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Feed request failed: {e}")
            raise FeedTransportError(f"Feed request failed: {e}") from e

        if not response.ok:
            raise self._status_error(response)

        try:
            payload = response.json()
        except ValueError as e:
            raise FeedDecodeError(f"Feed response is not JSON: {e}") from e

        return self._entries(payload)

    @staticmethod
    def _status_error(response: requests.Response) -> FeedTransportError:
        status = response.status_code
        message = None
        try:
            body = response.json()
            if isinstance(body, dict):
                message = body.get("message") or body.get("error")
        except ValueError:
            pass

        retryable = status == 429 or status >= 500
        detail = f": {message}" if message else ""
        logger.error(f"Feed request returned HTTP {status}{detail}")
        return FeedTransportError(f"Feed request returned HTTP {status}{detail}",
                                  status_code=status, retryable=retryable)

    @staticmethod
    def _entries(payload: Any) -> List[Any]:
        if not isinstance(payload, dict):
            raise FeedDecodeError("Feed response is not a JSON object")
        entries = payload.get("feed")
        if not isinstance(entries, list):
            raise FeedDecodeError("Feed response has no feed array")
        logger.debug(f"Feed response carried {len(entries)} entries")
        return entries
