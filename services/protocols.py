"""
Service Protocol Definitions

This module defines typing.Protocol interfaces for the collaborators of the
feed pipeline. These protocols enable loose coupling, dependency injection,
and easier testing.

Protocols defined:
- FeedClientProtocol: Interface for the feed transport
- SessionProviderProtocol: Interface for whatever produces session credentials
"""

from typing import Any, List, Optional, Protocol

from data.models import Credentials


class FeedClientProtocol(Protocol):
    """Protocol defining the interface for fetching raw feed entries.

    Implementations perform one blocking request per call; FeedService runs
    it in a worker thread.
    """

    def get_global_feed(self, credentials: Credentials) -> List[Any]:
        """Fetch the first page of the global feed.

        Args:
            credentials: Session whose access token authorizes the request.

        Returns:
            The raw feed entries, in server order.

        Raises:
            FeedTransportError: If the request could not complete.
            FeedDecodeError: If the response is not a feed envelope.
        """
        ...


class SessionProviderProtocol(Protocol):
    """Protocol defining the interface for the authentication collaborator."""

    @property
    def credentials(self) -> Optional[Credentials]:
        """Credentials of the current session, or None when signed out."""
        ...

    @property
    def is_authenticated(self) -> bool:
        """True once a session exists."""
        ...

    def login(self) -> Optional[Credentials]:
        """Sign in and return the new session's credentials.

        Returns:
            Credentials on success, None if no account is configured.

        Raises:
            AuthenticationError: If the service rejected the login.
        """
        ...
