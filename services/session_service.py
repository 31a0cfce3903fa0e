"""
Session Service Module

This module handles authentication with the AT Protocol (BlueSky). It logs in
with the configured account and hands the resulting session to the feed
pipeline as a Credentials object.
"""

from typing import Optional

from atproto import Client, Session, SessionEvent

from config import settings
from data.models import Credentials
from utils.exceptions import AuthenticationError
from utils.logger import get_logger

logger = get_logger(__name__)


def credentials_from_session(session: Session) -> Credentials:
    """Convert an atproto session into the pipeline's Credentials."""
    return Credentials(
        handle=session.handle,
        did=session.did,
        access_jwt=session.access_jwt,
        refresh_jwt=session.refresh_jwt,
        pds_url=session.pds_endpoint,
    )


class SessionService:
    """Service owning the AT Protocol session used by the feed."""

    def __init__(self, username: Optional[str] = None, password: Optional[str] = None,
                 service_url: Optional[str] = None):
        """
        Initialize the session service with an AT Protocol client.

        Args:
            username: Handle or email, defaults to settings.AT_PROTOCOL_USERNAME
            password: App password, defaults to settings.AT_PROTOCOL_PASSWORD
            service_url: PDS base URL, defaults to settings.AT_PROTOCOL_SERVICE
        """
        self.username = username if username is not None else settings.AT_PROTOCOL_USERNAME
        self.password = password if password is not None else settings.AT_PROTOCOL_PASSWORD
        service_url = (service_url or settings.AT_PROTOCOL_SERVICE).rstrip("/")

        self._credentials: Optional[Credentials] = None
        self.at_client = Client(base_url=f"{service_url}/xrpc")
        self.at_client.on_session_change(self._on_session_change)

    @property
    def credentials(self) -> Optional[Credentials]:
        return self._credentials

    @property
    def is_authenticated(self) -> bool:
        return self._credentials is not None

    def _on_session_change(self, event: SessionEvent, session: Session) -> None:
        if event in (SessionEvent.CREATE, SessionEvent.REFRESH):
            self._credentials = credentials_from_session(session)
            logger.debug(f"AT Protocol session {event.value} for {session.handle}")

    def login(self) -> Optional[Credentials]:
        """
        Log in to the AT Protocol service.

        Returns:
            Optional[Credentials]: The session credentials, or None if no account is configured

        Raises:
            AuthenticationError: If the service rejected the login
        """
        if not self.username or not self.password:
            logger.error("Missing AT Protocol credentials")
            return None

        try:
            self.at_client.login(self.username, self.password)
        except AuthenticationError:
            raise
        except Exception as e:
            logger.error(f"Failed to authenticate with AT Protocol: {e}")
            raise AuthenticationError(f"Failed to authenticate as {self.username}: {e}") from e

        if self._credentials is None:
            raise AuthenticationError(f"Login as {self.username} did not produce a session")

        logger.info(f"Successfully logged in to AT Protocol as {self._credentials.handle}")
        return self._credentials

    def logout(self) -> None:
        """Forget the current session."""
        self._credentials = None
