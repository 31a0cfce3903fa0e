"""
Feed Service Module

This module owns the observable state of the global check-in feed and the
one operation that changes it, fetch_global_feed. At most one fetch runs at a
time; a second call made while loading waits for the running one instead of
sending another request.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional

from config import settings
from data.models import Credentials, FeedPost
from services.feed_client import FeedClient
from services.feed_normalizer import normalize_feed
from services.feed_state import Failed, FeedFetchState, Idle, Loaded, Loading
from services.protocols import FeedClientProtocol
from utils.cancellation import CancellationToken
from utils.exceptions import FeedError, FeedTransportError, FetchCancelledError
from utils.helpers import retry_async
from utils.logger import get_logger

logger = get_logger(__name__)

StateListener = Callable[[FeedFetchState], None]


def _mark_retrieved(future: asyncio.Future) -> None:
    # Keeps asyncio quiet when nobody joined a fetch that failed
    if not future.cancelled():
        future.exception()


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, FeedTransportError) and error.retryable


class FeedService:
    """State machine for loading the global check-in feed."""

    def __init__(self, client: Optional[FeedClientProtocol] = None,
                 max_attempts: Optional[int] = None,
                 retry_delay: Optional[float] = None,
                 retry_backoff: Optional[float] = None):
        """
        Initialize the feed service in the Idle state.

        Args:
            client: Transport used for the feed request, defaults to FeedClient()
            max_attempts: Attempts per fetch for transient failures
            retry_delay: Seconds before the first retry
            retry_backoff: Delay multiplier between retries
        """
        self.client = client or FeedClient()
        self.max_attempts = max_attempts if max_attempts is not None else settings.FEED_FETCH_MAX_ATTEMPTS
        self.retry_delay = retry_delay if retry_delay is not None else settings.FEED_RETRY_DELAY
        self.retry_backoff = retry_backoff if retry_backoff is not None else settings.FEED_RETRY_BACKOFF

        self._state: FeedFetchState = Idle()
        self._listeners: List[StateListener] = []
        self._in_flight: Optional[asyncio.Future] = None

    # -------------------------------------------------------------------------
    # Read-only view
    # -------------------------------------------------------------------------

    @property
    def state(self) -> FeedFetchState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return isinstance(self._state, Loading)

    @property
    def posts(self) -> List[FeedPost]:
        """Posts of the last successful fetch, empty in every other state."""
        if isinstance(self._state, Loaded):
            return list(self._state.posts)
        return []

    @property
    def error(self) -> Optional[FeedError]:
        if isinstance(self._state, Failed):
            return self._state.error
        return None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called with every new state.

        Args:
            listener: Callable receiving the new state

        Returns:
            Callable[[], None]: Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: FeedFetchState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Feed state listener failed: {e}", exc_info=True)

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------

    async def fetch_global_feed(self, credentials: Optional[Credentials],
                                cancel_token: Optional[CancellationToken] = None) -> List[FeedPost]:
        """
        Fetch and normalize the global feed.

        Args:
            credentials: Session to authorize the request; None makes the call a no-op
            cancel_token: Optional token the caller trips to abandon the fetch

        Returns:
            List[FeedPost]: The normalized posts in server order

        Raises:
            FeedTransportError: If the request failed after all attempts
            FeedDecodeError: If the response was not a feed
            FetchCancelledError: If the fetch was cancelled; the previous state is restored
        """
        if credentials is None:
            logger.debug("No credentials available, skipping feed fetch")
            return []

        if self._in_flight is not None:
            logger.info("Feed fetch already in progress, waiting for it")
            # Shielded so this caller's token never cancels the shared fetch
            posts = await self._until_cancelled(asyncio.shield(self._in_flight), cancel_token)
            return list(posts)

        in_flight = asyncio.get_running_loop().create_future()
        in_flight.add_done_callback(_mark_retrieved)
        self._in_flight = in_flight

        previous = self._state
        self._set_state(Loading())
        logger.info(f"Fetching global feed for {credentials.handle}")

        try:
            posts = await self._load(credentials, cancel_token)
        except FetchCancelledError as e:
            logger.info("Feed fetch cancelled")
            self._finish(in_flight, previous, error=e)
            raise
        except asyncio.CancelledError:
            logger.info("Feed fetch task cancelled")
            self._finish(in_flight, previous, error=FetchCancelledError("Feed fetch was cancelled"))
            raise
        except FeedError as e:
            logger.error(f"Error fetching global feed: {e}")
            self._finish(in_flight, Failed(e), error=e)
            raise
        except Exception as e:
            logger.error(f"Unexpected error fetching global feed: {e}", exc_info=True)
            error = FeedError(f"Unexpected error fetching feed: {e}")
            self._finish(in_flight, Failed(error), error=error)
            raise error from e

        logger.info(f"Successfully retrieved {len(posts)} feed posts")
        self._finish(in_flight, Loaded(tuple(posts)), result=posts)
        return posts

    def _finish(self, in_flight: asyncio.Future, state: FeedFetchState,
                result: Any = None, error: Optional[BaseException] = None) -> None:
        # Cleared before listeners run so a listener may start the next fetch
        self._in_flight = None
        self._set_state(state)
        if error is not None:
            in_flight.set_exception(error)
        else:
            in_flight.set_result(result)

    async def _load(self, credentials: Credentials,
                    cancel_token: Optional[CancellationToken]) -> List[FeedPost]:
        async def attempt() -> List[Any]:
            return await asyncio.to_thread(self.client.get_global_feed, credentials)

        entries = await self._until_cancelled(
            retry_async(attempt, max_attempts=self.max_attempts, delay=self.retry_delay,
                        exceptions=(FeedTransportError,), backoff=self.retry_backoff,
                        should_retry=_is_retryable),
            cancel_token,
        )
        return normalize_feed(entries)

    @staticmethod
    async def _until_cancelled(work: Awaitable[Any], cancel_token: Optional[CancellationToken]) -> Any:
        """Await work unless the token trips first. A late result is discarded."""
        if cancel_token is None:
            return await work

        task = asyncio.ensure_future(work)
        if cancel_token.is_cancelled:
            task.cancel()
            raise FetchCancelledError(f"Feed fetch cancelled: {cancel_token.reason}")

        watcher = asyncio.ensure_future(cancel_token.wait())
        try:
            await asyncio.wait({task, watcher}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            watcher.cancel()
            if not task.done():
                task.cancel()

        if cancel_token.is_cancelled:
            if task.done() and not task.cancelled():
                task.exception()
            raise FetchCancelledError(f"Feed fetch cancelled: {cancel_token.reason}")
        return task.result()
