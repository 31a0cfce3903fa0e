"""
Check-in Feed Application

This is the main entry point for the check-in feed client.
It signs in to BlueSky, loads the global check-in feed and prints
it to the console.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from config import settings
from data.models import FeedPost
from services.feed_client import FeedClient
from services.feed_service import FeedService
from services.feed_state import Failed, FeedFetchState, Idle, Loaded, Loading
from services.protocols import SessionProviderProtocol
from services.session_service import SessionService
from utils.exceptions import (
    CheckinFeedError, ConfigurationError, FeedError, SocialMediaError
)
from utils.logger import get_logger, setup_file_logging

# Set up logging
logger = get_logger(__name__)


def render_post(post: FeedPost) -> List[str]:
    """Render one post as console lines."""
    author = post.author
    timestamp = post.record.created_at.strftime("%Y-%m-%d %H:%M")
    lines = [f"{author.label} (@{author.handle})  {timestamp}"]
    if post.record.text:
        lines.append(f"  {post.record.formatted_text}")
    location = post.location_label
    if location:
        lines.append(f"  {location}")
    return lines


def render_state(state: FeedFetchState) -> str:
    """
    Render a feed state the way the feed screen presents it.

    Args:
        state: The current FeedFetchState

    Returns:
        str: Console text for the loading, error, empty or content view
    """
    if isinstance(state, Idle):
        return "Sign in to see check-ins."
    if isinstance(state, Loading):
        return "Loading check-ins..."
    if isinstance(state, Failed):
        return f"Feed Unavailable\n{state.error}\nRun again to try again."
    if isinstance(state, Loaded):
        if not state.posts:
            return "No check-ins found\nNo check-ins found in the global feed."
        blocks = ["\n".join(render_post(post)) for post in state.posts]
        return "\n\n".join(blocks)
    raise TypeError(f"Unknown feed state: {state!r}")


class FeedApp:
    """
    Main application class for the check-in feed client.

    This class wires the session service and the feed service together and
    re-runs the fetch when the caller asks for retries.
    """

    def __init__(self, session_service: Optional[SessionProviderProtocol] = None,
                 feed_service: Optional[FeedService] = None):
        """Initialize the application's services."""
        self.session_service = session_service or SessionService()
        self.feed_service = feed_service or FeedService(FeedClient())

    async def load_feed(self) -> FeedFetchState:
        """Fetch the feed if signed in; errors end up in the returned state."""
        credentials = self.session_service.credentials
        try:
            await self.feed_service.fetch_global_feed(credentials)
        except FeedError:
            # Already recorded in feed_service.state
            pass
        return self.feed_service.state

    async def run(self, retries: int = 0) -> FeedFetchState:
        """
        Sign in and load the feed, retrying after failures.

        Args:
            retries: How many times to re-run the whole fetch after a failure

        Returns:
            FeedFetchState: The final state of the feed
        """
        if not self.session_service.is_authenticated:
            self.session_service.login()

        state = await self.load_feed()
        attempt = 0
        while isinstance(state, Failed) and attempt < retries:
            attempt += 1
            logger.info(f"Retrying feed fetch ({attempt}/{retries})")
            state = await self.load_feed()
        return state


def feed_limit(value: str) -> int:
    """argparse type for --limit: an integer the getFeed endpoint accepts."""
    try:
        limit = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'")
    if not 1 <= limit <= 100:
        raise argparse.ArgumentTypeError(f"must be between 1 and 100, got {limit}")
    return limit


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Check-in Feed Client')
    parser.add_argument('--retry', type=int, default=0, help='Times to retry the fetch after a failure')
    parser.add_argument('--limit', type=feed_limit, default=None, help='Posts to request (1-100)')
    parser.add_argument('--log-file', type=str, default='checkin_feed.log', help='Log file path')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='INFO', help='Logging level')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    # Parse command line arguments
    args = parse_arguments(argv)

    # Set up logging
    log_level = getattr(logging, args.log_level)
    setup_file_logging(args.log_file, log_level)

    logger.info("Starting check-in feed client")

    try:
        settings.validate_settings()
        logger.debug(f"Configuration: {settings.get_config_summary()}")

        app = FeedApp(feed_service=FeedService(FeedClient(limit=args.limit)))
        state = asyncio.run(app.run(retries=max(args.retry, 0)))
        print(render_state(state))
        exit_code = 0 if isinstance(state, Loaded) else 1

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        exit_code = 2
    except SocialMediaError as e:
        logger.error(f"Authentication error: {e}", exc_info=True)
        exit_code = 2
    except CheckinFeedError as e:
        logger.error(f"Check-in feed error: {e}", exc_info=True)
        exit_code = 2
    except Exception as e:
        logger.error(f"Unhandled exception in check-in feed client: {e}", exc_info=True)
        exit_code = 2

    logger.info(f"Check-in feed client finished with exit code {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
