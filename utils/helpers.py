"""
Helper Utility Module

This module provides various helper functions used throughout the check-in feed client.
"""

import asyncio
import re
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar

from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Seconds fraction of any precision; fromisoformat only takes 3 or 6 digits before 3.11
_FRACTION = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


async def retry_async(func: Callable[[], Awaitable[T]], max_attempts: int = 3, delay: float = 1,
                      exceptions: Tuple = (Exception,), backoff: float = 2,
                      should_retry: Optional[Callable[[BaseException], bool]] = None) -> T:
    """
    Retry an async function multiple times if it fails.

    Args:
        func: Zero-argument coroutine function to retry
        max_attempts: Maximum number of attempts
        delay: Initial delay between attempts in seconds
        exceptions: Tuple of exceptions to catch
        backoff: Multiplier for the delay between attempts
        should_retry: Optional predicate; a caught exception it rejects is re-raised at once

    Returns:
        The result of the function call

    Raises:
        The last exception raised by the function
    """
    attempt = 0
    while True:
        try:
            return await func()
        except exceptions as e:
            attempt += 1
            if attempt >= max_attempts or (should_retry is not None and not should_retry(e)):
                raise

            wait_time = delay * (backoff ** (attempt - 1))
            logger.warning(f"Attempt {attempt}/{max_attempts} failed: {e}. Retrying in {wait_time:.1f}s")
            await asyncio.sleep(wait_time)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp as sent by the AT Protocol.

    Args:
        value: The raw value, e.g. "2024-01-15T10:00:00.000Z"

    Returns:
        Optional[datetime]: A timezone-aware datetime, or None if the value is not a timestamp
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        normalized = _FRACTION.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", value, count=1)
        timestamp = datetime.fromisoformat(normalized.replace('Z', '+00:00'))
    except ValueError:
        return None
    if timestamp.tzinfo is None:
        # Datetimes without an offset are taken as UTC
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp


def clean_string(value: Any) -> Optional[str]:
    """
    Normalize an optional string field.

    Args:
        value: The raw value

    Returns:
        Optional[str]: The stripped string, or None for non-strings and blank strings
    """
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def safe_get(data: Dict[str, Any], *keys, default: Any = None) -> Any:
    """
    Safely get a value from a nested dictionary.

    Args:
        data: The dictionary to search
        *keys: The keys to follow
        default: Default value if key doesn't exist

    Returns:
        The value at the specified keys or the default value
    """
    for key in keys:
        try:
            data = data[key]
        except (KeyError, TypeError, IndexError):
            return default
    return data
