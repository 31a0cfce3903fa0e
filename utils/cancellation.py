"""
Cancellation Token

A signal the consumer of a fetch holds on to and trips when it no longer
wants the result (for example when the screen showing the feed goes away).
"""

import asyncio
from typing import Optional


class CancellationToken:
    """One-shot cancellation signal shared between a consumer and a fetch."""

    def __init__(self):
        self._cancelled = False
        self._reason: Optional[str] = None
        self._events = []

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        """Trip the token. Calling it again has no effect."""
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason
        for loop, event in self._events:
            if loop.is_closed():
                continue
            loop.call_soon_threadsafe(event.set)

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        if self._cancelled:
            return
        event = asyncio.Event()
        entry = (asyncio.get_running_loop(), event)
        self._events.append(entry)
        try:
            await event.wait()
        finally:
            self._events.remove(entry)
