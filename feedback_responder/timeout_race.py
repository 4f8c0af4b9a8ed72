"""Race an awaitable against a deadline without cancelling it."""
import asyncio
import logging
import time
from typing import Awaitable, Optional, Set, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Strong references to operations that lost a race, so they finish undisturbed
_abandoned: Set[asyncio.Future] = set()


class RaceTimeout(Exception):
    """The operation did not finish before the deadline."""


class Deadline:
    """A fixed point in time shared by every stage of one request."""

    def __init__(self, seconds: float):
        self.seconds = seconds
        self._expires_at = time.monotonic() + seconds

    def remaining(self) -> float:
        return max(0.0, self._expires_at - time.monotonic())


def _discard(future: asyncio.Future) -> None:
    _abandoned.discard(future)
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.debug(f"Abandoned operation finished with {exc!r}")


def _abandon(future: asyncio.Future) -> None:
    _abandoned.add(future)
    future.add_done_callback(_discard)


async def race(operation: Awaitable[T], deadline: Deadline, label: Optional[str] = None) -> T:
    """Return the operation's result if it beats the deadline.

    On timeout the operation keeps running in the background; its eventual
    result or exception is consumed and dropped, never handed back to the
    caller.

    Raises:
        RaceTimeout: If the deadline passes first
    """
    future = asyncio.ensure_future(operation)
    timeout = deadline.remaining()

    try:
        done, _ = await asyncio.wait({future}, timeout=timeout)
    except BaseException:
        # The caller was cancelled while waiting
        _abandon(future)
        raise

    if future in done:
        return future.result()

    _abandon(future)
    raise RaceTimeout(f"{label or 'operation'} timed out after {deadline.seconds}s")
