"""Deadline wrapper for AI calls.

The request and a timer run as two tasks; whichever finishes first decides
the outcome and the other is cancelled on the spot, without waiting for it
to unwind.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from .errors import AITimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def race_with_timeout(request: Awaitable[T], timeout: float) -> T:
    """Await ``request`` but give up after ``timeout`` seconds.

    Args:
        request: The coroutine or future doing the work.
        timeout: Deadline in seconds. Must be positive.

    Returns:
        The request's result.

    Raises:
        AITimeoutError: The timer finished first.
        ValueError: Non-positive timeout.
        Any exception the request raised, unchanged.
    """
    if timeout <= 0:
        if asyncio.iscoroutine(request):
            request.close()
        raise ValueError("timeout must be positive")

    request_task = asyncio.ensure_future(request)
    timer_task = asyncio.ensure_future(asyncio.sleep(timeout))

    try:
        done, _ = await asyncio.wait(
            {request_task, timer_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
    except asyncio.CancelledError:
        request_task.cancel()
        timer_task.cancel()
        raise

    if request_task in done:
        timer_task.cancel()
        return request_task.result()

    request_task.cancel()
    logger.info("AI request abandoned after %.1fs", timeout)
    raise AITimeoutError(timeout)
