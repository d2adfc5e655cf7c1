"""
Caller-side retry loop driven by the permanent/temporary error classification.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from audiobait_client.exceptions import is_permanent_error

log = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_operation(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.5,
    description: str = "operation",
) -> T:
    """
    Awaits ``operation()`` until it succeeds, retrying temporary failures with
    exponential backoff. Permanent failures are re-raised immediately, as is
    the last failure once the attempts are exhausted.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            if is_permanent_error(e) or attempt >= max_attempts:
                raise
            delay = base_delay * (2 ** (attempt - 1))
            log.debug(
                f"{description} attempt {attempt}/{max_attempts} failed: {e}. "
                f"Retrying in {delay:.1f}s..."
            )
            await asyncio.sleep(delay)
    raise ValueError("max_attempts must be at least 1")
