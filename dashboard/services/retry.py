"""
Retry helper with exponential backoff for transient upstream failures.
"""

import asyncio
from typing import Awaitable, Callable, TypeVar

from loguru import logger

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 0.1  # seconds


async def retry(
    fn: Callable[[], Awaitable[T]],
    attempts: int = DEFAULT_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
) -> T:
    """
    Run ``fn`` until it succeeds or ``attempts`` runs have failed.

    After failed attempt ``i`` (0-based) the helper sleeps
    ``base_delay * 2**i`` seconds before trying again. No sleep follows the
    last attempt; its exception is re-raised unchanged.

    Args:
        fn: Zero-argument coroutine function to run
        attempts: Maximum number of runs (at least 1)
        base_delay: Delay before the first retry, in seconds

    Returns:
        The first successful result of ``fn``
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(attempts):
        try:
            return await fn()
        except Exception as e:
            if attempt == attempts - 1:
                raise

            delay = base_delay * 2**attempt
            logger.warning(
                f"Attempt {attempt + 1}/{attempts} failed: {e}; "
                f"retrying in {delay:.3f}s"
            )
            await asyncio.sleep(delay)

    # unreachable: the loop either returns or raises
    raise RuntimeError("retry loop exited without a result")
