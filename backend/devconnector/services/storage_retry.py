"""Caller-level retry for storage failures.

Business-rule errors (not found, forbidden, conflict) are definitive and
are re-raised immediately. Only errors flagged retryable (StorageError) are
retried, with exponential backoff and jitter. The orchestrator never calls
this itself; callers that want retries wrap a whole service call.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from devconnector.core.config import settings
from devconnector.core.errors import is_retryable

__all__ = ["with_storage_retries"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_storage_retries(
    func: Callable[[], Awaitable[T]],
    *,
    max_retries: int | None = None,
    base_delay_ms: int | None = None,
    max_delay_ms: int | None = None,
) -> T:
    """Execute func, retrying it while it fails with a retryable error.

    Args:
        func: Async function to execute (no arguments).
        max_retries: Retries after the first attempt. Defaults to
            settings.storage_retry_max.
        base_delay_ms: First backoff delay. Defaults to
            settings.storage_retry_base_delay_ms.
        max_delay_ms: Backoff ceiling. Defaults to
            settings.storage_retry_max_delay_ms.

    Returns:
        Result from the first successful call.

    Raises:
        StorageError: If every attempt failed with a storage error.
        APIError: Any non-retryable error, on first occurrence.
    """
    retries = settings.storage_retry_max if max_retries is None else max_retries
    base = settings.storage_retry_base_delay_ms if base_delay_ms is None else base_delay_ms
    ceiling = settings.storage_retry_max_delay_ms if max_delay_ms is None else max_delay_ms

    attempt = 0
    while True:
        try:
            return await func()
        except Exception as e:
            if not is_retryable(e) or attempt >= retries:
                raise

            base_delay = base * (2**attempt)
            jitter = random.uniform(0, base_delay * 0.1)  # nosec B311
            delay = min(base_delay + jitter, ceiling) / 1000

            logger.warning(
                "Storage error (attempt %d/%d): %s. Retrying in %.2fs",
                attempt + 1,
                retries + 1,
                e,
                delay,
            )
            attempt += 1
            await asyncio.sleep(delay)
