"""
Bounded retry with exponential backoff for upstream calls.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .exceptions import FileSearchError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class RetryExecutor:
    """
    Retries an async call while it fails with a transient upstream error.

    The delay before retry ``n`` (0-based) is ``base_delay * 2**n`` with no
    jitter. Non-transient errors, and errors that are not ``FileSearchError``
    at all, propagate immediately. Once ``max_retries`` retries are spent the
    last error is raised.

    Example:
        retry = RetryExecutor(max_retries=3, base_delay=1.0)
        store = await retry.execute(lambda: backend.create_store("docs"))
    """

    def __init__(self, max_retries: int = 3, base_delay: float = 1.0, *, sleep: Sleep | None = None):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self._sleep = sleep or asyncio.sleep

    async def execute(
        self,
        fn: Callable[[], Awaitable[T]],
        *,
        max_retries: int | None = None,
        base_delay: float | None = None,
        description: str = "upstream call",
    ) -> T:
        retries = self.max_retries if max_retries is None else max_retries
        delay_base = self.base_delay if base_delay is None else base_delay

        attempt = 0
        while True:
            try:
                return await fn()
            except FileSearchError as e:
                if attempt >= retries or not e.is_transient:
                    raise
                delay = delay_base * (2**attempt)
                attempt += 1
                logger.warning(
                    f"{description} failed with status {e.status_code}; "
                    f"retry {attempt}/{retries} in {delay:.2f}s"
                )
                await self._sleep(delay)
