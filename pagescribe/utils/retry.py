"""Retry helpers with exponential backoff for browser-level operations."""

import asyncio
import functools
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


def retry(
    max_attempts: int = 3,
    delay_ms: int = 1000,
    backoff_factor: float = 2.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> Callable[..., Any]:
    """Decorator for async functions; re-raises the last error once attempts run out."""
    attempts = max(1, max_attempts)

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(1, attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except retry_on as e:
                    if attempt == attempts:
                        raise
                    wait = (delay_ms * (backoff_factor ** (attempt - 1))) / 1000
                    logger.warning(
                        "retry_attempt",
                        func=getattr(func, "__name__", repr(func)),
                        attempt=attempt,
                        max_attempts=attempts,
                        wait_seconds=wait,
                        error=str(e),
                    )
                    await asyncio.sleep(wait)
            return None  # unreachable

        return wrapper

    return decorator
