"""Async exponential backoff retry loop."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

from citenet.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def backoff_delay(base_delay: float, attempt: int) -> float:
    """Delay before retry number ``attempt + 1`` (attempt is zero-based)."""
    return base_delay * (2**attempt)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    max_retries: int,
    base_delay: float,
    is_retryable: Callable[[Exception], bool],
    label: str,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    **log_context: Any,
) -> T:
    """Run ``operation`` once plus up to ``max_retries`` more times.

    Exceptions for which ``is_retryable`` returns False propagate immediately.
    When every attempt fails, the last exception is re-raised.
    """
    for attempt in range(max_retries + 1):
        try:
            result = await operation()
        except Exception as exc:
            if not is_retryable(exc):
                logger.warning(
                    "retry_skipped",
                    label=label,
                    attempt=attempt + 1,
                    error=str(exc),
                    **log_context,
                )
                raise

            if attempt == max_retries:
                logger.error(
                    "retries_exhausted",
                    label=label,
                    attempts=attempt + 1,
                    error=str(exc),
                    **log_context,
                )
                raise

            delay = backoff_delay(base_delay, attempt)
            logger.warning(
                "retry_attempt",
                label=label,
                attempt=attempt + 1,
                delay=round(delay, 3),
                error=str(exc) or type(exc).__name__,
                **log_context,
            )
            await sleep(delay)
        else:
            logger.debug("attempt_succeeded", label=label, attempt=attempt + 1, **log_context)
            return result

    raise RuntimeError(f"Exhausted retries for {label}")  # pragma: no cover
