"""
Module: client/retry.py
Description: Retry logic for batch round trips.

Implements exponential backoff for transient transport failures:
timeouts, network errors and throttling responses.
"""

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
import httpx

from ..utils.logger import get_logger

logger = get_logger(__name__)

# Throttled or temporarily unavailable
RETRYABLE_STATUS_CODES = frozenset({429, 503})


def is_retryable_error(exc: BaseException) -> bool:
    """
    Decide whether a failed round trip is worth another attempt.

    Args:
        exc: Exception raised by the HTTP request

    Returns:
        True for timeouts, network errors and throttling status codes
    """
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return False


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Batch round trip failed, retrying",
        attempt=retry_state.attempt_number,
        error=str(exc),
        error_type=type(exc).__name__
    )


def batch_retry(max_retries: int, base_delay: float) -> AsyncRetrying:
    """
    Build the retry controller for one batch round trip.

    Args:
        max_retries: Retries after the first attempt
        base_delay: Multiplier for exponential backoff in seconds

    Returns:
        AsyncRetrying instance; the last error is re-raised once exhausted

    Example:
        >>> async for attempt in batch_retry(3, 1.0):
        ...     with attempt:
        ...         response = await client.post(url, json=payload)
        ...         response.raise_for_status()
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=base_delay, max=30),
        retry=retry_if_exception(is_retryable_error),
        before_sleep=_log_retry,
        reraise=True
    )
