"""Retry logic with exponential backoff for chat-completion requests.

Rate limits (429), server errors (5xx), timeouts and connection failures
are retried with exponential backoff (1s, 2s, 4s, ...). Everything else
fails fast.
"""

import time
import logging
from typing import Callable, TypeVar

from requests.exceptions import ConnectionError, Timeout

from .errors import LLMAccessError

logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_MAX_RETRIES = 3


class TransientHTTPError(Exception):
    """Raised by request functions for retryable HTTP status codes."""

    def __init__(self, status_code: int, message: str = ""):
        super().__init__(message or f"HTTP {status_code}")
        self.status_code = status_code


def retry_on_transient_error(
    func: Callable[..., T],
    *args,
    max_retries: int = DEFAULT_MAX_RETRIES,
    **kwargs
) -> T:
    """Retry function on transient failures with exponential backoff.

    Args:
        func: The function to execute with retry logic
        *args: Positional arguments to pass to the function
        max_retries: Number of retries after the first attempt
        **kwargs: Keyword arguments to pass to the function

    Returns:
        The return value of the function

    Raises:
        LLMAccessError: If the failure persists after max_retries retries
        Other exceptions: Passed through immediately without retry

    Example:
        >>> text = retry_on_transient_error(client._post, payload, max_retries=3)
    """
    for retry_num in range(max_retries + 1):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if not is_transient_error(e):
                raise

            if retry_num >= max_retries:
                logger.error(
                    f"LLM request still failing after {max_retries} retries, giving up: {e}"
                )
                raise LLMAccessError(
                    f"LLM API failure (after {max_retries} retries): {e}",
                    status_code=getattr(e, 'status_code', None),
                )

            wait_time = 2 ** retry_num
            logger.info(
                f"Transient LLM error ({e}), retrying in {wait_time}s "
                f"(retry {retry_num + 1}/{max_retries})"
            )
            time.sleep(wait_time)

    raise LLMAccessError(f"LLM API failure (after {max_retries} retries)")


def is_transient_error(exception: Exception) -> bool:
    """Check if an exception is worth retrying.

    Args:
        exception: The exception to check

    Returns:
        True for rate limits, server errors, timeouts and connection errors
    """
    if isinstance(exception, (Timeout, ConnectionError)):
        return True

    status_code = getattr(exception, 'status_code', None)
    if status_code is None:
        return False
    return status_code == 429 or 500 <= status_code < 600
