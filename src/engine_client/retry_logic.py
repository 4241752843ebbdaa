"""Retry logic with exponential backoff for engine API rate limits.

Only 429 responses are retried (1s, 2s, 4s); every other error fails fast.
"""

import time
import logging
from typing import Callable, TypeVar

from .errors import APIAccessError

logger = logging.getLogger(__name__)

T = TypeVar('T')

MAX_RETRIES = 3


def retry_on_rate_limit(func: Callable[..., T], *args, **kwargs) -> T:
    """Call `func`, retrying on 429 rate limit with exponential backoff.

    Args:
        func: The function to execute with retry logic
        *args: Positional arguments to pass to the function
        **kwargs: Keyword arguments to pass to the function

    Returns:
        The return value of the function

    Raises:
        APIAccessError: If rate limit persists after 3 retries
        Other exceptions: Passed through immediately without retry

    Example:
        >>> response = retry_on_rate_limit(session.get, url, params=params)
    """
    for retry_num in range(MAX_RETRIES + 1):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if not _is_rate_limit_error(e):
                raise

            if retry_num >= MAX_RETRIES:
                logger.error(
                    f"Rate limit persisted after {MAX_RETRIES} retries, giving up"
                )
                raise APIAccessError(f"Engine API failure (after {MAX_RETRIES} retries)")

            wait_time = 2 ** retry_num
            logger.info(
                f"Rate limit hit, retrying in {wait_time}s "
                f"(retry {retry_num + 1}/{MAX_RETRIES})"
            )
            time.sleep(wait_time)

    raise APIAccessError(f"Engine API failure (after {MAX_RETRIES} retries)")


def _is_rate_limit_error(exception: Exception) -> bool:
    """Check if an exception represents a rate limit (429) error.

    Looks at `status_code` and `response.status_code` (requests
    HTTPError) before falling back to the message. A known status code
    wins over the message, which may quote a URL containing "429".
    """
    status_code = getattr(exception, 'status_code', None)
    response = getattr(exception, 'response', None)
    if status_code is None and response is not None:
        status_code = getattr(response, 'status_code', None)
    if isinstance(status_code, int):
        return status_code == 429

    error_msg = str(exception).lower()
    return any(pattern in error_msg for pattern in (
        '429',
        'too many requests',
        'rate limit exceeded',
    ))
