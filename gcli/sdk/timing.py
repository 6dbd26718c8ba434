"""Debug timing of Gmail and Calendar API calls.

Set LOG_LEVEL=DEBUG to see how long each decorated SDK call took, including
calls that raised.
"""

import time
import logging
from functools import wraps

logger = logging.getLogger(__name__)


def time_api_call(func):
    """Log the wall-clock duration of an SDK call at debug level."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            logger.debug(f"API call '{func.__name__}' took {time.perf_counter() - start:.4f} seconds.")
    return wrapper
