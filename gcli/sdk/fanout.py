"""Concurrent multi-account queries.

fan_out runs the same read-only query against several accounts at once and
merges the results, so one account with expired credentials or a failing
API call does not hide the results of the others.
"""

import os
import logging
import threading
import concurrent.futures
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


def get_fanout_timeout() -> Optional[float]:
    """
    Per-invocation fan-out timeout in seconds from GCLI_FANOUT_TIMEOUT.

    Unset, empty, non-numeric or non-positive values mean no timeout.
    """
    value = os.getenv("GCLI_FANOUT_TIMEOUT")
    if not value:
        return None
    try:
        timeout = float(value)
    except ValueError:
        logger.warning(f"Ignoring invalid GCLI_FANOUT_TIMEOUT value: {value}")
        return None
    return timeout if timeout > 0 else None


def chronological(field: str) -> Callable[[Dict[str, Any]], Tuple]:
    """Sort key on a datetime field; items without a value sort first."""
    def key(item):
        value = item.get(field)
        return (value is not None, value if value is not None else 0)
    return key


def fan_out(
    accounts: Sequence[str],
    query_fn: Callable[[str], List[Dict[str, Any]]],
    sort_key: Optional[Callable[[Dict[str, Any]], Any]] = None,
    timeout: Optional[float] = None,
) -> Tuple[List[Dict[str, Any]], List[str]]:
    """
    Run query_fn for every account concurrently and merge the results.

    One worker thread is started per account. Any exception raised by
    query_fn(account) becomes one "[account] message" error; the other
    accounts are unaffected. The call returns only after every account has
    finished, or after `timeout` seconds, in which case each account still
    running contributes a timed-out error and its late results are dropped.

    Args:
        accounts: Account names to query
        query_fn: Callable taking an account name and returning a list of
                  result dicts (limits are applied per account by query_fn)
        sort_key: Key for a stable ascending sort of the merged results
        timeout: Seconds to wait for all accounts (None waits indefinitely)

    Returns:
        Tuple of (merged results, per-account error messages). An empty
        result list with errors is a valid outcome.
    """
    results: List[Dict[str, Any]] = []
    errors: List[str] = []
    finished = set()
    lock = threading.Lock()
    state = {"closed": False}

    if not accounts:
        return results, errors

    def run(account_name: str):
        try:
            items = query_fn(account_name)
        except Exception as e:
            logger.warning(f"[{account_name}] Query failed: {e}")
            with lock:
                if not state["closed"]:
                    errors.append(f"[{account_name}] {e}")
                    finished.add(account_name)
            return

        with lock:
            if not state["closed"]:
                results.extend(items or [])
                finished.add(account_name)
        logger.debug(f"[{account_name}] Returned {len(items or [])} items")

    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=len(accounts), thread_name_prefix="gcli-fanout"
    )
    try:
        futures = [executor.submit(run, name) for name in accounts]
        concurrent.futures.wait(futures, timeout=timeout)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    with lock:
        state["closed"] = True
        merged = list(results)
        merged_errors = list(errors)
        for name in accounts:
            if name not in finished:
                logger.warning(f"[{name}] Query timed out after {timeout} seconds")
                merged_errors.append(f"[{name}] timed out after {timeout} seconds")

    if sort_key is not None:
        merged.sort(key=sort_key)

    logger.debug(
        f"Fan-out over {len(accounts)} accounts: {len(merged)} results, "
        f"{len(merged_errors)} errors"
    )
    return merged, merged_errors
