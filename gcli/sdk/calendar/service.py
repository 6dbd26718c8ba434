"""Calendar service factory for the gcli SDK."""

import logging
from typing import Any, Optional, Tuple

from googleapiclient.discovery import build

from ..accounts import get_account, DEFAULT_CALENDAR_ID
from ..auth import get_credentials

logger = logging.getLogger(__name__)


def get_calendar_service(account: Optional[str] = None) -> Tuple[Any, str, str]:
    """
    Get an authenticated Calendar API service object.

    Args:
        account: Optional account name (defaults to the default account)

    Returns:
        Tuple of (Calendar API service object, resolved account name,
        calendar id to operate on)
    """
    name, account_config = get_account(account)
    creds = get_credentials(name, account_config)
    calendar_id = account_config.get("calendar_id") or DEFAULT_CALENDAR_ID
    logger.debug(f"Building Calendar service for account '{name}' (calendar {calendar_id})")
    return build("calendar", "v3", credentials=creds, cache_discovery=False), name, calendar_id
