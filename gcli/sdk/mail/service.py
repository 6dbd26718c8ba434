"""Gmail service factory for the gcli SDK."""

import logging
from typing import Any, Dict, Optional, Tuple

from googleapiclient.discovery import build

from ..accounts import get_account
from ..auth import get_credentials

logger = logging.getLogger(__name__)


def build_gmail_service(account_name: str, account: Dict[str, Any]) -> Any:
    """Build a Gmail API service object for an already-resolved account."""
    creds = get_credentials(account_name, account)
    logger.debug(f"Building Gmail service for account '{account_name}'")
    return build("gmail", "v1", credentials=creds, cache_discovery=False)


def get_gmail_service(account: Optional[str] = None) -> Tuple[Any, str]:
    """
    Get an authenticated Gmail API service object.

    Args:
        account: Optional account name (defaults to the default account)

    Returns:
        Tuple of (Gmail API service object, resolved account name)

    Raises:
        NoDefaultAccountError: If no account given and no default set
        AccountNotFoundError: If the account does not exist
        AuthError: If the account has no usable token
    """
    name, account_config = get_account(account)
    return build_gmail_service(name, account_config), name
