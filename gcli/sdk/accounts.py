"""Account registry for multi-account support.

Accounts let one installation manage several Google identities (e.g. "work"
and "personal"). Each account stores its own OAuth client credentials and an
optional calendar id in config.yaml; its token lives in tokens/<name>.json.
"""

import re
import logging
from typing import Optional, List, Dict, Any, Tuple

from .config import load_config, save_config
from .exceptions import (
    AccountNotFoundError,
    NoDefaultAccountError,
    AccountExistsError,
    InvalidAccountNameError,
)

logger = logging.getLogger(__name__)

# Valid account name pattern: alphanumeric, hyphen, underscore, 1-32 chars
ACCOUNT_NAME_PATTERN = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9_-]{0,31}$')

DEFAULT_CALENDAR_ID = "primary"


def is_valid_account_name(name: str) -> bool:
    """Check if an account name is valid."""
    return bool(name) and bool(ACCOUNT_NAME_PATTERN.match(name))


def has_accounts() -> bool:
    """Return True if at least one account is configured."""
    return bool(load_config()["accounts"])


def get_all_account_names() -> List[str]:
    """Return all configured account names, sorted."""
    return sorted(load_config()["accounts"].keys())


def get_default_account_name() -> Optional[str]:
    """Return the default account name, or None if unset."""
    return load_config().get("default_account")


def get_account(name: Optional[str] = None) -> Tuple[str, Dict[str, Any]]:
    """
    Resolve an account by name, or the default account if name is empty.

    Returns:
        Tuple of (account name, account config dict)

    Raises:
        NoDefaultAccountError: If no name is given and no default is set
        AccountNotFoundError: If the account does not exist
    """
    config = load_config()
    if not name:
        name = config.get("default_account")

    if not name:
        raise NoDefaultAccountError("no account specified and no default account set")

    account = config["accounts"].get(name)
    if account is None:
        raise AccountNotFoundError(f"account '{name}' does not exist")

    return name, dict(account)


def list_accounts() -> List[Dict[str, Any]]:
    """
    List all configured accounts.

    Returns a list of dicts with:
        - name: account name
        - is_default: True if this is the default account
        - has_token: True if an OAuth token has been stored
        - calendar_id: configured calendar id (None means primary)
    """
    from .auth import token_exists

    config = load_config()
    default = config.get("default_account")
    accounts = []
    for name in sorted(config["accounts"].keys()):
        account = config["accounts"][name] or {}
        accounts.append({
            "name": name,
            "is_default": name == default,
            "has_token": token_exists(name),
            "calendar_id": account.get("calendar_id"),
        })
    return accounts


def add_account(name: str, client_id: str, client_secret: str,
                calendar_id: Optional[str] = None):
    """
    Add a new account to the configuration.

    The first account added becomes the default.

    Raises:
        InvalidAccountNameError: If the name has unsupported characters
        AccountExistsError: If an account with this name already exists
    """
    if not is_valid_account_name(name):
        raise InvalidAccountNameError(
            f"invalid account name '{name}': use alphanumeric characters, "
            "hyphens, or underscores (1-32 chars)"
        )

    config = load_config()
    if name in config["accounts"]:
        raise AccountExistsError(f"account '{name}' already exists")

    account = {"client_id": client_id, "client_secret": client_secret}
    if calendar_id:
        account["calendar_id"] = calendar_id
    config["accounts"][name] = account

    if not config.get("default_account"):
        config["default_account"] = name

    save_config(config)
    logger.info(f"Added account '{name}'")


def update_account(name: str, **fields):
    """
    Update fields (client_id, client_secret, calendar_id) of an existing account.

    Raises:
        AccountNotFoundError: If the account does not exist
    """
    config = load_config()
    if name not in config["accounts"]:
        raise AccountNotFoundError(f"account '{name}' does not exist")

    account = config["accounts"][name] or {}
    account.update(fields)
    config["accounts"][name] = account
    save_config(config)
    logger.debug(f"Updated account '{name}': {', '.join(fields)}")


def set_default_account(name: str):
    """
    Set the default account.

    Raises:
        AccountNotFoundError: If the account does not exist
    """
    config = load_config()
    if name not in config["accounts"]:
        raise AccountNotFoundError(f"account '{name}' does not exist")

    config["default_account"] = name
    save_config(config)
    logger.info(f"Default account set to '{name}'")


def remove_account(name: str):
    """
    Remove an account and its stored token.

    If the removed account was the default, the first remaining account
    (alphabetically) becomes the new default.

    Raises:
        AccountNotFoundError: If the account does not exist
    """
    from .auth import remove_token

    config = load_config()
    if name not in config["accounts"]:
        raise AccountNotFoundError(f"account '{name}' does not exist")

    del config["accounts"][name]

    if config.get("default_account") == name:
        remaining = sorted(config["accounts"].keys())
        config["default_account"] = remaining[0] if remaining else None

    remove_token(name)
    save_config(config)
    logger.info(f"Removed account '{name}'")
