"""Authentication and credential management for the gcli SDK.

Each account carries its own OAuth client (client_id / client_secret) in
config.yaml and its own authorized-user token in tokens/<name>.json.
Tokens are refreshed on load and written back when the refresh changed them.
"""

import os
import json
import tempfile
import logging
from pathlib import Path
from typing import Any, Dict

from .config import get_tokens_dir, ensure_config_dir
from .exceptions import AuthError

logger = logging.getLogger(__name__)

# Scopes required for Gmail and Calendar access
SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.compose",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/calendar.readonly",
    "https://www.googleapis.com/auth/calendar.events",
]

AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"


def get_token_path(account_name: str) -> Path:
    """Get the token file path for a specific account."""
    return get_tokens_dir() / f"{account_name}.json"


def token_exists(account_name: str) -> bool:
    """Check if a token has been stored for the account."""
    return get_token_path(account_name).exists()


def remove_token(account_name: str) -> bool:
    """
    Remove the token file for an account.

    Returns:
        True if a token was removed, False if none existed
    """
    token_path = get_token_path(account_name)
    if not token_path.exists():
        return False
    token_path.unlink()
    logger.debug(f"Removed token for account '{account_name}'")
    return True


def build_client_config(account: Dict[str, Any]) -> dict:
    """Build an installed-app client config from an account's client credentials."""
    return {
        "installed": {
            "client_id": account.get("client_id"),
            "client_secret": account.get("client_secret"),
            "auth_uri": AUTH_URI,
            "token_uri": TOKEN_URI,
            "redirect_uris": ["http://localhost"],
        }
    }


def save_token(account_name: str, creds) -> None:
    """
    Persist credentials for an account.

    The token is written to a temp file in the tokens directory and then
    moved into place, so a failed write never leaves a truncated token.
    """
    ensure_config_dir()
    token_data = json.loads(creds.to_json())
    token_data["type"] = "authorized_user"

    token_path = get_token_path(account_name)
    temp_fd, temp_path = tempfile.mkstemp(dir=token_path.parent, suffix='.tmp')
    try:
        with os.fdopen(temp_fd, 'w') as f:
            json.dump(token_data, f, indent=2)
        os.chmod(temp_path, 0o600)
        os.replace(temp_path, token_path)
    except Exception:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise
    logger.debug(f"Token saved to {token_path}")


def get_credentials(account_name: str, account: Dict[str, Any]) -> Any:
    """
    Load credentials for an account, refreshing them if needed.

    Args:
        account_name: Account name (used to locate the token file)
        account: Account config dict (client_id, client_secret, ...)

    Returns:
        google.oauth2.credentials.Credentials

    Raises:
        AuthError: If no token is stored, the token is unreadable, or the
                   refresh fails
    """
    from google.oauth2.credentials import Credentials
    from google.auth.transport.requests import Request

    token_path = get_token_path(account_name)
    if not token_path.exists():
        raise AuthError(
            f"no token found for account '{account_name}' - "
            f"run 'gcli auth add {account_name}' first"
        )

    try:
        creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)
    except (ValueError, json.JSONDecodeError) as e:
        raise AuthError(f"failed to read token for account '{account_name}': {e}") from e

    if creds.valid:
        return creds

    if not creds.refresh_token:
        raise AuthError(
            f"credentials for account '{account_name}' expired and no refresh token "
            f"is available - run 'gcli auth reauth {account_name}'"
        )

    previous_token = creds.token
    try:
        creds.refresh(Request())
    except Exception as e:
        raise AuthError(f"failed to refresh token: {e}") from e

    if creds.token != previous_token:
        try:
            save_token(account_name, creds)
        except OSError as e:
            logger.warning(f"Failed to save refreshed token for '{account_name}': {e}")

    return creds


def authenticate_account(account_name: str, account: Dict[str, Any]) -> Any:
    """
    Run the OAuth browser flow for an account and store the resulting token.

    Args:
        account_name: Account name
        account: Account config dict with client_id and client_secret

    Returns:
        The authorized credentials

    Raises:
        AuthError: If the flow fails or is cancelled
    """
    from google_auth_oauthlib.flow import InstalledAppFlow

    if not account.get("client_id") or not account.get("client_secret"):
        raise AuthError("client ID and client secret are required")

    logger.info(f"Requesting OAuth token for account '{account_name}'")
    try:
        flow = InstalledAppFlow.from_client_config(build_client_config(account), SCOPES)
        creds = flow.run_local_server(port=0)
    except Exception as e:
        raise AuthError(f"failed to complete OAuth flow: {e}") from e

    logger.info("User authorization completed via browser.")
    save_token(account_name, creds)
    return creds
