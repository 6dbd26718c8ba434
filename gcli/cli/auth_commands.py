"""CLI commands for account management and authentication."""

import logging
import sys

import click

from gcli.sdk import accounts as sdk_accounts
from gcli.sdk import auth as sdk_auth
from gcli.sdk.exceptions import AuthError
from . import output
from .decorators import handle_errors

logger = logging.getLogger(__name__)


@click.group()
def auth():
    """Manage Google accounts and their OAuth tokens."""
    pass


@auth.command("add")
@click.argument("name")
@click.option("--client-id", default=None, help="Google OAuth client ID.")
@click.option("--client-secret", default=None, help="Google OAuth client secret.")
@click.option("--calendar-id", default=None, help="Calendar ID to use (default: primary).")
@handle_errors
def add_cmd(name, client_id, client_secret, calendar_id):
    """Add a Google account and authenticate it in the browser.

    Requires OAuth client credentials of the "Desktop app" type from the
    Google Cloud Console, with the Gmail and Calendar APIs enabled.

    \b
    Example:
      gcli auth add personal --client-id ID --client-secret SECRET
    """
    if name in sdk_accounts.get_all_account_names():
        output.error(f"account '{name}' already exists. Use 'gcli auth remove {name}' first.")
        sys.exit(1)

    if not client_id:
        client_id = click.prompt("Enter Google Client ID", default="", show_default=False).strip()
    if not client_secret:
        client_secret = click.prompt(
            "Enter Google Client Secret", default="", show_default=False, hide_input=True
        ).strip()
    if not client_id or not client_secret:
        output.error("client ID and client secret are required")
        sys.exit(1)

    sdk_accounts.add_account(name, client_id, client_secret, calendar_id=calendar_id)
    _, account = sdk_accounts.get_account(name)

    try:
        sdk_auth.authenticate_account(name, account)
    except AuthError as e:
        sdk_accounts.remove_account(name)
        output.error(f"authentication failed: {e}")
        sys.exit(1)

    output.success(f"Account '{name}' added and authenticated.")


@auth.command("list")
@click.pass_obj
@handle_errors
def list_cmd(obj):
    """List all configured accounts."""
    output.print_accounts(sdk_accounts.list_accounts(), json_output=obj["json"])


@auth.command("remove")
@click.argument("name")
@handle_errors
def remove_cmd(name):
    """Remove an account and its stored token."""
    sdk_accounts.remove_account(name)
    output.success(f"Account '{name}' removed.")


@auth.command("default")
@click.argument("name")
@handle_errors
def default_cmd(name):
    """Set the default account."""
    sdk_accounts.set_default_account(name)
    output.success(f"Default account set to '{name}'")


@auth.command("reauth")
@click.argument("name")
@handle_errors
def reauth_cmd(name):
    """Re-run the OAuth browser flow for an existing account."""
    name, account = sdk_accounts.get_account(name)
    sdk_auth.remove_token(name)
    try:
        sdk_auth.authenticate_account(name, account)
    except AuthError as e:
        output.error(f"authentication failed: {e}")
        sys.exit(1)
    output.success(f"Account '{name}' re-authenticated.")
