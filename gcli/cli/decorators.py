"""CLI decorators for account checks and error reporting.

Also contains shared helpers for account selection and address options.
"""

import logging
import sys
from functools import wraps
from typing import List, Optional

import click

from gcli.sdk.accounts import has_accounts, get_account, get_all_account_names
from gcli.sdk.exceptions import GCLIError, NoDefaultAccountError
from . import output

logger = logging.getLogger(__name__)


def show_account_guidance(has_any: bool = False):
    """Show guidance on how to get a usable account. Reusable across commands."""
    if not has_any:
        click.echo("\nTo get started:", err=True)
        click.echo("  gcli auth add <name>           # Add and authenticate an account", err=True)
    else:
        click.echo("\nTo fix:", err=True)
        click.echo("  gcli auth default <name>       # Choose a default account", err=True)
        click.echo("  gcli <command> -a <name>       # Or pick an account per command", err=True)


def require_accounts(f):
    """
    Decorator to ensure at least one account is configured before a command
    runs that talks to Gmail or Calendar.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not has_accounts():
            output.error("No accounts configured.")
            show_account_guidance(has_any=False)
            sys.exit(1)
        return f(*args, **kwargs)
    return decorated_function


def handle_errors(f):
    """
    Decorator reporting command failures on stderr and exiting with status 1.

    gcli errors (configuration, auth, validation, store) are printed as-is;
    anything else is also logged with its traceback.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (click.ClickException, click.Abort):
            raise
        except NoDefaultAccountError as e:
            output.error(str(e))
            show_account_guidance(has_any=True)
            sys.exit(1)
        except GCLIError as e:
            output.error(str(e))
            sys.exit(1)
        except Exception as e:
            logger.critical(f"An error occurred in '{f.__name__}': {e}", exc_info=True)
            output.error(str(e))
            sys.exit(1)
    return decorated_function


def resolve_accounts(account: Optional[str], all_accounts: bool) -> List[str]:
    """
    Turn -a/--all into the list of account names to query.

    Raises:
        NoDefaultAccountError, AccountNotFoundError: Resolving a single
            account failed (fatal before any query runs)
    """
    if all_accounts:
        return get_all_account_names()
    name, _ = get_account(account)
    return [name]


def split_addresses(values) -> List[str]:
    """Flatten repeated and comma-separated address options."""
    addresses = []
    for value in values or ():
        addresses.extend(a.strip() for a in value.split(",") if a.strip())
    return addresses
