"""CLI commands for viewing and editing the configuration."""

import click

from gcli.sdk import accounts as sdk_accounts
from gcli.sdk.config import load_config, get_config_dir, get_config_file_path
from gcli.sdk.exceptions import ConfigError
from . import output
from .decorators import handle_errors


@click.group("config")
def config_group():
    """View and edit gcli configuration."""
    pass


def _redacted(config: dict) -> dict:
    accounts = {}
    for name, account in (config.get("accounts") or {}).items():
        account = dict(account or {})
        if account.get("client_secret"):
            account["client_secret"] = "****"
        accounts[name] = account
    return {"default_account": config.get("default_account"), "accounts": accounts}


@config_group.command("show")
@click.pass_obj
@handle_errors
def show_cmd(obj):
    """Show the current configuration (client secrets are hidden)."""
    config = load_config()

    if obj["json"]:
        output.print_json(_redacted(config))
        return

    click.echo(f"Configuration directory: {get_config_dir()}\n")

    if not config["accounts"]:
        click.echo("No accounts configured.")
        click.echo("\nRun 'gcli auth add <name>' to add an account.")
        return

    click.echo(f"Default account: {config.get('default_account') or '-'}\n")
    click.echo("Accounts:")
    for name in sorted(config["accounts"]):
        account = config["accounts"][name] or {}
        marker = " (default)" if name == config.get("default_account") else ""
        click.echo(f"  {name}{marker}")
        click.echo(f"    Calendar ID: {account.get('calendar_id') or sdk_accounts.DEFAULT_CALENDAR_ID}")
        click.echo(f"    Client ID: {output.truncate(account.get('client_id'), 20)}")


@config_group.command("set")
@click.argument("key")
@click.argument("value")
@handle_errors
def set_cmd(key, value):
    """Set a configuration value.

    \b
    Available keys:
      default-account <name>        Set the default account
      <account>.calendar-id <id>    Set the calendar ID for an account

    \b
    Examples:
      gcli config set default-account work
      gcli config set work.calendar-id "team@company.com"
    """
    if key == "default-account":
        sdk_accounts.set_default_account(value)
        output.success(f"Default account set to '{value}'")
        return

    account_name, _, prop = key.rpartition(".")
    if not account_name:
        raise ConfigError(f"unknown configuration key: {key}")
    if prop != "calendar-id":
        raise ConfigError(f"unknown property '{prop}' for account '{account_name}'")

    sdk_accounts.update_account(account_name, calendar_id=value)
    output.success(f"Calendar ID for '{account_name}' set to '{value}'")


@config_group.command("path")
def path_cmd():
    """Show the configuration file path."""
    click.echo(str(get_config_file_path()))
