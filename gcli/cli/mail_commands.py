"""CLI commands for Gmail."""

import logging
import sys

import click
from click_option_group import (
    optgroup,
    MutuallyExclusiveOptionGroup,
    RequiredMutuallyExclusiveOptionGroup,
)

from gcli.sdk import mail as sdk_mail
from gcli.sdk import dates
from gcli.sdk.fanout import fan_out, chronological, get_fanout_timeout
from . import output
from .decorators import require_accounts, handle_errors, resolve_accounts, split_addresses

logger = logging.getLogger(__name__)


def compose_options(f):
    """Options shared by draft, send-now and schedule."""
    options = [
        click.option("-a", "--account", default=None, help="Account to use (default: default account)."),
        click.option("-t", "--to", "to", multiple=True, required=True,
                     help="Recipient address (repeatable or comma-separated)."),
        click.option("--cc", multiple=True, help="CC address (repeatable or comma-separated)."),
        click.option("--bcc", multiple=True, help="BCC address (repeatable or comma-separated)."),
        click.option("-s", "--subject", required=True, help="Email subject."),
        click.option("-b", "--body", required=True, help="Email body."),
        click.option("--html", "is_html", is_flag=True, help="Body is HTML."),
    ]
    for option in reversed(options):
        f = option(f)
    return f


@click.group()
def mail():
    """Read, draft, send and schedule Gmail messages."""
    pass


@mail.command("read")
@optgroup.group("Account selection", cls=MutuallyExclusiveOptionGroup)
@optgroup.option("-a", "--account", default=None, help="Account to read (default: default account).")
@optgroup.option("--all", "all_accounts", is_flag=True, help="Read from all accounts.")
@click.option("-q", "--query", default=None, help="Gmail search query.")
@click.option("-n", "--limit", type=int, default=25, show_default=True,
              help="Maximum number of emails per account.")
@click.pass_obj
@handle_errors
@require_accounts
def read_cmd(obj, account, all_accounts, query, limit):
    """List emails from one or all accounts.

    \b
    Examples:
      gcli mail read                      # Default account
      gcli mail read -a work              # Work account
      gcli mail read --all -q is:unread   # Unread mail everywhere
    """
    names = resolve_accounts(account, all_accounts)
    logger.debug(f"Reading mail from {', '.join(names)} with query: '{query}'")

    emails, errors = fan_out(
        names,
        lambda name: sdk_mail.list_messages(query, max_results=limit, account=name),
        sort_key=chronological("date"),
        timeout=get_fanout_timeout(),
    )

    for message in errors:
        output.error(message)
    output.print_emails(emails, json_output=obj["json"])

    if errors and len(errors) == len(names):
        sys.exit(1)


@mail.command("get")
@click.argument("message_id")
@click.option("-a", "--account", default=None, help="Account to use (default: default account).")
@click.pass_obj
@handle_errors
@require_accounts
def get_cmd(obj, message_id, account):
    """Show one email with its full body."""
    message = sdk_mail.read_message(message_id, account=account)
    output.print_email_detail(message, json_output=obj["json"])


@mail.command("draft")
@compose_options
@click.pass_obj
@handle_errors
@require_accounts
def draft_cmd(obj, account, to, cc, bcc, subject, body, is_html):
    """Create a draft email."""
    draft = sdk_mail.create_draft(
        split_addresses(to), subject, body,
        cc=split_addresses(cc), bcc=split_addresses(bcc),
        is_html=is_html, account=account,
    )
    if obj["json"]:
        output.print_json(draft)
        return
    output.success(f"Draft created (ID: {draft['id']})")
    output.info(f"Send it with: gcli mail send {draft['id']}")


@mail.command("send")
@click.argument("draft_id")
@click.option("-a", "--account", default=None, help="Account to use (default: default account).")
@click.pass_obj
@handle_errors
@require_accounts
def send_cmd(obj, draft_id, account):
    """Send an existing draft."""
    result = sdk_mail.send_draft(draft_id, account=account)
    if obj["json"]:
        output.print_json(result)
        return
    output.success(f"Email sent (Message ID: {result['id']})")


@mail.command("send-now")
@compose_options
@click.pass_obj
@handle_errors
@require_accounts
def send_now_cmd(obj, account, to, cc, bcc, subject, body, is_html):
    """Compose and send an email immediately."""
    result = sdk_mail.send_message(
        split_addresses(to), subject, body,
        cc=split_addresses(cc), bcc=split_addresses(bcc),
        is_html=is_html, account=account,
    )
    if obj["json"]:
        output.print_json(result)
        return
    output.success(f"Email sent (Message ID: {result['id']})")


@mail.command("schedule")
@compose_options
@click.option("--at", "at", required=True,
              help="When to send, e.g. 2024-12-25T10:00 (local time unless an offset is given).")
@click.pass_obj
@handle_errors
@require_accounts
def schedule_cmd(obj, account, to, cc, bcc, subject, body, is_html, at):
    """Create a draft and schedule it for later sending.

    Nothing is sent automatically: run 'gcli mail scheduled send' (for
    example from cron) to send every scheduled email that is due.

    \b
    Example:
      gcli mail schedule -t user@example.com -s Hello -b Message --at 2024-12-25T10:00
    """
    scheduled_at = dates.parse_datetime(at)
    record = sdk_mail.schedule_email(
        split_addresses(to), subject, body, scheduled_at,
        cc=split_addresses(cc), bcc=split_addresses(bcc),
        is_html=is_html, account=account,
    )
    if obj["json"]:
        output.print_json(record)
        return
    output.success(f"Email scheduled for {record['scheduled_at'].astimezone():%a, %d %b %Y %H:%M %Z}")
    output.info(f"Draft ID: {record['draft_id']}")
    output.info("Run 'gcli mail scheduled send' to send scheduled emails when ready")


@mail.group()
def scheduled():
    """Manage scheduled emails."""
    pass


@scheduled.command("list")
@click.option("-a", "--account", default=None, help="Only this account's emails.")
@click.option("--pending", is_flag=True, help="Show only emails that are due to be sent.")
@click.pass_obj
@handle_errors
def scheduled_list_cmd(obj, account, pending):
    """List scheduled emails."""
    store = sdk_mail.get_scheduled_store()
    if pending:
        emails = store.list_pending(account=account)
    else:
        emails = store.list_by_account(account)
    output.print_scheduled_emails(emails, json_output=obj["json"])


@scheduled.command("send")
@click.option("-a", "--account", default=None, help="Only send this account's emails.")
@click.option("--dry-run", is_flag=True, help="Show what would be sent without sending.")
@click.pass_obj
@handle_errors
def scheduled_send_cmd(obj, account, dry_run):
    """Send every scheduled email whose time has passed.

    Safe to run repeatedly: sent emails and emails that failed are not
    attempted again.
    """
    dispatcher = sdk_mail.ScheduledEmailDispatcher(store=sdk_mail.get_scheduled_store())
    result = dispatcher.run(account=account, dry_run=dry_run)
    output.print_dispatch_result(result, json_output=obj["json"])

    if result["error_count"] and not result["sent_count"]:
        sys.exit(1)


@scheduled.command("clear")
@click.option("-a", "--account", default=None, help="Only clear this account's emails.")
@optgroup.group("What to clear", cls=RequiredMutuallyExclusiveOptionGroup)
@optgroup.option("--sent", "sent_only", is_flag=True, help="Clear sent emails only.")
@optgroup.option("--all", "clear_all", is_flag=True, help="Clear all scheduled emails.")
@handle_errors
def scheduled_clear_cmd(account, sent_only, clear_all):
    """Remove scheduled emails from the local store."""
    store = sdk_mail.get_scheduled_store()
    if clear_all:
        removed = store.clear_all(account)
        output.success(f"Cleared {removed} scheduled email(s)")
    else:
        removed = store.clear_sent(account)
        output.success(f"Cleared {removed} sent scheduled email(s)")
