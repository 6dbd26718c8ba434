"""Presentation helpers for the gcli CLI.

Every function takes an explicit json_output flag: JSON mode prints the raw
SDK dicts, text mode prints fixed-width tables. Columns are padded before
colouring so ANSI codes don't break alignment.
"""

import json
from datetime import date, datetime
from typing import Any, Dict, List

import click

from gcli.sdk.mail.scheduled import get_status, STATUS_SENT, STATUS_ERROR

RULE_WIDTH = 80


def _json_default(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def print_json(data: Any):
    """Print data as indented JSON."""
    click.echo(json.dumps(data, indent=2, default=_json_default))


def truncate(text: str, max_len: int) -> str:
    """Shorten text to max_len characters, ending in '...' when cut."""
    text = text or ""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[:max_len]
    return text[:max_len - 3] + "..."


def _fmt(dt: datetime, fmt: str = "%Y-%m-%d %H:%M") -> str:
    if dt is None:
        return "-"
    return dt.astimezone().strftime(fmt)


def success(message: str):
    click.secho(f"✓ {message}", fg="green")


def info(message: str):
    click.echo(message)


def warning(message: str):
    click.secho(f"Warning: {message}", fg="yellow", err=True)


def error(message: str):
    click.secho(f"Error: {message}", fg="red", err=True)


def print_emails(emails: List[Dict[str, Any]], json_output: bool = False):
    """Print email summaries."""
    if json_output:
        print_json(emails)
        return

    if not emails:
        click.echo("No emails found.")
        return

    click.echo(f"{'ID':<16}  {'FROM':<30}  {'SUBJECT':<40}  {'DATE':<16}  {'ACCOUNT'}")
    click.echo("-" * 120)
    for email in emails:
        click.echo(
            f"{truncate(email['id'], 16):<16}  "
            f"{truncate(email.get('from'), 30):<30}  "
            f"{truncate(email.get('subject'), 40):<40}  "
            f"{_fmt(email.get('date')):<16}  "
            f"{email.get('account') or '-'}"
        )


def print_email_detail(email: Dict[str, Any], json_output: bool = False):
    """Print one email with headers and body."""
    if json_output:
        print_json(email)
        return

    click.echo("-" * RULE_WIDTH)
    click.echo(f"ID:      {email['id']}")
    if email.get("account"):
        click.echo(f"Account: {email['account']}")
    click.echo(f"From:    {email.get('from', '')}")
    click.echo(f"To:      {', '.join(email.get('to', []))}")
    if email.get("cc"):
        click.echo(f"CC:      {', '.join(email['cc'])}")
    click.echo(f"Subject: {email.get('subject', '')}")
    click.echo(f"Date:    {_fmt(email.get('date'), '%a, %d %b %Y %H:%M:%S %Z')}")
    if email.get("attachments"):
        click.echo(f"Attachments: {', '.join(email['attachments'])}")
    click.echo("-" * RULE_WIDTH)
    click.echo()
    click.echo(email.get("body", ""))
    click.echo()


def print_events(events: List[Dict[str, Any]], json_output: bool = False):
    """Print calendar event summaries."""
    if json_output:
        print_json(events)
        return

    if not events:
        click.echo("No events found.")
        return

    click.echo(
        f"{'ID':<16}  {'SUMMARY':<35}  {'START':<16}  {'END':<7}  "
        f"{'LOCATION':<20}  {'ACCOUNT'}"
    )
    click.echo("-" * 120)
    for event in events:
        if event.get("all_day"):
            start = _fmt(event.get("start"), "%Y-%m-%d")
            end = "All day"
        else:
            start = _fmt(event.get("start"))
            end = _fmt(event.get("end"), "%H:%M")
        click.echo(
            f"{truncate(event['id'], 16):<16}  "
            f"{truncate(event.get('summary'), 35):<35}  "
            f"{start:<16}  {end:<7}  "
            f"{truncate(event.get('location'), 20) or '-':<20}  "
            f"{event.get('account') or '-'}"
        )


def print_event_detail(event: Dict[str, Any], json_output: bool = False):
    """Print one calendar event with its details."""
    if json_output:
        print_json(event)
        return

    click.echo("-" * RULE_WIDTH)
    click.echo(f"ID:        {event['id']}")
    if event.get("account"):
        click.echo(f"Account:   {event['account']}")
    click.echo(f"Summary:   {event.get('summary', '')}")
    if event.get("all_day"):
        click.echo(f"Date:      {_fmt(event.get('start'), '%a, %d %b %Y')} (All day)")
    else:
        click.echo(f"Start:     {_fmt(event.get('start'), '%a, %d %b %Y %H:%M %Z')}")
        click.echo(f"End:       {_fmt(event.get('end'), '%a, %d %b %Y %H:%M %Z')}")
    if event.get("location"):
        click.echo(f"Location:  {event['location']}")
    click.echo(f"Status:    {event.get('status', '')}")
    if event.get("organizer"):
        click.echo(f"Organizer: {event['organizer']}")
    if event.get("attendees"):
        click.echo(f"Attendees: {', '.join(event['attendees'])}")
    if event.get("html_link"):
        click.echo(f"Link:      {event['html_link']}")
    click.echo("-" * RULE_WIDTH)
    if event.get("description"):
        click.echo()
        click.echo(event["description"])
        click.echo()


def format_scheduled_status(email: Dict[str, Any], width: int = 0) -> str:
    """Format a scheduled email's status as a coloured string."""
    status = get_status(email)
    if status == STATUS_SENT:
        text, color = "Sent", "green"
    elif status == STATUS_ERROR:
        text, color = "Error", "red"
    else:
        text, color = "Pending", "yellow"

    if width > 0:
        text = text.ljust(width)
    return click.style(text, fg=color)


def print_scheduled_emails(emails: List[Dict[str, Any]], json_output: bool = False):
    """Print scheduled emails with their status."""
    if json_output:
        print_json(emails)
        return

    if not emails:
        click.echo("No scheduled emails found.")
        return

    click.echo(
        f"{'ID':<8}  {'TO':<25}  {'SUBJECT':<30}  {'SCHEDULED FOR':<16}  "
        f"{'STATUS':<8}  {'ACCOUNT'}"
    )
    click.echo("-" * 110)
    for email in emails:
        click.echo(
            f"{truncate(email['id'], 8):<8}  "
            f"{truncate(', '.join(email.get('to', [])), 25):<25}  "
            f"{truncate(email.get('subject'), 30):<30}  "
            f"{_fmt(email.get('scheduled_at')):<16}  "
            f"{format_scheduled_status(email, width=8)}  "
            f"{email.get('account', '')}"
        )
        if email.get("error"):
            click.secho(f"  {email['error']}", fg="red")


def print_accounts(accounts: List[Dict[str, Any]], json_output: bool = False):
    """Print configured accounts."""
    if json_output:
        print_json(accounts)
        return

    if not accounts:
        click.echo("No accounts configured.")
        click.echo("\nRun 'gcli auth add <name>' to add an account.")
        return

    click.echo(f"{'NAME':<16}  {'DEFAULT':<7}  {'AUTH STATUS':<17}  {'CALENDAR'}")
    click.echo("-" * 70)
    for account in accounts:
        if account["is_default"]:
            name_col = click.style(account["name"].ljust(16), fg="green", bold=True)
        else:
            name_col = account["name"].ljust(16)
        default_col = ("*" if account["is_default"] else "").ljust(7)
        if account["has_token"]:
            status_col = click.style("authenticated".ljust(17), fg="green")
        else:
            status_col = click.style("not authenticated".ljust(17), fg="red")
        click.echo(f"{name_col}  {default_col}  {status_col}  {account.get('calendar_id') or 'primary'}")


def print_calendars(calendars: List[Dict[str, Any]], json_output: bool = False):
    """Print the calendars visible to an account."""
    if json_output:
        print_json(calendars)
        return

    if not calendars:
        click.echo("No calendars found.")
        return

    click.echo(f"{'ID':<50}  {'SUMMARY':<30}  {'PRIMARY'}")
    click.echo("-" * 92)
    for cal in calendars:
        click.echo(
            f"{truncate(cal['id'], 50):<50}  "
            f"{truncate(cal.get('summary'), 30):<30}  "
            f"{'*' if cal.get('primary') else ''}"
        )


def print_dispatch_result(result: Dict[str, Any], json_output: bool = False):
    """Print the outcome of a scheduled email dispatch run."""
    if json_output:
        print_json(result)
        return

    due = result["due"]
    if not due:
        click.echo("No scheduled emails are due.")
        return

    if result["dry_run"]:
        click.echo(f"Dry run: {len(due)} scheduled email(s) would be sent:")
        for email in due:
            click.echo(
                f"  {truncate(email['id'], 8)}  [{email['account']}]  "
                f"{', '.join(email.get('to', []))}: {email.get('subject', '')}"
            )
        return

    for email in result["sent"]:
        success(f"Sent '{email.get('subject', '')}' to {', '.join(email.get('to', []))} [{email['account']}]")
    for email in result["errors"]:
        error(f"Failed to send '{email.get('subject', '')}' [{email['account']}]: {email['error']}")

    click.echo(f"\nSent: {result['sent_count']}, Failed: {result['error_count']}")
