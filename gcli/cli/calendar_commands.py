"""CLI commands for Google Calendar."""

import logging
import sys
from datetime import timedelta

import click
from click_option_group import optgroup, MutuallyExclusiveOptionGroup

from gcli.sdk import calendar as sdk_calendar
from gcli.sdk import dates
from gcli.sdk.exceptions import ValidationError
from gcli.sdk.fanout import fan_out, chronological, get_fanout_timeout
from . import output
from .decorators import require_accounts, handle_errors, resolve_accounts, split_addresses

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(days=7)


def list_window(from_str, to_str):
    """
    Compute the event listing window from --from/--to.

    Defaults to now until seven days after the start; --to includes the
    whole of that day.
    """
    time_min = dates.parse_date(from_str) if from_str else dates.now()
    if to_str:
        time_max = dates.parse_date(to_str) + timedelta(days=1) - timedelta(seconds=1)
    else:
        time_max = time_min + DEFAULT_WINDOW
    if time_max <= time_min:
        raise ValidationError("--to must not be before --from")
    return time_min, time_max


def _parse_when(value, all_day):
    if value is None:
        return None
    return dates.parse_date(value) if all_day else dates.parse_datetime(value)


def event_options(required: bool):
    """Options shared by add and update."""
    def decorator(f):
        options = [
            click.option("-a", "--account", default=None, help="Account to use (default: default account)."),
            click.option("-s", "--summary", required=required, help="Event title."),
            click.option("-d", "--description", default=None, help="Event description."),
            click.option("-l", "--location", default=None, help="Event location."),
            click.option("--start", required=required, help="Start time (or date with --all-day)."),
            click.option("--end", required=required, help="End time (or date with --all-day)."),
            click.option("--all-day", is_flag=True, help="All-day event; --start/--end are dates."),
            click.option("--attendees", multiple=True, help="Attendee address (repeatable or comma-separated)."),
        ]
        for option in reversed(options):
            f = option(f)
        return f
    return decorator


@click.group()
def cal():
    """List and manage Google Calendar events."""
    pass


@cal.command("list")
@optgroup.group("Account selection", cls=MutuallyExclusiveOptionGroup)
@optgroup.option("-a", "--account", default=None, help="Account to list (default: default account).")
@optgroup.option("--all", "all_accounts", is_flag=True, help="List from all accounts.")
@click.option("--from", "from_", default=None, help="Start date (YYYY-MM-DD, default: now).")
@click.option("--to", "to", default=None, help="End date, inclusive (YYYY-MM-DD, default: start + 7 days).")
@click.option("-n", "--limit", type=int, default=50, show_default=True,
              help="Maximum number of events per account.")
@click.pass_obj
@handle_errors
@require_accounts
def list_cmd(obj, account, all_accounts, from_, to, limit):
    """List upcoming events from one or all accounts.

    \b
    Examples:
      gcli cal list                          # Next 7 days, default account
      gcli cal list --all                    # Every account
      gcli cal list --from 2024-12-01 --to 2024-12-31
    """
    time_min, time_max = list_window(from_, to)
    names = resolve_accounts(account, all_accounts)

    events, errors = fan_out(
        names,
        lambda name: sdk_calendar.list_events(time_min, time_max, max_results=limit, account=name),
        sort_key=chronological("start"),
        timeout=get_fanout_timeout(),
    )

    for message in errors:
        output.error(message)
    output.print_events(events, json_output=obj["json"])

    if errors and len(errors) == len(names):
        sys.exit(1)


@cal.command("get")
@click.argument("event_id")
@click.option("-a", "--account", default=None, help="Account to use (default: default account).")
@click.pass_obj
@handle_errors
@require_accounts
def get_cmd(obj, event_id, account):
    """Show one event with its details."""
    event = sdk_calendar.get_event(event_id, account=account)
    output.print_event_detail(event, json_output=obj["json"])


@cal.command("add")
@event_options(required=True)
@click.pass_obj
@handle_errors
@require_accounts
def add_cmd(obj, account, summary, description, location, start, end, all_day, attendees):
    """Create a calendar event.

    \b
    Examples:
      gcli cal add -s Meeting --start 2024-12-25T10:00 --end 2024-12-25T11:00
      gcli cal add -s Holiday --start 2024-12-25 --end 2024-12-26 --all-day
    """
    start_dt = _parse_when(start, all_day)
    end_dt = _parse_when(end, all_day)
    event_id = sdk_calendar.create_event(
        summary, start_dt, end_dt,
        description=description, location=location, all_day=all_day,
        attendees=split_addresses(attendees), account=account,
    )
    if obj["json"]:
        output.print_json({"id": event_id})
        return
    output.success(f"Event created (ID: {event_id})")


@cal.command("update")
@click.argument("event_id")
@event_options(required=False)
@click.pass_obj
@handle_errors
@require_accounts
def update_cmd(obj, event_id, account, summary, description, location, start, end, all_day, attendees):
    """Update an event; only the given fields change."""
    sdk_calendar.update_event(
        event_id,
        summary=summary,
        start=_parse_when(start, all_day),
        end=_parse_when(end, all_day),
        description=description,
        location=location,
        all_day=all_day,
        attendees=split_addresses(attendees),
        account=account,
    )
    output.success(f"Event {event_id} updated")


@cal.command("delete")
@click.argument("event_id")
@click.option("-a", "--account", default=None, help="Account to use (default: default account).")
@handle_errors
@require_accounts
def delete_cmd(event_id, account):
    """Delete an event."""
    sdk_calendar.delete_event(event_id, account=account)
    output.success(f"Event {event_id} deleted")


@cal.command("calendars")
@click.option("-a", "--account", default=None, help="Account to use (default: default account).")
@click.pass_obj
@handle_errors
@require_accounts
def calendars_cmd(obj, account):
    """List the calendars an account can see."""
    output.print_calendars(sdk_calendar.list_calendars(account=account), json_output=obj["json"])
