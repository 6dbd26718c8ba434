"""Google Calendar event operations."""

import logging
from datetime import datetime
from typing import Dict, Any, Optional, List, Tuple

from ..dates import parse_rfc3339, localize, to_rfc3339
from ..timing import time_api_call
from .service import get_calendar_service

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def _parse_event_time(when: Optional[dict]) -> Tuple[Optional[datetime], bool]:
    """
    Parse an event start/end object.

    Returns:
        Tuple of (aware datetime or None, True if it is an all-day date)
    """
    if not when:
        return None, False
    if when.get("dateTime"):
        return parse_rfc3339(when["dateTime"]), False
    if when.get("date"):
        try:
            return localize(datetime.strptime(when["date"], DATE_FORMAT)), True
        except ValueError:
            logger.debug(f"Unparseable event date: {when['date']}")
    return None, False


def _format_event_time(when: datetime, all_day: bool) -> dict:
    if all_day:
        return {"date": when.strftime(DATE_FORMAT)}
    return {"dateTime": to_rfc3339(when)}


def _to_summary(event: dict, account_name: str, calendar_id: str) -> Dict[str, Any]:
    start, all_day = _parse_event_time(event.get("start"))
    end, _ = _parse_event_time(event.get("end"))
    return {
        "id": event.get("id"),
        "account": account_name,
        "calendar_id": calendar_id,
        "summary": event.get("summary", ""),
        "start": start,
        "end": end,
        "location": event.get("location", ""),
        "status": event.get("status", ""),
        "all_day": all_day,
    }


def _to_detail(event: dict, account_name: str, calendar_id: str) -> Dict[str, Any]:
    detail = _to_summary(event, account_name, calendar_id)
    detail.update({
        "description": event.get("description", ""),
        "attendees": [a.get("email") for a in event.get("attendees", []) if a.get("email")],
        "organizer": (event.get("organizer") or {}).get("email", ""),
        "html_link": event.get("htmlLink", ""),
        "created": parse_rfc3339(event.get("created")),
        "updated": parse_rfc3339(event.get("updated")),
    })
    return detail


@time_api_call
def list_events(
    time_min: datetime,
    time_max: datetime,
    max_results: int = 50,
    account: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    List events in a time window, recurring events expanded.

    Args:
        time_min: Window start (inclusive)
        time_max: Window end (exclusive)
        max_results: Maximum number of events (0 means API default)
        account: Optional account name (defaults to the default account)

    Returns:
        List of event summary dicts ordered by start time:
            id, account, calendar_id, summary, start, end, location,
            status, all_day
    """
    service, account_name, calendar_id = get_calendar_service(account)
    logger.debug(
        f"[{account_name}] Listing events in {calendar_id} "
        f"from {to_rfc3339(time_min)} to {to_rfc3339(time_max)}"
    )

    list_kwargs = {
        "calendarId": calendar_id,
        "timeMin": to_rfc3339(time_min),
        "timeMax": to_rfc3339(time_max),
        "singleEvents": True,
        "orderBy": "startTime",
    }
    if max_results and max_results > 0:
        list_kwargs["maxResults"] = max_results

    resp = service.events().list(**list_kwargs).execute()
    events = [_to_summary(e, account_name, calendar_id) for e in resp.get("items", [])]

    logger.debug(f"[{account_name}] Found {len(events)} events")
    return events


@time_api_call
def get_event(event_id: str, account: Optional[str] = None) -> Dict[str, Any]:
    """
    Get one event with its full details.

    Returns:
        Event summary fields plus description, attendees, organizer,
        html_link, created and updated
    """
    service, account_name, calendar_id = get_calendar_service(account)
    logger.debug(f"[{account_name}] Retrieving event {event_id}")
    event = service.events().get(calendarId=calendar_id, eventId=event_id).execute()
    return _to_detail(event, account_name, calendar_id)


@time_api_call
def create_event(
    summary: str,
    start: datetime,
    end: datetime,
    description: Optional[str] = None,
    location: Optional[str] = None,
    all_day: bool = False,
    attendees: Optional[List[str]] = None,
    account: Optional[str] = None,
) -> str:
    """
    Create a calendar event.

    All-day events are written with a start/end date, timed events with
    an RFC 3339 dateTime carrying the offset.

    Returns:
        The new event's id
    """
    service, account_name, calendar_id = get_calendar_service(account)

    event = {
        "summary": summary,
        "start": _format_event_time(start, all_day),
        "end": _format_event_time(end, all_day),
    }
    if description:
        event["description"] = description
    if location:
        event["location"] = location
    if attendees:
        event["attendees"] = [{"email": email} for email in attendees]

    created = service.events().insert(calendarId=calendar_id, body=event).execute()
    logger.info(f"[{account_name}] Created event {created.get('id')}: '{summary}'")
    return created.get("id")


@time_api_call
def update_event(
    event_id: str,
    summary: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    description: Optional[str] = None,
    location: Optional[str] = None,
    all_day: bool = False,
    attendees: Optional[List[str]] = None,
    account: Optional[str] = None,
):
    """
    Update an event in place.

    The current event is fetched and only the provided fields are changed;
    a non-empty attendees list replaces the existing attendees.
    """
    service, account_name, calendar_id = get_calendar_service(account)
    event = service.events().get(calendarId=calendar_id, eventId=event_id).execute()

    if summary:
        event["summary"] = summary
    if description:
        event["description"] = description
    if location:
        event["location"] = location
    if start:
        event["start"] = _format_event_time(start, all_day)
    if end:
        event["end"] = _format_event_time(end, all_day)
    if attendees:
        event["attendees"] = [{"email": email} for email in attendees]

    service.events().update(calendarId=calendar_id, eventId=event_id, body=event).execute()
    logger.info(f"[{account_name}] Updated event {event_id}")


@time_api_call
def delete_event(event_id: str, account: Optional[str] = None):
    """Delete an event."""
    service, account_name, calendar_id = get_calendar_service(account)
    service.events().delete(calendarId=calendar_id, eventId=event_id).execute()
    logger.info(f"[{account_name}] Deleted event {event_id}")


@time_api_call
def list_calendars(account: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    List the calendars visible to an account.

    Returns:
        List of dicts with id, summary, description, primary
    """
    service, account_name, _ = get_calendar_service(account)
    resp = service.calendarList().list().execute()
    calendars = [
        {
            "id": cal.get("id"),
            "summary": cal.get("summary", ""),
            "description": cal.get("description", ""),
            "primary": bool(cal.get("primary", False)),
        }
        for cal in resp.get("items", [])
    ]
    logger.debug(f"[{account_name}] Found {len(calendars)} calendars")
    return calendars
