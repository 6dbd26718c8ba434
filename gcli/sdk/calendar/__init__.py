"""Google Calendar operations for the gcli SDK.

Each account operates on its configured calendar_id, or "primary".

Example usage:
    from gcli.sdk import calendar

    events = calendar.list_events(start, end, account="work")
"""

from .service import get_calendar_service
from .events import (
    list_events,
    get_event,
    create_event,
    update_event,
    delete_event,
    list_calendars,
)

__all__ = [
    "get_calendar_service",
    "list_events",
    "get_event",
    "create_event",
    "update_event",
    "delete_event",
    "list_calendars",
]
