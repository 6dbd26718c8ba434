"""Gmail operations for the gcli SDK.

Provides functions for listing, reading, drafting, sending and scheduling
Gmail messages.

Example usage:
    from gcli.sdk import mail

    # List unread messages of the default account
    messages = mail.list_messages("is:unread", max_results=10)

    # Read a specific message
    message = mail.read_message("message_id_here", account="work")

    # Schedule an email and dispatch it once due
    mail.schedule_email(["a@example.com"], "Hi", "Body", scheduled_at)
    mail.ScheduledEmailDispatcher().run()
"""

from .service import get_gmail_service
from .search import list_messages
from .read import read_message
from .send import create_draft, send_draft, send_message, schedule_email
from .scheduled import ScheduledEmailStore, get_scheduled_store, get_status
from .dispatch import ScheduledEmailDispatcher

__all__ = [
    "get_gmail_service",
    "list_messages",
    "read_message",
    "create_draft",
    "send_draft",
    "send_message",
    "schedule_email",
    "ScheduledEmailStore",
    "get_scheduled_store",
    "get_status",
    "ScheduledEmailDispatcher",
]
