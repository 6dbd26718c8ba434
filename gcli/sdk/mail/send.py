"""Gmail draft, send and schedule operations."""

import logging
import base64
from datetime import datetime
from email.mime.text import MIMEText
from typing import Dict, Any, Optional, List

from .. import dates
from ..accounts import get_account
from ..exceptions import ValidationError
from ..timing import time_api_call
from .service import get_gmail_service
from .scheduled import ScheduledEmailStore, get_scheduled_store

logger = logging.getLogger(__name__)


def build_raw_message(
    to: List[str],
    subject: str,
    body: str,
    cc: Optional[List[str]] = None,
    bcc: Optional[List[str]] = None,
    is_html: bool = False,
) -> str:
    """
    Build a base64url-encoded RFC 2822 message for the Gmail API.

    Recipient lists are joined into single comma-separated headers; empty
    cc/bcc lists produce no header.
    """
    message = MIMEText(body, "html" if is_html else "plain", "utf-8")
    message["To"] = ", ".join(to)
    if cc:
        message["Cc"] = ", ".join(cc)
    if bcc:
        message["Bcc"] = ", ".join(bcc)
    message["Subject"] = subject

    return base64.urlsafe_b64encode(message.as_bytes()).decode("utf-8")


def _validate_recipients(to: List[str]):
    if not to or not any(addr.strip() for addr in to):
        raise ValidationError("at least one recipient is required")


@time_api_call
def create_draft(
    to: List[str],
    subject: str,
    body: str,
    cc: Optional[List[str]] = None,
    bcc: Optional[List[str]] = None,
    is_html: bool = False,
    account: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a draft email in Gmail.

    Args:
        to: Recipient addresses
        subject: Email subject line
        body: Email body
        cc: Optional CC recipients
        bcc: Optional BCC recipients
        is_html: Send the body as text/html instead of text/plain
        account: Optional account name (defaults to the default account)

    Returns:
        Dict containing the draft id and the created message resource

    Raises:
        ValidationError: If no recipient is given
    """
    _validate_recipients(to)
    service, account_name = get_gmail_service(account)
    logger.debug(f"[{account_name}] Creating draft to: {', '.join(to)}, subject: {subject}")

    raw = build_raw_message(to, subject, body, cc=cc, bcc=bcc, is_html=is_html)
    result = service.users().drafts().create(
        userId="me",
        body={"message": {"raw": raw}}
    ).execute()

    logger.info(f"Draft created successfully. Draft ID: {result.get('id')}")

    return {
        "id": result.get("id"),
        "message": result.get("message", {}),
    }


@time_api_call
def send_draft(draft_id: str, account: Optional[str] = None) -> Dict[str, Any]:
    """
    Send an existing draft.

    Args:
        draft_id: The Gmail draft ID
        account: Optional account name (defaults to the default account)

    Returns:
        Dict containing:
            - id: Message ID of the sent email
            - threadId: Thread ID
            - labelIds: Labels applied to the sent message
    """
    service, account_name = get_gmail_service(account)
    logger.debug(f"[{account_name}] Sending draft {draft_id}")

    result = service.users().drafts().send(
        userId="me",
        body={"id": draft_id}
    ).execute()

    logger.info(f"Draft {draft_id} sent successfully. Message ID: {result.get('id')}")

    return {
        "id": result.get("id"),
        "threadId": result.get("threadId"),
        "labelIds": result.get("labelIds", []),
    }


@time_api_call
def send_message(
    to: List[str],
    subject: str,
    body: str,
    cc: Optional[List[str]] = None,
    bcc: Optional[List[str]] = None,
    is_html: bool = False,
    account: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Send an email immediately without creating a draft.

    Takes the same arguments as create_draft.

    Returns:
        Dict containing id, threadId and labelIds of the sent message
    """
    _validate_recipients(to)
    service, account_name = get_gmail_service(account)
    logger.debug(f"[{account_name}] Sending email to: {', '.join(to)}, subject: {subject}")

    raw = build_raw_message(to, subject, body, cc=cc, bcc=bcc, is_html=is_html)
    result = service.users().messages().send(
        userId="me",
        body={"raw": raw}
    ).execute()

    logger.info(f"Email sent successfully. Message ID: {result.get('id')}")

    return {
        "id": result.get("id"),
        "threadId": result.get("threadId"),
        "labelIds": result.get("labelIds", []),
    }


def schedule_email(
    to: List[str],
    subject: str,
    body: str,
    scheduled_at: datetime,
    cc: Optional[List[str]] = None,
    bcc: Optional[List[str]] = None,
    is_html: bool = False,
    account: Optional[str] = None,
    store: Optional[ScheduledEmailStore] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Schedule an email for later delivery.

    The draft is created in Gmail first; the local record is only added once
    the draft exists, so every stored record points at a real draft. Nothing
    is sent until `gcli mail scheduled send` runs after scheduled_at.

    Args:
        scheduled_at: When to send; must be in the future
        store: Scheduled-email store (defaults to the configured one)
        now: Reference time for the future check (defaults to the current time)

    Returns:
        The stored scheduled-email record

    Raises:
        ValidationError: If scheduled_at is not in the future or no
                         recipient is given
    """
    scheduled_at = dates.localize(scheduled_at)
    now = dates.localize(now) if now else dates.now()
    if scheduled_at <= now:
        raise ValidationError("scheduled time must be in the future")
    _validate_recipients(to)

    store = store or get_scheduled_store()
    account_name, _ = get_account(account)

    draft = create_draft(to, subject, body, cc=cc, bcc=bcc, is_html=is_html, account=account_name)

    return store.add({
        "account": account_name,
        "draft_id": draft["id"],
        "to": to,
        "cc": cc or [],
        "bcc": bcc or [],
        "subject": subject,
        "body": body,
        "is_html": is_html,
        "scheduled_at": scheduled_at,
    })

