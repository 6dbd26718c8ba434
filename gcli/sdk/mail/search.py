"""Gmail message listing operations."""

import logging
from typing import List, Dict, Any, Optional

from googleapiclient.errors import HttpError

from ..dates import parse_email_date
from ..timing import time_api_call
from .service import get_gmail_service

logger = logging.getLogger(__name__)

SUMMARY_HEADERS = ["From", "Subject", "Date"]


@time_api_call
def list_messages(
    query: Optional[str] = None,
    max_results: int = 25,
    account: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    List Gmail messages matching a query.

    Args:
        query: Gmail search query (e.g., "is:unread"); None lists everything
        max_results: Maximum number of messages to return (0 means API default)
        account: Optional account name (defaults to the default account)

    Returns:
        List of email summary dicts with:
            id, account, from, subject, date (datetime or None), snippet,
            has_attachments
    """
    service, account_name = get_gmail_service(account)
    logger.debug(f"[{account_name}] Listing emails with query: '{query}'")

    list_kwargs = {"userId": "me"}
    if query:
        list_kwargs["q"] = query
    if max_results and max_results > 0:
        list_kwargs["maxResults"] = max_results

    results = service.users().messages().list(**list_kwargs).execute()
    messages = results.get("messages", [])

    if not messages:
        logger.debug(f"[{account_name}] No messages found matching the criteria.")
        return []

    summaries = []
    for message in messages:
        try:
            msg = service.users().messages().get(
                userId="me", id=message["id"], format="metadata",
                metadataHeaders=SUMMARY_HEADERS,
            ).execute()
        except HttpError as e:
            logger.debug(f"[{account_name}] Skipping message {message['id']}: {e}")
            continue

        summary = _to_summary(msg)
        summary["account"] = account_name
        summaries.append(summary)

    logger.debug(f"[{account_name}] Parsed {len(summaries)} message summaries")
    return summaries


def _to_summary(msg: dict) -> Dict[str, Any]:
    """Convert a metadata-format message into an email summary."""
    payload = msg.get("payload", {})
    summary = {
        "id": msg.get("id"),
        "account": None,
        "from": "",
        "subject": "",
        "date": None,
        "snippet": msg.get("snippet", ""),
        "has_attachments": any(part.get("filename") for part in payload.get("parts", []) or []),
    }

    for header in payload.get("headers", []):
        name = header.get("name")
        if name == "From":
            summary["from"] = header.get("value", "")
        elif name == "Subject":
            summary["subject"] = header.get("value", "")
        elif name == "Date":
            summary["date"] = parse_email_date(header.get("value"))

    return summary
