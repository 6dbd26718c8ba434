"""Gmail message read operations."""

import re
import base64
import logging
from typing import Dict, Any, Optional, List

from ..dates import parse_email_date
from ..timing import time_api_call
from .service import get_gmail_service

logger = logging.getLogger(__name__)

TAG_REGEX = re.compile(r'<[^>]*>')


@time_api_call
def read_message(
    message_id: str,
    account: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Retrieve the full content of a specific Gmail message.

    Args:
        message_id: The Gmail message ID
        account: Optional account name (defaults to the default account)

    Returns:
        Dict containing message details:
            - id, account, thread_id
            - from: Sender address
            - to, cc: Lists of recipient addresses
            - subject
            - date: Parsed Date header (datetime or None)
            - body: Plain text body (HTML bodies are reduced to text)
            - attachments: List of attachment filenames
    """
    service, account_name = get_gmail_service(account)
    logger.debug(f"[{account_name}] Retrieving message with ID: {message_id}")

    msg = service.users().messages().get(
        userId='me', id=message_id, format='full'
    ).execute()

    payload = msg.get('payload', {})
    headers = payload.get('headers', [])

    text_body, html_body = _extract_body_parts(payload)
    if text_body is None and html_body is not None:
        text_body = strip_html(html_body)

    message_details = {
        "id": msg.get('id', message_id),
        "account": account_name,
        "thread_id": msg.get('threadId'),
        "from": _get_header(headers, 'From'),
        "to": parse_addresses(_get_header(headers, 'To')),
        "cc": parse_addresses(_get_header(headers, 'Cc')),
        "subject": _get_header(headers, 'Subject'),
        "date": parse_email_date(_get_header(headers, 'Date')),
        "body": text_body or "",
        "attachments": _extract_attachment_names(payload),
    }

    logger.debug(f"Successfully retrieved message: '{message_details['subject']}'")
    return message_details


def parse_addresses(value: str) -> List[str]:
    """Split a comma-separated address header into a list of addresses."""
    return [addr.strip() for addr in (value or "").split(",") if addr.strip()]


def strip_html(html: str) -> str:
    """Remove HTML tags from a string."""
    return TAG_REGEX.sub("", html)


def _get_header(headers: list, name: str, default: str = '') -> str:
    """Get a header value by name."""
    for header in headers:
        if header['name'].lower() == name.lower():
            return header['value']
    return default


def _decode_part(part: dict) -> Optional[str]:
    """Extract and decode body content from a MIME part."""
    data = part.get('body', {}).get('data')
    if data:
        return base64.urlsafe_b64decode(data).decode('utf-8', errors='ignore')
    return None


def _extract_body_parts(payload: dict) -> tuple:
    """
    Extract text and HTML body parts from a message payload.

    Returns:
        Tuple of (text_body, html_body); either may be None
    """
    text_body = None
    html_body = None

    def process_part(part: dict):
        nonlocal text_body, html_body

        mime_type = part.get('mimeType', '')

        if mime_type == 'text/plain' and text_body is None:
            text_body = _decode_part(part)
        elif mime_type == 'text/html' and html_body is None:
            html_body = _decode_part(part)

        for subpart in part.get('parts', []) or []:
            process_part(subpart)

    if payload.get('parts'):
        for part in payload['parts']:
            process_part(part)
    elif payload.get('mimeType') == 'text/html':
        html_body = _decode_part(payload)
    else:
        text_body = _decode_part(payload)

    return text_body, html_body


def _extract_attachment_names(payload: dict) -> List[str]:
    """Recursively collect attachment filenames from a message payload."""
    names = []
    if payload.get('filename'):
        names.append(payload['filename'])
    for part in payload.get('parts', []) or []:
        names.extend(_extract_attachment_names(part))
    return names
