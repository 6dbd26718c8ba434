"""Scheduled-email store.

A durable outbox of emails queued for sending at a later time. The whole
collection lives in a single JSON file (default ~/.config/google-cli/scheduled.json)
and every mutation is a read-modify-write of that file:

    [
      {
        "id": "3f0c...",
        "account": "work",
        "draft_id": "r-123",
        "to": ["a@example.com"], "cc": [], "bcc": [],
        "subject": "...", "body": "...", "is_html": false,
        "scheduled_at": "2024-12-25T09:00:00+00:00",
        "created_at": "2024-12-24T09:00:00+00:00",
        "sent": false, "sent_at": null, "message_id": null,
        "error": ""
      }
    ]

A record is in exactly one of three states: pending (not sent, no error),
sent, or error. Records with an error are never retried automatically.

There is no file locking between processes: two gcli invocations mutating
the store at the same time can lose an update. Within a process, mutations
are serialized by a lock and each write replaces the file atomically.
"""

import os
import json
import uuid
import tempfile
import threading
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .. import dates
from ..config import get_scheduled_file_path
from ..exceptions import StoreError, ScheduledEmailNotFoundError

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_SENT = "sent"
STATUS_ERROR = "error"

_DATETIME_FIELDS = ("scheduled_at", "created_at", "sent_at")


def get_status(email: Dict[str, Any]) -> str:
    """Return 'sent', 'error' or 'pending' for a scheduled email record."""
    if email.get("sent"):
        return STATUS_SENT
    if email.get("error"):
        return STATUS_ERROR
    return STATUS_PENDING


def _matches_account(email: Dict[str, Any], account: Optional[str]) -> bool:
    return not account or email.get("account") == account


def _field(raw: Dict[str, Any], name: str, types, default, email_id: str):
    """Return raw[name] (default when absent) after checking its JSON type."""
    value = raw.get(name, default)
    if not isinstance(value, types):
        raise StoreError(
            f"malformed {name} for scheduled email '{email_id}': "
            f"unexpected {type(value).__name__} value {value!r}"
        )
    return value


def _address_list(raw: Dict[str, Any], name: str, email_id: str) -> List[str]:
    value = _field(raw, name, (list, type(None)), [], email_id) or []
    if not all(isinstance(address, str) for address in value):
        raise StoreError(f"malformed {name} for scheduled email '{email_id}': expected a list of addresses")
    return list(value)


def _decode(raw: Any, index: int) -> Dict[str, Any]:
    """
    Turn one JSON object from the store file into a record with datetimes.

    Values of the wrong type are an error rather than being coerced, so a
    hand-edited "sent": "false" cannot turn a pending email into a sent one.
    """
    if not isinstance(raw, dict) or not raw.get("id"):
        raise StoreError(f"malformed scheduled email at position {index}: missing id")
    if not isinstance(raw["id"], str):
        raise StoreError(f"malformed scheduled email at position {index}: id must be a string")

    email_id = raw["id"]
    email = {
        "id": email_id,
        "account": _field(raw, "account", str, "", email_id),
        "draft_id": _field(raw, "draft_id", str, "", email_id),
        "to": _address_list(raw, "to", email_id),
        "cc": _address_list(raw, "cc", email_id),
        "bcc": _address_list(raw, "bcc", email_id),
        "subject": _field(raw, "subject", str, "", email_id),
        "body": _field(raw, "body", str, "", email_id),
        "is_html": _field(raw, "is_html", bool, False, email_id),
        "scheduled_at": None,
        "created_at": None,
        "sent": _field(raw, "sent", bool, False, email_id),
        "sent_at": None,
        "message_id": _field(raw, "message_id", (str, type(None)), None, email_id),
        "error": _field(raw, "error", (str, type(None)), "", email_id) or "",
    }
    for field in _DATETIME_FIELDS:
        value = raw.get(field)
        if not value:
            continue
        try:
            email[field] = dates.localize(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except (AttributeError, TypeError, ValueError) as e:
            raise StoreError(f"malformed {field} for scheduled email '{email_id}': {e}") from e

    if email["scheduled_at"] is None:
        raise StoreError(f"malformed scheduled email '{email_id}': missing scheduled_at")
    return email


def _encode(email: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(email)
    for field in _DATETIME_FIELDS:
        value = data.get(field)
        data[field] = value.isoformat() if value else None
    return data


class ScheduledEmailStore:
    """
    File-backed collection of scheduled emails.

    Args:
        path: Store file path (defaults to the configured scheduled.json)
        clock: Callable returning the current aware datetime; used for
               created_at, sent_at and the default "now" of list_pending
    """

    def __init__(self, path: Optional[Path] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.path = Path(path) if path else get_scheduled_file_path()
        self._clock = clock or dates.now
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> List[Dict[str, Any]]:
        """
        Load every record in insertion order.

        A missing file is an empty store.

        Raises:
            StoreError: If the file is not a JSON list of records
            OSError: If the file exists but cannot be read
        """
        if not self.path.exists():
            logger.debug(f"Scheduled email file not found at {self.path}, store is empty.")
            return []

        with open(self.path, 'r', encoding='utf-8') as f:
            try:
                raw = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise StoreError(f"failed to parse scheduled emails in {self.path}: {e}") from e

        if raw is None:
            return []
        if not isinstance(raw, list):
            raise StoreError(f"failed to parse scheduled emails in {self.path}: expected a list")

        return [_decode(item, i) for i, item in enumerate(raw)]

    def save(self, emails: List[Dict[str, Any]]):
        """
        Replace the whole collection on disk.

        The new content is written to a temp file next to the store and
        renamed over it, so readers see either the old or the new file.
        """
        self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        temp_fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix='.tmp'
        )
        try:
            with os.fdopen(temp_fd, 'w') as f:
                json.dump([_encode(e) for e in emails], f, indent=2)
                f.write("\n")
            os.chmod(temp_path, 0o600)
            os.replace(temp_path, self.path)
        except Exception:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise
        logger.debug(f"Saved {len(emails)} scheduled emails to {self.path}")

    def _update(self, email_id: str, update_fn: Callable[[Dict[str, Any]], None]) -> Dict[str, Any]:
        """Apply update_fn to one record and write the collection back."""
        with self._lock:
            emails = self.load()
            for email in emails:
                if email["id"] == email_id:
                    update_fn(email)
                    self.save(emails)
                    return dict(email)
        raise ScheduledEmailNotFoundError(f"scheduled email '{email_id}' not found")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def add(self, email: Dict[str, Any]) -> Dict[str, Any]:
        """
        Append a new scheduled email.

        Assigns a fresh id and created_at and forces the record to pending,
        whatever the caller passed for those fields.

        Args:
            email: Dict with account, draft_id, to, cc, bcc, subject, body,
                   is_html and scheduled_at (aware datetime)

        Returns:
            The stored record
        """
        if not isinstance(email.get("scheduled_at"), datetime):
            raise TypeError("scheduled_at must be a datetime")

        with self._lock:
            emails = self.load()
            existing_ids = {e["id"] for e in emails}

            email_id = uuid.uuid4().hex
            while email_id in existing_ids:
                email_id = uuid.uuid4().hex

            record = {
                "id": email_id,
                "account": email.get("account", ""),
                "draft_id": email.get("draft_id", ""),
                "to": list(email.get("to") or []),
                "cc": list(email.get("cc") or []),
                "bcc": list(email.get("bcc") or []),
                "subject": email.get("subject", ""),
                "body": email.get("body", ""),
                "is_html": bool(email.get("is_html", False)),
                "scheduled_at": dates.localize(email["scheduled_at"]),
                "created_at": self._clock(),
                "sent": False,
                "sent_at": None,
                "message_id": None,
                "error": "",
            }
            emails.append(record)
            self.save(emails)

        logger.info(f"Scheduled email '{record['id']}' for {record['scheduled_at'].isoformat()}")
        return dict(record)

    def list_by_account(self, account: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return records for an account (all records if empty), in insertion order."""
        return [e for e in self.load() if _matches_account(e, account)]

    def list_pending(self, account: Optional[str] = None,
                     now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """
        Return the records that are due for dispatch.

        A record is due when it is not sent, carries no error, and its
        scheduled time is strictly before `now`.
        """
        now = dates.localize(now) if now else self._clock()
        return [
            e for e in self.load()
            if not e["sent"] and not e["error"] and e["scheduled_at"] < now
            and _matches_account(e, account)
        ]

    def mark_sent(self, email_id: str, message_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Mark a record as sent.

        Raises:
            ScheduledEmailNotFoundError: If the id is not in the store (the
                                         file is left untouched)
        """
        sent_at = self._clock()

        def apply(email):
            email["sent"] = True
            email["sent_at"] = sent_at
            email["message_id"] = message_id

        record = self._update(email_id, apply)
        logger.info(f"Scheduled email '{email_id}' marked sent (message {message_id})")
        return record

    def mark_error(self, email_id: str, message: str) -> Dict[str, Any]:
        """
        Record a dispatch error on a record; `sent` is left untouched.

        Raises:
            ValueError: If message is empty (an empty error reads as pending)
            ScheduledEmailNotFoundError: If the id is not in the store (the
                                         file is left untouched)
        """
        if not message:
            raise ValueError("error message must not be empty")

        def apply(email):
            email["error"] = message

        record = self._update(email_id, apply)
        logger.info(f"Scheduled email '{email_id}' marked with error: {message}")
        return record

    def clear_sent(self, account: Optional[str] = None) -> int:
        """
        Remove sent records.

        Without an account every sent record is removed; with one, only that
        account's sent records are. Unsent records are always kept.

        Returns:
            Number of records removed
        """
        with self._lock:
            emails = self.load()
            remaining = [
                e for e in emails
                if not e["sent"] or (account and e["account"] != account)
            ]
            self.save(remaining)
        removed = len(emails) - len(remaining)
        logger.info(f"Cleared {removed} sent scheduled emails")
        return removed

    def clear_all(self, account: Optional[str] = None) -> int:
        """
        Remove every record, or every record of one account.

        Returns:
            Number of records removed
        """
        with self._lock:
            emails = self.load()
            if account:
                remaining = [e for e in emails if e["account"] != account]
            else:
                remaining = []
            self.save(remaining)
        removed = len(emails) - len(remaining)
        logger.info(f"Cleared {removed} scheduled emails")
        return removed


def get_scheduled_store() -> ScheduledEmailStore:
    """Get the store backed by the configured scheduled-email file."""
    return ScheduledEmailStore()
