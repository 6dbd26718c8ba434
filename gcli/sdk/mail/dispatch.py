"""Dispatch of due scheduled emails.

Each run sends every due record once, strictly in store order, and records
the outcome on the record itself. Records that are already sent or carry an
error are never picked up again, so running the dispatcher repeatedly (for
example from cron) cannot send the same email twice.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from .scheduled import ScheduledEmailStore, get_scheduled_store

logger = logging.getLogger(__name__)


def _default_send_draft(draft_id: str, account: Optional[str] = None) -> Dict[str, Any]:
    from .send import send_draft
    return send_draft(draft_id, account=account)


class ScheduledEmailDispatcher:
    """
    Sends due scheduled emails and reconciles the store with the outcome.

    Args:
        store: Scheduled-email store (defaults to the configured one)
        send_draft: Callable(draft_id, account=...) returning a dict with the
                    sent message "id"; resolving the account and its
                    credentials happens inside this call
    """

    def __init__(self, store: Optional[ScheduledEmailStore] = None,
                 send_draft: Optional[Callable[..., Dict[str, Any]]] = None):
        self.store = store or get_scheduled_store()
        self._send_draft = send_draft or _default_send_draft

    def run(self, account: Optional[str] = None, dry_run: bool = False,
            now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Send every due scheduled email.

        Per-record failures (missing or unknown account, bad credentials,
        API errors) are written to that record with mark_error and do not
        stop the run. An exception without a message is recorded by its
        type name, so the record never goes back to pending.
        Store read/write failures propagate.

        Args:
            account: Only dispatch this account's records (all if None)
            dry_run: Report what is due without sending or touching the store
            now: Reference time (defaults to the store's clock)

        Returns:
            Dict with:
                - due: Records that were due at the start of the run
                - sent: Records marked sent during this run
                - errors: Records marked with an error during this run
                - dry_run: Whether this was a dry run
                - sent_count, error_count
        """
        due = self.store.list_pending(account=account, now=now)
        result = {
            "due": due,
            "sent": [],
            "errors": [],
            "dry_run": dry_run,
            "sent_count": 0,
            "error_count": 0,
        }

        if not due:
            logger.info("No scheduled emails are due.")
            return result

        if dry_run:
            logger.info(f"Dry run: {len(due)} scheduled emails would be sent.")
            return result

        for email in due:
            # An empty account would silently resolve to the default account
            if not email["account"]:
                logger.warning(f"Scheduled email '{email['id']}' has no account, not sending")
                result["errors"].append(self.store.mark_error(email["id"], "scheduled email has no account"))
                continue

            try:
                sent = self._send_draft(email["draft_id"], account=email["account"])
            except Exception as e:
                message = str(e) or type(e).__name__
                logger.warning(f"[{email['account']}] Failed to send scheduled email '{email['id']}': {message}")
                result["errors"].append(self.store.mark_error(email["id"], message))
                continue

            result["sent"].append(self.store.mark_sent(email["id"], sent.get("id")))

        result["sent_count"] = len(result["sent"])
        result["error_count"] = len(result["errors"])
        logger.info(
            f"Scheduled email dispatch finished: {result['sent_count']} sent, "
            f"{result['error_count']} failed."
        )
        return result
