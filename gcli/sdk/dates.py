"""Date and datetime parsing for CLI input and API responses.

Everything returned here is timezone-aware. Inputs without an offset are
interpreted in the local timezone.
"""

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

DATETIME_FORMATS = [
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M",
]

DATE_FORMATS = [
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d-%m-%Y",
]


def now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def localize(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.astimezone()
    return dt


def parse_datetime(value: str) -> datetime:
    """
    Parse a user-supplied datetime.

    Accepts RFC 3339 (with offset or Z) and YYYY-MM-DD[T ]HH:MM[:SS].

    Raises:
        ValidationError: If the value matches none of the formats
    """
    s = (value or "").strip()
    for fmt in DATETIME_FORMATS:
        try:
            return localize(datetime.strptime(s, fmt))
        except ValueError:
            continue
    raise ValidationError(f"could not parse datetime: {value}")


def parse_date(value: str) -> datetime:
    """
    Parse a user-supplied calendar date to local midnight.

    Raises:
        ValidationError: If the value matches none of the formats
    """
    s = (value or "").strip()
    for fmt in DATE_FORMATS:
        try:
            return localize(datetime.strptime(s, fmt))
        except ValueError:
            continue
    raise ValidationError(f"could not parse date: {value} (use YYYY-MM-DD format)")


def parse_rfc3339(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp as returned by Google APIs; None if unparseable."""
    if not value:
        return None
    try:
        return localize(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        logger.debug(f"Unparseable RFC 3339 timestamp: {value}")
        return None


def parse_email_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 2822 Date header; None if missing or unparseable."""
    if not value:
        return None
    try:
        dt = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug(f"Unparseable Date header: {value}")
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_rfc3339(dt: datetime) -> str:
    """Format an aware datetime as RFC 3339."""
    return localize(dt).isoformat()
