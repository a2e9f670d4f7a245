"""
Date/Time utilities
Handles MongoDB's requirement for timezone-naive datetimes
"""

from datetime import datetime, timezone
from typing import Any, Optional
import logging

logger = logging.getLogger(__name__)

def get_utc_now() -> datetime:
    """
    Get current UTC time as timezone-NAIVE datetime for MongoDB compatibility.
    MongoDB stores all datetimes as UTC internally but expects naive datetimes.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)

def ensure_mongodb_compatible(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is compatible with MongoDB (timezone-naive UTC).
    """
    if dt is None:
        return None

    if dt.tzinfo is not None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)

    return dt

def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Coerce a stored timestamp to a naive UTC datetime.

    Accepts datetimes and ISO-8601 strings (older records were written
    as strings, with a trailing 'Z'). Returns None for anything else.
    """
    if isinstance(value, datetime):
        return ensure_mongodb_compatible(value)

    if isinstance(value, str) and value:
        try:
            return ensure_mongodb_compatible(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            logger.debug(f"Unparseable timestamp: {value!r}")

    return None
