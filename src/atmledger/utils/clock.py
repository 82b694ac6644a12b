"""Time source shared by the ledger services."""

from datetime import datetime, UTC
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current UTC time as a naive datetime.

    SQLite hands back naive datetimes, so every timestamp the ledger stores
    or compares is naive UTC.
    """
    return datetime.now(UTC).replace(tzinfo=None)
