"""Activity log domain service."""

import logging
from typing import Optional

from atmledger.database.base import Database
from atmledger.domain.entities import ActivityLogEntry, ActivityType
from atmledger.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


class ActivityLog:
    """Append-only record of security-relevant events.

    Writes are best-effort: a failure is logged and reported as False, never
    raised, so it cannot abort the operation being described.
    """

    def __init__(self, db: Database, clock: Clock = utcnow):
        """Initialize activity log.

        Args:
            db: Database instance
            clock: Source of the current time
        """
        self.db = db
        self.clock = clock

    def record(
        self,
        account_id: int,
        activity_type: ActivityType,
        description: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> bool:
        """Append an activity entry.

        Args:
            account_id: Account the event belongs to
            activity_type: Kind of event
            description: Human-readable detail
            ip_address: Client address; the first hop of a forwarded list is kept
            user_agent: Client user agent

        Returns:
            True if the entry was written
        """
        activity_type = ActivityType(activity_type)
        if ip_address and "," in ip_address:
            ip_address = ip_address.split(",")[0].strip()

        try:
            self.db.append_activity(
                account_id=account_id,
                activity_type=activity_type.value,
                description=description,
                ip_address=ip_address,
                user_agent=user_agent,
                created_at=self.clock(),
            )
        except Exception:
            logger.exception(
                "activity.write_failed",
                extra={"account_id": account_id, "activity_type": activity_type.value},
            )
            return False
        return True

    def recent(self, account_id: int, limit: int = 5) -> list[ActivityLogEntry]:
        """Most recent activity for an account, newest first."""
        return self.db.list_activities(account_id, limit=limit)
