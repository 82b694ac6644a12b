"""Ledger policy constants."""

import os
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from atmledger.domain.errors import ValidationError

ENV_PREFIX = "ATMLEDGER_"


@dataclass(frozen=True)
class LedgerPolicy:
    """Tunable limits for authentication and money movement.

    The 10 second lockout is the demo default; deployments should raise it
    through ``ATMLEDGER_LOCKOUT_SECONDS``.
    """

    lockout_threshold: int = 5
    lockout_duration: timedelta = timedelta(seconds=10)
    admin_lock_duration: timedelta = timedelta(hours=24)
    daily_withdrawal_limit: Decimal = Decimal("1000.00")
    daily_transfer_limit: Decimal = Decimal("5000.00")
    hourly_recipient_transfer_limit: int = 5
    daily_window: timedelta = timedelta(hours=24)
    frequency_window: timedelta = timedelta(hours=1)

    def __post_init__(self):
        if self.lockout_threshold < 1:
            raise ValidationError("Lockout threshold must be at least 1")
        if self.hourly_recipient_transfer_limit < 1:
            raise ValidationError("Hourly recipient transfer limit must be at least 1")
        if self.lockout_duration <= timedelta(0):
            raise ValidationError("Lockout duration must be positive")
        if self.admin_lock_duration <= timedelta(0):
            raise ValidationError("Admin lock duration must be positive")
        for limit in (self.daily_withdrawal_limit, self.daily_transfer_limit):
            if not (limit.is_finite() and limit > 0):
                raise ValidationError("Daily limits must be positive")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LedgerPolicy":
        """Build a policy from ``ATMLEDGER_*`` environment variables.

        Unset variables keep their defaults.

        Raises:
            ValidationError: If a variable holds an unparsable value
        """
        if environ is None:
            environ = os.environ

        overrides = {}
        threshold = _read(environ, "LOCKOUT_THRESHOLD", int)
        if threshold is not None:
            overrides["lockout_threshold"] = threshold
        lockout_seconds = _read(environ, "LOCKOUT_SECONDS", float)
        if lockout_seconds is not None:
            overrides["lockout_duration"] = timedelta(seconds=lockout_seconds)
        admin_hours = _read(environ, "ADMIN_LOCK_HOURS", float)
        if admin_hours is not None:
            overrides["admin_lock_duration"] = timedelta(hours=admin_hours)
        withdrawal_limit = _read(environ, "DAILY_WITHDRAWAL_LIMIT", Decimal)
        if withdrawal_limit is not None:
            overrides["daily_withdrawal_limit"] = withdrawal_limit
        transfer_limit = _read(environ, "DAILY_TRANSFER_LIMIT", Decimal)
        if transfer_limit is not None:
            overrides["daily_transfer_limit"] = transfer_limit
        recipient_limit = _read(environ, "HOURLY_RECIPIENT_TRANSFERS", int)
        if recipient_limit is not None:
            overrides["hourly_recipient_transfer_limit"] = recipient_limit

        return cls(**overrides)


def _read(environ: Mapping[str, str], name: str, convert):
    raw = environ.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return None
    try:
        return convert(raw.strip())
    except (ValueError, InvalidOperation):
        raise ValidationError(f"Invalid value for {ENV_PREFIX}{name}: '{raw}'")
