"""Sliding-window limits on money movement."""

import logging
from decimal import Decimal

from atmledger.database.base import Database
from atmledger.domain.entities import LedgerEntryType
from atmledger.domain.errors import (
    DailyTransferLimitExceededError,
    DailyWithdrawalLimitExceededError,
    RecipientTransferFrequencyExceededError,
)
from atmledger.domain.policy import LedgerPolicy
from atmledger.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


class RateLimiter:
    """Read-only aggregation over the ledger enforcing volume and frequency caps.

    The checks read and then decide, so they are only race-free when run on
    the same transaction unit as the write they guard. TransferEngine builds
    a limiter on each unit for that reason.
    """

    def __init__(self, db: Database, policy: LedgerPolicy, clock: Clock = utcnow):
        self.db = db
        self.policy = policy
        self.clock = clock

    def _debited_since(self, account_id: int, entry_type: LedgerEntryType) -> Decimal:
        since = self.clock() - self.policy.daily_window
        # Debit entries are negative; report the volume as a positive total.
        return -self.db.sum_ledger_amounts(account_id, entry_type=entry_type, since=since)

    def daily_withdrawal_total(self, account_id: int) -> Decimal:
        """Amount withdrawn in the trailing 24 hours."""
        return self._debited_since(account_id, LedgerEntryType.WITHDRAW)

    def daily_transfer_total(self, account_id: int) -> Decimal:
        """Amount transferred out in the trailing 24 hours."""
        return self._debited_since(account_id, LedgerEntryType.TRANSFER_OUT)

    def recipient_transfer_count(self, sender_id: int, recipient_id: int) -> int:
        """Transfers from sender to recipient in the trailing hour."""
        return self.db.count_ledger_entries(
            sender_id,
            entry_type=LedgerEntryType.TRANSFER_OUT,
            start=self.clock() - self.policy.frequency_window,
            counterparty_id=recipient_id,
        )

    def withdrawal_headroom(self, account_id: int) -> Decimal:
        return max(self.policy.daily_withdrawal_limit - self.daily_withdrawal_total(account_id), Decimal("0.00"))

    def transfer_headroom(self, account_id: int) -> Decimal:
        return max(self.policy.daily_transfer_limit - self.daily_transfer_total(account_id), Decimal("0.00"))

    def check_withdrawal(self, account_id: int, amount: Decimal) -> None:
        """Refuse a withdrawal that would exceed the daily ceiling.

        Raises:
            DailyWithdrawalLimitExceededError: Reporting the remaining headroom
        """
        total = self.daily_withdrawal_total(account_id)
        limit = self.policy.daily_withdrawal_limit
        if total + amount > limit:
            logger.info(
                "limit.withdrawal_rejected",
                extra={"account_id": account_id, "total": str(total), "amount": str(amount)},
            )
            raise DailyWithdrawalLimitExceededError(limit, total, amount)

    def check_transfer(self, sender_id: int, recipient_id: int, amount: Decimal) -> None:
        """Refuse a transfer exceeding the daily ceiling or the per-recipient frequency.

        Raises:
            DailyTransferLimitExceededError: Reporting the remaining headroom
            RecipientTransferFrequencyExceededError: On the transfer past the hourly count
        """
        total = self.daily_transfer_total(sender_id)
        limit = self.policy.daily_transfer_limit
        if total + amount > limit:
            logger.info(
                "limit.transfer_rejected",
                extra={"account_id": sender_id, "total": str(total), "amount": str(amount)},
            )
            raise DailyTransferLimitExceededError(limit, total, amount)

        count = self.recipient_transfer_count(sender_id, recipient_id)
        if count >= self.policy.hourly_recipient_transfer_limit:
            logger.info(
                "limit.frequency_rejected",
                extra={"account_id": sender_id, "recipient_id": recipient_id, "count": count},
            )
            raise RecipientTransferFrequencyExceededError(
                count, self.policy.hourly_recipient_transfer_limit
            )
