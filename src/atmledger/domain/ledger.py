"""Ledger log domain service."""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from atmledger.database.base import Database
from atmledger.domain.entities import LedgerEntry, LedgerEntryType, LedgerPage
from atmledger.domain.errors import LedgerIntegrityError, ValidationError
from atmledger.utils.clock import Clock, utcnow


class LedgerLog:
    """Append-only record of every balance-affecting event.

    Entries are never updated or deleted. Credits carry positive amounts and
    debits negative ones, so summing an account's entries in creation order
    reproduces its balance.
    """

    def __init__(self, db: Database, clock: Clock = utcnow):
        """Initialize ledger log.

        Args:
            db: Database instance
            clock: Source of entry timestamps
        """
        self.db = db
        self.clock = clock

    def append(
        self,
        account_id: int,
        entry_type: LedgerEntryType,
        amount: Decimal,
        balance_after: Decimal,
        counterparty_id: Optional[int] = None,
    ) -> int:
        """Append an entry stamped with the current time.

        Args:
            account_id: Account ID
            entry_type: Kind of event
            amount: Signed amount (positive for credits, negative for debits)
            balance_after: Account balance once this entry is applied
            counterparty_id: Other account of a transfer pair

        Returns:
            Entry ID

        Raises:
            ValidationError: If the amount sign disagrees with the entry type
        """
        entry_type = LedgerEntryType(entry_type)
        if amount == 0 or (amount > 0) != entry_type.is_credit:
            raise ValidationError(
                f"{entry_type.value} entries must carry a "
                f"{'positive' if entry_type.is_credit else 'negative'} amount"
            )
        return self.db.append_ledger_entry(
            account_id=account_id,
            entry_type=entry_type,
            amount=amount,
            balance_after=balance_after,
            created_at=self.clock(),
            counterparty_id=counterparty_id,
        )

    def entries(self, account_id: int) -> list[LedgerEntry]:
        """All entries for an account in creation order."""
        return self.db.list_ledger_entries(account_id)

    def replay_balance(self, account_id: int) -> Decimal:
        """Rebuild the balance by summing every entry from zero."""
        return sum((e.amount for e in self.entries(account_id)), Decimal("0.00"))

    def verify(self, account_id: int) -> Decimal:
        """Check the ledger against the stored balance.

        Returns:
            The verified balance

        Raises:
            LedgerIntegrityError: If replay, the last balance_after and the
                account balance disagree
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise LedgerIntegrityError(f"Account {account_id} not found")

        running = Decimal("0.00")
        for entry in self.entries(account_id):
            running += entry.amount
            if running != entry.balance_after:
                raise LedgerIntegrityError(
                    f"Entry {entry.id} records balance {entry.balance_after} "
                    f"but replay gives {running}"
                )
        if running != account.balance:
            raise LedgerIntegrityError(
                f"Account {account_id} balance {account.balance} "
                f"does not match ledger replay {running}"
            )
        return running

    def history(
        self,
        account_id: int,
        entry_type: Optional[LedgerEntryType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> LedgerPage:
        """Filtered, paginated history, newest first.

        Args:
            account_id: Account ID
            entry_type: Optional entry type filter
            start_date: Optional first day (inclusive)
            end_date: Optional last day (inclusive)
            page: 1-based page number
            per_page: Page size
        """
        if page < 1 or per_page < 1:
            raise ValidationError("Page and page size must be at least 1")
        if start_date and end_date and start_date > end_date:
            raise ValidationError("Start date must be on or before end date")

        start = datetime.combine(start_date, time.min) if start_date else None
        end = datetime.combine(end_date + timedelta(days=1), time.min) if end_date else None

        total = self.db.count_ledger_entries(account_id, entry_type=entry_type, start=start, end=end)
        entries = self.db.query_ledger_entries(
            account_id,
            entry_type=entry_type,
            start=start,
            end=end,
            limit=per_page,
            offset=(page - 1) * per_page,
        )
        return LedgerPage(entries=entries, total=total, page=page, per_page=per_page)
