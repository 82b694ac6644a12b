"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from atmledger.domain.entities import (
    Account,
    ActivityLogEntry,
    LedgerEntry,
    LedgerEntryType,
)


class Database(ABC):
    """Abstract database interface for atmledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager["Database"]:
        """Open an atomic, isolated unit of work.

        Yields a Database whose operations all run in one transaction. The
        unit commits when the block exits normally and rolls back every
        write when it raises. Nested calls join the outer unit.
        """
        pass

    # Account operations
    @abstractmethod
    def create_account(self, name: str, email: str, pin_hash: str, role: str) -> int:
        """Create a new account with a zero balance. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_email(self, email: str) -> Optional[Account]:
        """Get account by email."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        pass

    @abstractmethod
    def lock_accounts(self, account_ids: Sequence[int]) -> list[Account]:
        """Read accounts for update, acquiring row locks in ascending ID order.

        Only meaningful inside ``transaction()``. Missing IDs are skipped.
        """
        pass

    @abstractmethod
    def set_balance(self, account_id: int, balance: Decimal) -> None:
        """Overwrite an account balance."""
        pass

    @abstractmethod
    def increment_failed_attempts(self, account_id: int) -> int:
        """Atomically add one to the failed attempt counter. Returns the new count."""
        pass

    @abstractmethod
    def set_lock_until(self, account_id: int, lock_until: Optional[datetime]) -> None:
        """Set or clear the lock expiry."""
        pass

    @abstractmethod
    def reset_auth_state(self, account_id: int) -> None:
        """Clear failed attempts and lock expiry."""
        pass

    @abstractmethod
    def update_pin_hash(self, account_id: int, pin_hash: str) -> None:
        """Replace the stored PIN hash."""
        pass

    # Ledger operations
    @abstractmethod
    def append_ledger_entry(
        self,
        account_id: int,
        entry_type: LedgerEntryType,
        amount: Decimal,
        balance_after: Decimal,
        created_at: datetime,
        counterparty_id: Optional[int] = None,
    ) -> int:
        """Append a ledger entry. Returns entry ID."""
        pass

    @abstractmethod
    def list_ledger_entries(self, account_id: int) -> list[LedgerEntry]:
        """All entries for an account in creation order."""
        pass

    @abstractmethod
    def query_ledger_entries(
        self,
        account_id: int,
        entry_type: Optional[LedgerEntryType] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[LedgerEntry]:
        """Filtered entries for an account, newest first.

        Args:
            account_id: Account ID
            entry_type: Optional entry type filter
            start: Optional inclusive lower bound on created_at
            end: Optional exclusive upper bound on created_at
            limit: Optional page size
            offset: Rows to skip
        """
        pass

    @abstractmethod
    def count_ledger_entries(
        self,
        account_id: int,
        entry_type: Optional[LedgerEntryType] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        counterparty_id: Optional[int] = None,
    ) -> int:
        """Count entries matching the filters."""
        pass

    @abstractmethod
    def sum_ledger_amounts(
        self,
        account_id: int,
        entry_type: Optional[LedgerEntryType] = None,
        since: Optional[datetime] = None,
    ) -> Decimal:
        """Sum of signed amounts matching the filters (0.00 when none)."""
        pass

    # Activity log operations
    @abstractmethod
    def append_activity(
        self,
        account_id: int,
        activity_type: str,
        description: Optional[str],
        ip_address: Optional[str],
        user_agent: Optional[str],
        created_at: datetime,
    ) -> int:
        """Append an activity log entry. Returns entry ID."""
        pass

    @abstractmethod
    def list_activities(self, account_id: int, limit: Optional[int] = None) -> list[ActivityLogEntry]:
        """Activity entries for an account, newest first."""
        pass
