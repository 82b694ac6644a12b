"""Domain model entities for atmledger.

These are pure data classes representing business concepts, independent of
database schema. The database layer converts its rows into these through
``atmledger.database.mappers`` so that services never touch ORM objects.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class Role(str, Enum):
    """Account role."""

    STANDARD = "standard"
    ADMINISTRATOR = "administrator"


class LedgerEntryType(str, Enum):
    """Kind of balance-affecting event."""

    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TRANSFER_OUT = "transferOut"
    TRANSFER_IN = "transferIn"

    @property
    def is_credit(self) -> bool:
        return self in (LedgerEntryType.DEPOSIT, LedgerEntryType.TRANSFER_IN)


class ActivityType(str, Enum):
    """Closed set of security-relevant activity kinds."""

    LOGIN = "login"
    LOGOUT = "logout"
    FAILED_LOGIN = "failedLogin"
    ACCOUNT_LOCKED = "accountLocked"
    ACCOUNT_UNLOCKED = "accountUnlocked"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TRANSFER_OUT = "transferOut"
    TRANSFER_IN = "transferIn"
    PIN_CHANGED = "pinChanged"
    FAILED_PIN_CHANGE = "failedPinChange"
    REGISTRATION = "registration"


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    id: int
    name: str
    email: str
    pin_hash: str
    balance: Decimal
    role: Role
    failed_attempts: int
    lock_until: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    @property
    def is_administrator(self) -> bool:
        return self.role is Role.ADMINISTRATOR

    def is_locked(self, now: datetime) -> bool:
        """Return True if authentication is refused at ``now``."""
        return self.lock_until is not None and now < self.lock_until


@dataclass(frozen=True)
class LedgerEntry:
    """Immutable record of one balance-affecting event."""

    id: int
    account_id: int
    entry_type: LedgerEntryType
    amount: Decimal
    balance_after: Decimal
    counterparty_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class ActivityLogEntry:
    """Security audit trail entry."""

    id: int
    account_id: int
    activity_type: ActivityType
    description: Optional[str]
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class TransactionResult:
    """Outcome of a single-account deposit or withdrawal."""

    account_id: int
    entry_id: int
    amount: Decimal
    previous_balance: Decimal
    new_balance: Decimal


@dataclass(frozen=True)
class TransferResult:
    """Outcome of a transfer between two accounts."""

    sender_id: int
    recipient_id: int
    amount: Decimal
    sender_new_balance: Decimal
    recipient_new_balance: Decimal
    sender_entry_id: int
    recipient_entry_id: int


@dataclass(frozen=True)
class LedgerPage:
    """One page of ledger history, newest first."""

    entries: list[LedgerEntry]
    total: int
    page: int
    per_page: int

    @property
    def total_pages(self) -> int:
        if self.total == 0:
            return 0
        return (self.total + self.per_page - 1) // self.per_page
