"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, making it easy to change when
the database schema changes.
"""

from decimal import Decimal

from atmledger.domain import entities as domain
from atmledger.database.models import (
    Account as ORMAccount,
    LedgerEntry as ORMLedgerEntry,
    ActivityLogEntry as ORMActivityLogEntry,
)

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Normalize a stored numeric value to a two-place Decimal."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        email=orm_account.email,
        pin_hash=orm_account.pin_hash,
        balance=to_money(orm_account.balance),
        role=domain.Role(orm_account.role),
        failed_attempts=orm_account.failed_attempts or 0,
        lock_until=orm_account.lock_until,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
    )


def ledger_entry_to_domain(orm_entry: ORMLedgerEntry) -> domain.LedgerEntry:
    """Convert SQLAlchemy LedgerEntry model to domain LedgerEntry entity."""
    return domain.LedgerEntry(
        id=orm_entry.id,
        account_id=orm_entry.account_id,
        entry_type=domain.LedgerEntryType(orm_entry.entry_type),
        amount=to_money(orm_entry.amount),
        balance_after=to_money(orm_entry.balance_after),
        counterparty_id=orm_entry.counterparty_id,
        created_at=orm_entry.created_at,
    )


def activity_to_domain(orm_activity: ORMActivityLogEntry) -> domain.ActivityLogEntry:
    """Convert SQLAlchemy ActivityLogEntry model to domain ActivityLogEntry entity."""
    return domain.ActivityLogEntry(
        id=orm_activity.id,
        account_id=orm_activity.account_id,
        activity_type=domain.ActivityType(orm_activity.activity_type),
        description=orm_activity.description,
        ip_address=orm_activity.ip_address,
        user_agent=orm_activity.user_agent,
        created_at=orm_activity.created_at,
    )
