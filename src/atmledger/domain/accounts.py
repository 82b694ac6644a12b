"""Account store domain service."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from atmledger.database.base import Database
from atmledger.domain.activity import ActivityLog
from atmledger.domain.entities import Account, ActivityType, Role
from atmledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    duplicate_email,
    email_not_found,
)
from atmledger.utils.security import hash_pin
from atmledger.utils.validators import normalize_email, registration_errors

logger = logging.getLogger(__name__)


class AccountStore:
    """Authoritative balance and identity record per account."""

    def __init__(self, db: Database, activity: Optional[ActivityLog] = None):
        """Initialize account store.

        Args:
            db: Database instance (or an open unit from ``db.transaction()``)
            activity: Activity log for registration events
        """
        self.db = db
        self.activity = activity

    def register(self, name: str, email: str, pin: str, role: Role = Role.STANDARD) -> Account:
        """Register a new account with a zero balance.

        Args:
            name: Account holder name
            email: Email address, unique across accounts
            pin: 4-6 digit PIN, stored only as a hash
            role: Account role

        Returns:
            The created account

        Raises:
            ValidationError: If any field is malformed
            ConflictError: If the email is already registered
        """
        errors = registration_errors(name, email, pin)
        if errors:
            raise ValidationError(" ".join(errors))

        email = normalize_email(email)
        if self.db.get_account_by_email(email) is not None:
            raise ConflictError(duplicate_email(email))

        account_id = self.db.create_account(
            name=name.strip(),
            email=email,
            pin_hash=hash_pin(pin),
            role=Role(role).value,
        )
        logger.info("account.registered", extra={"account_id": account_id, "role": Role(role).value})
        if self.activity is not None:
            self.activity.record(account_id, ActivityType.REGISTRATION, "Account registered")
        return self.get(account_id)

    def get(self, account_id: int) -> Account:
        """Get account by ID.

        Raises:
            NotFoundError: If no such account exists
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def find_by_email(self, email: str) -> Optional[Account]:
        """Get account by email, or None."""
        return self.db.get_account_by_email(normalize_email(email))

    def get_by_email(self, email: str) -> Account:
        """Get account by email.

        Raises:
            NotFoundError: If no account uses this email
        """
        account = self.find_by_email(email)
        if account is None:
            raise NotFoundError(email_not_found(email))
        return account

    def list_accounts(self) -> list[Account]:
        return self.db.list_accounts()

    def lock_for_update(self, account_ids: Sequence[int]) -> dict[int, Account]:
        """Lock accounts for the rest of the current transaction.

        Locks are always taken in ascending ID order so that two units
        touching the same pair of accounts cannot deadlock.

        Raises:
            NotFoundError: If any account is missing
        """
        accounts = {acc.id: acc for acc in self.db.lock_accounts(sorted(set(account_ids)))}
        for account_id in account_ids:
            if account_id not in accounts:
                raise NotFoundError(account_not_found(account_id))
        return accounts

    def set_balance(self, account_id: int, new_balance: Decimal) -> None:
        """Unconditionally write a balance; callers own its correctness."""
        self.db.set_balance(account_id, new_balance)

    def record_failed_attempt(self, account_id: int) -> int:
        """Increment the failed attempt counter and return the new value."""
        return self.db.increment_failed_attempts(account_id)

    def lock(self, account_id: int, until: datetime) -> None:
        self.db.set_lock_until(account_id, until)

    def reset_auth_state(self, account_id: int) -> None:
        self.db.reset_auth_state(account_id)

    def update_pin_hash(self, account_id: int, new_hash: str) -> None:
        self.db.update_pin_hash(account_id, new_hash)
