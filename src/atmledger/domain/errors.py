"""Shared domain error messages and error types."""

import math
from datetime import datetime
from decimal import Decimal
from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class SelfTransferError(ValidationError):
    """Sender and recipient of a transfer are the same account."""


class RecipientNotFoundError(NotFoundError):
    """Transfer recipient email does not belong to any account."""


class AdminAccountProtectedError(ConflictError):
    """Administrator accounts cannot be locked by an administrator."""


class PolicyRejectionError(DomainError):
    """Request is well-formed but refused by a ledger policy."""


class InsufficientFundsError(PolicyRejectionError):
    """Debit exceeds the account balance."""

    def __init__(self, balance: Decimal):
        self.balance = balance
        super().__init__(insufficient_funds(balance))


class BalanceCeilingExceededError(PolicyRejectionError):
    """Credit would push a balance past the largest storable amount."""

    def __init__(self, balance: Decimal, ceiling: Decimal):
        self.balance = balance
        self.ceiling = ceiling
        super().__init__(
            f"This would bring the balance above {format_money(ceiling)}. "
            f"Current balance: {format_money(balance)}"
        )


class LimitExceededError(PolicyRejectionError):
    """A sliding-window volume cap would be exceeded."""

    label = "Daily"

    def __init__(self, limit: Decimal, current_total: Decimal, requested: Decimal):
        self.limit = limit
        self.current_total = current_total
        self.requested = requested
        super().__init__(limit_exceeded(self.label, limit, current_total))

    @property
    def remaining(self) -> Decimal:
        """Headroom left in the window, never negative."""
        return max(self.limit - self.current_total, Decimal("0.00"))

    @property
    def limit_reached(self) -> bool:
        return self.current_total >= self.limit


class DailyWithdrawalLimitExceededError(LimitExceededError):
    """Withdrawal would exceed the trailing 24-hour ceiling."""

    label = "Daily withdrawal"


class DailyTransferLimitExceededError(LimitExceededError):
    """Transfer would exceed the trailing 24-hour ceiling."""

    label = "Daily transfer"


class RecipientTransferFrequencyExceededError(PolicyRejectionError):
    """Too many transfers to the same recipient within the last hour."""

    def __init__(self, count: int, limit: int):
        self.count = count
        self.limit = limit
        super().__init__(
            f"Transfer frequency limit exceeded. You have already made {count} "
            f"transfers to this recipient in the last hour (limit {limit}). "
            "Please wait before making another transfer to the same person."
        )


class AccountLockedError(PolicyRejectionError):
    """Authentication refused while the account is locked."""

    def __init__(self, lock_until: datetime, now: datetime):
        self.lock_until = lock_until
        self.remaining_seconds = max(math.ceil((lock_until - now).total_seconds()), 0)
        super().__init__(
            f"Account is locked. Please wait {self.remaining_seconds} seconds "
            "before trying again."
        )


class AuthenticationError(DomainError):
    """Authentication failed."""


class WrongCredentialsError(AuthenticationError):
    """Unknown email or wrong PIN; deliberately indistinguishable."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or WRONG_CREDENTIALS)


class TransactionFailedError(DomainError):
    """The atomic unit failed in the store and was rolled back."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation.capitalize()} failed. Please try again.")


class LedgerIntegrityError(DomainError):
    """Ledger replay disagrees with the stored balance."""


WRONG_CREDENTIALS = "Wrong email or PIN"


def format_money(amount: Decimal) -> str:
    """Render an amount the way user-facing messages show it."""
    return f"${amount:,.2f}"


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def email_not_found(email: str) -> str:
    """Return message for missing account by email."""
    return f"No account registered with email '{email}'"


def duplicate_email(email: str) -> str:
    """Return message for an email that is already registered."""
    return f"An account with email '{email}' already exists"


def insufficient_funds(balance: Decimal) -> str:
    """Return message when a debit exceeds the balance."""
    return f"Insufficient balance. Current balance: {format_money(balance)}"


def limit_exceeded(label: str, limit: Decimal, current_total: Decimal) -> str:
    """Return message for a sliding-window cap, reporting remaining headroom."""
    remaining = limit - current_total
    prefix = f"{label} limit of {format_money(limit)} exceeded."
    if remaining <= 0:
        return (
            f"{prefix} You have already used {format_money(current_total)} "
            "in the last 24 hours. Please try again tomorrow."
        )
    return (
        f"{prefix} You can only use {format_money(remaining)} more today "
        f"(already used {format_money(current_total)} in the last 24 hours)."
    )
