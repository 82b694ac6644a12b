"""Transfer engine: deposits, withdrawals and transfers as atomic units."""

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, Optional

from atmledger.database.base import Database
from atmledger.domain.accounts import AccountStore
from atmledger.domain.activity import ActivityLog
from atmledger.domain.entities import (
    ActivityType,
    LedgerEntryType,
    TransactionResult,
    TransferResult,
)
from atmledger.domain.errors import (
    BalanceCeilingExceededError,
    DomainError,
    InsufficientFundsError,
    RecipientNotFoundError,
    SelfTransferError,
    TransactionFailedError,
    ValidationError,
    format_money,
)
from atmledger.domain.ledger import LedgerLog
from atmledger.domain.policy import LedgerPolicy
from atmledger.domain.rate_limit import RateLimiter
from atmledger.utils.amount_parser import MAX_AMOUNT, to_money
from atmledger.utils.clock import Clock, utcnow
from atmledger.utils.validators import is_valid_email, normalize_email

logger = logging.getLogger(__name__)


class TransferEngine:
    """Orchestrates balance mutations.

    Each operation validates its input, then runs the funds check, the rate
    limits, the balance writes and the ledger appends inside a single
    ``db.transaction()`` unit with the touched accounts locked. Activity
    entries are written after commit and never affect the outcome.
    """

    def __init__(
        self,
        db: Database,
        policy: Optional[LedgerPolicy] = None,
        activity: Optional[ActivityLog] = None,
        clock: Clock = utcnow,
    ):
        """Initialize transfer engine.

        Args:
            db: Database instance
            policy: Withdrawal and transfer limits
            activity: Activity log; defaults to one on ``db``
            clock: Source of the current time
        """
        self.db = db
        self.policy = policy or LedgerPolicy()
        self.clock = clock
        self.activity = activity or ActivityLog(db, clock=clock)
        self.accounts = AccountStore(db)

    @contextmanager
    def _atomic(self, operation: str, **context) -> Iterator[Database]:
        """Run a unit of work, mapping store failures to TransactionFailedError.

        Domain errors raised inside the unit (policy rejections) roll back and
        propagate unchanged.
        """
        try:
            with self.db.transaction() as unit:
                yield unit
        except DomainError:
            raise
        except Exception as exc:
            logger.exception(f"ledger.{operation}_failed", extra=context)
            raise TransactionFailedError(operation) from exc

    @staticmethod
    def _amount(amount) -> Decimal:
        try:
            return to_money(amount)
        except (ValueError, TypeError) as e:
            raise ValidationError(str(e))

    @staticmethod
    def _credited(balance: Decimal, amount: Decimal) -> Decimal:
        new_balance = balance + amount
        if new_balance > MAX_AMOUNT:
            raise BalanceCeilingExceededError(balance, MAX_AMOUNT)
        return new_balance

    def deposit(self, account_id: int, amount: Decimal | int | str) -> TransactionResult:
        """Credit an account.

        Raises:
            ValidationError: If the amount is not positive or too large
            BalanceCeilingExceededError: If the new balance would not be storable
            NotFoundError: If the account does not exist
            TransactionFailedError: If the store fails; nothing is applied
        """
        amount = self._amount(amount)
        self.accounts.get(account_id)

        with self._atomic("deposit", account_id=account_id) as unit:
            store = AccountStore(unit)
            account = store.lock_for_update([account_id])[account_id]
            new_balance = self._credited(account.balance, amount)
            store.set_balance(account_id, new_balance)
            entry_id = LedgerLog(unit, self.clock).append(
                account_id, LedgerEntryType.DEPOSIT, amount, new_balance
            )

        logger.info(
            "ledger.deposit",
            extra={"account_id": account_id, "amount": str(amount), "balance": str(new_balance)},
        )
        self.activity.record(
            account_id,
            ActivityType.DEPOSIT,
            f"Deposited {format_money(amount)} - New balance: {format_money(new_balance)}",
        )
        return TransactionResult(
            account_id=account_id,
            entry_id=entry_id,
            amount=amount,
            previous_balance=account.balance,
            new_balance=new_balance,
        )

    def withdraw(self, account_id: int, amount: Decimal | int | str) -> TransactionResult:
        """Debit an account, subject to funds and the daily withdrawal cap.

        Raises:
            ValidationError: If the amount is not positive
            NotFoundError: If the account does not exist
            InsufficientFundsError: If the amount exceeds the balance
            DailyWithdrawalLimitExceededError: If the trailing-24h cap would be exceeded
            TransactionFailedError: If the store fails; nothing is applied
        """
        amount = self._amount(amount)
        self.accounts.get(account_id)

        with self._atomic("withdrawal", account_id=account_id) as unit:
            store = AccountStore(unit)
            account = store.lock_for_update([account_id])[account_id]
            if amount > account.balance:
                raise InsufficientFundsError(account.balance)
            RateLimiter(unit, self.policy, self.clock).check_withdrawal(account_id, amount)

            new_balance = account.balance - amount
            store.set_balance(account_id, new_balance)
            entry_id = LedgerLog(unit, self.clock).append(
                account_id, LedgerEntryType.WITHDRAW, -amount, new_balance
            )

        logger.info(
            "ledger.withdraw",
            extra={"account_id": account_id, "amount": str(amount), "balance": str(new_balance)},
        )
        self.activity.record(
            account_id,
            ActivityType.WITHDRAW,
            f"Withdrew {format_money(amount)} - New balance: {format_money(new_balance)}",
        )
        return TransactionResult(
            account_id=account_id,
            entry_id=entry_id,
            amount=amount,
            previous_balance=account.balance,
            new_balance=new_balance,
        )

    def transfer(self, sender_id: int, recipient_email: str, amount: Decimal | int | str) -> TransferResult:
        """Move money from the sender to the account owning ``recipient_email``.

        Both balance writes and both ledger entries commit together or not at
        all.

        Raises:
            ValidationError: If the amount or email is malformed
            NotFoundError: If the sender does not exist
            RecipientNotFoundError: If no account owns the email
            SelfTransferError: If the recipient is the sender
            InsufficientFundsError: If the amount exceeds the sender's balance
            DailyTransferLimitExceededError: If the trailing-24h cap would be exceeded
            RecipientTransferFrequencyExceededError: If the hourly per-recipient count is reached
            BalanceCeilingExceededError: If the recipient balance would not be storable
            TransactionFailedError: If the store fails; nothing is applied
        """
        amount = self._amount(amount)
        if not recipient_email or not is_valid_email(recipient_email):
            raise ValidationError("Please enter a valid recipient email address.")

        sender = self.accounts.get(sender_id)
        recipient = self.accounts.find_by_email(recipient_email)
        if recipient is None:
            raise RecipientNotFoundError(
                f"Recipient email address '{normalize_email(recipient_email)}' not found"
            )
        if recipient.id == sender.id:
            raise SelfTransferError("You cannot transfer money to yourself.")

        with self._atomic("transfer", sender_id=sender_id, recipient_id=recipient.id) as unit:
            store = AccountStore(unit)
            locked = store.lock_for_update([sender_id, recipient.id])
            sender, recipient = locked[sender_id], locked[recipient.id]
            if amount > sender.balance:
                raise InsufficientFundsError(sender.balance)
            RateLimiter(unit, self.policy, self.clock).check_transfer(sender_id, recipient.id, amount)

            sender_balance = sender.balance - amount
            recipient_balance = self._credited(recipient.balance, amount)
            ledger = LedgerLog(unit, self.clock)
            store.set_balance(sender_id, sender_balance)
            sender_entry_id = ledger.append(
                sender_id, LedgerEntryType.TRANSFER_OUT, -amount, sender_balance, recipient.id
            )
            store.set_balance(recipient.id, recipient_balance)
            recipient_entry_id = ledger.append(
                recipient.id, LedgerEntryType.TRANSFER_IN, amount, recipient_balance, sender_id
            )

        logger.info(
            "ledger.transfer",
            extra={"sender_id": sender_id, "recipient_id": recipient.id, "amount": str(amount)},
        )
        self.activity.record(
            sender_id,
            ActivityType.TRANSFER_OUT,
            f"Transferred {format_money(amount)} to {recipient.name}",
        )
        self.activity.record(
            recipient.id,
            ActivityType.TRANSFER_IN,
            f"Received {format_money(amount)} from {sender.name}",
        )
        return TransferResult(
            sender_id=sender_id,
            recipient_id=recipient.id,
            amount=amount,
            sender_new_balance=sender_balance,
            recipient_new_balance=recipient_balance,
            sender_entry_id=sender_entry_id,
            recipient_entry_id=recipient_entry_id,
        )
