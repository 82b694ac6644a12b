"""Authentication lockout guard."""

import logging
from datetime import timedelta
from typing import Optional

from atmledger.database.base import Database
from atmledger.domain.accounts import AccountStore
from atmledger.domain.activity import ActivityLog
from atmledger.domain.entities import Account, ActivityType
from atmledger.domain.errors import (
    AccountLockedError,
    AdminAccountProtectedError,
    ValidationError,
    WrongCredentialsError,
)
from atmledger.domain.policy import LedgerPolicy
from atmledger.utils.clock import Clock, utcnow
from atmledger.utils.security import hash_pin, verify_pin
from atmledger.utils.validators import is_valid_pin

logger = logging.getLogger(__name__)


class LockoutGuard:
    """Authentication state machine over an account's failed-attempt counter.

    An account is Locked while ``lock_until`` lies in the future and Unlocked
    otherwise. Reaching ``policy.lockout_threshold`` consecutive wrong PINs
    moves it to Locked for ``policy.lockout_duration``; a correct PIN once the
    lock has expired resets the counter. There is no terminal state.
    """

    def __init__(
        self,
        db: Database,
        policy: Optional[LedgerPolicy] = None,
        activity: Optional[ActivityLog] = None,
        clock: Clock = utcnow,
    ):
        """Initialize lockout guard.

        Args:
            db: Database instance
            policy: Lockout threshold and durations
            activity: Activity log; defaults to one on ``db``
            clock: Source of the current time
        """
        self.db = db
        self.policy = policy or LedgerPolicy()
        self.clock = clock
        self.activity = activity or ActivityLog(db, clock=clock)
        self.accounts = AccountStore(db)

    def is_locked(self, account: Account) -> bool:
        return account.is_locked(self.clock())

    def authenticate(
        self,
        email: str,
        pin: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> int:
        """Verify an email/PIN pair.

        Returns:
            The authenticated account ID

        Raises:
            WrongCredentialsError: Unknown email or wrong PIN below the threshold
            AccountLockedError: While locked, or when this attempt triggers the lock
        """
        account = self.accounts.find_by_email(email)
        if account is None:
            logger.info("auth.unknown_email")
            raise WrongCredentialsError()

        now = self.clock()
        if account.is_locked(now):
            self.activity.record(
                account.id,
                ActivityType.ACCOUNT_LOCKED,
                "Attempted login while account locked",
                ip_address,
                user_agent,
            )
            raise AccountLockedError(account.lock_until, now)

        if verify_pin(pin, account.pin_hash):
            self.accounts.reset_auth_state(account.id)
            logger.info("auth.login", extra={"account_id": account.id})
            self.activity.record(
                account.id,
                ActivityType.LOGIN,
                f"Successful login from {ip_address or 'Unknown IP'}",
                ip_address,
                user_agent,
            )
            return account.id

        lock_until = None
        with self.db.transaction() as unit:
            store = AccountStore(unit)
            attempts = store.record_failed_attempt(account.id)
            if attempts >= self.policy.lockout_threshold:
                lock_until = now + self.policy.lockout_duration
                store.lock(account.id, lock_until)

        self.activity.record(
            account.id,
            ActivityType.FAILED_LOGIN,
            "Failed login attempt with wrong PIN",
            ip_address,
            user_agent,
        )
        if lock_until is not None:
            logger.warning("auth.locked", extra={"account_id": account.id, "attempts": attempts})
            self.activity.record(
                account.id,
                ActivityType.ACCOUNT_LOCKED,
                f"Account locked after {attempts} failed login attempts",
                ip_address,
                user_agent,
            )
            raise AccountLockedError(lock_until, now)

        logger.info("auth.failed", extra={"account_id": account.id, "attempts": attempts})
        raise WrongCredentialsError()

    def logout(self, account_id: int, ip_address: Optional[str] = None) -> None:
        self.accounts.get(account_id)
        self.activity.record(account_id, ActivityType.LOGOUT, "Logged out", ip_address)

    def change_pin(self, account_id: int, current_pin: str, new_pin: str) -> None:
        """Replace an account's PIN after verifying the current one.

        Raises:
            ValidationError: If the new PIN is malformed or equals the current one
            NotFoundError: If the account does not exist
            WrongCredentialsError: If the current PIN is wrong
        """
        if not is_valid_pin(new_pin):
            raise ValidationError("New PIN must be 4-6 digits only.")

        account = self.accounts.get(account_id)
        if not verify_pin(current_pin, account.pin_hash):
            logger.info("auth.pin_change_rejected", extra={"account_id": account_id})
            self.activity.record(
                account_id,
                ActivityType.FAILED_PIN_CHANGE,
                "Failed PIN change attempt - wrong current PIN",
            )
            raise WrongCredentialsError("Current PIN is incorrect.")

        if verify_pin(new_pin, account.pin_hash):
            raise ValidationError("New PIN must be different from current PIN.")

        self.accounts.update_pin_hash(account_id, hash_pin(new_pin))
        logger.info("auth.pin_changed", extra={"account_id": account_id})
        self.activity.record(account_id, ActivityType.PIN_CHANGED, "PIN changed successfully")

    def admin_lock(self, account_id: int, duration: Optional[timedelta] = None) -> Account:
        """Freeze a standard account from the admin screen.

        Raises:
            NotFoundError: If the account does not exist
            AdminAccountProtectedError: If the target is an administrator
        """
        account = self.accounts.get(account_id)
        if account.is_administrator:
            raise AdminAccountProtectedError(
                f"Account {account_id} is an administrator and cannot be locked"
            )

        until = self.clock() + (duration or self.policy.admin_lock_duration)
        self.accounts.lock(account_id, until)
        logger.warning("auth.admin_locked", extra={"account_id": account_id})
        self.activity.record(account_id, ActivityType.ACCOUNT_LOCKED, "Account manually locked by admin")
        return self.accounts.get(account_id)

    def admin_unlock(self, account_id: int) -> Account:
        """Clear a lock and the failed attempt counter.

        Raises:
            NotFoundError: If the account does not exist
            AdminAccountProtectedError: If the target is an administrator
        """
        account = self.accounts.get(account_id)
        if account.is_administrator:
            raise AdminAccountProtectedError(
                f"Account {account_id} is an administrator and cannot be modified"
            )

        self.accounts.reset_auth_state(account_id)
        logger.info("auth.admin_unlocked", extra={"account_id": account_id})
        self.activity.record(account_id, ActivityType.ACCOUNT_UNLOCKED, "Account manually unlocked by admin")
        return self.accounts.get(account_id)
