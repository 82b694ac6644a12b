"""Shared pytest fixtures for atmledger tests."""

import tempfile
import os
from datetime import datetime, timedelta
import pytest

from atmledger.database.factories import create_sqlite_database
from atmledger.domain.accounts import AccountStore
from atmledger.domain.activity import ActivityLog
from atmledger.domain.entities import Role
from atmledger.domain.ledger import LedgerLog
from atmledger.domain.lockout import LockoutGuard
from atmledger.domain.policy import LedgerPolicy
from atmledger.domain.rate_limit import RateLimiter
from atmledger.domain.transfer import TransferEngine

PIN = "1234"


class FrozenClock:
    """Controllable time source; call it to read, advance() to move forward."""

    def __init__(self, now: datetime = datetime(2024, 6, 3, 12, 0, 0)):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path, timeout=5)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def clock():
    """Frozen clock shared by every service fixture."""
    return FrozenClock()


@pytest.fixture
def policy():
    """Default ledger policy."""
    return LedgerPolicy()


@pytest.fixture
def activity_log(temp_db, clock):
    """Create an ActivityLog with a temporary database."""
    return ActivityLog(temp_db, clock=clock)


@pytest.fixture
def account_store(temp_db, activity_log):
    """Create an AccountStore with a temporary database."""
    return AccountStore(temp_db, activity=activity_log)


@pytest.fixture
def ledger_log(temp_db, clock):
    """Create a LedgerLog with a temporary database."""
    return LedgerLog(temp_db, clock=clock)


@pytest.fixture
def rate_limiter(temp_db, policy, clock):
    """Create a RateLimiter with a temporary database."""
    return RateLimiter(temp_db, policy, clock=clock)


@pytest.fixture
def lockout_guard(temp_db, policy, activity_log, clock):
    """Create a LockoutGuard with a temporary database."""
    return LockoutGuard(temp_db, policy=policy, activity=activity_log, clock=clock)


@pytest.fixture
def engine(temp_db, policy, activity_log, clock):
    """Create a TransferEngine with a temporary database."""
    return TransferEngine(temp_db, policy=policy, activity=activity_log, clock=clock)


@pytest.fixture
def alice(account_store):
    """A standard account with zero balance."""
    return account_store.register(name="Alice Smith", email="alice@example.com", pin=PIN)


@pytest.fixture
def bob(account_store):
    """A second standard account with zero balance."""
    return account_store.register(name="Bob Jones", email="bob@example.com", pin=PIN)


@pytest.fixture
def admin(account_store):
    """An administrator account."""
    return account_store.register(
        name="Root Admin", email="admin@example.com", pin=PIN, role=Role.ADMINISTRATOR
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
