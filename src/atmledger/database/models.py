"""SQLAlchemy models for atmledger database."""

from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Numeric,
    Index,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

from atmledger.utils.clock import utcnow

Base = declarative_base()

# Fixed-point money column: 2 decimal places.
Money = Numeric(14, 2, asdecimal=True)


class Account(Base):
    """Account identity, balance and authentication state."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False)
    email = Column(String(254), unique=True, nullable=False)
    pin_hash = Column(String(255), nullable=False)
    balance = Column(Money, nullable=False, default=0)
    role = Column(String(20), nullable=False, default="standard")
    failed_attempts = Column(Integer, nullable=False, default=0)
    lock_until = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    ledger_entries = relationship(
        "LedgerEntry", back_populates="account", foreign_keys="LedgerEntry.account_id"
    )
    activities = relationship("ActivityLogEntry", back_populates="account")


class LedgerEntry(Base):
    """Append-only balance event."""

    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    entry_type = Column(String(20), nullable=False)
    amount = Column(Money, nullable=False)
    balance_after = Column(Money, nullable=False)
    counterparty_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    # Range scans by the rate limiter filter on all three columns
    __table_args__ = (
        Index("ix_ledger_account_type_created", "account_id", "entry_type", "created_at"),
    )

    # Relationships
    account = relationship("Account", back_populates="ledger_entries", foreign_keys=[account_id])


class ActivityLogEntry(Base):
    """Security audit trail row."""

    __tablename__ = "activity_log_entries"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    activity_type = Column(String(30), nullable=False)
    description = Column(String, nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    account = relationship("Account", back_populates="activities")


def create_session_factory(database_url: str, timeout: float = 30.0) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory.

    SQLite connections start every transaction with ``BEGIN IMMEDIATE`` so a
    read-modify-write unit holds the database write lock from its first
    read. ``timeout`` bounds how long a connection waits for that lock.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"timeout": timeout, "check_same_thread": False}
    engine = create_engine(database_url, echo=False, connect_args=connect_args)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _disable_pysqlite_transactions(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _begin_immediate(connection):
            connection.exec_driver_sql("BEGIN IMMEDIATE")

    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
