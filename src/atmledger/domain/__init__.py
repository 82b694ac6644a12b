"""Domain layer for atmledger application."""

__all__ = [
    "AccountStore",
    "ActivityLog",
    "LedgerLog",
    "LockoutGuard",
    "LedgerPolicy",
    "RateLimiter",
    "TransferEngine",
]


# Services import the database layer, which imports domain.entities; load
# them lazily so importing atmledger.database first does not cycle back here.
def __getattr__(name):
    if name == "AccountStore":
        from atmledger.domain.accounts import AccountStore
        return AccountStore
    if name == "ActivityLog":
        from atmledger.domain.activity import ActivityLog
        return ActivityLog
    if name == "LedgerLog":
        from atmledger.domain.ledger import LedgerLog
        return LedgerLog
    if name == "LockoutGuard":
        from atmledger.domain.lockout import LockoutGuard
        return LockoutGuard
    if name == "LedgerPolicy":
        from atmledger.domain.policy import LedgerPolicy
        return LedgerPolicy
    if name == "RateLimiter":
        from atmledger.domain.rate_limit import RateLimiter
        return RateLimiter
    if name == "TransferEngine":
        from atmledger.domain.transfer import TransferEngine
        return TransferEngine
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
