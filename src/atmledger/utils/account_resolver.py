"""Utility for resolving account emails to IDs."""

from atmledger.domain.accounts import AccountStore
from atmledger.domain.errors import NotFoundError


def resolve_account(account_store: AccountStore, account: str | int) -> int:
    """Resolve account email or ID to account ID.

    Args:
        account_store: AccountStore instance
        account: Account email (str) or ID (int or string representation of int)

    Returns:
        Account ID

    Raises:
        NotFoundError: If account is not found
    """
    if isinstance(account, int):
        return account_store.get(account).id

    # Try to parse as integer (handles string IDs like "1")
    try:
        account_id = int(account)
    except (ValueError, TypeError):
        account_id = None
    if account_id is not None:
        account_obj = account_store.db.get_account(account_id)
        if account_obj is None:
            raise NotFoundError(f"Account ID {account_id} not found")
        return account_id

    account_obj = account_store.find_by_email(account)
    if account_obj is None:
        raise NotFoundError(f"Account '{account}' not found")
    return account_obj.id
