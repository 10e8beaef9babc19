"""Utility for resolving account references (code, name or ID) to IDs."""

from ledgerkit.domain.account import AccountService
from ledgerkit.domain.errors import NotFoundError


def resolve_account(account_service: AccountService, owner_id: str, account: str | int) -> int:
    """Resolve an account code, name or ID to an account ID.

    Codes are matched first, then names, then numeric IDs, so a numeric
    code such as "11" refers to the account coded 11 rather than ID 11.

    Args:
        account_service: AccountService instance
        owner_id: Owner whose accounts are searched
        account: Account code, name or ID

    Returns:
        Account ID

    Raises:
        NotFoundError: If no account of the owner matches
    """
    accounts = account_service.list_accounts(owner_id)

    if isinstance(account, int):
        account_id = account
    else:
        reference = account.strip()
        for acc in accounts:
            if acc.code is not None and acc.code == reference:
                return acc.id
        for acc in accounts:
            if acc.name == reference:
                return acc.id
        try:
            account_id = int(reference)
        except ValueError:
            raise NotFoundError(f"Account '{account}' not found")

    for acc in accounts:
        if acc.id == account_id:
            return acc.id
    raise NotFoundError(f"Account ID {account_id} not found")
