"""Account typing and usage rules applied to every transaction write."""

from typing import Iterable, Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import Account, AccountType
from ledgerkit.domain.errors import (
    AccountRoleError,
    NotFoundError,
    ReadOnlyAccountError,
    accounts_not_owned,
)

CREDIT_ROLE = "credit"
DEBIT_ROLE = "debit"


def validate_role(account: Account, role: str) -> None:
    """Check that an account may take the given side of an entry.

    Args:
        account: Account referenced by the entry
        role: "credit" or "debit"

    Raises:
        AccountRoleError: If a debit-only account is credited or a
            credit-only account is debited
        ValueError: If role is not credit or debit
    """
    if role not in (CREDIT_ROLE, DEBIT_ROLE):
        raise ValueError(f"Unknown account role '{role}'")
    if role == CREDIT_ROLE and account.account_type == AccountType.DEBIT:
        raise AccountRoleError(account.name, AccountType.DEBIT.value, CREDIT_ROLE)
    if role == DEBIT_ROLE and account.account_type == AccountType.CREDIT:
        raise AccountRoleError(account.name, AccountType.CREDIT.value, DEBIT_ROLE)


def validate_not_read_only(account: Account) -> None:
    """Raise ReadOnlyAccountError if the account rejects new transactions."""
    if account.is_read_only:
        raise ReadOnlyAccountError([account.name])


def validate_ownership(account: Optional[Account], account_id: int, owner_id: str) -> Account:
    """Return the account if it exists and belongs to the owner.

    Raises:
        NotFoundError: If the account is missing or owned by someone else
    """
    if account is None or account.owner_id != owner_id:
        raise NotFoundError(accounts_not_owned([account_id]))
    return account


def resolve_referenced_accounts(
    db: Database,
    owner_id: str,
    account_ids: Iterable[int],
    allow_read_only: Iterable[int] = (),
) -> dict[int, Account]:
    """Load every referenced account and check ownership and read-only flags.

    Missing accounts are reported together in one NotFoundError, read-only
    accounts together in one ReadOnlyAccountError.

    Args:
        db: Database instance
        owner_id: Caller identity
        account_ids: Referenced account IDs (duplicates allowed)
        allow_read_only: IDs exempt from the read-only check (accounts an
            existing transaction already references)

    Returns:
        Mapping of account ID to account

    Raises:
        NotFoundError: If any account is missing or belongs to another owner
        ReadOnlyAccountError: If any account is read-only
    """
    ids = sorted(set(account_ids))
    if not ids:
        return {}

    found = {acc.id: acc for acc in db.get_accounts(ids) if acc.owner_id == owner_id}
    missing = [account_id for account_id in ids if account_id not in found]
    if missing:
        raise NotFoundError(accounts_not_owned(missing))

    exempt = set(allow_read_only)
    read_only = [
        found[account_id].name
        for account_id in ids
        if found[account_id].is_read_only and account_id not in exempt
    ]
    if read_only:
        raise ReadOnlyAccountError(read_only)

    return found
