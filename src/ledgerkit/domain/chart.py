"""Chart-of-accounts hierarchy derived from account codes.

The parent of an account is the account whose code is its own code minus the
last character. "5" is the parent of "51", which is the parent of "511".
Accounts without a code sit outside the hierarchy.
"""

from typing import Iterable, Optional

from ledgerkit.domain.entities import Account


def ancestors_of(code: Optional[str]) -> list[str]:
    """Return the proper prefixes of a code, shortest first.

    Args:
        code: Account code

    Returns:
        List of ancestor codes (empty for codes of length <= 1 or None)
    """
    if not code:
        return []
    return [code[:length] for length in range(1, len(code))]


def children_of(code: str, accounts: Iterable[Account]) -> list[Account]:
    """Return the direct children of a code, ordered by code."""
    children = [
        acc
        for acc in accounts
        if acc.code is not None
        and len(acc.code) == len(code) + 1
        and acc.code.startswith(code)
    ]
    return sorted(children, key=lambda acc: acc.code)


def has_children(account: Account, accounts: Iterable[Account]) -> bool:
    """Return True if at least one account is a direct child of this one."""
    if account.code is None:
        return False
    return bool(children_of(account.code, accounts))


def is_visible(account: Account, expanded: Iterable[str]) -> bool:
    """Return True if every strict ancestor of the account is expanded."""
    expanded_codes = set(expanded)
    return all(code in expanded_codes for code in ancestors_of(account.code))


def sort_by_code(accounts: Iterable[Account]) -> list[Account]:
    """Sort accounts lexicographically by code; code-less accounts last, by name."""
    return sorted(
        accounts,
        key=lambda acc: (acc.code is None, acc.code or "", acc.name),
    )


def has_invalid_config(account: Account, accounts: Iterable[Account]) -> bool:
    """Return True if an open account sits under at least one closed ancestor.

    Such configurations are reported, never prevented.
    """
    if not account.is_open or account.code is None:
        return False
    ancestor_codes = set(ancestors_of(account.code))
    return any(
        acc.code in ancestor_codes and not acc.is_open
        for acc in accounts
        if acc.owner_id == account.owner_id
    )
