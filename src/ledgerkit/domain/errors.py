"""Shared domain error messages and error types."""

from decimal import Decimal
from typing import Iterable, Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist or belongs to another owner."""


class ConflictError(DomainError):
    """Domain conflict, such as a stale status or duplicate external id."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class BlockedError(DomainError):
    """Status progression rejected by a policy gate.

    Attributes:
        reason: Human-readable reason
        missing: Number of required items still missing, when applicable
    """

    def __init__(self, reason: str, missing: Optional[int] = None):
        self.reason = reason
        self.missing = missing
        super().__init__(reason)


class AccountRoleError(ValidationError):
    """Account used on a side its type forbids."""

    def __init__(self, account_name: str, account_type: str, role: str):
        self.account_name = account_name
        self.account_type = account_type
        self.role = role
        super().__init__(
            f"Account {account_name} is {account_type}-only and cannot be used "
            f"as a {role} account."
        )


class ReadOnlyAccountError(ValidationError):
    """One or more read-only accounts referenced by an entry."""

    def __init__(self, account_names: Iterable[str]):
        self.account_names = tuple(account_names)
        super().__init__(
            "Cannot use read-only account(s) in transactions: "
            f"{', '.join(self.account_names)}"
        )


class DoubleEntryRequiredError(ValidationError):
    """Double-entry mode requires a credit and a debit account."""


class SplitImbalanceError(ValidationError):
    """Split children debits and credits do not balance."""

    def __init__(self, total_debits: Decimal, total_credits: Decimal):
        self.total_debits = total_debits
        self.total_credits = total_credits
        self.difference = total_debits - total_credits
        super().__init__(
            "In double-entry mode, total debits must equal total credits in split "
            f"transactions (debits {total_debits}, credits {total_credits}, "
            f"difference {self.difference})."
        )


class ClosedPeriodError(ValidationError):
    """A transaction date falls inside a closed accounting period."""

    def __init__(self, start_date, end_date):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            "This date falls within a closed accounting period "
            f"({start_date.isoformat()} to {end_date.isoformat()}). "
            "Transactions in closed periods cannot be created or modified."
        )


def prefix_error(error: DomainError, prefix: str) -> DomainError:
    """Prepend context (such as a row number) to an error message in place."""
    error.args = (f"{prefix}: {error}",) + error.args[1:]
    return error


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def accounts_not_owned(account_ids: Iterable[int]) -> str:
    """Return message for account ids that are missing or owned by someone else."""
    return (
        "Account(s) not found or not owned by user: "
        f"{', '.join(str(a) for a in account_ids)}"
    )


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def account_delete_blocked(account_id: int, transaction_count: int) -> str:
    """Return message when account still has transactions posted to it."""
    return (
        f"Cannot delete account {account_id}: it has {transaction_count} "
        f"transaction{'s' if transaction_count != 1 else ''}. "
        "Please reassign or delete them first."
    )
