"""Entry shape and balance validation for transactions and split groups."""

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ledgerkit.domain.account_rules import CREDIT_ROLE, DEBIT_ROLE, validate_role
from ledgerkit.domain.entities import (
    Account,
    DoubleEntry,
    EntryShape,
    LedgerSettings,
    LegacyEntry,
    SplitLine,
    TransactionStatus,
    UnassignedEntry,
)
from ledgerkit.domain.errors import (
    DoubleEntryRequiredError,
    SplitImbalanceError,
    ValidationError,
    prefix_error,
)

SPLIT_TOLERANCE = Decimal("0.01")
MIN_SPLIT_LINES = 2

MIXED_SHAPE_MESSAGE = (
    "A transaction cannot use both a single account and a credit/debit account pair."
)
INCOMPLETE_SHAPE_MESSAGE = (
    "A non-draft transaction needs either an account or both a credit and a debit account."
)
NEGATIVE_AMOUNT_MESSAGE = (
    "When using debit and credit accounts, amount must be positive or zero."
)
DOUBLE_ENTRY_REQUIRED_MESSAGE = (
    "Double-entry mode is enabled: non-draft transactions need both a credit and "
    "a debit account and cannot use a single account."
)
PAYEE_REQUIRED_MESSAGE = "Please select a payee or customer to complete the transaction."
SPLIT_LINE_ACCOUNT_MESSAGE = "Each split needs an account, or a credit or debit account."
SPLIT_DOUBLE_ENTRY_MESSAGE = (
    "Double-entry mode is enabled: splits must use credit or debit accounts, "
    "not a single account."
)


class HasEntryFields(Protocol):
    """Anything carrying the three account references of an entry."""

    account_id: Optional[int]
    credit_account_id: Optional[int]
    debit_account_id: Optional[int]


def entry_shape(entry: HasEntryFields) -> EntryShape:
    """Classify the account references of an entry.

    Returns:
        LegacyEntry, DoubleEntry or UnassignedEntry

    Raises:
        ValidationError: If a single account is mixed with a credit/debit pair
    """
    has_pair_side = entry.credit_account_id is not None or entry.debit_account_id is not None
    if entry.account_id is not None and has_pair_side:
        raise ValidationError(MIXED_SHAPE_MESSAGE)
    if entry.account_id is not None:
        return LegacyEntry(account_id=entry.account_id)
    if entry.credit_account_id is not None and entry.debit_account_id is not None:
        return DoubleEntry(
            credit_account_id=entry.credit_account_id,
            debit_account_id=entry.debit_account_id,
        )
    return UnassignedEntry(
        credit_account_id=entry.credit_account_id,
        debit_account_id=entry.debit_account_id,
    )


def validate_entry(
    entry: HasEntryFields,
    amount: Decimal,
    status: TransactionStatus,
    settings: LedgerSettings,
) -> EntryShape:
    """Validate the shape of an entry for a given status.

    Drafts may be unassigned or half-assigned. Every other status needs a
    complete legacy or double-entry form, and the double-entry form when
    double-entry mode is enabled.

    Args:
        entry: Entry to validate
        amount: Entry amount
        status: Status the entry will be stored with
        settings: Owner ledger settings

    Returns:
        The entry shape

    Raises:
        ValidationError: If the shape or amount sign is invalid
        DoubleEntryRequiredError: If double-entry mode requires a credit/debit pair
    """
    shape = entry_shape(entry)
    is_draft = status == TransactionStatus.DRAFT

    if settings.double_entry_mode and not is_draft and not isinstance(shape, DoubleEntry):
        raise DoubleEntryRequiredError(DOUBLE_ENTRY_REQUIRED_MESSAGE)

    if not is_draft and isinstance(shape, UnassignedEntry):
        raise ValidationError(INCOMPLETE_SHAPE_MESSAGE)

    if entry.account_id is None and amount < 0:
        raise ValidationError(NEGATIVE_AMOUNT_MESSAGE)

    return shape


def validate_roles(entry: HasEntryFields, accounts_by_id: dict[int, Account]) -> None:
    """Check the credit and debit sides against the account types.

    Raises:
        AccountRoleError: If a side is forbidden for its account
    """
    if entry.credit_account_id is not None and entry.credit_account_id in accounts_by_id:
        validate_role(accounts_by_id[entry.credit_account_id], CREDIT_ROLE)
    if entry.debit_account_id is not None and entry.debit_account_id in accounts_by_id:
        validate_role(accounts_by_id[entry.debit_account_id], DEBIT_ROLE)


def validate_payee(
    payee: Optional[str], payee_customer_id: Optional[int], status: TransactionStatus
) -> None:
    """Require a payee or payee customer on every non-draft transaction."""
    if status == TransactionStatus.DRAFT:
        return
    if not (payee and payee.strip()) and payee_customer_id is None:
        raise ValidationError(PAYEE_REQUIRED_MESSAGE)


def split_totals(lines: Sequence[SplitLine]) -> tuple[Decimal, Decimal]:
    """Return (debit-routed total, credit-routed total) of split lines."""
    total_debits = sum(
        (line.amount for line in lines if line.debit_account_id is not None), Decimal("0")
    )
    total_credits = sum(
        (line.amount for line in lines if line.credit_account_id is not None), Decimal("0")
    )
    return total_debits, total_credits


def validate_split_line(
    line: HasEntryFields,
    amount: Decimal,
    status: TransactionStatus,
    settings: LedgerSettings,
) -> EntryShape:
    """Validate one child of a split group.

    A child may carry a single account, a credit/debit pair, or only one
    side of a pair; one-sided children are balanced by their siblings.

    Raises:
        ValidationError: If the shape is mixed, references no account, or a
            credit/debit child has a negative amount
        DoubleEntryRequiredError: If double-entry mode forbids the single account
    """
    shape = entry_shape(line)
    if isinstance(shape, UnassignedEntry) and (
        line.credit_account_id is None and line.debit_account_id is None
    ):
        raise ValidationError(SPLIT_LINE_ACCOUNT_MESSAGE)
    if (
        settings.double_entry_mode
        and status != TransactionStatus.DRAFT
        and isinstance(shape, LegacyEntry)
    ):
        raise DoubleEntryRequiredError(SPLIT_DOUBLE_ENTRY_MESSAGE)
    if line.account_id is None and amount < 0:
        raise ValidationError(NEGATIVE_AMOUNT_MESSAGE)
    return shape


def check_split_lines(
    lines: Sequence[SplitLine],
    status: TransactionStatus,
    settings: LedgerSettings,
) -> None:
    """Validate the children of a split group.

    Args:
        lines: Child lines
        status: Status shared by every child
        settings: Owner ledger settings

    Raises:
        ValidationError: If there are fewer than two lines or a line is invalid
        DoubleEntryRequiredError: If double-entry mode forbids a single-account line
        SplitImbalanceError: If debits and credits differ by more than 0.01
            in double-entry mode
    """
    if len(lines) < MIN_SPLIT_LINES:
        raise ValidationError("Split transactions need at least 2 splits.")

    for index, line in enumerate(lines, start=1):
        try:
            validate_split_line(line, line.amount, status, settings)
        except ValidationError as e:
            raise prefix_error(e, f"Split {index}")

    if settings.double_entry_mode:
        total_debits, total_credits = split_totals(lines)
        if abs(total_debits - total_credits) > SPLIT_TOLERANCE:
            raise SplitImbalanceError(total_debits, total_credits)
