"""Double-entry accounting helpers: normal balances, balances, trial balance.

Asset and expense accounts are debit-normal: debits increase them. Liability,
equity and income accounts are credit-normal.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from ledgerkit.domain.entities import (
    Account,
    AccountClass,
    SplitType,
    Transaction,
    TransactionStatus,
    ValidationIssue,
)

DEBIT = "debit"
CREDIT = "credit"
BALANCE_TOLERANCE = Decimal("0.01")

NORMAL_BALANCES = {
    AccountClass.ASSET: DEBIT,
    AccountClass.EXPENSE: DEBIT,
    AccountClass.LIABILITY: CREDIT,
    AccountClass.EQUITY: CREDIT,
    AccountClass.INCOME: CREDIT,
}

_CONTRA_EXPLANATIONS = {
    AccountClass.ASSET: "This credit decreases the asset account. This is normal for payments, sales, or depreciation.",
    AccountClass.EXPENSE: "This credit decreases the expense account. This might be for expense reversals or refunds.",
    AccountClass.LIABILITY: "This debit decreases the liability account. This is normal for debt payments.",
    AccountClass.EQUITY: "This debit decreases the equity account. This might be for owner withdrawals or losses.",
    AccountClass.INCOME: "This debit decreases the income account. This might be for sales returns, discounts, or closing entries.",
}


@dataclass(frozen=True)
class AccountBalance:
    """Balance of one account from its normal-balance perspective."""

    account_id: int
    account_name: str
    account_class: Optional[AccountClass]
    balance: Decimal
    normal_balance: str

    @property
    def is_normal(self) -> bool:
        return self.balance >= 0


@dataclass(frozen=True)
class TrialBalance:
    """Total debits and credits across account balances."""

    total_debits: Decimal
    total_credits: Decimal

    @property
    def difference(self) -> Decimal:
        return self.total_debits - self.total_credits

    @property
    def is_balanced(self) -> bool:
        return abs(self.difference) < BALANCE_TOLERANCE


def normal_balance(account_class: Optional[AccountClass]) -> str:
    """Return "debit" or "credit"; accounts without a class count as debit-normal."""
    if account_class is None:
        return DEBIT
    return NORMAL_BALANCES[AccountClass(account_class)]


def is_posting(transaction: Transaction) -> bool:
    """Return True if a transaction affects balances (not a draft, not a split parent)."""
    return (
        transaction.status != TransactionStatus.DRAFT
        and transaction.split_type != SplitType.PARENT
    )


def calculate_account_balance(
    account: Account,
    transactions: Iterable[Transaction],
    include_opening_balance: bool = True,
) -> Decimal:
    """Compute an account balance from its opening balance and posted transactions.

    Legacy single-entry amounts are added as signed values. Double-entry
    amounts increase the balance on the normal side and decrease it on the
    other side. Period reports pass include_opening_balance=False to get the
    movement alone.
    """
    side = normal_balance(account.account_class)
    debits = Decimal("0")
    credits = Decimal("0")
    legacy = Decimal("0")
    for txn in transactions:
        if not is_posting(txn):
            continue
        if txn.account_id == account.id:
            legacy += txn.amount
        if txn.debit_account_id == account.id:
            debits += txn.amount
        if txn.credit_account_id == account.id:
            credits += txn.amount

    movement = debits - credits if side == DEBIT else credits - debits
    opening = account.opening_balance if include_opening_balance else Decimal("0")
    return opening + legacy + movement


def calculate_trial_balance(balances: Iterable[AccountBalance]) -> TrialBalance:
    """Sum account balances into debit and credit columns.

    A positive balance lands on the account's normal side, a negative one on
    the opposite side.
    """
    total_debits = Decimal("0")
    total_credits = Decimal("0")
    for entry in balances:
        on_debit_side = (entry.normal_balance == DEBIT) == (entry.balance >= 0)
        if on_debit_side:
            total_debits += abs(entry.balance)
        else:
            total_credits += abs(entry.balance)
    return TrialBalance(total_debits=total_debits, total_credits=total_credits)


def validate_account_operation(
    account: Account,
    operation: str,
    is_draft: bool = False,
) -> Optional[ValidationIssue]:
    """Report an unusual debit or credit against an account class.

    Income being debited and expense being credited are errors (warnings on
    drafts). Other operations against the normal side are warnings.

    Args:
        account: Account on one side of the entry
        operation: "debit" or "credit"
        is_draft: Whether the transaction is a draft

    Returns:
        ValidationIssue, or None when the operation is normal or the account
        has no class
    """
    if account.account_class is None:
        return None
    account_class = AccountClass(account.account_class)
    expected = NORMAL_BALANCES[account_class]
    if operation == expected:
        return None

    label = f'"{account.name}"'
    verb = "debited" if operation == DEBIT else "credited"
    explanation = _CONTRA_EXPLANATIONS[account_class]

    if account_class == AccountClass.INCOME:
        return ValidationIssue(
            type="double-entry",
            message=f"{label} is an income account being {verb}. Income accounts should normally be credited.",
            severity="warning" if is_draft else "error",
            explanation=explanation,
        )
    if account_class == AccountClass.EXPENSE:
        return ValidationIssue(
            type="double-entry",
            message=f"{label} is an expense account being {verb}. Expense accounts should normally be debited.",
            severity="warning" if is_draft else "error",
            explanation=explanation,
        )

    return ValidationIssue(
        type="double-entry",
        message=(
            f"{label} is {verb}. This account is typically {expected}ed "
            f"({account_class.value} account)."
        ),
        severity="warning",
        explanation=explanation,
    )
