"""Income/expense summary domain service."""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.accounting import DEBIT, is_posting, normal_balance
from ledgerkit.domain.account_rules import validate_ownership
from ledgerkit.domain.entities import (
    Account,
    AccountClass,
    DailyTotal,
    FinancialSummary,
    TagTotal,
    Transaction,
)
from ledgerkit.domain.errors import ValidationError

ZERO = Decimal("0")
TOP_TAGS = 3
OTHER_TAG = "Other"


def calculate_percentage_change(current: Decimal, previous: Decimal) -> float:
    """Return the change from previous to current in percent.

    A zero previous value gives 0 when current is also zero, otherwise 100.
    """
    if previous == 0:
        return 0.0 if current == previous else 100.0
    return float((Decimal(current) - Decimal(previous)) / Decimal(previous) * 100)


def _is_legacy(transaction: Transaction) -> bool:
    return transaction.credit_account_id is None and transaction.debit_account_id is None


def _account_class(accounts_by_id: dict[int, Account], account_id: Optional[int]):
    account = accounts_by_id.get(account_id) if account_id is not None else None
    return account.account_class if account is not None else None


def classify(
    transaction: Transaction,
    accounts_by_id: dict[int, Account],
    account_id: Optional[int] = None,
) -> tuple[Decimal, Decimal]:
    """Return the (income, expense) contribution of one transaction.

    Legacy entries count as income when the amount is positive or zero and as
    expense (absolute value) otherwise. Double entries count credits to
    income accounts and debits to expense accounts; the opposite sides reduce
    the totals. Drafts and split parents contribute nothing.

    Args:
        transaction: Transaction to classify
        accounts_by_id: Accounts referenced by the transaction
        account_id: If set, only the sides touching this account count
    """
    if not is_posting(transaction):
        return ZERO, ZERO

    amount = transaction.amount
    if _is_legacy(transaction):
        if account_id is not None and transaction.account_id != account_id:
            return ZERO, ZERO
        if amount >= 0:
            return amount, ZERO
        return ZERO, -amount

    income = ZERO
    expense = ZERO
    sides = (
        (transaction.credit_account_id, 1),
        (transaction.debit_account_id, -1),
    )
    for side_account_id, credit_sign in sides:
        if account_id is not None and side_account_id != account_id:
            continue
        account_class = _account_class(accounts_by_id, side_account_id)
        if account_class == AccountClass.INCOME:
            income += credit_sign * amount
        elif account_class == AccountClass.EXPENSE:
            expense -= credit_sign * amount
    return income, expense


def account_movement(transaction: Transaction, account: Account) -> Decimal:
    """Return how a posted transaction moves an account from its normal-balance side."""
    if not is_posting(transaction):
        return ZERO
    movement = ZERO
    if transaction.account_id == account.id:
        movement += transaction.amount
    debit_normal = normal_balance(account.account_class) == DEBIT
    if transaction.debit_account_id == account.id:
        movement += transaction.amount if debit_normal else -transaction.amount
    if transaction.credit_account_id == account.id:
        movement += -transaction.amount if debit_normal else transaction.amount
    return movement


def tag_value(transaction: Transaction, accounts_by_id: dict[int, Account]) -> Decimal:
    """Return the magnitude a transaction adds to its tags."""
    if _is_legacy(transaction):
        return abs(transaction.amount)
    if _account_class(accounts_by_id, transaction.debit_account_id) == AccountClass.EXPENSE:
        return transaction.amount
    if _account_class(accounts_by_id, transaction.credit_account_id) == AccountClass.INCOME:
        return transaction.amount
    return ZERO


def previous_period(start_date: date, end_date: date) -> tuple[date, date]:
    """Return the window of equal length ending the day before start_date."""
    length = (end_date - start_date).days + 1
    previous_end = start_date - timedelta(days=1)
    return previous_end - timedelta(days=length - 1), previous_end


class SummaryService:
    """Service for income/expense summaries over a date window."""

    def __init__(self, db: Database):
        """Initialize summary service.

        Args:
            db: Database instance
        """
        self.db = db

    def _posted(
        self, owner_id: str, start_date: date, end_date: date, account_id: Optional[int]
    ) -> list[Transaction]:
        transactions = self.db.list_transactions(
            owner_id, start_date=start_date, end_date=end_date, account_id=account_id
        )
        return [txn for txn in transactions if is_posting(txn)]

    def _totals(
        self,
        transactions: Iterable[Transaction],
        accounts_by_id: dict[int, Account],
        account: Optional[Account],
    ) -> tuple[Decimal, Decimal, Decimal]:
        income = ZERO
        expenses = ZERO
        movement = ZERO
        account_id = account.id if account is not None else None
        for txn in transactions:
            txn_income, txn_expense = classify(txn, accounts_by_id, account_id)
            income += txn_income
            expenses += txn_expense
            if account is not None:
                movement += account_movement(txn, account)
        remaining = movement if account is not None else income - expenses
        return income, expenses, remaining

    def get_tag_totals(
        self, owner_id: str, transactions: Iterable[Transaction], accounts_by_id: dict[int, Account]
    ) -> list[TagTotal]:
        """Total tagged transactions per tag: the top three plus an "Other" bucket."""
        names = {tag.id: tag.name for tag in self.db.list_tags(owner_id)}
        totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for txn in transactions:
            if txn.amount == 0:
                continue
            value = tag_value(txn, accounts_by_id)
            for tag_id in txn.tag_ids:
                if tag_id in names:
                    totals[names[tag_id]] += value

        ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
        result = [TagTotal(name=name, value=value) for name, value in ranked[:TOP_TAGS]]
        rest = ranked[TOP_TAGS:]
        if rest:
            result.append(TagTotal(name=OTHER_TAG, value=sum((v for _, v in rest), ZERO)))
        return result

    def get_daily_totals(
        self,
        transactions: Iterable[Transaction],
        accounts_by_id: dict[int, Account],
        start_date: date,
        end_date: date,
        account_id: Optional[int] = None,
    ) -> list[DailyTotal]:
        """Income and expenses per day, zero-filled; empty when nothing was posted."""
        per_day: dict[date, list[Decimal]] = {}
        for txn in transactions:
            income, expense = classify(txn, accounts_by_id, account_id)
            day = per_day.setdefault(txn.date, [ZERO, ZERO])
            day[0] += income
            day[1] += expense

        if not per_day:
            return []

        days = []
        current = start_date
        while current <= end_date:
            income, expense = per_day.get(current, (ZERO, ZERO))
            days.append(DailyTotal(date=current, income=income, expenses=expense))
            current += timedelta(days=1)
        return days

    def get_summary(
        self,
        owner_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
    ) -> FinancialSummary:
        """Build the income/expense summary for a window.

        Args:
            owner_id: Owner identity
            start_date: Window start (defaults to January 1 of the end date's year)
            end_date: Window end (defaults to today)
            account_id: Optional account to restrict the summary to; remaining
                is then the account's movement from its normal-balance side

        Returns:
            FinancialSummary with totals, changes against the preceding
            window of equal length, tag breakdown and daily series

        Raises:
            ValidationError: If start_date is after end_date
            NotFoundError: If the account is not the owner's
        """
        if end_date is None:
            end_date = date.today()
        if start_date is None:
            start_date = end_date.replace(month=1, day=1)
        if start_date > end_date:
            raise ValidationError("Start date must be on or before end date.")

        account = None
        if account_id is not None:
            account = validate_ownership(self.db.get_account(account_id), account_id, owner_id)

        accounts_by_id = {acc.id: acc for acc in self.db.list_accounts(owner_id)}
        current = self._posted(owner_id, start_date, end_date, account_id)
        prev_start, prev_end = previous_period(start_date, end_date)
        previous = self._posted(owner_id, prev_start, prev_end, account_id)

        income, expenses, remaining = self._totals(current, accounts_by_id, account)
        prev_income, prev_expenses, prev_remaining = self._totals(previous, accounts_by_id, account)

        return FinancialSummary(
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            income=income,
            expenses=expenses,
            remaining=remaining,
            income_change=calculate_percentage_change(income, prev_income),
            expenses_change=calculate_percentage_change(expenses, prev_expenses),
            remaining_change=calculate_percentage_change(remaining, prev_remaining),
            tags=tuple(self.get_tag_totals(owner_id, current, accounts_by_id)),
            days=tuple(
                self.get_daily_totals(current, accounts_by_id, start_date, end_date, account_id)
            ),
        )
