"""Financial reports: income statement and balance sheet.

A parent account reports its own balance plus the report balances of its
direct children, so grouping accounts roll up level by level. Report totals
add up the top-level accounts of each class (accounts without an ancestor
in the chart).
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.accounting import BALANCE_TOLERANCE, calculate_account_balance
from ledgerkit.domain.chart import ancestors_of, children_of, sort_by_code
from ledgerkit.domain.entities import Account, AccountClass
from ledgerkit.domain.errors import ValidationError
from ledgerkit.logging_setup import get_logger

logger = get_logger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class ReportLine:
    """One account row of a report."""

    account_id: int
    code: Optional[str]
    name: str
    balance: Decimal
    is_read_only: bool
    depth: int = 0


@dataclass(frozen=True)
class IncomeStatement:
    """Income and expense activity over a date window."""

    start_date: date
    end_date: date
    income_accounts: tuple[ReportLine, ...]
    expense_accounts: tuple[ReportLine, ...]
    total_income: Decimal
    total_expenses: Decimal

    @property
    def net_income(self) -> Decimal:
        return self.total_income - self.total_expenses


@dataclass(frozen=True)
class BalanceSheet:
    """Asset, liability and equity balances as of a date."""

    as_of: date
    asset_accounts: tuple[ReportLine, ...]
    liability_accounts: tuple[ReportLine, ...]
    equity_accounts: tuple[ReportLine, ...]
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal

    @property
    def liabilities_and_equity(self) -> Decimal:
        return self.total_liabilities + self.total_equity

    @property
    def difference(self) -> Decimal:
        return self.total_assets - self.liabilities_and_equity

    @property
    def is_balanced(self) -> bool:
        return abs(self.difference) < BALANCE_TOLERANCE


def rollup_balances(accounts: list[Account], balances: dict[int, Decimal]) -> dict[int, Decimal]:
    """Add the rolled-up balances of direct children to every parent account.

    Deeper codes are processed first so that each parent sees the final
    balances of its children.
    """
    result = dict(balances)
    parents = sorted(
        (acc for acc in accounts if acc.code),
        key=lambda acc: len(acc.code),
        reverse=True,
    )
    for parent in parents:
        children = children_of(parent.code, accounts)
        if children:
            result[parent.id] = result.get(parent.id, ZERO) + sum(
                (result.get(child.id, ZERO) for child in children), ZERO
            )
    return result


def top_level_accounts(accounts: Iterable[Account]) -> list[Account]:
    """Return the accounts with no ancestor among the given accounts."""
    accounts = list(accounts)
    codes = {acc.code for acc in accounts if acc.code}
    return [
        acc
        for acc in accounts
        if not any(code in codes for code in ancestors_of(acc.code))
    ]


class ReportService:
    """Service for income statement and balance sheet reports."""

    def __init__(self, db: Database):
        """Initialize report service.

        Args:
            db: Database instance
        """
        self.db = db

    def _class_section(
        self,
        accounts: list[Account],
        balances: dict[int, Decimal],
        account_class: AccountClass,
    ) -> tuple[tuple[ReportLine, ...], Decimal]:
        """Build the open report lines and the total of one account class."""
        members = [acc for acc in accounts if acc.account_class == account_class]
        codes = {acc.code for acc in members if acc.code}
        lines = tuple(
            ReportLine(
                account_id=acc.id,
                code=acc.code,
                name=acc.name,
                balance=balances.get(acc.id, ZERO),
                is_read_only=acc.is_read_only,
                depth=sum(1 for code in ancestors_of(acc.code) if code in codes),
            )
            for acc in sort_by_code(members)
            if acc.is_open
        )
        total = sum((balances.get(acc.id, ZERO) for acc in top_level_accounts(members)), ZERO)
        return lines, total

    def _balances(
        self,
        owner_id: str,
        classes: tuple[AccountClass, ...],
        start_date: Optional[date],
        end_date: date,
        include_opening_balance: bool,
    ) -> tuple[list[Account], dict[int, Decimal]]:
        accounts = [
            acc for acc in self.db.list_accounts(owner_id) if acc.account_class in classes
        ]
        transactions = self.db.list_transactions(
            owner_id, start_date=start_date, end_date=end_date
        )
        balances = {
            acc.id: calculate_account_balance(
                acc, transactions, include_opening_balance=include_opening_balance
            )
            for acc in accounts
        }
        return accounts, rollup_balances(accounts, balances)

    def get_income_statement(
        self,
        owner_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> IncomeStatement:
        """Report income and expense activity over a window.

        Opening balances are left out: the statement covers the activity of
        the window only. Drafts and split parents do not count.

        Args:
            owner_id: Owner identity
            start_date: First day (defaults to January 1 of the end date's year)
            end_date: Last day, inclusive (defaults to today)

        Raises:
            ValidationError: If the window ends before it starts
        """
        end_date = end_date or date.today()
        start_date = start_date or date(end_date.year, 1, 1)
        if start_date > end_date:
            raise ValidationError("Start date must be on or before end date.")

        accounts, balances = self._balances(
            owner_id,
            (AccountClass.INCOME, AccountClass.EXPENSE),
            start_date,
            end_date,
            include_opening_balance=False,
        )
        income_accounts, total_income = self._class_section(
            accounts, balances, AccountClass.INCOME
        )
        expense_accounts, total_expenses = self._class_section(
            accounts, balances, AccountClass.EXPENSE
        )
        logger.debug(
            "Income statement for %s from %s to %s: income %s, expenses %s",
            owner_id,
            start_date,
            end_date,
            total_income,
            total_expenses,
        )
        return IncomeStatement(
            start_date=start_date,
            end_date=end_date,
            income_accounts=income_accounts,
            expense_accounts=expense_accounts,
            total_income=total_income,
            total_expenses=total_expenses,
        )

    def get_balance_sheet(self, owner_id: str, as_of: Optional[date] = None) -> BalanceSheet:
        """Report asset, liability and equity balances as of a date.

        Balances include opening balances and every posted transaction up to
        and including the date. Until the period's income and expenses are
        closed into equity, the sheet shows the net result as a difference.
        """
        as_of = as_of or date.today()
        accounts, balances = self._balances(
            owner_id,
            (AccountClass.ASSET, AccountClass.LIABILITY, AccountClass.EQUITY),
            None,
            as_of,
            include_opening_balance=True,
        )
        asset_accounts, total_assets = self._class_section(
            accounts, balances, AccountClass.ASSET
        )
        liability_accounts, total_liabilities = self._class_section(
            accounts, balances, AccountClass.LIABILITY
        )
        equity_accounts, total_equity = self._class_section(
            accounts, balances, AccountClass.EQUITY
        )
        return BalanceSheet(
            as_of=as_of,
            asset_accounts=asset_accounts,
            liability_accounts=liability_accounts,
            equity_accounts=equity_accounts,
            total_assets=total_assets,
            total_liabilities=total_liabilities,
            total_equity=total_equity,
        )
