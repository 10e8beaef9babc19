"""Accounting periods: closing, the closed-period guard and closing entries.

Closing entries move the period's income and expense balances into a
profit-and-loss account (and optionally on to retained earnings). They are
stored as one split group linked to the period.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from ledgerkit.database.base import Database
from ledgerkit.domain.account_rules import validate_ownership
from ledgerkit.domain.accounting import calculate_account_balance
from ledgerkit.domain.chart import sort_by_code
from ledgerkit.domain.entities import (
    Account,
    AccountClass,
    AccountingPeriod,
    LedgerSettings,
    PeriodStatus,
    SplitResult,
    TransactionInput,
    TransactionStatus,
)
from ledgerkit.domain.errors import (
    ClosedPeriodError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ledgerkit.domain.propagation import AccountOpener
from ledgerkit.domain.settings import SettingsService
from ledgerkit.logging_setup import get_logger

logger = get_logger(__name__)

ZERO = Decimal("0")
CLOSING_PAYEE = "Year closing"
CLOSING_PARENT_NOTE = "Closing entries created"
CLOSING_CHILD_NOTE = "Closing entry created"
RETAINED_EARNINGS_PAYEE = "Year closing - Transfer to Retained Earnings"
NET_RESULT_PAYEE = "Year closing - Net Result"
PERIOD_OVERLAP_MESSAGE = "This period overlaps with an existing accounting period."


@dataclass(frozen=True)
class ClosingLine:
    """Balance of one income or expense account over a period."""

    account_id: int
    account_name: str
    account_code: Optional[str]
    account_class: AccountClass
    balance: Decimal


@dataclass(frozen=True)
class ClosingPreview:
    """What closing a date range would move into the profit-and-loss account."""

    start_date: date
    end_date: date
    income_accounts: tuple[ClosingLine, ...]
    expense_accounts: tuple[ClosingLine, ...]
    profit_and_loss_account: Account
    retained_earnings_account: Optional[Account] = None

    @property
    def total_income(self) -> Decimal:
        return sum((line.balance for line in self.income_accounts), ZERO)

    @property
    def total_expenses(self) -> Decimal:
        return sum((line.balance for line in self.expense_accounts), ZERO)

    @property
    def net_result(self) -> Decimal:
        return self.total_income - self.total_expenses


def check_date_open(db: Database, owner_id: str, day: date) -> None:
    """Reject a date inside one of the owner's closed periods.

    Raises:
        ClosedPeriodError: If a closed period contains the date
    """
    period = db.get_closed_period_for_date(owner_id, day)
    if period is not None:
        raise ClosedPeriodError(period.start_date, period.end_date)


def _period_label(start_date: date, end_date: date) -> str:
    return f"{start_date.isoformat()} to {end_date.isoformat()}"


class AccountingPeriodService:
    """Service for accounting periods and their closing entries."""

    def __init__(self, db: Database):
        """Initialize accounting period service.

        Args:
            db: Database instance
        """
        self.db = db
        self.opener = AccountOpener(db)

    def create_period(
        self,
        owner_id: str,
        start_date: date,
        end_date: date,
        notes: Optional[str] = None,
    ) -> AccountingPeriod:
        """Create an open accounting period.

        Raises:
            ValidationError: If the period ends before it starts
            ConflictError: If the period overlaps one of the owner's periods
        """
        if start_date > end_date:
            raise ValidationError("Start date must be on or before end date.")
        overlapping = self.db.find_overlapping_periods(owner_id, start_date, end_date)
        if overlapping:
            labels = ", ".join(_period_label(p.start_date, p.end_date) for p in overlapping)
            raise ConflictError(f"{PERIOD_OVERLAP_MESSAGE} ({labels})")

        period_id = self.db.create_accounting_period(owner_id, start_date, end_date, notes)
        logger.info(
            "Created accounting period %s (%s) for owner %s",
            period_id,
            _period_label(start_date, end_date),
            owner_id,
        )
        return self.db.get_accounting_period(period_id)

    def get_period(self, owner_id: str, period_id: int) -> AccountingPeriod:
        """Get a period that must belong to the owner.

        Raises:
            NotFoundError: If the period is missing or belongs to someone else
        """
        period = self.db.get_accounting_period(period_id)
        if period is None or period.owner_id != owner_id:
            raise NotFoundError(f"Accounting period {period_id} not found")
        return period

    def list_periods(self, owner_id: str) -> list[AccountingPeriod]:
        """List the owner's periods, latest first."""
        return self.db.list_accounting_periods(owner_id)

    def close_period(
        self, owner_id: str, period_id: int, notes: Optional[str] = None
    ) -> AccountingPeriod:
        """Close a period. Transactions dated inside it become unchangeable.

        Raises:
            NotFoundError: If the period is not the owner's
            ValidationError: If the period is already closed
        """
        period = self.get_period(owner_id, period_id)
        if period.status == PeriodStatus.CLOSED:
            raise ValidationError("Period is already closed.")
        self.db.set_period_status(period_id, PeriodStatus.CLOSED, owner_id, notes)
        logger.info("Closed accounting period %s", period_id)
        return self.db.get_accounting_period(period_id)

    def reopen_period(self, owner_id: str, period_id: int) -> AccountingPeriod:
        """Reopen a closed period.

        Raises:
            NotFoundError: If the period is not the owner's
            ValidationError: If the period is already open
        """
        period = self.get_period(owner_id, period_id)
        if period.status == PeriodStatus.OPEN:
            raise ValidationError("Period is already open.")
        self.db.set_period_status(period_id, PeriodStatus.OPEN)
        logger.info("Reopened accounting period %s", period_id)
        return self.db.get_accounting_period(period_id)

    def delete_period(self, owner_id: str, period_id: int) -> int:
        """Delete a period. Closing entries already written are kept."""
        self.get_period(owner_id, period_id)
        self.db.delete_accounting_period(period_id)
        logger.info("Deleted accounting period %s", period_id)
        return period_id

    def _closing_account(
        self, owner_id: str, account_id: int, label: str
    ) -> Account:
        account = validate_ownership(self.db.get_account(account_id), account_id, owner_id)
        if account.account_class in (AccountClass.INCOME, AccountClass.EXPENSE):
            raise ValidationError(
                f"The {label} account cannot be an income or expense account."
            )
        return account

    def preview_closing(
        self,
        owner_id: str,
        start_date: date,
        end_date: date,
        profit_and_loss_account_id: int,
        retained_earnings_account_id: Optional[int] = None,
    ) -> ClosingPreview:
        """Compute the income and expense balances a closing would move.

        Balances cover posted transactions dated inside the range, without
        opening balances. Accounts with a zero balance are left out.

        Args:
            owner_id: Owner identity
            start_date: First day of the range
            end_date: Last day of the range, inclusive
            profit_and_loss_account_id: Account receiving the net result
            retained_earnings_account_id: Optional account the net result is
                transferred to from the profit-and-loss account

        Raises:
            NotFoundError: If a target account is not the owner's
            ValidationError: If the range is inverted or a target account is
                an income or expense account, or both targets are the same
        """
        if start_date > end_date:
            raise ValidationError("Start date must be on or before end date.")
        profit_and_loss = self._closing_account(
            owner_id, profit_and_loss_account_id, "profit and loss"
        )
        retained_earnings = None
        if retained_earnings_account_id is not None:
            if retained_earnings_account_id == profit_and_loss_account_id:
                raise ValidationError(
                    "The retained earnings account must differ from the profit and loss account."
                )
            retained_earnings = self._closing_account(
                owner_id, retained_earnings_account_id, "retained earnings"
            )

        transactions = self.db.list_transactions(
            owner_id, start_date=start_date, end_date=end_date
        )
        lines = []
        for account in sort_by_code(self.db.list_accounts(owner_id)):
            if account.account_class not in (AccountClass.INCOME, AccountClass.EXPENSE):
                continue
            balance = calculate_account_balance(
                account, transactions, include_opening_balance=False
            )
            if balance == 0:
                continue
            lines.append(
                ClosingLine(
                    account_id=account.id,
                    account_name=account.name,
                    account_code=account.code,
                    account_class=AccountClass(account.account_class),
                    balance=balance,
                )
            )

        return ClosingPreview(
            start_date=start_date,
            end_date=end_date,
            income_accounts=tuple(
                line for line in lines if line.account_class == AccountClass.INCOME
            ),
            expense_accounts=tuple(
                line for line in lines if line.account_class == AccountClass.EXPENSE
            ),
            profit_and_loss_account=profit_and_loss,
            retained_earnings_account=retained_earnings,
        )

    @staticmethod
    def _double_entry_children(
        preview: ClosingPreview, base: TransactionInput
    ) -> list[TransactionInput]:
        """Closing journal entries: each balance against the P&L account."""
        pl_id = preview.profit_and_loss_account.id
        children = []
        for line in preview.income_accounts + preview.expense_accounts:
            # A normal income balance is closed by a debit, a normal expense by a credit
            closes_by_debit = (line.account_class == AccountClass.INCOME) == (line.balance > 0)
            if closes_by_debit:
                debit, credit = line.account_id, pl_id
            else:
                debit, credit = pl_id, line.account_id
            children.append(
                TransactionInput(
                    date=base.date,
                    amount=abs(line.balance),
                    payee=f"{CLOSING_PAYEE} - {line.account_name}",
                    notes=base.notes,
                    status=base.status,
                    debit_account_id=debit,
                    credit_account_id=credit,
                )
            )

        net = preview.net_result
        if preview.retained_earnings_account is not None and net != 0:
            re_id = preview.retained_earnings_account.id
            debit, credit = (pl_id, re_id) if net > 0 else (re_id, pl_id)
            children.append(
                TransactionInput(
                    date=base.date,
                    amount=abs(net),
                    payee=RETAINED_EARNINGS_PAYEE,
                    notes=base.notes,
                    status=base.status,
                    debit_account_id=debit,
                    credit_account_id=credit,
                )
            )
        return children

    @staticmethod
    def _single_entry_children(
        preview: ClosingPreview, base: TransactionInput
    ) -> list[TransactionInput]:
        """Closing rows that reverse each balance and book the net result."""
        pl_id = preview.profit_and_loss_account.id
        children = [
            TransactionInput(
                date=base.date,
                amount=-line.balance,
                payee=f"{CLOSING_PAYEE} - {line.account_name}",
                notes=base.notes,
                status=base.status,
                account_id=line.account_id,
            )
            for line in preview.income_accounts + preview.expense_accounts
        ]

        net = preview.net_result
        if net != 0:
            children.append(
                TransactionInput(
                    date=base.date,
                    amount=net,
                    payee=NET_RESULT_PAYEE,
                    notes=base.notes,
                    status=base.status,
                    account_id=pl_id,
                )
            )
            if preview.retained_earnings_account is not None:
                for account_id, amount in (
                    (pl_id, -net),
                    (preview.retained_earnings_account.id, net),
                ):
                    children.append(
                        TransactionInput(
                            date=base.date,
                            amount=amount,
                            payee=RETAINED_EARNINGS_PAYEE,
                            notes=base.notes,
                            status=base.status,
                            account_id=account_id,
                        )
                    )
        return children

    def create_closing_entries(
        self,
        owner_id: str,
        period_id: int,
        profit_and_loss_account_id: int,
        retained_earnings_account_id: Optional[int] = None,
        closing_date: Optional[date] = None,
        status: TransactionStatus = TransactionStatus.COMPLETED,
        settings: Optional[LedgerSettings] = None,
    ) -> SplitResult:
        """Write the closing entries of a period as one split group.

        In double-entry mode every income and expense balance is closed by a
        credit/debit pair against the profit-and-loss account, and the net
        result is transferred to retained earnings when that account is
        given. Otherwise each balance is reversed on its own account and the
        net result is booked on the profit-and-loss account.

        Closing entries bypass account roles and read-only flags: closing
        debits income and credits expense accounts by definition.

        Args:
            owner_id: Owner identity
            period_id: Period to close out
            profit_and_loss_account_id: Account receiving the net result
            retained_earnings_account_id: Optional retained earnings account
            closing_date: Date of the entries (defaults to the period's end date)
            status: Status of the entries
            settings: Ledger settings (read from storage when None)

        Returns:
            The split parent and the closing entries

        Raises:
            NotFoundError: If the period or a target account is not the owner's
            ConflictError: If the period already has closing entries
            ValidationError: If there is nothing to close
        """
        period = self.get_period(owner_id, period_id)
        if period.closing_split_group_id is not None:
            raise ConflictError(
                f"Accounting period {period_id} already has closing entries "
                f"(split group {period.closing_split_group_id})."
            )
        if settings is None:
            settings = SettingsService(self.db).get_settings(owner_id)

        preview = self.preview_closing(
            owner_id,
            period.start_date,
            period.end_date,
            profit_and_loss_account_id,
            retained_earnings_account_id,
        )
        if not preview.income_accounts and not preview.expense_accounts:
            raise ValidationError(
                "Nothing to close: no income or expense activity in the period."
            )

        status = TransactionStatus(status)
        label = _period_label(period.start_date, period.end_date)
        base = TransactionInput(
            date=closing_date or period.end_date,
            amount=abs(preview.net_result),
            payee=CLOSING_PAYEE,
            notes=f"Closing entry for period {label}",
            status=status,
        )
        if settings.double_entry_mode:
            children = self._double_entry_children(preview, base)
        else:
            children = self._single_entry_children(preview, base)

        account_ids = [account_id for child in children for account_id in child.account_ids]
        self.opener.open_accounts_and_ancestors(account_ids, owner_id)
        split_group_id = uuid4().hex
        parent_id, child_ids = self.db.create_split_group(
            owner_id,
            split_group_id,
            base,
            children,
            CLOSING_PARENT_NOTE,
            CLOSING_CHILD_NOTE,
            closing_period_id=period_id,
        )
        logger.info(
            "Created %s closing entries for period %s (net result %s)",
            len(child_ids),
            period_id,
            preview.net_result,
        )
        return SplitResult(
            parent=self.db.get_transaction(parent_id),
            children=tuple(self.db.get_transaction(child_id) for child_id in child_ids),
        )
