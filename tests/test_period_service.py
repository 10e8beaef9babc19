"""Tests for accounting periods, the closed-period guard and closing entries."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import (
    AccountClass,
    LedgerSettings,
    PeriodStatus,
    SplitType,
    TransactionStatus,
)
from ledgerkit.domain.errors import (
    ClosedPeriodError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

from conftest import OTHER_OWNER, OWNER

PLAIN = LedgerSettings(owner_id=OWNER)
DOUBLE = LedgerSettings(owner_id=OWNER, double_entry_mode=True)
PENDING = TransactionStatus.PENDING

YEAR_START = date(2024, 1, 1)
YEAR_END = date(2024, 12, 31)


@pytest.fixture
def equity(account_service, chart):
    """Add an equity branch with a P&L account (31) and retained earnings (32)."""
    ids = {}
    for code, name in (("3", "Equity"), ("31", "Profit and loss"), ("32", "Retained earnings")):
        ids[code] = account_service.create_account(
            OWNER, name, code=code, account_class=AccountClass.EQUITY
        )
    return ids


@pytest.fixture
def year_activity(transaction_service, chart, make_input):
    """Post a 500 sale, a 120 office purchase and an 80 trip in 2024."""
    for day, amount, debit, credit in (
        (date(2024, 3, 1), "500.00", "11", "41"),
        (date(2024, 3, 5), "120.00", "51", "11"),
        (date(2024, 4, 10), "80.00", "52", "12"),
    ):
        transaction_service.create_transaction(
            OWNER,
            make_input(
                date=day,
                amount=Decimal(amount),
                debit_account_id=chart[debit],
                credit_account_id=chart[credit],
                status=PENDING,
            ),
            DOUBLE,
        )


def _balance(temp_db, account_id):
    balances = AccountService(temp_db).get_account_balances(OWNER)
    return next(b.balance for b in balances if b.account_id == account_id)


class TestPeriodLifecycle:
    """Tests for creating, listing, closing and deleting periods."""

    def test_create_and_list_latest_first(self, period_service):
        first = period_service.create_period(OWNER, date(2023, 1, 1), date(2023, 12, 31))
        second = period_service.create_period(OWNER, YEAR_START, YEAR_END, notes="FY 2024")

        assert second.status == PeriodStatus.OPEN
        assert second.notes == "FY 2024"
        assert second.closed_at is None
        assert [p.id for p in period_service.list_periods(OWNER)] == [second.id, first.id]
        assert period_service.list_periods(OTHER_OWNER) == []

    def test_overlapping_period_rejected(self, period_service):
        period_service.create_period(OWNER, YEAR_START, YEAR_END)

        with pytest.raises(ConflictError, match="overlaps with an existing accounting period"):
            period_service.create_period(OWNER, date(2024, 12, 31), date(2025, 6, 30))

    def test_other_owner_may_reuse_dates(self, period_service):
        period_service.create_period(OWNER, YEAR_START, YEAR_END)
        period = period_service.create_period(OTHER_OWNER, YEAR_START, YEAR_END)
        assert period.owner_id == OTHER_OWNER

    def test_inverted_range_rejected(self, period_service):
        with pytest.raises(ValidationError, match="Start date must be on or before end date"):
            period_service.create_period(OWNER, YEAR_END, YEAR_START)

    def test_single_day_period(self, period_service):
        period = period_service.create_period(OWNER, YEAR_END, YEAR_END)
        assert period.contains(YEAR_END)
        assert not period.contains(YEAR_START)

    def test_other_owner_cannot_see_period(self, period_service):
        period = period_service.create_period(OWNER, YEAR_START, YEAR_END)

        with pytest.raises(NotFoundError):
            period_service.get_period(OTHER_OWNER, period.id)
        with pytest.raises(NotFoundError):
            period_service.close_period(OTHER_OWNER, period.id)

    def test_close_and_reopen(self, period_service):
        period = period_service.create_period(OWNER, YEAR_START, YEAR_END, notes="FY")

        closed = period_service.close_period(OWNER, period.id, notes="Audited")
        assert closed.status == PeriodStatus.CLOSED
        assert closed.closed_by == OWNER
        assert closed.closed_at is not None
        assert closed.notes == "Audited"

        with pytest.raises(ValidationError, match="already closed"):
            period_service.close_period(OWNER, period.id)

        reopened = period_service.reopen_period(OWNER, period.id)
        assert reopened.status == PeriodStatus.OPEN
        assert reopened.closed_at is None
        assert reopened.closed_by is None

        with pytest.raises(ValidationError, match="already open"):
            period_service.reopen_period(OWNER, period.id)

    def test_delete(self, period_service):
        period = period_service.create_period(OWNER, YEAR_START, YEAR_END)

        assert period_service.delete_period(OWNER, period.id) == period.id
        assert period_service.list_periods(OWNER) == []
        with pytest.raises(NotFoundError):
            period_service.get_period(OWNER, period.id)


class TestClosedPeriodGuard:
    """Tests for transactions dated inside a closed period."""

    @pytest.fixture
    def first_quarter(self, period_service):
        return period_service.create_period(OWNER, YEAR_START, date(2024, 3, 31))

    def test_create_rejected_in_closed_period(
        self, period_service, transaction_service, chart, make_input, first_quarter
    ):
        period_service.close_period(OWNER, first_quarter.id)

        with pytest.raises(ClosedPeriodError, match="2024-01-01 to 2024-03-31"):
            transaction_service.create_transaction(
                OWNER, make_input(account_id=chart["11"], status=PENDING), PLAIN
            )

    def test_bulk_create_rejected_in_closed_period(
        self, period_service, transaction_service, chart, make_input, first_quarter
    ):
        period_service.close_period(OWNER, first_quarter.id)
        rows = [
            make_input(date=date(2024, 4, 2), account_id=chart["11"], status=PENDING),
            make_input(date=date(2024, 3, 30), account_id=chart["11"], status=PENDING),
        ]

        with pytest.raises(ClosedPeriodError):
            transaction_service.bulk_create_transactions(OWNER, rows, PLAIN)
        assert transaction_service.list_transactions(OWNER) == []

    def test_open_period_does_not_block(
        self, transaction_service, chart, make_input, first_quarter
    ):
        created = transaction_service.create_transaction(
            OWNER, make_input(account_id=chart["11"], status=PENDING), PLAIN
        )
        assert created.date == date(2024, 1, 15)

    def test_update_and_delete_rejected_in_closed_period(
        self, period_service, transaction_service, chart, make_input, first_quarter
    ):
        created = transaction_service.create_transaction(
            OWNER, make_input(account_id=chart["11"], status=PENDING), PLAIN
        )
        period_service.close_period(OWNER, first_quarter.id)

        with pytest.raises(ClosedPeriodError):
            transaction_service.update_transaction(OWNER, created.id, PLAIN, notes="late edit")
        with pytest.raises(ClosedPeriodError):
            transaction_service.update_transaction(
                OWNER, created.id, PLAIN, date=date(2024, 5, 1)
            )
        with pytest.raises(ClosedPeriodError):
            transaction_service.delete_transaction(OWNER, created.id)

        assert transaction_service.get_transaction(OWNER, created.id).notes is None

    def test_moving_date_into_closed_period_rejected(
        self, period_service, transaction_service, chart, make_input, first_quarter
    ):
        created = transaction_service.create_transaction(
            OWNER,
            make_input(date=date(2024, 4, 10), account_id=chart["11"], status=PENDING),
            PLAIN,
        )
        period_service.close_period(OWNER, first_quarter.id)

        with pytest.raises(ClosedPeriodError):
            transaction_service.update_transaction(
                OWNER, created.id, PLAIN, date=date(2024, 2, 1)
            )
        assert transaction_service.get_transaction(OWNER, created.id).date == date(2024, 4, 10)

    def test_reopened_period_accepts_changes(
        self, period_service, transaction_service, chart, make_input, first_quarter
    ):
        created = transaction_service.create_transaction(
            OWNER, make_input(account_id=chart["11"], status=PENDING), PLAIN
        )
        period_service.close_period(OWNER, first_quarter.id)
        period_service.reopen_period(OWNER, first_quarter.id)

        updated = transaction_service.update_transaction(OWNER, created.id, PLAIN, notes="ok")
        assert updated.notes == "ok"
        assert transaction_service.delete_transaction(OWNER, created.id) == created.id


class TestClosingPreview:
    """Tests for the closing preview."""

    def test_figures(self, period_service, chart, equity, year_activity):
        preview = period_service.preview_closing(
            OWNER, YEAR_START, YEAR_END, equity["31"], equity["32"]
        )

        assert [(line.account_code, line.balance) for line in preview.income_accounts] == [
            ("41", Decimal("500.00"))
        ]
        assert [(line.account_code, line.balance) for line in preview.expense_accounts] == [
            ("51", Decimal("120.00")),
            ("52", Decimal("80.00")),
        ]
        assert preview.total_income == Decimal("500.00")
        assert preview.total_expenses == Decimal("200.00")
        assert preview.net_result == Decimal("300.00")
        assert preview.profit_and_loss_account.id == equity["31"]
        assert preview.retained_earnings_account.id == equity["32"]

    def test_range_limits_activity(self, period_service, equity, year_activity):
        preview = period_service.preview_closing(
            OWNER, YEAR_START, date(2024, 3, 31), equity["31"]
        )
        assert preview.total_expenses == Decimal("120.00")
        assert preview.retained_earnings_account is None

    def test_income_account_cannot_receive_result(self, period_service, chart, equity):
        with pytest.raises(ValidationError, match="cannot be an income or expense account"):
            period_service.preview_closing(OWNER, YEAR_START, YEAR_END, chart["41"])

    def test_targets_must_differ(self, period_service, equity):
        with pytest.raises(ValidationError, match="must differ"):
            period_service.preview_closing(
                OWNER, YEAR_START, YEAR_END, equity["31"], equity["31"]
            )

    def test_other_owners_account_rejected(self, account_service, period_service, chart):
        foreign = account_service.create_account(
            OTHER_OWNER, "Their equity", account_class=AccountClass.EQUITY
        )
        with pytest.raises(NotFoundError):
            period_service.preview_closing(OWNER, YEAR_START, YEAR_END, foreign)


class TestClosingEntries:
    """Tests for writing closing entries."""

    @pytest.fixture
    def fiscal_year(self, period_service):
        return period_service.create_period(OWNER, YEAR_START, YEAR_END)

    def test_double_entry_closing_zeroes_results(
        self,
        temp_db,
        account_service,
        period_service,
        report_service,
        transaction_service,
        chart,
        equity,
        year_activity,
        fiscal_year,
    ):
        result = period_service.create_closing_entries(
            OWNER, fiscal_year.id, equity["31"], equity["32"], settings=DOUBLE
        )

        assert result.parent.split_type == SplitType.PARENT
        assert result.parent.payee == "Year closing"
        assert result.parent.date == YEAR_END
        assert result.parent.amount == Decimal("300.00")
        assert [
            (c.debit_account_id, c.credit_account_id, c.amount) for c in result.children
        ] == [
            (chart["41"], equity["31"], Decimal("500.00")),
            (equity["31"], chart["51"], Decimal("120.00")),
            (equity["31"], chart["52"], Decimal("80.00")),
            (equity["31"], equity["32"], Decimal("300.00")),
        ]
        assert all(c.status == TransactionStatus.COMPLETED for c in result.children)

        for code in ("41", "51", "52"):
            assert _balance(temp_db, chart[code]) == Decimal("0")
        assert _balance(temp_db, equity["31"]) == Decimal("0")
        assert _balance(temp_db, equity["32"]) == Decimal("300.00")
        assert account_service.get_trial_balance(OWNER).is_balanced

        sheet = report_service.get_balance_sheet(OWNER, as_of=YEAR_END)
        assert sheet.total_equity == Decimal("300.00")
        assert sheet.is_balanced

        period = period_service.get_period(OWNER, fiscal_year.id)
        assert period.closing_split_group_id == result.parent.split_group_id

    def test_closing_without_retained_earnings(
        self, temp_db, period_service, chart, equity, year_activity, fiscal_year
    ):
        result = period_service.create_closing_entries(
            OWNER, fiscal_year.id, equity["31"], settings=DOUBLE
        )
        assert len(result.children) == 3
        assert _balance(temp_db, equity["31"]) == Decimal("300.00")

    def test_net_loss_flips_the_transfer(
        self, period_service, transaction_service, chart, equity, make_input, fiscal_year
    ):
        transaction_service.create_transaction(
            OWNER,
            make_input(
                amount=Decimal("70.00"),
                debit_account_id=chart["52"],
                credit_account_id=chart["11"],
                status=PENDING,
            ),
            DOUBLE,
        )
        result = period_service.create_closing_entries(
            OWNER, fiscal_year.id, equity["31"], equity["32"], settings=DOUBLE
        )
        transfer = result.children[-1]
        assert (transfer.debit_account_id, transfer.credit_account_id) == (
            equity["32"],
            equity["31"],
        )
        assert transfer.amount == Decimal("70.00")

    def test_single_entry_closing(
        self, temp_db, period_service, transaction_service, chart, equity, make_input, fiscal_year
    ):
        for code, amount in (("41", "500.00"), ("52", "80.00")):
            transaction_service.create_transaction(
                OWNER,
                make_input(amount=Decimal(amount), account_id=chart[code], status=PENDING),
                PLAIN,
            )

        result = period_service.create_closing_entries(
            OWNER,
            fiscal_year.id,
            equity["31"],
            closing_date=date(2024, 12, 30),
            status=PENDING,
            settings=PLAIN,
        )

        assert [(c.account_id, c.amount) for c in result.children] == [
            (chart["41"], Decimal("-500.00")),
            (chart["52"], Decimal("-80.00")),
            (equity["31"], Decimal("420.00")),
        ]
        assert all(c.date == date(2024, 12, 30) for c in result.children)
        assert all(c.status == PENDING for c in result.children)
        assert _balance(temp_db, chart["41"]) == Decimal("0")
        assert _balance(temp_db, chart["52"]) == Decimal("0")

    def test_second_closing_rejected(
        self, period_service, equity, year_activity, fiscal_year
    ):
        period_service.create_closing_entries(OWNER, fiscal_year.id, equity["31"], settings=DOUBLE)

        with pytest.raises(ConflictError, match="already has closing entries"):
            period_service.create_closing_entries(
                OWNER, fiscal_year.id, equity["31"], settings=DOUBLE
            )

    def test_deleting_entries_unlinks_period(
        self, period_service, transaction_service, equity, year_activity, fiscal_year
    ):
        result = period_service.create_closing_entries(
            OWNER, fiscal_year.id, equity["31"], settings=DOUBLE
        )

        transaction_service.delete_transaction(OWNER, result.parent.id)

        assert period_service.get_period(OWNER, fiscal_year.id).closing_split_group_id is None
        again = period_service.create_closing_entries(
            OWNER, fiscal_year.id, equity["31"], settings=DOUBLE
        )
        assert len(again.children) == 3

    def test_closed_period_protects_entries(
        self, period_service, transaction_service, equity, year_activity, fiscal_year
    ):
        result = period_service.create_closing_entries(
            OWNER, fiscal_year.id, equity["31"], settings=DOUBLE
        )
        period_service.close_period(OWNER, fiscal_year.id)

        with pytest.raises(ClosedPeriodError):
            transaction_service.delete_transaction(OWNER, result.parent.id)

    def test_nothing_to_close(self, period_service, chart, equity, fiscal_year):
        with pytest.raises(ValidationError, match="Nothing to close"):
            period_service.create_closing_entries(
                OWNER, fiscal_year.id, equity["31"], settings=DOUBLE
            )
        assert period_service.get_period(OWNER, fiscal_year.id).closing_split_group_id is None
