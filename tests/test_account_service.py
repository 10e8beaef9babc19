"""Tests for the account service, auto-open propagation and balances."""

import pytest
from decimal import Decimal

from ledgerkit.domain.entities import AccountClass, AccountType, TransactionStatus
from ledgerkit.domain.errors import DependencyError, NotFoundError, ValidationError
from ledgerkit.domain.propagation import AccountOpener

from conftest import OTHER_OWNER, OWNER

PENDING = TransactionStatus.PENDING


class TestAccountService:
    """Tests for creating, listing and updating accounts."""

    def test_create_and_get(self, account_service):
        account_id = account_service.create_account(
            OWNER, "Bank", code="11", account_class=AccountClass.ASSET
        )
        account = account_service.get_owned_account(OWNER, account_id)
        assert account.name == "Bank"
        assert account.code == "11"
        assert account.account_type == AccountType.NEUTRAL
        assert account.is_open is True
        assert account.opening_balance == Decimal("0")

    def test_code_must_be_alphanumeric(self, account_service):
        with pytest.raises(ValidationError, match="must be alphanumeric"):
            account_service.create_account(OWNER, "Bank", code="1.1")

    def test_code_unique_per_owner(self, account_service):
        account_service.create_account(OWNER, "Bank", code="11")
        with pytest.raises(ValidationError, match="already exists"):
            account_service.create_account(OWNER, "Other bank", code="11")
        account_service.create_account(OTHER_OWNER, "Bank", code="11")

    def test_empty_name_rejected(self, account_service):
        with pytest.raises(ValidationError, match="cannot be empty"):
            account_service.create_account(OWNER, "  ")

    def test_list_is_sorted_by_code(self, account_service, chart):
        account_service.create_account(OWNER, "Suspense")
        codes = [acc.code for acc in account_service.list_accounts(OWNER)]
        assert codes == ["1", "11", "12", "4", "41", "5", "51", "52", None]

    def test_other_owner_cannot_see_account(self, account_service, chart):
        assert account_service.list_accounts(OTHER_OWNER) == []
        with pytest.raises(NotFoundError):
            account_service.get_owned_account(OTHER_OWNER, chart["11"])

    def test_visible_accounts(self, account_service, chart):
        visible = account_service.visible_accounts(OWNER, ["5"])
        assert [acc.code for acc in visible] == ["1", "4", "5", "51", "52"]

    def test_closing_parent_flags_children_without_closing_them(self, account_service, chart):
        account_service.update_account(OWNER, chart["5"], is_open=False)

        flags = {acc.code: invalid for acc, invalid in account_service.list_accounts_with_config(OWNER)}
        assert account_service.get_account(chart["51"]).is_open is True
        assert flags["51"] is True
        assert flags["52"] is True
        assert flags["5"] is False
        assert flags["11"] is False

    def test_update_and_clear_code(self, account_service, chart):
        account_service.update_account(OWNER, chart["52"], name="Travel & Meals", clear_code=True)
        account = account_service.get_account(chart["52"])
        assert account.name == "Travel & Meals"
        assert account.code is None

    def test_update_rejects_code_and_clear(self, account_service, chart):
        with pytest.raises(ValidationError):
            account_service.update_account(OWNER, chart["52"], code="53", clear_code=True)

    def test_delete_blocked_by_transactions(
        self, account_service, transaction_service, chart, make_input
    ):
        transaction_service.create_transaction(
            OWNER, make_input(account_id=chart["12"], status=PENDING)
        )
        with pytest.raises(DependencyError, match="it has 1 transaction"):
            account_service.delete_account(OWNER, chart["12"])

        account_service.delete_account(OWNER, chart["52"])
        assert account_service.get_account(chart["52"]) is None


class TestAutoOpen:
    """Tests for opening accounts used by transactions."""

    def test_opens_account_and_closed_ancestors_only(
        self, account_service, transaction_service, chart, make_input
    ):
        for code in ("1", "11", "12"):
            account_service.update_account(OWNER, chart[code], is_open=False)

        transaction_service.create_transaction(
            OWNER, make_input(account_id=chart["11"], status=PENDING)
        )

        assert account_service.get_account(chart["1"]).is_open is True
        assert account_service.get_account(chart["11"]).is_open is True
        assert account_service.get_account(chart["12"]).is_open is False

    def test_opener_reports_opened_ids(self, temp_db, account_service, chart):
        account_service.update_account(OWNER, chart["5"], is_open=False)
        account_service.update_account(OWNER, chart["51"], is_open=False)

        opener = AccountOpener(temp_db)
        assert opener.open_account_and_ancestors(chart["51"], OWNER) == [chart["5"], chart["51"]]
        assert opener.open_account_and_ancestors(chart["51"], OWNER) == []

    def test_codeless_account_opened_alone(self, temp_db, account_service, chart):
        loose = account_service.create_account(OWNER, "Suspense", is_open=False)
        account_service.update_account(OWNER, chart["1"], is_open=False)

        assert AccountOpener(temp_db).open_accounts_and_ancestors([loose, loose], OWNER) == [loose]
        assert account_service.get_account(chart["1"]).is_open is False

    def test_other_owner_accounts_ignored(self, temp_db, account_service, chart):
        account_service.update_account(OWNER, chart["11"], is_open=False)
        assert AccountOpener(temp_db).open_account_and_ancestors(chart["11"], OTHER_OWNER) == []

    def test_draft_creation_also_opens(
        self, account_service, transaction_service, chart, make_input
    ):
        account_service.update_account(OWNER, chart["52"], is_open=False)
        transaction_service.create_transaction(OWNER, make_input(debit_account_id=chart["52"]))
        assert account_service.get_account(chart["52"]).is_open is True


class TestBalances:
    """Tests for account balances and the trial balance."""

    def test_double_entries_balance(self, account_service, transaction_service, chart, make_input):
        transaction_service.create_transaction(
            OWNER,
            make_input(
                amount=Decimal("100.00"),
                debit_account_id=chart["11"],
                credit_account_id=chart["41"],
                status=PENDING,
            ),
        )
        transaction_service.create_transaction(
            OWNER,
            make_input(
                amount=Decimal("30.00"),
                debit_account_id=chart["52"],
                credit_account_id=chart["11"],
                status=PENDING,
            ),
        )
        # Drafts do not post
        transaction_service.create_transaction(
            OWNER,
            make_input(amount=Decimal("999"), debit_account_id=chart["11"], credit_account_id=chart["41"]),
        )

        balances = {b.account_name: b for b in account_service.get_account_balances(OWNER)}
        assert balances["Bank"].balance == Decimal("70.00")
        assert balances["Bank"].normal_balance == "debit"
        assert balances["Sales"].balance == Decimal("100.00")
        assert balances["Sales"].normal_balance == "credit"
        assert balances["Travel"].balance == Decimal("30.00")

        trial = account_service.get_trial_balance(OWNER)
        assert trial.total_debits == Decimal("100.00")
        assert trial.total_credits == Decimal("100.00")
        assert trial.is_balanced

    def test_opening_balance_and_legacy_amounts(self, account_service, transaction_service, make_input):
        cash = account_service.create_account(
            OWNER, "Cash", code="12", account_class=AccountClass.ASSET, opening_balance=Decimal("50")
        )
        transaction_service.create_transaction(
            OWNER, make_input(amount=Decimal("-20.00"), account_id=cash, status=PENDING)
        )

        [balance] = account_service.get_account_balances(OWNER)
        assert balance.balance == Decimal("30.00")
