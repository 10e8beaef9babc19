"""Tests for the pure ledger rules: chart, entry shapes, status and document gate."""

import pytest
from dataclasses import replace
from datetime import datetime, date, UTC
from decimal import Decimal

from ledgerkit.domain.account_rules import validate_role, validate_not_read_only
from ledgerkit.domain.chart import (
    ancestors_of,
    children_of,
    has_children,
    has_invalid_config,
    is_visible,
    sort_by_code,
)
from ledgerkit.domain.documents import DocumentGateStatus, has_all_required_documents
from ledgerkit.domain.entities import (
    Account,
    AccountType,
    DoubleEntry,
    LedgerSettings,
    LegacyEntry,
    ReconciliationCondition,
    SplitLine,
    TransactionInput,
    TransactionStatus,
    UnassignedEntry,
)
from ledgerkit.domain.entry import (
    check_split_lines,
    entry_shape,
    split_totals,
    validate_entry,
    validate_payee,
)
from ledgerkit.domain.errors import (
    AccountRoleError,
    DoubleEntryRequiredError,
    ReadOnlyAccountError,
    SplitImbalanceError,
    ValidationError,
)
from ledgerkit.domain.status import (
    check_progression,
    can_advance,
    next_status,
    should_auto_promote,
)

PLAIN = LedgerSettings(owner_id="alice")
DOUBLE = LedgerSettings(owner_id="alice", double_entry_mode=True)
AUTO = LedgerSettings(owner_id="alice", auto_draft_to_pending=True)

DRAFT = TransactionStatus.DRAFT
PENDING = TransactionStatus.PENDING
COMPLETED = TransactionStatus.COMPLETED
RECONCILED = TransactionStatus.RECONCILED


def _account(account_id, code, is_open=True, account_type=AccountType.NEUTRAL, name=None):
    return Account(
        id=account_id,
        owner_id="alice",
        name=name or f"Account {code}",
        code=code,
        is_open=is_open,
        is_read_only=False,
        account_type=account_type,
        account_class=None,
        opening_balance=Decimal("0"),
        created_at=datetime.now(UTC),
    )


def _entry(account_id=None, credit=None, debit=None):
    return TransactionInput(
        date=date(2024, 1, 1),
        amount=Decimal("10"),
        account_id=account_id,
        credit_account_id=credit,
        debit_account_id=debit,
    )


class TestChart:
    """Tests for the code-prefix hierarchy."""

    def test_ancestors_of(self):
        assert ancestors_of("511") == ["5", "51"]
        assert ancestors_of("5") == []
        assert ancestors_of(None) == []

    def test_children_and_visibility(self):
        accounts = [_account(1, "5"), _account(2, "51"), _account(3, "511"), _account(4, "52")]
        assert [acc.code for acc in children_of("5", accounts)] == ["51", "52"]
        assert has_children(accounts[0], accounts)
        assert not has_children(accounts[3], accounts)
        assert is_visible(accounts[0], [])
        assert not is_visible(accounts[2], ["5"])
        assert is_visible(accounts[2], ["5", "51"])

    def test_sort_by_code_puts_codeless_last(self):
        accounts = [
            _account(1, None, name="Zeta"),
            _account(2, "2"),
            _account(3, None, name="Alpha"),
            _account(4, "11"),
        ]
        assert [acc.id for acc in sort_by_code(accounts)] == [4, 2, 3, 1]

    def test_invalid_config_reports_open_child_of_closed_parent(self):
        parent = _account(1, "5", is_open=False)
        child = _account(2, "51")
        grandchild = _account(3, "511", is_open=False)
        accounts = [parent, child, grandchild]
        assert has_invalid_config(child, accounts)
        assert not has_invalid_config(grandchild, accounts)
        assert not has_invalid_config(parent, accounts)


class TestAccountRoles:
    """Tests for account typing."""

    def test_debit_only_cannot_be_credited(self):
        account = _account(1, "51", account_type=AccountType.DEBIT, name="Office")
        with pytest.raises(AccountRoleError, match="Account Office is debit-only"):
            validate_role(account, "credit")
        validate_role(account, "debit")

    def test_credit_only_cannot_be_debited(self):
        account = _account(1, "41", account_type=AccountType.CREDIT, name="Sales")
        with pytest.raises(AccountRoleError, match="credit-only and cannot be used as a debit"):
            validate_role(account, "debit")

    def test_neutral_takes_either_side(self):
        account = _account(1, "11")
        validate_role(account, "credit")
        validate_role(account, "debit")

    def test_read_only(self):
        account = replace(_account(1, "11"), is_read_only=True)
        with pytest.raises(ReadOnlyAccountError, match="Account 11"):
            validate_not_read_only(account)


class TestEntryShape:
    """Tests for entry shape classification and validation."""

    def test_shapes(self):
        assert entry_shape(_entry(account_id=1)) == LegacyEntry(account_id=1)
        assert entry_shape(_entry(credit=1, debit=2)) == DoubleEntry(credit_account_id=1, debit_account_id=2)
        assert isinstance(entry_shape(_entry(credit=1)), UnassignedEntry)

    def test_mixed_shape_rejected_even_for_drafts(self):
        with pytest.raises(ValidationError, match="both a single account"):
            validate_entry(_entry(account_id=1, credit=2), Decimal("1"), DRAFT, PLAIN)

    def test_draft_may_be_unassigned(self):
        shape = validate_entry(_entry(credit=1), Decimal("1"), DRAFT, PLAIN)
        assert isinstance(shape, UnassignedEntry)

    def test_non_draft_needs_complete_form(self):
        with pytest.raises(ValidationError, match="needs either an account"):
            validate_entry(_entry(), Decimal("1"), PENDING, PLAIN)

    def test_double_entry_mode_requires_pair(self):
        with pytest.raises(DoubleEntryRequiredError):
            validate_entry(_entry(account_id=1), Decimal("1"), PENDING, DOUBLE)
        validate_entry(_entry(account_id=1), Decimal("1"), DRAFT, DOUBLE)

    def test_negative_amount_only_for_single_account(self):
        validate_entry(_entry(account_id=1), Decimal("-5"), PENDING, PLAIN)
        with pytest.raises(ValidationError, match="amount must be positive or zero"):
            validate_entry(_entry(credit=1, debit=2), Decimal("-5"), PENDING, PLAIN)
        with pytest.raises(ValidationError, match="amount must be positive or zero"):
            validate_entry(_entry(), Decimal("-5"), DRAFT, PLAIN)

    def test_payee_required_outside_drafts(self):
        validate_payee(None, None, DRAFT)
        validate_payee(None, 3, PENDING)
        with pytest.raises(ValidationError, match="Please select a payee or customer"):
            validate_payee("   ", None, COMPLETED)


class TestSplitLines:
    """Tests for split group validation."""

    def test_needs_two_lines(self):
        with pytest.raises(ValidationError, match="at least 2 splits"):
            check_split_lines([SplitLine(amount=Decimal("1"), account_id=1)], PENDING, PLAIN)

    def test_each_line_needs_an_account(self):
        lines = [
            SplitLine(amount=Decimal("5"), account_id=1),
            SplitLine(amount=Decimal("5")),
        ]
        with pytest.raises(ValidationError, match="^Split 2: Each split needs an account"):
            check_split_lines(lines, DRAFT, PLAIN)

    def test_one_sided_lines_allowed(self):
        lines = [
            SplitLine(amount=Decimal("60.00"), debit_account_id=1),
            SplitLine(amount=Decimal("40.00"), debit_account_id=2),
            SplitLine(amount=Decimal("100.00"), credit_account_id=3),
        ]
        check_split_lines(lines, PENDING, PLAIN)
        check_split_lines(lines, PENDING, DOUBLE)
        assert split_totals(lines) == (Decimal("100.00"), Decimal("100.00"))

    def test_line_errors_name_the_line(self):
        lines = [
            SplitLine(amount=Decimal("5"), account_id=1),
            SplitLine(amount=Decimal("-5"), credit_account_id=1, debit_account_id=2),
        ]
        with pytest.raises(ValidationError, match="^Split 2: When using debit and credit"):
            check_split_lines(lines, PENDING, PLAIN)

    def test_balanced_within_tolerance(self):
        lines = [
            SplitLine(amount=Decimal("10.00"), debit_account_id=1, credit_account_id=2),
            SplitLine(amount=Decimal("5.00"), debit_account_id=3, credit_account_id=2),
        ]
        check_split_lines(lines, PENDING, DOUBLE)
        assert split_totals(lines) == (Decimal("15.00"), Decimal("15.00"))

    def test_legacy_lines_rejected_in_double_entry_mode(self):
        lines = [
            SplitLine(amount=Decimal("10.00"), account_id=1),
            SplitLine(amount=Decimal("5.00"), debit_account_id=3, credit_account_id=2),
        ]
        with pytest.raises(DoubleEntryRequiredError, match="^Split 1: "):
            check_split_lines(lines, PENDING, DOUBLE)

    def test_imbalance_rejected_in_double_entry_mode(self):
        lines = [
            SplitLine(amount=Decimal("60.00"), debit_account_id=1),
            SplitLine(amount=Decimal("40.00"), debit_account_id=2),
            SplitLine(amount=Decimal("99.98"), credit_account_id=3),
        ]
        with pytest.raises(SplitImbalanceError) as excinfo:
            check_split_lines(lines, PENDING, DOUBLE)
        assert excinfo.value.total_debits == Decimal("100.00")
        assert excinfo.value.total_credits == Decimal("99.98")
        # Legacy mode does not balance splits
        check_split_lines(lines, PENDING, PLAIN)

    def test_one_cent_difference_tolerated(self):
        lines = [
            SplitLine(amount=Decimal("50.00"), debit_account_id=1),
            SplitLine(amount=Decimal("49.99"), credit_account_id=3),
        ]
        check_split_lines(lines, PENDING, DOUBLE)

    def test_imbalance_reports_totals(self):
        error = SplitImbalanceError(Decimal("17.00"), Decimal("15.00"))
        assert error.difference == Decimal("2.00")
        assert "total debits must equal total credits" in str(error)


class TestStatusMachine:
    """Tests for status progression."""

    def test_order(self):
        assert next_status(DRAFT) == PENDING
        assert next_status(PENDING) == COMPLETED
        assert next_status(COMPLETED) == RECONCILED
        assert next_status(RECONCILED) is None
        assert can_advance(COMPLETED)
        assert not can_advance(RECONCILED)

    def test_reconciled_is_terminal(self):
        check = check_progression(RECONCILED, None, PLAIN)
        assert not check.allowed
        assert check.next_status is None

    def test_manual_draft_advance_blocked_with_auto_promotion(self):
        check = check_progression(DRAFT, None, AUTO)
        assert not check.allowed
        assert check.next_status == PENDING
        assert check_progression(DRAFT, None, PLAIN).allowed

    def test_reconcile_needs_documents(self):
        gate = DocumentGateStatus(
            required_document_types=2,
            attached_required_types=1,
            min_required_documents=0,
            document_count=1,
        )
        check = check_progression(COMPLETED, gate, PLAIN)
        assert not check.allowed
        assert check.missing == 1
        assert "Missing 1 required document type." in check.blocked_reason

    def test_reconcile_needs_conditions(self):
        check = check_progression(COMPLETED, None, PLAIN, ["hasReceipt"])
        assert not check.allowed
        assert "hasReceipt" in check.blocked_reason
        assert check.missing == 1

    def test_gates_only_apply_to_reconcile(self):
        gate = DocumentGateStatus(2, 0, 0, 0)
        assert check_progression(PENDING, gate, PLAIN, ["hasReceipt"]).allowed

    def test_should_auto_promote(self):
        assert should_auto_promote(DRAFT, True, None, None, AUTO, account_id=1)
        assert not should_auto_promote(DRAFT, True, None, None, AUTO)
        assert not should_auto_promote(DRAFT, False, 1, 2, AUTO)
        assert not should_auto_promote(DRAFT, True, 1, 2, PLAIN)
        assert not should_auto_promote(PENDING, True, 1, 2, AUTO)

        auto_double = LedgerSettings(owner_id="alice", auto_draft_to_pending=True, double_entry_mode=True)
        assert should_auto_promote(DRAFT, True, 1, 2, auto_double)
        assert not should_auto_promote(DRAFT, True, None, None, auto_double, account_id=1)


class TestDocumentGate:
    """Tests for the document requirement rule."""

    @pytest.mark.parametrize(
        "required, attached, minimum, expected",
        [
            (0, 0, 0, True),
            (0, 0, 3, True),
            (2, 1, 0, False),
            (2, 2, 0, True),
            (3, 1, 1, True),
            (3, 1, 2, False),
            (2, 2, 5, True),
            (2, 1, 5, False),
        ],
    )
    def test_has_all_required_documents(self, required, attached, minimum, expected):
        assert has_all_required_documents(required, attached, minimum) is expected

    def test_minimum_message(self):
        gate = DocumentGateStatus(3, 0, 2, 0)
        assert gate.needed == 2
        assert gate.missing_count == 2
        assert gate.requirement_message() == (
            "Cannot reconcile. Need at least 2 of 3 required document types attached (currently 0)."
        )

    def test_satisfied_gate_has_empty_message(self):
        assert DocumentGateStatus(1, 1, 0, 1).requirement_message() == ""

    def test_condition_names(self):
        assert ReconciliationCondition("hasReceipt") is ReconciliationCondition.HAS_RECEIPT
