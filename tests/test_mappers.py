"""Tests for database mappers."""

from datetime import datetime, date, UTC
from decimal import Decimal

from ledgerkit.database.models import (
    Account as ORMAccount,
    Document as ORMDocument,
    Settings as ORMSettings,
    Transaction as ORMTransaction,
    TransactionStatusHistory as ORMStatusHistory,
)
from ledgerkit.database.mappers import (
    account_to_domain,
    document_to_domain,
    settings_to_domain,
    status_history_to_domain,
    transaction_to_domain,
)
from ledgerkit.domain.entities import (
    Account,
    AccountClass,
    AccountType,
    Document,
    LedgerSettings,
    ReconciliationCondition,
    SplitType,
    StatusHistoryEntry,
    Transaction,
    TransactionStatus,
)


class TestAccountMapper:
    """Tests for Account mapper."""

    def test_account_to_domain(self):
        """Test converting ORM Account to domain Account."""
        orm_account = ORMAccount(
            id=1,
            owner_id="alice",
            name="Sales",
            code="41",
            is_open=True,
            is_read_only=False,
            account_type="credit",
            account_class="income",
            opening_balance=Decimal("5.00"),
            created_at=datetime.now(UTC),
        )
        domain_account = account_to_domain(orm_account)

        assert isinstance(domain_account, Account)
        assert domain_account.code == "41"
        assert domain_account.account_type == AccountType.CREDIT
        assert domain_account.account_class == AccountClass.INCOME
        assert domain_account.opening_balance == Decimal("5.00")
        assert domain_account.created_at == orm_account.created_at

    def test_account_without_class(self):
        orm_account = ORMAccount(
            id=2,
            owner_id="alice",
            name="Loose",
            code=None,
            is_open=False,
            is_read_only=True,
            account_type="neutral",
            account_class=None,
            opening_balance=None,
            created_at=datetime.now(UTC),
        )
        domain_account = account_to_domain(orm_account)

        assert domain_account.account_class is None
        assert domain_account.opening_balance == Decimal("0")
        assert not domain_account.is_open
        assert domain_account.is_read_only


class TestTransactionMapper:
    """Tests for Transaction mapper."""

    def test_transaction_to_domain(self):
        """Test converting ORM Transaction to domain Transaction."""
        now = datetime.now(UTC)
        orm_transaction = ORMTransaction(
            id=7,
            date=date(2024, 1, 15),
            amount=Decimal("60.00"),
            payee="Office Depot",
            notes="paper",
            status="completed",
            status_changed_at=now,
            status_changed_by="alice",
            created_by="alice",
            credit_account_id=None,
            debit_account_id=3,
            split_group_id="g1",
            split_type="child",
            external_id=None,
        )
        domain_transaction = transaction_to_domain(orm_transaction)

        assert isinstance(domain_transaction, Transaction)
        assert domain_transaction.status == TransactionStatus.COMPLETED
        assert domain_transaction.split_type == SplitType.CHILD
        assert domain_transaction.account_ids == (3,)
        assert domain_transaction.tag_ids == ()
        assert domain_transaction.status_changed_at == now

    def test_transaction_without_split(self):
        orm_transaction = ORMTransaction(
            id=8,
            date=date(2024, 1, 15),
            amount=Decimal("-5.00"),
            status="draft",
            status_changed_at=datetime.now(UTC),
            created_by="alice",
            account_id=1,
        )
        domain_transaction = transaction_to_domain(orm_transaction)

        assert domain_transaction.split_type is None
        assert domain_transaction.split_group_id is None
        assert domain_transaction.payee is None
        assert domain_transaction.amount == Decimal("-5.00")


class TestStatusHistoryMapper:
    """Tests for status history mapper."""

    def test_creation_row_has_no_from_status(self):
        orm_entry = ORMStatusHistory(
            id=1,
            transaction_id=7,
            from_status=None,
            to_status="pending",
            changed_by="alice",
            changed_at=datetime.now(UTC),
            notes="Transaction created",
        )
        entry = status_history_to_domain(orm_entry)

        assert isinstance(entry, StatusHistoryEntry)
        assert entry.from_status is None
        assert entry.to_status == TransactionStatus.PENDING
        assert entry.notes == "Transaction created"


class TestDocumentMapper:
    """Tests for document mapper."""

    def test_document_to_domain(self):
        orm_document = ORMDocument(
            id=3,
            transaction_id=7,
            document_type_id=2,
            file_name="receipt.pdf",
            uploaded_by="alice",
            uploaded_at=datetime.now(UTC),
            is_deleted=False,
        )
        document = document_to_domain(orm_document)

        assert isinstance(document, Document)
        assert document.file_name == "receipt.pdf"
        assert not document.is_deleted


class TestSettingsMapper:
    """Tests for settings mapper."""

    def test_settings_to_domain(self):
        orm_settings = ORMSettings(
            owner_id="alice",
            double_entry_mode=True,
            auto_draft_to_pending=False,
            reconciliation_conditions=["hasReceipt"],
            min_required_documents=2,
        )
        settings = settings_to_domain(orm_settings)

        assert settings == LedgerSettings(
            owner_id="alice",
            double_entry_mode=True,
            reconciliation_conditions=(ReconciliationCondition.HAS_RECEIPT,),
            min_required_documents=2,
        )

    def test_missing_conditions(self):
        orm_settings = ORMSettings(
            owner_id="alice",
            double_entry_mode=False,
            auto_draft_to_pending=True,
            reconciliation_conditions=None,
            min_required_documents=0,
        )
        assert settings_to_domain(orm_settings).reconciliation_conditions == ()
