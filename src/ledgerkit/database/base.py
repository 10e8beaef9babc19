"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerkit.domain.entities import (
    Account,
    AccountClass,
    AccountingPeriod,
    AccountType,
    Customer,
    Document,
    DocumentType,
    LedgerSettings,
    PeriodStatus,
    SplitType,
    StatusHistoryEntry,
    Tag,
    Transaction,
    TransactionInput,
    TransactionStatus,
)


class Database(ABC):
    """Abstract database interface for ledgerkit.

    Compound writes (a transaction row plus its status history) are single
    units: either every row is stored or none is.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        owner_id: str,
        name: str,
        code: Optional[str] = None,
        account_type: AccountType = AccountType.NEUTRAL,
        account_class: Optional[AccountClass] = None,
        is_open: bool = True,
        is_read_only: bool = False,
        opening_balance: Decimal = Decimal("0"),
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_accounts(self, account_ids: Iterable[int]) -> list[Account]:
        """Get every existing account among the given IDs."""
        pass

    @abstractmethod
    def list_accounts(self, owner_id: str) -> list[Account]:
        """List all accounts of an owner ordered by code, then name."""
        pass

    @abstractmethod
    def update_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        code: Optional[str] = None,
        account_type: Optional[AccountType] = None,
        account_class: Optional[AccountClass] = None,
        is_open: Optional[bool] = None,
        is_read_only: Optional[bool] = None,
        opening_balance: Optional[Decimal] = None,
        clear_code: bool = False,
    ) -> None:
        """Update account fields that are not None.

        Args:
            clear_code: If True, remove the code (code must be None)
        """
        pass

    @abstractmethod
    def open_accounts(self, owner_id: str, account_ids: Iterable[int]) -> list[int]:
        """Mark closed accounts of an owner as open in one batch.

        Returns:
            IDs of the accounts that were closed and are now open
        """
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, account_id: int) -> int:
        """Count transactions referencing an account on any side."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transactions(
        self,
        created_by: str,
        inputs: list[TransactionInput],
        history_note: str,
    ) -> list[int]:
        """Insert transactions and their creation history rows in one unit.

        Every input must carry a resolved status.

        Returns:
            New transaction IDs in input order
        """
        pass

    @abstractmethod
    def create_split_group(
        self,
        created_by: str,
        split_group_id: str,
        parent: TransactionInput,
        children: list[TransactionInput],
        parent_note: str,
        child_note: str,
        closing_period_id: Optional[int] = None,
    ) -> tuple[int, list[int]]:
        """Insert a split parent and its children with history in one unit.

        Args:
            closing_period_id: Accounting period to link the group to as its
                closing entries, in the same unit

        Returns:
            Tuple of (parent ID, child IDs in input order)
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def get_transaction_by_external_id(
        self, created_by: str, external_id: str
    ) -> Optional[Transaction]:
        """Get a transaction imported by an owner under a provider ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        owner_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        status: Optional[TransactionStatus] = None,
        split_type: Optional[SplitType] = None,
    ) -> list[Transaction]:
        """List transactions visible to an owner with optional filters.

        A transaction is visible when any referenced account belongs to the
        owner, or when it references no account and was created by the owner.
        """
        pass

    @abstractmethod
    def get_split_group(self, split_group_id: str) -> list[Transaction]:
        """Get the parent and children of a split group, parent first."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        data: TransactionInput,
        changed_by: str,
        status_note: Optional[str] = None,
    ) -> None:
        """Replace the editable fields of a transaction.

        When data.status differs from the stored status, the status stamp is
        refreshed and one history row is appended in the same unit.
        """
        pass

    @abstractmethod
    def set_transaction_status(
        self,
        transaction_id: int,
        to_status: TransactionStatus,
        changed_by: str,
        notes: Optional[str] = None,
    ) -> None:
        """Write a status change, its stamp and one history row in one unit."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction together with its documents and tag links.

        Status history rows are retained.
        """
        pass

    @abstractmethod
    def delete_split_group(self, split_group_id: str) -> list[int]:
        """Delete the parent and every child of a split group in one unit.

        Status history rows are retained. An accounting period linked to the
        group as its closing entries is unlinked.

        Returns:
            IDs of the deleted transactions
        """
        pass

    @abstractmethod
    def list_status_history(self, transaction_id: int) -> list[StatusHistoryEntry]:
        """List history rows in chronological order."""
        pass

    # Document operations
    @abstractmethod
    def create_document_type(
        self,
        owner_id: str,
        name: str,
        description: Optional[str] = None,
        is_required: bool = False,
    ) -> int:
        """Create a document type. Returns document type ID."""
        pass

    @abstractmethod
    def get_document_type(self, document_type_id: int) -> Optional[DocumentType]:
        """Get document type by ID."""
        pass

    @abstractmethod
    def list_document_types(self, owner_id: str) -> list[DocumentType]:
        """List document types of an owner."""
        pass

    @abstractmethod
    def create_document(
        self,
        transaction_id: int,
        document_type_id: int,
        file_name: str,
        uploaded_by: str,
    ) -> int:
        """Attach a document record to a transaction. Returns document ID."""
        pass

    @abstractmethod
    def get_document(self, document_id: int) -> Optional[Document]:
        """Get document by ID."""
        pass

    @abstractmethod
    def list_documents(
        self, transaction_id: int, include_deleted: bool = False
    ) -> list[Document]:
        """List documents attached to a transaction."""
        pass

    @abstractmethod
    def soft_delete_document(self, document_id: int) -> None:
        """Mark a document as deleted."""
        pass

    # Accounting period operations
    @abstractmethod
    def create_accounting_period(
        self,
        owner_id: str,
        start_date: date,
        end_date: date,
        notes: Optional[str] = None,
    ) -> int:
        """Create an open accounting period. Returns period ID."""
        pass

    @abstractmethod
    def get_accounting_period(self, period_id: int) -> Optional[AccountingPeriod]:
        """Get accounting period by ID."""
        pass

    @abstractmethod
    def list_accounting_periods(self, owner_id: str) -> list[AccountingPeriod]:
        """List periods of an owner, latest start date first."""
        pass

    @abstractmethod
    def find_overlapping_periods(
        self, owner_id: str, start_date: date, end_date: date
    ) -> list[AccountingPeriod]:
        """List periods of an owner sharing at least one day with the range."""
        pass

    @abstractmethod
    def get_closed_period_for_date(self, owner_id: str, day: date) -> Optional[AccountingPeriod]:
        """Get the closed period of an owner containing a date, if any."""
        pass

    @abstractmethod
    def set_period_status(
        self,
        period_id: int,
        status: PeriodStatus,
        changed_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Close or reopen a period.

        Closing stamps closed_at and closed_by (and replaces the notes when
        given); reopening clears the stamp.
        """
        pass

    @abstractmethod
    def delete_accounting_period(self, period_id: int) -> None:
        """Delete an accounting period. Its closing entries are kept."""
        pass

    # Settings operations
    @abstractmethod
    def get_settings(self, owner_id: str) -> Optional[LedgerSettings]:
        """Get stored settings of an owner."""
        pass

    @abstractmethod
    def save_settings(self, settings: LedgerSettings) -> None:
        """Insert or replace the settings of an owner."""
        pass

    # Customer and tag operations
    @abstractmethod
    def create_customer(self, owner_id: str, name: str) -> int:
        """Create a customer. Returns customer ID."""
        pass

    @abstractmethod
    def get_customer(self, customer_id: int) -> Optional[Customer]:
        """Get customer by ID."""
        pass

    @abstractmethod
    def list_customers(self, owner_id: str) -> list[Customer]:
        """List customers of an owner."""
        pass

    @abstractmethod
    def create_tag(self, owner_id: str, name: str) -> int:
        """Create a tag. Returns tag ID."""
        pass

    @abstractmethod
    def get_tags(self, tag_ids: Iterable[int]) -> list[Tag]:
        """Get every existing tag among the given IDs."""
        pass

    @abstractmethod
    def list_tags(self, owner_id: str) -> list[Tag]:
        """List tags of an owner."""
        pass
