"""Mapper functions to convert SQLAlchemy models into domain entities.

This layer isolates the conversion logic, including the string to enum
conversion of stored type, class and status columns.
"""

from decimal import Decimal
from typing import Optional

from ledgerkit.domain import entities as domain
from ledgerkit.database.models import (
    Account as ORMAccount,
    AccountingPeriod as ORMAccountingPeriod,
    Customer as ORMCustomer,
    Document as ORMDocument,
    DocumentType as ORMDocumentType,
    Settings as ORMSettings,
    Tag as ORMTag,
    Transaction as ORMTransaction,
    TransactionStatusHistory as ORMStatusHistory,
)


def _optional_status(value: Optional[str]) -> Optional[domain.TransactionStatus]:
    return domain.TransactionStatus(value) if value is not None else None


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        owner_id=orm_account.owner_id,
        name=orm_account.name,
        code=orm_account.code,
        is_open=orm_account.is_open,
        is_read_only=orm_account.is_read_only,
        account_type=domain.AccountType(orm_account.account_type),
        account_class=(
            domain.AccountClass(orm_account.account_class)
            if orm_account.account_class is not None
            else None
        ),
        opening_balance=Decimal(orm_account.opening_balance or 0),
        created_at=orm_account.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        amount=Decimal(orm_transaction.amount),
        payee=orm_transaction.payee,
        payee_customer_id=orm_transaction.payee_customer_id,
        notes=orm_transaction.notes,
        status=domain.TransactionStatus(orm_transaction.status),
        status_changed_at=orm_transaction.status_changed_at,
        status_changed_by=orm_transaction.status_changed_by,
        created_by=orm_transaction.created_by,
        account_id=orm_transaction.account_id,
        credit_account_id=orm_transaction.credit_account_id,
        debit_account_id=orm_transaction.debit_account_id,
        split_group_id=orm_transaction.split_group_id,
        split_type=(
            domain.SplitType(orm_transaction.split_type)
            if orm_transaction.split_type is not None
            else None
        ),
        external_id=orm_transaction.external_id,
        tag_ids=tuple(tag.id for tag in orm_transaction.tags),
    )


def status_history_to_domain(orm_entry: ORMStatusHistory) -> domain.StatusHistoryEntry:
    """Convert SQLAlchemy TransactionStatusHistory model to domain entity."""
    return domain.StatusHistoryEntry(
        id=orm_entry.id,
        transaction_id=orm_entry.transaction_id,
        from_status=_optional_status(orm_entry.from_status),
        to_status=domain.TransactionStatus(orm_entry.to_status),
        changed_by=orm_entry.changed_by,
        changed_at=orm_entry.changed_at,
        notes=orm_entry.notes,
    )


def document_type_to_domain(orm_type: ORMDocumentType) -> domain.DocumentType:
    """Convert SQLAlchemy DocumentType model to domain entity."""
    return domain.DocumentType(
        id=orm_type.id,
        owner_id=orm_type.owner_id,
        name=orm_type.name,
        description=orm_type.description,
        is_required=orm_type.is_required,
        created_at=orm_type.created_at,
    )


def document_to_domain(orm_document: ORMDocument) -> domain.Document:
    """Convert SQLAlchemy Document model to domain entity."""
    return domain.Document(
        id=orm_document.id,
        transaction_id=orm_document.transaction_id,
        document_type_id=orm_document.document_type_id,
        file_name=orm_document.file_name,
        uploaded_by=orm_document.uploaded_by,
        uploaded_at=orm_document.uploaded_at,
        is_deleted=orm_document.is_deleted,
    )


def customer_to_domain(orm_customer: ORMCustomer) -> domain.Customer:
    """Convert SQLAlchemy Customer model to domain entity."""
    return domain.Customer(
        id=orm_customer.id,
        owner_id=orm_customer.owner_id,
        name=orm_customer.name,
        created_at=orm_customer.created_at,
    )


def tag_to_domain(orm_tag: ORMTag) -> domain.Tag:
    """Convert SQLAlchemy Tag model to domain entity."""
    return domain.Tag(
        id=orm_tag.id,
        owner_id=orm_tag.owner_id,
        name=orm_tag.name,
        created_at=orm_tag.created_at,
    )


def settings_to_domain(orm_settings: ORMSettings) -> domain.LedgerSettings:
    """Convert SQLAlchemy Settings model to domain LedgerSettings."""
    return domain.LedgerSettings(
        owner_id=orm_settings.owner_id,
        double_entry_mode=orm_settings.double_entry_mode,
        auto_draft_to_pending=orm_settings.auto_draft_to_pending,
        reconciliation_conditions=tuple(
            domain.ReconciliationCondition(name)
            for name in (orm_settings.reconciliation_conditions or [])
        ),
        min_required_documents=orm_settings.min_required_documents,
    )


def period_to_domain(orm_period: ORMAccountingPeriod) -> domain.AccountingPeriod:
    """Convert SQLAlchemy AccountingPeriod model to domain entity."""
    return domain.AccountingPeriod(
        id=orm_period.id,
        owner_id=orm_period.owner_id,
        start_date=orm_period.start_date,
        end_date=orm_period.end_date,
        status=domain.PeriodStatus(orm_period.status),
        closed_at=orm_period.closed_at,
        closed_by=orm_period.closed_by,
        notes=orm_period.notes,
        created_at=orm_period.created_at,
        closing_split_group_id=orm_period.closing_split_group_id,
    )
