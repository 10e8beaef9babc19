"""Domain model entities for ledgerkit.

These are pure data classes representing ledger concepts, independent of
database schema. Services receive and return these; the database layer maps
ORM rows onto them.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


class AccountType(str, Enum):
    """Directional restriction on the sides an account may take."""

    CREDIT = "credit"
    DEBIT = "debit"
    NEUTRAL = "neutral"


class AccountClass(str, Enum):
    """Accounting class of an account."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    INCOME = "income"
    EXPENSE = "expense"


class TransactionStatus(str, Enum):
    """Transaction lifecycle status."""

    DRAFT = "draft"
    PENDING = "pending"
    COMPLETED = "completed"
    RECONCILED = "reconciled"


class SplitType(str, Enum):
    """Role of a transaction inside a split group."""

    PARENT = "parent"
    CHILD = "child"


class ReconciliationCondition(str, Enum):
    """Named conditions a transaction must meet before reconciliation."""

    HAS_RECEIPT = "hasReceipt"


class PeriodStatus(str, Enum):
    """Accounting period status."""

    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class Account:
    """Ledger account domain entity."""

    id: int
    owner_id: str
    name: str
    code: Optional[str]
    is_open: bool
    is_read_only: bool
    account_type: AccountType
    account_class: Optional[AccountClass]
    opening_balance: Decimal
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    date: date
    amount: Decimal
    payee: Optional[str]
    payee_customer_id: Optional[int]
    notes: Optional[str]
    status: TransactionStatus
    status_changed_at: datetime
    status_changed_by: Optional[str]
    created_by: str
    account_id: Optional[int]
    credit_account_id: Optional[int]
    debit_account_id: Optional[int]
    split_group_id: Optional[str]
    split_type: Optional[SplitType]
    external_id: Optional[str] = None
    tag_ids: tuple[int, ...] = ()

    @property
    def account_ids(self) -> tuple[int, ...]:
        """Every account id referenced by this transaction."""
        return tuple(
            a
            for a in (self.account_id, self.credit_account_id, self.debit_account_id)
            if a is not None
        )


@dataclass(frozen=True)
class StatusHistoryEntry:
    """One append-only status history row."""

    id: int
    transaction_id: int
    from_status: Optional[TransactionStatus]
    to_status: TransactionStatus
    changed_by: str
    changed_at: datetime
    notes: Optional[str]


@dataclass(frozen=True)
class DocumentType:
    """Document type domain entity."""

    id: int
    owner_id: str
    name: str
    description: Optional[str]
    is_required: bool
    created_at: datetime


@dataclass(frozen=True)
class Document:
    """Document attached to a transaction."""

    id: int
    transaction_id: int
    document_type_id: int
    file_name: str
    uploaded_by: str
    uploaded_at: datetime
    is_deleted: bool


@dataclass(frozen=True)
class Customer:
    """Customer a transaction payee can be linked to."""

    id: int
    owner_id: str
    name: str
    created_at: datetime


@dataclass(frozen=True)
class Tag:
    """Tag domain entity."""

    id: int
    owner_id: str
    name: str
    created_at: datetime


@dataclass(frozen=True)
class AccountingPeriod:
    """Date range that can be closed against further changes.

    closing_split_group_id links the split group holding the period's
    closing entries, once they have been generated.
    """

    id: int
    owner_id: str
    start_date: date
    end_date: date
    status: PeriodStatus
    closed_at: Optional[datetime]
    closed_by: Optional[str]
    notes: Optional[str]
    created_at: datetime
    closing_split_group_id: Optional[str] = None

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class LedgerSettings:
    """Per-owner policy switches read by the ledger core."""

    owner_id: str
    double_entry_mode: bool = False
    auto_draft_to_pending: bool = False
    reconciliation_conditions: tuple[ReconciliationCondition, ...] = ()
    min_required_documents: int = 0


@dataclass(frozen=True)
class TransactionInput:
    """Payload used to create a transaction or to re-submit one on update.

    A status of None means "default" on create and "unchanged" on update.
    """

    date: date
    amount: Decimal
    payee: Optional[str] = None
    payee_customer_id: Optional[int] = None
    notes: Optional[str] = None
    status: Optional[TransactionStatus] = None
    account_id: Optional[int] = None
    credit_account_id: Optional[int] = None
    debit_account_id: Optional[int] = None
    tag_ids: Optional[tuple[int, ...]] = None
    external_id: Optional[str] = None

    @property
    def account_ids(self) -> tuple[int, ...]:
        """Every account id referenced by this payload."""
        return tuple(
            a
            for a in (self.account_id, self.credit_account_id, self.debit_account_id)
            if a is not None
        )


@dataclass(frozen=True)
class SplitLine:
    """One child line of a split transaction."""

    amount: Decimal
    account_id: Optional[int] = None
    credit_account_id: Optional[int] = None
    debit_account_id: Optional[int] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class SplitResult:
    """Rows created by a split transaction."""

    parent: Transaction
    children: tuple[Transaction, ...]


@dataclass(frozen=True)
class LegacyEntry:
    """Single-account entry; the amount sign carries the direction."""

    account_id: int


@dataclass(frozen=True)
class DoubleEntry:
    """Credit/debit account pair; the amount is a magnitude."""

    credit_account_id: int
    debit_account_id: int


@dataclass(frozen=True)
class UnassignedEntry:
    """No complete posting (draft rows and split parents)."""

    account_id: Optional[int] = None
    credit_account_id: Optional[int] = None
    debit_account_id: Optional[int] = None


EntryShape = Union[LegacyEntry, DoubleEntry, UnassignedEntry]


@dataclass(frozen=True)
class ValidationIssue:
    """Advisory issue reported for a stored transaction."""

    type: str
    message: str
    severity: str
    explanation: Optional[str] = None


@dataclass(frozen=True)
class TagTotal:
    """Summary total for one tag bucket."""

    name: str
    value: Decimal


@dataclass(frozen=True)
class DailyTotal:
    """Income and expenses for one day."""

    date: date
    income: Decimal
    expenses: Decimal


@dataclass(frozen=True)
class FinancialSummary:
    """Aggregated income/expense report for a date window."""

    start_date: date
    end_date: date
    account_id: Optional[int]
    income: Decimal
    expenses: Decimal
    remaining: Decimal
    income_change: float
    expenses_change: float
    remaining_change: float
    tags: tuple[TagTotal, ...] = ()
    days: tuple[DailyTotal, ...] = ()


@dataclass(frozen=True)
class ImportResult:
    """Outcome of an idempotent provider import."""

    created: int = 0
    skipped: int = 0
    errors: tuple[str, ...] = field(default_factory=tuple)
