"""SQLAlchemy models for the ledgerkit database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Table,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


transaction_tags = Table(
    "transaction_tags",
    Base.metadata,
    Column("transaction_id", Integer, ForeignKey("transactions.id"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id"), primary_key=True),
)


class Account(Base):
    """Chart-of-accounts entry."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    code = Column(String, nullable=True)
    is_open = Column(Boolean, default=True, nullable=False)
    is_read_only = Column(Boolean, default=False, nullable=False)
    account_type = Column(String, default="neutral", nullable=False)
    account_class = Column(String, nullable=True)
    opening_balance = Column(Numeric(14, 2), default=0, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("owner_id", "code", name="uq_owner_account_code"),)


class Customer(Base):
    """Customer model."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Tag(Base):
    """Tag model."""

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("owner_id", "name", name="uq_owner_tag_name"),)


class Transaction(Base):
    """Transaction model.

    Holds either account_id (legacy single-entry) or the credit/debit pair.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    payee = Column(String, nullable=True)
    payee_customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    notes = Column(String, nullable=True)
    status = Column(String, default="draft", nullable=False)
    status_changed_at = Column(DateTime, default=_utcnow, nullable=False)
    status_changed_by = Column(String, nullable=True)
    created_by = Column(String, nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    credit_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    debit_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    split_group_id = Column(String, nullable=True, index=True)
    split_type = Column(String, nullable=True)
    external_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("created_by", "external_id", name="uq_created_by_external_id"),
    )

    # Relationships
    tags = relationship("Tag", secondary=transaction_tags, order_by="Tag.id")
    documents = relationship(
        "Document", back_populates="transaction", cascade="all, delete-orphan"
    )


class TransactionStatusHistory(Base):
    """Append-only status history.

    transaction_id carries no foreign key: rows outlive their transaction.
    """

    __tablename__ = "transaction_status_history"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, nullable=False, index=True)
    from_status = Column(String, nullable=True)
    to_status = Column(String, nullable=False)
    changed_by = Column(String, nullable=False)
    changed_at = Column(DateTime, default=_utcnow, nullable=False)
    notes = Column(String, nullable=True)


class DocumentType(Base):
    """Document type model."""

    __tablename__ = "document_types"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    is_required = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Document(Base):
    """Document attached to a transaction (soft-deletable)."""

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    document_type_id = Column(Integer, ForeignKey("document_types.id"), nullable=False)
    file_name = Column(String, nullable=False)
    uploaded_by = Column(String, nullable=False)
    uploaded_at = Column(DateTime, default=_utcnow, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)

    # Relationships
    transaction = relationship("Transaction", back_populates="documents")


class AccountingPeriod(Base):
    """Accounting period that can be closed against further changes."""

    __tablename__ = "accounting_periods"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String, default="open", nullable=False)
    closed_at = Column(DateTime, nullable=True)
    closed_by = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    closing_split_group_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Settings(Base):
    """Per-owner ledger policy."""

    __tablename__ = "settings"

    owner_id = Column(String, primary_key=True)
    double_entry_mode = Column(Boolean, default=False, nullable=False)
    auto_draft_to_pending = Column(Boolean, default=False, nullable=False)
    reconciliation_conditions = Column(JSON, default=list, nullable=False)
    min_required_documents = Column(Integer, default=0, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
