"""Shared pytest fixtures for ledgerkit tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
from pathlib import Path
import pytest

from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.documents import DocumentService
from ledgerkit.domain.entities import AccountClass, AccountType, LedgerSettings, TransactionInput
from ledgerkit.domain.period import AccountingPeriodService
from ledgerkit.domain.report import ReportService
from ledgerkit.domain.settings import SettingsService
from ledgerkit.domain.summary import SummaryService
from ledgerkit.domain.tag import CustomerService, TagService
from ledgerkit.domain.transaction import TransactionService

OWNER = "alice"
OTHER_OWNER = "bob"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests that open their own connection
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def document_service(temp_db):
    """Create a DocumentService with a temporary database."""
    return DocumentService(temp_db)


@pytest.fixture
def settings_service(temp_db):
    """Create a SettingsService with a temporary database."""
    return SettingsService(temp_db)


@pytest.fixture
def summary_service(temp_db):
    """Create a SummaryService with a temporary database."""
    return SummaryService(temp_db)


@pytest.fixture
def report_service(temp_db):
    """Create a ReportService with a temporary database."""
    return ReportService(temp_db)


@pytest.fixture
def period_service(temp_db):
    """Create an AccountingPeriodService with a temporary database."""
    return AccountingPeriodService(temp_db)


@pytest.fixture
def tag_service(temp_db):
    """Create a TagService with a temporary database."""
    return TagService(temp_db)


@pytest.fixture
def customer_service(temp_db):
    """Create a CustomerService with a temporary database."""
    return CustomerService(temp_db)


@pytest.fixture
def default_settings():
    """Settings with every policy switch off."""
    return LedgerSettings(owner_id=OWNER)


@pytest.fixture
def double_entry_settings():
    """Settings with double-entry mode enabled."""
    return LedgerSettings(owner_id=OWNER, double_entry_mode=True)


@pytest.fixture
def chart(account_service):
    """Create a small chart of accounts and return account IDs by code.

    1 Assets / 11 Bank / 12 Cash, 4 Income / 41 Sales (credit-only),
    5 Expenses / 51 Office (debit-only) / 52 Travel.
    """
    specs = [
        ("1", "Assets", AccountClass.ASSET, AccountType.NEUTRAL),
        ("11", "Bank", AccountClass.ASSET, AccountType.NEUTRAL),
        ("12", "Cash", AccountClass.ASSET, AccountType.NEUTRAL),
        ("4", "Income", AccountClass.INCOME, AccountType.NEUTRAL),
        ("41", "Sales", AccountClass.INCOME, AccountType.CREDIT),
        ("5", "Expenses", AccountClass.EXPENSE, AccountType.NEUTRAL),
        ("51", "Office", AccountClass.EXPENSE, AccountType.DEBIT),
        ("52", "Travel", AccountClass.EXPENSE, AccountType.NEUTRAL),
    ]
    ids = {}
    for code, name, account_class, account_type in specs:
        ids[code] = account_service.create_account(
            owner_id=OWNER,
            name=name,
            code=code,
            account_type=account_type,
            account_class=account_class,
        )
    return ids


@pytest.fixture
def make_input():
    """Build a TransactionInput with sensible defaults."""

    def _make(**overrides):
        values = {
            "date": date(2024, 1, 15),
            "amount": Decimal("100.00"),
            "payee": "ACME",
        }
        values.update(overrides)
        return TransactionInput(**values)

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
