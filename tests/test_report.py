"""Tests for report commands."""

import pytest

from ledgerkit.cli.main import cli

from conftest import OWNER


def _invoke(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "--owner", OWNER, *args])


def _line(output: str, label: str) -> str:
    return next(line for line in output.splitlines() if line.strip().startswith(label))


@pytest.fixture
def january(cli_runner, temp_db, chart):
    """A sale of 500 to Bank and 120 of office supplies paid from Bank."""
    commands = [
        ["add", "--date", "2024-01-10", "--amount", "500", "--debit", "11", "--credit", "41",
         "--payee", "ACME", "--status", "pending"],
        ["add", "--date", "2024-01-12", "--amount", "120", "--debit", "51", "--credit", "11",
         "--payee", "Paper Co", "--status", "pending"],
    ]
    for args in commands:
        assert _invoke(cli_runner, temp_db, *args).exit_code == 0


def test_income_statement(cli_runner, temp_db, january):
    result = _invoke(
        cli_runner, temp_db, "report", "income-statement",
        "--start-date", "2024-01-01", "--end-date", "2024-12-31",
    )

    assert result.exit_code == 0
    assert "Income statement 2024-01-01 to 2024-12-31:" in result.output
    assert "500.00" in _line(result.output, "41 Sales")
    assert "500.00" in _line(result.output, "Total income")
    assert "120.00" in _line(result.output, "Total expenses")
    assert "380.00" in _line(result.output, "Net income")


def test_income_statement_inverted_dates(cli_runner, temp_db):
    result = _invoke(
        cli_runner, temp_db, "report", "income-statement",
        "--start-date", "2024-02-01", "--end-date", "2024-01-01",
    )

    assert result.exit_code == 1
    assert "Start date must be on or before end date" in result.output


def test_balance_sheet(cli_runner, temp_db, january):
    result = _invoke(cli_runner, temp_db, "report", "balance-sheet", "--as-of", "2024-01-31")

    assert result.exit_code == 0
    assert "Balance sheet as of 2024-01-31:" in result.output
    assert "380.00" in _line(result.output, "Total assets")
    assert "Not balanced (difference 380.00)" in result.output


def test_balance_sheet_empty_is_balanced(cli_runner, temp_db):
    result = _invoke(cli_runner, temp_db, "report", "balance-sheet", "--as-of", "2024-01-31")

    assert result.exit_code == 0
    assert "No accounts." in result.output
    assert "Balanced" in result.output


def test_balance_sheet_invalid_date(cli_runner, temp_db):
    result = _invoke(cli_runner, temp_db, "report", "balance-sheet", "--as-of", "someday")

    assert result.exit_code == 1
