"""Financial report commands."""

import click
from ledgerkit.cli.date_filters import period_options, resolve_cli_date_range
from ledgerkit.cli.error_handling import handle_domain_error, parse_or_exit
from ledgerkit.domain.report import ReportService
from ledgerkit.utils.date_parser import parse_date


def _print_section(title: str, lines, total) -> None:
    click.echo(f"\n{title}:")
    if not lines:
        click.echo("  No accounts.")
    for line in lines:
        label = f"{line.code} {line.name}" if line.code else line.name
        indent = "  " * (line.depth + 1)
        click.echo(f"{indent}{label:<{40 - len(indent)}} {line.balance:>14,.2f}")
    click.echo(f"  {'Total ' + title.lower():<38} {total:>14,.2f}")


@click.group()
def report_group():
    """Show financial reports."""
    pass


@report_group.command("income-statement")
@click.option("--start-date", help="Start date (defaults to January 1 of the end date's year)")
@click.option("--end-date", help="End date (defaults to today)")
@period_options
@click.pass_context
def income_statement(ctx, start_date: str | None, end_date: str | None, **period_flags: bool):
    """Show income and expense activity for a date window.

    Opening balances are not included. Drafts and split parents are not
    counted.

    Examples:
        ledgerkit report income-statement --this-year
        ledgerkit report income-statement --start-date 2024-01-01 --end-date 2024-12-31
    """
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags
    )
    try:
        result = ReportService(ctx.obj["db"]).get_income_statement(
            ctx.obj["owner"], start_date=start, end_date=end
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nIncome statement {result.start_date} to {result.end_date}:")
    click.echo("-" * 56)
    _print_section("Income", result.income_accounts, result.total_income)
    _print_section("Expenses", result.expense_accounts, result.total_expenses)
    click.echo("-" * 56)
    click.echo(f"{'Net income':<40} {result.net_income:>14,.2f}")


@report_group.command("balance-sheet")
@click.option("--as-of", help="Report date (defaults to today)")
@click.pass_context
def balance_sheet(ctx, as_of: str | None):
    """Show asset, liability and equity balances as of a date.

    Examples:
        ledgerkit report balance-sheet --as-of 2024-12-31
    """
    as_of_date = parse_or_exit(ctx, parse_date, as_of, "date") if as_of else None
    result = ReportService(ctx.obj["db"]).get_balance_sheet(ctx.obj["owner"], as_of=as_of_date)

    click.echo(f"\nBalance sheet as of {result.as_of}:")
    click.echo("-" * 56)
    _print_section("Assets", result.asset_accounts, result.total_assets)
    _print_section("Liabilities", result.liability_accounts, result.total_liabilities)
    _print_section("Equity", result.equity_accounts, result.total_equity)
    click.echo("-" * 56)
    click.echo(f"{'Liabilities and equity':<40} {result.liabilities_and_equity:>14,.2f}")
    if result.is_balanced:
        click.echo("Balanced")
    else:
        click.echo(f"Not balanced (difference {result.difference:,.2f})")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
