"""Summary command."""

import click
from ledgerkit.cli.account_resolution import resolve_optional_account
from ledgerkit.cli.date_filters import period_options, resolve_cli_date_range
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.summary import SummaryService


def _change(value: float) -> str:
    return f"{value:+.1f}%"


@click.command("summary")
@click.option("--start-date", help="Start date (defaults to January 1 of the end date's year)")
@click.option("--end-date", help="End date (defaults to today)")
@period_options
@click.option("--account", help="Restrict to one account (code, name or ID)")
@click.option("--daily", is_flag=True, help="Also print income and expenses per day")
@click.pass_context
def summary(
    ctx,
    start_date: str | None,
    end_date: str | None,
    account: str | None,
    daily: bool,
    **period_flags: bool,
):
    """Show income, expenses and remaining for a date window.

    Changes compare against the window of equal length right before it.
    Drafts and split parents are not counted.

    Examples:
        ledgerkit summary --this-month
        ledgerkit summary --start-date 2024-01-01 --end-date 2024-03-31 --account 11
    """
    db = ctx.obj["db"]
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags
    )
    account_id = resolve_optional_account(ctx, AccountService(db), account)

    try:
        result = SummaryService(db).get_summary(
            ctx.obj["owner"], start_date=start, end_date=end, account_id=account_id
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nSummary {result.start_date} to {result.end_date}:")
    click.echo("-" * 50)
    click.echo(f"{'Income':<20} {result.income:>14,.2f} {_change(result.income_change):>12}")
    click.echo(f"{'Expenses':<20} {result.expenses:>14,.2f} {_change(result.expenses_change):>12}")
    click.echo(f"{'Remaining':<20} {result.remaining:>14,.2f} {_change(result.remaining_change):>12}")

    if result.tags:
        click.echo("\nTags:")
        for tag in result.tags:
            click.echo(f"  {tag.name:<18} {tag.value:>14,.2f}")

    if daily:
        click.echo("\nDaily:")
        if not result.days:
            click.echo("  No activity.")
        for day in result.days:
            click.echo(f"  {day.date}  income {day.income:>12,.2f}  expenses {day.expenses:>12,.2f}")


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
