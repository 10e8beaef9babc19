"""Accounting period commands."""

import click
from ledgerkit.cli.account_resolution import resolve_account_or_exit, resolve_optional_account
from ledgerkit.cli.error_handling import handle_domain_error, parse_or_exit
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import PeriodStatus, TransactionStatus
from ledgerkit.domain.period import AccountingPeriodService
from ledgerkit.utils.date_parser import parse_date

STATUSES = [s.value for s in TransactionStatus]


def _print_period(period) -> None:
    line = (
        f"ID: {period.id:3d} | {period.start_date} to {period.end_date} | "
        f"{period.status.value:6s}"
    )
    if period.status == PeriodStatus.CLOSED:
        line += f" | closed by {period.closed_by}"
    if period.closing_split_group_id:
        line += f" | closing entries {period.closing_split_group_id}"
    if period.notes:
        line += f" | {period.notes}"
    click.echo(line)


@click.group()
def period_group():
    """Manage accounting periods and closing entries."""
    pass


@period_group.command("create")
@click.argument("start_date")
@click.argument("end_date")
@click.option("--notes", help="Notes")
@click.pass_context
def create_period(ctx, start_date: str, end_date: str, notes: str | None) -> None:
    """Create an open accounting period.

    Examples:
        ledgerkit period create 2024-01-01 2024-12-31 --notes "FY 2024"
    """
    start = parse_or_exit(ctx, parse_date, start_date, "start date")
    end = parse_or_exit(ctx, parse_date, end_date, "end date")
    try:
        period = AccountingPeriodService(ctx.obj["db"]).create_period(
            ctx.obj["owner"], start, end, notes
        )
        click.echo(
            f"Created accounting period {period.start_date} to {period.end_date} "
            f"(ID: {period.id})"
        )
    except ValueError as e:
        handle_domain_error(ctx, e)


@period_group.command("list")
@click.pass_context
def list_periods(ctx) -> None:
    """List accounting periods, latest first."""
    periods = AccountingPeriodService(ctx.obj["db"]).list_periods(ctx.obj["owner"])
    if not periods:
        click.echo("No accounting periods found.")
        return
    for period in periods:
        _print_period(period)


@period_group.command("close")
@click.argument("period_id", type=int)
@click.option("--notes", help="Replace the period notes")
@click.pass_context
def close_period(ctx, period_id: int, notes: str | None) -> None:
    """Close a period. Transactions dated inside it can no longer change."""
    try:
        period = AccountingPeriodService(ctx.obj["db"]).close_period(
            ctx.obj["owner"], period_id, notes
        )
        click.echo(f"Closed accounting period {period.start_date} to {period.end_date}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@period_group.command("reopen")
@click.argument("period_id", type=int)
@click.pass_context
def reopen_period(ctx, period_id: int) -> None:
    """Reopen a closed period."""
    try:
        period = AccountingPeriodService(ctx.obj["db"]).reopen_period(ctx.obj["owner"], period_id)
        click.echo(f"Reopened accounting period {period.start_date} to {period.end_date}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@period_group.command("delete")
@click.argument("period_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_period(ctx, period_id: int, yes: bool) -> None:
    """Delete a period. Closing entries already written are kept."""
    if not yes and not click.confirm(f"Are you sure you want to delete period {period_id}?"):
        click.echo("Deletion cancelled.")
        return
    try:
        AccountingPeriodService(ctx.obj["db"]).delete_period(ctx.obj["owner"], period_id)
        click.echo(f"Deleted accounting period {period_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@period_group.command("preview")
@click.argument("start_date")
@click.argument("end_date")
@click.option("--pl-account", required=True, help="Profit and loss account (code, name or ID)")
@click.option("--retained-earnings", help="Retained earnings account (code, name or ID)")
@click.pass_context
def preview_closing(
    ctx, start_date: str, end_date: str, pl_account: str, retained_earnings: str | None
) -> None:
    """Show the balances a closing of the date range would move.

    Examples:
        ledgerkit period preview 2024-01-01 2024-12-31 --pl-account 89
    """
    start = parse_or_exit(ctx, parse_date, start_date, "start date")
    end = parse_or_exit(ctx, parse_date, end_date, "end date")
    account_service = AccountService(ctx.obj["db"])
    pl_id = resolve_account_or_exit(ctx, account_service, pl_account)
    re_id = resolve_optional_account(ctx, account_service, retained_earnings)

    try:
        preview = AccountingPeriodService(ctx.obj["db"]).preview_closing(
            ctx.obj["owner"], start, end, pl_id, re_id
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nClosing preview {preview.start_date} to {preview.end_date}:")
    click.echo("-" * 56)
    sections = (("Income", preview.income_accounts), ("Expenses", preview.expense_accounts))
    for title, lines in sections:
        click.echo(f"\n{title}:")
        if not lines:
            click.echo("  No activity.")
        for line in lines:
            label = line.account_name
            if line.account_code:
                label = f"{line.account_code} {line.account_name}"
            click.echo(f"  {label:<38} {line.balance:>14,.2f}")
    click.echo("-" * 56)
    click.echo(f"{'Total income':<40} {preview.total_income:>14,.2f}")
    click.echo(f"{'Total expenses':<40} {preview.total_expenses:>14,.2f}")
    click.echo(f"{'Net result':<40} {preview.net_result:>14,.2f}")
    click.echo(f"Profit and loss account: {preview.profit_and_loss_account.name}")
    if preview.retained_earnings_account is not None:
        click.echo(f"Retained earnings account: {preview.retained_earnings_account.name}")


@period_group.command("closing-entries")
@click.argument("period_id", type=int)
@click.option("--pl-account", required=True, help="Profit and loss account (code, name or ID)")
@click.option("--retained-earnings", help="Retained earnings account (code, name or ID)")
@click.option("--date", "closing_date", help="Date of the entries (defaults to the period end)")
@click.option(
    "--status",
    type=click.Choice(STATUSES),
    default=TransactionStatus.COMPLETED.value,
    show_default=True,
    help="Status of the entries",
)
@click.pass_context
def create_closing_entries(
    ctx,
    period_id: int,
    pl_account: str,
    retained_earnings: str | None,
    closing_date: str | None,
    status: str,
) -> None:
    """Write the closing entries of a period as one split group.

    Examples:
        ledgerkit period closing-entries 1 --pl-account 89 --retained-earnings 20
    """
    account_service = AccountService(ctx.obj["db"])
    pl_id = resolve_account_or_exit(ctx, account_service, pl_account)
    re_id = resolve_optional_account(ctx, account_service, retained_earnings)
    entry_date = parse_or_exit(ctx, parse_date, closing_date, "date") if closing_date else None

    try:
        result = AccountingPeriodService(ctx.obj["db"]).create_closing_entries(
            ctx.obj["owner"],
            period_id,
            pl_id,
            retained_earnings_account_id=re_id,
            closing_date=entry_date,
            status=TransactionStatus(status),
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Created {len(result.children)} closing entries "
        f"(split group {result.parent.split_group_id}, parent ID: {result.parent.id})"
    )
    for child in result.children:
        click.echo(f"  ID: {child.id:4d} | {child.payee:<45s} | {child.amount:>12,.2f}")


def register_commands(cli):
    """Register accounting period commands with main CLI."""
    cli.add_command(period_group, name="period")
