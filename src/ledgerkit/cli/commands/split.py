"""Split transaction command."""

import click
from ledgerkit.cli.account_resolution import resolve_account_or_exit
from ledgerkit.cli.error_handling import handle_domain_error, parse_or_exit
from ledgerkit.cli.formatting import echo_transaction, resolve_tag_names
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import SplitLine, TransactionInput, TransactionStatus
from ledgerkit.domain.transaction import TransactionService
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import parse_date

STATUSES = [s.value for s in TransactionStatus]


def _parse_line(ctx, account_service: AccountService, index: int, text: str) -> SplitLine:
    """Parse "AMOUNT:ACCOUNT" or "AMOUNT:DEBIT:CREDIT" into a split line.

    Either side of DEBIT:CREDIT may be left empty for a one-sided split.
    """
    parts = [part.strip() for part in text.split(":")]
    if len(parts) not in (2, 3) or not parts[0] or not any(parts[1:]):
        click.echo(
            f"Error: Split {index}: expected AMOUNT:ACCOUNT or AMOUNT:DEBIT:CREDIT, got '{text}'",
            err=True,
        )
        ctx.exit(1)

    amount = parse_or_exit(ctx, parse_amount, parts[0], f"amount in split {index}")
    if len(parts) == 2:
        return SplitLine(amount=amount, account_id=resolve_account_or_exit(ctx, account_service, parts[1]))
    debit, credit = parts[1], parts[2]
    return SplitLine(
        amount=amount,
        debit_account_id=resolve_account_or_exit(ctx, account_service, debit) if debit else None,
        credit_account_id=resolve_account_or_exit(ctx, account_service, credit) if credit else None,
    )


@click.command("split")
@click.option(
    "--date",
    "date_str",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Total amount shown on the parent")
@click.option(
    "--line",
    "lines",
    multiple=True,
    required=True,
    help="Split line AMOUNT:ACCOUNT or AMOUNT:DEBIT:CREDIT (at least two)",
)
@click.option("--payee", help="Payee name (inherited by every split)")
@click.option("--customer", type=int, help="Customer ID")
@click.option("--notes", help="Notes on the parent")
@click.option("--status", type=click.Choice(STATUSES), help="Status of the group (default: pending)")
@click.option("--tag", "tags", multiple=True, help="Tag name (repeatable)")
@click.pass_context
def split_transaction(
    ctx,
    date_str: str,
    amount: str,
    lines: tuple[str, ...],
    payee: str | None,
    customer: int | None,
    notes: str | None,
    status: str | None,
    tags: tuple[str, ...],
):
    """Record a split transaction.

    The parent carries no accounts and does not post; each line becomes a
    child transaction. In double-entry mode the debits and credits of the
    lines must balance.

    Examples:
        ledgerkit split --amount 100 --payee "Office Depot" \\
            --line 60:51: --line 40:52: --line 100::11
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)

    split_lines = [_parse_line(ctx, account_service, i, text) for i, text in enumerate(lines, start=1)]
    tag_ids = resolve_tag_names(ctx, tags)
    parent = TransactionInput(
        date=parse_or_exit(ctx, parse_date, date_str, "date"),
        amount=parse_or_exit(ctx, parse_amount, amount, "amount"),
        payee=payee,
        payee_customer_id=customer,
        notes=notes,
        status=TransactionStatus(status) if status else None,
        tag_ids=tuple(tag_ids) if tag_ids else None,
    )

    try:
        result = TransactionService(db).create_split_transaction(ctx.obj["owner"], parent, split_lines)
    except ValueError as e:
        handle_domain_error(ctx, e)

    accounts = {acc.id: acc.name for acc in account_service.list_accounts(ctx.obj["owner"])}
    click.echo(f"Created split group {result.parent.split_group_id}")
    echo_transaction(result.parent, accounts, indent="  ")
    for child in result.children:
        echo_transaction(child, accounts, indent="    ")


def register_commands(cli):
    """Register split command with main CLI."""
    cli.add_command(split_transaction)
