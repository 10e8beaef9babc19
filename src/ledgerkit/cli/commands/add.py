"""Add transaction command."""

import click
from ledgerkit.cli.account_resolution import resolve_optional_account
from ledgerkit.cli.error_handling import handle_domain_error, parse_or_exit
from ledgerkit.cli.formatting import echo_transaction, resolve_tag_names
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import TransactionInput, TransactionStatus
from ledgerkit.domain.transaction import TransactionService
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import parse_date

STATUSES = [s.value for s in TransactionStatus]


@click.command("add")
@click.option(
    "--date",
    "date_str",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Transaction amount (e.g., 123.45 or -123.45)")
@click.option("--account", help="Single account (code, name or ID); the sign carries the direction")
@click.option("--debit", help="Debit account (code, name or ID)")
@click.option("--credit", help="Credit account (code, name or ID)")
@click.option("--payee", help="Payee name")
@click.option("--customer", type=int, help="Customer ID")
@click.option("--notes", help="Notes")
@click.option("--status", type=click.Choice(STATUSES), help="Initial status (default: draft)")
@click.option("--tag", "tags", multiple=True, help="Tag name (repeatable)")
@click.option("--external-id", help="External reference; must be unique")
@click.pass_context
def add_transaction(
    ctx,
    date_str: str,
    amount: str,
    account: str | None,
    debit: str | None,
    credit: str | None,
    payee: str | None,
    customer: int | None,
    notes: str | None,
    status: str | None,
    tags: tuple[str, ...],
    external_id: str | None,
):
    """Add a transaction.

    Use --account for a single-account entry or --debit and --credit for a
    double entry. Referenced accounts and their closed parents are opened.

    Examples:
        ledgerkit add --amount -50 --account 11 --payee "Grocer" --status pending
        ledgerkit add --amount 100 --debit 11 --credit 41 --payee "ACME"
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    tag_ids = resolve_tag_names(ctx, tags)

    data = TransactionInput(
        date=parse_or_exit(ctx, parse_date, date_str, "date"),
        amount=parse_or_exit(ctx, parse_amount, amount, "amount"),
        payee=payee,
        payee_customer_id=customer,
        notes=notes,
        status=TransactionStatus(status) if status else None,
        account_id=resolve_optional_account(ctx, account_service, account),
        credit_account_id=resolve_optional_account(ctx, account_service, credit),
        debit_account_id=resolve_optional_account(ctx, account_service, debit),
        tag_ids=tuple(tag_ids) if tag_ids else None,
        external_id=external_id,
    )

    try:
        txn = TransactionService(db).create_transaction(ctx.obj["owner"], data)
    except ValueError as e:
        handle_domain_error(ctx, e)

    accounts = {acc.id: acc.name for acc in account_service.list_accounts(ctx.obj["owner"])}
    click.echo(f"Created transaction {txn.id}")
    echo_transaction(txn, accounts, indent="  ")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
