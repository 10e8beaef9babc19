"""Transaction management commands."""

import click
from ledgerkit.cli.account_resolution import resolve_account_or_exit, resolve_optional_account
from ledgerkit.cli.date_filters import period_options, resolve_cli_date_range
from ledgerkit.cli.error_handling import handle_domain_error, parse_or_exit
from ledgerkit.cli.formatting import describe_entry, echo_transaction, resolve_tag_names
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import SplitType, TransactionStatus
from ledgerkit.domain.transaction import TransactionService
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import parse_date

STATUSES = [s.value for s in TransactionStatus]


def _account_names(ctx) -> dict[int, str]:
    accounts = AccountService(ctx.obj["db"]).list_accounts(ctx.obj["owner"])
    return {acc.id: acc.name for acc in accounts}


def _require_transaction(ctx, service: TransactionService, transaction_id: int):
    txn = service.get_transaction(ctx.obj["owner"], transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)
    return txn


@click.group()
def transaction_group():
    """Manage transactions and their status."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or 'start of month', 'today')")
@click.option("--end-date", help="End date (YYYY-MM-DD or 'today')")
@period_options
@click.option("--account", help="Account code, name or ID")
@click.option("--status", type=click.Choice(STATUSES), help="Only transactions with this status")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    account: str | None,
    status: str | None,
    **period_flags: bool,
):
    """View transactions with optional filters, newest first."""
    service = TransactionService(ctx.obj["db"])
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags
    )
    account_id = resolve_optional_account(ctx, AccountService(ctx.obj["db"]), account)

    transactions = service.list_transactions(
        ctx.obj["owner"],
        start_date=start,
        end_date=end,
        account_id=account_id,
        status=TransactionStatus(status) if status else None,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = _account_names(ctx)
    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    click.echo(f"{'ID':<6} {'Date':<12} {'Status':<11} {'Amount':>12}  {'Entry':<32} {'Payee':<20}")
    click.echo("-" * 100)
    for txn in transactions:
        entry = describe_entry(txn, accounts)
        if txn.split_type is not None:
            entry = f"[{txn.split_type.value}] {entry}"
        click.echo(
            f"{txn.id:<6} {str(txn.date):<12} {txn.status.value:<11} {txn.amount:>12,.2f}  "
            f"{entry[:32]:<32} {(txn.payee or '')[:20]:<20}"
        )


@transaction_group.command("show")
@click.argument("transaction_id", type=int)
@click.pass_context
def show_transaction(ctx, transaction_id: int) -> None:
    """Show one transaction."""
    service = TransactionService(ctx.obj["db"])
    txn = _require_transaction(ctx, service, transaction_id)
    echo_transaction(txn, _account_names(ctx))


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--date", "date_str", help="Transaction date")
@click.option("--amount", help="Transaction amount")
@click.option("--account", help="Single account, or empty string to clear")
@click.option("--debit", help="Debit account, or empty string to clear")
@click.option("--credit", help="Credit account, or empty string to clear")
@click.option("--payee", help="Payee, or empty string to clear")
@click.option("--customer", type=int, help="Customer ID")
@click.option("--notes", help="Notes")
@click.option("--status", type=click.Choice(STATUSES), help="Set the status directly")
@click.option("--tag", "tags", multiple=True, help="Replace tags (repeatable)")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    date_str: str | None,
    amount: str | None,
    account: str | None,
    debit: str | None,
    credit: str | None,
    payee: str | None,
    customer: int | None,
    notes: str | None,
    status: str | None,
    tags: tuple[str, ...],
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. Completed transactions keep
    their accounts, amount and customer; reconciled ones cannot be edited.

    Examples:
        ledgerkit transaction update 1 --amount -75.00
        ledgerkit transaction update 1 --account "" --debit 11 --credit 41
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    changes = {}

    if date_str is not None:
        changes["date"] = parse_or_exit(ctx, parse_date, date_str, "date")
    if amount is not None:
        changes["amount"] = parse_or_exit(ctx, parse_amount, amount, "amount")
    for field, value in (("account_id", account), ("debit_account_id", debit), ("credit_account_id", credit)):
        if value is not None:
            changes[field] = resolve_account_or_exit(ctx, account_service, value) if value else None
    if payee is not None:
        changes["payee"] = payee or None
    if customer is not None:
        changes["payee_customer_id"] = customer
    if notes is not None:
        changes["notes"] = notes
    if status is not None:
        changes["status"] = TransactionStatus(status)
    if tags:
        changes["tag_ids"] = tuple(resolve_tag_names(ctx, tags))

    if not changes:
        click.echo("Nothing to update.")
        return

    try:
        txn = TransactionService(db).update_transaction(ctx.obj["owner"], transaction_id, **changes)
        click.echo(f"Updated transaction {transaction_id} [{txn.status.value}]")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction.

    Deleting the parent of a split group deletes its children too; a split
    child cannot be deleted on its own.
    """
    service = TransactionService(ctx.obj["db"])
    _require_transaction(ctx, service, transaction_id)

    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(ctx.obj["owner"], transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("advance")
@click.argument("transaction_id", type=int)
@click.option(
    "--from",
    "from_status",
    type=click.Choice(STATUSES),
    help="Status you expect the transaction to have (defaults to the stored one)",
)
@click.pass_context
def advance_transaction(ctx, transaction_id: int, from_status: str | None) -> None:
    """Advance a transaction one step: draft, pending, completed, reconciled."""
    service = TransactionService(ctx.obj["db"])
    txn = _require_transaction(ctx, service, transaction_id)
    current = TransactionStatus(from_status) if from_status else txn.status

    try:
        updated = service.advance_status(ctx.obj["owner"], transaction_id, current)
        click.echo(f"Transaction {transaction_id}: {current.value} -> {updated.status.value}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("uncomplete")
@click.argument("transaction_id", type=int)
@click.option("--reason", required=True, help="Why the transaction is reopened")
@click.pass_context
def uncomplete_transaction(ctx, transaction_id: int, reason: str) -> None:
    """Move a completed transaction back to pending."""
    service = TransactionService(ctx.obj["db"])
    try:
        service.uncomplete(ctx.obj["owner"], transaction_id, reason)
        click.echo(f"Transaction {transaction_id}: completed -> pending")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("unreconcile")
@click.argument("transaction_id", type=int)
@click.option("--reason", required=True, help="Why the reconciliation is undone")
@click.pass_context
def unreconcile_transaction(ctx, transaction_id: int, reason: str) -> None:
    """Move a reconciled transaction back to completed."""
    service = TransactionService(ctx.obj["db"])
    try:
        service.unreconcile(ctx.obj["owner"], transaction_id, reason)
        click.echo(f"Transaction {transaction_id}: reconciled -> completed")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("history")
@click.argument("transaction_id", type=int)
@click.pass_context
def transaction_history(ctx, transaction_id: int) -> None:
    """Show the status history of a transaction, oldest first."""
    service = TransactionService(ctx.obj["db"])
    try:
        entries = service.get_status_history(ctx.obj["owner"], transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    for entry in entries:
        from_status = entry.from_status.value if entry.from_status else "-"
        line = f"{entry.changed_at:%Y-%m-%d %H:%M:%S}  {from_status:>10} -> {entry.to_status.value:<10} by {entry.changed_by}"
        if entry.notes:
            line += f"  ({entry.notes})"
        click.echo(line)


@transaction_group.command("check")
@click.argument("transaction_id", type=int)
@click.pass_context
def check_transaction(ctx, transaction_id: int) -> None:
    """Report validation issues and the document requirement of a transaction."""
    service = TransactionService(ctx.obj["db"])
    owner = ctx.obj["owner"]
    try:
        issues = service.get_validation_issues(owner, transaction_id)
        gate = service.get_document_gate_status(owner, transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not issues:
        click.echo("No issues found.")
    for issue in issues:
        click.echo(f"[{issue.severity}] {issue.type}: {issue.message}")
        if issue.explanation:
            click.echo(f"    {issue.explanation}")

    if gate.has_all_required_documents:
        click.echo("Documents: ready to reconcile")
    else:
        click.echo(f"Documents: {gate.requirement_message()}")


@transaction_group.command("group")
@click.argument("split_group_id")
@click.pass_context
def show_split_group(ctx, split_group_id: str) -> None:
    """Show the parent and children of a split group."""
    service = TransactionService(ctx.obj["db"])
    try:
        rows = service.get_split_group(ctx.obj["owner"], split_group_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    accounts = _account_names(ctx)
    for row in rows:
        echo_transaction(row, accounts, indent="" if row.split_type == SplitType.PARENT else "  ")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
