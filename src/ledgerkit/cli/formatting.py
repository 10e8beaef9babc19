"""Shared CLI output and option helpers for transactions."""

import click

from ledgerkit.domain.tag import TagService


def resolve_tag_names(ctx: click.Context, names: tuple[str, ...]) -> list[int] | None:
    """Map tag names of the current owner to IDs, or exit if one is unknown."""
    if not names:
        return None
    tags = {tag.name: tag.id for tag in TagService(ctx.obj["db"]).list_tags(ctx.obj["owner"])}
    unknown = [name for name in names if name not in tags]
    if unknown:
        click.echo(f"Error: Tag(s) not found: {', '.join(unknown)}", err=True)
        ctx.exit(1)
    return [tags[name] for name in names]


def describe_entry(txn, accounts: dict[int, str]) -> str:
    """Describe the accounts of a transaction in one short string."""
    if txn.credit_account_id is not None or txn.debit_account_id is not None:
        debit = accounts.get(txn.debit_account_id, "-")
        credit = accounts.get(txn.credit_account_id, "-")
        return f"Dr {debit} / Cr {credit}"
    if txn.account_id is not None:
        return accounts.get(txn.account_id, "Unknown")
    return "(unassigned)"


def echo_transaction(txn, accounts: dict[int, str], indent: str = "") -> None:
    """Print the details of one transaction."""
    click.echo(f"{indent}Transaction {txn.id} [{txn.status.value}]")
    click.echo(f"{indent}  Date: {txn.date}")
    click.echo(f"{indent}  Amount: {txn.amount:,.2f}")
    click.echo(f"{indent}  Entry: {describe_entry(txn, accounts)}")
    if txn.payee:
        click.echo(f"{indent}  Payee: {txn.payee}")
    if txn.split_type is not None:
        click.echo(f"{indent}  Split: {txn.split_type.value} of {txn.split_group_id}")
    if txn.notes:
        click.echo(f"{indent}  Notes: {txn.notes}")
