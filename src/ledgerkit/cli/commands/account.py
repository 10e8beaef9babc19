"""Account management commands."""

import click
from ledgerkit.cli.account_resolution import resolve_account_or_exit
from ledgerkit.cli.error_handling import handle_domain_error, parse_or_exit
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import AccountClass, AccountType
from ledgerkit.domain.propagation import AccountOpener
from ledgerkit.utils.amount_parser import parse_amount

ACCOUNT_TYPES = [t.value for t in AccountType]
ACCOUNT_CLASSES = [c.value for c in AccountClass]


def _flags(acc) -> str:
    flags = []
    if not acc.is_open:
        flags.append("closed")
    if acc.is_read_only:
        flags.append("read-only")
    return ", ".join(flags)


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--code", help="Hierarchical account code (e.g. 1, 11, 111)")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPES),
    default=AccountType.NEUTRAL.value,
    show_default=True,
    help="Sides the account may take",
)
@click.option("--class", "account_class", type=click.Choice(ACCOUNT_CLASSES), help="Accounting class")
@click.option("--closed", is_flag=True, help="Create the account closed")
@click.option("--read-only", is_flag=True, help="Reject new transactions on this account")
@click.option("--opening-balance", default="0", help="Opening balance")
@click.pass_context
def create_account(
    ctx,
    name: str,
    code: str | None,
    account_type: str,
    account_class: str | None,
    closed: bool,
    read_only: bool,
    opening_balance: str,
):
    """Create a new account.

    Examples:
        ledgerkit account create "Assets" --code 1 --class asset
        ledgerkit account create "Bank" --code 11 --class asset --closed
        ledgerkit account create "Sales" --code 41 --class income --type credit
    """
    service = AccountService(ctx.obj["db"])
    balance = parse_or_exit(ctx, parse_amount, opening_balance, "opening balance")

    try:
        account_id = service.create_account(
            owner_id=ctx.obj["owner"],
            name=name,
            code=code,
            account_type=AccountType(account_type),
            account_class=AccountClass(account_class) if account_class else None,
            is_open=not closed,
            is_read_only=read_only,
            opening_balance=balance,
        )
        click.echo(f"Created account '{name}' (ID: {account_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List accounts ordered by code.

    Open accounts under a closed parent are flagged as invalid.
    """
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts_with_config(ctx.obj["owner"])
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc, invalid in accounts:
        code = acc.code or "-"
        account_class = acc.account_class.value if acc.account_class else "-"
        line = (
            f"ID: {acc.id:3d} | {code:8s} | {acc.name:24s} | "
            f"{acc.account_type.value:7s} | {account_class:9s}"
        )
        flags = _flags(acc)
        if flags:
            line += f" | {flags}"
        if invalid:
            line += " | INVALID: open under a closed parent"
        click.echo(line)


@account_group.command("tree")
@click.option(
    "--expand",
    multiple=True,
    help="Code whose children are shown (repeatable); --expand all shows everything",
)
@click.pass_context
def account_tree(ctx, expand: tuple[str, ...]):
    """Show the chart of accounts as a tree.

    Only top-level accounts are shown unless their codes are expanded.

    Examples:
        ledgerkit account tree
        ledgerkit account tree --expand 1 --expand 11
        ledgerkit account tree --expand all
    """
    service = AccountService(ctx.obj["db"])
    owner = ctx.obj["owner"]

    if "all" in expand:
        accounts = service.list_accounts(owner)
    else:
        accounts = service.visible_accounts(owner, expand)

    if not accounts:
        click.echo("No accounts found.")
        return

    for acc in accounts:
        depth = len(acc.code) - 1 if acc.code else 0
        label = f"{acc.code} {acc.name}" if acc.code else acc.name
        flags = _flags(acc)
        click.echo(f"{'    ' * depth}{label}" + (f" ({flags})" if flags else ""))


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--code", help="New account code, or empty string to clear")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), help="New account type")
@click.option("--class", "account_class", type=click.Choice(ACCOUNT_CLASSES), help="New accounting class")
@click.option("--open/--close", "is_open", default=None, help="Open or close the account")
@click.option("--read-only/--writable", "is_read_only", default=None, help="Toggle read-only")
@click.option("--opening-balance", help="New opening balance")
@click.pass_context
def update_account(
    ctx,
    account: str,
    name: str | None,
    code: str | None,
    account_type: str | None,
    account_class: str | None,
    is_open: bool | None,
    is_read_only: bool | None,
    opening_balance: str | None,
) -> None:
    """Update an account.

    ACCOUNT can be an account code, name or ID. Closing an account does not
    close its children.

    Examples:
        ledgerkit account update 11 --close
        ledgerkit account update "Bank" --code ""
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)

    balance = None
    if opening_balance is not None:
        balance = parse_or_exit(ctx, parse_amount, opening_balance, "opening balance")

    try:
        service.update_account(
            ctx.obj["owner"],
            account_id,
            name=name,
            code=code or None,
            account_type=AccountType(account_type) if account_type else None,
            account_class=AccountClass(account_class) if account_class else None,
            is_open=is_open,
            is_read_only=is_read_only,
            opening_balance=balance,
            clear_code=code == "",
        )
        click.echo(f"Updated account {account_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("open")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def open_account(ctx, account: str) -> None:
    """Open an account together with its closed parents."""
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    try:
        opened = AccountOpener(db).open_account_and_ancestors(account_id, ctx.obj["owner"])
    except ValueError as e:
        handle_domain_error(ctx, e)

    if opened:
        click.echo(f"Opened account(s): {', '.join(str(i) for i in opened)}")
    else:
        click.echo("Nothing to open.")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account code, name or ID. Accounts referenced by
    transactions cannot be deleted.
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(ctx.obj["owner"], account_id)
        click.echo(f"Deleted account '{account_obj.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("balances")
@click.pass_context
def account_balances(ctx) -> None:
    """Show account balances and the trial balance."""
    service = AccountService(ctx.obj["db"])
    owner = ctx.obj["owner"]

    balances = service.get_account_balances(owner)
    if not balances:
        click.echo("No accounts found.")
        return

    click.echo(f"{'Account':<30} {'Normal':<8} {'Balance':>14}")
    click.echo("-" * 54)
    for item in balances:
        click.echo(f"{item.account_name:<30} {item.normal_balance:<8} {item.balance:>14,.2f}")

    trial = service.get_trial_balance(owner)
    click.echo("-" * 54)
    click.echo(f"Debits: {trial.total_debits:,.2f} | Credits: {trial.total_credits:,.2f}")
    if trial.is_balanced:
        click.echo("Trial balance is balanced.")
    else:
        click.echo(f"Trial balance is off by {trial.difference:,.2f}.")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
