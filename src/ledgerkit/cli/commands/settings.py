"""Ledger settings commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.entities import ReconciliationCondition
from ledgerkit.domain.settings import SettingsService

CONDITIONS = [c.value for c in ReconciliationCondition]


@click.group()
def settings_group():
    """Show and change ledger settings."""
    pass


@settings_group.command("show")
@click.pass_context
def show_settings(ctx) -> None:
    """Show the current settings."""
    settings = SettingsService(ctx.obj["db"]).get_settings(ctx.obj["owner"])
    conditions = ", ".join(c.value for c in settings.reconciliation_conditions) or "none"
    click.echo(f"Double-entry mode: {'on' if settings.double_entry_mode else 'off'}")
    click.echo(f"Auto draft to pending: {'on' if settings.auto_draft_to_pending else 'off'}")
    click.echo(f"Reconciliation conditions: {conditions}")
    minimum = settings.min_required_documents or "all required types"
    click.echo(f"Minimum required documents: {minimum}")


@settings_group.command("set")
@click.option("--double-entry/--no-double-entry", default=None, help="Require credit/debit pairs")
@click.option("--auto-pending/--no-auto-pending", default=None, help="Promote complete drafts to pending")
@click.option(
    "--condition",
    "conditions",
    multiple=True,
    type=click.Choice(CONDITIONS),
    help="Reconciliation condition (repeatable)",
)
@click.option("--clear-conditions", is_flag=True, help="Remove all reconciliation conditions")
@click.option("--min-documents", type=int, help="Required document types needed (0 = all)")
@click.pass_context
def set_settings(
    ctx,
    double_entry: bool | None,
    auto_pending: bool | None,
    conditions: tuple[str, ...],
    clear_conditions: bool,
    min_documents: int | None,
) -> None:
    """Change ledger settings.

    Examples:
        ledgerkit settings set --double-entry --auto-pending
        ledgerkit settings set --condition hasReceipt --min-documents 1
    """
    if conditions and clear_conditions:
        click.echo("Error: --condition cannot be combined with --clear-conditions", err=True)
        ctx.exit(1)

    new_conditions = None
    if conditions:
        new_conditions = list(conditions)
    elif clear_conditions:
        new_conditions = []

    try:
        SettingsService(ctx.obj["db"]).update_settings(
            ctx.obj["owner"],
            double_entry_mode=double_entry,
            auto_draft_to_pending=auto_pending,
            reconciliation_conditions=new_conditions,
            min_required_documents=min_documents,
        )
        click.echo("Settings updated.")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")
