"""Main CLI entry point."""

import click
from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.logging_setup import configure_logging

from ledgerkit.cli.commands import (
    account,
    add,
    document,
    import_cmd,
    period,
    reference,
    report,
    settings,
    split,
    summary,
    transaction,
)

DEFAULT_OWNER = "local"


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERKIT_DB_PATH environment variable)",
    envvar="LEDGERKIT_DB_PATH",
)
@click.option(
    "--owner",
    default=DEFAULT_OWNER,
    show_default=True,
    envvar="LEDGERKIT_OWNER",
    help="Owner whose ledger is used (LEDGERKIT_OWNER)",
)
@click.option(
    "--log-level",
    envvar="LEDGERKIT_LOG_LEVEL",
    help="Log level, e.g. INFO or DEBUG (LEDGERKIT_LOG_LEVEL)",
)
@click.pass_context
def cli(ctx, db_path: str | None, owner: str, log_level: str | None):
    """Ledgerkit - ledger consistency and transaction status engine.

    Keep a chart of accounts, record single and split transactions and
    move them through draft, pending, completed and reconciled.
    """
    ctx.ensure_object(dict)

    try:
        configure_logging(level=log_level)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--log-level")

    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["owner"] = owner


account.register_commands(cli)
add.register_commands(cli)
split.register_commands(cli)
transaction.register_commands(cli)
document.register_commands(cli)
settings.register_commands(cli)
summary.register_commands(cli)
report.register_commands(cli)
period.register_commands(cli)
import_cmd.register_commands(cli)
reference.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
