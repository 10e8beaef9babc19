"""Provider import command."""

import click
from ledgerkit.domain.sync_import import SyncImportService


@click.command("import")
@click.argument("json_file", type=click.Path(exists=True))
@click.option("--source", required=True, help="Provider name; external ids are namespaced by it")
@click.pass_context
def import_records(ctx, json_file: str, source: str):
    """Import provider records from a JSON file.

    The file holds a list of objects with external_id, date and amount and
    optionally payee, notes, status and account fields. Records already
    imported from the same source are skipped.
    """
    service = SyncImportService(ctx.obj["db"])

    try:
        result = service.import_file(ctx.obj["owner"], json_file, source)
        click.echo("\nImport complete:")
        click.echo(f"  Created: {result.created} transactions")
        click.echo(f"  Skipped: {result.skipped} already imported")
        if result.errors:
            click.echo(f"  Errors: {len(result.errors)}")
            for error in result.errors:
                click.echo(f"    {error}", err=True)
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_records)
