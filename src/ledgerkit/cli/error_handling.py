"""CLI error handling helpers."""

import click

from ledgerkit.domain.errors import BlockedError, DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure.

    Blocked progressions also report how many items are missing.
    """
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, BlockedError) and error.missing:
        click.echo(f"Missing: {error.missing}", err=True)
    ctx.exit(1)


def parse_or_exit(ctx: click.Context, parser, value: str, label: str):
    """Parse a CLI value with a utils parser, or exit with an error."""
    try:
        return parser(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)
