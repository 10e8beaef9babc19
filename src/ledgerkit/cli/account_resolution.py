"""CLI helpers for account resolution."""

from __future__ import annotations

import click
from ledgerkit.domain.account import AccountService
from ledgerkit.utils.account_resolver import resolve_account


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve an account code, name or ID of the current owner, or exit."""
    try:
        return resolve_account(account_service, ctx.obj["owner"], account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_optional_account(
    ctx: click.Context, account_service: AccountService, account: str | None
) -> int | None:
    """Resolve an optional account option; None stays None."""
    if account is None:
        return None
    return resolve_account_or_exit(ctx, account_service, account)
