"""Tag and customer commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.tag import CustomerService, TagService


@click.group()
def tag_group():
    """Manage tags."""
    pass


@tag_group.command("create")
@click.argument("name")
@click.pass_context
def create_tag(ctx, name: str) -> None:
    """Create a tag."""
    try:
        tag_id = TagService(ctx.obj["db"]).create_tag(ctx.obj["owner"], name)
        click.echo(f"Created tag '{name}' (ID: {tag_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@tag_group.command("list")
@click.pass_context
def list_tags(ctx) -> None:
    """List tags."""
    tags = TagService(ctx.obj["db"]).list_tags(ctx.obj["owner"])
    if not tags:
        click.echo("No tags found.")
        return
    for tag in tags:
        click.echo(f"ID: {tag.id:3d} | {tag.name}")


@click.group()
def customer_group():
    """Manage customers."""
    pass


@customer_group.command("create")
@click.argument("name")
@click.pass_context
def create_customer(ctx, name: str) -> None:
    """Create a customer."""
    try:
        customer_id = CustomerService(ctx.obj["db"]).create_customer(ctx.obj["owner"], name)
        click.echo(f"Created customer '{name}' (ID: {customer_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@customer_group.command("list")
@click.pass_context
def list_customers(ctx) -> None:
    """List customers."""
    customers = CustomerService(ctx.obj["db"]).list_customers(ctx.obj["owner"])
    if not customers:
        click.echo("No customers found.")
        return
    for customer in customers:
        click.echo(f"ID: {customer.id:3d} | {customer.name}")


def register_commands(cli):
    """Register tag and customer commands with main CLI."""
    cli.add_command(tag_group, name="tag")
    cli.add_command(customer_group, name="customer")
