"""Document type and document commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.documents import DocumentService


@click.group()
def document_type_group():
    """Manage document types."""
    pass


@document_type_group.command("create")
@click.argument("name")
@click.option("--description", help="Description")
@click.option("--required", is_flag=True, help="Required before reconciliation")
@click.pass_context
def create_document_type(ctx, name: str, description: str | None, required: bool) -> None:
    """Create a document type.

    Examples:
        ledgerkit document-type create "Receipt" --required
    """
    service = DocumentService(ctx.obj["db"])
    try:
        type_id = service.create_document_type(
            ctx.obj["owner"], name, description=description, is_required=required
        )
        click.echo(f"Created document type '{name}' (ID: {type_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@document_type_group.command("list")
@click.pass_context
def list_document_types(ctx) -> None:
    """List document types."""
    types = DocumentService(ctx.obj["db"]).list_document_types(ctx.obj["owner"])
    if not types:
        click.echo("No document types found.")
        return
    for dt in types:
        required = "required" if dt.is_required else "optional"
        click.echo(f"ID: {dt.id:3d} | {dt.name:24s} | {required}")


@click.group()
def document_group():
    """Manage documents attached to transactions."""
    pass


@document_group.command("attach")
@click.argument("transaction_id", type=int)
@click.argument("document_type_id", type=int)
@click.argument("file_name")
@click.pass_context
def attach_document(ctx, transaction_id: int, document_type_id: int, file_name: str) -> None:
    """Record a document of a given type against a transaction."""
    service = DocumentService(ctx.obj["db"])
    try:
        document_id = service.attach_document(
            ctx.obj["owner"], transaction_id, document_type_id, file_name
        )
        click.echo(f"Attached document {document_id} to transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@document_group.command("list")
@click.argument("transaction_id", type=int)
@click.pass_context
def list_documents(ctx, transaction_id: int) -> None:
    """List the documents of a transaction."""
    service = DocumentService(ctx.obj["db"])
    try:
        documents = service.list_documents(ctx.obj["owner"], transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not documents:
        click.echo("No documents found.")
        return
    for doc in documents:
        click.echo(f"ID: {doc.id:3d} | type {doc.document_type_id:3d} | {doc.file_name}")


@document_group.command("delete")
@click.argument("document_id", type=int)
@click.pass_context
def delete_document(ctx, document_id: int) -> None:
    """Delete a document."""
    service = DocumentService(ctx.obj["db"])
    try:
        service.delete_document(ctx.obj["owner"], document_id)
        click.echo(f"Deleted document {document_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register document commands with main CLI."""
    cli.add_command(document_type_group, name="document-type")
    cli.add_command(document_group, name="document")
