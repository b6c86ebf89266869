"""Contact and partner tag commands."""

import click

from furnledger.cli.error_handling import handle_domain_error
from furnledger.cli.resolution import resolve_or_exit
from furnledger.domain.errors import DomainError
from furnledger.domain.partner import ContactService
from furnledger.utils.resolvers import resolve_tag


@click.group()
def tag_group():
    """Manage partner tags."""
    pass


@tag_group.command("create")
@click.argument("name")
@click.pass_context
def create_tag(ctx, name: str):
    """Create a partner tag (e.g., VIP, Wholesale)."""
    service = ContactService(ctx.obj["db"])

    try:
        tag_id = service.create_tag(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created tag '{name}' (ID: {tag_id})")


@tag_group.command("list")
@click.pass_context
def list_tags(ctx):
    """List partner tags."""
    service = ContactService(ctx.obj["db"])

    tags = service.list_tags()
    if not tags:
        click.echo("No tags found.")
        return

    click.echo("\nTags:")
    for tag in tags:
        click.echo(f"ID: {tag.id:3d} | {tag.name}")


@click.group()
def contact_group():
    """Manage contacts (customers and vendors)."""
    pass


@contact_group.command("create")
@click.argument("name")
@click.option("--email", help="Email address")
@click.option("--tag", "tags", multiple=True, help="Tag name or ID (repeatable)")
@click.pass_context
def create_contact(ctx, name: str, email: str | None, tags: tuple[str, ...]):
    """Create a contact.

    Examples:
        furnledger contact create "Sharma Interiors" --tag VIP
        furnledger contact create "Teak Suppliers" --email accounts@teak.example
    """
    service = ContactService(ctx.obj["db"])
    tag_ids = [resolve_or_exit(ctx, resolve_tag, service, tag) for tag in tags]

    try:
        contact_id = service.create_contact(name=name, email=email)
        for tag_id in tag_ids:
            service.tag_contact(contact_id, tag_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created contact '{name}' (ID: {contact_id})")


@contact_group.command("list")
@click.pass_context
def list_contacts(ctx):
    """List contacts with their tags."""
    service = ContactService(ctx.obj["db"])

    contacts = service.list_contacts()
    if not contacts:
        click.echo("No contacts found.")
        return

    tag_names = {tag.id: tag.name for tag in service.list_tags()}
    click.echo("\nContacts:")
    click.echo("-" * 60)
    for contact in contacts:
        tags = sorted(tag_names[t] for t in service.get_contact_tag_ids(contact.id) if t in tag_names)
        tag_str = f" [{', '.join(tags)}]" if tags else ""
        click.echo(f"ID: {contact.id:3d} | {contact.name}{tag_str}")


@contact_group.command("tag")
@click.argument("contact_id", type=int)
@click.argument("tag", metavar="TAG")
@click.pass_context
def tag_contact(ctx, contact_id: int, tag: str):
    """Attach a tag to a contact. TAG can be a name or ID."""
    service = ContactService(ctx.obj["db"])
    tag_id = resolve_or_exit(ctx, resolve_tag, service, tag)

    try:
        service.tag_contact(contact_id, tag_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Tagged contact {contact_id} with '{tag}'")


@contact_group.command("untag")
@click.argument("contact_id", type=int)
@click.argument("tag", metavar="TAG")
@click.pass_context
def untag_contact(ctx, contact_id: int, tag: str):
    """Remove a tag from a contact. TAG can be a name or ID."""
    service = ContactService(ctx.obj["db"])
    tag_id = resolve_or_exit(ctx, resolve_tag, service, tag)

    try:
        service.untag_contact(contact_id, tag_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Removed tag '{tag}' from contact {contact_id}")


def register_commands(cli):
    """Register tag and contact commands with main CLI."""
    cli.add_command(tag_group, name="tag")
    cli.add_command(contact_group, name="contact")
