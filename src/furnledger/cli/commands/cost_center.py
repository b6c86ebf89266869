"""Cost center management commands."""

import click

from furnledger.cli.error_handling import handle_domain_error
from furnledger.cli.resolution import resolve_or_exit
from furnledger.domain.cost_center import CostCenterService
from furnledger.domain.errors import DomainError
from furnledger.utils.resolvers import resolve_cost_center


@click.group()
def cost_center_group():
    """Manage cost centers."""
    pass


@cost_center_group.command("create")
@click.argument("code")
@click.argument("name")
@click.option("--description", help="Optional description")
@click.pass_context
def create_cost_center(ctx, code: str, name: str, description: str | None):
    """Create a new cost center.

    Examples:
        furnledger cost-center create CC-003 "Showroom - Living Room"
        furnledger cost-center create CC-010 "Warehouse" --description "Main godown"
    """
    service = CostCenterService(ctx.obj["db"])

    try:
        cost_center_id = service.create_cost_center(code=code, name=name, description=description)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created cost center '{code}' (ID: {cost_center_id})")


@cost_center_group.command("list")
@click.option("--all", "include_archived", is_flag=True, help="Include archived cost centers")
@click.pass_context
def list_cost_centers(ctx, include_archived: bool):
    """List cost centers."""
    service = CostCenterService(ctx.obj["db"])

    cost_centers = service.list_cost_centers(include_archived=include_archived)
    if not cost_centers:
        click.echo("No cost centers found.")
        return

    click.echo("\nCost centers:")
    click.echo("-" * 60)
    for cc in cost_centers:
        archived = " (archived)" if cc.is_archived else ""
        click.echo(f"ID: {cc.id:3d} | {cc.code:10s} | {cc.name}{archived}")


@cost_center_group.command("archive")
@click.argument("cost_center", metavar="COST_CENTER")
@click.pass_context
def archive_cost_center(ctx, cost_center: str):
    """Archive a cost center.

    COST_CENTER can be a code or ID. Cost centers are never deleted.
    """
    service = CostCenterService(ctx.obj["db"])
    cost_center_id = resolve_or_exit(ctx, resolve_cost_center, service, cost_center)

    try:
        service.archive_cost_center(cost_center_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Archived cost center '{cost_center}'")


def register_commands(cli):
    """Register cost center commands with main CLI."""
    cli.add_command(cost_center_group, name="cost-center")
