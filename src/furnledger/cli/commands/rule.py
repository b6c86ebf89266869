"""Assignment rule commands."""

import click

from furnledger.cli.error_handling import handle_domain_error
from furnledger.cli.resolution import resolve_or_exit
from furnledger.domain.assignment import AssignmentService
from furnledger.domain.cost_center import CostCenterService
from furnledger.domain.errors import DomainError
from furnledger.domain.partner import ContactService
from furnledger.domain.product import ProductService
from furnledger.utils.resolvers import resolve_cost_center, resolve_product_category, resolve_tag


def _assignment_service(ctx) -> AssignmentService:
    return AssignmentService(ctx.obj["db"], cache_ttl=ctx.obj["settings"].rule_cache_ttl)


def rule_definition_options(func):
    """Options shared by 'rule create' and 'rule update'."""
    options = [
        click.option("--cost-center", required=True, help="Target cost center code or ID"),
        click.option("--tag", help="Match partners carrying this tag (name or ID)"),
        click.option("--partner", "partner_id", type=int, help="Match this partner (contact ID)"),
        click.option("--category", help="Match products in this category (name or ID)"),
        click.option("--product", "product_id", type=int, help="Match this product ID"),
        click.option("--priority", type=int, help="Priority (default: number of conditions)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _resolve_definition(ctx, cost_center, tag, category):
    db = ctx.obj["db"]
    return (
        resolve_or_exit(ctx, resolve_cost_center, CostCenterService(db), cost_center),
        resolve_or_exit(ctx, resolve_tag, ContactService(db), tag),
        resolve_or_exit(ctx, resolve_product_category, ProductService(db), category),
    )


@click.group()
def rule_group():
    """Manage cost center assignment rules."""
    pass


@rule_group.command("create")
@click.argument("name")
@rule_definition_options
@click.pass_context
def create_rule(ctx, name, cost_center, tag, partner_id, category, product_id, priority):
    """Create an assignment rule.

    Every condition given must hold for the rule to match. At least one
    condition is required.

    Examples:
        furnledger rule create "VIP living room" --tag VIP --category "Living Room" --cost-center CC-003
        furnledger rule create "Sofas" --product 12 --cost-center CC-001
    """
    service = _assignment_service(ctx)
    cost_center_id, tag_id, category_id = _resolve_definition(ctx, cost_center, tag, category)

    try:
        rule_id = service.create_rule(
            name=name,
            cost_center_id=cost_center_id,
            partner_tag_id=tag_id,
            partner_id=partner_id,
            product_category_id=category_id,
            product_id=product_id,
            priority=priority,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created rule '{name}' (ID: {rule_id})")


@rule_group.command("update")
@click.argument("rule_id", type=int)
@click.argument("name")
@rule_definition_options
@click.pass_context
def update_rule(ctx, rule_id, name, cost_center, tag, partner_id, category, product_id, priority):
    """Replace a rule's definition. Conditions not given are cleared."""
    service = _assignment_service(ctx)
    cost_center_id, tag_id, category_id = _resolve_definition(ctx, cost_center, tag, category)

    try:
        service.update_rule(
            rule_id=rule_id,
            name=name,
            cost_center_id=cost_center_id,
            partner_tag_id=tag_id,
            partner_id=partner_id,
            product_category_id=category_id,
            product_id=product_id,
            priority=priority,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated rule {rule_id}")


@rule_group.command("list")
@click.option("--all", "include_archived", is_flag=True, help="Include archived rules")
@click.pass_context
def list_rules(ctx, include_archived: bool):
    """List assignment rules."""
    db = ctx.obj["db"]
    service = _assignment_service(ctx)

    rules = service.list_rules(include_archived=include_archived)
    if not rules:
        click.echo("No rules found.")
        return

    codes = {cc.id: cc.code for cc in CostCenterService(db).list_cost_centers(include_archived=True)}
    click.echo("\nRules:")
    click.echo("-" * 80)
    for r in rules:
        conditions = []
        if r.partner_tag_id is not None:
            conditions.append(f"tag={r.partner_tag_id}")
        if r.partner_id is not None:
            conditions.append(f"partner={r.partner_id}")
        if r.product_category_id is not None:
            conditions.append(f"category={r.product_category_id}")
        if r.product_id is not None:
            conditions.append(f"product={r.product_id}")
        archived = " (archived)" if r.is_archived else ""
        click.echo(
            f"ID: {r.id:3d} | {r.name:25s} | -> {codes.get(r.cost_center_id, r.cost_center_id)} "
            f"| priority {r.priority} | {' & '.join(conditions)}{archived}"
        )


@rule_group.command("archive")
@click.argument("rule_id", type=int)
@click.pass_context
def archive_rule(ctx, rule_id: int):
    """Archive a rule so it no longer matches."""
    service = _assignment_service(ctx)

    try:
        service.archive_rule(rule_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Archived rule {rule_id}")


@rule_group.command("evaluate")
@click.option("--partner", "partner_id", type=int, help="Partner (contact) ID")
@click.option("--product", "product_id", type=int, help="Product ID")
@click.pass_context
def evaluate(ctx, partner_id: int | None, product_id: int | None):
    """Show which cost center a line with this partner and product would get."""
    db = ctx.obj["db"]
    service = _assignment_service(ctx)

    result = service.evaluate(partner_id=partner_id, product_id=product_id)
    if not result.is_auto_assigned:
        click.echo("No rule matched.")
        return

    cost_center = CostCenterService(db).get_cost_center(result.cost_center_id)
    code = cost_center.code if cost_center else result.cost_center_id
    click.echo(f"Cost center: {code}")
    click.echo(f"Rule: {result.rule_name} (ID: {result.rule_id})")
    click.echo(f"Matched on: {', '.join(result.matched_fields)} (score {result.score})")


def register_commands(cli):
    """Register rule commands with main CLI."""
    cli.add_command(rule_group, name="rule")
