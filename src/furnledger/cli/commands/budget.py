"""Budget commands."""

import click

from furnledger.cli.error_handling import handle_domain_error
from furnledger.cli.resolution import resolve_or_exit
from furnledger.domain.budget import BudgetService
from furnledger.domain.cost_center import CostCenterService
from furnledger.domain.entities import BudgetType
from furnledger.domain.errors import DomainError
from furnledger.utils.amount_parser import parse_amount
from furnledger.utils.date_parser import parse_date
from furnledger.utils.resolvers import resolve_cost_center

TYPE_CHOICE = click.Choice([t.value for t in BudgetType], case_sensitive=False)


@click.group()
def budget_group():
    """Plan income and expense per cost center."""
    pass


@budget_group.command("create")
@click.argument("name")
@click.option("--cost-center", required=True, help="Cost center code or ID")
@click.option("--type", "budget_type", type=TYPE_CHOICE, required=True, help="income or expense")
@click.option("--start", "start_date", required=True, help="First day of the period")
@click.option("--end", "end_date", required=True, help="Last day of the period")
@click.option("--amount", required=True, help="Budgeted amount")
@click.pass_context
def create_budget(ctx, name: str, cost_center: str, budget_type: str, start_date: str, end_date: str, amount: str):
    """Create a draft budget.

    Examples:
        furnledger budget create "Deepavali Income" --cost-center CC-003 --type income \\
            --start 2026-10-01 --end 2026-11-30 --amount 500000
    """
    db = ctx.obj["db"]
    service = BudgetService(db)
    cost_center_id = resolve_or_exit(ctx, resolve_cost_center, CostCenterService(db), cost_center)

    try:
        budget_id = service.create_budget(
            name=name,
            cost_center_id=cost_center_id,
            budget_type=budget_type.lower(),
            start_date=parse_date(start_date),
            end_date=parse_date(end_date),
            budgeted_amount=parse_amount(amount),
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created draft budget '{name}' (ID: {budget_id})")


@budget_group.command("confirm")
@click.argument("budget_id", type=int)
@click.pass_context
def confirm_budget(ctx, budget_id: int):
    """Confirm a draft budget."""
    service = BudgetService(ctx.obj["db"])

    try:
        service.confirm_budget(budget_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Confirmed budget {budget_id}")


@budget_group.command("revise")
@click.argument("budget_id", type=int)
@click.argument("amount")
@click.option("--reason", help="Why the amount changed")
@click.pass_context
def revise_budget(ctx, budget_id: int, amount: str, reason: str | None):
    """Revise a confirmed budget to a new amount.

    The budget is kept as revised and a confirmed copy with the new amount
    replaces it.
    """
    service = BudgetService(ctx.obj["db"])

    try:
        revised_id = service.revise_budget(budget_id, parse_amount(amount), reason=reason)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Revised budget {budget_id}; new budget ID: {revised_id}")


@budget_group.command("archive")
@click.argument("budget_id", type=int)
@click.pass_context
def archive_budget(ctx, budget_id: int):
    """Archive a budget."""
    service = BudgetService(ctx.obj["db"])

    try:
        service.archive_budget(budget_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Archived budget {budget_id}")


@budget_group.command("list")
@click.option("--cost-center", help="Only budgets of this cost center (code or ID)")
@click.option("--all", "include_archived", is_flag=True, help="Include archived budgets")
@click.pass_context
def list_budgets(ctx, cost_center: str | None, include_archived: bool):
    """List budgets."""
    db = ctx.obj["db"]
    service = BudgetService(db)
    cost_center_id = resolve_or_exit(ctx, resolve_cost_center, CostCenterService(db), cost_center)

    budgets = service.list_budgets(cost_center_id=cost_center_id, include_archived=include_archived)
    if not budgets:
        click.echo("No budgets found.")
        return

    click.echo("\nBudgets:")
    click.echo("-" * 90)
    for b in budgets:
        click.echo(
            f"ID: {b.id:3d} | {b.name:30s} | {b.budget_type.value:7s} | {b.start_date} - {b.end_date} | "
            f"{b.budgeted_amount:>12,.2f} | {b.state.value}"
        )


@budget_group.command("show")
@click.argument("budget_id", type=int)
@click.pass_context
def show_budget(ctx, budget_id: int):
    """Show a budget's achievement and revision history."""
    service = BudgetService(ctx.obj["db"])

    try:
        performance = service.get_performance(budget_id)
        revisions = service.list_revisions(budget_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    budget = service.get_budget(budget_id)
    achieved_label = "Achieved" if budget.budget_type is BudgetType.INCOME else "Utilized"

    click.echo(f"\nBudget {budget.name} (ID: {budget.id})")
    click.echo(f"Type: {budget.budget_type.value}  State: {budget.state.value}")
    click.echo(f"Period: {budget.start_date} - {budget.end_date}")
    click.echo("-" * 40)
    click.echo(f"Budgeted:  {performance.budgeted:>14,.2f}")
    click.echo(f"{achieved_label + ':':<10} {performance.achieved:>14,.2f}")
    click.echo(f"Remaining: {performance.remaining:>14,.2f}")
    click.echo(f"Achieved:  {performance.achievement_percentage:>13}%")

    if revisions:
        click.echo("\nRevisions:")
        for r in revisions:
            reason = f" ({r.reason})" if r.reason else ""
            click.echo(f"{r.revision_date}: {r.previous_amount:,.2f} -> {r.new_amount:,.2f}{reason}")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
