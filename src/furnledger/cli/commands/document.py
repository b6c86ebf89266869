"""Invoice and bill commands."""

import click

from furnledger.cli.error_handling import handle_domain_error
from furnledger.cli.resolution import resolve_or_exit
from furnledger.domain.assignment import AssignmentService
from furnledger.domain.cost_center import CostCenterService
from furnledger.domain.document import DocumentService
from furnledger.domain.entities import DocumentKind
from furnledger.domain.errors import DomainError
from furnledger.domain.payment import PaymentService
from furnledger.utils.amount_parser import parse_amount
from furnledger.utils.date_parser import parse_date
from furnledger.utils.resolvers import resolve_cost_center

KIND_CHOICE = click.Choice([k.value for k in DocumentKind], case_sensitive=False)


def _document_service(ctx) -> DocumentService:
    db = ctx.obj["db"]
    assignment = AssignmentService(db, cache_ttl=ctx.obj["settings"].rule_cache_ttl)
    return DocumentService(db, assignment=assignment)


def _status_label(status) -> str:
    return status.value.replace("_", " ")


@click.group()
def document_group():
    """Manage invoices and vendor bills."""
    pass


@document_group.command("create")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("number")
@click.option("--partner", "partner_id", type=int, required=True, help="Customer or vendor contact ID")
@click.option("--due-date", required=True, help="Due date (e.g., 2024-03-31, 'in 30 days')")
@click.option("--date", "document_date", help="Document date (default: today)")
@click.pass_context
def create_document(ctx, kind: str, number: str, partner_id: int, due_date: str, document_date: str | None):
    """Create a draft invoice or bill.

    Examples:
        furnledger document create invoice INV-2024-001 --partner 1 --due-date "in 30 days"
        furnledger document create bill VB-778 --partner 4 --date 2024-03-01 --due-date 2024-03-31
    """
    service = _document_service(ctx)

    try:
        document_id = service.create_document(
            kind=kind.lower(),
            number=number,
            partner_id=partner_id,
            due_date=parse_date(due_date),
            document_date=parse_date(document_date) if document_date else None,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created draft {kind.lower()} '{number}' (ID: {document_id})")


@document_group.command("add-line")
@click.argument("document_id", type=int)
@click.argument("product_id", type=int)
@click.option("--qty", "quantity", default="1", help="Quantity (default: 1)")
@click.option("--price", "unit_price", help="Unit price (default: product price)")
@click.option("--cost-center", help="Cost center code or ID (default: assigned by rule)")
@click.pass_context
def add_line(ctx, document_id: int, product_id: int, quantity: str, unit_price: str | None, cost_center: str | None):
    """Add a line to a draft document."""
    db = ctx.obj["db"]
    service = _document_service(ctx)
    cost_center_id = resolve_or_exit(ctx, resolve_cost_center, CostCenterService(db), cost_center)

    try:
        line_id = service.add_line(
            document_id=document_id,
            product_id=product_id,
            quantity=parse_amount(quantity),
            unit_price=parse_amount(unit_price) if unit_price is not None else None,
            cost_center_id=cost_center_id,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    line = db.get_document_line(line_id)
    if line.cost_center_id is None:
        click.echo(f"Added line {line_id} (no cost center assigned)")
    else:
        code = CostCenterService(db).get_cost_center(line.cost_center_id).code
        click.echo(f"Added line {line_id} -> {code}")


@document_group.command("assign")
@click.argument("document_id", type=int)
@click.pass_context
def assign_cost_centers(ctx, document_id: int):
    """Assign cost centers to lines that have none."""
    service = _document_service(ctx)

    try:
        assignments = service.assign_cost_centers(document_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not assignments:
        click.echo("All lines already have a cost center.")
        return
    assigned = sum(1 for a in assignments if a.cost_center_id is not None)
    click.echo(f"Assigned {assigned} of {len(assignments)} unassigned lines")
    for a in assignments:
        target = f"rule '{a.rule_name}'" if a.rule_id is not None else "no matching rule"
        click.echo(f"  Line {a.line_id}: {target}")


@document_group.command("post")
@click.argument("document_id", type=int)
@click.pass_context
def post_document(ctx, document_id: int):
    """Post a draft so it can receive payments."""
    service = _document_service(ctx)

    try:
        service.post_document(document_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Posted document {document_id}")


@document_group.command("cancel")
@click.argument("document_id", type=int)
@click.pass_context
def cancel_document(ctx, document_id: int):
    """Cancel a document without payments."""
    service = _document_service(ctx)

    try:
        service.cancel_document(document_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Cancelled document {document_id}")


@document_group.command("show")
@click.argument("document_id", type=int)
@click.pass_context
def show_document(ctx, document_id: int):
    """Show a document with its lines and ledger balance."""
    db = ctx.obj["db"]
    service = _document_service(ctx)

    try:
        lines = service.list_lines(document_id)
        balance = PaymentService(db).get_balance(document_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    document = service.get_document(document_id)
    codes = {cc.id: cc.code for cc in CostCenterService(db).list_cost_centers(include_archived=True)}

    click.echo(f"\n{document.kind.value.capitalize()} {document.number} (ID: {document.id})")
    click.echo(f"Partner: {document.partner_id}")
    click.echo(f"Date: {document.document_date}  Due: {document.due_date}")
    click.echo(f"Status: {_status_label(balance.status)}")
    click.echo("-" * 70)
    for line in lines:
        code = codes.get(line.cost_center_id, "-")
        click.echo(
            f"Line {line.id:3d} | product {line.product_id:3d} | {line.quantity:>8} x "
            f"{line.unit_price:>12,.2f} = {line.subtotal:>12,.2f} | {code}"
        )
    click.echo("-" * 70)
    click.echo(f"Total:   {balance.total:>14,.2f}")
    click.echo(f"Paid:    {balance.paid:>14,.2f}")
    click.echo(f"Balance: {balance.balance:>14,.2f}")


@document_group.command("list")
@click.option("--kind", type=KIND_CHOICE, help="Only invoices or only bills")
@click.option("--all", "include_archived", is_flag=True, help="Include archived documents")
@click.pass_context
def list_documents(ctx, kind: str | None, include_archived: bool):
    """List documents."""
    service = _document_service(ctx)

    documents = service.list_documents(kind=kind.lower() if kind else None, include_archived=include_archived)
    if not documents:
        click.echo("No documents found.")
        return

    click.echo("\nDocuments:")
    click.echo("-" * 90)
    for d in documents:
        click.echo(
            f"ID: {d.id:3d} | {d.kind.value:7s} | {d.number:15s} | {d.due_date} | "
            f"{d.total_amount:>12,.2f} | paid {d.paid_amount:>12,.2f} | {_status_label(d.status)}"
        )


def register_commands(cli):
    """Register document commands with main CLI."""
    cli.add_command(document_group, name="document")
