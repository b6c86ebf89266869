"""Payment, balance and reconciliation commands."""

import click

from furnledger.cli.error_handling import handle_domain_error
from furnledger.domain.entities import PaymentMode
from furnledger.domain.errors import DomainError
from furnledger.domain.payment import PaymentService
from furnledger.utils.amount_parser import parse_amount
from furnledger.utils.date_parser import parse_date

MODE_CHOICE = click.Choice([m.value for m in PaymentMode], case_sensitive=False)


def _payment_service(ctx) -> PaymentService:
    return PaymentService(ctx.obj["db"], max_attempts=ctx.obj["settings"].payment_max_attempts)


def _echo_result(result) -> None:
    click.echo(f"Paid:    {result.paid_amount:>14,.2f}")
    click.echo(f"Balance: {result.balance_due:>14,.2f}")
    click.echo(f"Status:  {result.status.value.replace('_', ' ')}")


@click.command("pay")
@click.argument("document_id", type=int)
@click.argument("amount")
@click.option("--mode", type=MODE_CHOICE, default=PaymentMode.CASH.value, help="Payment mode (default: cash)")
@click.option("--reference", help="Cheque number, UTR or other reference")
@click.option("--notes", help="Free-form notes")
@click.option("--date", "payment_date", help="Payment date (default: today)")
@click.pass_context
def pay(ctx, document_id: int, amount: str, mode: str, reference: str | None, notes: str | None, payment_date: str | None):
    """Record a payment against a posted invoice or bill.

    Examples:
        furnledger pay 1 60000 --mode bank_transfer --reference UTR123
        furnledger pay 1 "₹58,000" --mode cheque --reference 004512
    """
    service = _payment_service(ctx)

    try:
        result = service.pay(
            document_id=document_id,
            amount=parse_amount(amount),
            mode=mode.lower(),
            reference=reference,
            notes=notes,
            payment_date=parse_date(payment_date) if payment_date else None,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Recorded payment {result.entry.payment_number} of {result.entry.amount:,.2f}")
    _echo_result(result)


@click.group()
def payment_group():
    """Inspect and reverse ledger entries."""
    pass


@payment_group.command("list")
@click.argument("document_id", type=int)
@click.pass_context
def list_payments(ctx, document_id: int):
    """List the ledger entries of a document."""
    service = _payment_service(ctx)

    try:
        entries = service.list_payments(document_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not entries:
        click.echo("No payments recorded.")
        return

    click.echo("\nPayments:")
    click.echo("-" * 80)
    for e in entries:
        reversal = f" (reverses {e.reversal_of_id})" if e.reversal_of_id is not None else ""
        reference = f" | ref {e.reference}" if e.reference else ""
        click.echo(
            f"ID: {e.id:3d} | {e.payment_number} | {e.payment_date} | {e.amount:>12,.2f} | "
            f"{e.mode.value} | {e.status.value}{reference}{reversal}"
        )


@payment_group.command("reverse")
@click.argument("entry_id", type=int)
@click.option("--notes", help="Reason for the reversal")
@click.pass_context
def reverse_payment(ctx, entry_id: int, notes: str | None):
    """Reverse a payment by appending a negating entry."""
    service = _payment_service(ctx)

    try:
        result = service.reverse_payment(entry_id, notes=notes)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Recorded reversal {result.entry.payment_number} of {result.entry.amount:,.2f}")
    _echo_result(result)


@click.command("balance")
@click.argument("document_id", type=int)
@click.pass_context
def balance(ctx, document_id: int):
    """Show a document's balance computed from its ledger."""
    service = _payment_service(ctx)

    try:
        result = service.get_balance(document_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Total:   {result.total:>14,.2f}")
    click.echo(f"Paid:    {result.paid:>14,.2f}")
    click.echo(f"Balance: {result.balance:>14,.2f}")
    click.echo(f"Status:  {result.status.value.replace('_', ' ')}")


@click.command("reconcile")
@click.argument("document_id", type=int, required=False)
@click.pass_context
def reconcile(ctx, document_id: int | None):
    """Repair cached paid amounts and statuses from the ledger.

    Reconciles one document, or every document if none is given.
    """
    service = _payment_service(ctx)

    try:
        if document_id is not None:
            results = [service.reconcile_document(document_id)]
        else:
            results = service.reconcile_all()
    except DomainError as e:
        handle_domain_error(ctx, e)

    repaired = [r for r in results if r.repaired]
    for r in repaired:
        click.echo(
            f"Document {r.document_id}: paid {r.cached_paid:,.2f} -> {r.ledger_paid:,.2f}, "
            f"status {r.cached_status.value} -> {r.derived_status.value}"
        )
    click.echo(f"Checked {len(results)} documents, repaired {len(repaired)}")


def register_commands(cli):
    """Register payment commands with main CLI."""
    cli.add_command(pay)
    cli.add_command(payment_group, name="payment")
    cli.add_command(balance)
    cli.add_command(reconcile)
