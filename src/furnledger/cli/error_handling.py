"""CLI error handling helpers."""

import click

from furnledger.domain.errors import ConcurrentModificationError, DomainError, PaymentValidationError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure.

    Payment rejections carry their reason code so scripts can branch on it.
    """
    if isinstance(error, PaymentValidationError):
        click.echo(f"Error: {error} [{error.reason.value}]", err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    if isinstance(error, ConcurrentModificationError):
        click.echo("The document is busy; run the command again.", err=True)
    ctx.exit(1)
