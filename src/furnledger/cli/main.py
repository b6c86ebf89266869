"""Main CLI entry point."""

import logging

import click

from furnledger.config import load_settings
from furnledger.database.factories import create_sqlite_database

# Import and register all commands at module level
from furnledger.cli.commands import (
    budget,
    cost_center,
    partner,
    product,
    rule,
    document,
    payment,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FURNLEDGER_DB_PATH environment variable)",
    envvar="FURNLEDGER_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (overrides FURNLEDGER_LOG_LEVEL environment variable)",
    envvar="FURNLEDGER_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """Furnledger - Cost center assignment and payment ledger.

    Attribute invoice and bill lines to cost centers with rules, and record
    payments against an append-only ledger.
    """
    ctx.ensure_object(dict)

    try:
        settings = load_settings()
    except ValueError as e:
        raise click.ClickException(str(e))

    logging.basicConfig(level=(log_level or settings.log_level).upper(), format=LOG_FORMAT)
    ctx.obj["settings"] = settings

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path, settings=settings)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
cost_center.register_commands(cli)
partner.register_commands(cli)
product.register_commands(cli)
rule.register_commands(cli)
document.register_commands(cli)
budget.register_commands(cli)
payment.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
