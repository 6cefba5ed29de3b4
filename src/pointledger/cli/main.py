"""Main CLI entry point."""

import logging

import click
from pointledger.database.factories import create_database

# Import and register all commands at module level
from pointledger.cli.commands import (
    balance,
    category,
    debt,
    ledger,
    recharge,
    settle,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to SQLite database file (overrides POINTLEDGER_DB_PATH environment variable)",
    envvar="POINTLEDGER_DB_PATH",
)
@click.option(
    "--database-url",
    help="SQLAlchemy database URL (overrides --db-path)",
    envvar="POINTLEDGER_DATABASE_URL",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="POINTLEDGER_LOG_LEVEL",
    help="Logging level",
)
@click.pass_context
def cli(ctx, db_path: str | None, database_url: str | None, log_level: str):
    """Pointledger - points ledger and negative points settlement.

    Record credits and debits, track negative points owed by an account and
    settle them fully or partially against the account's balance.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(database_url=database_url, database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
balance.register_commands(cli)
category.register_commands(cli)
debt.register_commands(cli)
ledger.register_commands(cli)
recharge.register_commands(cli)
settle.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
