"""Main CLI entry point."""

import logging

import click
from ledgerbook.database.factories import create_database
from ledgerbook.logging_config import LEVEL_NAMES, configure_logging

# Import and register all commands at module level
from ledgerbook.cli.commands import (
    account,
    currency,
    journal,
    report,
    stats,
)

logger = logging.getLogger(__name__)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to SQLite database file (overrides LEDGERBOOK_DB_PATH environment variable)",
    envvar="LEDGERBOOK_DB_PATH",
)
@click.option(
    "--database-url",
    help="SQLAlchemy database URL, e.g. postgresql://... (overrides --db-path)",
    envvar="LEDGERBOOK_DATABASE_URL",
)
@click.option(
    "--log-level",
    type=click.Choice(LEVEL_NAMES, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level for diagnostics on stderr",
    envvar="LEDGERBOOK_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, database_url: str | None, log_level: str):
    """Ledgerbook - Double-entry bookkeeping.

    Keep a chart of accounts, record balanced journal entries, and produce
    trial balances, balance sheets, income statements and trend projections.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)

    # Only open the database when a command runs (not for --help)
    if ctx.invoked_subcommand is not None:
        db = create_database(database_url=database_url, database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
currency.register_commands(cli)
account.register_commands(cli)
journal.register_commands(cli)
report.register_commands(cli)
stats.register_commands(cli)


def main():
    """Main entry point for CLI."""
    try:
        cli()
    except Exception:
        logger.exception("Unexpected error")
        raise


if __name__ == "__main__":
    main()
