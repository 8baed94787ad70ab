"""Main CLI entry point."""

import logging

import click
from bilanzkit.database.factories import create_sqlite_database

# Import and register all commands at module level
from bilanzkit.cli.commands import (
    account,
    company,
    fiscal_year,
    init_chart,
    journal,
    opening_balance,
    report,
)

LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BILANZKIT_DB_PATH environment variable)",
    envvar="BILANZKIT_DB_PATH",
)
@click.option(
    "--classification",
    "classification_path",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON classification table (defaults to the bundled SKR03 table)",
    envvar="BILANZKIT_CLASSIFICATION",
)
@click.option(
    "--company",
    help="Company to work on (required when more than one company exists)",
    envvar="BILANZKIT_COMPANY",
)
@click.option("-v", "--verbose", count=True, help="Increase log output (-v info, -vv debug)")
@click.pass_context
def cli(ctx, db_path: str | None, classification_path: str | None, company: str | None, verbose: int):
    """Bilanzkit - German double-entry bookkeeping.

    Book journal entries on an SKR03 chart of accounts and derive the
    Gewinn- und Verlustrechnung and the Bilanz from them, including opening
    balances and the year-end closing.
    """
    logging.basicConfig(
        level=LOG_LEVELS[min(verbose, len(LOG_LEVELS) - 1)],
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["company"] = company
    ctx.obj["classification_path"] = classification_path

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
init_chart.register_commands(cli)
company.register_commands(cli)
account.register_commands(cli)
fiscal_year.register_commands(cli)
journal.register_commands(cli)
opening_balance.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
