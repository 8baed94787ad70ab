"""Fiscal year commands."""

import click
from bilanzkit.domain.balance_sheet import BalanceSheetCalculator
from bilanzkit.domain.closing import FiscalYearClosingService, NextYearOpening
from bilanzkit.domain.constants import net_income_label
from bilanzkit.domain.errors import DomainError
from bilanzkit.domain.fiscal_year import FiscalYearService
from bilanzkit.domain.fiscal_year_import import FiscalYearImporter
from bilanzkit.utils.date_parser import parse_date
from bilanzkit.cli.account_resolution import (
    get_classification,
    resolve_company_or_exit,
    resolve_fiscal_year_or_exit,
)
from bilanzkit.cli.error_handling import handle_domain_error, handle_failed_result
from bilanzkit.cli.commands.opening_balance import load_balance_sheet
from bilanzkit.cli.formatting import format_amount


def _format_timestamp(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value is not None else "-"


@click.group()
def fiscal_year_group():
    """Manage fiscal years (Geschäftsjahre)."""
    pass


@fiscal_year_group.command("create")
@click.argument("year", type=int)
@click.option("--start", help="First day (defaults to January 1st)")
@click.option("--end", help="Last day (defaults to December 31st)")
@click.pass_context
def create_fiscal_year(ctx, year: int, start: str | None, end: str | None):
    """Create a fiscal year.

    Examples:
        bilanzkit fiscal-year create 2024
        bilanzkit fiscal-year create 2024 --start 01.07.2024 --end 30.06.2025
    """
    company = resolve_company_or_exit(ctx)
    service = FiscalYearService(ctx.obj["db"])

    try:
        start_date = parse_date(start) if start else None
        end_date = parse_date(end) if end else None
        fiscal_year = service.create_fiscal_year(company.id, year, start_date, end_date)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(
        f"Created fiscal year {fiscal_year.year} "
        f"({fiscal_year.start_date.isoformat()} - {fiscal_year.end_date.isoformat()})"
    )


@fiscal_year_group.command("list")
@click.pass_context
def list_fiscal_years(ctx):
    """List fiscal years with their state."""
    company = resolve_company_or_exit(ctx)
    fiscal_years = FiscalYearService(ctx.obj["db"]).list_fiscal_years(company.id)
    if not fiscal_years:
        click.echo("No fiscal years found.")
        return

    click.echo(f"\nFiscal years of {company.name}:")
    click.echo("-" * 60)
    for fy in fiscal_years:
        click.echo(
            f"{fy.year} | {fy.start_date.isoformat()} - {fy.end_date.isoformat()} | {fy.state.value}"
        )


@fiscal_year_group.command("show")
@click.argument("year", type=int)
@click.pass_context
def show_fiscal_year(ctx, year: int):
    """Show the state of a fiscal year."""
    company = resolve_company_or_exit(ctx)
    fy = resolve_fiscal_year_or_exit(ctx, company, year)

    click.echo(f"Fiscal year:     {fy.year}")
    click.echo(f"Period:          {fy.start_date.isoformat()} - {fy.end_date.isoformat()}")
    click.echo(f"State:           {fy.state.value}")
    click.echo(f"Opening posted:  {_format_timestamp(fy.opening_balance_posted_at)}")
    click.echo(f"Closing posted:  {_format_timestamp(fy.closing_balance_posted_at)}")
    click.echo(f"Closed at:       {_format_timestamp(fy.closed_at)}")


@fiscal_year_group.command("close")
@click.argument("year", type=int)
@click.option(
    "--no-next-year",
    is_flag=True,
    help="Do not carry the closing balance forward into the next year",
)
@click.pass_context
def close_fiscal_year(ctx, year: int, no_next_year: bool):
    """Close a fiscal year (Jahresabschluss).

    Books the closing entry, stores the closing balance sheet and, unless
    --no-next-year is given, posts it as the opening balance of the next year.
    A closed year cannot be changed anymore.

    Examples:
        bilanzkit fiscal-year close 2024
        bilanzkit fiscal-year close 2024 --no-next-year
    """
    company = resolve_company_or_exit(ctx)
    fy = resolve_fiscal_year_or_exit(ctx, company, year)
    service = FiscalYearClosingService(ctx.obj["db"], get_classification(ctx))

    result = service.close(fy, create_next_year_opening=not no_next_year)
    if not result.success:
        handle_failed_result(ctx, result)
        return

    closing = result.data
    click.echo(f"Closed fiscal year {year}.")
    click.echo(f"Bilanzsumme: {format_amount(closing.snapshot.aktiva_total)}")
    click.echo(f"{net_income_label(closing.snapshot.net_income)}: {format_amount(closing.snapshot.net_income)}")
    if closing.next_year_opening == NextYearOpening.CREATED:
        click.echo(f"Opening balance of {year + 1} created.")
    elif closing.next_year_opening == NextYearOpening.SKIPPED:
        click.echo(f"Fiscal year {year + 1} already has an opening balance, carryforward skipped.")


@fiscal_year_group.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--year", type=int, required=True, help="Fiscal year to import")
@click.option("--start", help="First day (defaults to January 1st)")
@click.option("--end", help="Last day (defaults to December 31st)")
@click.pass_context
def import_fiscal_year(ctx, file: str, year: int, start: str | None, end: str | None):
    """Import a past fiscal year from its closing balance sheet.

    The year is created closed, without journal entries. The file has the
    same layout as for "opening-balance import".

    Examples:
        bilanzkit fiscal-year import schlussbilanz-2023.json --year 2023
    """
    company = resolve_company_or_exit(ctx)
    classification = get_classification(ctx)
    importer = FiscalYearImporter(ctx.obj["db"])

    try:
        start_date = parse_date(start) if start else None
        end_date = parse_date(end) if end else None
        snapshot = load_balance_sheet(file, BalanceSheetCalculator(classification), year)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    result = importer.import_closed_year(company.id, year, snapshot, start_date, end_date)
    if not result.success:
        handle_failed_result(ctx, result)
        return

    click.echo(f"Imported closed fiscal year {year}.")
    click.echo(f"Bilanzsumme: {format_amount(result.data.snapshot.aktiva_total)}")


def register_commands(cli):
    """Register fiscal-year commands with main CLI."""
    cli.add_command(fiscal_year_group, name="fiscal-year")
