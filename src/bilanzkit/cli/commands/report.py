"""Report commands: balance sheet (Bilanz) and profit and loss (GuV)."""

import json

import click
from bilanzkit.domain.balance_sheet import BalanceSheetService
from bilanzkit.domain.constants import is_immaterial
from bilanzkit.domain.guv import GuVService
from bilanzkit.domain.report_section import ReportSection
from bilanzkit.domain.snapshot import BalanceSheetSnapshot, GuVSnapshot
from bilanzkit.cli.account_resolution import (
    get_classification,
    resolve_company_or_exit,
    resolve_fiscal_year_or_exit,
)
from bilanzkit.cli.error_handling import handle_failed_result
from bilanzkit.cli.formatting import format_amount

WIDTH = 72


def _line(label: str, amount, indent: int = 0) -> str:
    label = " " * indent + label
    return f"{label:{WIDTH - 16}.{WIDTH - 16}s}{format_amount(amount):>16s}"


def _display_section(section: ReportSection, indent: int = 0) -> None:
    """Recursively display a section with its accounts and subsections."""
    click.echo(_line(section.display_name, section.total, indent))
    for row in section.accounts:
        click.echo(_line(f"{row.code} {row.name}", row.balance, indent + 4))
    for child in section.children:
        if not child.is_empty:
            _display_section(child, indent + 2)


def display_balance_sheet(snapshot: BalanceSheetSnapshot, company_name: str) -> None:
    click.echo(f"\nBilanz {company_name} {snapshot.fiscal_year or ''}".rstrip())
    for title, side in (("AKTIVA", snapshot.aktiva), ("PASSIVA", snapshot.passiva)):
        click.echo("=" * WIDTH)
        click.echo(title)
        click.echo("-" * WIDTH)
        for section in side.sections:
            if not section.is_empty:
                _display_section(section)
        click.echo("-" * WIDTH)
        click.echo(_line(f"Summe {title.capitalize()}", side.total))
    click.echo("=" * WIDTH)
    if not snapshot.balanced:
        click.echo(f"WARNING: Aktiva and Passiva differ by {format_amount(snapshot.difference)}")


def display_guv(guv: GuVSnapshot, company_name: str) -> None:
    click.echo(f"\nGewinn- und Verlustrechnung {company_name} {guv.fiscal_year or ''}".rstrip())
    click.echo("=" * WIDTH)
    for section in guv.sections:
        if not section.accounts and is_immaterial(section.subtotal):
            continue
        click.echo(_line(section.label, section.display_subtotal))
        for row in section.accounts:
            click.echo(_line(f"{row.code} {row.name}", row.balance, 6))
    click.echo("-" * WIDTH)
    click.echo(_line("Betriebsergebnis", guv.operating_result))
    click.echo(_line("Finanzergebnis", guv.financial_result))
    click.echo(_line("Steuern", guv.taxes))
    click.echo("=" * WIDTH)
    click.echo(_line(guv.net_income_label, guv.net_income))


@click.group()
def report_group():
    """Show financial statements."""
    pass


@report_group.command("balance-sheet")
@click.argument("year", type=int)
@click.option("--json", "as_json", is_flag=True, help="Print the snapshot as JSON")
@click.option("--include-unposted", is_flag=True, help="Also count unposted journal entries")
@click.pass_context
def balance_sheet(ctx, year: int, as_json: bool, include_unposted: bool):
    """Show the balance sheet (Bilanz) of a fiscal year.

    Closed years show their stored closing balance sheet.

    Examples:
        bilanzkit report balance-sheet 2024
        bilanzkit report balance-sheet 2024 --json
    """
    company = resolve_company_or_exit(ctx)
    fiscal_year = resolve_fiscal_year_or_exit(ctx, company, year)
    service = BalanceSheetService(ctx.obj["db"], get_classification(ctx))

    result = service.compute(company.id, fiscal_year, only_posted=not include_unposted)
    if not result.success:
        handle_failed_result(ctx, result)
        return

    if as_json:
        click.echo(json.dumps(result.data.to_dict(), indent=2, ensure_ascii=False))
    else:
        display_balance_sheet(result.data, company.name)


@report_group.command("guv")
@click.argument("year", type=int)
@click.option("--json", "as_json", is_flag=True, help="Print the GuV as JSON")
@click.option("--include-unposted", is_flag=True, help="Also count unposted journal entries")
@click.pass_context
def guv(ctx, year: int, as_json: bool, include_unposted: bool):
    """Show the profit and loss statement (GuV) of a fiscal year.

    Examples:
        bilanzkit report guv 2024
    """
    company = resolve_company_or_exit(ctx)
    fiscal_year = resolve_fiscal_year_or_exit(ctx, company, year)
    service = GuVService(ctx.obj["db"], get_classification(ctx))

    result = service.compute(company.id, fiscal_year, only_posted=not include_unposted)
    if not result.success:
        handle_failed_result(ctx, result)
        return

    if as_json:
        click.echo(json.dumps(result.data.to_dict(), indent=2, ensure_ascii=False))
    else:
        display_guv(result.data, company.name)


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
