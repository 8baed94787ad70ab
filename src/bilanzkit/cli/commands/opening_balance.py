"""Opening balance (Eröffnungsbilanz) commands."""

import json

import click
from bilanzkit.domain.balance_sheet import BalanceSheetCalculator
from bilanzkit.domain.errors import DomainError
from bilanzkit.domain.opening_balance import OpeningBalanceService
from bilanzkit.domain.snapshot import BalanceSheetSnapshot
from bilanzkit.cli.account_resolution import (
    get_classification,
    resolve_company_or_exit,
    resolve_fiscal_year_or_exit,
)
from bilanzkit.cli.error_handling import handle_domain_error, handle_failed_result
from bilanzkit.cli.formatting import format_amount


def load_balance_sheet(path: str, calculator: BalanceSheetCalculator, year: int) -> BalanceSheetSnapshot:
    """Read a balance sheet file.

    Accepts either a stored snapshot document or a flat document of the form
    ``{"aktiva": [{"code", "name", "balance"}, ...], "passiva": [...]}``.

    Raises:
        ValueError: If the file is not valid JSON or not a balance sheet
    """
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}")

    if not isinstance(data, dict) or "aktiva" not in data or "passiva" not in data:
        raise ValueError(f"{path} must contain 'aktiva' and 'passiva'")
    if isinstance(data["aktiva"], list) and isinstance(data["passiva"], list):
        return calculator.from_rows(data["aktiva"], data["passiva"], fiscal_year=year)
    return BalanceSheetSnapshot.from_dict(data)


@click.group()
def opening_balance_group():
    """Manage opening balances."""
    pass


@opening_balance_group.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--year", type=int, required=True, help="Fiscal year to open")
@click.pass_context
def import_opening_balance(ctx, file: str, year: int):
    """Post an opening balance from a JSON file.

    Balances are signed relative to their side; a net income carried over
    from the previous year may be given as a Passiva row with code
    "net_income".

    Examples:
        bilanzkit opening-balance import eroeffnung.json --year 2024

    with eroeffnung.json:

    \b
        {"aktiva": [{"code": "1200", "name": "Bank", "balance": "25000.00"}],
         "passiva": [{"code": "0800", "name": "Gezeichnetes Kapital", "balance": "25000.00"}]}
    """
    company = resolve_company_or_exit(ctx)
    fiscal_year = resolve_fiscal_year_or_exit(ctx, company, year)
    classification = get_classification(ctx)
    service = OpeningBalanceService(ctx.obj["db"], classification)

    try:
        snapshot = load_balance_sheet(file, BalanceSheetCalculator(classification), year)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    result = service.create(fiscal_year, snapshot)
    if not result.success:
        handle_failed_result(ctx, result)
        return

    click.echo(
        f"Posted opening balance for {year} (journal entry {result.data.journal_entry_id}, "
        f"Bilanzsumme {format_amount(snapshot.aktiva_total)})"
    )


@opening_balance_group.command("carry-forward")
@click.option("--year", type=int, required=True, help="Fiscal year to open")
@click.pass_context
def carry_forward(ctx, year: int):
    """Post the closing balance of the previous year as opening balance.

    Examples:
        bilanzkit opening-balance carry-forward --year 2024
    """
    company = resolve_company_or_exit(ctx)
    fiscal_year = resolve_fiscal_year_or_exit(ctx, company, year)
    service = OpeningBalanceService(ctx.obj["db"], get_classification(ctx))

    result = service.carry_forward(fiscal_year)
    if not result.success:
        handle_failed_result(ctx, result)
        return

    click.echo(
        f"Carried fiscal year {year - 1} forward into {year} "
        f"(journal entry {result.data.journal_entry_id})"
    )


def register_commands(cli):
    """Register opening-balance commands with main CLI."""
    cli.add_command(opening_balance_group, name="opening-balance")
