"""CLI helpers for resolving companies, fiscal years and accounts."""

from __future__ import annotations

import click
from bilanzkit.domain.account import AccountService
from bilanzkit.domain.chart import ChartService
from bilanzkit.domain.classification import ClassificationMap
from bilanzkit.domain.entities import Account, Company, FiscalYear
from bilanzkit.domain.errors import DomainError
from bilanzkit.domain.fiscal_year import FiscalYearService
from bilanzkit.utils.account_resolver import resolve_account


def resolve_company_or_exit(ctx: click.Context) -> Company:
    """Return the company selected with --company, or the only company.

    This keeps error messaging and exit behavior consistent across commands.
    """
    service = ChartService(ctx.obj["db"])
    name = ctx.obj.get("company")
    try:
        if name:
            return service.get_company(name)
    except DomainError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)

    companies = service.list_companies()
    if len(companies) == 1:
        return companies[0]
    if not companies:
        click.echo("Error: No company found. Create one with 'bilanzkit company create NAME'.", err=True)
    else:
        click.echo("Error: Several companies exist, select one with --company.", err=True)
    ctx.exit(1)


def resolve_fiscal_year_or_exit(ctx: click.Context, company: Company, year: int) -> FiscalYear:
    """Return the fiscal year of a company, or exit with a CLI error."""
    try:
        return FiscalYearService(ctx.obj["db"]).get_by_year(company.id, year)
    except DomainError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, company: Company, reference: str
) -> Account:
    """Resolve account code or name, or exit with a CLI error."""
    try:
        return resolve_account(account_service, company.id, reference)
    except DomainError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def get_classification(ctx: click.Context) -> ClassificationMap:
    """Load the classification map once per CLI invocation."""
    classification = ctx.obj.get("classification")
    if classification is None:
        path = ctx.obj.get("classification_path")
        classification = ClassificationMap.from_json(path) if path else ClassificationMap.default()
        ctx.obj["classification"] = classification
    return classification
