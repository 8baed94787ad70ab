"""Company management commands."""

import click
from bilanzkit.domain.chart import DEFAULT_CHART_NAME, ChartService
from bilanzkit.domain.errors import DomainError
from bilanzkit.cli.error_handling import handle_domain_error


@click.group()
def company_group():
    """Manage companies."""
    pass


@company_group.command("create")
@click.argument("name", metavar="COMPANY_NAME")
@click.option("--chart", default=DEFAULT_CHART_NAME, show_default=True, help="Chart of accounts to use")
@click.pass_context
def create_company(ctx, name: str, chart: str):
    """Create a new company.

    Examples:
        bilanzkit company create "Muster GmbH"
    """
    service = ChartService(ctx.obj["db"])
    try:
        company_id = service.create_company(name, chart_name=chart)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created company '{name.strip()}' (ID: {company_id})")


@company_group.command("list")
@click.pass_context
def list_companies(ctx):
    """List all companies."""
    companies = ChartService(ctx.obj["db"]).list_companies()
    if not companies:
        click.echo("No companies found.")
        return

    click.echo("\nCompanies:")
    click.echo("-" * 40)
    for company in companies:
        click.echo(f"ID: {company.id:3d} | {company.name}")


def register_commands(cli):
    """Register company commands with main CLI."""
    cli.add_command(company_group, name="company")
