"""Initialize the SKR03 chart of accounts."""

import click
from bilanzkit.domain.chart import DEFAULT_CHART_NAME, ChartService
from bilanzkit.domain.errors import DomainError
from bilanzkit.cli.error_handling import handle_domain_error


@click.command("init-chart")
@click.option("--name", default=DEFAULT_CHART_NAME, show_default=True, help="Chart of accounts name")
@click.pass_context
def init_chart(ctx, name: str):
    """Load the bundled SKR03 account templates into a chart of accounts.

    Running it again only adds templates that are missing.

    Examples:
        bilanzkit init-chart
    """
    db = ctx.obj["db"]
    service = ChartService(db)

    try:
        chart_id, created = service.seed_chart(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if created:
        click.echo(f"Created chart '{name}' (ID: {chart_id}) with {created} account templates.")
    else:
        click.echo(f"Chart '{name}' is already up to date.")


def register_commands(cli):
    """Register init-chart command with main CLI."""
    cli.add_command(init_chart)
