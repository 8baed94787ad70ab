"""Account management commands."""

import click
from bilanzkit.domain.account import AccountService
from bilanzkit.domain.entities import AccountType
from bilanzkit.domain.errors import DomainError
from bilanzkit.domain.presentation import PRESENTATION_RULES
from bilanzkit.cli.account_resolution import resolve_company_or_exit
from bilanzkit.cli.error_handling import handle_domain_error


@click.group()
def account_group():
    """Manage ledger accounts."""
    pass


@account_group.command("create")
@click.argument("code", metavar="CODE")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    required=True,
    type=click.Choice([t.value for t in AccountType]),
    help="Account type",
)
@click.option(
    "--rule",
    type=click.Choice(sorted(PRESENTATION_RULES)),
    help="Presentation rule overriding the classification table",
)
@click.pass_context
def create_account(ctx, code: str, name: str, account_type: str, rule: str | None):
    """Create a new account.

    Accounts listed in the chart of accounts are created automatically when
    they are first booked; use this for accounts the chart does not know.

    Examples:
        bilanzkit account create 1210 "Sparkasse" --type asset --rule bank_bidirectional
        bilanzkit account create 4980 "Sonstiger Bedarf" --type expense
    """
    company = resolve_company_or_exit(ctx)
    service = AccountService(ctx.obj["db"])

    try:
        account_id = service.create_account(company.id, code, name, account_type, presentation_rule=rule)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created account {code} '{name}' (ID: {account_id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts of the company."""
    company = resolve_company_or_exit(ctx)
    accounts = AccountService(ctx.obj["db"]).list_accounts(company.id)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo(f"\nAccounts of {company.name}:")
    click.echo("-" * 70)
    for acc in accounts:
        rule = f" | {acc.presentation_rule}" if acc.presentation_rule else ""
        click.echo(f"{acc.code:>5s} | {acc.name:35s} | {acc.account_type.value:9s}{rule}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
