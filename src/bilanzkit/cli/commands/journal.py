"""Journal entry commands."""

import click
from bilanzkit.domain.entities import Direction, EntryType, PostingLine
from bilanzkit.domain.errors import DomainError, PreconditionError
from bilanzkit.domain.fiscal_year import FiscalYearService
from bilanzkit.domain.journal import JournalService
from bilanzkit.utils.amount_parser import parse_amount
from bilanzkit.utils.date_parser import parse_date
from bilanzkit.cli.account_resolution import (
    resolve_company_or_exit,
    resolve_fiscal_year_or_exit,
)
from bilanzkit.cli.error_handling import handle_domain_error
from bilanzkit.cli.formatting import format_amount


def parse_posting(value: str, direction: Direction) -> PostingLine:
    """Parse a CODE=AMOUNT option value into a posting line.

    Raises:
        ValueError: If the value is malformed
    """
    code, separator, amount = value.partition("=")
    if not separator or not code.strip():
        raise ValueError(f"Invalid line '{value}' (expected CODE=AMOUNT)")
    return PostingLine(account_code=code.strip(), amount=parse_amount(amount), direction=direction)


@click.group()
def journal_group():
    """Book and post journal entries."""
    pass


@journal_group.command("add")
@click.option("--date", "date_str", required=True, help="Booking date")
@click.option("--description", "-d", required=True, help="Booking text")
@click.option("--debit", "debits", multiple=True, metavar="CODE=AMOUNT", help="Debit line (repeatable)")
@click.option("--credit", "credits", multiple=True, metavar="CODE=AMOUNT", help="Credit line (repeatable)")
@click.option("--post", "post_now", is_flag=True, help="Post the entry right away")
@click.pass_context
def add_entry(ctx, date_str: str, description: str, debits: tuple, credits: tuple, post_now: bool):
    """Book a journal entry (Buchungssatz).

    The booking date selects the fiscal year; the calendar year is created
    when none contains the date. Accounts of the chart of accounts are
    created on first use. Debits must equal credits.

    Examples:
        bilanzkit journal add --date 15.03.2024 -d "Bürobedarf" \\
            --debit 4930=100,00 --debit 1576=19,00 --credit 1200=119,00
        bilanzkit journal add --date today -d "Umsatz" --debit 1200=595 --credit 8400=500 \\
            --credit 1776=95 --post
    """
    db = ctx.obj["db"]
    company = resolve_company_or_exit(ctx)
    service = JournalService(db)
    fiscal_years = FiscalYearService(db)

    try:
        booking_date = parse_date(date_str)
        lines = [parse_posting(value, Direction.DEBIT) for value in debits]
        lines += [parse_posting(value, Direction.CREDIT) for value in credits]
        with db.transaction():
            fiscal_year = fiscal_years.current_for(company.id, booking_date)
            if fiscal_year is None:
                raise PreconditionError(f"The fiscal year containing {booking_date.isoformat()} is closed")
            entry_id = service.create_entry(
                company_id=company.id,
                fiscal_year_id=fiscal_year.id,
                booking_date=booking_date,
                description=description,
                lines=lines,
                provision_accounts=True,
            )
            if post_now:
                service.post_entry(entry_id)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
        return

    state = "posted" if post_now else "unposted"
    click.echo(f"Created journal entry {entry_id} in fiscal year {fiscal_year.year} ({state})")


@journal_group.command("post")
@click.argument("entry_id", type=int)
@click.pass_context
def post_entry(ctx, entry_id: int):
    """Post a journal entry; posted entries cannot be changed."""
    service = JournalService(ctx.obj["db"])
    try:
        entry = service.post_entry(entry_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Posted journal entry {entry.id} ({entry.description})")


@journal_group.command("delete")
@click.argument("entry_id", type=int)
@click.pass_context
def delete_entry(ctx, entry_id: int):
    """Delete an unposted journal entry."""
    service = JournalService(ctx.obj["db"])
    try:
        service.delete_entry(entry_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted journal entry {entry_id}")


@journal_group.command("list")
@click.argument("year", type=int)
@click.option(
    "--type",
    "entry_type",
    type=click.Choice([t.value for t in EntryType]),
    help="Only entries of this type",
)
@click.pass_context
def list_entries(ctx, year: int, entry_type: str | None):
    """List the journal entries of a fiscal year."""
    db = ctx.obj["db"]
    company = resolve_company_or_exit(ctx)
    fiscal_year = resolve_fiscal_year_or_exit(ctx, company, year)
    service = JournalService(db)

    entries = service.list_entries(fiscal_year.id, EntryType(entry_type) if entry_type else None)
    if not entries:
        click.echo("No journal entries found.")
        return

    accounts = {account.id: account for account in db.list_accounts(company.id)}
    for entry in entries:
        marker = "posted" if entry.posted else "draft"
        click.echo(
            f"\n#{entry.id} [{entry.sequence:4d}] {entry.booking_date.isoformat()} "
            f"{entry.description} ({entry.entry_type.value}, {marker})"
        )
        for item in entry.line_items:
            account = accounts.get(item.account_id)
            name = account.name if account is not None else ""
            debit = format_amount(item.amount) if item.direction == Direction.DEBIT else ""
            credit = format_amount(item.amount) if item.direction == Direction.CREDIT else ""
            click.echo(f"    {item.account_code:>5s} {name:35.35s} {debit:>14s} {credit:>14s}")


def register_commands(cli):
    """Register journal commands with main CLI."""
    cli.add_command(journal_group, name="journal")
