"""Mapper functions to convert SQLAlchemy models into domain entities.

This layer isolates the conversion logic: enum columns are stored as plain
strings and become domain enums here, amounts become Decimals.
"""

from decimal import Decimal

from bilanzkit.domain import entities as domain
from bilanzkit.database.models import (
    Account as ORMAccount,
    AccountTemplate as ORMAccountTemplate,
    BalanceSheet as ORMBalanceSheet,
    ChartOfAccounts as ORMChartOfAccounts,
    Company as ORMCompany,
    FiscalYear as ORMFiscalYear,
    JournalEntry as ORMJournalEntry,
    LineItem as ORMLineItem,
)


def chart_of_accounts_to_domain(orm_chart: ORMChartOfAccounts) -> domain.ChartOfAccounts:
    """Convert SQLAlchemy ChartOfAccounts model to domain entity."""
    return domain.ChartOfAccounts(id=orm_chart.id, name=orm_chart.name)


def account_template_to_domain(orm_template: ORMAccountTemplate) -> domain.AccountTemplate:
    """Convert SQLAlchemy AccountTemplate model to domain entity."""
    return domain.AccountTemplate(
        id=orm_template.id,
        chart_of_accounts_id=orm_template.chart_of_accounts_id,
        code=orm_template.code,
        name=orm_template.name,
        account_type=domain.AccountType(orm_template.account_type),
        presentation_rule=orm_template.presentation_rule,
        is_system_account=bool(orm_template.is_system_account),
    )


def company_to_domain(orm_company: ORMCompany) -> domain.Company:
    """Convert SQLAlchemy Company model to domain entity."""
    return domain.Company(
        id=orm_company.id,
        name=orm_company.name,
        chart_of_accounts_id=orm_company.chart_of_accounts_id,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        company_id=orm_account.company_id,
        code=orm_account.code,
        name=orm_account.name,
        account_type=domain.AccountType(orm_account.account_type),
        presentation_rule=orm_account.presentation_rule,
        is_system_account=bool(orm_account.is_system_account),
        created_at=orm_account.created_at,
    )


def fiscal_year_to_domain(orm_fiscal_year: ORMFiscalYear) -> domain.FiscalYear:
    """Convert SQLAlchemy FiscalYear model to domain entity."""
    return domain.FiscalYear(
        id=orm_fiscal_year.id,
        company_id=orm_fiscal_year.company_id,
        year=orm_fiscal_year.year,
        start_date=orm_fiscal_year.start_date,
        end_date=orm_fiscal_year.end_date,
        opening_balance_posted_at=orm_fiscal_year.opening_balance_posted_at,
        closing_balance_posted_at=orm_fiscal_year.closing_balance_posted_at,
        closed=bool(orm_fiscal_year.closed),
        closed_at=orm_fiscal_year.closed_at,
    )


def line_item_to_domain(orm_line_item: ORMLineItem) -> domain.LineItem:
    """Convert SQLAlchemy LineItem model to domain entity."""
    return domain.LineItem(
        id=orm_line_item.id,
        journal_entry_id=orm_line_item.journal_entry_id,
        account_id=orm_line_item.account_id,
        account_code=orm_line_item.account.code,
        amount=Decimal(orm_line_item.amount),
        direction=domain.Direction(orm_line_item.direction),
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model, with line items, to domain entity."""
    return domain.JournalEntry(
        id=orm_entry.id,
        company_id=orm_entry.company_id,
        fiscal_year_id=orm_entry.fiscal_year_id,
        booking_date=orm_entry.booking_date,
        description=orm_entry.description,
        entry_type=domain.EntryType(orm_entry.entry_type),
        sequence=orm_entry.sequence,
        posted_at=orm_entry.posted_at,
        line_items=tuple(line_item_to_domain(li) for li in orm_entry.line_items),
    )


def balance_sheet_to_domain(orm_sheet: ORMBalanceSheet) -> domain.StoredBalanceSheet:
    """Convert SQLAlchemy BalanceSheet model to domain entity."""
    return domain.StoredBalanceSheet(
        id=orm_sheet.id,
        fiscal_year_id=orm_sheet.fiscal_year_id,
        sheet_type=domain.SheetType(orm_sheet.sheet_type),
        source=domain.BalanceSheetSource(orm_sheet.source),
        balance_date=orm_sheet.balance_date,
        data=dict(orm_sheet.data or {}),
        posted_at=orm_sheet.posted_at,
        created_at=orm_sheet.created_at,
    )
