"""Shared pytest fixtures for bilanzkit tests."""

import tempfile
import os
from decimal import Decimal
import pytest

from bilanzkit.database.factories import create_sqlite_database
from bilanzkit.domain.account import AccountService
from bilanzkit.domain.balance_sheet import BalanceSheetCalculator, BalanceSheetService
from bilanzkit.domain.chart import ChartService
from bilanzkit.domain.classification import ClassificationMap
from bilanzkit.domain.closing import FiscalYearClosingService
from bilanzkit.domain.entities import Direction, PostingLine
from bilanzkit.domain.fiscal_year import FiscalYearService
from bilanzkit.domain.guv import GuVService
from bilanzkit.domain.journal import JournalService
from bilanzkit.domain.opening_balance import OpeningBalanceService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture(scope="session")
def classification_map():
    """The bundled SKR03 classification map."""
    return ClassificationMap.default()


@pytest.fixture
def chart_service(temp_db):
    return ChartService(temp_db)


@pytest.fixture
def account_service(temp_db):
    return AccountService(temp_db)


@pytest.fixture
def fiscal_year_service(temp_db):
    return FiscalYearService(temp_db)


@pytest.fixture
def journal_service(temp_db):
    return JournalService(temp_db)


@pytest.fixture
def guv_service(temp_db, classification_map):
    return GuVService(temp_db, classification_map)


@pytest.fixture
def balance_sheet_service(temp_db, classification_map):
    return BalanceSheetService(temp_db, classification_map)


@pytest.fixture
def opening_balance_service(temp_db, classification_map):
    return OpeningBalanceService(temp_db, classification_map)


@pytest.fixture
def closing_service(temp_db, classification_map):
    return FiscalYearClosingService(temp_db, classification_map)


@pytest.fixture
def calculator(classification_map):
    return BalanceSheetCalculator(classification_map)


@pytest.fixture
def company(temp_db, chart_service):
    """Create a company on a freshly seeded SKR03 chart."""
    chart_service.seed_chart()
    company_id = chart_service.create_company("Muster GmbH")
    return temp_db.get_company(company_id)


@pytest.fixture
def fiscal_year(company, fiscal_year_service):
    """Calendar fiscal year 2024 of the sample company."""
    return fiscal_year_service.create_fiscal_year(company.id, 2024)


@pytest.fixture
def book(company, journal_service):
    """Return a helper booking (and by default posting) a journal entry.

    Lines are (code, amount, "debit"|"credit") tuples.
    """

    def _book(fiscal_year, lines, booking_date=None, description="Buchung", post=True):
        entry_id = journal_service.create_entry(
            company_id=company.id,
            fiscal_year_id=fiscal_year.id,
            booking_date=booking_date or fiscal_year.start_date,
            description=description,
            lines=[PostingLine(code, Decimal(amount), Direction(direction)) for code, amount, direction in lines],
            provision_accounts=True,
        )
        if post:
            journal_service.post_entry(entry_id)
        return entry_id

    return _book


@pytest.fixture
def opening_rows():
    """Opening balance rows with a loss carried forward (Verlustvortrag)."""
    return {
        "aktiva": [
            {"code": "1529", "name": "Zurückzuzahlende Vorsteuer", "balance": "1093.08"},
            {"code": "1200", "name": "Bank", "balance": "2.71"},
        ],
        "passiva": [
            {"code": "0800", "name": "Gezeichnetes Kapital", "balance": "4000.00"},
            {"code": "0868", "name": "Verlustvortrag vor Verwendung", "balance": "-3604.21"},
            {"code": "0750", "name": "Verbindlichkeiten gegenüber Gesellschaftern", "balance": "700.00"},
        ],
    }


@pytest.fixture
def opening_snapshot(calculator, opening_rows):
    """Balanced opening snapshot with a Bilanzsumme of 1095.79."""
    return calculator.from_rows(opening_rows["aktiva"], opening_rows["passiva"], fiscal_year=2024)


@pytest.fixture
def opened_year(fiscal_year, opening_balance_service, opening_snapshot, fiscal_year_service):
    """Fiscal year 2024 with its opening balance posted."""
    result = opening_balance_service.create(fiscal_year, opening_snapshot)
    assert result.success, result.errors
    return fiscal_year_service.get_fiscal_year(fiscal_year.id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
