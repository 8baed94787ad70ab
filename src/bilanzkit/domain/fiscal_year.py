"""Fiscal year service and lifecycle gate.

A fiscal year moves through three states, derived from its flags:

    open -> open_with_opening -> closed

The opening balance creator sets ``opening_balance_posted_at``; the closing
service sets ``closed``. Nothing moves a year backwards.
"""

import logging
from datetime import date
from typing import Optional

from bilanzkit.database.base import Database
from bilanzkit.domain.entities import FiscalYear, FiscalYearState
from bilanzkit.domain.errors import (
    ConflictError,
    NotFoundError,
    PreconditionError,
    ValidationError,
    fiscal_year_already_closed,
    fiscal_year_not_found,
)

logger = logging.getLogger(__name__)


class FiscalYearService:
    """Service for managing fiscal years."""

    def __init__(self, db: Database):
        """Initialize fiscal year service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_fiscal_year(
        self,
        company_id: int,
        year: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> FiscalYear:
        """Create a fiscal year; defaults to the calendar year.

        Raises:
            ValidationError: If the date range is empty
            ConflictError: If the year exists or overlaps another fiscal year
        """
        start_date = start_date or date(year, 1, 1)
        end_date = end_date or date(year, 12, 31)
        if start_date > end_date:
            raise ValidationError(f"Fiscal year {year} starts after it ends ({start_date} > {end_date})")

        if self.db.get_fiscal_year_by_year(company_id, year) is not None:
            raise ConflictError(f"Fiscal year {year} already exists")
        for fiscal_year in self.db.list_fiscal_years(company_id):
            if fiscal_year.start_date <= end_date and start_date <= fiscal_year.end_date:
                raise ConflictError(f"Fiscal year {year} overlaps fiscal year {fiscal_year.year}")

        fiscal_year_id = self.db.create_fiscal_year(company_id, year, start_date, end_date)
        logger.info("Created fiscal year %d (%s - %s)", year, start_date, end_date)
        return self.db.get_fiscal_year(fiscal_year_id)

    def get_fiscal_year(self, fiscal_year_id: int) -> FiscalYear:
        """Get fiscal year by ID.

        Raises:
            NotFoundError: If the fiscal year does not exist
        """
        fiscal_year = self.db.get_fiscal_year(fiscal_year_id)
        if fiscal_year is None:
            raise NotFoundError(fiscal_year_not_found(fiscal_year_id))
        return fiscal_year

    def get_by_year(self, company_id: int, year: int) -> FiscalYear:
        """Get fiscal year of a company by calendar year.

        Raises:
            NotFoundError: If the fiscal year does not exist
        """
        fiscal_year = self.db.get_fiscal_year_by_year(company_id, year)
        if fiscal_year is None:
            raise NotFoundError(f"Fiscal year {year} not found")
        return fiscal_year

    def list_fiscal_years(self, company_id: int) -> list[FiscalYear]:
        return self.db.list_fiscal_years(company_id)

    def find_or_create(self, company_id: int, year: int) -> FiscalYear:
        """Return the fiscal year for a calendar year, creating it if missing."""
        fiscal_year = self.db.get_fiscal_year_by_year(company_id, year)
        if fiscal_year is not None:
            return fiscal_year
        return self.create_fiscal_year(company_id, year)

    def current_for(self, company_id: int, day: date) -> Optional[FiscalYear]:
        """Return the open fiscal year to book a date into.

        Creates the calendar year when no fiscal year contains the date.
        Returns None if the containing year is closed.
        """
        fiscal_year = self.db.find_fiscal_year_for_date(company_id, day)
        if fiscal_year is None:
            fiscal_year = self.find_or_create(company_id, day.year)
        if fiscal_year.closed:
            return None
        return fiscal_year

    def state(self, fiscal_year: FiscalYear) -> FiscalYearState:
        return fiscal_year.state

    def assert_bookable(self, fiscal_year: FiscalYear, day: Optional[date] = None) -> None:
        """Check that entries may be booked into the fiscal year.

        Raises:
            PreconditionError: If the year is closed
            ValidationError: If the date lies outside the year
        """
        if fiscal_year.closed:
            raise PreconditionError(fiscal_year_already_closed(fiscal_year.year))
        if day is not None and not fiscal_year.contains(day):
            raise ValidationError(
                f"Booking date {day} is outside fiscal year {fiscal_year.year} "
                f"({fiscal_year.start_date} - {fiscal_year.end_date})"
            )
