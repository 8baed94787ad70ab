"""Tests for fiscal years."""

import pytest
from datetime import date

from bilanzkit.domain.entities import FiscalYearState
from bilanzkit.domain.errors import ConflictError, NotFoundError, PreconditionError, ValidationError


class TestFiscalYearService:
    def test_create_calendar_year(self, company, fiscal_year_service):
        fy = fiscal_year_service.create_fiscal_year(company.id, 2024)
        assert fy.start_date == date(2024, 1, 1)
        assert fy.end_date == date(2024, 12, 31)
        assert fiscal_year_service.state(fy) == FiscalYearState.OPEN

    def test_create_broken_year(self, company, fiscal_year_service):
        fy = fiscal_year_service.create_fiscal_year(company.id, 2024, date(2024, 7, 1), date(2025, 6, 30))
        assert fy.contains(date(2025, 1, 15))
        assert not fy.contains(date(2024, 6, 30))

    def test_duplicate_year(self, company, fiscal_year, fiscal_year_service):
        with pytest.raises(ConflictError):
            fiscal_year_service.create_fiscal_year(company.id, 2024)

    def test_overlapping_year(self, company, fiscal_year, fiscal_year_service):
        with pytest.raises(ConflictError, match="overlaps"):
            fiscal_year_service.create_fiscal_year(company.id, 2025, date(2024, 12, 1), date(2025, 11, 30))

    def test_empty_range(self, company, fiscal_year_service):
        with pytest.raises(ValidationError):
            fiscal_year_service.create_fiscal_year(company.id, 2024, date(2024, 12, 31), date(2024, 1, 1))

    def test_get_by_year(self, company, fiscal_year, fiscal_year_service):
        assert fiscal_year_service.get_by_year(company.id, 2024) == fiscal_year
        with pytest.raises(NotFoundError):
            fiscal_year_service.get_by_year(company.id, 1999)

    def test_list_ordered(self, company, fiscal_year_service):
        fiscal_year_service.create_fiscal_year(company.id, 2025)
        fiscal_year_service.create_fiscal_year(company.id, 2024)
        assert [fy.year for fy in fiscal_year_service.list_fiscal_years(company.id)] == [2024, 2025]


class TestCurrentFor:
    def test_returns_containing_year(self, company, fiscal_year, fiscal_year_service):
        assert fiscal_year_service.current_for(company.id, date(2024, 5, 1)).id == fiscal_year.id

    def test_creates_calendar_year(self, company, fiscal_year_service):
        fy = fiscal_year_service.current_for(company.id, date(2026, 2, 1))
        assert fy.year == 2026
        assert fy.start_date == date(2026, 1, 1)

    def test_closed_year_returns_none(self, company, opened_year, closing_service, fiscal_year_service):
        assert closing_service.close(opened_year, create_next_year_opening=False).success
        assert fiscal_year_service.current_for(company.id, date(2024, 5, 1)) is None


class TestAssertBookable:
    def test_open_year(self, fiscal_year, fiscal_year_service):
        fiscal_year_service.assert_bookable(fiscal_year, date(2024, 2, 29))

    def test_date_outside(self, fiscal_year, fiscal_year_service):
        with pytest.raises(ValidationError):
            fiscal_year_service.assert_bookable(fiscal_year, date(2023, 12, 31))

    def test_closed_year(self, opened_year, closing_service, fiscal_year_service):
        assert closing_service.close(opened_year, create_next_year_opening=False).success
        closed = fiscal_year_service.get_fiscal_year(opened_year.id)
        assert fiscal_year_service.state(closed) == FiscalYearState.CLOSED
        with pytest.raises(PreconditionError):
            fiscal_year_service.assert_bookable(closed)


def test_opened_year_state(opened_year):
    assert opened_year.state == FiscalYearState.OPEN_WITH_OPENING
