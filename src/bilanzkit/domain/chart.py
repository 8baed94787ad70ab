"""Chart of accounts and company setup."""

import logging
from typing import Iterable, Optional

from bilanzkit.database.base import Database
from bilanzkit.domain.entities import AccountType, Company
from bilanzkit.domain.errors import ConflictError, NotFoundError, ValidationError
from bilanzkit.domain.skr03 import ACCOUNT_TEMPLATES

logger = logging.getLogger(__name__)

DEFAULT_CHART_NAME = "SKR03"


class ChartService:
    """Service for seeding charts of accounts and creating companies."""

    def __init__(self, db: Database):
        """Initialize chart service.

        Args:
            db: Database instance
        """
        self.db = db

    def seed_chart(
        self,
        name: str = DEFAULT_CHART_NAME,
        templates: Iterable[tuple] = ACCOUNT_TEMPLATES,
    ) -> tuple[int, int]:
        """Create a chart of accounts and add missing account templates.

        Existing templates are left untouched, so seeding twice is harmless.

        Args:
            name: Chart name
            templates: (code, name, account_type, presentation_rule, is_system_account) tuples

        Returns:
            Tuple of (chart ID, number of templates created)
        """
        chart = self.db.get_chart_of_accounts_by_name(name)
        with self.db.transaction():
            chart_id = chart.id if chart is not None else self.db.create_chart_of_accounts(name)
            created = 0
            for code, template_name, account_type, rule, is_system in templates:
                if self.db.get_account_template(chart_id, code) is not None:
                    continue
                self.db.create_account_template(
                    chart_of_accounts_id=chart_id,
                    code=code,
                    name=template_name,
                    account_type=AccountType(account_type),
                    presentation_rule=rule,
                    is_system_account=is_system,
                )
                created += 1
        logger.info("Seeded chart %s with %d account templates", name, created)
        return chart_id, created

    def create_company(self, name: str, chart_name: Optional[str] = DEFAULT_CHART_NAME) -> int:
        """Create a company using the given chart of accounts.

        Raises:
            ValidationError: If the name is empty
            NotFoundError: If the chart of accounts does not exist
            ConflictError: If a company with this name exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Company name must not be empty")
        if self.db.get_company_by_name(name) is not None:
            raise ConflictError(f"Company '{name}' already exists")

        chart_id = None
        if chart_name:
            chart = self.db.get_chart_of_accounts_by_name(chart_name)
            if chart is None:
                raise NotFoundError(
                    f"Chart of accounts '{chart_name}' not found. Run 'bilanzkit init-chart' first."
                )
            chart_id = chart.id
        return self.db.create_company(name=name, chart_of_accounts_id=chart_id)

    def get_company(self, name: str) -> Company:
        """Get company by name.

        Raises:
            NotFoundError: If no company has this name
        """
        company = self.db.get_company_by_name(name)
        if company is None:
            raise NotFoundError(f"Company '{name}' not found")
        return company

    def list_companies(self) -> list[Company]:
        return self.db.list_companies()
