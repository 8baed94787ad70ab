"""Profit and loss statement (Gewinn- und Verlustrechnung).

Structure per § 275 Abs. 2 HGB (Gesamtkostenverfahren). Every section of the
classification map is emitted, in order, even when it has no accounts.
Account balances and subtotals are credit minus debit, so expenses are
negative and net income is the plain sum of all subtotals.
"""

import logging
from typing import Iterable, Optional

from bilanzkit.database.base import Database
from bilanzkit.domain.classification import ClassificationMap
from bilanzkit.domain.constants import is_immaterial, is_system_account
from bilanzkit.domain.entities import AccountBalance, EntryType, FiscalYear
from bilanzkit.domain.errors import DomainError
from bilanzkit.domain.ledger import aggregate_balances
from bilanzkit.domain.results import ServiceResult
from bilanzkit.domain.snapshot import GuVAccountRow, GuVSection, GuVSnapshot

logger = logging.getLogger(__name__)


class GuVCalculator:
    """Builds a GuV snapshot from account balances."""

    def __init__(self, classification: ClassificationMap):
        self.classification = classification

    def calculate(self, balances: Iterable[AccountBalance], fiscal_year: Optional[int] = None) -> GuVSnapshot:
        rows: dict[str, list[GuVAccountRow]] = {s.key: [] for s in self.classification.guv_sections}

        for balance in balances:
            if is_system_account(balance.code) or not self.classification.is_pnl(balance):
                continue
            if is_immaterial(balance.net_balance):
                continue
            rsid = self.classification.guv_rsid(balance)
            # validated when the classification map was built
            section = self.classification.guv_section_for(rsid)
            rows[section.key].append(
                GuVAccountRow(
                    code=balance.code,
                    name=balance.name,
                    rsid=rsid,
                    balance=balance.total_credit - balance.total_debit,
                )
            )

        sections = tuple(
            GuVSection(
                key=definition.key,
                label=definition.label,
                display_type=definition.display_type,
                group=definition.group,
                accounts=tuple(sorted(rows[definition.key], key=lambda row: row.code)),
            )
            for definition in self.classification.guv_sections
        )
        return GuVSnapshot(sections=sections, fiscal_year=fiscal_year)


class GuVService:
    """Computes the GuV of a fiscal year from the ledger."""

    def __init__(self, db: Database, classification: ClassificationMap):
        """Initialize GuV service.

        Args:
            db: Database instance
            classification: Classification map used to place accounts
        """
        self.db = db
        self.classification = classification
        self.calculator = GuVCalculator(classification)

    def calculate(self, company_id: int, fiscal_year: FiscalYear, only_posted: bool = True) -> GuVSnapshot:
        """Compute the GuV, raising on errors.

        Closing entries and 9xxx system accounts are excluded.
        """
        lines = self.db.fetch_posted_line_items(
            company_id,
            fiscal_year.id,
            exclude_entry_types=(EntryType.CLOSING,),
            exclude_account_prefix="9",
            only_posted=only_posted,
        )
        return self.calculator.calculate(aggregate_balances(lines), fiscal_year=fiscal_year.year)

    def compute(self, company_id: int, fiscal_year: FiscalYear, only_posted: bool = True) -> ServiceResult:
        """Compute the GuV of a fiscal year.

        Returns:
            ServiceResult with a GuVSnapshot as data
        """
        try:
            return ServiceResult.ok(self.calculate(company_id, fiscal_year, only_posted))
        except DomainError as e:
            logger.warning("GuV computation for %s failed: %s", fiscal_year.year, e)
            return ServiceResult.from_error(e)
        except Exception as e:
            logger.exception("Unexpected error computing GuV for %s", fiscal_year.year)
            return ServiceResult.failure(str(e))
