"""Balance sheet calculator (Bilanz nach § 266 HGB).

Accounts are placed by their presentation rule, grouped into the section
tree of their side, and the GuV net income is folded into Eigenkapital as a
pseudo row. Side totals are plain sums of the section totals. An imbalance is
reported through ``balanced``, not raised.
"""

import logging
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Sequence

from bilanzkit.database.base import Database
from bilanzkit.domain.classification import ClassificationMap, rsid_matches
from bilanzkit.domain.constants import (
    EQUITY_SECTION_RSID,
    GUV_PREFIX,
    NET_INCOME_CODE,
    is_immaterial,
    is_system_account,
    net_income_label,
    to_money,
)
from bilanzkit.domain.entities import AccountBalance, AccountType, EntryType, FiscalYear, Side
from bilanzkit.domain.errors import ClassificationError, DomainError, ValidationError
from bilanzkit.domain.guv import GuVCalculator
from bilanzkit.domain.ledger import aggregate_balances
from bilanzkit.domain.report_section import AccountRow, build_section
from bilanzkit.domain.results import ServiceResult
from bilanzkit.domain.snapshot import BalanceSheetSnapshot, GuVSnapshot, SideSnapshot

logger = logging.getLogger(__name__)


class BalanceSheetCalculator:
    """Builds balance sheet snapshots from account balances."""

    def __init__(self, classification: ClassificationMap):
        self.classification = classification

    def account_rows(self, balances: Iterable[AccountBalance]) -> tuple[list[AccountRow], list[AccountRow]]:
        """Resolve balances into (aktiva rows, passiva rows)."""
        aktiva: list[AccountRow] = []
        passiva: list[AccountRow] = []
        for balance in balances:
            if is_system_account(balance.code):
                continue
            position = self.classification.resolve(balance)
            if position is None:
                continue
            row = AccountRow(
                code=balance.code,
                name=balance.name,
                balance=position.side_balance,
                rsid=position.rsid,
                is_debit_balance=position.is_debit_balance,
            )
            (aktiva if position.side == Side.AKTIVA else passiva).append(row)
        return aktiva, passiva

    def build_side(
        self, side: Side, rows: Sequence[AccountRow], net_income: Optional[Decimal] = None
    ) -> SideSnapshot:
        """Build the section trees of one side; every top-level category is present."""
        placed = 0
        sections = []
        for category in self.classification.categories(side):
            matching = [row for row in rows if rsid_matches(category.rsid, row.rsid)]
            placed += len(matching)
            sections.append(build_section(matching, category))

        if placed != len(rows):
            unplaced = sorted(
                row.code
                for row in rows
                if not any(rsid_matches(c.rsid, row.rsid) for c in self.classification.categories(side))
            )
            raise ClassificationError(
                f"Accounts {', '.join(unplaced)} resolve to positions outside the {Side(side).value} template"
            )

        if net_income is not None and not is_immaterial(net_income):
            row = AccountRow(
                code=NET_INCOME_CODE,
                name=net_income_label(net_income),
                balance=net_income,
                rsid=EQUITY_SECTION_RSID,
                is_debit_balance=net_income < 0,
            )
            sections = [
                section.with_account(row, EQUITY_SECTION_RSID)
                if rsid_matches(section.rsid, EQUITY_SECTION_RSID)
                else section
                for section in sections
            ]
        return SideSnapshot(sections=tuple(sections))

    def calculate(
        self,
        balances: Sequence[AccountBalance],
        guv: GuVSnapshot,
        fiscal_year: Optional[int] = None,
        fiscal_year_id: Optional[int] = None,
    ) -> BalanceSheetSnapshot:
        aktiva_rows, passiva_rows = self.account_rows(balances)
        return BalanceSheetSnapshot(
            aktiva=self.build_side(Side.AKTIVA, aktiva_rows),
            passiva=self.build_side(Side.PASSIVA, passiva_rows, net_income=guv.net_income),
            fiscal_year=fiscal_year,
            fiscal_year_id=fiscal_year_id,
            guv=guv,
        )

    def _manual_row(self, side: Side, data: Mapping[str, Any]) -> AccountRow:
        try:
            code = str(data["code"]).strip()
            balance = to_money(data["balance"])
        except (KeyError, TypeError, ArithmeticError, ValueError) as e:
            raise ValidationError(f"Invalid balance sheet row {dict(data)}: {e}")

        is_debit_balance = (balance >= 0) == (side == Side.AKTIVA)
        classification = self.classification.lookup(code)
        rsid = classification.rsid if classification is not None else None
        rule = classification.presentation_rule if classification is not None else None
        side_prefix = self.classification.side_template(side).rsid
        if rule is not None and rule.bidirectional:
            # same slot the ledger picks for this saldo
            slot = rule.debit_rsid if is_debit_balance else rule.credit_rsid
            if slot and rsid_matches(side_prefix, slot):
                rsid = slot
        if code == NET_INCOME_CODE:
            rsid = EQUITY_SECTION_RSID
        if rsid is None or rsid_matches(GUV_PREFIX, rsid) or not rsid_matches(side_prefix, rsid):
            fallback = AccountType.ASSET if side == Side.AKTIVA else AccountType.LIABILITY
            rsid = self.classification.default_rsid(fallback)
        return AccountRow(
            code=code,
            name=data.get("name") or "",
            balance=balance,
            rsid=rsid,
            is_debit_balance=is_debit_balance,
        )

    def from_rows(
        self,
        aktiva: Iterable[Mapping[str, Any]],
        passiva: Iterable[Mapping[str, Any]],
        fiscal_year: Optional[int] = None,
    ) -> BalanceSheetSnapshot:
        """Build a snapshot from manually entered rows (code, name, balance).

        Balances are signed relative to their side. Rows are placed at their
        classified position, or at the side's default position.
        """
        aktiva_rows = [self._manual_row(Side.AKTIVA, row) for row in aktiva]
        passiva_rows = [self._manual_row(Side.PASSIVA, row) for row in passiva]
        return BalanceSheetSnapshot(
            aktiva=self.build_side(Side.AKTIVA, aktiva_rows),
            passiva=self.build_side(Side.PASSIVA, passiva_rows),
            fiscal_year=fiscal_year,
        )


class BalanceSheetService:
    """Computes balance sheets from the ledger or loads stored ones."""

    def __init__(self, db: Database, classification: ClassificationMap):
        """Initialize balance sheet service.

        Args:
            db: Database instance
            classification: Classification map used to place accounts
        """
        self.db = db
        self.classification = classification
        self.calculator = BalanceSheetCalculator(classification)
        self.guv_calculator = GuVCalculator(classification)

    def compute_on_the_fly(
        self, company_id: int, fiscal_year: FiscalYear, only_posted: bool = True
    ) -> BalanceSheetSnapshot:
        """Compute from posted, non-closing line items, ignoring stored snapshots."""
        lines = self.db.fetch_posted_line_items(
            company_id,
            fiscal_year.id,
            exclude_entry_types=(EntryType.CLOSING,),
            exclude_account_prefix="9",
            only_posted=only_posted,
        )
        balances = aggregate_balances(lines)
        guv = self.guv_calculator.calculate(balances, fiscal_year=fiscal_year.year)
        return self.calculator.calculate(
            balances, guv, fiscal_year=fiscal_year.year, fiscal_year_id=fiscal_year.id
        )

    def calculate(
        self, company_id: int, fiscal_year: FiscalYear, only_posted: bool = True
    ) -> BalanceSheetSnapshot:
        """Return the balance sheet of a fiscal year, raising on errors.

        Closed years return their posted closing snapshot unchanged; legacy
        snapshots without GuV get it computed and merged in.
        """
        if fiscal_year.closed:
            stored = self.db.load_closing_snapshot(fiscal_year.id)
            if stored is not None:
                snapshot = BalanceSheetSnapshot.from_dict(stored.data)
                if snapshot.needs_guv_backfill:
                    logger.info("Backfilling GuV into stored closing balance sheet of %d", fiscal_year.year)
                    lines = self.db.fetch_posted_line_items(company_id, fiscal_year.id)
                    guv = self.guv_calculator.calculate(
                        aggregate_balances(lines), fiscal_year=fiscal_year.year
                    )
                    snapshot = snapshot.with_guv(guv)
                return snapshot
            logger.warning(
                "Closed fiscal year %d has no posted closing balance sheet, computing it", fiscal_year.year
            )
        return self.compute_on_the_fly(company_id, fiscal_year, only_posted)

    def compute(self, company_id: int, fiscal_year: FiscalYear, only_posted: bool = True) -> ServiceResult:
        """Compute the balance sheet of a fiscal year.

        Returns:
            ServiceResult with a BalanceSheetSnapshot as data
        """
        try:
            return ServiceResult.ok(self.calculate(company_id, fiscal_year, only_posted))
        except DomainError as e:
            logger.warning("Balance sheet computation for %s failed: %s", fiscal_year.year, e)
            return ServiceResult.from_error(e)
        except Exception as e:
            logger.exception("Unexpected error computing balance sheet for %s", fiscal_year.year)
            return ServiceResult.failure(str(e))
