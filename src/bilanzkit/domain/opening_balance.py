"""Opening balance creator (Eröffnungsbilanz, EBK).

Books a balance sheet into a fiscal year as one opening journal entry.
Every account row is booked against the clearing account 9000, so the entry
balances by construction. A net income carried forward from the previous
year goes to Gewinnvortrag (0860) or Verlustvortrag (0868).
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, UTC
from typing import Any, Optional, Union

from bilanzkit.database.base import Database
from bilanzkit.domain.classification import ClassificationMap
from bilanzkit.domain.constants import (
    CLEARING_ACCOUNT_CODE,
    LOSS_CARRYFORWARD_CODE,
    NET_INCOME_CODE,
    PROFIT_CARRYFORWARD_CODE,
    ZERO,
    is_immaterial,
)
from bilanzkit.domain.entities import (
    BalanceSheetSource,
    Direction,
    EntryType,
    FiscalYear,
    PostingLine,
    SheetType,
)
from bilanzkit.domain.errors import (
    DomainError,
    PreconditionError,
    ValidationError,
    fiscal_year_already_closed,
    opening_balance_exists,
    unbalanced_sheet,
)
from bilanzkit.domain.journal import JournalService
from bilanzkit.domain.results import ServiceResult
from bilanzkit.domain.snapshot import BalanceSheetSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpeningBalanceResult:
    """Artifacts written by an opening balance."""

    fiscal_year_id: int
    journal_entry_id: int
    balance_sheet_id: int
    source: BalanceSheetSource


def clearing_entry_lines(
    snapshot: BalanceSheetSnapshot, closing: bool = False
) -> list[PostingLine]:
    """Build the line items of an opening (EBK) or closing (SBK) entry.

    Opening: Aktiva rows are debited, Passiva rows credited; negative rows
    take the other side. Closing mirrors every row. The clearing account
    9000 takes the balancing amounts, one credit and one debit line.

    The net income pseudo row is never booked to its own account. An opening
    entry books it to Gewinnvortrag/Verlustvortrag; a closing entry skips it.
    """
    lines: list[PostingLine] = []

    def book(code: str, amount, debit: bool) -> None:
        if closing:
            debit = not debit
        lines.append(
            PostingLine(
                account_code=code,
                amount=abs(amount),
                direction=Direction.DEBIT if debit else Direction.CREDIT,
            )
        )

    for row in snapshot.aktiva.accounts():
        if row.code == NET_INCOME_CODE or is_immaterial(row.balance):
            continue
        book(row.code, row.balance, debit=row.balance > 0)

    for row in snapshot.passiva.accounts():
        if row.code == NET_INCOME_CODE or is_immaterial(row.balance):
            continue
        book(row.code, row.balance, debit=row.balance < 0)

    net_income_row = snapshot.net_income_row()
    if not closing and net_income_row is not None and not is_immaterial(net_income_row.balance):
        net_income = net_income_row.balance
        if net_income > 0:
            book(PROFIT_CARRYFORWARD_CODE, net_income, debit=False)
        else:
            book(LOSS_CARRYFORWARD_CODE, net_income, debit=True)

    account_debits = sum((l.amount for l in lines if l.direction == Direction.DEBIT), ZERO)
    account_credits = sum((l.amount for l in lines if l.direction == Direction.CREDIT), ZERO)
    if not is_immaterial(account_debits):
        lines.append(PostingLine(CLEARING_ACCOUNT_CODE, account_debits, Direction.CREDIT))
    if not is_immaterial(account_credits):
        lines.append(PostingLine(CLEARING_ACCOUNT_CODE, account_credits, Direction.DEBIT))
    return lines


class OpeningBalanceService:
    """Creates and posts opening balances."""

    def __init__(self, db: Database, classification: ClassificationMap):
        """Initialize opening balance service.

        Args:
            db: Database instance
            classification: Classification map (used to read manual balance sheet data)
        """
        self.db = db
        self.classification = classification
        self.journal = JournalService(db)

    def _as_snapshot(self, balance_sheet_data: Union[BalanceSheetSnapshot, dict[str, Any]]) -> BalanceSheetSnapshot:
        if isinstance(balance_sheet_data, BalanceSheetSnapshot):
            return balance_sheet_data
        if not balance_sheet_data:
            raise ValidationError("Balance sheet data is required")
        return BalanceSheetSnapshot.from_dict(balance_sheet_data)

    def create_within_transaction(
        self,
        fiscal_year: FiscalYear,
        snapshot: BalanceSheetSnapshot,
        source: BalanceSheetSource,
        posted_at: Optional[datetime] = None,
    ) -> OpeningBalanceResult:
        """Write and post the opening balance; the caller owns the transaction.

        Raises:
            PreconditionError: If the year is closed or already has an opening balance
            ValidationError: If the balance sheet does not balance
            MissingReferenceError: If an account can neither be found nor provisioned
        """
        fiscal_year = self.db.lock_fiscal_year(fiscal_year.id)
        if fiscal_year.closed:
            raise PreconditionError(fiscal_year_already_closed(fiscal_year.year))
        if fiscal_year.opening_balance_posted:
            raise PreconditionError(opening_balance_exists(fiscal_year.year))
        if not snapshot.balanced:
            raise ValidationError(unbalanced_sheet(snapshot.aktiva_total, snapshot.passiva_total))

        lines = clearing_entry_lines(snapshot)
        if not lines:
            raise ValidationError("Balance sheet data contains no account balances")

        entry_id = self.journal.create_entry(
            company_id=fiscal_year.company_id,
            fiscal_year_id=fiscal_year.id,
            booking_date=fiscal_year.start_date,
            description=f"Eröffnungsbilanz {fiscal_year.year}",
            lines=lines,
            entry_type=EntryType.OPENING,
            provision_accounts=True,
        )
        stored = replace(snapshot, fiscal_year=fiscal_year.year, fiscal_year_id=fiscal_year.id)
        balance_sheet_id = self.db.save_balance_sheet(
            fiscal_year_id=fiscal_year.id,
            sheet_type=SheetType.OPENING,
            source=BalanceSheetSource(source),
            balance_date=fiscal_year.start_date,
            data=stored.to_dict(),
        )

        posted_at = posted_at or datetime.now(UTC)
        self.journal.post_entry(entry_id, posted_at)
        self.db.post_balance_sheet(balance_sheet_id, posted_at)
        self.db.mark_opening_balance_posted(fiscal_year.id, posted_at)

        return OpeningBalanceResult(
            fiscal_year_id=fiscal_year.id,
            journal_entry_id=entry_id,
            balance_sheet_id=balance_sheet_id,
            source=BalanceSheetSource(source),
        )

    def create(
        self,
        fiscal_year: FiscalYear,
        balance_sheet_data: Union[BalanceSheetSnapshot, dict[str, Any]],
        source: BalanceSheetSource = BalanceSheetSource.MANUAL,
    ) -> ServiceResult:
        """Create, post and record the opening balance of a fiscal year.

        Runs as one transaction; nothing is written on failure.

        Args:
            fiscal_year: Fiscal year to open
            balance_sheet_data: Snapshot or snapshot dict with Aktiva and Passiva
            source: manual or carryforward

        Returns:
            ServiceResult with an OpeningBalanceResult as data
        """
        try:
            snapshot = self._as_snapshot(balance_sheet_data)
            with self.db.transaction():
                result = self.create_within_transaction(fiscal_year, snapshot, BalanceSheetSource(source))
        except DomainError as e:
            logger.warning("Opening balance for %s refused: %s", fiscal_year.year, e)
            return ServiceResult.from_error(e)
        except Exception as e:
            logger.exception("Unexpected error creating opening balance for %s", fiscal_year.year)
            return ServiceResult.failure(f"Error creating opening balance: {e}")

        logger.info(
            "Posted opening balance for %d (journal entry %d, balance sheet %d)",
            fiscal_year.year,
            result.journal_entry_id,
            result.balance_sheet_id,
        )
        return ServiceResult.ok(result)

    def previous_closing(self, fiscal_year: FiscalYear) -> BalanceSheetSnapshot:
        """Return the posted closing snapshot of the year before.

        Raises:
            PreconditionError: If that year is missing, open or has no posted closing balance sheet
        """
        previous = self.db.get_fiscal_year_by_year(fiscal_year.company_id, fiscal_year.year - 1)
        if previous is None or not previous.closed:
            raise PreconditionError(
                f"Fiscal year {fiscal_year.year - 1} must be closed before carrying it forward"
            )
        stored = self.db.load_closing_snapshot(previous.id)
        if stored is None:
            raise PreconditionError(f"Fiscal year {previous.year} has no posted closing balance sheet")
        return BalanceSheetSnapshot.from_dict(stored.data)

    def carry_forward(self, fiscal_year: FiscalYear) -> ServiceResult:
        """Open a fiscal year from the posted closing balance of the year before.

        Used when the previous year was closed without carrying its balance
        forward, or was imported with its closing balance sheet only.

        Returns:
            ServiceResult with an OpeningBalanceResult as data
        """
        try:
            snapshot = self.previous_closing(fiscal_year)
        except DomainError as e:
            logger.warning("Carryforward into %s refused: %s", fiscal_year.year, e)
            return ServiceResult.from_error(e)
        return self.create(fiscal_year, snapshot, source=BalanceSheetSource.CARRYFORWARD)
