"""Computed report results and their versioned serialization.

Snapshot dicts carry a ``schema_version``. Version 1 snapshots predate the
GuV block; they load with ``needs_guv_backfill`` set so the balance sheet
calculator can compute the GuV and merge it in.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Optional

from bilanzkit.domain.classification import DisplayType
from bilanzkit.domain.constants import (
    EQUITY_SECTION_RSID,
    NET_INCOME_CODE,
    ZERO,
    is_immaterial,
    net_income_label,
)
from bilanzkit.domain.entities import Side
from bilanzkit.domain.errors import ValidationError
from bilanzkit.domain.report_section import AccountRow, ReportSection

SCHEMA_VERSION = 2
LEGACY_SCHEMA_VERSION = 1


def _decimal(value: Any) -> Decimal:
    return Decimal(str(value)) if value is not None else ZERO


@dataclass(frozen=True)
class GuVAccountRow:
    """A P&L account; ``balance`` is credit minus debit (expenses negative)."""

    code: str
    name: str
    rsid: str
    balance: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "name": self.name, "rsid": self.rsid, "balance": str(self.balance)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GuVAccountRow":
        return cls(
            code=str(data["code"]),
            name=data.get("name", ""),
            rsid=data.get("rsid", ""),
            balance=_decimal(data["balance"]),
        )


@dataclass(frozen=True)
class GuVSection:
    """One § 275 HGB section.

    ``subtotal`` has the true accounting sign (credit minus debit).
    ``display_type`` only tells renderers which sign reads naturally.
    """

    key: str
    label: str
    display_type: DisplayType
    group: str = "operating"
    accounts: tuple[GuVAccountRow, ...] = ()

    @property
    def subtotal(self) -> Decimal:
        return sum((row.balance for row in self.accounts), ZERO)

    @property
    def display_subtotal(self) -> Decimal:
        return self.subtotal if self.display_type == DisplayType.POSITIVE else -self.subtotal

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "display_type": self.display_type.value,
            "group": self.group,
            "subtotal": str(self.subtotal),
            "accounts": [row.to_dict() for row in self.accounts],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GuVSection":
        return cls(
            key=data["key"],
            label=data.get("label", data["key"]),
            display_type=DisplayType(data.get("display_type", "negative")),
            group=data.get("group", "operating"),
            accounts=tuple(GuVAccountRow.from_dict(row) for row in data.get("accounts", ())),
        )


@dataclass(frozen=True)
class GuVSnapshot:
    """Profit and loss statement of a fiscal year."""

    sections: tuple[GuVSection, ...]
    fiscal_year: Optional[int] = None

    def _group_total(self, group: str) -> Decimal:
        return sum((s.subtotal for s in self.sections if s.group == group), ZERO)

    @property
    def net_income(self) -> Decimal:
        return sum((section.subtotal for section in self.sections), ZERO)

    @property
    def net_income_label(self) -> str:
        return net_income_label(self.net_income)

    @property
    def operating_result(self) -> Decimal:
        return self._group_total("operating")

    @property
    def financial_result(self) -> Decimal:
        return self._group_total("financial")

    @property
    def taxes(self) -> Decimal:
        return self._group_total("taxes")

    def section(self, key: str) -> Optional[GuVSection]:
        return next((s for s in self.sections if s.key == key), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "fiscal_year": self.fiscal_year,
            "sections": [section.to_dict() for section in self.sections],
            "operating_result": str(self.operating_result),
            "financial_result": str(self.financial_result),
            "taxes": str(self.taxes),
            "net_income": str(self.net_income),
            "net_income_label": self.net_income_label,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GuVSnapshot":
        return cls(
            sections=tuple(GuVSection.from_dict(s) for s in data.get("sections", ())),
            fiscal_year=data.get("fiscal_year"),
        )


@dataclass(frozen=True)
class SideSnapshot:
    """One side of the balance sheet."""

    sections: tuple[ReportSection, ...] = ()

    @property
    def total(self) -> Decimal:
        return sum((section.total for section in self.sections), ZERO)

    def accounts(self) -> list[AccountRow]:
        return [row for section in self.sections for row in section.flattened_accounts()]

    def to_dict(self) -> dict[str, Any]:
        return {
            "sections": [section.to_dict() for section in self.sections],
            "total": str(self.total),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SideSnapshot":
        return cls(sections=tuple(ReportSection.from_dict(s) for s in data.get("sections", ())))


@dataclass(frozen=True)
class BalanceSheetSnapshot:
    """Computed or stored balance sheet.

    Side totals are plain sums of the section totals; net income is contained
    once, as a pseudo row in the Eigenkapital section.
    """

    aktiva: SideSnapshot
    passiva: SideSnapshot
    fiscal_year: Optional[int] = None
    fiscal_year_id: Optional[int] = None
    guv: Optional[GuVSnapshot] = None
    schema_version: int = SCHEMA_VERSION
    needs_guv_backfill: bool = field(default=False, compare=False)

    @property
    def aktiva_total(self) -> Decimal:
        return self.aktiva.total

    @property
    def passiva_total(self) -> Decimal:
        return self.passiva.total

    @property
    def difference(self) -> Decimal:
        return self.aktiva_total - self.passiva_total

    @property
    def balanced(self) -> bool:
        return is_immaterial(self.difference)

    def side(self, side: Side) -> SideSnapshot:
        return self.aktiva if Side(side) == Side.AKTIVA else self.passiva

    def net_income_row(self) -> Optional[AccountRow]:
        """Return the net income pseudo row, if present."""
        return next((row for row in self.passiva.accounts() if row.code == NET_INCOME_CODE), None)

    @property
    def net_income(self) -> Decimal:
        row = self.net_income_row()
        if row is not None:
            return row.balance
        return self.guv.net_income if self.guv is not None else ZERO

    def equity_section(self) -> Optional[ReportSection]:
        for section in self.passiva.sections:
            found = section.find_section(EQUITY_SECTION_RSID)
            if found is not None:
                return found
        return None

    def with_guv(self, guv: GuVSnapshot) -> "BalanceSheetSnapshot":
        """Return a copy with GuV data merged in; Aktiva and Passiva are kept."""
        return replace(self, guv=guv, needs_guv_backfill=False)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "schema_version": SCHEMA_VERSION,
            "fiscal_year": self.fiscal_year,
            "fiscal_year_id": self.fiscal_year_id,
            "aktiva": self.aktiva.to_dict(),
            "passiva": self.passiva.to_dict(),
            "balanced": self.balanced,
            "difference": str(self.difference),
        }
        if self.guv is not None:
            data["guv"] = self.guv.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BalanceSheetSnapshot":
        """Load a stored snapshot.

        Raises:
            ValidationError: If the document is malformed or of an unknown version
        """
        if not isinstance(data, dict):
            raise ValidationError("Balance sheet data must be an object")
        version = int(data.get("schema_version", LEGACY_SCHEMA_VERSION))
        if version not in (LEGACY_SCHEMA_VERSION, SCHEMA_VERSION):
            raise ValidationError(f"Unsupported balance sheet schema version {version}")

        try:
            aktiva = SideSnapshot.from_dict(data["aktiva"])
            passiva = SideSnapshot.from_dict(data["passiva"])
            guv = GuVSnapshot.from_dict(data["guv"]) if data.get("guv") else None
        except (KeyError, TypeError, ArithmeticError, ValueError) as e:
            raise ValidationError(f"Malformed balance sheet data: {e}")

        return cls(
            aktiva=aktiva,
            passiva=passiva,
            fiscal_year=data.get("fiscal_year"),
            fiscal_year_id=data.get("fiscal_year_id"),
            guv=guv,
            schema_version=SCHEMA_VERSION,
            needs_guv_backfill=guv is None,
        )
