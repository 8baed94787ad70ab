"""Presentation rules (Bilanzierungsregeln).

A presentation rule decides where an account balance appears on the balance
sheet, independent of the account's semantic report section. Most accounts have
a fixed position; some flip between Aktiva and Passiva with the direction of
their balance:

- S-Saldo (Soll-Saldo): debit balance
- H-Saldo (Haben-Saldo): credit balance

Typical bidirectional accounts are receivables that can turn into payables,
bank accounts that can be overdrawn, and tax accounts that can be claims or
liabilities.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from bilanzkit.domain.constants import AKTIVA_PREFIX, is_immaterial
from bilanzkit.domain.entities import AccountType, Side


class RuleKind(str, Enum):
    """Closed set of rule variants."""

    ASSET_ONLY = "asset_only"
    LIABILITY_ONLY = "liability_only"
    EQUITY_ONLY = "equity_only"
    PNL_ONLY = "pnl_only"
    BIDIRECTIONAL = "bidirectional"


@dataclass(frozen=True)
class PresentationRule:
    """A named rule; bidirectional rules carry the RSID for each saldo."""

    name: str
    kind: RuleKind
    label: str
    debit_rsid: Optional[str] = None
    credit_rsid: Optional[str] = None

    @property
    def bidirectional(self) -> bool:
        return self.kind == RuleKind.BIDIRECTIONAL


@dataclass(frozen=True)
class ResolvedPosition:
    """Where an account lands on the balance sheet.

    ``balance`` is the absolute net amount. ``side_balance`` is signed relative
    to the side: negative when a fixed-position account runs against the normal
    direction of its side (e.g. a Verlustvortrag with a debit balance on Passiva).
    """

    rsid: str
    side: Side
    balance: Decimal
    is_debit_balance: bool

    @property
    def side_balance(self) -> Decimal:
        debit_normal = self.side == Side.AKTIVA
        return self.balance if debit_normal == self.is_debit_balance else -self.balance


class Rsids:
    """Balance sheet positions targeted by the bidirectional rules."""

    FORDERUNGEN_LL = "b.aktiva.umlaufvermoegen.forderungen_und_sonstige_vermoegensgegenstaende.forderungen_aus_lieferungen_und_leistungen"
    FORDERUNGEN_VERBUNDENE = "b.aktiva.umlaufvermoegen.forderungen_und_sonstige_vermoegensgegenstaende.forderungen_gegen_verbundene_unternehmen"
    SONSTIGE_VERMOEGENSGEGENSTAENDE = "b.aktiva.umlaufvermoegen.forderungen_und_sonstige_vermoegensgegenstaende.sonstige_vermoegensgegenstaende"
    LIQUIDE_MITTEL = "b.aktiva.umlaufvermoegen.liquide_mittel"

    VERBINDLICHKEITEN_KREDITINSTITUTE = "b.passiva.verbindlichkeiten.verbindlichkeiten_gegenueber_kreditinstituten"
    VERBINDLICHKEITEN_LL = "b.passiva.verbindlichkeiten.verbindlichkeiten_aus_lieferungen_und_leistungen"
    VERBINDLICHKEITEN_VERBUNDENE = "b.passiva.verbindlichkeiten.verbindlichkeiten_gegenueber_verbundenen_unternehmen"
    SONSTIGE_VERBINDLICHKEITEN = "b.passiva.verbindlichkeiten.sonstige_verbindlichkeiten"


def _rule(name, kind, label, debit_rsid=None, credit_rsid=None) -> PresentationRule:
    return PresentationRule(
        name=name, kind=kind, label=label, debit_rsid=debit_rsid, credit_rsid=credit_rsid
    )


PRESENTATION_RULES: dict[str, PresentationRule] = {
    rule.name: rule
    for rule in (
        _rule("asset_only", RuleKind.ASSET_ONLY, "Nur Aktiva"),
        _rule("liability_only", RuleKind.LIABILITY_ONLY, "Nur Passiva"),
        _rule("equity_only", RuleKind.EQUITY_ONLY, "Nur Eigenkapital"),
        _rule("pnl_only", RuleKind.PNL_ONLY, "Nur GuV"),
        _rule(
            "fll_standard",
            RuleKind.BIDIRECTIONAL,
            "Forderungen L&L Standard",
            Rsids.FORDERUNGEN_LL,
            Rsids.SONSTIGE_VERBINDLICHKEITEN,
        ),
        _rule(
            "vll_standard",
            RuleKind.BIDIRECTIONAL,
            "Verbindlichkeiten L&L Standard",
            Rsids.SONSTIGE_VERMOEGENSGEGENSTAENDE,
            Rsids.VERBINDLICHKEITEN_LL,
        ),
        _rule(
            "bank_bidirectional",
            RuleKind.BIDIRECTIONAL,
            "Bankkonten bidirektional",
            Rsids.LIQUIDE_MITTEL,
            Rsids.VERBINDLICHKEITEN_KREDITINSTITUTE,
        ),
        _rule(
            "tax_standard",
            RuleKind.BIDIRECTIONAL,
            "Steuerforderung/-schuld",
            Rsids.SONSTIGE_VERMOEGENSGEGENSTAENDE,
            Rsids.SONSTIGE_VERBINDLICHKEITEN,
        ),
        _rule(
            "receivable_affiliated",
            RuleKind.BIDIRECTIONAL,
            "Forderungen gg. verbundene Unternehmen",
            Rsids.FORDERUNGEN_VERBUNDENE,
            Rsids.VERBINDLICHKEITEN_VERBUNDENE,
        ),
        _rule(
            "payable_affiliated",
            RuleKind.BIDIRECTIONAL,
            "Verbindlichkeiten gg. verbundene Unternehmen",
            Rsids.FORDERUNGEN_VERBUNDENE,
            Rsids.VERBINDLICHKEITEN_VERBUNDENE,
        ),
    )
}

_DEFAULT_RULES = {
    AccountType.ASSET: "asset_only",
    AccountType.LIABILITY: "liability_only",
    AccountType.EQUITY: "equity_only",
    AccountType.REVENUE: "pnl_only",
    AccountType.EXPENSE: "pnl_only",
}


def get_rule(name: Optional[str]) -> Optional[PresentationRule]:
    """Look up a rule by identifier; None for unknown or empty names."""
    if not name:
        return None
    return PRESENTATION_RULES.get(name)


def infer_rule(account_type: AccountType) -> PresentationRule:
    """Infer the fixed default rule from the account type.

    Revenue and expense accounts always map to ``pnl_only`` and therefore never
    reach the balance sheet.
    """
    try:
        return PRESENTATION_RULES[_DEFAULT_RULES[AccountType(account_type)]]
    except (KeyError, ValueError):
        raise ValueError(f"Cannot infer presentation rule for account type '{account_type}'")


def side_for_rsid(rsid: str) -> Side:
    """Return the balance sheet side an RSID belongs to."""
    return Side.AKTIVA if rsid.startswith(AKTIVA_PREFIX) else Side.PASSIVA


def apply_rule(
    rule: PresentationRule,
    total_debit: Decimal,
    total_credit: Decimal,
    semantic_rsid: str,
) -> Optional[ResolvedPosition]:
    """Resolve the balance sheet position of an account.

    Args:
        rule: Presentation rule of the account
        total_debit: Sum of posted debits
        total_credit: Sum of posted credits
        semantic_rsid: The account's own report section (fallback position)

    Returns:
        ResolvedPosition, or None for zero balances and P&L accounts
    """
    net_balance = total_debit - total_credit
    if is_immaterial(net_balance):
        return None

    if rule.kind == RuleKind.PNL_ONLY:
        return None

    is_debit_balance = net_balance > 0

    if rule.kind == RuleKind.BIDIRECTIONAL:
        slot = rule.debit_rsid if is_debit_balance else rule.credit_rsid
        resolved_rsid = slot or semantic_rsid
    elif rule.kind in (RuleKind.ASSET_ONLY, RuleKind.LIABILITY_ONLY, RuleKind.EQUITY_ONLY):
        resolved_rsid = semantic_rsid
    else:
        raise ValueError(f"Unhandled presentation rule kind: {rule.kind}")

    return ResolvedPosition(
        rsid=resolved_rsid,
        side=side_for_rsid(resolved_rsid),
        balance=abs(net_balance),
        is_debit_balance=is_debit_balance,
    )
