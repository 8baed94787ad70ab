"""Accounting constants and money helpers shared across the engine."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

# Amounts below this are treated as zero (one cent)
EPSILON = Decimal("0.01")
CENT = Decimal("0.01")
ZERO = Decimal("0")

# SKR03 system accounts
CLEARING_ACCOUNT_CODE = "9000"  # Saldenvorträge, Sachkonten (EBK/SBK)
SYSTEM_ACCOUNT_PREFIX = "9"
PROFIT_CARRYFORWARD_CODE = "0860"  # Gewinnvortrag vor Verwendung
LOSS_CARRYFORWARD_CODE = "0868"  # Verlustvortrag vor Verwendung

# Code of the synthetic net income row inside Eigenkapital
NET_INCOME_CODE = "net_income"
NET_INCOME_PROFIT_LABEL = "Jahresüberschuss"
NET_INCOME_LOSS_LABEL = "Jahresfehlbetrag"

# RSID prefixes
BALANCE_SHEET_PREFIX = "b"
AKTIVA_PREFIX = "b.aktiva"
PASSIVA_PREFIX = "b.passiva"
GUV_PREFIX = "g"
EQUITY_SECTION_RSID = "b.passiva.eigenkapital"

# Journal entry sequence ranges (inclusive)
OPENING_SEQUENCE_RANGE = (0, 999)
NORMAL_SEQUENCE_RANGE = (1000, 8999)
CLOSING_SEQUENCE_RANGE = (9000, 9999)

Number = Union[Decimal, int, float, str]


def to_money(value: Number) -> Decimal:
    """Convert a number to a Decimal rounded to cents.

    Floats are converted through their string form so 0.1 stays 0.10.
    """
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def is_immaterial(amount: Decimal) -> bool:
    """Return True if the amount is below the materiality epsilon."""
    return abs(amount) < EPSILON


def is_system_account(code: str) -> bool:
    """Return True for 9xxx closing and carryforward accounts."""
    return code.startswith(SYSTEM_ACCOUNT_PREFIX)


def net_income_label(net_income: Decimal) -> str:
    """Return the German label for a net income figure."""
    return NET_INCOME_PROFIT_LABEL if net_income >= 0 else NET_INCOME_LOSS_LABEL
