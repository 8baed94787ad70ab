"""Aggregation of posted line items into account balances."""

from collections import OrderedDict
from typing import Iterable

from bilanzkit.domain.constants import ZERO
from bilanzkit.domain.entities import AccountBalance, Direction, LedgerLine


def aggregate_balances(lines: Iterable[LedgerLine]) -> list[AccountBalance]:
    """Sum debits and credits per account code.

    Returns balances ordered by account code.
    """
    totals: "OrderedDict[str, dict]" = OrderedDict()
    for line in lines:
        entry = totals.setdefault(
            line.account_code,
            {
                "name": line.account_name,
                "account_type": line.account_type,
                "presentation_rule": line.presentation_rule,
                "debit": ZERO,
                "credit": ZERO,
            },
        )
        if Direction(line.direction) == Direction.DEBIT:
            entry["debit"] += line.amount
        else:
            entry["credit"] += line.amount

    return [
        AccountBalance(
            code=code,
            name=entry["name"],
            account_type=entry["account_type"],
            total_debit=entry["debit"],
            total_credit=entry["credit"],
            presentation_rule=entry["presentation_rule"],
        )
        for code, entry in sorted(totals.items())
    ]
