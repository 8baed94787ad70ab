"""Hierarchical report sections of the balance sheet.

Sections are immutable. A tree is built bottom-up from the flat list of
resolved account rows and a section template; changes return new nodes.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Iterator, Optional, Sequence

from bilanzkit.domain.classification import SectionTemplate, rsid_matches
from bilanzkit.domain.constants import ZERO, is_immaterial


@dataclass(frozen=True)
class AccountRow:
    """An account as shown in a report section.

    ``balance`` is signed relative to the side of the section: negative when the
    account runs against the side's normal direction.
    """

    code: str
    name: str
    balance: Decimal
    rsid: str
    is_debit_balance: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "balance": str(self.balance),
            "rsid": self.rsid,
            "is_debit_balance": self.is_debit_balance,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccountRow":
        return cls(
            code=str(data["code"]),
            name=data.get("name", ""),
            balance=Decimal(str(data["balance"])),
            rsid=data.get("rsid", ""),
            is_debit_balance=bool(data.get("is_debit_balance", True)),
        )


@dataclass(frozen=True)
class ReportSection:
    """Node of a report section tree.

    Invariant: ``total == sum(own account balances) + sum(child totals)``.
    """

    key: str
    display_name: str
    level: int
    rsid: str
    accounts: tuple[AccountRow, ...] = ()
    children: tuple["ReportSection", ...] = ()

    @property
    def own_total(self) -> Decimal:
        return sum((row.balance for row in self.accounts), ZERO)

    @property
    def total(self) -> Decimal:
        return self.own_total + sum((child.total for child in self.children), ZERO)

    @property
    def account_count(self) -> int:
        return len(self.accounts)

    @property
    def total_account_count(self) -> int:
        return self.account_count + sum(child.total_account_count for child in self.children)

    @property
    def is_empty(self) -> bool:
        """True if the section has no accounts and no material total."""
        return self.total_account_count == 0 and is_immaterial(self.total)

    def flattened_accounts(self) -> Iterator[AccountRow]:
        """Yield all account rows of the subtree, parents first."""
        yield from self.accounts
        for child in self.children:
            yield from child.flattened_accounts()

    def find_section(self, rsid: str) -> Optional["ReportSection"]:
        """Return the section with the given RSID in this subtree."""
        if self.rsid == rsid:
            return self
        for child in self.children:
            if rsid_matches(child.rsid, rsid):
                return child.find_section(rsid)
        return None

    def with_account(self, row: AccountRow, rsid: Optional[str] = None) -> "ReportSection":
        """Return a copy of the tree with ``row`` added.

        The row goes to the deepest existing section containing ``rsid``
        (default: the row's own RSID).
        """
        target = rsid or row.rsid
        for index, child in enumerate(self.children):
            if rsid_matches(child.rsid, target):
                children = list(self.children)
                children[index] = child.with_account(row, target)
                return replace(self, children=tuple(children))
        return replace(self, accounts=self.accounts + (row,))

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "name": self.display_name,
            "level": self.level,
            "rsid": self.rsid,
            "total": str(self.total),
            "account_count": self.total_account_count,
            "accounts": [row.to_dict() for row in self.accounts],
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReportSection":
        return cls(
            key=data["key"],
            display_name=data.get("name", data["key"]),
            level=int(data.get("level", 1)),
            rsid=data.get("rsid", data["key"]),
            accounts=tuple(AccountRow.from_dict(row) for row in data.get("accounts", ())),
            children=tuple(cls.from_dict(child) for child in data.get("children", ())),
        )


def build_section(
    rows: Sequence[AccountRow], template: SectionTemplate, level: int = 1
) -> ReportSection:
    """Partition account rows into the template below ``template``.

    Each row is placed at the deepest template node whose RSID contains the
    row's RSID. Rows outside the template are ignored. Child sections without
    rows are left out; the returned root is always present.
    """
    own: list[AccountRow] = []
    by_child: dict[str, list[AccountRow]] = {child.key: [] for child in template.children}

    for row in rows:
        if not rsid_matches(template.rsid, row.rsid):
            continue
        for child in template.children:
            if rsid_matches(child.rsid, row.rsid):
                by_child[child.key].append(row)
                break
        else:
            own.append(row)

    children = tuple(
        build_section(by_child[child.key], child, level + 1)
        for child in template.children
        if by_child[child.key]
    )
    return ReportSection(
        key=template.key,
        display_name=template.name,
        level=level,
        rsid=template.rsid,
        accounts=tuple(sorted(own, key=lambda row: row.code)),
        children=children,
    )
