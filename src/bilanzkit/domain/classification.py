"""Classification map: account code -> report section and presentation rule.

The map is an immutable value built once from a classification table and
passed to the calculators that need it. Tables are validated while loading;
any inconsistency raises ClassificationError.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence

from bilanzkit.domain.constants import AKTIVA_PREFIX, EQUITY_SECTION_RSID, GUV_PREFIX, PASSIVA_PREFIX
from bilanzkit.domain.entities import AccountBalance, AccountType, Side
from bilanzkit.domain.errors import ClassificationError
from bilanzkit.domain.presentation import (
    PresentationRule,
    ResolvedPosition,
    RuleKind,
    apply_rule,
    get_rule,
    infer_rule,
)

logger = logging.getLogger(__name__)

MIN_CODE_LENGTH = 4
MAX_CODE_LENGTH = 5


def rsid_matches(prefix: str, rsid: str) -> bool:
    """Return True if ``rsid`` equals ``prefix`` or lies below it."""
    return rsid == prefix or rsid.startswith(prefix + ".")


@dataclass(frozen=True)
class AccountClassification:
    """Classification entry of a single account code."""

    code: str
    rsid: str
    presentation_rule: Optional[PresentationRule] = None


@dataclass(frozen=True)
class SectionTemplate:
    """Node of the static balance sheet structure."""

    key: str
    name: str
    rsid: str
    children: tuple["SectionTemplate", ...] = ()

    def walk(self) -> Iterator["SectionTemplate"]:
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


class DisplayType(str, Enum):
    """Sign convention used when rendering a GuV section."""

    POSITIVE = "positive"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class GuVSectionDefinition:
    """A § 275 HGB section and the GuV RSIDs it collects."""

    key: str
    label: str
    rsids: tuple[str, ...]
    display_type: DisplayType
    group: str = "operating"

    def matches(self, rsid: str) -> bool:
        return any(rsid_matches(prefix, rsid) for prefix in self.rsids)


def expand_code_range(codes: str) -> list[str]:
    """Expand range notation into single codes.

    ``"4000-4999"`` yields 1000 codes, ``"1576"`` yields itself. Codes keep the
    width of the range bounds (``"0010-0012"`` -> ``0010``, ``0011``, ``0012``).

    Raises:
        ClassificationError: If the notation is malformed
    """
    parts = [part.strip() for part in str(codes).split("-")]
    if len(parts) == 1:
        parts = parts * 2
    if len(parts) != 2:
        raise ClassificationError(f"Malformed code range '{codes}'")

    start, end = parts
    for bound in (start, end):
        if not bound.isdigit() or not MIN_CODE_LENGTH <= len(bound) <= MAX_CODE_LENGTH:
            raise ClassificationError(
                f"Malformed account code '{bound}' in '{codes}' (expected 4-5 digits)"
            )
    if len(start) != len(end):
        raise ClassificationError(f"Range bounds of '{codes}' differ in length")
    if int(start) > int(end):
        raise ClassificationError(f"Range '{codes}' is descending")

    width = len(start)
    return [str(number).zfill(width) for number in range(int(start), int(end) + 1)]


def _template_from_dict(node: Mapping[str, Any], parent_rsid: str) -> SectionTemplate:
    try:
        key = node["key"]
        name = node["name"]
    except KeyError as e:
        raise ClassificationError(f"Section template below '{parent_rsid}' lacks {e}")
    rsid = f"{parent_rsid}.{key}"
    children = tuple(_template_from_dict(child, rsid) for child in node.get("children", ()))
    return SectionTemplate(key=key, name=name, rsid=rsid, children=children)


def _template_to_dict(template: SectionTemplate) -> dict[str, Any]:
    data: dict[str, Any] = {"key": template.key, "name": template.name}
    if template.children:
        data["children"] = [_template_to_dict(child) for child in template.children]
    return data


class ClassificationMap:
    """Read-only lookup from account codes to classifications.

    Also owns the balance sheet template tree, the GuV section definitions and
    the per-type default positions used for unclassified accounts.
    """

    def __init__(
        self,
        classifications: Mapping[str, AccountClassification],
        balance_sheet: Sequence[SectionTemplate],
        guv_sections: Sequence[GuVSectionDefinition],
        default_rsids: Mapping[AccountType, str],
    ):
        self._classifications = MappingProxyType(dict(classifications))
        self._balance_sheet = {side: None for side in Side}
        for root in balance_sheet:
            try:
                side = Side(root.key)
            except ValueError:
                raise ClassificationError(
                    f"Unknown balance sheet root '{root.key}' (expected aktiva or passiva)"
                )
            self._balance_sheet[side] = root
        self._guv_sections = tuple(guv_sections)
        self._default_rsids = MappingProxyType(
            {AccountType(t): rsid for t, rsid in default_rsids.items()}
        )
        self._templates = {
            node.rsid: node
            for root in self._balance_sheet.values()
            if root is not None
            for node in root.walk()
        }
        self._validate()

    def _validate(self) -> None:
        for side, root in self._balance_sheet.items():
            if root is None:
                raise ClassificationError(f"Balance sheet template lacks the {side.value} side")
        if EQUITY_SECTION_RSID not in self._templates:
            raise ClassificationError(f"Balance sheet template lacks '{EQUITY_SECTION_RSID}'")

        for account_type in AccountType:
            if account_type not in self._default_rsids:
                raise ClassificationError(f"No default position for account type '{account_type.value}'")
        for rsid in self._default_rsids.values():
            self._check_rsid(rsid, "default position")

        for account_type in (AccountType.REVENUE, AccountType.EXPENSE):
            if self.guv_section_for(self._default_rsids[account_type]) is None:
                raise ClassificationError(
                    f"No GuV section for default position '{self._default_rsids[account_type]}'"
                )

        for classification in self._classifications.values():
            self._check_rsid(classification.rsid, f"account {classification.code}")
            if rsid_matches(GUV_PREFIX, classification.rsid) and self.guv_section_for(classification.rsid) is None:
                raise ClassificationError(
                    f"No GuV section for '{classification.rsid}' (account {classification.code})"
                )
            rule = classification.presentation_rule
            if rule is not None and rule.bidirectional:
                for slot in (rule.debit_rsid, rule.credit_rsid):
                    if slot is not None:
                        self._check_rsid(slot, f"rule {rule.name}")

    def _check_rsid(self, rsid: str, owner: str) -> None:
        if rsid_matches(GUV_PREFIX, rsid):
            return
        if not (rsid_matches(AKTIVA_PREFIX, rsid) or rsid_matches(PASSIVA_PREFIX, rsid)):
            raise ClassificationError(f"Invalid report section '{rsid}' for {owner}")
        template = self.find_template(rsid)
        if template is None or template.rsid in (AKTIVA_PREFIX, PASSIVA_PREFIX):
            raise ClassificationError(f"No balance sheet section for '{rsid}' ({owner})")

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[Mapping[str, Any]],
        balance_sheet: Sequence[SectionTemplate],
        guv_sections: Sequence[GuVSectionDefinition],
        default_rsids: Mapping[Any, str],
    ) -> "ClassificationMap":
        """Build a map from range entries (``codes``, ``rsid``, ``presentation_rule``).

        Raises:
            ClassificationError: On malformed codes, unknown rules or overlapping ranges
        """
        classifications: dict[str, AccountClassification] = {}
        origin: dict[str, str] = {}
        for entry in entries:
            try:
                codes = entry["codes"]
                rsid = entry["rsid"]
            except KeyError as e:
                raise ClassificationError(f"Classification entry {dict(entry)} lacks {e}")

            rule_name = entry.get("presentation_rule")
            rule = get_rule(rule_name)
            if rule_name and rule is None:
                raise ClassificationError(f"Unknown presentation rule '{rule_name}' for '{codes}'")

            for code in expand_code_range(codes):
                if code in classifications:
                    raise ClassificationError(
                        f"Overlapping classification ranges '{origin[code]}' and '{codes}' (code {code})"
                    )
                classifications[code] = AccountClassification(
                    code=code, rsid=rsid, presentation_rule=rule
                )
                origin[code] = codes

        return cls(classifications, balance_sheet, guv_sections, default_rsids)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClassificationMap":
        """Build a map from a classification table document."""
        try:
            balance_sheet = [
                _template_from_dict(root, "b") for root in data["balance_sheet"]
            ]
            guv_sections = [
                GuVSectionDefinition(
                    key=section["key"],
                    label=section["label"],
                    rsids=tuple(section["rsids"]),
                    display_type=DisplayType(section.get("display_type", "negative")),
                    group=section.get("group", "operating"),
                )
                for section in data["guv_sections"]
            ]
            entries = data["classifications"]
            default_rsids = data["default_rsids"]
        except (KeyError, TypeError, ValueError) as e:
            raise ClassificationError(f"Malformed classification table: {e}")

        try:
            return cls.from_entries(entries, balance_sheet, guv_sections, default_rsids)
        except ValueError as e:
            raise ClassificationError(f"Malformed classification table: {e}")

    @classmethod
    def from_json(cls, path: str | Path) -> "ClassificationMap":
        """Load a generated JSON classification table."""
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ClassificationError(f"Cannot read classification table {path}: {e}")
        classification_map = cls.from_dict(data)
        logger.info("Loaded %d account classifications from %s", len(classification_map), path)
        return classification_map

    @classmethod
    def default(cls) -> "ClassificationMap":
        """Build the map from the bundled SKR03 table."""
        from bilanzkit.domain.skr03 import SKR03_TABLE

        return cls.from_dict(SKR03_TABLE)

    def __len__(self) -> int:
        return len(self._classifications)

    def __contains__(self, code: str) -> bool:
        return code in self._classifications

    def lookup(self, code: str) -> Optional[AccountClassification]:
        """Return the classification of an account code, or None."""
        return self._classifications.get(code)

    @property
    def guv_sections(self) -> tuple[GuVSectionDefinition, ...]:
        return self._guv_sections

    def guv_section_for(self, rsid: str) -> Optional[GuVSectionDefinition]:
        """Return the first GuV section collecting ``rsid``."""
        return next((section for section in self._guv_sections if section.matches(rsid)), None)

    def side_template(self, side: Side) -> SectionTemplate:
        """Return the template root of a balance sheet side."""
        return self._balance_sheet[Side(side)]

    def categories(self, side: Side) -> tuple[SectionTemplate, ...]:
        """Return the top-level categories of a balance sheet side, in order."""
        return self.side_template(side).children

    def find_template(self, rsid: str) -> Optional[SectionTemplate]:
        """Return the deepest template node containing ``rsid``."""
        candidate = rsid
        while candidate:
            if candidate in self._templates:
                return self._templates[candidate]
            if "." not in candidate:
                return None
            candidate = candidate.rsplit(".", 1)[0]
        return None

    def section_name(self, rsid: str) -> Optional[str]:
        template = self.find_template(rsid)
        return template.name if template else None

    def default_rsid(self, account_type: AccountType) -> str:
        """Return the default position of an account type."""
        return self._default_rsids[AccountType(account_type)]

    def semantic_rsid(self, balance: AccountBalance) -> str:
        """Return the account's own report section (CID).

        Unclassified accounts fall back to a default position by account type.
        """
        classification = self.lookup(balance.code)
        if classification is not None:
            return classification.rsid
        rsid = self._default_rsids[AccountType(balance.account_type)]
        logger.warning(
            "Account %s (%s) has no classification, using default position %s",
            balance.code,
            balance.name,
            rsid,
        )
        return rsid

    def effective_rule(self, balance: AccountBalance) -> PresentationRule:
        """Resolve the rule: account override, then classification, then account type."""
        override = get_rule(balance.presentation_rule)
        if balance.presentation_rule and override is None:
            logger.warning(
                "Account %s has unknown presentation rule '%s', ignoring it",
                balance.code,
                balance.presentation_rule,
            )
        if override is not None:
            return override
        classification = self.lookup(balance.code)
        if classification is not None and classification.presentation_rule is not None:
            return classification.presentation_rule
        return infer_rule(balance.account_type)

    def is_pnl(self, balance: AccountBalance) -> bool:
        """Return True if the account belongs to the GuV."""
        return self.effective_rule(balance).kind == RuleKind.PNL_ONLY

    def guv_rsid(self, balance: AccountBalance) -> str:
        """Return the GuV section RSID of a P&L account."""
        classification = self.lookup(balance.code)
        if classification is not None and rsid_matches(GUV_PREFIX, classification.rsid):
            return classification.rsid
        if AccountType(balance.account_type) == AccountType.REVENUE:
            return self._default_rsids[AccountType.REVENUE]
        return self._default_rsids[AccountType.EXPENSE]

    def resolve(self, balance: AccountBalance) -> Optional[ResolvedPosition]:
        """Run an account balance through its presentation rule.

        Returns None for immaterial balances and P&L accounts.
        """
        rule = self.effective_rule(balance)
        if rule.kind == RuleKind.PNL_ONLY:
            return None
        semantic_rsid = self.semantic_rsid(balance)
        if rsid_matches(GUV_PREFIX, semantic_rsid):
            # balance sheet rule overriding a GuV classification
            fallback = AccountType.ASSET if balance.net_balance > 0 else AccountType.LIABILITY
            semantic_rsid = self._default_rsids[fallback]
        return apply_rule(rule, balance.total_debit, balance.total_credit, semantic_rsid)

    def to_dict(self) -> dict[str, Any]:
        """Serialize into the table document format (codes listed singly)."""
        return {
            "balance_sheet": [
                _template_to_dict(root) for root in self._balance_sheet.values()
            ],
            "guv_sections": [
                {
                    "key": s.key,
                    "label": s.label,
                    "rsids": list(s.rsids),
                    "display_type": s.display_type.value,
                    "group": s.group,
                }
                for s in self._guv_sections
            ],
            "classifications": [
                {
                    "codes": c.code,
                    "rsid": c.rsid,
                    "presentation_rule": c.presentation_rule.name if c.presentation_rule else None,
                }
                for c in self._classifications.values()
            ],
            "default_rsids": {t.value: rsid for t, rsid in self._default_rsids.items()},
        }
