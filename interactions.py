"""
Stack Interaction Checker
Matches a peptide stack against an ordered table of interaction rules

Rules come in three kinds:
- threshold membership: N or more of a candidate list present (e.g. 2+ GLP-1s)
- group intersection: something from group A and something from group B
- full requirement: every listed compound present

Matching is substring-based on normalized names, so "semaglutide" also
matches "Semaglutide (compounded)".
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from interaction_rules import INTERACTION_RULES, PEPTIDE_CATEGORIES
from units import normalize_compound, normalize_stack

logger = logging.getLogger(__name__)


class RuleKind(enum.Enum):
    THRESHOLD_MEMBERSHIP = "threshold_membership"
    GROUP_INTERSECTION = "group_intersection"
    FULL_REQUIREMENT = "full_requirement"


class Severity(enum.Enum):
    DANGER = "danger"
    WARNING = "warning"
    SYNERGY = "synergy"
    INFO = "info"


class InvalidRuleError(ValueError):
    """Raised when a rule definition cannot be turned into an InteractionRule"""


@dataclass(frozen=True)
class InteractionRule:
    kind: RuleKind
    severity: Severity
    title: str
    description: str = ""
    candidates: Tuple[str, ...] = ()
    min_matches: int = 1
    group_a: Tuple[str, ...] = ()
    group_b: Tuple[str, ...] = ()
    required: Tuple[str, ...] = ()


@dataclass(frozen=True)
class InteractionFinding:
    """A rule that fired, with the rule entries that matched the stack"""
    rule: InteractionRule
    matched: Tuple[str, ...] = ()

    @property
    def title(self) -> str:
        return self.rule.title

    @property
    def severity(self) -> Severity:
        return self.rule.severity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.rule.severity.value.upper(),
            "kind": self.rule.kind.value,
            "title": self.rule.title,
            "description": self.rule.description,
            "matched": list(self.matched),
        }


def _present(entries: Iterable[str], stack_ids: Sequence[str]) -> List[str]:
    """Rule entries that occur as a substring of any stack identifier"""
    return [e for e in entries if any(e in s for s in stack_ids)]


def _check_rule(rule: InteractionRule, stack_ids: Sequence[str]) -> Optional[InteractionFinding]:
    if rule.kind is RuleKind.THRESHOLD_MEMBERSHIP:
        found = _present(rule.candidates, stack_ids)
        if len(found) >= rule.min_matches:
            return InteractionFinding(rule, tuple(found))

    elif rule.kind is RuleKind.GROUP_INTERSECTION:
        found_a = _present(rule.group_a, stack_ids)
        found_b = _present(rule.group_b, stack_ids)
        if found_a and found_b:
            return InteractionFinding(rule, tuple(found_a + found_b))

    elif rule.kind is RuleKind.FULL_REQUIREMENT:
        if all(any(r in s for s in stack_ids) for r in rule.required):
            return InteractionFinding(rule, tuple(rule.required))

    return None


def evaluate(stack: Sequence[str], rules: Sequence[InteractionRule]) -> List[InteractionFinding]:
    """
    Check a stack of compound names against a rule table

    Args:
        stack: Display names the user picked, in any order
        rules: Rule table; findings come back in this order

    Returns:
        One finding per rule that fired (empty list if none)
    """
    stack_ids = normalize_stack(list(stack))
    if not stack_ids:
        return []

    findings = []
    for rule in rules:
        finding = _check_rule(rule, stack_ids)
        if finding is not None:
            findings.append(finding)
    return findings


# ----------------------------
# Rule table loading
# ----------------------------
def _entries(data: Dict[str, Any], key: str) -> Tuple[str, ...]:
    """Rule entries normalized the same way as stack names"""
    value = data.get(key)
    if not isinstance(value, (list, tuple)) or not value:
        raise InvalidRuleError(f"Rule '{data.get('title', '?')}': '{key}' must be a non-empty list")
    entries = tuple(normalize_compound(str(v).strip()) for v in value)
    if not all(entries):
        # an empty entry would match every stack
        raise InvalidRuleError(f"Rule '{data.get('title', '?')}': '{key}' has a blank entry")
    return entries


def _min_matches(value: Any, title: str) -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRuleError(f"Rule '{title}': minMatches must be a whole number")
    if value < 1:
        raise InvalidRuleError(f"Rule '{title}': minMatches must be at least 1")
    return value


def rule_from_dict(data: Dict[str, Any]) -> InteractionRule:
    """
    Build a rule from its authored form

    Accepts one of ``peptides`` + ``minMatches``, ``groupA`` + ``groupB``,
    or ``required``, plus ``type`` (DANGER/WARNING/SYNERGY/INFO),
    ``title`` and ``description``.
    """
    if not isinstance(data, dict):
        raise InvalidRuleError("Rule must be an object")

    title = str(data.get("title") or "").strip()
    if not title:
        raise InvalidRuleError("Rule is missing a title")

    try:
        severity = Severity(str(data.get("type") or "").strip().lower())
    except ValueError:
        raise InvalidRuleError(f"Rule '{title}': unknown type {data.get('type')!r}") from None

    has_peptides = "peptides" in data
    has_groups = "groupA" in data or "groupB" in data
    has_required = "required" in data
    if has_peptides + has_groups + has_required != 1:
        raise InvalidRuleError(
            f"Rule '{title}': needs exactly one of peptides/minMatches, groupA/groupB, required"
        )

    common = {"severity": severity, "title": title, "description": str(data.get("description") or "")}

    if has_peptides:
        min_matches = _min_matches(data.get("minMatches", 1), title)
        candidates = _entries(data, "peptides")
        if min_matches > len(candidates):
            raise InvalidRuleError(
                f"Rule '{title}': minMatches {min_matches} exceeds its {len(candidates)} peptides"
            )
        return InteractionRule(
            kind=RuleKind.THRESHOLD_MEMBERSHIP,
            candidates=candidates,
            min_matches=min_matches,
            **common,
        )

    if has_groups:
        return InteractionRule(
            kind=RuleKind.GROUP_INTERSECTION,
            group_a=_entries(data, "groupA"),
            group_b=_entries(data, "groupB"),
            **common,
        )

    return InteractionRule(
        kind=RuleKind.FULL_REQUIREMENT,
        required=_entries(data, "required"),
        **common,
    )


def rules_from_list(items: Iterable[Dict[str, Any]]) -> Tuple[InteractionRule, ...]:
    return tuple(rule_from_dict(item) for item in items)


def load_rules(path: str) -> Tuple[InteractionRule, ...]:
    """Load a rule table from a JSON file holding a list of rule objects"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise InvalidRuleError(f"{path}: expected a list of rules")
    rules = rules_from_list(data)
    logger.info("Loaded %d interaction rules from %s", len(rules), path)
    return rules


DEFAULT_RULES: Tuple[InteractionRule, ...] = rules_from_list(INTERACTION_RULES)


def get_rules(path: Optional[str] = None) -> Tuple[InteractionRule, ...]:
    """Rule table from ``path`` if given, otherwise the built-in rules"""
    if path:
        return load_rules(path)
    return DEFAULT_RULES


def all_peptides() -> List[str]:
    """Sorted, de-duplicated identifiers offered by the stack builder"""
    return sorted({p for group in PEPTIDE_CATEGORIES.values() for p in group})
