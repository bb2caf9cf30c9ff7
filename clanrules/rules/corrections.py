"""
Field value corrections driven by substitution rules.

Active rules are indexed by normalized field name and normalized match value.
Rules registered under field "all" go into a separate wildcard index that is
consulted only when no field-specific rule matches.

Precedence:
- A field-specific rule always beats a wildcard rule for the same value
- Within one scope the first rule in input order wins
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Optional, Union

from pydantic import ValidationError

from .normalization import normalize_value
from .schemas import CorrectionMatch, CorrectionRule, VALIDATION_FIELDS, WILDCARD_FIELD

logger = logging.getLogger(__name__)

RuleLike = Union[CorrectionRule, Mapping[str, Any]]


@dataclass(frozen=True)
class CorrectionIndex:
    """Read-only lookup tables built from the active correction rules."""
    field_rules: Mapping[str, Mapping[str, CorrectionRule]]
    wildcard_rules: Mapping[str, CorrectionRule]

    @property
    def rule_count(self) -> int:
        return len(self.wildcard_rules) + sum(len(m) for m in self.field_rules.values())


def _as_rule(rule: RuleLike) -> Optional[CorrectionRule]:
    """Coerce a rule row into a model; rows that cannot be read are None."""
    if isinstance(rule, CorrectionRule):
        return rule
    try:
        return CorrectionRule.model_validate(rule)
    except ValidationError:
        return None


def build_correction_index(rules: Iterable[RuleLike]) -> CorrectionIndex:
    """
    Index active correction rules by (field, match value).

    Args:
        rules: Correction rule rows in priority order

    Returns:
        CorrectionIndex with field-scoped and wildcard tables
    """
    field_rules: dict[str, dict[str, CorrectionRule]] = {}
    wildcard_rules: dict[str, CorrectionRule] = {}
    inactive = 0
    shadowed = 0

    for raw in rules:
        rule = _as_rule(raw)
        if rule is None or not rule.is_active():
            inactive += 1
            continue
        match_value = normalize_value(rule.match_value)
        if not match_value:
            continue

        field_name = normalize_value(rule.field)
        scope = wildcard_rules if field_name == WILDCARD_FIELD else field_rules.setdefault(field_name, {})
        if match_value in scope:
            shadowed += 1
            continue
        scope[match_value] = rule

    if inactive or shadowed:
        logger.debug(f"Correction index: {inactive} inactive rule(s), {shadowed} shadowed duplicate(s)")

    return CorrectionIndex(
        field_rules=MappingProxyType({
            name: MappingProxyType(scope) for name, scope in field_rules.items()
        }),
        wildcard_rules=MappingProxyType(wildcard_rules),
    )


def _matched(rule: CorrectionRule, original: str, rule_field: str) -> CorrectionMatch:
    replacement = rule.replacement_value if rule.replacement_value is not None else ""
    return CorrectionMatch(
        value=replacement,
        was_corrected=True,
        rule_id=rule.id,
        from_value=original,
        to=replacement,
        rule_field=rule_field,
    )


class CorrectionApplicator:
    """
    Rewrites field values using a compiled correction index.

    Instances are immutable once built and can be shared between threads.

    Usage:
        applicator = create_correction_applicator(rules)
        match = applicator.apply_to_field("source", "TYPO")
        match.value, match.was_corrected
    """

    __slots__ = ("_index",)

    def __init__(self, rules: Iterable[RuleLike] = ()):
        object.__setattr__(self, "_index", build_correction_index(rules))
        logger.debug(f"Built correction applicator with {self._index.rule_count} rule(s)")

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def index(self) -> CorrectionIndex:
        return self._index

    @property
    def rule_count(self) -> int:
        return self._index.rule_count

    def apply_to_field(self, field: Optional[str], value: str) -> CorrectionMatch:
        """
        Look up a correction for one field value.

        Args:
            field: Field name the value belongs to (any string)
            value: Raw value as it appears in the row

        Returns:
            CorrectionMatch carrying either the replacement or the untouched value
        """
        normalized_value = normalize_value(value)
        if not normalized_value:
            return CorrectionMatch(value=value, was_corrected=False)

        field_name = normalize_value(field)
        scoped = self._index.field_rules.get(field_name)
        if scoped is not None:
            rule = scoped.get(normalized_value)
            if rule is not None:
                return _matched(rule, value, rule.field if rule.field is not None else field_name)

        rule = self._index.wildcard_rules.get(normalized_value)
        if rule is not None:
            return _matched(rule, value, WILDCARD_FIELD)

        return CorrectionMatch(value=value, was_corrected=False)

    def apply_to_row(
        self,
        row: Mapping[str, Any],
        fields: Iterable[str] = VALIDATION_FIELDS,
    ) -> tuple[Mapping[str, Any], dict[str, CorrectionMatch]]:
        """
        Apply corrections to each listed field of a row.

        The input row is never modified. When nothing changes the same row
        object is returned; otherwise a corrected copy.

        Returns:
            Tuple of (row, {field: CorrectionMatch} for corrected fields only)
        """
        corrected = row
        matches: dict[str, CorrectionMatch] = {}
        for field_name in fields:
            raw = row.get(field_name)
            if raw is None:
                continue
            result = self.apply_to_field(field_name, str(raw))
            if result.was_corrected:
                if corrected is row:
                    corrected = dict(row)
                corrected[field_name] = result.value
                matches[field_name] = result
        return corrected, matches


def create_correction_applicator(rules: Iterable[RuleLike]) -> CorrectionApplicator:
    """
    Create a correction applicator from correction rule rows.

    Args:
        rules: Correction rule rows; array order decides ties within a scope

    Returns:
        CorrectionApplicator bound to an index built from the given rules
    """
    return CorrectionApplicator(rules)
