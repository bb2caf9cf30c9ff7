"""
Row validation against per-field valid/invalid lists.

Rules are compiled once into a ValidationRuleGroup per field; rows are then
classified with plain set membership tests:

1. If the field has a valid list and the value is not on it -> invalid
2. If the field has an invalid list and the value is on it -> invalid
3. If the field has any list at all -> valid
4. Otherwise -> neutral

A row is invalid as soon as one field is invalid. Otherwise it is valid when
at least one rule was indexed anywhere, and neutral when none was.

Malformed rules (unknown field, empty value, unknown status) never raise;
they are left out of the index.
"""

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, Optional, Union

from pydantic import ValidationError

from .normalization import normalize_token, normalize_value
from .schemas import (
    FieldStatus,
    ValidationRowInput,
    ValidationRowResult,
    ValidationRuleEntry,
    ValidationRuleGroup,
    VALIDATION_FIELDS,
)

logger = logging.getLogger(__name__)

RuleLike = Union[ValidationRuleEntry, Mapping[str, Any]]
RowLike = Union[ValidationRowInput, Mapping[str, Any]]


def _as_rule(rule: RuleLike) -> Optional[ValidationRuleEntry]:
    """Coerce a rule row into a model; rows that cannot be read are None."""
    if isinstance(rule, ValidationRuleEntry):
        return rule
    try:
        return ValidationRuleEntry.model_validate(rule)
    except ValidationError:
        return None


def _as_row(row: RowLike) -> ValidationRowInput:
    if isinstance(row, ValidationRowInput):
        return row
    return ValidationRowInput.model_validate(row)


def build_rule_index(rules: Iterable[RuleLike]) -> Mapping[str, ValidationRuleGroup]:
    """
    Group rules into per-field valid/invalid sets.

    Args:
        rules: Validation rule rows (models or plain mappings)

    Returns:
        Read-only mapping with one ValidationRuleGroup per canonical field
    """
    valid: dict[str, set[str]] = {name: set() for name in VALIDATION_FIELDS}
    invalid: dict[str, set[str]] = {name: set() for name in VALIDATION_FIELDS}
    skipped = 0

    for raw in rules:
        rule = _as_rule(raw)
        if rule is None:
            skipped += 1
            continue
        field_name = normalize_token(rule.field)
        status = normalize_token(rule.status)
        match_value = normalize_value(rule.match_value)

        if not match_value or field_name not in valid:
            skipped += 1
            continue

        if status == FieldStatus.VALID.value:
            valid[field_name].add(match_value)
        elif status == FieldStatus.INVALID.value:
            invalid[field_name].add(match_value)
        else:
            skipped += 1

    if skipped:
        logger.debug(f"Skipped {skipped} malformed validation rule(s)")

    return MappingProxyType({
        name: ValidationRuleGroup(
            valid=frozenset(valid[name]),
            invalid=frozenset(invalid[name]),
        )
        for name in VALIDATION_FIELDS
    })


def evaluate_field(group: Optional[ValidationRuleGroup], value: Optional[str]) -> FieldStatus:
    """
    Classify one value against one field's rule group.

    The valid list is authoritative once present: a value missing from it is
    invalid even if it is not on the invalid list either.
    """
    if group is None:
        return FieldStatus.NEUTRAL

    normalized = normalize_value(value)
    has_valid_list = len(group.valid) > 0
    has_invalid_list = len(group.invalid) > 0

    if has_valid_list and normalized not in group.valid:
        return FieldStatus.INVALID
    if has_invalid_list and normalized in group.invalid:
        return FieldStatus.INVALID
    if has_valid_list or has_invalid_list:
        return FieldStatus.VALID
    return FieldStatus.NEUTRAL


class ValidationEvaluator:
    """
    Classifies rows against a compiled rule set.

    Instances are immutable once built and can be shared between threads.
    Build a new evaluator whenever the rule set changes.

    Usage:
        evaluator = create_validation_evaluator(rules)
        result = evaluator({"player": "Alice", "source": "x", "chest": "y", "clan": "z"})
        result.row_status  # FieldStatus.VALID
    """

    __slots__ = ("_index", "_rule_count")

    def __init__(self, rules: Iterable[RuleLike] = ()):
        index = build_rule_index(rules)
        object.__setattr__(self, "_index", index)
        object.__setattr__(self, "_rule_count", sum(g.size for g in index.values()))
        logger.debug(f"Built validation evaluator with {self._rule_count} indexed value(s)")

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def index(self) -> Mapping[str, ValidationRuleGroup]:
        return self._index

    @property
    def rule_count(self) -> int:
        """Total number of indexed valid + invalid values across all fields."""
        return self._rule_count

    @property
    def has_rules(self) -> bool:
        return self._rule_count > 0

    def evaluate_field(self, field_name: str, value: Optional[str]) -> FieldStatus:
        """Classify a single value. Unknown fields are always neutral."""
        return evaluate_field(self._index.get(field_name), value)

    def evaluate(self, row: RowLike) -> ValidationRowResult:
        """Classify all four fields of a row and aggregate the row status."""
        row = _as_row(row)
        field_status = {
            name: evaluate_field(self._index[name], row.get(name))
            for name in VALIDATION_FIELDS
        }

        if any(status == FieldStatus.INVALID for status in field_status.values()):
            row_status = FieldStatus.INVALID
        elif self.has_rules:
            row_status = FieldStatus.VALID
        else:
            row_status = FieldStatus.NEUTRAL

        return ValidationRowResult(row_status=row_status, field_status=field_status)

    __call__ = evaluate


def create_validation_evaluator(rules: Iterable[RuleLike]) -> ValidationEvaluator:
    """
    Create a validation evaluator for rows using exact, case-insensitive matches.

    Args:
        rules: Validation rule rows

    Returns:
        ValidationEvaluator bound to an index built from the given rules
    """
    return ValidationEvaluator(rules)
