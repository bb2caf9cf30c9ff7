"""
Bundle of everything derived from the loaded rule lists.

The import review and the edit forms need the same three things every time
rules are (re)loaded: a validation evaluator, a correction applicator and
autocomplete suggestions built from the valid lists.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from .corrections import CorrectionApplicator, create_correction_applicator
from .schemas import (
    CorrectionRule,
    FieldStatus,
    ValidationField,
    ValidationRuleEntry,
    WILDCARD_FIELD,
)
from .validation import ValidationEvaluator, create_validation_evaluator


def _rule_text(rule: Union[ValidationRuleEntry, Mapping[str, Any]], name: str) -> str:
    """Read a text column from a rule; anything that is not a string reads as empty."""
    if isinstance(rule, Mapping):
        value = rule.get(name)
        if name == "match_value" and name not in rule:
            value = rule.get("matchValue")
    else:
        value = getattr(rule, name, None)
    return value if isinstance(value, str) else ""


def extract_suggestions(
    rules: Iterable[Union[ValidationRuleEntry, Mapping[str, Any]]],
    field_name: str,
) -> list[str]:
    """
    Unique, sorted suggestions from the valid list of one field.

    Values keep their original casing; only surrounding whitespace is removed.
    """
    values: set[str] = set()
    for rule in rules:
        rule_field = _rule_text(rule, "field").lower()
        status = _rule_text(rule, "status").lower()
        match_value = _rule_text(rule, "match_value").strip()
        if rule_field == field_name and status == FieldStatus.VALID.value and match_value:
            values.add(match_value)
    return sorted(values, key=lambda v: (v.casefold(), v))


@dataclass(frozen=True)
class RuleProcessing:
    """Evaluator, applicator and suggestions derived from one rule snapshot."""
    validation_evaluator: ValidationEvaluator
    correction_applicator: CorrectionApplicator
    suggestions_for_field: Mapping[str, Sequence[str]] = field(default_factory=dict)

    @property
    def player_suggestions(self) -> Sequence[str]:
        return self.suggestions_for_field.get(ValidationField.PLAYER.value, ())

    @property
    def source_suggestions(self) -> Sequence[str]:
        return self.suggestions_for_field.get(ValidationField.SOURCE.value, ())

    @property
    def chest_suggestions(self) -> Sequence[str]:
        return self.suggestions_for_field.get(ValidationField.CHEST.value, ())


def build_rule_processing(
    validation_rules: Sequence[Union[ValidationRuleEntry, Mapping[str, Any]]],
    correction_rules: Sequence[Union[CorrectionRule, Mapping[str, Any]]],
    clan_suggestions: Sequence[str] = (),
) -> RuleProcessing:
    """
    Derive evaluator, applicator and suggestions from the given rule lists.

    Clan suggestions come from the caller (they are sourced from the clan
    list, not from validation rules).
    """
    suggestions = {
        ValidationField.PLAYER.value: tuple(extract_suggestions(validation_rules, "player")),
        ValidationField.SOURCE.value: tuple(extract_suggestions(validation_rules, "source")),
        ValidationField.CHEST.value: tuple(extract_suggestions(validation_rules, "chest")),
        ValidationField.CLAN.value: tuple(clan_suggestions),
        WILDCARD_FIELD: (),
    }
    return RuleProcessing(
        validation_evaluator=create_validation_evaluator(validation_rules),
        correction_applicator=create_correction_applicator(correction_rules),
        suggestions_for_field=suggestions,
    )
