"""
Merging an imported list into the existing rules of one field.

This is the pure part of a list import: it decides which rows a host should
end up storing. Writing them is the host's job.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from ..rules.normalization import normalize_value
from ..rules.schemas import CorrectionRule, ValidationRuleEntry

logger = logging.getLogger(__name__)

Rule = Union[ValidationRuleEntry, CorrectionRule]


class ImportMode(str, Enum):
    """How imported entries combine with the current list."""
    APPEND = "append"      # Keep existing rules of the field
    REPLACE = "replace"    # Drop existing rules of the field first


@dataclass
class MergeResult:
    """Outcome of merging an import into an existing rule list."""
    rules: list[Rule] = field(default_factory=list)       # Full list to store
    inserted: list[Rule] = field(default_factory=list)    # New rows only
    removed: int = 0
    skipped_duplicates: int = 0


def _payload(rule: Rule) -> Rule:
    """Trim the stored text columns of an imported entry."""
    update = {
        "field": rule.field.strip() if rule.field else rule.field,
        "match_value": rule.match_value.strip() if rule.match_value else rule.match_value,
        "status": rule.status.strip() if rule.status else rule.status,
    }
    if isinstance(rule, CorrectionRule) and rule.replacement_value:
        update["replacement_value"] = rule.replacement_value.strip()
    return rule.model_copy(update=update)


def _payload_key(rule: Rule) -> str:
    if isinstance(rule, CorrectionRule):
        return f"{rule.field or ''}-{rule.match_value or ''}"
    return f"{rule.match_value or ''}-{rule.status or ''}"


def merge_imported_rules(
    existing: Sequence[Rule],
    imported: Sequence[Rule],
    field_name: str,
    mode: Union[str, ImportMode] = ImportMode.APPEND,
    ignore_duplicates: bool = True,
) -> MergeResult:
    """
    Merge imported entries into the rule list of one field.

    Args:
        existing: Current rules (all fields)
        imported: Parsed entries for field_name
        field_name: Field whose list is being imported
        mode: append keeps the field's current rules, replace drops them
        ignore_duplicates: Skip imported values already present for the field

    Returns:
        MergeResult with the list to store and the rows to insert
    """
    mode = ImportMode(mode)
    result = MergeResult()

    kept: list[Rule] = []
    for rule in existing:
        if mode is ImportMode.REPLACE and rule.field == field_name:
            result.removed += 1
            continue
        kept.append(rule)

    existing_values = {
        normalize_value(rule.match_value) for rule in kept if rule.field == field_name
    }

    unique: dict[str, Rule] = {}
    for entry in imported:
        if ignore_duplicates and normalize_value(entry.match_value) in existing_values:
            result.skipped_duplicates += 1
            continue
        payload = _payload(entry)
        unique[_payload_key(payload)] = payload

    result.inserted = list(unique.values())
    result.rules = kept + result.inserted
    logger.info(
        f"Import into '{field_name}' ({mode.value}): {len(result.inserted)} inserted, "
        f"{result.removed} removed, {result.skipped_duplicates} duplicate(s) skipped"
    )
    return result
