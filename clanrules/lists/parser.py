"""
Parsing of validation and correction list files (CSV / TXT).

Both formats are one entry per line with parts separated by "," or ";":

    Validation list:  Value[,Status]
    Correction list:  Match,Replacement[,Field|Status][,Status]

A header line is skipped when present. Blank lines are ignored. Errors are
collected per line instead of aborting the whole file, so a partially broken
file can still be previewed and imported.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union

from ..rules.normalization import normalize_value
from ..rules.schemas import CORRECTION_FIELDS, CorrectionRule, ValidationRuleEntry, VALIDATION_FIELDS

logger = logging.getLogger(__name__)

_LINE_SPLIT = re.compile(r"\r?\n")
_PART_SPLIT = re.compile(r"[;,]")

VALIDATION_STATUSES = {"valid", "invalid"}
CORRECTION_STATUSES = {"active", "inactive"}


class ListKind(str, Enum):
    """Kind of rule list a file contains."""
    VALIDATION = "validation"
    CORRECTION = "correction"


@dataclass
class ParsedRuleList:
    """Entries parsed from a list file plus per-line error messages."""
    entries: list = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _non_blank_lines(text: str) -> list[str]:
    return [line.strip() for line in _LINE_SPLIT.split(text) if line.strip()]


def _split_parts(line: str) -> list[str]:
    return [part.strip() for part in _PART_SPLIT.split(line)]


def normalize_imported_status(value: str) -> str:
    """Map list-file statuses onto validation statuses (active -> valid, inactive -> invalid)."""
    normalized = normalize_value(value)
    if normalized == "active":
        return "valid"
    if normalized == "inactive":
        return "invalid"
    return normalized


def parse_validation_list_text(text: str, expected_field: str) -> ParsedRuleList:
    """
    Parse a validation list file for one field.

    Args:
        text: File contents
        expected_field: Field every entry is assigned to

    Returns:
        ParsedRuleList of ValidationRuleEntry, duplicates (by normalized value) dropped
    """
    lines = _non_blank_lines(text)
    result = ParsedRuleList()
    seen: set[str] = set()
    start = 1 if lines and lines[0].lower().startswith("value") else 0

    for i in range(start, len(lines)):
        parts = _split_parts(lines[i])
        match_value = parts[0]
        raw_status = parts[1] if len(parts) > 1 else "active"
        status = normalize_imported_status(raw_status)

        if not match_value:
            result.errors.append(f"Line {i + 1}: Missing value.")
            continue
        if status not in VALIDATION_STATUSES:
            result.errors.append(f"Line {i + 1}: Invalid status {raw_status}.")
            continue

        key = normalize_value(match_value)
        if key in seen:
            continue
        seen.add(key)
        result.entries.append(
            ValidationRuleEntry(field=expected_field, match_value=match_value, status=status)
        )

    return result


def parse_correction_list_text(text: str, expected_field: str) -> ParsedRuleList:
    """
    Parse a correction list file for one field.

    The optional third column is read as a status when it is active/inactive
    and as a field name otherwise.

    Args:
        text: File contents
        expected_field: Field the list is being imported into

    Returns:
        ParsedRuleList of CorrectionRule, duplicates (by field + normalized match) dropped
    """
    lines = _non_blank_lines(text)
    result = ParsedRuleList()
    seen: set[str] = set()
    start = 0
    if lines and lines[0].lower().startswith(("match", "value")):
        start = 1

    for i in range(start, len(lines)):
        parts = _split_parts(lines[i])
        if len(parts) < 2 or not parts[0] or not parts[1]:
            result.errors.append(f"Line {i + 1}: Match and replacement values are required.")
            continue
        match_value, replacement_value = parts[0], parts[1]

        field_name = expected_field
        status = "active"
        third = parts[2] if len(parts) > 2 else ""
        fourth = parts[3] if len(parts) > 3 else ""
        if third:
            norm3 = normalize_value(third)
            if norm3 in CORRECTION_STATUSES:
                status = norm3
            else:
                field_name = norm3
        if fourth:
            norm4 = normalize_value(fourth)
            if norm4 not in CORRECTION_STATUSES:
                result.errors.append(f"Line {i + 1}: Invalid status {fourth}.")
                continue
            status = norm4

        if field_name not in CORRECTION_FIELDS:
            result.errors.append(f"Line {i + 1}: Invalid field {field_name}.")
            continue
        if field_name != expected_field:
            result.errors.append(f"Line {i + 1}: Field must be {expected_field}.")
            continue

        key = f"{field_name}:{normalize_value(match_value)}"
        if key in seen:
            continue
        seen.add(key)
        result.entries.append(CorrectionRule(
            field=field_name,
            match_value=match_value,
            replacement_value=replacement_value,
            status=status,
        ))

    return result


def read_rule_file(
    path: Union[str, Path],
    kind: Union[str, ListKind],
    expected_field: str,
) -> ParsedRuleList:
    """
    Read a list file from disk and parse it.

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if kind is not a known list kind, or the field cannot
            carry a list of that kind
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rule list not found: {path}")
    list_kind = ListKind(kind)
    allowed = VALIDATION_FIELDS if list_kind is ListKind.VALIDATION else CORRECTION_FIELDS
    if expected_field not in allowed:
        raise ValueError(
            f"No {list_kind.value} list for field '{expected_field}' "
            f"(expected one of: {', '.join(allowed)})"
        )

    text = path.read_text(encoding="utf-8-sig")
    if list_kind is ListKind.VALIDATION:
        parsed = parse_validation_list_text(text, expected_field)
    else:
        parsed = parse_correction_list_text(text, expected_field)

    logger.info(
        f"Parsed {len(parsed.entries)} {list_kind.value} entries for '{expected_field}' "
        f"from {path.name} ({len(parsed.errors)} error(s))"
    )
    for error in parsed.errors:
        logger.warning(f"{path.name}: {error}")
    return parsed
