"""CSV export of rule lists in the same layout the parser reads back."""

from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from ..rules.schemas import CorrectionRule, ValidationRuleEntry

VALIDATION_CSV_HEADER = "Value,Status"
CORRECTION_CSV_HEADER = "Match,Replacement,Field,Status"


def build_validation_csv(rules: Iterable[ValidationRuleEntry]) -> str:
    """Render validation rules as Value,Status lines."""
    lines = [f"{r.match_value or ''},{r.status or ''}" for r in rules]
    return "\n".join([VALIDATION_CSV_HEADER, *lines])


def build_correction_csv(rules: Iterable[CorrectionRule]) -> str:
    """Render correction rules as Match,Replacement,Field,Status lines."""
    lines = [
        f"{r.match_value or ''},{r.replacement_value or ''},{r.field or ''},{r.status or ''}"
        for r in rules
    ]
    return "\n".join([CORRECTION_CSV_HEADER, *lines])


def export_filename(table_name: str, field_name: str, backup_at: Optional[datetime] = None) -> str:
    """File name for an export, or for a timestamped backup when backup_at is set."""
    if backup_at is None:
        return f"{table_name}-{field_name}.csv"
    timestamp = backup_at.strftime("%Y-%m-%dT%H-%M-%S")
    return f"{table_name}-backup-{field_name}-{timestamp}.csv"
