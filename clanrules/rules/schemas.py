"""
Pydantic schemas for validation and correction rules.

These schemas match the rule rows stored by the admin application
(validation lists and correction lists) and the per-row results the
engines hand back to the import review.

Rule models are deliberately permissive: a malformed rule is still a valid
model instance and is simply ignored when the engines build their indexes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FieldStatus(str, Enum):
    """Validation outcome for a single field or a whole row."""
    VALID = "valid"
    INVALID = "invalid"
    NEUTRAL = "neutral"    # No rules apply


class ValidationField(str, Enum):
    """Logical columns that validation rules can target."""
    PLAYER = "player"
    SOURCE = "source"
    CHEST = "chest"
    CLAN = "clan"


VALIDATION_FIELDS: tuple[str, ...] = tuple(f.value for f in ValidationField)

# Correction rules registered under this field apply to every field
WILDCARD_FIELD = "all"

CORRECTION_FIELDS: tuple[str, ...] = VALIDATION_FIELDS + (WILDCARD_FIELD,)


def _coerce_text(v: Any) -> Optional[str]:
    """Turn scalar cell values (numbers from CSV, etc.) into strings."""
    if v is None or isinstance(v, str):
        return v
    if isinstance(v, (int, float, bool)):
        return str(v)
    return v


class _RuleModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class ValidationRuleEntry(_RuleModel):
    """
    One stored validation rule row.

    A rule is inert unless field is player/source/chest/clan, match_value is
    non-empty after trimming and status is valid/invalid.
    """
    field: Optional[str] = None
    match_value: Optional[str] = Field(None, alias="matchValue")
    status: Optional[str] = None

    @field_validator("field", "match_value", "status", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        return _coerce_text(v)


class CorrectionRule(_RuleModel):
    """
    One stored correction rule row.

    The id is opaque and handed back verbatim on a match so callers can
    attribute the change. field="all" makes the rule a wildcard.
    """
    id: Any = None
    field: Optional[str] = None
    match_value: Optional[str] = Field(None, alias="matchValue")
    replacement_value: Optional[str] = Field(None, alias="replacementValue")
    status: Optional[str] = None

    @field_validator("field", "match_value", "replacement_value", "status", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        return _coerce_text(v)

    def is_active(self) -> bool:
        """Missing status counts as active; otherwise it must read 'active'."""
        if not self.status:
            return True
        return self.status.lower() == "active"


@dataclass(frozen=True)
class ValidationRuleGroup:
    """Normalized valid (whitelist) and invalid (blacklist) values for one field."""
    valid: frozenset[str] = field(default_factory=frozenset)
    invalid: frozenset[str] = field(default_factory=frozenset)

    @property
    def size(self) -> int:
        return len(self.valid) + len(self.invalid)

    def is_empty(self) -> bool:
        return self.size == 0


class ValidationRowInput(BaseModel):
    """The four canonical values of one imported row."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    player: str = ""
    source: str = ""
    chest: str = ""
    clan: str = ""

    @field_validator("player", "source", "chest", "clan", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        if v is None:
            return ""
        return _coerce_text(v)

    def get(self, field_name: str) -> str:
        """Return the value for a canonical field name."""
        return getattr(self, field_name)


class ValidationRowResult(BaseModel):
    """Row-level status plus the status of each of the four fields."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    row_status: FieldStatus = Field(alias="rowStatus")
    field_status: dict[str, FieldStatus] = Field(alias="fieldStatus")

    def invalid_fields(self) -> list[str]:
        """Fields that evaluated to invalid, in canonical order."""
        return [
            name for name in VALIDATION_FIELDS
            if self.field_status.get(name) == FieldStatus.INVALID
        ]

    def to_dict(self) -> dict:
        """Convert to the camelCase JSON shape used by the web client."""
        return self.model_dump(by_alias=True, mode="json")


class CorrectionMatch(BaseModel):
    """
    Result of looking up one field value.

    rule_id, from_value, to and rule_field are only populated when
    was_corrected is True.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    value: str
    was_corrected: bool = Field(False, alias="wasCorrected")
    rule_id: Any = Field(None, alias="ruleId")
    from_value: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None
    rule_field: Optional[str] = Field(None, alias="ruleField")

    def to_dict(self) -> dict:
        """
        Convert to the camelCase JSON shape used by the web client.

        Attribution keys are left out entirely when nothing was corrected.
        """
        if not self.was_corrected:
            return {"value": self.value, "wasCorrected": False}
        return self.model_dump(by_alias=True)
