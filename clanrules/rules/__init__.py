"""
Rule engine for validating and correcting imported clan data.

This module provides:
- Schema definitions for validation and correction rule rows
- ValidationEvaluator for classifying rows as valid/invalid/neutral
- CorrectionApplicator for rewriting field values
- Rule processing bundle with autocomplete suggestions
"""

from .normalization import normalize_token, normalize_value
from .schemas import (
    FieldStatus,
    ValidationField,
    VALIDATION_FIELDS,
    CORRECTION_FIELDS,
    WILDCARD_FIELD,
    ValidationRuleEntry,
    ValidationRuleGroup,
    ValidationRowInput,
    ValidationRowResult,
    CorrectionRule,
    CorrectionMatch,
)
from .validation import (
    ValidationEvaluator,
    build_rule_index,
    evaluate_field,
    create_validation_evaluator,
)
from .corrections import (
    CorrectionIndex,
    CorrectionApplicator,
    build_correction_index,
    create_correction_applicator,
)
from .processing import (
    RuleProcessing,
    extract_suggestions,
    build_rule_processing,
)

__all__ = [
    # Normalization
    "normalize_value",
    "normalize_token",
    # Schemas
    "FieldStatus",
    "ValidationField",
    "VALIDATION_FIELDS",
    "CORRECTION_FIELDS",
    "WILDCARD_FIELD",
    "ValidationRuleEntry",
    "ValidationRuleGroup",
    "ValidationRowInput",
    "ValidationRowResult",
    "CorrectionRule",
    "CorrectionMatch",
    # Validation
    "ValidationEvaluator",
    "build_rule_index",
    "evaluate_field",
    "create_validation_evaluator",
    # Corrections
    "CorrectionIndex",
    "CorrectionApplicator",
    "build_correction_index",
    "create_correction_applicator",
    # Processing
    "RuleProcessing",
    "extract_suggestions",
    "build_rule_processing",
]
