"""
Batch review of imported rows.

Mirrors the import preview: every row is first run through the correction
applicator, then the corrected values are validated. Results can be read as
RowReview objects or as a pandas DataFrame for export.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd

from ..rules.corrections import CorrectionApplicator
from ..rules.schemas import (
    CorrectionMatch,
    FieldStatus,
    ValidationRowResult,
    VALIDATION_FIELDS,
)
from ..rules.validation import ValidationEvaluator

logger = logging.getLogger(__name__)

NEUTRAL_RESULT = ValidationRowResult(
    row_status=FieldStatus.NEUTRAL,
    field_status={name: FieldStatus.NEUTRAL for name in VALIDATION_FIELDS},
)

# Columns of RowReview.to_dict(), in order
REVIEW_COLUMNS: tuple[str, ...] = (
    *VALIDATION_FIELDS,
    "row_status",
    *(f"{name}_status" for name in VALIDATION_FIELDS),
    "corrected_fields",
)


@dataclass
class RowReview:
    """Corrections and validation outcome for one imported row."""
    index: int
    original: Mapping[str, Any]
    corrected: Mapping[str, Any]
    corrections: dict[str, CorrectionMatch] = field(default_factory=dict)
    validation: ValidationRowResult = NEUTRAL_RESULT

    @property
    def row_status(self) -> FieldStatus:
        return self.validation.row_status

    @property
    def was_corrected(self) -> bool:
        return bool(self.corrections)

    def to_dict(self) -> dict:
        """Flatten into one record: corrected values plus status columns."""
        record = {name: self.corrected.get(name, "") for name in VALIDATION_FIELDS}
        record["row_status"] = self.validation.row_status.value
        for name in VALIDATION_FIELDS:
            record[f"{name}_status"] = self.validation.field_status[name].value
        record["corrected_fields"] = ",".join(self.corrections)
        return record


def _row_text(row: Mapping[str, Any], name: str) -> str:
    value = row.get(name)
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value)


def review_rows(
    rows: Iterable[Mapping[str, Any]],
    evaluator: ValidationEvaluator,
    applicator: CorrectionApplicator,
    auto_correct: bool = True,
    validate: bool = True,
) -> list[RowReview]:
    """
    Correct and validate a batch of rows.

    Args:
        rows: Row mappings carrying player/source/chest/clan keys
        evaluator: Validation evaluator built from the current rules
        applicator: Correction applicator built from the current rules
        auto_correct: Apply corrections before validating
        validate: Run validation (rows are neutral when disabled)

    Returns:
        One RowReview per input row, in input order
    """
    reviews = []
    for index, row in enumerate(rows):
        corrected, corrections = row, {}
        if auto_correct:
            corrected, corrections = applicator.apply_to_row(row)

        result = NEUTRAL_RESULT
        if validate:
            result = evaluator({name: _row_text(corrected, name) for name in VALIDATION_FIELDS})

        reviews.append(RowReview(
            index=index,
            original=row,
            corrected=corrected,
            corrections=dict(corrections),
            validation=result,
        ))

    corrected_rows = sum(1 for r in reviews if r.was_corrected)
    invalid_rows = sum(1 for r in reviews if r.row_status == FieldStatus.INVALID)
    logger.info(f"Reviewed {len(reviews)} rows: {corrected_rows} corrected, {invalid_rows} invalid")
    return reviews


def validation_messages(reviews: Iterable[RowReview]) -> list[str]:
    """Human-readable messages for every invalid field, e.g. 'Invalid player: Bob'."""
    messages = []
    for review in reviews:
        for name in review.validation.invalid_fields():
            messages.append(f"Invalid {name}: {_row_text(review.corrected, name)}")
    return messages


def review_dataframe(
    df: pd.DataFrame,
    evaluator: ValidationEvaluator,
    applicator: CorrectionApplicator,
    auto_correct: bool = True,
    validate: bool = True,
) -> pd.DataFrame:
    """
    Review every row of a DataFrame.

    Returns:
        Copy of df with corrected canonical columns and added row_status,
        <field>_status and corrected_fields columns
    """
    records = df.to_dict(orient="records")
    reviews = review_rows(records, evaluator, applicator, auto_correct, validate)
    return reviews_to_dataframe(df, reviews)


def reviews_to_dataframe(df: pd.DataFrame, reviews: list[RowReview]) -> pd.DataFrame:
    """
    Merge already computed reviews back into the DataFrame they came from.

    reviews must be in the same order as the rows of df. Canonical columns
    that df does not have are not added; the status columns always are.
    """
    if len(reviews) != len(df):
        raise ValueError(f"Expected {len(df)} reviews, got {len(reviews)}")

    out = df.copy()
    flat = pd.DataFrame([r.to_dict() for r in reviews], index=df.index, columns=list(REVIEW_COLUMNS))
    for column in flat.columns:
        if column in VALIDATION_FIELDS and column not in df.columns:
            continue
        out[column] = flat[column]
    return out


def load_rows_csv(path: Union[str, Path], encoding: Optional[str] = "utf-8") -> pd.DataFrame:
    """
    Load imported rows from CSV.

    Column names are matched case-insensitively; missing canonical columns
    are added as empty strings.

    Raises:
        FileNotFoundError: if the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rows file not found: {path}")

    df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding=encoding)
    df = df.rename(columns={c: c.strip().lower() for c in df.columns if c.strip().lower() in VALIDATION_FIELDS})
    for name in VALIDATION_FIELDS:
        if name not in df.columns:
            df[name] = ""

    logger.info(f"Loaded {len(df)} rows from {path}")
    return df
