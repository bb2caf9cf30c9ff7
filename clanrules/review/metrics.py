"""
Summary metrics for a reviewed batch of rows.

This module provides:
- Row counts by status
- Field-level validation and correction counts
- Reporting utilities
"""

from collections import Counter
from dataclasses import dataclass, field

from ..rules.schemas import FieldStatus, VALIDATION_FIELDS
from .session import RowReview


@dataclass
class FieldReviewMetrics:
    """Counts for a single canonical field across the batch."""
    field_name: str
    valid: int = 0
    invalid: int = 0
    neutral: int = 0
    corrected: int = 0

    @property
    def total(self) -> int:
        return self.valid + self.invalid + self.neutral


@dataclass
class ReviewMetrics:
    """Complete review metrics."""
    total_rows: int = 0
    valid_rows: int = 0
    invalid_rows: int = 0
    neutral_rows: int = 0

    # Rows with at least one corrected field
    corrected_rows: int = 0

    field_metrics: dict[str, FieldReviewMetrics] = field(default_factory=dict)

    # rule id -> number of values it corrected
    rule_hits: Counter = field(default_factory=Counter)

    invalid_row_indices: list[int] = field(default_factory=list)

    @property
    def valid_fields(self) -> int:
        """Number of individual field values that passed validation."""
        return sum(m.valid for m in self.field_metrics.values())

    @property
    def corrected_fields(self) -> int:
        return sum(m.corrected for m in self.field_metrics.values())

    @property
    def valid_rate(self) -> float:
        return self.valid_rows / self.total_rows if self.total_rows > 0 else 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "rows": {
                "total": self.total_rows,
                "valid": self.valid_rows,
                "invalid": self.invalid_rows,
                "neutral": self.neutral_rows,
                "corrected": self.corrected_rows,
            },
            "fields": {
                name: {
                    "valid": m.valid,
                    "invalid": m.invalid,
                    "neutral": m.neutral,
                    "corrected": m.corrected,
                }
                for name, m in self.field_metrics.items()
            },
            "valid_fields": self.valid_fields,
            "corrected_fields": self.corrected_fields,
            "rule_hits": dict(self.rule_hits),
            "invalid_row_indices": list(self.invalid_row_indices),
        }


def compute_review_metrics(reviews: list[RowReview]) -> ReviewMetrics:
    """
    Compute metrics from reviewed rows.

    Args:
        reviews: Output of review_rows

    Returns:
        ReviewMetrics
    """
    metrics = ReviewMetrics(
        field_metrics={name: FieldReviewMetrics(field_name=name) for name in VALIDATION_FIELDS},
    )

    for review in reviews:
        metrics.total_rows += 1
        status = review.row_status
        if status == FieldStatus.VALID:
            metrics.valid_rows += 1
        elif status == FieldStatus.INVALID:
            metrics.invalid_rows += 1
            metrics.invalid_row_indices.append(review.index)
        else:
            metrics.neutral_rows += 1

        for name in VALIDATION_FIELDS:
            fm = metrics.field_metrics[name]
            field_status = review.validation.field_status[name]
            if field_status == FieldStatus.VALID:
                fm.valid += 1
            elif field_status == FieldStatus.INVALID:
                fm.invalid += 1
            else:
                fm.neutral += 1

        if review.corrections:
            metrics.corrected_rows += 1
        for name, match in review.corrections.items():
            if name in metrics.field_metrics:
                metrics.field_metrics[name].corrected += 1
            rule_key = str(match.rule_id) if match.rule_id is not None else "(no id)"
            metrics.rule_hits[rule_key] += 1

    return metrics


def print_review_report(metrics: ReviewMetrics, title: str = "IMPORT REVIEW REPORT") -> str:
    """
    Generate a formatted review report.

    Args:
        metrics: ReviewMetrics to report
        title: Report title

    Returns:
        Formatted report string
    """
    lines = []
    sep = "=" * 60

    lines.append(sep)
    lines.append(f" {title}")
    lines.append(sep)
    lines.append("")

    lines.append("ROWS")
    lines.append("-" * 40)
    lines.append(f"  Total rows:     {metrics.total_rows}")
    lines.append(f"  Valid:          {metrics.valid_rows}")
    lines.append(f"  Invalid:        {metrics.invalid_rows}")
    lines.append(f"  Neutral:        {metrics.neutral_rows}")
    lines.append(f"  Corrected:      {metrics.corrected_rows}")
    lines.append(f"  Valid rate:     {metrics.valid_rate:.1%}")
    lines.append("")

    lines.append("FIELDS")
    lines.append("-" * 40)
    for name, fm in metrics.field_metrics.items():
        lines.append(
            f"  {name:8} valid={fm.valid:<4} invalid={fm.invalid:<4} "
            f"neutral={fm.neutral:<4} corrected={fm.corrected}"
        )
    lines.append("")

    if metrics.rule_hits:
        lines.append("TOP CORRECTION RULES")
        lines.append("-" * 40)
        for rule_id, hits in metrics.rule_hits.most_common(10):
            lines.append(f"  {rule_id:30} {hits}")
        lines.append("")

    lines.append(sep)
    return "\n".join(lines)
