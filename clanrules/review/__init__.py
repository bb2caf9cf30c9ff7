"""
Review of imported rows against the current rule lists.

This module provides:
- Batch correction + validation of rows (dicts or DataFrames)
- Validation messages for invalid fields
- Metrics computation and reporting
"""

from .session import (
    RowReview,
    review_rows,
    review_dataframe,
    validation_messages,
    reviews_to_dataframe,
    load_rows_csv,
)
from .metrics import (
    FieldReviewMetrics,
    ReviewMetrics,
    compute_review_metrics,
    print_review_report,
)

__all__ = [
    # Session
    "RowReview",
    "review_rows",
    "review_dataframe",
    "validation_messages",
    "reviews_to_dataframe",
    "load_rows_csv",
    # Metrics
    "FieldReviewMetrics",
    "ReviewMetrics",
    "compute_review_metrics",
    "print_review_report",
]
