"""
String normalization shared by the validation and correction engines.

Every comparison key (rule match values, row values, correction field names)
goes through the same normalization so that matching is exact but
case- and surrounding-whitespace-insensitive.
"""

from typing import Optional


def normalize_value(value: Optional[str]) -> str:
    """Trim surrounding whitespace and lowercase. None becomes ""."""
    if value is None:
        return ""
    return str(value).strip().lower()


def normalize_token(value: Optional[str]) -> str:
    """Lowercase a short token (field name, status) without trimming."""
    if value is None:
        return ""
    return str(value).lower()
