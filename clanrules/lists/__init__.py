"""
Rule list import and export.

This module provides:
- Parsing of validation / correction list files (CSV or TXT)
- CSV export in the same layout
- Merging an import into the existing rules of a field
"""

from .parser import (
    ListKind,
    ParsedRuleList,
    normalize_imported_status,
    parse_validation_list_text,
    parse_correction_list_text,
    read_rule_file,
)
from .export import (
    build_validation_csv,
    build_correction_csv,
    export_filename,
)
from .merge import (
    ImportMode,
    MergeResult,
    merge_imported_rules,
)

__all__ = [
    # Parser
    "ListKind",
    "ParsedRuleList",
    "normalize_imported_status",
    "parse_validation_list_text",
    "parse_correction_list_text",
    "read_rule_file",
    # Export
    "build_validation_csv",
    "build_correction_csv",
    "export_filename",
    # Merge
    "ImportMode",
    "MergeResult",
    "merge_imported_rules",
]
