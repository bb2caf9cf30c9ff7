"""
Clan Data Rule Engine.

This package provides tools for checking imported clan chest data:
- Validating rows against per-field valid/invalid lists
- Correcting field values with substitution rules
- Importing and exporting rule lists
- Reviewing batches of imported rows
"""
