"""
Tests for rule list import and export.

Tests cover:
1. Validation list parsing (header, statuses, duplicates, errors)
2. Correction list parsing (field/status columns, errors)
3. CSV export and file names
4. Merging imports (append / replace / duplicates)
5. Reading list files from disk
"""

from datetime import datetime

import pytest

from clanrules.lists import (
    ImportMode,
    ListKind,
    build_correction_csv,
    build_validation_csv,
    export_filename,
    merge_imported_rules,
    normalize_imported_status,
    parse_correction_list_text,
    parse_validation_list_text,
    read_rule_file,
)
from clanrules.rules import CorrectionRule, ValidationRuleEntry, create_validation_evaluator, FieldStatus


VALIDATION_TEXT = "Value,Status\nAlice,active\nbob;inactive\n\nALICE,valid\n,valid\nCarol,maybe\nDave\n"

CORRECTION_TEXT = "\n".join([
    "Match,Replacement,Field,Status",
    "Typo,Fixed",
    "foo;bar;inactive",
    "x,y,source,active",
    "z,w,player",
    "q,r,source,bogus",
    "onlymatch",
    "TYPO,Other",
    "m,n,banana",
])


class TestNormalizeImportedStatus:
    """Tests for status mapping on import."""

    def test_mapping(self):
        assert normalize_imported_status(" Active ") == "valid"
        assert normalize_imported_status("INACTIVE") == "invalid"
        assert normalize_imported_status("Valid") == "valid"
        assert normalize_imported_status("other") == "other"


class TestParseValidationList:
    """Tests for parse_validation_list_text."""

    def test_entries(self):
        parsed = parse_validation_list_text(VALIDATION_TEXT, "player")

        assert [(e.match_value, e.status) for e in parsed.entries] == [
            ("Alice", "valid"),
            ("bob", "invalid"),
            ("Dave", "valid"),
        ]
        assert all(e.field == "player" for e in parsed.entries)

    def test_errors(self):
        parsed = parse_validation_list_text(VALIDATION_TEXT, "player")

        assert parsed.errors == [
            "Line 5: Missing value.",
            "Line 6: Invalid status maybe.",
        ]
        assert parsed.ok is False

    def test_without_header(self):
        parsed = parse_validation_list_text("Alice\r\nBob,invalid", "source")

        assert len(parsed.entries) == 2
        assert parsed.entries[1].status == "invalid"
        assert parsed.ok is True

    def test_empty_text(self):
        parsed = parse_validation_list_text("", "player")
        assert parsed.entries == []
        assert parsed.errors == []

    def test_parsed_entries_feed_evaluator(self):
        parsed = parse_validation_list_text(VALIDATION_TEXT, "player")
        evaluator = create_validation_evaluator(parsed.entries)

        assert evaluator.evaluate_field("player", "alice") == FieldStatus.VALID
        assert evaluator.evaluate_field("player", "bob") == FieldStatus.INVALID
        assert evaluator.evaluate_field("player", "eve") == FieldStatus.INVALID


class TestParseCorrectionList:
    """Tests for parse_correction_list_text."""

    def test_entries(self):
        parsed = parse_correction_list_text(CORRECTION_TEXT, "source")

        assert [(e.match_value, e.replacement_value, e.field, e.status) for e in parsed.entries] == [
            ("Typo", "Fixed", "source", "active"),
            ("foo", "bar", "source", "inactive"),
            ("x", "y", "source", "active"),
        ]

    def test_errors(self):
        parsed = parse_correction_list_text(CORRECTION_TEXT, "source")

        assert parsed.errors == [
            "Line 5: Field must be source.",
            "Line 6: Invalid status bogus.",
            "Line 7: Match and replacement values are required.",
            "Line 9: Invalid field banana.",
        ]

    def test_wildcard_list(self):
        parsed = parse_correction_list_text("lvl,Level,all\nlv,Level", "all")

        assert len(parsed.entries) == 2
        assert all(e.field == "all" for e in parsed.entries)

    def test_header_starting_with_value_is_skipped(self):
        parsed = parse_correction_list_text("Value,Replacement\na,b", "player")
        assert [e.match_value for e in parsed.entries] == ["a"]


class TestExport:
    """Tests for CSV export."""

    def test_validation_csv(self):
        csv = build_validation_csv([
            ValidationRuleEntry(field="player", match_value="Alice", status="valid"),
            ValidationRuleEntry(field="player", match_value="bob", status="invalid"),
        ])
        assert csv == "Value,Status\nAlice,valid\nbob,invalid"

    def test_correction_csv_reads_back(self):
        rules = [
            CorrectionRule(field="source", match_value="Typo", replacement_value="Fixed", status="active"),
            CorrectionRule(field="source", match_value="old", replacement_value="new", status="inactive"),
        ]
        csv = build_correction_csv(rules)
        assert csv.splitlines()[0] == "Match,Replacement,Field,Status"

        parsed = parse_correction_list_text(csv, "source")
        assert parsed.errors == []
        assert [(e.match_value, e.status) for e in parsed.entries] == [("Typo", "active"), ("old", "inactive")]

    def test_export_filename(self):
        assert export_filename("validation_rules", "player") == "validation_rules-player.csv"
        backup = export_filename("correction_rules", "all", datetime(2026, 1, 2, 3, 4, 5))
        assert backup == "correction_rules-backup-all-2026-01-02T03-04-05.csv"


class TestMergeImportedRules:
    """Tests for merge_imported_rules."""

    EXISTING = [
        ValidationRuleEntry(field="player", match_value="Alice", status="valid"),
        ValidationRuleEntry(field="player", match_value="Bob", status="valid"),
        ValidationRuleEntry(field="source", match_value="hack", status="invalid"),
    ]
    IMPORTED = [
        ValidationRuleEntry(field="player", match_value="ALICE", status="valid"),
        ValidationRuleEntry(field="player", match_value="Zed", status="valid"),
        ValidationRuleEntry(field="player", match_value="Zed", status="valid"),
    ]

    def test_append_ignores_duplicates(self):
        result = merge_imported_rules(self.EXISTING, self.IMPORTED, "player")

        assert result.skipped_duplicates == 1
        assert [r.match_value for r in result.inserted] == ["Zed"]
        assert len(result.rules) == 4
        assert result.removed == 0

    def test_append_keeps_duplicates_when_asked(self):
        result = merge_imported_rules(self.EXISTING, self.IMPORTED, "player", ignore_duplicates=False)

        assert [r.match_value for r in result.inserted] == ["ALICE", "Zed"]
        assert len(result.rules) == 5

    def test_replace_drops_field_rules(self):
        result = merge_imported_rules(self.EXISTING, self.IMPORTED, "player", mode="replace")

        assert result.removed == 2
        assert result.skipped_duplicates == 0
        assert [r.match_value for r in result.rules] == ["hack", "ALICE", "Zed"]

    def test_imported_values_are_trimmed(self):
        imported = [CorrectionRule(field=" source ", match_value=" a ", replacement_value=" b ", status="active")]
        result = merge_imported_rules([], imported, "source", ImportMode.APPEND)

        rule = result.inserted[0]
        assert (rule.field, rule.match_value, rule.replacement_value) == ("source", "a", "b")

    def test_correction_key_is_field_and_match(self):
        imported = [
            CorrectionRule(field="source", match_value="a", replacement_value="first", status="active"),
            CorrectionRule(field="source", match_value="a", replacement_value="second", status="active"),
        ]
        result = merge_imported_rules([], imported, "source")

        assert len(result.inserted) == 1
        assert result.inserted[0].replacement_value == "second"

    def test_unknown_mode_raises(self):
        with pytest.raises(ValueError):
            merge_imported_rules([], [], "player", mode="upsert")


class TestReadRuleFile:
    """Tests for read_rule_file."""

    def test_reads_validation_file(self, tmp_path):
        path = tmp_path / "players.csv"
        path.write_text("\ufeffValue,Status\nAlice,valid\n", encoding="utf-8")

        parsed = read_rule_file(path, ListKind.VALIDATION, "player")
        assert [e.match_value for e in parsed.entries] == ["Alice"]

    def test_reads_correction_file(self, tmp_path):
        path = tmp_path / "fixes.txt"
        path.write_text("typo;fixed\n", encoding="utf-8")

        parsed = read_rule_file(path, "correction", "chest")
        assert parsed.entries[0].replacement_value == "fixed"
        assert parsed.entries[0].field == "chest"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_rule_file(tmp_path / "nope.csv", "validation", "player")

    def test_validation_list_cannot_target_wildcard(self, tmp_path):
        path = tmp_path / "list.csv"
        path.write_text("Alice\n", encoding="utf-8")
        with pytest.raises(ValueError, match="field 'all'"):
            read_rule_file(path, ListKind.VALIDATION, "all")

    def test_unknown_kind(self, tmp_path):
        path = tmp_path / "list.csv"
        path.write_text("a\n", encoding="utf-8")
        with pytest.raises(ValueError):
            read_rule_file(path, "blacklist", "player")
