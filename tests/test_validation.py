"""Tests for submission-time document rules and reconciliation."""

from pathlib import Path

import pytest
import yaml

from idextract.validation.document_rules import (
    MATCH_MESSAGE,
    MISMATCH_MESSAGE,
    MISSING_MESSAGE,
    DocumentRulesEngine,
    ReconciliationStatus,
    ValidationResult,
    reconcile,
)


class TestValidationResult:
    """Tests for the ValidationResult data class."""

    def test_creation(self) -> None:
        result = ValidationResult("pan", True, "Matches pattern", "regex")
        assert result.document_type == "pan"
        assert result.is_valid is True
        assert result.rule_name == "regex"


class TestDefaultRules:
    """Tests for the built-in rules derived from submission patterns."""

    def setup_method(self) -> None:
        self.engine = DocumentRulesEngine(Path("/nonexistent/rules.yaml"))

    @pytest.mark.parametrize(
        "document_type, number",
        [
            ("aadhar", "234567890124"),
            ("pan", "abcde1234f"),
            ("voter", "XYZ1234567"),
            ("license", "MH1220110012345"),
            ("other", "anything"),
        ],
    )
    def test_valid_numbers(self, document_type: str, number: str) -> None:
        report = self.engine.validate(document_type, number)
        assert report.all_valid, report.results

    @pytest.mark.parametrize(
        "document_type, number",
        [
            ("aadhar", "23456789012"),
            ("pan", "ABCD12345F"),
            ("voter", "ABC12345678"),
            ("license", "MH12AB"),
        ],
    )
    def test_invalid_format(self, document_type: str, number: str) -> None:
        report = self.engine.validate(document_type, number)
        assert not report.all_valid
        regex = next(r for r in report.results if r.rule_name == "regex")
        assert regex.message == f"Invalid {document_type} number format"

    def test_non_ascii_digits_rejected(self) -> None:
        assert not self.engine.validate("aadhar", "२३४५६७८९०१२४").all_valid

    def test_missing_number(self) -> None:
        report = self.engine.validate("other", "   ")
        assert not report.all_valid
        assert report.results[0].message == "Please enter document number."

    def test_number_is_trimmed_and_uppercased(self) -> None:
        report = self.engine.validate("pan", "  abcde1234f ")
        assert report.document_number == "ABCDE1234F"

    def test_unknown_type_uses_other_rules(self) -> None:
        report = self.engine.validate("passport", "K1234567X")
        assert report.document_type == "other"
        assert report.all_valid

    def test_submission_ignores_checksum_by_default(
        self, invalid_national_id: str
    ) -> None:
        assert self.engine.validate("aadhar", invalid_national_id).all_valid


class TestRulesFromYaml:
    """Tests for rules loaded from a YAML file."""

    def test_project_rules_match_defaults(self, config_dir: Path) -> None:
        engine = DocumentRulesEngine(config_dir / "document_rules.yaml")
        assert engine.rules == DocumentRulesEngine(Path("/nonexistent.yaml")).rules

    def test_checksum_rule(
        self, tmp_path: Path, valid_national_id: str, invalid_national_id: str
    ) -> None:
        rules_file = tmp_path / "rules.yaml"
        with open(rules_file, "w") as f:
            yaml.dump({"aadhar": [{"type": "required"}, {"type": "checksum"}]}, f)

        engine = DocumentRulesEngine(rules_file)
        assert engine.validate("aadhar", valid_national_id).all_valid
        report = engine.validate("aadhar", invalid_national_id)
        assert not report.all_valid
        assert report.results[1].rule_name == "checksum"

    def test_regex_rule_digit_class_is_ascii(self, tmp_path: Path) -> None:
        rules_file = tmp_path / "rules.yaml"
        with open(rules_file, "w") as f:
            yaml.dump({"aadhar": [{"type": "regex", "pattern": r"^\d{12}$"}]}, f)

        engine = DocumentRulesEngine(rules_file)
        assert engine.validate("aadhar", "234567890124").all_valid
        assert not engine.validate("aadhar", "२३४५६७८९०१२४").all_valid

    def test_unknown_rule_type_warns(self, tmp_path: Path) -> None:
        rules_file = tmp_path / "rules.yaml"
        with open(rules_file, "w") as f:
            yaml.dump({"pan": [{"type": "required"}, {"type": "luhn"}]}, f)

        report = DocumentRulesEngine(rules_file).validate("pan", "ABCDE1234F")
        assert report.all_valid
        assert report.warnings == ["Unknown rule type: luhn"]

    def test_empty_yaml_uses_defaults(self, tmp_path: Path) -> None:
        rules_file = tmp_path / "rules.yaml"
        rules_file.write_text("")
        engine = DocumentRulesEngine(rules_file)
        assert set(engine.rules) == {"aadhar", "pan", "voter", "license", "other"}


class TestReconcile:
    """Tests for comparing the OCR suggestion with manual entry."""

    def test_missing(self) -> None:
        result = reconcile(None, "ABCDE1234F")
        assert result.status is ReconciliationStatus.MISSING
        assert result.message == MISSING_MESSAGE
        assert result.submitted_value == "ABCDE1234F"

    def test_match_ignores_case_and_spaces(self) -> None:
        result = reconcile("ABCDE1234F", " abcde 1234f ")
        assert result.status is ReconciliationStatus.MATCH
        assert result.message == MATCH_MESSAGE
        assert result.submitted_value == "abcde 1234f"

    def test_mismatch_keeps_manual_value(self) -> None:
        result = reconcile("ABCDE1234F", "ABCDE1234G")
        assert result.status is ReconciliationStatus.MISMATCH
        assert result.message == MISMATCH_MESSAGE
        assert result.submitted_value == "ABCDE1234G"
