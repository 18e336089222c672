"""Submission-time validation of document numbers.

The extractor only suggests a value. Before a document is stored, the
number the operator submits is re-checked against strict per-type rules
loaded from YAML, and compared with the OCR suggestion.
"""

import re
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml

from idextract.extraction.checksum import verhoeff_validate
from idextract.extraction.document_types import PROFILES, DocumentType
from idextract.utils.logger import get_logger

logger = get_logger(__name__)

MISSING_MESSAGE = (
    "OCR could not read the document number. Continuing with manual entry."
)
MISMATCH_MESSAGE = (
    "OCR number does not match manual entry. Continuing with manual entry."
)
MATCH_MESSAGE = "OCR number matches manual entry."


@dataclass
class ValidationResult:
    """Result of a single rule check."""

    document_type: str
    is_valid: bool
    message: str
    rule_name: str


@dataclass
class ValidationReport:
    """Aggregated rule results for one submitted document number."""

    document_type: str
    document_number: str
    all_valid: bool
    results: list[ValidationResult]
    warnings: list[str] = field(default_factory=list)


class ReconciliationStatus(StrEnum):
    """How the OCR suggestion relates to the operator's entry."""

    MISSING = "missing"
    MISMATCH = "mismatch"
    MATCH = "match"


@dataclass
class ReconciliationResult:
    """Comparison of the OCR suggestion with the manual entry.

    The manual entry is always the value that gets submitted.
    """

    status: ReconciliationStatus
    message: str
    submitted_value: str


def _canonical(value: str | None) -> str:
    return re.sub(r"\s+", "", value or "").upper()


def reconcile(extracted: str | None, manual: str) -> ReconciliationResult:
    """Compare an OCR suggestion with what the operator typed.

    Comparison ignores whitespace and case.

    Args:
        extracted: Value suggested by the extractor, if any.
        manual: Value entered by the operator.

    Returns:
        Reconciliation status with an operator-facing message.
    """
    submitted = manual.strip()
    if not extracted:
        return ReconciliationResult(
            ReconciliationStatus.MISSING, MISSING_MESSAGE, submitted
        )
    if _canonical(extracted) != _canonical(manual):
        return ReconciliationResult(
            ReconciliationStatus.MISMATCH, MISMATCH_MESSAGE, submitted
        )
    return ReconciliationResult(ReconciliationStatus.MATCH, MATCH_MESSAGE, submitted)


class DocumentRulesEngine:
    """Strict structural rules for submitted document numbers.

    Rules are keyed by document type tag and loaded from a YAML file,
    falling back to built-in defaults derived from each type's
    submission pattern.

    Args:
        rules_path: Path to the document rules YAML file.
    """

    def __init__(self, rules_path: Path = Path("configs/document_rules.yaml")) -> None:
        self.rules = self._load_rules(rules_path)
        self._validators: dict[str, Any] = {
            "required": self._validate_required,
            "regex": self._validate_regex,
            "checksum": self._validate_checksum,
        }

    def _load_rules(self, path: Path) -> dict:
        """Load document rules from a YAML file, or use defaults."""
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f)
                if data:
                    logger.info("Loaded document rules from %s", path)
                    return data
        logger.debug("Using default document rules")
        return self._default_rules()

    def _default_rules(self) -> dict:
        """Build rules from the submission pattern of every document type."""
        rules: dict[str, list[dict[str, str]]] = {}
        for document_type, profile in PROFILES.items():
            type_rules: list[dict[str, str]] = [{"type": "required"}]
            if profile.submission_pattern is not None:
                type_rules.append(
                    {"type": "regex", "pattern": profile.submission_pattern.pattern}
                )
            rules[document_type.value] = type_rules
        return rules

    def validate(
        self, document_type: Any, document_number: str | None
    ) -> ValidationReport:
        """Validate a submitted document number.

        Args:
            document_type: A ``DocumentType`` or loose tag.
            document_number: Number entered by the operator.

        Returns:
            Report with one result per configured rule.
        """
        doc_type = DocumentType.parse(document_type).value
        number = (document_number or "").strip().upper()
        results: list[ValidationResult] = []
        warnings: list[str] = []

        for rule in self.rules.get(doc_type, []):
            rule_type = rule.get("type")
            validator = self._validators.get(rule_type)
            if not validator:
                warnings.append(f"Unknown rule type: {rule_type}")
                continue
            results.append(validator(doc_type, number, rule))

        all_valid = all(r.is_valid for r in results)
        logger.info(
            "Validation for %s: %s (%d checks)",
            doc_type,
            "PASSED" if all_valid else "FAILED",
            len(results),
        )
        return ValidationReport(
            document_type=doc_type,
            document_number=number,
            all_valid=all_valid,
            results=results,
            warnings=warnings,
        )

    def _validate_required(
        self, document_type: str, value: str, rule: dict
    ) -> ValidationResult:
        """Check that a number was entered at all."""
        if value:
            return ValidationResult(
                document_type, True, "Document number present", "required"
            )
        return ValidationResult(
            document_type, False, "Please enter document number.", "required"
        )

    def _validate_regex(
        self, document_type: str, value: str, rule: dict
    ) -> ValidationResult:
        """Match the whole number against the configured pattern (ASCII classes)."""
        pattern = rule.get("pattern", "")
        if value and re.fullmatch(pattern, value, re.ASCII):
            return ValidationResult(document_type, True, "Matches pattern", "regex")
        return ValidationResult(
            document_type,
            False,
            f"Invalid {document_type} number format",
            "regex",
        )

    def _validate_checksum(
        self, document_type: str, value: str, rule: dict
    ) -> ValidationResult:
        """Verify the Verhoeff check digit of a 12-digit number."""
        if verhoeff_validate(value):
            return ValidationResult(document_type, True, "Checksum valid", "checksum")
        return ValidationResult(
            document_type,
            False,
            f"Checksum failed for {document_type} number",
            "checksum",
        )
