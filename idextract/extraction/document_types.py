"""Closed taxonomy of supported identity documents.

Each document type owns a profile with its candidate pattern, the
strict submission-time pattern, and the keyword expressions used
for contextual scoring.
"""

import re
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Any


class DocumentType(StrEnum):
    """Identity documents an operator can photograph."""

    NATIONAL_ID = "aadhar"
    TAX_ID = "pan"
    ELECTOR_ID = "voter"
    DRIVING_LICENSE = "license"
    OTHER = "other"

    @classmethod
    def parse(cls, tag: Any) -> "DocumentType":
        """Resolve a loose tag to a document type.

        Unknown, empty or non-string tags resolve to ``OTHER`` so
        extraction can always fall back to the generic strategy.
        """
        if isinstance(tag, cls):
            return tag
        if not isinstance(tag, str):
            return cls.OTHER
        key = tag.strip().lower().replace("-", "_").replace(" ", "_")
        return _ALIASES.get(key, cls.OTHER)


_ALIASES: dict[str, DocumentType] = {
    "aadhar": DocumentType.NATIONAL_ID,
    "aadhaar": DocumentType.NATIONAL_ID,
    "national_id": DocumentType.NATIONAL_ID,
    "pan": DocumentType.TAX_ID,
    "tax_id": DocumentType.TAX_ID,
    "voter": DocumentType.ELECTOR_ID,
    "epic": DocumentType.ELECTOR_ID,
    "elector_id": DocumentType.ELECTOR_ID,
    "license": DocumentType.DRIVING_LICENSE,
    "licence": DocumentType.DRIVING_LICENSE,
    "driving_license": DocumentType.DRIVING_LICENSE,
    "other": DocumentType.OTHER,
}


@dataclass(frozen=True)
class DocumentProfile:
    """Patterns and keyword expressions for one document type."""

    label: str
    description: str
    candidate_pattern: re.Pattern[str]
    submission_pattern: re.Pattern[str] | None
    line_keywords: re.Pattern[str] | None = None
    document_keywords: re.Pattern[str] | None = None
    date_keywords: re.Pattern[str] | None = None


DOB_KEYWORDS = re.compile(r"\bDOB\b|\bDATE\s*OF\s*BIRTH\b|\bYOB\b", re.IGNORECASE)

_NATIONAL_ID_KEYWORDS = re.compile(
    r"(AADHAAR|AADHAR|UIDAI|UNIQUE|MY\s*AADHAAR)", re.IGNORECASE
)

PROFILES: MappingProxyType[DocumentType, DocumentProfile] = MappingProxyType(
    {
        DocumentType.NATIONAL_ID: DocumentProfile(
            label="Aadhaar",
            description="12-digit national identity number with Verhoeff check digit",
            candidate_pattern=re.compile(r"(?<![0-9])[0-9]{12}(?![0-9])"),
            submission_pattern=re.compile(r"^[0-9]{12}$"),
            line_keywords=_NATIONAL_ID_KEYWORDS,
            document_keywords=_NATIONAL_ID_KEYWORDS,
            date_keywords=re.compile(r"(DOB|DATE\s*OF\s*BIRTH|YOB)", re.IGNORECASE),
        ),
        DocumentType.TAX_ID: DocumentProfile(
            label="PAN Card",
            description="Permanent account number: 5 letters, 4 digits, 1 letter",
            candidate_pattern=re.compile(r"[A-Z]{5}[0-9]{4}[A-Z]"),
            submission_pattern=re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$"),
            line_keywords=re.compile(
                r"(PAN\b|PERMANENT\s*ACCOUNT|INCOME\s*TAX)", re.IGNORECASE
            ),
            document_keywords=re.compile(
                r"(INCOME\s*TAX|PERMANENT\s*ACCOUNT\s*NUMBER|PAN\b)", re.IGNORECASE
            ),
            date_keywords=re.compile(r"(DOB|DATE\s*OF\s*BIRTH)", re.IGNORECASE),
        ),
        DocumentType.ELECTOR_ID: DocumentProfile(
            label="Voter ID",
            description="Elector photo identity card: 3 letters, 7 or 8 digits",
            candidate_pattern=re.compile(r"[A-Z]{3}[0-9]{7,8}"),
            submission_pattern=re.compile(r"^[A-Z]{3}[0-9]{7}$"),
            line_keywords=re.compile(
                r"(ELECTION\s*COMMISSION|EPIC|IDENTITY\s*CARD|VOTER\b)", re.IGNORECASE
            ),
            document_keywords=re.compile(
                r"(ELECTION\s*COMMISSION|ELECTOR|EPIC|VOTER\b|IDENTITY\s*CARD)",
                re.IGNORECASE,
            ),
            date_keywords=re.compile(r"(DOB|DATE\s*OF\s*BIRTH)", re.IGNORECASE),
        ),
        DocumentType.DRIVING_LICENSE: DocumentProfile(
            label="Driving License",
            description="State code, RTO code, then an 8 to 16 character serial",
            # Matched against token-edge spans, never a prefix of a longer serial.
            candidate_pattern=re.compile(r"[A-Z]{2}[0-9]{2}[A-Z0-9]{8,16}"),
            submission_pattern=re.compile(r"^[A-Z]{2}[0-9]{2}[0-9]{4}[0-9]{7}$"),
            line_keywords=re.compile(
                r"(DRIVING\s*LICEN[CS]E|DL\b|LICEN[CS]E\s*NO|TRANSPORT)", re.IGNORECASE
            ),
            document_keywords=re.compile(
                r"(DRIVING\s*LICEN[CS]E|DL\b|LICEN[CS]E\s*NO|TRANSPORT)", re.IGNORECASE
            ),
            date_keywords=re.compile(
                r"(DOB|DATE\s*OF\s*BIRTH|VALIDITY|ISSUE)", re.IGNORECASE
            ),
        ),
        DocumentType.OTHER: DocumentProfile(
            label="Other",
            description="Generic 8 to 16 character alphanumeric identifier",
            candidate_pattern=re.compile(r"[A-Z0-9]{8,16}"),
            submission_pattern=None,
        ),
    }
)


def get_profile(document_type: Any) -> DocumentProfile:
    """Return the profile for a document type or loose tag."""
    return PROFILES[DocumentType.parse(document_type)]


def matches_pattern(document_type: Any, value: str) -> bool:
    """Check whether a whole value has the candidate shape of its type."""
    profile = get_profile(document_type)
    return profile.candidate_pattern.fullmatch((value or "").upper()) is not None
