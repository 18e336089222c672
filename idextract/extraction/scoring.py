"""Heuristic scoring of document number candidates.

Every candidate receives an integer score built from a per-type base,
keyword context on its own line and in the whole document, date-line
penalties and structural red flags. National IDs found on a line must
also pass the Verhoeff checksum; failing candidates score exactly 0.
Candidates scoring 0 or less are never selected.
"""

import re
from collections.abc import Callable, Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from idextract.utils.logger import get_logger

from .candidates import Candidate
from .checksum import verhoeff_validate
from .document_types import DOB_KEYWORDS, PROFILES, DocumentType
from .normalizer import NormalizedText

logger = get_logger(__name__)

_REPEATED_SERIAL = re.compile(r"([0-9])\1{7,}")
_HAS_LETTER = re.compile(r"[A-Z]")
_DIGIT_RUN_4 = re.compile(r"[0-9]{4,}")
_DIGIT_RUN_10 = re.compile(r"[0-9]{10,}")


class ScoringWeights(BaseModel):
    """Score contributions for one document type and pass.

    Only the relative ordering of these values matters; they can be
    recalibrated from configuration.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base: int = 0
    grouped_bonus: int = 0
    line_keyword_bonus: int = 0
    document_keyword_bonus: int = 0
    date_line_penalty: int = 0
    dob_overlap_penalty: int = 0
    leading_zero_penalty: int = 0
    repeated_digit_penalty: int = 0
    filler_prefix_penalty: int = 0
    mixed_content_bonus: int = 0
    long_digit_run_penalty: int = 0


LINE_WEIGHTS: Mapping[DocumentType, ScoringWeights] = MappingProxyType(
    {
        DocumentType.NATIONAL_ID: ScoringWeights(
            base=40,
            grouped_bonus=15,
            line_keyword_bonus=8,
            document_keyword_bonus=5,
            date_line_penalty=10,
            dob_overlap_penalty=3,
            leading_zero_penalty=10,
            repeated_digit_penalty=20,
        ),
        DocumentType.TAX_ID: ScoringWeights(
            base=20,
            line_keyword_bonus=10,
            document_keyword_bonus=4,
            date_line_penalty=4,
            filler_prefix_penalty=6,
        ),
        DocumentType.ELECTOR_ID: ScoringWeights(
            base=18,
            line_keyword_bonus=8,
            document_keyword_bonus=3,
            date_line_penalty=4,
            filler_prefix_penalty=4,
        ),
        DocumentType.DRIVING_LICENSE: ScoringWeights(
            base=18,
            line_keyword_bonus=8,
            document_keyword_bonus=3,
            date_line_penalty=2,
            leading_zero_penalty=2,
            repeated_digit_penalty=6,
        ),
        DocumentType.OTHER: ScoringWeights(
            base=6,
            mixed_content_bonus=2,
            long_digit_run_penalty=3,
        ),
    }
)

FALLBACK_WEIGHTS: Mapping[DocumentType, ScoringWeights] = MappingProxyType(
    {
        **LINE_WEIGHTS,
        DocumentType.NATIONAL_ID: ScoringWeights(
            base=10,
            document_keyword_bonus=4,
            dob_overlap_penalty=3,
            leading_zero_penalty=6,
            repeated_digit_penalty=9,
        ),
        DocumentType.DRIVING_LICENSE: ScoringWeights(
            base=10,
            document_keyword_bonus=3,
            leading_zero_penalty=2,
            repeated_digit_penalty=6,
        ),
    }
)


def build_weights(
    defaults: Mapping[DocumentType, ScoringWeights],
    overrides: Mapping[str, Mapping[str, int]] | None = None,
) -> dict[DocumentType, ScoringWeights]:
    """Apply configuration overrides on top of default weights.

    Args:
        defaults: Default weights per document type.
        overrides: Mapping of document type tag to field overrides.

    Returns:
        A new weight table; ``defaults`` is left untouched.

    Raises:
        pydantic.ValidationError: If an override names an unknown field.
    """
    table = dict(defaults)
    for tag, update in (overrides or {}).items():
        try:
            document_type = DocumentType(str(tag).lower())
        except ValueError:
            logger.warning("Ignoring weights for unknown document type: %s", tag)
            continue
        table[document_type] = ScoringWeights.model_validate(
            {**table[document_type].model_dump(), **dict(update)}
        )
    return table


def _line_of(candidate: Candidate, normalized: NormalizedText) -> str:
    if candidate.line_index is None:
        return ""
    if 0 <= candidate.line_index < len(normalized.lines):
        return normalized.lines[candidate.line_index]
    return ""


def _context(
    score: int,
    document_type: DocumentType,
    line: str,
    document_text: str,
    weights: ScoringWeights,
) -> int:
    profile = PROFILES[document_type]
    if line and profile.line_keywords and profile.line_keywords.search(line):
        score += weights.line_keyword_bonus
    if line and profile.date_keywords and profile.date_keywords.search(line):
        score -= weights.date_line_penalty
    keywords = profile.document_keywords
    if keywords and keywords.search(document_text):
        score += weights.document_keyword_bonus
    return score


def _score_national_id(
    candidate: Candidate,
    normalized: NormalizedText,
    weights: ScoringWeights,
    fallback: bool,
) -> int:
    value = candidate.value
    if not fallback and not verhoeff_validate(value):
        return 0

    line = _line_of(candidate, normalized)
    score = weights.base
    if value.startswith("0000"):
        score -= weights.leading_zero_penalty
    if len(set(value)) == 1:
        score -= weights.repeated_digit_penalty
    if candidate.grouped:
        score += weights.grouped_bonus
    score = _context(score, DocumentType.NATIONAL_ID, line, normalized.upper, weights)

    if DOB_KEYWORDS.search(normalized.upper):
        haystack = normalized.upper if fallback else line
        groups = (value[:4],) if fallback else (value[:4], value[4:8])
        if any(group in haystack for group in groups):
            score -= weights.dob_overlap_penalty
    return score


def _score_tax_id(
    candidate: Candidate,
    normalized: NormalizedText,
    weights: ScoringWeights,
    fallback: bool,
) -> int:
    line = _line_of(candidate, normalized)
    score = _context(weights.base, DocumentType.TAX_ID, line, normalized.upper, weights)
    if candidate.value.startswith("AAAAA"):
        score -= weights.filler_prefix_penalty
    return score


def _score_elector_id(
    candidate: Candidate,
    normalized: NormalizedText,
    weights: ScoringWeights,
    fallback: bool,
) -> int:
    line = _line_of(candidate, normalized)
    score = _context(
        weights.base, DocumentType.ELECTOR_ID, line, normalized.upper, weights
    )
    if candidate.value.startswith("AAA"):
        score -= weights.filler_prefix_penalty
    return score


def _score_license(
    candidate: Candidate,
    normalized: NormalizedText,
    weights: ScoringWeights,
    fallback: bool,
) -> int:
    value = candidate.value
    line = _line_of(candidate, normalized)
    document_text = "\n".join(normalized.lines)
    score = _context(
        weights.base, DocumentType.DRIVING_LICENSE, line, document_text, weights
    )
    # No transport office is numbered 00.
    if value[2:4] == "00":
        score -= weights.leading_zero_penalty
    if _REPEATED_SERIAL.fullmatch(value[4:]):
        score -= weights.repeated_digit_penalty
    return score


def _score_generic(
    candidate: Candidate,
    normalized: NormalizedText,
    weights: ScoringWeights,
    fallback: bool,
) -> int:
    value = candidate.value
    has_letter = _HAS_LETTER.search(value) is not None
    score = weights.base
    if has_letter and _DIGIT_RUN_4.search(value):
        score += weights.mixed_content_bonus
    if not has_letter and _DIGIT_RUN_10.search(value):
        score -= weights.long_digit_run_penalty
    return score


Scorer = Callable[[Candidate, NormalizedText, ScoringWeights, bool], int]

_SCORERS: dict[DocumentType, Scorer] = {
    DocumentType.NATIONAL_ID: _score_national_id,
    DocumentType.TAX_ID: _score_tax_id,
    DocumentType.ELECTOR_ID: _score_elector_id,
    DocumentType.DRIVING_LICENSE: _score_license,
    DocumentType.OTHER: _score_generic,
}


def score(
    candidate: Candidate,
    document_type: DocumentType,
    normalized: NormalizedText,
    *,
    fallback: bool = False,
    weights: Mapping[DocumentType, ScoringWeights] | None = None,
) -> int:
    """Score a single candidate.

    Args:
        candidate: Candidate to score.
        document_type: Document being processed.
        normalized: Normalized OCR payload the candidate came from.
        fallback: Whether the candidate came from the whole-text pass.
            The national ID checksum gate only applies when ``False``.
        weights: Weight table to use instead of the defaults.

    Returns:
        Integer score; values of 0 or less mean "not a candidate".
    """
    document_type = DocumentType.parse(document_type)
    if weights is None:
        weights = FALLBACK_WEIGHTS if fallback else LINE_WEIGHTS
    return _SCORERS[document_type](
        candidate, normalized, weights[document_type], fallback
    )


def score_all(
    candidates: list[Candidate],
    document_type: DocumentType,
    normalized: NormalizedText,
    *,
    fallback: bool = False,
    weights: Mapping[DocumentType, ScoringWeights] | None = None,
) -> list[Candidate]:
    """Score candidates in place and return them in their original order."""
    for candidate in candidates:
        candidate.score = score(
            candidate, document_type, normalized, fallback=fallback, weights=weights
        )
    return candidates
