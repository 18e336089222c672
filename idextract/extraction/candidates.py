"""Candidate generation per document type.

Line-scoped generators scan each OCR line for substrings with the
document's shape and tag them with their line index. Fallback
generators scan the whole text for documents where OCR tends to merge
or split lines. Generators never raise; no match is an empty list.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from idextract.utils.logger import get_logger

from .document_types import PROFILES, DocumentType
from .normalizer import NormalizedText, strip_non_alnum, token_projection

logger = get_logger(__name__)

_GROUPED_NATIONAL_ID = re.compile(r"\b[0-9]{4} [0-9]{4} [0-9]{4}\b")
_TWELVE_DIGITS = re.compile(r"[0-9]{12}")
_ALL_DIGITS_8_16 = re.compile(r"[0-9]{8,16}")
_LICENSE_PREFIX = re.compile(r"[A-Z]{2}[0-9]{2}")
_LICENSE_MIN_SERIAL = 8


@dataclass
class Candidate:
    """A substring shaped like a document number.

    ``line_index`` is ``None`` for candidates found by a whole-text pass.
    ``grouped`` marks national IDs printed as three 4-digit groups.
    """

    value: str
    line_index: int | None
    grouped: bool = False
    score: int = 0


Generator = Callable[[NormalizedText], list[Candidate]]


def _national_id_lines(normalized: NormalizedText) -> list[Candidate]:
    candidates: list[Candidate] = []
    bare = PROFILES[DocumentType.NATIONAL_ID].candidate_pattern
    for i, line in enumerate(normalized.lines):
        for match in _GROUPED_NATIONAL_ID.finditer(line):
            value = match.group(0).replace(" ", "")
            candidates.append(Candidate(value, i, grouped=True))
        for match in bare.finditer(line):
            candidates.append(Candidate(match.group(0), i))
    return candidates


def _national_id_fallback(normalized: NormalizedText) -> list[Candidate]:
    return [Candidate(m, None) for m in _TWELVE_DIGITS.findall(normalized.digits)]


def _stripped_line_matches(
    normalized: NormalizedText, document_type: DocumentType
) -> list[Candidate]:
    pattern = PROFILES[document_type].candidate_pattern
    candidates: list[Candidate] = []
    for i, line in enumerate(normalized.lines):
        for match in pattern.finditer(strip_non_alnum(line)):
            candidates.append(Candidate(match.group(0), i))
    return candidates


def _tax_id_lines(normalized: NormalizedText) -> list[Candidate]:
    return _stripped_line_matches(normalized, DocumentType.TAX_ID)


def _elector_id_lines(normalized: NormalizedText) -> list[Candidate]:
    return _stripped_line_matches(normalized, DocumentType.ELECTOR_ID)


def _license_matches(text: str, line_index: int | None) -> list[Candidate]:
    pattern = PROFILES[DocumentType.DRIVING_LICENSE].candidate_pattern
    projection, token_ends = token_projection(text)
    candidates: list[Candidate] = []
    pos = 0
    while True:
        prefix = _LICENSE_PREFIX.search(projection, pos)
        if prefix is None:
            return candidates
        start = prefix.start()
        # The serial ends where the first token long enough to hold it ends.
        end = next(
            (e for e in token_ends if e - prefix.end() >= _LICENSE_MIN_SERIAL), None
        )
        if end is not None and pattern.fullmatch(projection, start, end):
            candidates.append(Candidate(projection[start:end], line_index))
            pos = end
        else:
            pos = start + 1


def _license_lines(normalized: NormalizedText) -> list[Candidate]:
    candidates: list[Candidate] = []
    for i, line in enumerate(normalized.lines):
        candidates.extend(_license_matches(line, i))
    return candidates


def _license_fallback(normalized: NormalizedText) -> list[Candidate]:
    return _license_matches(normalized.upper, None)


def _generic(normalized: NormalizedText) -> list[Candidate]:
    projection = normalized.alnum
    # A bare 8-16 digit payload is too ambiguous to suggest.
    if _ALL_DIGITS_8_16.fullmatch(projection):
        return []
    pattern = PROFILES[DocumentType.OTHER].candidate_pattern
    return [Candidate(m.group(0), None) for m in pattern.finditer(projection)]


def _nothing(normalized: NormalizedText) -> list[Candidate]:
    return []


_LINE_GENERATORS: dict[DocumentType, Generator] = {
    DocumentType.NATIONAL_ID: _national_id_lines,
    DocumentType.TAX_ID: _tax_id_lines,
    DocumentType.ELECTOR_ID: _elector_id_lines,
    DocumentType.DRIVING_LICENSE: _license_lines,
    DocumentType.OTHER: _generic,
}

_FALLBACK_GENERATORS: dict[DocumentType, Generator] = {
    DocumentType.NATIONAL_ID: _national_id_fallback,
    DocumentType.TAX_ID: _nothing,
    DocumentType.ELECTOR_ID: _nothing,
    DocumentType.DRIVING_LICENSE: _license_fallback,
    DocumentType.OTHER: _nothing,
}


def generate(
    document_type: DocumentType, normalized: NormalizedText
) -> list[Candidate]:
    """Run the line-scoped generator for a document type.

    Args:
        document_type: Document being processed.
        normalized: Normalized OCR payload.

    Returns:
        Candidates in line order, unscored.
    """
    if normalized.is_empty:
        return []
    candidates = _LINE_GENERATORS[DocumentType.parse(document_type)](normalized)
    logger.debug(
        "Line pass for %s produced %d candidates", document_type, len(candidates)
    )
    return candidates


def generate_fallback(
    document_type: DocumentType, normalized: NormalizedText
) -> list[Candidate]:
    """Run the whole-text fallback generator for a document type.

    Only national IDs and driving licenses have a fallback; other types
    return an empty list.
    """
    if normalized.is_empty:
        return []
    candidates = _FALLBACK_GENERATORS[DocumentType.parse(document_type)](normalized)
    logger.debug(
        "Fallback pass for %s produced %d candidates", document_type, len(candidates)
    )
    return candidates
