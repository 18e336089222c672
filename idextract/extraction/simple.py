"""Single-regex document number extraction.

A reduced-capability mode: the OCR text is flattened, whitespace is
removed and the first match of one strict pattern per document type is
returned. There is no scoring, no checksum gate and no fallback.
"""

import re
from collections.abc import Iterable
from types import MappingProxyType

from idextract.utils.logger import get_logger

from .document_types import DocumentType

logger = get_logger(__name__)

SIMPLE_PATTERNS: MappingProxyType[DocumentType, re.Pattern[str]] = MappingProxyType(
    {
        DocumentType.NATIONAL_ID: re.compile(r"\b[0-9]{12}\b"),
        DocumentType.TAX_ID: re.compile(r"\b[A-Z]{5}[0-9]{4}[A-Z]\b"),
        DocumentType.ELECTOR_ID: re.compile(r"\b[A-Z]{3}[0-9]{7}\b"),
        DocumentType.DRIVING_LICENSE: re.compile(
            r"\b[A-Z]{2}[0-9]{2}[0-9]{4}[0-9]{7}\b"
        ),
    }
)


def extract_simple(
    document_type: DocumentType, text: str | Iterable[str]
) -> str | None:
    """Return the first strict pattern match in the flattened text.

    Args:
        document_type: Document being processed. ``OTHER`` has no pattern.
        text: OCR text, either one string or a list of lines.

    Returns:
        The matched number, or ``None``.
    """
    if not isinstance(text, str):
        text = " ".join("" if line is None else str(line) for line in text or [])
    pattern = SIMPLE_PATTERNS.get(DocumentType.parse(document_type))
    if pattern is None:
        return None

    cleaned = re.sub(r"\s+", "", text).upper()
    match = pattern.search(cleaned)
    if match:
        logger.debug("Simple pattern matched for %s", document_type)
        return match.group(0)
    return None
