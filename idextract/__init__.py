"""Identity Document Number Extraction.

Recovers a single plausible document number (national ID, tax ID,
elector ID, driving license) from noisy OCR text lines using pattern
candidates, contextual scoring and Verhoeff checksum validation.
"""

from idextract.extraction.document_types import DocumentType
from idextract.extraction.selector import (
    DocumentNumberExtractor,
    extract_document_number,
)

__version__ = "1.0.0"

__all__ = ["DocumentNumberExtractor", "DocumentType", "extract_document_number"]
