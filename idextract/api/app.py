"""FastAPI application for the document number extraction API.

Provides endpoints for extraction from OCR text or an uploaded photo,
submission-time validation, document type listing, and health checks.
"""

import shutil
import time
from pathlib import Path
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from idextract import __version__
from idextract.extraction.document_types import PROFILES, DocumentType
from idextract.extraction.selector import DocumentNumberExtractor, ExtractionOutcome
from idextract.ocr.tesseract_engine import TesseractEngine
from idextract.utils.config import load_config
from idextract.utils.logger import get_logger
from idextract.validation.document_rules import (
    MISSING_MESSAGE,
    DocumentRulesEngine,
    reconcile,
)

from .schemas import (
    CandidateResponse,
    DocumentTypeInfo,
    DocumentTypesResponse,
    ExtractionResponse,
    HealthResponse,
    ImageExtractionResponse,
    TextExtractionRequest,
    ValidationRequest,
    ValidationResponse,
    ValidationResultResponse,
)

logger = get_logger(__name__)

app = FastAPI(
    title="Identity Document Number Extraction API",
    description=(
        "Recover national ID, PAN, voter ID and driving license numbers from OCR text"
    ),
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_components() -> (
    tuple[TesseractEngine, DocumentNumberExtractor, DocumentRulesEngine]
):
    """Initialize and return shared processing components.

    Returns:
        Tuple of (ocr_engine, extractor, rules_engine).
    """
    config = load_config()
    ocr_engine = TesseractEngine(
        tesseract_cmd=config.ocr.tesseract_cmd,
        default_lang=config.ocr.default_lang,
        psm=config.ocr.psm,
    )
    extractor = DocumentNumberExtractor(config.extraction)
    rules_engine = DocumentRulesEngine(Path(config.validation.rules_path))
    return ocr_engine, extractor, rules_engine


def _get_extractor(mode: str | None) -> DocumentNumberExtractor:
    """Return an extractor, optionally overriding the configured mode."""
    extraction = load_config().extraction
    if mode:
        extraction = extraction.model_copy(update={"mode": mode})
    return DocumentNumberExtractor(extraction)


_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/tiff",
    "image/webp",
    "application/octet-stream",
}


def _outcome_fields(outcome: ExtractionOutcome) -> dict:
    return {
        "success": outcome.value is not None,
        "document_type": outcome.document_type,
        "document_number": outcome.value,
        "stage": outcome.stage,
        "score": outcome.score,
        "candidates": [
            CandidateResponse(value=c.value, line_index=c.line_index, score=c.score)
            for c in outcome.candidates
        ],
        "message": None if outcome.value else MISSING_MESSAGE,
    }


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        tesseract_available=shutil.which("tesseract") is not None,
    )


@app.get("/document-types", response_model=DocumentTypesResponse)
async def list_document_types() -> DocumentTypesResponse:
    """List supported document types and their submission patterns."""
    return DocumentTypesResponse(
        document_types=[
            DocumentTypeInfo(
                name=document_type,
                label=profile.label,
                description=profile.description,
                submission_pattern=(
                    profile.submission_pattern.pattern
                    if profile.submission_pattern is not None
                    else None
                ),
            )
            for document_type, profile in PROFILES.items()
        ]
    )


@app.post("/extract/text", response_model=ExtractionResponse)
async def extract_from_text(request: TextExtractionRequest) -> ExtractionResponse:
    """Extract a document number from OCR lines produced elsewhere.

    Args:
        request: Document type tag, OCR lines and optional mode.

    Returns:
        Extracted number (or none) with the scored candidates.
    """
    start_time = time.time()
    extractor = _get_extractor(request.mode)
    outcome = extractor.explain(request.document_type, request.lines)
    logger.info(
        "Text extraction for %s: %s",
        outcome.document_type,
        outcome.stage or "no value",
    )
    return ExtractionResponse(
        **_outcome_fields(outcome),
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@app.post("/extract", response_model=ImageExtractionResponse)
async def extract_from_image(
    file: Annotated[UploadFile, File(...)],
    document_type: Annotated[str, Query()] = DocumentType.OTHER.value,
) -> ImageExtractionResponse:
    """Run OCR on an uploaded photo and extract its document number.

    Args:
        file: Uploaded document photo (PNG, JPEG, TIFF or WebP).
        document_type: Document type tag; unknown tags use the generic strategy.

    Returns:
        OCR lines plus the extraction result.
    """
    start_time = time.time()

    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    try:
        ocr_engine, extractor, _ = _get_components()
        content = await file.read()
        ocr_result = ocr_engine.recognize(content)
        outcome = extractor.explain(document_type, ocr_result.lines)
    except Exception as exc:
        logger.error("Extraction failed for %s: %s", file.filename, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    logger.info(
        "Image extraction for %s: %s",
        outcome.document_type,
        outcome.stage or "no value",
    )
    return ImageExtractionResponse(
        **_outcome_fields(outcome),
        lines=ocr_result.lines,
        ocr_confidence=ocr_result.confidence,
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@app.post("/validate", response_model=ValidationResponse)
async def validate_document(request: ValidationRequest) -> ValidationResponse:
    """Validate a submitted number and compare it with the OCR suggestion.

    Args:
        request: Document type, submitted number and optional OCR value.

    Returns:
        Rule results and the reconciliation status.
    """
    _, _, rules_engine = _get_components()
    report = rules_engine.validate(request.document_type, request.document_number)
    reconciliation = reconcile(request.extracted_number, request.document_number)
    return ValidationResponse(
        document_type=DocumentType.parse(request.document_type),
        document_number=report.document_number,
        is_valid=report.all_valid,
        results=[
            ValidationResultResponse(
                is_valid=r.is_valid, message=r.message, rule_name=r.rule_name
            )
            for r in report.results
        ],
        reconciliation_status=reconciliation.status.value,
        reconciliation_message=reconciliation.message,
    )
