"""Pydantic request/response schemas for the FastAPI endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

from idextract.extraction.document_types import DocumentType


class TextExtractionRequest(BaseModel):
    """Request schema for extraction from already-recognized text."""

    document_type: str = DocumentType.OTHER.value
    lines: list[str | None] = Field(default_factory=list)
    mode: Literal["scored", "simple"] | None = None


class CandidateResponse(BaseModel):
    """Response schema for one scored candidate."""

    value: str
    line_index: int | None
    score: int


class ExtractionResponse(BaseModel):
    """Response schema for a document number extraction."""

    success: bool
    document_type: DocumentType
    document_number: str | None
    stage: str | None
    score: int
    candidates: list[CandidateResponse]
    message: str | None = None
    processing_time_ms: float


class ImageExtractionResponse(ExtractionResponse):
    """Response schema for extraction from an uploaded photo."""

    lines: list[str]
    ocr_confidence: float


class ValidationRequest(BaseModel):
    """Request schema for submission-time validation."""

    document_type: str
    document_number: str
    extracted_number: str | None = None


class ValidationResultResponse(BaseModel):
    """Response schema for a single rule result."""

    is_valid: bool
    message: str
    rule_name: str


class ValidationResponse(BaseModel):
    """Response schema for submission-time validation."""

    document_type: DocumentType
    document_number: str
    is_valid: bool
    results: list[ValidationResultResponse]
    reconciliation_status: str
    reconciliation_message: str


class DocumentTypeInfo(BaseModel):
    """Information about a supported document type."""

    name: DocumentType
    label: str
    description: str
    submission_pattern: str | None


class DocumentTypesResponse(BaseModel):
    """Response schema listing supported document types."""

    document_types: list[DocumentTypeInfo]


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
