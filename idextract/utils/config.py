"""Configuration management for the document number extractor.

Loads and validates YAML configuration with sensible defaults for
extraction, OCR and submission-time validation settings.
"""

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ExtractionConfig(BaseModel):
    """Configuration for document number extraction.

    ``weights`` and ``fallback_weights`` map a document type tag
    (``aadhar``, ``pan``, ``voter``, ``license``, ``other``) to scoring
    weight overrides for the line-scoped and whole-text passes.
    """

    mode: Literal["scored", "simple"] = "scored"
    fallback_enabled: bool = True
    weights: dict[str, dict[str, int]] = Field(default_factory=dict)
    fallback_weights: dict[str, dict[str, int]] = Field(default_factory=dict)


class OCRConfig(BaseModel):
    """Configuration for the Tesseract OCR adapter."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 3


class ValidationConfig(BaseModel):
    """Configuration for submission-time document rules."""

    rules_path: str = "configs/document_rules.yaml"


class AppConfig(BaseModel):
    """Top-level application configuration."""

    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
