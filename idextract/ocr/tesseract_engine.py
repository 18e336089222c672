"""Tesseract adapter turning a document photo into OCR text lines.

The extractor consumes plain lines in engine order; this module is the
thin bridge between an uploaded image and that input.
"""

import io
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pytesseract
from PIL import Image

from idextract.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class OCRResult:
    """OCR output for one document photo."""

    text: str
    lines: list[str]
    language: str
    confidence: float


def split_lines(text: str) -> list[str]:
    """Split OCR text into trimmed, non-empty lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def load_image(source: bytes | Path | str | np.ndarray) -> np.ndarray:
    """Load an image from raw bytes, a path or an existing array.

    Args:
        source: Encoded image bytes, a file path, or an array.

    Returns:
        RGB or grayscale image as a numpy array.
    """
    if isinstance(source, np.ndarray):
        return source
    if isinstance(source, bytes):
        image = Image.open(io.BytesIO(source))
    else:
        image = Image.open(Path(source))
    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    return np.array(image)


class TesseractEngine:
    """Wrapper around Tesseract OCR for identity document photos.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
        psm: Tesseract page segmentation mode.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        psm: int = 3,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm

    def recognize(
        self,
        source: bytes | Path | str | np.ndarray,
        lang: str | None = None,
    ) -> OCRResult:
        """Run OCR and return the text split into lines.

        Args:
            source: Image bytes, path or array.
            lang: OCR language code. Defaults to the engine default.

        Returns:
            OCRResult with raw text, non-empty lines and mean confidence.

        Raises:
            pytesseract.TesseractError: If Tesseract fails on the image.
        """
        lang = lang or self.default_lang
        config = f"--psm {self.psm}"
        pil_image = Image.fromarray(load_image(source))

        text = pytesseract.image_to_string(pil_image, lang=lang, config=config)
        data = pytesseract.image_to_data(
            pil_image,
            lang=lang,
            config=config,
            output_type=pytesseract.Output.DICT,
        )

        confidences = [
            float(conf)
            for conf, word in zip(data["conf"], data["text"])
            if float(conf) > 0 and str(word).strip()
        ]
        avg_conf = sum(confidences) / len(confidences) / 100.0 if confidences else 0.0
        lines = split_lines(text)

        logger.info(
            "OCR produced %d lines with average confidence %.2f",
            len(lines),
            avg_conf,
        )
        return OCRResult(text=text, lines=lines, language=lang, confidence=avg_conf)
