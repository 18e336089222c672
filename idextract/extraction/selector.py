"""Best-candidate selection and the extraction entry point.

Extraction runs as a single stateless pipeline per call:

1. line-scoped generate, score, select;
2. if nothing is selected, a whole-text fallback pass (for national IDs
   without the checksum gate);
3. otherwise no value.

A ``None`` result means "could not extract, ask for manual entry".
Callers must never replace it with a guess.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from idextract.utils.config import ExtractionConfig
from idextract.utils.logger import get_logger

from .candidates import Candidate, generate, generate_fallback
from .document_types import DocumentType
from .normalizer import NormalizedText, normalize
from .scoring import FALLBACK_WEIGHTS, LINE_WEIGHTS, build_weights, score_all
from .simple import extract_simple

logger = get_logger(__name__)

_MODES = ("scored", "simple")


@dataclass
class ExtractionOutcome:
    """Diagnostic view of one extraction call."""

    value: str | None
    document_type: DocumentType
    stage: str | None = None
    score: int = 0
    candidates: list[Candidate] = field(default_factory=list)


def select_best(candidates: Iterable[Candidate]) -> Candidate | None:
    """Pick the highest-scoring candidate.

    Candidates scoring 0 or less are ineligible. Ties keep the first
    candidate seen, which makes the result deterministic.
    """
    best: Candidate | None = None
    for candidate in candidates:
        if candidate.score <= 0:
            continue
        if best is None or candidate.score > best.score:
            best = candidate
    return best


class DocumentNumberExtractor:
    """Extracts a document number from OCR lines.

    Holds only immutable configuration, so one instance can be shared
    between concurrent callers.

    Args:
        config: Extraction configuration. Defaults to scored mode with
            the built-in weights.
    """

    def __init__(self, config: ExtractionConfig | None = None) -> None:
        self.config = config or ExtractionConfig()
        self.line_weights = build_weights(LINE_WEIGHTS, self.config.weights)
        self.fallback_weights = build_weights(
            FALLBACK_WEIGHTS, self.config.fallback_weights
        )

    def extract(self, document_type: Any, lines: Iterable[Any] | None) -> str | None:
        """Return the most plausible document number, or ``None``.

        Args:
            document_type: A ``DocumentType`` or loose tag; unknown tags
                use the generic strategy.
            lines: OCR text lines in engine order.

        Returns:
            The extracted number, never validated for persistence.
        """
        return self.explain(document_type, lines).value

    def explain(
        self, document_type: Any, lines: Iterable[Any] | None
    ) -> ExtractionOutcome:
        """Run extraction and report which pass produced the value.

        Args:
            document_type: A ``DocumentType`` or loose tag.
            lines: OCR text lines in engine order.

        Returns:
            Outcome with the value, the stage that produced it, its
            score and all scored candidates of the deciding pass.
        """
        doc_type = DocumentType.parse(document_type)
        normalized = normalize(lines)

        if self.config.mode == "simple":
            value = extract_simple(doc_type, normalized.text)
            return ExtractionOutcome(value, doc_type, "simple" if value else None)

        candidates = self._line_candidates(doc_type, normalized)
        best = select_best(candidates)
        if best is not None:
            logger.debug("Line pass selected %s (score=%d)", doc_type, best.score)
            return ExtractionOutcome(
                best.value, doc_type, "line", best.score, candidates
            )

        if self.config.fallback_enabled:
            fallback = self._fallback_candidates(doc_type, normalized)
            best = select_best(fallback)
            if best is not None:
                logger.debug(
                    "Fallback pass selected %s (score=%d)", doc_type, best.score
                )
                return ExtractionOutcome(
                    best.value, doc_type, "fallback", best.score, fallback
                )
            candidates = candidates + fallback

        logger.debug("No document number found for %s", doc_type)
        return ExtractionOutcome(None, doc_type, None, 0, candidates)

    def line_pass(self, document_type: Any, lines: Iterable[Any] | None) -> str | None:
        """Run only the line-scoped pass (checksum-gated for national IDs)."""
        doc_type = DocumentType.parse(document_type)
        best = select_best(self._line_candidates(doc_type, normalize(lines)))
        return best.value if best else None

    def fallback_pass(
        self, document_type: Any, lines: Iterable[Any] | None
    ) -> str | None:
        """Run only the whole-text pass, without any checksum gate."""
        doc_type = DocumentType.parse(document_type)
        best = select_best(self._fallback_candidates(doc_type, normalize(lines)))
        return best.value if best else None

    def _line_candidates(
        self, doc_type: DocumentType, normalized: NormalizedText
    ) -> list[Candidate]:
        return score_all(
            generate(doc_type, normalized),
            doc_type,
            normalized,
            weights=self.line_weights,
        )

    def _fallback_candidates(
        self, doc_type: DocumentType, normalized: NormalizedText
    ) -> list[Candidate]:
        return score_all(
            generate_fallback(doc_type, normalized),
            doc_type,
            normalized,
            fallback=True,
            weights=self.fallback_weights,
        )


def extract_document_number(
    document_type: Any,
    lines: Iterable[Any] | None,
    mode: str = "scored",
) -> str | None:
    """Extract a document number with default weights.

    Args:
        document_type: A ``DocumentType`` or loose tag.
        lines: OCR text lines.
        mode: ``"scored"`` (multi-candidate) or ``"simple"`` (single regex).
            Any other value is logged and treated as ``"scored"``.

    Returns:
        The extracted number, or ``None``.
    """
    if mode not in _MODES:
        logger.warning("Unknown extraction mode %r, using scored", mode)
        mode = "scored"
    config = ExtractionConfig(mode=mode)
    return DocumentNumberExtractor(config).extract(document_type, lines)
