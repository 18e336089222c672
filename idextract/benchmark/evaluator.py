"""Accuracy benchmarking for document number extraction.

Runs the extractor over labelled OCR samples and computes precision,
recall, F1 and accuracy per document type. A sample whose expected
value is ``null`` checks that the extractor correctly returns nothing.
"""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from idextract.extraction.document_types import DocumentType
from idextract.extraction.selector import DocumentNumberExtractor
from idextract.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Sample:
    """A labelled OCR payload."""

    sample_id: str
    document_type: DocumentType
    lines: list[str]
    expected: str | None


@dataclass
class TypeMetrics:
    """Precision, recall, F1, and accuracy for one document type.

    Args:
        document_type: Document type being measured.
    """

    document_type: str
    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    exact_matches: int = 0
    total: int = 0

    @property
    def precision(self) -> float:
        """Fraction of returned values that are correct."""
        denom = self.true_positives + self.false_positives
        if denom == 0:
            return 0.0
        return self.true_positives / denom

    @property
    def recall(self) -> float:
        """Fraction of expected values that were returned correctly."""
        denom = self.true_positives + self.false_negatives
        if denom == 0:
            return 0.0
        return self.true_positives / denom

    @property
    def f1(self) -> float:
        """Harmonic mean of precision and recall."""
        if self.precision + self.recall == 0:
            return 0.0
        return 2 * (self.precision * self.recall) / (self.precision + self.recall)

    @property
    def accuracy(self) -> float:
        """Fraction of samples where the output equals the label, ``None`` included."""
        if self.total == 0:
            return 0.0
        return self.exact_matches / self.total


@dataclass
class BenchmarkResult:
    """Aggregated benchmark results across all samples.

    Args:
        total_samples: Number of labelled samples.
        evaluated_samples: Number of samples with a prediction entry.
        overall_accuracy: Mean per-type accuracy.
        overall_f1: Mean per-type F1 score.
        type_metrics: Per-type metric details.
        avg_processing_time_ms: Average extraction time in milliseconds.
        errors: List of error messages encountered.
    """

    total_samples: int
    evaluated_samples: int
    overall_accuracy: float
    overall_f1: float
    type_metrics: dict[str, TypeMetrics]
    avg_processing_time_ms: float = 0.0
    errors: list[str] = field(default_factory=list)


def _canonical(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = "".join(str(value).split()).upper()
    return cleaned or None


class Evaluator:
    """Evaluates extraction predictions against labelled samples.

    Values are compared after removing whitespace and upper-casing.
    """

    def evaluate(
        self,
        predictions: dict[str, str | None],
        samples: list[Sample],
    ) -> BenchmarkResult:
        """Compare predictions against sample labels and compute metrics.

        Args:
            predictions: Mapping of sample id to extracted value.
            samples: Labelled samples.

        Returns:
            Aggregated benchmark results with per-type metrics.
        """
        type_metrics: dict[str, TypeMetrics] = {}
        errors: list[str] = []
        missing_count = 0

        for sample in samples:
            key = sample.document_type.value
            metrics = type_metrics.setdefault(key, TypeMetrics(key))
            metrics.total += 1
            expected = _canonical(sample.expected)

            if sample.sample_id not in predictions:
                errors.append(f"Missing prediction for {sample.sample_id}")
                missing_count += 1
                if expected is not None:
                    metrics.false_negatives += 1
                continue

            predicted = _canonical(predictions[sample.sample_id])
            if predicted == expected:
                metrics.exact_matches += 1
                if predicted is not None:
                    metrics.true_positives += 1
            elif predicted is None:
                metrics.false_negatives += 1
            else:
                metrics.false_positives += 1
                if expected is not None:
                    metrics.false_negatives += 1

        all_f1 = [m.f1 for m in type_metrics.values() if m.total > 0]
        all_acc = [m.accuracy for m in type_metrics.values() if m.total > 0]

        return BenchmarkResult(
            total_samples=len(samples),
            evaluated_samples=len(samples) - missing_count,
            overall_accuracy=sum(all_acc) / len(all_acc) if all_acc else 0.0,
            overall_f1=sum(all_f1) / len(all_f1) if all_f1 else 0.0,
            type_metrics=type_metrics,
            errors=errors,
        )

    def generate_report(
        self, result: BenchmarkResult, output_path: Path | None = None
    ) -> str:
        """Generate a human-readable benchmark report.

        Args:
            result: Benchmark results to format.
            output_path: Optional path to write the report file.

        Returns:
            Formatted report string.
        """
        lines = [
            "=" * 60,
            "EXTRACTION BENCHMARK REPORT",
            "=" * 60,
            f"Total Samples:        {result.total_samples}",
            f"Evaluated:            {result.evaluated_samples}",
            f"Overall Accuracy:     {result.overall_accuracy:.2%}",
            f"Overall F1 Score:     {result.overall_f1:.3f}",
            f"Avg Extraction Time:  {result.avg_processing_time_ms:.2f}ms",
            "",
            "Per-Type Metrics:",
            "-" * 60,
            f"{'Type':<12} {'Precision':>11} {'Recall':>11} "
            f"{'F1':>11} {'Accuracy':>11}",
            "-" * 60,
        ]

        for name, metrics in sorted(result.type_metrics.items()):
            lines.append(
                f"{name:<12} {metrics.precision:>11.2%} {metrics.recall:>11.2%} "
                f"{metrics.f1:>11.3f} {metrics.accuracy:>11.2%}"
            )
        lines.append("=" * 60)

        if result.errors:
            lines.append("")
            lines.append("Errors:")
            for error in result.errors:
                lines.append(f"  - {error}")

        report = "\n".join(lines)

        if output_path:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w") as f:
                f.write(report)
            logger.info("Report written to %s", output_path)

        return report


def run_benchmark(
    samples: list[Sample], extractor: DocumentNumberExtractor | None = None
) -> tuple[dict[str, str | None], BenchmarkResult]:
    """Extract every sample and evaluate the predictions.

    Args:
        samples: Labelled samples.
        extractor: Extractor to benchmark. Defaults to the scored mode.

    Returns:
        Predictions keyed by sample id and the benchmark result.
    """
    extractor = extractor or DocumentNumberExtractor()
    predictions: dict[str, str | None] = {}
    start = time.perf_counter()
    for sample in samples:
        predictions[sample.sample_id] = extractor.extract(
            sample.document_type, sample.lines
        )
    elapsed_ms = (time.perf_counter() - start) * 1000

    result = Evaluator().evaluate(predictions, samples)
    result.avg_processing_time_ms = elapsed_ms / len(samples) if samples else 0.0
    logger.info(
        "Benchmarked %d samples: accuracy %.2f", len(samples), result.overall_accuracy
    )
    return predictions, result


def load_samples(path: Path) -> list[Sample]:
    """Load labelled samples from a JSON or YAML file.

    Format: ``{"sample_id": {"document_type": "pan", "lines": [...],
    "expected": "ABCDE1234F"}, ...}``. ``expected`` may be ``null``.

    Args:
        path: Path to the samples file.

    Returns:
        Samples in file order.

    Raises:
        ValueError: If the file format is not supported.
    """
    if path.suffix == ".json":
        with open(path) as f:
            raw = json.load(f)
    elif path.suffix in (".yaml", ".yml"):
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    else:
        raise ValueError(f"Unsupported samples format: {path.suffix}")

    return [
        Sample(
            sample_id=str(sample_id),
            document_type=DocumentType.parse(entry.get("document_type")),
            lines=[str(line) for line in entry.get("lines") or []],
            expected=entry.get("expected"),
        )
        for sample_id, entry in raw.items()
    ]
