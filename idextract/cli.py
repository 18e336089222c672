"""Command-line interface for document number extraction.

Provides subcommands for extracting from OCR text files or photos,
batch-processing a folder of photos into CSV, validating a submitted
number, and benchmarking against labelled samples.
"""

import argparse
import csv
import json
import sys
import time
from pathlib import Path

from idextract.benchmark.evaluator import Evaluator, load_samples, run_benchmark
from idextract.extraction.document_types import DocumentType
from idextract.extraction.selector import DocumentNumberExtractor
from idextract.ocr.tesseract_engine import TesseractEngine
from idextract.utils.config import AppConfig, load_config
from idextract.utils.logger import get_logger, setup_logging
from idextract.validation.document_rules import DocumentRulesEngine, reconcile

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.png", "*.jpg", "*.jpeg", "*.tiff", "*.tif", "*.webp")
_CSV_COLUMNS = [
    "filename",
    "status",
    "document_type",
    "document_number",
    "stage",
    "score",
    "ocr_confidence",
    "processing_time_s",
    "error",
]
_TYPE_CHOICES = [t.value for t in DocumentType]


def _find_images(input_dir: Path) -> list[Path]:
    """Find all supported photo files in a directory.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted list of image paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def _make_ocr_engine(config: AppConfig) -> TesseractEngine:
    return TesseractEngine(
        tesseract_cmd=config.ocr.tesseract_cmd,
        default_lang=config.ocr.default_lang,
        psm=config.ocr.psm,
    )


def _read_lines(source: str) -> list[str]:
    """Read OCR lines from a text file, or stdin when ``source`` is ``-``."""
    if source == "-":
        return sys.stdin.read().splitlines()
    return Path(source).read_text(encoding="utf-8").splitlines()


def extract_text(
    lines: list[str],
    document_type: str,
    config: AppConfig | None = None,
) -> dict[str, object]:
    """Extract a document number from OCR lines.

    Args:
        lines: OCR text lines.
        document_type: Document type tag.
        config: Application configuration.

    Returns:
        Dictionary with the value, stage, score and candidates.
    """
    config = config or load_config()
    outcome = DocumentNumberExtractor(config.extraction).explain(document_type, lines)
    return {
        "document_type": outcome.document_type.value,
        "document_number": outcome.value,
        "stage": outcome.stage,
        "score": outcome.score,
        "candidates": [
            {"value": c.value, "line_index": c.line_index, "score": c.score}
            for c in outcome.candidates
        ],
    }


def scan_image(
    file_path: Path,
    document_type: str,
    config: AppConfig | None = None,
) -> dict[str, object]:
    """Run OCR on a photo and extract its document number.

    Args:
        file_path: Path to the photo.
        document_type: Document type tag.
        config: Application configuration.

    Returns:
        Extraction dictionary plus the OCR lines and confidence.
    """
    config = config or load_config()
    ocr_result = _make_ocr_engine(config).recognize(file_path)
    result = extract_text(ocr_result.lines, document_type, config)
    result["filename"] = file_path.name
    result["lines"] = ocr_result.lines
    result["ocr_confidence"] = round(ocr_result.confidence, 3)
    return result


def process_folder(
    input_dir: Path,
    output_csv: Path,
    document_type: str = DocumentType.OTHER.value,
    verbose: bool = False,
) -> dict[str, int]:
    """Scan every photo in a folder and export results to CSV.

    A photo counts as successful when OCR ran, even if no number was
    found; the CSV row then has an empty ``document_number``.

    Args:
        input_dir: Directory containing photos.
        output_csv: Path for the output CSV file.
        document_type: Document type tag applied to every photo.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, failed and extracted counts.
    """
    config = load_config()
    ocr_engine = _make_ocr_engine(config)
    extractor = DocumentNumberExtractor(config.extraction)

    files = _find_images(input_dir)
    if not files:
        logger.warning("No images found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0, "extracted": 0}

    logger.info("Found %d images to process", len(files))

    results: list[dict[str, object]] = []
    successful = 0
    failed = 0
    extracted = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            ocr_result = ocr_engine.recognize(file_path)
            outcome = extractor.explain(document_type, ocr_result.lines)
            results.append(
                {
                    "filename": file_path.name,
                    "status": "success",
                    "document_type": outcome.document_type.value,
                    "document_number": outcome.value,
                    "stage": outcome.stage,
                    "score": outcome.score,
                    "ocr_confidence": round(ocr_result.confidence, 3),
                    "processing_time_s": round(time.time() - start_time, 2),
                    "error": None,
                }
            )
            successful += 1
            if outcome.value:
                extracted += 1
        except Exception as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            results.append(
                {
                    "filename": file_path.name,
                    "status": "failed",
                    "error": str(exc),
                }
            )
            failed += 1

    _write_csv(results, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {
        "total": len(files),
        "successful": successful,
        "failed": failed,
        "extracted": extracted,
    }
    _print_summary(summary, output_csv)
    return summary


def _write_csv(results: list[dict[str, object]], output_path: Path) -> None:
    """Write batch results to a CSV file.

    Args:
        results: List of result dictionaries.
        output_path: Path for the output CSV file.
    """
    if not results:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=_CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(results)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    """Print batch processing summary to stdout."""
    print(f"\n{'=' * 50}")
    print("Batch Processing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Extracted:  {summary['extracted']}")
    print(f"Output:     {output_csv}")


def validate_number(
    document_type: str,
    document_number: str,
    extracted_number: str | None = None,
) -> dict[str, object]:
    """Run submission-time rules and reconcile with the OCR suggestion.

    Args:
        document_type: Document type tag.
        document_number: Number entered by the operator.
        extracted_number: Number suggested by OCR, if any.

    Returns:
        Dictionary with validity, per-rule messages and reconciliation.
    """
    config = load_config()
    report = DocumentRulesEngine(Path(config.validation.rules_path)).validate(
        document_type, document_number
    )
    reconciliation = reconcile(extracted_number, document_number)
    return {
        "document_type": report.document_type,
        "document_number": report.document_number,
        "is_valid": report.all_valid,
        "results": [
            {"rule": r.rule_name, "is_valid": r.is_valid, "message": r.message}
            for r in report.results
        ],
        "reconciliation": reconciliation.status.value,
        "message": reconciliation.message,
    }


def _emit(payload: dict[str, object], output: Path | None) -> None:
    output_str = json.dumps(payload, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str)
        print(f"Output written to {output}")
    else:
        print(output_str)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Identity document number extractor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    text_parser = subparsers.add_parser(
        "extract-text", help="Extract from a file of OCR lines ('-' for stdin)"
    )
    text_parser.add_argument("source", help="Text file with one OCR line per row")
    text_parser.add_argument(
        "-t", "--type", choices=_TYPE_CHOICES, default="other", dest="doc_type"
    )
    text_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    scan_parser = subparsers.add_parser("scan", help="OCR a photo and extract")
    scan_parser.add_argument("file", type=Path, help="Document photo")
    scan_parser.add_argument(
        "-t", "--type", choices=_TYPE_CHOICES, default="other", dest="doc_type"
    )
    scan_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser("batch", help="Process a folder of photos")
    batch_parser.add_argument(
        "input_dir", type=Path, help="Input directory with photos"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-t", "--type", choices=_TYPE_CHOICES, default="other", dest="doc_type"
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    validate_parser = subparsers.add_parser(
        "validate", help="Validate a submitted document number"
    )
    validate_parser.add_argument("doc_type", choices=_TYPE_CHOICES)
    validate_parser.add_argument("number", help="Number entered by the operator")
    validate_parser.add_argument(
        "--extracted", default=None, help="Number suggested by OCR"
    )

    bench_parser = subparsers.add_parser(
        "benchmark", help="Measure accuracy on labelled samples"
    )
    bench_parser.add_argument("samples", type=Path, help="JSON or YAML samples file")
    bench_parser.add_argument("-o", "--output", type=Path, help="Report output file")

    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    if args.command == "extract-text":
        if args.source != "-" and not Path(args.source).exists():
            print(f"Error: {args.source} does not exist", file=sys.stderr)
            sys.exit(1)
        _emit(extract_text(_read_lines(args.source), args.doc_type), args.output)
    elif args.command == "scan":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        _emit(scan_image(args.file, args.doc_type), args.output)
    elif args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, args.doc_type, args.verbose)
    elif args.command == "validate":
        result = validate_number(args.doc_type, args.number, args.extracted)
        print(json.dumps(result, indent=2))
        if not result["is_valid"]:
            sys.exit(1)
    elif args.command == "benchmark":
        if not args.samples.exists():
            print(f"Error: {args.samples} does not exist", file=sys.stderr)
            sys.exit(1)
        _, result = run_benchmark(load_samples(args.samples))
        print(Evaluator().generate_report(result, args.output))
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
