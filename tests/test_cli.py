"""Tests for the command-line interface and CSV export."""

import csv
import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import yaml

from idextract.cli import (
    _find_images,
    _print_summary,
    _write_csv,
    extract_text,
    main,
    process_folder,
    scan_image,
    validate_number,
)
from idextract.ocr.tesseract_engine import OCRResult
from idextract.utils.config import AppConfig, ExtractionConfig


def _ocr_result(lines: list[str]) -> OCRResult:
    return OCRResult(text="\n".join(lines), lines=lines, language="eng", confidence=0.9)


class TestExtractText:
    """Tests for extraction from OCR lines."""

    def test_extract_tax_id(self) -> None:
        result = extract_text(["INCOME TAX DEPARTMENT ABCDE1234F"], "pan", AppConfig())
        assert result["document_type"] == "pan"
        assert result["document_number"] == "ABCDE1234F"
        assert result["stage"] == "line"
        assert result["candidates"] == [
            {"value": "ABCDE1234F", "line_index": 0, "score": 34}
        ]

    def test_simple_mode_from_config(self) -> None:
        config = AppConfig(extraction=ExtractionConfig(mode="simple"))
        result = extract_text(["XYZ1234567"], "voter", config)
        assert result["stage"] == "simple"

    def test_nothing_found(self) -> None:
        result = extract_text([], "aadhar", AppConfig())
        assert result["document_number"] is None
        assert result["candidates"] == []


class TestScanImage:
    """Tests for single-photo scanning."""

    @patch("idextract.cli.TesseractEngine")
    def test_scan_image(self, mock_engine_cls: MagicMock, tmp_path: Path) -> None:
        mock_engine_cls.return_value.recognize.return_value = _ocr_result(
            ["ELECTION COMMISSION OF INDIA", "XYZ1234567"]
        )
        result = scan_image(tmp_path / "card.png", "voter", AppConfig())
        assert result["filename"] == "card.png"
        assert result["document_number"] == "XYZ1234567"
        assert result["ocr_confidence"] == 0.9
        assert result["lines"] == ["ELECTION COMMISSION OF INDIA", "XYZ1234567"]


class TestFindImages:
    """Tests for photo discovery."""

    def test_find_png_files(self, tmp_path: Path) -> None:
        (tmp_path / "card1.png").touch()
        (tmp_path / "card2.png").touch()
        (tmp_path / "readme.txt").touch()
        files = _find_images(tmp_path)
        assert len(files) == 2
        assert all(f.suffix == ".png" for f in files)

    def test_find_mixed_extensions(self, tmp_path: Path) -> None:
        for name in ("a.png", "b.jpg", "c.jpeg", "d.tiff", "e.webp", "f.pdf"):
            (tmp_path / name).touch()
        assert len(_find_images(tmp_path)) == 5

    def test_find_uppercase_extensions(self, tmp_path: Path) -> None:
        (tmp_path / "CARD.PNG").touch()
        assert len(_find_images(tmp_path)) == 1

    def test_find_no_images(self, tmp_path: Path) -> None:
        (tmp_path / "readme.txt").touch()
        assert _find_images(tmp_path) == []


class TestWriteCsv:
    """Tests for CSV writing."""

    def test_write_csv_content(self, tmp_path: Path) -> None:
        results = [
            {
                "filename": "card.png",
                "status": "success",
                "document_type": "pan",
                "document_number": "ABCDE1234F",
                "stage": "line",
                "score": 34,
                "ocr_confidence": 0.9,
                "processing_time_s": 0.1,
                "error": None,
            }
        ]
        output = tmp_path / "results.csv"
        _write_csv(results, output)

        with open(output) as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 1
        assert rows[0]["document_number"] == "ABCDE1234F"
        assert rows[0]["score"] == "34"

    def test_failed_rows_leave_columns_blank(self, tmp_path: Path) -> None:
        output = tmp_path / "sub" / "results.csv"
        row = {"filename": "bad.png", "status": "failed", "error": "boom"}
        _write_csv([row], output)

        with open(output) as f:
            reader = csv.reader(f)
            headers = next(reader)
            row = next(reader)
        assert headers[:2] == ["filename", "status"]
        assert row[headers.index("document_number")] == ""
        assert row[headers.index("error")] == "boom"

    def test_write_csv_empty_results(self, tmp_path: Path) -> None:
        output = tmp_path / "results.csv"
        _write_csv([], output)
        assert not output.exists()


class TestPrintSummary:
    """Tests for summary printing."""

    def test_print_summary(self, capsys: pytest.CaptureFixture[str]) -> None:
        summary = {"total": 5, "successful": 4, "failed": 1, "extracted": 3}
        _print_summary(summary, Path("results.csv"))
        captured = capsys.readouterr()
        assert "Total:      5" in captured.out
        assert "Failed:     1" in captured.out
        assert "Extracted:  3" in captured.out
        assert "results.csv" in captured.out


class TestProcessFolder:
    """Tests for batch folder processing."""

    @patch("idextract.cli.TesseractEngine")
    @patch("idextract.cli.load_config")
    def test_process_folder_success(
        self,
        mock_config: MagicMock,
        mock_engine_cls: MagicMock,
        tmp_path: Path,
    ) -> None:
        mock_config.return_value = AppConfig()
        mock_engine_cls.return_value.recognize.side_effect = [
            _ocr_result(["INCOME TAX DEPARTMENT", "ABCDE1234F"]),
            _ocr_result(["smudged"]),
        ]
        (tmp_path / "card1.png").touch()
        (tmp_path / "card2.png").touch()
        output_csv = tmp_path / "output.csv"

        summary = process_folder(tmp_path, output_csv, "pan")
        assert summary == {"total": 2, "successful": 2, "failed": 0, "extracted": 1}

        with open(output_csv) as f:
            rows = list(csv.DictReader(f))
        assert rows[0]["document_number"] == "ABCDE1234F"
        assert rows[1]["document_number"] == ""

    @patch("idextract.cli.TesseractEngine")
    @patch("idextract.cli.load_config")
    def test_process_folder_with_failure(
        self,
        mock_config: MagicMock,
        mock_engine_cls: MagicMock,
        tmp_path: Path,
    ) -> None:
        mock_config.return_value = AppConfig()
        mock_engine_cls.return_value.recognize.side_effect = [
            _ocr_result(["XYZ1234567"]),
            RuntimeError("OCR failed"),
        ]
        (tmp_path / "card1.png").touch()
        (tmp_path / "card2.png").touch()

        summary = process_folder(tmp_path, tmp_path / "output.csv", "voter")
        assert summary["successful"] == 1
        assert summary["failed"] == 1

    @patch("idextract.cli.TesseractEngine")
    @patch("idextract.cli.load_config")
    def test_process_empty_folder(
        self, mock_config: MagicMock, mock_engine_cls: MagicMock, tmp_path: Path
    ) -> None:
        mock_config.return_value = AppConfig()
        summary = process_folder(tmp_path, tmp_path / "output.csv")
        assert summary["total"] == 0
        assert not (tmp_path / "output.csv").exists()


class TestValidateNumber:
    """Tests for submission-time validation from the CLI."""

    def test_valid_with_match(self) -> None:
        result = validate_number("pan", "ABCDE1234F", "abcde1234f")
        assert result["is_valid"] is True
        assert result["reconciliation"] == "match"

    def test_invalid_without_suggestion(self) -> None:
        result = validate_number("aadhar", "1234")
        assert result["is_valid"] is False
        assert result["reconciliation"] == "missing"


class TestMain:
    """Tests for argument parsing and command dispatch."""

    def test_extract_text_command(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        source = tmp_path / "ocr.txt"
        source.write_text("ELECTION COMMISSION OF INDIA\nXYZ1234567\n")
        main(["extract-text", str(source), "-t", "voter"])
        data = json.loads(capsys.readouterr().out)
        assert data["document_number"] == "XYZ1234567"

    def test_extract_text_to_file(self, tmp_path: Path) -> None:
        source = tmp_path / "ocr.txt"
        source.write_text("DL No MH12 20110012345\n")
        output = tmp_path / "out" / "result.json"
        main(["extract-text", str(source), "-t", "license", "-o", str(output)])
        assert json.loads(output.read_text())["document_number"] == "MH1220110012345"

    def test_missing_source_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["extract-text", str(tmp_path / "missing.txt")])
        assert exc.value.code == 1

    def test_validate_command_exit_codes(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        main(["validate", "voter", "XYZ1234567"])
        assert json.loads(capsys.readouterr().out)["is_valid"] is True

        with pytest.raises(SystemExit) as exc:
            main(["validate", "voter", "XYZ12"])
        assert exc.value.code == 1

    def test_benchmark_command(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        samples = tmp_path / "samples.yaml"
        with open(samples, "w") as f:
            yaml.dump(
                {
                    "pan_1": {
                        "document_type": "pan",
                        "lines": ["ABCDE1234F"],
                        "expected": "ABCDE1234F",
                    }
                },
                f,
            )
        main(["benchmark", str(samples)])
        assert "EXTRACTION BENCHMARK REPORT" in capsys.readouterr().out

    def test_batch_requires_directory(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["batch", str(tmp_path / "nope")])
        assert exc.value.code == 1

    def test_no_command_prints_help(self) -> None:
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 0
