"""Tests for the Verhoeff checksum."""

import pytest

from idextract.extraction.checksum import verhoeff_check_digit, verhoeff_validate

PAYLOADS = ["23456789012", "98765432109", "50381726493", "11122233344", "70000000001"]


def _with_check_digit(payload: str) -> str:
    return payload + str(verhoeff_check_digit(payload))


class TestVerhoeffValidate:
    """Tests for 12-digit validation."""

    def test_known_valid(self, valid_national_id: str) -> None:
        assert verhoeff_validate(valid_national_id)

    def test_known_invalid(self, invalid_national_id: str) -> None:
        assert not verhoeff_validate(invalid_national_id)

    def test_grouped_input_accepted(self) -> None:
        assert verhoeff_validate("2345 6789 0124")

    @pytest.mark.parametrize(
        "value", ["", None, "12345", "2345678901245", "abcdefghijkl"]
    )
    def test_wrong_length_rejected(self, value: str | None) -> None:
        assert not verhoeff_validate(value)

    def test_non_ascii_digits_rejected(self) -> None:
        assert not verhoeff_validate("२३४५६७८९०१२४")

    @pytest.mark.parametrize("payload", PAYLOADS)
    def test_generated_numbers_validate(self, payload: str) -> None:
        assert verhoeff_validate(_with_check_digit(payload))

    @pytest.mark.parametrize("payload", PAYLOADS)
    def test_single_digit_errors_detected(self, payload: str) -> None:
        number = _with_check_digit(payload)
        for i, ch in enumerate(number):
            wrong = str((int(ch) + 1) % 10)
            assert not verhoeff_validate(number[:i] + wrong + number[i + 1 :])

    @pytest.mark.parametrize("payload", PAYLOADS)
    def test_adjacent_transpositions_detected(self, payload: str) -> None:
        number = _with_check_digit(payload)
        for i in range(len(number) - 1):
            if number[i] == number[i + 1]:
                continue
            swapped = number[:i] + number[i + 1] + number[i] + number[i + 2 :]
            assert not verhoeff_validate(swapped)


class TestVerhoeffCheckDigit:
    """Tests for check digit generation."""

    def test_known_check_digit(self) -> None:
        assert verhoeff_check_digit("23456789012") == 4

    @pytest.mark.parametrize("payload", ["", "12a4", "12 34"])
    def test_invalid_payload_raises(self, payload: str) -> None:
        with pytest.raises(ValueError):
            verhoeff_check_digit(payload)
