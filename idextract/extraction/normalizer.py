"""Cleanup of raw OCR strings before candidate generation."""

import re
from collections.abc import Iterable
from dataclasses import dataclass

_WHITESPACE = re.compile(r"\s+")
_DASHES = re.compile("[‐‑‒–—−]")
_DOUBLE_QUOTES = re.compile("[“”„]")
_SINGLE_QUOTES = re.compile("[‘’‚]")
_NON_ALNUM = re.compile(r"[^A-Z0-9]")
_NON_DIGIT = re.compile(r"[^0-9]")

# Glyph confusions for license-plate-like tokens, applied to isolated letters only.
_ISOLATED_GLYPHS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bO\b"), "0"),
    (re.compile(r"\bI\b"), "1"),
    (re.compile(r"\bL\b"), "1"),
)


@dataclass(frozen=True)
class NormalizedText:
    """Per-call view of an OCR payload.

    Attributes:
        text: Lines joined with single spaces, dashes and quotes folded.
        upper: Upper-cased ``text``.
        lines: Per-line cleaned and upper-cased text, OCR order preserved.
        alnum: ``upper`` with everything but ``A-Z0-9`` removed.
        digits: ``upper`` with everything but digits removed.
    """

    text: str
    upper: str
    lines: tuple[str, ...]
    alnum: str
    digits: str

    @property
    def is_empty(self) -> bool:
        return not self.text


def _fold(value: str) -> str:
    value = _DASHES.sub("-", value)
    value = _DOUBLE_QUOTES.sub('"', value)
    return _SINGLE_QUOTES.sub("'", value)


def _coerce_lines(lines: Iterable[object] | None) -> list[str]:
    if lines is None:
        return []
    if isinstance(lines, str):
        return [lines]
    try:
        return ["" if line is None else str(line) for line in lines]
    except TypeError:
        return [str(lines)]


def normalize_text(lines: Iterable[object] | None) -> str:
    """Join OCR lines into a single cleaned string.

    Args:
        lines: Raw OCR lines. ``None`` entries count as empty.

    Returns:
        Whitespace-collapsed, dash/quote-folded, trimmed text.
    """
    joined = " ".join(_coerce_lines(lines))
    return _fold(_WHITESPACE.sub(" ", joined)).strip()


def normalize_token(value: str | None) -> str:
    """Upper-case a token and undo common OCR glyph swaps.

    Isolated ``O``, ``I`` and ``L`` become ``0``, ``1`` and ``1``;
    whitespace is removed and dashes are folded. This trades precision
    for recall and is only meant for license-style identifiers.
    """
    swapped = (value or "").upper()
    for pattern, replacement in _ISOLATED_GLYPHS:
        swapped = pattern.sub(replacement, swapped)
    swapped = _WHITESPACE.sub("", swapped)
    return _DASHES.sub("-", swapped).strip()


def strip_non_alnum(value: str) -> str:
    """Keep only upper-case letters and digits."""
    return _NON_ALNUM.sub("", value.upper())


def token_projection(value: str | None) -> tuple[str, tuple[int, ...]]:
    """Project each token of a string to alphanumerics with ``normalize_token``.

    Args:
        value: Raw line or text.

    Returns:
        The alphanumeric projection of the whitespace-separated tokens,
        and the offset in it where each non-empty token ends.
    """
    projection = ""
    ends: list[int] = []
    for token in (value or "").split():
        part = strip_non_alnum(normalize_token(token))
        if part:
            projection += part
            ends.append(len(projection))
    return projection, tuple(ends)


def normalize(lines: Iterable[object] | None) -> NormalizedText:
    """Build the normalized view used by generators and scorers."""
    raw_lines = _coerce_lines(lines)
    text = normalize_text(raw_lines)
    upper = text.upper()
    return NormalizedText(
        text=text,
        upper=upper,
        lines=tuple(normalize_text([line]).upper() for line in raw_lines),
        alnum=_NON_ALNUM.sub("", upper),
        digits=_NON_DIGIT.sub("", upper),
    )
