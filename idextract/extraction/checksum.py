"""Verhoeff checksum for 12-digit national identity numbers.

The Verhoeff scheme detects every single-digit error and every
transposition of adjacent digits using the dihedral group D5.
"""

import re

# Multiplication table of D5.
D: tuple[tuple[int, ...], ...] = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9),
    (1, 2, 3, 4, 0, 6, 7, 8, 9, 5),
    (2, 3, 4, 0, 1, 7, 8, 9, 5, 6),
    (3, 4, 0, 1, 2, 8, 9, 5, 6, 7),
    (4, 0, 1, 2, 3, 9, 5, 6, 7, 8),
    (5, 9, 8, 7, 6, 0, 4, 3, 2, 1),
    (6, 5, 9, 8, 7, 1, 0, 4, 3, 2),
    (7, 6, 5, 9, 8, 2, 1, 0, 4, 3),
    (8, 7, 6, 5, 9, 3, 2, 1, 0, 4),
    (9, 8, 7, 6, 5, 4, 3, 2, 1, 0),
)

# Position permutation table; row i is the i-th power of (0 1 5 8 9 4 2 7)(3 6).
P: tuple[tuple[int, ...], ...] = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9),
    (1, 5, 7, 6, 2, 8, 3, 0, 9, 4),
    (5, 8, 0, 3, 7, 9, 6, 1, 4, 2),
    (8, 9, 1, 6, 0, 4, 3, 5, 2, 7),
    (9, 4, 5, 3, 1, 2, 6, 8, 7, 0),
    (4, 2, 8, 6, 5, 7, 3, 9, 0, 1),
    (2, 7, 9, 3, 8, 0, 6, 4, 1, 5),
    (7, 0, 4, 6, 9, 1, 3, 2, 5, 8),
)

INV: tuple[int, ...] = (0, 4, 3, 2, 1, 5, 6, 7, 8, 9)

NATIONAL_ID_LENGTH = 12

_NON_DIGIT = re.compile(r"[^0-9]")
_DIGITS_ONLY = re.compile(r"[0-9]+")


def verhoeff_validate(number: str | None) -> bool:
    """Check a 12-digit number against its trailing Verhoeff digit.

    Non-digit characters are removed first, so grouped input such as
    ``"2345 6789 0124"`` is accepted.

    Args:
        number: Candidate identity number.

    Returns:
        True when exactly 12 digits remain and the checksum is 0.
    """
    digits = _NON_DIGIT.sub("", number or "")
    if len(digits) != NATIONAL_ID_LENGTH:
        return False

    c = 0
    for i, ch in enumerate(reversed(digits)):
        c = D[c][P[i % 8][int(ch)]]
    return c == 0


def verhoeff_check_digit(payload: str) -> int:
    """Compute the Verhoeff check digit to append to ``payload``.

    Args:
        payload: Digit string without its check digit.

    Returns:
        The check digit (0-9).

    Raises:
        ValueError: If ``payload`` is empty or contains non-digits.
    """
    if not payload or not _DIGITS_ONLY.fullmatch(payload):
        raise ValueError(f"Payload must be a non-empty digit string: {payload!r}")

    c = 0
    for i, ch in enumerate(reversed(payload)):
        c = D[c][P[(i + 1) % 8][int(ch)]]
    return INV[c]
