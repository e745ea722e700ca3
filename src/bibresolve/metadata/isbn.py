# ABOUTME: ISBN normalization and ISBN-10 check-digit completion.
# ABOUTME: Pure functions with no I/O; adapters pick ISBN-10 vs ISBN-13 handling themselves.

import re

_STRIP_RE = re.compile(r"[\s-]")


def isbn10_check_digit(first9: str) -> str:
    """Compute the check digit that completes a 9-digit ISBN-10 core.

    Position weights run 1..9 over the core; the digit is
    (11 - sum mod 11) mod 11, with 10 written as 'X'.

    Raises:
        ValueError: if first9 is not exactly nine digits.
    """
    if len(first9) != 9 or not first9.isdigit():
        raise ValueError(f"expected 9 digits, got {first9!r}")
    total = sum(position * int(ch) for position, ch in enumerate(first9, start=1))
    check = (11 - total % 11) % 11
    return "X" if check == 10 else str(check)


def normalize_isbn(raw: str) -> str:
    """Strip whitespace and hyphens; complete a bare 9-digit core with its check digit.

    Anything else is returned cleaned but otherwise unchanged, so invalid input
    still reaches the provider, which then reports its own failure.
    """
    cleaned = _STRIP_RE.sub("", raw)
    if len(cleaned) == 9 and cleaned.isdigit():
        return cleaned + isbn10_check_digit(cleaned)
    return cleaned
