# ABOUTME: Publication-date helpers: year extraction from loose strings and CSL date-parts.
# ABOUTME: Every adapter funnels date representations through here to get a plausible year.

import re
from typing import Any

from bibresolve.metadata.types import MIN_YEAR, max_year

_FOUR_DIGITS_RE = re.compile(r"(?=(\d{4}))")


def extract_year(text: str | None) -> int | None:
    """Return the first plausible 4-digit year found anywhere in text.

    Scans every 4-digit window in order, so "D:20240131" and "c1998." both
    work. Years outside 1000..next year are skipped.
    """
    if not text:
        return None
    upper = max_year()
    for match in _FOUR_DIGITS_RE.finditer(text):
        year = int(match.group(1))
        if MIN_YEAR <= year <= upper:
            return year
    return None


def year_from_date_parts(date_parts: Any) -> int | None:
    """Take the year from a CSL `date-parts` value like [[2001, 5, 3]]."""
    if not isinstance(date_parts, list) or not date_parts:
        return None
    first = date_parts[0]
    if not isinstance(first, list) or not first:
        return None
    try:
        year = int(first[0])
    except (TypeError, ValueError):
        return None
    return year if MIN_YEAR <= year <= max_year() else None


def date_from_parts(date_parts: Any) -> str:
    """Format CSL `date-parts` as YYYY-MM-DD; a missing day becomes the 1st.

    Returns "" for a bare year or anything malformed.
    """
    if year_from_date_parts(date_parts) is None:
        return ""
    first = date_parts[0]
    try:
        parts = [int(p) for p in first[:3]]
    except (TypeError, ValueError):
        return ""
    if len(parts) == 2:
        parts.append(1)
    if len(parts) < 3 or not 1 <= parts[1] <= 12 or not 1 <= parts[2] <= 31:
        return ""
    return f"{parts[0]:04d}-{parts[1]:02d}-{parts[2]:02d}"


def iso_date_prefix(text: str) -> str:
    """Return the leading YYYY-MM-DD of a timestamp, or "" when too short."""
    text = text.strip()
    if len(text) >= 10 and re.fullmatch(r"\d{4}-\d{2}-\d{2}", text[:10]):
        return text[:10]
    return ""
