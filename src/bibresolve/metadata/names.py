# ABOUTME: Author-name splitting into family name and given-name initials.
# ABOUTME: Shared by every adapter that receives free-form author strings.

import re

from bibresolve.metadata.types import Author

# Separators used when a single field lists several authors.
_MULTI_AUTHOR_RE = re.compile(r"\s+and\s+|,")


def initials(given: str) -> str:
    """Convert given names into spaced initials: "Jane Q" -> "J. Q."."""
    return " ".join(f"{word[0].upper()}." for word in given.split())


def split_name(name: str) -> tuple[str, str]:
    """Split a free-form name into (family, given initials).

    "Family, Given Names" splits on the comma; otherwise the last
    whitespace-separated token is the family name and the rest are initials.
    Returns ("", "") for a blank name.
    """
    name = name.strip()
    if not name:
        return "", ""
    if "," in name:
        family, given = name.split(",", 1)
        return family.strip(), initials(given)
    parts = name.split()
    if len(parts) == 1:
        return parts[0], ""
    return parts[-1], initials(" ".join(parts[:-1]))


def author_from_name(name: str) -> Author | None:
    """Build an Author from a free-form name, or None if the name is blank."""
    family, given = split_name(name)
    if not family:
        return None
    return Author(family=family, given=given)


def authors_from_names(names: list[str]) -> list[Author]:
    """Split each name and drop blanks, preserving order."""
    authors = []
    for name in names:
        author = author_from_name(name)
        if author is not None:
            authors.append(author)
    return authors


def split_author_list(text: str) -> list[str]:
    """Split a single author field on commas and " and "."""
    return [part.strip() for part in _MULTI_AUTHOR_RE.split(text) if part.strip()]
