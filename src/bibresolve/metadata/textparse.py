# ABOUTME: Resilient recovery of keyword arrays and JSON objects from generative-model output.
# ABOUTME: Each target shape has an ordered tuple of pure strategies; the first usable result wins.

import json
from collections.abc import Callable
from typing import Any

from bibresolve.metadata.errors import TextParseError

# Characters trimmed from each piece during heuristic salvage.
_SALVAGE_TRIM = "[]\"'` \t\r\n"


def _clean_items(items: list[Any]) -> list[str]:
    """Trimmed, lowercased string items; non-strings and blanks are dropped."""
    return [item.strip().lower() for item in items if isinstance(item, str) and item.strip()]


def _decode(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return None


def _outermost(text: str, open_ch: str, close_ch: str) -> str | None:
    """Substring from the first `open_ch` to the last `close_ch`, inclusive."""
    start = text.find(open_ch)
    end = text.rfind(close_ch)
    if start < 0 or end <= start:
        return None
    return text[start : end + 1]


# -- keyword strategies ----------------------------------------------------


def _strict_array(text: str) -> list[str] | None:
    value = _decode(text.strip())
    return _clean_items(value) if isinstance(value, list) else None


def _bracketed_array(text: str) -> list[str] | None:
    snippet = _outermost(text, "[", "]")
    if snippet is None:
        return None
    return _strict_array(snippet)


def _salvage_list(text: str) -> list[str] | None:
    if "," in text:
        pieces = text.split(",")
    elif "\n" in text:
        pieces = text.splitlines()
    else:
        pieces = [text]
    return _clean_items([piece.strip(_SALVAGE_TRIM) for piece in pieces])


KEYWORD_STRATEGIES: tuple[Callable[[str], list[str] | None], ...] = (
    _strict_array,
    _bracketed_array,
    _salvage_list,
)


# -- object strategies -----------------------------------------------------


def _strict_object(text: str) -> dict[str, Any] | None:
    value = _decode(text.strip())
    return value if isinstance(value, dict) else None


def _braced_object(text: str) -> dict[str, Any] | None:
    snippet = _outermost(text, "{", "}")
    if snippet is None:
        return None
    return _strict_object(snippet)


OBJECT_STRATEGIES: tuple[Callable[[str], dict[str, Any] | None], ...] = (
    _strict_object,
    _braced_object,
)


def parse_keywords(text: str) -> list[str]:
    """Recover a list of keywords from loosely formatted model output.

    Tries a strict JSON array, then the outermost [...] span, then a
    comma/newline split. Items come back trimmed and lowercased; duplicates
    and ordering are left to the caller.

    Raises:
        TextParseError: If no strategy yields at least one keyword.
    """
    for strategy in KEYWORD_STRATEGIES:
        items = strategy(text)
        if items:
            return items
    raise TextParseError(f"could not parse keywords from model output: {text[:200]!r}")


def parse_object(text: str) -> dict[str, Any]:
    """Recover a single JSON object from model output.

    Raises:
        TextParseError: If neither a strict decode nor the outermost {...} span works.
    """
    for strategy in OBJECT_STRATEGIES:
        obj = strategy(text)
        if obj is not None:
            return obj
    raise TextParseError(f"could not parse JSON object from model output: {text[:200]!r}")


def normalize_keywords(keywords: list[str]) -> list[str]:
    """Deduplicate and sort keywords case-insensitively."""
    unique = {k.strip().lower() for k in keywords if k.strip()}
    return sorted(unique, key=str.casefold)


def _joined_texts(parts: Any) -> str:
    """Concatenate `text` fields from a list of content parts."""
    return "".join(
        part["text"]
        for part in (parts if isinstance(parts, list) else [])
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    )


def extract_completion_text(body: str) -> str:
    """Pull the generated text out of a completion response envelope.

    Understands `output_text` (string or list of strings), nested
    `output[].content[].text`, chat-completions `choices[].message.content`,
    and top-level `content[].text`. Returns the body verbatim when none match.
    """
    envelope = _decode(body)
    if not isinstance(envelope, dict):
        return body

    output_text = envelope.get("output_text")
    if isinstance(output_text, str):
        return output_text
    if isinstance(output_text, list):
        return "".join(s for s in output_text if isinstance(s, str))

    output = envelope.get("output")
    if isinstance(output, list):
        items = (item for item in output if isinstance(item, dict))
        text = "".join(_joined_texts(item.get("content")) for item in items)
        if text.strip():
            return text

    choices = envelope.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        message = choices[0].get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return message["content"]

    text = _joined_texts(envelope.get("content"))
    if text.strip():
        return text
    return body
