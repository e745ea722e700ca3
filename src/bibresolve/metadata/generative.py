# ABOUTME: Generative-model helpers: an OpenAI-compatible completer plus keyword and film synthesis.
# ABOUTME: Model output is always routed through the resilient text parser before use.

import json
import logging
from typing import Protocol, runtime_checkable

import httpx

from bibresolve.config import Settings
from bibresolve.metadata.dates import extract_year, iso_date_prefix
from bibresolve.metadata.errors import (
    ConfigurationError,
    ProviderError,
    StatusError,
    TextParseError,
)
from bibresolve.metadata.http import HttpClient
from bibresolve.metadata.names import initials
from bibresolve.metadata.provider import as_dict, as_list, as_str
from bibresolve.metadata.sanitize import clean_record
from bibresolve.metadata.textparse import (
    extract_completion_text,
    normalize_keywords,
    parse_keywords,
    parse_object,
)
from bibresolve.metadata.types import Author, Record, new_id, validate_record

logger = logging.getLogger(__name__)

_TEMPERATURE = 0.2

_KEYWORD_SYSTEM = (
    "You generate concise topical keywords for cataloging and search. "
    "Output strictly JSON arrays of lowercase strings."
)
_KEYWORD_USER = (
    "Given the following work, return 5-12 topical keywords as a JSON array of lowercase "
    "strings. Use single- or short multi-word terms (no sentences), avoid duplicates and "
    "punctuation, and do not explain.\n\nTitle: {title}\nSummary: {summary}\n\n"
    'Return ONLY a JSON array, e.g., ["keyword", "another"].'
)

_MOVIE_SYSTEM = "You extract bibliographic metadata for films. Return strict JSON only."
_MOVIE_USER = """Given this film information, return ONLY a single JSON object with keys:
{{
  "title": string,
  "date": string,
  "publisher": string,
  "authors": [{{"family": string, "given": string}}],
  "summary": string
}}
Use YYYY-MM-DD for date when known, the studio or distributor as publisher, the
directors as authors, and 120-200 words of neutral prose as summary. Use empty
values when unknown.
Title: {title}
Date: {date}"""


@runtime_checkable
class Completer(Protocol):
    """A generative text capability: one prompt pair in, generated text out."""

    def complete(self, system_prompt: str, user_prompt: str) -> str: ...


class OpenAICompleter:
    """Completer backed by an OpenAI-compatible chat-completions endpoint."""

    def __init__(
        self,
        http_client: HttpClient,
        *,
        api_key: str,
        model: str,
        base_url: str,
    ) -> None:
        if not api_key.strip():
            raise ConfigurationError("OPENAI_API_KEY is not set")
        self._http = http_client
        self._api_key = api_key.strip()
        self._model = model
        self._endpoint = f"{base_url.rstrip('/')}/chat/completions"

    @classmethod
    def from_settings(cls, http_client: HttpClient, settings: Settings) -> "OpenAICompleter":
        return cls(
            http_client,
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
        )

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send one chat-completions request and return the generated text.

        Raises:
            TransportError: If the request fails in transit.
            StatusError: If the endpoint answers with a non-2xx status.
        """
        body = {
            "model": self._model,
            "temperature": _TEMPERATURE,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        request = httpx.Request(
            "POST",
            self._endpoint,
            content=json.dumps(body).encode("utf-8"),
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )
        response = self._http.execute(request)
        if not 200 <= response.status_code < 300:
            raise StatusError("openai", response.status_code, response.text[:4096].strip())
        return extract_completion_text(response.text)


def suggest_keywords(completer: Completer, title: str, summary: str) -> list[str]:
    """Ask the model for topical keywords and return them deduplicated and sorted.

    Raises:
        TextParseError: If no keywords can be recovered from the output.
    """
    text = completer.complete(_KEYWORD_SYSTEM, _KEYWORD_USER.format(title=title, summary=summary))
    return normalize_keywords(parse_keywords(text))


def synthesize_movie(completer: Completer, title: str, date: str = "") -> Record:
    """Build a `movie` record from model-supplied film metadata.

    The caller's title and date are used wherever the model leaves a field
    empty or its output cannot be parsed. Keywords come from
    suggest_keywords(), falling back to ["movie"].

    Raises:
        RecordValidationError: If the resulting record is still invalid.
    """
    title, date = title.strip(), date.strip()
    text = completer.complete(_MOVIE_SYSTEM, _MOVIE_USER.format(title=title, date=date))
    try:
        data = parse_object(text)
    except TextParseError as exc:
        logger.warning("Film metadata output unusable, keeping request fields: %s", exc)
        data = {}

    record = Record(id=new_id(), type="movie", title=as_str(data.get("title")) or title)
    record.date = iso_date_prefix(as_str(data.get("date"))) or iso_date_prefix(date)
    record.year = extract_year(as_str(data.get("date")) or date)
    record.publisher = as_str(data.get("publisher"))
    for entry in as_list(data.get("authors")):
        entry = as_dict(entry)
        family = as_str(entry.get("family"))
        if family:
            record.authors.append(Author(family=family, given=initials(as_str(entry.get("given")))))
    record.annotation.summary = as_str(data.get("summary")) or f"Film: {record.title}."

    try:
        record.annotation.keywords = suggest_keywords(
            completer, record.title, record.annotation.summary
        )
    except (TextParseError, ProviderError) as exc:
        logger.warning("Keyword suggestion failed for %r: %s", record.title, exc)
        record.annotation.keywords = ["movie"]

    clean_record(record)
    if not record.annotation.keywords:
        record.annotation.keywords = ["movie"]
    validate_record(record)
    return record
