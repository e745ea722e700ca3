# ABOUTME: Error taxonomy for provider lookups, text parsing, and resolution.
# ABOUTME: Adapter-local failures subclass ProviderError so the resolver records them as attempts.

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bibresolve.metadata.types import Attempt


class MetadataFetchError(Exception):
    """Base class for every error raised while fetching bibliographic metadata."""


class ProviderError(MetadataFetchError):
    """A single provider failed to produce a usable record."""


class TransportError(ProviderError):
    """The request could not be sent or the response could not be received."""


class StatusError(ProviderError):
    """The provider answered with a non-2xx HTTP status."""

    def __init__(self, provider: str, status: int, body: str = "") -> None:
        self.provider = provider
        self.status = status
        self.body = body
        message = f"{provider}: http {status}"
        super().__init__(f"{message}: {body}" if body else message)


class DecodeError(ProviderError):
    """The response body did not match the shape the provider promises."""


class EmptyResultError(ProviderError):
    """The response was well-formed but carried no usable record."""


class RecordValidationError(ProviderError):
    """A record failed the canonical schema invariants."""


class InvalidKeyError(ProviderError):
    """The lookup key was empty or malformed, so no request was sent."""


class UnsupportedLookupError(ProviderError):
    """The provider does not implement the requested lookup capability."""


class NotConfiguredError(ProviderError):
    """The provider needs an API key that is not set, so no request was sent."""


class CallCancelled(MetadataFetchError):
    """An in-flight provider request was abandoned because the resolution was cancelled.

    Not a ProviderError, so handlers that ignore enrichment failures let it
    through.
    """


class TextParseError(MetadataFetchError):
    """Every parse strategy failed to recover structured data from model output."""


class ConfigurationError(MetadataFetchError):
    """A required setting (API key, endpoint) is missing."""


class NoProviderError(MetadataFetchError):
    """Every configured provider failed for a resolution call.

    Carries the full attempt trace so operators can see which sources were
    tried and why each failed.
    """

    def __init__(self, message: str, attempts: tuple[Attempt, ...]) -> None:
        super().__init__(message)
        self.attempts = attempts

    @property
    def providers_tried(self) -> int:
        return len(self.attempts)


class ResolutionCancelled(MetadataFetchError):
    """The caller cancelled the resolution before a provider succeeded."""

    def __init__(self, attempts: tuple[Attempt, ...]) -> None:
        super().__init__(f"resolution cancelled after {len(attempts)} provider attempt(s)")
        self.attempts = attempts
