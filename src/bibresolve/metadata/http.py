# ABOUTME: Request-executor abstraction for provider API calls.
# ABOUTME: Provides rate limiting, a per-call timeout, and injectable transport for testing.

import logging
import time
from typing import Any, Protocol, runtime_checkable

import httpx

from bibresolve.metadata.cancel import current_token
from bibresolve.metadata.errors import TransportError

logger = logging.getLogger(__name__)

# Several providers reject obvious bot user agents, so present a desktop browser.
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT = 12.0


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for executing one prepared request and returning its response."""

    def execute(self, request: httpx.Request) -> httpx.Response: ...


class BibHttpClient:
    """HTTP client with rate limiting and a per-call timeout.

    Wraps httpx.Client. Exactly one network exchange per execute() call; a
    timeout or connection failure surfaces as TransportError, and status codes
    are left for the caller to judge.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        min_request_interval: float = 0.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": user_agent},
            "timeout": timeout,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)
        self._timeout = timeout
        self._min_interval = min_request_interval
        self._last_request_time: float = 0.0

    def execute(self, request: httpx.Request) -> httpx.Response:
        """Send a prepared request once and return the fully read response.

        The per-call timeout is shortened to whatever is left of the active
        cancellation deadline.

        Raises:
            TransportError: On connection failures, timeouts, or protocol errors.
        """
        self._rate_limit()
        if "user-agent" not in request.headers:
            request.headers["User-Agent"] = self._client.headers["User-Agent"]
        request.extensions.setdefault("timeout", self._call_timeout().as_dict())
        try:
            response = self._client.send(request)
        except httpx.HTTPError as exc:
            raise TransportError(f"Request failed: {request.url}: {exc}") from exc
        logger.debug("%s %s -> HTTP %d", request.method, request.url, response.status_code)
        return response

    def _call_timeout(self) -> httpx.Timeout:
        seconds = self._timeout
        token = current_token()
        remaining = token.remaining() if token is not None else None
        if remaining is not None:
            seconds = min(seconds, remaining)
        return httpx.Timeout(seconds)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "BibHttpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _rate_limit(self) -> None:
        """Sleep if needed to maintain minimum interval between requests."""
        if self._min_interval <= 0:
            return
        now = time.monotonic()
        elapsed = now - self._last_request_time
        if elapsed < self._min_interval and self._last_request_time > 0:
            time.sleep(self._min_interval - elapsed)
        self._last_request_time = time.monotonic()
