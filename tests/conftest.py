# ABOUTME: Shared pytest fixtures for bibresolve tests.
# ABOUTME: Provides a real BibHttpClient wired to a routing fake transport and a clean environment.

from collections.abc import Callable

import httpx
import pytest

from bibresolve.metadata.http import BibHttpClient
from tests.fixtures.fake_http import RoutingTransport

_ENV_VARS = (
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "OMDB_API_KEY",
    "TMDB_API_KEY",
    "BIBRESOLVE_TIMEOUT",
    "BIBRESOLVE_USER_AGENT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own settings out of every test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def routed_client() -> Callable[[dict[str, httpx.Response]], BibHttpClient]:
    """Factory for a real BibHttpClient whose transport answers from URL-substring routes.

    The transport is exposed as `client.transport` so tests can inspect requests.
    """

    def factory(routes: dict[str, httpx.Response]) -> BibHttpClient:
        transport = RoutingTransport(routes)
        client = BibHttpClient(transport=transport)
        client.transport = transport  # type: ignore[attr-defined]
        return client

    return factory
