"""Shared test fixtures for Scribe.

Provides settings and a completion client wired to an in-memory proxy.
"""

from collections.abc import Callable

import httpx
import pytest

from scribe.completion.client import StreamingCompletionClient
from scribe.settings import Settings
from tests.helpers.proxy import PROXY_URL, RecordingProxy

# =============================================================================
# SETTINGS
# =============================================================================


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Provide test settings with safe defaults."""
    return Settings(
        proxy_url=PROXY_URL,
        default_model="test-model",
        stream_enabled=False,
        request_timeout=5.0,
        templates_path=tmp_path / "templates.json",
    )


@pytest.fixture
def mock_settings(test_settings: Settings, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Mock get_settings() to return test settings."""
    from scribe import settings

    monkeypatch.setattr(settings, "get_settings", lambda: test_settings)
    return test_settings


# =============================================================================
# PROXY
# =============================================================================


@pytest.fixture
def make_client() -> Callable[..., tuple[StreamingCompletionClient, RecordingProxy]]:
    """Factory for a client wired to a RecordingProxy.

    Usage::

        client, proxy = make_client(lambda req: httpx.Response(200, json={...}))
    """

    def _make(
        respond: Callable[[httpx.Request], httpx.Response],
        *,
        stream: bool = False,
    ) -> tuple[StreamingCompletionClient, RecordingProxy]:
        proxy = RecordingProxy(respond)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(proxy))
        client = StreamingCompletionClient(
            PROXY_URL,
            model="test-model",
            stream=stream,
            http_client=http_client,
        )
        return client, proxy

    return _make
