"""Tests for API configuration and HTTP session management."""
import pytest

import aiohttp

from archiveflow.core.api import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    SessionManager,
)

from conftest import FakeSession


class TestAPIConfig:
    """Test suite for APIConfig."""

    def test_defaults(self):
        """Test endpoints and classification defaults."""
        config = APIConfig.default()

        assert config.s3_base == "https://s3.us.archive.org"
        assert config.metadata_base == "https://archive.org/metadata"
        assert config.mediatype == "audio"
        assert config.collection == "opensource_audio"
        assert config.derived_format == "PNG"
        assert config.poll_interval == 5
        assert config.skip_after_seconds == 20

    def test_urls(self):
        """Test URL helpers."""
        config = APIConfig()

        assert config.item_url("item", "a.mp3") == "https://s3.us.archive.org/item/a.mp3"
        assert config.details_url("item") == "https://archive.org/details/item"
        assert config.metadata_url("item") == "https://archive.org/metadata/item"

    def test_urls_trailing_slash(self):
        config = APIConfig(s3_base="http://localhost:9000/", public_base="http://localhost/")

        assert config.item_url("i", "f") == "http://localhost:9000/i/f"
        assert config.details_url("i") == "http://localhost/details/i"

    def test_insecure(self):
        config = APIConfig.insecure()

        assert config.get_connector_kwargs()['ssl'] is False

    def test_secure_context(self):
        assert APIConfig().get_connector_kwargs()['ssl'] is not False

    def test_session_kwargs(self):
        """Test user agent and extra headers are merged."""
        config = APIConfig(extra_headers={'X-Test': '1'})
        kwargs = config.get_session_kwargs()

        assert kwargs['headers']['User-Agent'] == config.user_agent
        assert kwargs['headers']['X-Test'] == '1'
        assert isinstance(kwargs['timeout'], aiohttp.ClientTimeout)

    def test_request_kwargs(self):
        assert APIConfig().get_request_kwargs() == {}
        assert APIConfig.with_proxy("http://p:1").get_request_kwargs() == {'proxy': "http://p:1"}


class TestSubConfigs:
    """Test suite for proxy, SSL and timeout configuration."""

    def test_proxy_with_credentials(self):
        """Test credentials become proxy authorization, not part of the URL."""
        proxy = ProxyConfig(url="http://proxy:8080", username="u", password="p")
        kwargs = proxy.to_request_kwargs()

        assert kwargs['proxy'] == "http://proxy:8080"
        assert kwargs['proxy_auth'] == aiohttp.BasicAuth("u", "p")

    def test_proxy_empty(self):
        assert ProxyConfig().to_request_kwargs() == {}

    def test_ssl_disabled(self):
        assert SSLConfig(verify=False).create_ssl_context() is False

    def test_timeouts(self):
        timeout = TimeoutConfig(total=None, sock_read=60, probe_total=5)

        assert timeout.to_aiohttp_timeout().sock_read == 60
        assert timeout.to_aiohttp_timeout().total is None
        assert timeout.to_probe_timeout().total == 5


class TestSessionManager:
    """Test suite for SessionManager."""

    @pytest.mark.asyncio
    async def test_borrowed_session_not_closed(self):
        """Test a caller-provided session is left open."""
        session = FakeSession()
        manager = SessionManager(session=session)

        assert await manager.get_async_session() is session
        await manager.close()

        assert not session.closed

    @pytest.mark.asyncio
    async def test_owned_session_lifecycle(self):
        """Test lazily created sessions are reused and closed."""
        async with SessionManager() as manager:
            first = await manager.get_async_session()
            second = await manager.get_async_session()

            assert first is second
            assert isinstance(first, aiohttp.ClientSession)

        assert first.closed
