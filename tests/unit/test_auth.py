"""Tests for the credential verifier."""
import asyncio
import pytest

import aiohttp

from archiveflow.core.api import APIConfig, ArchiveKeys, CredentialVerifier, SessionManager

from conftest import FakeResponse, FakeSession


def make_verifier(session):
    return CredentialVerifier(SessionManager(APIConfig(), session=session))


class TestCredentialVerifier:
    """Test suite for CredentialVerifier."""

    @pytest.mark.asyncio
    async def test_valid_keys(self, keys):
        """Test HTTP 200 means valid."""
        session = FakeSession(FakeResponse(status=200))

        assert await make_verifier(session).verify(keys) is True

    @pytest.mark.asyncio
    async def test_probe_request(self, keys):
        """Test a single GET to the S3 root with the LOW header."""
        session = FakeSession()

        await make_verifier(session).verify(keys)

        assert len(session.calls) == 1
        method, url, kwargs = session.calls[0]
        assert method == 'GET'
        assert url == "https://s3.us.archive.org"
        assert kwargs['headers'] == {'Authorization': "LOW ACCESS123:SECRET456"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [201, 301, 401, 403, 500])
    async def test_other_status_invalid(self, keys, status):
        """Test anything but 200 means invalid."""
        session = FakeSession(FakeResponse(status=status))

        assert await make_verifier(session).verify(keys) is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        aiohttp.ClientConnectionError("unreachable"),
        asyncio.TimeoutError(),
    ])
    async def test_network_error_invalid(self, keys, error):
        """Test network failures resolve to False instead of raising."""
        session = FakeSession(error=error)

        assert await make_verifier(session).verify(keys) is False

    @pytest.mark.asyncio
    async def test_incomplete_keys(self):
        """Test empty keys are rejected without a request."""
        session = FakeSession()

        assert await make_verifier(session).verify(ArchiveKeys("", "secret")) is False
        assert session.calls == []

    @pytest.mark.asyncio
    async def test_proxy_passed(self, keys):
        """Test proxy configuration reaches the request."""
        config = APIConfig.with_proxy("http://proxy:8080")
        session = FakeSession()
        verifier = CredentialVerifier(SessionManager(config, session=session))

        await verifier.verify(keys)

        assert session.calls[0][2]['proxy'] == "http://proxy:8080"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("access,secret", [
        ("ACCESS123", "SEC\nRET"),
        ("ACCESS123", "SECRET\r\nX-Injected: 1"),
        ("ACC\x00ESS", "SECRET456"),
        ("ACCESS123", "SECRET\u2019"),
    ])
    async def test_unsendable_keys_invalid(self, access, secret):
        """Test keys that cannot form a header resolve to False without a request."""
        session = FakeSession()

        assert await make_verifier(session).verify(ArchiveKeys(access, secret)) is False
        assert session.calls == []

    @pytest.mark.asyncio
    async def test_rejected_header_invalid(self, keys):
        """Test a header refused by the HTTP client resolves to False instead of raising."""
        session = FakeSession(error=ValueError("Newline or carriage return character detected"))

        assert await make_verifier(session).verify(keys) is False

    def test_is_transmittable(self, keys):
        assert keys.is_transmittable()
        assert ArchiveKeys("ACCESS", "SEC\tRET").is_transmittable() is False
        assert ArchiveKeys("ACCESS", "SECRET\u00e9").is_transmittable()
