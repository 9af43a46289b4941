"""Pytest fixtures for ArchiveFlow tests."""
import asyncio

import pytest

from archiveflow.core.api import APIConfig, ArchiveKeys, SessionManager


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse."""

    def __init__(self, status=200, body='', json_data=None, json_error=None):
        self.status = status
        self.body = body
        self.json_data = json_data
        self.json_error = json_error

    async def text(self, errors='strict'):
        return self.body

    async def json(self, content_type='application/json'):
        if self.json_error is not None:
            raise self.json_error
        return self.json_data


class FakeRequestContext:
    """Async context manager returned by FakeSession.get/put."""

    def __init__(self, response, error=None, on_enter=None):
        self.response = response
        self.error = error
        self.on_enter = on_enter

    async def __aenter__(self):
        if self.error is not None:
            raise self.error
        if self.on_enter is not None:
            await self.on_enter()
        return self.response

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """
    Records requests and replays canned responses.

    The PUT body is consumed like aiohttp does, one piece at a time.
    """

    def __init__(self, responses=None, error=None):
        if responses is None:
            responses = [FakeResponse()]
        elif isinstance(responses, FakeResponse):
            responses = [responses]
        self.responses = list(responses)
        self.error = error
        self.calls = []
        self.received = []
        self.closed = False

    def _next_response(self):
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]

    def get(self, url, **kwargs):
        self.calls.append(('GET', url, kwargs))
        return FakeRequestContext(self._next_response(), self.error)

    def put(self, url, data=None, headers=None, **kwargs):
        self.calls.append(('PUT', url, dict(headers or {})))

        async def consume():
            if data is None:
                return
            async for chunk in data:
                self.received.append(chunk)
                await asyncio.sleep(0)

        return FakeRequestContext(self._next_response(), self.error, consume)

    async def close(self):
        self.closed = True


async def instant_sleep(_seconds):
    """Sleep replacement that only yields to the event loop."""
    await asyncio.sleep(0)


async def never_wake(_seconds):
    """Sleep replacement that blocks until cancelled."""
    await asyncio.Event().wait()


@pytest.fixture
def keys():
    """IA-S3 key pair for testing."""
    return ArchiveKeys(access_key="ACCESS123", secret_key="SECRET456")


@pytest.fixture
def config():
    """Default configuration with a small transfer piece size."""
    return APIConfig(chunk_size=100)


@pytest.fixture
def fake_session():
    """Fake session answering 200 with an empty body."""
    return FakeSession()


@pytest.fixture
def session_manager(config, fake_session):
    """Session manager borrowing the fake session."""
    return SessionManager(config, session=fake_session)


@pytest.fixture
def metadata_payload():
    """Metadata API response of an item whose waveform exists."""
    return {
        'metadata': {'identifier': 'item-1', 'mediatype': 'audio'},
        'files': [
            {'name': 'episode.mp3', 'format': 'VBR MP3'},
            {'name': 'episode.png', 'format': 'PNG'},
        ],
    }
