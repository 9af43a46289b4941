"""Tests for the upload coordinator."""
import asyncio
import pytest

import aiohttp

from archiveflow.core.api import APIConfig, SessionManager
from archiveflow.core.upload import (
    ArchiveMetadata,
    UploadCoordinator,
    UploadFacade,
    UploadFailure,
    UploadFile,
    UploadProgress,
    UploadRequest,
    UploadSuccess,
)

from conftest import FakeResponse, FakeSession


def make_coordinator(session, config=None):
    config = config or APIConfig(chunk_size=100)
    return UploadCoordinator(
        config=config,
        session_manager=SessionManager(config, session=session),
        identifier_factory=lambda title: "item-1"
    )


def make_request(keys, upload_file=None, **metadata):
    return UploadRequest(
        file=upload_file or UploadFile.from_bytes("My Episode.mp3", b"x" * 1000),
        metadata=ArchiveMetadata(title=metadata.pop('title', "My Episode"), **metadata),
        keys=keys
    )


async def collect(coordinator, request):
    return [event async for event in coordinator.stream(request)]


class TestUploadCoordinatorStream:
    """Test suite for UploadCoordinator.stream."""

    @pytest.mark.asyncio
    async def test_progress_then_success(self, keys):
        """Test monotonic progress followed by exactly one outcome."""
        session = FakeSession(FakeResponse(status=200))
        events = await collect(make_coordinator(session), make_request(keys))

        progress = [e for e in events if isinstance(e, UploadProgress)]
        outcomes = [e for e in events if not isinstance(e, UploadProgress)]

        assert [p.bytes_sent for p in progress] == [100 * i for i in range(1, 11)]
        assert progress[-1].percentage == 100.0
        assert len(outcomes) == 1
        assert events[-1] is outcomes[0]
        assert isinstance(outcomes[0], UploadSuccess)
        assert outcomes[0].url == "https://archive.org/details/item-1"
        assert outcomes[0].identifier == "item-1"

    @pytest.mark.asyncio
    async def test_payload_and_target(self, keys):
        """Test the full payload is sent to <s3>/<identifier>/<safe name>."""
        session = FakeSession()
        await collect(make_coordinator(session), make_request(keys))

        method, url, headers = session.calls[0]
        assert method == 'PUT'
        assert url == "https://s3.us.archive.org/item-1/My_Episode.mp3"
        assert b"".join(session.received) == b"x" * 1000
        assert headers['Content-Length'] == "1000"
        assert headers['Authorization'] == "LOW ACCESS123:SECRET456"
        assert headers['x-archive-meta-title'] == "My Episode"

    @pytest.mark.asyncio
    async def test_identifier_from_title(self, keys):
        """Test the default identifier factory uses the title."""
        config = APIConfig(chunk_size=100)
        session = FakeSession()
        coordinator = UploadCoordinator(
            config=config,
            session_manager=SessionManager(config, session=session)
        )

        events = await collect(coordinator, make_request(keys, title="Deep Dive"))

        assert events[-1].identifier.startswith("notebooklm-archive-deep-dive-")
        assert session.calls[0][1].startswith("https://s3.us.archive.org/notebooklm-archive-deep-dive-")

    @pytest.mark.asyncio
    async def test_auth_failure(self, keys):
        """Test 403 with InvalidAccessKeyId becomes a credential failure."""
        body = "<Error><Code>InvalidAccessKeyId</Code></Error>"
        session = FakeSession(FakeResponse(status=403, body=body))

        events = await collect(make_coordinator(session), make_request(keys))
        outcome = events[-1]

        assert isinstance(outcome, UploadFailure)
        assert outcome.status == 403
        assert outcome.body == body
        assert "403" in outcome.message
        assert "InvalidAccessKeyId" in outcome.message
        assert outcome.is_auth_error

    @pytest.mark.asyncio
    async def test_error_code_explained(self, keys):
        """Test a known S3 error code gets a readable reason."""
        body = "<Error><Code>SlowDown</Code></Error>"
        session = FakeSession(FakeResponse(status=503, body=body))

        outcome = (await collect(make_coordinator(session), make_request(keys)))[-1]

        assert isinstance(outcome, UploadFailure)
        assert outcome.error_code == 'SlowDown'
        assert "wait and try again" in outcome.reason
        assert outcome.message == f"Upload failed with status 503: {body}"
        assert not outcome.is_auth_error

    @pytest.mark.asyncio
    async def test_server_failure(self, keys):
        session = FakeSession(FakeResponse(status=500, body="Internal"))

        outcome = (await collect(make_coordinator(session), make_request(keys)))[-1]

        assert isinstance(outcome, UploadFailure)
        assert outcome.message == "Upload failed with status 500: Internal"
        assert not outcome.is_auth_error
        assert outcome.error_code is None
        assert outcome.reason is None

    @pytest.mark.asyncio
    async def test_network_failure(self, keys):
        """Test transport errors become a failure instead of raising."""
        session = FakeSession(error=aiohttp.ClientConnectionError("connection reset"))

        events = await collect(make_coordinator(session), make_request(keys))
        outcome = events[-1]

        assert isinstance(outcome, UploadFailure)
        assert outcome.network_error
        assert outcome.status is None
        assert outcome.message.startswith("Network error during upload")

    @pytest.mark.asyncio
    async def test_unknown_size_reports_no_progress(self, keys):
        """Test streams of unknown length never report percentages."""
        async def stream():
            for _ in range(5):
                yield b"y" * 64

        session = FakeSession()
        request = make_request(keys, upload_file=UploadFile.from_stream("live.mp3", stream()))

        events = await collect(make_coordinator(session), request)

        assert len(events) == 1
        assert isinstance(events[0], UploadSuccess)
        assert 'Content-Length' not in session.calls[0][2]
        assert len(b"".join(session.received)) == 320

    @pytest.mark.asyncio
    async def test_empty_payload_rejected(self, keys):
        """Test empty files fail without a request."""
        session = FakeSession()
        request = make_request(keys, upload_file=UploadFile.from_bytes("empty.mp3", b""))

        events = await collect(make_coordinator(session), request)

        assert len(events) == 1
        assert isinstance(events[0], UploadFailure)
        assert "empty" in events[0].message
        assert session.calls == []

    @pytest.mark.asyncio
    async def test_file_payload(self, keys, tmp_path):
        """Test files on disk are streamed."""
        path = tmp_path / "episode.mp3"
        path.write_bytes(b"z" * 250)
        session = FakeSession()

        request = make_request(keys, upload_file=UploadFile.from_path(path))
        events = await collect(make_coordinator(session), request)

        assert [e.bytes_sent for e in events if isinstance(e, UploadProgress)] == [100, 200, 250]
        assert b"".join(session.received) == b"z" * 250

    @pytest.mark.asyncio
    async def test_closing_stream_cancels_transfer(self, keys):
        """Test abandoning the stream stops the transfer."""
        started = asyncio.Event()

        class HangingUploader:
            cancelled = False

            async def put(self, url, headers, data):
                started.set()
                try:
                    await asyncio.Event().wait()
                except asyncio.CancelledError:
                    HangingUploader.cancelled = True
                    raise

        config = APIConfig()
        coordinator = UploadCoordinator(
            config=config,
            session_manager=SessionManager(config, session=FakeSession()),
            uploader=HangingUploader(),
            identifier_factory=lambda title: "item-1"
        )
        stream = coordinator.stream(make_request(keys))

        pending = asyncio.ensure_future(stream.__anext__())
        await started.wait()
        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending
        await stream.aclose()

        assert HangingUploader.cancelled


class TestUploadCoordinatorUpload:
    """Test suite for UploadCoordinator.upload."""

    @pytest.mark.asyncio
    async def test_callback_receives_percentages(self, keys):
        session = FakeSession()
        seen = []

        outcome = await make_coordinator(session).upload(make_request(keys), seen.append)

        assert isinstance(outcome, UploadSuccess)
        assert seen == sorted(seen)
        assert seen[-1] == 100.0

    @pytest.mark.asyncio
    async def test_callback_optional(self, keys):
        outcome = await make_coordinator(FakeSession()).upload(make_request(keys))

        assert outcome.ok


class TestUploadFacade:
    """Test suite for UploadFacade."""

    @pytest.mark.asyncio
    async def test_upload_from_path(self, keys, tmp_path):
        """Test title and creator defaults for a file on disk."""
        audio = tmp_path / "field recording.mp3"
        audio.write_bytes(b"x" * 300)
        config = APIConfig(chunk_size=100)
        session = FakeSession()
        facade = UploadFacade(keys, config, SessionManager(config, session=session))

        outcome = await facade.upload(audio, tags=["birds"])

        assert outcome.ok
        method, url, headers = session.calls[0]
        assert url.endswith("/field_recording.mp3")
        assert headers['x-archive-meta-title'] == "field recording"
        assert headers['x-archive-meta-creator'] == "NotebookLM"
        assert headers['x-archive-meta-subject'] == "birds"
        assert headers['Content-Length'] == "300"
        assert b"".join(session.received) == b"x" * 300

    @pytest.mark.asyncio
    async def test_missing_file(self, keys, tmp_path):
        facade = UploadFacade(keys, session_manager=SessionManager(session=FakeSession()))

        with pytest.raises(FileNotFoundError):
            await facade.upload(tmp_path / "missing.mp3")

    @pytest.mark.asyncio
    async def test_upload_request(self, keys):
        config = APIConfig(chunk_size=100)
        facade = UploadFacade(keys, config, SessionManager(config, session=FakeSession()))

        outcome = await facade.upload_request(make_request(keys))

        assert outcome.ok
