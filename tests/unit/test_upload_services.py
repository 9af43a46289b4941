"""Tests for upload services."""
import asyncio
import pytest
from pathlib import Path
import tempfile
import os

import aiohttp

from archiveflow.core.api import APIConfig, SessionManager
from archiveflow.core.upload.services import (
    FileValidator,
    PayloadReader,
    ObjectUploader
)

from conftest import FakeResponse, FakeSession


class TestFileValidator:
    """Test suite for FileValidator."""

    @pytest.fixture
    def validator(self):
        """Create validator instance."""
        return FileValidator()

    @pytest.fixture
    def temp_file(self):
        """Create temporary file for testing."""
        fd, path = tempfile.mkstemp()
        os.write(fd, b"test content")
        os.close(fd)
        yield Path(path)
        os.unlink(path)

    def test_validate_existing_file(self, validator, temp_file):
        """Test validating existing file."""
        path, size = validator.validate(temp_file)

        assert path == temp_file
        assert size == 12  # "test content"

    def test_validate_string_path(self, validator, temp_file):
        """Test validating string path."""
        path, size = validator.validate(str(temp_file))

        assert path == temp_file

    def test_validate_nonexistent_file(self, validator):
        """Test validating non-existent file."""
        with pytest.raises(FileNotFoundError):
            validator.validate(Path("/nonexistent/file.mp3"))

    def test_validate_directory(self, validator):
        """Test validating directory raises error."""
        with pytest.raises(ValueError):
            validator.validate(Path(tempfile.gettempdir()))

    def test_validate_size_ok(self, validator):
        """Test size validation passes."""
        validator.validate_size(1000, max_size=2000)

    def test_validate_size_unknown(self, validator):
        """Test unknown sizes are accepted."""
        validator.validate_size(None)

    def test_validate_size_empty(self, validator):
        """Test empty file raises error."""
        with pytest.raises(ValueError, match="empty"):
            validator.validate_size(0)

    def test_validate_size_exceeds_max(self, validator):
        """Test exceeding max size raises error."""
        with pytest.raises(ValueError, match="exceeds"):
            validator.validate_size(2000, max_size=1000)


class TestPayloadReader:
    """Test suite for PayloadReader."""

    @pytest.fixture
    def reader(self):
        """Create reader with 8-byte pieces."""
        return PayloadReader(chunk_size=8)

    @pytest.fixture
    def temp_file(self):
        """Create temporary file with known content."""
        fd, path = tempfile.mkstemp()
        os.write(fd, b"0123456789ABCDEFGHIJ")  # 20 bytes
        os.close(fd)
        yield Path(path)
        os.unlink(path)

    async def collect(self, reader, content):
        return [chunk async for chunk in reader.iter_chunks(content)]

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            PayloadReader(chunk_size=0)

    @pytest.mark.asyncio
    async def test_file_chunks(self, reader, temp_file):
        """Test files are read in fixed pieces."""
        chunks = await self.collect(reader, temp_file)

        assert chunks == [b"01234567", b"89ABCDEF", b"GHIJ"]

    @pytest.mark.asyncio
    async def test_string_path(self, reader, temp_file):
        """Test string paths are treated as files."""
        chunks = await self.collect(reader, str(temp_file))

        assert b"".join(chunks) == b"0123456789ABCDEFGHIJ"

    @pytest.mark.asyncio
    async def test_bytes_chunks(self, reader):
        """Test in-memory payloads are sliced."""
        chunks = await self.collect(reader, b"x" * 20)

        assert [len(c) for c in chunks] == [8, 8, 4]

    @pytest.mark.asyncio
    async def test_empty_bytes(self, reader):
        assert await self.collect(reader, b"") == []

    @pytest.mark.asyncio
    async def test_stream_passthrough(self, reader):
        """Test async streams are forwarded without empty pieces."""
        async def stream():
            yield b"abc"
            yield b""
            yield b"defghijklmnop"

        chunks = await self.collect(reader, stream())

        assert chunks == [b"abc", b"defghijklmnop"]


class TestObjectUploader:
    """Test suite for ObjectUploader."""

    async def body(self):
        yield b"part1"
        yield b"part2"

    @pytest.mark.asyncio
    async def test_put_returns_status_and_body(self):
        """Test status and body are returned untouched."""
        session = FakeSession(FakeResponse(status=200, body="ok"))
        uploader = ObjectUploader(SessionManager(APIConfig(), session=session))

        status, text = await uploader.put("https://s3/item/a.mp3", {'h': 'v'}, self.body())

        assert (status, text) == (200, "ok")
        assert session.received == [b"part1", b"part2"]
        assert session.calls[0] == ('PUT', "https://s3/item/a.mp3", {'h': 'v'})

    @pytest.mark.asyncio
    async def test_put_error_status_is_not_raised(self):
        """Test HTTP errors are reported, not raised."""
        session = FakeSession(FakeResponse(status=503, body="SlowDown"))
        uploader = ObjectUploader(SessionManager(APIConfig(), session=session))

        status, text = await uploader.put("https://s3/item/a.mp3", {}, self.body())

        assert status == 503
        assert text == "SlowDown"

    @pytest.mark.asyncio
    async def test_put_network_error_propagates(self):
        """Test transport errors propagate to the caller."""
        session = FakeSession(error=aiohttp.ClientConnectionError("reset"))
        uploader = ObjectUploader(SessionManager(APIConfig(), session=session))

        with pytest.raises(aiohttp.ClientConnectionError):
            await uploader.put("https://s3/item/a.mp3", {}, self.body())

    @pytest.mark.asyncio
    async def test_put_timeout_propagates(self):
        session = FakeSession(error=asyncio.TimeoutError())
        uploader = ObjectUploader(SessionManager(APIConfig(), session=session))

        with pytest.raises(asyncio.TimeoutError):
            await uploader.put("https://s3/item/a.mp3", {}, self.body())
