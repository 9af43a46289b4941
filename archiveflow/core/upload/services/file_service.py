"""
File validation and reading services.

Single Responsibility: Each class handles one specific task.
"""
from pathlib import Path
from typing import AsyncIterator, Optional, Tuple, Union
import logging

import aiofiles


class FileValidator:
    """
    Validates files before upload.

    Responsibilities:
    - Check file existence
    - Verify file is not a directory
    - Get file size
    """

    def validate(self, file_path: Union[str, Path]) -> Tuple[Path, int]:
        """
        Validate a file for upload.

        Args:
            file_path: Path to the file

        Returns:
            Tuple of (validated Path, file size in bytes)

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If path is not a regular file
        """
        path = Path(file_path) if isinstance(file_path, str) else file_path

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        if not path.is_file():
            raise ValueError(f"Path is not a file: {path}")

        file_size = path.stat().st_size

        return path, file_size

    def validate_size(self, file_size: Optional[int], max_size: Optional[int] = None) -> None:
        """
        Validate file size.

        Args:
            file_size: File size in bytes (None when unknown)
            max_size: Optional maximum allowed size

        Raises:
            ValueError: If file is empty or exceeds max size
        """
        if file_size is None:
            return

        if file_size == 0:
            raise ValueError("Cannot upload empty file")

        if max_size and file_size > max_size:
            raise ValueError(
                f"File size {file_size} exceeds maximum {max_size}"
            )


class PayloadReader:
    """
    Streams an upload payload in fixed-size pieces.

    Uses aiofiles for non-blocking reads from disk. In-memory bytes are
    sliced, async streams are passed through unchanged.
    """

    DEFAULT_CHUNK_SIZE = 256 * 1024

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize payload reader.

        Args:
            chunk_size: Piece size in bytes for files and in-memory payloads
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._chunk_size = chunk_size
        self._logger = logging.getLogger('archiveflow.upload.file')

    @property
    def chunk_size(self) -> int:
        """Returns the piece size."""
        return self._chunk_size

    async def iter_chunks(self, content) -> AsyncIterator[bytes]:
        """
        Yield the payload piece by piece.

        Args:
            content: Path, bytes, or async iterable of bytes

        Yields:
            Non-empty byte strings
        """
        if isinstance(content, (str, Path)):
            async for chunk in self._iter_file(Path(content)):
                yield chunk
        elif isinstance(content, (bytes, bytearray, memoryview)):
            data = bytes(content)
            for start in range(0, len(data), self._chunk_size):
                yield data[start:start + self._chunk_size]
        else:
            async for chunk in content:
                if chunk:
                    yield bytes(chunk)

    async def _iter_file(self, path: Path) -> AsyncIterator[bytes]:
        self._logger.debug(f"Streaming {path} in {self._chunk_size // 1024} KB pieces")
        async with aiofiles.open(path, 'rb') as handle:
            while True:
                chunk = await handle.read(self._chunk_size)
                if not chunk:
                    break
                yield chunk
