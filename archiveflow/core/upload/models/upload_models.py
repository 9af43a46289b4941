"""
Data models for upload module.

Uses dataclasses for immutable, type-safe data structures.
"""
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import AsyncIterable, Iterable, Optional, Tuple, Union

from ...api.auth import ArchiveKeys
from ...api.errors import S3ErrorCodes, is_auth_failure
from ...exceptions import ArchiveAuthError, ArchiveException, ArchiveUploadError


Content = Union[Path, bytes, AsyncIterable[bytes]]


def dedupe_tags(tags: Iterable[str]) -> Tuple[str, ...]:
    """Remove exact duplicates while keeping first-seen order."""
    seen = set()
    result = []
    for tag in tags or ():
        if tag not in seen:
            seen.add(tag)
            result.append(tag)
    return tuple(result)


@dataclass(frozen=True)
class ArchiveMetadata:
    """
    Item metadata sent as x-archive-meta-* headers.

    Attributes:
        title: Item title
        description: Free-text description
        tags: Ordered subjects, deduplicated by exact match
        creator: Author shown on the item page

    Example:
        >>> meta = ArchiveMetadata(title="Episode 1", tags=["ai", "ai", "podcast"])
        >>> meta.tags
        ('ai', 'podcast')
    """
    title: str = ''
    description: str = ''
    tags: Tuple[str, ...] = ()
    creator: str = 'NotebookLM'

    def __post_init__(self):
        object.__setattr__(self, 'tags', dedupe_tags(self.tags))

    def with_changes(self, **kwargs) -> 'ArchiveMetadata':
        """Return a copy with some fields replaced."""
        return replace(self, **kwargs)


@dataclass(frozen=True)
class UploadFile:
    """
    Binary payload of an upload.

    Attributes:
        name: Original file name
        size: Size in bytes, None when it cannot be known up front
        content: Path on disk, in-memory bytes, or an async byte stream
    """
    name: str
    size: Optional[int]
    content: Content = field(repr=False)

    @classmethod
    def from_path(cls, file_path: Union[str, Path], name: Optional[str] = None) -> 'UploadFile':
        """
        Create payload from a file on disk.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If path is not a regular file
        """
        from ..services import FileValidator
        path, size = FileValidator().validate(file_path)
        return cls(name=name or path.name, size=size, content=path)

    @classmethod
    def from_bytes(cls, name: str, data: bytes) -> 'UploadFile':
        """Create payload from in-memory bytes."""
        return cls(name=name, size=len(data), content=bytes(data))

    @classmethod
    def from_stream(
        cls,
        name: str,
        stream: AsyncIterable[bytes],
        size: Optional[int] = None
    ) -> 'UploadFile':
        """Create payload from an async byte stream of optional known size."""
        return cls(name=name, size=size, content=stream)


@dataclass(frozen=True)
class UploadRequest:
    """
    Everything one upload attempt needs.

    Frozen: changing metadata after submission cannot affect the request
    already in flight.
    """
    file: UploadFile
    metadata: ArchiveMetadata
    keys: ArchiveKeys


@dataclass(frozen=True)
class UploadProgress:
    """
    Upload progress information.

    Attributes:
        bytes_sent: Bytes handed to the transport so far
        total_bytes: Payload size, None when unknown
    """
    bytes_sent: int = 0
    total_bytes: Optional[int] = None

    @property
    def percentage(self) -> Optional[float]:
        """Returns upload progress as percentage, None when total is unknown."""
        if not self.total_bytes:
            return None
        return min(100.0, self.bytes_sent * 100 / self.total_bytes)

    @property
    def is_complete(self) -> bool:
        """Returns True if every byte was sent; never True for unknown totals."""
        return bool(self.total_bytes) and self.bytes_sent >= self.total_bytes


@dataclass(frozen=True)
class UploadSuccess:
    """
    Successful upload.

    Attributes:
        identifier: Item identifier created for this upload
        url: Canonical public page of the item
        status: HTTP status returned by the service
    """
    identifier: str
    url: str
    status: int = 200

    ok = True


@dataclass(frozen=True)
class UploadFailure:
    """
    Failed upload.

    Attributes:
        message: Human readable message embedding status and raw body
        status: HTTP status code, None for network failures
        body: Raw response body
        identifier: Identifier the attempt used
        network_error: True when no HTTP response was received
    """
    message: str
    status: Optional[int] = None
    body: str = ''
    identifier: Optional[str] = None
    network_error: bool = False

    ok = False

    @property
    def is_auth_error(self) -> bool:
        """True when the failure was caused by rejected credentials."""
        return is_auth_failure(self.status, self.body or self.message)

    @property
    def error_code(self) -> Optional[str]:
        """S3 error code named in the response body, if any."""
        return S3ErrorCodes.find_code(self.body)

    @property
    def reason(self) -> Optional[str]:
        """Readable explanation of the S3 error code, if one was returned."""
        code = self.error_code
        return S3ErrorCodes.get_message(code) if code else None

    def to_exception(self) -> ArchiveException:
        """Convert to the matching exception type."""
        if self.is_auth_error:
            return ArchiveAuthError(self.message, self.status)
        return ArchiveUploadError(self.message, self.status, self.body)

    def raise_for_failure(self) -> None:
        """Raise ArchiveAuthError or ArchiveUploadError."""
        raise self.to_exception()


UploadOutcome = Union[UploadSuccess, UploadFailure]
UploadEvent = Union[UploadProgress, UploadSuccess, UploadFailure]
