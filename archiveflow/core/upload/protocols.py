"""
Protocol definitions for upload module.

Defines interfaces (protocols) for dependency injection and strategy pattern.
Following Interface Segregation Principle (ISP) and Dependency Inversion Principle (DIP).
"""
from typing import Protocol, Dict, AsyncIterable, AsyncIterator, Tuple, Optional

from ..api.auth import ArchiveKeys
from .models import ArchiveMetadata


class HeaderStrategy(Protocol):
    """
    Protocol for building upload request headers.

    Allows a different item classification or header policy to be plugged in.
    """

    def build(
        self,
        metadata: ArchiveMetadata,
        keys: ArchiveKeys,
        content_length: Optional[int] = None
    ) -> Dict[str, str]:
        """
        Build request headers.

        Args:
            metadata: Item metadata
            keys: Credential pair
            content_length: Payload size when known

        Returns:
            Header mapping
        """
        ...


class PayloadReaderProtocol(Protocol):
    """Protocol for payload reading operations."""

    def iter_chunks(self, content) -> AsyncIterator[bytes]:
        """
        Stream payload content.

        Args:
            content: Path, bytes or async iterable

        Returns:
            Async iterator of byte pieces
        """
        ...


class ObjectUploaderProtocol(Protocol):
    """Protocol for the raw PUT operation."""

    async def put(
        self,
        url: str,
        headers: Dict[str, str],
        data: AsyncIterable[bytes]
    ) -> Tuple[int, str]:
        """
        Upload a payload.

        Args:
            url: Target URL
            headers: Request headers
            data: Body stream

        Returns:
            Tuple of (status, body text)
        """
        ...

