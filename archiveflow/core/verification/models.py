"""
Verification data models.

Contains the polling state and the parsed view of an item's metadata
record.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass
class VerificationState:
    """
    Mutable state of one polling session.

    Attributes:
        elapsed_seconds: Seconds waited so far (one increment per tick)
        done: True once the derived artifact was found
        cancelled: True when the caller stopped waiting
        checks: Number of completed status checks
    """
    elapsed_seconds: int = 0
    done: bool = False
    cancelled: bool = False
    checks: int = 0

    @property
    def finished(self) -> bool:
        """True when the session ended, either way."""
        return self.done or self.cancelled

    @property
    def elapsed_formatted(self) -> str:
        """Elapsed time as M:SS."""
        minutes, seconds = divmod(self.elapsed_seconds, 60)
        return f"{minutes}:{seconds:02d}"


@dataclass(frozen=True)
class ItemStatus:
    """
    Parsed view of an IA metadata API response.

    Attributes:
        identifier: Requested identifier
        exists: True if the response describes that identifier
        formats: Declared formats of the item's files, in listing order
        derived_format: Format that marks processing as finished
    """
    identifier: str
    exists: bool = False
    formats: Tuple[str, ...] = ()
    derived_format: str = 'PNG'
    raw: Optional[Dict[str, Any]] = field(default=None, repr=False, compare=False)

    @property
    def ready(self) -> bool:
        """True if the item exists and lists the derived artifact."""
        return self.exists and self.derived_format in self.formats

    @property
    def file_count(self) -> int:
        """Number of files in the listing."""
        return len(self.formats)

    @classmethod
    def from_metadata(
        cls,
        identifier: str,
        data: Any,
        derived_format: str = 'PNG'
    ) -> 'ItemStatus':
        """
        Build status from a metadata API payload.

        Unknown or malformed payloads yield a status that is not ready.

        Args:
            identifier: Requested identifier
            data: Decoded JSON body
            derived_format: Format that marks processing as finished

        Returns:
            ItemStatus instance
        """
        if not isinstance(data, dict):
            return cls(identifier=identifier, derived_format=derived_format)

        metadata = data.get('metadata')
        exists = isinstance(metadata, dict) and metadata.get('identifier') == identifier

        files = data.get('files')
        formats = tuple(
            f.get('format') for f in files
            if isinstance(f, dict) and isinstance(f.get('format'), str)
        ) if isinstance(files, list) else ()

        return cls(
            identifier=identifier,
            exists=exists,
            formats=formats,
            derived_format=derived_format,
            raw=data
        )
