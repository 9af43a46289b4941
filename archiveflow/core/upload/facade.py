"""
Upload facade.

Provides a simplified interface for file uploads.
Follows Facade Pattern - hides complexity of the upload subsystem.
"""
from pathlib import Path
from typing import Optional, Union, Iterable, Callable
import logging

from ..api.auth import ArchiveKeys
from ..api.config import APIConfig
from ..api.session import SessionManager
from .coordinator import UploadCoordinator
from .models import ArchiveMetadata, UploadFile, UploadRequest, UploadOutcome


class UploadFacade:
    """
    Simplified interface for IA uploads.

    Hides identifier generation, header building and streaming.

    Example:
        >>> from archiveflow.core.upload import UploadFacade
        >>> uploader = UploadFacade(keys)
        >>> outcome = await uploader.upload("episode.mp3", title="Episode 1")
        >>> print(outcome.url if outcome.ok else outcome.message)
    """

    def __init__(
        self,
        keys: ArchiveKeys,
        config: Optional[APIConfig] = None,
        session_manager: Optional[SessionManager] = None,
        log_level: Optional[int] = None
    ):
        """
        Initialize upload facade.

        Args:
            keys: IA-S3 credential pair
            config: API configuration
            session_manager: Shared HTTP session manager
            log_level: Logging level (defaults to config.log_level)
        """
        self._keys = keys
        self._config = config or APIConfig.default()

        self._logger = logging.getLogger('archiveflow.upload')
        self._logger.setLevel(log_level if log_level is not None else self._config.log_level)
        self._coordinator = UploadCoordinator(
            config=self._config,
            session_manager=session_manager or SessionManager(self._config)
        )

    async def upload(
        self,
        file_path: Union[str, Path],
        title: Optional[str] = None,
        description: str = '',
        tags: Iterable[str] = (),
        creator: Optional[str] = None,
        name: Optional[str] = None,
        on_progress: Optional[Callable[[float], None]] = None
    ) -> UploadOutcome:
        """
        Upload a file to the Internet Archive.

        Args:
            file_path: Path to file to upload
            title: Item title (defaults to the file stem)
            description: Item description
            tags: Subjects
            creator: Creator (defaults to config.default_creator)
            name: Optional custom object name
            on_progress: Optional percentage callback

        Returns:
            UploadSuccess or UploadFailure

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If path is not a file
        """
        upload_file = UploadFile.from_path(file_path, name=name)
        metadata = ArchiveMetadata(
            title=title if title is not None else Path(upload_file.name).stem,
            description=description,
            tags=tuple(tags),
            creator=creator if creator is not None else self._config.default_creator
        )
        request = UploadRequest(file=upload_file, metadata=metadata, keys=self._keys)
        return await self._coordinator.upload(request, on_progress)

    async def upload_request(
        self,
        request: UploadRequest,
        on_progress: Optional[Callable[[float], None]] = None
    ) -> UploadOutcome:
        """
        Upload using an explicit request.

        Args:
            request: Upload request

        Returns:
            UploadSuccess or UploadFailure
        """
        return await self._coordinator.upload(request, on_progress)
