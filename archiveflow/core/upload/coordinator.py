"""
Upload coordinator.

Orchestrates the upload process using injected dependencies.
Follows Dependency Inversion Principle - depends on abstractions, not concretions.
"""
import asyncio
import time
from typing import AsyncIterator, Callable, Optional

import aiohttp

from ..api.config import APIConfig
from ..api.session import SessionManager
from ..logging import get_logger
from .models import (
    UploadRequest,
    UploadProgress,
    UploadSuccess,
    UploadFailure,
    UploadOutcome,
    UploadEvent,
)
from .protocols import HeaderStrategy, PayloadReaderProtocol, ObjectUploaderProtocol
from .services import FileValidator, PayloadReader, ObjectUploader
from .strategies import ArchiveHeaderBuilder, generate_identifier, safe_filename


logger = get_logger('archiveflow.upload.coordinator')

ProgressCallback = Callable[[float], None]


class UploadCoordinator:
    """
    Coordinates one upload attempt.

    The attempt is exposed as an event stream: zero or more
    ``UploadProgress`` events with non-decreasing byte counts, followed by
    exactly one ``UploadSuccess`` or ``UploadFailure``.

    Uses dependency injection for all components, making it:
    - Testable (mock dependencies)
    - Extensible (swap strategies)
    - Maintainable (single responsibility)
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        session_manager: Optional[SessionManager] = None,
        header_strategy: Optional[HeaderStrategy] = None,
        payload_reader: Optional[PayloadReaderProtocol] = None,
        uploader: Optional[ObjectUploaderProtocol] = None,
        identifier_factory: Optional[Callable[[str], str]] = None
    ):
        """
        Initialize upload coordinator.

        Args:
            config: API configuration
            session_manager: Shared HTTP session manager
            header_strategy: Builds request headers
            payload_reader: Streams the payload
            uploader: Performs the PUT
            identifier_factory: Maps a title to a unique identifier
        """
        self._config = config or (session_manager.config if session_manager else APIConfig.default())
        self._sessions = session_manager or SessionManager(self._config)
        self._headers = header_strategy or ArchiveHeaderBuilder(self._config)
        self._reader = payload_reader or PayloadReader(self._config.chunk_size)
        self._uploader = uploader or ObjectUploader(self._sessions)
        self._validator = FileValidator()
        self._identifier_factory = identifier_factory or (
            lambda title: generate_identifier(title, prefix=self._config.identifier_prefix)
        )

    async def upload(
        self,
        request: UploadRequest,
        on_progress: Optional[ProgressCallback] = None
    ) -> UploadOutcome:
        """
        Execute an upload and return its outcome.

        Args:
            request: Upload request
            on_progress: Optional callback receiving percentages (0-100);
                never called when the payload size is unknown

        Returns:
            UploadSuccess or UploadFailure
        """
        outcome: Optional[UploadOutcome] = None
        async for event in self.stream(request):
            if isinstance(event, UploadProgress):
                percentage = event.percentage
                if on_progress and percentage is not None:
                    on_progress(percentage)
            else:
                outcome = event
        return outcome

    async def stream(self, request: UploadRequest) -> AsyncIterator[UploadEvent]:
        """
        Execute an upload as an event stream.

        Args:
            request: Upload request

        Yields:
            UploadProgress events, then one UploadSuccess or UploadFailure
        """
        identifier = self._identifier_factory(request.metadata.title)
        filename = safe_filename(request.file.name)
        url = self._config.item_url(identifier, filename)
        total = request.file.size

        try:
            self._validator.validate_size(total)
        except ValueError as e:
            logger.error(f"Upload rejected: {e}")
            yield UploadFailure(message=str(e), identifier=identifier)
            return

        size_text = f"{total / (1024 * 1024):.2f} MB" if total is not None else "unknown size"
        logger.info(f"Starting upload: {filename} ({size_text}) -> {identifier}")

        headers = self._headers.build(request.metadata, request.keys, content_length=total)
        progress_queue: asyncio.Queue = asyncio.Queue()

        async def body():
            sent = 0
            async for chunk in self._reader.iter_chunks(request.file.content):
                yield chunk
                # Resumed only after the transport consumed the piece
                sent += len(chunk)
                if total:
                    progress_queue.put_nowait(UploadProgress(bytes_sent=sent, total_bytes=total))

        upload_start = time.time()
        transfer = asyncio.ensure_future(self._uploader.put(url, headers, body()))
        getter: Optional[asyncio.Future] = None

        try:
            while not transfer.done():
                getter = asyncio.ensure_future(progress_queue.get())
                done, _ = await asyncio.wait(
                    {getter, transfer},
                    return_when=asyncio.FIRST_COMPLETED
                )
                if getter in done:
                    yield getter.result()
                else:
                    getter.cancel()

            while not progress_queue.empty():
                yield progress_queue.get_nowait()

            yield self._build_outcome(transfer, identifier, time.time() - upload_start)
        finally:
            if getter is not None and not getter.done():
                getter.cancel()
            if not transfer.done():
                transfer.cancel()
                try:
                    await transfer
                except asyncio.CancelledError:
                    pass

    def _build_outcome(
        self,
        transfer: asyncio.Future,
        identifier: str,
        elapsed: float
    ) -> UploadOutcome:
        """Translate the finished transfer into an outcome."""
        try:
            status, body = transfer.result()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.error(f"Network error during upload after {elapsed:.2f}s: {e}")
            return UploadFailure(
                message=f"Network error during upload: {e}",
                identifier=identifier,
                network_error=True
            )

        if 200 <= status < 300:
            url = self._config.details_url(identifier)
            logger.info(f"Upload completed in {elapsed:.2f}s: {url}")
            return UploadSuccess(identifier=identifier, url=url, status=status)

        failure = UploadFailure(
            message=f"Upload failed with status {status}: {body}",
            status=status,
            body=body,
            identifier=identifier
        )
        if failure.error_code:
            logger.error(f"Upload failed with status {status} ({failure.error_code}) after {elapsed:.2f}s")
        else:
            logger.error(f"Upload failed with status {status} after {elapsed:.2f}s")
        return failure
