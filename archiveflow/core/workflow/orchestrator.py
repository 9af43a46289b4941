"""
Upload workflow.

Sequences file selection, metadata review, upload and completion
verification into one observable state machine.
"""
import asyncio
from typing import Awaitable, Callable, List, Optional

from ..api.auth import ArchiveKeys
from ..api.config import APIConfig
from ..api.events import EventEmitter
from ..api.session import SessionManager
from ..exceptions import WorkflowError
from ..logging import get_logger
from ..metadata import FilenameMetadataGenerator, MetadataGenerator
from ..upload.coordinator import UploadCoordinator
from ..upload.models import (
    ArchiveMetadata,
    UploadFile,
    UploadFailure,
    UploadProgress,
    UploadRequest,
    UploadSuccess,
)
from ..verification import DerivativeChecker, DerivativePoller, ReadinessChecker, VerificationState
from .states import Idle, Reviewing, Uploading, Succeeded, Failed, StepState, can_transition


logger = get_logger('archiveflow.workflow')


class UploadWorkflow:
    """
    State machine driving one upload from file selection to a ready item.

    Steps: Idle -> Reviewing -> Uploading(p) -> Succeeded | Failed.
    ``retry`` goes from Failed back to Reviewing; ``reset`` returns to Idle
    from any step.

    Events:
        state(step): after every transition
        metadata(metadata): generated metadata arrived
        credentials_required(): publish needs keys, or the service rejected them
        tick(elapsed_seconds): verification clock advanced
        verified(state): derived artifact found
        error(exception): metadata generation failed

    Example:
        >>> async with UploadWorkflow(keys=keys) as flow:
        ...     flow.select_file(UploadFile.from_path("episode.mp3"))
        ...     await flow.metadata_ready()
        ...     if await flow.publish():
        ...         await flow.wait_verified()
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        session_manager: Optional[SessionManager] = None,
        coordinator: Optional[UploadCoordinator] = None,
        checker: Optional[ReadinessChecker] = None,
        metadata_generator: Optional[MetadataGenerator] = None,
        keys: Optional[ArchiveKeys] = None,
        event_emitter: Optional[EventEmitter] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Initialize workflow.

        Args:
            config: API configuration
            session_manager: Shared HTTP session manager
            coordinator: Upload coordinator (built from the session manager if omitted)
            checker: Readiness checker used after a successful upload
            metadata_generator: Draft metadata source
            keys: Credential pair, may be supplied later with set_keys()
            event_emitter: Event emitter
            sleep: Coroutine the verification clock waits with
        """
        self._owns_sessions = session_manager is None
        self._sessions = session_manager or SessionManager(config)
        self.config = config or self._sessions.config

        self._coordinator = coordinator or UploadCoordinator(self.config, self._sessions)
        self._checker = checker or DerivativeChecker(self._sessions)
        self._generator = metadata_generator or FilenameMetadataGenerator(
            creator=self.config.default_creator
        )
        self._sleep = sleep

        self.event_emitter = event_emitter or EventEmitter('archiveflow.workflow')
        self.keys = keys

        self.state: StepState = Idle()
        self.history: List[StepState] = [self.state]
        self.file: Optional[UploadFile] = None
        self.context = ''
        self.metadata = self._blank_metadata()
        self.poller: Optional[DerivativePoller] = None

        self._metadata_task: Optional[asyncio.Task] = None
        self._attempt = 0

    async def __aenter__(self) -> 'UploadWorkflow':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # Derived state

    @property
    def generating(self) -> bool:
        """True while metadata generation is pending."""
        return self._metadata_task is not None and not self._metadata_task.done()

    @property
    def progress(self) -> float:
        """Upload percentage of the current step (0 outside Uploading)."""
        return self.state.progress if isinstance(self.state, Uploading) else 0

    @property
    def verifying(self) -> bool:
        """True in Succeeded while the derived artifact is still awaited."""
        return (
            isinstance(self.state, Succeeded)
            and self.poller is not None
            and self.poller.active
        )

    @property
    def elapsed_seconds(self) -> int:
        """Seconds spent waiting for the derived artifact."""
        return self.poller.state.elapsed_seconds if self.poller else 0

    @property
    def can_skip(self) -> bool:
        """True once waiting may be abandoned by the user."""
        return self.verifying and self.poller.can_skip

    def on(self, event: str, callback: Callable) -> 'UploadWorkflow':
        """Registers an event handler."""
        self.event_emitter.on(event, callback)
        return self

    # Transitions

    def _transition(self, target: StepState):
        if not can_transition(self.state, target):
            raise WorkflowError(
                f"Cannot move from {self.state.name} to {target.name}"
            )
        logger.debug(f"{self.state.name} -> {target}")
        self.state = target
        self.history.append(target)
        self.event_emitter.emit('state', target)

    def _require(self, *steps):
        if not isinstance(self.state, steps):
            raise WorkflowError(f"Action not allowed while {self.state.name}")

    def _blank_metadata(self) -> ArchiveMetadata:
        return ArchiveMetadata(creator=self.config.default_creator)

    # Actions

    def select_file(self, file: UploadFile, context: str = ''):
        """
        Select the file to publish.

        Moves to Reviewing immediately; metadata generation continues in
        the background (see metadata_ready()).

        Args:
            file: Payload to upload
            context: Free text handed to the metadata generator

        Raises:
            WorkflowError: Outside Idle and Reviewing
        """
        self._require(Idle, Reviewing)
        self._cancel_metadata()

        self.file = file
        self.context = context
        self._transition(Reviewing())

        logger.info(f"Selected {file.name}")
        self._metadata_task = asyncio.ensure_future(
            self._generate_metadata(file.name, context, self._attempt)
        )

    async def _generate_metadata(self, filename: str, context: str, attempt: int):
        try:
            generated = await self._generator.generate(filename, context)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Metadata generation failed for {filename}: {e}")
            self.event_emitter.emit('error', e)
            return

        if attempt != self._attempt or self.file is None or self.file.name != filename:
            return
        self.metadata = generated
        self.event_emitter.emit('metadata', generated)

    async def metadata_ready(self) -> ArchiveMetadata:
        """Wait for pending metadata generation and return the current metadata."""
        task = self._metadata_task
        if task is not None and not task.done():
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
        return self.metadata

    def update_metadata(self, **changes) -> ArchiveMetadata:
        """
        Edit metadata fields (title, description, tags, creator).

        Raises:
            WorkflowError: Outside Reviewing and Failed
        """
        self._require(Reviewing, Failed)
        self.metadata = self.metadata.with_changes(**changes)
        return self.metadata

    def set_keys(self, keys: Optional[ArchiveKeys]):
        """Replace the credential pair used by the next publish."""
        self.keys = keys

    async def publish(self) -> bool:
        """
        Upload the selected file with the current metadata.

        The step enters Uploading(0) at once, so a second publish is
        rejected, and pending metadata generation is awaited after that.
        Without a complete key pair nothing is sent: ``credentials_required``
        is emitted and the step stays Reviewing. A reset while metadata is
        pending abandons the publish before any request is made.

        Returns:
            True if the upload succeeded

        Raises:
            WorkflowError: Outside Reviewing
        """
        self._require(Reviewing)
        if self.file is None:
            raise WorkflowError("No file selected")

        if self.keys is None or not self.keys.is_complete():
            logger.info("Publishing requires IA-S3 keys")
            self.event_emitter.emit('credentials_required')
            return False

        attempt = self._attempt
        keys = self.keys
        self._transition(Uploading(0))

        await self.metadata_ready()
        if attempt != self._attempt or self.file is None:
            logger.info("Upload abandoned before start")
            return False

        request = UploadRequest(file=self.file, metadata=self.metadata, keys=keys)

        stream = self._coordinator.stream(request)
        try:
            async for event in stream:
                if attempt != self._attempt:
                    logger.info("Upload abandoned")
                    return False

                if isinstance(event, UploadProgress):
                    percentage = event.percentage
                    if percentage is not None and percentage != self.progress:
                        self._transition(Uploading(percentage))
                elif isinstance(event, UploadSuccess):
                    self._transition(Succeeded(url=event.url, identifier=event.identifier))
                    self._start_verification(event.identifier)
                    return True
                elif isinstance(event, UploadFailure):
                    self._transition(Failed(event.message, event.is_auth_error))
                    if event.is_auth_error:
                        self.event_emitter.emit('credentials_required')
                    return False
        finally:
            await stream.aclose()

        return False

    def _start_verification(self, identifier: str):
        self.poller = DerivativePoller(
            self._checker,
            identifier,
            interval_seconds=self.config.poll_interval,
            skip_after_seconds=self.config.skip_after_seconds,
            sleep=self._sleep
        )
        self.poller.on('tick', lambda elapsed: self.event_emitter.emit('tick', elapsed))
        self.poller.on('done', lambda state: self.event_emitter.emit('verified', state))
        self.poller.start()

    async def wait_verified(self) -> Optional[VerificationState]:
        """
        Wait until verification ends (artifact found or skipped).

        Returns:
            Final verification state, None when no verification ran
        """
        if self.poller is None:
            return None
        return await self.poller.wait()

    def skip_verification(self):
        """
        Stop waiting for the derived artifact.

        Raises:
            WorkflowError: Outside Succeeded
        """
        self._require(Succeeded)
        if self.poller is not None:
            self.poller.cancel()

    def retry(self):
        """
        Return from Failed to Reviewing, keeping file and metadata.

        Raises:
            WorkflowError: Outside Failed
        """
        self._require(Failed)
        self._transition(Reviewing())

    def reset(self):
        """Discard everything and return to Idle."""
        self._attempt += 1
        self._release()
        self.file = None
        self.context = ''
        self.metadata = self._blank_metadata()
        self.poller = None
        self._transition(Idle())

    def _cancel_metadata(self):
        if self._metadata_task is not None and not self._metadata_task.done():
            self._metadata_task.cancel()
        self._metadata_task = None

    def _release(self):
        if self.poller is not None:
            self.poller.cancel()
        self._cancel_metadata()

    async def close(self):
        """Stop background work and close owned HTTP sessions."""
        self._attempt += 1
        self._release()
        if self._owns_sessions:
            await self._sessions.close()
