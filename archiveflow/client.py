"""
ArchiveClient - High-level async client for Internet Archive uploads.

Example:
    >>> async with ArchiveClient("~/.config/archiveflow/credentials") as ia:
    ...     result = await ia.upload("episode.mp3", title="Episode 1")
    ...     await ia.wait_for_derivative(result.identifier)
"""
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from .core.api import APIConfig, ArchiveKeys, CredentialVerifier, SessionManager
from .core.exceptions import ArchiveAuthError
from .core.logging import get_logger
from .core.metadata import FilenameMetadataGenerator, MetadataGenerator
from .core.session import (
    CredentialStore,
    MemoryCredentialStore,
    SQLiteCredentialStore,
    StoredCredentials,
)
from .core.upload import UploadCoordinator, UploadFile, UploadRequest, UploadOutcome
from .core.verification import DerivativeChecker, DerivativePoller, ItemStatus, VerificationState
from .core.workflow import UploadWorkflow


class ArchiveClient:
    """
    High-level async client for publishing audio to the Internet Archive.

    Credentials come from a credential store (loaded once in start()) or
    are passed directly.

    1. Store mode:
        >>> client = ArchiveClient("credentials")     # credentials.session file
        >>> await client.start()

    2. Direct keys mode:
        >>> async with ArchiveClient(keys=ArchiveKeys("access", "secret")) as ia:
        ...     await ia.upload("episode.mp3")
    """

    def __init__(
        self,
        store: Optional[Union[str, Path, CredentialStore]] = None,
        *,
        keys: Optional[ArchiveKeys] = None,
        config: Optional[APIConfig] = None,
        metadata_generator: Optional[MetadataGenerator] = None,
        session_manager: Optional[SessionManager] = None
    ):
        """
        Initialize client.

        Args:
            store: Credential store, or a path for an SQLite store
                (None keeps credentials in memory)
            keys: Credential pair overriding the stored one
            config: API configuration
            metadata_generator: Draft metadata source for workflows
            session_manager: Shared HTTP session manager (created from config if omitted)
        """
        self._config = config or (session_manager.config if session_manager else APIConfig.default())
        self._logger = get_logger('archiveflow.client')

        if store is None:
            self._store: CredentialStore = MemoryCredentialStore()
        elif isinstance(store, (str, Path)):
            self._store = SQLiteCredentialStore(Path(store).expanduser())
        else:
            self._store = store

        self._keys = keys
        self._verified = False
        self._started = False

        self._sessions = session_manager or SessionManager(self._config)
        self._verifier = CredentialVerifier(self._sessions)
        self._coordinator = UploadCoordinator(self._config, self._sessions)
        self._checker = DerivativeChecker(self._sessions)
        self._generator = metadata_generator or FilenameMetadataGenerator(
            creator=self._config.default_creator
        )

    @property
    def config(self) -> APIConfig:
        return self._config

    @property
    def keys(self) -> Optional[ArchiveKeys]:
        """Current credential pair, None when not logged in."""
        return self._keys

    @property
    def verified(self) -> bool:
        """True if the current pair passed the credential probe."""
        return self._verified

    @property
    def store(self) -> CredentialStore:
        return self._store

    async def start(self) -> 'ArchiveClient':
        """
        Load stored credentials.

        Keys passed to the constructor take precedence over stored ones.

        Returns:
            Self for chaining
        """
        if self._started:
            return self

        stored = self._store.load()
        if self._keys is None and stored is not None and stored.is_valid():
            self._keys = stored.to_keys()
            self._verified = stored.verified
            self._logger.debug(f"Loaded stored credentials {stored!r}")

        self._started = True
        return self

    async def verify_credentials(self, keys: Optional[ArchiveKeys] = None) -> bool:
        """
        Probe the storage endpoint with a key pair.

        Args:
            keys: Pair to test (defaults to the current pair)

        Returns:
            True if the pair was accepted; never raises for network errors
        """
        keys = keys or self._keys
        if keys is None:
            return False
        return await self._verifier.verify(keys)

    async def login(self, access_key: str, secret_key: str, verify: bool = True) -> bool:
        """
        Set and persist a credential pair.

        The pair is saved even when the probe fails, together with its
        verified flag.

        Args:
            access_key: IA-S3 access key (surrounding whitespace is trimmed)
            secret_key: IA-S3 secret key (surrounding whitespace is trimmed)
            verify: Probe the pair before saving

        Returns:
            Verified flag that was stored

        Raises:
            ValueError: If either key is empty
        """
        keys = ArchiveKeys.from_input(access_key, secret_key)
        if not keys.is_complete():
            raise ValueError("Please enter both keys")

        verified = await self._verifier.verify(keys) if verify else False
        self._store.save(StoredCredentials.from_keys(keys, verified=verified))

        self._keys = keys
        self._verified = verified
        self._logger.info(f"Saved keys {keys.masked()} (verified={verified})")
        return verified

    def logout(self):
        """Forget the current and the stored credential pair."""
        self._store.delete()
        self._keys = None
        self._verified = False

    def _require_keys(self) -> ArchiveKeys:
        if self._keys is None or not self._keys.is_complete():
            raise ArchiveAuthError("No IA-S3 keys configured")
        return self._keys

    async def upload(
        self,
        file: Union[str, Path, UploadFile],
        title: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        creator: Optional[str] = None,
        context: str = '',
        on_progress: Optional[Callable[[float], None]] = None,
        raise_on_error: bool = True
    ) -> UploadOutcome:
        """
        Publish a file as a new item.

        Fields not given are filled in by the metadata generator.

        Args:
            file: Path or prepared UploadFile
            title: Item title
            description: Item description
            tags: Subjects
            creator: Creator
            context: Free text for the metadata generator
            on_progress: Optional percentage callback
            raise_on_error: Raise instead of returning UploadFailure

        Returns:
            UploadSuccess, or UploadFailure when raise_on_error is False

        Raises:
            ArchiveAuthError: Missing or rejected keys
            ArchiveUploadError: Any other upload failure
            FileNotFoundError: If the file doesn't exist
        """
        keys = self._require_keys()
        upload_file = file if isinstance(file, UploadFile) else UploadFile.from_path(file)

        metadata = await self._generator.generate(upload_file.name, context)
        changes = {
            key: value for key, value in (
                ('title', title),
                ('description', description),
                ('tags', tuple(tags) if tags is not None else None),
                ('creator', creator),
            ) if value is not None
        }
        metadata = metadata.with_changes(**changes)

        outcome = await self._coordinator.upload(
            UploadRequest(file=upload_file, metadata=metadata, keys=keys),
            on_progress
        )
        if not outcome.ok and raise_on_error:
            outcome.raise_for_failure()
        return outcome

    def poller(self, identifier: str) -> DerivativePoller:
        """Create (without starting) a poller for an item."""
        return DerivativePoller(
            self._checker,
            identifier,
            interval_seconds=self._config.poll_interval,
            skip_after_seconds=self._config.skip_after_seconds
        )

    async def wait_for_derivative(self, identifier: str) -> VerificationState:
        """
        Wait until an item's derived artifact exists.

        There is no timeout; cancel the calling task to stop waiting.

        Args:
            identifier: Item identifier

        Returns:
            Final verification state
        """
        poller = self.poller(identifier).start()
        try:
            return await poller.wait()
        finally:
            poller.cancel()

    async def status(self, identifier: str) -> ItemStatus:
        """Get the current processing status of an item."""
        return await self._checker.status(identifier)

    def workflow(self) -> UploadWorkflow:
        """Create an upload workflow sharing this client's session and keys."""
        return UploadWorkflow(
            config=self._config,
            session_manager=self._sessions,
            coordinator=self._coordinator,
            checker=self._checker,
            metadata_generator=self._generator,
            keys=self._keys
        )

    async def close(self):
        """Close HTTP sessions and the credential store."""
        await self._sessions.close()
        self._store.close()

    async def __aenter__(self) -> 'ArchiveClient':
        return await self.start()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

