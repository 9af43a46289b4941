"""
ArchiveFlow - Publish audio to the Internet Archive.

Usage:
    >>> from archiveflow import ArchiveClient
    >>>
    >>> async with ArchiveClient("credentials") as ia:
    ...     result = await ia.upload("episode.mp3", title="Episode 1")
    ...     print(result.url)
"""
import logging
from .client import ArchiveClient

# Configuration
from .core.api import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    ArchiveKeys,
    CredentialVerifier,
)

# Credential persistence
from .core.session import (
    CredentialStore,
    StoredCredentials,
    SQLiteCredentialStore,
    MemoryCredentialStore,
)

from .core.exceptions import ArchiveException, ArchiveAuthError, ArchiveUploadError, WorkflowError
from .core.metadata import MetadataGenerator, FilenameMetadataGenerator
from .core.upload import (
    ArchiveMetadata,
    UploadFile,
    UploadRequest,
    UploadProgress,
    UploadSuccess,
    UploadFailure,
    UploadCoordinator,
    generate_identifier,
    sanitize_header_value,
)
from .core.verification import DerivativeChecker, DerivativePoller, VerificationState, ItemStatus
from .core.workflow import UploadWorkflow

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for archiveflow modules.

    Sets the level on the package logger; every module logger lives
    under it and propagates.

    Args:
        level: Logging level (default: logging.INFO)
    """
    logger = logging.getLogger('archiveflow')
    logger.setLevel(level)
    logger.propagate = True

    for name in list(logging.root.manager.loggerDict):
        if name.startswith('archiveflow.'):
            child = logging.getLogger(name)
            child.setLevel(logging.NOTSET)
            child.propagate = True


__all__ = [
    'ArchiveClient',
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'ArchiveKeys',
    'CredentialVerifier',
    'CredentialStore',
    'StoredCredentials',
    'SQLiteCredentialStore',
    'MemoryCredentialStore',
    'ArchiveException',
    'ArchiveAuthError',
    'ArchiveUploadError',
    'WorkflowError',
    'MetadataGenerator',
    'FilenameMetadataGenerator',
    'ArchiveMetadata',
    'UploadFile',
    'UploadRequest',
    'UploadProgress',
    'UploadSuccess',
    'UploadFailure',
    'UploadCoordinator',
    'generate_identifier',
    'sanitize_header_value',
    'DerivativeChecker',
    'DerivativePoller',
    'VerificationState',
    'ItemStatus',
    'UploadWorkflow',
    'setup_logging',
    '__version__',
]
