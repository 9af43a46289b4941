"""
Upload module for Internet Archive uploads.

This module provides a clean interface for publishing one file as a new
IA item through the IA-S3 API. Identifier and header policies are
pluggable strategies.
"""
from .facade import UploadFacade
from .coordinator import UploadCoordinator
from .models import (
    ArchiveMetadata,
    UploadFile,
    UploadRequest,
    UploadProgress,
    UploadSuccess,
    UploadFailure,
    UploadOutcome,
    UploadEvent,
)
from .protocols import (
    HeaderStrategy,
    PayloadReaderProtocol,
    ObjectUploaderProtocol,
)
from .strategies import (
    ArchiveHeaderBuilder,
    generate_identifier,
    safe_filename,
    sanitize_header_value,
)

__all__ = [
    # Main classes
    'UploadFacade',
    'UploadCoordinator',

    # Models
    'ArchiveMetadata',
    'UploadFile',
    'UploadRequest',
    'UploadProgress',
    'UploadSuccess',
    'UploadFailure',
    'UploadOutcome',
    'UploadEvent',

    # Protocols
    'HeaderStrategy',
    'PayloadReaderProtocol',
    'ObjectUploaderProtocol',

    # Strategies
    'ArchiveHeaderBuilder',
    'generate_identifier',
    'safe_filename',
    'sanitize_header_value',
]
