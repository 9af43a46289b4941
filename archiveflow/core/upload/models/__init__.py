"""Upload data models."""
from .upload_models import (
    ArchiveMetadata,
    UploadFile,
    UploadRequest,
    UploadProgress,
    UploadSuccess,
    UploadFailure,
    UploadOutcome,
    UploadEvent,
    dedupe_tags,
)

__all__ = [
    'ArchiveMetadata',
    'UploadFile',
    'UploadRequest',
    'UploadProgress',
    'UploadSuccess',
    'UploadFailure',
    'UploadOutcome',
    'UploadEvent',
    'dedupe_tags',
]
