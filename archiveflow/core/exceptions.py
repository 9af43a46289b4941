"""
Custom exceptions for Internet Archive upload operations.

This module defines exception classes specific to archiveflow.
"""
from typing import Optional


class ArchiveException(Exception):
    """Base exception for all archiveflow errors."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            status: HTTP status code (if available)
        """
        self.status = status
        super().__init__(message)


class ArchiveAuthError(ArchiveException):
    """Raised when the storage service rejects the access/secret key pair."""
    pass


class ArchiveUploadError(ArchiveException):
    """Raised for transport failures: non-2xx responses or network errors."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: str = ''
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            status: HTTP status code (None for network failures)
            body: Raw response body returned by the service
        """
        self.body = body
        super().__init__(message, status)


class WorkflowError(ArchiveException):
    """Raised when an upload workflow action is not allowed in the current step."""
    pass
