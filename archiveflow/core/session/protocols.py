"""
Credential storage protocols.

Defines the interface credential stores implement.
"""
from typing import Protocol, Optional, runtime_checkable
from .models import StoredCredentials


@runtime_checkable
class CredentialStore(Protocol):
    """
    Protocol for credential storage implementations.

    Credentials are loaded once at startup and saved whenever they change.
    """

    def load(self) -> Optional[StoredCredentials]:
        """
        Load stored credentials.

        Returns:
            StoredCredentials if present, None otherwise
        """
        ...

    def save(self, data: StoredCredentials) -> None:
        """
        Persist credentials, replacing any previous pair.

        Args:
            data: Credentials to save
        """
        ...

    def delete(self) -> None:
        """Forget stored credentials."""
        ...

    def exists(self) -> bool:
        """
        Check whether credentials are stored.

        Returns:
            True if a pair is stored
        """
        ...

    def close(self) -> None:
        """Release storage resources."""
        ...
