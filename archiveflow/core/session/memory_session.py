"""
In-memory credential storage.

Non-persistent storage for tests and one-off runs.
"""
from typing import Optional

from .protocols import CredentialStore
from .models import StoredCredentials


class MemoryCredentialStore(CredentialStore):
    """
    In-memory credential storage.

    Data is lost when the object is destroyed.

    Example:
        >>> store = MemoryCredentialStore()
        >>> store.save(StoredCredentials.from_keys(keys, verified=True))
        >>> store.load().verified
        True
    """

    def __init__(self, data: Optional[StoredCredentials] = None):
        self._data = data

    def load(self) -> Optional[StoredCredentials]:
        return self._data

    def save(self, data: StoredCredentials) -> None:
        data.update_timestamp()
        self._data = data

    def delete(self) -> None:
        self._data = None

    def exists(self) -> bool:
        return self._data is not None

    def close(self) -> None:
        """Close storage (no-op for memory storage)."""
        pass

    def __enter__(self) -> 'MemoryCredentialStore':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
