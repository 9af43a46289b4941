"""
Credential persistence.

Keeps the IA-S3 key pair and its verified flag between runs.
"""
from .protocols import CredentialStore
from .models import StoredCredentials
from .sqlite_session import SQLiteCredentialStore, default_store_path
from .memory_session import MemoryCredentialStore

__all__ = [
    'CredentialStore',
    'StoredCredentials',
    'SQLiteCredentialStore',
    'MemoryCredentialStore',
    'default_store_path',
]
