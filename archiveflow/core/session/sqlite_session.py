"""
SQLite credential storage.

Keeps the IA-S3 key pair in a small SQLite database file.
"""
import os
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..logging import get_logger
from .protocols import CredentialStore
from .models import StoredCredentials


logger = get_logger('archiveflow.session')


def default_store_path() -> Path:
    """
    Location of the default credentials file.

    Honors ARCHIVEFLOW_HOME, then XDG_CONFIG_HOME, then ~/.config.
    """
    home = os.environ.get('ARCHIVEFLOW_HOME')
    if home:
        return Path(home) / 'credentials.session'
    config_home = os.environ.get('XDG_CONFIG_HOME') or Path.home() / '.config'
    return Path(config_home) / 'archiveflow' / 'credentials.session'


class SQLiteCredentialStore(CredentialStore):
    """
    SQLite-based credential storage.

    Thread-safe; one connection per store, opened lazily. The database
    file is created with owner-only permissions.

    Example:
        >>> store = SQLiteCredentialStore()
        >>> store.save(StoredCredentials.from_keys(keys, verified=True))
        >>> store.load().to_keys()
    """

    EXTENSION = '.session'
    SCHEMA_VERSION = 1

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """
        Initialize SQLite credential storage.

        Args:
            path: Database file (defaults to default_store_path());
                the .session extension is appended when missing
        """
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None

        self._path = Path(path) if path is not None else default_store_path()
        if self._path.suffix != self.EXTENSION:
            self._path = self._path.with_name(self._path.name + self.EXTENSION)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @property
    def path(self) -> Path:
        """Get database file path."""
        return self._path

    @contextmanager
    def _get_connection(self):
        """Get thread-safe database connection."""
        with self._lock:
            if self._conn is None:
                if not self._path.exists():
                    self._path.touch(mode=0o600)
                    os.chmod(self._path, 0o600)
                self._conn = sqlite3.connect(str(self._path), check_same_thread=False)
                self._conn.row_factory = sqlite3.Row
            yield self._conn

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS version (
                    version INTEGER PRIMARY KEY
                )
            ''')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS credentials (
                    id INTEGER PRIMARY KEY,
                    access_key TEXT NOT NULL,
                    secret_key TEXT NOT NULL,
                    verified INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            ''')

            cursor.execute('SELECT version FROM version LIMIT 1')
            if cursor.fetchone() is None:
                cursor.execute(
                    'INSERT INTO version (version) VALUES (?)',
                    (self.SCHEMA_VERSION,)
                )

            conn.commit()

    def load(self) -> Optional[StoredCredentials]:
        """
        Load credentials from database.

        Returns:
            StoredCredentials if present, None otherwise
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute('''
                SELECT access_key, secret_key, verified, created_at, updated_at
                FROM credentials
                LIMIT 1
            ''')

            row = cursor.fetchone()
            if row is None:
                return None

            return StoredCredentials(
                access_key=row['access_key'],
                secret_key=row['secret_key'],
                verified=bool(row['verified']),
                created_at=datetime.fromisoformat(row['created_at']),
                updated_at=datetime.fromisoformat(row['updated_at']),
            )

    def save(self, data: StoredCredentials) -> None:
        """
        Save credentials, replacing any stored pair.

        Args:
            data: Credentials to save
        """
        data.update_timestamp()

        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute('DELETE FROM credentials')
            cursor.execute('''
                INSERT INTO credentials (
                    access_key, secret_key, verified, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?)
            ''', (
                data.access_key,
                data.secret_key,
                int(data.verified),
                data.created_at.isoformat(),
                data.updated_at.isoformat(),
            ))
            conn.commit()

        logger.debug(f"Saved credentials {data!r} to {self._path}")

    def delete(self) -> None:
        """Delete stored credentials."""
        with self._get_connection() as conn:
            conn.execute('DELETE FROM credentials')
            conn.commit()

    def exists(self) -> bool:
        """
        Check if credentials are stored.

        Returns:
            True if a pair is stored
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute('SELECT COUNT(*) FROM credentials')
            return cursor.fetchone()[0] > 0

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def delete_file(self) -> None:
        """Delete the database file completely."""
        self.close()
        if self._path.exists():
            self._path.unlink()

    def __enter__(self) -> 'SQLiteCredentialStore':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
