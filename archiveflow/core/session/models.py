"""
Credential storage models.

Contains the persisted form of an IA-S3 key pair.
"""
from dataclasses import dataclass, field
from datetime import datetime

from ..api.auth import ArchiveKeys


@dataclass
class StoredCredentials:
    """
    IA-S3 key pair as kept on disk between runs.

    Attributes:
        access_key: IA-S3 access key
        secret_key: IA-S3 secret key
        verified: True if the pair passed the credential probe when saved
        created_at: First save timestamp
        updated_at: Last update timestamp
    """
    access_key: str
    secret_key: str
    verified: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_keys(cls, keys: ArchiveKeys, verified: bool = False) -> 'StoredCredentials':
        """
        Create a record from a key pair.

        Args:
            keys: Credential pair
            verified: Result of the credential probe

        Returns:
            StoredCredentials instance
        """
        return cls(access_key=keys.access_key, secret_key=keys.secret_key, verified=verified)

    def to_keys(self) -> ArchiveKeys:
        """Return the stored pair as ArchiveKeys."""
        return ArchiveKeys(access_key=self.access_key, secret_key=self.secret_key)

    def to_dict(self) -> dict:
        """
        Convert to dictionary for serialization.

        Returns:
            Dictionary representation
        """
        return {
            'access_key': self.access_key,
            'secret_key': self.secret_key,
            'verified': self.verified,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'StoredCredentials':
        """
        Create from dictionary.

        Args:
            data: Dictionary with credential data

        Returns:
            StoredCredentials instance
        """
        return cls(
            access_key=data['access_key'],
            secret_key=data['secret_key'],
            verified=bool(data.get('verified', False)),
            created_at=datetime.fromisoformat(data['created_at']) if data.get('created_at') else datetime.now(),
            updated_at=datetime.fromisoformat(data['updated_at']) if data.get('updated_at') else datetime.now(),
        )

    def is_valid(self) -> bool:
        """
        Check if the record holds a usable pair.

        Returns:
            True if both keys are non-empty
        """
        return bool(self.access_key and self.secret_key)

    def update_timestamp(self) -> None:
        """Update the updated_at timestamp to now."""
        self.updated_at = datetime.now()

    def __repr__(self) -> str:
        return (
            f"StoredCredentials(access_key='{self.to_keys().masked()}', "
            f"verified={self.verified})"
        )
