"""Internet Archive API module: configuration, credentials, HTTP sessions."""
from .errors import S3ErrorCodes, is_auth_failure
from .events import EventEmitter
from .config import APIConfig, ProxyConfig, SSLConfig, TimeoutConfig
from .session import SessionFactory, SessionManager
from .auth import ArchiveKeys, CredentialVerifier

__all__ = [
    # Credentials
    'ArchiveKeys',
    'CredentialVerifier',

    # HTTP sessions
    'SessionFactory',
    'SessionManager',

    # Configuration
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',

    # Errors
    'S3ErrorCodes',
    'is_auth_failure',

    # Events
    'EventEmitter',
]
