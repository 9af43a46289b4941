"""Internet Archive API errors and failure classification."""
from .api_errors import S3ErrorCodes, is_auth_failure

__all__ = [
    'S3ErrorCodes',
    'is_auth_failure',
]
