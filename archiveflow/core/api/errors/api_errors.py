"""Internet Archive S3 error codes and failure classification."""
from typing import Dict, Optional


class S3ErrorCodes:
    """S3-style error codes returned in IA-S3 XML error bodies."""

    ERROR_CODES: Dict[str, str] = {
        'AccessDenied': 'Access denied for this bucket or key.',
        'InvalidAccessKeyId': 'The access key does not exist in our records.',
        'SignatureDoesNotMatch': 'The secret key does not match the access key.',
        'ExpiredToken': 'The provided credentials have expired.',
        'BucketAlreadyExists': 'The requested identifier is already taken.',
        'InvalidBucketName': 'The identifier is not a valid item name.',
        'EntityTooLarge': 'The upload exceeds the maximum allowed object size.',
        'SlowDown': 'The service is overloaded. Please wait and try again.',
        'ServiceUnavailable': 'The service is temporarily unavailable.',
        'InternalError': 'The service encountered an internal error.',
    }

    # Markers that identify a rejected credential pair
    AUTH_MARKERS = ('InvalidAccessKeyId', 'SignatureDoesNotMatch')

    # Status codes treated as credential rejection
    AUTH_STATUSES = (403,)

    @classmethod
    def get_message(cls, code: str) -> str:
        """Gets a readable message for an S3 error code."""
        return cls.ERROR_CODES.get(code, f"Unknown error: {code}")

    @classmethod
    def find_code(cls, body: str) -> Optional[str]:
        """
        Find the first known error code mentioned in a response body.

        Args:
            body: Raw response text (usually an XML <Error> document)

        Returns:
            Error code or None
        """
        if not body:
            return None
        for code in cls.ERROR_CODES:
            if code in body:
                return code
        return None


def is_auth_failure(status: Optional[int], body: str = '') -> bool:
    """
    Classify a transport failure as a credential failure.

    Pure function of status and body: status 403, or a body mentioning
    one of the credential markers. A message that embeds the literal
    status text (``'... status 403: ...'``) is classified the same way so
    plain error strings can be classified too.

    Args:
        status: HTTP status code, None when unknown
        body: Response body or error message

    Returns:
        True if the failure was caused by invalid or expired keys
    """
    if status in S3ErrorCodes.AUTH_STATUSES:
        return True
    text = body or ''
    if any(marker in text for marker in S3ErrorCodes.AUTH_MARKERS):
        return True
    return status is None and 'status 403' in text
