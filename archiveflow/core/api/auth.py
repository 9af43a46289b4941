"""
Credential handling for the Internet Archive S3 API.

IA-S3 accepts a simple bearer-style header, ``Authorization: LOW
<access>:<secret>``, instead of AWS request signing.
"""
import asyncio
import re
from dataclasses import dataclass
from typing import Optional

import aiohttp

from ..logging import get_logger, mask_secret
from .session import SessionManager


logger = get_logger('archiveflow.auth')

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f]')


@dataclass(frozen=True)
class ArchiveKeys:
    """
    IA-S3 credential pair.

    Both keys are opaque strings and are never parsed.

    Attributes:
        access_key: IA-S3 access key
        secret_key: IA-S3 secret key
    """
    access_key: str
    secret_key: str

    @classmethod
    def from_input(cls, access_key: str, secret_key: str) -> 'ArchiveKeys':
        """Create keys from user input, trimming surrounding whitespace."""
        return cls(access_key=access_key.strip(), secret_key=secret_key.strip())

    @property
    def authorization_header(self) -> str:
        """Value of the Authorization header (LOW scheme)."""
        return f"LOW {self.access_key}:{self.secret_key}"

    def is_complete(self) -> bool:
        """True when both keys are non-empty."""
        return bool(self.access_key and self.secret_key)

    def is_transmittable(self) -> bool:
        """True when the Authorization header can be sent as-is (latin-1, no control characters)."""
        header = self.authorization_header
        try:
            header.encode('latin-1')
        except UnicodeEncodeError:
            return False
        return _CONTROL_CHARS.search(header) is None

    def masked(self) -> str:
        """Access key with most characters hidden, for display and logs."""
        return mask_secret(self.access_key)

    def __repr__(self) -> str:
        return f"ArchiveKeys(access_key='{self.masked()}', secret_key='***')"


class CredentialVerifier:
    """
    Non-destructive credential probe.

    Issues a GET against the S3 endpoint root with the LOW header. The
    request lists nothing and creates nothing; only the status matters.
    """

    def __init__(self, session_manager: Optional[SessionManager] = None):
        """
        Initialize verifier.

        Args:
            session_manager: HTTP session manager (a private one is used if omitted)
        """
        self._sessions = session_manager or SessionManager()
        self._config = self._sessions.config

    async def verify(self, keys: ArchiveKeys) -> bool:
        """
        Check whether the storage endpoint accepts a key pair.

        Args:
            keys: Credential pair to test

        Returns:
            True on HTTP 200, False on any other status, on keys that cannot
            be sent in a header, or on network failure
        """
        if not keys.is_complete():
            return False
        if not keys.is_transmittable():
            logger.warning(f"Keys for {keys.masked()} contain characters not allowed in a header")
            return False

        session = await self._sessions.get_async_session()
        try:
            async with session.get(
                self._config.s3_base,
                headers={'Authorization': keys.authorization_header},
                timeout=self._config.timeout.to_probe_timeout(),
                **self._config.get_request_kwargs()
            ) as response:
                if response.status == 200:
                    logger.info(f"Keys verified for {keys.masked()}")
                    return True
                logger.warning(f"Key verification failed with status: {response.status}")
                return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Key verification network error: {e}")
            return False
        except ValueError as e:
            logger.warning(f"Key verification request rejected: {type(e).__name__}")
            return False
