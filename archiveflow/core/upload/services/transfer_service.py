"""
Object transfer service.

Handles the single authenticated PUT that creates an IA item and stores
the payload in it.
"""
from typing import AsyncIterable, Dict, Optional, Tuple
import asyncio
import logging
import time

from ...api.session import SessionManager


class ObjectUploader:
    """
    Sends one object to IA-S3.

    Reuses the session held by the SessionManager.

    Responsibilities:
    - PUT the streamed payload with the prepared headers
    - Return status and raw body without interpreting them
    """

    def __init__(self, session_manager: Optional[SessionManager] = None):
        """
        Initialize object uploader.

        Args:
            session_manager: HTTP session manager (a private one is used if omitted)
        """
        self._sessions = session_manager or SessionManager()
        self._logger = logging.getLogger('archiveflow.upload.transfer')

    async def put(
        self,
        url: str,
        headers: Dict[str, str],
        data: AsyncIterable[bytes]
    ) -> Tuple[int, str]:
        """
        Upload a payload.

        Args:
            url: Target object URL
            headers: Request headers
            data: Async iterable producing the body

        Returns:
            Tuple of (HTTP status, response body text)

        Raises:
            aiohttp.ClientError: If a network error occurs
            asyncio.TimeoutError: If the transfer times out
        """
        session = await self._sessions.get_async_session()
        request_kwargs = self._sessions.config.get_request_kwargs()

        upload_start = time.time()
        self._logger.debug(f"PUT {url}")

        try:
            async with session.put(url, data=data, headers=headers, **request_kwargs) as response:
                body = await response.text(errors='replace')
                elapsed = time.time() - upload_start
                self._logger.debug(f"PUT {url} -> HTTP {response.status} in {elapsed:.2f}s")
                return response.status, body
        except asyncio.TimeoutError:
            elapsed = time.time() - upload_start
            self._logger.error(f"Upload timeout after {elapsed:.2f}s")
            raise
        except Exception as e:
            elapsed = time.time() - upload_start
            self._logger.error(f"Upload failed after {elapsed:.2f}s: {e}")
            raise
