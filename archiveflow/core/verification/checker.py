"""
Item status checker.

Queries the IA metadata API for an item and decides whether the
asynchronous derive task has produced the expected artifact.

The readiness signal is a heuristic: for audio items the derive task
renders a waveform PNG, and the item page only shows the player once it
exists. If the service changes its derivative formats the signal breaks,
which is why the format is configurable.
"""
import asyncio
import time
from typing import Any, Optional

import aiohttp

from ..api.config import APIConfig
from ..api.session import SessionManager
from ..logging import get_logger
from .models import ItemStatus


logger = get_logger('archiveflow.verification.checker')


class DerivativeChecker:
    """Checks an item's metadata record for the derived artifact."""

    def __init__(
        self,
        session_manager: Optional[SessionManager] = None,
        derived_format: Optional[str] = None
    ):
        """
        Initialize checker.

        Args:
            session_manager: HTTP session manager (a private one is used if omitted)
            derived_format: Format signalling completion (defaults to config.derived_format)
        """
        self._sessions = session_manager or SessionManager()
        self._config: APIConfig = self._sessions.config
        self.derived_format = derived_format or self._config.derived_format

    async def fetch(self, identifier: str) -> Optional[Any]:
        """
        Fetch the metadata record of an item, bypassing caches.

        Args:
            identifier: Item identifier

        Returns:
            Decoded JSON, or None on any failure
        """
        session = await self._sessions.get_async_session()
        params = {'t': str(time.time_ns() // 1_000_000)}
        try:
            async with session.get(
                self._config.metadata_url(identifier),
                params=params,
                timeout=self._config.timeout.to_probe_timeout(),
                **self._config.get_request_kwargs()
            ) as response:
                if not 200 <= response.status < 300:
                    logger.debug(f"Status check for {identifier}: HTTP {response.status}")
                    return None
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.debug(f"Polling IA status for {identifier} failed: {e}")
            return None

    async def status(self, identifier: str) -> ItemStatus:
        """
        Get the parsed status of an item.

        Args:
            identifier: Item identifier

        Returns:
            ItemStatus (not ready when the request failed)
        """
        data = await self.fetch(identifier)
        return ItemStatus.from_metadata(identifier, data, self.derived_format)

    async def is_ready(self, identifier: str) -> bool:
        """
        Check whether the item's derived artifact exists.

        Failures are indistinguishable from "not ready yet" and never raise.

        Args:
            identifier: Item identifier

        Returns:
            True if the response is successful, describes the same
            identifier and lists a file of the derived format
        """
        item = await self.status(identifier)
        logger.debug(f"{identifier}: exists={item.exists} files={item.file_count} ready={item.ready}")
        return item.ready
