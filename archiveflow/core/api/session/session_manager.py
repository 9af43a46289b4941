"""Session manager for HTTP connections."""
from typing import Optional

import aiohttp

from ..config import APIConfig
from .session_factory import SessionFactory


class SessionManager:
    """
    Manages one shared aiohttp session.

    A session passed in by the caller is borrowed and never closed here;
    a session created lazily by the manager is owned and closed by close().
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initializes session manager.

        Args:
            config: API configuration used to build the session
            session: Optional externally managed session
        """
        self.config = config or APIConfig.default()
        self._session = session
        self._owns_session = session is None

    async def get_async_session(self) -> aiohttp.ClientSession:
        """Gets or creates asynchronous session."""
        if self._session is None or self._session.closed:
            self._session = SessionFactory.create_async_session(self.config)
            self._owns_session = True
        return self._session

    async def close(self):
        """Closes the session if this manager created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    async def __aenter__(self) -> 'SessionManager':
        await self.get_async_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
