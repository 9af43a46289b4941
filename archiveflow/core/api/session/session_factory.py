"""Session factory using Factory Pattern."""
import aiohttp

from ..config import APIConfig


class SessionFactory:
    """Factory for creating HTTP sessions."""

    @staticmethod
    def create_async_session(config: APIConfig) -> aiohttp.ClientSession:
        """Creates an asynchronous HTTP session configured from APIConfig."""
        connector = aiohttp.TCPConnector(**config.get_connector_kwargs())
        return aiohttp.ClientSession(
            connector=connector,
            **config.get_session_kwargs()
        )
