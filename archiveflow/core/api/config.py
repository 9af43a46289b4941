"""
API configuration module.

Provides configuration for the Internet Archive S3 and metadata endpoints.
Open for extension through custom configurations.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Union
import ssl

import aiohttp


@dataclass
class ProxyConfig:
    """
    Outbound proxy used for every request.

    Credentials are sent as proxy authorization, never inside the URL.
    """
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    def to_request_kwargs(self) -> Dict[str, Any]:
        """Per-request aiohttp kwargs; empty when no proxy is set."""
        if not self.url:
            return {}

        kwargs: Dict[str, Any] = {'proxy': self.url}
        if self.username:
            kwargs['proxy_auth'] = aiohttp.BasicAuth(self.username, self.password or '')
        return kwargs


@dataclass
class SSLConfig:
    """
    SSL/TLS settings of the connector.

    ``ca_file`` adds a private CA bundle, for instance behind an
    intercepting corporate proxy.
    """
    verify: bool = True
    ca_file: Optional[str] = None
    check_hostname: bool = True

    def create_ssl_context(self) -> Union[ssl.SSLContext, bool]:
        """SSL context for the connector (False disables verification)."""
        if not self.verify:
            return False

        context = ssl.create_default_context(cafile=self.ca_file)
        context.check_hostname = self.check_hostname
        return context


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.

    Uploads of long recordings can take a while, so the total timeout is
    disabled by default and only socket-level timeouts apply.
    """
    total: Optional[float] = None
    connect: float = 30.0
    sock_read: float = 300.0
    sock_connect: float = 30.0
    probe_total: float = 20.0  # credential probe and status checks

    def to_aiohttp_timeout(self) -> aiohttp.ClientTimeout:
        """Timeout applied to transfers."""
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )

    def to_probe_timeout(self) -> aiohttp.ClientTimeout:
        """Timeout applied to lightweight requests."""
        return aiohttp.ClientTimeout(total=self.probe_total, connect=self.connect)


@dataclass
class APIConfig:
    """
    Complete API configuration.

    Centralizes endpoint locations, item classification and polling
    parameters used by the upload transport, the credential verifier and
    the derivative poller.
    """
    # Endpoints
    s3_base: str = 'https://s3.us.archive.org'
    metadata_base: str = 'https://archive.org/metadata'
    public_base: str = 'https://archive.org'

    # Item classification
    identifier_prefix: str = 'notebooklm-archive'
    mediatype: str = 'audio'
    collection: str = 'opensource_audio'
    default_creator: str = 'NotebookLM'

    # Derived artifact that signals processing finished (audio -> waveform PNG)
    derived_format: str = 'PNG'
    poll_interval: int = 5
    skip_after_seconds: int = 20

    # Transfer
    chunk_size: int = 256 * 1024
    user_agent: str = 'archiveflow/1.0.0'

    # Sub-configurations
    proxy: Optional[ProxyConfig] = None
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)

    # Additional headers
    extra_headers: Dict[str, str] = field(default_factory=dict)

    # Logging
    log_level: int = 20  # logging.INFO

    # Connection pool settings
    limit_per_host: int = 4
    limit: int = 10

    @classmethod
    def default(cls) -> 'APIConfig':
        """Create default configuration."""
        return cls()

    @classmethod
    def with_proxy(cls, proxy_url: str, **kwargs) -> 'APIConfig':
        """Create configuration with proxy."""
        return cls(
            proxy=ProxyConfig(url=proxy_url),
            **kwargs
        )

    @classmethod
    def insecure(cls, **kwargs) -> 'APIConfig':
        """Create configuration with SSL verification disabled."""
        return cls(
            ssl=SSLConfig(verify=False, check_hostname=False),
            **kwargs
        )

    def item_url(self, identifier: str, filename: str) -> str:
        """S3 object URL for a file inside an item."""
        return f"{self.s3_base.rstrip('/')}/{identifier}/{filename}"

    def details_url(self, identifier: str) -> str:
        """Canonical public page of an item."""
        return f"{self.public_base.rstrip('/')}/details/{identifier}"

    def metadata_url(self, identifier: str) -> str:
        """Metadata API URL of an item."""
        return f"{self.metadata_base.rstrip('/')}/{identifier}"

    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'limit': self.limit,
            'limit_per_host': self.limit_per_host,
            'ssl': self.ssl.create_ssl_context(),
        }

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        headers = {
            'User-Agent': self.user_agent,
            **self.extra_headers
        }

        return {
            'headers': headers,
            'timeout': self.timeout.to_aiohttp_timeout(),
        }

    def get_request_kwargs(self) -> Dict[str, Any]:
        """Get per-request kwargs (proxy) for aiohttp calls."""
        return self.proxy.to_request_kwargs() if self.proxy else {}
