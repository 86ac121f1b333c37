from __future__ import annotations

"""
Cloudflare API Client

A hybrid sync/async client for the Cloudflare API. Every call goes
through one shared pipeline: rate limiter, circuit breaker, retries.
"""

import typing as t

import httpx

from .configs import CloudflareSettings, ResilienceSettings
from .core.executor import RequestExecutor
from .core.http import HttpClient
from .core.pagination import PaginationEngine
from .core.resilience import ResilienceController
from .core.resource import ResourceAccess
from .resources import (
    CustomHostnamesResource,
    DNSResource,
    KVResource,
    R2BucketsResource,
    ZonesResource,
)
from .utils.logs import logger

logger.set_module_name(__name__, "cloudflare.client")


class CloudflareClient:
    """
    Cloudflare API Client

    Provides sync and async methods for interacting with the Cloudflare API.

    Example usage:
        >>> from cfkit import CloudflareClient
        >>> cf = CloudflareClient(api_token = "...")
        >>> for zone in cf.zones.list_all():
        ...     print(zone.name)
        >>> records = await cf.dns.alist(zone_id, per_page = 100)
    """

    def __init__(
        self,
        api_token: t.Optional[str] = None,
        api_key: t.Optional[str] = None,
        email: t.Optional[str] = None,
        account_id: t.Optional[str] = None,
        zone_id: t.Optional[str] = None,
        base_url: t.Optional[str] = None,
        resilience: t.Optional[ResilienceSettings] = None,
        settings: t.Optional[CloudflareSettings] = None,
        transport: t.Optional[httpx.BaseTransport] = None,
        async_transport: t.Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: t.Any,
    ):
        """
        Initialize Cloudflare client

        Args:
            api_token: Bearer API token (preferred auth method)
            api_key: Legacy Global API Key
            email: Email for API key auth
            account_id: Default account ID
            zone_id: Default zone ID
            base_url: API base URL (default: https://api.cloudflare.com/client/v4)
            resilience: Throttle, retry and breaker settings
            settings: Settings to start from instead of the environment
            transport: Sync httpx transport, mainly for tests
            async_transport: Async httpx transport, mainly for tests
            **kwargs: `clock`, `sleep`, `asleep` and `rng` control time and
                jitter in the resilience layer; anything else goes to httpx
        """
        self.settings = settings or CloudflareSettings()

        # Override settings with explicit parameters
        self._api_token = api_token or self.settings.api_token
        self._api_key = api_key or self.settings.api_key
        self._email = email or self.settings.email
        self.account_id = account_id or self.settings.account_id
        self.zone_id = zone_id or self.settings.zone_id
        self._base_url = base_url or self.settings.base_url
        self.resilience = resilience or self.settings.resilience

        resilience_kwargs = {k: kwargs.pop(k) for k in ('clock', 'sleep', 'asleep', 'rng') if k in kwargs}
        self.http = HttpClient(
            base_url = self._base_url,
            headers = {
                "Content-Type": "application/json",
                **self.auth_headers,
            },
            timeout = self.resilience.timeout,
            transport = transport,
            async_transport = async_transport,
            disable_httpx_logger = True,
            **kwargs,
        )
        self.executor = RequestExecutor(self.http, timeout = self.resilience.timeout)
        self.controller = ResilienceController.from_settings(self.executor, self.resilience, **resilience_kwargs)
        self.paginator = PaginationEngine(self.controller)
        self.api = ResourceAccess(self.controller, self.paginator)

        self._zones: t.Optional[ZonesResource] = None
        self._dns: t.Optional[DNSResource] = None
        self._custom_hostnames: t.Optional[CustomHostnamesResource] = None
        self._r2: t.Optional[R2BucketsResource] = None
        self._kv: t.Optional[KVResource] = None

        if not self.has_auth:
            logger.warning(
                "No Cloudflare authentication configured. "
                "Set CLOUDFLARE_API_TOKEN or CLOUDFLARE_API_KEY+CLOUDFLARE_EMAIL"
            )

    @property
    def has_auth(self) -> bool:
        """Check if valid authentication is configured"""
        return bool(self._api_token or (self._api_key and self._email))

    @property
    def auth_headers(self) -> t.Dict[str, str]:
        """Get authentication headers"""
        if self._api_token:
            return {"Authorization": f"Bearer {self._api_token}"}
        elif self._api_key and self._email:
            return {
                "X-Auth-Key": self._api_key,
                "X-Auth-Email": self._email,
            }
        return {}

    # ========================================================================
    # Resources
    # ========================================================================

    @property
    def zones(self) -> ZonesResource:
        if self._zones is None: self._zones = ZonesResource(self.api, account_id = self.account_id)
        return self._zones

    @property
    def dns(self) -> DNSResource:
        if self._dns is None: self._dns = DNSResource(self.api, zone_id = self.zone_id)
        return self._dns

    @property
    def custom_hostnames(self) -> CustomHostnamesResource:
        if self._custom_hostnames is None: self._custom_hostnames = CustomHostnamesResource(self.api, zone_id = self.zone_id)
        return self._custom_hostnames

    @property
    def r2(self) -> R2BucketsResource:
        if self._r2 is None: self._r2 = R2BucketsResource(self.api, account_id = self.account_id)
        return self._r2

    @property
    def kv(self) -> KVResource:
        if self._kv is None: self._kv = KVResource(self.api, account_id = self.account_id)
        return self._kv

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def close(self) -> None:
        """Close the HTTP clients; see `HttpClient.close` for the async one"""
        self.http.close()

    async def aclose(self) -> None:
        """Close the HTTP client"""
        await self.http.aclose()

    def __enter__(self) -> 'CloudflareClient':
        return self

    def __exit__(self, *args) -> None:
        self.close()

    async def __aenter__(self) -> 'CloudflareClient':
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()
