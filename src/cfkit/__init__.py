"""
Cloudflare API Client

A hybrid sync/async client for the Cloudflare API with proactive
throttling, retries, a circuit breaker and lazy pagination.

Example usage:
    >>> from cfkit import client
    >>>
    >>> # Every zone, fetched page by page as you iterate
    >>> for zone in client.zones.list_all():
    ...     print(zone.name)
    >>>
    >>> # A single page of DNS records
    >>> page = client.dns.list(zone_id, per_page = 100)
    >>>
    >>> # Async usage
    >>> async for bucket in client.r2.alist_all(jurisdiction = "eu"):
    ...     print(bucket.name)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .version import VERSION
from .configs import CloudflareSettings, ResilienceSettings
from .client import CloudflareClient
from .core import (
    ApiRequest,
    ApiResponse,
    CancelToken,
    CircuitBreaker,
    CircuitState,
    PaginationEngine,
    RateLimiter,
    RequestExecutor,
    ResilienceController,
    ResourceAccess,
    RetryPolicy,
)
from .errors import (
    ApiLogicError,
    CircuitOpenError,
    ClientError,
    CloudflareError,
    DecodeError,
    Overloaded,
    OverloadedError,
    RateLimitedError,
    RequestCancelledError,
    RequestTimeoutError,
    ServerError,
    TransportError,
)
from .types import (
    ExtensibleEnum,
    R2Jurisdiction,
    R2LocationHint,
    R2StorageClass,
    RecordType,
    ZoneStatus,
    ZoneType,
    CustomHostnameStatus,
)
from .models import (
    ApiError,
    CursorInfo,
    CursorPaginatedResult,
    CustomHostname,
    DNSRecord,
    DNSRecordCreate,
    Envelope,
    KVKey,
    KVNamespace,
    PageInfo,
    PagePaginatedResult,
    R2Bucket,
    Zone,
)
from .resources import (
    CustomHostnamesResource,
    DNSResource,
    KVResource,
    R2BucketsResource,
    ZonesResource,
)
from .utils.proxy import ProxyObject

__version__ = VERSION


def get_settings() -> CloudflareSettings:
    """Get the Cloudflare settings singleton"""
    return CloudflareSettings()


def get_client() -> CloudflareClient:
    """Get the Cloudflare client singleton"""
    return CloudflareClient()


# Module-level singletons using ProxyObject for lazy initialization
if TYPE_CHECKING:
    settings: CloudflareSettings
    client: CloudflareClient
else:
    settings: CloudflareSettings = ProxyObject(obj_getter = get_settings)
    client: CloudflareClient = ProxyObject(obj_getter = get_client)
