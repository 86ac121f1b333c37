from __future__ import annotations

"""
Custom Hostnames Resource (Cloudflare for SaaS)
"""

from typing import Optional, Dict, Any, Iterator, AsyncIterator, Union, TYPE_CHECKING

from ..core.serialization import quote_segment
from ..errors import ClientError, is_not_found
from ..models import CustomHostname, CustomHostnameCreate, CustomHostnamePatch, PagePaginatedResult
from ..types import ListDirection

if TYPE_CHECKING:
    from ..core.cancel import CancelToken
    from ..core.resource import ResourceAccess


class CustomHostnamesResource:
    """
    Custom hostname operations for a zone.

    The listing endpoint can repeat an entry across page boundaries
    while hostnames are being added, so `list_all` drops repeated IDs.
    """

    def __init__(self, api: 'ResourceAccess', zone_id: Optional[str] = None):
        self._api = api
        self._zone_id = zone_id

    def _endpoint(self, zone_id: Optional[str], hostname_id: Optional[str] = None) -> str:
        zone_id = zone_id or self._zone_id
        if not zone_id:
            raise ValueError("A zone_id is required for custom hostname operations")
        base = f"zones/{quote_segment(zone_id)}/custom_hostnames"
        return f"{base}/{quote_segment(hostname_id)}" if hostname_id else base

    @staticmethod
    def _filters(
        hostname: Optional[str] = None,
        order: Optional[str] = None,
        direction: Optional[ListDirection] = None,
        **kwargs,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"hostname": hostname, "order": order, "direction": direction}
        params.update(kwargs)
        return params

    def list(
        self,
        zone_id: Optional[str] = None,
        *,
        hostname: Optional[str] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> PagePaginatedResult[CustomHostname]:
        """List a single page of custom hostnames"""
        return self._api.get_page_paginated_result(
            self._endpoint(zone_id), CustomHostname,
            params = self._filters(hostname, **kwargs),
            page = page, per_page = per_page, cancel_token = cancel_token,
        )

    async def alist(
        self,
        zone_id: Optional[str] = None,
        *,
        hostname: Optional[str] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> PagePaginatedResult[CustomHostname]:
        """Async version of list()"""
        return await self._api.aget_page_paginated_result(
            self._endpoint(zone_id), CustomHostname,
            params = self._filters(hostname, **kwargs),
            page = page, per_page = per_page, cancel_token = cancel_token,
        )

    def list_all(
        self,
        zone_id: Optional[str] = None,
        *,
        hostname: Optional[str] = None,
        per_page: Optional[int] = 50,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> Iterator[CustomHostname]:
        """Lazily yields every custom hostname, each ID at most once"""
        return self._api.get_paginated(
            self._endpoint(zone_id), CustomHostname,
            params = self._filters(hostname, **kwargs),
            per_page = per_page, unique_by = "id", cancel_token = cancel_token,
        )

    def alist_all(
        self,
        zone_id: Optional[str] = None,
        *,
        hostname: Optional[str] = None,
        per_page: Optional[int] = 50,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> AsyncIterator[CustomHostname]:
        """Async version of list_all()"""
        return self._api.aget_paginated(
            self._endpoint(zone_id), CustomHostname,
            params = self._filters(hostname, **kwargs),
            per_page = per_page, unique_by = "id", cancel_token = cancel_token,
        )

    def get(self, hostname_id: str, zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> Optional[CustomHostname]:
        """Get a custom hostname, or None if it does not exist"""
        try:
            return self._api.get(self._endpoint(zone_id, hostname_id), CustomHostname, cancel_token = cancel_token)
        except ClientError as e:
            if is_not_found(e): return None
            raise

    async def aget(self, hostname_id: str, zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> Optional[CustomHostname]:
        """Async version of get()"""
        try:
            return await self._api.aget(self._endpoint(zone_id, hostname_id), CustomHostname, cancel_token = cancel_token)
        except ClientError as e:
            if is_not_found(e): return None
            raise

    def create(self, hostname: Union[CustomHostnameCreate, Dict[str, Any]], zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> CustomHostname:
        body = CustomHostnameCreate.model_validate(hostname) if isinstance(hostname, dict) else hostname
        return self._api.post(self._endpoint(zone_id), CustomHostname, body = body, cancel_token = cancel_token)

    async def acreate(self, hostname: Union[CustomHostnameCreate, Dict[str, Any]], zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> CustomHostname:
        """Async version of create()"""
        body = CustomHostnameCreate.model_validate(hostname) if isinstance(hostname, dict) else hostname
        return await self._api.apost(self._endpoint(zone_id), CustomHostname, body = body, cancel_token = cancel_token)

    def update(self, hostname_id: str, changes: Union[CustomHostnamePatch, Dict[str, Any]], zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> CustomHostname:
        body = CustomHostnamePatch.model_validate(changes) if isinstance(changes, dict) else changes
        return self._api.patch(self._endpoint(zone_id, hostname_id), CustomHostname, body = body, cancel_token = cancel_token)

    async def aupdate(self, hostname_id: str, changes: Union[CustomHostnamePatch, Dict[str, Any]], zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> CustomHostname:
        """Async version of update()"""
        body = CustomHostnamePatch.model_validate(changes) if isinstance(changes, dict) else changes
        return await self._api.apatch(self._endpoint(zone_id, hostname_id), CustomHostname, body = body, cancel_token = cancel_token)

    def delete(self, hostname_id: str, zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> Optional[str]:
        result = self._api.delete(self._endpoint(zone_id, hostname_id), Dict[str, Any], cancel_token = cancel_token)
        return result.get("id") if result else None

    async def adelete(self, hostname_id: str, zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> Optional[str]:
        """Async version of delete()"""
        result = await self._api.adelete(self._endpoint(zone_id, hostname_id), Dict[str, Any], cancel_token = cancel_token)
        return result.get("id") if result else None
