from __future__ import annotations

"""
Zones Resource
"""

from typing import Optional, Dict, Any, Iterator, AsyncIterator, Union, TYPE_CHECKING

from ..core.serialization import quote_segment
from ..errors import ClientError, is_not_found
from ..models import AccountInfo, PagePaginatedResult, Zone, ZoneCreate
from ..types import ZoneStatus, ZoneType

if TYPE_CHECKING:
    from ..core.cancel import CancelToken
    from ..core.resource import ResourceAccess


class ZonesResource:
    """
    Zone operations for Cloudflare API
    """

    def __init__(self, api: 'ResourceAccess', account_id: Optional[str] = None):
        self._api = api
        self._account_id = account_id

    def _endpoint(self, zone_id: Optional[str] = None) -> str:
        return f"zones/{quote_segment(zone_id)}" if zone_id else "zones"

    def _filters(
        self,
        name: Optional[str] = None,
        status: Optional[Union[ZoneStatus, str]] = None,
        account_id: Optional[str] = None,
        **kwargs,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "name": name,
            "status": status,
            "account.id": account_id or self._account_id,
        }
        params.update(kwargs)
        return params

    # ========================================================================
    # List
    # ========================================================================

    def list(
        self,
        *,
        name: Optional[str] = None,
        status: Optional[Union[ZoneStatus, str]] = None,
        account_id: Optional[str] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> PagePaginatedResult[Zone]:
        """
        List a single page of zones

        Args:
            name: Filter by zone name
            status: Filter by status (active, pending, etc.)
            account_id: Filter by account; defaults to the client's
            page: Page number
            per_page: Results per page
        """
        return self._api.get_page_paginated_result(
            self._endpoint(), Zone,
            params = self._filters(name, status, account_id, **kwargs),
            page = page, per_page = per_page, cancel_token = cancel_token,
        )

    async def alist(
        self,
        *,
        name: Optional[str] = None,
        status: Optional[Union[ZoneStatus, str]] = None,
        account_id: Optional[str] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> PagePaginatedResult[Zone]:
        """Async version of list()"""
        return await self._api.aget_page_paginated_result(
            self._endpoint(), Zone,
            params = self._filters(name, status, account_id, **kwargs),
            page = page, per_page = per_page, cancel_token = cancel_token,
        )

    def list_all(
        self,
        *,
        name: Optional[str] = None,
        status: Optional[Union[ZoneStatus, str]] = None,
        account_id: Optional[str] = None,
        per_page: Optional[int] = 50,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> Iterator[Zone]:
        """Lazily yields every zone matching the filters"""
        return self._api.get_paginated(
            self._endpoint(), Zone,
            params = self._filters(name, status, account_id, **kwargs),
            per_page = per_page, cancel_token = cancel_token,
        )

    def alist_all(
        self,
        *,
        name: Optional[str] = None,
        status: Optional[Union[ZoneStatus, str]] = None,
        account_id: Optional[str] = None,
        per_page: Optional[int] = 50,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> AsyncIterator[Zone]:
        """Async version of list_all()"""
        return self._api.aget_paginated(
            self._endpoint(), Zone,
            params = self._filters(name, status, account_id, **kwargs),
            per_page = per_page, cancel_token = cancel_token,
        )

    # ========================================================================
    # Get
    # ========================================================================

    def get(self, zone_id: str, cancel_token: Optional['CancelToken'] = None) -> Optional[Zone]:
        """
        Get a zone by ID

        Returns:
            The zone, or None if it does not exist
        """
        try:
            return self._api.get(self._endpoint(zone_id), Zone, cancel_token = cancel_token)
        except ClientError as e:
            if is_not_found(e): return None
            raise

    async def aget(self, zone_id: str, cancel_token: Optional['CancelToken'] = None) -> Optional[Zone]:
        """Async version of get()"""
        try:
            return await self._api.aget(self._endpoint(zone_id), Zone, cancel_token = cancel_token)
        except ClientError as e:
            if is_not_found(e): return None
            raise

    def find_by_name(self, name: str, cancel_token: Optional['CancelToken'] = None) -> Optional[Zone]:
        """Get a zone by its domain name"""
        result = self.list(name = name, per_page = 1, cancel_token = cancel_token)
        return result.items[0] if result.items else None

    async def afind_by_name(self, name: str, cancel_token: Optional['CancelToken'] = None) -> Optional[Zone]:
        """Async version of find_by_name()"""
        result = await self.alist(name = name, per_page = 1, cancel_token = cancel_token)
        return result.items[0] if result.items else None

    # ========================================================================
    # Create / Delete
    # ========================================================================

    def _create_body(self, name: str, account_id: Optional[str], type: Optional[ZoneType], jump_start: Optional[bool]) -> ZoneCreate:
        account_id = account_id or self._account_id
        if not account_id:
            raise ValueError("An account_id is required to create a zone")
        return ZoneCreate(name = name, account = AccountInfo(id = account_id), type = type, jump_start = jump_start)

    def create(
        self,
        name: str,
        *,
        account_id: Optional[str] = None,
        type: Optional[ZoneType] = None,
        jump_start: Optional[bool] = None,
        cancel_token: Optional['CancelToken'] = None,
    ) -> Zone:
        """Create a zone"""
        return self._api.post(self._endpoint(), Zone, body = self._create_body(name, account_id, type, jump_start), cancel_token = cancel_token)

    async def acreate(
        self,
        name: str,
        *,
        account_id: Optional[str] = None,
        type: Optional[ZoneType] = None,
        jump_start: Optional[bool] = None,
        cancel_token: Optional['CancelToken'] = None,
    ) -> Zone:
        """Async version of create()"""
        return await self._api.apost(self._endpoint(), Zone, body = self._create_body(name, account_id, type, jump_start), cancel_token = cancel_token)

    def delete(self, zone_id: str, cancel_token: Optional['CancelToken'] = None) -> Optional[str]:
        """Delete a zone; returns the deleted zone's ID"""
        result = self._api.delete(self._endpoint(zone_id), Dict[str, Any], cancel_token = cancel_token)
        return result.get("id") if result else None

    async def adelete(self, zone_id: str, cancel_token: Optional['CancelToken'] = None) -> Optional[str]:
        """Async version of delete()"""
        result = await self._api.adelete(self._endpoint(zone_id), Dict[str, Any], cancel_token = cancel_token)
        return result.get("id") if result else None
