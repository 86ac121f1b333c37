from __future__ import annotations

"""
DNS Resource - CRUD operations for Cloudflare DNS records
"""

from typing import Optional, Dict, Any, Iterator, AsyncIterator, List, Union, TYPE_CHECKING

from ..core.serialization import quote_segment
from ..errors import ClientError, is_not_found
from ..models import (
    DNSBatchRequest,
    DNSBatchResult,
    DNSRecord,
    DNSRecordCreate,
    DNSRecordPatch,
    PagePaginatedResult,
)
from ..types import MatchMode, RecordTypeT

if TYPE_CHECKING:
    from ..core.cancel import CancelToken
    from ..core.resource import ResourceAccess

RecordBody = Union[DNSRecordCreate, Dict[str, Any]]


class DNSResource:
    """
    DNS Record operations for Cloudflare API

    Provides sync and async methods for CRUD operations on DNS records.
    ``zone_id`` defaults to the client's configured zone.
    """

    def __init__(self, api: 'ResourceAccess', zone_id: Optional[str] = None):
        self._api = api
        self._zone_id = zone_id

    def _endpoint(self, zone_id: Optional[str], record_id: Optional[str] = None) -> str:
        """Build endpoint URL"""
        zone_id = zone_id or self._zone_id
        if not zone_id:
            raise ValueError("A zone_id is required for DNS operations")
        base = f"zones/{quote_segment(zone_id)}/dns_records"
        if record_id:
            return f"{base}/{quote_segment(record_id)}"
        return base

    @staticmethod
    def _filters(
        type: Optional[RecordTypeT] = None,
        name: Optional[str] = None,
        content: Optional[str] = None,
        proxied: Optional[bool] = None,
        match: Optional[MatchMode] = None,
        **kwargs,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "type": type,
            "name": name,
            "content": content,
            "proxied": proxied,
            "match": match,
        }
        params.update(kwargs)
        return params

    # ========================================================================
    # List Records
    # ========================================================================

    def list(
        self,
        zone_id: Optional[str] = None,
        *,
        type: Optional[RecordTypeT] = None,
        name: Optional[str] = None,
        content: Optional[str] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> PagePaginatedResult[DNSRecord]:
        """
        List a single page of DNS records

        Args:
            zone_id: Zone ID
            type: Filter by record type (A, AAAA, CNAME, MX, TXT, etc.)
            name: Filter by record name (FQDN)
            content: Filter by record content
            page: Page number
            per_page: Results per page (max 5000)
        """
        return self._api.get_page_paginated_result(
            self._endpoint(zone_id), DNSRecord,
            params = self._filters(type, name, content, **kwargs),
            page = page, per_page = per_page, cancel_token = cancel_token,
        )

    async def alist(
        self,
        zone_id: Optional[str] = None,
        *,
        type: Optional[RecordTypeT] = None,
        name: Optional[str] = None,
        content: Optional[str] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> PagePaginatedResult[DNSRecord]:
        """Async version of list()"""
        return await self._api.aget_page_paginated_result(
            self._endpoint(zone_id), DNSRecord,
            params = self._filters(type, name, content, **kwargs),
            page = page, per_page = per_page, cancel_token = cancel_token,
        )

    def list_all(
        self,
        zone_id: Optional[str] = None,
        *,
        type: Optional[RecordTypeT] = None,
        name: Optional[str] = None,
        content: Optional[str] = None,
        per_page: Optional[int] = 100,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> Iterator[DNSRecord]:
        """Lazily yields every DNS record in the zone matching the filters"""
        return self._api.get_paginated(
            self._endpoint(zone_id), DNSRecord,
            params = self._filters(type, name, content, **kwargs),
            per_page = per_page, cancel_token = cancel_token,
        )

    def alist_all(
        self,
        zone_id: Optional[str] = None,
        *,
        type: Optional[RecordTypeT] = None,
        name: Optional[str] = None,
        content: Optional[str] = None,
        per_page: Optional[int] = 100,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> AsyncIterator[DNSRecord]:
        """Async version of list_all()"""
        return self._api.aget_paginated(
            self._endpoint(zone_id), DNSRecord,
            params = self._filters(type, name, content, **kwargs),
            per_page = per_page, cancel_token = cancel_token,
        )

    def find_by_name(
        self,
        name: str,
        zone_id: Optional[str] = None,
        type: Optional[RecordTypeT] = None,
        cancel_token: Optional['CancelToken'] = None,
    ) -> List[DNSRecord]:
        """Every record with the exact FQDN ``name``"""
        return [r for r in self.list_all(zone_id, type = type, name = name, cancel_token = cancel_token)]

    async def afind_by_name(
        self,
        name: str,
        zone_id: Optional[str] = None,
        type: Optional[RecordTypeT] = None,
        cancel_token: Optional['CancelToken'] = None,
    ) -> List[DNSRecord]:
        """Async version of find_by_name()"""
        return [r async for r in self.alist_all(zone_id, type = type, name = name, cancel_token = cancel_token)]

    # ========================================================================
    # Get
    # ========================================================================

    def get(self, record_id: str, zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> Optional[DNSRecord]:
        """
        Get a DNS record by ID

        Returns:
            The record, or None if not found
        """
        try:
            return self._api.get(self._endpoint(zone_id, record_id), DNSRecord, cancel_token = cancel_token)
        except ClientError as e:
            if is_not_found(e): return None
            raise

    async def aget(self, record_id: str, zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> Optional[DNSRecord]:
        """Async version of get()"""
        try:
            return await self._api.aget(self._endpoint(zone_id, record_id), DNSRecord, cancel_token = cancel_token)
        except ClientError as e:
            if is_not_found(e): return None
            raise

    # ========================================================================
    # Create / Update / Delete
    # ========================================================================

    def create(self, record: RecordBody, zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> DNSRecord:
        """
        Create a DNS record

        Args:
            record: The record, as a `DNSRecordCreate` or a dict of its fields
            zone_id: Zone ID
        """
        body = DNSRecordCreate.model_validate(record) if isinstance(record, dict) else record
        return self._api.post(self._endpoint(zone_id), DNSRecord, body = body, cancel_token = cancel_token)

    async def acreate(self, record: RecordBody, zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> DNSRecord:
        """Async version of create()"""
        body = DNSRecordCreate.model_validate(record) if isinstance(record, dict) else record
        return await self._api.apost(self._endpoint(zone_id), DNSRecord, body = body, cancel_token = cancel_token)

    def update(
        self,
        record_id: str,
        record: Union[RecordBody, DNSRecordPatch],
        zone_id: Optional[str] = None,
        partial: bool = False,
        cancel_token: Optional['CancelToken'] = None,
    ) -> DNSRecord:
        """
        Replace a DNS record (PUT), or with ``partial=True`` only change
        the given fields (PATCH)
        """
        endpoint = self._endpoint(zone_id, record_id)
        if partial:
            body = DNSRecordPatch.model_validate(record) if isinstance(record, dict) else record
            return self._api.patch(endpoint, DNSRecord, body = body, cancel_token = cancel_token)
        body = DNSRecordCreate.model_validate(record) if isinstance(record, dict) else record
        return self._api.put(endpoint, DNSRecord, body = body, cancel_token = cancel_token)

    async def aupdate(
        self,
        record_id: str,
        record: Union[RecordBody, DNSRecordPatch],
        zone_id: Optional[str] = None,
        partial: bool = False,
        cancel_token: Optional['CancelToken'] = None,
    ) -> DNSRecord:
        """Async version of update()"""
        endpoint = self._endpoint(zone_id, record_id)
        if partial:
            body = DNSRecordPatch.model_validate(record) if isinstance(record, dict) else record
            return await self._api.apatch(endpoint, DNSRecord, body = body, cancel_token = cancel_token)
        body = DNSRecordCreate.model_validate(record) if isinstance(record, dict) else record
        return await self._api.aput(endpoint, DNSRecord, body = body, cancel_token = cancel_token)

    def delete(self, record_id: str, zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> Optional[str]:
        """Delete a DNS record; returns the deleted record's ID"""
        result = self._api.delete(self._endpoint(zone_id, record_id), Dict[str, Any], cancel_token = cancel_token)
        return result.get("id") if result else None

    async def adelete(self, record_id: str, zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> Optional[str]:
        """Async version of delete()"""
        result = await self._api.adelete(self._endpoint(zone_id, record_id), Dict[str, Any], cancel_token = cancel_token)
        return result.get("id") if result else None

    # ========================================================================
    # Batch
    # ========================================================================

    def batch(self, batch: Union[DNSBatchRequest, Dict[str, Any]], zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> DNSBatchResult:
        """
        Apply deletes, patches, puts and posts in one request
        """
        body = DNSBatchRequest.model_validate(batch) if isinstance(batch, dict) else batch
        return self._api.post(f"{self._endpoint(zone_id)}/batch", DNSBatchResult, body = body, cancel_token = cancel_token)

    async def abatch(self, batch: Union[DNSBatchRequest, Dict[str, Any]], zone_id: Optional[str] = None, cancel_token: Optional['CancelToken'] = None) -> DNSBatchResult:
        """Async version of batch()"""
        body = DNSBatchRequest.model_validate(batch) if isinstance(batch, dict) else batch
        return await self._api.apost(f"{self._endpoint(zone_id)}/batch", DNSBatchResult, body = body, cancel_token = cancel_token)
