from __future__ import annotations

"""
R2 Buckets Resource
"""

from typing import Optional, Dict, Any, Iterator, AsyncIterator, Union, TYPE_CHECKING

from ..core.serialization import quote_segment
from ..errors import ClientError, is_not_found
from ..models import CursorPaginatedResult, R2Bucket, R2BucketCreate
from ..types import ListDirection, R2Jurisdiction, R2LocationHint, R2StorageClass

if TYPE_CHECKING:
    from ..core.cancel import CancelToken
    from ..core.resource import ResourceAccess

JURISDICTION_HEADER = "cf-r2-jurisdiction"
STORAGE_CLASS_HEADER = "cf-r2-storage-class"

JurisdictionT = Optional[Union[R2Jurisdiction, str]]


class R2BucketsResource:
    """
    R2 bucket operations for an account.

    Bucket listings are cursor-paginated with the cursor in
    ``result_info`` and the items under ``result.buckets``. Buckets
    outside the default jurisdiction are only visible when the
    ``cf-r2-jurisdiction`` header names theirs.
    """

    items_key = "buckets"

    def __init__(self, api: 'ResourceAccess', account_id: Optional[str] = None):
        self._api = api
        self._account_id = account_id

    def _endpoint(self, account_id: Optional[str], bucket_name: Optional[str] = None) -> str:
        account_id = account_id or self._account_id
        if not account_id:
            raise ValueError("An account_id is required for R2 operations")
        base = f"accounts/{quote_segment(account_id)}/r2/buckets"
        return f"{base}/{quote_segment(bucket_name)}" if bucket_name else base

    @staticmethod
    def _headers(jurisdiction: JurisdictionT = None, **extra: Optional[str]) -> Optional[Dict[str, str]]:
        headers = {k: str(v) for k, v in extra.items() if v is not None}
        if jurisdiction is not None:
            jurisdiction = R2Jurisdiction(jurisdiction)
            if jurisdiction != R2Jurisdiction.DEFAULT:
                headers[JURISDICTION_HEADER] = jurisdiction.value
        return headers or None

    @staticmethod
    def _filters(
        name_contains: Optional[str] = None,
        start_after: Optional[str] = None,
        order: Optional[str] = None,
        direction: Optional[ListDirection] = None,
        **kwargs,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "name_contains": name_contains,
            "start_after": start_after,
            "order": order,
            "direction": direction,
        }
        params.update(kwargs)
        return params

    # ========================================================================
    # List
    # ========================================================================

    def list(
        self,
        account_id: Optional[str] = None,
        *,
        cursor: Optional[str] = None,
        per_page: Optional[int] = None,
        name_contains: Optional[str] = None,
        jurisdiction: JurisdictionT = None,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> CursorPaginatedResult[R2Bucket]:
        """
        List a single page of buckets

        Args:
            account_id: Account ID; defaults to the client's
            cursor: The cursor from a previous page
            per_page: Results per page
            name_contains: Only buckets whose name contains this string
            jurisdiction: Jurisdiction to list buckets from
        """
        return self._api.get_cursor_paginated_result(
            self._endpoint(account_id), R2Bucket,
            params = self._filters(name_contains, **kwargs),
            cursor = cursor, per_page = per_page, items_key = self.items_key,
            headers = self._headers(jurisdiction), cancel_token = cancel_token,
        )

    async def alist(
        self,
        account_id: Optional[str] = None,
        *,
        cursor: Optional[str] = None,
        per_page: Optional[int] = None,
        name_contains: Optional[str] = None,
        jurisdiction: JurisdictionT = None,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> CursorPaginatedResult[R2Bucket]:
        """Async version of list()"""
        return await self._api.aget_cursor_paginated_result(
            self._endpoint(account_id), R2Bucket,
            params = self._filters(name_contains, **kwargs),
            cursor = cursor, per_page = per_page, items_key = self.items_key,
            headers = self._headers(jurisdiction), cancel_token = cancel_token,
        )

    def list_all(
        self,
        account_id: Optional[str] = None,
        *,
        per_page: Optional[int] = 100,
        name_contains: Optional[str] = None,
        jurisdiction: JurisdictionT = None,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> Iterator[R2Bucket]:
        """Lazily yields every bucket, each name at most once"""
        return self._api.get_cursor_paginated(
            self._endpoint(account_id), R2Bucket,
            params = self._filters(name_contains, **kwargs),
            per_page = per_page, items_key = self.items_key, unique_by = "name",
            headers = self._headers(jurisdiction), cancel_token = cancel_token,
        )

    def alist_all(
        self,
        account_id: Optional[str] = None,
        *,
        per_page: Optional[int] = 100,
        name_contains: Optional[str] = None,
        jurisdiction: JurisdictionT = None,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> AsyncIterator[R2Bucket]:
        """Async version of list_all()"""
        return self._api.aget_cursor_paginated(
            self._endpoint(account_id), R2Bucket,
            params = self._filters(name_contains, **kwargs),
            per_page = per_page, items_key = self.items_key, unique_by = "name",
            headers = self._headers(jurisdiction), cancel_token = cancel_token,
        )

    # ========================================================================
    # Get / Create / Update / Delete
    # ========================================================================

    def get(self, bucket_name: str, account_id: Optional[str] = None, jurisdiction: JurisdictionT = None, cancel_token: Optional['CancelToken'] = None) -> Optional[R2Bucket]:
        """Get a bucket, or None if it does not exist"""
        try:
            return self._api.get(self._endpoint(account_id, bucket_name), R2Bucket, headers = self._headers(jurisdiction), cancel_token = cancel_token)
        except ClientError as e:
            if is_not_found(e): return None
            raise

    async def aget(self, bucket_name: str, account_id: Optional[str] = None, jurisdiction: JurisdictionT = None, cancel_token: Optional['CancelToken'] = None) -> Optional[R2Bucket]:
        """Async version of get()"""
        try:
            return await self._api.aget(self._endpoint(account_id, bucket_name), R2Bucket, headers = self._headers(jurisdiction), cancel_token = cancel_token)
        except ClientError as e:
            if is_not_found(e): return None
            raise

    def create(
        self,
        name: str,
        account_id: Optional[str] = None,
        *,
        location_hint: Optional[Union[R2LocationHint, str]] = None,
        storage_class: Optional[Union[R2StorageClass, str]] = None,
        jurisdiction: JurisdictionT = None,
        cancel_token: Optional['CancelToken'] = None,
    ) -> R2Bucket:
        """Create a bucket"""
        body = R2BucketCreate(name = name, location_hint = location_hint, storage_class = storage_class)
        return self._api.post(self._endpoint(account_id), R2Bucket, body = body, headers = self._headers(jurisdiction), cancel_token = cancel_token)

    async def acreate(
        self,
        name: str,
        account_id: Optional[str] = None,
        *,
        location_hint: Optional[Union[R2LocationHint, str]] = None,
        storage_class: Optional[Union[R2StorageClass, str]] = None,
        jurisdiction: JurisdictionT = None,
        cancel_token: Optional['CancelToken'] = None,
    ) -> R2Bucket:
        """Async version of create()"""
        body = R2BucketCreate(name = name, location_hint = location_hint, storage_class = storage_class)
        return await self._api.apost(self._endpoint(account_id), R2Bucket, body = body, headers = self._headers(jurisdiction), cancel_token = cancel_token)

    def update_storage_class(
        self,
        bucket_name: str,
        storage_class: Union[R2StorageClass, str],
        account_id: Optional[str] = None,
        jurisdiction: JurisdictionT = None,
        cancel_token: Optional['CancelToken'] = None,
    ) -> R2Bucket:
        """Change a bucket's default storage class"""
        headers = self._headers(jurisdiction, **{STORAGE_CLASS_HEADER: R2StorageClass(storage_class).value})
        return self._api.patch(self._endpoint(account_id, bucket_name), R2Bucket, headers = headers, cancel_token = cancel_token)

    async def aupdate_storage_class(
        self,
        bucket_name: str,
        storage_class: Union[R2StorageClass, str],
        account_id: Optional[str] = None,
        jurisdiction: JurisdictionT = None,
        cancel_token: Optional['CancelToken'] = None,
    ) -> R2Bucket:
        """Async version of update_storage_class()"""
        headers = self._headers(jurisdiction, **{STORAGE_CLASS_HEADER: R2StorageClass(storage_class).value})
        return await self._api.apatch(self._endpoint(account_id, bucket_name), R2Bucket, headers = headers, cancel_token = cancel_token)

    def delete(self, bucket_name: str, account_id: Optional[str] = None, jurisdiction: JurisdictionT = None, cancel_token: Optional['CancelToken'] = None) -> None:
        """Delete an empty bucket"""
        self._api.delete(self._endpoint(account_id, bucket_name), headers = self._headers(jurisdiction), cancel_token = cancel_token)

    async def adelete(self, bucket_name: str, account_id: Optional[str] = None, jurisdiction: JurisdictionT = None, cancel_token: Optional['CancelToken'] = None) -> None:
        """Async version of delete()"""
        await self._api.adelete(self._endpoint(account_id, bucket_name), headers = self._headers(jurisdiction), cancel_token = cancel_token)
