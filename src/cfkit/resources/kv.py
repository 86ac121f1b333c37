from __future__ import annotations

"""
Workers KV Resource
"""

from typing import Optional, Dict, Any, Iterator, AsyncIterator, List, Literal, TYPE_CHECKING

from ..core.serialization import quote_segment
from ..models import CursorPaginatedResult, KVBulkGetRequest, KVBulkGetResult, KVKey, KVNamespace, PagePaginatedResult

if TYPE_CHECKING:
    from ..core.cancel import CancelToken
    from ..core.resource import ResourceAccess


class KVResource:
    """
    Workers KV namespaces and keys.

    Namespaces are page-paginated; keys are cursor-paginated and sized
    with ``limit`` rather than ``per_page``.
    """

    def __init__(self, api: 'ResourceAccess', account_id: Optional[str] = None):
        self._api = api
        self._account_id = account_id

    def _endpoint(self, account_id: Optional[str], namespace_id: Optional[str] = None, *parts: str) -> str:
        account_id = account_id or self._account_id
        if not account_id:
            raise ValueError("An account_id is required for KV operations")
        path = f"accounts/{quote_segment(account_id)}/storage/kv/namespaces"
        if namespace_id:
            path += f"/{quote_segment(namespace_id)}"
        if parts:
            path += "/" + "/".join(parts)
        return path

    # ========================================================================
    # Namespaces
    # ========================================================================

    def list_namespaces(
        self,
        account_id: Optional[str] = None,
        *,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> PagePaginatedResult[KVNamespace]:
        """List a single page of namespaces"""
        return self._api.get_page_paginated_result(
            self._endpoint(account_id), KVNamespace, params = kwargs,
            page = page, per_page = per_page, cancel_token = cancel_token,
        )

    async def alist_namespaces(
        self,
        account_id: Optional[str] = None,
        *,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> PagePaginatedResult[KVNamespace]:
        """Async version of list_namespaces()"""
        return await self._api.aget_page_paginated_result(
            self._endpoint(account_id), KVNamespace, params = kwargs,
            page = page, per_page = per_page, cancel_token = cancel_token,
        )

    def list_all_namespaces(
        self,
        account_id: Optional[str] = None,
        *,
        per_page: Optional[int] = 100,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> Iterator[KVNamespace]:
        return self._api.get_paginated(
            self._endpoint(account_id), KVNamespace, params = kwargs,
            per_page = per_page, cancel_token = cancel_token,
        )

    def alist_all_namespaces(
        self,
        account_id: Optional[str] = None,
        *,
        per_page: Optional[int] = 100,
        cancel_token: Optional['CancelToken'] = None,
        **kwargs,
    ) -> AsyncIterator[KVNamespace]:
        """Async version of list_all_namespaces()"""
        return self._api.aget_paginated(
            self._endpoint(account_id), KVNamespace, params = kwargs,
            per_page = per_page, cancel_token = cancel_token,
        )

    # ========================================================================
    # Keys
    # ========================================================================

    def list_keys(
        self,
        namespace_id: str,
        account_id: Optional[str] = None,
        *,
        prefix: Optional[str] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
        cancel_token: Optional['CancelToken'] = None,
    ) -> CursorPaginatedResult[KVKey]:
        """List a single page of keys"""
        return self._api.get_cursor_paginated_result(
            self._endpoint(account_id, namespace_id, "keys"), KVKey,
            params = {"prefix": prefix, "limit": limit},
            cursor = cursor, cancel_token = cancel_token,
        )

    async def alist_keys(
        self,
        namespace_id: str,
        account_id: Optional[str] = None,
        *,
        prefix: Optional[str] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
        cancel_token: Optional['CancelToken'] = None,
    ) -> CursorPaginatedResult[KVKey]:
        """Async version of list_keys()"""
        return await self._api.aget_cursor_paginated_result(
            self._endpoint(account_id, namespace_id, "keys"), KVKey,
            params = {"prefix": prefix, "limit": limit},
            cursor = cursor, cancel_token = cancel_token,
        )

    def list_all_keys(
        self,
        namespace_id: str,
        account_id: Optional[str] = None,
        *,
        prefix: Optional[str] = None,
        limit: Optional[int] = 1000,
        cancel_token: Optional['CancelToken'] = None,
    ) -> Iterator[KVKey]:
        """Lazily yields every key in the namespace"""
        return self._api.get_cursor_paginated(
            self._endpoint(account_id, namespace_id, "keys"), KVKey,
            params = {"prefix": prefix, "limit": limit},
            cancel_token = cancel_token,
        )

    def alist_all_keys(
        self,
        namespace_id: str,
        account_id: Optional[str] = None,
        *,
        prefix: Optional[str] = None,
        limit: Optional[int] = 1000,
        cancel_token: Optional['CancelToken'] = None,
    ) -> AsyncIterator[KVKey]:
        """Async version of list_all_keys()"""
        return self._api.aget_cursor_paginated(
            self._endpoint(account_id, namespace_id, "keys"), KVKey,
            params = {"prefix": prefix, "limit": limit},
            cancel_token = cancel_token,
        )

    # ========================================================================
    # Bulk Get
    # ========================================================================

    @staticmethod
    def _bulk_body(keys: List[str], type: Optional[Literal["text", "json"]], with_metadata: Optional[bool]) -> KVBulkGetRequest:
        return KVBulkGetRequest(keys = keys, type = type, with_metadata = with_metadata)

    def bulk_get(
        self,
        namespace_id: str,
        keys: List[str],
        account_id: Optional[str] = None,
        *,
        type: Optional[Literal["text", "json"]] = None,
        with_metadata: Optional[bool] = None,
        cancel_token: Optional['CancelToken'] = None,
    ) -> Dict[str, Any]:
        """
        Fetch up to 100 values in one request

        Returns:
            A mapping of key to value (or to ``{"value", "metadata"}`` when
            ``with_metadata`` is set); missing keys map to None
        """
        result = self._api.post(
            self._endpoint(account_id, namespace_id, "bulk", "get"), KVBulkGetResult,
            body = self._bulk_body(keys, type, with_metadata), casing = "camel",
            cancel_token = cancel_token,
        )
        return result.values if result else {}

    async def abulk_get(
        self,
        namespace_id: str,
        keys: List[str],
        account_id: Optional[str] = None,
        *,
        type: Optional[Literal["text", "json"]] = None,
        with_metadata: Optional[bool] = None,
        cancel_token: Optional['CancelToken'] = None,
    ) -> Dict[str, Any]:
        """Async version of bulk_get()"""
        result = await self._api.apost(
            self._endpoint(account_id, namespace_id, "bulk", "get"), KVBulkGetResult,
            body = self._bulk_body(keys, type, with_metadata), casing = "camel",
            cancel_token = cancel_token,
        )
        return result.values if result else {}
