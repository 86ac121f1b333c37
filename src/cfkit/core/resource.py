from __future__ import annotations

"""
The facade resource classes use to reach the API.

Resources hold a `ResourceAccess` rather than inheriting from it, so
every call they make goes through the same executor, throttle, breaker
and pagination engine.
"""

import typing as t

from ..models import CursorPaginatedResult, PagePaginatedResult
from .cancel import CancelToken
from .executor import ApiRequest, RequestExecutor
from .pagination import PaginationEngine, UniqueBy
from .resilience import ResilienceController
from .serialization import Casing

__all__ = ["ResourceAccess"]

T = t.TypeVar('T')

Params = t.Optional[t.Dict[str, t.Any]]
Headers = t.Optional[t.Dict[str, str]]


class ResourceAccess:
    """
    Typed verbs over the Cloudflare envelope, in sync and async form.

    >>> zone = access.get('zones/abc', Zone)
    >>> for record in access.get_paginated('zones/abc/dns_records', DNSRecord):
    ...     print(record.name)
    """

    def __init__(self, controller: ResilienceController, paginator: t.Optional[PaginationEngine] = None):
        self.controller = controller
        self.paginator = paginator or PaginationEngine(controller)

    @staticmethod
    def _request(
        method: str,
        endpoint: str,
        params: Params = None,
        body: t.Any = None,
        headers: Headers = None,
        casing: Casing = 'snake',
        timeout: t.Optional[float] = None,
    ) -> ApiRequest:
        return ApiRequest(
            method = method,
            endpoint = endpoint.lstrip('/'),
            params = params,
            body = body,
            headers = headers,
            casing = casing,
            timeout = timeout,
        )

    def _call(self, request: ApiRequest, result_type: t.Any, cancel_token: t.Optional[CancelToken]) -> t.Any:
        response = self.controller.execute(request, cancel_token)
        return RequestExecutor.decode(response.envelope, result_type)

    async def _acall(self, request: ApiRequest, result_type: t.Any, cancel_token: t.Optional[CancelToken]) -> t.Any:
        response = await self.controller.aexecute(request, cancel_token)
        return RequestExecutor.decode(response.envelope, result_type)

    # ========================================================================
    # Verbs
    # ========================================================================

    def get(
        self,
        endpoint: str,
        result_type: t.Type[T] = t.Any,
        *,
        params: Params = None,
        headers: Headers = None,
        timeout: t.Optional[float] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> T:
        """GETs ``endpoint`` and decodes the result"""
        return self._call(self._request('GET', endpoint, params, headers = headers, timeout = timeout), result_type, cancel_token)

    async def aget(
        self,
        endpoint: str,
        result_type: t.Type[T] = t.Any,
        *,
        params: Params = None,
        headers: Headers = None,
        timeout: t.Optional[float] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> T:
        """Async version of get()"""
        return await self._acall(self._request('GET', endpoint, params, headers = headers, timeout = timeout), result_type, cancel_token)

    def post(
        self,
        endpoint: str,
        result_type: t.Type[T] = t.Any,
        *,
        body: t.Any = None,
        params: Params = None,
        headers: Headers = None,
        casing: Casing = 'snake',
        timeout: t.Optional[float] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> T:
        return self._call(self._request('POST', endpoint, params, body, headers, casing, timeout), result_type, cancel_token)

    async def apost(
        self,
        endpoint: str,
        result_type: t.Type[T] = t.Any,
        *,
        body: t.Any = None,
        params: Params = None,
        headers: Headers = None,
        casing: Casing = 'snake',
        timeout: t.Optional[float] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> T:
        """Async version of post()"""
        return await self._acall(self._request('POST', endpoint, params, body, headers, casing, timeout), result_type, cancel_token)

    def put(
        self,
        endpoint: str,
        result_type: t.Type[T] = t.Any,
        *,
        body: t.Any = None,
        params: Params = None,
        headers: Headers = None,
        casing: Casing = 'snake',
        timeout: t.Optional[float] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> T:
        return self._call(self._request('PUT', endpoint, params, body, headers, casing, timeout), result_type, cancel_token)

    async def aput(
        self,
        endpoint: str,
        result_type: t.Type[T] = t.Any,
        *,
        body: t.Any = None,
        params: Params = None,
        headers: Headers = None,
        casing: Casing = 'snake',
        timeout: t.Optional[float] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> T:
        """Async version of put()"""
        return await self._acall(self._request('PUT', endpoint, params, body, headers, casing, timeout), result_type, cancel_token)

    def patch(
        self,
        endpoint: str,
        result_type: t.Type[T] = t.Any,
        *,
        body: t.Any = None,
        params: Params = None,
        headers: Headers = None,
        casing: Casing = 'snake',
        timeout: t.Optional[float] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> T:
        return self._call(self._request('PATCH', endpoint, params, body, headers, casing, timeout), result_type, cancel_token)

    async def apatch(
        self,
        endpoint: str,
        result_type: t.Type[T] = t.Any,
        *,
        body: t.Any = None,
        params: Params = None,
        headers: Headers = None,
        casing: Casing = 'snake',
        timeout: t.Optional[float] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> T:
        """Async version of patch()"""
        return await self._acall(self._request('PATCH', endpoint, params, body, headers, casing, timeout), result_type, cancel_token)

    def delete(
        self,
        endpoint: str,
        result_type: t.Type[T] = t.Any,
        *,
        params: Params = None,
        headers: Headers = None,
        timeout: t.Optional[float] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> T:
        return self._call(self._request('DELETE', endpoint, params, headers = headers, timeout = timeout), result_type, cancel_token)

    async def adelete(
        self,
        endpoint: str,
        result_type: t.Type[T] = t.Any,
        *,
        params: Params = None,
        headers: Headers = None,
        timeout: t.Optional[float] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> T:
        """Async version of delete()"""
        return await self._acall(self._request('DELETE', endpoint, params, headers = headers, timeout = timeout), result_type, cancel_token)

    # ========================================================================
    # Pagination
    # ========================================================================

    def get_page_paginated_result(
        self,
        endpoint: str,
        item_type: t.Type[T] = t.Any,
        *,
        params: Params = None,
        page: t.Optional[int] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        headers: Headers = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> PagePaginatedResult[T]:
        """Fetches a single page of a page-based listing"""
        request = self._request('GET', endpoint, params, headers = headers)
        return self.paginator.fetch_page(request, item_type, page = page, per_page = per_page, items_key = items_key, cancel_token = cancel_token)

    async def aget_page_paginated_result(
        self,
        endpoint: str,
        item_type: t.Type[T] = t.Any,
        *,
        params: Params = None,
        page: t.Optional[int] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        headers: Headers = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> PagePaginatedResult[T]:
        """Async version of get_page_paginated_result()"""
        request = self._request('GET', endpoint, params, headers = headers)
        return await self.paginator.afetch_page(request, item_type, page = page, per_page = per_page, items_key = items_key, cancel_token = cancel_token)

    def get_paginated(
        self,
        endpoint: str,
        item_type: t.Type[T] = t.Any,
        *,
        params: Params = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        unique_by: UniqueBy = None,
        headers: Headers = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> t.Iterator[T]:
        """Lazily yields every item of a page-based listing"""
        request = self._request('GET', endpoint, params, headers = headers)
        return self.paginator.iter_items(request, item_type, per_page = per_page, items_key = items_key, unique_by = unique_by, cancel_token = cancel_token)

    def aget_paginated(
        self,
        endpoint: str,
        item_type: t.Type[T] = t.Any,
        *,
        params: Params = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        unique_by: UniqueBy = None,
        headers: Headers = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> t.AsyncIterator[T]:
        """Async version of get_paginated()"""
        request = self._request('GET', endpoint, params, headers = headers)
        return self.paginator.aiter_items(request, item_type, per_page = per_page, items_key = items_key, unique_by = unique_by, cancel_token = cancel_token)

    def get_cursor_paginated_result(
        self,
        endpoint: str,
        item_type: t.Type[T] = t.Any,
        *,
        params: Params = None,
        cursor: t.Optional[str] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        headers: Headers = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> CursorPaginatedResult[T]:
        """Fetches a single page of a cursor-based listing"""
        request = self._request('GET', endpoint, params, headers = headers)
        return self.paginator.fetch_cursor_page(request, item_type, cursor = cursor, per_page = per_page, items_key = items_key, cancel_token = cancel_token)

    async def aget_cursor_paginated_result(
        self,
        endpoint: str,
        item_type: t.Type[T] = t.Any,
        *,
        params: Params = None,
        cursor: t.Optional[str] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        headers: Headers = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> CursorPaginatedResult[T]:
        """Async version of get_cursor_paginated_result()"""
        request = self._request('GET', endpoint, params, headers = headers)
        return await self.paginator.afetch_cursor_page(request, item_type, cursor = cursor, per_page = per_page, items_key = items_key, cancel_token = cancel_token)

    def get_cursor_paginated(
        self,
        endpoint: str,
        item_type: t.Type[T] = t.Any,
        *,
        params: Params = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        unique_by: UniqueBy = None,
        headers: Headers = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> t.Iterator[T]:
        """Lazily yields every item of a cursor-based listing"""
        request = self._request('GET', endpoint, params, headers = headers)
        return self.paginator.iter_cursor_items(request, item_type, per_page = per_page, items_key = items_key, unique_by = unique_by, cancel_token = cancel_token)

    def aget_cursor_paginated(
        self,
        endpoint: str,
        item_type: t.Type[T] = t.Any,
        *,
        params: Params = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        unique_by: UniqueBy = None,
        headers: Headers = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> t.AsyncIterator[T]:
        """Async version of get_cursor_paginated()"""
        request = self._request('GET', endpoint, params, headers = headers)
        return self.paginator.aiter_cursor_items(request, item_type, per_page = per_page, items_key = items_key, unique_by = unique_by, cancel_token = cancel_token)
