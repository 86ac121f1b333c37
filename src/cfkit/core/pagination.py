from __future__ import annotations

"""
Page-based and cursor-based enumeration of list endpoints
"""

import typing as t

from pydantic import ValidationError

from ..errors import DecodeError
from ..models import CursorInfo, CursorPaginatedResult, Envelope, PagePaginatedResult
from ..utils.logs import logger
from .cancel import CancelToken
from .executor import ApiRequest
from .resilience import ResilienceController
from .serialization import get_type_adapter

__all__ = ["PaginationEngine", "UniqueBy"]

T = t.TypeVar('T')

UniqueBy = t.Union[str, t.Callable[[t.Any], t.Hashable], None]

_PAGE_KEYS = ('page', 'per_page')


def _unique_key(item: t.Any, unique_by: UniqueBy) -> t.Hashable:
    if callable(unique_by):
        return unique_by(item)
    return item[unique_by] if isinstance(item, dict) else getattr(item, unique_by)


class _Dedup:
    """Tracks keys already yielded during a single enumeration"""

    def __init__(self, unique_by: UniqueBy):
        self.unique_by = unique_by
        self.seen: t.Set[t.Hashable] = set()

    def __call__(self, items: t.List[T]) -> t.List[T]:
        if self.unique_by is None:
            return items
        fresh = []
        for item in items:
            key = _unique_key(item, self.unique_by)
            if key in self.seen:
                continue
            self.seen.add(key)
            fresh.append(item)
        return fresh


class PaginationEngine:
    """
    Turns a list endpoint into single pages or lazy, auto-advancing
    sequences of items.

    Page-based listings walk ``page=1..total_pages``. Cursor-based
    listings feed each response's cursor into the next request until
    the server returns no cursor. Each page goes through the
    `ResilienceController`, so transient failures mid-enumeration are
    retried transparently; a fatal one is raised from the iteration.
    """

    def __init__(self, controller: ResilienceController):
        self.controller = controller

    # ========================================================================
    # Helpers
    # ========================================================================

    @staticmethod
    def _split_params(request: ApiRequest, keys: t.Sequence[str]) -> t.Tuple[t.Dict[str, t.Any], t.Dict[str, t.Any]]:
        params = dict(request.params or {})
        extracted = {k: params.pop(k) for k in keys if k in params}
        return params, extracted

    @staticmethod
    def _extract_items(envelope: Envelope, item_type: t.Any, items_key: t.Optional[str]) -> t.List[t.Any]:
        result = envelope.result
        if items_key and isinstance(result, dict):
            result = result.get(items_key)
        if result is None:
            return []
        try:
            return get_type_adapter(t.List[item_type]).validate_python(result)
        except ValidationError as e:
            raise DecodeError(f'Failed to decode list items as {item_type!r}: {e}', raw_body = str(result)) from e

    def _page_request(self, request: ApiRequest, page: t.Optional[int], per_page: t.Optional[int]) -> ApiRequest:
        params, extracted = self._split_params(request, _PAGE_KEYS)
        page = page if page is not None else extracted.get('page')
        per_page = per_page if per_page is not None else extracted.get('per_page')
        if page is not None: params['page'] = page
        if per_page is not None: params['per_page'] = per_page
        return request.with_params(params)

    def _page_result(self, envelope: Envelope, item_type: t.Any, items_key: t.Optional[str]) -> PagePaginatedResult:
        items = self._extract_items(envelope, item_type, items_key)
        page_info = envelope.result_info.page_info if envelope.result_info is not None else None
        return PagePaginatedResult(items = items, page_info = page_info)

    def _cursor_request(self, request: ApiRequest, cursor: t.Optional[str], per_page: t.Optional[int]) -> ApiRequest:
        params, extracted = self._split_params(request, ('cursor', 'per_page'))
        cursor = cursor if cursor is not None else extracted.get('cursor')
        per_page = per_page if per_page is not None else extracted.get('per_page')
        if cursor: params['cursor'] = cursor
        if per_page is not None: params['per_page'] = per_page
        return request.with_params(params)

    def _cursor_result(self, envelope: Envelope, item_type: t.Any, items_key: t.Optional[str]) -> CursorPaginatedResult:
        items = self._extract_items(envelope, item_type, items_key)
        if envelope.result_info is not None:
            cursor_info = envelope.result_info.cursor_info
        else:
            cursor_info = CursorInfo(count = len(items))
        return CursorPaginatedResult(items = items, cursor_info = cursor_info)

    def _start_page(self, request: ApiRequest, page: t.Optional[int]) -> int:
        if page is not None:
            return page
        return int((request.params or {}).get('page') or 1)

    @staticmethod
    def _has_next_page(page: int, result: PagePaginatedResult) -> bool:
        return result.page_info is not None and page < result.page_info.total_pages

    @staticmethod
    def _next_cursor(request: ApiRequest, sent: t.Optional[str], result: CursorPaginatedResult) -> t.Optional[str]:
        cursor = result.next_cursor
        if cursor and cursor == sent:
            logger.warning(f'{request.endpoint} returned the cursor it was sent; stopping enumeration')
            return None
        return cursor

    # ========================================================================
    # Page-based
    # ========================================================================

    def fetch_page(
        self,
        request: ApiRequest,
        item_type: t.Type[T],
        *,
        page: t.Optional[int] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> PagePaginatedResult[T]:
        """Fetches one page with its `PageInfo`"""
        response = self.controller.execute(self._page_request(request, page, per_page), cancel_token)
        return self._page_result(response.envelope, item_type, items_key)

    async def afetch_page(
        self,
        request: ApiRequest,
        item_type: t.Type[T],
        *,
        page: t.Optional[int] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> PagePaginatedResult[T]:
        """Async version of fetch_page()"""
        response = await self.controller.aexecute(self._page_request(request, page, per_page), cancel_token)
        return self._page_result(response.envelope, item_type, items_key)

    def iter_pages(
        self,
        request: ApiRequest,
        item_type: t.Type[T],
        *,
        page: t.Optional[int] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> t.Iterator[PagePaginatedResult[T]]:
        """Yields every page from the starting page through ``total_pages``"""
        current = self._start_page(request, page)
        while True:
            result = self.fetch_page(request, item_type, page = current, per_page = per_page, items_key = items_key, cancel_token = cancel_token)
            yield result
            if not self._has_next_page(current, result):
                return
            current += 1

    async def aiter_pages(
        self,
        request: ApiRequest,
        item_type: t.Type[T],
        *,
        page: t.Optional[int] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> t.AsyncIterator[PagePaginatedResult[T]]:
        """Async version of iter_pages()"""
        current = self._start_page(request, page)
        while True:
            result = await self.afetch_page(request, item_type, page = current, per_page = per_page, items_key = items_key, cancel_token = cancel_token)
            yield result
            if not self._has_next_page(current, result):
                return
            current += 1

    def iter_items(
        self,
        request: ApiRequest,
        item_type: t.Type[T],
        *,
        page: t.Optional[int] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        unique_by: UniqueBy = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> t.Iterator[T]:
        """
        Lazily yields every item across all pages. With ``unique_by``,
        items whose key was already yielded are skipped.
        """
        dedup = _Dedup(unique_by)
        for result in self.iter_pages(request, item_type, page = page, per_page = per_page, items_key = items_key, cancel_token = cancel_token):
            yield from dedup(result.items)

    async def aiter_items(
        self,
        request: ApiRequest,
        item_type: t.Type[T],
        *,
        page: t.Optional[int] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        unique_by: UniqueBy = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> t.AsyncIterator[T]:
        """Async version of iter_items()"""
        dedup = _Dedup(unique_by)
        async for result in self.aiter_pages(request, item_type, page = page, per_page = per_page, items_key = items_key, cancel_token = cancel_token):
            for item in dedup(result.items):
                yield item

    # ========================================================================
    # Cursor-based
    # ========================================================================

    def fetch_cursor_page(
        self,
        request: ApiRequest,
        item_type: t.Type[T],
        *,
        cursor: t.Optional[str] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> CursorPaginatedResult[T]:
        """Fetches one page with its `CursorInfo`"""
        response = self.controller.execute(self._cursor_request(request, cursor, per_page), cancel_token)
        return self._cursor_result(response.envelope, item_type, items_key)

    async def afetch_cursor_page(
        self,
        request: ApiRequest,
        item_type: t.Type[T],
        *,
        cursor: t.Optional[str] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> CursorPaginatedResult[T]:
        """Async version of fetch_cursor_page()"""
        response = await self.controller.aexecute(self._cursor_request(request, cursor, per_page), cancel_token)
        return self._cursor_result(response.envelope, item_type, items_key)

    def iter_cursor_pages(
        self,
        request: ApiRequest,
        item_type: t.Type[T],
        *,
        cursor: t.Optional[str] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> t.Iterator[CursorPaginatedResult[T]]:
        """Yields pages until the server returns an empty cursor"""
        cursor = cursor if cursor is not None else (request.params or {}).get('cursor')
        while True:
            result = self.fetch_cursor_page(request, item_type, cursor = cursor, per_page = per_page, items_key = items_key, cancel_token = cancel_token)
            yield result
            cursor = self._next_cursor(request, cursor, result)
            if not cursor:
                return

    async def aiter_cursor_pages(
        self,
        request: ApiRequest,
        item_type: t.Type[T],
        *,
        cursor: t.Optional[str] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> t.AsyncIterator[CursorPaginatedResult[T]]:
        """Async version of iter_cursor_pages()"""
        cursor = cursor if cursor is not None else (request.params or {}).get('cursor')
        while True:
            result = await self.afetch_cursor_page(request, item_type, cursor = cursor, per_page = per_page, items_key = items_key, cancel_token = cancel_token)
            yield result
            cursor = self._next_cursor(request, cursor, result)
            if not cursor:
                return

    def iter_cursor_items(
        self,
        request: ApiRequest,
        item_type: t.Type[T],
        *,
        cursor: t.Optional[str] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        unique_by: UniqueBy = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> t.Iterator[T]:
        """Lazily yields every item across all cursor pages"""
        dedup = _Dedup(unique_by)
        for result in self.iter_cursor_pages(request, item_type, cursor = cursor, per_page = per_page, items_key = items_key, cancel_token = cancel_token):
            yield from dedup(result.items)

    async def aiter_cursor_items(
        self,
        request: ApiRequest,
        item_type: t.Type[T],
        *,
        cursor: t.Optional[str] = None,
        per_page: t.Optional[int] = None,
        items_key: t.Optional[str] = None,
        unique_by: UniqueBy = None,
        cancel_token: t.Optional[CancelToken] = None,
    ) -> t.AsyncIterator[T]:
        """Async version of iter_cursor_items()"""
        dedup = _Dedup(unique_by)
        async for result in self.aiter_cursor_pages(request, item_type, cursor = cursor, per_page = per_page, items_key = items_key, cancel_token = cancel_token):
            for item in dedup(result.items):
                yield item
