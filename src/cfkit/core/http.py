from __future__ import annotations

"""Hybrid sync/async HTTP client built on top of :mod:`httpx`."""

import asyncio
import typing as t

import httpx

from ..utils.logs import logger, mute_httpx_logger

__all__ = ["HttpClient"]


class HttpClient:
    """
    A sync + asynchronous HTTP client sharing one configuration.

    The underlying ``httpx.Client`` and ``httpx.AsyncClient`` are created
    on first use. This class performs no retries; the resilience layer
    owns that.

    **Parameters:**

    * **base_url** - A URL to use as the base when building request URLs.
    * **headers** - *(optional)* Headers to include on every request.
    * **timeout** - *(optional)* Default timeout in seconds.
    * **transport** - *(optional)* [Sync] A transport to send requests with.
    * **async_transport** - *(optional)* [Async] A transport to send requests with.
    """

    def __init__(
        self,
        *,
        base_url: t.Union[str, httpx.URL] = "",
        headers: t.Optional[t.Dict[str, str]] = None,
        timeout: t.Optional[float] = None,
        transport: t.Optional[httpx.BaseTransport] = None,
        async_transport: t.Optional[httpx.AsyncBaseTransport] = None,
        disable_httpx_logger: t.Optional[bool] = True,
        **kwargs: t.Any,
    ):
        if disable_httpx_logger:
            mute_httpx_logger()
        self.base_url = base_url
        self.headers = dict(headers or {})
        self.timeout = timeout
        self._transport = transport
        self._async_transport = async_transport
        self._kwargs = kwargs

        self._sync_client: t.Optional[httpx.Client] = None
        self._async_client: t.Optional[httpx.AsyncClient] = None
        self._pending_close: t.Optional[asyncio.Task] = None

    def _client_kwargs(self) -> t.Dict[str, t.Any]:
        kwargs = {
            'base_url': self.base_url,
            'headers': self.headers,
            'timeout': self.timeout,
        }
        kwargs.update(self._kwargs)
        return kwargs

    @property
    def sync_client(self) -> httpx.Client:
        """
        Returns a sync client instance.
        """
        if self._sync_client is None or self._sync_client.is_closed:
            self._sync_client = httpx.Client(transport = self._transport, **self._client_kwargs())
        return self._sync_client

    @property
    def async_client(self) -> httpx.AsyncClient:
        """
        Returns an async client instance.
        """
        if self._async_client is None or self._async_client.is_closed:
            self._async_client = httpx.AsyncClient(transport = self._async_transport, **self._client_kwargs())
        return self._async_client

    def request(self, method: str, url: str, **kwargs: t.Any) -> httpx.Response:
        """Send a request with the sync client"""
        return self.sync_client.request(method, url, **kwargs)

    async def async_request(self, method: str, url: str, **kwargs: t.Any) -> httpx.Response:
        """Send a request with the async client"""
        return await self.async_client.request(method, url, **kwargs)

    def close(self) -> None:
        """
        Closes the sync client. An open async client is closed on the
        running event loop when there is one; otherwise use `aclose`.
        """
        if self._sync_client is not None:
            self._sync_client.close()
            self._sync_client = None
        if self._async_client is None or self._async_client.is_closed:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning('The async client is still open; call aclose() from its event loop to close it')
            return
        self._pending_close = loop.create_task(self._async_client.aclose())
        self._async_client = None

    async def aclose(self) -> None:
        if self._async_client is not None:
            await self._async_client.aclose()
            self._async_client = None
        self.close()

    def __enter__(self) -> 'HttpClient':
        return self

    def __exit__(self, *args: t.Any) -> None:
        self.close()

    async def __aenter__(self) -> 'HttpClient':
        return self

    async def __aexit__(self, *args: t.Any) -> None:
        await self.aclose()
