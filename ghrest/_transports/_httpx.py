"""
Backends built on ``httpx``.

Both backends follow redirects, stream the request body, and stream the
response body in ``READ_BLOCK_SIZE`` chunks.  The ``httpx`` response is
closed once its body stream is exhausted or closed.
"""

from __future__ import annotations

import logging
import typing

import httpx

from .._consts import READ_BLOCK_SIZE
from .._headers import Headers
from .._models import RequestParts
from .._urls import HttpUrl
from .base import AsyncBackend, Backend

__all__ = ["AsyncHttpxBackend", "AsyncHttpxResponse", "HttpxBackend", "HttpxResponse"]

logger = logging.getLogger("ghrest.transports")


def _request_kwargs(parts: RequestParts) -> dict[str, typing.Any]:
    kwargs: dict[str, typing.Any] = {
        "method": str(parts.method),
        "url": str(parts.url),
        "headers": parts.headers.raw(),
    }
    if parts.timeout is not None:
        kwargs["timeout"] = parts.timeout
    return kwargs


class HttpxResponse:
    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self.url = HttpUrl(str(response.url))
        self.status = response.status_code
        self.headers = Headers(response.headers.multi_items())

    @property
    def raw(self) -> httpx.Response:
        return self._response

    def body_stream(self) -> typing.Iterator[bytes]:
        try:
            yield from self._response.iter_bytes(READ_BLOCK_SIZE)
        finally:
            self._response.close()


class AsyncHttpxResponse:
    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self.url = HttpUrl(str(response.url))
        self.status = response.status_code
        self.headers = Headers(response.headers.multi_items())

    @property
    def raw(self) -> httpx.Response:
        return self._response

    async def body_stream(self) -> typing.AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes(READ_BLOCK_SIZE):
                yield chunk
        finally:
            await self._response.aclose()


class HttpxBackend(Backend[RequestParts]):
    """
    A synchronous backend wrapping an ``httpx.Client``.

    When no client is passed, one is created with ``follow_redirects=True``
    and any extra keyword arguments, and is closed by ``close()``.
    """

    def __init__(self, client: httpx.Client | None = None, **client_kwargs: typing.Any) -> None:
        if client is None:
            client_kwargs.setdefault("follow_redirects", True)
            client = httpx.Client(**client_kwargs)
            self._owns_client = True
        else:
            self._owns_client = False
        self._client = client

    @property
    def client(self) -> httpx.Client:
        return self._client

    def prepare_request(self, parts: RequestParts) -> RequestParts:
        # httpx validates headers when the request is built, so building is
        # left to send().
        return parts

    def send(self, request: RequestParts, body: typing.Iterator[bytes]) -> HttpxResponse:
        httpx_request = self._client.build_request(content=body, **_request_kwargs(request))
        logger.debug("Sending %s %s", request.method, request.url)
        response = self._client.send(httpx_request, stream=True)
        logger.debug("Received %d from %s", response.status_code, response.url)
        return HttpxResponse(response)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


class AsyncHttpxBackend(AsyncBackend[RequestParts]):
    """An asynchronous backend wrapping an ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient | None = None, **client_kwargs: typing.Any) -> None:
        if client is None:
            client_kwargs.setdefault("follow_redirects", True)
            client = httpx.AsyncClient(**client_kwargs)
            self._owns_client = True
        else:
            self._owns_client = False
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    def prepare_request(self, parts: RequestParts) -> RequestParts:
        return parts

    async def send(
        self, request: RequestParts, body: typing.AsyncIterator[bytes]
    ) -> AsyncHttpxResponse:
        httpx_request = self._client.build_request(content=body, **_request_kwargs(request))
        logger.debug("Sending %s %s", request.method, request.url)
        response = await self._client.send(httpx_request, stream=True)
        logger.debug("Received %d from %s", response.status_code, response.url)
        return AsyncHttpxResponse(response)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
