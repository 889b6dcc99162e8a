from __future__ import annotations

import typing

from .._headers import Headers
from .._models import RequestParts
from .._urls import HttpUrl

__all__ = ["AsyncBackend", "AsyncBackendResponse", "Backend", "BackendResponse"]

RequestT = typing.TypeVar("RequestT")


@typing.runtime_checkable
class BackendResponse(typing.Protocol):
    """
    A response returned by ``Backend.send()``.

    ``url`` is the URL the response came from, after any redirects.
    ``body_stream()`` may only be called once.
    """

    url: HttpUrl
    status: int
    headers: Headers

    def body_stream(self) -> typing.Iterator[bytes]: ...


@typing.runtime_checkable
class AsyncBackendResponse(typing.Protocol):
    url: HttpUrl
    status: int
    headers: Headers

    def body_stream(self) -> typing.AsyncIterator[bytes]: ...


class Backend(typing.Generic[RequestT]):
    """
    Base class for synchronous transports.

    ``prepare_request()`` builds a transport request and must not raise;
    anything the transport needs to validate is checked in ``send()``.
    ``send()`` consumes ``body`` exactly once and raises on transport
    failure.
    """

    def prepare_request(self, parts: RequestParts) -> RequestT:
        raise NotImplementedError(
            "The 'prepare_request' method must be implemented."
        )  # pragma: no cover

    def send(self, request: RequestT, body: typing.Iterator[bytes]) -> BackendResponse:
        raise NotImplementedError(
            "The 'send' method must be implemented."
        )  # pragma: no cover

    def close(self) -> None:
        pass

    def __enter__(self) -> typing.Self:
        return self

    def __exit__(self, *args: typing.Any) -> None:
        self.close()


class AsyncBackend(typing.Generic[RequestT]):
    """Base class for asynchronous transports.  See ``Backend``."""

    def prepare_request(self, parts: RequestParts) -> RequestT:
        raise NotImplementedError(
            "The 'prepare_request' method must be implemented."
        )  # pragma: no cover

    async def send(
        self, request: RequestT, body: typing.AsyncIterator[bytes]
    ) -> AsyncBackendResponse:
        raise NotImplementedError(
            "The 'send' method must be implemented."
        )  # pragma: no cover

    async def aclose(self) -> None:
        pass

    async def __aenter__(self) -> typing.Self:
        return self

    async def __aexit__(self, *args: typing.Any) -> None:
        await self.aclose()
