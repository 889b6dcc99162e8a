from __future__ import annotations

import logging
import typing

from ._config import ClientConfig
from ._error_response import ErrorResponseParser
from ._exceptions import PrepareRequestError, ReadRequestBodyError, SendError, StatusError
from ._models import PreparedRequest, RequestParts, ResponseParts
from ._parsers import aparse_response, parse_response
from ._request import AsyncRequestBody, Request, RequestBody
from .pagination import PaginationIter, PaginationRequest, PaginationStream

if typing.TYPE_CHECKING:
    from ._transports.base import AsyncBackend, Backend

__all__ = ["AsyncClient", "Client"]

logger = logging.getLogger("ghrest.client")

T = typing.TypeVar("T")


class _RequestBodyStream:
    """
    Wraps an outgoing body stream and records the exception it raised, so
    that a failure to read the body can be told apart from a transport
    failure.
    """

    def __init__(self, stream: typing.Iterator[bytes]) -> None:
        self._stream = stream
        self.error: Exception | None = None

    def __iter__(self) -> _RequestBodyStream:
        return self

    def __next__(self) -> bytes:
        try:
            return next(self._stream)
        except StopIteration:
            raise
        except Exception as exc:
            self.error = exc
            raise


class _AsyncRequestBodyStream:
    def __init__(self, stream: typing.AsyncIterator[bytes]) -> None:
        self._stream = stream
        self.error: Exception | None = None

    def __aiter__(self) -> _AsyncRequestBodyStream:
        return self

    async def __anext__(self) -> bytes:
        try:
            return await self._stream.__anext__()
        except StopAsyncIteration:
            raise
        except Exception as exc:
            self.error = exc
            raise


class BaseClient:
    def __init__(self, config: ClientConfig | None = None) -> None:
        self._config = ClientConfig() if config is None else config

    @property
    def config(self) -> ClientConfig:
        return self._config

    def _build_parts(
        self, request: Request[typing.Any], body: RequestBody | AsyncRequestBody
    ) -> RequestParts:
        url = self._config.base_url.join_endpoint(request.endpoint())
        for key, value in request.params():
            url = url.append_query_param(key, value)
        timeout = request.timeout()
        if timeout is None:
            timeout = self._config.timeout
        headers = self._config.headers.copy()
        headers.update(body.headers())
        headers.update(request.headers())
        return RequestParts(url=url, method=request.method(), headers=headers, timeout=timeout)

    @staticmethod
    def _response_parts(parts: RequestParts, response: typing.Any) -> ResponseParts:
        logger.debug(
            "%s %s responded with status %d", parts.method, parts.url, response.status
        )
        return ResponseParts(
            initial_url=parts.url,
            url=response.url,
            method=parts.method,
            status=response.status,
            headers=response.headers,
        )


class Client(BaseClient):
    """
    A synchronous client performing ``Request`` objects over a ``Backend``.

    ``request()`` returns the value produced by the request's parser, or
    raises a ``ClientError``::

        client = ClientConfig().with_httpx()
        repo = client.request(GetRepo("octocat", "hello-world"))
    """

    def __init__(self, backend: Backend[typing.Any], config: ClientConfig | None = None) -> None:
        super().__init__(config)
        self._backend = backend

    @property
    def backend(self) -> Backend[typing.Any]:
        return self._backend

    def _prepare(self, request: Request[typing.Any]) -> PreparedRequest:
        body = request.body()
        if not isinstance(body, RequestBody):
            raise TypeError(f"{type(body).__name__} cannot be sent by a synchronous client")
        parts = self._build_parts(request, body)
        try:
            stream = _RequestBodyStream(iter(body.into_stream()))
        except Exception as exc:
            raise PrepareRequestError(parts.url, parts.method, exc) from exc
        return PreparedRequest(parts, stream)

    def request(self, request: Request[T]) -> T:
        prepared = self._prepare(request)
        parts = prepared.parts
        stream = typing.cast(_RequestBodyStream, prepared.body)

        logger.debug("Sending %s %s", parts.method, parts.url)
        try:
            backend_request = self._backend.prepare_request(parts)
            response = self._backend.send(backend_request, stream)
        except Exception as exc:
            if stream.error is not None:
                raise ReadRequestBodyError(parts.url, parts.method, stream.error) from stream.error
            raise SendError(parts.url, parts.method, exc) from exc

        response_parts = self._response_parts(parts, response)
        if response_parts.is_error:
            error = parse_response(ErrorResponseParser(), response_parts, response.body_stream())
            raise StatusError(parts.url, parts.method, error)
        return parse_response(request.parser(), response_parts, response.body_stream())

    def paginate(self, request: PaginationRequest[T]) -> PaginationIter[T]:
        """Iterate over every item of a paginated collection."""
        return PaginationIter(self, request)

    def close(self) -> None:
        self._backend.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *args: typing.Any) -> None:
        self.close()


class AsyncClient(BaseClient):
    """An asynchronous client performing ``Request`` objects over an ``AsyncBackend``."""

    def __init__(
        self, backend: AsyncBackend[typing.Any], config: ClientConfig | None = None
    ) -> None:
        super().__init__(config)
        self._backend = backend

    @property
    def backend(self) -> AsyncBackend[typing.Any]:
        return self._backend

    async def _prepare(self, request: Request[typing.Any]) -> PreparedRequest:
        body = request.body()
        if not isinstance(body, AsyncRequestBody):
            raise TypeError(f"{type(body).__name__} cannot be sent by an asynchronous client")
        parts = self._build_parts(request, body)
        try:
            stream = _AsyncRequestBodyStream(await body.into_async_stream())
        except Exception as exc:
            raise PrepareRequestError(parts.url, parts.method, exc) from exc
        return PreparedRequest(parts, stream)

    async def request(self, request: Request[T]) -> T:
        prepared = await self._prepare(request)
        parts = prepared.parts
        stream = typing.cast(_AsyncRequestBodyStream, prepared.body)

        logger.debug("Sending %s %s", parts.method, parts.url)
        try:
            backend_request = self._backend.prepare_request(parts)
            response = await self._backend.send(backend_request, stream)
        except Exception as exc:
            if stream.error is not None:
                raise ReadRequestBodyError(parts.url, parts.method, stream.error) from stream.error
            raise SendError(parts.url, parts.method, exc) from exc

        response_parts = self._response_parts(parts, response)
        if response_parts.is_error:
            error = await aparse_response(
                ErrorResponseParser(), response_parts, response.body_stream()
            )
            raise StatusError(parts.url, parts.method, error)
        return await aparse_response(request.parser(), response_parts, response.body_stream())

    def paginate(self, request: PaginationRequest[T]) -> PaginationStream[T]:
        """Asynchronously iterate over every item of a paginated collection."""
        return PaginationStream(self, request)

    async def aclose(self) -> None:
        await self._backend.aclose()

    async def __aenter__(self) -> AsyncClient:
        return self

    async def __aexit__(self, *args: typing.Any) -> None:
        await self.aclose()
