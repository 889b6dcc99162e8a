from __future__ import annotations

import abc
import json
import os
import typing

import anyio

from ._consts import READ_BLOCK_SIZE
from ._headers import Headers, set_content_length
from ._method import Method
from ._parsers import ResponseParser
from ._urls import Endpoint, HttpUrl

__all__ = [
    "AsyncRequestBody",
    "BytesBody",
    "EmptyBody",
    "EndpointTypes",
    "FileBody",
    "FilePathBody",
    "JsonBody",
    "Request",
    "RequestBody",
    "TextBody",
]

T = typing.TypeVar("T")

EndpointTypes = typing.Union[Endpoint, HttpUrl, str, typing.Iterable[str]]


class Request(typing.Generic[T], metaclass=abc.ABCMeta):
    """
    Describes a single API call: where it goes, how its body is produced,
    and how its response is decoded into a ``T``.

    Subclasses must implement ``endpoint()``, ``method()``, ``body()`` and
    ``parser()``.  ``headers()``, ``params()`` and ``timeout()`` default to
    nothing.  Request headers override body headers, which override the
    client's default headers.
    """

    @abc.abstractmethod
    def endpoint(self) -> EndpointTypes:
        raise NotImplementedError()  # pragma: no cover

    @abc.abstractmethod
    def method(self) -> Method:
        raise NotImplementedError()  # pragma: no cover

    def headers(self) -> typing.Mapping[str, str]:
        return {}

    def params(self) -> typing.Sequence[tuple[str, str]]:
        """Query parameters appended to the endpoint URL, in order."""
        return []

    def timeout(self) -> float | None:
        """Overrides the client's default timeout, in seconds."""
        return None

    @abc.abstractmethod
    def body(self) -> RequestBody | AsyncRequestBody:
        raise NotImplementedError()  # pragma: no cover

    @abc.abstractmethod
    def parser(self) -> ResponseParser[T]:
        raise NotImplementedError()  # pragma: no cover


# ----------------------------------------------------------------------
# Request bodies
# ----------------------------------------------------------------------


class RequestBody(metaclass=abc.ABCMeta):
    """A request body that can be sent by a synchronous client."""

    def headers(self) -> Headers:
        return Headers()

    @abc.abstractmethod
    def into_stream(self) -> typing.Iterator[bytes]:
        """
        Turn the body into a one-shot stream of bytes.  Raises if the
        underlying resource cannot be read.
        """
        raise NotImplementedError()  # pragma: no cover


class AsyncRequestBody(metaclass=abc.ABCMeta):
    """A request body that can be sent by an asynchronous client."""

    def headers(self) -> Headers:
        return Headers()

    @abc.abstractmethod
    async def into_async_stream(self) -> typing.AsyncIterator[bytes]:
        raise NotImplementedError()  # pragma: no cover


async def _aiter_chunks(chunks: typing.Iterable[bytes]) -> typing.AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


class _InMemoryBody(RequestBody, AsyncRequestBody):
    def _content(self) -> bytes:
        raise NotImplementedError()  # pragma: no cover

    def into_stream(self) -> typing.Iterator[bytes]:
        content = self._content()
        return iter([content] if content else [])

    async def into_async_stream(self) -> typing.AsyncIterator[bytes]:
        content = self._content()
        return _aiter_chunks([content] if content else [])


class EmptyBody(_InMemoryBody):
    def headers(self) -> Headers:
        headers = Headers()
        set_content_length(headers, 0)
        return headers

    def _content(self) -> bytes:
        return b""


class BytesBody(_InMemoryBody):
    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)

    def headers(self) -> Headers:
        headers = Headers()
        set_content_length(headers, len(self.data))
        return headers

    def _content(self) -> bytes:
        return self.data


class TextBody(BytesBody):
    def __init__(self, text: str) -> None:
        super().__init__(text.encode("utf-8"))
        self.text = text


class JsonBody(_InMemoryBody):
    """
    A JSON-serialized value.  Serialization happens when the body is turned
    into a stream, so an unserializable value fails the request before
    anything is sent.
    """

    def __init__(self, value: typing.Any, **dumps_kwargs: typing.Any) -> None:
        self.value = value
        self._dumps_kwargs = dumps_kwargs

    def headers(self) -> Headers:
        return Headers({"Content-Type": "application/json"})

    def _content(self) -> bytes:
        return json.dumps(self.value, **self._dumps_kwargs).encode("utf-8")


def _iter_file(file: typing.BinaryIO, close: bool) -> typing.Iterator[bytes]:
    try:
        while True:
            chunk = file.read(READ_BLOCK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        if close:
            file.close()


async def _aiter_file(file: anyio.AsyncFile[bytes], close: bool) -> typing.AsyncIterator[bytes]:
    try:
        while True:
            chunk = await file.read(READ_BLOCK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        if close:
            await file.aclose()


class FilePathBody(RequestBody, AsyncRequestBody):
    """
    The contents of the file at ``path``.  The file is opened when the body
    is turned into a stream and closed once the stream is exhausted.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = path

    def headers(self) -> Headers:
        headers = Headers()
        try:
            size = os.stat(self.path).st_size
        except OSError:
            return headers
        set_content_length(headers, size)
        return headers

    def into_stream(self) -> typing.Iterator[bytes]:
        file = open(self.path, "rb")
        return _iter_file(file, close=True)

    async def into_async_stream(self) -> typing.AsyncIterator[bytes]:
        file = await anyio.open_file(self.path, "rb")
        return _aiter_file(file, close=True)


class FileBody(RequestBody, AsyncRequestBody):
    """
    The remaining contents of an open binary file.  The file is read from
    its current position and is left open.
    """

    def __init__(self, file: typing.BinaryIO) -> None:
        self.file = file

    def headers(self) -> Headers:
        headers = Headers()
        try:
            size = os.fstat(self.file.fileno()).st_size - self.file.tell()
        except (AttributeError, OSError, ValueError):
            return headers
        set_content_length(headers, max(size, 0))
        return headers

    def into_stream(self) -> typing.Iterator[bytes]:
        return _iter_file(self.file, close=False)

    async def into_async_stream(self) -> typing.AsyncIterator[bytes]:
        return _aiter_file(anyio.wrap_file(self.file), close=False)
