"""
Streaming response parsers.

A parser is fed a response in three steps, each exactly once and in order:

* ``handle_parts(parts)`` with the status line and headers,
* ``handle_bytes(chunk)`` for every chunk of the body,
* ``end()``, which returns the decoded value or raises.

Subclasses implement ``on_parts``, ``on_bytes`` and ``on_end``; the public
methods enforce the call order and raise ``ParserStateError`` on misuse.
``parse_response()`` and ``aparse_response()`` drive a parser over a body
stream and wrap failures in ``ResponseReadError`` (reading the body failed)
or ``ResponseDecodeError`` (the parser rejected it).
"""

from __future__ import annotations

import abc
import codecs
import enum
import json
import typing

from ._consts import READ_BLOCK_SIZE
from ._exceptions import ParserStateError, ResponseDecodeError, ResponseReadError
from ._models import Response, ResponseParts

__all__ = [
    "BytesParser",
    "IgnoreParser",
    "JsonParser",
    "LossyTextParser",
    "ResponseParser",
    "TextParser",
    "WithPartsParser",
    "WriterParser",
    "aparse_response",
    "parse_response",
]

T = typing.TypeVar("T")
U = typing.TypeVar("U")


class _ParserState(enum.Enum):
    NOT_STARTED = "not started"
    RECEIVING = "receiving"
    FINISHED = "finished"


class ResponseParser(typing.Generic[T], metaclass=abc.ABCMeta):
    _state: _ParserState = _ParserState.NOT_STARTED

    def handle_parts(self, parts: ResponseParts) -> None:
        if self._state is not _ParserState.NOT_STARTED:
            raise ParserStateError(f"handle_parts() called on a parser that is {self._state.value}")
        self._state = _ParserState.RECEIVING
        self.on_parts(parts)

    def handle_bytes(self, chunk: bytes) -> None:
        if self._state is not _ParserState.RECEIVING:
            raise ParserStateError(f"handle_bytes() called on a parser that is {self._state.value}")
        self.on_bytes(chunk)

    def end(self) -> T:
        if self._state is not _ParserState.RECEIVING:
            raise ParserStateError(f"end() called on a parser that is {self._state.value}")
        self._state = _ParserState.FINISHED
        return self.on_end()

    def on_parts(self, parts: ResponseParts) -> None:
        pass

    def on_bytes(self, chunk: bytes) -> None:
        pass

    @abc.abstractmethod
    def on_end(self) -> T:
        raise NotImplementedError()  # pragma: no cover


class IgnoreParser(ResponseParser[None]):
    """Discard the body."""

    def on_end(self) -> None:
        return None


class BytesParser(ResponseParser[bytes]):
    """Collect the raw body."""

    def __init__(self) -> None:
        self._chunks: list[bytes] = []

    def on_bytes(self, chunk: bytes) -> None:
        self._chunks.append(bytes(chunk))

    def on_end(self) -> bytes:
        return b"".join(self._chunks)


class TextParser(ResponseParser[str]):
    """Decode the body as UTF-8, failing on invalid input."""

    errors = "strict"

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors=self.errors)
        self._text: list[str] = []
        self._error: UnicodeDecodeError | None = None

    def on_bytes(self, chunk: bytes) -> None:
        if self._error is not None:
            return
        try:
            self._text.append(self._decoder.decode(chunk))
        except UnicodeDecodeError as exc:
            self._error = exc

    def on_end(self) -> str:
        if self._error is None:
            try:
                self._text.append(self._decoder.decode(b"", final=True))
            except UnicodeDecodeError as exc:
                self._error = exc
        if self._error is not None:
            raise self._error
        return "".join(self._text)


class LossyTextParser(TextParser):
    """Decode the body as UTF-8, replacing invalid sequences with U+FFFD."""

    errors = "replace"


class JsonParser(ResponseParser[T]):
    """
    Decode the body as JSON.  ``decoder``, if given, is applied to the
    decoded value and may raise to reject it.
    """

    def __init__(self, decoder: typing.Callable[[typing.Any], T] | None = None) -> None:
        self._decoder = decoder
        self._chunks: list[bytes] = []

    def on_bytes(self, chunk: bytes) -> None:
        self._chunks.append(bytes(chunk))

    def on_end(self) -> T:
        value = json.loads(b"".join(self._chunks))
        if self._decoder is None:
            return typing.cast(T, value)
        return self._decoder(value)


class WithPartsParser(ResponseParser[Response[U]]):
    """Wrap another parser, returning its output together with the response parts."""

    def __init__(self, inner: ResponseParser[U]) -> None:
        self._inner = inner
        self._parts: ResponseParts | None = None

    def on_parts(self, parts: ResponseParts) -> None:
        self._parts = parts
        self._inner.handle_parts(parts)

    def on_bytes(self, chunk: bytes) -> None:
        self._inner.handle_bytes(chunk)

    def on_end(self) -> Response[U]:
        assert self._parts is not None
        return Response(self._parts, self._inner.end())


class WriterParser(ResponseParser[None]):
    """
    Stream the body into a binary writable file object.

    The first write failure stops further writes and is raised from ``end()``.
    """

    def __init__(self, writer: typing.BinaryIO) -> None:
        self._writer = writer
        self._error: OSError | None = None

    def on_bytes(self, chunk: bytes) -> None:
        if self._error is not None:
            return
        try:
            self._writer.write(chunk)
        except OSError as exc:
            self._error = exc

    def on_end(self) -> None:
        if self._error is not None:
            raise self._error


# ----------------------------------------------------------------------
# Drivers
# ----------------------------------------------------------------------


def _blocks(chunk: bytes) -> typing.Iterator[bytes]:
    if len(chunk) <= READ_BLOCK_SIZE:
        yield chunk
        return
    view = memoryview(chunk)
    for start in range(0, len(chunk), READ_BLOCK_SIZE):
        yield bytes(view[start : start + READ_BLOCK_SIZE])


def parse_response(
    parser: ResponseParser[T],
    parts: ResponseParts,
    body: typing.Iterable[bytes],
) -> T:
    """Feed ``parts`` and every chunk of ``body`` to ``parser`` and return its result."""
    stream = iter(body)
    try:
        parser.handle_parts(parts)
        while True:
            try:
                chunk = next(stream)
            except StopIteration:
                break
            except Exception as exc:
                raise ResponseReadError(parts.initial_url, parts.method, exc) from exc
            try:
                for block in _blocks(chunk):
                    parser.handle_bytes(block)
            except Exception as exc:
                raise ResponseDecodeError(parts.initial_url, parts.method, exc) from exc
        try:
            return parser.end()
        except Exception as exc:
            raise ResponseDecodeError(parts.initial_url, parts.method, exc) from exc
    finally:
        close = getattr(stream, "close", None)
        if close is not None:
            close()


async def aparse_response(
    parser: ResponseParser[T],
    parts: ResponseParts,
    body: typing.AsyncIterable[bytes],
) -> T:
    """Async variant of ``parse_response()``."""
    stream = body.__aiter__()
    try:
        parser.handle_parts(parts)
        while True:
            try:
                chunk = await stream.__anext__()
            except StopAsyncIteration:
                break
            except Exception as exc:
                raise ResponseReadError(parts.initial_url, parts.method, exc) from exc
            try:
                for block in _blocks(chunk):
                    parser.handle_bytes(block)
            except Exception as exc:
                raise ResponseDecodeError(parts.initial_url, parts.method, exc) from exc
        try:
            return parser.end()
        except Exception as exc:
            raise ResponseDecodeError(parts.initial_url, parts.method, exc) from exc
    finally:
        aclose = getattr(stream, "aclose", None)
        if aclose is not None:
            await aclose()
