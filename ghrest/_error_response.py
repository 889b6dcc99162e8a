from __future__ import annotations

import dataclasses
import enum
import json
import typing

from ._headers import Headers, content_type_is_json
from ._method import Method
from ._models import Response, ResponseParts
from ._parsers import BytesParser, ResponseParser
from ._urls import HttpUrl

__all__ = ["ErrorBody", "ErrorBodyKind", "ErrorResponse", "ErrorResponseParser"]


class ErrorBodyKind(enum.Enum):
    EMPTY = "empty"
    BYTES = "bytes"
    TEXT = "text"
    JSON = "json"


@dataclasses.dataclass(frozen=True)
class ErrorBody:
    """
    The body of a 4xx/5xx response.

    ``value`` is ``None`` for an empty body, ``bytes`` for a body that is not
    valid UTF-8, ``str`` for text, and the decoded JSON value for a JSON body.
    """

    kind: ErrorBodyKind
    value: typing.Any = None

    @classmethod
    def empty(cls) -> ErrorBody:
        return cls(ErrorBodyKind.EMPTY)

    @classmethod
    def from_bytes(cls, data: bytes) -> ErrorBody:
        return cls(ErrorBodyKind.BYTES, data)

    @classmethod
    def from_text(cls, text: str) -> ErrorBody:
        return cls(ErrorBodyKind.TEXT, text)

    @classmethod
    def from_json(cls, value: typing.Any) -> ErrorBody:
        return cls(ErrorBodyKind.JSON, value)

    def pretty_text(self) -> str | None:
        """
        Indented JSON for a JSON body, the text itself for a text body, and
        ``None`` otherwise.
        """
        if self.kind is ErrorBodyKind.JSON:
            return json.dumps(self.value, indent=2, ensure_ascii=False)
        if self.kind is ErrorBodyKind.TEXT:
            return typing.cast(str, self.value)
        return None


@dataclasses.dataclass(frozen=True)
class ErrorResponse:
    """A 4xx/5xx response with its body decoded as an ``ErrorBody``."""

    response: Response[ErrorBody]

    @property
    def initial_url(self) -> HttpUrl:
        return self.response.initial_url

    @property
    def url(self) -> HttpUrl:
        return self.response.url

    @property
    def method(self) -> Method:
        return self.response.method

    @property
    def status(self) -> int:
        return self.response.status

    @property
    def headers(self) -> Headers:
        return self.response.headers

    @property
    def body(self) -> ErrorBody:
        return self.response.body

    @property
    def parts(self) -> ResponseParts:
        return self.response.parts

    def pretty_text(self) -> str | None:
        return self.body.pretty_text()

    def __str__(self) -> str:
        return f"server responded with status {self.status}"


class ErrorResponseParser(ResponseParser[ErrorResponse]):
    """
    Decode an error response body as JSON when the ``Content-Type`` says so,
    and as text otherwise.  A whitespace-only text body is ``EMPTY``; a body
    that is not valid UTF-8 is kept as ``BYTES``.  Invalid JSON under a JSON
    content type is an error.
    """

    def __init__(self) -> None:
        self._parts: ResponseParts | None = None
        self._body = BytesParser()

    def on_parts(self, parts: ResponseParts) -> None:
        self._parts = parts
        self._body.handle_parts(parts)

    def on_bytes(self, chunk: bytes) -> None:
        self._body.handle_bytes(chunk)

    def on_end(self) -> ErrorResponse:
        assert self._parts is not None
        data = self._body.end()
        if content_type_is_json(self._parts.headers):
            body = ErrorBody.from_json(json.loads(data))
        else:
            try:
                text = data.decode("utf-8")
            except UnicodeDecodeError:
                body = ErrorBody.from_bytes(data)
            else:
                body = ErrorBody.from_text(text) if text.strip() else ErrorBody.empty()
        return ErrorResponse(Response(self._parts, body))
