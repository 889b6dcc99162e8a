from __future__ import annotations

import dataclasses
import typing

from ._headers import Headers
from ._method import Method
from ._urls import HttpUrl

__all__ = ["PreparedRequest", "RequestParts", "Response", "ResponseParts"]

T = typing.TypeVar("T")


@dataclasses.dataclass(frozen=True)
class RequestParts:
    """Everything a backend needs to build a request, apart from its body."""

    url: HttpUrl
    method: Method
    headers: Headers = dataclasses.field(default_factory=Headers)
    timeout: float | None = None


@dataclasses.dataclass(frozen=True)
class PreparedRequest:
    """``RequestParts`` together with the body stream to send."""

    parts: RequestParts
    body: typing.Iterator[bytes] | typing.AsyncIterator[bytes]


@dataclasses.dataclass(frozen=True)
class ResponseParts:
    """
    The status line and headers of a response.

    ``initial_url`` is the URL the request was sent to; ``url`` is where the
    response came from after any redirects the backend followed.
    """

    initial_url: HttpUrl
    url: HttpUrl
    method: Method
    status: int
    headers: Headers = dataclasses.field(default_factory=Headers)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_error(self) -> bool:
        return 400 <= self.status < 600


@dataclasses.dataclass(frozen=True)
class Response(typing.Generic[T]):
    """A decoded response body together with the parts it arrived with."""

    parts: ResponseParts
    body: T

    @property
    def initial_url(self) -> HttpUrl:
        return self.parts.initial_url

    @property
    def url(self) -> HttpUrl:
        return self.parts.url

    @property
    def method(self) -> Method:
        return self.parts.method

    @property
    def status(self) -> int:
        return self.parts.status

    @property
    def headers(self) -> Headers:
        return self.parts.headers
