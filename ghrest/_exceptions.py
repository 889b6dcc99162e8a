"""
Our exception hierarchy:

* InvalidUrl
* ParseMethodError
* MethodConvertError
* ParserStateError
* PageDecodeError
* ClientError
  + PrepareRequestError
  + ReadRequestBodyError
  + SendError
  + StatusError
  + ParseResponseError
    - ResponseReadError
    - ResponseDecodeError

Every ``ClientError`` carries the method and the *initial* URL of the request
that failed, so callers can tell "never reached the network" from "transport
failed", "server said no" and "server reply was malformed" without matching on
message strings.
"""

from __future__ import annotations

import typing

if typing.TYPE_CHECKING:
    from ._error_response import ErrorResponse
    from ._method import Method
    from ._urls import HttpUrl

__all__ = [
    "ClientError",
    "InvalidUrl",
    "MethodConvertError",
    "PageDecodeError",
    "ParseMethodError",
    "ParseResponseError",
    "ParserStateError",
    "PrepareRequestError",
    "ReadRequestBodyError",
    "ResponseDecodeError",
    "ResponseReadError",
    "SendError",
    "StatusError",
]


class InvalidUrl(ValueError):
    """A URL could not be parsed, or its scheme is not ``http``/``https``."""


class ParseMethodError(ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(f"invalid method name: {name!r}")
        self.name = name


class MethodConvertError(ValueError):
    def __init__(self, method: typing.Any) -> None:
        super().__init__(f"method {method} is not supported by ghrest")
        self.method = method


class ParserStateError(RuntimeError):
    """A response parser was driven out of order."""


class PageDecodeError(ValueError):
    """A page body matched neither of the supported page shapes."""


class ClientError(Exception):
    """
    Base class for everything that can go wrong while performing a request.
    """

    reason = "request failed"

    def __init__(
        self,
        url: HttpUrl,
        method: Method,
        source: BaseException | None = None,
    ) -> None:
        super().__init__(f"{method} request to {url} failed: {self.reason}")
        self.url = url
        self.method = method
        self.source = source

    def pretty_text(self) -> str | None:
        """
        Return a human-readable rendition of the server's error body, if the
        error carries one.
        """
        return None


class PrepareRequestError(ClientError):
    """The request body could not be materialized before sending."""

    reason = "failed to prepare request"


class ReadRequestBodyError(ClientError):
    """Reading the outgoing request body failed while it was being sent."""

    reason = "failed to read request body"


class SendError(ClientError):
    """The backend failed to perform the HTTP exchange."""

    reason = "failed to send request"


class StatusError(ClientError):
    """The server replied with a 4xx or 5xx status."""

    def __init__(self, url: HttpUrl, method: Method, response: ErrorResponse) -> None:
        self.response = response
        super().__init__(url, method)

    @property
    def reason(self) -> str:  # type: ignore[override]
        return f"server responded with status {self.response.status}"

    @property
    def status(self) -> int:
        return self.response.status

    def pretty_text(self) -> str | None:
        return self.response.pretty_text()


class ParseResponseError(ClientError):
    """The response arrived but could not be turned into the expected value."""

    reason = "failed to parse response"


class ResponseReadError(ParseResponseError):
    reason = "error reading response body"


class ResponseDecodeError(ParseResponseError):
    reason = "error parsing response body"
