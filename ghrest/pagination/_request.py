from __future__ import annotations

import abc
import typing

from .._headers import Headers
from .._method import Method
from .._request import EmptyBody, EndpointTypes, Request
from .._urls import Endpoint
from ._models import PageResponse
from ._parser import PageParser

__all__ = ["PageRequest", "PaginationRequest"]

T = typing.TypeVar("T")


class PaginationRequest(typing.Generic[T], metaclass=abc.ABCMeta):
    """
    Describes a paginated collection.

    ``params()`` are only sent with the request for the first page; later
    pages are fetched from the ``next`` link verbatim.  ``headers()`` and
    ``timeout()`` apply to every page request.
    """

    @abc.abstractmethod
    def endpoint(self) -> EndpointTypes:
        raise NotImplementedError()  # pragma: no cover

    def params(self) -> typing.Sequence[tuple[str, str]]:
        return []

    def headers(self) -> typing.Mapping[str, str]:
        return {}

    def timeout(self) -> float | None:
        return None

    def parse_item(self, raw: typing.Any) -> T:
        """Convert one decoded JSON item.  Returns it unchanged by default."""
        return typing.cast(T, raw)


class PageRequest(Request[PageResponse[T]]):
    """A GET request for a single page of a paginated collection."""

    def __init__(
        self,
        endpoint: EndpointTypes,
        params: typing.Sequence[tuple[str, str]] | None = None,
        headers: typing.Mapping[str, str] | None = None,
        timeout: float | None = None,
        parse_item: typing.Callable[[typing.Any], T] | None = None,
    ) -> None:
        self._endpoint = Endpoint.coerce(endpoint)
        self._params = list(params or [])
        self._headers = Headers(headers)
        self._timeout = timeout
        self._parse_item = parse_item

    def with_params(self, params: typing.Sequence[tuple[str, str]]) -> PageRequest[T]:
        return self._copy(params=params)

    def with_headers(self, headers: typing.Mapping[str, str]) -> PageRequest[T]:
        return self._copy(headers=headers)

    def with_timeout(self, timeout: float | None) -> PageRequest[T]:
        return self._copy(timeout=timeout)

    def with_page_number(self, page: int) -> PageRequest[T]:
        """Add a ``page`` query parameter to request a specific page."""
        return self._copy(params=[*self._params, ("page", str(page))])

    def _copy(self, **kwargs: typing.Any) -> PageRequest[T]:
        values: dict[str, typing.Any] = {
            "endpoint": self._endpoint,
            "params": self._params,
            "headers": self._headers,
            "timeout": self._timeout,
            "parse_item": self._parse_item,
        }
        values.update(kwargs)
        return PageRequest(**values)

    def endpoint(self) -> Endpoint:
        return self._endpoint

    def method(self) -> Method:
        return Method.GET

    def headers(self) -> Headers:
        return self._headers.copy()

    def params(self) -> list[tuple[str, str]]:
        return list(self._params)

    def timeout(self) -> float | None:
        return self._timeout

    def body(self) -> EmptyBody:
        return EmptyBody()

    def parser(self) -> PageParser[T]:
        return PageParser(self._parse_item)
