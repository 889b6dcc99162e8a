from __future__ import annotations

import json
import typing

from .._headers import pagination_links
from .._models import ResponseParts
from .._parsers import ResponseParser
from .._urls import HttpUrl, get_page_number
from ._models import Page, PageResponse, PaginationInfo

__all__ = ["PageParser"]

T = typing.TypeVar("T")


class PageParser(ResponseParser[PageResponse[T]]):
    """
    Decode one page of a paginated collection.

    The ``next`` link and the page numbers are taken from the response
    parts; the items and counts from the body.  ``parse_item`` is applied
    to every item.
    """

    def __init__(self, parse_item: typing.Callable[[typing.Any], T] | None = None) -> None:
        self._parse_item = parse_item
        self._chunks: list[bytes] = []
        self._next_url: HttpUrl | None = None
        self._current_page: int | None = None
        self._last_page: int | None = None

    def on_parts(self, parts: ResponseParts) -> None:
        links = pagination_links(parts.headers)
        self._next_url = links.next
        self._current_page = get_page_number(parts.url)
        self._last_page = links.last_page_number()

    def on_bytes(self, chunk: bytes) -> None:
        self._chunks.append(bytes(chunk))

    def on_end(self) -> PageResponse[T]:
        page = Page.from_json(json.loads(b"".join(self._chunks)), self._parse_item)
        info = PaginationInfo(
            current_page=self._current_page,
            last_page=self._last_page,
            total_count=page.total_count,
            incomplete_results=page.incomplete_results,
        )
        return PageResponse(next_url=self._next_url, items=page.items, info=info)
