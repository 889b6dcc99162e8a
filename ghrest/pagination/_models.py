from __future__ import annotations

import dataclasses
import enum
import typing

from .._exceptions import PageDecodeError
from .._urls import HttpUrl

__all__ = ["Page", "PageResponse", "PaginationInfo", "PaginationState"]

T = typing.TypeVar("T")

_MAX_COUNT = 2**64


class PaginationState(enum.Enum):
    NOT_STARTED = "not_started"
    PAGING = "paging"
    ENDED = "ended"


@dataclasses.dataclass(frozen=True)
class PaginationInfo:
    """
    What is known about the pagination of a collection after fetching one
    of its pages.

    ``current_page`` is the ``page`` query parameter of the page's URL, and
    ``last_page`` that of its ``Link: rel="last"`` URL.  ``total_count`` and
    ``incomplete_results`` come from the page body.  Every field is ``None``
    when its source does not provide it; in particular ``current_page`` is
    ``None`` for the first page of most endpoints, whose URL has no ``page``
    parameter.
    """

    current_page: int | None = None
    last_page: int | None = None
    total_count: int | None = None
    incomplete_results: bool | None = None


@dataclasses.dataclass(frozen=True)
class PageResponse(typing.Generic[T]):
    next_url: HttpUrl | None
    items: list[T]
    info: PaginationInfo


def _as_count(value: typing.Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if 0 <= value < _MAX_COUNT else None


@dataclasses.dataclass(frozen=True)
class Page(typing.Generic[T]):
    """
    A decoded page body.

    A page is either a JSON array of items, or a JSON object with exactly
    one array-valued field holding the items, alongside optional
    ``total_count`` and ``incomplete_results`` fields.  Other fields of the
    object are ignored.
    """

    items: list[T]
    total_count: int | None = None
    incomplete_results: bool | None = None

    @classmethod
    def from_json(
        cls,
        value: typing.Any,
        parse_item: typing.Callable[[typing.Any], T] | None = None,
    ) -> Page[T]:
        if isinstance(value, list):
            raw_items = value
            total_count = None
            incomplete_results = None
        elif isinstance(value, dict):
            lists = [field for field in value.values() if isinstance(field, list)]
            if len(lists) != 1:
                raise PageDecodeError(
                    f"expected exactly one array of items in map page response, got {len(lists)}"
                )
            raw_items = lists[0]
            total_count = _as_count(value.get("total_count"))
            incomplete = value.get("incomplete_results")
            incomplete_results = incomplete if isinstance(incomplete, bool) else None
        else:
            raise PageDecodeError(
                f"expected a JSON array or object as page body, got {type(value).__name__}"
            )
        if parse_item is None:
            items = typing.cast("list[T]", list(raw_items))
        else:
            items = [parse_item(item) for item in raw_items]
        return cls(items, total_count, incomplete_results)
