from __future__ import annotations

import logging
import typing

from .._urls import Endpoint
from ._models import PageResponse, PaginationInfo, PaginationState
from ._request import PageRequest, PaginationRequest

logger = logging.getLogger("ghrest.pagination")

T = typing.TypeVar("T")


class PaginationSession(typing.Generic[T]):
    """
    Bookkeeping shared by ``PaginationIter`` and ``PaginationStream``: the
    state, the buffered items of the current page, the endpoint of the next
    page, and the info of the last page fetched.
    """

    def __init__(self, request: PaginationRequest[T]) -> None:
        self._request = request
        self._next: Endpoint | None = Endpoint.coerce(request.endpoint())
        self._items: typing.Iterator[T] = iter(())
        self._info: PaginationInfo | None = None
        self._state = PaginationState.NOT_STARTED
        self._pages_fetched = 0

    @property
    def state(self) -> PaginationState:
        return self._state

    @property
    def info(self) -> PaginationInfo | None:
        """
        The ``PaginationInfo`` of the most recently fetched page, or ``None``
        before the first page and once the session has ended.
        """
        return self._info

    @property
    def pages_fetched(self) -> int:
        return self._pages_fetched

    def _page_request(self, endpoint: Endpoint) -> PageRequest[T]:
        page_request: PageRequest[T] = PageRequest(
            endpoint,
            headers=self._request.headers(),
            timeout=self._request.timeout(),
            parse_item=self._request.parse_item,
        )
        if self._state is PaginationState.NOT_STARTED:
            page_request = page_request.with_params(self._request.params())
        return page_request

    def _on_page(self, page: PageResponse[T]) -> None:
        self._pages_fetched += 1
        logger.debug(
            "Fetched page %d (page=%s, last=%s) with %d items from %r",
            self._pages_fetched,
            page.info.current_page,
            page.info.last_page,
            len(page.items),
            self._next,
        )
        self._state = PaginationState.PAGING
        self._items = iter(page.items)
        self._info = page.info
        self._next = None if page.next_url is None else Endpoint.from_url(page.next_url)

    def _finish(self) -> None:
        self._state = PaginationState.ENDED
        self._next = None
        self._items = iter(())
        self._info = None

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} state={self._state.value} "
            f"pages_fetched={self._pages_fetched}>"
        )
