from __future__ import annotations

import typing

from ._models import PaginationState
from ._request import PaginationRequest
from ._session import PaginationSession

if typing.TYPE_CHECKING:
    from .._client import Client

__all__ = ["PaginationIter"]

T = typing.TypeVar("T")

_EXHAUSTED = object()


class PaginationIter(PaginationSession[T]):
    """
    Iterate over every item of a paginated collection, fetching one page at
    a time from a ``Client``::

        for repo in client.paginate(request):
            ...

    A failed page fetch is raised from the ``next()`` call that triggered
    it; after that, and after the last page, the iterator is exhausted and
    makes no further requests.
    """

    def __init__(self, client: Client, request: PaginationRequest[T]) -> None:
        super().__init__(request)
        self._client = client

    def __iter__(self) -> PaginationIter[T]:
        return self

    def __next__(self) -> T:
        while True:
            if self._state is PaginationState.ENDED:
                raise StopIteration
            item = next(self._items, _EXHAUSTED)
            if item is not _EXHAUSTED:
                return typing.cast(T, item)
            if self._next is None:
                self._finish()
                raise StopIteration
            page_request = self._page_request(self._next)
            try:
                page = self._client.request(page_request)
            except Exception:
                self._finish()
                raise
            self._on_page(page)

    def collect(self) -> list[T]:
        """Fetch every remaining item and return them as a list."""
        return list(self)
