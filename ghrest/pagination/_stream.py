from __future__ import annotations

import typing

from ._models import PaginationState
from ._request import PaginationRequest
from ._session import PaginationSession

if typing.TYPE_CHECKING:
    from .._client import AsyncClient

__all__ = ["PaginationStream"]

T = typing.TypeVar("T")

_EXHAUSTED = object()


class PaginationStream(PaginationSession[T]):
    """
    Asynchronously iterate over every item of a paginated collection::

        async for repo in client.paginate(request):
            ...

    At most one page request is in flight at a time; calling ``__anext__()``
    while another call is still awaiting a page raises ``RuntimeError``.
    If a page fetch is cancelled, the session is left as it was and the
    next call requests the same page again.
    """

    def __init__(self, client: AsyncClient, request: PaginationRequest[T]) -> None:
        super().__init__(request)
        self._client = client
        self._in_flight = False

    def __aiter__(self) -> PaginationStream[T]:
        return self

    async def __anext__(self) -> T:
        if self._in_flight:
            raise RuntimeError("PaginationStream is already awaiting the next page")
        self._in_flight = True
        try:
            while True:
                if self._state is PaginationState.ENDED:
                    raise StopAsyncIteration
                item = next(self._items, _EXHAUSTED)
                if item is not _EXHAUSTED:
                    return typing.cast(T, item)
                if self._next is None:
                    self._finish()
                    raise StopAsyncIteration
                page_request = self._page_request(self._next)
                try:
                    page = await self._client.request(page_request)
                except Exception:
                    self._finish()
                    raise
                self._on_page(page)
        finally:
            self._in_flight = False

    async def collect(self) -> list[T]:
        """Fetch every remaining item and return them as a list."""
        return [item async for item in self]
