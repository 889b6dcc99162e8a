from ._iter import PaginationIter
from ._models import Page, PageResponse, PaginationInfo, PaginationState
from ._parser import PageParser
from ._request import PageRequest, PaginationRequest
from ._stream import PaginationStream

__all__ = [
    "Page",
    "PageParser",
    "PageRequest",
    "PageResponse",
    "PaginationInfo",
    "PaginationIter",
    "PaginationRequest",
    "PaginationState",
    "PaginationStream",
]
