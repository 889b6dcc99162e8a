from ._client import AsyncClient, Client
from ._config import ClientConfig
from ._consts import (
    API_VERSION_HEADER,
    DEFAULT_ACCEPT,
    DEFAULT_API_URL,
    DEFAULT_API_VERSION,
    DEFAULT_USER_AGENT,
    READ_BLOCK_SIZE,
    __description__,
    __title__,
    __version__,
)
from ._error_response import ErrorBody, ErrorBodyKind, ErrorResponse, ErrorResponseParser
from ._exceptions import (
    ClientError,
    InvalidUrl,
    MethodConvertError,
    PageDecodeError,
    ParseMethodError,
    ParseResponseError,
    ParserStateError,
    PrepareRequestError,
    ReadRequestBodyError,
    ResponseDecodeError,
    ResponseReadError,
    SendError,
    StatusError,
)
from ._headers import (
    Headers,
    PaginationLinks,
    content_length,
    content_type_is_json,
    pagination_links,
    parse_link_header,
    set_content_length,
)
from ._method import Method
from ._models import PreparedRequest, RequestParts, Response, ResponseParts
from ._parsers import (
    BytesParser,
    IgnoreParser,
    JsonParser,
    LossyTextParser,
    ResponseParser,
    TextParser,
    WithPartsParser,
    WriterParser,
    aparse_response,
    parse_response,
)
from ._request import (
    AsyncRequestBody,
    BytesBody,
    EmptyBody,
    EndpointTypes,
    FileBody,
    FilePathBody,
    JsonBody,
    Request,
    RequestBody,
    TextBody,
)
from ._transports import (
    AsyncBackend,
    AsyncBackendResponse,
    AsyncHttpxBackend,
    Backend,
    BackendResponse,
    HttpxBackend,
)
from ._urls import Endpoint, HttpUrl, get_page_number
from . import pagination
from .pagination import (
    Page,
    PageParser,
    PageRequest,
    PageResponse,
    PaginationInfo,
    PaginationIter,
    PaginationRequest,
    PaginationState,
    PaginationStream,
)

try:
    from .cli import main
except ImportError:  # pragma: no cover

    def main() -> None:  # type: ignore[misc]
        import sys

        print(
            'The "ghrest" command requires the CLI extra. '
            'Install it with: pip install "ghrest[cli]"',
            file=sys.stderr,
        )
        sys.exit(1)


_EXCLUDED_FROM_ALL = {"cli", "main"}

_members = [
    member
    for member in list(vars().keys())
    if (
        not member.startswith("_")
        or member in ["__description__", "__title__", "__version__"]
    )
    and member not in _EXCLUDED_FROM_ALL
]

__all__ = sorted(_members, key=str.casefold)  # pyright: ignore[reportUnsupportedDunderAll]
