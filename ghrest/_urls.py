from __future__ import annotations

import typing
from urllib.parse import parse_qsl, quote, quote_plus

import httpx

from ._exceptions import InvalidUrl

__all__ = ["Endpoint", "HttpUrl", "get_page_number"]

_MAX_PAGE = 2**64

# RFC 3986 "pchar" minus the unreserved set, which ``quote`` always keeps.
# "/" is left out so that a segment cannot introduce a path boundary.
_SEGMENT_SAFE = "!$&'()*+,;=:@"


def encode_segment(segment: str) -> str:
    """Percent-encode ``segment`` so that it stays a single path component."""
    if segment in (".", ".."):
        return "%2E" * len(segment)
    return quote(segment, safe=_SEGMENT_SAFE)


def form_encode(string: str) -> str:
    """Encode one key or value of an ``application/x-www-form-urlencoded`` pair."""
    return quote_plus(string, safe="*")


class HttpUrl:
    """
    An absolute URL whose scheme is ``http`` or ``https``.

    Parsing and normalization are done by ``httpx.URL``.  Instances are
    immutable.  The path manipulation helpers return a new ``HttpUrl``:

    >>> url = HttpUrl("https://api.github.com")
    >>> str(url.extend(["repos", "octocat", "hello/world"]))
    'https://api.github.com/repos/octocat/hello%2Fworld'
    >>> str(url.push("search").append_query_param("q", "a b"))
    'https://api.github.com/search?q=a+b'
    """

    __slots__ = ("_url",)

    def __init__(self, url: str | HttpUrl) -> None:
        if isinstance(url, HttpUrl):
            self._url: httpx.URL = url._url
            return
        if not isinstance(url, str):
            raise TypeError(
                f"Invalid type for url.  Expected str or HttpUrl, got {type(url)}: {url!r}"
            )
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as exc:
            raise InvalidUrl(f"{exc}: {url!r}") from exc
        self._url = _validate(parsed, url)

    @classmethod
    def parse(cls, url: str) -> HttpUrl:
        return cls(url)

    @classmethod
    def coerce(cls, url: str | HttpUrl) -> HttpUrl:
        if isinstance(url, HttpUrl):
            return url
        return cls(url)

    @classmethod
    def _from_httpx(cls, url: httpx.URL) -> HttpUrl:
        obj = cls.__new__(cls)
        obj._url = url
        return obj

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @property
    def scheme(self) -> str:
        return self._url.scheme

    @property
    def host(self) -> str:
        """The host, lower-cased and IDNA-encoded."""
        return self._url.raw_host.decode("ascii")

    @property
    def port(self) -> int | None:
        return self._url.port

    @property
    def path(self) -> str:
        """The percent-encoded path, always starting with ``/``."""
        return _encoded_path(self._url)

    @property
    def query(self) -> str | None:
        """The percent-encoded query string without the leading ``?``."""
        return self._url.query.decode("ascii") or None

    @property
    def fragment(self) -> str | None:
        return self._url.fragment or None

    @property
    def path_segments(self) -> tuple[str, ...]:
        """The percent-encoded path segments."""
        return tuple(self.path[1:].split("/"))

    def query_pairs(self) -> list[tuple[str, str]]:
        """Decode the query string into ``(key, value)`` pairs, in order."""
        query = self.query
        if not query:
            return []
        return parse_qsl(query, keep_blank_values=True)

    # ------------------------------------------------------------------
    # Manipulation
    # ------------------------------------------------------------------

    def push(self, segment: str) -> HttpUrl:
        """
        Append a single path segment, treating the current path as a
        directory.  Characters that would start a new segment, a query or a
        fragment are percent-encoded.
        """
        return self.extend([segment])

    def extend(self, segments: typing.Iterable[str]) -> HttpUrl:
        """
        Append path segments, treating the current path as a directory.

        ``.../base`` and ``.../base/`` produce the same result.
        """
        parts = self.path_segments[:-1] if self.path.endswith("/") else self.path_segments
        new_parts = list(parts)
        new_parts.extend(encode_segment(str(s)) for s in segments)
        if not new_parts:
            # Nothing pushed onto a root path keeps it a root path.
            return self._with_path("/")
        return self._with_path("/" + "/".join(new_parts))

    def ensure_dirpath(self) -> HttpUrl:
        """Make sure the path ends with ``/``."""
        path = self.path
        if path.endswith("/"):
            return self
        return self._with_path(path + "/")

    def append_query_param(self, key: str, value: str) -> HttpUrl:
        """
        Append ``key=value`` to the query string.  Existing parameters with
        the same key are kept.
        """
        pair = f"{form_encode(key)}={form_encode(value)}"
        query = self.query
        query = f"{query}&{pair}" if query else pair
        return HttpUrl._from_httpx(self._url.copy_with(query=query.encode("ascii")))

    def join_endpoint(self, endpoint: Endpoint | HttpUrl | str | typing.Iterable[str]) -> HttpUrl:
        """
        Resolve an endpoint against this URL.  A URL endpoint replaces this
        URL entirely; a path endpoint extends it.
        """
        endpoint = Endpoint.coerce(endpoint)
        if endpoint.url is not None:
            return endpoint.url
        return self.extend(endpoint.segments or ())

    def _with_path(self, path: str) -> HttpUrl:
        return HttpUrl._from_httpx(self._url.copy_with(path=path))

    # ------------------------------------------------------------------
    # Dunder methods
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return str(self._url)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str(self)!r})"

    def __eq__(self, other: typing.Any) -> bool:
        if isinstance(other, HttpUrl):
            return str(self) == str(other)
        if isinstance(other, str):
            return str(self) == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))


def _encoded_path(url: httpx.URL) -> str:
    return url.raw_path.decode("ascii").partition("?")[0]


def _validate(url: httpx.URL, original: str) -> httpx.URL:
    if url.scheme not in ("http", "https"):
        raise InvalidUrl(f"URL scheme must be 'http' or 'https': {original!r}")
    if not url.raw_host:
        raise InvalidUrl(f"URL has no host: {original!r}")
    # An empty path is spelled "/".
    return url.copy_with(path=_encoded_path(url))


class Endpoint:
    """
    The target of a request: either a complete ``HttpUrl``, or a sequence of
    raw (not yet percent-encoded) path segments that the client appends to
    its base URL.
    """

    __slots__ = ("_url", "_segments")

    def __init__(
        self,
        url: HttpUrl | None = None,
        segments: typing.Iterable[str] | None = None,
    ) -> None:
        if (url is None) == (segments is None):
            raise TypeError("Endpoint takes exactly one of 'url' or 'segments'")
        self._url = url
        self._segments = None if segments is None else tuple(str(s) for s in segments)

    @classmethod
    def from_url(cls, url: HttpUrl | str) -> Endpoint:
        return cls(url=HttpUrl.coerce(url))

    @classmethod
    def from_path(cls, *segments: str) -> Endpoint:
        return cls(segments=segments)

    @classmethod
    def coerce(cls, value: Endpoint | HttpUrl | str | typing.Iterable[str]) -> Endpoint:
        """
        Accepts an ``Endpoint``, an ``HttpUrl``, an absolute URL string, or an
        iterable of path segments.
        """
        if isinstance(value, Endpoint):
            return value
        if isinstance(value, (HttpUrl, str)):
            return cls.from_url(value)
        return cls(segments=value)

    @property
    def url(self) -> HttpUrl | None:
        return self._url

    @property
    def segments(self) -> tuple[str, ...] | None:
        return self._segments

    @property
    def is_url(self) -> bool:
        return self._url is not None

    def __eq__(self, other: typing.Any) -> bool:
        if not isinstance(other, Endpoint):
            return NotImplemented
        return self._url == other._url and self._segments == other._segments

    def __hash__(self) -> int:
        return hash((self._url, self._segments))

    def __repr__(self) -> str:
        if self._url is not None:
            return f"Endpoint.from_url({str(self._url)!r})"
        args = ", ".join(repr(s) for s in self._segments or ())
        return f"Endpoint.from_path({args})"


def get_page_number(url: HttpUrl) -> int | None:
    """
    Return the value of the last ``page`` query parameter of ``url`` as an
    integer, or ``None`` if there is no such parameter or its last value is
    not a non-negative integer.
    """
    values = [value for key, value in url.query_pairs() if key == "page"]
    if not values:
        return None
    last = values[-1]
    if not (last.isascii() and last.isdigit()):
        return None
    number = int(last)
    return number if number < _MAX_PAGE else None
