"""
Header collection and the header helpers used by the client and pagination
machinery: JSON content-type detection, ``Content-Length`` access and
``Link`` relation parsing.
"""

from __future__ import annotations

import dataclasses
import logging
import re
import typing

from ._exceptions import InvalidUrl
from ._urls import HttpUrl, get_page_number

__all__ = [
    "Headers",
    "PaginationLinks",
    "content_length",
    "content_type_is_json",
    "is_valid_header_value",
    "pagination_links",
    "parse_link_header",
    "set_content_length",
]

logger = logging.getLogger("ghrest.headers")

HeaderTypes = typing.Union[
    "Headers",
    typing.Mapping[str, str],
    typing.Iterable[typing.Tuple[str, str]],
]


class Headers(typing.MutableMapping[str, str]):
    """
    An ordered, case-insensitive mapping of header names to values.

    Names keep the case they were first set with.  Setting an existing name
    replaces its value in place; ``add()`` combines repeated fields into one
    comma-separated value.
    """

    def __init__(self, headers: HeaderTypes | None = None) -> None:
        self._store: dict[str, tuple[str, str]] = {}
        if headers is None:
            return
        if isinstance(headers, Headers):
            self._store = dict(headers._store)
            return
        items = headers.items() if isinstance(headers, typing.Mapping) else headers
        for name, value in items:
            self.add(name, value)

    def add(self, name: str, value: str) -> None:
        key = name.lower()
        if key in self._store:
            original, existing = self._store[key]
            self._store[key] = (original, f"{existing}, {value}")
        else:
            self._store[key] = (name, value)

    def copy(self) -> Headers:
        return Headers(self)

    def raw(self) -> list[tuple[str, str]]:
        """The headers as ``(name, value)`` pairs, in insertion order."""
        return list(self._store.values())

    def __getitem__(self, name: str) -> str:
        return self._store[name.lower()][1]

    def __setitem__(self, name: str, value: str) -> None:
        key = name.lower()
        original = self._store[key][0] if key in self._store else name
        self._store[key] = (original, value)

    def __delitem__(self, name: str) -> None:
        del self._store[name.lower()]

    def __contains__(self, name: typing.Any) -> bool:
        return isinstance(name, str) and name.lower() in self._store

    def __iter__(self) -> typing.Iterator[str]:
        return (name for name, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __eq__(self, other: typing.Any) -> bool:
        if not isinstance(other, (Headers, typing.Mapping)):
            return NotImplemented
        other_headers = other if isinstance(other, Headers) else Headers(other)
        return {k: v for k, (_, v) in self._store.items()} == {
            k: v for k, (_, v) in other_headers._store.items()
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.raw()!r})"


def is_valid_header_value(value: str) -> bool:
    """
    True if ``value`` can be sent as a header value: visible ASCII or
    Latin-1, spaces and tabs, and no other control characters.
    """
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        return False
    return not any((ord(c) < 0x20 and c != "\t") or ord(c) == 0x7F for c in value)


# ----------------------------------------------------------------------
# Content negotiation
# ----------------------------------------------------------------------


def content_type_is_json(headers: typing.Mapping[str, str]) -> bool:
    """
    True if the ``Content-Type`` is ``application/json`` or any
    ``application/*+json`` type, ignoring parameters.
    """
    content_type = headers.get("Content-Type")
    if not content_type:
        return False
    essence = content_type.split(";", 1)[0].strip().lower()
    main_type, sep, subtype = essence.partition("/")
    if not sep or main_type != "application":
        return False
    return subtype == "json" or subtype.endswith("+json")


def content_length(headers: typing.Mapping[str, str]) -> int | None:
    value = headers.get("Content-Length")
    if value is None:
        return None
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


def set_content_length(headers: typing.MutableMapping[str, str], length: int) -> None:
    headers["Content-Length"] = str(length)


# ----------------------------------------------------------------------
# Link relations
# ----------------------------------------------------------------------

_TOKEN = r"[!#$%&'*+.^_`|~0-9A-Za-z-]+"
_LINK_PARAM = rf'\s*;\s*({_TOKEN})\s*(?:=\s*("(?:[^"\\]|\\.)*"|[^\s;,"]*))?'
_LINK_PARAM_RE = re.compile(_LINK_PARAM)
_LINK_VALUE_RE = re.compile(rf"\s*<([^>]*)>((?:{_LINK_PARAM})*)\s*(,|$)")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return re.sub(r"\\(.)", r"\1", value[1:-1])
    return value


def parse_link_header(value: str) -> dict[str, str]:
    """
    Parse a ``Link`` header value into a mapping of relation name to target
    URI.  Only the first link for each relation is kept.

    Raises ``ValueError`` if the header is malformed.

    >>> parse_link_header('<https://x.test/?page=2>; rel="next", <https://x.test/?page=5>; rel=last')
    {'next': 'https://x.test/?page=2', 'last': 'https://x.test/?page=5'}
    """
    links: dict[str, str] = {}
    value = value.strip()
    pos = 0
    while pos < len(value):
        match = _LINK_VALUE_RE.match(value, pos)
        if match is None:
            raise ValueError(f"Malformed Link header at position {pos}: {value!r}")
        uri, params = match.group(1), match.group(2)
        for param in _LINK_PARAM_RE.finditer(params):
            name, param_value = param.group(1).lower(), param.group(2)
            if name != "rel" or not param_value:
                continue
            for rel in _unquote(param_value).split():
                links.setdefault(rel.lower(), uri)
        pos = match.end()
    return links


@dataclasses.dataclass(frozen=True)
class PaginationLinks:
    """The ``first``, ``prev``, ``next`` and ``last`` links of a response."""

    first: HttpUrl | None = None
    prev: HttpUrl | None = None
    next: HttpUrl | None = None
    last: HttpUrl | None = None

    def first_page_number(self) -> int | None:
        return None if self.first is None else get_page_number(self.first)

    def prev_page_number(self) -> int | None:
        return None if self.prev is None else get_page_number(self.prev)

    def next_page_number(self) -> int | None:
        return None if self.next is None else get_page_number(self.next)

    def last_page_number(self) -> int | None:
        return None if self.last is None else get_page_number(self.last)


def _link_url(links: dict[str, str], rel: str) -> HttpUrl | None:
    uri = links.get(rel)
    if uri is None:
        return None
    try:
        return HttpUrl(uri)
    except InvalidUrl:
        logger.debug("Ignoring %s link with unusable URL %r", rel, uri)
        return None


def pagination_links(headers: typing.Mapping[str, str]) -> PaginationLinks:
    """
    Extract the pagination links from the ``Link`` header.  A missing or
    malformed header yields a ``PaginationLinks`` with every link ``None``.
    """
    value = headers.get("Link")
    if value is None:
        return PaginationLinks()
    try:
        links = parse_link_header(value)
    except ValueError:
        logger.debug("Ignoring malformed Link header %r", value)
        return PaginationLinks()
    return PaginationLinks(
        first=_link_url(links, "first"),
        prev=_link_url(links, "prev"),
        next=_link_url(links, "next"),
        last=_link_url(links, "last"),
    )
