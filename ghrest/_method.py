from __future__ import annotations

import enum
import http
import typing

from ._exceptions import MethodConvertError, ParseMethodError


class Method(str, enum.Enum):
    """The HTTP methods supported by the GitHub REST API."""

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    def __str__(self) -> str:
        return self.value

    @property
    def is_mutating(self) -> bool:
        """True for POST, PUT, PATCH and DELETE."""
        return self in _MUTATING

    @classmethod
    def parse(cls, name: str) -> Method:
        """Parse a method from its name, case-insensitively."""
        try:
            return cls(name.upper())
        except ValueError:
            raise ParseMethodError(name) from None

    @classmethod
    def from_http(cls, method: http.HTTPMethod | typing.Any) -> Method:
        """
        Convert a generic method value (``http.HTTPMethod`` or anything whose
        string form is a method name) into a ``Method``.
        """
        name = method.value if isinstance(method, http.HTTPMethod) else str(method)
        try:
            return cls(name.upper())
        except ValueError:
            raise MethodConvertError(method) from None

    def to_http(self) -> http.HTTPMethod:
        return http.HTTPMethod(self.value)


_MUTATING = frozenset({Method.POST, Method.PUT, Method.PATCH, Method.DELETE})
