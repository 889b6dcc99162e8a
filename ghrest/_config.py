from __future__ import annotations

import dataclasses
import logging
import re
import typing

from ._consts import (
    API_VERSION_HEADER,
    DEFAULT_ACCEPT,
    DEFAULT_API_URL,
    DEFAULT_API_VERSION,
    DEFAULT_USER_AGENT,
)
from ._headers import Headers, is_valid_header_value
from ._transports import AsyncHttpxBackend, HttpxBackend
from ._urls import HttpUrl

if typing.TYPE_CHECKING:
    from ._client import AsyncClient, Client
    from ._transports.base import AsyncBackend, Backend

__all__ = ["ClientConfig"]

logger = logging.getLogger("ghrest.config")

_HEADER_NAME = re.compile(r"[!#$%&'*+.^_`|~0-9A-Za-z-]+")


def _default_headers() -> Headers:
    return Headers(
        {
            "Accept": DEFAULT_ACCEPT,
            "User-Agent": DEFAULT_USER_AGENT,
            API_VERSION_HEADER: DEFAULT_API_VERSION,
        }
    )


@dataclasses.dataclass(frozen=True)
class ClientConfig:
    """
    Immutable client settings.  Every ``with_*()`` method returns a new
    config, and ``with_backend()``/``with_httpx()`` (or their async
    counterparts) combine it with a transport into a client::

        client = ClientConfig().with_auth_token(token).with_httpx()
    """

    base_url: HttpUrl = dataclasses.field(default_factory=lambda: HttpUrl(DEFAULT_API_URL))
    headers: Headers = dataclasses.field(default_factory=_default_headers)
    timeout: float | None = None

    def with_base_url(self, url: HttpUrl | str) -> ClientConfig:
        return dataclasses.replace(self, base_url=HttpUrl.coerce(url))

    def with_auth_token(self, token: str) -> ClientConfig:
        """Send ``Authorization: Bearer <token>`` with every request."""
        return self._set_header("Authorization", f"Bearer {token}", sensitive=True)

    def with_user_agent(self, value: str) -> ClientConfig:
        return self.with_header("User-Agent", value)

    def with_accept(self, value: str) -> ClientConfig:
        return self.with_header("Accept", value)

    def with_api_version(self, value: str) -> ClientConfig:
        return self.with_header(API_VERSION_HEADER, value)

    def with_header(self, name: str, value: str) -> ClientConfig:
        """
        Set a default header.  If ``name`` or ``value`` cannot be sent in a
        request, a warning is logged and the config is returned unchanged.
        """
        return self._set_header(name, value, sensitive=False)

    def with_timeout(self, seconds: float | None) -> ClientConfig:
        return dataclasses.replace(self, timeout=seconds)

    def _set_header(self, name: str, value: str, sensitive: bool) -> ClientConfig:
        if not _HEADER_NAME.fullmatch(name):
            logger.warning("Ignoring header with invalid name %r", name)
            return self
        if not is_valid_header_value(value):
            if sensitive:
                logger.warning("Ignoring invalid value for header %r", name)
            else:
                logger.warning("Ignoring invalid value for header %r: %r", name, value)
            return self
        headers = self.headers.copy()
        headers[name] = value
        return dataclasses.replace(self, headers=headers)

    # ------------------------------------------------------------------
    # Client construction
    # ------------------------------------------------------------------

    def with_backend(self, backend: Backend[typing.Any]) -> Client:
        from ._client import Client

        return Client(backend, self)

    def with_async_backend(self, backend: AsyncBackend[typing.Any]) -> AsyncClient:
        from ._client import AsyncClient

        return AsyncClient(backend, self)

    def with_httpx(self, **client_kwargs: typing.Any) -> Client:
        """Build a ``Client`` on an ``HttpxBackend`` created with ``client_kwargs``."""
        return self.with_backend(HttpxBackend(**client_kwargs))

    def with_async_httpx(self, **client_kwargs: typing.Any) -> AsyncClient:
        return self.with_async_backend(AsyncHttpxBackend(**client_kwargs))
