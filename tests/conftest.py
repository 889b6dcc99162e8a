from __future__ import annotations

import json
import os
import threading
import time
import typing
from urllib.parse import parse_qs

import pytest
from uvicorn.config import Config
from uvicorn.server import Server

import ghrest


@pytest.fixture
def anyio_backend():
    return "asyncio"


ENVIRONMENT_VARIABLES = {
    "GH_TOKEN",
    "GITHUB_TOKEN",
    "HTTP_PROXY",
    "HTTPS_PROXY",
    "ALL_PROXY",
    "NO_PROXY",
}


@pytest.fixture(scope="function", autouse=True)
def clean_environ():
    """Keeps os.environ clean for every test without having to mock os.environ"""
    original_environ = os.environ.copy()
    os.environ.clear()
    os.environ.update(
        {
            k: v
            for k, v in original_environ.items()
            if k not in ENVIRONMENT_VARIABLES and k.upper() not in ENVIRONMENT_VARIABLES
        }
    )
    yield
    os.environ.clear()
    os.environ.update(original_environ)


# ---------------------------------------------------------------------------
# Scripted in-memory backends
# ---------------------------------------------------------------------------


class FakeResponse:
    def __init__(
        self,
        url: ghrest.HttpUrl,
        status: int = 200,
        headers: typing.Mapping[str, str] | None = None,
        chunks: typing.Sequence[bytes] = (),
    ) -> None:
        self.url = url
        self.status = status
        self.headers = ghrest.Headers(headers)
        self.chunks = list(chunks)

    def body_stream(self) -> typing.Iterator[bytes]:
        for chunk in self.chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk


class AsyncFakeResponse(FakeResponse):
    async def body_stream(self) -> typing.AsyncIterator[bytes]:  # type: ignore[override]
        for chunk in self.chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk


class Reply(typing.NamedTuple):
    """One scripted backend reply.  ``url`` defaults to the request URL."""

    status: int = 200
    headers: typing.Mapping[str, str] = {}
    body: bytes | typing.Any = b""
    url: str | None = None
    chunks: typing.Sequence[typing.Any] | None = None

    @classmethod
    def json(cls, data: typing.Any, status: int = 200, **kwargs: typing.Any) -> Reply:
        headers = {"Content-Type": "application/json", **kwargs.pop("headers", {})}
        return cls(status=status, headers=headers, body=json.dumps(data).encode(), **kwargs)


class Sent(typing.NamedTuple):
    parts: ghrest.RequestParts
    body: bytes


class FakeBackend(ghrest.Backend[ghrest.RequestParts]):
    """
    Replies to each request with the next scripted ``Reply``, or raises it if
    it is an exception.  Requests are recorded in ``sent``.
    """

    response_class = FakeResponse

    def __init__(self, *replies: Reply | Exception) -> None:
        self.replies = list(replies)
        self.sent: list[Sent] = []
        self.closed = False

    def prepare_request(self, parts: ghrest.RequestParts) -> ghrest.RequestParts:
        return parts

    def _reply(self, parts: ghrest.RequestParts, body: bytes) -> FakeResponse:
        self.sent.append(Sent(parts, body))
        if not self.replies:
            raise AssertionError(f"unexpected request: {parts.method} {parts.url}")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        url = parts.url if reply.url is None else ghrest.HttpUrl(reply.url)
        chunks = reply.chunks if reply.chunks is not None else [reply.body]
        return self.response_class(url, reply.status, reply.headers, chunks)

    def send(self, request: ghrest.RequestParts, body: typing.Iterator[bytes]) -> FakeResponse:
        return self._reply(request, b"".join(body))

    def close(self) -> None:
        self.closed = True


class AsyncFakeBackend(ghrest.AsyncBackend[ghrest.RequestParts]):
    def __init__(self, *replies: Reply | Exception) -> None:
        self._sync = FakeBackend(*replies)
        self._sync.response_class = AsyncFakeResponse
        self.closed = False

    @property
    def sent(self) -> list[Sent]:
        return self._sync.sent

    def prepare_request(self, parts: ghrest.RequestParts) -> ghrest.RequestParts:
        return parts

    async def send(
        self, request: ghrest.RequestParts, body: typing.AsyncIterator[bytes]
    ) -> FakeResponse:
        data = b"".join([chunk async for chunk in body])
        return self._sync._reply(request, data)

    async def aclose(self) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Live server
# ---------------------------------------------------------------------------

Message = typing.Dict[str, typing.Any]
Receive = typing.Callable[[], typing.Awaitable[Message]]
Send = typing.Callable[
    [typing.Dict[str, typing.Any]], typing.Coroutine[None, None, None]
]
Scope = typing.Dict[str, typing.Any]

OCTOCAT_REPOS = [
    {
        "full_name": "octocat/hello-world",
        "html_url": "https://github.com/octocat/hello-world",
        "description": "My first repository",
        "topics": ["demo", "tutorial"],
        "stargazers_count": 42,
        "forks_count": 7,
        "homepage": "",
        "language": None,
    },
    {
        "full_name": "octocat/spoon-knife",
        "html_url": "https://github.com/octocat/spoon-knife",
        "description": None,
        "topics": [],
        "stargazers_count": 12,
        "forks_count": 100,
        "homepage": "https://example.com",
        "language": "HTML",
    },
    {
        "full_name": "octocat/linguist",
        "html_url": "https://github.com/octocat/linguist",
        "description": "Language savant",
        "topics": ["languages"],
        "stargazers_count": 3,
        "forks_count": 1,
        "homepage": None,
        "language": "Ruby",
    },
]


async def send_json(
    send: Send,
    data: typing.Any,
    status: int = 200,
    headers: typing.Sequence[typing.Tuple[bytes, bytes]] = (),
) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": [[b"content-type", b"application/json"], *map(list, headers)],
        }
    )
    await send({"type": "http.response.body", "body": json.dumps(data).encode()})


def base_url(scope: Scope) -> str:
    host, port = scope["server"]
    return f"http://{host}:{port}"


async def app(scope: Scope, receive: Receive, send: Send) -> None:
    assert scope["type"] == "http"
    path = scope["path"]
    if path.startswith("/repos/"):
        await show_repo(scope, receive, send)
    elif path.startswith("/users/") and path.endswith("/repos"):
        await list_repos(scope, receive, send)
    elif path.startswith("/echo_headers"):
        await echo_headers(scope, receive, send)
    elif path.startswith("/echo_body"):
        await echo_body(scope, receive, send)
    elif path.startswith("/redirect"):
        await redirect(scope, receive, send)
    elif path.startswith("/status"):
        await status_code(scope, receive, send)
    else:
        await send_json(send, {"message": "Not Found"}, status=404)


async def show_repo(scope: Scope, receive: Receive, send: Send) -> None:
    _, _, owner, name = scope["path"].split("/", 3)
    for repo in OCTOCAT_REPOS:
        if repo["full_name"] == f"{owner}/{name}":
            await send_json(send, repo)
            return
    await send_json(
        send,
        {"message": "Not Found", "documentation_url": "https://docs.github.com/rest"},
        status=404,
    )


async def list_repos(scope: Scope, receive: Receive, send: Send) -> None:
    owner = scope["path"].split("/")[2]
    if owner != "octocat":
        await send_json(send, {"message": "Not Found"}, status=404)
        return
    query = parse_qs(scope["query_string"].decode())
    page = int(query.get("page", ["1"])[-1])
    url = f"{base_url(scope)}{scope['path']}"
    if page == 1:
        link = f'<{url}?page=2>; rel="next", <{url}?page=2>; rel="last"'
        await send_json(send, OCTOCAT_REPOS[:2], headers=[(b"link", link.encode())])
    else:
        link = f'<{url}?page=1>; rel="prev", <{url}?page=1>; rel="first"'
        await send_json(send, OCTOCAT_REPOS[2:], headers=[(b"link", link.encode())])


async def echo_headers(scope: Scope, receive: Receive, send: Send) -> None:
    body = {name.decode().lower(): value.decode() for name, value in scope.get("headers", [])}
    await send_json(send, body)


async def echo_body(scope: Scope, receive: Receive, send: Send) -> None:
    body = b""
    more_body = True

    while more_body:
        message = await receive()
        body += message.get("body", b"")
        more_body = message.get("more_body", False)

    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": [[b"content-type", b"application/octet-stream"]],
        }
    )
    await send({"type": "http.response.body", "body": body})


async def redirect(scope: Scope, receive: Receive, send: Send) -> None:
    location = f"{base_url(scope)}/users/octocat/repos?page=2"
    await send(
        {
            "type": "http.response.start",
            "status": 301,
            "headers": [[b"location", location.encode()]],
        }
    )
    await send({"type": "http.response.body"})


async def status_code(scope: Scope, receive: Receive, send: Send) -> None:
    status_code = int(scope["path"].replace("/status/", ""))
    await send(
        {
            "type": "http.response.start",
            "status": status_code,
            "headers": [[b"content-type", b"text/plain"]],
        }
    )
    await send({"type": "http.response.body", "body": b"Hello, world!"})


class TestServer(Server):
    __test__ = False

    def install_signal_handlers(self) -> None:
        # Disable the default installation of handlers for signals such as
        # SIGTERM, because it can only be done in the main thread.
        pass

    @property
    def url(self) -> str:
        host, port = self.servers[0].sockets[0].getsockname()[:2]
        return f"http://{host}:{port}"


def serve_in_thread(server: TestServer) -> typing.Iterator[TestServer]:
    thread = threading.Thread(target=server.run)
    thread.start()
    try:
        while not server.started:
            time.sleep(1e-3)
        yield server
    finally:
        server.should_exit = True
        thread.join()


@pytest.fixture(scope="session")
def server() -> typing.Iterator[TestServer]:
    config = Config(app=app, lifespan="off", loop="asyncio", host="127.0.0.1", port=0)
    server = TestServer(config=config)
    yield from serve_in_thread(server)
