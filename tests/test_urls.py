import httpx
import pytest

import ghrest


def test_parse() -> None:
    url = ghrest.HttpUrl.parse("HTTPS://API.GitHub.com:443/repos?per_page=100#top")
    assert url.scheme == "https"
    assert url.host == "api.github.com"
    assert url.port is None
    assert url.path == "/repos"
    assert url.query == "per_page=100"
    assert url.fragment == "top"
    assert str(url) == "https://api.github.com/repos?per_page=100#top"


def test_empty_path_is_root() -> None:
    url = ghrest.HttpUrl("https://api.github.com")
    assert url.path == "/"
    assert str(url) == "https://api.github.com/"


def test_non_default_port() -> None:
    url = ghrest.HttpUrl("http://127.0.0.1:8000/api")
    assert url.port == 8000
    assert str(url) == "http://127.0.0.1:8000/api"


def test_idna_host() -> None:
    url = ghrest.HttpUrl("https://münchen.de/")
    assert url.host == "xn--mnchen-3ya.de"


@pytest.mark.parametrize(
    "value",
    [
        "ftp://example.com/",
        "mailto:octocat@github.com",
        "/repos/octocat/hello-world",
        "https://",
        "https://exa mple.com:notaport/",
    ],
)
def test_invalid_urls(value: str) -> None:
    with pytest.raises(ghrest.InvalidUrl):
        ghrest.HttpUrl.parse(value)


def test_invalid_url_is_value_error() -> None:
    with pytest.raises(ValueError):
        ghrest.HttpUrl("file:///etc/passwd")


def test_parser_errors_are_wrapped() -> None:
    with pytest.raises(ghrest.InvalidUrl) as exc_info:
        ghrest.HttpUrl("https://api.github.com:http/")
    assert isinstance(exc_info.value.__cause__, httpx.InvalidURL)


def test_normalized_like_httpx() -> None:
    url = ghrest.HttpUrl("http://API.github.com:80/a/./b/../c d")
    assert str(url) == str(httpx.URL("http://api.github.com/a/c%20d"))
    assert url.path_segments == ("a", "c%20d")


def test_invalid_type() -> None:
    with pytest.raises(TypeError):
        ghrest.HttpUrl(42)  # type: ignore[arg-type]


def test_equality_and_hash() -> None:
    a = ghrest.HttpUrl("https://api.github.com/")
    b = ghrest.HttpUrl("https://api.github.com")
    assert a == b
    assert a == "https://api.github.com/"
    assert hash(a) == hash(b)
    assert repr(a) == "HttpUrl('https://api.github.com/')"


def test_coerce() -> None:
    url = ghrest.HttpUrl("https://api.github.com/")
    assert ghrest.HttpUrl.coerce(url) is url
    assert ghrest.HttpUrl.coerce("https://api.github.com/") == url


# ---------------------------------------------------------------------------
# Path manipulation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "segment,expected",
    [
        ("foo#bar", "https://api.github.com/base/foo%23bar"),
        ("foo%bar", "https://api.github.com/base/foo%25bar"),
        ("foo/bar", "https://api.github.com/base/foo%2Fbar"),
        ("foo?bar", "https://api.github.com/base/foo%3Fbar"),
    ],
)
def test_push_special_chars(segment: str, expected: str) -> None:
    base = ghrest.HttpUrl("https://api.github.com/base")
    assert str(base.push(segment)) == expected


def test_push_does_not_modify_original() -> None:
    base = ghrest.HttpUrl("https://api.github.com/base")
    base.push("foo")
    assert str(base) == "https://api.github.com/base"


@pytest.mark.parametrize(
    "segment,expected",
    [
        (".", "https://api.github.com/base/%2E"),
        ("..", "https://api.github.com/base/%2E%2E"),
        ("héllo", "https://api.github.com/base/h%C3%A9llo"),
        ("a b", "https://api.github.com/base/a%20b"),
        ("%2F", "https://api.github.com/base/%252F"),
    ],
)
def test_push_never_changes_structure(segment: str, expected: str) -> None:
    base = ghrest.HttpUrl("https://api.github.com/base")
    url = base.push(segment)
    assert str(url) == expected
    assert len(url.path_segments) == 2


@pytest.mark.parametrize("base", ["https://api.github.com", "https://api.github.com/"])
@pytest.mark.parametrize(
    "segments,expected",
    [
        (["foo"], "https://api.github.com/foo"),
        (["foo", "bar"], "https://api.github.com/foo/bar"),
        ([], "https://api.github.com/"),
    ],
)
def test_extend_nopath(base: str, segments: list[str], expected: str) -> None:
    assert str(ghrest.HttpUrl(base).extend(segments)) == expected


@pytest.mark.parametrize(
    "base", ["https://api.github.com/foo/bar", "https://api.github.com/foo/bar/"]
)
@pytest.mark.parametrize(
    "segments,expected",
    [
        (["gnusto"], "https://api.github.com/foo/bar/gnusto"),
        (["gnusto", "cleesh"], "https://api.github.com/foo/bar/gnusto/cleesh"),
        ([], "https://api.github.com/foo/bar"),
    ],
)
def test_extend_path(base: str, segments: list[str], expected: str) -> None:
    assert str(ghrest.HttpUrl(base).extend(segments)) == expected


def test_extend_keeps_query() -> None:
    url = ghrest.HttpUrl("https://api.github.com/search?q=x")
    assert str(url.extend(["repositories"])) == "https://api.github.com/search/repositories?q=x"


@pytest.mark.parametrize(
    "before,after",
    [
        ("https://api.github.com", "https://api.github.com/"),
        ("https://api.github.com/", "https://api.github.com/"),
        ("https://api.github.com/foo", "https://api.github.com/foo/"),
        ("https://api.github.com/foo/", "https://api.github.com/foo/"),
    ],
)
def test_ensure_dirpath(before: str, after: str) -> None:
    once = ghrest.HttpUrl(before).ensure_dirpath()
    assert str(once) == after
    assert once.ensure_dirpath() == once


# ---------------------------------------------------------------------------
# Query parameters
# ---------------------------------------------------------------------------


def test_append_query_param() -> None:
    url = ghrest.HttpUrl("https://api.github.com/foo")
    url = url.append_query_param("bar", "baz")
    assert str(url) == "https://api.github.com/foo?bar=baz"
    url = url.append_query_param("quux", "with space")
    assert str(url) == "https://api.github.com/foo?bar=baz&quux=with+space"
    url = url.append_query_param("bar", "rod")
    assert str(url) == "https://api.github.com/foo?bar=baz&quux=with+space&bar=rod"


def test_append_query_param_encodes_delimiters() -> None:
    url = ghrest.HttpUrl("https://api.github.com/search").append_query_param(
        "q", "a&b=c+d#e"
    )
    assert str(url) == "https://api.github.com/search?q=a%26b%3Dc%2Bd%23e"
    assert url.query_pairs() == [("q", "a&b=c+d#e")]


def test_query_pairs() -> None:
    url = ghrest.HttpUrl("https://api.github.com/?a=1&b=two+words&a=3&empty=")
    assert url.query_pairs() == [("a", "1"), ("b", "two words"), ("a", "3"), ("empty", "")]
    assert ghrest.HttpUrl("https://api.github.com/").query_pairs() == []


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


def test_join_path_endpoint() -> None:
    base = ghrest.HttpUrl("https://api.github.com")
    endpoint = ghrest.Endpoint.from_path("users", "alice", "repos")
    assert str(base.join_endpoint(endpoint)) == "https://api.github.com/users/alice/repos"


def test_join_path_endpoint_with_base_path() -> None:
    base = ghrest.HttpUrl("https://ghe.example.com/api/v3")
    url = base.join_endpoint(["repos", "octocat", "hello-world"])
    assert str(url) == "https://ghe.example.com/api/v3/repos/octocat/hello-world"


def test_join_url_endpoint() -> None:
    base = ghrest.HttpUrl("https://api.github.com/base")
    endpoint = ghrest.Endpoint.from_url("https://uploads.github.com/repos/x/y/releases/1/assets")
    assert base.join_endpoint(endpoint) == endpoint.url


def test_endpoint_coerce() -> None:
    url = ghrest.HttpUrl("https://api.github.com/rate_limit")
    assert ghrest.Endpoint.coerce(url) == ghrest.Endpoint.from_url(url)
    assert ghrest.Endpoint.coerce("https://api.github.com/rate_limit").is_url
    endpoint = ghrest.Endpoint.coerce(("users", "alice"))
    assert endpoint.segments == ("users", "alice")
    assert endpoint.url is None
    assert ghrest.Endpoint.coerce(endpoint) is endpoint


def test_endpoint_requires_exactly_one_target() -> None:
    with pytest.raises(TypeError):
        ghrest.Endpoint()
    with pytest.raises(TypeError):
        ghrest.Endpoint(url=ghrest.HttpUrl("https://api.github.com"), segments=["x"])


def test_endpoint_repr() -> None:
    assert repr(ghrest.Endpoint.from_path("users", "alice")) == "Endpoint.from_path('users', 'alice')"
    assert (
        repr(ghrest.Endpoint.from_url("https://api.github.com/"))
        == "Endpoint.from_url('https://api.github.com/')"
    )


# ---------------------------------------------------------------------------
# Page numbers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://api.github.com/users/jwodder/repos", None),
        ("https://api.github.com/users/jwodder/repos?per_page=100", None),
        ("https://api.github.com/users/jwodder/repos?page=3", 3),
        ("https://api.github.com/users/jwodder/repos?per_page=100&page=3&flavor=vanilla", 3),
        ("https://api.github.com/users/jwodder/repos?page=3&page=4", 4),
        ("https://api.github.com/users/jwodder/repos?page=three", None),
        ("https://api.github.com/users/jwodder/repos?page=three&page=4", 4),
        ("https://api.github.com/users/jwodder/repos?page=3&page=four", None),
        ("https://api.github.com/users/jwodder/repos?page=-1", None),
        ("https://api.github.com/users/jwodder/repos?page=18446744073709551616", None),
        ("https://api.github.com/users/jwodder/repos?page=18446744073709551615", 2**64 - 1),
    ],
)
def test_get_page_number(url: str, expected: int | None) -> None:
    assert ghrest.get_page_number(ghrest.HttpUrl(url)) == expected
