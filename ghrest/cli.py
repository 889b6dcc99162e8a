from __future__ import annotations

import dataclasses
import json
import logging
import sys
import typing

import anyio
import click
from rich.console import Console
from rich.syntax import Syntax
from rich.text import Text

from ._config import ClientConfig
from ._consts import DEFAULT_API_URL
from ._exceptions import ClientError
from ._method import Method
from ._parsers import JsonParser
from ._request import EmptyBody, Request
from .pagination import PaginationRequest

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class Repository:
    full_name: str
    html_url: str
    description: str | None = None
    topics: list[str] = dataclasses.field(default_factory=list)
    stargazers_count: int = 0
    forks_count: int = 0
    homepage: str | None = None
    language: str | None = None

    @classmethod
    def from_json(cls, data: typing.Any) -> Repository:
        if not isinstance(data, dict):
            raise ValueError(f"expected a repository object, got {type(data).__name__}")
        return cls(
            full_name=data["full_name"],
            html_url=data["html_url"],
            description=data.get("description"),
            topics=list(data.get("topics") or []),
            stargazers_count=data.get("stargazers_count", 0),
            forks_count=data.get("forks_count", 0),
            homepage=data.get("homepage"),
            language=data.get("language"),
        )


class ShowRepository(Request[Repository]):
    def __init__(self, owner: str, name: str) -> None:
        self.owner = owner
        self.name = name

    def endpoint(self) -> list[str]:
        return ["repos", self.owner, self.name]

    def method(self) -> Method:
        return Method.GET

    def body(self) -> EmptyBody:
        return EmptyBody()

    def parser(self) -> JsonParser[Repository]:
        return JsonParser(Repository.from_json)


class ListRepositories(PaginationRequest[Repository]):
    def __init__(self, owner: str) -> None:
        self.owner = owner

    def endpoint(self) -> list[str]:
        return ["users", self.owner, "repos"]

    def parse_item(self, raw: typing.Any) -> Repository:
        return Repository.from_json(raw)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def _repository_fields(repo: Repository) -> list[tuple[str, str]]:
    return [
        ("Repository", repo.full_name),
        ("URL", repo.html_url),
        ("Description", repo.description or "-"),
        ("Language", repo.language or "-"),
        ("Homepage", repo.homepage or "-"),
        ("Topics", ", ".join(repo.topics) if repo.topics else "-"),
        ("Stars", str(repo.stargazers_count)),
        ("Forks", str(repo.forks_count)),
    ]


class Printer:
    def __init__(self, use_rich: bool) -> None:
        self.console = Console(highlight=False) if use_rich else None
        self._first = True

    def repository(self, repo: Repository, as_json: bool) -> None:
        if as_json:
            formatted = json.dumps(dataclasses.asdict(repo), indent=4, ensure_ascii=False)
            if self.console is not None:
                self.console.print(Syntax(formatted, "json", theme="monokai"))
            else:
                click.echo(formatted)
            return

        if not self._first:
            click.echo()
        self._first = False
        for label, value in _repository_fields(repo):
            if self.console is not None:
                line = Text()
                line.append(f"{label}:", style="bold cyan")
                line.append(f" {value}")
                self.console.print(line)
            else:
                click.echo(f"{label}: {value}")

    def error(self, exc: ClientError) -> None:
        cause = exc.__cause__
        if self.console is not None:
            console = Console(stderr=True, highlight=False)
            line = Text()
            line.append(type(exc).__name__, style="bold red")
            line.append(f": {exc}")
            console.print(line)
            if cause is not None:
                console.print(Text(f"Caused by: {cause}", style="dim"))
        else:
            click.echo(f"{type(exc).__name__}: {exc}", err=True)
            if cause is not None:
                click.echo(f"Caused by: {cause}", err=True)
        body = exc.pretty_text()
        if body is not None:
            click.echo(err=True)
            click.echo(body, err=True)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@click.group(help="Query the GitHub REST API.")
@click.option(
    "--token",
    envvar=["GH_TOKEN", "GITHUB_TOKEN"],
    default=None,
    help="API token.  Defaults to $GH_TOKEN or $GITHUB_TOKEN.",
)
@click.option("--base-url", default=DEFAULT_API_URL, show_default=True, help="API root URL.")
@click.option("--timeout", type=float, default=None, help="Per-request timeout in seconds.")
@click.option("--no-color", is_flag=True, default=False, help="Disable colored output.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log HTTP activity.")
@click.pass_context
def main(
    ctx: click.Context,
    token: str | None,
    base_url: str,
    timeout: float | None,
    no_color: bool,
    verbose: bool,
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    try:
        config = ClientConfig().with_base_url(base_url).with_timeout(timeout)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--base-url") from exc
    if token:
        config = config.with_auth_token(token)
    ctx.obj = {
        "config": config,
        "printer": Printer(use_rich=not no_color and sys.stdout.isatty()),
    }


@main.command("show-repo", help="Show details of a repository.")
@click.option("-J", "--json", "as_json", is_flag=True, default=False, help="Output JSON.")
@click.argument("owner")
@click.argument("name")
@click.pass_obj
def show_repo(obj: dict[str, typing.Any], as_json: bool, owner: str, name: str) -> None:
    printer: Printer = obj["printer"]
    with obj["config"].with_httpx() as client:
        try:
            repo = client.request(ShowRepository(owner, name))
        except ClientError as exc:
            printer.error(exc)
            sys.exit(1)
    printer.repository(repo, as_json)


async def _list_repos(config: ClientConfig, printer: Printer, owner: str, as_json: bool) -> int:
    async with config.with_async_httpx() as client:
        try:
            async for repo in client.paginate(ListRepositories(owner)):
                printer.repository(repo, as_json)
        except ClientError as exc:
            printer.error(exc)
            return 1
    return 0


@main.command("list-repos", help="List the public repositories of a user.")
@click.option("-J", "--json", "as_json", is_flag=True, default=False, help="Output JSON.")
@click.argument("owner")
@click.pass_obj
def list_repos(obj: dict[str, typing.Any], as_json: bool, owner: str) -> None:
    status = anyio.run(_list_repos, obj["config"], obj["printer"], owner, as_json)
    if status:
        sys.exit(status)
