"""CLI commands."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, NoReturn

import typer
from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from todosql.commands import Command

app = typer.Typer(
    name="todosql",
    help="Todo list stored in SQLite or PostgreSQL.",
    no_args_is_help=False,
)
console = Console(stderr=True)

logger = logging.getLogger("todosql.cli")

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclass
class StoreOptions:
    """Store overrides given on the command line (None = use config)."""

    engine: str | None = None
    sqlite_url: str | None = None
    postgres_url: str | None = None


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _fail(error: Exception) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    raise typer.Exit(1)


def _run(ctx: typer.Context, command: Command) -> None:
    """Open the selected store, bootstrap the table, then dispatch one command."""
    from todosql.config import Config
    from todosql.core import TodoService, open_backend, select_store
    from todosql.errors import TodoSqlError

    opts: StoreOptions = ctx.obj or StoreOptions()
    try:
        selection = select_store(
            Config.load(),
            engine=opts.engine,
            sqlite_url=opts.sqlite_url,
            postgres_url=opts.postgres_url,
        )
        backend = open_backend(selection)
    except TodoSqlError as e:
        _fail(e)

    logger.info("Using %s store %s", backend.name, backend.url)
    try:
        svc = TodoService(backend)
        svc.bootstrap()
        svc.handle(command)
    except TodoSqlError as e:
        _fail(e)
    finally:
        backend.close()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    engine: Annotated[
        str | None,
        typer.Option("--engine", "-e", help="Store engine: sqlite or postgres"),
    ] = None,
    sqlite_url: Annotated[
        str | None,
        typer.Option("--sqlite-url", help="SQLite URL, e.g. sqlite:todos.db"),
    ] = None,
    postgres_url: Annotated[
        str | None,
        typer.Option("--postgres-url", help="PostgreSQL URL, e.g. postgres://user@host/todos"),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
):
    """List todos if no command given."""
    _setup_logging(verbose)
    ctx.obj = StoreOptions(engine=engine, sqlite_url=sqlite_url, postgres_url=postgres_url)
    if ctx.invoked_subcommand is None:
        _run(ctx, None)


@app.command()
def add(
    ctx: typer.Context,
    description: Annotated[str, typer.Argument(help="Todo description (use quotes)")],
):
    """Add a todo."""
    from todosql.commands import Add

    _run(ctx, Add(description))


@app.command()
def done(
    ctx: typer.Context,
    id: Annotated[int, typer.Argument(help="Todo id", min=INT64_MIN, max=INT64_MAX)],
):
    """Mark todo as done."""
    from todosql.commands import Done

    _run(ctx, Done(id))


@app.command()
def clear(ctx: typer.Context):
    """Delete all todos."""
    from todosql.commands import Clear

    _run(ctx, Clear())


def main() -> None:
    app()
