"""CLI interface for postrank."""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from postrank.config import PostrankConfig, load_config, merge_cli_overrides
from postrank.content.models import ContentRecord, ContentStatus, PostFilters, SortField, SortOrder
from postrank.content.store import PostStore
from postrank.errors import PostrankError
from postrank.search.ranker import ScoredRecord
from postrank.search.service import SearchService

app = typer.Typer(
    name="postrank",
    help="Search and recommend blog posts from a JSON post store.",
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from postrank import __version__

        console.print(f"postrank {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .postrank.toml file."),
    ] = None,
    data_dir: Annotated[
        Optional[Path],
        typer.Option("--data-dir", "-d", help="Directory holding posts.json."),
    ] = None,
    search_limit: Annotated[
        Optional[int],
        typer.Option("--search-limit", min=1, help="Default result cap for search."),
    ] = None,
    related_limit: Annotated[
        Optional[int],
        typer.Option("--related-limit", min=1, help="Default number of related posts."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log debug output to stderr."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """postrank - relevance-ranked post search."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    config = merge_cli_overrides(
        load_config(config_path),
        data_dir=data_dir,
        search_limit=search_limit,
        related_limit=related_limit,
    )
    ctx.obj = config


def _store(ctx: typer.Context) -> PostStore:
    config: PostrankConfig = ctx.obj
    return PostStore(config.data_path)


def _print_records(records: list[ScoredRecord], as_json: bool, show_score: bool) -> None:
    if as_json:
        payload = []
        for item in records:
            data = item.record.model_dump(mode="json")
            if show_score:
                data["score"] = item.score
            payload.append(data)
        typer.echo(json.dumps(payload, indent=2))
        return

    if not records:
        console.print("[yellow]No posts found.[/yellow]")
        return

    table = Table()
    if show_score:
        table.add_column("Score", justify="right")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Category")
    table.add_column("Status")
    table.add_column("Views", justify="right")
    for item in records:
        row = [
            item.record.id,
            item.record.title,
            item.record.category,
            item.record.status.value,
            str(item.record.view_count),
        ]
        if show_score:
            row.insert(0, f"{item.score:.1f}")
        table.add_row(*row)
    console.print(table)


def _unscored(records: list[ContentRecord]) -> list[ScoredRecord]:
    return [ScoredRecord(r, 0.0) for r in records]


@app.command()
def search(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Free-text query. Empty lists posts.")] = "",
    category: Annotated[Optional[str], typer.Option(help="Exact category.")] = None,
    tag: Annotated[Optional[str], typer.Option(help="Partial tag match.")] = None,
    author: Annotated[Optional[str], typer.Option(help="Partial author match.")] = None,
    status: Annotated[Optional[ContentStatus], typer.Option(help="Lifecycle status.")] = None,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", min=1)] = None,
    include_all: Annotated[
        bool,
        typer.Option("--all", help="Include unpublished posts."),
    ] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON.")] = False,
) -> None:
    """Rank posts against QUERY, best match first."""
    config: PostrankConfig = ctx.obj
    published = None if include_all or not config.search.public_only else True
    filters = PostFilters(
        published=published,
        category=category,
        tag=tag,
        author=author,
        status=status,
        limit=limit,
    )
    try:
        results = SearchService(_store(ctx), config).search_scored(query, filters)
    except PostrankError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc
    _print_records(results, as_json, show_score=bool(query.strip()))


@app.command()
def related(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="ID of the reference post.")],
    limit: Annotated[Optional[int], typer.Option("--limit", "-n")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON.")] = False,
) -> None:
    """Recommend posts related to RECORD_ID."""
    config: PostrankConfig = ctx.obj
    try:
        results = SearchService(_store(ctx), config).related_to(record_id, limit)
    except PostrankError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc
    _print_records(_unscored(results), as_json, show_score=False)


@app.command(name="list")
def list_cmd(
    ctx: typer.Context,
    status: Annotated[Optional[ContentStatus], typer.Option(help="Lifecycle status.")] = None,
    sort_by: Annotated[SortField, typer.Option("--sort-by")] = SortField.CREATED_AT,
    order: Annotated[SortOrder, typer.Option("--order")] = SortOrder.DESC,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", min=1)] = None,
    offset: Annotated[int, typer.Option(min=0)] = 0,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON.")] = False,
) -> None:
    """List posts without scoring."""
    filters = PostFilters(
        status=status, sort_by=sort_by, sort_order=order, limit=limit, offset=offset
    )
    _print_records(_unscored(_store(ctx).list(filters)), as_json, show_score=False)


@app.command()
def stats(ctx: typer.Context) -> None:
    """Print aggregate post statistics as JSON."""
    typer.echo(_store(ctx).stats().model_dump_json(indent=2))


@app.command(name="publish-scheduled")
def publish_scheduled(ctx: typer.Context) -> None:
    """Publish posts whose scheduled time has passed."""
    try:
        result = _store(ctx).publish_scheduled()
    except PostrankError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc
    console.print(f"Published {result.processed} scheduled post(s).")


if __name__ == "__main__":
    app()
