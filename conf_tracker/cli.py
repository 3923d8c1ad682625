"""CLI for the conference tracker."""

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from conf_tracker import config
from conf_tracker.enrichers import DeepSeekResponder, JinaEmbedder
from conf_tracker.errors import ConfTrackerError
from conf_tracker.extractors import extract_intent
from conf_tracker.normalizers.deadlines import deadline_status, next_deadline
from conf_tracker.normalizers.topics import category_label
from conf_tracker.pipeline import print_ranking, run_query
from conf_tracker.service import ChatService
from conf_tracker.sources import CatalogCache, FileStore

# Load environment variables (override=True to beat shell env vars)
load_dotenv(override=True)

app = typer.Typer(
    name="conf-tracker",
    help="Conference deadline tracker and recommender",
    add_completion=False,
)
console = Console()


def _cache(catalog: Optional[Path]) -> CatalogCache:
    store = FileStore(catalog) if catalog else config.build_store()
    return CatalogCache(store, ttl_seconds=config.catalog_ttl_seconds())


@app.command()
def ask(
    query: str = typer.Argument(..., help="Free-text request, e.g. 'CCF A AI conference in 2 months'"),
    catalog: Optional[Path] = typer.Option(None, "--catalog", "-c", help="JSON/YAML catalog (default: configured store)"),
    limit: int = typer.Option(10, "--limit", "-l", help="Rows to show"),
    chat: bool = typer.Option(False, "--chat/--table", help="Print the chat answer instead of the table"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw reply as JSON"),
):
    """Rank conferences for a request."""
    cache = _cache(catalog)
    embedder = JinaEmbedder()

    async def _run():
        try:
            if chat or as_json:
                service = ChatService(
                    cache,
                    embedder=embedder,
                    responder=DeepSeekResponder(),
                    tz_name=config.report_timezone(),
                )
                return await service.answer(query)
            return await run_query(query, cache, embedder)
        finally:
            await embedder.aclose()

    try:
        outcome = asyncio.run(_run())
    except ConfTrackerError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(json.dumps(outcome.to_dict(), ensure_ascii=False))
    elif chat:
        console.print(outcome.message)
    else:
        print_ranking(outcome, limit=limit)


@app.command()
def intent(
    query: str = typer.Argument(..., help="Free-text request"),
):
    """Show what the extractor reads from a request."""
    console.print_json(json.dumps(extract_intent(query).to_dict(), ensure_ascii=False))


@app.command()
def deadlines(
    catalog: Optional[Path] = typer.Option(None, "--catalog", "-c", help="JSON/YAML catalog (default: configured store)"),
    limit: int = typer.Option(20, "--limit", "-l", help="Rows to show"),
    include_expired: bool = typer.Option(False, "--include-expired", help="Include conferences whose deadline passed"),
    lang: str = typer.Option("en", "--lang", help="Countdown language (en/zh)"),
):
    """List upcoming deadlines across the catalog."""
    now = datetime.now(timezone.utc)
    conferences = asyncio.run(_cache(catalog).get_conferences())

    rows = []
    for conf in conferences:
        deadline = next_deadline(conf, now)
        if deadline is None:
            continue
        status = deadline_status(deadline.at, now, lang)
        if status.expired and not include_expired:
            continue
        rows.append((conf, deadline, status))
    rows.sort(key=lambda r: r[1].at)

    table = Table(title=f"Deadlines (showing {min(len(rows), limit)} of {len(rows)})")
    table.add_column("Conference", style="cyan", max_width=40)
    table.add_column("CCF", style="yellow")
    table.add_column("Category", style="blue", max_width=24)
    table.add_column("Deadline", style="red")
    table.add_column("Countdown", style="magenta")
    table.add_column("Place", style="green", max_width=25)

    for conf, deadline, status in rows[:limit]:
        table.add_row(
            conf.title[:40],
            conf.rank_tier or "-",
            category_label(conf.category),
            deadline.formatted,
            status.text,
            deadline.instance.place[:25] or "-",
        )
    console.print(table)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
):
    """Run the HTTP API."""
    import uvicorn

    console.print(f"[cyan]Serving on http://{host}:{port}[/cyan]")
    uvicorn.run("conf_tracker.api:create_app", host=host, port=port, reload=reload, factory=True)


if __name__ == "__main__":
    app()
