from typing import Callable

import typer
from rich import print
from rich.markup import escape
from rich.table import Table
from sqlalchemy import select
from rss_ingest.config.feeds import FEED_SOURCES
from rss_ingest.config.settings import get_settings
from rss_ingest.db.database import close_db, get_database, init_db
from rss_ingest.db.models import RssItem
from rss_ingest.models.schemas import FeedItem
from rss_ingest.workflows.ingest_feed import fetch_by_source, fetch_marketwatch, fetch_nasdaq
from rss_ingest.tools.logging_setup import setup_logging
setup_logging()


app = typer.Typer(help="Fetch registered news feeds into the item store")


def _print_new_items(items: list[FeedItem]) -> None:
    print(f"[bold green]Fetch complete[/bold green]: {len(items)} new items")
    for it in items:
        print(f"• {it.pub_date:%Y-%m-%d %H:%M} [cyan]{escape(it.title)}[/cyan]\n  {it.link}")


def _run_fetch(fetch_items: Callable[[], list[FeedItem]]) -> None:
    try:
        items = fetch_items()
        _print_new_items(items)
    except Exception as e:
        print(f"[bold red]Fetch failed[/bold red]: {e}")
        raise SystemExit(1)
    finally:
        close_db()


@app.command()
def doctor():
    """Check config + DB connectivity."""
    s = get_settings()
    print("[bold green]Config loaded[/bold green]")
    print("Database:", s.database_url, "| Fetch timeout:", s.fetch_timeout_seconds)
    print("Sources:", ", ".join(FEED_SOURCES))
    try:
        init_db()
        print("[bold green]DB OK[/bold green]")
    finally:
        close_db()


@app.command()
def sources():
    """List the registered feed sources."""
    table = Table(title="Feed sources")
    table.add_column("Key")
    table.add_column("Source id")
    table.add_column("Name")
    table.add_column("URL")
    for key, src in FEED_SOURCES.items():
        table.add_row(key, src.id, src.display_name, src.url)
    print(table)


@app.command()
def latest(limit: int = typer.Option(5, help="How many items to show")):
    """Show the stored item count and the most recently fetched items."""
    try:
        with get_database().session() as session:
            total = session.query(RssItem).count()
            rows = session.scalars(
                select(RssItem).order_by(RssItem.fetched_at.desc()).limit(limit)
            ).all()

        print(f"Items in DB: {total}")
        print(f"\nLatest {len(rows)} items:")
        for r in rows:
            print(f"- {r.source} | {escape(r.title)}")
    finally:
        close_db()


@app.command()
def fetch(source_key: str = typer.Argument(..., help="Registry key, e.g. marketwatch")):
    """Fetch one feed and store its items."""
    _run_fetch(lambda: fetch_by_source(source_key))


@app.command()
def marketwatch():
    """Fetch MarketWatch top stories."""
    _run_fetch(fetch_marketwatch)


@app.command()
def nasdaq():
    """Fetch NASDAQ news."""
    _run_fetch(fetch_nasdaq)


if __name__ == "__main__":
    app()
