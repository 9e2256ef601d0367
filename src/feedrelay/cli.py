"""CLI entry point."""

from __future__ import annotations

import asyncio
import signal
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer
from rich.console import Console
from rich.table import Table

from feedrelay.core.config import Settings, get_settings
from feedrelay.core.exceptions import FeedRelayError
from feedrelay.core.logging import configure_logging
from feedrelay.core.relay import FeedRelay
from feedrelay.delivery.console import ConsoleDelivery

app = typer.Typer(
    name="feedrelay",
    help="Poll RSS/Atom feeds and fan new entries out to subscribers",
    no_args_is_help=True,
)
console = Console()

T = TypeVar("T")

StorageOption = typer.Option(None, "--storage", "-s", help="memory:// or sqlite:///path/rss.db")


def _settings(storage: str | None) -> Settings:
    overrides = {"storage_url": storage} if storage else {}
    settings = get_settings(**overrides)
    configure_logging(settings.log_level, settings.log_format)
    return settings


def _run(settings: Settings, action: Callable[[FeedRelay], Awaitable[T]]) -> T:
    """Open a relay, run ``action`` and exit 1 on feedrelay errors."""

    async def main() -> T:
        async with FeedRelay.from_settings(settings, ConsoleDelivery()) as relay:
            return await action(relay)

    try:
        return asyncio.run(main())
    except FeedRelayError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e


@app.command()
def version() -> None:
    """Show version."""
    from feedrelay import __version__

    console.print(f"feedrelay {__version__}")


@app.command()
def subscribe(
    subscriber: str = typer.Argument(..., help="Subscriber (room) identifier"),
    url: str = typer.Argument(..., help="Feed URL"),
    storage: str | None = StorageOption,
) -> None:
    """Subscribe a room to a feed."""
    _run(_settings(storage), lambda relay: relay.subscribe(subscriber, url))
    console.print(f"Subscribed [bold]{subscriber}[/bold] to {url}")


@app.command()
def unsubscribe(
    subscriber: str = typer.Argument(..., help="Subscriber (room) identifier"),
    url: str = typer.Argument(..., help="Feed URL"),
    storage: str | None = StorageOption,
) -> None:
    """Unsubscribe a room from a feed."""
    _run(_settings(storage), lambda relay: relay.unsubscribe(subscriber, url))
    console.print(f"Unsubscribed [bold]{subscriber}[/bold] from {url}")


@app.command()
def subscriptions(
    subscriber: str = typer.Argument(..., help="Subscriber (room) identifier"),
    storage: str | None = StorageOption,
) -> None:
    """List the feeds a room follows."""
    urls = _run(_settings(storage), lambda relay: relay.subscriptions(subscriber))
    if not urls:
        console.print(f"{subscriber} has no subscriptions")
        return
    for url in urls:
        console.print(url)


@app.command()
def feeds(storage: str | None = StorageOption) -> None:
    """List every known feed and its subscriber count."""

    async def collect(relay: FeedRelay) -> list[tuple[str, int]]:
        return [
            (url, len(await relay.store.subscribers(url)))
            for url in await relay.store.list_feeds()
        ]

    rows = _run(_settings(storage), collect)
    table = Table(title="Feeds")
    table.add_column("URL")
    table.add_column("Subscribers", justify="right")
    for url, count in rows:
        table.add_row(url, str(count))
    console.print(table)


@app.command("poll-once")
def poll_once(storage: str | None = StorageOption) -> None:
    """Run a single poll cycle, printing notices to stdout."""
    stats = _run(_settings(storage), lambda relay: relay.poll_once())
    console.print(
        f"{stats.feeds} feeds, {stats.new_entries} new entries, "
        f"{stats.deliveries} delivered, {stats.fetch_failures} fetch failures"
    )


@app.command()
def run(
    storage: str | None = StorageOption,
    interval_ms: int | None = typer.Option(None, "--interval-ms", help="Poll interval override"),
    immediately: bool = typer.Option(True, help="Poll once at startup instead of waiting"),
) -> None:
    """Poll forever, printing notices to stdout. Ctrl-C stops after the current cycle."""
    settings = _settings(storage)
    if interval_ms is not None:
        settings = settings.model_copy(update={"poll_interval_ms": interval_ms})

    async def serve(relay: FeedRelay) -> None:
        scheduler = relay.start(run_immediately=immediately)
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, scheduler.stop)
            except NotImplementedError:  # Windows
                pass
        await scheduler.wait_closed()

    _run(settings, serve)


if __name__ == "__main__":
    app()
