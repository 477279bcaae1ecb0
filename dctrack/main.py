from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import typer

from dctrack.client import DCTrackClient
from dctrack.config import Settings, get_settings
from dctrack.domain.filters import by_location
from dctrack.errors import DCTrackError
from dctrack.reporter import (
    print_item_details,
    print_item_summaries,
    print_power_summary,
    print_vendor_distribution,
    summarize_power,
)
from dctrack.utils.logging import configure_logging

T = TypeVar("T")

DEFAULT_TIMEOUT = 30.0

app = typer.Typer(help="dcTrack inventory client CLI.")

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="YAML config file (defaults to DCTRACK_* environment variables).",
)
TimeoutOption = typer.Option(
    DEFAULT_TIMEOUT,
    "--timeout",
    "-t",
    help="Deadline in seconds for the whole operation, retries included.",
)


def _load_settings(config: Optional[Path]) -> Settings:
    try:
        settings = Settings.from_yaml(config) if config else get_settings()
    except DCTrackError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=1)
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)
    return settings


def _run(settings: Settings, operation: Callable[[DCTrackClient], Awaitable[T]]) -> T:
    """
    Run one client operation to completion, turning client errors into exit code 1.
    """

    async def _main() -> T:
        async with DCTrackClient(settings) as client:
            return await operation(client)

    try:
        return asyncio.run(_main())
    except (DCTrackError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)


@app.command()
def info(config: Optional[Path] = ConfigOption) -> None:
    """
    Show effective configuration values.
    """
    settings = _load_settings(config)
    password = "set" if settings.password.get_secret_value() or settings.password_file else "missing"
    typer.echo(
        f"URL={settings.url or '<unset>'} user={settings.username or '<unset>'} "
        f"password={password} | page_size={settings.page_size} "
        f"retries={settings.max_retries} delay={settings.retry_delay}s "
        f"timeout={settings.timeout}s verify_ssl={settings.verify_ssl} "
        f"fields={settings.field_set.value} strict={settings.strict_validation}"
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Free-text search query."),
    limit: int = typer.Option(10, "--limit", "-n", help="Rows to display."),
    timeout: float = TimeoutOption,
    config: Optional[Path] = ConfigOption,
) -> None:
    """
    Search for items.
    """
    settings = _load_settings(config)
    typer.echo(f"Searching dcTrack for: {query}")
    items = _run(settings, lambda client: client.search_items(query, timeout=timeout))
    print_item_summaries(items, title=f"Search results for '{query}'", limit=limit)


@app.command("list")
def list_items(
    location: str = typer.Argument(..., help="Location code, e.g. RDU2."),
    limit: int = typer.Option(10, "--limit", "-n", help="Rows to display."),
    timeout: float = TimeoutOption,
    config: Optional[Path] = ConfigOption,
) -> None:
    """
    List installed items in a location with their vendor distribution.
    """
    settings = _load_settings(config)
    items = _run(
        settings,
        lambda client: client.get_items_with_params(by_location(location), timeout=timeout),
    )
    print_item_summaries(items, title=f"Items in {location}", limit=limit)
    if items:
        print_vendor_distribution(items)
        summary = summarize_power(items)
        typer.echo(
            f"Total Power: {summary.total_power_kw:.2f} kW | "
            f"Average Power per Asset: {summary.power_density:.2f} W"
        )


@app.command()
def item(
    item_id: str = typer.Argument(..., help="dcTrack item identifier."),
    timeout: float = TimeoutOption,
    config: Optional[Path] = ConfigOption,
) -> None:
    """
    Show details for one item.
    """
    settings = _load_settings(config)
    found = _run(settings, lambda client: client.get_item_by_id(item_id, timeout=timeout))
    print_item_details(found)


@app.command()
def power(
    location: str = typer.Argument(..., help="Location code, e.g. RDU2."),
    timeout: float = TimeoutOption,
    config: Optional[Path] = ConfigOption,
) -> None:
    """
    Power analysis for installed items in a location.
    """
    settings = _load_settings(config)
    items = _run(
        settings,
        lambda client: client.get_items_with_params(by_location(location), timeout=timeout),
    )
    if not items:
        typer.echo(f"No items found in location: {location}")
        return
    print_power_summary(summarize_power(items))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
