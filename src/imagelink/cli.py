"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import threading
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .appctx import AppContext
from .application.services.manifest_loader import ManifestLoader
from .config import DEFAULT_THUMBNAIL_SIZE
from .errors import (
    DecodeError,
    ImageLinkError,
    InvalidResponseError,
    InvalidURLError,
    NetworkError,
    NoConnectivityError,
)
from .models.types import Size
from .settings.manager import SettingsManager
from .utils.logging import attach_console_handler

app = typer.Typer(help="Fetch, cache and inspect the images listed in a remote manifest")
console = Console()

_state: dict[str, object] = {"settings_path": None, "context": None}

_DEFAULT_SIZE = "{}x{}".format(*DEFAULT_THUMBNAIL_SIZE)


def _context() -> AppContext:
    context = _state.get("context")
    if context is None:
        settings = SettingsManager(_state["settings_path"])  # type: ignore[arg-type]
        settings.load()
        # One-shot commands fetch the manifest explicitly.
        context = AppContext.create(settings, auto_retry=False)
        _state["context"] = context
    return context  # type: ignore[return-value]


def _parse_size(value: str) -> Size:
    try:
        return Size.parse(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (
            InvalidURLError,
            InvalidResponseError,
            NetworkError,
            NoConnectivityError,
            DecodeError,
        ) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except ImageLinkError as exc:
            typer.echo(f"Unexpected error: {exc}", err=True)
            raise typer.Exit(1) from exc
        finally:
            context = _state.get("context")
            if context is not None:
                context.close()  # type: ignore[attr-defined]
                _state["context"] = None

    return wrapper


@app.callback()
def main(
    settings: Optional[Path] = typer.Option(None, "--settings", help="Path to settings.json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
) -> None:
    _state["settings_path"] = settings
    attach_console_handler(verbose=verbose)


@app.command()
@_handle_errors
def manifest(
    url: Optional[str] = typer.Option(None, "--url", help="Override the manifest URL"),
) -> None:
    """Download the manifest and list its valid image URLs."""

    ctx = _context()
    ctx.watch_reachability()
    loader = ctx.manifest
    if url:
        loader = ManifestLoader(ctx.fetcher, ctx.connectivity, manifest_url=url, auto_retry=False)
    try:
        entries = loader.fetch_entries()
    finally:
        if loader is not ctx.manifest:
            loader.shutdown()

    table = Table(title=loader.manifest_url)
    table.add_column("#", justify="right")
    table.add_column("URL")
    table.add_column("Image?", justify="center")
    for index, entry in enumerate(entries, start=1):
        table.add_row(str(index), entry.raw, "yes" if entry.is_image_url else "?")
    console.print(table)


@app.command()
@_handle_errors
def fetch(
    url: str = typer.Argument(..., help="Image URL"),
    size: Optional[str] = typer.Option(None, "--size", "-s", help="Thumbnail size, e.g. 256x256"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the image here"),
) -> None:
    """Load one image (or thumbnail) through the cache tiers."""

    ctx = _context()
    if size:
        image = ctx.images.load_thumbnail(url, _parse_size(size))
    else:
        image = ctx.images.load_full(url)
    console.print(f"[bold]{url}[/bold] -> {image.width}x{image.height} (key {image.key})")
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        image.image.convert("RGB").save(output)
        console.print(f"Saved to {output}")


@app.command()
@_handle_errors
def prefetch(
    size: str = typer.Option(_DEFAULT_SIZE, "--size", "-s", help="Thumbnail size"),
    timeout: float = typer.Option(120.0, help="Seconds to wait for all downloads"),
) -> None:
    """Warm the thumbnail cache for every manifest entry."""

    ctx = _context()
    ctx.watch_reachability()
    thumb_size = _parse_size(size)
    entries = ctx.manifest.fetch_entries()

    lock = threading.Lock()
    remaining = len(entries)
    finished = threading.Event()
    failures: list[tuple[str, Exception]] = []

    def _done() -> None:
        nonlocal remaining
        with lock:
            remaining -= 1
            if remaining == 0:
                finished.set()

    def _on_error(url: str):
        def _handler(exc: Exception) -> None:
            with lock:
                failures.append((url, exc))
            _done()

        return _handler

    if not entries:
        finished.set()
    for entry in entries:
        ctx.images.request_thumbnail(
            entry.raw, thumb_size, lambda _image: _done(), on_error=_on_error(entry.raw)
        )
    if not finished.wait(timeout):
        console.print("[yellow]Timed out waiting for downloads[/yellow]")

    console.print(f"Cached {len(entries) - len(failures)} of {len(entries)} thumbnail(s) at {thumb_size}")
    for url, exc in failures:
        console.print(f"[red]{url}[/red]: {exc}")
    stats = ctx.stats
    console.print(f"Network fetches: {stats.fetches} ({stats.fetch_failures} failed)")


@app.command("clear-cache")
@_handle_errors
def clear_cache() -> None:
    """Remove every cached image and thumbnail."""

    ctx = _context()
    ctx.images.clear_cache()
    console.print(f"Cleared {ctx.images.disk_store.root}")


@app.command()
@_handle_errors
def status() -> None:
    """Show connectivity and cache locations."""

    ctx = _context()
    backend = ctx.watch_reachability()
    snapshot = ctx.connectivity.snapshot()
    store = ctx.images.disk_store

    table = Table(show_header=False)
    table.add_row("Manifest", ctx.manifest.manifest_url)
    table.add_row(
        "Connectivity",
        f"{snapshot.state.value} ({snapshot.transport.value})"
        + ("" if backend else " [dim]no backend[/dim]"),
    )
    table.add_row("Cache root", str(store.root))
    table.add_row("Disk usage", f"{store.disk_usage_bytes() / (1 << 20):.1f} MiB")
    table.add_row("Settings", str(ctx.settings.path))
    console.print(table)


if __name__ == "__main__":  # pragma: no cover - manual invocation
    app()
