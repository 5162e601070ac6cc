"""Console front end for the joke viewer."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable, Sequence, TextIO

from jokebox.core.telemetry import configure_opentelemetry, instrument_httpx
from jokebox.viewer.config import ViewerSettings, get_viewer_settings
from jokebox.viewer.connectivity import ConnectivityMonitor
from jokebox.viewer.persisted_cache import PersistedJokeCache
from jokebox.viewer.remote import JokeApiClient
from jokebox.viewer.state import JokeViewer, default_viewer_retry_policy
from jokebox.viewer.storage import LocalStorage

PROMPT = "[n]ext  [r]efresh  [q]uit > "


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jokebox-viewer",
        description="Browse jokes from a jokebox server with an offline cache.",
    )
    parser.add_argument("--api-url", help="Base URL of the jokebox server.")
    parser.add_argument(
        "--storage", type=Path, help="Path of the local storage JSON file."
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Print the current joke and exit.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser


def resolve_settings(args: argparse.Namespace) -> ViewerSettings:
    settings = get_viewer_settings()
    overrides: dict[str, object] = {}
    if args.api_url:
        overrides["api_url"] = args.api_url
    if args.storage:
        overrides["storage_path"] = args.storage
    if not overrides:
        return settings
    return ViewerSettings.model_validate({**settings.model_dump(), **overrides})


def configure_tracing(settings: ViewerSettings) -> bool:
    """Export spans for the viewer's httpx requests when enabled."""
    enabled = configure_opentelemetry(
        service_name=settings.otel_service_name,
        service_version=settings.otel_service_version,
        otlp_endpoint=settings.otel_exporter_otlp_endpoint,
        otlp_headers=settings.otel_exporter_otlp_headers,
        enabled=settings.otel_enabled,
    )
    instrument_httpx(enabled=enabled)
    return enabled


def build_viewer(settings: ViewerSettings) -> JokeViewer:
    storage = LocalStorage(settings.storage_path)
    cache = PersistedJokeCache(storage, ttl_seconds=settings.cache_ttl_seconds)
    api = JokeApiClient(settings.api_url, timeout_seconds=settings.timeout_seconds)
    connectivity = ConnectivityMonitor(
        settings.api_url, interval_seconds=settings.connectivity_interval_seconds
    )
    policy = default_viewer_retry_policy(
        max_attempts=settings.max_retries, delay_seconds=settings.retry_delay_seconds
    )
    return JokeViewer(cache, api, connectivity, policy)


def render(viewer: JokeViewer) -> str:
    """Render the viewer state as plain text."""
    lines: list[str] = []
    if not viewer.is_online:
        lines.append("Offline Mode: some features may be limited.")
    if viewer.error:
        lines.append(f"! {viewer.error}")

    joke = viewer.current_joke()
    if joke is None:
        lines.append("Loading jokes..." if viewer.loading else "No jokes to show.")
    else:
        title = joke.get("title")
        if title:
            lines.append(str(title))
        body = joke.get("body", joke.get("content"))
        if body:
            lines.append(str(body))
        lines.append(f"({viewer.current_index + 1}/{len(viewer.jokes)})")

    if viewer.last_updated is not None:
        stamp = viewer.last_updated.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        lines.append(f"Last updated: {stamp}")
    return "\n".join(lines)


async def _interactive(
    viewer: JokeViewer,
    read_line: Callable[[], str],
    out: TextIO,
) -> None:
    loop = asyncio.get_running_loop()
    print(render(viewer), file=out)
    while True:
        print(PROMPT, end="", file=out, flush=True)
        try:
            line = await loop.run_in_executor(None, read_line)
        except EOFError:
            break
        command = line.strip().lower()
        if command in {"q", "quit"}:
            break
        if command in {"n", "next", ""}:
            viewer.next_joke()
        elif command in {"r", "refresh"}:
            await viewer.refresh()
        else:
            print(f"Unknown command: {command}", file=out)
            continue
        print(render(viewer), file=out)


async def run_viewer(
    viewer: JokeViewer,
    *,
    once: bool = False,
    read_line: Callable[[], str] = input,
    out: TextIO = sys.stdout,
) -> None:
    connectivity = viewer.connectivity
    await connectivity.check()
    await viewer.mount()
    if once:
        print(render(viewer), file=out)
        return

    monitor = asyncio.create_task(connectivity.run())
    try:
        await _interactive(viewer, read_line, out)
    finally:
        connectivity.stop()
        await monitor


async def _amain(args: argparse.Namespace) -> int:
    settings = resolve_settings(args)
    configure_tracing(settings)
    viewer = build_viewer(settings)
    connectivity = viewer.connectivity
    try:
        await run_viewer(viewer, once=args.once)
    finally:
        await viewer.close()
        await viewer.api.aclose()
        await connectivity.aclose()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    try:
        return asyncio.run(_amain(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
