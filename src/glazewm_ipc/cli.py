"""GlazeWM IPC CLI.

Usage:
    glazewm-ipc query monitors              # List monitors
    glazewm-ipc query windows --format json # Windows as JSON
    glazewm-ipc command focus --workspace 1 # Run a WM command
    glazewm-ipc command --id <id> close     # Run a command on a container
    glazewm-ipc watch                       # Print all events as JSON lines
    glazewm-ipc watch focus_changed         # Only focus changes
    glazewm-ipc probe                       # Raw WebSocket reachability test
    glazewm-ipc check                       # End-to-end client test
    glazewm-ipc status                      # Is the GlazeWM process running?
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import sys
from typing import Any

import click
import websockets
from pydantic import BaseModel

from .config import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT, ClientOptions
from .errors import ConnectionFailed, WmClientError
from .process import is_glazewm_running
from .protocol.events import WmEventType
from .sdk.client import WmClient

# Output format options
FORMAT_TABLE = "table"
FORMAT_JSON = "json"

PROBE_TIMEOUT = 5.0

QUERY_TARGETS = ["monitors", "workspaces", "windows", "focused"]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, list):
        return [_to_jsonable(v) for v in value]
    return value


def truncate(text: str | None, max_len: int = 40) -> str:
    """Truncate text for display."""
    if not text:
        return ""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def _make_client(ctx: click.Context) -> WmClient:
    return WmClient(ctx.obj["options"])


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.option("--host", default=DEFAULT_HOST, show_default=True, help="GlazeWM IPC host")
@click.option("--port", default=DEFAULT_PORT, show_default=True, help="GlazeWM IPC port")
@click.option(
    "--timeout",
    default=DEFAULT_TIMEOUT,
    show_default=True,
    type=float,
    help="Seconds allowed for connecting and for each request",
)
@click.option("--verbose", "-v", is_flag=True, help="Log protocol traffic to stderr")
@click.pass_context
def main(ctx: click.Context, host: str, port: int, timeout: float, verbose: bool) -> None:
    """GlazeWM IPC client - query state, run commands and watch events."""
    _configure_logging(verbose)
    try:
        options = ClientOptions(host=host, port=port, timeout=timeout, auto_connect=False)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
    ctx.ensure_object(dict)
    ctx.obj["options"] = options


# =============================================================================
# Query / Command
# =============================================================================


@main.command("query")
@click.argument("target", type=click.Choice(QUERY_TARGETS))
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice([FORMAT_TABLE, FORMAT_JSON]),
    default=FORMAT_TABLE,
    help="Output format",
)
@click.pass_context
def query(ctx: click.Context, target: str, output_format: str) -> None:
    """Query window manager state.

    Examples:

        glazewm-ipc query monitors

        glazewm-ipc query focused --format json
    """

    async def run() -> None:
        client = _make_client(ctx)
        try:
            async with client:
                if target == "monitors":
                    result: Any = await client.query_monitors()
                elif target == "workspaces":
                    result = await client.query_workspaces()
                elif target == "windows":
                    result = await client.query_windows()
                else:
                    result = await client.query_focused()
        except WmClientError as e:
            _fail(str(e))
            return

        if output_format == FORMAT_JSON:
            click.echo(json.dumps(_to_jsonable(result), indent=2))
            return

        _print_table(target, result)

    asyncio.run(run())


def _print_table(target: str, result: Any) -> None:
    if target == "monitors":
        click.echo(f"{'ID':<12} {'Name':<16} {'Size':<12} {'Position':<14} {'Primary'}")
        click.echo("-" * 64)
        for m in result:
            size = f"{m.width}x{m.height}"
            position = f"{m.x},{m.y}"
            primary = "yes" if m.is_primary else ""
            click.echo(f"{truncate(m.id, 12):<12} {truncate(m.name, 16):<16} {size:<12} {position:<14} {primary}")
    elif target == "workspaces":
        click.echo(f"{'ID':<12} {'Name':<16} {'Monitor':<12} {'Shown':<6} {'Focused'}")
        click.echo("-" * 60)
        for w in result:
            shown = "yes" if w.is_displayed else ""
            focused = "yes" if w.is_focused else ""
            name = w.display_name or w.name
            click.echo(f"{truncate(w.id, 12):<12} {truncate(name, 16):<16} {truncate(w.monitor_id, 12):<12} {shown:<6} {focused}")
    elif target == "windows":
        click.echo(f"{'ID':<12} {'Process':<20} {'Title':<40} {'Focus'}")
        click.echo("-" * 80)
        for w in result:
            focus = "*" if w.has_focus else ""
            click.echo(f"{truncate(w.id, 12):<12} {truncate(w.process_name, 20):<20} {truncate(w.title, 40):<40} {focus}")
    else:
        click.echo(f"ID:      {result.id}")
        click.echo(f"Type:    {result.type}")
        click.echo(f"Windows: {len(result.windows or [])}")


@main.command("command", context_settings={"ignore_unknown_options": True})
@click.option("--id", "subject", help="Container id to run the command on")
@click.argument("args", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def command(ctx: click.Context, subject: str | None, args: tuple[str, ...]) -> None:
    """Run a window manager command.

    Examples:

        glazewm-ipc command focus --workspace 1

        glazewm-ipc command --id 1c2d3e close
    """

    async def run() -> None:
        client = _make_client(ctx)
        try:
            async with client:
                result = await client.run_command(" ".join(args), subject=subject)
        except (WmClientError, ValueError) as e:
            _fail(str(e))
            return

        if result is not None:
            click.echo(json.dumps(result, indent=2) if not isinstance(result, str) else result)

    asyncio.run(run())


# =============================================================================
# Events
# =============================================================================


@main.command("watch")
@click.argument(
    "event_types",
    nargs=-1,
    type=click.Choice([t.value for t in WmEventType]),
)
@click.pass_context
def watch(ctx: click.Context, event_types: tuple[str, ...]) -> None:
    """Print events as JSON lines until interrupted.

    Examples:

        glazewm-ipc watch

        glazewm-ipc watch focus_changed window_managed
    """
    kinds = list(event_types) or [t.value for t in WmEventType]

    async def run() -> None:
        client = _make_client(ctx)
        closed = asyncio.Event()
        client.on_disconnect(closed.set)

        try:
            await client.connect()
        except WmClientError as e:
            _fail(str(e))
            return

        async def pump() -> None:
            async for event in client.stream_events(kinds):
                click.echo(event.model_dump_json(by_alias=True))

        task = asyncio.create_task(pump())
        try:
            await closed.wait()
        finally:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            await client.disconnect()
        _fail("Connection closed by GlazeWM")

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        click.echo("\nStopped", err=True)


# =============================================================================
# Diagnostics
# =============================================================================


@main.command("probe")
@click.pass_context
def probe(ctx: click.Context) -> None:
    """Test a raw WebSocket connection to the IPC server.

    Reports the outcome and always exits 0.
    """
    url = ctx.obj["options"].url

    async def run() -> None:
        click.echo(f"Testing direct WebSocket connection to {url}...")
        try:
            ws = await asyncio.wait_for(websockets.connect(url), timeout=PROBE_TIMEOUT)
        except TimeoutError:
            click.echo("WebSocket connection timeout")
            return
        except (OSError, websockets.WebSocketException) as e:
            click.echo(f"WebSocket connection failed: {e}")
            return

        click.echo("WebSocket connected to GlazeWM IPC")
        await ws.close()
        click.echo("WebSocket connection closed")

    asyncio.run(run())


@main.command("check")
@click.pass_context
def check(ctx: click.Context) -> None:
    """Connect and run the monitor and workspace queries."""

    async def run() -> None:
        client = _make_client(ctx)
        try:
            async with client:
                monitors = await client.query_monitors()
                click.echo(f"Monitors query successful: {len(monitors)} monitor(s)")
                workspaces = await client.query_workspaces()
                click.echo(f"Workspaces query successful: {len(workspaces)} workspace(s)")
        except ConnectionFailed as e:
            if not client.is_wm_running():
                click.echo("GlazeWM does not appear to be running", err=True)
            _fail(f"IPC test failed: {e}")
            return
        except WmClientError as e:
            _fail(f"IPC test failed: {e}")
            return

        click.echo("IPC client working")

    asyncio.run(run())


@main.command("status")
def status() -> None:
    """Report whether the GlazeWM process is running."""
    if is_glazewm_running():
        click.echo("GlazeWM is running")
        return
    click.echo("GlazeWM is not running")
    sys.exit(1)


if __name__ == "__main__":
    main()
