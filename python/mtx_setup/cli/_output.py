# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Rich output formatters and interactive prompts for the CLI."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from mtx_setup import render

if TYPE_CHECKING:
    from mtx_setup._config import InstallerConfig
    from mtx_setup.errors import MtxSetupError
    from mtx_setup.provision import ProvisionResult
    from mtx_setup.types import Session

_console = Console()
_err_console = Console(stderr=True)


def print_banner() -> None:
    """Print the installer title."""
    _console.print(
        Panel(
            "[bold]MediaMTX streaming server installer[/bold]\nUbuntu + Docker",
            expand=False,
        )
    )


def print_success(msg: str) -> None:
    """Print a success message with a checkmark."""
    _console.print(f"[green]✓[/green] {msg}")


def print_warning(msg: str) -> None:
    """Print a warning line."""
    _console.print(f"[yellow]![/yellow] {msg}")


def format_session(session: Session) -> None:
    """Print resolved settings for review."""
    table = Table(title="Settings", show_header=False)
    table.add_column("Setting", style="bold")
    table.add_column("Value", style="cyan")
    for label, port in session.ports.items():
        table.add_row(f"{label} port", str(port))
    table.add_row("Stream key", escape(session.stream_key))
    _console.print(table)


def format_summary(result: ProvisionResult, config: InstallerConfig) -> None:
    """Print connection URLs, management commands and client tips."""
    session = result.session
    host = session.server_ip or "<server-ip>"
    compose = Path(config.install_dir) / render.COMPOSE_NAME
    name = config.container_name

    lines = [
        "[bold green]OBS[/bold green]",
        f"  Server URL: {render.publish_url(session, host)}",
        "  Stream key: (included in the URL)",
        "",
        "[bold green]Playback[/bold green]",
        f"  VLC:     {render.rtsp_url(session, host)}",
        f"  Browser: {render.hls_url(session, host)}",
        "",
        "[bold green]Management[/bold green]",
        f"  API:    {render.api_url(session, host)}",
        f"  Start:  docker compose -f {compose} up -d",
        f"  Stop:   docker compose -f {compose} down",
        f"  Logs:   docker logs -f {name}",
        f"  Status: docker ps --filter name={name}",
        "",
        "[yellow]VLC low-latency tip:[/yellow] Tools > Preferences > Input / Codecs >"
        " Network caching = 50 ms",
        "[yellow]OBS tip:[/yellow] the server URL carries the credentials;"
        " leave the stream key field empty",
    ]
    if not result.firewall_configured:
        ports = ", ".join(str(p) for p in session.ports.values())
        lines.append(f"[yellow]Firewall:[/yellow] open TCP ports {ports} manually")
    lines.append("")
    lines.append(f"[blue]Credentials file: {result.paths.credentials}[/blue]")

    _console.print(
        Panel(
            "\n".join(lines),
            title="[green]MediaMTX installed[/green]",
            expand=False,
        )
    )


def format_error(err: MtxSetupError) -> None:
    """Print an installer error as a rich panel with suggestions."""
    from mtx_setup.errors import LaunchVerificationError  # noqa: PLC0415

    title, suggestion = _error_info(err)
    lines = [escape(str(err))]
    if isinstance(err, LaunchVerificationError) and err.logs:
        lines.append("\n[bold]Recent logs:[/bold]")
        lines.append(escape(err.logs))
    if suggestion:
        lines.append(f"\n[dim]{suggestion}[/dim]")

    panel = Panel(
        "\n".join(lines),
        title=f"[red]{title}[/red]",
        expand=False,
    )
    _err_console.print(panel, highlight=False)


def _error_info(err: MtxSetupError) -> tuple[str, str]:
    """Map an installer error to a title and suggestion string."""
    from mtx_setup.errors import (  # noqa: PLC0415
        CommandFailedError,
        ElevationRequiredError,
        InvalidParameterError,
        LaunchVerificationError,
        RuntimeUnavailableError,
        UnsupportedPlatformError,
    )

    if isinstance(err, ElevationRequiredError):
        return "Permission Denied", "Run again with sudo: sudo mtx-setup"
    if isinstance(err, UnsupportedPlatformError):
        return "Unsupported Platform", "This installer targets Ubuntu hosts."
    if isinstance(err, RuntimeUnavailableError):
        return "Docker Unavailable", "Install and start Docker manually, then run again."
    if isinstance(err, InvalidParameterError):
        return "Invalid Setting", "Ports must be distinct numbers between 1 and 65535."
    if isinstance(err, LaunchVerificationError):
        return "Launch Failed", f"Inspect with: docker logs {err.container_name}"
    if isinstance(err, CommandFailedError):
        return "Command Failed", "Fix the problem above and run the installer again."
    return "Error", ""


class ConsolePrompter:
    """Asks for settings on the terminal."""

    def ask_port(self, label: str, default: int) -> int:
        return click.prompt(label, default=default, type=click.IntRange(1, 65535))

    def ask_stream_key(self) -> str:
        _console.print("[dim]The stream key is the password OBS uses to publish.[/dim]")
        return click.prompt(
            "Stream key (Enter to generate)",
            default="",
            show_default=False,
        )

    def review(self, session: Session) -> None:
        format_session(session)

    def confirm(self, message: str, *, default: bool = True) -> bool:
        return click.confirm(message, default=default)
