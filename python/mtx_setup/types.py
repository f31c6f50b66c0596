# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_RTMP_PORT = 1935
DEFAULT_RTSP_PORT = 8554
DEFAULT_HLS_PORT = 8888
DEFAULT_API_PORT = 9997


@dataclasses.dataclass(frozen=True)
class CommandResult:
    """Result of running a command on the host."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        """Return True if the command exited successfully (exit code 0)."""
        return self.exit_code == 0


@dataclasses.dataclass(frozen=True)
class Session:
    """Resolved configuration for a single provisioning run."""

    stream_key: str
    install_dir: Path
    rtmp_port: int = DEFAULT_RTMP_PORT
    rtsp_port: int = DEFAULT_RTSP_PORT
    hls_port: int = DEFAULT_HLS_PORT
    api_port: int = DEFAULT_API_PORT
    auto_mode: bool = False
    server_ip: str = ""

    @property
    def ports(self) -> dict[str, int]:
        """Return the four listener ports keyed by protocol label."""
        return {
            "RTMP": self.rtmp_port,
            "RTSP": self.rtsp_port,
            "HLS": self.hls_port,
            "API": self.api_port,
        }


@dataclasses.dataclass(frozen=True)
class OsRelease:
    """Fields of interest from ``/etc/os-release``."""

    id: str = ""
    pretty_name: str = ""
    version_codename: str = ""


@dataclasses.dataclass(frozen=True)
class ArtifactPaths:
    """Locations of the files written for a run."""

    server_config: Path
    compose_file: Path
    credentials: Path


# ---------------------------------------------------------------------------
# Host capabilities
# ---------------------------------------------------------------------------


class PackageInstaller(Protocol):
    """Host package manager."""

    def refresh(self) -> None: ...

    def install(self, packages: list[str]) -> None: ...

    def add_repository(self, name: str, key_url: str, repo_url: str, suite: str) -> None: ...


class ContainerRuntime(Protocol):
    """Container engine CLI."""

    def is_installed(self) -> bool: ...

    def version(self) -> str: ...

    def is_responsive(self) -> bool: ...

    def socket_exists(self) -> bool: ...

    def compose_down(self, compose_file: Path) -> None: ...

    def compose_up(self, compose_file: Path) -> None: ...

    def is_running(self, container_name: str) -> bool: ...

    def recent_logs(self, container_name: str, tail: int) -> str: ...


class FirewallManager(Protocol):
    """Host packet filter front-end."""

    def is_available(self) -> bool: ...

    def allow(self, port: int, proto: str, comment: str) -> None: ...


class ServiceSupervisor(Protocol):
    """Host init system that runs background services."""

    def is_available(self) -> bool: ...

    def enable_and_start(self, unit: str) -> None: ...
