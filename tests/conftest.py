"""Shared fixtures and host fakes for mtx-setup tests."""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from mtx_setup._config import InstallerConfig
from mtx_setup.errors import CommandFailedError
from mtx_setup.provision import Provisioner
from mtx_setup.types import CommandResult

if TYPE_CHECKING:
    from mtx_setup.types import Session

UBUNTU_OS_RELEASE = """\
PRETTY_NAME="Ubuntu 24.04.1 LTS"
NAME="Ubuntu"
VERSION_ID="24.04"
VERSION_CODENAME=noble
ID=ubuntu
ID_LIKE=debian
"""

DEBIAN_OS_RELEASE = """\
PRETTY_NAME="Debian GNU/Linux 12 (bookworm)"
VERSION_CODENAME=bookworm
ID=debian
"""

FEDORA_OS_RELEASE = """\
NAME="Fedora Linux"
PRETTY_NAME="Fedora Linux 40 (Server Edition)"
ID=fedora
VERSION_ID=40
"""


class ScriptedRunner:
    """Stand-in for CommandRunner that records argv and replays results."""

    def __init__(self, which: set[str] | None = None) -> None:
        self.calls: list[list[str]] = []
        self.inputs: list[object] = []
        self.results: dict[tuple[str, ...], CommandResult] = {}
        self.available = set(which or ())

    def script(self, prefix: list[str], result: CommandResult) -> None:
        self.results[tuple(prefix)] = result

    def which(self, name: str) -> str | None:
        return f"/usr/bin/{name}" if name in self.available else None

    def run(self, argv: list[str], *, check: bool = True, input=None, env=None, cwd=None):  # noqa: A002, ANN001, ANN201, ARG002
        self.calls.append(list(argv))
        self.inputs.append(input)
        result = CommandResult(exit_code=0)
        for n in range(len(argv), 0, -1):
            if tuple(argv[:n]) in self.results:
                result = self.results[tuple(argv[:n])]
                break
        if check and not result.ok:
            raise CommandFailedError(argv, result.exit_code, result.stderr)
        return result


class FakeRuntime:
    """In-memory ContainerRuntime."""

    def __init__(
        self,
        *,
        installed: bool = True,
        running_after_up: bool = True,
        responsive: bool = False,
        socket: bool = False,
        logs: str = "",
    ) -> None:
        self.installed = installed
        self.running_after_up = running_after_up
        self.responsive = responsive
        self.socket = socket
        self.logs = logs
        self.events: list[str] = []
        self.running = False

    def is_installed(self) -> bool:
        return self.installed

    def version(self) -> str:
        return "Docker version 27.0.3"

    def is_responsive(self) -> bool:
        return self.responsive

    def socket_exists(self) -> bool:
        return self.socket

    def compose_down(self, compose_file: Path) -> None:
        self.events.append(f"down {compose_file}")
        self.running = False

    def compose_up(self, compose_file: Path) -> None:
        self.events.append(f"up {compose_file}")
        self.running = self.running_after_up

    def is_running(self, container_name: str) -> bool:
        self.events.append(f"ps {container_name}")
        return self.running

    def recent_logs(self, container_name: str, tail: int) -> str:
        self.events.append(f"logs {container_name} {tail}")
        return self.logs


class FakeInstaller:
    """Records package manager calls."""

    def __init__(self) -> None:
        self.events: list[tuple[object, ...]] = []

    def refresh(self) -> None:
        self.events.append(("refresh",))

    def install(self, packages: list[str]) -> None:
        self.events.append(("install", tuple(packages)))

    def add_repository(self, name: str, key_url: str, repo_url: str, suite: str) -> None:
        self.events.append(("repo", name, key_url, repo_url, suite))


class FakeSupervisor:
    """ServiceSupervisor with a fixed availability answer."""

    def __init__(self, *, available: bool = True) -> None:
        self.available = available
        self.started: list[str] = []

    def is_available(self) -> bool:
        return self.available

    def enable_and_start(self, unit: str) -> None:
        self.started.append(unit)


class FakeFirewall:
    """Records opened ports."""

    def __init__(self, *, available: bool = True) -> None:
        self.available = available
        self.rules: list[tuple[int, str, str]] = []

    def is_available(self) -> bool:
        return self.available

    def allow(self, port: int, proto: str, comment: str) -> None:
        self.rules.append((port, proto, comment))


class FakePrompter:
    """Answers interactive questions from canned values."""

    def __init__(
        self,
        ports: dict[str, int] | None = None,
        stream_key: str = "",
        *,
        confirm: bool = True,
        platform_confirm: bool = True,
    ) -> None:
        self.ports = ports or {}
        self.stream_key = stream_key
        self.answer = confirm
        self.platform_answer = platform_confirm
        self.asked: list[tuple[str, int]] = []
        self.reviewed: list[Session] = []
        self.confirmations: list[tuple[str, bool]] = []

    def ask_port(self, label: str, default: int) -> int:
        self.asked.append((label, default))
        for prefix, value in self.ports.items():
            if label.startswith(prefix):
                return value
        return default

    def ask_stream_key(self) -> str:
        return self.stream_key

    def review(self, session: Session) -> None:
        self.reviewed.append(session)

    def confirm(self, message: str, *, default: bool = True) -> bool:
        self.confirmations.append((message, default))
        if default is False:
            return self.platform_answer
        return self.answer


@pytest.fixture
def config(tmp_path: Path) -> InstallerConfig:
    """Installer config rooted in *tmp_path*, with no waits or lookups."""
    return dataclasses.replace(
        InstallerConfig(),
        install_dir=str(tmp_path / "opt" / "mediamtx"),
        hls_dir=str(tmp_path / "hls"),
        settle_seconds=0.0,
        ip_lookup_urls=(),
        auto_log=False,
    )


@pytest.fixture
def os_release(tmp_path: Path) -> Path:
    """An Ubuntu ``os-release`` file."""
    path = tmp_path / "os-release"
    path.write_text(UBUNTU_OS_RELEASE)
    return path


def make_provisioner(  # noqa: PLR0913
    config: InstallerConfig,
    os_release: Path,
    *,
    container_runtime: FakeRuntime | None = None,
    installer: FakeInstaller | None = None,
    supervisor: FakeSupervisor | None = None,
    firewall_manager: FakeFirewall | None = None,
    env: dict[str, str] | None = None,
    euid: int = 0,
) -> Provisioner:
    return Provisioner(
        config,
        container_runtime=container_runtime or FakeRuntime(),
        installer=installer or FakeInstaller(),
        supervisor=supervisor or FakeSupervisor(),
        firewall_manager=firewall_manager or FakeFirewall(),
        env=env or {},
        geteuid=lambda: euid,
        os_release_path=os_release,
        lookup_ip=lambda: "203.0.113.7",
        sleep=lambda _: None,
    )
