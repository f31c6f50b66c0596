# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Container runtime installation and the Docker / apt host adapters.

:func:`ensure_runtime` is idempotent: when ``docker`` already resolves it
only logs the version. Otherwise Docker CE is installed from the upstream
apt repository and its service is enabled, falling back to an existing
daemon socket on hosts without a running systemd.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import requests

from mtx_setup.errors import RuntimeUnavailableError

if TYPE_CHECKING:
    from mtx_setup._process import CommandRunner
    from mtx_setup.types import (
        ContainerRuntime,
        OsRelease,
        PackageInstaller,
        ServiceSupervisor,
    )

log = logging.getLogger(__name__)

DOCKER_SOCKET = Path("/var/run/docker.sock")
KEYRINGS_DIR = Path("/etc/apt/keyrings")
SOURCES_DIR = Path("/etc/apt/sources.list.d")

PREREQUISITE_PACKAGES = ["ca-certificates", "curl", "gnupg"]
RUNTIME_PACKAGES = [
    "docker-ce",
    "docker-ce-cli",
    "containerd.io",
    "docker-buildx-plugin",
    "docker-compose-plugin",
]

_APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}
_KEY_TIMEOUT = 30.0


class AptInstaller:
    """``apt-get`` based :class:`~mtx_setup.types.PackageInstaller`."""

    def __init__(
        self,
        runner: CommandRunner,
        *,
        keyrings_dir: Path = KEYRINGS_DIR,
        sources_dir: Path = SOURCES_DIR,
    ) -> None:
        self._runner = runner
        self._keyrings_dir = keyrings_dir
        self._sources_dir = sources_dir

    def refresh(self) -> None:
        """Refresh the package index."""
        self._runner.run(["apt-get", "update"], env=_APT_ENV)

    def install(self, packages: list[str]) -> None:
        """Install *packages* non-interactively."""
        self._runner.run(["apt-get", "install", "-y", *packages], env=_APT_ENV)

    def add_repository(self, name: str, key_url: str, repo_url: str, suite: str) -> None:
        """Register a signed apt repository.

        The ASCII-armored key at *key_url* is dearmored into
        ``<keyrings>/<name>.gpg`` and a ``<name>.list`` source entry pinned to
        the host architecture is written.
        """
        self._runner.run(["install", "-m", "0755", "-d", str(self._keyrings_dir)])
        keyring = self._keyrings_dir / f"{name}.gpg"
        try:
            resp = requests.get(key_url, timeout=_KEY_TIMEOUT)
            resp.raise_for_status()
        except requests.RequestException as exc:
            msg = f"cannot fetch signing key from {key_url}: {exc}"
            raise RuntimeUnavailableError(msg) from exc
        self._runner.run(
            ["gpg", "--batch", "--yes", "--dearmor", "-o", str(keyring)],
            input=resp.content,
        )
        self._runner.run(["chmod", "a+r", str(keyring)])

        arch = self._runner.run(["dpkg", "--print-architecture"]).stdout.strip()
        line = f"deb [arch={arch} signed-by={keyring}] {repo_url} {suite} stable\n"
        self._sources_dir.mkdir(parents=True, exist_ok=True)
        (self._sources_dir / f"{name}.list").write_text(line)
        log.info("Registered apt repository %s", repo_url)


class DockerRuntime:
    """``docker`` CLI based :class:`~mtx_setup.types.ContainerRuntime`."""

    def __init__(self, runner: CommandRunner, *, socket_path: Path = DOCKER_SOCKET) -> None:
        self._runner = runner
        self.socket_path = socket_path

    def is_installed(self) -> bool:
        """Return True if the ``docker`` command resolves."""
        return self._runner.which("docker") is not None

    def version(self) -> str:
        """Return ``docker --version`` output, or an empty string."""
        result = self._runner.run(["docker", "--version"], check=False)
        return result.stdout.strip() if result.ok else ""

    def is_responsive(self) -> bool:
        """Return True if the daemon answers ``docker info``."""
        return self._runner.run(["docker", "info"], check=False).ok

    def socket_exists(self) -> bool:
        """Return True if the daemon control socket is present."""
        return self.socket_path.is_socket()

    def compose_down(self, compose_file: Path) -> None:
        """Stop and remove the compose project; absence is not an error."""
        result = self._runner.run(
            ["docker", "compose", "-f", str(compose_file), "down"],
            check=False,
            cwd=compose_file.parent,
        )
        if not result.ok:
            log.debug("compose down exited %d (ignored)", result.exit_code)

    def compose_up(self, compose_file: Path) -> None:
        """Start the compose project detached."""
        self._runner.run(
            ["docker", "compose", "-f", str(compose_file), "up", "-d"],
            cwd=compose_file.parent,
        )

    def is_running(self, container_name: str) -> bool:
        """Return True if a running container is named exactly *container_name*."""
        result = self._runner.run(
            [
                "docker",
                "ps",
                "--filter",
                f"name=^{container_name}$",
                "--format",
                "{{.Names}}",
            ],
            check=False,
        )
        return result.ok and container_name in result.stdout.split()

    def recent_logs(self, container_name: str, tail: int) -> str:
        """Return the last *tail* log lines (stdout and stderr combined)."""
        result = self._runner.run(
            ["docker", "logs", "--tail", str(tail), container_name],
            check=False,
        )
        return (result.stdout + result.stderr).strip()


class SystemdSupervisor:
    """``systemctl`` based :class:`~mtx_setup.types.ServiceSupervisor`."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def is_available(self) -> bool:
        """Return True if systemd is present and reports a running system."""
        if self._runner.which("systemctl") is None:
            return False
        return self._runner.run(["systemctl", "is-system-running"], check=False).ok

    def enable_and_start(self, unit: str) -> None:
        """Enable *unit* at boot and start it now."""
        self._runner.run(["systemctl", "enable", unit])
        self._runner.run(["systemctl", "start", unit])


def docker_repository(release: OsRelease) -> tuple[str, str, str]:
    """Return ``(key_url, repo_url, suite)`` for the host distribution."""
    distro = "debian" if release.id == "debian" else "ubuntu"
    base = f"https://download.docker.com/linux/{distro}"
    return f"{base}/gpg", base, release.version_codename


def ensure_runtime(
    runtime: ContainerRuntime,
    installer: PackageInstaller,
    supervisor: ServiceSupervisor,
    release: OsRelease,
) -> None:
    """Make sure a working container runtime is present.

    Raises:
        RuntimeUnavailableError: No service supervisor and no existing
            daemon socket after installation.
        CommandFailedError: A package manager step failed.

    """
    if runtime.is_installed():
        log.info("Docker is already installed: %s", runtime.version())
        return

    log.info("Installing Docker...")
    installer.refresh()
    installer.install(PREREQUISITE_PACKAGES)

    key_url, repo_url, suite = docker_repository(release)
    if not suite:
        msg = "host does not report VERSION_CODENAME"
        raise RuntimeUnavailableError(msg)
    installer.add_repository("docker", key_url, repo_url, suite)

    installer.refresh()
    installer.install(RUNTIME_PACKAGES)

    if supervisor.is_available():
        supervisor.enable_and_start("docker")
    else:
        log.warning("systemd is not running; looking for an existing Docker daemon")
        if runtime.is_responsive():
            log.info("Docker daemon is already responding")
        elif runtime.socket_exists():
            log.info("Docker socket already exists")
        else:
            msg = "no service supervisor to start the daemon and no existing socket"
            raise RuntimeUnavailableError(msg)

    log.info("Docker installed: %s", runtime.version())
