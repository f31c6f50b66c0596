# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""The provisioning workflow.

Steps run strictly in order, each to completion before the next:
preflight, runtime install, parameter resolution, install directory,
artifacts, firewall, launch, report. Nothing is rolled back when a later
step fails or the run is interrupted.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from mtx_setup import checks, firewall, launcher, netinfo, params, render, runtime
from mtx_setup._logger import CommandHistory
from mtx_setup._process import CommandRunner

if TYPE_CHECKING:
    from collections.abc import Mapping

    from mtx_setup._config import InstallerConfig
    from mtx_setup.params import Prompter
    from mtx_setup.types import (
        ArtifactPaths,
        ContainerRuntime,
        FirewallManager,
        PackageInstaller,
        ServiceSupervisor,
        Session,
    )

log = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ProvisionResult:
    """Outcome of a completed run."""

    session: Session
    paths: ArtifactPaths
    firewall_configured: bool


Reporter = Callable[[ProvisionResult, "InstallerConfig"], None]


class Provisioner:
    """Runs the workflow against injected host capabilities."""

    def __init__(  # noqa: PLR0913
        self,
        config: InstallerConfig,
        *,
        container_runtime: ContainerRuntime,
        installer: PackageInstaller,
        supervisor: ServiceSupervisor,
        firewall_manager: FirewallManager,
        env: Mapping[str, str] | None = None,
        geteuid: Callable[[], int] = os.geteuid,
        os_release_path: Path = checks.OS_RELEASE_PATH,
        lookup_ip: Callable[[], str] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.container_runtime = container_runtime
        self.installer = installer
        self.supervisor = supervisor
        self.firewall_manager = firewall_manager
        self._env = os.environ if env is None else env
        self._geteuid = geteuid
        self._os_release_path = os_release_path
        self._lookup_ip = lookup_ip or (
            lambda: netinfo.discover_server_ip(config.ip_lookup_urls, config.ip_lookup_timeout)
        )
        self._sleep = sleep

    def run(
        self,
        *,
        auto_mode: bool,
        prompter: Prompter | None = None,
        reporter: Reporter | None = None,
    ) -> ProvisionResult:
        """Execute every step; see the module docstring for the order.

        Raises:
            ElevationRequiredError: Not running as root.
            UnsupportedPlatformError: No ``os-release``, or a non-Ubuntu
                host was declined (always declined in auto mode).
            RuntimeUnavailableError: Docker could not be made available.
            InvalidParameterError: Bad or colliding ports.
            UserCancelledError: Confirmation declined; nothing was written.
            CommandFailedError: A required host command failed.
            LaunchVerificationError: The container did not come up.

        """
        release = checks.run_preflight(
            self._platform_confirm(auto_mode, prompter),
            geteuid=self._geteuid,
            os_release_path=self._os_release_path,
        )

        runtime.ensure_runtime(self.container_runtime, self.installer, self.supervisor, release)

        session = params.resolve_session(
            self.config.install_dir,
            auto_mode=auto_mode,
            env=self._env,
            prompter=prompter,
        )

        log.info("Creating install directory %s", session.install_dir)
        session.install_dir.mkdir(parents=True, exist_ok=True)

        session = dataclasses.replace(session, server_ip=self._lookup_ip())
        paths = render.write_artifacts(session, self.config)

        opened = firewall.configure_firewall(self.firewall_manager, session)

        launcher.launch(self.container_runtime, paths.compose_file, self.config, sleep=self._sleep)

        result = ProvisionResult(session=session, paths=paths, firewall_configured=opened)
        if reporter is not None:
            reporter(result, self.config)
        return result

    @staticmethod
    def _platform_confirm(auto_mode: bool, prompter: Prompter | None) -> Callable[[str], bool]:  # noqa: FBT001
        if auto_mode or prompter is None:

            def _decline(message: str) -> bool:
                log.warning("%s (no: non-interactive mode)", message)
                return False

            return _decline
        return lambda message: prompter.confirm(message, default=False)


def build_provisioner(config: InstallerConfig) -> Provisioner:
    """Wire a :class:`Provisioner` to the real host (docker, apt, systemd, ufw)."""
    history = CommandHistory(Path(config.install_dir), enabled=config.auto_log)
    runner = CommandRunner(history)
    return Provisioner(
        config,
        container_runtime=runtime.DockerRuntime(runner),
        installer=runtime.AptInstaller(runner),
        supervisor=runtime.SystemdSupervisor(runner),
        firewall_manager=firewall.UfwFirewall(runner),
    )


def provision(
    config: InstallerConfig,
    *,
    auto_mode: bool,
    prompter: Prompter | None = None,
    reporter: Reporter | None = None,
) -> ProvisionResult:
    """Provision this host with the real adapters."""
    return build_provisioner(config).run(auto_mode=auto_mode, prompter=prompter, reporter=reporter)
