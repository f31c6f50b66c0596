# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Restart the service container and verify it came up."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from mtx_setup.errors import LaunchVerificationError

if TYPE_CHECKING:
    from mtx_setup._config import InstallerConfig
    from mtx_setup.types import ContainerRuntime

log = logging.getLogger(__name__)


def ensure_segment_dir(path: Path) -> None:
    """Create the shared segment directory, writable by the container user."""
    path.mkdir(parents=True, exist_ok=True)
    path.chmod(0o1777)


def launch(
    runtime: ContainerRuntime,
    compose_file: Path,
    config: InstallerConfig,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Stop any previous instance, start detached, wait and verify.

    Raises:
        LaunchVerificationError: The container is not listed as running
            after the settling interval. Carries the recent log output.

    """
    log.info("Starting the MediaMTX container...")
    runtime.compose_down(compose_file)
    ensure_segment_dir(Path(config.hls_dir))
    runtime.compose_up(compose_file)

    sleep(config.settle_seconds)

    if not runtime.is_running(config.container_name):
        logs = runtime.recent_logs(config.container_name, config.log_tail)
        raise LaunchVerificationError(config.container_name, logs)
    log.info("Container %s is running", config.container_name)
