# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Preflight checks that run before anything on the host is changed."""

from __future__ import annotations

import logging
import os
import shlex
from pathlib import Path
from typing import Callable

from mtx_setup.errors import ElevationRequiredError, UnsupportedPlatformError
from mtx_setup.types import OsRelease

log = logging.getLogger(__name__)

OS_RELEASE_PATH = Path("/etc/os-release")
TARGET_DISTRIBUTION = "ubuntu"


def check_privilege(geteuid: Callable[[], int] = os.geteuid) -> None:
    """Raise :class:`ElevationRequiredError` unless the effective uid is 0."""
    if geteuid() != 0:
        raise ElevationRequiredError


def parse_os_release(text: str) -> OsRelease:
    """Parse ``os-release`` ``KEY=value`` lines (values may be shell-quoted)."""
    fields: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        try:
            parts = shlex.split(value)
        except ValueError:
            parts = [value]
        fields[key.strip()] = parts[0] if parts else ""
    return OsRelease(
        id=fields.get("ID", "").lower(),
        pretty_name=fields.get("PRETTY_NAME", ""),
        version_codename=fields.get("VERSION_CODENAME", ""),
    )


def read_os_release(path: Path = OS_RELEASE_PATH) -> OsRelease:
    """Read the host identification file.

    Raises:
        UnsupportedPlatformError: If *path* does not exist.

    """
    if not path.is_file():
        raise UnsupportedPlatformError(f"{path} not found")
    return parse_os_release(path.read_text())


def check_platform(
    confirm: Callable[[str], bool],
    path: Path = OS_RELEASE_PATH,
) -> OsRelease:
    """Identify the host, asking *confirm* before continuing on a non-target distribution."""
    release = read_os_release(path)
    if release.id != TARGET_DISTRIBUTION:
        name = release.pretty_name or release.id or "unknown"
        if not confirm(f"This host runs {name}, not Ubuntu. Continue anyway?"):
            raise UnsupportedPlatformError(f"{name} declined by operator")
    log.info("Operating system: %s", release.pretty_name or release.id)
    return release


def run_preflight(
    confirm: Callable[[str], bool],
    *,
    geteuid: Callable[[], int] = os.geteuid,
    os_release_path: Path = OS_RELEASE_PATH,
) -> OsRelease:
    """Privilege check followed by platform check."""
    check_privilege(geteuid)
    return check_platform(confirm, os_release_path)
