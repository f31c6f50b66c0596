# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

from __future__ import annotations

from importlib.metadata import version

from mtx_setup._config import InstallerConfig, load_config
from mtx_setup.errors import (
    CommandFailedError,
    ElevationRequiredError,
    InvalidParameterError,
    LaunchVerificationError,
    MtxSetupError,
    RuntimeUnavailableError,
    UnsupportedPlatformError,
    UserCancelledError,
)
from mtx_setup.params import generate_stream_key, resolve_session
from mtx_setup.provision import ProvisionResult, Provisioner, build_provisioner, provision
from mtx_setup.types import ArtifactPaths, CommandResult, OsRelease, Session

__version__ = version("mediamtx-setup")


def get_version() -> str:
    """Return the mediamtx-setup package version string."""
    return __version__


__all__ = [
    "ArtifactPaths",
    "CommandFailedError",
    "CommandResult",
    "ElevationRequiredError",
    "InstallerConfig",
    "InvalidParameterError",
    "LaunchVerificationError",
    "MtxSetupError",
    "OsRelease",
    "ProvisionResult",
    "Provisioner",
    "RuntimeUnavailableError",
    "Session",
    "UnsupportedPlatformError",
    "UserCancelledError",
    "__version__",
    "build_provisioner",
    "generate_stream_key",
    "get_version",
    "load_config",
    "provision",
    "resolve_session",
]
