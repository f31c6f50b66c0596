# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

from __future__ import annotations


class MtxSetupError(Exception):
    """Base exception for all mtx-setup errors."""


class ElevationRequiredError(MtxSetupError, PermissionError):
    """The installer is not running with root privileges."""

    def __init__(self) -> None:
        super().__init__("This installer must be run as root.")


class UnsupportedPlatformError(MtxSetupError):
    """Host OS could not be identified, or the operator declined to continue."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        msg = "Unsupported operating system"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class RuntimeUnavailableError(MtxSetupError):
    """No usable container runtime could be obtained on this host."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        msg = "Container runtime is unavailable"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class LaunchVerificationError(MtxSetupError):
    """The service container was not running after launch."""

    def __init__(self, container_name: str, logs: str = "") -> None:
        self.container_name = container_name
        self.logs = logs
        super().__init__(f"Container {container_name} is not running after start")


class UserCancelledError(MtxSetupError):
    """The operator declined the final confirmation."""

    def __init__(self) -> None:
        super().__init__("Installation cancelled.")


class InvalidParameterError(MtxSetupError):
    """A resolved parameter is out of range or conflicts with another."""

    def __init__(self, name: str, detail: str) -> None:
        self.name = name
        super().__init__(f"Invalid {name}: {detail}")


class CommandFailedError(MtxSetupError):
    """A host command exited with a non-zero status."""

    def __init__(self, argv: list[str], exit_code: int, stderr: str = "") -> None:
        self.argv = argv
        self.exit_code = exit_code
        self.stderr = stderr
        msg = f"Command `{' '.join(argv)}` exited with status {exit_code}"
        tail = stderr.strip()
        if tail:
            msg = f"{msg}: {tail.splitlines()[-1]}"
        super().__init__(msg)
