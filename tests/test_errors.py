"""Tests for the mtx-setup error hierarchy."""

from __future__ import annotations

import mtx_setup
import pytest
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

# -- Inheritance --


@pytest.mark.parametrize(
    "cls",
    [
        CommandFailedError,
        ElevationRequiredError,
        InvalidParameterError,
        LaunchVerificationError,
        RuntimeUnavailableError,
        UnsupportedPlatformError,
        UserCancelledError,
    ],
)
def test_subclasses_mtx_setup_error(cls: type) -> None:
    assert issubclass(cls, MtxSetupError)


def test_elevation_required_is_permission_error() -> None:
    assert issubclass(ElevationRequiredError, PermissionError)
    with pytest.raises(PermissionError):
        raise ElevationRequiredError


# -- Messages and attributes --


def test_unsupported_platform_detail() -> None:
    err = UnsupportedPlatformError("/etc/os-release not found")
    assert err.detail == "/etc/os-release not found"
    assert "os-release not found" in str(err)


def test_unsupported_platform_no_detail() -> None:
    assert str(UnsupportedPlatformError()) == "Unsupported operating system"


def test_runtime_unavailable_detail() -> None:
    err = RuntimeUnavailableError("no socket")
    assert str(err) == "Container runtime is unavailable: no socket"


def test_launch_verification_carries_logs() -> None:
    err = LaunchVerificationError("mediamtx", "ERR listener failed")
    assert err.container_name == "mediamtx"
    assert err.logs == "ERR listener failed"
    assert "mediamtx" in str(err)


def test_invalid_parameter_message() -> None:
    err = InvalidParameterError("RTMP_PORT", "70000 is outside 1-65535")
    assert err.name == "RTMP_PORT"
    assert str(err) == "Invalid RTMP_PORT: 70000 is outside 1-65535"


def test_command_failed_uses_last_stderr_line() -> None:
    err = CommandFailedError(["apt-get", "update"], 100, "W: first\nE: Unable to lock\n")
    assert err.argv == ["apt-get", "update"]
    assert err.exit_code == 100
    assert str(err).endswith("E: Unable to lock")
    assert "apt-get update" in str(err)


def test_command_failed_without_stderr() -> None:
    err = CommandFailedError(["false"], 1)
    assert str(err) == "Command `false` exited with status 1"


# -- Catchability --


def test_catch_all_with_base() -> None:
    with pytest.raises(MtxSetupError):
        raise UserCancelledError


def test_errors_exported_from_package() -> None:
    assert mtx_setup.MtxSetupError is MtxSetupError
    assert mtx_setup.LaunchVerificationError is LaunchVerificationError
