"""Unit tests for the CLI using Click's CliRunner with a mocked provisioner."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

from click.testing import CliRunner
from mtx_setup import __version__
from mtx_setup._config import InstallerConfig
from mtx_setup.cli.main import cli
from mtx_setup.errors import (
    ElevationRequiredError,
    LaunchVerificationError,
    UserCancelledError,
)

from .conftest import FakeRuntime, make_provisioner

# --- Scaffold tests ---


def test_cli_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "Usage" in result.output
    assert "--yes" in result.output
    assert "STREAM_KEY" in result.output


def test_cli_short_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["-h"])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_cli_version() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_unknown_option() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--bogus"])
    assert result.exit_code == 2
    assert "No such option" in result.output


# --- run with a mocked provisioner ---


@patch("mtx_setup.cli.main.build_provisioner")
@patch("mtx_setup.cli.main.load_config", return_value=InstallerConfig())
def test_auto_mode_success(mock_config: MagicMock, mock_build: MagicMock) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["-y"])
    assert result.exit_code == 0
    assert "up and running" in result.output
    kwargs = mock_build.return_value.run.call_args.kwargs
    assert kwargs["auto_mode"] is True
    assert kwargs["prompter"] is None
    mock_build.assert_called_once_with(mock_config.return_value)


@patch("mtx_setup.cli.main.build_provisioner")
@patch("mtx_setup.cli.main.load_config", return_value=InstallerConfig())
def test_interactive_mode_passes_prompter(_config: MagicMock, mock_build: MagicMock) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, [])
    assert result.exit_code == 0
    kwargs = mock_build.return_value.run.call_args.kwargs
    assert kwargs["auto_mode"] is False
    assert kwargs["prompter"] is not None


@patch("mtx_setup.cli.main.build_provisioner")
@patch("mtx_setup.cli.main.load_config", return_value=InstallerConfig())
def test_cancel_exits_zero(_config: MagicMock, mock_build: MagicMock) -> None:
    mock_build.return_value.run.side_effect = UserCancelledError()
    runner = CliRunner()
    result = runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "cancelled" in result.output
    assert "up and running" not in result.output


@patch("mtx_setup.cli.main.build_provisioner")
@patch("mtx_setup.cli.main.load_config", return_value=InstallerConfig())
def test_not_root_exits_one(_config: MagicMock, mock_build: MagicMock) -> None:
    mock_build.return_value.run.side_effect = ElevationRequiredError()
    runner = CliRunner()
    result = runner.invoke(cli, ["-y"])
    assert result.exit_code == 1
    assert "Permission Denied" in result.output


@patch("mtx_setup.cli.main.build_provisioner")
@patch("mtx_setup.cli.main.load_config", return_value=InstallerConfig())
def test_launch_failure_shows_logs(_config: MagicMock, mock_build: MagicMock) -> None:
    mock_build.return_value.run.side_effect = LaunchVerificationError(
        "mediamtx", "ERR port in use"
    )
    runner = CliRunner()
    result = runner.invoke(cli, ["-y"])
    assert result.exit_code == 1
    assert "Launch Failed" in result.output
    assert "ERR port in use" in result.output


# --- end to end against host fakes ---


def test_interactive_session_via_stdin(config: InstallerConfig, os_release: Path) -> None:
    runtime = FakeRuntime()
    provisioner = make_provisioner(config, os_release, container_runtime=runtime)
    runner = CliRunner()
    with patch("mtx_setup.cli.main.load_config", return_value=config), patch(
        "mtx_setup.cli.main.build_provisioner", return_value=provisioner
    ):
        result = runner.invoke(cli, [], input="1936\n\n8080\n\nabc123\ny\n")
    assert result.exit_code == 0, result.output
    assert "Proceed" in result.output
    assert "up and running" in result.output
    server = (Path(config.install_dir) / "mediamtx.yml").read_text()
    assert ":1936" in server
    assert ":8080" in server
    assert "abc123" in server


def test_interactive_decline_writes_nothing(config: InstallerConfig, os_release: Path) -> None:
    provisioner = make_provisioner(config, os_release)
    runner = CliRunner()
    with patch("mtx_setup.cli.main.load_config", return_value=config), patch(
        "mtx_setup.cli.main.build_provisioner", return_value=provisioner
    ):
        result = runner.invoke(cli, [], input="\n\n\n\n\nn\n")
    assert result.exit_code == 0
    assert "cancelled" in result.output
    assert not Path(config.install_dir).exists()
