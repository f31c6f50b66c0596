# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""CLI entry point for mtx-setup."""

from __future__ import annotations

import click

from mtx_setup import __version__
from mtx_setup._config import load_config
from mtx_setup._logger import setup_logging
from mtx_setup.cli._output import (
    ConsolePrompter,
    format_error,
    format_summary,
    print_banner,
    print_success,
    print_warning,
)
from mtx_setup.errors import MtxSetupError, UserCancelledError
from mtx_setup.provision import build_provisioner

_EPILOG = """\b
Environment variables (consulted for defaults):
  RTMP_PORT    RTMP port (default: 1935)
  RTSP_PORT    RTSP port (default: 8554)
  HLS_PORT     HLS port (default: 8888)
  API_PORT     API port (default: 9997)
  STREAM_KEY   Stream key (default: generated)

\b
Examples:
  sudo mtx-setup                        # interactive
  sudo mtx-setup -y                     # defaults
  sudo STREAM_KEY=mykey mtx-setup -y    # fixed stream key
"""


@click.command(
    "mtx-setup",
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=_EPILOG,
)
@click.option(
    "--yes",
    "-y",
    "auto_mode",
    is_flag=True,
    help="Non-interactive mode (environment values and defaults).",
)
@click.version_option(version=__version__, prog_name="mtx-setup")
def cli(*, auto_mode: bool) -> None:
    """Install Docker and start a low-latency MediaMTX streaming server."""
    config = load_config()
    setup_logging(config.log_level)
    print_banner()

    provisioner = build_provisioner(config)
    prompter = None if auto_mode else ConsolePrompter()
    try:
        provisioner.run(auto_mode=auto_mode, prompter=prompter, reporter=format_summary)
    except UserCancelledError as exc:
        print_warning(str(exc))
        return
    except MtxSetupError as exc:
        format_error(exc)
        raise SystemExit(1) from exc
    print_success("MediaMTX is up and running")
