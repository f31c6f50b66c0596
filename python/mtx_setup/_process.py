# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Host command execution with captured exit status."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess  # nosec B404
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from mtx_setup.errors import CommandFailedError
from mtx_setup.types import CommandResult

if TYPE_CHECKING:
    from pathlib import Path

    from mtx_setup._logger import CommandHistory

log = logging.getLogger(__name__)

_NOT_FOUND_EXIT = 127


class CommandRunner:
    """Runs argv lists on the host and records each call to history."""

    def __init__(self, history: CommandHistory | None = None) -> None:
        self.history = history

    def which(self, name: str) -> str | None:
        """Return the resolved path of *name*, or ``None``."""
        return shutil.which(name)

    def run(
        self,
        argv: list[str],
        *,
        check: bool = True,
        input: str | bytes | None = None,  # noqa: A002
        env: dict[str, str] | None = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        """Run *argv* to completion and capture its output.

        A missing executable is reported as exit code 127. With *check*,
        any non-zero exit raises :class:`CommandFailedError`.
        """
        log.debug("$ %s", " ".join(argv))
        started_at = datetime.now(tz=timezone.utc)
        t0 = time.monotonic()
        full_env = {**os.environ, **env} if env else None
        data = input.encode() if isinstance(input, str) else input
        try:
            proc = subprocess.run(  # noqa: S603  # nosec B603
                argv,
                input=data,
                capture_output=True,
                env=full_env,
                cwd=cwd,
                check=False,
            )
            result = CommandResult(
                exit_code=proc.returncode,
                stdout=proc.stdout.decode(errors="replace"),
                stderr=proc.stderr.decode(errors="replace"),
                duration_ms=(time.monotonic() - t0) * 1000,
            )
        except FileNotFoundError as exc:
            result = CommandResult(
                exit_code=_NOT_FOUND_EXIT,
                stderr=str(exc),
                duration_ms=(time.monotonic() - t0) * 1000,
            )

        if self.history is not None:
            self.history.log_command(argv, result, started_at)

        if check and not result.ok:
            raise CommandFailedError(argv, result.exit_code, result.stderr)
        return result
