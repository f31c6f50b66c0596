# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Operator logging and fire-and-forget command history on disk.

History I/O is synchronous filesystem writes. Entries recorded before the
install directory exists are held in memory and flushed on the next write
that finds the directory in place.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    import datetime
    from pathlib import Path

    from mtx_setup.types import CommandResult

_ROOT_LOGGER = "mtx_setup"


def setup_logging(level: str = "info", *, console: Console | None = None) -> logging.Logger:
    """Attach a :class:`RichHandler` to the package logger (once) and set *level*."""
    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(logging.getLevelName(level.upper()))
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_time=False,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    return logger


class CommandHistory:
    """Appends one JSONL line per host command to ``logs/history.jsonl``."""

    def __init__(self, base_dir: Path, *, enabled: bool = True) -> None:
        self._logs_dir = base_dir / "logs"
        self._history_path = base_dir / "logs" / "history.jsonl"
        self._base_dir = base_dir
        self._enabled = enabled
        self._pending: list[dict[str, object]] = []

    @property
    def enabled(self) -> bool:
        """Whether history recording is active."""
        return self._enabled

    @property
    def path(self) -> Path:
        """Path of the history file."""
        return self._history_path

    @property
    def pending(self) -> int:
        """Number of entries waiting for the install directory to appear."""
        return len(self._pending)

    def log_command(
        self,
        argv: list[str],
        result: CommandResult,
        started_at: datetime.datetime,
    ) -> None:
        """Record a completed host command."""
        if not self._enabled:
            return
        self.append(
            {
                "type": "command",
                "command": " ".join(argv),
                "exit_code": result.exit_code,
                "duration_ms": round(result.duration_ms, 1),
                "timestamp": started_at.isoformat(),
            }
        )

    def append(self, entry: dict[str, object]) -> None:
        """Append one entry, buffering while the base directory is missing."""
        if not self._enabled:
            return
        self._pending.append(entry)
        if not self._base_dir.is_dir():
            return
        self._logs_dir.mkdir(exist_ok=True)
        with self._history_path.open("a") as f:
            for item in self._pending:
                f.write(json.dumps(item, default=str) + "\n")
        self._pending.clear()
