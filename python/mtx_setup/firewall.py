# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Best-effort inbound port opening through ``ufw``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mtx_setup._process import CommandRunner
    from mtx_setup.types import FirewallManager, Session

log = logging.getLogger(__name__)


class UfwFirewall:
    """``ufw`` based :class:`~mtx_setup.types.FirewallManager`."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def is_available(self) -> bool:
        return self._runner.which("ufw") is not None

    def allow(self, port: int, proto: str, comment: str) -> None:
        self._runner.run(["ufw", "allow", f"{port}/{proto}", "comment", comment])


def configure_firewall(firewall: FirewallManager, session: Session) -> bool:
    """Open the session's four ports for inbound TCP.

    Returns False (after logging a warning with the ports to open by hand)
    when no firewall utility is installed. Never raises for that case.
    """
    ports = session.ports
    if not firewall.is_available():
        listed = ", ".join(str(p) for p in ports.values())
        log.warning("ufw is not installed; open these TCP ports manually: %s", listed)
        return False

    log.info("Opening firewall ports...")
    for label, port in ports.items():
        firewall.allow(port, "tcp", f"MediaMTX {label}")
    log.info("Firewall ports opened")
    return True
