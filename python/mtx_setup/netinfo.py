# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Best-effort server address discovery for display purposes."""

from __future__ import annotations

import ipaddress
import logging
import socket
from typing import TYPE_CHECKING

import requests

if TYPE_CHECKING:
    from collections.abc import Iterable

log = logging.getLogger(__name__)

# Connecting a UDP socket sends nothing; it only selects the outbound interface.
_PROBE_ADDRESS = ("192.0.2.1", 9)


def _lookup_public(url: str, timeout: float) -> str:
    """Ask one lookup service for our address; return ``""`` on any failure."""
    try:
        resp = requests.get(url, timeout=timeout, headers={"User-Agent": "curl/8"})
        resp.raise_for_status()
    except requests.RequestException as exc:
        log.debug("address lookup via %s failed: %s", url, exc)
        return ""
    text = resp.text.strip()
    try:
        ipaddress.ip_address(text)
    except ValueError:
        log.debug("address lookup via %s returned %r", url, text[:40])
        return ""
    return text


def local_address() -> str:
    """Return the primary local IPv4 address without blocking, or ``""``."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.setblocking(False)
            sock.connect(_PROBE_ADDRESS)
            return str(sock.getsockname()[0])
    except OSError:
        return ""


def discover_server_ip(urls: Iterable[str], timeout: float = 5.0) -> str:
    """Try each lookup service in order, then the local address.

    Never raises; returns ``""`` when nothing usable is found.
    """
    for url in urls:
        address = _lookup_public(url, timeout)
        if address:
            return address
    return local_address()
