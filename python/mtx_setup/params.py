# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Resolve ports and the publish credential into a :class:`Session`.

Per field, precedence is: interactive answer (unless auto mode) >
environment variable > built-in default. The stream key is generated when
neither an answer nor ``STREAM_KEY`` supplies one.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import secrets
import string
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from mtx_setup.errors import InvalidParameterError, UserCancelledError
from mtx_setup.types import (
    DEFAULT_API_PORT,
    DEFAULT_HLS_PORT,
    DEFAULT_RTMP_PORT,
    DEFAULT_RTSP_PORT,
    Session,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

log = logging.getLogger(__name__)

STREAM_KEY_LENGTH = 16
STREAM_KEY_ALPHABET = string.ascii_letters + string.digits
STREAM_KEY_ENV = "STREAM_KEY"

_MIN_PORT = 1
_MAX_PORT = 65535


@dataclasses.dataclass(frozen=True)
class PortSpec:
    """One configurable listener port."""

    field: str
    env: str
    default: int
    prompt: str


PORT_SPECS: tuple[PortSpec, ...] = (
    PortSpec("rtmp_port", "RTMP_PORT", DEFAULT_RTMP_PORT, "RTMP port (publishing from OBS)"),
    PortSpec("rtsp_port", "RTSP_PORT", DEFAULT_RTSP_PORT, "RTSP port (playback in VLC)"),
    PortSpec("hls_port", "HLS_PORT", DEFAULT_HLS_PORT, "HLS port (web browser playback)"),
    PortSpec("api_port", "API_PORT", DEFAULT_API_PORT, "API port (management)"),
)


class Prompter(Protocol):
    """Interactive question source used outside auto mode."""

    def ask_port(self, label: str, default: int) -> int: ...

    def ask_stream_key(self) -> str: ...

    def review(self, session: Session) -> None: ...

    def confirm(self, message: str, *, default: bool = True) -> bool: ...


def generate_stream_key(length: int = STREAM_KEY_LENGTH) -> str:
    """Return *length* characters drawn uniformly from ``[A-Za-z0-9]``."""
    return "".join(secrets.choice(STREAM_KEY_ALPHABET) for _ in range(length))


def validate_port(name: str, value: object) -> int:
    """Coerce *value* to an int port number in ``1..65535``."""
    try:
        port = int(str(value).strip())
    except ValueError:
        raise InvalidParameterError(name, f"{value!r} is not a number") from None
    if not _MIN_PORT <= port <= _MAX_PORT:
        msg = f"{port} is outside {_MIN_PORT}-{_MAX_PORT}"
        raise InvalidParameterError(name, msg)
    return port


def check_distinct_ports(ports: Mapping[str, int]) -> None:
    """Raise if two listeners share a port."""
    seen: dict[int, str] = {}
    for label, port in ports.items():
        if port in seen:
            msg = f"{label} and {seen[port]} both use {port}"
            raise InvalidParameterError("ports", msg)
        seen[port] = label


def _env_port(env: Mapping[str, str], spec: PortSpec) -> int:
    raw = env.get(spec.env, "")
    if not raw:
        return spec.default
    return validate_port(spec.env, raw)


def resolve_session(
    install_dir: Path | str,
    *,
    auto_mode: bool,
    env: Mapping[str, str] | None = None,
    prompter: Prompter | None = None,
) -> Session:
    """Build the run's :class:`Session`.

    In auto mode no questions are asked. Otherwise every value is asked
    through *prompter* (defaulting to the environment or built-in value),
    the result is shown for review and must be confirmed.

    Raises:
        InvalidParameterError: A port is out of range or ports collide.
        UserCancelledError: The operator declined the confirmation.

    """
    env = os.environ if env is None else env
    if not auto_mode and prompter is None:
        msg = "prompter is required outside auto mode"
        raise ValueError(msg)

    ports: dict[str, int] = {}
    for spec in PORT_SPECS:
        default = _env_port(env, spec)
        if auto_mode or prompter is None:
            ports[spec.field] = default
        else:
            ports[spec.field] = validate_port(spec.env, prompter.ask_port(spec.prompt, default))

    stream_key = "" if auto_mode or prompter is None else prompter.ask_stream_key().strip()
    if not stream_key:
        stream_key = env.get(STREAM_KEY_ENV, "")
    if not stream_key:
        stream_key = generate_stream_key()
        log.info("Generated a new stream key")

    session = Session(
        stream_key=stream_key,
        install_dir=Path(install_dir),
        auto_mode=auto_mode,
        **ports,
    )
    check_distinct_ports(session.ports)

    if auto_mode or prompter is None:
        log.info("Non-interactive mode: using environment values and defaults")
        return session

    prompter.review(session)
    if not prompter.confirm("Proceed with these settings?"):
        raise UserCancelledError
    return session
