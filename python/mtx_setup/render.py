# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Render the server configuration, compose file and credentials record.

The two YAML artifacts are built as plain data and serialized with
PyYAML, so every value (the stream key included) is quoted as needed.
Both are byte-identical for identical sessions; only the credentials
record carries a timestamp.
"""

from __future__ import annotations

import dataclasses
import datetime
import logging
import os
import urllib.parse
from typing import TYPE_CHECKING, Any

import yaml

from mtx_setup.types import ArtifactPaths

if TYPE_CHECKING:
    from pathlib import Path

    from mtx_setup._config import InstallerConfig
    from mtx_setup.types import Session

log = logging.getLogger(__name__)

SERVER_CONFIG_NAME = "mediamtx.yml"
COMPOSE_NAME = "docker-compose.yml"
CREDENTIALS_NAME = "credentials.txt"

SERVICE_NAME = "mediamtx"
PUBLISH_USER = "publisher"
ANY_USER = "any"
STREAM_PATH = "live"

ADMIN_NETWORKS = ("127.0.0.1", "::1", "172.17.0.0/16", "192.168.0.0/16", "10.0.0.0/8")

_HEADER = "# Generated by mtx-setup. Changes are overwritten on the next run.\n"
_CREDENTIALS_MODE = 0o600


# ---------------------------------------------------------------------------
# Server configuration
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class Permission:
    """One ``authInternalUsers`` permission entry."""

    action: str
    path: str | None = None

    def to_dict(self) -> dict[str, str]:
        d = {"action": self.action}
        if self.path is not None:
            d["path"] = self.path
        return d


@dataclasses.dataclass(frozen=True)
class AuthUser:
    """One ``authInternalUsers`` entry."""

    user: str
    password: str
    permissions: tuple[Permission, ...]
    ips: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": self.user,
            "pass": self.password,
            "ips": list(self.ips),
            "permissions": [p.to_dict() for p in self.permissions],
        }


def build_auth_users(stream_key: str) -> list[AuthUser]:
    """Publisher with the stream key, open playback, local-network admin."""
    return [
        AuthUser(PUBLISH_USER, stream_key, (Permission("publish", ""),)),
        AuthUser(ANY_USER, "", (Permission("read", ""), Permission("playback", ""))),
        AuthUser(
            ANY_USER,
            "",
            (Permission("api"), Permission("metrics"), Permission("pprof")),
            ips=ADMIN_NETWORKS,
        ),
    ]


def build_server_config(session: Session, config: InstallerConfig) -> dict[str, Any]:
    """Return the MediaMTX configuration for *session* as plain data."""
    return {
        "logLevel": "warn",
        "logDestinations": ["stdout"],
        "readTimeout": "10s",
        "writeTimeout": "10s",
        "writeQueueSize": 256,
        "udpMaxPayloadSize": 1472,
        "authMethod": "internal",
        "authInternalUsers": [u.to_dict() for u in build_auth_users(session.stream_key)],
        "api": True,
        "apiAddress": f":{session.api_port}",
        "rtmp": True,
        "rtmpAddress": f":{session.rtmp_port}",
        "rtsp": True,
        "rtspAddress": f":{session.rtsp_port}",
        "rtspTransports": ["tcp"],
        "hls": True,
        "hlsAddress": f":{session.hls_port}",
        "hlsVariant": "lowLatency",
        "hlsSegmentCount": 7,
        "hlsSegmentDuration": "1s",
        "hlsPartDuration": "200ms",
        "hlsDirectory": config.hls_dir,
        "hlsAlwaysRemux": False,
        "hlsEncryption": False,
        "webrtc": False,
        "srt": False,
        "paths": {"all": {}},
    }


# ---------------------------------------------------------------------------
# Compose file
# ---------------------------------------------------------------------------


def build_compose(session: Session, config: InstallerConfig) -> dict[str, Any]:
    """Return the single-service compose descriptor as plain data."""
    server_config = session.install_dir / SERVER_CONFIG_NAME
    return {
        "services": {
            SERVICE_NAME: {
                "image": config.image,
                "container_name": config.container_name,
                "restart": "unless-stopped",
                "network_mode": "host",
                "volumes": [
                    f"{server_config}:/{SERVER_CONFIG_NAME}:ro",
                    f"{config.hls_dir}:{config.hls_dir}",
                ],
                "environment": ["MTX_LOGLEVEL=warn"],
                "deploy": {"resources": {"limits": {"memory": config.memory_limit}}},
                "logging": {
                    "driver": "json-file",
                    "options": {
                        "max-size": config.log_max_size,
                        "max-file": str(config.log_max_files),
                    },
                },
            },
        },
    }


def dump_yaml(data: dict[str, Any]) -> str:
    """Serialize *data* with a generated-file header, preserving key order."""
    body = yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)
    return _HEADER + body


# ---------------------------------------------------------------------------
# Connection URLs and credentials record
# ---------------------------------------------------------------------------


def publish_url(session: Session, host: str) -> str:
    """RTMP publish URL with the credentials as query parameters."""
    query = urllib.parse.urlencode({"user": PUBLISH_USER, "pass": session.stream_key})
    return f"rtmp://{host}:{session.rtmp_port}/{STREAM_PATH}?{query}"


def rtsp_url(session: Session, host: str) -> str:
    return f"rtsp://{host}:{session.rtsp_port}/{STREAM_PATH}"


def hls_url(session: Session, host: str) -> str:
    return f"http://{host}:{session.hls_port}/{STREAM_PATH}"


def api_url(session: Session, host: str) -> str:
    return f"http://{host}:{session.api_port}/v3/paths/list"


def render_credentials(session: Session, created_at: datetime.datetime) -> str:
    """Return the human-readable connection summary."""
    host = session.server_ip or "<server-ip>"
    rule = "=" * 44
    lines = [
        rule,
        "MediaMTX streaming server connection details",
        f"Created: {created_at.strftime('%Y-%m-%d %H:%M:%S')}",
        rule,
        "",
        "[OBS]",
        f"Server URL: {publish_url(session, host)}",
        "Stream key: (included in the URL)",
        "",
        "[Playback]",
        f"VLC: {rtsp_url(session, host)}",
        f"Browser: {hls_url(session, host)}",
        "",
        "[Management API]",
        f"URL: {api_url(session, host)}",
        "",
        "[Ports]",
        *(f"{label}: {port}" for label, port in session.ports.items()),
        "",
        rule,
        "",
    ]
    return "\n".join(lines)


def _write_private(path: Path, text: str) -> None:
    """Write *text* to *path* readable and writable by the owner only."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _CREDENTIALS_MODE)
    with os.fdopen(fd, "w") as f:
        f.write(text)
    # O_CREAT mode is ignored for a file that already existed
    os.chmod(path, _CREDENTIALS_MODE)


def write_artifacts(
    session: Session,
    config: InstallerConfig,
    *,
    now: datetime.datetime | None = None,
) -> ArtifactPaths:
    """Render and overwrite all three artifacts under ``session.install_dir``."""
    install_dir = session.install_dir
    install_dir.mkdir(parents=True, exist_ok=True)
    paths = ArtifactPaths(
        server_config=install_dir / SERVER_CONFIG_NAME,
        compose_file=install_dir / COMPOSE_NAME,
        credentials=install_dir / CREDENTIALS_NAME,
    )

    log.info("Writing %s", paths.server_config.name)
    paths.server_config.write_text(dump_yaml(build_server_config(session, config)))

    log.info("Writing %s", paths.compose_file.name)
    paths.compose_file.write_text(dump_yaml(build_compose(session, config)))

    log.info("Writing %s", paths.credentials.name)
    created_at = now or datetime.datetime.now()  # noqa: DTZ005
    _write_private(paths.credentials, render_credentials(session, created_at))

    return paths
