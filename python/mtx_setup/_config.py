# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Installer configuration loading with system -> user -> explicit precedence."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

import yaml

_CONFIG_FILENAME = "mtx-setup.yaml"
_SYSTEM_CONFIG_DIR = Path("/etc/mtx-setup")
_CONFIG_ENV = "MTX_SETUP_CONFIG"
_LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


@dataclasses.dataclass(frozen=True)
class InstallerConfig:
    """Resolved installer configuration."""

    install_dir: str = "/opt/mediamtx"
    image: str = "bluenviron/mediamtx:latest-ffmpeg"
    container_name: str = "mediamtx"
    hls_dir: str = "/tmp/hls"  # noqa: S108
    memory_limit: str = "512M"
    log_max_size: str = "10m"
    log_max_files: int = 3
    settle_seconds: float = 3.0
    ip_lookup_urls: tuple[str, ...] = ("https://ifconfig.me", "https://icanhazip.com")
    ip_lookup_timeout: float = 5.0
    log_tail: int = 50
    auto_log: bool = True
    log_level: str = "info"


def load_config(explicit: Path | None = None) -> InstallerConfig:
    """Load configuration with precedence: explicit > user > system > defaults.

    1. Start with defaults
    2. Overlay system-level ``/etc/mtx-setup/mtx-setup.yaml`` (if exists)
    3. Overlay user-level ``~/.mtx-setup/mtx-setup.yaml`` (if exists)
    4. Overlay *explicit*, or the file named by ``MTX_SETUP_CONFIG`` (if exists)
    """
    overrides: dict[str, Any] = {}

    system_config = _SYSTEM_CONFIG_DIR / _CONFIG_FILENAME
    if system_config.is_file():
        _merge_yaml(overrides, system_config)

    user_config = Path.home() / ".mtx-setup" / _CONFIG_FILENAME
    if user_config.is_file():
        _merge_yaml(overrides, user_config)

    if explicit is None:
        env_path = os.environ.get(_CONFIG_ENV)
        explicit = Path(env_path) if env_path else None
    if explicit is not None and explicit.is_file():
        _merge_yaml(overrides, explicit)

    return _build_config(overrides)


def _merge_yaml(target: dict[str, Any], path: Path) -> None:
    """Parse a YAML file and merge its values into *target*."""
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError:
        return
    if not isinstance(data, dict):
        return

    for key, value in data.items():
        if key == "logging" and isinstance(value, dict):
            # Flatten logging sub-keys into top-level config keys
            target.update(value)
        else:
            target[key] = value


def _build_config(overrides: dict[str, Any]) -> InstallerConfig:
    """Build an ``InstallerConfig`` from a dict of overrides."""
    field_names = {f.name for f in dataclasses.fields(InstallerConfig)}
    filtered = {k: v for k, v in overrides.items() if k in field_names}
    urls = filtered.get("ip_lookup_urls")
    if isinstance(urls, str):
        filtered["ip_lookup_urls"] = (urls,)
    elif isinstance(urls, list):
        filtered["ip_lookup_urls"] = tuple(str(u) for u in urls)
    level = str(filtered.get("log_level", "info")).strip().lower()
    filtered["log_level"] = level if level in _LOG_LEVELS else "info"
    return InstallerConfig(**filtered)
