"""Service definitions and the list of services enabled at daemon start."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


class ConfigError(Exception):
    """Raised when a configuration file cannot be read, parsed or validated."""


@dataclass
class ServiceConfig:
    """How to run one service: the command line and its working directory."""

    exec: str
    dir: str = ""


def _scalar(value: Any, context: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        raise ConfigError(f"failed to parse {context}: expected a string, got {type(value).__name__}")
    return str(value)


def _read(path: str | os.PathLike[str], what: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to read {what}: {exc}") from exc


def _parse(text: str, what: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse {what}: {exc}") from exc


def load_config(path: str | os.PathLike[str]) -> ServiceConfig:
    """Load a service definition from a YAML file; ``exec`` must be set."""
    data = _parse(_read(path, "config file"), "config file")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("failed to parse config file: expected a mapping")

    config = ServiceConfig(
        exec=_scalar(data.get("exec"), "config file"),
        dir=_scalar(data.get("dir"), "config file"),
    )
    if not config.exec:
        raise ConfigError("exec field is required")
    return config


def load_enabled_services(path: str | os.PathLike[str]) -> list[str]:
    """Return the enabled service names; a missing file means none."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except OSError as exc:
        raise ConfigError(f"failed to read enabled services: {exc}") from exc

    data = _parse(text, "enabled services")
    if data is None:
        return []
    if not isinstance(data, list):
        raise ConfigError("failed to parse enabled services: expected a list")
    return [_scalar(item, "enabled services") for item in data]


def _save_enabled_services(path: str | os.PathLike[str], services: list[str]) -> None:
    text = yaml.safe_dump(list(services), default_flow_style=False)
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"failed to create directory: {exc}") from exc
    try:
        target.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to write enabled services: {exc}") from exc


def enable_service(path: str | os.PathLike[str], name: str) -> None:
    """Add ``name`` to the enabled list unless it is already there."""
    services = load_enabled_services(path)
    if name in services:
        return
    services.append(name)
    _save_enabled_services(path, services)


def disable_service(path: str | os.PathLike[str], name: str) -> None:
    """Remove ``name`` from the enabled list; nothing is written if it is absent."""
    services = load_enabled_services(path)
    remaining = [service for service in services if service != name]
    if len(remaining) == len(services):
        return
    _save_enabled_services(path, remaining)