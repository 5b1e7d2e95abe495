"""Command-line client: edits service definitions and talks to the daemon."""

from __future__ import annotations

import os
import socket
import sys
from pathlib import Path
from typing import Sequence, Union

from eternal.config import ConfigError, disable_service, enable_service
from eternal.daemon import SOCKET_PATH
from eternal.ipc import Request, RequestType, decode_response, encode

USAGE = "Usage: eternal [start|stop|status|enable|disable|new|delete] <service_name>"

_DEFAULT_CONTENT = """# Command to execute
exec: ""
# Working directory
dir: ""
"""


class CommandError(Exception):
    """Raised when a command fails; the message is meant for the user."""


def eternal_home() -> Path:
    """Return the directory holding service definitions and the enabled list."""
    try:
        return Path.home() / ".eternal"
    except (RuntimeError, KeyError) as exc:
        raise CommandError(f"Failed to get user home: {exc}") from exc


def _base(base_dir: str | os.PathLike[str] | None) -> Path:
    return eternal_home() if base_dir is None else Path(base_dir)


def _service_file(base: Path, service: str) -> Path:
    return base / "services" / f"{service}.yaml"


def enable(service: str, base_dir: str | os.PathLike[str] | None = None) -> str:
    """Mark a defined service to start with the daemon."""
    base = _base(base_dir)
    service_file = _service_file(base, service)
    if not service_file.exists():
        raise CommandError(f"Service definition {service_file} not found")
    try:
        enable_service(base / "enabled.yaml", service)
    except ConfigError as exc:
        raise CommandError(f"Failed to enable service: {exc}") from exc
    return f"Service {service} enabled"


def disable(service: str, base_dir: str | os.PathLike[str] | None = None) -> str:
    """Stop a service from starting with the daemon."""
    base = _base(base_dir)
    try:
        disable_service(base / "enabled.yaml", service)
    except ConfigError as exc:
        raise CommandError(f"Failed to disable service: {exc}") from exc
    return f"Service {service} disabled"


def new_service(service: str, base_dir: str | os.PathLike[str] | None = None) -> str:
    """Create an empty service definition to be edited by hand."""
    base = _base(base_dir)
    services_dir = base / "services"
    try:
        services_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CommandError(f"Failed to create services directory: {exc}") from exc

    service_file = _service_file(base, service)
    if service_file.exists():
        raise CommandError(f"Service {service} already exists at {service_file}")
    try:
        service_file.write_text(_DEFAULT_CONTENT, encoding="utf-8")
    except OSError as exc:
        raise CommandError(f"Failed to create service file: {exc}") from exc
    return f"Service created. Edit config at: {service_file}"


def delete_service(service: str, base_dir: str | os.PathLike[str] | None = None) -> str:
    """Disable a service and remove its definition."""
    base = _base(base_dir)
    service_file = _service_file(base, service)
    if not service_file.exists():
        raise CommandError(f"Service {service} does not exist")
    try:
        disable_service(base / "enabled.yaml", service)
    except ConfigError as exc:
        raise CommandError(f"Failed to disable service before deletion: {exc}") from exc
    try:
        service_file.unlink()
    except OSError as exc:
        raise CommandError(f"Failed to delete service file: {exc}") from exc
    return f"Service {service} deleted"


def send_request(
    request_type: Union[RequestType, str],
    service: str,
    socket_path: str | os.PathLike[str] = SOCKET_PATH,
) -> str:
    """Send one request to the daemon and return its message on success."""
    try:
        kind: Union[RequestType, str] = RequestType(request_type)
    except ValueError:
        kind = request_type

    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as conn:
        try:
            conn.connect(str(socket_path))
        except OSError as exc:
            raise CommandError(
                f"Failed to connect to daemon: {exc}\nIs eternal-daemon running?"
            ) from exc
        try:
            conn.sendall(encode(Request(kind, service)))
        except OSError as exc:
            raise CommandError(f"Failed to send request: {exc}") from exc
        try:
            with conn.makefile("rb") as stream:
                response = decode_response(stream.readline())
        except (ValueError, OSError) as exc:
            raise CommandError(f"Failed to read response: {exc}") from exc

    if not response.success:
        raise CommandError(f"Error: {response.message}")
    return response.message


_DAEMON_COMMANDS = {
    "start": RequestType.START,
    "stop": RequestType.STOP,
    "status": RequestType.STATUS,
}

_LOCAL_COMMANDS = {
    "enable": enable,
    "disable": disable,
    "new": new_service,
    "delete": delete_service,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Run one client command and return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) < 2:
        print(USAGE)
        return 1

    command, service = args[0], args[1]
    try:
        if command in _DAEMON_COMMANDS:
            message = send_request(_DAEMON_COMMANDS[command], service)
        elif command in _LOCAL_COMMANDS:
            message = _LOCAL_COMMANDS[command](service)
        else:
            print(f"Unknown command: {command}")
            return 1
    except CommandError as exc:
        print(exc)
        return 1

    print(message)
    return 0