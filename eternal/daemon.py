"""The background daemon: owns the services and answers client requests."""

from __future__ import annotations

import argparse
import logging
import os
import shutil
import signal
import socket
import threading
from pathlib import Path
from typing import Sequence

from eternal.config import ConfigError, load_enabled_services
from eternal.ipc import Request, RequestType, Response, decode_request, encode
from eternal.process import Manager, ServiceError

logger = logging.getLogger(__name__)

SOCKET_PATH = "/tmp/eternal.sock"


def handle_request(manager: Manager, request: Request) -> Response:
    """Carry out one request against the manager and describe the outcome."""
    try:
        if request.type == RequestType.START:
            manager.start_service(request.service)
            return Response(True, f"Service {request.service} started")
        if request.type == RequestType.STOP:
            manager.stop_service(request.service)
            return Response(True, f"Service {request.service} stopped")
        if request.type == RequestType.STATUS:
            return Response(True, manager.get_status(request.service).value)
    except ServiceError as exc:
        return Response(False, str(exc))
    return Response(False, "Unknown request type")


def handle_connection(conn: socket.socket, manager: Manager) -> None:
    """Read one request from ``conn``, answer it and close the connection."""
    with conn, conn.makefile("rb") as stream:
        try:
            request = decode_request(stream.readline())
        except (ValueError, OSError) as exc:
            logger.error("Failed to decode request: %s", exc)
            return
        response = handle_request(manager, request)
        try:
            conn.sendall(encode(response))
        except OSError as exc:
            logger.error("Failed to send response: %s", exc)


def autostart(manager: Manager, enabled_file: str | os.PathLike[str]) -> list[str]:
    """Start every enabled service and return the names that started."""
    try:
        names = load_enabled_services(enabled_file)
    except ConfigError as exc:
        logger.warning("Failed to load enabled services: %s", exc)
        return []

    started = []
    for name in names:
        try:
            manager.start_service(name)
        except ServiceError as exc:
            logger.error("Failed to auto-start service %s: %s", name, exc)
        else:
            logger.info("Auto-started service %s", name)
            started.append(name)
    return started


def _remove_stale(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def serve(manager: Manager, socket_path: str | os.PathLike[str] = SOCKET_PATH) -> None:
    """Listen on a Unix socket and answer each connection in its own thread."""
    path = Path(socket_path)
    _remove_stale(path)
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as listener:
        listener.bind(str(path))
        listener.listen()
        logger.info("Eternal Daemon started, listening on %s", path)
        while True:
            try:
                conn, _ = listener.accept()
            except OSError as exc:
                logger.error("Accept error: %s", exc)
                continue
            threading.Thread(
                target=handle_connection, args=(conn, manager), daemon=True
            ).start()


def _shutdown(signum: int, frame: object) -> None:
    logger.info("Shutting down...")
    raise SystemExit(0)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the daemon until interrupted."""
    parser = argparse.ArgumentParser(
        prog="eternal-daemon", description="Run the eternal service daemon."
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    try:
        base_dir = Path.home() / ".eternal"
    except (RuntimeError, KeyError) as exc:
        logger.error("Failed to get user home directory: %s", exc)
        return 1
    services_dir = base_dir / "services"
    enabled_file = base_dir / "enabled.yaml"

    try:
        services_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("Failed to create services directory: %s", exc)
        return 1

    manager = Manager(services_dir)
    try:
        manager.load_services()
    except OSError as exc:
        logger.warning("Failed to load some services: %s", exc)

    autostart(manager, enabled_file)

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    try:
        serve(manager, SOCKET_PATH)
    except OSError as exc:
        logger.error("Failed to listen on socket: %s", exc)
        return 1
    return 0