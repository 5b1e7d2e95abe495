"""Starting, stopping and tracking the processes behind services."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from eternal.config import ConfigError, ServiceConfig, load_config

logger = logging.getLogger(__name__)

_SUFFIX = ".yaml"


class ProcessStatus(str, Enum):
    """State of a managed service."""

    RUNNING = "running"
    STOPPED = "stopped"
    ERROR = "error"


class ServiceError(Exception):
    """Raised when a service cannot be found, started or stopped."""


@dataclass(eq=False)
class ManagedProcess:
    """A service definition together with its current process, if any."""

    config: ServiceConfig
    status: ProcessStatus = ProcessStatus.STOPPED
    process: subprocess.Popen | None = None
    error: Exception | None = None


def _exit_error(returncode: int) -> ServiceError | None:
    if returncode == 0:
        return None
    if returncode < 0:
        return ServiceError(f"signal: {-returncode}")
    return ServiceError(f"exit status {returncode}")


class Manager:
    """Keeps track of the services defined in one directory."""

    def __init__(self, services_dir: str | os.PathLike[str]) -> None:
        self.services_dir = Path(services_dir)
        self._processes: dict[str, ManagedProcess] = {}
        self._lock = threading.Lock()

    def load_services(self) -> None:
        """Register every ``*.yaml`` definition not already known.

        A missing directory is not an error; a definition that fails to load
        is logged and skipped.
        """
        with self._lock:
            try:
                entries = sorted(self.services_dir.iterdir(), key=lambda p: p.name)
            except FileNotFoundError:
                return

            for entry in entries:
                if entry.is_dir() or not entry.name.endswith(_SUFFIX):
                    continue
                name = entry.name[: -len(_SUFFIX)]
                try:
                    config = load_config(entry)
                except ConfigError as exc:
                    logger.warning("Failed to load service %s: %s", name, exc)
                    continue
                self._processes.setdefault(name, ManagedProcess(config=config))

    def _lookup(self, name: str) -> ManagedProcess:
        try:
            return self._processes[name]
        except KeyError:
            raise ServiceError(f"service {name} not found") from None

    def start_service(self, name: str) -> None:
        """Launch the service's command in the background."""
        with self._lock:
            managed = self._lookup(name)
            if managed.status is ProcessStatus.RUNNING:
                raise ServiceError(f"service {name} is already running")

            argv = managed.config.exec.split()
            if not argv:
                raise ServiceError("empty exec command")

            try:
                popen = subprocess.Popen(
                    argv,
                    cwd=managed.config.dir or None,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
            except OSError as exc:
                managed.status = ProcessStatus.ERROR
                managed.error = exc
                raise ServiceError(f"failed to start: {exc}") from exc

            managed.process = popen
            managed.status = ProcessStatus.RUNNING
            managed.error = None

        watcher = threading.Thread(
            target=self._watch, args=(name, managed, popen), daemon=True
        )
        watcher.start()

    def _watch(self, name: str, managed: ManagedProcess, popen: subprocess.Popen) -> None:
        returncode = popen.wait()
        with self._lock:
            if self._processes.get(name) is not managed or managed.process is not popen:
                return
            error = _exit_error(returncode)
            if error is None:
                managed.status = ProcessStatus.STOPPED
            else:
                managed.status = ProcessStatus.ERROR
                managed.error = error

    def stop_service(self, name: str) -> None:
        """Ask the service's process to stop; its status changes once it exits."""
        with self._lock:
            managed = self._lookup(name)
            if managed.status is not ProcessStatus.RUNNING or managed.process is None:
                raise ServiceError(f"service {name} is not running")

            popen = managed.process
            if os.name == "nt":
                popen.kill()
                return
            try:
                popen.send_signal(signal.SIGINT)
            except OSError:
                popen.kill()

    def get_status(self, name: str) -> ProcessStatus:
        """Return the current status of a known service."""
        with self._lock:
            return self._lookup(name).status