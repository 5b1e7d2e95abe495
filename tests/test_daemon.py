import json
import os
import shutil
import socket
import stat
import sys
import tempfile
import threading
import time
from pathlib import Path

import pytest

from eternal.daemon import autostart, handle_connection, handle_request, serve
from eternal.ipc import Request, RequestType, Response, decode_response, encode
from eternal.process import Manager, ServiceError


def _write_service(services_dir: Path, name: str, script: Path) -> None:
    command = f"{sys.executable} {script}"
    (services_dir / f"{name}.yaml").write_text(f"exec: {json.dumps(command)}\n")


@pytest.fixture
def manager(tmp_path):
    services_dir = tmp_path / "services"
    services_dir.mkdir()
    script = tmp_path / "sleeper.py"
    script.write_text("import time\ntime.sleep(60)\n")
    _write_service(services_dir, "web", script)
    mgr = Manager(services_dir)
    mgr.load_services()
    yield mgr
    try:
        mgr.stop_service("web")
    except ServiceError:
        pass


def _wait_until(predicate, timeout=10.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return False


def test_status_of_unknown_service(manager):
    response = handle_request(manager, Request(RequestType.STATUS, "ghost"))
    assert response == Response(False, "service ghost not found")


def test_status_of_loaded_service_is_stopped(manager):
    response = handle_request(manager, Request(RequestType.STATUS, "web"))
    assert response == Response(True, "stopped")


def test_start_status_stop_cycle(manager):
    started = handle_request(manager, Request(RequestType.START, "web"))
    assert started == Response(True, "Service web started")
    assert handle_request(manager, Request(RequestType.STATUS, "web")).message == "running"

    stopped = handle_request(manager, Request(RequestType.STOP, "web"))
    assert stopped == Response(True, "Service web stopped")
    assert _wait_until(
        lambda: handle_request(manager, Request(RequestType.STATUS, "web")).message != "running"
    )


def test_start_twice_reports_already_running(manager):
    handle_request(manager, Request(RequestType.START, "web"))
    again = handle_request(manager, Request(RequestType.START, "web"))
    assert again == Response(False, "service web is already running")


def test_stop_when_not_running(manager):
    response = handle_request(manager, Request(RequestType.STOP, "web"))
    assert response == Response(False, "service web is not running")


@pytest.mark.parametrize("kind", [RequestType.RESTART, "bogus"])
def test_unknown_request_type(manager, kind):
    response = handle_request(manager, Request(kind, "web"))
    assert response == Response(False, "Unknown request type")


def test_handle_connection_answers_request(manager):
    server_side, client_side = socket.socketpair()
    with client_side:
        client_side.sendall(encode(Request(RequestType.STATUS, "web")))
        handle_connection(server_side, manager)
        with client_side.makefile("rb") as stream:
            response = decode_response(stream.readline())
    assert response == Response(True, "stopped")


def test_handle_connection_closes_on_malformed_request(manager):
    server_side, client_side = socket.socketpair()
    with client_side:
        client_side.sendall(b"not json\n")
        handle_connection(server_side, manager)
        reply = client_side.recv(1024)
    assert reply == b""
    with pytest.raises(ValueError):
        decode_response(reply)
    assert manager.get_status("web").value == "stopped"


def test_autostart_starts_enabled_services(manager, tmp_path):
    enabled = tmp_path / "enabled.yaml"
    enabled.write_text("- web\n- ghost\n")
    assert autostart(manager, enabled) == ["web"]
    assert manager.get_status("web").value == "running"


def test_autostart_without_enabled_file(manager, tmp_path):
    assert autostart(manager, tmp_path / "missing.yaml") == []
    assert manager.get_status("web").value == "stopped"


def test_autostart_with_broken_enabled_file(manager, tmp_path):
    enabled = tmp_path / "enabled.yaml"
    enabled.write_text("just: a mapping\n")
    assert autostart(manager, enabled) == []


@pytest.fixture
def short_dir():
    path = Path(tempfile.mkdtemp(prefix="et-"))
    yield path
    shutil.rmtree(path, ignore_errors=True)


def test_serve_replaces_stale_file_and_answers(manager, short_dir):
    socket_path = short_dir / "d.sock"
    socket_path.write_text("stale")
    threading.Thread(target=serve, args=(manager, socket_path), daemon=True).start()

    def is_socket():
        try:
            return stat.S_ISSOCK(os.stat(socket_path).st_mode)
        except FileNotFoundError:
            return False

    assert _wait_until(is_socket)

    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as client:
        client.connect(str(socket_path))
        client.sendall(encode(Request(RequestType.STATUS, "ghost")))
        with client.makefile("rb") as stream:
            response = decode_response(stream.readline())
    assert response == Response(False, "service ghost not found")