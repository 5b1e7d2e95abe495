"""Messages exchanged between the command-line client and the daemon.

Each message is one JSON object on its own line.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class RequestType(str, Enum):
    """Actions a client may ask the daemon to perform."""

    START = "start"
    STOP = "stop"
    RESTART = "restart"
    STATUS = "status"


@dataclass
class Request:
    """A command sent to the daemon.

    ``type`` is a plain string when it names no known action, so that the
    daemon can answer it rather than fail to read it.
    """

    type: Union[RequestType, str]
    service: str = ""

    def to_dict(self) -> dict[str, Any]:
        kind = self.type.value if isinstance(self.type, RequestType) else self.type
        return {"type": kind, "service": self.service}


@dataclass
class Response:
    """The daemon's reply."""

    success: bool
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message}


def encode(message: Request | Response) -> bytes:
    """Serialise a message as one compact JSON line."""
    return (json.dumps(message.to_dict(), separators=(",", ":")) + "\n").encode("utf-8")


def _load_object(line: str | bytes) -> dict[str, Any]:
    data = json.loads(line)
    if not isinstance(data, dict):
        raise ValueError("message must be a JSON object")
    return data


def _field(data: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, kind):
        raise ValueError(f"field {key!r} must be of type {kind.__name__}")
    return value


def decode_request(line: str | bytes) -> Request:
    """Parse a request line; raises ValueError on malformed input."""
    data = _load_object(line)
    kind = _field(data, "type", str, "")
    service = _field(data, "service", str, "")
    try:
        request_type: Union[RequestType, str] = RequestType(kind)
    except ValueError:
        request_type = kind
    return Request(type=request_type, service=service)


def decode_response(line: str | bytes) -> Response:
    """Parse a response line; raises ValueError on malformed input."""
    data = _load_object(line)
    return Response(
        success=_field(data, "success", bool, False),
        message=_field(data, "message", str, ""),
    )