import pytest

from eternal.ipc import (
    Request,
    RequestType,
    Response,
    decode_request,
    decode_response,
    encode,
)


def test_encode_request_wire_format():
    assert encode(Request(RequestType.START, "web")) == b'{"type":"start","service":"web"}\n'


def test_encode_response_wire_format():
    assert encode(Response(True, "Service web started")) == (
        b'{"success":true,"message":"Service web started"}\n'
    )


@pytest.mark.parametrize("kind", list(RequestType))
def test_request_round_trip(kind):
    request = Request(kind, "worker")
    decoded = decode_request(encode(request))
    assert decoded == request
    assert decoded.type is kind


@pytest.mark.parametrize("success", [True, False])
def test_response_round_trip(success):
    response = Response(success, "message text")
    assert decode_response(encode(response)) == response


@pytest.mark.parametrize(
    "wire, expected",
    [
        ("start", RequestType.START),
        ("stop", RequestType.STOP),
        ("restart", RequestType.RESTART),
        ("status", RequestType.STATUS),
    ],
)
def test_request_type_wire_values(wire, expected):
    decoded = decode_request(f'{{"type":"{wire}","service":"web"}}')
    assert decoded.type is expected
    assert encode(decoded) == f'{{"type":"{wire}","service":"web"}}\n'.encode()


def test_unknown_request_type_is_kept_as_string():
    decoded = decode_request('{"type":"reload","service":"web"}')
    assert decoded.type == "reload"
    assert not isinstance(decoded.type, RequestType)
    assert encode(decoded) == b'{"type":"reload","service":"web"}\n'


def test_missing_request_fields_default_to_empty():
    assert decode_request("{}") == Request("", "")


def test_missing_response_fields_default():
    assert decode_response("{}") == Response(False, "")


def test_decode_request_accepts_bytes():
    assert decode_request(b'{"type":"stop","service":"db"}\n') == Request(RequestType.STOP, "db")


def test_decode_request_invalid_json():
    with pytest.raises(ValueError):
        decode_request("not json")


def test_decode_request_rejects_non_object():
    with pytest.raises(ValueError):
        decode_request('["start","web"]')


def test_decode_request_rejects_wrong_field_type():
    with pytest.raises(ValueError):
        decode_request('{"type":"start","service":5}')


def test_decode_response_rejects_wrong_field_type():
    with pytest.raises(ValueError):
        decode_response('{"success":"yes","message":"ok"}')