import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from chirpy.responses import respond_with_error, respond_with_json


def test_error_response_body():
    response = respond_with_error(400, "Chirp is too long")
    assert response.status_code == 400
    assert response.content_type == "application/json"
    assert response.get_data() == b'{"error":"Chirp is too long"}'


def test_plain_string_payload():
    response = respond_with_json(200, "OK")
    assert response.status_code == 200
    assert response.get_data() == b'"OK"'


def test_html_characters_are_escaped():
    response = respond_with_json(200, {"a": "<b>"})
    assert response.get_data() == b'{"a":"\\u003cb\\u003e"}'
    assert json.loads(response.get_data()) == {"a": "<b>"}


def test_utc_datetime_uses_z_suffix():
    moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    response = respond_with_json(200, {"t": moment})
    assert json.loads(response.get_data())["t"] == "2024-01-02T03:04:05Z"


def test_datetime_round_trip_with_fraction():
    moment = datetime(2024, 1, 2, 3, 4, 5, 250000, tzinfo=timezone.utc)
    text = json.loads(respond_with_json(200, {"t": moment}).get_data())["t"]
    assert datetime.fromisoformat(text.replace("Z", "+00:00")) == moment


def test_uuid_round_trip():
    ident = uuid.uuid4()
    data = json.loads(respond_with_json(201, {"id": ident}).get_data())
    assert uuid.UUID(data["id"]) == ident


def test_dataclass_payload():
    @dataclass
    class Item:
        id: uuid.UUID
        name: str

    ident = uuid.uuid4()
    data = json.loads(respond_with_json(200, Item(ident, "thing")).get_data())
    assert data == {"id": str(ident), "name": "thing"}


def test_non_ascii_kept_as_is():
    response = respond_with_json(200, {"a": "é"})
    assert "é".encode("utf-8") in response.get_data()
    assert json.loads(response.get_data()) == {"a": "é"}


def test_unserializable_payload_gives_500():
    response = respond_with_json(200, {"a": object()})
    assert response.status_code == 500
    assert response.get_data() == b""
    assert response.content_type == "application/json"


def test_nan_gives_500():
    response = respond_with_json(200, float("nan"))
    assert response.status_code == 500