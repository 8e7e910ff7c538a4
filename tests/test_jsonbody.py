"""Tests for JSON body decoding."""

from dataclasses import dataclass

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from pydantic import BaseModel

from validata.api.jsonbody import JSONBodyError, decode_json, has_content_type, read_json


class UserIn(BaseModel):
    name: str
    age: int


@dataclass
class Point:
    x: int
    y: int


def status_and_detail(body, **kwargs):
    with pytest.raises(JSONBodyError) as exc_info:
        decode_json(body, **kwargs)
    return exc_info.value.status_code, exc_info.value.detail


class TestDecodeJson:
    def test_plain_value(self):
        assert decode_json(b' {"a": [1, 2]} ') == {"a": [1, 2]}

    def test_into_model(self):
        user = decode_json('{"name": "bob", "age": 30}', model=UserIn)
        assert user == UserIn(name="bob", age=30)

    def test_into_dataclass(self):
        assert decode_json('{"x": 1, "y": 2}', model=Point) == Point(1, 2)

    def test_empty_body(self):
        assert status_and_detail(b"   ") == (400, "body must not be empty")

    def test_malformed_with_position(self):
        assert status_and_detail(b'{"a": x}') == (400, "malformed json at position 6")

    def test_truncated(self):
        assert status_and_detail(b'{"a": 1') == (400, "malformed json")

    def test_trailing_value(self):
        assert status_and_detail(b'{"a": 1} {"b": 2}') == (
            400,
            "body must contain only one JSON object",
        )

    def test_type_mismatch_names_field(self):
        status, detail = status_and_detail('{"name": "bob", "age": "old"}', model=UserIn)
        assert status == 400
        assert detail.startswith("invalid value for field age")

    def test_unknown_field_in_strict_mode(self):
        body = '{"name": "bob", "age": 3, "admin": true}'
        assert decode_json(body, model=UserIn).name == "bob"
        assert status_and_detail(body, model=UserIn, strict=True) == (400, 'unknown field "admin"')

    def test_too_large(self):
        assert status_and_detail(b'{"a": "0123456789"}', max_bytes=8) == (
            413,
            "request body too large",
        )


class TestHasContentType:
    def test_matches_with_parameters(self):
        assert has_content_type({"content-type": "application/json; charset=utf-8"}, "application/json")

    def test_missing_header_is_octet_stream(self):
        assert has_content_type({}, "application/octet-stream")
        assert not has_content_type({}, "application/json")

    def test_other_type(self):
        assert not has_content_type({"content-type": "text/plain"}, "application/json")


class TestReadJson:
    @pytest.mark.asyncio
    async def test_requires_exactly_one_input(self):
        with pytest.raises(JSONBodyError) as exc_info:
            await read_json()
        assert exc_info.value.status_code == 415

    @pytest.mark.asyncio
    async def test_raw_data(self):
        assert await read_json(data=b'{"a": 1}') == {"a": 1}

    @pytest.fixture
    def client(self):
        app = FastAPI()

        @app.post("/users")
        async def create_user(request: Request):
            user = await read_json(request, model=UserIn, strict=True, max_bytes=256)
            return {"name": user.name, "age": user.age}

        with TestClient(app) as client:
            yield client

    def test_request_body(self, client):
        response = client.post("/users", json={"name": "bob", "age": 30})
        assert response.status_code == 200
        assert response.json() == {"name": "bob", "age": 30}

    def test_wrong_content_type(self, client):
        response = client.post("/users", content=b'{"name": "bob"}', headers={"content-type": "text/plain"})
        assert response.status_code == 415
        assert response.json()["detail"] == "content-type is not application/json"

    def test_malformed_request(self, client):
        response = client.post(
            "/users", content=b'{"name": ', headers={"content-type": "application/json"}
        )
        assert response.status_code == 400

    def test_oversized_request(self, client):
        response = client.post("/users", json={"name": "x" * 500, "age": 1})
        assert response.status_code == 413
