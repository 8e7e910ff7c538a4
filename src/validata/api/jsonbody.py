"""Strict JSON body decoding for HTTP handlers.

Every failure is a JSONBodyError carrying an HTTP status code:

- 415: no input, both a request and raw data, or a non-JSON content type
- 413: body larger than the configured limit
- 400: empty body, malformed or truncated JSON, trailing values, field
  type mismatches, unknown fields in strict mode
- 500: anything else the decoder trips over

Usage:
    @app.post("/users")
    async def create_user(request: Request):
        payload = await read_json(request, model=UserIn, strict=True)
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from fastapi import HTTPException
from pydantic import BaseModel, TypeAdapter, ValidationError
from starlette.requests import Request

from validata.config import get_config

logger = logging.getLogger(__name__)

JSON_MIME = "application/json"


class JSONBodyError(HTTPException):
    """A request body that could not be decoded."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)

    def __str__(self) -> str:
        return f"{self.status_code}: {self.detail}"


def has_content_type(headers: Mapping[str, str], mimetype: str) -> bool:
    """Check the Content-Type header against mimetype.

    A missing header only matches application/octet-stream. Comma separated
    values are checked in order until one fails to parse.
    """
    content_type = headers.get("content-type", "")
    if not content_type:
        return mimetype == "application/octet-stream"

    for item in content_type.split(","):
        media_type = item.split(";", 1)[0].strip().lower()
        if not media_type or "/" not in media_type:
            break
        if media_type == mimetype:
            return True
    return False


def _model_fields(model: Any) -> set[str] | None:
    if isinstance(model, type) and issubclass(model, BaseModel):
        names = set()
        for name, info in model.model_fields.items():
            names.add(name)
            if info.alias:
                names.add(info.alias)
        return names
    fields = getattr(model, "__dataclass_fields__", None)
    if fields is not None:
        return set(fields)
    return None


def decode_json(
    data: bytes | str,
    *,
    model: Any = None,
    strict: bool = False,
    max_bytes: int | None = None,
) -> Any:
    """Decode exactly one JSON value, optionally into model.

    Args:
        data: Raw body
        model: Target type for pydantic's TypeAdapter (model, dataclass,
            TypedDict, dict[...]); None returns the plain decoded value
        strict: Reject object keys the model does not declare
        max_bytes: Size limit; defaults to the configured max_body_bytes

    Raises:
        JSONBodyError: See the module docstring for status codes
    """
    limit = get_config().max_body_bytes if max_bytes is None else max_bytes
    raw = data.encode() if isinstance(data, str) else bytes(data)
    if limit and len(raw) > limit:
        raise JSONBodyError(413, "request body too large")

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise JSONBodyError(400, f"body is not valid UTF-8 at position {exc.start}") from exc

    stripped = text.rstrip()
    start = len(text) - len(text.lstrip())
    if start >= len(stripped):
        raise JSONBodyError(400, "body must not be empty")

    try:
        value, end = json.JSONDecoder().raw_decode(text, start)
    except json.JSONDecodeError as exc:
        if exc.pos >= len(stripped):
            raise JSONBodyError(400, "malformed json") from exc
        raise JSONBodyError(400, f"malformed json at position {exc.pos}") from exc
    except RecursionError as exc:
        logger.warning("JSON body too deeply nested to decode")
        raise JSONBodyError(500, f"failed to decode json: {exc}") from exc

    if text[end:].strip():
        raise JSONBodyError(400, "body must contain only one JSON object")

    if model is None:
        return value

    if strict and isinstance(value, dict):
        known = _model_fields(model)
        if known is not None:
            unknown = [key for key in value if key not in known]
            if unknown:
                raise JSONBodyError(400, f'unknown field "{unknown[0]}"')

    try:
        return TypeAdapter(model).validate_python(value)
    except ValidationError as exc:
        error = exc.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        if location:
            raise JSONBodyError(400, f"invalid value for field {location}: {error['msg']}") from exc
        raise JSONBodyError(400, f"invalid value: {error['msg']}") from exc


async def read_json(
    request: Request | None = None,
    data: bytes | str | None = None,
    *,
    model: Any = None,
    strict: bool = False,
    max_bytes: int | None = None,
) -> Any:
    """Decode the JSON body of request, or raw data. Exactly one must be given.

    Raises:
        JSONBodyError: See the module docstring for status codes
    """
    if request is None and data is None:
        raise JSONBodyError(415, "no data provided")
    if request is not None and data is not None:
        raise JSONBodyError(415, "multiple data provided for decoding not supported")

    if request is not None:
        limit = get_config().max_body_bytes if max_bytes is None else max_bytes
        declared = request.headers.get("content-length", "")
        if limit and declared.isdigit() and int(declared) > limit:
            raise JSONBodyError(413, "request body too large")

        data = await request.body()
        if not has_content_type(request.headers, JSON_MIME):
            raise JSONBodyError(415, f"content-type is not {JSON_MIME}")

    return decode_json(data, model=model, strict=strict, max_bytes=max_bytes)
