"""Shortcuts for building a Validation from common input shapes.

Usage:
    v = from_map({"name": "bob"})
    v = from_struct(user)            # also picks up rules declared on the class
    v = from_form(form_values, files)
    v = from_query("page=1&tags=a&tags=b")
    v = from_json(b'{"name": "bob"}')
"""

import logging
from collections.abc import Mapping
from typing import Any

from validata.api.jsonbody import decode_json
from validata.loader import rules_from_struct
from validata.sources import DataSource, FormData, MapData, StructData
from validata.validation import Validation

logger = logging.getLogger(__name__)


def new(data: Any = None, scene: str = "") -> Validation:
    """Build a Validation for any supported input.

    Data sources are used as-is, mappings become MapData and other objects
    go through from_struct.
    """
    if data is None:
        return empty(scene)
    if isinstance(data, DataSource):
        return Validation(data, scene)
    if isinstance(data, Mapping):
        return from_map(data, scene)
    return from_struct(data, scene)


def empty(scene: str = "") -> Validation:
    """A Validation without data, for building rules ahead of time."""
    return Validation(None, scene)


def from_map(data: Mapping[str, Any], scene: str = "") -> Validation:
    return Validation(MapData(data), scene)


def from_struct(obj: Any, scene: str = "") -> Validation:
    """Build a Validation over a record and apply its declared rules.

    Records may also define these hooks:
        config_validation(v): adjust the Validation (scenes, extra rules)
        messages(): mapping of message templates
        translates(): mapping of field labels
    """
    v = Validation(StructData(obj), scene)
    rules_from_struct(obj).apply(v)

    messages = getattr(obj, "messages", None)
    if callable(messages):
        v.add_messages(messages())
    translates = getattr(obj, "translates", None)
    if callable(translates):
        v.add_translates(translates())
    config_validation = getattr(obj, "config_validation", None)
    if callable(config_validation):
        config_validation(v)

    logger.debug("Built validation for %s with %d rules", type(obj).__name__, len(v.rules))
    return v


def from_form(values: Any, files: Mapping[str, Any] | None = None, scene: str = "") -> Validation:
    return Validation(FormData(values, files), scene)


def from_query(query: str | Any, scene: str = "") -> Validation:
    """Build a Validation from a query string or a multi-valued mapping."""
    if isinstance(query, str):
        return Validation(FormData.from_query_string(query), scene)
    return Validation(FormData(query), scene)


def from_json(body: bytes | str, scene: str = "", *, max_bytes: int | None = None) -> Validation:
    """Decode a JSON object body into a map-backed Validation.

    Raises:
        JSONBodyError: If the body is not exactly one JSON object
    """
    data = decode_json(body, model=dict[str, Any], max_bytes=max_bytes)
    return from_map(data, scene)
