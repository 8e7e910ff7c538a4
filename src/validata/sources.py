"""Data sources: a uniform read/write view over the record being validated.

Three implementations share one protocol:
- StructData: attribute-backed records (dataclasses, pydantic models, objects).
  Reports zero values and supports in-place write-back.
- MapData: mappings, including nested dicts and lists.
- FormData: multi-valued form or query values.

MapData and FormData are write-inert: set() returns the value unchanged and
never touches the underlying data. Only StructData reports is_zero; the
other sources always report False, so presence is their only signal.

Keys are dotted paths ("user.name", "items.0.id"). A "*" segment fans out
over a list or mapping and yields the list of matching values.
"""

import inspect
import logging
import typing
from collections.abc import Mapping, MutableMapping
from typing import Any, Callable, Protocol, runtime_checkable
from urllib.parse import parse_qs

from validata.funcs import convert_arg, kind_of_annotation
from validata.types import SourceKind, is_zero

logger = logging.getLogger(__name__)

_MISSING = object()


@runtime_checkable
class DataSource(Protocol):
    """Protocol every data source implements."""

    @property
    def kind(self) -> SourceKind:
        ...

    def get(self, key: str) -> tuple[Any, bool]:
        """Return (value, found)."""
        ...

    def try_get(self, key: str) -> tuple[Any, bool, bool]:
        """Return (value, found, is_zero)."""
        ...

    def set(self, key: str, value: Any) -> Any:
        """Store value under key and return the normalized value.

        Raises:
            ValueError: If the key cannot be written
        """
        ...


# =============================================================================
# Path helpers
# =============================================================================


def _child(node: Any, part: str) -> tuple[Any, bool]:
    if isinstance(node, Mapping):
        if part in node:
            return node[part], True
        return None, False

    if isinstance(node, (list, tuple)):
        try:
            index = int(part)
        except ValueError:
            return None, False
        if -len(node) <= index < len(node):
            return node[index], True
        return None, False

    if part.startswith("_") or isinstance(node, (str, bytes, int, float, bool)) or node is None:
        return None, False
    try:
        value = getattr(node, part, _MISSING)
    except Exception as e:
        # A failing property reads as a missing field
        logger.debug("Reading attribute '%s' failed: %s", part, e)
        return None, False
    if value is _MISSING or inspect.ismethod(value):
        return None, False
    return value, True


def _walk(node: Any, parts: list[str]) -> tuple[Any, bool]:
    if not parts:
        return node, True

    head, rest = parts[0], parts[1:]
    if head == "*":
        if isinstance(node, Mapping):
            items = list(node.values())
        elif isinstance(node, (list, tuple)):
            items = list(node)
        else:
            return None, False
        results = []
        for item in items:
            value, found = _walk(item, rest)
            if found:
                results.append(value)
        return results, True

    value, found = _child(node, head)
    if not found:
        return None, False
    return _walk(value, rest)


def lookup(root: Any, key: str) -> tuple[Any, bool]:
    """Resolve a dotted key against nested mappings, sequences and objects.

    A mapping key that literally contains dots wins over path traversal.
    """
    if isinstance(root, Mapping) and key in root:
        return root[key], True
    if not key:
        return None, False
    return _walk(root, key.split("."))


# =============================================================================
# MapData
# =============================================================================


class MapData:
    """Mapping-backed source.

    Example:
        src = MapData({"user": {"name": "bob", "tags": ["a", "b"]}})
        src.get("user.name")   # ("bob", True)
        src.get("user.tags.*") # (["a", "b"], True)
    """

    kind = SourceKind.MAP

    def __init__(self, data: Mapping[str, Any] | None = None):
        self.data: Mapping[str, Any] = data if data is not None else {}

    def get(self, key: str) -> tuple[Any, bool]:
        return lookup(self.data, key)

    def try_get(self, key: str) -> tuple[Any, bool, bool]:
        value, found = self.get(key)
        return value, found, False

    def set(self, key: str, value: Any) -> Any:
        # Write-inert: map sources do not support write-back
        return value

    def __repr__(self) -> str:
        return f"MapData({self.data!r})"


# =============================================================================
# FormData
# =============================================================================


def _form_values(values: Any) -> dict[str, list[Any]]:
    """Normalize form input to {key: [values...]}."""
    if values is None:
        return {}
    if hasattr(values, "getlist"):
        # starlette FormData / QueryParams, werkzeug MultiDict
        return {key: list(values.getlist(key)) for key in values.keys()}
    result: dict[str, list[Any]] = {}
    for key, value in values.items():
        result[key] = list(value) if isinstance(value, (list, tuple)) else [value]
    return result


class FormData:
    """Multi-valued form/query source.

    A key with a single value yields that value; several values (or a key
    written as "tags[]") yield a list. Uploaded files are kept separately.
    """

    kind = SourceKind.FORM

    def __init__(self, values: Any = None, files: Mapping[str, Any] | None = None):
        self.values = _form_values(values)
        self.files: dict[str, Any] = dict(files or {})

    @classmethod
    def from_query_string(cls, query: str) -> "FormData":
        return cls(parse_qs(query.lstrip("?"), keep_blank_values=True))

    def has(self, key: str) -> bool:
        return key in self.values

    def has_file(self, key: str) -> bool:
        return key in self.files

    def get_file(self, key: str) -> Any:
        return self.files.get(key)

    def get(self, key: str) -> tuple[Any, bool]:
        values = self.values.get(key)
        if values is None and key.endswith("[]"):
            values = self.values.get(key[:-2])
        if values is None:
            if key in self.files:
                return self.files[key], True
            return None, False

        if key.endswith("[]") or len(values) > 1:
            return list(values), True
        if not values:
            return "", True
        return values[0], True

    def try_get(self, key: str) -> tuple[Any, bool, bool]:
        value, found = self.get(key)
        return value, found, False

    def set(self, key: str, value: Any) -> Any:
        # Write-inert: form sources do not support write-back
        return value

    def __repr__(self) -> str:
        return f"FormData({self.values!r})"


# =============================================================================
# StructData
# =============================================================================


class StructData:
    """Attribute-backed source with live write-back.

    Works with dataclass instances, pydantic models and plain objects.
    set() coerces the value to the attribute's annotated type (str, int,
    float, bool, list, dict) before assigning it.
    """

    kind = SourceKind.STRUCT

    def __init__(self, obj: Any):
        if obj is None or isinstance(obj, (Mapping, str, bytes, int, float, list, tuple)):
            raise TypeError(f"StructData requires an object, got {type(obj).__name__}")
        self.obj = obj

    def get(self, key: str) -> tuple[Any, bool]:
        return lookup(self.obj, key)

    def try_get(self, key: str) -> tuple[Any, bool, bool]:
        value, found = self.get(key)
        return value, found, found and is_zero(value)

    def set(self, key: str, value: Any) -> Any:
        """Assign value in place and return what was stored.

        Raises:
            ValueError: If the path does not resolve to a writable field
            ArgumentConversionError: If value cannot be coerced to the field type
        """
        if key.endswith(".*"):
            key = key[:-2]
        parent_key, _, leaf = key.rpartition(".")

        parent = self.obj
        if parent_key:
            parent, found = lookup(self.obj, parent_key)
            if not found:
                raise ValueError(f"field '{key}' not found")

        if isinstance(parent, MutableMapping):
            parent[leaf] = value
            return value

        if isinstance(parent, list):
            try:
                parent[int(leaf)] = value
            except (ValueError, IndexError):
                raise ValueError(f"field '{key}' not found") from None
            return value

        if leaf.startswith("_") or not hasattr(parent, leaf):
            raise ValueError(f"field '{key}' not found")

        annotation = _field_annotations(parent).get(leaf)
        if annotation is not None:
            value = convert_arg(value, kind_of_annotation(annotation))
        setattr(parent, leaf, value)
        return value

    def func_value(self, name: str) -> Callable[..., Any] | None:
        """Return the record's bound method called name, if any."""
        if name.startswith("_"):
            return None
        attr = getattr(self.obj, name, None)
        if inspect.ismethod(attr):
            return attr
        return None

    def __repr__(self) -> str:
        return f"StructData({self.obj!r})"


def _field_annotations(obj: Any) -> dict[str, Any]:
    try:
        return typing.get_type_hints(type(obj))
    except Exception:
        return dict(getattr(type(obj), "__annotations__", {}))
