"""Built-in filter (sanitizer) functions.

A filter takes the field value first, then its static rule arguments, and
returns the transformed value. Failures are signalled by raising
ValueError or TypeError; the engine records them as filter errors.
"""

import html
import re
from typing import Any
from urllib.parse import quote_plus, unquote_plus

from validata.funcs import convert_arg
from validata.registry import FilterRegistry
from validata.types import ArgKind

TAG_PATTERN = re.compile(r"<[^>]*>")
_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|[\s\-]+")


def trim(value: str, chars: str | None = None) -> str:
    return value.strip(chars)


def ltrim(value: str, chars: str | None = None) -> str:
    return value.lstrip(chars)


def rtrim(value: str, chars: str | None = None) -> str:
    return value.rstrip(chars)


def lower(value: str) -> str:
    return value.lower()


def upper(value: str) -> str:
    return value.upper()


def title(value: str) -> str:
    return value.title()


def to_int(value: Any) -> int:
    return convert_arg(value, ArgKind.INT)


def to_float(value: Any) -> float:
    return convert_arg(value, ArgKind.FLOAT)


def to_bool(value: Any) -> bool:
    return convert_arg(value, ArgKind.BOOL)


def to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def strip_tags(value: str) -> str:
    return TAG_PATTERN.sub("", value)


def escape_html(value: str) -> str:
    return html.escape(value)


def url_encode(value: str) -> str:
    return quote_plus(value)


def url_decode(value: str) -> str:
    return unquote_plus(value)


def split(value: str, sep: str = ",") -> list[str]:
    """Split a string into a list of trimmed, non-empty parts."""
    return [part.strip() for part in value.split(sep) if part.strip()]


def join(value: list, sep: str = ",") -> str:
    return sep.join(str(item) for item in value)


def unique(value: list) -> list:
    """Drop duplicates, keeping first-seen order."""
    return list(dict.fromkeys(value))


def substr(value: str, start: int, length: int = -1) -> str:
    if length < 0:
        return value[start:]
    return value[start:start + length]


def replace(value: str, old: str, new: str) -> str:
    return value.replace(old, new)


def snake_case(value: str) -> str:
    """Convert "userName" or "User Name" to "user_name"."""
    return _WORD_BOUNDARY.sub("_", value.strip()).lower()


def camel_case(value: str) -> str:
    """Convert "user_name" or "user-name" to "userName"."""
    parts = [p for p in re.split(r"[_\-\s]+", value.strip()) if p]
    if not parts:
        return ""
    return parts[0].lower() + "".join(p[:1].upper() + p[1:] for p in parts[1:])


BUILTIN_FILTERS = {
    "trim": trim,
    "ltrim": ltrim,
    "rtrim": rtrim,
    "lower": lower,
    "upper": upper,
    "title": title,
    "int": to_int,
    "float": to_float,
    "bool": to_bool,
    "str": to_str,
    "strip_tags": strip_tags,
    "escape_html": escape_html,
    "url_encode": url_encode,
    "url_decode": url_decode,
    "split": split,
    "join": join,
    "unique": unique,
    "substr": substr,
    "replace": replace,
    "snake_case": snake_case,
    "camel_case": camel_case,
}


def register_builtin_filters() -> None:
    """Register all built-in filters with the FilterRegistry."""
    for name, func in BUILTIN_FILTERS.items():
        FilterRegistry.register_builtin(name, func)
