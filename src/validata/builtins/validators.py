"""Built-in validator functions.

Each validator takes the field value first, then its static rule
arguments, and returns a bool. Parameter annotations drive argument
conversion (see validata.funcs), so "min:3" reaches min_value as 3.0.

Categories:
- Presence: required
- Type: string, int, float, number, bool, list, dict
- Bounds: min, max, range, length, min_len, max_len, len_range
- Format: email, url, ip, uuid, regex, alpha, alpha_num, numeric
- Membership: in, not_in, contains, starts_with, ends_with
- Comparison: eq, ne, gt, lt
"""

import ipaddress
import re
from typing import Any

from validata.registry import ValidatorRegistry
from validata.types import is_empty

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

ALPHA_PATTERN = re.compile(r"^[a-zA-Z]+$")
ALPHA_NUM_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")
NUMERIC_PATTERN = re.compile(r"^[0-9]+$")


def _size(value: Any) -> int | None:
    """Length of a sized value, None for values without one."""
    if isinstance(value, (str, list, tuple, dict, set, frozenset)):
        return len(value)
    return None


def loose_eq(left: Any, right: Any) -> bool:
    """Equality that treats rule-string arguments like their typed values."""
    if left == right:
        return True
    return _as_text(left) == _as_text(right)


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# -----------------------------------------------------------------------------
# Presence & type
# -----------------------------------------------------------------------------


def required(value: Any) -> bool:
    return not is_empty(value)


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_int(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, str):
        try:
            int(value.strip())
        except ValueError:
            return False
        return True
    return False


def is_float(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value.strip())
        except ValueError:
            return False
        return True
    return False


def is_number(value: Any) -> bool:
    """Integers, floats, and numeric strings (not bool)."""
    return is_float(value)


def is_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    if isinstance(value, str):
        return value.strip().lower() in {"1", "0", "true", "false", "on", "off", "yes", "no"}
    return False


def is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_dict(value: Any) -> bool:
    return isinstance(value, dict)


# -----------------------------------------------------------------------------
# Bounds
# -----------------------------------------------------------------------------


def min_value(value: float, min: float) -> bool:
    return value is not None and value >= min


def max_value(value: float, max: float) -> bool:
    return value is not None and value <= max


def in_range(value: float, min: float, max: float) -> bool:
    return value is not None and min <= value <= max


def length(value: Any, size: int) -> bool:
    return _size(value) == size


def min_length(value: Any, min_len: int) -> bool:
    n = _size(value)
    return n is not None and n >= min_len


def max_length(value: Any, max_len: int) -> bool:
    n = _size(value)
    return n is not None and n <= max_len


def length_range(value: Any, min_len: int, max_len: int) -> bool:
    n = _size(value)
    return n is not None and min_len <= n <= max_len


# -----------------------------------------------------------------------------
# Formats
# -----------------------------------------------------------------------------


def is_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_PATTERN.match(value))


def is_url(value: Any) -> bool:
    return isinstance(value, str) and bool(URL_PATTERN.match(value))


def is_ip(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def is_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(UUID_PATTERN.match(value))


def matches(value: str, pattern: str) -> bool:
    """Test if the string contains a match for the regex pattern."""
    if value is None:
        return False
    try:
        return re.search(pattern, value) is not None
    except re.error:
        return False


def is_alpha(value: Any) -> bool:
    return isinstance(value, str) and bool(ALPHA_PATTERN.match(value))


def is_alpha_num(value: Any) -> bool:
    return isinstance(value, str) and bool(ALPHA_NUM_PATTERN.match(value))


def is_numeric(value: Any) -> bool:
    """Digits only. Non-negative ints qualify too."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value >= 0
    return isinstance(value, str) and bool(NUMERIC_PATTERN.match(value))


# -----------------------------------------------------------------------------
# Membership
# -----------------------------------------------------------------------------


def is_in(value: Any, *values: Any) -> bool:
    return any(loose_eq(value, candidate) for candidate in values)


def not_in(value: Any, *values: Any) -> bool:
    return not is_in(value, *values)


def contains(value: Any, search: Any) -> bool:
    if isinstance(value, str):
        return str(search) in value
    if isinstance(value, dict):
        return search in value or str(search) in value
    if isinstance(value, (list, tuple, set, frozenset)):
        return any(loose_eq(item, search) for item in value)
    return False


def starts_with(value: str, prefix: str) -> bool:
    return value is not None and value.startswith(prefix)


def ends_with(value: str, suffix: str) -> bool:
    return value is not None and value.endswith(suffix)


# -----------------------------------------------------------------------------
# Comparison
# -----------------------------------------------------------------------------


def eq(value: Any, other: Any) -> bool:
    return loose_eq(value, other)


def ne(value: Any, other: Any) -> bool:
    return not loose_eq(value, other)


def gt(value: float, other: float) -> bool:
    return value is not None and value > other


def lt(value: float, other: float) -> bool:
    return value is not None and value < other


BUILTIN_VALIDATORS = {
    "required": required,
    "string": is_string,
    "int": is_int,
    "float": is_float,
    "number": is_number,
    "bool": is_bool,
    "list": is_list,
    "dict": is_dict,
    "min": min_value,
    "max": max_value,
    "range": in_range,
    "length": length,
    "min_len": min_length,
    "max_len": max_length,
    "len_range": length_range,
    "email": is_email,
    "url": is_url,
    "ip": is_ip,
    "uuid": is_uuid,
    "regex": matches,
    "alpha": is_alpha,
    "alpha_num": is_alpha_num,
    "numeric": is_numeric,
    "in": is_in,
    "not_in": not_in,
    "contains": contains,
    "starts_with": starts_with,
    "ends_with": ends_with,
    "eq": eq,
    "ne": ne,
    "gt": gt,
    "lt": lt,
}


def register_builtin_validators() -> None:
    """Register all built-in validators with the ValidatorRegistry."""
    for name, func in BUILTIN_VALIDATORS.items():
        ValidatorRegistry.register_builtin(name, func)
