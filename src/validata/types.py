"""Core types shared across the validata engine.

This module defines the small vocabulary every other module speaks:
- SourceKind: which DataSource implementation backs a Validation
- Provenance: where a validator/filter function came from
- ArgKind: declared parameter kinds used for argument conversion
"""

from enum import Enum
from typing import Any


# Error buckets used when a failure is not attached to a single validator
FILTER_ERROR = "_filter"
VALIDATE_ERROR = "_validate"


class SourceKind(Enum):
    """The shape of the record behind a DataSource."""

    MAP = "map"
    FORM = "form"
    STRUCT = "struct"


class Provenance(Enum):
    """Origin of a registered function.

    BUILTIN: Shipped with validata, registered at import time
    CUSTOM: Registered by the application or resolved from a record method
    """

    BUILTIN = "builtin"
    CUSTOM = "custom"


class ArgKind(Enum):
    """Parameter kinds a validator or filter can declare."""

    ANY = "any"
    STR = "str"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    LIST = "list"
    DICT = "dict"

    @classmethod
    def of_value(cls, value: Any) -> "ArgKind":
        """Classify a runtime value. Unknown types map to ANY."""
        # bool first: bool is a subclass of int
        if isinstance(value, bool):
            return cls.BOOL
        if isinstance(value, int):
            return cls.INT
        if isinstance(value, float):
            return cls.FLOAT
        if isinstance(value, str):
            return cls.STR
        if isinstance(value, (list, tuple, set, frozenset)):
            return cls.LIST
        if isinstance(value, dict):
            return cls.DICT
        return cls.ANY


def is_empty(value: Any) -> bool:
    """Return True if value is None, blank string, or empty collection."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False


def is_zero(value: Any) -> bool:
    """Return True if value is the zero value of its type.

    Unlike is_empty, whitespace-only strings are not zero, and numeric
    zero and False are.
    """
    if value is None:
        return True
    if isinstance(value, (bool, int, float, complex)):
        return not value
    if isinstance(value, (str, bytes, list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False
