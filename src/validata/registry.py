"""Process-wide validator and filter registries.

Provides registration and lookup for:
- Built-in functions (shipped with validata, registered on import)
- Custom functions (application-specific, registered at startup)

The tables are write-rarely / read-often. Populate them at process start,
before validating concurrently; later writes must be synchronized by the
caller. Per-Validation registrations never touch these tables.
"""

from typing import Any, Callable

from validata.funcs import FuncMeta
from validata.types import Provenance

VALIDATOR_ALIASES: dict[str, str] = {
    "between": "range",
    "enum": "in",
    "regexp": "regex",
    "str": "string",
    "integer": "int",
    "boolean": "bool",
    "mail": "email",
    "gte": "min",
    "lte": "max",
    "len": "length",
    "size": "length",
    "array": "list",
    "map": "dict",
    "not_enum": "not_in",
}

FILTER_ALIASES: dict[str, str] = {
    "strip": "trim",
    "lstrip": "ltrim",
    "rstrip": "rtrim",
    "lowercase": "lower",
    "uppercase": "upper",
    "to_int": "int",
    "integer": "int",
    "to_float": "float",
    "to_bool": "bool",
    "boolean": "bool",
    "to_str": "str",
    "string": "str",
    "str_to_list": "split",
    "camel": "camel_case",
    "snake": "snake_case",
}


def validator_name(name: str) -> str:
    """Resolve a validator alias to its canonical name."""
    return VALIDATOR_ALIASES.get(name, name)


def filter_name(name: str) -> str:
    """Resolve a filter alias to its canonical name."""
    return FILTER_ALIASES.get(name, name)


class _FunctionTable:
    """Shared behaviour for the validator and filter tables."""

    _funcs: dict[str, FuncMeta]
    _is_validator: bool = True

    @classmethod
    def canonical(cls, name: str) -> str:
        return validator_name(name) if cls._is_validator else filter_name(name)

    @classmethod
    def register(
        cls,
        name: str,
        func: Callable[..., Any],
        provenance: Provenance = Provenance.CUSTOM,
    ) -> FuncMeta:
        """Register a function by name, replacing any previous entry.

        Args:
            name: Name used in rules (aliases are not resolved here)
            func: The callable; its shape is checked immediately
            provenance: BUILTIN or CUSTOM

        Returns:
            The captured call metadata

        Raises:
            RegistrationError: If the callable has an invalid shape
        """
        meta = FuncMeta.from_callable(name, func, provenance, validator=cls._is_validator)
        cls._funcs[name] = meta
        return meta

    @classmethod
    def register_builtin(cls, name: str, func: Callable[..., Any]) -> None:
        """Register a built-in function.

        Idempotent - an existing entry (built-in or custom) is kept.
        """
        if name in cls._funcs:
            return
        cls.register(name, func, Provenance.BUILTIN)

    @classmethod
    def find(cls, name: str) -> FuncMeta | None:
        """Look up a function by name or alias, None if not registered."""
        meta = cls._funcs.get(name)
        if meta is None:
            meta = cls._funcs.get(cls.canonical(name))
        return meta

    @classmethod
    def get(cls, name: str) -> FuncMeta:
        """Get a registered function by name or alias.

        Raises:
            ValueError: If the function is not registered
        """
        meta = cls.find(name)
        if meta is None:
            raise ValueError(f"Function '{name}' is not registered.")
        return meta

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return cls.find(name) is not None

    @classmethod
    def list_registered(cls) -> list[str]:
        """List all registered names."""
        return sorted(cls._funcs.keys())

    @classmethod
    def provenances(cls) -> dict[str, Provenance]:
        """Map every registered name to its provenance."""
        return {name: meta.provenance for name, meta in cls._funcs.items()}

    @classmethod
    def unregister(cls, name: str) -> None:
        cls._funcs.pop(name, None)

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._funcs.clear()


class ValidatorRegistry(_FunctionTable):
    """Global table of validator functions.

    A validator receives the field value (plus static rule arguments) and
    returns a truthy value when the value is acceptable.

    Example:
        ValidatorRegistry.register("even", lambda value: int(value) % 2 == 0)
    """

    _funcs: dict[str, FuncMeta] = {}
    _is_validator = True


class FilterRegistry(_FunctionTable):
    """Global table of filter (sanitizer) functions.

    A filter receives the field value (plus static rule arguments) and
    returns the transformed value. It signals failure by raising
    ValueError or TypeError.
    """

    _funcs: dict[str, FuncMeta] = {}
    _is_validator = False


def add_validator(name: str, func: Callable[..., Any]) -> FuncMeta:
    """Register a custom validator globally."""
    return ValidatorRegistry.register(name, func)


def add_filter(name: str, func: Callable[..., Any]) -> FuncMeta:
    """Register a custom filter globally."""
    return FilterRegistry.register(name, func)
