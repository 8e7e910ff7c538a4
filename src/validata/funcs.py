"""Call metadata for validator and filter functions.

Every function the engine can invoke by name is wrapped in a FuncMeta that
captures, at registration time, how many arguments it takes and which kind
each parameter declares. At call time the field value and the rule's static
arguments are converted to those kinds through an explicit conversion table,
so a rule written as "range:1,10" can feed string arguments into a function
declared as range(value: float, min: float, max: float).

Argument 0 is always the field value; static rule arguments follow.
"""

import inspect
import types
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Union

from validata.errors import ArgumentConversionError, RegistrationError, RuleError
from validata.types import ArgKind, Provenance

_ANNOTATION_KINDS: dict[Any, ArgKind] = {
    str: ArgKind.STR,
    int: ArgKind.INT,
    float: ArgKind.FLOAT,
    bool: ArgKind.BOOL,
    list: ArgKind.LIST,
    tuple: ArgKind.LIST,
    set: ArgKind.LIST,
    dict: ArgKind.DICT,
}

# Unresolvable string annotations (e.g. forward refs on lambdas' owners)
_ANNOTATION_NAMES: dict[str, ArgKind] = {
    "str": ArgKind.STR,
    "int": ArgKind.INT,
    "float": ArgKind.FLOAT,
    "bool": ArgKind.BOOL,
    "list": ArgKind.LIST,
    "dict": ArgKind.DICT,
}

_TRUE_STRINGS = {"1", "true", "on", "yes"}
_FALSE_STRINGS = {"0", "false", "off", "no", ""}


def kind_of_annotation(annotation: Any) -> ArgKind:
    """Map a parameter annotation to an ArgKind.

    Optional[X] / X | None resolve to X. Anything unrecognised is ANY.
    """
    if annotation is inspect.Parameter.empty or annotation is Any:
        return ArgKind.ANY
    if isinstance(annotation, str):
        return _ANNOTATION_NAMES.get(annotation.split("[")[0].strip(), ArgKind.ANY)

    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(members) == 1:
            return kind_of_annotation(members[0])
        return ArgKind.ANY
    if origin is not None:
        annotation = origin

    return _ANNOTATION_KINDS.get(annotation, ArgKind.ANY)


# =============================================================================
# Conversion table
# =============================================================================


def _to_str(value: Any, actual: ArgKind) -> str:
    if actual is ArgKind.STR:
        return value
    if actual is ArgKind.BOOL:
        return "true" if value else "false"
    if actual in (ArgKind.INT, ArgKind.FLOAT):
        return str(value)
    raise TypeError(actual)


def _to_int(value: Any, actual: ArgKind) -> int:
    if actual is ArgKind.INT:
        return value
    if actual is ArgKind.FLOAT:
        if not value.is_integer():
            raise ValueError(value)
        return int(value)
    if actual is ArgKind.STR:
        return int(value.strip())
    raise TypeError(actual)


def _to_float(value: Any, actual: ArgKind) -> float:
    if actual in (ArgKind.INT, ArgKind.FLOAT):
        return float(value)
    if actual is ArgKind.STR:
        return float(value.strip())
    raise TypeError(actual)


def _to_bool(value: Any, actual: ArgKind) -> bool:
    if actual is ArgKind.BOOL:
        return value
    if actual is ArgKind.STR:
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(value)
    if actual is ArgKind.INT and value in (0, 1):
        return bool(value)
    raise TypeError(actual)


def _to_list(value: Any, actual: ArgKind) -> list:
    if actual is ArgKind.LIST:
        return list(value)
    if actual is ArgKind.STR:
        return [item.strip() for item in value.split(",")] if value else []
    raise TypeError(actual)


def _to_dict(value: Any, actual: ArgKind) -> dict:
    if actual is ArgKind.DICT:
        return value
    raise TypeError(actual)


_CONVERTERS: dict[ArgKind, Callable[[Any, ArgKind], Any]] = {
    ArgKind.STR: _to_str,
    ArgKind.INT: _to_int,
    ArgKind.FLOAT: _to_float,
    ArgKind.BOOL: _to_bool,
    ArgKind.LIST: _to_list,
    ArgKind.DICT: _to_dict,
}


def convert_arg(value: Any, wanted: ArgKind, index: int = 0) -> Any:
    """Convert value to the wanted kind.

    None and ANY pass through untouched.

    Raises:
        ArgumentConversionError: If no conversion exists or it fails
    """
    if wanted is ArgKind.ANY or value is None:
        return value

    actual = ArgKind.of_value(value)
    try:
        return _CONVERTERS[wanted](value, actual)
    except (ValueError, TypeError, OverflowError):
        raise ArgumentConversionError(index, actual, wanted, value) from None


# =============================================================================
# FuncMeta
# =============================================================================


@dataclass(frozen=True)
class ParamSpec:
    """Declared shape of one positional parameter."""

    name: str
    kind: ArgKind = ArgKind.ANY
    required: bool = True


@dataclass
class FuncMeta:
    """A callable plus the argument metadata needed to invoke it by name.

    Attributes:
        name: Registered name
        func: The callable itself
        provenance: BUILTIN or CUSTOM
        params: Positional parameters, params[0] receives the field value
        variadic: The *args parameter, if any
    """

    name: str
    func: Callable[..., Any]
    provenance: Provenance = Provenance.CUSTOM
    params: tuple[ParamSpec, ...] = field(default_factory=tuple)
    variadic: ParamSpec | None = None

    @classmethod
    def from_callable(
        cls,
        name: str,
        func: Any,
        provenance: Provenance = Provenance.CUSTOM,
        *,
        validator: bool = True,
    ) -> "FuncMeta":
        """Inspect a callable and capture its call metadata.

        Args:
            name: Name the function is registered under
            func: The callable
            provenance: BUILTIN or CUSTOM
            validator: If True the return annotation, when present, must be bool

        Raises:
            RegistrationError: If the callable cannot serve as a validator/filter
        """
        if not callable(func):
            raise RegistrationError(name, f"expected a callable, got {type(func).__name__}")

        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError) as e:
            raise RegistrationError(name, f"cannot inspect signature: {e}") from e

        try:
            hints = typing.get_type_hints(func)
        except Exception:
            # Unresolvable forward references: fall back to raw annotations
            hints = {}

        params: list[ParamSpec] = []
        variadic: ParamSpec | None = None
        for param in signature.parameters.values():
            annotation = hints.get(param.name, param.annotation)
            if param.kind in (
                inspect.Parameter.POSITIONAL_ONLY,
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
            ):
                params.append(
                    ParamSpec(
                        name=param.name,
                        kind=kind_of_annotation(annotation),
                        required=param.default is inspect.Parameter.empty,
                    )
                )
            elif param.kind is inspect.Parameter.VAR_POSITIONAL:
                variadic = ParamSpec(param.name, kind_of_annotation(annotation), False)
            elif (
                param.kind is inspect.Parameter.KEYWORD_ONLY
                and param.default is inspect.Parameter.empty
            ):
                raise RegistrationError(
                    name, f"keyword-only parameter '{param.name}' must have a default"
                )

        if not params and variadic is None:
            raise RegistrationError(name, "must accept at least one argument (the value)")

        if validator:
            returns = hints.get("return", signature.return_annotation)
            if returns not in (inspect.Signature.empty, bool, "bool"):
                raise RegistrationError(name, f"must return bool, annotated {returns!r}")

        return cls(
            name=name,
            func=func,
            provenance=provenance,
            params=tuple(params),
            variadic=variadic,
        )

    @property
    def min_args(self) -> int:
        """Number of required positional arguments, value included."""
        return sum(1 for p in self.params if p.required)

    @property
    def max_args(self) -> int | None:
        """Maximum positional arguments, or None when variadic."""
        if self.variadic is not None:
            return None
        return len(self.params)

    def arg_names(self) -> list[str]:
        """Names of the static (non-value) parameters, for message placeholders."""
        names = [p.name for p in self.params[1:]]
        if self.variadic is not None:
            names.append(self.variadic.name)
        return names

    def check_arity(self, num_static: int) -> None:
        """Ensure a rule supplies an acceptable number of static arguments.

        Raises:
            RuleError: If too few or too many arguments are supplied
        """
        total = num_static + 1
        max_args = self.max_args
        if total >= self.min_args and (max_args is None or total <= max_args):
            return

        if max_args is None:
            expected = f"at least {self.min_args - 1}"
        elif max_args == self.min_args:
            expected = str(max_args - 1)
        else:
            expected = f"{self.min_args - 1} to {max_args - 1}"
        raise RuleError(
            f"function '{self.name}' expects {expected} argument(s), got {num_static}"
        )

    def spec_at(self, index: int) -> ParamSpec:
        if index < len(self.params):
            return self.params[index]
        if self.variadic is not None:
            return self.variadic
        raise IndexError(index)

    def build_args(self, value: Any, args: tuple | list = ()) -> list[Any]:
        """Convert the value and static args to the declared parameter kinds.

        Raises:
            RuleError: On an arity mismatch
            ArgumentConversionError: If an argument cannot be converted
        """
        self.check_arity(len(args))
        converted = []
        for index, raw in enumerate([value, *args]):
            converted.append(convert_arg(raw, self.spec_at(index).kind, index))
        return converted

    def call(self, value: Any, args: tuple | list = ()) -> Any:
        """Convert arguments and invoke the function."""
        return self.func(*self.build_args(value, args))
