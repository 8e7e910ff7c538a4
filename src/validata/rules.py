"""Rule definitions for the filtering and validation phases.

A Rule pairs target fields with one validator and its static arguments.
A FilterRule pairs target fields with an ordered chain of filters. Rules
are evaluated in insertion order; a later rule may depend on values an
earlier one filtered or validated.

Rule strings use "|" between functions and ":" before comma separated
arguments:

    "required|len_range:3,20|in:admin,user"
    "trim|lower"
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from validata.builtins.validators import loose_eq
from validata.errors import RuleError
from validata.registry import filter_name, validator_name
from validata.types import is_empty

if TYPE_CHECKING:
    from validata.validation import Validation

# Validators whose single argument may itself contain commas
UNSPLIT_ARGS = {"regex", "not_regex"}


def split_fields(fields: str | Iterable[str]) -> tuple[str, ...]:
    """Normalize "a, b" or ["a", "b"] to ("a", "b")."""
    if isinstance(fields, str):
        items = fields.split(",")
    else:
        items = list(fields)
    result = tuple(f.strip() for f in items if f and f.strip())
    if not result:
        raise RuleError("a rule needs at least one field")
    return result


def parse_rule_string(rule: str, *, filters: bool = False) -> list[tuple[str, tuple[str, ...]]]:
    """Parse "required|min_len:3" into [("required", ()), ("min_len", ("3",))].

    Raises:
        RuleError: If a segment has no function name
    """
    parsed = []
    for segment in rule.split("|"):
        segment = segment.strip()
        if not segment:
            continue
        name, sep, raw = segment.partition(":")
        name = name.strip()
        if not name:
            raise RuleError(f"missing function name in rule segment {segment!r}")

        canonical = filter_name(name) if filters else validator_name(name)
        if not sep:
            args: tuple[str, ...] = ()
        elif canonical in UNSPLIT_ARGS:
            args = (raw,)
        else:
            args = tuple(arg.strip() for arg in raw.split(","))
        parsed.append((name, args))
    return parsed


@dataclass
class Rule:
    """A validation rule: fields, one validator, static args and policy flags.

    Attributes:
        fields: Target field names (dotted paths and "*" wildcards allowed)
        validator: Validator name as written; aliases resolve at call time
        args: Static arguments passed after the field value
        message: Message template overriding the translator's lookup
        skip_empty: Skip when the value is empty; None inherits the Validation setting
        stop_on_error: On failure, skip later rules for the same field
        check_default: Run default values through this rule even when the
            Validation does not check defaults
        condition: Optional pre-check; the rule only runs when it returns True
    """

    fields: tuple[str, ...]
    validator: str
    args: tuple[Any, ...] = ()
    message: str = ""
    skip_empty: bool | None = None
    stop_on_error: bool = False
    check_default: bool = False
    condition: Callable[[Validation], bool] | None = None

    def __post_init__(self) -> None:
        self.fields = split_fields(self.fields)
        self.validator = self.validator.strip() if self.validator else ""
        if not self.validator:
            raise RuleError(f"rule for {', '.join(self.fields)} has no validator")
        self.args = tuple(self.args)
        if self.is_context_check:
            min_args = CONTEXT_VALIDATORS[self.canonical][1]
            if len(self.args) < min_args:
                raise RuleError(
                    f"validator '{self.validator}' expects at least {min_args} argument(s), "
                    f"got {len(self.args)}"
                )

    @property
    def canonical(self) -> str:
        return validator_name(self.validator)

    @property
    def is_required(self) -> bool:
        """Required-style rules run even when the value is empty."""
        return self.canonical.startswith("required")

    @property
    def is_context_check(self) -> bool:
        """Validators that read other fields through the Validation."""
        return self.canonical in CONTEXT_VALIDATORS

    def with_message(self, message: str) -> Rule:
        self.message = message
        return self

    def with_skip_empty(self, flag: bool = True) -> Rule:
        self.skip_empty = flag
        return self

    def with_stop_on_error(self, flag: bool = True) -> Rule:
        self.stop_on_error = flag
        return self

    def with_check_default(self, flag: bool = True) -> Rule:
        self.check_default = flag
        return self

    def when(self, condition: Callable[[Validation], bool]) -> Rule:
        """Only run this rule when condition(validation) is true."""
        self.condition = condition
        return self


@dataclass
class FilterRule:
    """A sanitizing rule: fields plus an ordered chain of filters."""

    fields: tuple[str, ...]
    filters: list[tuple[str, tuple[Any, ...]]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.fields = split_fields(self.fields)

    @classmethod
    def from_string(cls, fields: str | Iterable[str], rule: str) -> FilterRule:
        return cls(fields=fields, filters=parse_rule_string(rule, filters=True))

    def add_filters(self, *specs: str) -> FilterRule:
        """Append filters given as "name" or "name:arg1,arg2"."""
        for spec in specs:
            self.filters.extend(parse_rule_string(spec, filters=True))
        return self

    def add_filter(self, name: str, *args: Any) -> FilterRule:
        """Append one filter with already-typed arguments."""
        self.filters.append((name, tuple(args)))
        return self


# =============================================================================
# Context validators: checks that read other fields
# =============================================================================


def _present(v: Validation, field: str) -> bool:
    value, found = v.get(field)
    return found and not is_empty(value)


def _required(v: Validation, field: str, value: Any, args: Sequence[Any]) -> bool:
    return not is_empty(value)


def _required_if(v: Validation, field: str, value: Any, args: Sequence[Any]) -> bool:
    other, found = v.get(args[0])
    if found and any(loose_eq(other, expect) for expect in args[1:]):
        return not is_empty(value)
    return True


def _required_unless(v: Validation, field: str, value: Any, args: Sequence[Any]) -> bool:
    other, found = v.get(args[0])
    if found and any(loose_eq(other, expect) for expect in args[1:]):
        return True
    return not is_empty(value)


def _required_with(v: Validation, field: str, value: Any, args: Sequence[Any]) -> bool:
    if any(_present(v, other) for other in args):
        return not is_empty(value)
    return True


def _required_with_all(v: Validation, field: str, value: Any, args: Sequence[Any]) -> bool:
    if all(_present(v, other) for other in args):
        return not is_empty(value)
    return True


def _required_without(v: Validation, field: str, value: Any, args: Sequence[Any]) -> bool:
    if any(not _present(v, other) for other in args):
        return not is_empty(value)
    return True


def _required_without_all(v: Validation, field: str, value: Any, args: Sequence[Any]) -> bool:
    if all(not _present(v, other) for other in args):
        return not is_empty(value)
    return True


def _ordered(left: Any, right: Any) -> tuple[Any, Any] | None:
    """Return a comparable pair: numbers as floats, otherwise same-typed values."""
    try:
        if not isinstance(left, bool) and not isinstance(right, bool):
            return float(left), float(right)
    except (TypeError, ValueError):
        pass
    if type(left) is type(right):
        return left, right
    return None


def _field_compare(op: Callable[[Any, Any], bool]):
    def check(v: Validation, field: str, value: Any, args: Sequence[Any]) -> bool:
        other, found = v.get(args[0])
        if not found:
            return False
        pair = _ordered(value, other)
        if pair is None:
            return False
        try:
            return op(*pair)
        except TypeError:
            return False

    return check


def _eq_field(v: Validation, field: str, value: Any, args: Sequence[Any]) -> bool:
    other, found = v.get(args[0])
    return found and loose_eq(value, other)


def _ne_field(v: Validation, field: str, value: Any, args: Sequence[Any]) -> bool:
    other, found = v.get(args[0])
    return not found or not loose_eq(value, other)


# name -> (check, minimum static argument count)
CONTEXT_VALIDATORS: dict[str, tuple[Callable[[Validation, str, Any, Sequence[Any]], bool], int]] = {
    "required": (_required, 0),
    "required_if": (_required_if, 2),
    "required_unless": (_required_unless, 2),
    "required_with": (_required_with, 1),
    "required_with_all": (_required_with_all, 1),
    "required_without": (_required_without, 1),
    "required_without_all": (_required_without_all, 1),
    "eq_field": (_eq_field, 1),
    "ne_field": (_ne_field, 1),
    "gt_field": (_field_compare(lambda a, b: a > b), 1),
    "gte_field": (_field_compare(lambda a, b: a >= b), 1),
    "lt_field": (_field_compare(lambda a, b: a < b), 1),
    "lte_field": (_field_compare(lambda a, b: a <= b), 1),
}
