"""Field labels and error message templates.

Message lookup for a failing (field, validator) pair, most specific first:
1. The rule's own message override
2. "field.validator" from the message map
3. "validator" from the message map
4. The built-in default template for the validator
5. The generic "_" template

Templates support these placeholders:
- {field}  - the field's display label
- {value}  - the checked value
- {args}   - all static arguments, comma separated
- {arg0}, {arg1}, ... - static arguments by position
- {<param>} - static arguments by the validator's parameter name, e.g. {min}
Unknown placeholders are left untouched.
"""

import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from validata.registry import validator_name

DEFAULT_MESSAGES: dict[str, str] = {
    "_": "{field} did not pass validate",
    "_filter": "{field} data is invalid",
    "_validate": "{field} did not pass validate",
    "required": "{field} is required to not be empty",
    "required_if": "{field} is required when {arg0} is in [{rest}]",
    "required_unless": "{field} is required unless {arg0} is in [{rest}]",
    "required_with": "{field} is required when [{args}] is present",
    "required_with_all": "{field} is required when [{args}] are all present",
    "required_without": "{field} is required when [{args}] is not present",
    "required_without_all": "{field} is required when none of [{args}] are present",
    "string": "{field} value must be a string",
    "int": "{field} value must be an integer",
    "float": "{field} value must be a float",
    "number": "{field} value must be a number",
    "bool": "{field} value must be a bool",
    "list": "{field} value must be a list",
    "dict": "{field} value must be a dict",
    "min": "{field} min value is {min}",
    "max": "{field} max value is {max}",
    "range": "{field} value must be in the range {min} - {max}",
    "length": "{field} length must be {size}",
    "min_len": "{field} min length is {min_len}",
    "max_len": "{field} max length is {max_len}",
    "len_range": "{field} length must be in the range {min_len} - {max_len}",
    "email": "{field} value is an invalid email address",
    "url": "{field} must be a valid URL address",
    "ip": "{field} value is an invalid IP address",
    "uuid": "{field} value is an invalid UUID",
    "regex": "{field} does not match the pattern {pattern}",
    "alpha": "{field} value contains only alpha char",
    "alpha_num": "{field} value contains only alpha and number chars",
    "numeric": "{field} value must be numeric",
    "in": "{field} value must be in the enum [{values}]",
    "not_in": "{field} value must not be in the enum [{values}]",
    "contains": "{field} value does not contain {search}",
    "starts_with": "{field} value does not start with {prefix}",
    "ends_with": "{field} value does not end with {suffix}",
    "eq": "{field} field did not equal the value {other}",
    "ne": "{field} field should not equal the value {other}",
    "gt": "{field} value should be greater than {other}",
    "lt": "{field} value should be less than {other}",
    "eq_field": "{field} value must be equal the field {arg0}",
    "ne_field": "{field} value cannot be equal to the field {arg0}",
    "gt_field": "{field} value must be greater than the field {arg0}",
    "gte_field": "{field} value should be greater or equal to the field {arg0}",
    "lt_field": "{field} value should be less than the field {arg0}",
    "lte_field": "{field} value should be less than or equal to the field {arg0}",
}

PLACEHOLDER = re.compile(r"\{(\w+)\}")


def _text(value: Any) -> str:
    if isinstance(value, (list, tuple, set, frozenset)):
        return ", ".join(_text(v) for v in value)
    if value is None:
        return ""
    return str(value)


def format_message(template: str, params: Mapping[str, Any]) -> str:
    """Substitute {name} placeholders from params, leaving unknown ones as-is."""

    def replace(match: re.Match) -> str:
        name = match.group(1)
        if name not in params:
            return match.group(0)
        return _text(params[name])

    return PLACEHOLDER.sub(replace, template)


class Translator:
    """Holds field labels and message templates.

    Later additions override earlier ones for the same key. Missing entries
    never block a run; they fall back to the raw field name and the
    built-in templates.
    """

    builtin_messages: dict[str, str] = dict(DEFAULT_MESSAGES)

    def __init__(
        self,
        labels: Mapping[str, str] | None = None,
        messages: Mapping[str, str] | None = None,
    ):
        self.labels: dict[str, str] = dict(labels or {})
        self.messages: dict[str, str] = dict(messages or {})

    @classmethod
    def add_builtin_messages(cls, messages: Mapping[str, str]) -> None:
        """Extend the process-wide default templates. Call at startup."""
        cls.builtin_messages.update(messages)

    @classmethod
    def reset_builtin_messages(cls) -> None:
        """Restore the shipped templates. Primarily for testing."""
        cls.builtin_messages = dict(DEFAULT_MESSAGES)

    @classmethod
    def from_yaml(cls, path: Path) -> "Translator":
        """Load a translator from a YAML file with "labels" and "messages" keys."""
        with Path(path).open() as fh:
            raw = yaml.safe_load(fh) or {}
        return cls(labels=raw.get("labels"), messages=raw.get("messages"))

    def add_label_map(self, labels: Mapping[str, str]) -> None:
        self.labels.update(labels)

    def add_messages(self, messages: Mapping[str, str]) -> None:
        self.messages.update(messages)

    def field_name(self, field: str) -> str:
        """Display label for a field, falling back to the raw name."""
        return self.labels.get(field, field)

    def has_message(self, key: str) -> bool:
        return key in self.messages or key in self.builtin_messages

    def template(self, field: str, validator: str, override: str = "") -> str:
        """Pick the message template for a failing (field, validator) pair."""
        if override:
            return override
        names = list(dict.fromkeys((validator, validator_name(validator))))
        for key in [f"{field}.{name}" for name in names] + names:
            if key in self.messages:
                return self.messages[key]
        for name in names:
            if name in self.builtin_messages:
                return self.builtin_messages[name]
        return self.builtin_messages.get("_", DEFAULT_MESSAGES["_"])

    def message(
        self,
        validator: str,
        field: str,
        args: Sequence[Any] = (),
        *,
        arg_names: Sequence[str] = (),
        value: Any = None,
        override: str = "",
    ) -> str:
        """Render the error message for a failing (field, validator) pair.

        Args:
            validator: Validator name as written in the rule
            field: Raw field name
            args: The rule's static arguments
            arg_names: The validator's parameter names for those arguments;
                a trailing variadic name collects the remaining arguments
            value: The value that failed
            override: Message attached to the rule itself
        """
        params: dict[str, Any] = {
            "field": self.field_name(field),
            "value": value,
            "args": list(args),
            "rest": list(args[1:]),
        }
        for index, arg in enumerate(args):
            params[f"arg{index}"] = arg
        for index, name in enumerate(arg_names):
            if index == len(arg_names) - 1 and len(args) > len(arg_names):
                params.setdefault(name, list(args[index:]))
            elif index < len(args):
                params.setdefault(name, args[index])

        return format_message(self.template(field, validator, override), params)
