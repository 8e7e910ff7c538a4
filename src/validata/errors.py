"""Exceptions and the error report container.

Exceptions are raised only for usage defects (no data, malformed
registrations, broken rules). Bad input data never raises; it ends up as
entries in an Errors report.
"""

from typing import Any

from validata.types import ArgKind


class ValidataError(Exception):
    """Base class for all validata exceptions."""


class EmptyDataError(ValidataError):
    """Raised when validating without a data source."""

    def __init__(self, message: str = "please input data use for validate"):
        super().__init__(message)


class RegistrationError(ValidataError):
    """Raised when a validator or filter callable has an invalid shape."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"invalid function '{name}': {reason}")


class RuleError(ValidataError):
    """Raised for rule construction defects (unknown function, bad arity)."""


class ArgumentConversionError(ValidataError):
    """An argument could not be coerced to the declared parameter kind.

    Attributes:
        index: Position of the argument (0 is the field value)
        actual: Kind of the supplied value
        wanted: Kind the function declares
    """

    def __init__(self, index: int, actual: ArgKind, wanted: ArgKind, value: Any = None):
        self.index = index
        self.actual = actual
        self.wanted = wanted
        self.value = value
        super().__init__(
            f"cannot convert {actual.value} to arg#{index}({wanted.value})"
        )


class ValidationFailed(ValidataError):
    """Raised by callers who prefer exceptions over checking is_fail()."""

    def __init__(self, errors: "Errors"):
        self.errors = errors
        super().__init__(str(errors))


class Errors(dict):
    """Ordered mapping of field -> {validator: message}.

    Insertion order is preserved on both levels, so the first entry is
    always the first failure of the run.

    Example:
        errs = Errors()
        errs.add("name", "required", "name is required")
        errs.one()  # "name is required"
    """

    def add(self, field: str, validator: str, message: str) -> None:
        self.setdefault(field, {})[validator] = message

    def empty(self) -> bool:
        return len(self) == 0

    def has_field(self, field: str) -> bool:
        return field in self

    def field(self, field: str) -> dict[str, str]:
        """Return all messages for a field (empty dict if none)."""
        return dict(self.get(field, {}))

    def field_one(self, field: str) -> str:
        """Return the first message for a field, or an empty string."""
        for message in self.get(field, {}).values():
            return message
        return ""

    def one(self) -> str:
        """Return the first message of the report, or an empty string."""
        for messages in self.values():
            for message in messages.values():
                return message
        return ""

    def all(self) -> dict[str, dict[str, str]]:
        return {field: dict(messages) for field, messages in self.items()}

    def messages(self) -> list[str]:
        """Flatten every message in report order."""
        return [msg for messages in self.values() for msg in messages.values()]

    def to_dict(self) -> dict[str, dict[str, str]]:
        return self.all()

    def as_exception(self) -> ValidationFailed | None:
        """Return a ValidationFailed wrapping this report, or None if empty."""
        if self.empty():
            return None
        return ValidationFailed(self)

    def __str__(self) -> str:
        lines = []
        for field, messages in self.items():
            for message in messages.values():
                lines.append(f"{field}: {message}")
        return "\n".join(lines)
