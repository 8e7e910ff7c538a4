"""The Validation engine: one instance per record.

A Validation holds the data source, the ordered filter rules and rules,
scene state, default values and the run results. It runs two phases:

1. filtering(): apply filter rules in order, writing filtered_data
2. validate():  apply rules in order, writing safe_data or errors

Each phase runs at most once per instance until reset_result() or reset().

Usage:
    v = Validation(MapData({"name": " bob ", "age": "30"}))
    v.filter_rules({"name": "trim", "age": "int"})
    v.string_rules({"name": "required|min_len:3", "age": "range:1,120"})
    if v.validate():
        v.safe_data  # {"name": "bob", "age": 30}
    else:
        v.errors.one()
"""

import dataclasses
import logging
from collections.abc import Callable, Iterable, Mapping, MutableMapping
from typing import Any

import pydantic_core
from pydantic import BaseModel, TypeAdapter

from validata.config import ValidationConfig, get_config
from validata.errors import ArgumentConversionError, EmptyDataError, Errors, RuleError
from validata.funcs import FuncMeta
from validata.registry import FilterRegistry, ValidatorRegistry, filter_name, validator_name
from validata.rules import CONTEXT_VALIDATORS, FilterRule, Rule, parse_rule_string
from validata.scenes import SceneSelector
from validata.sources import DataSource
from validata.translator import Translator
from validata.types import FILTER_ERROR, VALIDATE_ERROR, Provenance, SourceKind, is_empty

logger = logging.getLogger(__name__)


class Validation:
    """Filtering and validation engine for a single record.

    Attributes:
        data: The data source (None while only building rules)
        errors: Ordered field -> {validator: message} report
        stop_on_error: Abort the validation phase after the first error
        skip_on_empty: Skip non-required rules for missing or empty values
        update_source: Write validated values back into struct sources
        check_default: Run default values through the rules instead of trusting them
    """

    def __init__(
        self,
        data: DataSource | None = None,
        scene: str = "",
        *,
        config: ValidationConfig | None = None,
        translator: Translator | None = None,
    ):
        config = config or get_config()
        self.data = data
        self.errors = Errors()

        self.stop_on_error = config.stop_on_error
        self.skip_on_empty = config.skip_on_empty
        self.update_source = config.update_source
        self.check_default = config.check_default

        self._rules: list[Rule] = []
        self._filter_rules: list[FilterRule] = []
        self._validators: dict[str, FuncMeta] = {}
        self._filters: dict[str, FuncMeta] = {}

        self._scenes: dict[str, list[str]] = {}
        self._scene = scene
        self._selector = SceneSelector()

        self._safe_data: dict[str, Any] = {}
        self._filtered_data: dict[str, Any] = {}
        self._def_values: dict[str, Any] = {}
        self._failed_fields: set[str] = set()

        self._trans = translator or Translator()
        self._has_error = False
        self._has_filtered = False
        self._has_validated = False

    def __repr__(self) -> str:
        return (
            f"Validation(data={self.data!r}, scene={self._scene!r}, "
            f"rules={len(self._rules)}, filter_rules={len(self._filter_rules)})"
        )

    # =========================================================================
    # Settings
    # =========================================================================

    def reset_result(self) -> None:
        """Clear errors, flags and result data. Rules are kept."""
        self.errors = Errors()
        self._has_error = False
        self._has_filtered = False
        self._has_validated = False
        self._safe_data = {}
        self._filtered_data = {}
        self._failed_fields = set()

    def reset(self) -> None:
        """Clear the result and all rules and filter rules.

        Custom validators and filters stay registered.
        """
        self.reset_result()
        self._rules.clear()
        self._filter_rules.clear()

    def configure(self, fn: Callable[["Validation"], None]) -> "Validation":
        """Apply fn to this instance and return it, for chained setup."""
        fn(self)
        return self

    def with_translator(self, translator: Translator) -> "Validation":
        self._trans = translator
        return self

    @property
    def trans(self) -> Translator:
        return self._trans

    def with_scenes(self, scenes: Mapping[str, Iterable[str]]) -> "Validation":
        """Set the scene config.

        Usage:
            v.with_scenes({"create": ["name", "email"], "update": ["name"]})
            ok = v.at_scene("create").validate()
        """
        self._scenes = {name: list(fields) for name, fields in scenes.items()}
        return self

    def at_scene(self, scene: str) -> "Validation":
        self._scene = scene
        return self

    in_scene = at_scene
    set_scene = at_scene

    @property
    def scene(self) -> str:
        return self._scene

    @property
    def scenes(self) -> dict[str, list[str]]:
        return self._scenes

    def scene_fields(self) -> list[str]:
        """Fields listed for the current scene."""
        return SceneSelector(self._scenes, self._scene).field_list()

    # =========================================================================
    # Validators and filters
    # =========================================================================

    def add_validator(self, name: str, func: Callable[..., Any]) -> "Validation":
        """Register a validator for this instance only. It must return a bool.

        Usage:
            v.add_validator("even", lambda value: int(value) % 2 == 0)

        Raises:
            RegistrationError: If func has an invalid shape
        """
        self._validators[name] = FuncMeta.from_callable(name, func, Provenance.CUSTOM)
        return self

    def add_validators(self, validators: Mapping[str, Callable[..., Any]]) -> "Validation":
        for name, func in validators.items():
            self.add_validator(name, func)
        return self

    def add_filter(self, name: str, func: Callable[..., Any]) -> "Validation":
        """Register a filter for this instance only.

        Raises:
            RegistrationError: If func has an invalid shape
        """
        self._filters[name] = FuncMeta.from_callable(
            name, func, Provenance.CUSTOM, validator=False
        )
        return self

    def add_filters(self, filters: Mapping[str, Callable[..., Any]]) -> "Validation":
        for name, func in filters.items():
            self.add_filter(name, func)
        return self

    def validator_meta(self, name: str) -> FuncMeta | None:
        """Resolve a validator: instance table, global table, then record method.

        Record methods are memoized into the instance table.
        """
        meta = self._validators.get(name) or self._validators.get(validator_name(name))
        if meta is not None:
            return meta

        meta = ValidatorRegistry.find(name)
        if meta is not None:
            return meta

        if self.data is not None and self.data.kind is SourceKind.STRUCT:
            func = self.data.func_value(name)
            if func is not None:
                meta = FuncMeta.from_callable(name, func, Provenance.CUSTOM)
                self._validators[name] = meta
                logger.debug("Resolved validator '%s' from record method", name)
                return meta
        return None

    def filter_meta(self, name: str) -> FuncMeta | None:
        """Resolve a filter: instance table, then global table."""
        meta = self._filters.get(name) or self._filters.get(filter_name(name))
        if meta is not None:
            return meta
        return FilterRegistry.find(name)

    def has_validator(self, name: str) -> bool:
        name = validator_name(name)
        return (
            name in self._validators
            or name in CONTEXT_VALIDATORS
            or ValidatorRegistry.is_registered(name)
        )

    def validators(self, with_global: bool = False) -> dict[str, Provenance]:
        """Validator names and their provenance."""
        result: dict[str, Provenance] = {}
        if with_global:
            result.update(ValidatorRegistry.provenances())
        for name, meta in self._validators.items():
            result[name] = meta.provenance
        return result

    # =========================================================================
    # Rules
    # =========================================================================

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules)

    @property
    def filtering_rules(self) -> list[FilterRule]:
        return list(self._filter_rules)

    def add_rule(self, fields: str | Iterable[str], validator: str, *args: Any) -> Rule:
        """Append a validation rule and return it for chained modifiers.

        Usage:
            v.add_rule("name", "len_range", 3, 20).with_message("{field} is too long")
            v.add_rule(["email", "backup_email"], "email")
        """
        return self.append_rule(Rule(fields=fields, validator=validator, args=args))

    def append_rule(self, rule: Rule) -> Rule:
        self._rules.append(rule)
        return rule

    def append_rules(self, *rules: Rule) -> "Validation":
        self._rules.extend(rules)
        return self

    def string_rule(self, field: str, rule: str, filter_rule: str = "") -> "Validation":
        """Add rules for a field from a rule string like "required|min_len:3"."""
        for name, args in parse_rule_string(rule):
            self.add_rule(field, name, *args)
        if filter_rule:
            self.filter_rule(field, filter_rule)
        return self

    def string_rules(self, rules: Mapping[str, str]) -> "Validation":
        for field, rule in rules.items():
            self.string_rule(field, rule)
        return self

    def filter_rule(self, field: str | Iterable[str], rule: str) -> FilterRule:
        """Append a filter rule from a rule string like "trim|lower"."""
        return self.append_filter_rule(FilterRule.from_string(field, rule))

    def filter_rules(self, rules: Mapping[str, str]) -> "Validation":
        for field, rule in rules.items():
            self.filter_rule(field, rule)
        return self

    def add_filter_rule(self, fields: str | Iterable[str], *filters: str) -> FilterRule:
        return self.append_filter_rule(FilterRule(fields=fields).add_filters(*filters))

    def append_filter_rule(self, rule: FilterRule) -> FilterRule:
        self._filter_rules.append(rule)
        return rule

    # =========================================================================
    # Filtering
    # =========================================================================

    def sanitize(self) -> bool:
        return self.filtering()

    def filtering(self) -> bool:
        """Apply filter rules in order. Stops at the first filter failure.

        Returns:
            True if no error has been recorded
        """
        if self._has_filtered:
            return self.is_success()

        for rule in self._filter_rules:
            if not self._apply_filter_rule(rule):
                break

        self._has_filtered = True
        return self.is_success()

    def _apply_filter_rule(self, rule: FilterRule) -> bool:
        for field in rule.fields:
            value, exists = self.get(field)
            if not exists or value is None:
                continue

            for name, args in rule.filters:
                meta = self.filter_meta(name)
                if meta is None:
                    raise RuleError(f"filter '{name}' is not registered")
                try:
                    value = meta.call(value, args)
                except (ValueError, TypeError, ArgumentConversionError) as e:
                    self._filter_failed(field, name, e)
                    return False

            self._filtered_data[field] = value
            if self.data is not None and self.data.kind is SourceKind.STRUCT and "*" not in field:
                try:
                    self._filtered_data[field] = self.data.set(field, value)
                except (ValueError, AttributeError, ArgumentConversionError) as e:
                    self._filter_failed(field, "set", e)
                    return False
        return True

    def _filter_failed(self, field: str, name: str, error: Exception) -> None:
        label = self._trans.field_name(field)
        self.add_error(field, FILTER_ERROR, f"{label}: filter '{name}' failed: {error}")
        logger.warning("Filtering stopped at field '%s', filter '%s': %s", field, name, error)

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(self, scene: str | None = None) -> bool:
        """Run filtering, then every rule in insertion order.

        Args:
            scene: Optional scene to activate before running

        Returns:
            True if no error was recorded

        Raises:
            EmptyDataError: If there is no data source
            RuleError: If a rule names an unknown function or passes a bad
                number of arguments
        """
        if self._has_validated:
            return self.is_success()
        if self.data is None:
            raise EmptyDataError()

        if scene is not None:
            self.at_scene(scene)
        self._selector = SceneSelector(self._scenes, self._scene)

        if not self.filtering() and self.stop_on_error:
            self._has_validated = True
            return False

        stopped_fields: set[str] = set()
        for rule in self._rules:
            if rule.condition is not None and not rule.condition(self):
                logger.debug("Rule '%s' skipped: condition not met", rule.validator)
                continue
            if not self._apply_rule(rule, stopped_fields):
                logger.debug("Validation stopped after first error")
                break

        self._has_validated = True
        return self.is_success()

    def _apply_rule(self, rule: Rule, stopped_fields: set[str]) -> bool:
        """Run one rule over its fields. Returns False to abort the phase."""
        for field in rule.fields:
            if self._selector.excludes(field):
                logger.debug("Field '%s' not in scene '%s', skipped", field, self._scene)
                continue
            if field in stopped_fields:
                continue
            if self._check_field(rule, field):
                continue

            if rule.stop_on_error:
                stopped_fields.add(field)
            if self.stop_on_error:
                return False
        return True

    def _check_field(self, rule: Rule, field: str) -> bool:
        """Check one field against one rule. True means passed or skipped."""
        value, exists, zero, is_default = self._resolve(field)

        if is_default and not (self.check_default or rule.check_default):
            # Defaults are trusted unless asked otherwise
            if field not in self._failed_fields:
                self._safe_data[field] = value
            return True

        skip_empty = self.skip_on_empty if rule.skip_empty is None else rule.skip_empty
        empty = not is_default and (not exists or zero or is_empty(value))
        if empty and skip_empty and not rule.is_required:
            return True

        if not self._call_validator(rule, field, value):
            self._failed_fields.add(field)
            self._safe_data.pop(field, None)
            return False

        if field in self._failed_fields:
            return True

        if self.update_source and self.data.kind is SourceKind.STRUCT:
            try:
                value = self._update_value(field, value)
            except (ValueError, AttributeError, ArgumentConversionError) as e:
                self.add_error(field, VALIDATE_ERROR, f"{self._trans.field_name(field)}: {e}")
                self._failed_fields.add(field)
                return False

        self._safe_data[field] = value
        return True

    def _call_validator(self, rule: Rule, field: str, value: Any) -> bool:
        name = rule.validator
        meta = self._validators.get(name)
        arg_names: list[str] = []

        if meta is None and rule.is_context_check and not self._is_global_custom(name):
            check, _ = CONTEXT_VALIDATORS[rule.canonical]
            passed = bool(check(self, field, value, rule.args))
        else:
            meta = meta or self.validator_meta(name)
            if meta is None:
                raise RuleError(f"validator '{name}' is not registered")
            try:
                passed = bool(meta.call(value, rule.args))
            except ArgumentConversionError as e:
                self._conv_arg_type_error(field, name, e)
                return False
            except (ValueError, TypeError) as e:
                logger.debug("Validator '%s' raised on field '%s': %s", name, field, e)
                passed = False
            arg_names = meta.arg_names()

        if not passed:
            message = self._trans.message(
                name,
                field,
                rule.args,
                arg_names=arg_names,
                value=value,
                override=rule.message,
            )
            self.add_error(field, name, message)
        return passed

    def _is_global_custom(self, name: str) -> bool:
        meta = ValidatorRegistry.find(name)
        return meta is not None and meta.provenance is Provenance.CUSTOM

    # =========================================================================
    # Errors and messages
    # =========================================================================

    def with_translates(self, labels: Mapping[str, str]) -> "Validation":
        """Set field display labels.

        Usage:
            v.with_translates({"name": "Username", "pwd": "Password"})
        """
        self._trans.add_label_map(labels)
        return self

    def add_translates(self, labels: Mapping[str, str]) -> None:
        self._trans.add_label_map(labels)

    def with_messages(self, messages: Mapping[str, str]) -> "Validation":
        """Set message templates, keyed by "validator" or "field.validator".

        Usage:
            v.with_messages({
                "required": "oh! {field} is required",
                "range": "oh! {field} must be in the range {min} - {max}",
            })
        """
        self._trans.add_messages(messages)
        return self

    def add_messages(self, messages: Mapping[str, str]) -> None:
        self._trans.add_messages(messages)

    def with_error(self, error: Exception | None) -> "Validation":
        if error is not None:
            self.add_error(VALIDATE_ERROR, VALIDATE_ERROR, str(error))
        return self

    def add_error(self, field: str, validator: str, message: str) -> None:
        """Record an error. The only way errors enter the report.

        The report is keyed by the field's display label.
        """
        self._has_error = True
        self.errors.add(self._trans.field_name(field), validator, message)

    def add_errorf(self, field: str, message_format: str, *args: Any) -> None:
        self.add_error(field, VALIDATE_ERROR, message_format % args if args else message_format)

    def _conv_arg_type_error(self, field: str, name: str, error: ArgumentConversionError) -> None:
        self.add_errorf(
            field,
            "cannot convert %s to arg#%d(%s), validator '%s'",
            error.actual.value,
            error.index,
            error.wanted.value,
            name,
        )

    # =========================================================================
    # Getters and setters
    # =========================================================================

    def raw(self, key: str) -> tuple[Any, bool]:
        """Value straight from the data source."""
        if self.data is None:
            return None, False
        return self.data.get(key)

    def raw_val(self, key: str) -> Any:
        return self.raw(key)[0]

    def _try_get(self, key: str) -> tuple[Any, bool, bool]:
        """Lookup chain: filtered data, safe data, then the data source.

        Only struct sources can report a zero value.
        """
        if self.data is None:
            return None, False, False
        if key in self._filtered_data:
            return self._filtered_data[key], True, False
        if key in self._safe_data:
            return self._safe_data[key], True, False
        return self.data.try_get(key)

    def _resolve(self, key: str) -> tuple[Any, bool, bool, bool]:
        """Return (value, exists, zero, is_default)."""
        value, exists, zero = self._try_get(key)
        if exists and not zero and value is not None:
            return value, exists, zero, False
        if key in self._def_values:
            return self._def_values[key], exists, zero, True
        return value, exists, zero, False

    def get(self, key: str) -> tuple[Any, bool]:
        value, exists, _ = self._try_get(key)
        return value, exists

    def get_with_default(self, key: str) -> tuple[Any, bool, bool]:
        """Return (value, exists, is_default); the default fills missing or zero values."""
        value, exists, _, is_default = self._resolve(key)
        return value, exists, is_default

    def filtered(self, key: str) -> Any:
        return self._filtered_data.get(key)

    def safe(self, key: str) -> tuple[Any, bool]:
        if self.data is None:
            return None, False
        if key in self._safe_data:
            return self._safe_data[key], True
        return None, False

    def safe_val(self, key: str) -> Any:
        return self.safe(key)[0]

    get_safe = safe_val

    def set(self, field: str, value: Any) -> Any:
        """Write a value into the data source (a no-op for map and form sources)."""
        if self.data is None:
            raise EmptyDataError()
        return self.data.set(field, value)

    def _update_value(self, field: str, value: Any) -> Any:
        path = field.removesuffix(".*")
        if self.data.kind is SourceKind.STRUCT and "*" not in path:
            return self.data.set(path, value)
        return value

    def set_def_value(self, field: str, value: Any) -> None:
        self._def_values[field] = value

    def get_def_value(self, field: str) -> tuple[Any, bool]:
        if field in self._def_values:
            return self._def_values[field], True
        return None, False

    # =========================================================================
    # Results
    # =========================================================================

    def is_ok(self) -> bool:
        return not self._has_error

    def is_fail(self) -> bool:
        return self._has_error

    def is_success(self) -> bool:
        return not self._has_error

    @property
    def safe_data(self) -> dict[str, Any]:
        """Values that passed every applicable rule."""
        return self._safe_data

    @property
    def filtered_data(self) -> dict[str, Any]:
        """Post-filter snapshot, independent of the validation outcome."""
        return self._filtered_data

    def bind_safe_data(self, target: Any) -> Any:
        """Bind safe data to a destination shape via a JSON round trip.

        Args:
            target: A type (pydantic model, dataclass, TypedDict, dict[...])
                to build, or an instance (model, dataclass, mutable mapping,
                plain object) to update in place

        Returns:
            The new or updated object. With no safe data, an instance is
            returned untouched and a type yields None.

        Raises:
            pydantic.ValidationError: If safe data does not fit the target
        """
        if not self._safe_data:
            return None if isinstance(target, type) else target

        payload = pydantic_core.to_json(self._safe_data)
        if isinstance(target, type) or not _is_instance_target(target):
            return TypeAdapter(target).validate_json(payload)

        data = pydantic_core.from_json(payload)
        if isinstance(target, MutableMapping):
            target.update(data)
            return target

        if isinstance(target, BaseModel):
            current = target.model_dump()
        elif dataclasses.is_dataclass(target):
            current = dataclasses.asdict(target)
        else:
            for key, value in data.items():
                setattr(target, key, value)
            return target

        rebuilt = TypeAdapter(type(target)).validate_python({**current, **data})
        for key in data:
            if hasattr(rebuilt, key):
                setattr(target, key, getattr(rebuilt, key))
        return target

    bind_struct = bind_safe_data


def _is_instance_target(target: Any) -> bool:
    """Instances are updated in place; generic aliases like dict[str, int] are types."""
    return not hasattr(target, "__origin__")
