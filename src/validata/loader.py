"""
Rule sets from YAML files, dicts and record definitions.

A rule set bundles everything a Validation needs besides the data:

    options:
      stop_on_error: true
    scenes:
      create: [name, email, age]
      update: [name]
    labels:
      name: Username
    messages:
      name.required: "{field} cannot be blank"
    defaults:
      age: 18
    filters:
      name: trim|lower
    rules:
      name: required|len_range:3,20
      email: required|email
      age: int|range:1,120

"rules" may also be a list of rule objects for arguments that do not
survive rule-string splitting:

    rules:
      - fields: [password]
        validator: regex
        args: ["^(?=.*[0-9]).{8,}$"]
        message: "{field} needs 8 chars and a digit"
        stop_on_error: true

Documents are checked against schemas/ruleset.schema.json before use.
"""
from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError
from pydantic import BaseModel

from validata.errors import RuleError
from validata.rules import FilterRule, Rule, parse_rule_string

if TYPE_CHECKING:
    from validata.validation import Validation

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).parent / "schemas" / "ruleset.schema.json"

_OPTION_NAMES = ("stop_on_error", "skip_on_empty", "update_source", "check_default")


# ---------------------------------------------------------------------------
# Schema validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationIssue:
    """A single schema finding for a rule set document."""

    file: Path | None
    message: str
    path: str = ""
    severity: str = "error"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        source = self.file if self.file is not None else "<rules>"
        return f"[{self.severity.upper()}] {source}{loc}: {self.message}"


def _load_schema() -> dict[str, Any]:
    with _SCHEMA_PATH.open() as fh:
        return json.load(fh)


def _json_path(error: ValidationError) -> str:
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def validate_ruleset(doc: Any, file: Path | None = None) -> list[ValidationIssue]:
    """
    Check a parsed rule set document against the bundled schema.

    Returns:
        A list of ValidationIssue objects (empty on success).
    """
    validator = Draft202012Validator(_load_schema())
    return [
        ValidationIssue(file=file, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(doc), key=lambda e: list(e.path))
    ]


def _read_yaml(path: Path) -> tuple[Any, list[ValidationIssue]]:
    try:
        with path.open() as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return None, [ValidationIssue(file=path, message=f"YAML parse error: {exc}")]
    if raw is None:
        return None, [ValidationIssue(file=path, message="File is empty or contains only whitespace")]
    return raw, []


def validate_ruleset_file(path: Path) -> list[ValidationIssue]:
    """Parse a YAML rule set file and check it against the schema."""
    path = Path(path)
    raw, issues = _read_yaml(path)
    if issues:
        return issues
    return validate_ruleset(raw, path)


# ---------------------------------------------------------------------------
# RuleSet
# ---------------------------------------------------------------------------


@dataclass
class RuleSet:
    """Reusable rules, filters, scenes, labels, messages and defaults."""

    rules: list[Rule] = field(default_factory=list)
    filter_rules: list[FilterRule] = field(default_factory=list)
    scenes: dict[str, list[str]] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    messages: dict[str, str] = field(default_factory=dict)
    defaults: dict[str, Any] = field(default_factory=dict)
    options: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, source: Path | None = None) -> RuleSet:
        """
        Build a rule set from a parsed document.

        Raises:
            RuleError: If the document does not match the schema or a rule
                string is malformed
        """
        issues = validate_ruleset(data, source)
        if issues:
            raise RuleError("invalid rule set:\n" + "\n".join(str(i) for i in issues))

        ruleset = cls(
            scenes={name: list(fields) for name, fields in data.get("scenes", {}).items()},
            labels=dict(data.get("labels", {})),
            messages=dict(data.get("messages", {})),
            defaults=dict(data.get("defaults", {})),
            options=dict(data.get("options", {})),
        )
        for fields, rule in data.get("filters", {}).items():
            ruleset.filter_rules.append(FilterRule.from_string(fields, rule))

        rules = data.get("rules", {})
        if isinstance(rules, dict):
            for fields, rule in rules.items():
                ruleset.add_string_rule(fields, rule)
        else:
            for item in rules:
                ruleset.rules.append(_resolve_rule(item))

        logger.debug(
            "Loaded rule set: %d rules, %d filter rules, %d scenes",
            len(ruleset.rules),
            len(ruleset.filter_rules),
            len(ruleset.scenes),
        )
        return ruleset

    @classmethod
    def from_yaml(cls, path: Path) -> RuleSet:
        """Load a rule set from a YAML file."""
        path = Path(path)
        raw, issues = _read_yaml(path)
        if issues:
            raise RuleError(str(issues[0]))
        return cls.from_dict(raw, source=path)

    def add_string_rule(self, fields: str, rule: str) -> None:
        for name, args in parse_rule_string(rule):
            self.rules.append(Rule(fields=fields, validator=name, args=args))

    def apply(self, v: Validation) -> Validation:
        """Copy this rule set onto a Validation. Rules are copied, not shared."""
        for option, value in self.options.items():
            setattr(v, option, value)
        if self.scenes:
            v.with_scenes({**v.scenes, **self.scenes})
        if self.labels:
            v.add_translates(self.labels)
        if self.messages:
            v.add_messages(self.messages)
        for name, value in self.defaults.items():
            v.set_def_value(name, value)
        for filter_rule in self.filter_rules:
            v.append_filter_rule(
                FilterRule(fields=filter_rule.fields, filters=list(filter_rule.filters))
            )
        for rule in self.rules:
            v.append_rule(dataclasses.replace(rule))
        return v


def _resolve_rule(data: dict[str, Any]) -> Rule:
    return Rule(
        fields=data["fields"],
        validator=data["validator"],
        args=tuple(data.get("args", ())),
        message=data.get("message", ""),
        skip_empty=data.get("skip_empty"),
        stop_on_error=data.get("stop_on_error", False),
        check_default=data.get("check_default", False),
    )


# ---------------------------------------------------------------------------
# Rules declared on record definitions
# ---------------------------------------------------------------------------


def _field_specs(obj: Any) -> list[tuple[str, dict[str, Any]]]:
    """(name, metadata) for each declared field of a dataclass or pydantic model."""
    cls = obj if isinstance(obj, type) else type(obj)

    if dataclasses.is_dataclass(cls):
        return [(f.name, dict(f.metadata)) for f in dataclasses.fields(cls)]

    if issubclass(cls, BaseModel):
        specs = []
        for name, info in cls.model_fields.items():
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            meta = dict(extra)
            if info.title and "label" not in meta:
                meta["label"] = info.title
            specs.append((name, meta))
        return specs

    return []


def rules_from_struct(obj: Any) -> RuleSet:
    """
    Collect rules declared on a dataclass or pydantic model.

    Recognized field metadata keys:
        validate: rule string, e.g. "required|min_len:3"
        filter:   filter rule string, e.g. "trim|lower"
        label:    display name used in messages
        message:  a template for every rule on the field, or a mapping of
                  validator name to template

    Usage:
        @dataclass
        class User:
            name: str = field(default="", metadata={"validate": "required|min_len:3", "label": "Username"})

        class Signup(BaseModel):
            email: str = Field("", title="Email", json_schema_extra={"validate": "required|email"})
    """
    ruleset = RuleSet()
    for name, meta in _field_specs(obj):
        if meta.get("filter"):
            ruleset.filter_rules.append(FilterRule.from_string(name, meta["filter"]))
        if meta.get("label"):
            ruleset.labels[name] = meta["label"]

        message = meta.get("message")
        if isinstance(message, dict):
            for validator, template in message.items():
                ruleset.messages[f"{name}.{validator}"] = template

        if meta.get("validate"):
            for validator, args in parse_rule_string(meta["validate"]):
                rule = Rule(fields=name, validator=validator, args=args)
                if isinstance(message, str):
                    rule.with_message(message)
                ruleset.rules.append(rule)
    return ruleset
