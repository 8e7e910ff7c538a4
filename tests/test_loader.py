"""Tests for rule set loading and record-declared rules."""

from dataclasses import dataclass, field
from pathlib import Path

import pytest
from pydantic import BaseModel, Field

from validata.errors import RuleError
from validata.loader import RuleSet, rules_from_struct, validate_ruleset, validate_ruleset_file
from validata.sources import MapData
from validata.validation import Validation

RULES_YAML = """\
options:
  stop_on_error: false
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
"""


@pytest.fixture
def rules_file(tmp_path) -> Path:
    path = tmp_path / "rules.yaml"
    path.write_text(RULES_YAML)
    return path


class TestSchemaValidation:
    def test_valid_document(self, rules_file):
        assert validate_ruleset_file(rules_file) == []

    def test_unknown_top_level_key(self):
        issues = validate_ruleset({"rulez": {}})
        assert len(issues) == 1
        assert "rulez" in issues[0].message

    def test_rule_object_requires_validator(self):
        issues = validate_ruleset({"rules": [{"fields": "name"}]})
        assert issues
        assert "[ERROR]" in str(issues[0])

    def test_yaml_parse_error(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("rules: [unclosed\n")
        issues = validate_ruleset_file(path)
        assert "YAML parse error" in issues[0].message

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("\n")
        assert "empty" in validate_ruleset_file(path)[0].message


class TestRuleSet:
    def test_from_yaml(self, rules_file):
        ruleset = RuleSet.from_yaml(rules_file)
        assert [r.validator for r in ruleset.rules] == [
            "required",
            "len_range",
            "required",
            "email",
            "int",
            "range",
        ]
        assert ruleset.scenes["update"] == ["name"]
        assert ruleset.defaults == {"age": 18}

    def test_invalid_document_raises(self):
        with pytest.raises(RuleError, match="invalid rule set"):
            RuleSet.from_dict({"rules": "required"})

    def test_rule_objects(self):
        ruleset = RuleSet.from_dict(
            {
                "rules": [
                    {
                        "fields": ["code"],
                        "validator": "regex",
                        "args": ["^[A-Z]{2},[0-9]+$"],
                        "message": "{field} has a bad format",
                        "stop_on_error": True,
                    }
                ]
            }
        )
        rule = ruleset.rules[0]
        assert rule.args == ("^[A-Z]{2},[0-9]+$",)
        assert rule.stop_on_error is True

    def test_apply(self, rules_file):
        ruleset = RuleSet.from_yaml(rules_file)
        v = ruleset.apply(Validation(MapData({"name": "  BOB ", "email": "bob@example.com"})))

        assert v.validate() is True
        assert v.safe_data == {"name": "bob", "email": "bob@example.com", "age": 18}

    def test_apply_uses_labels_and_messages(self, rules_file):
        v = RuleSet.from_yaml(rules_file).apply(Validation(MapData({"email": "x@y.io"})))
        v.validate()
        assert v.errors.field_one("Username") == "Username cannot be blank"

    def test_apply_copies_rules(self, rules_file):
        ruleset = RuleSet.from_yaml(rules_file)
        v = ruleset.apply(Validation(MapData({})))
        v.rules[0].with_message("changed")
        assert ruleset.rules[0].message == ""

    def test_options_are_applied(self):
        ruleset = RuleSet.from_dict({"options": {"stop_on_error": True}})
        v = ruleset.apply(Validation(MapData({})))
        assert v.stop_on_error is True


@dataclass
class SignupForm:
    name: str = field(
        default="",
        metadata={"validate": "required|min_len:3", "filter": "trim", "label": "Username"},
    )
    email: str = field(
        default="",
        metadata={"validate": "required|email", "message": {"email": "{field} looks wrong"}},
    )
    note: str = ""


class SignupModel(BaseModel):
    name: str = Field("", title="Username", json_schema_extra={"validate": "required"})
    age: int = Field(0, json_schema_extra={"validate": "min:18", "message": "too young"})


class TestRulesFromStruct:
    def test_dataclass_metadata(self):
        ruleset = rules_from_struct(SignupForm)
        assert [(r.fields, r.validator) for r in ruleset.rules] == [
            (("name",), "required"),
            (("name",), "min_len"),
            (("email",), "required"),
            (("email",), "email"),
        ]
        assert ruleset.labels == {"name": "Username"}
        assert ruleset.messages == {"email.email": "{field} looks wrong"}
        assert ruleset.filter_rules[0].filters == [("trim", ())]

    def test_pydantic_fields(self):
        ruleset = rules_from_struct(SignupModel(name="bob"))
        assert ruleset.labels == {"name": "Username"}
        assert ruleset.rules[1].message == "too young"

    def test_plain_objects_declare_nothing(self):
        ruleset = rules_from_struct(object())
        assert ruleset.rules == []
