"""Tests for the global validator and filter registries."""

import pytest

from validata.builtins import register_builtins
from validata.errors import RegistrationError
from validata.registry import (
    FilterRegistry,
    ValidatorRegistry,
    add_filter,
    add_validator,
    filter_name,
    validator_name,
)
from validata.types import Provenance


@pytest.fixture(autouse=True)
def setup_registries():
    """Start every test from the built-in catalogue."""
    ValidatorRegistry.clear()
    FilterRegistry.clear()
    register_builtins()
    yield
    ValidatorRegistry.clear()
    FilterRegistry.clear()
    register_builtins()


class TestAliases:
    def test_validator_aliases(self):
        assert validator_name("between") == "range"
        assert validator_name("mail") == "email"
        assert validator_name("custom") == "custom"

    def test_filter_aliases(self):
        assert filter_name("strip") == "trim"
        assert filter_name("to_int") == "int"


class TestValidatorRegistry:
    def test_builtins_registered(self):
        assert ValidatorRegistry.is_registered("email")
        assert ValidatorRegistry.get("email").provenance is Provenance.BUILTIN

    def test_lookup_by_alias(self):
        assert ValidatorRegistry.get("between") is ValidatorRegistry.get("range")

    def test_get_unknown_raises(self):
        with pytest.raises(ValueError, match="not registered"):
            ValidatorRegistry.get("nope")

    def test_register_custom(self):
        add_validator("even", lambda value: int(value) % 2 == 0)
        meta = ValidatorRegistry.get("even")
        assert meta.provenance is Provenance.CUSTOM
        assert meta.call("4") is True

    def test_custom_overrides_builtin(self):
        add_validator("email", lambda value: value == "ok")
        assert ValidatorRegistry.get("email").provenance is Provenance.CUSTOM

    def test_register_builtin_is_idempotent(self):
        add_validator("email", lambda value: value == "ok")
        register_builtins()
        assert ValidatorRegistry.get("email").provenance is Provenance.CUSTOM

    def test_register_rejects_bad_shape(self):
        with pytest.raises(RegistrationError):
            add_validator("bad", "not callable")
        assert not ValidatorRegistry.is_registered("bad")

    def test_list_and_provenances(self):
        add_validator("even", lambda value: True)
        names = ValidatorRegistry.list_registered()
        assert names == sorted(names)
        assert ValidatorRegistry.provenances()["even"] is Provenance.CUSTOM

    def test_unregister(self):
        add_validator("even", lambda value: True)
        ValidatorRegistry.unregister("even")
        assert not ValidatorRegistry.is_registered("even")


class TestFilterRegistry:
    def test_tables_are_separate(self):
        add_filter("shout", lambda value: str(value).upper())
        assert FilterRegistry.is_registered("shout")
        assert not ValidatorRegistry.is_registered("shout")

    def test_filter_alias_lookup(self):
        assert FilterRegistry.get("strip").call("  x ") == "x"
