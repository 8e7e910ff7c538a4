"""Tests for process defaults, exceptions and the Errors report."""

import pytest

from validata.config import ValidationConfig, configure, get_config, reset_config
from validata.errors import (
    EmptyDataError,
    Errors,
    RegistrationError,
    ValidataError,
    ValidationFailed,
)
from validata.sources import MapData
from validata.validation import Validation


@pytest.fixture(autouse=True)
def clean_config():
    reset_config()
    yield
    reset_config()


class TestValidationConfig:
    def test_defaults(self):
        config = ValidationConfig()
        assert config.stop_on_error is False
        assert config.skip_on_empty is True
        assert config.max_body_bytes == 1 << 20

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("VALIDATA_STOP_ON_ERROR", "yes")
        monkeypatch.setenv("VALIDATA_SKIP_ON_EMPTY", "0")
        monkeypatch.setenv("VALIDATA_MAX_BODY_BYTES", "1024")
        config = ValidationConfig.from_env()
        assert config.stop_on_error is True
        assert config.skip_on_empty is False
        assert config.update_source is False
        assert config.max_body_bytes == 1024

    def test_from_env_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("VALIDATA_CHECK_DEFAULT", "perhaps")
        with pytest.raises(ValueError, match="VALIDATA_CHECK_DEFAULT"):
            ValidationConfig.from_env()

    def test_configure_updates_process_defaults(self):
        configure(update_source=True)
        assert get_config().update_source is True
        assert Validation(MapData({})).update_source is True

    def test_configure_rejects_unknown_option(self):
        with pytest.raises(TypeError, match="unknown config option"):
            configure(fast=True)

    def test_instances_copy_defaults(self):
        v = Validation(MapData({}))
        configure(stop_on_error=True)
        assert v.stop_on_error is False

    def test_explicit_config(self):
        v = Validation(MapData({}), config=ValidationConfig(check_default=True))
        assert v.check_default is True


class TestExceptions:
    def test_hierarchy(self):
        assert issubclass(EmptyDataError, ValidataError)
        assert str(EmptyDataError()) == "please input data use for validate"

    def test_registration_error_message(self):
        err = RegistrationError("even", "must return bool")
        assert str(err) == "invalid function 'even': must return bool"


class TestErrors:
    @pytest.fixture
    def errors(self):
        errs = Errors()
        errs.add("name", "required", "name is required")
        errs.add("name", "min_len", "name is short")
        errs.add("age", "int", "age must be an int")
        return errs

    def test_one_is_first_failure(self, errors):
        assert errors.one() == "name is required"
        assert Errors().one() == ""

    def test_field_access(self, errors):
        assert errors.field("name") == {"required": "name is required", "min_len": "name is short"}
        assert errors.field_one("age") == "age must be an int"
        assert errors.field("missing") == {}

    def test_messages_and_str(self, errors):
        assert errors.messages() == ["name is required", "name is short", "age must be an int"]
        assert str(errors).splitlines()[0] == "name: name is required"

    def test_as_exception(self, errors):
        exc = errors.as_exception()
        assert isinstance(exc, ValidationFailed)
        assert exc.errors is errors
        assert Errors().as_exception() is None
