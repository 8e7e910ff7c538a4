"""validata: rule-based filtering and validation for maps, forms and records.

Usage:
    import validata

    v = validata.from_map({"name": " bob ", "age": "30"})
    v.filter_rules({"name": "trim", "age": "int"})
    v.string_rules({"name": "required|min_len:3", "age": "range:1,120"})
    if not v.validate():
        print(v.errors.one())
"""

from validata.builtins import register_builtins
from validata.config import ValidationConfig, configure, get_config, reset_config
from validata.errors import (
    ArgumentConversionError,
    EmptyDataError,
    Errors,
    RegistrationError,
    RuleError,
    ValidataError,
    ValidationFailed,
)
from validata.factory import empty, from_form, from_json, from_map, from_query, from_struct, new
from validata.loader import RuleSet, rules_from_struct
from validata.registry import FilterRegistry, ValidatorRegistry, add_filter, add_validator
from validata.rules import FilterRule, Rule
from validata.sources import DataSource, FormData, MapData, StructData
from validata.translator import Translator
from validata.types import Provenance, SourceKind
from validata.validation import Validation

register_builtins()

__version__ = "0.1.0"

__all__ = [
    "ArgumentConversionError",
    "DataSource",
    "EmptyDataError",
    "Errors",
    "FilterRegistry",
    "FilterRule",
    "FormData",
    "MapData",
    "Provenance",
    "RegistrationError",
    "Rule",
    "RuleError",
    "RuleSet",
    "SourceKind",
    "StructData",
    "Translator",
    "ValidataError",
    "ValidationConfig",
    "Validation",
    "ValidationFailed",
    "ValidatorRegistry",
    "add_filter",
    "add_validator",
    "configure",
    "empty",
    "from_form",
    "from_json",
    "from_map",
    "from_query",
    "from_struct",
    "get_config",
    "new",
    "register_builtins",
    "reset_config",
    "rules_from_struct",
]
