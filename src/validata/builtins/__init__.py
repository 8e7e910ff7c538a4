"""Built-in validators and filters.

Both catalogues are registered with the global registries when validata is
imported. Tests that clear the registries call register_builtins() again.
"""

from validata.builtins.filters import BUILTIN_FILTERS, register_builtin_filters
from validata.builtins.validators import BUILTIN_VALIDATORS, register_builtin_validators


def register_builtins() -> None:
    """Register all built-in validators and filters. Idempotent."""
    register_builtin_validators()
    register_builtin_filters()


__all__ = [
    "BUILTIN_FILTERS",
    "BUILTIN_VALIDATORS",
    "register_builtin_filters",
    "register_builtin_validators",
    "register_builtins",
]
