"""Process-wide defaults for new Validation instances."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class ValidationConfig:
    """Default policy flags copied into every new Validation.

    Attributes:
        stop_on_error: Abort the validation phase after the first error
        skip_on_empty: Skip non-required rules when the value is missing or empty
        update_source: Write validated values back into struct sources
        check_default: Run user default values through the rule pipeline
        max_body_bytes: Upper bound for JSON bodies read by validata.api
    """

    stop_on_error: bool = False
    skip_on_empty: bool = True
    update_source: bool = False
    check_default: bool = False
    max_body_bytes: int = 1 << 20

    @classmethod
    def from_env(cls) -> ValidationConfig:
        """Create config from environment variables.

        Recognised variables (unset ones keep the dataclass default):
        VALIDATA_STOP_ON_ERROR, VALIDATA_SKIP_ON_EMPTY, VALIDATA_UPDATE_SOURCE,
        VALIDATA_CHECK_DEFAULT, VALIDATA_MAX_BODY_BYTES
        """
        base = cls()
        max_bytes = os.environ.get("VALIDATA_MAX_BODY_BYTES")
        return cls(
            stop_on_error=_env_bool("VALIDATA_STOP_ON_ERROR", base.stop_on_error),
            skip_on_empty=_env_bool("VALIDATA_SKIP_ON_EMPTY", base.skip_on_empty),
            update_source=_env_bool("VALIDATA_UPDATE_SOURCE", base.update_source),
            check_default=_env_bool("VALIDATA_CHECK_DEFAULT", base.check_default),
            max_body_bytes=int(max_bytes) if max_bytes else base.max_body_bytes,
        )


_config = ValidationConfig()


def get_config() -> ValidationConfig:
    return _config


def configure(**changes) -> ValidationConfig:
    """Update process defaults. Call at startup, before validating.

    Raises:
        TypeError: For unknown option names
    """
    global _config
    known = {f.name for f in fields(ValidationConfig)}
    unknown = set(changes) - known
    if unknown:
        raise TypeError(f"unknown config option(s): {', '.join(sorted(unknown))}")
    _config = replace(_config, **changes)
    return _config


def reset_config() -> ValidationConfig:
    """Restore the built-in defaults. Primarily for testing."""
    global _config
    _config = ValidationConfig()
    return _config
