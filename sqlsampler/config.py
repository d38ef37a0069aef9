"""Sampler configuration.

Settings shared by every sampler in the process:

- ``null_marker``: argument value that binds a typed SQL NULL
- ``max_open_prepared_statements``: capacity of each per-connection statement cache
- ``parameter_style``: DB-API paramstyle the ``?`` markers are rewritten to

Environment Variables Supported:
- SQLSAMPLER_NULL_MARKER
- SQLSAMPLER_MAX_OPEN_PREPARED_STATEMENTS
- SQLSAMPLER_PARAMETER_STYLE
"""

import os
import threading
from dataclasses import dataclass, replace
from typing import Any, Final, Optional

from typing_extensions import Self

from sqlsampler.core.parameters import ParameterStyle
from sqlsampler.exceptions import ImproperConfigurationError
from sqlsampler.utils.logging import get_logger

__all__ = (
    "DEFAULT_MAX_OPEN_PREPARED_STATEMENTS",
    "DEFAULT_NULL_MARKER",
    "SamplerConfig",
    "get_global_config",
    "load_config_from_env",
    "reset_global_config",
    "set_global_config",
)

logger = get_logger("sqlsampler.config")

DEFAULT_NULL_MARKER: Final = "]NULL["
DEFAULT_MAX_OPEN_PREPARED_STATEMENTS: Final = 100


@dataclass(frozen=True)
class SamplerConfig:
    """Process-wide sampler settings."""

    null_marker: str = DEFAULT_NULL_MARKER
    max_open_prepared_statements: int = DEFAULT_MAX_OPEN_PREPARED_STATEMENTS
    parameter_style: ParameterStyle = ParameterStyle.QMARK

    def validate(self) -> "list[str]":
        """Validate configuration consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        if not self.null_marker:
            errors.append("null_marker must not be empty")
        if self.max_open_prepared_statements <= 0:
            errors.append("max_open_prepared_statements must be positive")
        if not isinstance(self.parameter_style, ParameterStyle):
            errors.append(f"parameter_style must be a ParameterStyle, got {self.parameter_style!r}")
        return errors

    def replace(self, **changes: Any) -> Self:
        """Create a new configuration with updated values."""
        return replace(self, **changes)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as e:
        msg = f"Environment variable {name} must be an integer, got {value!r}"
        raise ImproperConfigurationError(msg) from e


def _env_parameter_style(name: str, default: ParameterStyle) -> ParameterStyle:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return ParameterStyle(value.strip().lower())
    except ValueError as e:
        supported = ", ".join(style.value for style in ParameterStyle)
        msg = f"Environment variable {name} must be one of {supported}, got {value!r}"
        raise ImproperConfigurationError(msg) from e


def load_config_from_env() -> SamplerConfig:
    """Load configuration from environment variables.

    Unset variables keep their defaults.

    Returns:
        SamplerConfig loaded from environment variables
    """
    return SamplerConfig(
        null_marker=os.getenv("SQLSAMPLER_NULL_MARKER") or DEFAULT_NULL_MARKER,
        max_open_prepared_statements=_env_int(
            "SQLSAMPLER_MAX_OPEN_PREPARED_STATEMENTS", DEFAULT_MAX_OPEN_PREPARED_STATEMENTS
        ),
        parameter_style=_env_parameter_style("SQLSAMPLER_PARAMETER_STYLE", ParameterStyle.QMARK),
    )


_global_config: Optional[SamplerConfig] = None
_config_lock = threading.Lock()


def get_global_config() -> SamplerConfig:
    """Get the process-wide configuration, loading it from the environment on first use."""
    global _global_config
    if _global_config is None:
        with _config_lock:
            if _global_config is None:
                _global_config = load_config_from_env()
    return _global_config


def set_global_config(config: SamplerConfig) -> None:
    """Replace the process-wide configuration.

    Args:
        config: New configuration to set globally

    Raises:
        ImproperConfigurationError: If the configuration does not validate.
    """
    global _global_config
    errors = config.validate()
    if errors:
        msg = f"Invalid configuration: {', '.join(errors)}"
        raise ImproperConfigurationError(msg)
    with _config_lock:
        _global_config = config
    logger.debug("Global sampler configuration updated: %r", config)


def reset_global_config() -> None:
    """Forget the process-wide configuration so the next access reloads it."""
    global _global_config
    with _config_lock:
        _global_config = None
