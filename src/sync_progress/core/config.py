"""Configuration system for sync-progress.

This module implements the configuration schema using Pydantic for
validation, with support for environment variable resolution and fail-fast
validation with actionable error messages. Configuration is optional:
every model has usable defaults.
"""

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Final, Literal, Self

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from sync_progress.utils.logging import configure_logging

# Matches ${VARIABLE_NAME} references in string values
ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Z0-9_]+)\}")


class EstimationConfig(BaseModel):
    """Tuning for rate smoothing and ETA blending.

    The defaults reproduce the estimator's reference behavior; they rarely
    need changing.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    tick_interval: Annotated[
        float,
        Field(gt=0, le=60, description="Seconds between estimate updates"),
    ] = 1.0
    smoothing: Annotated[
        float,
        Field(ge=0.0, lt=1.0, description="Final weight of the historical rate in the moving average"),
    ] = 0.9
    ramp_decay: Annotated[
        float,
        Field(ge=0.0, lt=1.0, description="Per-tick decay of the initial ramp-up term"),
    ] = 0.7
    fps_lower: Annotated[
        float,
        Field(ge=0.0, le=1.0, description="Fraction of peak files/s below which the run is not file-bound"),
    ] = 0.5
    fps_upper: Annotated[
        float,
        Field(ge=0.0, le=1.0, description="Fraction of peak files/s above which the run is fully file-bound"),
    ] = 0.8
    transfer_lower: Annotated[
        float,
        Field(ge=0.0, le=1.0, description="Fraction of peak bytes/s below which transfer counts as fully slow"),
    ] = 0.01
    transfer_upper: Annotated[
        float,
        Field(ge=0.0, le=1.0, description="Fraction of peak bytes/s above which transfer is not slow"),
    ] = 0.1

    @model_validator(mode="after")
    def validate_threshold_order(self) -> Self:
        """Validate that each lower threshold sits below its upper threshold.

        Raises:
            ValueError: If a lower threshold is not strictly below its upper one
        """
        if self.fps_lower >= self.fps_upper:
            msg = f"fps_lower ({self.fps_lower}) must be less than fps_upper ({self.fps_upper})"
            raise ValueError(msg)
        if self.transfer_lower >= self.transfer_upper:
            msg = (
                f"transfer_lower ({self.transfer_lower}) must be less than "
                f"transfer_upper ({self.transfer_upper})"
            )
            raise ValueError(msg)
        return self


class LoggingConfig(BaseModel):
    """Configuration for log output."""

    model_config = ConfigDict(extra="forbid")

    level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        Field(description="Log level"),
    ] = "INFO"
    enable_console: Annotated[
        bool,
        Field(description="Write log records to stdout"),
    ] = True
    log_file: Annotated[
        Path | None,
        Field(description="Optional rotating log file (null for none)"),
    ] = None

    def apply(self) -> None:
        """Configure root logging from these settings."""
        configure_logging(
            log_level=self.level,
            enable_console=self.enable_console,
            log_file=self.log_file,
        )


class MainConfig(BaseModel):
    """Complete configuration."""

    model_config = ConfigDict(extra="forbid")

    estimation: EstimationConfig = Field(default_factory=EstimationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class ConfigurationError(Exception):
    """Exception raised when configuration loading or validation fails."""


class EnvironmentVariableError(ConfigurationError):
    """Exception raised when a referenced environment variable is not set."""


def resolve_env_var(value: str) -> str:
    """Replace ``${VAR}`` references in ``value`` with environment values.

    Raises:
        EnvironmentVariableError: Naming every referenced variable that is not set

    Examples:
        >>> os.environ["SYNC_LOG_LEVEL"] = "DEBUG"
        >>> resolve_env_var("${SYNC_LOG_LEVEL}")
        'DEBUG'
    """
    missing = sorted({name for name in ENV_VAR_PATTERN.findall(value) if name not in os.environ})
    if missing:
        msg = f"Environment variable(s) not set: {', '.join(missing)}"
        raise EnvironmentVariableError(msg)

    return ENV_VAR_PATTERN.sub(lambda match: os.environ[match.group(1)], value)


def resolve_env_vars_in_dict(data: Mapping[str, object]) -> dict[str, object]:
    """Resolve ``${VAR}`` references anywhere inside a parsed YAML mapping.

    Strings nested at any depth in mappings and lists are resolved; other
    scalars pass through. A failure names the key path of the offending
    value, e.g. ``logging.log_file``.
    """
    return {key: _resolve_value(value, key) for key, value in data.items()}


def _resolve_value(value: object, location: str) -> object:
    if isinstance(value, str):
        try:
            return resolve_env_var(value)
        except EnvironmentVariableError as e:
            msg = f"{location}: {e}"
            raise EnvironmentVariableError(msg) from e
    if isinstance(value, dict):
        return {
            key: _resolve_value(item, f"{location}.{key}")
            for key, item in value.items()  # pyright: ignore[reportUnknownVariableType]  # YAML boundary
        }
    if isinstance(value, list):
        return [
            _resolve_value(item, f"{location}[{index}]")
            for index, item in enumerate(value)  # pyright: ignore[reportUnknownVariableType, reportUnknownArgumentType]  # YAML boundary
        ]
    return value


def _read_yaml(config_path: Path) -> object:
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        msg = f"Configuration file not found: {config_path}"
        raise ConfigurationError(msg) from e
    except OSError as e:
        msg = f"Cannot read configuration file {config_path}: {e}"
        raise ConfigurationError(msg) from e

    try:
        return yaml.safe_load(text)  # pyright: ignore[reportAny]  # YAML boundary
    except yaml.YAMLError as e:
        msg = f"Failed to parse {config_path}: {e}"
        raise ConfigurationError(msg) from e


def _describe_validation_error(error: ValidationError, config_path: Path) -> str:
    lines = [f"Invalid configuration in {config_path}:"]
    for detail in error.errors():
        location = " → ".join(str(part) for part in detail["loc"])
        lines.append(f"  {location}: {detail['msg']} [{detail['type']}]")
    return "\n".join(lines)


def load_config(config_path: Path) -> MainConfig:
    """Load and validate configuration from a YAML file.

    An empty file yields the defaults. Every failure (missing or unreadable
    file, bad YAML, unset environment variable, invalid value) surfaces as a
    single ``ConfigurationError`` naming the file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Validated MainConfig instance

    Raises:
        ConfigurationError: If the file cannot be loaded or is invalid
    """
    raw_data = _read_yaml(config_path)
    if raw_data is None:
        return MainConfig()

    if not isinstance(raw_data, dict):
        msg = f"Expected YAML dictionary at the root of {config_path}, got {type(raw_data).__name__}"
        raise ConfigurationError(msg)

    try:
        resolved = resolve_env_vars_in_dict(raw_data)  # pyright: ignore[reportUnknownArgumentType]  # YAML boundary
        return MainConfig.model_validate(resolved)
    except EnvironmentVariableError as e:
        msg = f"Environment variable resolution failed in {config_path}: {e}"
        raise ConfigurationError(msg) from e
    except ValidationError as e:
        raise ConfigurationError(_describe_validation_error(e, config_path)) from e
