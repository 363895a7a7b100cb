"""Configuration loading, parsing, and validation for the routertel SDK."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from routertel.api.types import (
    BatchProcessorConfig,
    Config,
    DatadogConfig,
    OtlpConfig,
    TraceConfig,
    TracingConfig,
    ValidationConfig,
)
from routertel.exceptions import ConfigurationError
from routertel.sdk.endpoint import Endpoint, resolve_endpoint
from routertel.sdk.trace_config import SAMPLER_ALWAYS_OFF, SAMPLER_ALWAYS_ON

logger = logging.getLogger(__name__)

# Pattern for environment variable substitution: ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

TOP_LEVEL_KEYS = {"trace", "tracing", "validation"}
TRACE_KEYS = {
    "service_name",
    "service_namespace",
    "service_version",
    "sampler",
    "parent_based_sampler",
    "max_attributes_per_span",
    "max_events_per_span",
    "max_links_per_span",
    "attributes",
}
TRACING_KEYS = {"datadog", "otlp"}
DATADOG_KEYS = {"endpoint", "batch_processor"}
OTLP_KEYS = {"endpoint", "headers", "batch_processor"}
BATCH_PROCESSOR_KEYS = {
    "max_export_batch_size",
    "max_export_timeout_ms",
    "max_queue_size",
    "scheduled_delay_ms",
}
VALIDATION_KEYS = {"mode"}


def _substitute_env_vars(value: str, strict: bool) -> str:
    """Substitute ${VAR_NAME} patterns with environment variable values.

    Args:
        value: String potentially containing ${VAR_NAME} patterns.
        strict: If True, raise ConfigurationError for missing env vars.

    Returns:
        String with environment variables substituted.

    Raises:
        ConfigurationError: If strict=True and an env var is not set.
    """

    def replace_match(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            if strict:
                raise ConfigurationError(
                    f"Environment variable '{var_name}' is not set"
                )
            logger.warning(
                "Environment variable '%s' not set, using empty string", var_name
            )
            return ""
        return env_value

    return ENV_VAR_PATTERN.sub(replace_match, value)


def _substitute_env_vars_recursive(data: Any, strict: bool) -> Any:
    """Recursively substitute environment variables in a data structure."""
    if isinstance(data, dict):
        return {k: _substitute_env_vars_recursive(v, strict) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars_recursive(item, strict) for item in data]
    elif isinstance(data, str):
        return _substitute_env_vars(data, strict)
    else:
        return data


def _section(data: Any, name: str, known_keys: set[str]) -> dict[str, Any]:
    """Return a config section as a dict, rejecting unknown keys.

    A missing or empty section (``None``) is treated as ``{}``.
    """
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"'{name}' must be a mapping")

    unknown = sorted(str(k) for k in data if k not in known_keys)
    if unknown:
        raise ConfigurationError(
            f"Unknown field(s) in '{name}': {', '.join(unknown)}. "
            f"Valid fields: {', '.join(sorted(known_keys))}"
        )
    return data


def _parse_uint(value: Any, name: str) -> int | None:
    """Parse an optional non-negative integer."""
    if value is None:
        return None
    # bool is an int subclass, but `true` is never a valid size
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(
            f"'{name}' must be a non-negative integer, got {value!r}"
        )
    return value


def _parse_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"'{name}' must be true or false, got {value!r}")
    return value


def _parse_batch_processor_config(data: Any, prefix: str) -> BatchProcessorConfig:
    """Parse a batch_processor section."""
    name = f"{prefix}.batch_processor"
    data = _section(data, name, BATCH_PROCESSOR_KEYS)
    return BatchProcessorConfig(
        **{
            key: _parse_uint(data.get(key), f"{name}.{key}")
            for key in BATCH_PROCESSOR_KEYS
        }
    )


def _parse_endpoint(data: dict[str, Any], prefix: str) -> Endpoint:
    if "endpoint" not in data:
        raise ConfigurationError(f"'{prefix}.endpoint' is required")
    try:
        return resolve_endpoint(data["endpoint"])
    except ConfigurationError as e:
        raise ConfigurationError(f"'{prefix}.endpoint': {e}") from e


def _parse_datadog_config(data: Any) -> DatadogConfig:
    """Parse the tracing.datadog section."""
    data = _section(data, "tracing.datadog", DATADOG_KEYS)
    return DatadogConfig(
        endpoint=_parse_endpoint(data, "tracing.datadog"),
        batch_processor=_parse_batch_processor_config(
            data.get("batch_processor"), "tracing.datadog"
        ),
    )


def _parse_otlp_config(data: Any) -> OtlpConfig:
    """Parse the tracing.otlp section."""
    data = _section(data, "tracing.otlp", OTLP_KEYS)

    headers = data.get("headers") or {}
    if not isinstance(headers, dict):
        raise ConfigurationError("'tracing.otlp.headers' must be a mapping")

    return OtlpConfig(
        endpoint=_parse_endpoint(data, "tracing.otlp"),
        headers={str(k): str(v) for k, v in headers.items()},
        batch_processor=_parse_batch_processor_config(
            data.get("batch_processor"), "tracing.otlp"
        ),
    )


def _parse_tracing_config(data: Any) -> TracingConfig:
    """Parse the tracing section. Backends absent from it stay disabled."""
    data = _section(data, "tracing", TRACING_KEYS)
    return TracingConfig(
        datadog=_parse_datadog_config(data["datadog"]) if "datadog" in data else None,
        otlp=_parse_otlp_config(data["otlp"]) if "otlp" in data else None,
    )


def _parse_sampler(value: Any) -> str | float:
    if value in (SAMPLER_ALWAYS_ON, SAMPLER_ALWAYS_OFF):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if 0.0 <= value <= 1.0:
            return float(value)
    raise ConfigurationError(
        f"'trace.sampler' must be '{SAMPLER_ALWAYS_ON}', '{SAMPLER_ALWAYS_OFF}' "
        f"or a ratio between 0 and 1, got {value!r}"
    )


def _parse_trace_config(data: Any) -> TraceConfig:
    """Parse the trace section."""
    data = _section(data, "trace", TRACE_KEYS)
    defaults = TraceConfig()

    service_name = data.get("service_name", defaults.service_name)
    if not isinstance(service_name, str):
        raise ConfigurationError("'trace.service_name' must be a string")

    attributes = data.get("attributes") or {}
    if not isinstance(attributes, dict):
        raise ConfigurationError("'trace.attributes' must be a mapping")
    for key, value in attributes.items():
        if not isinstance(value, (str, bool, int, float)):
            raise ConfigurationError(
                f"'trace.attributes.{key}' must be a string, number or boolean"
            )

    namespace = data.get("service_namespace")
    version = data.get("service_version")

    return TraceConfig(
        service_name=service_name,
        service_namespace=str(namespace) if namespace is not None else None,
        service_version=str(version) if version is not None else None,
        sampler=_parse_sampler(data.get("sampler", defaults.sampler)),
        parent_based_sampler=_parse_bool(
            data.get("parent_based_sampler", defaults.parent_based_sampler),
            "trace.parent_based_sampler",
        ),
        max_attributes_per_span=_parse_uint(
            data.get("max_attributes_per_span"), "trace.max_attributes_per_span"
        ),
        max_events_per_span=_parse_uint(
            data.get("max_events_per_span"), "trace.max_events_per_span"
        ),
        max_links_per_span=_parse_uint(
            data.get("max_links_per_span"), "trace.max_links_per_span"
        ),
        attributes={str(k): v for k, v in attributes.items()},
    )


def _parse_validation_config(data: Any) -> ValidationConfig:
    """Parse validation configuration section."""
    data = _section(data, "validation", VALIDATION_KEYS)
    mode = data.get("mode", "permissive")
    if mode not in ("strict", "permissive"):
        logger.warning("Unknown validation mode '%s', defaulting to permissive", mode)
        mode = "permissive"
    return ValidationConfig(mode=mode)


def _validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of error messages.

    Args:
        config: Parsed configuration to validate.

    Returns:
        List of validation error messages. Empty if valid.
    """
    errors: list[str] = []

    if not config.trace.service_name:
        errors.append("trace.service_name must not be empty")

    if not config.tracing.configured():
        errors.append("no tracing backend configured under 'tracing'")

    return errors


def parse_config(data: Any, strict: bool | None = None) -> Config:
    """Parse an already-loaded configuration document.

    Args:
        data: Mapping decoded from YAML (or built in code).
        strict: Override validation mode. If None, use mode from the data.

    Returns:
        Parsed and validated Config.

    Raises:
        ConfigurationError: If the document does not match the schema, or
                           validation fails in strict mode.
    """
    if data is None:
        data = {}
    raw_data = _section(data, "<root>", TOP_LEVEL_KEYS)

    # Determine validation mode early (needed for env var substitution)
    validation_data = raw_data.get("validation") or {}
    validation_mode = (
        validation_data.get("mode", "permissive")
        if isinstance(validation_data, dict)
        else "permissive"
    )
    is_strict = strict if strict is not None else (validation_mode == "strict")

    data = _substitute_env_vars_recursive(raw_data, strict=is_strict)

    config = Config(
        trace=_parse_trace_config(data.get("trace")),
        tracing=_parse_tracing_config(data.get("tracing")),
        validation=_parse_validation_config(data.get("validation")),
    )

    # Override validation mode if specified
    if strict is not None:
        config.validation.mode = "strict" if strict else "permissive"

    errors = _validate_config(config)
    if errors:
        if config.is_strict:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}"
            )
        for error in errors:
            logger.warning("Configuration problem: %s", error)

    return config


def load_config(path: str | Path, strict: bool | None = None) -> Config:
    """Load and parse configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
        strict: Override validation mode. If None, use mode from config file.

    Returns:
        Parsed and validated Config.

    Raises:
        ConfigurationError: If file doesn't exist, YAML is invalid,
                           or the configuration is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        with open(path) as f:
            raw_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    return parse_config(raw_data, strict=strict)
