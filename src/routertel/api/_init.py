"""Main SDK entry points: init(), shutdown(), is_configured().

This module provides the primary public interface for the SDK.
"""

from __future__ import annotations

import atexit
import logging
import os
from pathlib import Path

from opentelemetry.sdk.trace import TracerProvider

from routertel.api.types import Config
from routertel.exceptions import ConfigurationError
from routertel.sdk.config import load as config_load
from routertel.sdk import lifecycle
from routertel.sdk.pipeline import create_provider

logger = logging.getLogger(__name__)

# Environment variable for config path fallback
ROUTERTEL_CONFIG_PATH_ENV = "ROUTERTEL_CONFIG_PATH"

_atexit_registered = False


def _resolve_config_path(config_path: str | Path | None) -> Path:
    """Resolve configuration file path from argument or environment.

    Raises:
        ConfigurationError: If no config path is provided and
                           ROUTERTEL_CONFIG_PATH env var is not set.
    """
    if config_path is not None:
        return Path(config_path)

    env_path = os.environ.get(ROUTERTEL_CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)

    raise ConfigurationError(
        f"No configuration path provided. Either pass a config path to init() "
        f"or set the {ROUTERTEL_CONFIG_PATH_ENV} environment variable."
    )


def init(config: str | Path | Config | None = None) -> TracerProvider:
    """Initialize router tracing with the given configuration.

    Configuration can be provided as:
    - A path to a YAML config file (str or Path)
    - A Config object for programmatic configuration
    - None to use the ROUTERTEL_CONFIG_PATH environment variable

    After initialization:
    - Every configured backend exports spans from the global provider
    - An atexit handler is registered for automatic shutdown
    - is_configured() returns True

    Args:
        config: Configuration source.

    Returns:
        The global TracerProvider.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
        ExporterInitError: If backends fail to initialise (see
                           create_provider for when this is raised).
    """
    global _atexit_registered

    if isinstance(config, Config):
        resolved_config = config
    else:
        resolved_config = config_load.load_config(_resolve_config_path(config))

    existing = lifecycle.active_provider()
    if existing is not None:
        # The global provider can only be set once per process
        logger.warning("routertel already initialized, keeping existing provider")
        return existing

    provider = create_provider(resolved_config)
    lifecycle.install(provider)
    if not _atexit_registered:
        atexit.register(lifecycle.shutdown)
        _atexit_registered = True

    logger.debug(
        "routertel initialized for service '%s' with backends: %s",
        resolved_config.trace.service_name,
        ", ".join(resolved_config.tracing.configured()) or "none",
    )
    return provider


def shutdown() -> None:
    """Shutdown the SDK and flush pending spans.

    It is idempotent and safe to call multiple times.
    """
    lifecycle.shutdown()


def is_configured() -> bool:
    """Check if the SDK has been initialized.

    Returns:
        True if init() has been called successfully, False otherwise.
    """
    return lifecycle.is_configured()
