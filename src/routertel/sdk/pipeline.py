"""Pipeline composition: provider creation + backend dispatch.

This module is responsible for:
- Building a TracerProvider from the shared trace settings
- Dispatching each configured backend to its exporter module
- Keeping one broken backend from taking the others down
"""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider

from routertel.exceptions import ExporterInitError
from routertel.sdk.trace_config import (
    build_resource,
    build_sampler,
    build_span_limits,
)

if TYPE_CHECKING:
    from routertel.api.types import Config

logger = logging.getLogger(__name__)

# Registry of tracing backends: name -> (module_path, apply_function_name)
TRACING_CONFIGURATORS: dict[str, tuple[str, str]] = {
    "datadog": ("routertel.exporters.datadog.exporter", "apply"),
    "otlp": ("routertel.exporters.otlp.exporter", "apply"),
}


def create_provider(config: Config, set_global: bool = True) -> TracerProvider:
    """Create a TracerProvider exporting to every configured backend.

    A backend that fails to initialise is skipped with an error log while
    the others are still registered. The failure is raised instead when
    validation is strict or when no configured backend could be set up.

    Args:
        config: SDK configuration.
        set_global: Install the provider as the global tracer provider.

    Returns:
        The configured TracerProvider.

    Raises:
        ExporterInitError: If a backend fails in strict mode, or every
                           configured backend fails.
    """
    trace_config = config.trace
    provider = TracerProvider(
        resource=build_resource(trace_config),
        sampler=build_sampler(trace_config),
        span_limits=build_span_limits(trace_config),
    )

    backends = config.tracing.configured()
    failures: list[ExporterInitError] = []
    for name, backend_config in backends.items():
        module_path, func_name = TRACING_CONFIGURATORS[name]
        module = importlib.import_module(module_path)
        apply_fn = getattr(module, func_name)

        try:
            apply_fn(backend_config, provider, trace_config)
            logger.debug("Tracing backend configured: %s", name)
        except ExporterInitError as e:
            if config.is_strict:
                provider.shutdown()
                raise
            logger.error("Tracing backend '%s' disabled: %s", name, e)
            failures.append(e)

    if backends and len(failures) == len(backends):
        provider.shutdown()
        raise failures[0]

    if set_global:
        trace.set_tracer_provider(provider)
    return provider
