"""Router telemetry SDK: export router spans to Datadog and OTLP backends.

    import routertel
    routertel.init("/path/to/routertel.yaml")

Spans are renamed and given a Datadog resource on export; see
``routertel.exporters.datadog.mapping`` for the tables.
"""

from __future__ import annotations

from routertel._internal import logging as _logging  # noqa: F401
from routertel.exceptions import (
    ConfigurationError,
    ExporterInitError,
    RouterTelemetryError,
)
from routertel.sdk.endpoint import Endpoint, resolve_endpoint

__version__ = "0.1.0"

_API_NAMES = {
    "init",
    "shutdown",
    "is_configured",
    "Config",
    "TraceConfig",
    "TracingConfig",
    "DatadogConfig",
    "OtlpConfig",
    "BatchProcessorConfig",
    "ValidationConfig",
}

__all__ = sorted(
    _API_NAMES
    | {
        "ConfigurationError",
        "Endpoint",
        "ExporterInitError",
        "RouterTelemetryError",
        "resolve_endpoint",
        "__version__",
    }
)


def __getattr__(name: str):
    # The API pulls in the OpenTelemetry SDK, so load it on first use
    if name in _API_NAMES:
        import importlib

        return getattr(importlib.import_module("routertel.api"), name)
    raise AttributeError(f"module 'routertel' has no attribute '{name}'")


def __dir__() -> list[str]:
    return __all__
