"""Public API for the routertel SDK.

This module re-exports the stable public interface:
- init() - Initialize router tracing
- shutdown() - Shutdown the SDK and flush spans
- is_configured() - Check if the SDK has been initialized
- Config and related types - Programmatic configuration
"""

from __future__ import annotations

from routertel.api._init import init, is_configured, shutdown
from routertel.api.types import (
    BatchProcessorConfig,
    Config,
    DatadogConfig,
    OtlpConfig,
    TraceConfig,
    TracingConfig,
    ValidationConfig,
)

__all__ = [
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
]
