"""Public configuration types for the routertel SDK.

These types are part of the stable public API and follow semver guarantees.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

from opentelemetry.sdk.environment_variables import OTEL_BSP_MAX_EXPORT_BATCH_SIZE

from routertel.sdk.endpoint import Endpoint

# BatchSpanProcessor's own default when OTEL_BSP_MAX_EXPORT_BATCH_SIZE is unset
SDK_DEFAULT_EXPORT_BATCH_SIZE = 512


def _default_export_batch_size() -> int:
    """Return the batch size BatchSpanProcessor would pick on its own."""
    try:
        return int(
            os.environ.get(
                OTEL_BSP_MAX_EXPORT_BATCH_SIZE, SDK_DEFAULT_EXPORT_BATCH_SIZE
            )
        )
    except ValueError:
        return SDK_DEFAULT_EXPORT_BATCH_SIZE


@dataclass(frozen=True)
class BatchProcessorConfig:
    """Batch span processor tunables.

    Unset values are left to the OpenTelemetry SDK, which reads its own
    defaults and the ``OTEL_BSP_*`` environment variables.
    """

    max_export_batch_size: int | None = None
    max_export_timeout_ms: int | None = None
    max_queue_size: int | None = None
    scheduled_delay_ms: int | None = None

    def to_processor_kwargs(self) -> dict[str, int]:
        """Return keyword arguments for ``BatchSpanProcessor``.

        A batch can never be larger than the queue, so once a queue size is
        set the batch size (configured or default) is capped at it.
        """
        kwargs: dict[str, int] = {}
        batch_size = self.max_export_batch_size
        if self.max_queue_size is not None:
            kwargs["max_queue_size"] = self.max_queue_size
            if batch_size is None:
                batch_size = _default_export_batch_size()
            batch_size = min(batch_size, self.max_queue_size)
        if self.scheduled_delay_ms is not None:
            kwargs["schedule_delay_millis"] = self.scheduled_delay_ms
        if batch_size is not None:
            kwargs["max_export_batch_size"] = batch_size
        if self.max_export_timeout_ms is not None:
            kwargs["export_timeout_millis"] = self.max_export_timeout_ms
        return kwargs

    def __str__(self) -> str:
        def show(value: int | None, unit: str = "") -> str:
            return "default" if value is None else f"{value}{unit}"

        return (
            "BatchSpanProcessor("
            f"max_export_batch_size={show(self.max_export_batch_size)}, "
            f"max_export_timeout={show(self.max_export_timeout_ms, 'ms')}, "
            f"max_queue_size={show(self.max_queue_size)}, "
            f"scheduled_delay={show(self.scheduled_delay_ms, 'ms')})"
        )


@dataclass
class DatadogConfig:
    """Datadog tracing backend configuration."""

    endpoint: Endpoint = field(default_factory=Endpoint.default)
    batch_processor: BatchProcessorConfig = field(
        default_factory=BatchProcessorConfig
    )


@dataclass
class OtlpConfig:
    """Generic OTLP/HTTP tracing backend configuration."""

    endpoint: Endpoint = field(default_factory=Endpoint.default)
    headers: dict[str, str] = field(default_factory=dict)
    batch_processor: BatchProcessorConfig = field(
        default_factory=BatchProcessorConfig
    )


@dataclass
class TracingConfig:
    """Tracing backends to export to. Unset backends are disabled."""

    datadog: DatadogConfig | None = None
    otlp: OtlpConfig | None = None

    def configured(self) -> dict[str, Any]:
        """Return enabled backend configs keyed by backend name."""
        backends: dict[str, Any] = {}
        if self.datadog is not None:
            backends["datadog"] = self.datadog
        if self.otlp is not None:
            backends["otlp"] = self.otlp
        return backends


@dataclass
class TraceConfig:
    """Backend-independent trace settings shared by every exporter."""

    service_name: str = "router"
    service_namespace: str | None = None
    service_version: str | None = None
    # "always_on" | "always_off" | ratio between 0.0 and 1.0
    sampler: str | float = "always_on"
    parent_based_sampler: bool = True
    max_attributes_per_span: int | None = None
    max_events_per_span: int | None = None
    max_links_per_span: int | None = None
    # Extra resource attributes
    attributes: dict[str, str | bool | int | float] = field(default_factory=dict)


@dataclass
class ValidationConfig:
    """Validation mode configuration."""

    mode: str = "permissive"  # "strict" | "permissive"


@dataclass
class Config:
    """Complete SDK configuration."""

    trace: TraceConfig = field(default_factory=TraceConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)

    @property
    def is_strict(self) -> bool:
        """Return True if validation mode is strict."""
        return self.validation.mode == "strict"
