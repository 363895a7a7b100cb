"""Generic OTLP exporter implementation.

Sends spans unchanged to any OTLP/HTTP compatible collector (Tempo,
Jaeger, an OpenTelemetry Collector, ...).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from routertel._internal.span_filter import PrivateAttributeFilter
from routertel.exceptions import ExporterInitError

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import SpanProcessor, TracerProvider

    from routertel.api.types import OtlpConfig, TraceConfig

logger = logging.getLogger(__name__)


def apply(
    config: OtlpConfig,
    provider: TracerProvider,
    trace_config: TraceConfig,
) -> SpanProcessor:
    """Register an OTLP export pipeline on ``provider``.

    Raises:
        ExporterInitError: If the exporter or batch processor cannot be
            constructed.
    """
    logger.info("configuring OTLP tracing: %s", config.batch_processor)

    kwargs: dict[str, Any] = {}
    traces_url = config.endpoint.traces_url()
    if traces_url is not None:
        kwargs["endpoint"] = traces_url
    if config.headers:
        kwargs["headers"] = dict(config.headers)

    try:
        exporter = OTLPSpanExporter(**kwargs)
    except Exception as e:
        raise ExporterInitError(f"Failed to create OTLP exporter: {e}") from e

    try:
        batch_processor = BatchSpanProcessor(
            exporter, **config.batch_processor.to_processor_kwargs()
        )
    except ValueError as e:
        exporter.shutdown()
        raise ExporterInitError(f"Invalid OTLP batch processor config: {e}") from e

    processor = PrivateAttributeFilter(batch_processor)
    provider.add_span_processor(processor)

    logger.debug(
        "OTLP exporter registered for service '%s' (endpoint=%s)",
        trace_config.service_name,
        config.endpoint,
    )
    return processor
