"""Datadog exporter implementation.

Spans are shipped to the Datadog Agent's OTLP/HTTP intake. Before export
each span is adapted to Datadog conventions: the Agent reads the
``operation.name`` and ``resource.name`` span attributes as the Datadog
operation and resource, and ``service.name`` from the span's resource.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Sequence
from urllib.parse import urlsplit

from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)

from routertel._internal.span_filter import PrivateAttributeFilter
from routertel.exceptions import ExporterInitError
from routertel.exporters.datadog.mapping import (
    NameMapper,
    ResourceMapper,
    map_name,
    map_resource,
)

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import SpanProcessor, TracerProvider

    from routertel.api.types import DatadogConfig, TraceConfig
    from routertel.sdk.endpoint import Endpoint

logger = logging.getLogger(__name__)

OPERATION_NAME_ATTR = "operation.name"
RESOURCE_NAME_ATTR = "resource.name"

# The Agent's native trace API port. It does not accept OTLP.
AGENT_NATIVE_TRACE_PORT = 8126


class DatadogSpanExporter(SpanExporter):
    """SpanExporter that applies Datadog naming before delegating.

    Args:
        delegate: Exporter that ships the adapted spans.
        service_name: Datadog service name stamped on every span.
        name_mapping: Maps a span name to a Datadog operation name.
        resource_mapping: Maps a span to a Datadog resource.
    """

    def __init__(
        self,
        delegate: SpanExporter,
        service_name: str,
        name_mapping: NameMapper = map_name,
        resource_mapping: ResourceMapper = map_resource,
    ) -> None:
        self._delegate = delegate
        self._service_name = service_name
        self._service_resource = Resource({SERVICE_NAME: service_name})
        self._name_mapping = name_mapping
        self._resource_mapping = resource_mapping

    @property
    def delegate(self) -> SpanExporter:
        return self._delegate

    @property
    def service_name(self) -> str:
        return self._service_name

    def adapt(self, span: ReadableSpan) -> ReadableSpan:
        """Return a copy of ``span`` carrying Datadog naming."""
        attributes: dict[str, Any] = dict(span.attributes or {})
        attributes[OPERATION_NAME_ATTR] = self._name_mapping(span.name)
        attributes[RESOURCE_NAME_ATTR] = self._resource_mapping(span)

        resource = (
            span.resource.merge(self._service_resource)
            if span.resource is not None
            else self._service_resource
        )

        return ReadableSpan(
            name=span.name,
            context=span.context,
            parent=span.parent,
            resource=resource,
            attributes=attributes,
            events=span.events,
            links=span.links,
            kind=span.kind,
            status=span.status,
            start_time=span.start_time,
            end_time=span.end_time,
            instrumentation_scope=span.instrumentation_scope,
        )

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        return self._delegate.export([self.adapt(span) for span in spans])

    def shutdown(self) -> None:
        self._delegate.shutdown()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self._delegate.force_flush(timeout_millis)


def build_exporter(
    endpoint: Endpoint,
    service_name: str,
    name_mapping: NameMapper = map_name,
    resource_mapping: ResourceMapper = map_resource,
) -> DatadogSpanExporter:
    """Create a DatadogSpanExporter for the given endpoint.

    The Agent address is only passed on for explicit endpoints. The default
    endpoint leaves the OTLP exporter on its own default, which is the
    Agent's local OTLP/HTTP port.

    Raises:
        ExporterInitError: If the exporter cannot be constructed.
    """
    if not service_name:
        raise ExporterInitError("Datadog exporter requires a service name")

    kwargs: dict[str, Any] = {}
    traces_url = endpoint.traces_url()
    if traces_url is not None:
        kwargs["endpoint"] = traces_url
        if urlsplit(traces_url).port == AGENT_NATIVE_TRACE_PORT:
            logger.warning(
                "Datadog endpoint %s uses the Agent's native trace port; "
                "spans are sent over OTLP/HTTP, point it at the Agent's "
                "OTLP receiver (usually port 4318)",
                endpoint,
            )

    try:
        delegate = OTLPSpanExporter(**kwargs)
    except Exception as e:
        raise ExporterInitError(f"Failed to create Datadog exporter: {e}") from e

    return DatadogSpanExporter(
        delegate,
        service_name,
        name_mapping=name_mapping,
        resource_mapping=resource_mapping,
    )


def apply(
    config: DatadogConfig,
    provider: TracerProvider,
    trace_config: TraceConfig,
) -> SpanProcessor:
    """Register a Datadog export pipeline on ``provider``.

    Args:
        config: Datadog backend configuration.
        provider: TracerProvider to add the span processor to.
        trace_config: Shared trace settings (service name).

    Returns:
        The span processor added to the provider.

    Raises:
        ExporterInitError: If the exporter or batch processor cannot be
            constructed. Nothing is registered in that case.
    """
    logger.info("configuring Datadog tracing: %s", config.batch_processor)

    exporter = build_exporter(config.endpoint, trace_config.service_name)
    try:
        batch_processor = BatchSpanProcessor(
            exporter, **config.batch_processor.to_processor_kwargs()
        )
    except ValueError as e:
        exporter.shutdown()
        raise ExporterInitError(f"Invalid Datadog batch processor config: {e}") from e

    processor = PrivateAttributeFilter(batch_processor)
    provider.add_span_processor(processor)

    logger.debug("Datadog exporter registered (endpoint=%s)", config.endpoint)
    return processor
