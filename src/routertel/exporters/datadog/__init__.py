"""Datadog exporter for routertel."""

from routertel.exporters.datadog.exporter import (
    DatadogSpanExporter,
    apply,
    build_exporter,
)
from routertel.exporters.datadog.mapping import (
    FALLBACK_SPAN_NAME,
    SPAN_NAME_MAPPING,
    SPAN_RESOURCE_ATTRIBUTE_MAPPING,
    map_name,
    map_resource,
)

__all__ = [
    "DatadogSpanExporter",
    "apply",
    "build_exporter",
    "map_name",
    "map_resource",
    "FALLBACK_SPAN_NAME",
    "SPAN_NAME_MAPPING",
    "SPAN_RESOURCE_ATTRIBUTE_MAPPING",
]
