"""Conversion of TraceConfig into OpenTelemetry SDK objects."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from opentelemetry.sdk.resources import (
    SERVICE_NAME,
    SERVICE_NAMESPACE,
    SERVICE_VERSION,
    Resource,
)
from opentelemetry.sdk.trace import SpanLimits
from opentelemetry.sdk.trace.sampling import (
    ALWAYS_OFF,
    ALWAYS_ON,
    ParentBased,
    Sampler,
    TraceIdRatioBased,
)

if TYPE_CHECKING:
    from routertel.api.types import TraceConfig

SAMPLER_ALWAYS_ON = "always_on"
SAMPLER_ALWAYS_OFF = "always_off"


def build_resource(trace_config: TraceConfig) -> Resource:
    """Build the provider Resource.

    Service identity is applied last so configured ``attributes`` cannot
    override it.
    """
    attributes: dict[str, Any] = dict(trace_config.attributes)
    attributes[SERVICE_NAME] = trace_config.service_name
    if trace_config.service_namespace:
        attributes[SERVICE_NAMESPACE] = trace_config.service_namespace
    if trace_config.service_version:
        attributes[SERVICE_VERSION] = trace_config.service_version
    return Resource.create(attributes)


def build_sampler(trace_config: TraceConfig) -> Sampler:
    """Build the root sampler, wrapped in ParentBased when enabled."""
    sampler = trace_config.sampler
    root: Sampler
    if sampler == SAMPLER_ALWAYS_ON:
        root = ALWAYS_ON
    elif sampler == SAMPLER_ALWAYS_OFF:
        root = ALWAYS_OFF
    else:
        root = TraceIdRatioBased(float(sampler))

    if trace_config.parent_based_sampler:
        return ParentBased(root)
    return root


def build_span_limits(trace_config: TraceConfig) -> SpanLimits:
    """Build span limits. Unset limits keep the SDK defaults."""
    return SpanLimits(
        max_span_attributes=trace_config.max_attributes_per_span,
        max_events=trace_config.max_events_per_span,
        max_links=trace_config.max_links_per_span,
    )
