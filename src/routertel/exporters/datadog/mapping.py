"""Span name and resource mapping for Datadog.

Router spans are named after the pipeline stage that produced them
(``request``, ``supergraph``, ``fetch`` ...). Datadog dashboards expect
dotted operation names and a per-span "resource" that identifies what the
span did, such as the HTTP route or the GraphQL operation name.

Both mappers run once per exported span on the export thread. They only
read from the immutable tables below and never raise.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Protocol

# Operation name used for spans that have no entry in SPAN_NAME_MAPPING
FALLBACK_SPAN_NAME = "apollo_router"

SPAN_NAME_MAPPING: Mapping[str, str] = MappingProxyType(
    {
        "request": "supergraph.request",
        "router": "supergraph.router",
        "supergraph": "supergraph.operation",
        "query_planning": "supergraph.query_planning",
        "execution": "supergraph.execute",
        "fetch": "supergraph.fetch",
        "subgraph": "subgraph.operation",
        "subgraph_request": "subgraph.request",
    }
)

# Span name -> attribute key holding that span's resource
SPAN_RESOURCE_ATTRIBUTE_MAPPING: Mapping[str, str] = MappingProxyType(
    {
        "request": "http.route",
        "supergraph": "graphql.operation.name",
        "query_planning": "graphql.operation.name",
        "subgraph": "graphql.operation.name",
        "subgraph_request": "graphql.operation.name",
    }
)


class SpanLike(Protocol):
    """The parts of a span the mappers read."""

    @property
    def name(self) -> str: ...

    @property
    def attributes(self) -> Optional[Mapping[str, Any]]: ...


NameMapper = Callable[[str], str]
ResourceMapper = Callable[[SpanLike], str]


def map_name(
    span_kind: str, mapping: Mapping[str, str] = SPAN_NAME_MAPPING
) -> str:
    """Return the Datadog operation name for a router span name."""
    return mapping.get(span_kind, FALLBACK_SPAN_NAME)


def map_resource(
    span: SpanLike, mapping: Mapping[str, str] = SPAN_RESOURCE_ATTRIBUTE_MAPPING
) -> str:
    """Return the Datadog resource for a span.

    The resource is the string value of the attribute registered for the
    span's name. Spans with no registered attribute, without the attribute,
    or with a non-string value use their own name instead.

    Args:
        span: Span to read. It is never modified.
        mapping: Span name to attribute key table.

    Returns:
        The resource string.
    """
    name = span.name
    key = mapping.get(name)
    if key is None:
        return name

    attributes = span.attributes
    if not attributes:
        return name

    value = attributes.get(key)
    if isinstance(value, str):
        return value
    return name
