"""Span processors applied in front of every tracing backend.

The router records bookkeeping data on its spans under the
``apollo_private.`` attribute prefix. Those attributes are for the router
itself and must not reach third-party collectors.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from opentelemetry.sdk.trace import ReadableSpan, SpanProcessor

if TYPE_CHECKING:
    from opentelemetry.context import Context
    from opentelemetry.sdk.trace import Span

logger = logging.getLogger(__name__)

PRIVATE_ATTRIBUTE_PREFIX = "apollo_private."


def strip_private_attributes(span: ReadableSpan) -> ReadableSpan:
    """Return ``span`` without its private attributes.

    The span is returned as-is when it carries none, so the common case
    does not copy anything.
    """
    attributes = span.attributes
    if not attributes or not any(
        key.startswith(PRIVATE_ATTRIBUTE_PREFIX) for key in attributes
    ):
        return span

    return ReadableSpan(
        name=span.name,
        context=span.context,
        parent=span.parent,
        resource=span.resource,
        attributes={
            key: value
            for key, value in attributes.items()
            if not key.startswith(PRIVATE_ATTRIBUTE_PREFIX)
        },
        events=span.events,
        links=span.links,
        kind=span.kind,
        status=span.status,
        start_time=span.start_time,
        end_time=span.end_time,
        instrumentation_scope=span.instrumentation_scope,
    )


class PrivateAttributeFilter(SpanProcessor):
    """SpanProcessor that strips private router attributes before export.

    This processor wraps a delegate SpanProcessor (normally a
    ``BatchSpanProcessor``) and hands it a copy of each finished span with
    every ``apollo_private.*`` attribute removed.

    Args:
        delegate: The SpanProcessor to forward spans to.

    Example:
        >>> from opentelemetry.sdk.trace.export import BatchSpanProcessor
        >>> batch_processor = BatchSpanProcessor(some_exporter)
        >>> provider.add_span_processor(PrivateAttributeFilter(batch_processor))
    """

    def __init__(self, delegate: SpanProcessor) -> None:
        self._delegate = delegate

    @property
    def delegate(self) -> SpanProcessor:
        """The wrapped processor."""
        return self._delegate

    def on_start(
        self,
        span: "Span",
        parent_context: Optional["Context"] = None,
    ) -> None:
        """Forward span start to the delegate.

        Attributes are not final until the span ends, so nothing is
        filtered here.
        """
        self._delegate.on_start(span, parent_context)

    def on_end(self, span: ReadableSpan) -> None:
        """Forward the finished span without its private attributes."""
        self._delegate.on_end(strip_private_attributes(span))

    def shutdown(self) -> None:
        """Shutdown the delegate processor."""
        self._delegate.shutdown()

    def force_flush(self, timeout_millis: Optional[int] = None) -> bool:
        """Force flush the delegate processor.

        Args:
            timeout_millis: Maximum time to wait for flush in milliseconds.

        Returns:
            True if flush completed successfully, False otherwise.
        """
        if timeout_millis is None:
            return self._delegate.force_flush()
        return self._delegate.force_flush(timeout_millis)
