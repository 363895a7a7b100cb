"""Test fakes for external dependencies.

This module provides typed test doubles (fakes) that validate usage and
document expected API surfaces. Prefer these over MagicMock for better
type safety and self-documenting tests.

Following the testing philosophy:
- Fakes are working implementations with shortcuts
- They validate usage patterns (unlike MagicMock which accepts anything)
- They catch typos and API drift at test time
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping

from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter


@dataclass
class FakeSpan:
    """Minimal span exposing only what the Datadog mappers read."""

    name: str
    attributes: Mapping[str, Any] | None = field(default_factory=dict)


class RecordingOTLPExporter(InMemorySpanExporter):
    """Stand-in for OTLPSpanExporter that keeps spans in memory.

    It accepts the same keyword arguments the SDK passes to the real
    exporter and records them, so tests can check which endpoint and
    headers a backend was configured with without any network I/O.

    Every instance is tracked in ``instances`` in creation order. Call
    ``reset()`` between tests.
    """

    instances: ClassVar[list["RecordingOTLPExporter"]] = []

    def __init__(
        self,
        endpoint: str | None = None,
        certificate_file: str | None = None,
        client_key_file: str | None = None,
        client_certificate_file: str | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        compression: Any = None,
        session: Any = None,
    ) -> None:
        super().__init__()
        self.endpoint = endpoint
        self.headers = headers
        self.timeout = timeout
        self.shutdown_called = False
        RecordingOTLPExporter.instances.append(self)

    def shutdown(self) -> None:
        self.shutdown_called = True
        super().shutdown()

    @classmethod
    def reset(cls) -> None:
        cls.instances.clear()

    @classmethod
    def last(cls) -> "RecordingOTLPExporter":
        assert cls.instances, "no OTLP exporter was created"
        return cls.instances[-1]


class BrokenOTLPExporter:
    """Stand-in for OTLPSpanExporter whose construction always fails."""

    def __init__(self, **kwargs: Any) -> None:
        raise ValueError("unsupported compression")
