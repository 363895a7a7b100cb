"""End-to-end tests: YAML config -> init() -> spans -> Datadog exporter.

The OTLP transport is replaced by the in-memory recorder from conftest, so
these tests exercise the real TracerProvider, BatchSpanProcessor and span
adaptation without a collector.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from opentelemetry import trace as trace_api
from opentelemetry.sdk.resources import SERVICE_NAME

from routertel.api import init, shutdown
from routertel.exporters.datadog.exporter import (
    OPERATION_NAME_ATTR,
    RESOURCE_NAME_ATTR,
)
from tests.fakes import RecordingOTLPExporter

if TYPE_CHECKING:
    from pathlib import Path

CONFIG = """trace:
  service_name: products-router
  attributes:
    deployment.environment: test

tracing:
  datadog:
    endpoint: datadog-agent:4318
    batch_processor:
      scheduled_delay_ms: 50
      max_export_batch_size: 8
      max_queue_size: 32
"""


@pytest.fixture
def datadog_config_file(write_config) -> "Path":
    return write_config(CONFIG)


@pytest.mark.integration
class TestDatadogExport:
    """Router spans exported through a fully initialised pipeline."""

    def test_router_request_tree_is_exported_with_datadog_naming(
        self,
        datadog_config_file: "Path",
        otlp_recorder: type[RecordingOTLPExporter],
    ) -> None:
        """
        GIVEN routertel initialised from a Datadog config
        WHEN the router records a request -> supergraph -> subgraph span tree
        THEN every span is exported with its Datadog operation and resource
        AND router-private attributes never leave the process
        """
        provider = init(datadog_config_file)
        tracer = trace_api.get_tracer("router")

        with tracer.start_as_current_span(
            "request",
            attributes={"http.route": "/graphql", "apollo_private.request": True},
        ):
            with tracer.start_as_current_span(
                "supergraph", attributes={"graphql.operation.name": "TopProducts"}
            ):
                with tracer.start_as_current_span(
                    "subgraph", attributes={"graphql.operation.name": 7}
                ):
                    pass
                with tracer.start_as_current_span("parse_query"):
                    pass
        provider.force_flush()

        recorder = otlp_recorder.last()
        assert recorder.endpoint == "http://datadog-agent:4318/v1/traces"

        spans = {span.name: span for span in recorder.get_finished_spans()}
        assert set(spans) == {"request", "supergraph", "subgraph", "parse_query"}

        expected = {
            "request": ("supergraph.request", "/graphql"),
            "supergraph": ("supergraph.operation", "TopProducts"),
            "subgraph": ("subgraph.operation", "subgraph"),
            "parse_query": ("apollo_router", "parse_query"),
        }
        for name, (operation, resource) in expected.items():
            span = spans[name]
            assert span.attributes[OPERATION_NAME_ATTR] == operation
            assert span.attributes[RESOURCE_NAME_ATTR] == resource
            assert span.resource.attributes[SERVICE_NAME] == "products-router"
            assert span.resource.attributes["deployment.environment"] == "test"

        assert "apollo_private.request" not in spans["request"].attributes
        assert spans["subgraph"].parent.span_id == spans["supergraph"].context.span_id

    def test_shutdown_flushes_pending_spans(
        self,
        datadog_config_file: "Path",
        otlp_recorder: type[RecordingOTLPExporter],
    ) -> None:
        """
        GIVEN spans waiting in the batch queue
        WHEN shutdown() is called
        THEN they are exported before the exporter shuts down
        """
        init(datadog_config_file)
        tracer = trace_api.get_tracer("router")
        for _ in range(3):
            with tracer.start_as_current_span("fetch"):
                pass

        shutdown()

        recorder = otlp_recorder.last()
        assert recorder.shutdown_called
        assert len(recorder.get_finished_spans()) == 3
