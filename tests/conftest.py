"""Shared pytest configuration and fixtures.

This module provides test fixtures that:
1. Reset OpenTelemetry global state between tests for isolation
2. Replace the OTLP/HTTP exporter with an in-memory recorder so no test
   talks to a collector
3. Provide YAML config content for the loader and init() tests

Following OpenTelemetry Python SDK testing patterns.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Generator

import pytest
from opentelemetry import trace as trace_api
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from tests.fakes import RecordingOTLPExporter

if TYPE_CHECKING:
    from pathlib import Path

EXPORTER_MODULES = (
    "routertel.exporters.datadog.exporter",
    "routertel.exporters.otlp.exporter",
)


def _reset_trace_globals() -> None:
    """Reset OpenTelemetry trace globals for test isolation.

    This ensures each test starts with a clean slate and avoids
    "tracer provider already set" errors.

    WARNING: Only use this in tests. This accesses internal OTel APIs.
    """
    from opentelemetry.util._once import Once

    current_provider = trace_api.get_tracer_provider()
    shutdown_fn = getattr(current_provider, "shutdown", None)
    if callable(shutdown_fn):
        try:
            shutdown_fn()
        except Exception:  # nosec B110 - cleanup errors should not fail tests
            pass

    trace_api._TRACER_PROVIDER_SET_ONCE = Once()
    trace_api._TRACER_PROVIDER = None
    trace_api._PROXY_TRACER_PROVIDER = trace_api.ProxyTracerProvider()


def _reset_sdk_state() -> None:
    """Reset the routertel SDK state for test isolation."""
    from routertel.sdk import lifecycle

    lifecycle._provider = None


@pytest.fixture(autouse=True)
def reset_otel_state() -> Generator[None, None, None]:
    """Reset OpenTelemetry global state before and after each test."""
    _reset_trace_globals()
    _reset_sdk_state()
    yield
    _reset_trace_globals()
    _reset_sdk_state()


@pytest.fixture(autouse=True)
def otlp_recorder(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[type[RecordingOTLPExporter], None, None]:
    """Swap OTLPSpanExporter for RecordingOTLPExporter in every backend.

    Yields the recorder class; ``otlp_recorder.last()`` is the exporter
    created by the most recent ``apply``.
    """
    import importlib

    RecordingOTLPExporter.reset()
    for module_name in EXPORTER_MODULES:
        module = sys.modules.get(module_name) or importlib.import_module(module_name)
        monkeypatch.setattr(module, "OTLPSpanExporter", RecordingOTLPExporter)

    yield RecordingOTLPExporter

    RecordingOTLPExporter.reset()


@pytest.fixture
def in_memory_exporter() -> InMemorySpanExporter:
    """Provide an InMemorySpanExporter for capturing spans in tests."""
    return InMemorySpanExporter()


@pytest.fixture
def valid_config_content() -> str:
    """Return a valid YAML config with both backends enabled."""
    return """trace:
  service_name: test-router
  service_version: "1.0.0"

tracing:
  datadog:
    endpoint: default
    batch_processor:
      max_queue_size: 64
      max_export_batch_size: 16
  otlp:
    endpoint: collector:4318

validation:
  mode: permissive
"""


@pytest.fixture
def valid_config_file(tmp_path: "Path", valid_config_content: str) -> "Path":
    """Create a valid config file and return its path."""
    config_path = tmp_path / "routertel.yaml"
    config_path.write_text(valid_config_content)
    return config_path


@pytest.fixture
def write_config(tmp_path: "Path"):
    """Return a helper that writes YAML content to a config file."""

    def _write(content: str, name: str = "routertel.yaml") -> "Path":
        config_path = tmp_path / name
        config_path.write_text(content)
        return config_path

    return _write
