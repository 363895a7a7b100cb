"""Generic OTLP exporter for routertel."""

from routertel.exporters.otlp.exporter import apply

__all__ = ["apply"]
