"""Exporter modules for the supported tracing backends.

Each backend lives in its own subpackage and exposes an
``apply(config, provider, trace_config)`` function that registers its
export pipeline on a TracerProvider.
"""
