"""Process-wide tracing state.

The OpenTelemetry global TracerProvider can only be set once per process,
so routertel keeps the provider it installed here and hands the same one
back until shutdown().
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from routertel._internal.logging import log_internal_error

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import TracerProvider

logger = logging.getLogger(__name__)

_provider: TracerProvider | None = None


def install(provider: TracerProvider) -> None:
    """Record ``provider`` as the one exporting router spans."""
    global _provider
    _provider = provider


def active_provider() -> TracerProvider | None:
    return _provider


def is_configured() -> bool:
    return _provider is not None


def shutdown() -> None:
    """Flush and stop every backend of the installed provider.

    Safe to call repeatedly, and before init(). Errors raised by exporters
    while draining their queues are logged, never raised, since this also
    runs from atexit.
    """
    global _provider
    provider, _provider = _provider, None
    if provider is None:
        return
    try:
        provider.shutdown()
    except Exception as e:
        log_internal_error("shutdown", e)
        return
    logger.debug("tracing backends shut down")
