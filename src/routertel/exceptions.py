"""Exception classes for the routertel SDK."""


class RouterTelemetryError(Exception):
    """Base class for errors raised while setting up router tracing."""


class ConfigurationError(RouterTelemetryError):
    """Raised when tracing configuration is invalid.

    This covers malformed YAML, unknown keys, and values that fail
    validation such as an endpoint that is not a URL. It is always raised
    while the configuration is loaded, never during span export.
    """


class ExporterInitError(RouterTelemetryError):
    """Raised when a tracing backend's exporter cannot be constructed.

    Only the failing backend is aborted. Other configured backends keep
    working unless validation mode is strict.
    """
