"""Collector endpoint resolution.

A backend's ``endpoint`` setting is either the literal ``default``, meaning
"let the exporter use its built-in agent address", or a URL. URLs without a
scheme are treated as plain HTTP, so ``collector:4318`` and
``http://collector:4318`` resolve to the same endpoint.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from routertel.exceptions import ConfigurationError

DEFAULT_ENDPOINT_VALUE = "default"
DEFAULT_SCHEME = "http"

# Path the OTLP/HTTP receiver serves traces on
TRACES_PATH = "/v1/traces"


@dataclass(frozen=True)
class Endpoint:
    """Resolved collector endpoint.

    ``url`` is None for the default endpoint, otherwise a validated
    absolute URL.
    """

    url: str | None = None

    @classmethod
    def default(cls) -> Endpoint:
        return cls()

    @classmethod
    def explicit(cls, url: str) -> Endpoint:
        return cls(url=url)

    @property
    def is_default(self) -> bool:
        return self.url is None

    def traces_url(self) -> str | None:
        """Return the URL an OTLP trace exporter should post to.

        Returns None for the default endpoint so the exporter falls back to
        its own default address. Trailing slashes are trimmed and the
        traces path is appended when the URL has no path of its own.
        """
        if self.url is None:
            return None
        url = self.url.rstrip("/")
        if not urlsplit(url).path:
            url += TRACES_PATH
        return url

    def __str__(self) -> str:
        return self.url if self.url is not None else DEFAULT_ENDPOINT_VALUE


def resolve_endpoint(value: Any) -> Endpoint:
    """Turn an ``endpoint`` config value into an Endpoint.

    Args:
        value: ``"default"``, ``"host:port"`` or ``"scheme://host:port[/path]"``.

    Returns:
        The resolved Endpoint.

    Raises:
        ConfigurationError: If the value is not a string or is not a valid
            URL once the default scheme has been applied.
    """
    if not isinstance(value, str):
        raise ConfigurationError(
            f"endpoint must be a string, got {type(value).__name__}"
        )

    if value == DEFAULT_ENDPOINT_VALUE:
        return Endpoint.default()
    if not value:
        raise ConfigurationError("endpoint must not be empty")

    try:
        parts = urlsplit(value)
        # urlsplit reads "host:port" as scheme "host", so only a scheme
        # written as "scheme://" counts
        if not (parts.scheme and value[len(parts.scheme) :].startswith("://")):
            parts = urlsplit(f"{DEFAULT_SCHEME}://{value}")
        # Raises for a non-numeric or out of range port
        parts.port  # noqa: B018
    except ValueError as e:
        raise ConfigurationError(f"Invalid endpoint URL: '{value}' ({e})") from e

    if not parts.scheme or not parts.hostname:
        raise ConfigurationError(f"Invalid endpoint URL: '{value}'")

    return Endpoint.explicit(parts.geturl())
