"""
Error taxonomy for the curator pipelines.

Every error carries a single human-readable message; the CLI prints
``str(exc)`` and nothing else. Fetch failures are absorbed by the
aggregator, everything else propagates to the caller unchanged.
"""

from __future__ import annotations


class CuratorError(Exception):
    """Base class for all curator errors."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ConfigError(CuratorError):
    """A required setting (usually the API key) is missing."""

    kind = "config_error"


class RewriteError(CuratorError):
    """Failure of a call to the generative-text API."""

    kind = "rewrite_error"


class TransportError(RewriteError):
    """Network failure or timeout talking to a remote service."""

    kind = "transport_error"


class ApiError(RewriteError):
    """The generative-text API rejected the request."""

    kind = "api_error"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(RewriteError):
    """A 200 response did not have the expected shape."""

    kind = "parse_error"


class StorageError(CuratorError):
    """The document store could not create the draft."""

    kind = "storage_error"


class FetchError(CuratorError):
    """A feed could not be fetched or parsed."""

    kind = "fetch_error"

    def __init__(self, message: str, url: str = "", status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class RegistryError(CuratorError):
    """Unknown feed source id or invalid feed URL."""

    kind = "registry_error"
