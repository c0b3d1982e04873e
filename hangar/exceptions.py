"""Custom exception hierarchy for Hangar.

All hangar-specific exceptions inherit from HangarError, enabling
users to catch all hangar exceptions with a single except clause.
"""

from __future__ import annotations


class HangarError(Exception):
    """Base exception for all Hangar errors."""


class ProviderError(HangarError):
    """Raised when a call to the cloud provider fails."""


class TransportError(ProviderError):
    """Raised when the HTTP call itself fails (connection, DNS, timeout)."""


class ProtocolError(ProviderError):
    """Raised when the provider answers with an error or a malformed payload."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        code: str | None = None,
    ) -> None:
        self.status = status
        self.code = code
        super().__init__(message)


class AmbiguousReferenceError(HangarError):
    """Raised when a label selector does not resolve to exactly one resource."""

    def __init__(self, selector: str, count: int) -> None:
        self.selector = selector
        self.count = count
        super().__init__(
            f"No exact match found for expression '{selector}', results {count}"
        )


class CredentialError(HangarError):
    """Raised when a credential is missing, of the wrong type or unreadable."""


class ResourceStateError(HangarError):
    """Raised when a server lifecycle operation cannot be completed."""


class ConfigurationError(HangarError):
    """Raised for invalid configuration or missing required settings."""


class ServerTimeoutError(HangarError):
    """Raised when a server does not reach the expected status in time."""

    def __init__(self, server_id: int, status: str, timeout: float) -> None:
        self.server_id = server_id
        self.status = status
        self.timeout = timeout
        super().__init__(
            f"Server {server_id} did not become {status} within {timeout}s"
        )
