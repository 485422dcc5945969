"""Exception hierarchy for citation network construction."""

from __future__ import annotations


class CitationNetworkError(Exception):
    """Base exception for all citenet errors."""


class InputValidationError(CitationNetworkError):
    """Caller supplied invalid arguments (raised before any network activity)."""


class UpstreamError(CitationNetworkError):
    """Base for failures talking to an external service."""

    def __init__(self, message: str, *, endpoint: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.endpoint = endpoint
        self.status = status


class ClientResponseError(UpstreamError):
    """Upstream answered with a 4xx status. Never retried."""


class ServerResponseError(UpstreamError):
    """Upstream answered with a 5xx status."""


class NetworkError(UpstreamError):
    """Request still failing after every retry was used."""


class NotFoundError(CitationNetworkError):
    """Metadata service has no record for the identifier."""

    def __init__(self, identifier: str, reason: str = "not found") -> None:
        super().__init__(f"{identifier}: {reason}")
        self.identifier = identifier
        self.reason = reason
