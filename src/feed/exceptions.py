"""Custom exceptions for the market series feed.

Request validation and upstream failures live here so the API layer can
map them to HTTP responses without importing the fetch internals.
"""


class FeedError(Exception):
    """Base exception for all feed errors."""


class ValidationError(FeedError):
    """Raised when request parameters are missing, malformed or inconsistent."""


class UpstreamError(FeedError):
    """Base class for failures of a single upstream call. Never retried."""


class UpstreamTransportError(UpstreamError):
    """Raised when the upstream call fails or the body is not decodable JSON."""


class UpstreamStatusError(UpstreamError):
    """Raised when the upstream answers with a non-200 status code.

    Carries the status code and, when the error envelope has one, the
    upstream's own ``msg`` text.
    """

    def __init__(self, status_code: int, upstream_message: str | None = None) -> None:
        self.status_code = status_code
        self.upstream_message = upstream_message
        message = (
            "Binance's API returned an invalid HTTP response code. "
            f"Expected: 200, Received: {status_code}."
        )
        if upstream_message:
            message += f" Message: {upstream_message}"
        super().__init__(message)


class UpstreamFormatError(UpstreamError):
    """Raised when the payload is not a list of records."""
