"""Custom exception hierarchy for wtpsync."""

from __future__ import annotations


class WtpError(Exception):
    """Base exception for all wtpsync errors."""


class WtpConfigError(WtpError):
    """Invalid or missing configuration."""


class WtpFetchError(WtpError):
    """Base for failures of a single telemetry fetch.

    Every subclass counts towards the poller's consecutive-error limit.
    """


class WtpTransportError(WtpFetchError):
    """The telemetry endpoint could not be reached (network error, timeout)."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class WtpApiError(WtpFetchError):
    """The endpoint answered but the request failed.

    Covers non-2xx HTTP statuses, bodies that are not a JSON object and
    payloads carrying ``success: false``.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class WtpNormalizationError(WtpFetchError):
    """The payload did not contain the expected readings envelope."""
