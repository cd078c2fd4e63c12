"""Project-native typed exceptions for ingestion API transport failures."""

from __future__ import annotations


class BulkApiError(Exception):
    """Base exception for adapter-level ingestion API failures.

    Attributes:
        status_code: HTTP status code when the failure came from a response.
        response_body: Raw response body text when available.
    """

    def __init__(self, message: str, status_code: int | None = None, response_body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class BulkApiConnectionError(BulkApiError, ConnectionError):
    """Transport-level connectivity failure while talking to the ingestion API."""


class BulkApiTimeoutError(BulkApiError, TimeoutError):
    """Transport-level request timeout."""


class BulkApiResponseError(BulkApiError, ConnectionError):
    """Ingestion API answered with a non-success HTTP status."""


class BulkApiContractError(BulkApiError, ValueError):
    """Ingestion API answered with a body that does not match the expected contract."""
