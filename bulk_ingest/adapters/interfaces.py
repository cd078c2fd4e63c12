"""Typed interfaces for adapter-layer responsibilities."""

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class RestRequest:
    """One REST call against the ingestion API.

    Attributes:
        method: HTTP method, upper case.
        url: Absolute URL, instance-relative `/services/...` path, or API-relative path.
        headers: Request headers.
        body: Optional request body, already encoded.
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str | bytes | None = None


@dataclass(frozen=True)
class RawRestResponse:
    """Unparsed response to one REST call.

    Attributes:
        status_code: HTTP status code.
        status_message: HTTP reason phrase.
        headers: Response headers.
        body: Response body decoded as text.
    """

    status_code: int
    status_message: str
    headers: dict[str, str]
    body: str

    def response_is_success(self) -> bool:
        """Return whether the status code is in the 2xx range."""

        return 200 <= self.status_code < 300


class BulkApiConnectionPort(Protocol):
    """Port definition for an authenticated ingestion API connection."""

    async def connection_request_raw(self, request: RestRequest) -> RawRestResponse:
        """Execute one request and return the response regardless of HTTP status.

        Args:
            request: REST request definition.

        Returns:
            RawRestResponse: Unparsed response.

        Raises:
            BulkApiConnectionError: Raised when the transport fails.
            BulkApiTimeoutError: Raised when the request times out.
        """

    async def connection_request_json(self, request: RestRequest) -> dict[str, Any]:
        """Execute one request and decode its JSON response body.

        Args:
            request: REST request definition.

        Returns:
            dict[str, Any]: Decoded JSON object. An empty success body decodes to `{}`.

        Raises:
            BulkApiConnectionError: Raised when the transport fails.
            BulkApiTimeoutError: Raised when the request times out.
            BulkApiResponseError: Raised for non-success HTTP status.
            BulkApiContractError: Raised when the body is not a JSON object.
        """
