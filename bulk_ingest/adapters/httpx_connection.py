"""Authenticated ingestion API connection backed by a pooled httpx client."""

from __future__ import annotations

import json
from typing import Any, Final

import httpx

from .errors import (
    BulkApiConnectionError,
    BulkApiContractError,
    BulkApiResponseError,
    BulkApiTimeoutError,
)
from .interfaces import BulkApiConnectionPort, RawRestResponse, RestRequest


class HttpxBulkApiConnection(BulkApiConnectionPort):
    """Connection implementation for Bulk API 2.0 style ingestion endpoints."""

    _USER_AGENT: Final[str] = "bulk-ingest/1.0 (Python/httpx)"
    _SERVICES_PREFIX: Final[str] = "/services/"

    def __init__(
        self,
        instance_url: str,
        access_token: str,
        api_version: str = "47.0",
        request_timeout_seconds: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the connection.

        Args:
            instance_url: Base URL of the org instance, for example `https://acme.my.salesforce.com`.
            access_token: OAuth bearer token for the session.
            api_version: Default REST API version used for API-relative paths.
            request_timeout_seconds: Per-request timeout in seconds.
            client: Optional preconfigured httpx client, mainly for tests.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_instance_url = instance_url.strip()
        normalized_access_token = access_token.strip()
        normalized_api_version = api_version.strip().lstrip("vV")

        if not normalized_instance_url:
            raise ValueError("instance_url must not be blank")
        if not normalized_access_token:
            raise ValueError("access_token must not be blank")
        if not normalized_api_version:
            raise ValueError("api_version must not be blank")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._instance_url = normalized_instance_url.rstrip("/")
        self._access_token = normalized_access_token
        self._api_version = normalized_api_version
        self._client = client or httpx.AsyncClient(timeout=request_timeout_seconds)

    @property
    def api_version(self) -> str:
        return self._api_version

    def connection_resolve_url(self, url: str) -> str:
        """Resolve a request URL against the instance and default API version.

        Args:
            url: Absolute URL, `/services/...` instance path, or API-relative path.

        Returns:
            str: Absolute URL.

        Raises:
            ValueError: Raised when url is blank.
        """

        normalized_url = url.strip()
        if not normalized_url:
            raise ValueError("url must not be blank")
        if normalized_url.startswith(("http://", "https://")):
            return normalized_url
        if not normalized_url.startswith("/"):
            normalized_url = "/" + normalized_url
        if normalized_url.startswith(self._SERVICES_PREFIX):
            return f"{self._instance_url}{normalized_url}"
        return f"{self._instance_url}/services/data/v{self._api_version}{normalized_url}"

    async def connection_request_raw(self, request: RestRequest) -> RawRestResponse:
        """Execute one request and return the response regardless of HTTP status.

        Args:
            request: REST request definition.

        Returns:
            RawRestResponse: Unparsed response.

        Raises:
            BulkApiConnectionError: Raised for network failures.
            BulkApiTimeoutError: Raised when the request timed out.
        """

        full_url = self.connection_resolve_url(request.url)
        headers = {
            "Authorization": f"Bearer {self._access_token}",
            "User-Agent": self._USER_AGENT,
            **request.headers,
        }
        try:
            response = await self._client.request(
                request.method.upper(),
                full_url,
                headers=headers,
                content=request.body,
            )
        except httpx.TimeoutException as error:
            raise BulkApiTimeoutError(f"{request.method.upper()} {request.url} timed out") from error
        except httpx.HTTPError as error:
            raise BulkApiConnectionError(f"{request.method.upper()} {request.url} failed: {error}") from error

        return RawRestResponse(
            status_code=response.status_code,
            status_message=response.reason_phrase,
            headers=dict(response.headers),
            body=response.text,
        )

    async def connection_request_json(self, request: RestRequest) -> dict[str, Any]:
        """Execute one request and decode its JSON object response.

        Args:
            request: REST request definition.

        Returns:
            dict[str, Any]: Decoded JSON object, `{}` for an empty success body.

        Raises:
            BulkApiConnectionError: Raised for network failures.
            BulkApiTimeoutError: Raised when the request timed out.
            BulkApiResponseError: Raised for non-success HTTP status.
            BulkApiContractError: Raised when the body is not a JSON object.
        """

        raw_response = await self.connection_request_raw(request)
        if not raw_response.response_is_success():
            error_message = connection_extract_error_message(raw_response.body) or raw_response.status_message
            raise BulkApiResponseError(
                f"{request.method.upper()} {request.url} returned HTTP {raw_response.status_code}: {error_message}",
                status_code=raw_response.status_code,
                response_body=raw_response.body,
            )

        if not raw_response.body.strip():
            return {}
        try:
            payload = json.loads(raw_response.body)
        except json.JSONDecodeError as error:
            raise BulkApiContractError(
                f"{request.method.upper()} {request.url} returned a non-JSON body",
                status_code=raw_response.status_code,
                response_body=raw_response.body,
            ) from error
        if not isinstance(payload, dict):
            raise BulkApiContractError(
                f"{request.method.upper()} {request.url} returned JSON that is not an object",
                status_code=raw_response.status_code,
                response_body=raw_response.body,
            )
        return payload

    async def aclose(self) -> None:
        """Close the pooled HTTP client."""

        await self._client.aclose()

    async def __aenter__(self) -> "HttpxBulkApiConnection":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def connection_extract_error_message(response_body: str) -> str:
    """Extract a readable message from an ingestion API error body.

    Error bodies are usually a JSON list of `{"errorCode": ..., "message": ...}` objects.

    Args:
        response_body: Raw response body.

    Returns:
        str: `errorCode: message` pairs joined by `; `, the stripped raw body when it is not
            JSON, or an empty string.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    stripped_body = response_body.strip()
    if not stripped_body:
        return ""
    try:
        payload = json.loads(stripped_body)
    except json.JSONDecodeError:
        return stripped_body

    entries = payload if isinstance(payload, list) else [payload]
    messages: list[str] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        error_code = str(entry.get("errorCode") or "UNKNOWN")
        error_message = str(entry.get("message") or "").strip()
        messages.append(f"{error_code}: {error_message}" if error_message else error_code)
    return "; ".join(messages) or stripped_body
