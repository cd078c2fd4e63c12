"""Regression tests for the httpx ingestion API connection."""

from __future__ import annotations

import asyncio
from typing import Callable

import httpx
import pytest

from bulk_ingest.adapters import (
    BulkApiConnectionError,
    BulkApiContractError,
    BulkApiResponseError,
    BulkApiTimeoutError,
    HttpxBulkApiConnection,
    RestRequest,
    connection_extract_error_message,
)


def _build_connection(handler: Callable[[httpx.Request], httpx.Response]) -> HttpxBulkApiConnection:
    """Build a connection whose HTTP client is served by a mock transport.

    Args:
        handler: Mock transport request handler.

    Returns:
        HttpxBulkApiConnection: Connection under test.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return HttpxBulkApiConnection(
        instance_url="https://acme.my.salesforce.com/",
        access_token="token-123",
        api_version="v47.0",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.parametrize(
    ("url", "expected_url"),
    [
        ("/jobs/ingest", "https://acme.my.salesforce.com/services/data/v47.0/jobs/ingest"),
        ("jobs/ingest/750X", "https://acme.my.salesforce.com/services/data/v47.0/jobs/ingest/750X"),
        (
            "/services/data/v52.0/jobs/ingest",
            "https://acme.my.salesforce.com/services/data/v52.0/jobs/ingest",
        ),
        (
            "services/data/v47.0/jobs/ingest/750X/batches",
            "https://acme.my.salesforce.com/services/data/v47.0/jobs/ingest/750X/batches",
        ),
        ("https://other.example.test/x", "https://other.example.test/x"),
    ],
)
def test_adapters_connection_resolves_urls(url: str, expected_url: str) -> None:
    """Resolve API-relative, instance-relative and absolute URLs.

    Args:
        url: Request URL.
        expected_url: Expected absolute URL.

    Returns:
        None: Assertions validate URL resolution.

    Raises:
        AssertionError: Raised when URL resolution is incorrect.
    """

    connection = _build_connection(lambda request: httpx.Response(200))

    assert connection.connection_resolve_url(url) == expected_url


def test_adapters_connection_sends_bearer_token_and_decodes_json() -> None:
    """Send bearer auth plus caller headers and decode the JSON object body.

    Returns:
        None: Assertions validate request headers and decoded payload.

    Raises:
        AssertionError: Raised when request or response handling is incorrect.
    """

    captured: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"id": "750X", "state": "Open"})

    connection = _build_connection(_handler)
    payload = asyncio.run(
        connection.connection_request_json(
            RestRequest(method="post", url="/jobs/ingest", headers={"Accept": "application/json"}, body="{}")
        )
    )

    assert payload == {"id": "750X", "state": "Open"}
    assert captured[0].method == "POST"
    assert captured[0].headers["Authorization"] == "Bearer token-123"
    assert captured[0].headers["Accept"] == "application/json"
    assert captured[0].content == b"{}"


def test_adapters_connection_maps_error_status_to_response_error() -> None:
    """Raise response errors with status code and API error message for non-2xx status.

    Returns:
        None: Assertions validate error mapping.

    Raises:
        AssertionError: Raised when status mapping is incorrect.
    """

    connection = _build_connection(
        lambda request: httpx.Response(
            400,
            json=[{"errorCode": "INVALIDJOB", "message": "Unable to find object: Acount"}],
        )
    )

    with pytest.raises(BulkApiResponseError, match="INVALIDJOB: Unable to find object") as error_info:
        asyncio.run(connection.connection_request_json(RestRequest(method="POST", url="/jobs/ingest")))

    assert error_info.value.status_code == 400


def test_adapters_connection_raw_request_does_not_raise_on_error_status() -> None:
    """Return raw responses for non-2xx status so callers decide how to handle them.

    Returns:
        None: Assertions validate raw response passthrough.

    Raises:
        AssertionError: Raised when raw mode raises on status.
    """

    connection = _build_connection(lambda request: httpx.Response(404, text="not found"))

    raw_response = asyncio.run(connection.connection_request_raw(RestRequest(method="GET", url="/jobs/ingest/x")))

    assert raw_response.status_code == 404
    assert raw_response.body == "not found"
    assert not raw_response.response_is_success()


def test_adapters_connection_maps_non_json_body_to_contract_error() -> None:
    """Raise contract errors when a JSON endpoint answers with something else.

    Returns:
        None: Assertions validate contract mapping.

    Raises:
        AssertionError: Raised when undecodable bodies are accepted.
    """

    connection = _build_connection(lambda request: httpx.Response(200, text="<html>login</html>"))

    with pytest.raises(BulkApiContractError, match="non-JSON"):
        asyncio.run(connection.connection_request_json(RestRequest(method="GET", url="/jobs/ingest/x")))


def test_adapters_connection_empty_success_body_decodes_to_empty_object() -> None:
    """Decode empty 2xx bodies as empty objects.

    Returns:
        None: Assertions validate empty body handling.

    Raises:
        AssertionError: Raised when empty bodies fail.
    """

    connection = _build_connection(lambda request: httpx.Response(204))

    assert asyncio.run(connection.connection_request_json(RestRequest(method="PATCH", url="/jobs/ingest/x"))) == {}


def test_adapters_connection_maps_transport_timeout_and_failure() -> None:
    """Map httpx timeouts and connection failures to adapter exceptions.

    Returns:
        None: Assertions validate transport error mapping.

    Raises:
        AssertionError: Raised when transport errors are not mapped.
    """

    def _raise_timeout(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    def _raise_connect_error(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(BulkApiTimeoutError, match="timed out"):
        asyncio.run(
            _build_connection(_raise_timeout).connection_request_raw(RestRequest(method="GET", url="/jobs/ingest/x"))
        )
    with pytest.raises(BulkApiConnectionError, match="connection refused"):
        asyncio.run(
            _build_connection(_raise_connect_error).connection_request_raw(
                RestRequest(method="GET", url="/jobs/ingest/x")
            )
        )


def test_adapters_connection_rejects_blank_configuration() -> None:
    """Reject blank instance URLs, tokens and non-positive timeouts.

    Returns:
        None: Assertions validate initializer validation.

    Raises:
        AssertionError: Raised when invalid configuration is accepted.
    """

    with pytest.raises(ValueError, match="instance_url"):
        HttpxBulkApiConnection(instance_url=" ", access_token="token")
    with pytest.raises(ValueError, match="access_token"):
        HttpxBulkApiConnection(instance_url="https://acme.test", access_token="")
    with pytest.raises(ValueError, match="request_timeout_seconds"):
        HttpxBulkApiConnection(instance_url="https://acme.test", access_token="token", request_timeout_seconds=0)


def test_adapters_connection_extract_error_message_variants() -> None:
    """Render API error lists, plain text and empty bodies.

    Returns:
        None: Assertions validate message extraction.

    Raises:
        AssertionError: Raised when extracted messages are unexpected.
    """

    assert (
        connection_extract_error_message('[{"errorCode":"A","message":"first"},{"errorCode":"B"}]')
        == "A: first; B"
    )
    assert connection_extract_error_message("gateway down") == "gateway down"
    assert connection_extract_error_message("   ") == ""
