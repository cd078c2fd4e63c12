"""Regression tests for payload upload and error code mapping."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from bulk_ingest.adapters import BulkApiTimeoutError, RawRestResponse, RestRequest
from bulk_ingest.domain import UploadAck
from bulk_ingest.jobs import (
    DataSourceError,
    DataSourceValidator,
    DataUploader,
    MonitorCancelledError,
    MonitorError,
    UploadError,
    bulk_error_code_for_exception,
)


class _UploadConnectionStub:
    """Connection stub recording raw uploads."""

    def __init__(self, status_code: int = 201, body: str = "", error: Exception | None = None):
        self.requests: list[RestRequest] = []
        self._status_code = status_code
        self._body = body
        self._error = error

    async def connection_request_raw(self, request: RestRequest) -> RawRestResponse:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        return RawRestResponse(status_code=self._status_code, status_message="Created", headers={}, body=self._body)

    async def connection_request_json(self, request: RestRequest) -> dict:
        raise AssertionError("JSON requests are not expected")


def test_jobs_uploader_puts_file_bytes_and_returns_real_status(tmp_path: Path) -> None:
    """Upload the payload bytes as CSV and acknowledge with the endpoint status.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate upload request and acknowledgement.

    Raises:
        AssertionError: Raised when the upload is incorrect.
    """

    data_file = tmp_path / "accounts.csv"
    data_file.write_bytes(b"Name\r\nAcme\r\n")
    connection = _UploadConnectionStub(status_code=201)

    upload_ack = asyncio.run(
        DataUploader().job_upload_data_source(
            connection, str(data_file), "services/data/v47.0/jobs/ingest/750X/batches"
        )
    )

    sent_request = connection.requests[0]
    assert sent_request.method == "PUT"
    assert sent_request.url == "/services/data/v47.0/jobs/ingest/750X/batches"
    assert sent_request.headers["Content-Type"] == "text/csv"
    assert sent_request.body == b"Name\r\nAcme\r\n"
    assert upload_ack == UploadAck(
        status_code=201,
        content_url="/services/data/v47.0/jobs/ingest/750X/batches",
        size_bytes=12,
    )


def test_jobs_uploader_rejects_error_status_with_status_code(tmp_path: Path) -> None:
    """Raise upload errors naming the status code for non-2xx responses.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate status handling.

    Raises:
        AssertionError: Raised when failed uploads are acknowledged.
    """

    data_file = tmp_path / "accounts.csv"
    data_file.write_bytes(b"Name\nAcme\n")
    connection = _UploadConnectionStub(
        status_code=400,
        body='[{"errorCode":"INVALIDJOB","message":"Found unexpected state"}]',
    )

    with pytest.raises(UploadError, match=r"STATUS_CODE: 400\). INVALIDJOB: Found unexpected state"):
        asyncio.run(DataUploader().job_upload_data_source(connection, str(data_file), "/x/batches"))


def test_jobs_uploader_revalidates_data_source_before_sending(tmp_path: Path) -> None:
    """Reject payloads that outgrew the size limit before any request is sent.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate pre-upload validation.

    Raises:
        AssertionError: Raised when oversized payloads are sent.
    """

    data_file = tmp_path / "accounts.csv"
    data_file.write_bytes(b"x" * 9)
    connection = _UploadConnectionStub()
    uploader = DataUploader(validator=DataSourceValidator(max_size_bytes=8))

    with pytest.raises(UploadError, match="Maximum file size exceeded") as error_info:
        asyncio.run(uploader.job_upload_data_source(connection, str(data_file), "/x/batches"))

    assert isinstance(error_info.value.cause, DataSourceError)
    assert connection.requests == []


def test_jobs_uploader_wraps_transport_errors_and_blank_content_url(tmp_path: Path) -> None:
    """Wrap transport failures and reject blank content URLs.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate error handling.

    Raises:
        AssertionError: Raised when errors leak or blank URLs are used.
    """

    data_file = tmp_path / "accounts.csv"
    data_file.write_bytes(b"Name\nAcme\n")

    with pytest.raises(UploadError, match="must not be blank"):
        asyncio.run(DataUploader().job_upload_data_source(_UploadConnectionStub(), str(data_file), " "))

    timeout_error = BulkApiTimeoutError("PUT /x/batches timed out")
    with pytest.raises(UploadError, match="timed out") as error_info:
        asyncio.run(
            DataUploader().job_upload_data_source(
                _UploadConnectionStub(error=timeout_error), str(data_file), "/x/batches"
            )
        )

    assert error_info.value.__cause__ is timeout_error


@pytest.mark.parametrize(
    ("error", "expected_code"),
    [
        (DataSourceError("missing"), "BULK_DATA_SOURCE_ERROR"),
        (UploadError("rejected"), "BULK_UPLOAD_ERROR"),
        (MonitorCancelledError("cancelled"), "BULK_MONITOR_CANCELLED"),
        (MonitorError("poll failed"), "BULK_MONITOR_ERROR"),
        (RuntimeError("unexpected"), "BULK_UNEXPECTED_ERROR"),
    ],
)
def test_jobs_bulk_error_code_for_exception(error: Exception, expected_code: str) -> None:
    """Map pipeline exceptions to deterministic error codes.

    Args:
        error: Exception under test.
        expected_code: Expected error code.

    Returns:
        None: Assertions validate code mapping.

    Raises:
        AssertionError: Raised when mapping is incorrect.
    """

    assert bulk_error_code_for_exception(error) == expected_code
