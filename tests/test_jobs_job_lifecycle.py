"""Regression tests for job create, close, abort and info calls."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest

from bulk_ingest.adapters import BulkApiResponseError, RawRestResponse, RestRequest
from bulk_ingest.domain import JobCreateRequest
from bulk_ingest.jobs import (
    JobCloseError,
    JobCloser,
    JobCreateError,
    JobInfoError,
    JobInfoReader,
    JobSubmitter,
    job_ingest_path,
)


class _RecordingConnectionStub:
    """Connection stub that records requests and replays queued JSON payloads."""

    def __init__(self, payloads: list[Any]):
        self.requests: list[RestRequest] = []
        self._payloads = list(payloads)

    async def connection_request_raw(self, request: RestRequest) -> RawRestResponse:
        raise AssertionError("raw requests are not expected")

    async def connection_request_json(self, request: RestRequest) -> dict[str, Any]:
        self.requests.append(request)
        payload = self._payloads.pop(0)
        if isinstance(payload, Exception):
            raise payload
        return payload


def test_jobs_job_create_posts_camel_case_body() -> None:
    """Create a job with JSON headers and the camelCase request body.

    Returns:
        None: Assertions validate request shape and decoded descriptor.

    Raises:
        AssertionError: Raised when the create call is incorrect.
    """

    connection = _RecordingConnectionStub(
        [
            {
                "id": "750X",
                "object": "Account",
                "operation": "insert",
                "state": "Open",
                "contentUrl": "services/data/v47.0/jobs/ingest/750X/batches",
            }
        ]
    )
    request = JobCreateRequest(object="Account", column_delimiter="COMMA", line_ending="LF")

    descriptor = asyncio.run(JobSubmitter().job_create(connection, request))

    sent_request = connection.requests[0]
    assert sent_request.method == "POST"
    assert sent_request.url == "/jobs/ingest"
    assert sent_request.headers["Content-Type"] == "application/json; charset=UTF-8"
    assert sent_request.headers["Accept"] == "application/json"
    assert json.loads(sent_request.body) == {
        "object": "Account",
        "operation": "insert",
        "contentType": "CSV",
        "columnDelimiter": "COMMA",
        "lineEnding": "LF",
    }
    assert descriptor.id == "750X"
    assert descriptor.state == "Open"
    assert descriptor.content_url == "services/data/v47.0/jobs/ingest/750X/batches"


def test_jobs_job_create_uses_versioned_path_for_api_version_override() -> None:
    """Post to the versioned services path when an API version is given.

    Returns:
        None: Assertions validate the request URL.

    Raises:
        AssertionError: Raised when the override is ignored.
    """

    connection = _RecordingConnectionStub([{"id": "750X", "state": "Open"}])

    asyncio.run(JobSubmitter().job_create(connection, JobCreateRequest(object="Contact"), api_version="v52.0"))

    assert connection.requests[0].url == "/services/data/v52.0/jobs/ingest"


def test_jobs_job_create_wraps_api_errors() -> None:
    """Wrap adapter failures in create errors with the cause attached.

    Returns:
        None: Assertions validate error wrapping.

    Raises:
        AssertionError: Raised when the adapter error leaks.
    """

    api_error = BulkApiResponseError("POST /jobs/ingest returned HTTP 400: INVALIDJOB", status_code=400)
    connection = _RecordingConnectionStub([api_error])

    with pytest.raises(JobCreateError, match="Error creating bulk ingestion job. .*INVALIDJOB") as error_info:
        asyncio.run(JobSubmitter().job_create(connection, JobCreateRequest(object="Acount")))

    assert error_info.value.cause is api_error
    assert error_info.value.__cause__ is api_error
    assert error_info.value.stage == "create"


def test_jobs_job_create_rejects_payload_violating_job_contract() -> None:
    """Raise create errors when the response does not decode into a job.

    Returns:
        None: Assertions validate contract enforcement.

    Raises:
        AssertionError: Raised when malformed payloads are accepted.
    """

    connection = _RecordingConnectionStub([{"id": ["not", "a", "string"]}])

    with pytest.raises(JobCreateError, match="did not match the job contract"):
        asyncio.run(JobSubmitter().job_create(connection, JobCreateRequest(object="Account")))


def test_jobs_job_close_and_abort_patch_target_state() -> None:
    """Send `UploadComplete` on close and `Aborted` on abort.

    Returns:
        None: Assertions validate PATCH requests.

    Raises:
        AssertionError: Raised when the state change body is incorrect.
    """

    connection = _RecordingConnectionStub(
        [{"id": "750X", "state": "UploadComplete"}, {"id": "750X", "state": "Aborted"}]
    )
    closer = JobCloser()

    closed_job = asyncio.run(closer.job_close(connection, "750X"))
    aborted_job = asyncio.run(closer.job_abort(connection, "750X"))

    assert [request.method for request in connection.requests] == ["PATCH", "PATCH"]
    assert [request.url for request in connection.requests] == ["/jobs/ingest/750X", "/jobs/ingest/750X"]
    assert [json.loads(request.body) for request in connection.requests] == [
        {"state": "UploadComplete"},
        {"state": "Aborted"},
    ]
    assert closed_job.state == "UploadComplete"
    assert aborted_job.state == "Aborted"


def test_jobs_job_close_rejects_blank_job_id_without_request() -> None:
    """Fail fast for blank job ids.

    Returns:
        None: Assertions validate input validation.

    Raises:
        AssertionError: Raised when a request is sent.
    """

    connection = _RecordingConnectionStub([])

    with pytest.raises(JobCloseError, match="job_id must not be blank"):
        asyncio.run(JobCloser().job_close(connection, " "))

    assert connection.requests == []


def test_jobs_job_info_returns_status_with_counters() -> None:
    """Decode job info into a status with processing counters.

    Returns:
        None: Assertions validate GET request and decoded status.

    Raises:
        AssertionError: Raised when job info is decoded incorrectly.
    """

    connection = _RecordingConnectionStub(
        [{"id": "750X", "state": "InProgress", "numberRecordsProcessed": 4, "numberRecordsFailed": 1}]
    )

    job_status = asyncio.run(JobInfoReader().job_get_info(connection, "750X"))

    assert connection.requests[0].method == "GET"
    assert connection.requests[0].url == "/jobs/ingest/750X"
    assert job_status.state == "InProgress"
    assert job_status.number_records_processed == 4
    assert job_status.number_records_failed == 1


def test_jobs_job_info_wraps_api_errors() -> None:
    """Wrap adapter failures in info errors.

    Returns:
        None: Assertions validate error wrapping.

    Raises:
        AssertionError: Raised when the adapter error leaks.
    """

    connection = _RecordingConnectionStub([BulkApiResponseError("GET returned HTTP 404", status_code=404)])

    with pytest.raises(JobInfoError, match="Job ID '750X'"):
        asyncio.run(JobInfoReader().job_get_info(connection, "750X"))


def test_jobs_job_ingest_path_rejects_blank_id() -> None:
    """Build job resource paths and reject blank ids.

    Returns:
        None: Assertions validate path helper.

    Raises:
        AssertionError: Raised when path building is incorrect.
    """

    assert job_ingest_path(" 750X ") == "/jobs/ingest/750X"
    with pytest.raises(ValueError):
        job_ingest_path("")
