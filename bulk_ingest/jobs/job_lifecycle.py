"""Ingestion job lifecycle calls: create, close/abort and info."""

from __future__ import annotations

import json
import logging
from typing import Final, TypeVar

from pydantic import ValidationError

from bulk_ingest.adapters import BulkApiConnectionPort, BulkApiError, RestRequest
from bulk_ingest.domain import JobCreateRequest, JobDescriptor, JobStatus

from .errors import BulkOperationError, JobCloseError, JobCreateError, JobInfoError

_JSON_HEADERS: Final[dict[str, str]] = {
    "Content-Type": "application/json; charset=UTF-8",
    "Accept": "application/json",
}
_JOB_STATE_UPLOAD_COMPLETE: Final[str] = "UploadComplete"
_JOB_STATE_ABORTED: Final[str] = "Aborted"

_DescriptorT = TypeVar("_DescriptorT", bound=JobDescriptor)


def job_ingest_path(job_id: str) -> str:
    """Return the API-relative resource path for one ingestion job."""

    normalized_job_id = job_id.strip()
    if not normalized_job_id:
        raise ValueError("job_id must not be blank")
    return f"/jobs/ingest/{normalized_job_id}"


async def _job_request_model(
    connection: BulkApiConnectionPort,
    request: RestRequest,
    model_type: type[_DescriptorT],
    error_type: type[BulkOperationError],
    error_prefix: str,
) -> _DescriptorT:
    """Execute one JSON request and decode the response into a job model.

    Args:
        connection: Authenticated ingestion API connection.
        request: REST request definition.
        model_type: Response model type.
        error_type: Stage error raised on failure.
        error_prefix: Message prefix for raised errors.

    Returns:
        JobDescriptor: Decoded response model.

    Raises:
        BulkOperationError: Raised as `error_type` for transport, status or contract failures.
    """

    try:
        payload = await connection.connection_request_json(request)
    except BulkApiError as error:
        raise error_type(f"{error_prefix} {error}", cause=error) from error
    try:
        return model_type.model_validate(payload)
    except ValidationError as error:
        raise error_type(f"{error_prefix} Response did not match the job contract.", cause=error) from error


class JobSubmitter:
    """Create ingestion jobs."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(__name__)

    async def job_create(
        self,
        connection: BulkApiConnectionPort,
        request: JobCreateRequest,
        api_version: str | None = None,
    ) -> JobDescriptor:
        """Create one ingestion job.

        Args:
            connection: Authenticated ingestion API connection.
            request: Job create request body.
            api_version: Optional API version override, for example `47.0`.

        Returns:
            JobDescriptor: Created job, including `id` and `content_url`.

        Raises:
            JobCreateError: Raised for transport, status or contract failures.
        """

        normalized_api_version = (api_version or "").strip().lstrip("vV")
        url = (
            f"/services/data/v{normalized_api_version}/jobs/ingest"
            if normalized_api_version
            else "/jobs/ingest"
        )
        rest_request = RestRequest(
            method="POST",
            url=url,
            headers=dict(_JSON_HEADERS),
            body=json.dumps(request.wire_dump()),
        )
        self._logger.debug("creating %s job for object %s at %s", request.operation, request.object, url)
        job_descriptor = await _job_request_model(
            connection,
            rest_request,
            JobDescriptor,
            JobCreateError,
            "Error creating bulk ingestion job.",
        )
        self._logger.debug("created job %s in state %s", job_descriptor.id, job_descriptor.state)
        return job_descriptor


class JobCloser:
    """Move jobs out of the `Open` state."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(__name__)

    async def job_close(self, connection: BulkApiConnectionPort, job_id: str) -> JobDescriptor:
        """Mark job data upload as complete so the server starts processing.

        Args:
            connection: Authenticated ingestion API connection.
            job_id: Ingestion job id.

        Returns:
            JobDescriptor: Job after the state change.

        Raises:
            JobCloseError: Raised for blank job ids and transport, status or contract failures.
        """

        return await self._job_set_state(connection, job_id, _JOB_STATE_UPLOAD_COMPLETE, "closing")

    async def job_abort(self, connection: BulkApiConnectionPort, job_id: str) -> JobDescriptor:
        """Abort one job. Never called by the insert pipeline, which performs no rollback."""

        return await self._job_set_state(connection, job_id, _JOB_STATE_ABORTED, "aborting")

    async def _job_set_state(
        self,
        connection: BulkApiConnectionPort,
        job_id: str,
        target_state: str,
        action_label: str,
    ) -> JobDescriptor:
        try:
            path = job_ingest_path(job_id)
        except ValueError as error:
            raise JobCloseError(f"Error {action_label} job. {error}", cause=error) from error

        rest_request = RestRequest(
            method="PATCH",
            url=path,
            headers=dict(_JSON_HEADERS),
            body=json.dumps({"state": target_state}),
        )
        self._logger.debug("%s job %s", action_label, job_id)
        return await _job_request_model(
            connection,
            rest_request,
            JobDescriptor,
            JobCloseError,
            f"Error {action_label} Job ID '{job_id}'.",
        )


class JobInfoReader:
    """Fetch job status."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(__name__)

    async def job_get_info(self, connection: BulkApiConnectionPort, job_id: str) -> JobStatus:
        """Fetch the current status of one job.

        Args:
            connection: Authenticated ingestion API connection.
            job_id: Ingestion job id.

        Returns:
            JobStatus: Current job status and processing counters.

        Raises:
            JobInfoError: Raised for blank job ids and transport, status or contract failures.
        """

        try:
            path = job_ingest_path(job_id)
        except ValueError as error:
            raise JobInfoError(f"Error fetching job info. {error}", cause=error) from error

        rest_request = RestRequest(method="GET", url=path, headers={"Accept": "application/json"})
        job_status = await _job_request_model(
            connection,
            rest_request,
            JobStatus,
            JobInfoError,
            f"Error fetching info for Job ID '{job_id}'.",
        )
        self._logger.debug(
            "job %s state=%s processed=%s failed=%s",
            job_id,
            job_status.state,
            job_status.number_records_processed,
            job_status.number_records_failed,
        )
        return job_status
