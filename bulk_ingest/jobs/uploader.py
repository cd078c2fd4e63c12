"""Payload upload to an open ingestion job."""

from __future__ import annotations

import logging
from pathlib import Path

from bulk_ingest.adapters import BulkApiConnectionPort, BulkApiError, RestRequest, connection_extract_error_message
from bulk_ingest.domain import UploadAck

from .data_source import DataSourceValidator
from .errors import DataSourceError, UploadError


class DataUploader:
    """Upload a validated CSV payload to a job content endpoint.

    The payload is sent as one request body, so the validator's size ceiling bounds what
    can be uploaded.
    """

    def __init__(self, validator: DataSourceValidator | None = None, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(__name__)
        self._validator = validator or DataSourceValidator(logger=self._logger)

    async def job_upload_data_source(
        self,
        connection: BulkApiConnectionPort,
        data_source_path: str,
        content_url: str,
    ) -> UploadAck:
        """Re-validate, read and upload one payload file.

        Args:
            connection: Authenticated ingestion API connection.
            data_source_path: Path to the CSV payload.
            content_url: Job content endpoint from the create response.

        Returns:
            UploadAck: Real HTTP status returned by the content endpoint.

        Raises:
            UploadError: Raised when validation, file read, transport or status checks fail.
        """

        normalized_content_url = (content_url or "").strip()
        if not normalized_content_url:
            raise UploadError("Job content URL must not be blank.")
        if not normalized_content_url.startswith(("/", "http://", "https://")):
            normalized_content_url = "/" + normalized_content_url

        try:
            data_source = self._validator.data_source_validate(data_source_path)
        except DataSourceError as error:
            raise UploadError(f"Error uploading '{data_source_path}'. {error}", cause=error) from error

        try:
            payload = Path(data_source.path).read_bytes()
        except OSError as error:
            raise UploadError(f"Could not read '{data_source.path}'. {error}", cause=error) from error

        rest_request = RestRequest(
            method="PUT",
            url=normalized_content_url,
            headers={"Content-Type": "text/csv", "Accept": "application/json"},
            body=payload,
        )
        self._logger.debug("uploading %d bytes to %s", len(payload), normalized_content_url)
        try:
            raw_response = await connection.connection_request_raw(rest_request)
        except BulkApiError as error:
            raise UploadError(f"Error uploading '{data_source.path}'. {error}", cause=error) from error

        if not raw_response.response_is_success():
            error_detail = connection_extract_error_message(raw_response.body) or raw_response.status_message
            raise UploadError(
                f"Error uploading '{data_source.path}' (STATUS_CODE: {raw_response.status_code}). {error_detail}"
            )

        return UploadAck(
            status_code=raw_response.status_code,
            content_url=normalized_content_url,
            size_bytes=len(payload),
        )
