"""Stage-specific exceptions for the bulk ingestion pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bulk_ingest.domain import OperationStatus


class BulkOperationError(Exception):
    """Base exception for one failed pipeline stage.

    Attributes:
        stage: Pipeline stage that failed.
        message: Human-readable failure message.
        cause: Underlying exception, also chained as `__cause__`.
        operation_status: Partially built operation status, when the failure happened inside
            an orchestrated run after the data source was validated.
    """

    stage: str = "bulk_operation"

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        operation_status: OperationStatus | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.operation_status = operation_status


class DataSourceError(BulkOperationError, ValueError):
    """Payload file is missing, unreadable or larger than the allowed maximum."""

    stage = "validate"


class JobCreateError(BulkOperationError):
    """Ingestion job could not be created."""

    stage = "create"


class UploadError(BulkOperationError):
    """Payload could not be uploaded to the job content endpoint."""

    stage = "upload"


class JobCloseError(BulkOperationError):
    """Job state could not be changed to `UploadComplete` or `Aborted`."""

    stage = "close"


class JobInfoError(BulkOperationError):
    """Job info request failed."""

    stage = "info"


class MonitorError(BulkOperationError):
    """Transport failure while polling job status.

    A monitoring run that reaches its timeout is not an error; it returns the last status.
    """

    stage = "monitor"


class MonitorCancelledError(MonitorError):
    """Monitoring was cancelled before any job status was fetched."""


class ResultsError(BulkOperationError):
    """Result partition could not be downloaded, saved or parsed."""

    stage = "results"


_ERROR_CODES: tuple[tuple[type[BulkOperationError], str], ...] = (
    (DataSourceError, "BULK_DATA_SOURCE_ERROR"),
    (JobCreateError, "BULK_JOB_CREATE_ERROR"),
    (UploadError, "BULK_UPLOAD_ERROR"),
    (JobCloseError, "BULK_JOB_CLOSE_ERROR"),
    (JobInfoError, "BULK_JOB_INFO_ERROR"),
    (MonitorCancelledError, "BULK_MONITOR_CANCELLED"),
    (MonitorError, "BULK_MONITOR_ERROR"),
    (ResultsError, "BULK_RESULTS_ERROR"),
)


def bulk_error_code_for_exception(error: BaseException) -> str:
    """Map a pipeline exception to a deterministic error code.

    Args:
        error: Caught exception.

    Returns:
        str: Error code, `BULK_UNEXPECTED_ERROR` for anything outside the taxonomy.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    for error_type, error_code in _ERROR_CODES:
        if isinstance(error, error_type):
            return error_code
    return "BULK_UNEXPECTED_ERROR"
