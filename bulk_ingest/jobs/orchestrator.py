"""Bulk insert pipeline orchestration with partial-progress error reporting."""

from __future__ import annotations

import asyncio
import logging
from typing import NoReturn

from bulk_ingest.adapters import BulkApiConnectionPort
from bulk_ingest.domain import (
    MAX_SOURCE_SIZE,
    IntervalOptions,
    JobCreateRequest,
    OperationStatus,
    domain_build_stage_event,
)

from .data_source import DataSourceValidator
from .errors import (
    BulkOperationError,
    DataSourceError,
    JobCloseError,
    JobCreateError,
    MonitorError,
    ResultsError,
    UploadError,
)
from .job_lifecycle import JobCloser, JobInfoReader, JobSubmitter
from .monitor import JobMonitor
from .results import ResultCollector, results_partition_path
from .uploader import DataUploader


class BulkInsertOrchestrator:
    """Run the create, upload, close, monitor and collect stages of one bulk insert.

    Stages run strictly one after another. Each invocation owns its `OperationStatus`, so
    concurrent invocations against different jobs need no coordination.
    """

    def __init__(
        self,
        validator: DataSourceValidator | None = None,
        submitter: JobSubmitter | None = None,
        uploader: DataUploader | None = None,
        closer: JobCloser | None = None,
        monitor: JobMonitor | None = None,
        collector: ResultCollector | None = None,
        logger: logging.Logger | None = None,
    ):
        """Initialize orchestrator components.

        Args:
            validator: Data source validator.
            submitter: Job create call.
            uploader: Payload upload call.
            closer: Job close call.
            monitor: Job status polling loop.
            collector: Result partition download.
            logger: Optional injected logger shared with default components.

        Returns:
            None: Initializer does not return a value.

        Raises:
            RuntimeError: This initializer does not raise runtime errors.
        """

        self._logger = logger or logging.getLogger(__name__)
        self._validator = validator or DataSourceValidator(logger=self._logger)
        self._submitter = submitter or JobSubmitter(logger=self._logger)
        self._uploader = uploader or DataUploader(validator=self._validator, logger=self._logger)
        self._closer = closer or JobCloser(logger=self._logger)
        self._monitor = monitor or JobMonitor(info_reader=JobInfoReader(logger=self._logger), logger=self._logger)
        self._collector = collector or ResultCollector(logger=self._logger)

    @classmethod
    def from_logger(
        cls,
        logger: logging.Logger | None = None,
        max_data_source_bytes: int = MAX_SOURCE_SIZE,
    ) -> "BulkInsertOrchestrator":
        """Build an orchestrator whose components all log through one logger.

        The uploader re-validates with the same validator instance used by the first stage.

        Args:
            logger: Logger shared by every component, defaults to this module's logger.
            max_data_source_bytes: Largest payload accepted by the shared validator.

        Returns:
            BulkInsertOrchestrator: Fully wired orchestrator.

        Raises:
            ValueError: Raised when max_data_source_bytes is not positive.
        """

        component_logger = logger or logging.getLogger(__name__)
        validator = DataSourceValidator(max_size_bytes=max_data_source_bytes, logger=component_logger)
        return cls(
            validator=validator,
            submitter=JobSubmitter(logger=component_logger),
            uploader=DataUploader(validator=validator, logger=component_logger),
            closer=JobCloser(logger=component_logger),
            monitor=JobMonitor(info_reader=JobInfoReader(logger=component_logger), logger=component_logger),
            collector=ResultCollector(logger=component_logger),
            logger=component_logger,
        )

    async def bulk2_insert(
        self,
        connection: BulkApiConnectionPort,
        request: JobCreateRequest,
        data_source_path: str,
        interval_options: IntervalOptions | None = None,
        api_version: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> OperationStatus:
        """Insert the records of one CSV file and collect the per-record results.

        Args:
            connection: Authenticated ingestion API connection.
            request: Job create request. Its operation is forced to `insert`.
            data_source_path: Path to the CSV payload.
            interval_options: Polling options for the monitoring stage.
            api_version: Optional API version override for job creation.
            cancel_event: Optional monitoring cancellation signal.

        Returns:
            OperationStatus: Fully populated operation status.

        Raises:
            DataSourceError: Raised when the payload file is invalid. No status is attached.
            JobCreateError: Raised when the job could not be created.
            UploadError: Raised when the payload could not be uploaded.
            JobCloseError: Raised when the job could not be closed.
            MonitorError: Raised when polling failed or was cancelled before the first poll.
            ResultsError: Raised when a result partition could not be collected.
        """

        base_error_message = f"Bulk {request.operation} of {request.object} records failed."

        try:
            data_source = self._validator.data_source_validate(data_source_path)
        except DataSourceError as error:
            raise DataSourceError(
                f"{base_error_message} The data source file provided is invalid for Bulk API 2.0 operations. "
                f"{error.message}",
                cause=error,
            ) from error

        operation_status = OperationStatus(
            data_source_path=data_source_path,
            data_source_size=data_source.size_bytes,
            successful_results_path=results_partition_path(data_source_path, "successful"),
            failed_results_path=results_partition_path(data_source_path, "failed"),
        )
        timeline = operation_status.stage_timeline
        timeline.append(
            domain_build_stage_event(
                stage="validate",
                status="completed",
                details={"data_source_size": data_source.size_bytes},
            )
        )

        request = request.model_copy(update={"operation": "insert"})

        self._orchestrator_stage_started(timeline, "create")
        try:
            operation_status.initial_job_status = await self._submitter.job_create(
                connection, request, api_version=api_version
            )
        except JobCreateError as error:
            self._orchestrator_raise(
                "create",
                JobCreateError,
                f"{base_error_message} Bulk job to ingest data could not be created.",
                error,
                operation_status,
            )
        job_id = operation_status.initial_job_status.id or ""
        self._orchestrator_stage_completed(timeline, "create", {"job_id": job_id})

        self._orchestrator_stage_started(timeline, "upload")
        try:
            operation_status.data_source_upload_status = await self._uploader.job_upload_data_source(
                connection,
                data_source_path,
                operation_status.initial_job_status.content_url or "",
            )
        except UploadError as error:
            self._orchestrator_raise(
                "upload",
                UploadError,
                f"{base_error_message} The data source file could not be uploaded.",
                error,
                operation_status,
            )
        self._orchestrator_stage_completed(
            timeline, "upload", {"status_code": operation_status.data_source_upload_status.status_code}
        )

        self._orchestrator_stage_started(timeline, "close")
        try:
            closed_job = await self._closer.job_close(connection, job_id)
        except JobCloseError as error:
            self._orchestrator_raise(
                "close",
                JobCloseError,
                f"{base_error_message} Could not close the bulk data load job. "
                "You may want to try and close the job manually via the Setup UI in your org.",
                error,
                operation_status,
            )
        self._orchestrator_stage_completed(timeline, "close", {"state": closed_job.state})

        self._orchestrator_stage_started(timeline, "monitor")
        try:
            operation_status.current_job_status = await self._monitor.job_monitor(
                connection,
                job_id,
                interval_options=interval_options,
                cancel_event=cancel_event,
                stage_timeline=timeline,
            )
        except MonitorError as error:
            self._orchestrator_raise(
                "monitor",
                type(error),
                f"{base_error_message} Monitoring failed for Job ID '{job_id}'.",
                error,
                operation_status,
            )
        self._orchestrator_stage_completed(
            timeline,
            "monitor",
            {
                "state": operation_status.current_job_status.state,
                "number_records_processed": operation_status.current_job_status.number_records_processed,
                "number_records_failed": operation_status.current_job_status.number_records_failed,
            },
        )

        column_delimiter = (
            operation_status.current_job_status.column_delimiter
            or operation_status.initial_job_status.column_delimiter
            or request.column_delimiter
        )
        self._orchestrator_stage_started(timeline, "successful_results")
        try:
            operation_status.successful_results = await self._collector.job_fetch_results(
                connection,
                job_id,
                "successful",
                operation_status.successful_results_path or "",
                column_delimiter=column_delimiter,
            )
        except ResultsError as error:
            self._orchestrator_raise(
                "successful_results",
                ResultsError,
                f"{base_error_message} Could not download Successful Results.",
                error,
                operation_status,
            )
        self._orchestrator_stage_completed(
            timeline, "successful_results", {"record_count": len(operation_status.successful_results)}
        )

        self._orchestrator_stage_started(timeline, "failed_results")
        try:
            operation_status.failed_results = await self._collector.job_fetch_results(
                connection,
                job_id,
                "failed",
                operation_status.failed_results_path or "",
                column_delimiter=column_delimiter,
            )
        except ResultsError as error:
            self._orchestrator_raise(
                "failed_results",
                ResultsError,
                f"{base_error_message} Could not download Failed Results.",
                error,
                operation_status,
            )
        self._orchestrator_stage_completed(
            timeline, "failed_results", {"record_count": len(operation_status.failed_results)}
        )

        self._logger.info(
            "bulk insert of %s finished: job %s state=%s successful=%d failed=%d",
            request.object,
            job_id,
            operation_status.current_job_status.state,
            len(operation_status.successful_results),
            len(operation_status.failed_results),
        )
        return operation_status

    def _orchestrator_stage_started(self, timeline: list[dict[str, object]], stage: str) -> None:
        self._logger.info("bulk stage %s started", stage)
        timeline.append(domain_build_stage_event(stage=stage, status="started"))

    def _orchestrator_stage_completed(
        self,
        timeline: list[dict[str, object]],
        stage: str,
        details: dict[str, object],
    ) -> None:
        self._logger.info("bulk stage %s completed", stage)
        timeline.append(domain_build_stage_event(stage=stage, status="completed", details=details))

    def _orchestrator_raise(
        self,
        stage: str,
        error_type: type[BulkOperationError],
        message: str,
        error: BulkOperationError,
        operation_status: OperationStatus,
    ) -> NoReturn:
        """Record a failed stage and raise the stage error with partial progress attached.

        Args:
            stage: Pipeline stage that failed.
            error_type: Stage error type to raise.
            message: Operation-level message; the cause message is appended.
            error: Component error that caused the failure.
            operation_status: Partially built operation status.

        Returns:
            NoReturn: This helper always raises.

        Raises:
            BulkOperationError: Always raised as `error_type`.
        """

        operation_status.stage_timeline.append(
            domain_build_stage_event(
                stage=stage,
                status="failed",
                details={"error_type": type(error).__name__, "error_message": error.message},
            )
        )
        self._logger.error("%s %s", message, error.message)
        raise error_type(
            f"{message} {error.message}",
            cause=error,
            operation_status=operation_status,
        ) from error


async def bulk2_insert(
    connection: BulkApiConnectionPort,
    request: JobCreateRequest,
    data_source_path: str,
    interval_options: IntervalOptions | None = None,
    api_version: str | None = None,
    logger: logging.Logger | None = None,
    cancel_event: asyncio.Event | None = None,
) -> OperationStatus:
    """Run one bulk insert with default components. See `BulkInsertOrchestrator.bulk2_insert`."""

    orchestrator = BulkInsertOrchestrator.from_logger(logger)
    return await orchestrator.bulk2_insert(
        connection,
        request,
        data_source_path,
        interval_options=interval_options,
        api_version=api_version,
        cancel_event=cancel_event,
    )
