"""Typed data contracts for bulk ingestion jobs.

Wire models (`JobCreateRequest`, `JobDescriptor`, `JobStatus`) are pydantic models with
camelCase aliases so they are (de)serialized exactly once at the transport boundary. Local
value objects are plain dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Any, Final, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

MAX_SOURCE_SIZE: Final[int] = 1_048_576
MAX_SOURCE_SIZE_DESCRIPTOR: Final[str] = "100MB"

JOB_STATE_OPEN: Final[str] = "Open"
JOB_STATE_UPLOAD_COMPLETE: Final[str] = "UploadComplete"
JOB_STATE_IN_PROGRESS: Final[str] = "InProgress"
JOB_STATE_JOB_COMPLETE: Final[str] = "JobComplete"
JOB_STATE_FAILED: Final[str] = "Failed"
JOB_STATE_ABORTED: Final[str] = "Aborted"

ACTIVE_JOB_STATES: Final[frozenset[str]] = frozenset(
    {JOB_STATE_OPEN, JOB_STATE_UPLOAD_COMPLETE, JOB_STATE_IN_PROGRESS}
)
TERMINAL_JOB_STATES: Final[frozenset[str]] = frozenset(
    {JOB_STATE_JOB_COMPLETE, JOB_STATE_FAILED, JOB_STATE_ABORTED}
)

JobOperation = Literal["insert", "delete", "update", "upsert"]
ColumnDelimiter = Literal["BACKQUOTE", "CARET", "COMMA", "PIPE", "SEMICOLON", "TAB"]
LineEnding = Literal["LF", "CRLF"]

COLUMN_DELIMITER_CHARACTERS: Final[dict[str, str]] = {
    "BACKQUOTE": "`",
    "CARET": "^",
    "COMMA": ",",
    "PIPE": "|",
    "SEMICOLON": ";",
    "TAB": "\t",
}
ResultsKind = Literal["successful", "failed"]

# One parsed row of a results partition, keyed by CSV header.
ResultRecord = dict[str, str]


class _BulkWireModel(BaseModel):
    """Base for JSON payloads exchanged with the ingestion API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def wire_dump(self) -> dict[str, Any]:
        """Return the camelCase JSON body for this model without unset optional fields."""

        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class JobCreateRequest(_BulkWireModel):
    """Request body used to create one ingestion job.

    Attributes:
        object: Target entity type, for example `Account`.
        operation: Processing operation for the job.
        content_type: Payload format. Only `CSV` is supported.
        column_delimiter: Column delimiter used in the CSV payload.
        line_ending: Line ending used in the CSV payload.
        external_id_field_name: External id field, required only for `upsert`.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    object: str = Field(min_length=1)
    operation: JobOperation = "insert"
    content_type: Literal["CSV"] = "CSV"
    column_delimiter: Optional[ColumnDelimiter] = None
    line_ending: Optional[LineEnding] = None
    external_id_field_name: Optional[str] = None

    @field_validator("object")
    @classmethod
    def _validate_object_name(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("object must not be blank")
        return stripped_value

    @model_validator(mode="after")
    def _validate_upsert_external_id(self) -> "JobCreateRequest":
        if self.operation == "upsert" and not (self.external_id_field_name or "").strip():
            raise ValueError("external_id_field_name is required for upsert operations")
        return self


class JobDescriptor(_BulkWireModel):
    """Job representation returned by create, close and abort calls."""

    id: Optional[str] = None
    object: Optional[str] = None
    operation: Optional[str] = None
    content_type: Optional[str] = None
    column_delimiter: Optional[str] = None
    line_ending: Optional[str] = None
    external_id_field_name: Optional[str] = None
    content_url: Optional[str] = None
    state: Optional[str] = None
    created_date: Optional[str] = None
    system_modstamp: Optional[str] = None
    api_version: Optional[float | str] = None
    concurrency_mode: Optional[str] = None
    created_by_id: Optional[str] = None
    job_type: Optional[str] = None

    def job_is_active(self) -> bool:
        """Return whether the job is still in a state that warrants monitoring."""

        return self.state in ACTIVE_JOB_STATES

    def job_is_terminal(self) -> bool:
        """Return whether the job reached a terminal state."""

        return self.state in TERMINAL_JOB_STATES


class JobStatus(JobDescriptor):
    """Job info response, including processing counters.

    Attributes:
        number_records_processed: Records already processed.
        number_records_failed: Records that were not processed successfully.
        apex_processing_time: Milliseconds spent in triggers and related processes.
        api_active_processing_time: Milliseconds spent actively processing the job.
        total_processing_time: Milliseconds taken to process the job.
        retries: Number of save attempts repeated by the server.
        error_message: Server-side failure message, when the job failed.
    """

    number_records_processed: Optional[int] = None
    number_records_failed: Optional[int] = None
    apex_processing_time: Optional[int] = None
    api_active_processing_time: Optional[int] = None
    total_processing_time: Optional[int] = None
    retries: Optional[int] = None
    error_message: Optional[str] = None


@dataclass(frozen=True)
class DataSourceDescriptor:
    """Validated local payload file.

    Attributes:
        path: Filesystem path to the payload.
        size_bytes: File size in bytes, never above the configured maximum.
    """

    path: str
    size_bytes: int


@dataclass(frozen=True)
class UploadAck:
    """Acknowledgement for one payload upload.

    Attributes:
        status_code: HTTP status returned by the content endpoint.
        content_url: Endpoint the payload was uploaded to.
        size_bytes: Number of payload bytes sent.
    """

    status_code: int
    content_url: str
    size_bytes: int


def _round_half_up(value: float) -> int:
    return int(math.floor(abs(value) + 0.5))


@dataclass(frozen=True)
class IntervalOptions:
    """Polling interval options for job monitoring, all in seconds.

    Attributes:
        initial: Delay before the first poll.
        increment_by: Amount added to the delay after every poll.
        maximum: Upper bound for the delay.
        timeout: Wall-clock budget for monitoring.
    """

    initial: Optional[float] = 5
    increment_by: Optional[float] = 5
    maximum: Optional[float] = 30
    timeout: Optional[float] = 600

    def normalized(self) -> "IntervalOptions":
        """Return options with every value made non-negative and rounded to whole seconds.

        Returns:
            IntervalOptions: Normalized copy. `None` values fall back to their defaults.

        Raises:
            ValueError: Raised when a value is not a finite number.
        """

        defaults = IntervalOptions()
        normalized_values: dict[str, int] = {}
        for field_name in ("initial", "increment_by", "maximum", "timeout"):
            raw_value = getattr(self, field_name)
            if raw_value is None:
                raw_value = getattr(defaults, field_name)
            if not math.isfinite(float(raw_value)):
                raise ValueError(f"interval option {field_name} must be a finite number")
            normalized_values[field_name] = _round_half_up(float(raw_value))
        return IntervalOptions(**normalized_values)


@dataclass
class OperationStatus:
    """Progress aggregate for one bulk operation, filled in stage by stage.

    Fields stay `None` until the stage that produces them completes, so an instance attached
    to an error shows exactly how far the pipeline progressed.
    """

    data_source_path: str
    data_source_size: Optional[int] = None
    successful_results_path: Optional[str] = None
    failed_results_path: Optional[str] = None
    initial_job_status: Optional[JobDescriptor] = None
    data_source_upload_status: Optional[UploadAck] = None
    current_job_status: Optional[JobStatus] = None
    successful_results: Optional[list[ResultRecord]] = None
    failed_results: Optional[list[ResultRecord]] = None
    stage_timeline: list[dict[str, object]] = field(default_factory=list)

    def to_summary(self) -> dict[str, object]:
        """Render a JSON-safe summary of the operation.

        Returns:
            dict[str, object]: Paths, job statuses, upload status and result counts.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return {
            "data_source_path": self.data_source_path,
            "data_source_size": self.data_source_size,
            "successful_results_path": self.successful_results_path,
            "failed_results_path": self.failed_results_path,
            "initial_job_status": (
                self.initial_job_status.wire_dump() if self.initial_job_status is not None else None
            ),
            "data_source_upload_status": (
                self.data_source_upload_status.status_code
                if self.data_source_upload_status is not None
                else None
            ),
            "current_job_status": (
                self.current_job_status.wire_dump() if self.current_job_status is not None else None
            ),
            "successful_result_count": (
                len(self.successful_results) if self.successful_results is not None else None
            ),
            "failed_result_count": len(self.failed_results) if self.failed_results is not None else None,
        }
