"""Domain contracts shared across the adapter and job layers."""

from .csv_codec import CsvParseError, domain_column_delimiter_character, domain_parse_csv_records
from .models import (
	ACTIVE_JOB_STATES,
	COLUMN_DELIMITER_CHARACTERS,
	MAX_SOURCE_SIZE,
	MAX_SOURCE_SIZE_DESCRIPTOR,
	TERMINAL_JOB_STATES,
	DataSourceDescriptor,
	IntervalOptions,
	JobCreateRequest,
	JobDescriptor,
	JobStatus,
	OperationStatus,
	ResultRecord,
	ResultsKind,
	UploadAck,
)
from .timeline import BULK_PIPELINE_STAGES, domain_build_stage_event, domain_timeline_last_stage

__all__ = [
	"ACTIVE_JOB_STATES",
	"BULK_PIPELINE_STAGES",
	"COLUMN_DELIMITER_CHARACTERS",
	"MAX_SOURCE_SIZE",
	"MAX_SOURCE_SIZE_DESCRIPTOR",
	"TERMINAL_JOB_STATES",
	"CsvParseError",
	"DataSourceDescriptor",
	"IntervalOptions",
	"JobCreateRequest",
	"JobDescriptor",
	"JobStatus",
	"OperationStatus",
	"ResultRecord",
	"ResultsKind",
	"UploadAck",
	"domain_build_stage_event",
	"domain_column_delimiter_character",
	"domain_parse_csv_records",
	"domain_timeline_last_stage",
]
