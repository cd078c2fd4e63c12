"""Job layer package for bulk ingestion pipeline stages and orchestration."""

from .data_source import DataSourceValidator
from .errors import (
	BulkOperationError,
	DataSourceError,
	JobCloseError,
	JobCreateError,
	JobInfoError,
	MonitorCancelledError,
	MonitorError,
	ResultsError,
	UploadError,
	bulk_error_code_for_exception,
)
from .job_lifecycle import JobCloser, JobInfoReader, JobSubmitter, job_ingest_path
from .monitor import RESULT_SETTLE_SECONDS, JobMonitor, monitor_interval_sequence
from .orchestrator import BulkInsertOrchestrator, bulk2_insert
from .results import RESULT_PARTITION_COLUMNS, ResultCollector, results_partition_path
from .uploader import DataUploader

__all__ = [
	"RESULT_PARTITION_COLUMNS",
	"RESULT_SETTLE_SECONDS",
	"BulkInsertOrchestrator",
	"BulkOperationError",
	"DataSourceError",
	"DataSourceValidator",
	"DataUploader",
	"JobCloseError",
	"JobCloser",
	"JobCreateError",
	"JobInfoError",
	"JobInfoReader",
	"JobMonitor",
	"JobSubmitter",
	"MonitorCancelledError",
	"MonitorError",
	"ResultCollector",
	"ResultsError",
	"UploadError",
	"bulk2_insert",
	"bulk_error_code_for_exception",
	"job_ingest_path",
	"monitor_interval_sequence",
	"results_partition_path",
]
