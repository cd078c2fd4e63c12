"""Bulk API 2.0 ingestion job orchestration."""

from .domain import IntervalOptions, JobCreateRequest, OperationStatus
from .jobs import BulkInsertOrchestrator, BulkOperationError, bulk2_insert

__all__ = [
	"BulkInsertOrchestrator",
	"BulkOperationError",
	"IntervalOptions",
	"JobCreateRequest",
	"OperationStatus",
	"bulk2_insert",
]
