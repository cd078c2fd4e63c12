"""Adapter layer package for the ingestion API transport boundary."""

from .errors import (
	BulkApiConnectionError,
	BulkApiContractError,
	BulkApiError,
	BulkApiResponseError,
	BulkApiTimeoutError,
)
from .httpx_connection import HttpxBulkApiConnection, connection_extract_error_message
from .interfaces import BulkApiConnectionPort, RawRestResponse, RestRequest

__all__ = [
	"BulkApiConnectionError",
	"BulkApiConnectionPort",
	"BulkApiContractError",
	"BulkApiError",
	"BulkApiResponseError",
	"BulkApiTimeoutError",
	"HttpxBulkApiConnection",
	"RawRestResponse",
	"RestRequest",
	"connection_extract_error_message",
]
