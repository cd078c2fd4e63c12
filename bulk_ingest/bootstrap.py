"""Dependency assembly from validated settings."""

import logging

from bulk_ingest.adapters import HttpxBulkApiConnection
from bulk_ingest.config import BulkIngestSettings
from bulk_ingest.jobs import BulkInsertOrchestrator
from bulk_ingest.logger import logger_get


def bootstrap_create_connection(settings: BulkIngestSettings) -> HttpxBulkApiConnection:
    """Build the authenticated ingestion API connection.

    Args:
        settings: Validated runtime settings.

    Returns:
        HttpxBulkApiConnection: Connection owning one pooled HTTP client. Callers close it.

    Raises:
        ValueError: Raised when connection settings are invalid.
    """

    return HttpxBulkApiConnection(
        instance_url=settings.instance_url,
        access_token=settings.access_token,
        api_version=settings.api_version,
        request_timeout_seconds=settings.request_timeout_seconds,
    )


def bootstrap_create_orchestrator(
    settings: BulkIngestSettings,
    logger: logging.Logger | None = None,
) -> BulkInsertOrchestrator:
    """Build a bulk insert orchestrator whose components share one logger and validator.

    Args:
        settings: Validated runtime settings.
        logger: Optional logger, defaults to the `bulk_ingest.jobs` logger.

    Returns:
        BulkInsertOrchestrator: Fully wired orchestrator.

    Raises:
        ValueError: Raised when component settings are invalid.
    """

    return BulkInsertOrchestrator.from_logger(
        logger or logger_get("jobs"),
        max_data_source_bytes=settings.max_data_source_bytes,
    )
