"""Download and parse job result partitions."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Final

from bulk_ingest.adapters import BulkApiConnectionPort, BulkApiError, RestRequest
from bulk_ingest.domain import (
    CsvParseError,
    ResultRecord,
    ResultsKind,
    domain_column_delimiter_character,
    domain_parse_csv_records,
)

from .errors import ResultsError
from .job_lifecycle import job_ingest_path

RESULT_PARTITION_COLUMNS: Final[dict[str, tuple[str, ...]]] = {
    "successful": ("sf__Created", "sf__Id"),
    "failed": ("sf__Error", "sf__Id"),
}


def results_partition_path(data_source_path: str, kind: ResultsKind) -> str:
    """Return the sibling file path a result partition is saved to."""

    return f"{data_source_path}.{kind}Results"


class ResultCollector:
    """Fetch one result partition, save its raw CSV and parse it into records."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(__name__)

    async def job_fetch_results(
        self,
        connection: BulkApiConnectionPort,
        job_id: str,
        kind: ResultsKind,
        results_path: str,
        column_delimiter: str | None = None,
    ) -> list[ResultRecord]:
        """Download one result partition.

        The raw body is written to `results_path` before parsing, so it is kept even when
        the body cannot be parsed.

        Args:
            connection: Authenticated ingestion API connection.
            job_id: Ingestion job id.
            kind: `successful` or `failed`.
            results_path: File the raw CSV body is written to.
            column_delimiter: Job `columnDelimiter`; partitions are written with the job delimiter.

        Returns:
            list[ResultRecord]: One mapping per result row.

        Raises:
            ResultsError: Raised for unknown kinds, transport failures, non-200 status, write
                failures or unparseable bodies.
        """

        required_columns = RESULT_PARTITION_COLUMNS.get(kind)
        if required_columns is None:
            raise ResultsError(f"Unknown result partition '{kind}'.")
        normalized_results_path = (results_path or "").strip()
        if not normalized_results_path:
            raise ResultsError(f"Path for {kind} results must not be blank.")

        try:
            resource_url = f"{job_ingest_path(job_id)}/{kind}Results/"
        except ValueError as error:
            raise ResultsError(f"Could not download {kind} results. {error}", cause=error) from error

        rest_request = RestRequest(method="GET", url=resource_url, headers={"Accept": "text/csv"})
        try:
            raw_response = await connection.connection_request_raw(rest_request)
        except BulkApiError as error:
            raise ResultsError(f"REST request to '{resource_url}' failed. {error}", cause=error) from error

        if raw_response.status_code != 200:
            raise ResultsError(
                f"REST request to '{resource_url}' failed (STATUS_CODE: {raw_response.status_code}). "
                f"{raw_response.body}"
            )

        try:
            Path(normalized_results_path).write_text(raw_response.body, encoding="utf-8", newline="")
        except OSError as error:
            raise ResultsError(f"Job results not saved. {error}", cause=error) from error

        try:
            records = domain_parse_csv_records(
                raw_response.body,
                required_columns=required_columns,
                delimiter=domain_column_delimiter_character(column_delimiter),
            )
        except CsvParseError as error:
            raise ResultsError(f"Job results not parseable. {error}", cause=error) from error

        self._logger.debug(
            "job %s: %d %s results saved to %s",
            job_id,
            len(records),
            kind,
            normalized_results_path,
        )
        return records
