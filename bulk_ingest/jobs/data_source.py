"""Local payload file validation ahead of upload."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from bulk_ingest.domain import MAX_SOURCE_SIZE, MAX_SOURCE_SIZE_DESCRIPTOR, DataSourceDescriptor

from .errors import DataSourceError


class DataSourceValidator:
    """Check that a payload file exists, is readable and is not oversized."""

    def __init__(self, max_size_bytes: int = MAX_SOURCE_SIZE, logger: logging.Logger | None = None):
        """Initialize validator.

        Args:
            max_size_bytes: Largest payload accepted, in bytes.
            logger: Optional injected logger.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when max_size_bytes is not positive.
        """

        if max_size_bytes <= 0:
            raise ValueError("max_size_bytes must be > 0")
        self._max_size_bytes = max_size_bytes
        self._logger = logger or logging.getLogger(__name__)

    @property
    def max_size_bytes(self) -> int:
        return self._max_size_bytes

    def data_source_validate(self, data_source_path: str) -> DataSourceDescriptor:
        """Validate one payload file and return its descriptor.

        Args:
            data_source_path: Path to the CSV payload.

        Returns:
            DataSourceDescriptor: Path and exact size in bytes.

        Raises:
            DataSourceError: Raised when the path is blank, missing, unreadable, or the file is
                larger than the maximum size.
        """

        normalized_path = (data_source_path or "").strip()
        if not normalized_path:
            raise DataSourceError("Data source path must not be blank.")

        source_path = Path(normalized_path)
        if not source_path.is_file() or not os.access(source_path, os.R_OK):
            raise DataSourceError(f"Data source '{normalized_path}' does not exist or is not readable.")

        try:
            size_bytes = source_path.stat().st_size
        except OSError as error:
            raise DataSourceError(f"Could not get stats for '{normalized_path}'. {error}", cause=error) from error

        self._logger.debug("data source %s is %d bytes", normalized_path, size_bytes)
        if size_bytes > self._max_size_bytes:
            raise DataSourceError(
                "Maximum file size exceeded. "
                f"Current file size of '{normalized_path}' is {size_bytes} bytes. "
                f"Maximum file size is {MAX_SOURCE_SIZE_DESCRIPTOR} ({self._max_size_bytes} bytes)."
            )

        return DataSourceDescriptor(path=normalized_path, size_bytes=size_bytes)
