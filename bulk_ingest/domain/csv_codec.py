"""CSV helpers for job result partitions."""

from __future__ import annotations

import csv
import io

from .models import COLUMN_DELIMITER_CHARACTERS, ResultRecord


class CsvParseError(ValueError):
    """Raised when a CSV body is not well-formed tabular data."""


def domain_column_delimiter_character(column_delimiter: str | None) -> str:
    """Map a job `columnDelimiter` name to its separator character.

    Args:
        column_delimiter: Delimiter name such as `PIPE`, or None for the API default.

    Returns:
        str: Separator character, `,` when no delimiter is set.

    Raises:
        CsvParseError: Raised for delimiter names the API does not define.
    """

    if not column_delimiter:
        return ","
    try:
        return COLUMN_DELIMITER_CHARACTERS[column_delimiter.strip().upper()]
    except KeyError as error:
        raise CsvParseError(f"Unknown column delimiter '{column_delimiter}'") from error


def domain_parse_csv_records(
    csv_text: str,
    required_columns: tuple[str, ...] = (),
    delimiter: str = ",",
) -> list[ResultRecord]:
    """Parse CSV text with a header row into one mapping per data row.

    Args:
        csv_text: Raw CSV body.
        required_columns: Header names that must be present.
        delimiter: Single-character field separator the body was written with.

    Returns:
        list[ResultRecord]: Parsed rows keyed by header name. Empty input yields an empty list.

    Raises:
        CsvParseError: Raised on CSV syntax errors, ragged rows, blank or duplicate headers,
            or missing required columns.
    """

    if not csv_text.strip():
        return []

    reader = csv.reader(io.StringIO(csv_text, newline=""), delimiter=delimiter, strict=True)
    try:
        header = next(reader)
        header = [column.lstrip("\ufeff") if index == 0 else column for index, column in enumerate(header)]
        if any(not column.strip() for column in header):
            raise CsvParseError("CSV header contains a blank column name")
        if len(set(header)) != len(header):
            raise CsvParseError("CSV header contains duplicate column names")

        missing_columns = [column for column in required_columns if column not in header]
        if missing_columns:
            raise CsvParseError(f"CSV header is missing required columns: {', '.join(missing_columns)}")

        records: list[ResultRecord] = []
        for row in reader:
            if not row:
                continue
            if len(row) != len(header):
                raise CsvParseError(
                    f"CSV row {reader.line_num} has {len(row)} columns, expected {len(header)}"
                )
            records.append(dict(zip(header, row)))
    except csv.Error as error:
        raise CsvParseError(f"CSV body is malformed near line {reader.line_num}: {error}") from error

    return records
