"""Command-line entrypoint for bulk ingestion jobs.

This module validates startup configuration, wires the connection and pipeline, and runs one
command: `insert`, `job-info` or `abort`.
"""

import argparse
import asyncio
import json
from dataclasses import replace

from pydantic import ValidationError

from bulk_ingest.bootstrap import bootstrap_create_connection, bootstrap_create_orchestrator
from bulk_ingest.config import BulkIngestSettings, SettingsLoadError, config_load_settings
from bulk_ingest.domain import JobCreateRequest, domain_timeline_last_stage
from bulk_ingest.jobs import BulkOperationError, JobCloser, JobInfoReader, bulk_error_code_for_exception
from bulk_ingest.logger import logger_configure, logger_get


def main_build_argument_parser() -> argparse.ArgumentParser:
    """Build the command-line parser.

    Returns:
        argparse.ArgumentParser: Parser with `insert`, `job-info` and `abort` subcommands.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    argument_parser = argparse.ArgumentParser(description="Bulk API 2.0 ingestion runtime entrypoint")
    subparsers = argument_parser.add_subparsers(dest="command", required=True)

    insert_parser = subparsers.add_parser("insert", help="Insert the records of one CSV file")
    insert_parser.add_argument("--object", dest="object_name", required=True, help="Target object, e.g. Account")
    insert_parser.add_argument("--data-file", dest="data_file", required=True, help="Path to the CSV payload")
    insert_parser.add_argument(
        "--column-delimiter",
        dest="column_delimiter",
        choices=("BACKQUOTE", "CARET", "COMMA", "PIPE", "SEMICOLON", "TAB"),
        help="Column delimiter used in the CSV payload",
    )
    insert_parser.add_argument(
        "--line-ending",
        dest="line_ending",
        choices=("LF", "CRLF"),
        help="Line ending used in the CSV payload",
    )
    insert_parser.add_argument("--api-version", dest="api_version", help="API version override for job creation")
    insert_parser.add_argument("--poll-initial", dest="poll_initial", type=float, help="Seconds before first poll")
    insert_parser.add_argument("--poll-increment", dest="poll_increment", type=float, help="Poll delay growth")
    insert_parser.add_argument("--poll-maximum", dest="poll_maximum", type=float, help="Poll delay cap")
    insert_parser.add_argument("--poll-timeout", dest="poll_timeout", type=float, help="Monitoring timeout")

    info_parser = subparsers.add_parser("job-info", help="Print the status of one job")
    info_parser.add_argument("job_id", help="Ingestion job id")

    abort_parser = subparsers.add_parser("abort", help="Abort one job")
    abort_parser.add_argument("job_id", help="Ingestion job id")
    return argument_parser


async def main_run_insert(settings: BulkIngestSettings, parsed_arguments: argparse.Namespace) -> int:
    """Run one bulk insert and print its summary.

    Args:
        settings: Validated runtime settings.
        parsed_arguments: Parsed `insert` arguments.

    Returns:
        int: Process exit code, 0 on success and 1 on an invalid request or pipeline failure.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    try:
        request = JobCreateRequest(
            object=parsed_arguments.object_name,
            operation="insert",
            column_delimiter=parsed_arguments.column_delimiter,
            line_ending=parsed_arguments.line_ending,
        )
    except ValidationError as error:
        request_failure_payload = {
            "error_code": "BULK_INVALID_REQUEST",
            "stage": "request",
            "message": "; ".join(
                f"{'.'.join(str(part) for part in detail['loc'])}: {detail['msg']}" for detail in error.errors()
            ),
        }
        print(json.dumps(request_failure_payload, indent=2))
        return 1

    interval_options = settings.settings_interval_options()
    overrides = {
        "initial": parsed_arguments.poll_initial,
        "increment_by": parsed_arguments.poll_increment,
        "maximum": parsed_arguments.poll_maximum,
        "timeout": parsed_arguments.poll_timeout,
    }
    interval_options = replace(
        interval_options,
        **{name: value for name, value in overrides.items() if value is not None},
    )

    orchestrator = bootstrap_create_orchestrator(settings)
    async with bootstrap_create_connection(settings) as connection:
        try:
            operation_status = await orchestrator.bulk2_insert(
                connection,
                request,
                parsed_arguments.data_file,
                interval_options=interval_options,
                api_version=parsed_arguments.api_version,
            )
        except BulkOperationError as error:
            failure_payload: dict[str, object] = {
                "error_code": bulk_error_code_for_exception(error),
                "stage": error.stage,
                "message": error.message,
            }
            if error.operation_status is not None:
                failure_payload["last_stage"] = domain_timeline_last_stage(error.operation_status.stage_timeline)
                failure_payload["operation_status"] = error.operation_status.to_summary()
            print(json.dumps(failure_payload, indent=2))
            return 1

    print(json.dumps(operation_status.to_summary(), indent=2))
    return 0


async def main_run_job_command(settings: BulkIngestSettings, parsed_arguments: argparse.Namespace) -> int:
    """Run `job-info` or `abort` for one job id and print the job payload.

    Args:
        settings: Validated runtime settings.
        parsed_arguments: Parsed command arguments.

    Returns:
        int: Process exit code.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    jobs_logger = logger_get("jobs")
    async with bootstrap_create_connection(settings) as connection:
        try:
            if parsed_arguments.command == "abort":
                job_payload = await JobCloser(logger=jobs_logger).job_abort(connection, parsed_arguments.job_id)
            else:
                job_payload = await JobInfoReader(logger=jobs_logger).job_get_info(connection, parsed_arguments.job_id)
        except BulkOperationError as error:
            print(json.dumps({"error_code": bulk_error_code_for_exception(error), "message": error.message}, indent=2))
            return 1

    print(json.dumps(job_payload.wire_dump(), indent=2))
    return 0


def main(argv: list[str] | None = None) -> None:
    """Run the selected command with validated startup configuration.

    Args:
        argv: Optional argument list, defaults to `sys.argv[1:]`.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SystemExit: Raised with exit code 1 on pipeline failure and 2 on configuration failure.
    """

    parsed_arguments = main_build_argument_parser().parse_args(argv)
    try:
        settings = config_load_settings()
    except SettingsLoadError as error:
        print(str(error))
        raise SystemExit(2) from error
    logger_configure(settings.log_level)

    if parsed_arguments.command == "insert":
        exit_code = asyncio.run(main_run_insert(settings, parsed_arguments))
    else:
        exit_code = asyncio.run(main_run_job_command(settings, parsed_arguments))
    if exit_code != 0:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
