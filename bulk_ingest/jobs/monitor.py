"""Adaptive-interval job status polling."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Final, Iterator

from bulk_ingest.adapters import BulkApiConnectionPort
from bulk_ingest.domain import IntervalOptions, JobStatus, domain_build_stage_event

from .errors import JobInfoError, MonitorCancelledError, MonitorError
from .job_lifecycle import JobInfoReader

RESULT_SETTLE_SECONDS: Final[int] = 3

SleepFunction = Callable[[float], Awaitable[None]]
ClockFunction = Callable[[], float]


def monitor_interval_sequence(
    interval_options: IntervalOptions | None = None,
    count: int | None = None,
) -> Iterator[int]:
    """Yield the polling delays used by `JobMonitor`, starting with the first one.

    The n-th delay is `min(initial + n * increment_by, maximum)`, except that the initial
    delay is used as-is even when it is above the maximum.

    Args:
        interval_options: Polling options, normalized before use.
        count: Number of delays to yield, or None for an infinite sequence.

    Returns:
        Iterator[int]: Delays in seconds.

    Raises:
        ValueError: Raised when an option is not a finite number or count is negative.
    """

    if count is not None and count < 0:
        raise ValueError("count must be >= 0")
    options = (interval_options or IntervalOptions()).normalized()
    interval = int(options.initial)
    yielded = 0
    while count is None or yielded < count:
        yield interval
        yielded += 1
        interval = min(interval + int(options.increment_by), int(options.maximum))


class JobMonitor:
    """Poll job info until the job leaves the active states or the timeout is reached.

    A poll that comes back in `Open`, `UploadComplete` or `InProgress` keeps monitoring
    going; any other state stops it. Reaching the timeout is not an error: the last status
    fetched is returned whether it is terminal or not. Only a failed poll raises.
    """

    def __init__(
        self,
        info_reader: JobInfoReader | None = None,
        logger: logging.Logger | None = None,
        sleep: SleepFunction | None = None,
        clock: ClockFunction | None = None,
        settle_seconds: float = RESULT_SETTLE_SECONDS,
    ):
        """Initialize monitor.

        Args:
            info_reader: Job info call used for each poll.
            logger: Optional injected logger.
            sleep: Awaitable sleep function, defaults to `asyncio.sleep`.
            clock: Monotonic clock in seconds, defaults to `time.monotonic`.
            settle_seconds: Grace period after the last poll for server-side result aggregation.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when settle_seconds is negative.
        """

        if settle_seconds < 0:
            raise ValueError("settle_seconds must be >= 0")
        self._logger = logger or logging.getLogger(__name__)
        self._info_reader = info_reader or JobInfoReader(logger=self._logger)
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or time.monotonic
        self._settle_seconds = settle_seconds

    async def job_monitor(
        self,
        connection: BulkApiConnectionPort,
        job_id: str,
        interval_options: IntervalOptions | None = None,
        cancel_event: asyncio.Event | None = None,
        stage_timeline: list[dict[str, object]] | None = None,
    ) -> JobStatus:
        """Poll one job until it stops being active or monitoring times out.

        Args:
            connection: Authenticated ingestion API connection.
            job_id: Ingestion job id.
            interval_options: Polling options; negative values are made positive and all values
                are rounded to whole seconds.
            cancel_event: Optional cancellation signal, checked before each sleep/poll only.
            stage_timeline: Optional timeline that receives one event per poll.

        Returns:
            JobStatus: Last status fetched before monitoring stopped.

        Raises:
            MonitorError: Raised when a poll fails.
            MonitorCancelledError: Raised when cancelled before the first poll completed.
        """

        normalized_job_id = (job_id or "").strip()
        if not normalized_job_id:
            raise MonitorError("Error while monitoring job. job_id must not be blank.")

        options = (interval_options or IntervalOptions()).normalized()
        polling_deadline = self._clock() + options.timeout
        interval = options.initial
        job_status: JobStatus | None = None
        poll_count = 0

        while True:
            if cancel_event is not None and cancel_event.is_set():
                if job_status is None:
                    raise MonitorCancelledError(
                        f"Monitoring of Job ID '{normalized_job_id}' was cancelled before the first poll."
                    )
                self._logger.info("monitoring of job %s cancelled after %d polls", normalized_job_id, poll_count)
                break

            self._logger.debug(
                "job %s: next poll in %ss, %ss before timeout",
                normalized_job_id,
                interval,
                round(polling_deadline - self._clock()),
            )
            await self._sleep(interval)

            try:
                job_status = await self._info_reader.job_get_info(connection, normalized_job_id)
            except JobInfoError as error:
                raise MonitorError(
                    f"Error while monitoring Job ID '{normalized_job_id}'. {error}",
                    cause=error,
                ) from error
            poll_count += 1
            if stage_timeline is not None:
                stage_timeline.append(
                    domain_build_stage_event(
                        stage="monitor",
                        status="polled",
                        details={
                            "poll_attempt": poll_count,
                            "state": job_status.state,
                            "number_records_processed": job_status.number_records_processed,
                            "number_records_failed": job_status.number_records_failed,
                        },
                    )
                )

            interval = min(interval + options.increment_by, options.maximum)
            if self._clock() + interval > polling_deadline:
                self._logger.info(
                    "job %s monitoring timeout of %ss reached in state %s",
                    normalized_job_id,
                    options.timeout,
                    job_status.state,
                )
                break
            if not job_status.job_is_active():
                break

        await self._sleep(self._settle_seconds)
        return job_status
