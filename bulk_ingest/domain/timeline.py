"""Stage timeline events recorded on an `OperationStatus` while a bulk insert runs."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Final, Literal

BULK_PIPELINE_STAGES: Final[tuple[str, ...]] = (
    "validate",
    "create",
    "upload",
    "close",
    "monitor",
    "successful_results",
    "failed_results",
)

StageEventStatus = Literal["started", "completed", "failed", "polled"]


def domain_build_stage_event(
    stage: str,
    status: StageEventStatus,
    details: dict[str, Any] | None = None,
) -> dict[str, object]:
    """Build one timeline event for a bulk pipeline stage.

    `monitor` records one `polled` event per job info call in addition to its
    `started`/`completed` pair; every other stage records `started` followed by either
    `completed` or `failed`.

    Args:
        stage: One of `BULK_PIPELINE_STAGES`.
        status: Event kind.
        details: Stage facts such as the job id, job state, HTTP status or record counts.

    Returns:
        dict[str, object]: Event with `stage`, `status`, an ISO-8601 UTC `at_utc` timestamp and
            `details` when given.

    Raises:
        ValueError: Raised when the stage is not a bulk pipeline stage.
    """

    if stage not in BULK_PIPELINE_STAGES:
        raise ValueError(f"unknown bulk pipeline stage '{stage}'")

    stage_event: dict[str, object] = {
        "stage": stage,
        "status": status,
        "at_utc": datetime.now(timezone.utc).isoformat(),
    }
    if details is not None:
        stage_event["details"] = details
    return stage_event


def domain_timeline_last_stage(stage_timeline: list[dict[str, object]]) -> str | None:
    """Return the stage of the most recent event, i.e. where a failed run stopped."""

    if not stage_timeline:
        return None
    return str(stage_timeline[-1].get("stage"))
