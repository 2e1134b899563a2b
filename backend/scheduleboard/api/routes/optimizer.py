import logging

from fastapi import APIRouter, Depends, status

from scheduleboard.api.deps import get_job_manager
from scheduleboard.core.config import get_settings
from scheduleboard.core.exceptions import OptimizerError
from scheduleboard.schemas.optimizer import (
    OptimizeRequest,
    OptimizeResponse,
    OptimizerJobOut,
    OptimizerSettingsPayload,
)
from scheduleboard.services.optimizer_jobs import OptimizerJobManager
from scheduleboard.services.schedule_optimizer import OptimizerOptions, search_schedule

router = APIRouter()

logger = logging.getLogger(__name__)


def build_optimizer_options(payload: OptimizeRequest) -> OptimizerOptions:
    settings = get_settings()
    requested: OptimizerSettingsPayload = payload.options
    known_crns = {course.crn for course in payload.courses}
    unknown = sorted(set(requested.locked_crns) - known_crns)
    if unknown:
        raise OptimizerError(
            message="Locked CRNs must belong to the submitted courses",
            details={"unknown_crns": unknown},
        )
    return OptimizerOptions(
        max_permutations=requested.max_permutations or settings.optimizer_max_permutations,
        max_time_ms=requested.max_time_ms or settings.optimizer_max_time_ms,
        allow_time_change=requested.allow_time_change,
        allow_room_change=requested.allow_room_change,
        allow_instructor_change=requested.allow_instructor_change,
        allow_campus_change=requested.allow_campus_change,
        locked_crns=frozenset(requested.locked_crns),
    )


@router.post("/run", response_model=OptimizeResponse)
def run_optimizer(payload: OptimizeRequest) -> OptimizeResponse:
    options = build_optimizer_options(payload)
    logger.info(
        "OPTIMIZER REQUEST START | courses=%s | locked=%s | max_permutations=%s | max_time_ms=%s",
        len(payload.courses),
        len(options.locked_crns),
        options.max_permutations,
        options.max_time_ms,
    )
    run = search_schedule(payload.courses, options)
    logger.info(
        "OPTIMIZER REQUEST COMPLETE | permutations=%s | stop_reason=%s | wall_ms=%s",
        len(run.permutations),
        run.stop_reason,
        run.elapsed_ms,
    )
    return OptimizeResponse(
        permutations=run.permutations,
        original_conflict_count=run.original_conflict_count,
        elapsed_ms=run.elapsed_ms,
        stop_reason=run.stop_reason,
    )


@router.post("/jobs", response_model=OptimizerJobOut, status_code=status.HTTP_202_ACCEPTED)
def submit_optimizer_job(
    payload: OptimizeRequest,
    manager: OptimizerJobManager = Depends(get_job_manager),
) -> OptimizerJobOut:
    job = manager.submit(payload.courses, build_optimizer_options(payload))
    return job.snapshot()


@router.get("/jobs/{job_id}", response_model=OptimizerJobOut)
def get_optimizer_job(
    job_id: str,
    manager: OptimizerJobManager = Depends(get_job_manager),
) -> OptimizerJobOut:
    return manager.get(job_id).snapshot()


@router.delete("/jobs/{job_id}", response_model=OptimizerJobOut)
def cancel_optimizer_job(
    job_id: str,
    manager: OptimizerJobManager = Depends(get_job_manager),
) -> OptimizerJobOut:
    return manager.cancel(job_id).snapshot()
