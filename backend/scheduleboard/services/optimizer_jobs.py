"""Run the schedule optimizer off the request thread.

Jobs execute on a shared thread pool. Cancelling a job sets an event the
optimizer polls before each candidate, so a cancel takes effect within one
candidate evaluation and keeps the permutations already found.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
import logging
import threading
from time import perf_counter
from typing import Literal
from uuid import uuid4

from scheduleboard.core.exceptions import ConfigurationError, ResourceNotFoundError
from scheduleboard.schemas.course import Course
from scheduleboard.schemas.optimizer import OptimizerJobOut, SchedulePermutation
from scheduleboard.services.schedule_optimizer import (
    OptimizerOptions,
    count_conflicts,
    course_to_assignment,
    search_schedule,
)

logger = logging.getLogger(__name__)

JobStatus = Literal["pending", "running", "completed", "cancelled", "failed"]
FINISHED_STATUSES = {"completed", "cancelled", "failed"}


def original_conflict_count(courses: list[Course]) -> int:
    assignments = [item for item in (course_to_assignment(course) for course in courses) if item is not None]
    return count_conflicts(assignments)


@dataclass
class OptimizerJob:
    id: str
    courses: list[Course]
    options: OptimizerOptions
    original_conflict_count: int
    cancel_event: threading.Event = field(default_factory=threading.Event)
    status: JobStatus = "pending"
    progress: int = 0
    elapsed_ms: int | None = None
    stop_reason: str | None = None
    permutations: list[SchedulePermutation] = field(default_factory=list)
    error: str | None = None

    @property
    def finished(self) -> bool:
        return self.status in FINISHED_STATUSES

    def snapshot(self) -> OptimizerJobOut:
        return OptimizerJobOut(
            id=self.id,
            status=self.status,
            progress=self.progress,
            course_count=len(self.courses),
            original_conflict_count=self.original_conflict_count,
            elapsed_ms=self.elapsed_ms,
            stop_reason=self.stop_reason,
            permutations=list(self.permutations),
            error=self.error,
        )


class OptimizerJobManager:
    def __init__(self, *, max_workers: int, retention: int = 100) -> None:
        if max_workers < 1:
            raise ConfigurationError("optimizer_max_workers must be at least 1")
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="optimizer")
        self._jobs: dict[str, OptimizerJob] = {}
        self._lock = threading.Lock()
        self._retention = max(1, retention)

    def submit(self, courses: list[Course], options: OptimizerOptions) -> OptimizerJob:
        job = OptimizerJob(
            id=uuid4().hex,
            courses=list(courses),
            options=options,
            original_conflict_count=original_conflict_count(courses),
        )
        with self._lock:
            self._jobs[job.id] = job
            self._prune_finished()
        logger.info(
            "OPTIMIZER JOB SUBMITTED | job_id=%s | courses=%s | original_conflicts=%s",
            job.id,
            len(job.courses),
            job.original_conflict_count,
        )
        self._executor.submit(self._run, job)
        return job

    def get(self, job_id: str) -> OptimizerJob:
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise ResourceNotFoundError("Optimizer job", job_id)
        return job

    def cancel(self, job_id: str) -> OptimizerJob:
        job = self.get(job_id)
        job.cancel_event.set()
        with self._lock:
            if job.status == "pending":
                job.status = "cancelled"
                job.stop_reason = "cancelled"
        logger.info("OPTIMIZER JOB CANCEL REQUESTED | job_id=%s | status=%s", job.id, job.status)
        return job

    def clear(self) -> None:
        with self._lock:
            for job in self._jobs.values():
                job.cancel_event.set()
            self._jobs.clear()

    def shutdown(self) -> None:
        self.clear()
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _prune_finished(self) -> None:
        finished = [job_id for job_id, job in self._jobs.items() if job.finished]
        overflow = len(finished) - self._retention
        for job_id in finished[: max(0, overflow)]:
            del self._jobs[job_id]

    def _set_progress(self, job: OptimizerJob, progress: int) -> None:
        job.progress = progress

    def _run(self, job: OptimizerJob) -> None:
        with self._lock:
            if job.status != "pending":
                return
            job.status = "running"
        started = perf_counter()
        options = replace(
            job.options,
            cancel_event=job.cancel_event,
            on_progress=lambda progress: self._set_progress(job, progress),
        )
        try:
            run = search_schedule(job.courses, options)
        except Exception as exc:
            job.elapsed_ms = int((perf_counter() - started) * 1000)
            job.error = str(exc) or exc.__class__.__name__
            job.status = "failed"
            logger.exception("OPTIMIZER JOB FAILED | job_id=%s | wall_ms=%s", job.id, job.elapsed_ms)
            return

        job.permutations = run.permutations
        job.stop_reason = run.stop_reason
        job.elapsed_ms = int((perf_counter() - started) * 1000)
        # a cancel that lands after the search finished leaves the result complete
        job.status = "cancelled" if run.stop_reason == "cancelled" else "completed"
        if job.status == "completed":
            job.progress = 100
        logger.info(
            "OPTIMIZER JOB FINISHED | job_id=%s | status=%s | permutations=%s | wall_ms=%s",
            job.id,
            job.status,
            len(run.permutations),
            job.elapsed_ms,
        )
