import time

import pytest

from factories import make_course, make_instructor, make_meeting
from scheduleboard.core.exceptions import ConfigurationError, ResourceNotFoundError
from scheduleboard.services import optimizer_jobs
from scheduleboard.services.optimizer_jobs import OptimizerJobManager, original_conflict_count
from scheduleboard.services.schedule_optimizer import OptimizerOptions, search_schedule


def _double_booked():
    return [
        make_course("A", number="101", meetings=[make_meeting(room="101")]),
        make_course("B", number="202", meetings=[make_meeting(room="202")]),
        make_course(
            "C",
            number="303",
            instructor=make_instructor(email="jones@ewu.edu", name="Dr. Jones"),
            meetings=[make_meeting(start=600, end=650, room="303")],
        ),
    ]


def _crowded_schedule(size=150):
    return [
        make_course(
            f"S{i}",
            number=str(100 + i),
            meetings=[make_meeting(start=480 + (i % 10) * 5, end=530 + (i % 10) * 5, room=f"R{i}")],
        )
        for i in range(size)
    ]


def _wait_until_finished(manager, job_id, timeout=10.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        job = manager.get(job_id)
        if job.finished:
            return job
        time.sleep(0.01)
    raise AssertionError(f"job {job_id} did not finish")


@pytest.fixture()
def manager():
    jobs = OptimizerJobManager(max_workers=1, retention=5)
    yield jobs
    jobs.shutdown()


def test_submitted_job_completes_with_permutations(manager):
    job = manager.submit(_double_booked(), OptimizerOptions())

    finished = _wait_until_finished(manager, job.id)

    assert finished.status == "completed"
    assert finished.progress == 100
    assert finished.original_conflict_count == 1
    assert finished.permutations
    snapshot = finished.snapshot()
    assert snapshot.course_count == 3
    assert snapshot.elapsed_ms is not None


def test_cancelled_job_stops_early(manager):
    job = manager.submit(_crowded_schedule(), OptimizerOptions(max_time_ms=60_000, max_permutations=10**6))
    manager.cancel(job.id)

    finished = _wait_until_finished(manager, job.id)

    assert finished.status == "cancelled"
    assert finished.progress < 100
    assert finished.snapshot().status == "cancelled"


def test_cancel_after_search_finished_keeps_job_completed(manager, monkeypatch):
    def search_then_cancel(courses, options):
        run = search_schedule(courses, options)
        options.cancel_event.set()
        return run

    monkeypatch.setattr(optimizer_jobs, "search_schedule", search_then_cancel)

    job = manager.submit(_double_booked(), OptimizerOptions())
    finished = _wait_until_finished(manager, job.id)

    assert finished.cancel_event.is_set()
    assert finished.status == "completed"
    assert finished.stop_reason is None
    assert finished.progress == 100
    assert finished.permutations


def test_timed_out_job_completes_with_stop_reason(manager):
    job = manager.submit(_crowded_schedule(), OptimizerOptions(max_time_ms=20, max_permutations=10**6))

    finished = _wait_until_finished(manager, job.id)

    assert finished.status == "completed"
    assert finished.stop_reason == "timeout"
    assert finished.snapshot().stop_reason == "timeout"


def test_unknown_job_raises_not_found(manager):
    with pytest.raises(ResourceNotFoundError) as exc_info:
        manager.get("missing")
    assert exc_info.value.status_code == 404
    assert exc_info.value.details == {"resource_type": "Optimizer job", "resource_id": "missing"}


def test_finished_jobs_are_pruned_beyond_retention(manager):
    ids = []
    for _ in range(8):
        job = manager.submit(_double_booked(), OptimizerOptions())
        _wait_until_finished(manager, job.id)
        ids.append(job.id)

    with pytest.raises(ResourceNotFoundError):
        manager.get(ids[0])
    assert manager.get(ids[-1]).finished


def test_zero_workers_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        OptimizerJobManager(max_workers=0)


def test_original_conflict_count_ignores_sections_without_meetings():
    courses = _double_booked() + [make_course("D", number="404", meetings=[])]
    assert original_conflict_count(courses) == 1
