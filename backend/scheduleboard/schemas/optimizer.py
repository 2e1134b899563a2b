from __future__ import annotations

from typing import Literal

from pydantic import Field

from scheduleboard.schemas.base import CamelModel, FrozenCamelModel
from scheduleboard.schemas.course import Course, DayOfWeek

ChangeType = Literal["time", "room", "instructor", "campus"]
OptimizerJobStatus = Literal["pending", "running", "completed", "cancelled", "failed"]


class TimeSlot(FrozenCamelModel):
    days: tuple[DayOfWeek, ...] = ()
    start_minutes: int
    end_minutes: int


class CourseAssignment(FrozenCamelModel):
    """Hypothetical placement of one section, varied by the optimizer instead of the ``Course``."""

    crn: str
    time_slot: TimeSlot
    room: str
    instructor: str
    campus: str


class ScheduleChange(FrozenCamelModel):
    crn: str
    course_code: str
    change_type: ChangeType
    from_: str = Field(alias="from")
    to: str


class SchedulePermutation(FrozenCamelModel):
    assignments: list[CourseAssignment]
    conflict_count: int
    change_count: int
    changes: list[ScheduleChange]
    similarity_score: float = Field(ge=0, le=1)


class OptimizerSettingsPayload(CamelModel):
    max_permutations: int | None = Field(default=None, ge=1, le=500)
    max_time_ms: int | None = Field(default=None, ge=1, le=300_000)
    allow_time_change: bool = True
    allow_room_change: bool = True
    allow_instructor_change: bool = Field(
        default=True,
        description="Accepted but not applied: the optimizer never reassigns instructors.",
    )
    allow_campus_change: bool = Field(
        default=True,
        description="Accepted but not applied: the optimizer never moves sections between campuses.",
    )
    locked_crns: list[str] = Field(default_factory=list, alias="lockedCRNs", max_length=5000)


class OptimizeRequest(CamelModel):
    courses: list[Course] = Field(default_factory=list, max_length=500)
    options: OptimizerSettingsPayload = Field(default_factory=OptimizerSettingsPayload)


class OptimizeResponse(CamelModel):
    permutations: list[SchedulePermutation]
    original_conflict_count: int
    elapsed_ms: int
    stop_reason: Literal["cancelled", "timeout"] | None = None


class OptimizerJobOut(CamelModel):
    id: str
    status: OptimizerJobStatus
    progress: int = Field(ge=0, le=100)
    course_count: int
    original_conflict_count: int
    elapsed_ms: int | None = None
    stop_reason: Literal["cancelled", "timeout"] | None = None
    permutations: list[SchedulePermutation] = Field(default_factory=list)
    error: str | None = None
