from __future__ import annotations

from typing import Literal

from pydantic import Field

from scheduleboard.schemas.base import CamelModel, FrozenCamelModel
from scheduleboard.schemas.course import Course, DayOfWeek

ConflictType = Literal["instructor", "room"]


class Conflict(FrozenCamelModel):
    """A double-booking between two sections.

    ``course1`` and ``course2`` are the caller's own ``Course`` objects, not
    copies, so consumers can cross-reference them by identity.
    """

    id: str
    type: ConflictType
    severity: Literal["warning", "error"] = "error"
    course1: Course
    course2: Course
    day: DayOfWeek
    overlap_start: int
    overlap_end: int
    description: str

    @property
    def pair_key(self) -> tuple[str, frozenset[str]]:
        return self.type, frozenset((self.course1.crn, self.course2.crn))


def same_conflicts(first: list[Conflict], second: list[Conflict]) -> bool:
    """Compare two conflict lists ignoring list order and course order within a pair."""
    return {item.pair_key for item in first} == {item.pair_key for item in second}


class ConflictDetectionOptions(CamelModel):
    hide_stacked_courses: bool = True
    hide_lab_corequisites: bool = True
    hide_same_course_sections: bool = False


class ConflictOut(CamelModel):
    id: str
    type: ConflictType
    severity: Literal["warning", "error"]
    course1_crn: str
    course1_code: str
    course2_crn: str
    course2_code: str
    day: DayOfWeek
    overlap_start: int
    overlap_end: int
    description: str

    @classmethod
    def from_conflict(cls, conflict: Conflict) -> "ConflictOut":
        return cls(
            id=conflict.id,
            type=conflict.type,
            severity=conflict.severity,
            course1_crn=conflict.course1.crn,
            course1_code=conflict.course1.display_code,
            course2_crn=conflict.course2.crn,
            course2_code=conflict.course2.display_code,
            day=conflict.day,
            overlap_start=conflict.overlap_start,
            overlap_end=conflict.overlap_end,
            description=conflict.description,
        )


class ConflictSummary(CamelModel):
    total: int = 0
    instructor: int = 0
    room: int = 0
    affected_crns: list[str] = Field(default_factory=list, alias="affectedCRNs")


class ConflictDetectRequest(CamelModel):
    courses: list[Course] = Field(default_factory=list, max_length=5000)
    options: ConflictDetectionOptions | None = None


class ConflictReport(CamelModel):
    conflicts: list[ConflictOut]
    summary: ConflictSummary
