from __future__ import annotations

from pydantic import Field

from scheduleboard.schemas.base import CamelModel, FrozenCamelModel
from scheduleboard.schemas.course import Course


class StackedGroupPair(FrozenCamelModel):
    primary_course: Course
    corequisite: Course | None = None


class CourseGroup(FrozenCamelModel):
    """Up to four sections taught as one offering (lecture, lab and their stacked twins)."""

    id: str
    primary_course: Course
    corequisite: Course | None = None
    stacked_pair: StackedGroupPair | None = None
    display_title: str
    display_code: str
    all_crns: list[str] = Field(alias="allCRNs")
    all_courses: list[Course]
    total_enrollment: int
    total_capacity: int
    is_standalone: bool
    has_corequisite: bool
    has_stacked_pair: bool


class StackedCourseInfo(FrozenCamelModel):
    base_course: Course
    stacked_course: Course
    base_level: int
    stacked_level: int
    enrollment_diff: int
    capacity_diff: int
    same_instructor: bool
    same_time: bool
    same_room: bool


class CourseSetRequest(CamelModel):
    courses: list[Course] = Field(default_factory=list, max_length=5000)
