from __future__ import annotations

from pydantic import Field

from scheduleboard.schemas.base import CamelModel
from scheduleboard.schemas.conflict import ConflictDetectionOptions, ConflictOut
from scheduleboard.schemas.course import Course
from scheduleboard.schemas.group import StackedCourseInfo


class ScheduleAnalysisOptions(CamelModel):
    conflict_options: ConflictDetectionOptions | None = None
    hide_stacked_versions: bool = True


class ScheduleAnalysisRequest(CamelModel):
    courses: list[Course] = Field(default_factory=list, max_length=5000)
    options: ScheduleAnalysisOptions = Field(default_factory=ScheduleAnalysisOptions)


class ScheduleAnalysisResponse(CamelModel):
    courses: list[Course]
    conflicts: list[ConflictOut]
    stacked_pairs: list[StackedCourseInfo]
