from __future__ import annotations

from dataclasses import dataclass

from scheduleboard.schemas.analysis import ScheduleAnalysisOptions
from scheduleboard.schemas.conflict import Conflict
from scheduleboard.schemas.course import Course
from scheduleboard.schemas.group import StackedCourseInfo
from scheduleboard.services.conflict_detector import detect_all_conflicts, mark_courses_with_conflicts
from scheduleboard.services.stacked_course_detector import find_stacked_pairs, is_stacked_version


@dataclass
class ScheduleAnalysis:
    courses: list[Course]
    conflicts: list[Conflict]
    stacked_pairs: dict[str, StackedCourseInfo]


def analyze_schedule(courses: list[Course], options: ScheduleAnalysisOptions | None = None) -> ScheduleAnalysis:
    """Find stacked pairs, drop their higher-level versions if asked, then detect and mark conflicts."""
    options = options or ScheduleAnalysisOptions()
    stacked_pairs = find_stacked_pairs(courses)
    if options.hide_stacked_versions:
        visible = [course for course in courses if not is_stacked_version(course, stacked_pairs)]
    else:
        visible = list(courses)

    conflicts = detect_all_conflicts(visible, options.conflict_options)
    return ScheduleAnalysis(
        courses=mark_courses_with_conflicts(visible, conflicts),
        conflicts=conflicts,
        stacked_pairs=stacked_pairs,
    )
