"""Decide which member of a stacked pair the dashboard shows.

The lower level section (the 400-level of a 400/500 pair) is the base and is
displayed; the higher level one is the stacked version and is suppressed
from primary display.
"""
from __future__ import annotations

from scheduleboard.schemas.course import Course
from scheduleboard.schemas.group import StackedCourseInfo
from scheduleboard.services.course_comparison import has_time_overlap, have_same_instructor, have_same_room
from scheduleboard.services.course_group_detector import course_level, is_stacked_pair


def find_stacked_pairs(courses: list[Course]) -> dict[str, StackedCourseInfo]:
    """Map base crn -> pair info. The first pairing found for a base course wins."""
    stacked_pairs: dict[str, StackedCourseInfo] = {}
    for i, course1 in enumerate(courses):
        for course2 in courses[i + 1 :]:
            if not is_stacked_pair(course1, course2):
                continue
            level1 = course_level(course1.course_number) or 0
            level2 = course_level(course2.course_number) or 0
            base, stacked = (course1, course2) if level1 < level2 else (course2, course1)
            if base.crn in stacked_pairs:
                continue
            stacked_pairs[base.crn] = StackedCourseInfo(
                base_course=base,
                stacked_course=stacked,
                base_level=min(level1, level2),
                stacked_level=max(level1, level2),
                enrollment_diff=stacked.enrollment.current - base.enrollment.current,
                capacity_diff=stacked.enrollment.maximum - base.enrollment.maximum,
                same_instructor=have_same_instructor(base, stacked),
                same_time=has_time_overlap(base, stacked),
                same_room=have_same_room(base, stacked),
            )
    return stacked_pairs


def get_stacked_info(course: Course, stacked_pairs: dict[str, StackedCourseInfo]) -> StackedCourseInfo | None:
    return stacked_pairs.get(course.crn)


def is_stacked_version(course: Course, stacked_pairs: dict[str, StackedCourseInfo]) -> bool:
    return any(info.stacked_course.crn == course.crn for info in stacked_pairs.values())
