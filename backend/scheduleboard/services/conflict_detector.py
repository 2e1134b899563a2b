from __future__ import annotations

import logging

from scheduleboard.schemas.conflict import Conflict, ConflictDetectionOptions, ConflictSummary
from scheduleboard.schemas.course import Course
from scheduleboard.services.course_comparison import (
    find_room_conflict,
    find_time_overlap,
    have_same_instructor,
)
from scheduleboard.services.course_group_detector import is_corequisite_pair, is_stacked_pair

logger = logging.getLogger(__name__)


def is_same_course(course1: Course, course2: Course) -> bool:
    """Two sections of one catalog course, e.g. CSCD 350-01 and CSCD 350-02."""
    return course1.subject == course2.subject and course1.course_number == course2.course_number


def is_arranged_course(course: Course) -> bool:
    """Sections without fixed meeting times never take part in conflict detection."""
    if course.delivery == "Arranged":
        return True
    return all(not meeting.days for meeting in course.meetings)


def _is_scheduled(course: Course) -> bool:
    return len(course.meetings) > 0 and not is_arranged_course(course)


def _instructor_conflict(course1: Course, course2: Course) -> Conflict | None:
    if not have_same_instructor(course1, course2):
        return None
    overlap = find_time_overlap(course1, course2)
    if overlap is None:
        return None
    name = course1.instructor.display_name if course1.instructor else "Instructor"
    return Conflict(
        id=f"instructor-{course1.crn}-{course2.crn}-{overlap.day}",
        type="instructor",
        course1=course1,
        course2=course2,
        day=overlap.day,
        overlap_start=overlap.start,
        overlap_end=overlap.end,
        description=(
            f"{name} is scheduled for both {course1.display_code} and {course2.display_code} at the same time"
        ),
    )


def _room_conflict(course1: Course, course2: Course) -> Conflict | None:
    overlap = find_room_conflict(course1, course2)
    if overlap is None:
        return None
    return Conflict(
        id=f"room-{course1.crn}-{course2.crn}-{overlap.day}",
        type="room",
        course1=course1,
        course2=course2,
        day=overlap.day,
        overlap_start=overlap.start,
        overlap_end=overlap.end,
        description=(
            f"Room {overlap.location} is double-booked for {course1.display_code} and {course2.display_code}"
        ),
    )


def _suppressed(course1: Course, course2: Course, options: ConflictDetectionOptions) -> bool:
    if options.hide_same_course_sections and is_same_course(course1, course2):
        return True
    # stacked sections are one lecture taught once
    if options.hide_stacked_courses and is_stacked_pair(course1, course2):
        return True
    if options.hide_lab_corequisites and is_corequisite_pair(course1, course2):
        return True
    return False


def detect_all_conflicts(
    courses: list[Course],
    options: ConflictDetectionOptions | None = None,
) -> list[Conflict]:
    """Scan every unordered pair of scheduled sections for instructor and room double-booking.

    A pair can produce one conflict of each type. The returned conflicts hold
    references to the given ``Course`` objects.
    """
    options = options or ConflictDetectionOptions()
    scheduled = [course for course in courses if _is_scheduled(course)]
    conflicts: list[Conflict] = []

    for i, course1 in enumerate(scheduled):
        for course2 in scheduled[i + 1 :]:
            if _suppressed(course1, course2, options):
                continue
            for conflict in (_instructor_conflict(course1, course2), _room_conflict(course1, course2)):
                if conflict is not None:
                    conflicts.append(conflict)

    logger.debug(
        "Conflict scan | courses=%s | scheduled=%s | conflicts=%s",
        len(courses),
        len(scheduled),
        len(conflicts),
    )
    return conflicts


def get_conflicts_for_course(course: Course, conflicts: list[Conflict]) -> list[Conflict]:
    return [item for item in conflicts if course.crn in (item.course1.crn, item.course2.crn)]


def get_instructor_conflicts(conflicts: list[Conflict]) -> list[Conflict]:
    return [item for item in conflicts if item.type == "instructor"]


def get_room_conflicts(conflicts: list[Conflict]) -> list[Conflict]:
    return [item for item in conflicts if item.type == "room"]


def conflicting_crns(conflicts: list[Conflict]) -> set[str]:
    crns: set[str] = set()
    for conflict in conflicts:
        crns.add(conflict.course1.crn)
        crns.add(conflict.course2.crn)
    return crns


def mark_courses_with_conflicts(courses: list[Course], conflicts: list[Conflict]) -> list[Course]:
    """Return copies of ``courses`` with ``has_conflicts`` set from the conflict list."""
    flagged = conflicting_crns(conflicts)
    return [course.model_copy(update={"has_conflicts": course.crn in flagged}) for course in courses]


def summarize_conflicts(conflicts: list[Conflict]) -> ConflictSummary:
    return ConflictSummary(
        total=len(conflicts),
        instructor=len(get_instructor_conflicts(conflicts)),
        room=len(get_room_conflicts(conflicts)),
        affected_crns=sorted(conflicting_crns(conflicts)),
    )
