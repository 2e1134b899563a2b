"""Merge sections that are really one offering into display groups.

Two relations are recognised, both requiring the same instructor and an
overlapping meeting time:

* corequisites: a course and its lab (``CSCD 477`` + ``CSCD 477L``)
* stacked pairs: consecutive 400/500 or 500/600 levels sharing the last two
  digits (``CSCD 477`` + ``CSCD 577``)

A group holds at most four sections: primary, its lab, the stacked primary
and the stacked lab (``477/477L/577/577L``).
"""
from __future__ import annotations

import logging
import re

from scheduleboard.schemas.course import Course
from scheduleboard.schemas.group import CourseGroup, StackedGroupPair
from scheduleboard.services.course_comparison import has_time_overlap, have_same_instructor

logger = logging.getLogger(__name__)

LAB_SUFFIX = "L"
MIN_STACKED_LEVEL = 4

_NON_DIGITS = re.compile(r"[^0-9]")


def is_lab_number(course_number: str) -> bool:
    return course_number.endswith(LAB_SUFFIX)


def strip_lab_suffix(course_number: str) -> str:
    return course_number[: -len(LAB_SUFFIX)] if is_lab_number(course_number) else course_number


def course_level(course_number: str) -> int | None:
    """Hundreds digit of the numeric part: ``"477L"`` -> 4. ``None`` without digits."""
    digits = _NON_DIGITS.sub("", course_number)
    if not digits:
        return None
    return int(digits) // 100


def base_number(course_number: str) -> str:
    """Last two digits, zero padded: ``"477L"`` -> ``"77"``, ``"501"`` -> ``"01"``."""
    digits = _NON_DIGITS.sub("", course_number)
    return digits[-2:].zfill(2)


def _taught_together(course_a: Course, course_b: Course) -> bool:
    return have_same_instructor(course_a, course_b) and has_time_overlap(course_a, course_b)


def is_corequisite_pair(course_a: Course, course_b: Course) -> bool:
    if course_a.subject != course_b.subject:
        return False
    if strip_lab_suffix(course_a.course_number) != strip_lab_suffix(course_b.course_number):
        return False
    # exactly one side is the lab
    if is_lab_number(course_a.course_number) == is_lab_number(course_b.course_number):
        return False
    return _taught_together(course_a, course_b)


def get_corequisite(course_a: Course, course_b: Course) -> tuple[Course, Course] | None:
    """Return ``(primary, lab)`` for a corequisite pair, else ``None``."""
    if not is_corequisite_pair(course_a, course_b):
        return None
    if is_lab_number(course_a.course_number):
        return course_b, course_a
    return course_a, course_b


def is_stacked_pair(course_a: Course, course_b: Course) -> bool:
    if course_a.subject != course_b.subject:
        return False
    level_a = course_level(course_a.course_number)
    level_b = course_level(course_b.course_number)
    if level_a is None or level_b is None:
        return False
    if base_number(course_a.course_number) != base_number(course_b.course_number):
        return False
    if abs(level_a - level_b) != 1:
        return False
    # 300/400 combinations are never stacked
    if level_a < MIN_STACKED_LEVEL or level_b < MIN_STACKED_LEVEL:
        return False
    return _taught_together(course_a, course_b)


def _is_higher_level(candidate: Course, reference: Course) -> bool:
    return (course_level(candidate.course_number) or 0) > (course_level(reference.course_number) or 0)


def _find_corequisite_pairs(courses: list[Course]) -> dict[str, tuple[Course, Course]]:
    pairs: dict[str, tuple[Course, Course]] = {}
    for i, course_a in enumerate(courses):
        for course_b in courses[i + 1 :]:
            pair = get_corequisite(course_a, course_b)
            if pair is not None:
                pairs[pair[0].crn] = pair
    return pairs


def _display_parts(*members: Course | None) -> list[str]:
    return [member.course_number for member in members if member is not None]


def _build_group(
    primary: Course,
    lab: Course | None,
    stacked_primary: Course | None,
    stacked_lab: Course | None,
) -> CourseGroup:
    members = [member for member in (primary, lab, stacked_primary, stacked_lab) if member is not None]
    code = "/".join(_display_parts(primary, lab, stacked_primary, stacked_lab))
    stacked_pair = None
    if stacked_primary is not None:
        stacked_pair = StackedGroupPair(primary_course=stacked_primary, corequisite=stacked_lab)
    return CourseGroup(
        id=primary.crn,
        primary_course=primary,
        corequisite=lab,
        stacked_pair=stacked_pair,
        display_title=f"{primary.subject} {code} - {primary.title}",
        display_code=code,
        all_crns=[member.crn for member in members],
        all_courses=members,
        total_enrollment=sum(member.enrollment.current for member in members),
        total_capacity=sum(member.enrollment.maximum for member in members),
        is_standalone=len(members) == 1,
        has_corequisite=lab is not None,
        has_stacked_pair=stacked_primary is not None,
    )


def build_course_groups(courses: list[Course]) -> list[CourseGroup]:
    """Partition ``courses`` into groups; every crn lands in exactly one group."""
    coreq_pairs = _find_corequisite_pairs(courses)
    primary_by_lab = {lab.crn: primary for primary, lab in coreq_pairs.values()}
    processed: set[str] = set()
    groups: list[CourseGroup] = []

    def available(course: Course | None) -> Course | None:
        if course is None or course.crn in processed:
            return None
        return course

    for course in courses:
        if course.crn in processed:
            continue

        # a lab waits for its primary, which appears later in input order
        waiting_primary = primary_by_lab.get(course.crn)
        if waiting_primary is not None and waiting_primary.crn not in processed:
            continue

        coreq = coreq_pairs.get(course.crn)
        lab = available(coreq[1]) if coreq is not None else None

        stacked_primary: Course | None = None
        stacked_lab: Course | None = None
        for other in courses:
            if other.crn in processed or other.crn == course.crn:
                continue
            if lab is not None and other.crn == lab.crn:
                continue
            # lectures stack with lectures, labs with labs
            if is_lab_number(other.course_number) != is_lab_number(course.course_number):
                continue
            if is_stacked_pair(course, other):
                if _is_higher_level(other, course):
                    stacked_primary = other
                    stacked_coreq = coreq_pairs.get(other.crn)
                    if stacked_coreq is not None:
                        stacked_lab = available(stacked_coreq[1])
                break

        # the lab may have its own stacked twin even when the lectures do not pair up
        if lab is not None and stacked_lab is None:
            for other in courses:
                if other.crn in processed or other.crn in (course.crn, lab.crn):
                    continue
                if stacked_primary is not None and other.crn == stacked_primary.crn:
                    continue
                if not is_lab_number(other.course_number) or not is_stacked_pair(lab, other):
                    continue
                if _is_higher_level(other, lab):
                    stacked_lab = other
                    if stacked_primary is None:
                        stacked_primary = available(primary_by_lab.get(other.crn)) or next(
                            (
                                candidate
                                for candidate in courses
                                if candidate.subject == other.subject
                                and candidate.course_number == strip_lab_suffix(other.course_number)
                                and candidate.crn not in processed
                                and candidate.crn != course.crn
                            ),
                            None,
                        )
                    break

        group = _build_group(course, lab, stacked_primary, stacked_lab)
        processed.update(group.all_crns)
        groups.append(group)

    # labs whose primary was absorbed elsewhere without them
    for course in courses:
        if course.crn not in processed:
            group = _build_group(course, None, None, None)
            processed.add(course.crn)
            groups.append(group)

    logger.debug("Built %d course group(s) from %d section(s)", len(groups), len(courses))
    return groups


def is_secondary_in_group(course: Course, groups: list[CourseGroup]) -> bool:
    """True when the course is grouped under another section's primary."""
    for group in groups:
        if group.primary_course.crn == course.crn:
            continue
        if course.crn in group.all_crns:
            return True
    return False


def get_group_for_course(course: Course, groups: list[CourseGroup]) -> CourseGroup | None:
    return next((group for group in groups if course.crn in group.all_crns), None)
