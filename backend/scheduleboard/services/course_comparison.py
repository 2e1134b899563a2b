"""Pairwise predicates over two course sections.

All functions are pure. Meeting intervals are half-open ``[start, end)``, so
a section ending at 8:50 and another starting at 8:50 do not overlap.
"""
from __future__ import annotations

from dataclasses import dataclass

from scheduleboard.schemas.course import Course, DayOfWeek, Meeting


@dataclass(frozen=True)
class TimeOverlap:
    day: DayOfWeek
    start: int
    end: int


@dataclass(frozen=True)
class RoomOverlap:
    day: DayOfWeek
    start: int
    end: int
    location: str


def intervals_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    return start1 < end2 and start2 < end1


def _first_shared_overlap(m1: Meeting, m2: Meeting) -> TimeOverlap | None:
    for day in m1.days:
        if day not in m2.days:
            continue
        if intervals_overlap(m1.start_minutes, m1.end_minutes, m2.start_minutes, m2.end_minutes):
            return TimeOverlap(
                day=day,
                start=max(m1.start_minutes, m2.start_minutes),
                end=min(m1.end_minutes, m2.end_minutes),
            )
    return None


def _same_location(m1: Meeting, m2: Meeting) -> bool:
    if not m1.building or not m1.room or not m2.building or not m2.room:
        return False
    return m1.building == m2.building and m1.room == m2.room


def have_same_instructor(course1: Course, course2: Course) -> bool:
    if course1.instructor is None or course2.instructor is None:
        return False
    return course1.instructor.email == course2.instructor.email


def find_time_overlap(course1: Course, course2: Course) -> TimeOverlap | None:
    """Return the first overlapping (day, start, end) across all meeting pairs."""
    for m1 in course1.meetings:
        for m2 in course2.meetings:
            overlap = _first_shared_overlap(m1, m2)
            if overlap is not None:
                return overlap
    return None


def has_time_overlap(course1: Course, course2: Course) -> bool:
    return find_time_overlap(course1, course2) is not None


def have_same_room(course1: Course, course2: Course) -> bool:
    return any(_same_location(m1, m2) for m1 in course1.meetings for m2 in course2.meetings)


def find_room_conflict(course1: Course, course2: Course) -> RoomOverlap | None:
    for m1 in course1.meetings:
        for m2 in course2.meetings:
            if not _same_location(m1, m2):
                continue
            overlap = _first_shared_overlap(m1, m2)
            if overlap is not None:
                return RoomOverlap(
                    day=overlap.day,
                    start=overlap.start,
                    end=overlap.end,
                    location=f"{m1.building} {m1.room}",
                )
    return None
