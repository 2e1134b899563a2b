"""Search for alternative section placements that reduce double-booking.

The search is a single-level local search: every candidate moves exactly one
conflicting, unlocked section to another observed time slot or room. A
candidate is kept only when it has strictly fewer conflicts than the
original schedule, and results are ranked by how little they change.
"""
from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
import logging
import threading
from time import monotonic

from scheduleboard.schemas.course import DAY_SHORT_NAMES, TBA, Course
from scheduleboard.schemas.optimizer import CourseAssignment, ScheduleChange, SchedulePermutation, TimeSlot
from scheduleboard.services.course_comparison import find_room_conflict, find_time_overlap, have_same_instructor

logger = logging.getLogger(__name__)

# time, room, instructor and campus
TRACKED_FIELD_COUNT = 4
PROGRESS_EVERY = 100
PROGRESS_FULL_SCALE = 1000

ProgressCallback = Callable[[int], None]


@dataclass
class OptimizerOptions:
    """Search budget and move switches.

    Candidates only ever move a section's time or room. ``allow_instructor_change``
    and ``allow_campus_change`` are accepted for payload compatibility and
    currently have no effect; instructor and campus differences still count
    toward changes and similarity.
    """

    max_permutations: int = 50
    max_time_ms: int = 30_000
    allow_time_change: bool = True
    allow_room_change: bool = True
    allow_instructor_change: bool = True
    allow_campus_change: bool = True
    locked_crns: frozenset[str] = field(default_factory=frozenset)
    on_progress: ProgressCallback | None = None
    cancel_event: threading.Event | None = None

    def __post_init__(self) -> None:
        self.locked_crns = frozenset(self.locked_crns)


def extract_time_slots(courses: list[Course]) -> list[TimeSlot]:
    """Distinct meeting time slots in first-seen order."""
    slots: dict[tuple, TimeSlot] = {}
    for course in courses:
        for meeting in course.meetings:
            key = (meeting.days, meeting.start_minutes, meeting.end_minutes)
            if key not in slots:
                slots[key] = TimeSlot(
                    days=meeting.days,
                    start_minutes=meeting.start_minutes,
                    end_minutes=meeting.end_minutes,
                )
    return list(slots.values())


def extract_rooms(courses: list[Course]) -> list[str]:
    rooms: dict[str, None] = {}
    for course in courses:
        for meeting in course.meetings:
            if meeting.location and meeting.location != TBA:
                rooms.setdefault(meeting.location)
    return list(rooms)


def extract_instructors(courses: list[Course]) -> list[str]:
    instructors: dict[str, None] = {}
    for course in courses:
        if course.instructor is not None:
            instructors.setdefault(course.instructor.display_name)
    return list(instructors)


def time_slots_overlap(a: TimeSlot, b: TimeSlot) -> bool:
    if not any(day in b.days for day in a.days):
        return False
    return a.start_minutes < b.end_minutes and b.start_minutes < a.end_minutes


def assignments_conflict(a: CourseAssignment, b: CourseAssignment) -> bool:
    if not time_slots_overlap(a.time_slot, b.time_slot):
        return False
    if a.instructor == b.instructor:
        return True
    return a.room == b.room and a.room != TBA


def count_conflicts(assignments: list[CourseAssignment]) -> int:
    total = 0
    for i, first in enumerate(assignments):
        for second in assignments[i + 1 :]:
            if assignments_conflict(first, second):
                total += 1
    return total


def conflicting_assignment_crns(assignments: list[CourseAssignment]) -> set[str]:
    crns: set[str] = set()
    for i, first in enumerate(assignments):
        for second in assignments[i + 1 :]:
            if assignments_conflict(first, second):
                crns.add(first.crn)
                crns.add(second.crn)
    return crns


def course_to_assignment(course: Course) -> CourseAssignment | None:
    """Project a section onto its first meeting. Sections without meetings have no assignment."""
    if not course.meetings:
        return None
    meeting = course.meetings[0]
    return CourseAssignment(
        crn=course.crn,
        time_slot=TimeSlot(days=meeting.days, start_minutes=meeting.start_minutes, end_minutes=meeting.end_minutes),
        room=meeting.location,
        instructor=course.instructor.display_name if course.instructor else TBA,
        campus=course.campus,
    )


def _format_minutes(value: int) -> str:
    return f"{value // 60}:{value % 60:02d}"


def format_time_slot(slot: TimeSlot) -> str:
    """``Mon/Wed 8:00-8:50``"""
    days = "/".join(DAY_SHORT_NAMES[day] for day in slot.days)
    return f"{days} {_format_minutes(slot.start_minutes)}-{_format_minutes(slot.end_minutes)}"


def _changed_fields(original: CourseAssignment, modified: CourseAssignment) -> list[tuple[str, str, str]]:
    fields: list[tuple[str, str, str]] = []
    if original.time_slot != modified.time_slot:
        fields.append(("time", format_time_slot(original.time_slot), format_time_slot(modified.time_slot)))
    if original.room != modified.room:
        fields.append(("room", original.room, modified.room))
    if original.instructor != modified.instructor:
        fields.append(("instructor", original.instructor, modified.instructor))
    if original.campus != modified.campus:
        fields.append(("campus", original.campus, modified.campus))
    return fields


def calculate_changes(original: CourseAssignment, modified: CourseAssignment, course_code: str) -> list[ScheduleChange]:
    return [
        ScheduleChange(crn=original.crn, course_code=course_code, change_type=change_type, from_=before, to=after)
        for change_type, before, after in _changed_fields(original, modified)
    ]


def calculate_similarity(original: list[CourseAssignment], modified: list[CourseAssignment]) -> float:
    """1.0 for an unchanged schedule, falling by one step per changed field."""
    if not original:
        return 1.0
    by_crn = {assignment.crn: assignment for assignment in original}
    changed = 0
    for assignment in modified:
        before = by_crn.get(assignment.crn)
        if before is not None:
            changed += len(_changed_fields(before, assignment))
    return 1 - changed / (TRACKED_FIELD_COUNT * len(original))


def _generate_candidates(
    original: list[CourseAssignment],
    movable: list[int],
    time_slots: list[TimeSlot],
    rooms: list[str],
) -> Iterator[list[CourseAssignment]]:
    """Lazily yield schedules that differ from ``original`` in one field of one section."""
    for index in movable:
        assignment = original[index]
        for slot in time_slots:
            if slot == assignment.time_slot:
                continue
            candidate = list(original)
            candidate[index] = assignment.model_copy(update={"time_slot": slot})
            yield candidate
        for room in rooms:
            if room == assignment.room:
                continue
            candidate = list(original)
            candidate[index] = assignment.model_copy(update={"room": room})
            yield candidate


def _stop_reason(options: OptimizerOptions, deadline: float) -> str | None:
    if options.cancel_event is not None and options.cancel_event.is_set():
        return "cancelled"
    if monotonic() > deadline:
        return "timeout"
    return None


def _rank(permutations: list[SchedulePermutation]) -> list[SchedulePermutation]:
    return sorted(permutations, key=lambda item: (item.conflict_count, -item.similarity_score))


@dataclass
class OptimizerRun:
    permutations: list[SchedulePermutation]
    original_conflict_count: int
    evaluated: int
    elapsed_ms: int
    # "cancelled" or "timeout" when the search ended before exhausting its candidates
    stop_reason: str | None = None

    @property
    def stopped_early(self) -> bool:
        return self.stop_reason is not None


def search_schedule(courses: list[Course], options: OptimizerOptions | None = None) -> OptimizerRun:
    """Run the search and report how it ended alongside the ranked permutations.

    A conflict-free input comes back as its own single permutation with a
    similarity of 1. No permutations means no improving alternative was found
    within the time and count budget.
    """
    options = options or OptimizerOptions()
    started = monotonic()
    deadline = started + options.max_time_ms / 1000

    original: list[CourseAssignment] = []
    course_codes: dict[str, str] = {}
    for course in courses:
        assignment = course_to_assignment(course)
        if assignment is None:
            logger.debug("Skipping section %s: no meetings to place", course.crn)
            continue
        original.append(assignment)
        course_codes[course.crn] = course.display_code or course.crn

    original_conflicts = count_conflicts(original)
    if original_conflicts == 0:
        unchanged = SchedulePermutation(
            assignments=original,
            conflict_count=0,
            change_count=0,
            changes=[],
            similarity_score=1.0,
        )
        return OptimizerRun(
            permutations=[unchanged],
            original_conflict_count=0,
            evaluated=0,
            elapsed_ms=int((monotonic() - started) * 1000),
        )

    time_slots = extract_time_slots(courses) if options.allow_time_change else []
    rooms = extract_rooms(courses) if options.allow_room_change else []
    conflicting = conflicting_assignment_crns(original)
    # locked sections still count toward conflicts but are never moved
    movable = [
        index
        for index, assignment in enumerate(original)
        if assignment.crn in conflicting and assignment.crn not in options.locked_crns
    ]
    logger.info(
        "OPTIMIZER RUN START | sections=%s | original_conflicts=%s | movable=%s | locked=%s | time_slots=%s | rooms=%s",
        len(original),
        original_conflicts,
        len(movable),
        len(options.locked_crns),
        len(time_slots),
        len(rooms),
    )

    permutations: list[SchedulePermutation] = []
    evaluated = 0
    stop_reason: str | None = None
    for candidate in _generate_candidates(original, movable, time_slots, rooms):
        stop_reason = _stop_reason(options, deadline)
        if stop_reason is not None:
            break
        if len(permutations) >= options.max_permutations:
            break

        conflict_count = count_conflicts(candidate)
        if conflict_count < original_conflicts:
            changes: list[ScheduleChange] = []
            for before, after in zip(original, candidate):
                changes.extend(calculate_changes(before, after, course_codes.get(before.crn, before.crn)))
            permutations.append(
                SchedulePermutation(
                    assignments=candidate,
                    conflict_count=conflict_count,
                    change_count=len(changes),
                    changes=changes,
                    similarity_score=calculate_similarity(original, candidate),
                )
            )

        evaluated += 1
        if options.on_progress is not None and evaluated % PROGRESS_EVERY == 0:
            options.on_progress(min(100, round(evaluated / PROGRESS_FULL_SCALE * 100)))

    elapsed_ms = int((monotonic() - started) * 1000)
    if stop_reason is not None:
        logger.warning(
            "OPTIMIZER RUN STOPPED | reason=%s | evaluated=%s | kept=%s | elapsed_ms=%s",
            stop_reason,
            evaluated,
            len(permutations),
            elapsed_ms,
        )
    ranked = _rank(permutations)[: options.max_permutations]
    logger.info(
        "OPTIMIZER RUN COMPLETE | evaluated=%s | kept=%s | best_conflicts=%s | elapsed_ms=%s",
        evaluated,
        len(ranked),
        ranked[0].conflict_count if ranked else original_conflicts,
        elapsed_ms,
    )
    return OptimizerRun(
        permutations=ranked,
        original_conflict_count=original_conflicts,
        evaluated=evaluated,
        elapsed_ms=elapsed_ms,
        stop_reason=stop_reason,
    )


def optimize_schedule(courses: list[Course], options: OptimizerOptions | None = None) -> list[SchedulePermutation]:
    """Return up to ``max_permutations`` schedules with fewer conflicts than the original."""
    return search_schedule(courses, options).permutations


def has_conflicts(courses: list[Course]) -> bool:
    """True when any two sections share an instructor or a room at an overlapping time."""
    for i, course1 in enumerate(courses):
        for course2 in courses[i + 1 :]:
            if have_same_instructor(course1, course2) and find_time_overlap(course1, course2) is not None:
                return True
            if find_room_conflict(course1, course2) is not None:
                return True
    return False
