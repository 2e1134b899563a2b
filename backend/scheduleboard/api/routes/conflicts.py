import logging

from fastapi import APIRouter

from scheduleboard.core.config import get_settings
from scheduleboard.schemas.conflict import (
    ConflictDetectionOptions,
    ConflictDetectRequest,
    ConflictOut,
    ConflictReport,
)
from scheduleboard.schemas.course import Course
from scheduleboard.services.conflict_detector import (
    detect_all_conflicts,
    mark_courses_with_conflicts,
    summarize_conflicts,
)

router = APIRouter()

logger = logging.getLogger(__name__)


def resolve_detection_options(options: ConflictDetectionOptions | None) -> ConflictDetectionOptions:
    if options is not None:
        return options
    settings = get_settings()
    return ConflictDetectionOptions(
        hide_stacked_courses=settings.conflicts_hide_stacked_courses,
        hide_lab_corequisites=settings.conflicts_hide_lab_corequisites,
    )


@router.post("/detect", response_model=ConflictReport)
def detect_conflicts(payload: ConflictDetectRequest) -> ConflictReport:
    conflicts = detect_all_conflicts(payload.courses, resolve_detection_options(payload.options))
    logger.info("CONFLICT DETECTION | courses=%s | conflicts=%s", len(payload.courses), len(conflicts))
    return ConflictReport(
        conflicts=[ConflictOut.from_conflict(item) for item in conflicts],
        summary=summarize_conflicts(conflicts),
    )


@router.post("/mark", response_model=list[Course])
def mark_conflicts(payload: ConflictDetectRequest) -> list[Course]:
    conflicts = detect_all_conflicts(payload.courses, resolve_detection_options(payload.options))
    return mark_courses_with_conflicts(payload.courses, conflicts)
