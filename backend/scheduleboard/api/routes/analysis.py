from fastapi import APIRouter

from scheduleboard.api.routes.conflicts import resolve_detection_options
from scheduleboard.schemas.analysis import ScheduleAnalysisRequest, ScheduleAnalysisResponse
from scheduleboard.schemas.conflict import ConflictOut
from scheduleboard.schemas.group import CourseGroup, CourseSetRequest, StackedCourseInfo
from scheduleboard.services.course_group_detector import build_course_groups
from scheduleboard.services.schedule_analysis import analyze_schedule
from scheduleboard.services.stacked_course_detector import find_stacked_pairs

router = APIRouter()


@router.post("/groups", response_model=list[CourseGroup])
def course_groups(payload: CourseSetRequest) -> list[CourseGroup]:
    return build_course_groups(payload.courses)


@router.post("/stacked", response_model=list[StackedCourseInfo])
def stacked_pairs(payload: CourseSetRequest) -> list[StackedCourseInfo]:
    return list(find_stacked_pairs(payload.courses).values())


@router.post("/analysis", response_model=ScheduleAnalysisResponse)
def schedule_analysis(payload: ScheduleAnalysisRequest) -> ScheduleAnalysisResponse:
    options = payload.options.model_copy(
        update={"conflict_options": resolve_detection_options(payload.options.conflict_options)}
    )
    analysis = analyze_schedule(payload.courses, options)
    return ScheduleAnalysisResponse(
        courses=analysis.courses,
        conflicts=[ConflictOut.from_conflict(item) for item in analysis.conflicts],
        stacked_pairs=list(analysis.stacked_pairs.values()),
    )
