from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, model_validator

from scheduleboard.schemas.base import FrozenCamelModel

DayOfWeek = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
DeliveryMethod = Literal["F2F", "Online", "Hybrid", "Arranged"]

DAY_SHORT_NAMES: dict[str, str] = {
    "monday": "Mon",
    "tuesday": "Tue",
    "wednesday": "Wed",
    "thursday": "Thu",
    "friday": "Fri",
    "saturday": "Sat",
    "sunday": "Sun",
}

TBA = "TBA"


def _lookup(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


class Meeting(FrozenCamelModel):
    days: tuple[DayOfWeek, ...] = ()
    start_minutes: int = Field(ge=0, le=24 * 60)
    end_minutes: int = Field(ge=0, le=24 * 60)
    building: str | None = None
    room: str | None = None
    location: str = TBA
    type: str = "Lecture"

    @model_validator(mode="before")
    @classmethod
    def default_location(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("location"):
            return data
        building = data.get("building")
        room = data.get("room")
        if building and room:
            return {**data, "location": f"{building} {room}"}
        return data


class Instructor(FrozenCamelModel):
    id: str | None = None
    display_name: str = Field(min_length=1, max_length=200)
    first_name: str = ""
    last_name: str = ""
    email: str = Field(min_length=1, max_length=320)
    is_primary: bool = True


class Enrollment(FrozenCamelModel):
    current: int = Field(default=0, ge=0)
    maximum: int = Field(default=0, ge=0)
    waitlist: int = Field(default=0, ge=0)
    waitlist_max: int = Field(default=0, ge=0)


class Course(FrozenCamelModel):
    """One offered section. Identity is ``crn``; instances are never mutated."""

    crn: str = Field(min_length=1, max_length=20)
    term: str | None = None
    subject: str = Field(min_length=1, max_length=20)
    course_number: str = Field(min_length=1, max_length=20)
    section: str = "01"
    title: str = ""
    display_code: str = ""
    credits: float = Field(default=0, ge=0)
    meetings: tuple[Meeting, ...] = ()
    instructor: Instructor | None = None
    enrollment: Enrollment = Field(default_factory=Enrollment)
    delivery: DeliveryMethod = "F2F"
    campus: str = ""
    has_conflicts: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def default_display_code(cls, data: Any) -> Any:
        if not isinstance(data, dict) or _lookup(data, "displayCode", "display_code"):
            return data
        subject = _lookup(data, "subject")
        number = _lookup(data, "courseNumber", "course_number")
        if subject and number:
            cleaned = {key: value for key, value in data.items() if key not in ("displayCode", "display_code")}
            return {**cleaned, "display_code": f"{subject} {number}"}
        return data
