from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional

from ..common.datetime_utils import format_time_12h, minutes_between
from ..core.enums import Block, DayOfWeek


@dataclass(frozen=True)
class SchoolClass:
    """A class offering owned by a teacher: one weekly slot in one block."""

    class_id: str
    teacher_id: str
    class_name: str
    course_id: str
    year_level: str
    block: Block
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    created_at: Optional[datetime] = None
    course_name: str = ""
    teacher_name: str = ""

    @property
    def duration_minutes(self) -> int:
        return minutes_between(self.start_time, self.end_time)

    @property
    def schedule_label(self) -> str:
        return f"{self.day_of_week.value} {format_time_12h(self.start_time)} - {format_time_12h(self.end_time)}"


@dataclass(frozen=True)
class EnrolledStudent:
    student_id: str
    first_name: str
    last_name: str
    email: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class ClassOffering:
    """A class as seen from the enrollment page of one student."""

    school_class: SchoolClass
    enrolled: bool
    can_enroll: bool
