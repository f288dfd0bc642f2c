from __future__ import annotations

from datetime import time
from typing import Optional, Protocol, Sequence

from ..core.enums import Block, DayOfWeek
from .model import EnrolledStudent, SchoolClass


class ClassRepository(Protocol):
    def get_by_id(self, class_id: str) -> Optional[SchoolClass]:
        raise NotImplementedError

    def create(
        self,
        *,
        teacher_id: str,
        class_name: str,
        course_id: str,
        year_level: str,
        block: Block,
        day_of_week: DayOfWeek,
        start_time: time,
        end_time: time,
    ) -> str:
        """Insert a class and return its id."""

        raise NotImplementedError

    def list_for_teacher(self, teacher_id: str) -> Sequence[SchoolClass]:
        """Newest first, with course name."""

        raise NotImplementedError

    def list_for_course_year(self, *, course_id: str, year_level: str) -> Sequence[SchoolClass]:
        """Ordered by block, day, start time; with course and teacher names."""

        raise NotImplementedError

    def list_by_ids(self, class_ids: Sequence[str]) -> Sequence[SchoolClass]:
        raise NotImplementedError


class EnrollmentRepository(Protocol):
    def enroll(self, *, student_id: str, class_id: str) -> str:
        """Insert an enrollment; the database trigger enforces the block rule."""

        raise NotImplementedError

    def list_class_ids(self, student_id: str) -> Sequence[str]:
        raise NotImplementedError

    def list_students(self, class_id: str) -> Sequence[EnrolledStudent]:
        """Students enrolled in a class, ordered by last name."""

        raise NotImplementedError
