from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student, StudentListing, Teacher


class TeacherRepository(Protocol):
    def get_by_id(self, teacher_id: str) -> Optional[Teacher]:
        raise NotImplementedError

    def create(
        self,
        *,
        teacher_id: str,
        first_name: str,
        last_name: str,
        email: str,
        department_id: Optional[str],
    ) -> None:
        raise NotImplementedError

    def update_profile(
        self,
        *,
        teacher_id: str,
        first_name: str,
        last_name: str,
        email: str,
        department_id: Optional[str],
    ) -> bool:
        raise NotImplementedError


class StudentRepository(Protocol):
    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def create(
        self,
        *,
        student_id: str,
        first_name: str,
        last_name: str,
        email: str,
        department_id: str,
        course_id: str,
        year_level: str,
    ) -> None:
        raise NotImplementedError

    def update_profile(
        self,
        *,
        student_id: str,
        first_name: str,
        last_name: str,
        department_id: str,
        course_id: str,
        year_level: str,
    ) -> bool:
        raise NotImplementedError

    def list_with_department(self, *, department: Optional[str] = None) -> Sequence[StudentListing]:
        """Students joined with department/course names, ordered by last name."""

        raise NotImplementedError
