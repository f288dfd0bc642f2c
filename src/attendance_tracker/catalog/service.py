from __future__ import annotations

from typing import Optional, Sequence

from ..core.exceptions import ValidationError
from .model import Course, Department
from .repository import CatalogRepository


class CatalogService:
    """Lookups backing the department / course selects."""

    def __init__(self, catalog: CatalogRepository):
        self._catalog = catalog

    def list_departments(self) -> Sequence[Department]:
        return self._catalog.list_departments()

    def list_courses(self, department_id: Optional[str]) -> Sequence[Course]:
        if not department_id:
            return []
        return self._catalog.list_courses(department_id)

    def require_course_in_department(self, *, course_id: str, department_id: str) -> Course:
        course = self._catalog.get_course(course_id) if course_id else None
        if not course:
            raise ValidationError("Course does not exist")
        if course.department_id != department_id:
            raise ValidationError("Course does not belong to the selected department")
        return course

    def require_department(self, department_id: str) -> Department:
        department = self._catalog.get_department(department_id) if department_id else None
        if not department:
            raise ValidationError("Department does not exist")
        return department
