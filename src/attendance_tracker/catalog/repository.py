from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Course, Department


class CatalogRepository(Protocol):
    def list_departments(self) -> Sequence[Department]:
        raise NotImplementedError

    def get_department(self, department_id: str) -> Optional[Department]:
        raise NotImplementedError

    def list_courses(self, department_id: str) -> Sequence[Course]:
        raise NotImplementedError

    def get_course(self, course_id: str) -> Optional[Course]:
        raise NotImplementedError
