from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..accounts.service import AuthService
from ..catalog.service import CatalogService
from ..classes.repository import ClassRepository
from ..common.validators import (
    require_email,
    require_matching_passwords,
    require_non_empty,
    require_strong_password,
)
from ..core.exceptions import NotFoundError, ValidationError
from .model import Student, Teacher
from .repository import StudentRepository, TeacherRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleStats:
    total_classes: int
    teaching_days: int
    weekly_hours: float


class ProfileService:
    def __init__(
        self,
        teachers: TeacherRepository,
        students: StudentRepository,
        classes: ClassRepository,
        catalog: CatalogService,
        auth: AuthService,
    ):
        self._teachers = teachers
        self._students = students
        self._classes = classes
        self._catalog = catalog
        self._auth = auth

    def get_student(self, student_id: str) -> Student:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student profile not found")
        return student

    def get_teacher(self, teacher_id: str) -> Teacher:
        teacher = self._teachers.get_by_id(teacher_id)
        if not teacher:
            raise NotFoundError("Teacher profile not found")
        return teacher

    def update_student_profile(
        self,
        *,
        student_id: str,
        first_name: str,
        last_name: str,
        department_id: str,
        course_id: str,
        year_level: str,
    ) -> None:
        self.get_student(student_id)
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        department_id = require_non_empty(department_id, "Department")
        course_id = require_non_empty(course_id, "Course")
        year_level = require_non_empty(year_level, "Year level")
        self._catalog.require_course_in_department(course_id=course_id, department_id=department_id)

        if not self._students.update_profile(
            student_id=student_id,
            first_name=first_name,
            last_name=last_name,
            department_id=department_id,
            course_id=course_id,
            year_level=year_level,
        ):
            raise ValidationError("Profile update failed")

    def update_teacher_profile(
        self,
        *,
        teacher_id: str,
        first_name: str,
        last_name: str,
        email: str,
        department_id: Optional[str],
        new_password: str = "",
        confirm_password: str = "",
    ) -> None:
        self.get_teacher(teacher_id)
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        email = require_email(email)
        require_matching_passwords(new_password, confirm_password)
        if new_password:
            require_strong_password(new_password)

        department_id = department_id or None
        if department_id:
            self._catalog.require_department(department_id)

        changed = self._auth.update_credentials(
            account_id=teacher_id,
            email=email,
            new_password=new_password,
            confirm_password=confirm_password,
        )
        if not self._teachers.update_profile(
            teacher_id=teacher_id,
            first_name=first_name,
            last_name=last_name,
            email=email,
            department_id=department_id,
        ):
            raise ValidationError("Profile update failed")

        if changed:
            logger.info("teacher %s changed credentials: %s", teacher_id, ", ".join(changed))

    def teacher_schedule_stats(self, teacher_id: str) -> ScheduleStats:
        classes = self._classes.list_for_teacher(teacher_id)
        minutes = sum(c.duration_minutes for c in classes)
        return ScheduleStats(
            total_classes=len(classes),
            teaching_days=len({c.day_of_week for c in classes}),
            weekly_hours=round(minutes / 60, 1),
        )
