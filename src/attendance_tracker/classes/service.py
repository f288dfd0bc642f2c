from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..catalog.service import CatalogService
from ..common.datetime_utils import parse_hhmm
from ..core.constants import ENROLLMENT_BLOCK_MESSAGE
from ..core.enums import Block, DayOfWeek
from ..core.exceptions import AuthorizationError, EnrollmentBlockError, NotFoundError, ValidationError
from ..people.repository import StudentRepository, TeacherRepository
from .feed import ClassChangeFeed
from .model import ClassOffering, EnrolledStudent, SchoolClass
from .repository import ClassRepository, EnrollmentRepository

logger = logging.getLogger(__name__)

CLASS_CREATED = "class_created"


class ClassService:
    """Use case: teachers open classes, students enroll into them."""

    def __init__(
        self,
        classes: ClassRepository,
        enrollments: EnrollmentRepository,
        teachers: TeacherRepository,
        students: StudentRepository,
        catalog: CatalogService,
        feed: ClassChangeFeed,
    ):
        self._classes = classes
        self._enrollments = enrollments
        self._teachers = teachers
        self._students = students
        self._catalog = catalog
        self._feed = feed

    def get_owned_class(self, *, teacher_id: str, class_id: str) -> SchoolClass:
        school_class = self._classes.get_by_id(class_id)
        if not school_class:
            raise NotFoundError("Class not found")
        if school_class.teacher_id != teacher_id:
            raise AuthorizationError("You do not have permission to do this")
        return school_class

    def create_class(
        self,
        *,
        teacher_id: str,
        class_name: str,
        course_id: str,
        year_level: str,
        block: str,
        day_of_week: str,
        start_time: str,
        end_time: str,
    ) -> str:
        values = [class_name, course_id, year_level, block, day_of_week, start_time, end_time]
        if any(not (v or "").strip() for v in values):
            raise ValidationError("All fields are required.")

        teacher = self._teachers.get_by_id(teacher_id)
        if not teacher:
            raise AuthorizationError("Only teachers can create classes")

        try:
            block_value = Block(block.strip().upper())
        except ValueError:
            raise ValidationError("Block must be one of A, B, C or D")
        try:
            day_value = DayOfWeek(day_of_week.strip().capitalize())
        except ValueError:
            raise ValidationError("Day of week is not valid")

        start = parse_hhmm(start_time, "Start time")
        end = parse_hhmm(end_time, "End time")
        if end <= start:
            raise ValidationError("End time must be after start time")

        if teacher.department_id:
            self._catalog.require_course_in_department(course_id=course_id, department_id=teacher.department_id)

        class_id = self._classes.create(
            teacher_id=teacher_id,
            class_name=class_name.strip(),
            course_id=course_id,
            year_level=year_level.strip(),
            block=block_value,
            day_of_week=day_value,
            start_time=start,
            end_time=end,
        )
        self._feed.publish(event=CLASS_CREATED, class_id=class_id, teacher_id=teacher_id)
        logger.info("class %s created by teacher %s", class_id, teacher_id)
        return class_id

    def list_for_teacher(self, teacher_id: str) -> Sequence[SchoolClass]:
        return self._classes.list_for_teacher(teacher_id)

    def list_available_for_student(self, student_id: str) -> list[ClassOffering]:
        student = self._students.get_by_id(student_id)
        if not student or not student.course_id:
            return []

        enrolled_ids = set(self._enrollments.list_class_ids(student_id))
        enrolled_blocks = {c.block for c in self._classes.list_by_ids(list(enrolled_ids))}

        offerings = []
        for school_class in self._classes.list_for_course_year(course_id=student.course_id, year_level=student.year_level):
            enrolled = school_class.class_id in enrolled_ids
            can_enroll = not enrolled and (not enrolled_blocks or school_class.block in enrolled_blocks)
            offerings.append(ClassOffering(school_class=school_class, enrolled=enrolled, can_enroll=can_enroll))
        return offerings

    def enroll(self, *, student_id: str, class_id: str) -> str:
        student = self._students.get_by_id(student_id)
        if not student:
            raise AuthorizationError("Only students can enroll in classes")

        school_class = self._classes.get_by_id(class_id)
        if not school_class:
            raise NotFoundError("Class not found")
        if school_class.course_id != student.course_id or school_class.year_level != student.year_level:
            raise ValidationError("This class is not offered for your course and year level.")

        enrolled_ids = list(self._enrollments.list_class_ids(student_id))
        if class_id in enrolled_ids:
            raise ValidationError("You are already enrolled in this class.")

        existing_blocks = {c.block for c in self._classes.list_by_ids(enrolled_ids)}
        if existing_blocks and school_class.block not in existing_blocks:
            raise EnrollmentBlockError(ENROLLMENT_BLOCK_MESSAGE)

        enrollment_id = self._enrollments.enroll(student_id=student_id, class_id=class_id)
        logger.info("student %s enrolled in class %s", student_id, class_id)
        return enrollment_id

    def list_enrolled(self, student_id: str) -> Sequence[SchoolClass]:
        return self._classes.list_by_ids(list(self._enrollments.list_class_ids(student_id)))

    def list_students(self, *, teacher_id: str, class_id: str) -> Sequence[EnrolledStudent]:
        self.get_owned_class(teacher_id=teacher_id, class_id=class_id)
        return self._enrollments.list_students(class_id)

    def changes_after(self, seq: int, *, teacher_id: Optional[str] = None):
        return self._feed.changes_after(seq, teacher_id=teacher_id)

    @property
    def last_change_seq(self) -> int:
        return self._feed.last_seq
