from __future__ import annotations

from datetime import time
from typing import Optional, Sequence

import mysql.connector

from ..core.constants import ENROLLMENT_BLOCK_MESSAGE, TRIGGER_BLOCK_FRAGMENT
from ..core.enums import Block, DayOfWeek
from ..core.exceptions import EnrollmentBlockError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    in_clause,
    is_duplicate_key,
    new_id,
    normalize_mysql_time,
    signal_message,
)
from .model import EnrolledStudent, SchoolClass
from .repository import ClassRepository, EnrollmentRepository

_CLASS_COLUMNS = """
    c.id, c.teacher_id, c.class_name, c.course_id, c.year_level, c.block, c.day_of_week,
    c.start_time, c.end_time, c.created_at,
    co.name AS course_name,
    CONCAT(t.first_name, ' ', t.last_name) AS teacher_name
"""

_CLASS_JOINS = """
    FROM classes c
    LEFT JOIN courses co ON co.id = c.course_id
    LEFT JOIN teachers t ON t.id = c.teacher_id
"""

_DAY_ORDER = "FIELD(c.day_of_week, 'Monday','Tuesday','Wednesday','Thursday','Friday','Saturday','Sunday')"


def _school_class(r: dict) -> SchoolClass:
    return SchoolClass(
        class_id=r["id"],
        teacher_id=r["teacher_id"],
        class_name=r["class_name"],
        course_id=r["course_id"],
        year_level=r["year_level"],
        block=Block(r["block"]),
        day_of_week=DayOfWeek(r["day_of_week"]),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        created_at=r.get("created_at"),
        course_name=r.get("course_name") or "",
        teacher_name=r.get("teacher_name") or "",
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: str) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_CLASS_COLUMNS} {_CLASS_JOINS} WHERE c.id=%s", (class_id,))
            r = fetchone(cur)
            return _school_class(r) if r else None

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
        class_id = new_id()
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO classes(id, teacher_id, class_name, course_id, year_level, block,
                                        day_of_week, start_time, end_time)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        class_id,
                        teacher_id,
                        class_name,
                        course_id,
                        year_level,
                        block.value,
                        day_of_week.value,
                        start_time,
                        end_time,
                    ),
                )
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ValidationError("A class with the same course, name, year level, block, day and start time already exists")
            raise
        return class_id

    def list_for_teacher(self, teacher_id: str) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_CLASS_COLUMNS} {_CLASS_JOINS} WHERE c.teacher_id=%s ORDER BY c.created_at DESC",
                (teacher_id,),
            )
            return [_school_class(r) for r in fetchall(cur)]

    def list_for_course_year(self, *, course_id: str, year_level: str) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_CLASS_COLUMNS} {_CLASS_JOINS}
                WHERE c.course_id=%s AND c.year_level=%s
                ORDER BY c.block ASC, {_DAY_ORDER} ASC, c.start_time ASC
                """,
                (course_id, year_level),
            )
            return [_school_class(r) for r in fetchall(cur)]

    def list_by_ids(self, class_ids: Sequence[str]) -> Sequence[SchoolClass]:
        if not class_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_CLASS_COLUMNS} {_CLASS_JOINS}
                WHERE c.id IN ({in_clause(class_ids)})
                ORDER BY c.block ASC, {_DAY_ORDER} ASC, c.start_time ASC
                """,
                tuple(class_ids),
            )
            return [_school_class(r) for r in fetchall(cur)]


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def enroll(self, *, student_id: str, class_id: str) -> str:
        enrollment_id = new_id()
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO class_enrollment(id, class_id, student_id) VALUES(%s,%s,%s)",
                    (enrollment_id, class_id, student_id),
                )
        except mysql.connector.Error as e:
            if is_duplicate_key(e):
                raise ValidationError("You are already enrolled in this class.")
            message = signal_message(e)
            if message and TRIGGER_BLOCK_FRAGMENT in message:
                raise EnrollmentBlockError(ENROLLMENT_BLOCK_MESSAGE) from e
            raise
        return enrollment_id

    def list_class_ids(self, student_id: str) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT class_id FROM class_enrollment WHERE student_id=%s ORDER BY enrolled_at ASC",
                (student_id,),
            )
            return [r["class_id"] for r in fetchall(cur)]

    def list_students(self, class_id: str) -> Sequence[EnrolledStudent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.id, s.first_name, s.last_name, s.email
                FROM class_enrollment ce
                JOIN students s ON s.id = ce.student_id
                WHERE ce.class_id=%s
                ORDER BY s.last_name ASC, s.first_name ASC
                """,
                (class_id,),
            )
            return [
                EnrolledStudent(
                    student_id=r["id"],
                    first_name=r["first_name"],
                    last_name=r["last_name"],
                    email=r["email"],
                )
                for r in fetchall(cur)
            ]
