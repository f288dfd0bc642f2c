from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Student, StudentListing, Teacher
from .repository import StudentRepository, TeacherRepository


def _teacher(r: dict) -> Teacher:
    return Teacher(
        teacher_id=r["id"],
        first_name=r["first_name"],
        last_name=r["last_name"],
        email=r["email"],
        department_id=r.get("department_id"),
        created_at=r.get("created_at"),
    )


def _student(r: dict) -> Student:
    return Student(
        student_id=r["id"],
        first_name=r["first_name"],
        last_name=r["last_name"],
        email=r["email"],
        department_id=r.get("department_id"),
        course_id=r.get("course_id"),
        year_level=r["year_level"],
        created_at=r.get("created_at"),
    )


class MySQLTeacherRepository(TeacherRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, teacher_id: str) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, first_name, last_name, email, department_id, created_at
                FROM teachers
                WHERE id=%s
                """,
                (teacher_id,),
            )
            r = fetchone(cur)
            return _teacher(r) if r else None

    def create(
        self,
        *,
        teacher_id: str,
        first_name: str,
        last_name: str,
        email: str,
        department_id: Optional[str],
    ) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO teachers(id, first_name, last_name, email, department_id)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (teacher_id, first_name, last_name, email, department_id),
                )
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ValidationError("Email is already registered")
            raise

    def update_profile(
        self,
        *,
        teacher_id: str,
        first_name: str,
        last_name: str,
        email: str,
        department_id: Optional[str],
    ) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE teachers
                    SET first_name=%s, last_name=%s, email=%s, department_id=%s
                    WHERE id=%s
                    """,
                    (first_name, last_name, email, department_id, teacher_id),
                )
                return cur.rowcount > 0
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ValidationError("Email is already registered")
            raise


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, first_name, last_name, email, department_id, course_id, year_level, created_at
                FROM students
                WHERE id=%s
                """,
                (student_id,),
            )
            r = fetchone(cur)
            return _student(r) if r else None

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO students(id, first_name, last_name, email, department_id, course_id, year_level)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (student_id, first_name, last_name, email, department_id, course_id, year_level),
                )
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ValidationError("Email is already registered")
            raise

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET first_name=%s, last_name=%s, department_id=%s, course_id=%s, year_level=%s
                WHERE id=%s
                """,
                (first_name, last_name, department_id, course_id, year_level, student_id),
            )
            return cur.rowcount > 0

    def list_with_department(self, *, department: Optional[str] = None) -> Sequence[StudentListing]:
        clauses: list[str] = []
        params: list[object] = []
        if department:
            clauses.append("d.name=%s")
            params.append(department)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT s.id, s.first_name, s.last_name, s.email, s.year_level,
                       d.name AS department_name, co.name AS course_name
                FROM students s
                LEFT JOIN departments d ON d.id = s.department_id
                LEFT JOIN courses co ON co.id = s.course_id
                {where}
                ORDER BY s.last_name ASC, s.first_name ASC
                """,
                tuple(params),
            )
            return [
                StudentListing(
                    student_id=r["id"],
                    first_name=r["first_name"],
                    last_name=r["last_name"],
                    email=r["email"],
                    department=r.get("department_name"),
                    course=r.get("course_name"),
                    year_level=r["year_level"],
                )
                for r in fetchall(cur)
            ]
