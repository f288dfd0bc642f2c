from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Course, Department
from .repository import CatalogRepository


class MySQLCatalogRepository(CatalogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_departments(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name FROM departments ORDER BY name")
            return [Department(department_id=r["id"], name=r["name"]) for r in fetchall(cur)]

    def get_department(self, department_id: str) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name FROM departments WHERE id=%s", (department_id,))
            r = fetchone(cur)
            return Department(department_id=r["id"], name=r["name"]) if r else None

    def list_courses(self, department_id: str) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, department_id, name FROM courses WHERE department_id=%s ORDER BY name",
                (department_id,),
            )
            return [
                Course(course_id=r["id"], department_id=r["department_id"], name=r["name"])
                for r in fetchall(cur)
            ]

    def get_course(self, course_id: str) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, department_id, name FROM courses WHERE id=%s", (course_id,))
            r = fetchone(cur)
            if not r:
                return None
            return Course(course_id=r["id"], department_id=r["department_id"], name=r["name"])
